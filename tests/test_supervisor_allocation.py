import random
import sys
from pathlib import Path

import pytest

# Ensure project root is on PYTHONPATH
ROOT = Path(__file__).resolve().parents[1]
if str(ROOT) not in sys.path:
    sys.path.insert(0, str(ROOT))

from modules.catalog import Room, Supervisor
from modules.room_index import RoomCapacityIndex
from modules.supervisor_allocation import (
    AllocationSettings,
    allocate,
    allocate_with_report,
    allocation_order,
)


def _sv(sid: int, rooms: str) -> Supervisor:
    return Supervisor(supervisor_id=sid, name=f"S{sid}", eligible_rooms=tuple(r.strip() for r in rooms.split(",") if r.strip()))


def test_no_rooms_gives_empty_mapping():
    rooms = [Room("A", 30, 2)]
    supervisors = [_sv(1, "A")]
    assert allocate([], rooms, supervisors) == {}


def test_smallest_room_is_served_in_the_first_round():
    rooms = [Room("A", 40, 2), Room("B", 40, 1)]
    supervisors = [_sv(1, "A,B"), _sv(2, "A,B"), _sv(3, "A,B")]

    result = allocate(["A", "B"], rooms, supervisors)

    assert len(result["A"]) == 2
    assert len(result["B"]) == 1
    # B comes first in round order, so it gets the first supervisor
    assert result["B"] == [1]
    assert result["A"] == [2, 3]
    assert sorted(result["A"] + result["B"]) == [1, 2, 3]


def test_ties_are_broken_by_room_id():
    index = RoomCapacityIndex([Room("Z", 10, 2), Room("M", 10, 2), Room("A", 10, 3)])
    assert allocation_order(["Z", "A", "M"], index) == ["M", "Z", "A"]


def test_rooms_are_filled_evenly_instead_of_greedily():
    rooms = [Room("A", 40, 3), Room("B", 40, 3)]
    supervisors = [_sv(i, "A,B") for i in range(1, 5)]

    result = allocate(["A", "B"], rooms, supervisors)

    assert result == {"A": [1, 3], "B": [2, 4]}


def test_only_eligible_supervisors_are_used():
    rooms = [Room("A", 40, 2), Room("B", 40, 2)]
    supervisors = [_sv(1, "B"), _sv(2, "C"), _sv(3, "A"), _sv(4, "")]

    result = allocate(["A", "B"], rooms, supervisors)

    assert result == {"A": [3], "B": [1]}


def test_zero_quota_room_is_never_filled():
    rooms = [Room("LAB", 20, 0), Room("A", 40, 1)]
    supervisors = [_sv(1, "LAB,A"), _sv(2, "LAB")]

    result = allocate(["LAB", "A"], rooms, supervisors)

    assert result["LAB"] == []
    assert result["A"] == [1]


def test_unknown_room_falls_back_to_three_supervisors():
    supervisors = [_sv(i, "GHOST") for i in range(1, 6)]

    result = allocate(["GHOST"], [], supervisors)

    assert result == {"GHOST": [1, 2, 3]}


def test_duplicate_exam_rooms_are_allocated_once():
    rooms = [Room("A", 40, 1)]
    supervisors = [_sv(1, "A"), _sv(2, "A")]

    assert allocate(["A", "A", "A"], rooms, supervisors) == {"A": [1]}


def test_partial_fill_is_not_an_error(caplog):
    rooms = [Room("A", 40, 3)]
    supervisors = [_sv(1, "A")]

    with caplog.at_level("WARNING", logger="modules.supervisor_allocation"):
        result = allocate_with_report(["A"], rooms, supervisors)

    assert result.assignment == {"A": [1]}
    assert result.ceiling_hit is False
    assert "Room A has 1 of 3 supervisors" in caplog.text


def test_stops_after_first_round_without_progress():
    rooms = [Room("A", 40, 2), Room("B", 40, 1)]
    supervisors = [_sv(1, "A,B"), _sv(2, "A,B"), _sv(3, "A,B")]

    result = allocate_with_report(["A", "B"], rooms, supervisors)

    # two productive rounds, then one empty round
    assert result.rounds == 3
    assert result.ceiling_hit is False


def test_round_ceiling_bounds_the_loop():
    rooms = [Room("BIG", 500, 50)]
    supervisors = [_sv(i, "BIG") for i in range(1, 51)]

    result = allocate_with_report(["BIG"], rooms, supervisors, AllocationSettings(max_rounds=10))

    assert result.rounds == 10
    assert result.ceiling_hit is True
    assert result.assignment["BIG"] == list(range(1, 11))


def test_accepts_prebuilt_index():
    index = RoomCapacityIndex([Room("A", 40, 1)])
    assert allocate(["A"], index, [_sv(7, "A")]) == {"A": [7]}


def _random_catalog(rng: random.Random):
    room_ids = [f"R{i}" for i in range(rng.randint(1, 8))]
    rooms = [Room(rid, rng.randint(0, 80), rng.randint(0, 5)) for rid in room_ids]
    pool = room_ids + ["OTHER"]
    supervisors = []
    for sid in rng.sample(range(1, 200), rng.randint(0, 25)):
        eligible = ",".join(rng.sample(pool, rng.randint(0, len(pool))))
        supervisors.append(_sv(sid, eligible))
    exam_rooms = rng.sample(room_ids, rng.randint(0, len(room_ids)))
    return exam_rooms, rooms, supervisors


@pytest.mark.parametrize("seed", range(40))
def test_allocation_invariants_hold_for_random_catalogs(seed):
    rng = random.Random(seed)
    exam_rooms, rooms, supervisors = _random_catalog(rng)
    by_room = {r.room_id: r for r in rooms}
    by_sv = {s.supervisor_id: s for s in supervisors}

    result = allocate(exam_rooms, rooms, supervisors)

    assert set(result) == set(exam_rooms)

    # quota respected
    for rid, assigned in result.items():
        assert len(assigned) <= by_room[rid].max_supervisors

    # no double booking
    flat = [sid for assigned in result.values() for sid in assigned]
    assert len(flat) == len(set(flat))

    # eligibility respected
    for rid, assigned in result.items():
        for sid in assigned:
            assert rid in by_sv[sid].eligible_rooms

    # maximal: an unfilled room has no free eligible supervisor left
    used = set(flat)
    for rid, assigned in result.items():
        if len(assigned) < by_room[rid].max_supervisors:
            assert not any(s.supervisor_id not in used and rid in s.eligible_rooms for s in supervisors)

    # deterministic
    assert allocate(exam_rooms, rooms, supervisors) == result
