"""Fair supervisor-to-room allocation for a single exam.

Supervisors are handed out in rounds. Each round walks the exam's rooms from
the smallest supervisor quota to the largest and gives every room that still
has a free slot the first unused, eligible supervisor in catalog order. This
fills rooms evenly instead of draining the pool into the first big room.

Allocation is per exam: a supervisor is never booked twice for the same exam,
but nothing here balances workload across exams.

The result is plain data. Rooms that cannot be filled come back with shorter
lists; nothing in this module raises for well-typed input.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Dict, Iterable, List, Sequence, Set, Union

import logging

from .catalog import DEFAULT_MAX_SUPERVISORS, Room, Supervisor
from .room_index import RoomCapacityIndex


logger = logging.getLogger(__name__)


Assignment = Dict[str, List[int]]


@dataclass(frozen=True)
class AllocationSettings:
    """Tunables for `allocate`.

    `max_rounds` only bounds pathological catalogs. The normal stop is a round
    that assigns nobody.
    """

    max_rounds: int = 100
    default_max_supervisors: int = DEFAULT_MAX_SUPERVISORS


@dataclass(frozen=True)
class AllocationResult:
    assignment: Assignment
    rounds: int
    ceiling_hit: bool


def _unique(room_ids: Iterable[str]) -> List[str]:
    seen: Set[str] = set()
    out: List[str] = []
    for rid in room_ids:
        if rid in seen:
            continue
        seen.add(rid)
        out.append(rid)
    return out


def _as_index(rooms: Union[RoomCapacityIndex, Iterable[Room]], settings: AllocationSettings) -> RoomCapacityIndex:
    if isinstance(rooms, RoomCapacityIndex):
        return rooms
    return RoomCapacityIndex(rooms, default_max_supervisors=settings.default_max_supervisors)


def allocation_order(room_ids: Sequence[str], index: RoomCapacityIndex) -> List[str]:
    """Rooms in round order: smallest supervisor quota first, then room id."""

    return sorted(room_ids, key=lambda rid: (index.max_supervisors(rid), rid))


def _first_free_supervisor(room_id: str, supervisors: Sequence[Supervisor], used: Set[int]):
    for sv in supervisors:
        if sv.supervisor_id in used:
            continue
        if sv.is_eligible_for(room_id):
            return sv
    return None


def allocate_with_report(
    exam_room_ids: Sequence[str],
    rooms: Union[RoomCapacityIndex, Iterable[Room]],
    supervisors: Sequence[Supervisor],
    settings: AllocationSettings = AllocationSettings(),
) -> AllocationResult:
    """Distribute supervisors over an exam's rooms.

    Returns an `AllocationResult` with the room -> supervisor ids mapping (keys
    in the exam's room order), the number of rounds run, and whether the round
    ceiling stopped the loop.
    """

    index = _as_index(rooms, settings)
    room_ids = _unique(exam_room_ids)
    assignment: Assignment = {rid: [] for rid in room_ids}
    if not room_ids:
        return AllocationResult(assignment=assignment, rounds=0, ceiling_hit=False)

    order = allocation_order(room_ids, index)
    quota = {rid: max(0, index.max_supervisors(rid)) for rid in order}
    used: Set[int] = set()

    rounds = 0
    progressed = True
    while progressed and rounds < settings.max_rounds:
        progressed = False
        for rid in order:
            if len(assignment[rid]) >= quota[rid]:
                continue
            sv = _first_free_supervisor(rid, supervisors, used)
            if sv is None:
                continue
            assignment[rid].append(sv.supervisor_id)
            used.add(sv.supervisor_id)
            progressed = True
        rounds += 1

    ceiling_hit = progressed and rounds >= settings.max_rounds
    if ceiling_hit:
        logger.warning("Supervisor allocation stopped at the %d-round ceiling", settings.max_rounds)

    for rid in order:
        missing = quota[rid] - len(assignment[rid])
        if missing > 0:
            logger.warning(
                "Room %s has %d of %d supervisors (no eligible supervisor left)",
                rid,
                len(assignment[rid]),
                quota[rid],
            )

    return AllocationResult(assignment=assignment, rounds=rounds, ceiling_hit=ceiling_hit)


def allocate(
    exam_room_ids: Sequence[str],
    rooms: Union[RoomCapacityIndex, Iterable[Room]],
    supervisors: Sequence[Supervisor],
    settings: AllocationSettings = AllocationSettings(),
) -> Assignment:
    """Return the room -> ordered supervisor ids mapping for one exam."""

    return allocate_with_report(exam_room_ids, rooms, supervisors, settings).assignment
