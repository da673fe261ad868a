import sys
from pathlib import Path

# Ensure project root is on PYTHONPATH
ROOT = Path(__file__).resolve().parents[1]
if str(ROOT) not in sys.path:
    sys.path.insert(0, str(ROOT))

from utils.validators import (
    validate_known_rooms,
    validate_non_negative_int,
    validate_room_id,
    validate_seat_partition,
    validate_student_id,
    validate_unique,
)


def test_room_id_rules():
    assert validate_room_id("A101") == (True, "")
    assert validate_room_id("  ")[0] is False
    ok, msg = validate_room_id("A1,A2")
    assert not ok and "commas" in msg
    assert validate_room_id("Salle 3")[0] is False


def test_non_negative_int():
    assert validate_non_negative_int(0, "Supervisors") == (True, "")
    assert validate_non_negative_int(-1, "Supervisors")[0] is False
    assert validate_non_negative_int(None, "Supervisors") == (False, "Supervisors is required")
    assert validate_non_negative_int(501, "Capacity", max_value=500)[0] is False


def test_unique_and_known_rooms():
    assert validate_unique(["A", "B", " A "], "Rooms")[0] is False
    assert validate_known_rooms(["A", "Z"], ["A", "B"]) == (False, "Rooms not in the room catalog: Z")
    assert validate_known_rooms(["A"], ["A", "B"]) == (True, "")


def test_student_id_needs_a_number():
    assert validate_student_id("1620 H-F", "First student") == (True, "")
    ok, msg = validate_student_id("H-F", "First student")
    assert not ok and "student number" in msg


def test_seat_partition_validation():
    assert validate_seat_partition(start_id="1 A", end_id="40 A", max_capacity=40) == (True, "")
    assert validate_seat_partition(start_id="1 A", end_id="40 A", max_capacity=None) == (True, "")

    ok, msg = validate_seat_partition(start_id="1 A", end_id="41 A", max_capacity=40)
    assert not ok and "41 students exceed the 40 seats" in msg

    ok, msg = validate_seat_partition(start_id="50 A", end_id="10 A", max_capacity=40)
    assert not ok and "after the first" in msg

    ok, msg = validate_seat_partition(start_id="ABC", end_id="10 A", max_capacity=40)
    assert not ok and msg.startswith("First student")


def test_student_id_with_oversized_number_is_rejected():
    ok, msg = validate_student_id("1" * 5000 + " H-F", "Last student")
    assert not ok and "student number" in msg
