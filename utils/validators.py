"""Validation helpers for room, supervisor and seat partition forms.

Every helper returns ``(ok, message)`` so a form can show the message next to
the field instead of catching exceptions.
"""

from __future__ import annotations

import re
from typing import Iterable, Optional, Tuple

from modules.seat_ranges import exceeds_capacity, parse_numeric, recompute_from_range


_ROOM_ID_RE = re.compile(r"^[A-Za-z0-9_.-]{1,32}$")


def require_non_empty(value: str, field: str) -> Tuple[bool, str]:
    if not value or not value.strip():
        return False, f"{field} cannot be empty"
    return True, ""


def validate_room_id(value: str, field: str = "Room ID") -> Tuple[bool, str]:
    ok, msg = require_non_empty(value, field)
    if not ok:
        return ok, msg
    if "," in value:
        return False, f"{field} cannot contain commas (used as a list separator)"
    if not _ROOM_ID_RE.match(value.strip()):
        return False, f"{field} must be 1-32 chars (letters/numbers/_/-/.)"
    return True, ""


def validate_non_negative_int(value: int, field: str, max_value: int | None = None) -> Tuple[bool, str]:
    if value is None:
        return False, f"{field} is required"
    if int(value) < 0:
        return False, f"{field} must be >= 0"
    if max_value is not None and int(value) > max_value:
        return False, f"{field} must be <= {max_value}"
    return True, ""


def validate_unique(values: Iterable[str], field: str) -> Tuple[bool, str]:
    vals = [v.strip() for v in values if v and v.strip()]
    if len(vals) != len(set(vals)):
        return False, f"{field} contains duplicates"
    return True, ""


def validate_known_rooms(room_ids: Iterable[str], known: Iterable[str], field: str = "Rooms") -> Tuple[bool, str]:
    known_set = set(known)
    missing = sorted({r for r in room_ids if r not in known_set})
    if missing:
        return False, f"{field} not in the room catalog: {', '.join(missing)}"
    return True, ""


def validate_student_id(value: str, field: str) -> Tuple[bool, str]:
    ok, msg = require_non_empty(value, field)
    if not ok:
        return ok, msg
    if parse_numeric(value) <= 0:
        return False, f"{field} must contain a student number (e.g. 1620 H-F)"
    return True, ""


def validate_seat_partition(
    *,
    start_id: str,
    end_id: str,
    max_capacity: Optional[int],
) -> Tuple[bool, str]:
    """Check a partition before it is handed to the save boundary."""

    for value, field in [(start_id, "First student"), (end_id, "Last student")]:
        ok, msg = validate_student_id(value, field)
        if not ok:
            return ok, msg

    headcount = recompute_from_range(start_id, end_id)
    if headcount <= 0:
        return False, "Last student must come after the first student"
    if exceeds_capacity(headcount, max_capacity or 0):
        return False, f"{headcount} students exceed the {int(max_capacity or 0)} seats of the room"
    return True, ""
