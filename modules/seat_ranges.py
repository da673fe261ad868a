"""Seat-range partitioning: student id ranges <-> headcounts.

A student identifier looks like ``"1620 H-F"``: a number followed by a
suffix. The number is every digit of the identifier read as one integer and
the suffix is whatever is left once the digits are removed. An identifier
without digits parses to 0, which the range functions treat as "cannot
compute" and turn into a headcount of 0.

The pure functions (`recompute_from_range`, `recompute_from_count`,
`exceeds_capacity`) never raise. `SeatRangeCalculator` keeps start, end and
headcount consistent for one partition form and owns the single re-entrancy
guard between the two update directions. The only exception in this module
is `CapacityExceededError`, raised at the save boundary.
"""

from __future__ import annotations

from dataclasses import dataclass, replace
from enum import Enum
from typing import Callable, List, Optional, Tuple, Union

import logging
import re

from .catalog import Room


logger = logging.getLogger(__name__)


_NON_DIGITS_RE = re.compile(r"\D")
_DIGITS_RE = re.compile(r"\d")

# Longer digit runs are not student numbers; they parse as invalid (0).
MAX_STUDENT_NUMBER_DIGITS = 18


class CapacityExceededError(ValueError):
    """A partition holds more students than its room seats."""

    def __init__(self, headcount: int, max_capacity: int, room_id: Optional[str] = None):
        self.headcount = int(headcount)
        self.max_capacity = int(max_capacity)
        self.room_id = room_id
        where = f"room {room_id}" if room_id else "the room"
        super().__init__(f"{self.headcount} students exceed the {self.max_capacity} seats of {where}")


# -------------------------------------------------
# Identifier parsing
# -------------------------------------------------


def parse_numeric(student_id: Optional[str]) -> int:
    digits = _NON_DIGITS_RE.sub("", student_id or "")
    if not digits or len(digits) > MAX_STUDENT_NUMBER_DIGITS:
        return 0
    return int(digits)


def parse_suffix(student_id: Optional[str]) -> str:
    rest = _DIGITS_RE.sub("", student_id or "")
    return " ".join(rest.split())


def parse_student_id(student_id: Optional[str]) -> Tuple[int, str]:
    """Split an identifier into (numeric component, suffix)."""

    return parse_numeric(student_id), parse_suffix(student_id)


def format_student_id(number: int, suffix: str) -> str:
    return f"{number} {suffix}".strip()


# -------------------------------------------------
# Pure recomputation
# -------------------------------------------------


def recompute_from_range(start_id: Optional[str], end_id: Optional[str]) -> int:
    """Headcount of an inclusive id range, 0 when the range is not usable."""

    start = parse_numeric(start_id)
    end = parse_numeric(end_id)
    if start > 0 and end > 0 and end >= start:
        return end - start + 1
    return 0


def recompute_from_count(start_id: Optional[str], headcount: int) -> Optional[str]:
    """End id of a range of `headcount` students starting at `start_id`.

    Returns None when `headcount` is not positive or `start_id` has no
    usable number; the caller keeps its current end id in that case.
    """

    if headcount is None or int(headcount) <= 0:
        return None
    start, suffix = parse_student_id(start_id)
    if start <= 0:
        return None
    return format_student_id(start + int(headcount) - 1, suffix)


def _capacity_of(room: Union[Room, int, None]) -> int:
    if room is None:
        return 0
    if isinstance(room, Room):
        return int(room.max_capacity)
    return int(room)


def exceeds_capacity(headcount: int, room: Union[Room, int, None]) -> bool:
    """True when `headcount` does not fit the room.

    `room` may be a `Room`, a bare capacity, or None. An unknown capacity (0 or
    no room) never reports a violation.
    """

    capacity = _capacity_of(room)
    if capacity <= 0:
        return False
    return int(headcount) > capacity


def ensure_within_capacity(headcount: int, room: Union[Room, int, None]) -> None:
    if exceeds_capacity(headcount, room):
        room_id = room.room_id if isinstance(room, Room) else None
        raise CapacityExceededError(headcount, _capacity_of(room), room_id)


# -------------------------------------------------
# Partition state
# -------------------------------------------------


class RecomputeDirection(Enum):
    RANGE_TO_COUNT = "range_to_count"
    COUNT_TO_RANGE = "count_to_range"


@dataclass(frozen=True)
class SeatRange:
    start_id: str = ""
    end_id: str = ""
    headcount: int = 0
    max_capacity: int = 0

    @property
    def exceeds_capacity(self) -> bool:
        return exceeds_capacity(self.headcount, self.max_capacity)


@dataclass(frozen=True)
class SeatPartition:
    """A validated seat range ready for the external save boundary."""

    group: str
    room_id: str
    start_id: str
    end_id: str
    headcount: int


Listener = Callable[["SeatRangeCalculator", SeatRange], None]


class SeatRangeCalculator:
    """Keeps (start id, end id, headcount) consistent for one partition.

    Editing start or end recomputes the headcount; editing the headcount
    recomputes the end id. Listeners see every committed update and may edit
    the calculator back (a UI re-render does exactly that). While one
    direction is being recomputed, a nested request for the other direction
    is dropped, so the two derivations cannot chase each other.
    """

    def __init__(self, start_id: str = "", end_id: str = "", room: Union[Room, int, None] = None):
        self._state = SeatRange(
            start_id=start_id or "",
            end_id=end_id or "",
            headcount=recompute_from_range(start_id, end_id),
            max_capacity=_capacity_of(room),
        )
        self._room_id: Optional[str] = room.room_id if isinstance(room, Room) else None
        self._active: Optional[RecomputeDirection] = None
        self._listeners: List[Listener] = []

    @classmethod
    def from_partition(cls, partition: SeatPartition, room: Union[Room, int, None] = None) -> "SeatRangeCalculator":
        return cls(start_id=partition.start_id, end_id=partition.end_id, room=room)

    # -- state ---------------------------------------------------------

    @property
    def state(self) -> SeatRange:
        return self._state

    @property
    def start_id(self) -> str:
        return self._state.start_id

    @property
    def end_id(self) -> str:
        return self._state.end_id

    @property
    def headcount(self) -> int:
        return self._state.headcount

    @property
    def exceeds_capacity(self) -> bool:
        return self._state.exceeds_capacity

    @property
    def recomputing(self) -> Optional[RecomputeDirection]:
        return self._active

    def subscribe(self, listener: Listener) -> None:
        self._listeners.append(listener)

    # -- edits ---------------------------------------------------------

    def set_start(self, start_id: str) -> SeatRange:
        if self._suppressed(RecomputeDirection.RANGE_TO_COUNT):
            return self._state
        self._state = replace(self._state, start_id=start_id or "")
        return self.recompute(RecomputeDirection.RANGE_TO_COUNT)

    def set_end(self, end_id: str) -> SeatRange:
        if self._suppressed(RecomputeDirection.RANGE_TO_COUNT):
            return self._state
        self._state = replace(self._state, end_id=end_id or "")
        return self.recompute(RecomputeDirection.RANGE_TO_COUNT)

    def set_headcount(self, headcount: int) -> SeatRange:
        if headcount is None or int(headcount) <= 0:
            logger.debug("Ignoring non-positive headcount %r", headcount)
            return self._state
        if self._suppressed(RecomputeDirection.COUNT_TO_RANGE):
            return self._state
        if parse_numeric(self._state.start_id) <= 0:
            logger.debug("Ignoring headcount %r without a usable start id %r", headcount, self._state.start_id)
            return self._state
        self._state = replace(self._state, headcount=int(headcount))
        return self.recompute(RecomputeDirection.COUNT_TO_RANGE)

    def select_room(self, room: Union[Room, int, None]) -> SeatRange:
        """Change the capacity context; the range itself is untouched."""

        self._room_id = room.room_id if isinstance(room, Room) else None
        self._state = replace(self._state, max_capacity=_capacity_of(room))
        self._notify()
        return self._state

    def _suppressed(self, direction: RecomputeDirection) -> bool:
        # An edit feeding the other direction mid-pass is the feedback loop itself: drop it.
        if self._active is not None and self._active is not direction:
            logger.debug("Suppressed %s while %s is running", direction.value, self._active.value)
            return True
        return False

    def recompute(self, direction: RecomputeDirection) -> SeatRange:
        if self._suppressed(direction):
            return self._state

        outer = self._active is None
        self._active = direction
        try:
            if direction is RecomputeDirection.RANGE_TO_COUNT:
                count = recompute_from_range(self._state.start_id, self._state.end_id)
                self._state = replace(self._state, headcount=count)
            else:
                end_id = recompute_from_count(self._state.start_id, self._state.headcount)
                if end_id is not None:
                    self._state = replace(self._state, end_id=end_id)
                else:
                    count = recompute_from_range(self._state.start_id, self._state.end_id)
                    self._state = replace(self._state, headcount=count)
            if outer:
                self._notify()
        finally:
            if outer:
                self._active = None
        return self._state

    def _notify(self) -> None:
        snapshot = self._state
        for listener in list(self._listeners):
            listener(self, snapshot)

    # -- save boundary -------------------------------------------------

    def to_partition(self, group: str = "", room_id: Optional[str] = None) -> SeatPartition:
        """Freeze the current range for saving.

        Raises:
            CapacityExceededError: if the headcount does not fit the selected room.
        """

        rid = room_id if room_id is not None else (self._room_id or "")
        if self._state.exceeds_capacity:
            raise CapacityExceededError(self._state.headcount, self._state.max_capacity, rid or None)
        return SeatPartition(
            group=group,
            room_id=rid,
            start_id=self._state.start_id,
            end_id=self._state.end_id,
            headcount=self._state.headcount,
        )
