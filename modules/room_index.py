"""Room capacity lookup shared by supervisor allocation and seat ranges."""

from __future__ import annotations

from typing import Dict, Iterable, Iterator, Optional, Tuple

from .catalog import DEFAULT_MAX_SUPERVISORS, Room


class RoomCapacityIndex:
    """Read-only index over the room catalog.

    Unknown rooms fall back to `DEFAULT_MAX_SUPERVISORS` supervisor slots and a
    seating capacity of 0. A capacity of 0 means "unknown", not "unlimited".
    """

    def __init__(self, rooms: Iterable[Room], default_max_supervisors: int = DEFAULT_MAX_SUPERVISORS):
        self._rooms: Dict[str, Room] = {}
        for room in rooms:
            # First record wins on duplicate ids
            self._rooms.setdefault(room.room_id, room)
        self._default_max_supervisors = int(default_max_supervisors)

    def __contains__(self, room_id: object) -> bool:
        return room_id in self._rooms

    def __len__(self) -> int:
        return len(self._rooms)

    def __iter__(self) -> Iterator[Room]:
        return iter(self._rooms.values())

    def room(self, room_id: str) -> Optional[Room]:
        return self._rooms.get(room_id)

    def room_ids(self) -> Tuple[str, ...]:
        return tuple(self._rooms.keys())

    def max_supervisors(self, room_id: str) -> int:
        room = self._rooms.get(room_id)
        if room is None:
            return self._default_max_supervisors
        return int(room.max_supervisors)

    def max_capacity(self, room_id: str) -> int:
        room = self._rooms.get(room_id)
        if room is None:
            return 0
        return int(room.max_capacity)
