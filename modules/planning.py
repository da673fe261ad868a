"""Supervision planning helpers around the allocation core.

These functions prepare what the admin tool shows and saves once an exam's
supervisors have been allocated:

- choosing which exams can still be planned (today or later) and searching them
- flattening an allocation into one planning row per (room, supervisor)
- grouping saved seat partitions by room and checking room totals
- reporting rooms that could not get all their supervisors
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import date
from typing import Dict, Iterable, List, Mapping, Optional, Sequence, Tuple

from .catalog import Exam, Supervisor, supervisors_by_id
from .room_index import RoomCapacityIndex
from .seat_ranges import SeatPartition, exceeds_capacity


@dataclass(frozen=True)
class PlanningRow:
    exam_id: str
    subject_name: str
    exam_date: Optional[str]
    start_time: Optional[str]
    end_time: Optional[str]
    room_id: str
    supervisor_id: int
    supervisor_name: str


@dataclass(frozen=True)
class RoomPartitions:
    room_id: str
    partitions: Tuple[SeatPartition, ...]
    total_headcount: int
    max_capacity: int

    @property
    def exceeds_capacity(self) -> bool:
        return exceeds_capacity(self.total_headcount, self.max_capacity)


# -------------------------------------------------
# Exam selection
# -------------------------------------------------


def _parse_day(value: Optional[str]) -> Optional[date]:
    if not value:
        return None
    try:
        return date.fromisoformat(str(value)[:10])
    except ValueError:
        return None


def upcoming_exams(exams: Iterable[Exam], today: Optional[date] = None) -> List[Exam]:
    """Exams dated today or later. Undated or unparseable dates are dropped."""

    today = today or date.today()
    out: List[Exam] = []
    for exam in exams:
        day = _parse_day(exam.exam_date)
        if day is not None and day >= today:
            out.append(exam)
    return out


def search_exams(exams: Iterable[Exam], query: str = "", today: Optional[date] = None) -> List[Exam]:
    """Upcoming exams matching `query` on subject, date, session or rooms."""

    q = (query or "").strip().lower()
    candidates = upcoming_exams(exams, today=today)
    if not q:
        return candidates

    def haystacks(e: Exam) -> List[str]:
        return [e.subject_name or "", e.exam_date or "", e.session or "", ",".join(e.room_ids)]

    return [e for e in candidates if any(q in h.lower() for h in haystacks(e))]


# -------------------------------------------------
# Planning rows
# -------------------------------------------------


def normalize_datetime(value: Optional[str]) -> Optional[str]:
    """'2025-06-12 08:00' -> '2025-06-12T08:00' (other values unchanged)."""

    if value is None:
        return None
    return str(value).replace(" ", "T", 1)


def build_planning_rows(
    exam: Exam,
    assignment: Mapping[str, Sequence[int]],
    supervisors: Iterable[Supervisor],
) -> List[PlanningRow]:
    """One row per assigned supervisor, in the exam's room order."""

    by_id = supervisors_by_id(supervisors)
    room_order = list(exam.room_ids) + [rid for rid in assignment if rid not in exam.room_ids]

    rows: List[PlanningRow] = []
    for rid in room_order:
        for sid in assignment.get(rid, ()):
            sv = by_id.get(sid)
            rows.append(
                PlanningRow(
                    exam_id=exam.exam_id,
                    subject_name=exam.subject_name,
                    exam_date=exam.exam_date,
                    start_time=normalize_datetime(exam.start_time),
                    end_time=normalize_datetime(exam.end_time),
                    room_id=rid,
                    supervisor_id=sid,
                    supervisor_name=sv.name if sv else "",
                )
            )
    return rows


def filter_planning_by_date(rows: Iterable[PlanningRow], exam_date: Optional[str]) -> List[PlanningRow]:
    if not exam_date:
        return list(rows)
    return [r for r in rows if r.exam_date == exam_date]


# -------------------------------------------------
# Reports
# -------------------------------------------------


def allocation_shortfalls(assignment: Mapping[str, Sequence[int]], index: RoomCapacityIndex) -> Dict[str, int]:
    """Room -> number of supervisor slots left empty (rooms with none omitted)."""

    out: Dict[str, int] = {}
    for rid, assigned in assignment.items():
        missing = index.max_supervisors(rid) - len(assigned)
        if missing > 0:
            out[rid] = missing
    return out


def group_partitions_by_room(
    partitions: Iterable[SeatPartition],
    index: Optional[RoomCapacityIndex] = None,
) -> Dict[str, RoomPartitions]:
    """Group partitions by room, summing headcounts against the room capacity."""

    grouped: Dict[str, List[SeatPartition]] = {}
    for p in partitions:
        grouped.setdefault(p.room_id, []).append(p)

    out: Dict[str, RoomPartitions] = {}
    for rid in sorted(grouped):
        items = sorted(grouped[rid], key=lambda p: (p.group, p.start_id))
        out[rid] = RoomPartitions(
            room_id=rid,
            partitions=tuple(items),
            total_headcount=sum(int(p.headcount) for p in items),
            max_capacity=index.max_capacity(rid) if index is not None else 0,
        )
    return out
