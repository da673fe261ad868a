"""Catalog data models and loaders.

Rooms, supervisors and exams come from the external data store as flat
records. Two of their fields are comma-separated lists (a supervisor's
eligible rooms and an exam's rooms); they are parsed defensively here so the
allocation modules only ever see clean tuples.

The loaders mirror the record shapes used by the admin tool:

- room: ``room_id``, ``max_capacity``, ``max_supervisors`` (optional)
- supervisor: ``supervisor_id``, ``name``, ``eligible_rooms``
- exam: ``exam_id``, ``room_ids``, plus optional display fields
"""

from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path
from typing import Dict, Iterable, List, Mapping, Optional, Tuple, Union

import json
import os


DEFAULT_MAX_SUPERVISORS = 3
DEFAULT_CATALOG_FILENAME = "sample_catalog.json"


# ----------------------------
# Data models / input schema
# ----------------------------


@dataclass(frozen=True)
class Room:
    room_id: str
    max_capacity: int = 0  # seats; 0 means unknown
    max_supervisors: int = DEFAULT_MAX_SUPERVISORS


@dataclass(frozen=True)
class Supervisor:
    supervisor_id: int
    name: str
    eligible_rooms: Tuple[str, ...] = ()

    def is_eligible_for(self, room_id: str) -> bool:
        return room_id in self.eligible_rooms


@dataclass(frozen=True)
class Exam:
    exam_id: str
    room_ids: Tuple[str, ...]

    # Display metadata (used by planning rows and exam search)
    subject_name: str = ""
    exam_date: Optional[str] = None  # ISO date (YYYY-MM-DD)
    start_time: Optional[str] = None  # "YYYY-MM-DD HH:MM" or "HH:MM"
    end_time: Optional[str] = None
    session: Optional[str] = None


@dataclass(frozen=True)
class Catalog:
    rooms: Tuple[Room, ...]
    supervisors: Tuple[Supervisor, ...]
    exams: Tuple[Exam, ...] = ()

    def exam(self, exam_id: str) -> Optional[Exam]:
        return next((e for e in self.exams if e.exam_id == exam_id), None)


# -------------------------------------------------
# Delimited fields
# -------------------------------------------------


def parse_delimited(value: Union[str, Iterable[str], None], sep: str = ",") -> Tuple[str, ...]:
    """Split a delimited field into trimmed, non-empty segments.

    Accepts an already-split list as well, so JSON fixtures can use either
    ``"A1, A2"`` or ``["A1", "A2"]``.
    """

    if value is None:
        return ()
    if isinstance(value, str):
        parts: Iterable[str] = value.split(sep)
    else:
        parts = (str(v) for v in value)
    return tuple(p.strip() for p in parts if p and p.strip())


# -------------------------------------------------
# Loading
# -------------------------------------------------


def _require(raw: Mapping, key: str, kind: str):
    if key not in raw or raw[key] is None:
        raise ValueError(f"{kind} record is missing required field '{key}'")
    return raw[key]


def _as_int(value, field: str, kind: str) -> int:
    try:
        out = int(value)
    except (TypeError, ValueError) as exc:
        raise ValueError(f"{kind} field '{field}' must be an integer, got {value!r}") from exc
    if out < 0:
        raise ValueError(f"{kind} field '{field}' must be >= 0, got {out}")
    return out


def room_from_record(raw: Mapping) -> Room:
    room_id = str(_require(raw, "room_id", "room")).strip()
    if not room_id:
        raise ValueError("room record has an empty 'room_id'")

    max_sup = raw.get("max_supervisors")
    return Room(
        room_id=room_id,
        max_capacity=_as_int(raw.get("max_capacity") or 0, "max_capacity", "room"),
        max_supervisors=(
            DEFAULT_MAX_SUPERVISORS if max_sup is None else _as_int(max_sup, "max_supervisors", "room")
        ),
    )


def supervisor_from_record(raw: Mapping) -> Supervisor:
    return Supervisor(
        supervisor_id=_as_int(_require(raw, "supervisor_id", "supervisor"), "supervisor_id", "supervisor"),
        name=str(raw.get("name") or ""),
        eligible_rooms=parse_delimited(raw.get("eligible_rooms")),
    )


def exam_from_record(raw: Mapping) -> Exam:
    return Exam(
        exam_id=str(_require(raw, "exam_id", "exam")),
        room_ids=parse_delimited(raw.get("room_ids")),
        subject_name=str(raw.get("subject_name") or ""),
        exam_date=raw.get("exam_date"),
        start_time=raw.get("start_time"),
        end_time=raw.get("end_time"),
        session=raw.get("session"),
    )


def catalog_from_records(
    *,
    rooms: Iterable[Mapping],
    supervisors: Iterable[Mapping],
    exams: Iterable[Mapping] = (),
) -> Catalog:
    """Build a `Catalog` from raw records, keeping catalog order."""

    return Catalog(
        rooms=tuple(room_from_record(r) for r in rooms),
        supervisors=tuple(supervisor_from_record(s) for s in supervisors),
        exams=tuple(exam_from_record(e) for e in exams),
    )


def default_catalog_path() -> Path:
    """Resolve the catalog path.

    Uses `EXAM_CATALOG` env var if set, else the bundled sample under `data/`.
    """

    override = os.getenv("EXAM_CATALOG")
    if override:
        return Path(override).expanduser().resolve()

    return (Path(__file__).resolve().parents[1] / "data" / DEFAULT_CATALOG_FILENAME).resolve()


def load_catalog_from_json(path: Union[str, Path]) -> Catalog:
    """Load a `Catalog` from a JSON file."""

    with open(path, "r", encoding="utf-8") as f:
        raw = json.load(f)

    return catalog_from_records(
        rooms=raw.get("rooms", []),
        supervisors=raw.get("supervisors", []),
        exams=raw.get("exams", []),
    )


def supervisors_by_id(supervisors: Iterable[Supervisor]) -> Dict[int, Supervisor]:
    return {s.supervisor_id: s for s in supervisors}


def rooms_for_exam(exam: Exam, rooms: Iterable[Room]) -> List[Room]:
    """Catalog rooms referenced by the exam, in catalog order."""

    wanted = set(exam.room_ids)
    return [r for r in rooms if r.room_id in wanted]
