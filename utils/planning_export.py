from __future__ import annotations

import io
import re
import zipfile
from dataclasses import asdict
from typing import Iterable, Mapping, Optional, Sequence

import pandas as pd


PLANNING_COLUMNS = [
    "exam_id",
    "subject_name",
    "exam_date",
    "start_time",
    "end_time",
    "room_id",
    "supervisor_id",
    "supervisor_name",
]


def planning_df(rows: Iterable) -> pd.DataFrame:
    """Supervision planning table, one line per (room, supervisor)."""

    records = [asdict(r) for r in rows]
    return pd.DataFrame(records, columns=PLANNING_COLUMNS)


def allocation_summary_df(
    *,
    assignment: Mapping[str, Sequence[int]],
    index,
) -> pd.DataFrame:
    """Per-room fill status of an allocation (room, quota, assigned, shortfall)."""

    rows = []
    for rid, assigned in assignment.items():
        quota = int(index.max_supervisors(rid))
        rows.append(
            {
                "room_id": rid,
                "max_supervisors": quota,
                "assigned": len(assigned),
                "shortfall": max(0, quota - len(assigned)),
                "supervisor_ids": ", ".join(str(s) for s in assigned),
            }
        )
    return pd.DataFrame(rows, columns=["room_id", "max_supervisors", "assigned", "shortfall", "supervisor_ids"])


def partitions_by_room_df(grouped: Mapping) -> pd.DataFrame:
    """Seat partitions grouped by room, with running totals against capacity.

    `grouped` is the output of `modules.planning.group_partitions_by_room`.
    """

    rows = []
    for rid, rp in grouped.items():
        for p in rp.partitions:
            rows.append(
                {
                    "room_id": rid,
                    "group": p.group,
                    "start_id": p.start_id,
                    "end_id": p.end_id,
                    "headcount": int(p.headcount),
                    "room_total": int(rp.total_headcount),
                    "max_capacity": int(rp.max_capacity),
                    "over_capacity": bool(rp.exceeds_capacity),
                }
            )
    return pd.DataFrame(
        rows,
        columns=["room_id", "group", "start_id", "end_id", "headcount", "room_total", "max_capacity", "over_capacity"],
    )


_SHEET_FORBIDDEN_RE = re.compile(r"[:\\/?*\[\]]")
_SHEET_NAME_MAX = 31


def room_sheet_names(room_ids: Iterable[str]) -> dict:
    """Map each room id to a distinct Excel sheet name ``Room-<id>``.

    Room ids are free text in the catalog, so characters Excel refuses are
    replaced and long ids are cut to the 31-char limit. Ids that collide after
    cleaning get a ``~2``, ``~3``... tail.
    """

    names = {}
    taken = set()
    for rid in room_ids:
        base = _SHEET_FORBIDDEN_RE.sub("-", f"Room-{rid}".strip())[:_SHEET_NAME_MAX]
        name, n = base, 1
        while name.lower() in taken:
            n += 1
            tail = f"~{n}"
            name = base[: _SHEET_NAME_MAX - len(tail)] + tail
        taken.add(name.lower())
        names[rid] = name
    return names


def planning_workbook_bytes(
    *,
    planning: pd.DataFrame,
    summary: Optional[pd.DataFrame] = None,
    partitions: Optional[pd.DataFrame] = None,
) -> bytes:
    """Excel workbook with the planning, one sheet per room, and optional reports."""

    # Pandas uses openpyxl to write .xlsx by default.
    out = io.BytesIO()

    with pd.ExcelWriter(out, engine="openpyxl") as writer:
        planning.to_excel(writer, sheet_name="Planning", index=False)
        if summary is not None:
            summary.to_excel(writer, sheet_name="Allocation Summary", index=False)
        if partitions is not None:
            partitions.to_excel(writer, sheet_name="Seat Partitions", index=False)

        if not planning.empty:
            sheet_for = room_sheet_names(sorted(planning["room_id"].astype(str).unique()))
            for rid, sheet in sheet_for.items():
                planning[planning["room_id"].astype(str) == rid].to_excel(writer, sheet_name=sheet, index=False)

    return out.getvalue()


def planning_zip_bytes(
    *,
    planning: pd.DataFrame,
    summary: Optional[pd.DataFrame] = None,
    partitions: Optional[pd.DataFrame] = None,
) -> bytes:
    """ZIP bundle: the workbook plus CSV copies of every table."""

    wb = planning_workbook_bytes(planning=planning, summary=summary, partitions=partitions)

    buf = io.BytesIO()
    with zipfile.ZipFile(buf, mode="w", compression=zipfile.ZIP_DEFLATED) as z:
        z.writestr("supervision_planning.xlsx", wb)
        z.writestr("tables/planning.csv", planning.to_csv(index=False).encode("utf-8"))
        if summary is not None:
            z.writestr("tables/allocation_summary.csv", summary.to_csv(index=False).encode("utf-8"))
        if partitions is not None:
            z.writestr("tables/seat_partitions.csv", partitions.to_csv(index=False).encode("utf-8"))

    return buf.getvalue()


def _md_cell(value) -> str:
    if value is None or (isinstance(value, float) and pd.isna(value)):
        return ""
    return " ".join(str(value).split()).replace("|", "\\|")


def _md_line(cells: Iterable) -> str:
    return "| " + " | ".join(_md_cell(c) for c in cells) + " |"


def df_to_markdown(df: pd.DataFrame) -> str:
    """Planning table as GitHub-flavored Markdown, for the console demo.

    Missing values render as empty cells and pipes inside cells are escaped.
    """

    lines = [_md_line(df.columns), _md_line("---" for _ in df.columns)]
    lines.extend(_md_line(row) for row in df.itertuples(index=False, name=None))
    return "\n".join(lines) + "\n"
