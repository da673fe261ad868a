"""Demo runner: allocate supervisors and seat partitions from the sample catalog.

Usage:
    python scripts/run_allocation_demo.py

Set `EXAM_CATALOG` to use another catalog file and `EXAM_CORE_LOG_LEVEL`
(e.g. INFO, DEBUG) to see the allocation logs.
"""

from __future__ import annotations

from pathlib import Path
import json
import logging
import os
import sys

# Ensure project root is on PYTHONPATH when running as a script
ROOT = Path(__file__).resolve().parents[1]
if str(ROOT) not in sys.path:
    sys.path.insert(0, str(ROOT))

from modules.catalog import default_catalog_path, load_catalog_from_json
from modules.planning import (
    allocation_shortfalls,
    build_planning_rows,
    group_partitions_by_room,
    upcoming_exams,
)
from modules.room_index import RoomCapacityIndex
from modules.seat_ranges import CapacityExceededError, SeatRangeCalculator
from modules.supervisor_allocation import allocate
from utils.planning_export import (
    allocation_summary_df,
    df_to_markdown,
    partitions_by_room_df,
    planning_df,
)


def main() -> None:
    logging.basicConfig(
        level=os.getenv("EXAM_CORE_LOG_LEVEL", "WARNING").upper(),
        format="%(levelname)s %(name)s: %(message)s",
    )

    catalog_path = default_catalog_path()
    catalog = load_catalog_from_json(catalog_path)
    index = RoomCapacityIndex(catalog.rooms)

    for exam in upcoming_exams(catalog.exams):
        assignment = allocate(exam.room_ids, index, catalog.supervisors)
        rows = build_planning_rows(exam, assignment, catalog.supervisors)

        print(f"\n=== {exam.exam_id} {exam.subject_name} ({exam.exam_date}) ===")
        print(df_to_markdown(planning_df(rows)))
        print(allocation_summary_df(assignment=assignment, index=index).to_string(index=False))

        short = allocation_shortfalls(assignment, index)
        if short:
            print("Missing supervisors: " + ", ".join(f"{rid}={n}" for rid, n in short.items()))

    with open(catalog_path, "r", encoding="utf-8") as f:
        raw_partitions = json.load(f).get("partitions", [])

    partitions = []
    for raw in raw_partitions:
        calc = SeatRangeCalculator(raw["start_id"], raw["end_id"], room=index.room(raw["room_id"]))
        try:
            partitions.append(calc.to_partition(group=raw.get("group", ""), room_id=raw["room_id"]))
        except CapacityExceededError as exc:
            print(f"Rejected partition {raw.get('group', '')}: {exc}")

    print("\n=== Seat partitions ===")
    df = partitions_by_room_df(group_partitions_by_room(partitions, index))
    print(df.to_string(index=False))


if __name__ == "__main__":
    main()
