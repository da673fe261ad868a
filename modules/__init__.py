"""Exam-day resource allocation modules (supervisors per room, seat ranges)."""

from .catalog import (
	Catalog,
	Exam,
	Room,
	Supervisor,
	catalog_from_records,
	default_catalog_path,
	load_catalog_from_json,
	parse_delimited,
)

from .room_index import RoomCapacityIndex

from .supervisor_allocation import (
	AllocationResult,
	AllocationSettings,
	allocate,
	allocate_with_report,
)

from .seat_ranges import (
	CapacityExceededError,
	RecomputeDirection,
	SeatPartition,
	SeatRange,
	SeatRangeCalculator,
	exceeds_capacity,
	recompute_from_count,
	recompute_from_range,
)

from .planning import (
	PlanningRow,
	allocation_shortfalls,
	build_planning_rows,
	group_partitions_by_room,
	search_exams,
	upcoming_exams,
)

__all__ = [
	"Catalog",
	"Exam",
	"Room",
	"Supervisor",
	"catalog_from_records",
	"default_catalog_path",
	"load_catalog_from_json",
	"parse_delimited",
	"RoomCapacityIndex",
	"AllocationResult",
	"AllocationSettings",
	"allocate",
	"allocate_with_report",
	"CapacityExceededError",
	"RecomputeDirection",
	"SeatPartition",
	"SeatRange",
	"SeatRangeCalculator",
	"exceeds_capacity",
	"recompute_from_count",
	"recompute_from_range",
	"PlanningRow",
	"allocation_shortfalls",
	"build_planning_rows",
	"group_partitions_by_room",
	"search_exams",
	"upcoming_exams",
]
