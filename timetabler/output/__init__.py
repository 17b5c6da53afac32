"""Schedule output: resolution, formatting and metrics."""

from .schema import (
    TeacherOutput,
    CourseOutput,
    ClassroomOutput,
    SectionOutput,
    SlotOutput,
    DayOutput,
    ResolvedSchedule,
    AllocationOutput,
    GenerationOutput,
)
from .resolver import ScheduleResolver, create_generation_output
from .formatters import (
    format_week_grid,
    format_slot_cell,
    format_csv,
    format_json,
    save_csv,
    save_json,
    CSV_COLUMNS,
    DAY_ABBREV,
)
from .metrics import (
    TeacherLoad,
    ClassroomUsage,
    UnmetCourse,
    ScheduleMetrics,
    calculate_metrics,
)

__all__ = [
    # Schema models
    "TeacherOutput",
    "CourseOutput",
    "ClassroomOutput",
    "SectionOutput",
    "SlotOutput",
    "DayOutput",
    "ResolvedSchedule",
    "AllocationOutput",
    "GenerationOutput",
    # Resolver
    "ScheduleResolver",
    "create_generation_output",
    # Formatters
    "format_week_grid",
    "format_slot_cell",
    "format_csv",
    "format_json",
    "save_csv",
    "save_json",
    "CSV_COLUMNS",
    "DAY_ABBREV",
    # Metrics
    "TeacherLoad",
    "ClassroomUsage",
    "UnmetCourse",
    "ScheduleMetrics",
    "calculate_metrics",
]
