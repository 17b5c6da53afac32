"""Data models, snapshot loading and sample generation."""

from .models import (
    Day,
    WeeklyAvailability,
    Teacher,
    Course,
    Classroom,
    Section,
    Snapshot,
    PeriodSlot,
    DaySchedule,
    WeeklySchedule,
    NUM_DAYS,
    PERIODS_PER_DAY,
    LAB_BLOCK_SIZE,
)
from .loader import (
    SnapshotLoader,
    JsonSnapshotLoader,
    load_snapshot,
    parse_snapshot,
    snapshot_to_dict,
)
from .generator import (
    GeneratorConfig,
    generate_sample_snapshot,
    generate_small_snapshot,
    generate_medium_snapshot,
    generate_large_snapshot,
    save_generated_snapshot,
    get_generation_stats,
)

__all__ = [
    # Models
    "Day",
    "WeeklyAvailability",
    "Teacher",
    "Course",
    "Classroom",
    "Section",
    "Snapshot",
    "PeriodSlot",
    "DaySchedule",
    "WeeklySchedule",
    "NUM_DAYS",
    "PERIODS_PER_DAY",
    "LAB_BLOCK_SIZE",
    # Loader
    "SnapshotLoader",
    "JsonSnapshotLoader",
    "load_snapshot",
    "parse_snapshot",
    "snapshot_to_dict",
    # Generator
    "GeneratorConfig",
    "generate_sample_snapshot",
    "generate_small_snapshot",
    "generate_medium_snapshot",
    "generate_large_snapshot",
    "save_generated_snapshot",
    "get_generation_stats",
]
