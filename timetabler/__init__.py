"""Section Timetabler - greedy first-fit weekly timetable generation."""

from .config import EngineConfig, DayOrder, WorkloadScope
from .engine import AllocationEngine, GenerationResult, CourseAllocation, generate_schedules
from .errors import (
    TimetablerError,
    InsufficientDataError,
    NotFoundError,
    PersistenceError,
    GenerationInProgressError,
)
from .service import TimetableService
from .store import ScheduleStore, InMemoryScheduleStore, JsonScheduleStore
from .cli import app as cli_app

__all__ = [
    # Engine
    "EngineConfig",
    "DayOrder",
    "WorkloadScope",
    "AllocationEngine",
    "GenerationResult",
    "CourseAllocation",
    "generate_schedules",
    # Service
    "TimetableService",
    "ScheduleStore",
    "InMemoryScheduleStore",
    "JsonScheduleStore",
    # Errors
    "TimetablerError",
    "InsufficientDataError",
    "NotFoundError",
    "PersistenceError",
    "GenerationInProgressError",
    # CLI
    "cli_app",
]
