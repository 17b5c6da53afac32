"""Greedy first-fit allocation engine."""

from .occupancy import OccupancyTable, AllocationState
from .allocator import (
    AllocationEngine,
    CourseAllocation,
    GenerationResult,
    Placement,
    generate_schedules,
)

__all__ = [
    "OccupancyTable",
    "AllocationState",
    "AllocationEngine",
    "CourseAllocation",
    "GenerationResult",
    "Placement",
    "generate_schedules",
]
