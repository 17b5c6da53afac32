"""Engine configuration."""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum


class DayOrder(str, Enum):
    """Order in which days are scanned when looking for a free slot."""
    FIXED = "fixed"  # Monday first, always
    BALANCED = "balanced"  # least-filled day of the section first


class WorkloadScope(str, Enum):
    """Lifetime of the per-teacher workload counters."""
    RUN = "run"  # cumulative across every section of the run
    SECTION = "section"  # reset at the start of each section


@dataclass
class EngineConfig:
    """Configurable behaviour of the allocation engine.

    The defaults reproduce plain first-fit: days scanned Monday to Friday,
    teacher workload counted institution-wide for the whole run.
    """
    day_order: DayOrder = DayOrder.FIXED
    workload_scope: WorkloadScope = WorkloadScope.RUN
