"""
Summary metrics for generated schedules.

Greedy first-fit gives no optimality guarantee, so these metrics report how
much of the requested teaching was actually placed and how the load fell on
teachers and classrooms.
"""

from __future__ import annotations

from collections import defaultdict
from dataclasses import dataclass, field
from typing import TYPE_CHECKING, Any, Optional

from timetabler.data.models import NUM_DAYS, PERIODS_PER_DAY

if TYPE_CHECKING:
    from timetabler.data.models import Snapshot, WeeklySchedule
    from timetabler.engine.allocator import CourseAllocation


# =============================================================================
# Data Classes
# =============================================================================

@dataclass
class TeacherLoad:
    """Periods assigned to a teacher against their cap."""
    teacher_id: str
    name: str
    assigned: int
    max_workload: int

    @property
    def utilization(self) -> float:
        """Percentage of the cap in use."""
        if self.max_workload == 0:
            return 0.0
        return round(self.assigned / self.max_workload * 100, 1)


@dataclass
class ClassroomUsage:
    """Periods a classroom is occupied across all sections."""
    classroom_id: str
    room_number: str
    used: int

    @property
    def utilization(self) -> float:
        """Percentage of the week's periods in use."""
        return round(self.used / (NUM_DAYS * PERIODS_PER_DAY) * 100, 1)


@dataclass
class UnmetCourse:
    """A course that fell short of its target in a section."""
    section_id: str
    course_code: str
    requested: int
    allocated: int

    @property
    def shortfall(self) -> int:
        return self.requested - self.allocated


@dataclass
class ScheduleMetrics:
    """All metrics for one set of schedules."""
    total_slots: int
    filled_slots: int
    requested_periods: Optional[int] = None
    teacher_loads: list[TeacherLoad] = field(default_factory=list)
    classroom_usage: list[ClassroomUsage] = field(default_factory=list)
    unmet: list[UnmetCourse] = field(default_factory=list)

    @property
    def fill_rate(self) -> float:
        """Percentage of section slots that hold a course."""
        if self.total_slots == 0:
            return 0.0
        return round(self.filled_slots / self.total_slots * 100, 1)

    @property
    def allocation_rate(self) -> Optional[float]:
        """Percentage of requested periods that were allocated."""
        if not self.requested_periods:
            return None
        allocated = self.requested_periods - sum(u.shortfall for u in self.unmet)
        return round(allocated / self.requested_periods * 100, 1)

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary for JSON serialization."""
        return {
            "totalSlots": self.total_slots,
            "filledSlots": self.filled_slots,
            "fillRate": self.fill_rate,
            "requestedPeriods": self.requested_periods,
            "allocationRate": self.allocation_rate,
            "teacherLoads": [
                {
                    "teacherId": t.teacher_id,
                    "name": t.name,
                    "assigned": t.assigned,
                    "maxWorkload": t.max_workload,
                    "utilization": t.utilization,
                }
                for t in self.teacher_loads
            ],
            "classroomUsage": [
                {
                    "classroomId": c.classroom_id,
                    "roomNumber": c.room_number,
                    "used": c.used,
                    "utilization": c.utilization,
                }
                for c in self.classroom_usage
            ],
            "unmet": [
                {
                    "sectionId": u.section_id,
                    "courseCode": u.course_code,
                    "requested": u.requested,
                    "allocated": u.allocated,
                }
                for u in self.unmet
            ],
        }


# =============================================================================
# Calculation
# =============================================================================

def calculate_metrics(
    schedules: list[WeeklySchedule],
    snapshot: Snapshot,
    allocations: Optional[list[CourseAllocation]] = None,
) -> ScheduleMetrics:
    """
    Calculate metrics for a set of schedules.

    Args:
        schedules: Schedules of one generation run
        snapshot: Snapshot the schedules refer to
        allocations: Allocation outcomes of the run, if available. When
            omitted, unmet courses are derived by counting course periods
            in each schedule against the course targets.

    Returns:
        ScheduleMetrics
    """
    teacher_counts: dict[str, int] = defaultdict(int)
    classroom_counts: dict[str, int] = defaultdict(int)
    filled = 0

    for schedule in schedules:
        for _, _, slot in schedule.iter_filled():
            filled += 1
            teacher_counts[slot.teacher_id] += 1
            classroom_counts[slot.classroom_id] += 1

    teacher_loads = [
        TeacherLoad(t.id, t.name, teacher_counts.get(t.id, 0), t.max_workload)
        for t in snapshot.teachers
    ]
    classroom_usage = [
        ClassroomUsage(r.id, r.room_number, classroom_counts.get(r.id, 0))
        for r in snapshot.classrooms
    ]

    if allocations is not None:
        requested = sum(a.requested for a in allocations)
        unmet = [
            UnmetCourse(a.section_id, a.course_code, a.requested, a.allocated)
            for a in allocations
            if not a.is_complete
        ]
    else:
        requested, unmet = _derive_unmet(schedules, snapshot)

    return ScheduleMetrics(
        total_slots=len(schedules) * NUM_DAYS * PERIODS_PER_DAY,
        filled_slots=filled,
        requested_periods=requested,
        teacher_loads=teacher_loads,
        classroom_usage=classroom_usage,
        unmet=unmet,
    )


def _derive_unmet(
    schedules: list[WeeklySchedule],
    snapshot: Snapshot,
) -> tuple[int, list[UnmetCourse]]:
    requested = 0
    unmet = []
    for schedule in schedules:
        for course in snapshot.courses:
            target = course.target_periods
            requested += target
            allocated = schedule.course_periods(course.id)
            if allocated < target:
                unmet.append(UnmetCourse(schedule.section_id, course.code, target, allocated))
    return requested, unmet
