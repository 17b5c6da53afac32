"""
Greedy first-fit allocation engine.

For each section (in snapshot order) and each course (in snapshot order) the
engine repeatedly places one unit of the course - a single period, or a
double period for labs - into the first slot where a candidate teacher and a
classroom are both free, until the course's target is met or no placement
is left. Nothing is ever revisited: earlier sections get first claim on
scarce teachers and classrooms.

Running time is bounded by
sections x courses x days x periods x teachers x classrooms.

Usage:
    engine = AllocationEngine(snapshot)
    result = engine.run()
    for schedule in result.schedules:
        ...
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Optional

from ..config import DayOrder, EngineConfig, WorkloadScope
from ..data.models import (
    NUM_DAYS,
    PERIODS_PER_DAY,
    Classroom,
    Course,
    Section,
    Snapshot,
    Teacher,
    WeeklySchedule,
    day_name,
)
from ..errors import InsufficientDataError
from .occupancy import AllocationState

logger = logging.getLogger(__name__)


# =============================================================================
# Result Data Classes
# =============================================================================

@dataclass
class Placement:
    """A slot, teacher and classroom found for one unit of a course."""
    day: int
    period: int
    span: int
    teacher: Teacher
    classroom: Classroom


@dataclass
class CourseAllocation:
    """Requested vs. allocated periods of one course in one section."""
    section_id: str
    course_id: str
    course_code: str
    requested: int
    allocated: int = 0
    skipped_reason: Optional[str] = None

    @property
    def shortfall(self) -> int:
        return max(0, self.requested - self.allocated)

    @property
    def is_complete(self) -> bool:
        return self.allocated >= self.requested


@dataclass
class GenerationResult:
    """Schedules and allocation outcomes of one generation run."""
    schedules: list[WeeklySchedule]
    allocations: list[CourseAllocation]

    @property
    def count(self) -> int:
        """Number of schedules produced (one per section)."""
        return len(self.schedules)

    @property
    def total_requested(self) -> int:
        return sum(a.requested for a in self.allocations)

    @property
    def total_allocated(self) -> int:
        return sum(a.allocated for a in self.allocations)

    @property
    def incomplete(self) -> list[CourseAllocation]:
        """Allocations that fell short of their target."""
        return [a for a in self.allocations if not a.is_complete]

    def schedule_for(self, section_id: str) -> Optional[WeeklySchedule]:
        for schedule in self.schedules:
            if schedule.section_id == section_id:
                return schedule
        return None

    def allocations_for(self, section_id: str) -> list[CourseAllocation]:
        return [a for a in self.allocations if a.section_id == section_id]


# =============================================================================
# Allocation Engine
# =============================================================================

class AllocationEngine:
    """
    Assigns course periods to (teacher, classroom) pairs for every section.

    The engine is single-use per `run()` call: each run builds a fresh
    AllocationState, so repeated runs on the same snapshot are independent
    and produce identical schedules.
    """

    def __init__(self, snapshot: Snapshot, config: EngineConfig | None = None):
        """
        Initialize the engine.

        Args:
            snapshot: Validated snapshot of teachers, courses, classrooms, sections
            config: Engine configuration (uses defaults if None)
        """
        self.snapshot = snapshot
        self.config = config or EngineConfig()

    # -------------------------------------------------------------------------
    # Run
    # -------------------------------------------------------------------------

    def check_sufficient_data(self) -> None:
        """
        Ensure every entity collection is non-empty.

        Raises:
            InsufficientDataError: If any collection is empty
        """
        counts = self.snapshot.counts
        if any(count == 0 for count in counts.values()):
            raise InsufficientDataError(counts)

    def run(self) -> GenerationResult:
        """
        Allocate every course of every section.

        Returns:
            GenerationResult with one schedule per section, in snapshot order

        Raises:
            InsufficientDataError: If any entity collection is empty
        """
        self.check_sufficient_data()

        counts = self.snapshot.counts
        logger.info(
            "Starting generation: %d teachers, %d courses, %d classrooms, %d sections",
            counts["teachers"], counts["courses"], counts["classrooms"], counts["sections"],
        )

        state = AllocationState()
        schedules = [WeeklySchedule(section_id=s.id) for s in self.snapshot.sections]
        allocations: list[CourseAllocation] = []

        for section, schedule in zip(self.snapshot.sections, schedules):
            if self.config.workload_scope == WorkloadScope.SECTION:
                state.reset_workload()

            section_allocations = [
                self.allocate_course(section, course, schedule, state)
                for course in self.snapshot.courses
            ]
            allocations.extend(section_allocations)

            logger.info(
                "Section %s: %d/%d periods allocated",
                section.name,
                sum(a.allocated for a in section_allocations),
                sum(a.requested for a in section_allocations),
            )

        result = GenerationResult(schedules=schedules, allocations=allocations)
        logger.info(
            "Generation finished: %d schedules, %d/%d periods allocated, %d courses short",
            result.count, result.total_allocated, result.total_requested, len(result.incomplete),
        )
        return result

    # -------------------------------------------------------------------------
    # Per-Course Allocation
    # -------------------------------------------------------------------------

    def allocate_course(
        self,
        section: Section,
        course: Course,
        schedule: WeeklySchedule,
        state: AllocationState,
    ) -> CourseAllocation:
        """
        Place units of a course into a section's schedule until its target is met.

        Stops early, without raising, when no slot satisfies every constraint.
        """
        outcome = CourseAllocation(
            section_id=section.id,
            course_id=course.id,
            course_code=course.code,
            requested=course.target_periods,
        )

        for teacher_id in self.snapshot.get_missing_teacher_ids(course):
            logger.info("Teacher not found: %s (course %s)", teacher_id, course.code)

        teachers = self.snapshot.get_course_teachers(course)
        if not teachers:
            outcome.skipped_reason = "no teachers assigned"
            logger.info("Skipping course %s for section %s: no teachers assigned", course.code, section.name)
            return outcome

        while outcome.allocated < outcome.requested:
            placement = self.find_placement(section, course, teachers, schedule, state)
            if placement is None:
                logger.info(
                    "Could not allocate more periods for course %s in section %s (%d/%d)",
                    course.code, section.name, outcome.allocated, outcome.requested,
                )
                break

            self.commit(section, course, schedule, state, placement)
            outcome.allocated += placement.span

        return outcome

    def find_placement(
        self,
        section: Section,
        course: Course,
        teachers: list[Teacher],
        schedule: WeeklySchedule,
        state: AllocationState,
    ) -> Optional[Placement]:
        """
        Find the first (slot, teacher, classroom) combination that fits.

        Slots are scanned in day order then period order; for each free slot
        the candidate teachers are tried in order, and for the first teacher
        that fits the first free classroom large enough is taken.
        """
        span = course.block_size

        for day in self.day_order(schedule):
            for period in range(PERIODS_PER_DAY):
                if not schedule.is_free(day, period, span):
                    continue

                for teacher in teachers:
                    if not self._teacher_fits(teacher, day, period, span, state):
                        continue

                    classroom = self._find_classroom(section, day, period, span, state)
                    if classroom is None:
                        continue

                    return Placement(day, period, span, teacher, classroom)

        return None

    def commit(
        self,
        section: Section,
        course: Course,
        schedule: WeeklySchedule,
        state: AllocationState,
        placement: Placement,
    ) -> None:
        """Write a placement into the schedule and the run's bookkeeping."""
        teacher_id = placement.teacher.id
        classroom_id = placement.classroom.id

        for period in range(placement.period, placement.period + placement.span):
            schedule.assign(placement.day, period, course.id, teacher_id, classroom_id)
            state.teachers.claim(teacher_id, placement.day, period, section.id)
            state.classrooms.claim(classroom_id, placement.day, period, section.id)

        state.workload[teacher_id] += placement.span

        logger.debug(
            "Allocated %s on %s period %d (x%d) with teacher %s in room %s for section %s",
            course.code, day_name(placement.day), placement.period + 1, placement.span,
            placement.teacher.name, placement.classroom.room_number, section.name,
        )

    # -------------------------------------------------------------------------
    # Helpers
    # -------------------------------------------------------------------------

    def day_order(self, schedule: WeeklySchedule) -> list[int]:
        """Days to scan, according to the configured strategy."""
        days = list(range(NUM_DAYS))
        if self.config.day_order == DayOrder.BALANCED:
            # Stable sort: ties keep Monday-first order
            days.sort(key=lambda d: schedule.filled_count(d))
        return days

    def _teacher_fits(
        self,
        teacher: Teacher,
        day: int,
        period: int,
        span: int,
        state: AllocationState,
    ) -> bool:
        if not teacher.availability.is_available_block(day, period, span):
            return False
        if not state.teachers.is_free(teacher.id, day, period, span):
            return False
        if state.teacher_workload(teacher.id) + span > teacher.max_workload:
            return False
        return True

    def _find_classroom(
        self,
        section: Section,
        day: int,
        period: int,
        span: int,
        state: AllocationState,
    ) -> Optional[Classroom]:
        for classroom in self.snapshot.classrooms:
            if classroom.capacity < section.student_count:
                continue
            if state.classrooms.is_free(classroom.id, day, period, span):
                return classroom
        return None


def generate_schedules(snapshot: Snapshot, config: EngineConfig | None = None) -> GenerationResult:
    """
    Run the allocation engine on a snapshot.

    Args:
        snapshot: Snapshot of all entities
        config: Engine configuration (uses defaults if None)

    Returns:
        GenerationResult with schedules and per-course outcomes

    Raises:
        InsufficientDataError: If any entity collection is empty
    """
    return AllocationEngine(snapshot, config).run()
