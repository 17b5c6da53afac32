"""
Resolve ID-only schedule records into full entity detail.

Lookup tables are built once from the snapshot; references that no longer
resolve (the entity was removed after generation) become null.
"""

from __future__ import annotations

from typing import Optional

from timetabler.data.models import (
    DAY_KEYS,
    NUM_DAYS,
    PeriodSlot,
    Snapshot,
    WeeklySchedule,
    day_name,
)
from timetabler.engine.allocator import GenerationResult

from .schema import (
    AllocationOutput,
    ClassroomOutput,
    CourseOutput,
    DayOutput,
    GenerationOutput,
    ResolvedSchedule,
    SectionOutput,
    SlotOutput,
    TeacherOutput,
)


class ScheduleResolver:
    """
    Expands WeeklySchedule records into ResolvedSchedule output.

    Usage:
        resolver = ScheduleResolver(snapshot)
        resolved = resolver.resolve(schedule)
    """

    def __init__(self, snapshot: Snapshot):
        """Build output lookup tables from a snapshot."""
        self._teachers = {t.id: TeacherOutput.from_model(t) for t in snapshot.teachers}
        self._courses = {c.id: CourseOutput.from_model(c) for c in snapshot.courses}
        self._classrooms = {r.id: ClassroomOutput.from_model(r) for r in snapshot.classrooms}
        self._sections = {s.id: SectionOutput.from_model(s) for s in snapshot.sections}

    def resolve(self, schedule: WeeklySchedule) -> ResolvedSchedule:
        """Resolve one schedule."""
        days = {
            DAY_KEYS[day]: DayOutput(
                day=day,
                dayName=day_name(day),
                periods=[
                    self._resolve_slot(period, slot)
                    for period, slot in enumerate(schedule.day(day).periods)
                ],
            )
            for day in range(NUM_DAYS)
        }
        return ResolvedSchedule(
            sectionId=schedule.section_id,
            section=self._sections.get(schedule.section_id),
            **days,
        )

    def resolve_all(self, schedules: list[WeeklySchedule]) -> list[ResolvedSchedule]:
        """Resolve many schedules, keeping their order."""
        return [self.resolve(s) for s in schedules]

    def _resolve_slot(self, period: int, slot: PeriodSlot) -> SlotOutput:
        if slot.is_empty:
            return SlotOutput(period=period)
        return SlotOutput(
            period=period,
            course=self._lookup(self._courses, slot.course_id),
            teacher=self._lookup(self._teachers, slot.teacher_id),
            classroom=self._lookup(self._classrooms, slot.classroom_id),
        )

    @staticmethod
    def _lookup(table: dict, key: Optional[str]):
        return table.get(key) if key is not None else None


def create_generation_output(result: GenerationResult, snapshot: Snapshot) -> GenerationOutput:
    """
    Convert a GenerationResult to the resolved output format.

    Args:
        result: Result of an allocation run
        snapshot: Snapshot the run was made from

    Returns:
        GenerationOutput with resolved schedules and allocation outcomes
    """
    resolver = ScheduleResolver(snapshot)
    return GenerationOutput(
        count=result.count,
        requestedPeriods=result.total_requested,
        allocatedPeriods=result.total_allocated,
        schedules=resolver.resolve_all(result.schedules),
        allocations=[AllocationOutput.from_allocation(a) for a in result.allocations],
    )
