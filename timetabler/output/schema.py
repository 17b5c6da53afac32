"""
Output schema for generated timetables.

This module defines the JSON-serializable output format: every schedule is
resolved to full entity records so that callers can render it without a
second lookup. Field names are exposed with camelCase aliases.
"""

from __future__ import annotations

from typing import Any, Optional

from pydantic import BaseModel, Field

from timetabler.data.models import (
    Classroom,
    Course,
    Section,
    Teacher,
    WeeklyAvailability,
)
from timetabler.engine.allocator import CourseAllocation


# =============================================================================
# Entity Output
# =============================================================================

class TeacherOutput(BaseModel):
    """Full teacher record."""
    id: str
    name: str
    max_workload: int = Field(alias="maxWorkload")
    availability: WeeklyAvailability

    model_config = {"populate_by_name": True}

    @classmethod
    def from_model(cls, teacher: Teacher) -> TeacherOutput:
        return cls(
            id=teacher.id,
            name=teacher.name,
            maxWorkload=teacher.max_workload,
            availability=teacher.availability,
        )


class CourseOutput(BaseModel):
    """Full course record."""
    id: str
    code: str
    name: Optional[str] = None
    min_periods: int = Field(alias="minPeriods")
    max_periods: int = Field(alias="maxPeriods")
    is_lab: bool = Field(alias="isLab")
    teachers: list[str] = Field(default_factory=list)

    model_config = {"populate_by_name": True}

    @classmethod
    def from_model(cls, course: Course) -> CourseOutput:
        return cls(
            id=course.id,
            code=course.code,
            name=course.name,
            minPeriods=course.min_periods,
            maxPeriods=course.max_periods,
            isLab=course.is_lab,
            teachers=list(course.teachers),
        )


class ClassroomOutput(BaseModel):
    """Full classroom record."""
    id: str
    room_number: str = Field(alias="roomNumber")
    capacity: int

    model_config = {"populate_by_name": True}

    @classmethod
    def from_model(cls, classroom: Classroom) -> ClassroomOutput:
        return cls(id=classroom.id, roomNumber=classroom.room_number, capacity=classroom.capacity)


class SectionOutput(BaseModel):
    """Full section record."""
    id: str
    name: str
    student_count: int = Field(alias="studentCount")

    model_config = {"populate_by_name": True}

    @classmethod
    def from_model(cls, section: Section) -> SectionOutput:
        return cls(id=section.id, name=section.name, studentCount=section.student_count)


# =============================================================================
# Schedule Output
# =============================================================================

class SlotOutput(BaseModel):
    """A resolved period slot. All fields are null for an empty slot."""
    period: int
    course: Optional[CourseOutput] = None
    teacher: Optional[TeacherOutput] = None
    classroom: Optional[ClassroomOutput] = None

    model_config = {"populate_by_name": True}

    @property
    def is_empty(self) -> bool:
        return self.course is None


class DayOutput(BaseModel):
    """Resolved slots of a single day."""
    day: int
    day_name: str = Field(alias="dayName")
    periods: list[SlotOutput]

    model_config = {"populate_by_name": True}


class ResolvedSchedule(BaseModel):
    """A section's weekly schedule with every reference expanded."""
    section_id: str = Field(alias="sectionId")
    section: Optional[SectionOutput] = None
    monday: DayOutput
    tuesday: DayOutput
    wednesday: DayOutput
    thursday: DayOutput
    friday: DayOutput

    model_config = {"populate_by_name": True}

    @property
    def days(self) -> list[DayOutput]:
        return [self.monday, self.tuesday, self.wednesday, self.thursday, self.friday]

    @property
    def filled_count(self) -> int:
        return sum(1 for day in self.days for slot in day.periods if not slot.is_empty)

    def to_json(self, indent: int = 2) -> str:
        """Serialize to JSON string."""
        return self.model_dump_json(by_alias=True, indent=indent)

    def to_dict(self) -> dict[str, Any]:
        """Serialize to dictionary."""
        return self.model_dump(by_alias=True)


# =============================================================================
# Generation Output
# =============================================================================

class AllocationOutput(BaseModel):
    """Requested vs. allocated periods of one course in one section."""
    section_id: str = Field(alias="sectionId")
    course_id: str = Field(alias="courseId")
    course_code: str = Field(alias="courseCode")
    requested: int
    allocated: int
    skipped_reason: Optional[str] = Field(default=None, alias="skippedReason")

    model_config = {"populate_by_name": True}

    @property
    def shortfall(self) -> int:
        return max(0, self.requested - self.allocated)

    @classmethod
    def from_allocation(cls, allocation: CourseAllocation) -> AllocationOutput:
        return cls(
            sectionId=allocation.section_id,
            courseId=allocation.course_id,
            courseCode=allocation.course_code,
            requested=allocation.requested,
            allocated=allocation.allocated,
            skippedReason=allocation.skipped_reason,
        )


class GenerationOutput(BaseModel):
    """Complete output of a Generate call."""
    count: int
    requested_periods: int = Field(alias="requestedPeriods")
    allocated_periods: int = Field(alias="allocatedPeriods")
    schedules: list[ResolvedSchedule]
    allocations: list[AllocationOutput]

    model_config = {"populate_by_name": True}

    @property
    def incomplete(self) -> list[AllocationOutput]:
        return [a for a in self.allocations if a.shortfall > 0]

    def to_json(self, indent: int = 2) -> str:
        """Serialize to JSON string."""
        return self.model_dump_json(by_alias=True, indent=indent)

    def to_dict(self) -> dict[str, Any]:
        """Serialize to dictionary."""
        return self.model_dump(by_alias=True)
