"""
Pydantic models for the timetabler data model.

Grid conventions:
- Days are 0-4 (Monday-Friday)
- Periods are 0-7 within a day
- A slot is one (day, period) cell of a section's weekly grid

Entity cross-references are plain string IDs (a course lists the IDs of its
candidate teachers; a schedule slot holds course, teacher and classroom IDs).
They are resolved through the lookup maps built on `Snapshot`.
"""

from __future__ import annotations

from enum import Enum
from typing import Any, Iterator, Optional

from pydantic import (
    BaseModel,
    ConfigDict,
    Field,
    model_validator,
)

from ..errors import SlotOccupiedError


# =============================================================================
# Constants and Enums
# =============================================================================

NUM_DAYS = 5
PERIODS_PER_DAY = 8
LAB_BLOCK_SIZE = 2


class Day(int, Enum):
    """Day of week: 0=Monday through 4=Friday."""
    MONDAY = 0
    TUESDAY = 1
    WEDNESDAY = 2
    THURSDAY = 3
    FRIDAY = 4


DAY_KEYS = ["monday", "tuesday", "wednesday", "thursday", "friday"]
DAY_NAMES = ["Monday", "Tuesday", "Wednesday", "Thursday", "Friday"]


def day_name(day: int) -> str:
    """Get day name from index."""
    return DAY_NAMES[day] if 0 <= day < NUM_DAYS else f"Day {day}"


# =============================================================================
# Core Entity Models
# =============================================================================

class WeeklyAvailability(BaseModel):
    """
    Per-period availability of a teacher for each weekday.

    Each day is an ordered list of up to 8 booleans, one per period index.
    A missing day, or a period past the end of a day's list, is unavailable.
    """
    model_config = ConfigDict(extra="forbid")

    monday: list[bool] = Field(default_factory=list, max_length=PERIODS_PER_DAY)
    tuesday: list[bool] = Field(default_factory=list, max_length=PERIODS_PER_DAY)
    wednesday: list[bool] = Field(default_factory=list, max_length=PERIODS_PER_DAY)
    thursday: list[bool] = Field(default_factory=list, max_length=PERIODS_PER_DAY)
    friday: list[bool] = Field(default_factory=list, max_length=PERIODS_PER_DAY)

    @classmethod
    def always(cls) -> "WeeklyAvailability":
        """Availability with every period of every day free."""
        return cls(**{key: [True] * PERIODS_PER_DAY for key in DAY_KEYS})

    @classmethod
    def from_free_slots(cls, slots: list[tuple[int, int]]) -> "WeeklyAvailability":
        """Availability with only the given (day, period) slots free."""
        grid = {key: [False] * PERIODS_PER_DAY for key in DAY_KEYS}
        for day, period in slots:
            grid[DAY_KEYS[day]][period] = True
        return cls(**grid)

    def periods_for(self, day: int) -> list[bool]:
        """Get the raw period list for a day."""
        return getattr(self, DAY_KEYS[day])

    def is_available(self, day: int, period: int) -> bool:
        """Whether the period is marked free."""
        periods = self.periods_for(day)
        return 0 <= period < len(periods) and periods[period]

    def is_available_block(self, day: int, period: int, span: int = 1) -> bool:
        """Whether `span` consecutive periods starting at `period` are all free."""
        return all(self.is_available(day, p) for p in range(period, period + span))

    @property
    def free_period_count(self) -> int:
        """Total number of free periods in the week."""
        return sum(sum(1 for free in self.periods_for(day) if free) for day in range(NUM_DAYS))


class Teacher(BaseModel):
    """Teacher entity."""
    model_config = ConfigDict(extra="forbid")

    id: str = Field(min_length=1, description="Unique identifier")
    name: str = Field(min_length=1, description="Full name")
    availability: WeeklyAvailability = Field(
        default_factory=WeeklyAvailability,
        description="Free periods per weekday",
    )
    max_workload: int = Field(ge=0, description="Max periods across one generation run")

    def __str__(self) -> str:
        return f"{self.name} ({self.id})"


class Course(BaseModel):
    """Course to be scheduled in every section."""
    model_config = ConfigDict(extra="forbid")

    id: str = Field(min_length=1, description="Unique identifier")
    code: str = Field(min_length=1, description="Course code (e.g., 'CS101')")
    name: Optional[str] = Field(default=None, description="Course name")
    min_periods: int = Field(ge=0, description="Minimum periods per week")
    max_periods: int = Field(ge=0, description="Maximum periods per week")
    is_lab: bool = Field(default=False, description="Lab courses need double periods")
    teachers: list[str] = Field(default_factory=list, description="Candidate teacher IDs, in preference order")

    @model_validator(mode="after")
    def validate_period_range(self) -> "Course":
        """Ensure min_periods does not exceed max_periods."""
        if self.min_periods > self.max_periods:
            raise ValueError(
                f"min_periods ({self.min_periods}) must not exceed "
                f"max_periods ({self.max_periods})"
            )
        return self

    @property
    def block_size(self) -> int:
        """Periods committed per placement: a double period for labs."""
        return LAB_BLOCK_SIZE if self.is_lab else 1

    @property
    def target_periods(self) -> int:
        """Number of periods the engine tries to allocate per section."""
        if self.is_lab:
            return min(self.max_periods, LAB_BLOCK_SIZE)
        return min(self.max_periods, self.min_periods)

    def __str__(self) -> str:
        return f"{self.name} ({self.code})" if self.name else self.code


class Classroom(BaseModel):
    """Classroom/room."""
    model_config = ConfigDict(extra="forbid")

    id: str = Field(min_length=1, description="Unique identifier")
    room_number: str = Field(min_length=1, description="Room number, display only")
    capacity: int = Field(ge=0, description="Seats available")

    def __str__(self) -> str:
        return f"Room {self.room_number}"


class Section(BaseModel):
    """Student section, the unit a weekly schedule is built for."""
    model_config = ConfigDict(extra="forbid")

    id: str = Field(min_length=1, description="Unique identifier")
    name: str = Field(min_length=1, description="Section name (e.g., 'CSE-A')")
    student_count: int = Field(ge=0, description="Number of students")

    def __str__(self) -> str:
        return self.name


# =============================================================================
# Snapshot
# =============================================================================

class Snapshot(BaseModel):
    """
    Point-in-time copy of every entity a generation run needs.

    Collections may be empty here; the engine rejects empty collections
    with InsufficientDataError so that the check happens at run time.
    """
    model_config = ConfigDict(extra="forbid")

    teachers: list[Teacher] = Field(default_factory=list, description="Teachers")
    courses: list[Course] = Field(default_factory=list, description="Courses")
    classrooms: list[Classroom] = Field(default_factory=list, description="Classrooms")
    sections: list[Section] = Field(default_factory=list, description="Sections")

    # Lookup caches (populated after validation)
    _teacher_map: dict[str, Teacher] = {}
    _course_map: dict[str, Course] = {}
    _classroom_map: dict[str, Classroom] = {}
    _section_map: dict[str, Section] = {}

    def model_post_init(self, __context: Any) -> None:
        """Build lookup maps after model initialization."""
        self._teacher_map = {t.id: t for t in self.teachers}
        self._course_map = {c.id: c for c in self.courses}
        self._classroom_map = {r.id: r for r in self.classrooms}
        self._section_map = {s.id: s for s in self.sections}

    @model_validator(mode="after")
    def validate_references(self) -> "Snapshot":
        """
        Validate course -> teacher references.

        Ids of deleted teachers are allowed and dropped at lookup time;
        an id listed twice is an error.
        """
        errors: list[str] = []

        for course in self.courses:
            seen: set[str] = set()
            for teacher_id in course.teachers:
                if teacher_id in seen:
                    errors.append(f"Course {course.code}: teacher '{teacher_id}' listed twice")
                seen.add(teacher_id)

        if errors:
            raise ValueError("Reference validation failed:\n" + "\n".join(f"  - {e}" for e in errors))

        return self

    @model_validator(mode="after")
    def validate_no_duplicate_ids(self) -> "Snapshot":
        """Ensure no duplicate IDs within each entity type."""
        errors: list[str] = []

        def check_duplicates(items: list, entity_name: str) -> None:
            seen: set[str] = set()
            for item in items:
                if item.id in seen:
                    errors.append(f"Duplicate {entity_name} ID: '{item.id}'")
                seen.add(item.id)

        check_duplicates(self.teachers, "teacher")
        check_duplicates(self.courses, "course")
        check_duplicates(self.classrooms, "classroom")
        check_duplicates(self.sections, "section")

        if errors:
            raise ValueError("Duplicate ID validation failed:\n" + "\n".join(f"  - {e}" for e in errors))

        return self

    # -------------------------------------------------------------------------
    # Lookup Methods
    # -------------------------------------------------------------------------

    def get_teacher(self, teacher_id: str) -> Optional[Teacher]:
        """Get teacher by ID."""
        return self._teacher_map.get(teacher_id)

    def get_course(self, course_id: str) -> Optional[Course]:
        """Get course by ID."""
        return self._course_map.get(course_id)

    def get_classroom(self, classroom_id: str) -> Optional[Classroom]:
        """Get classroom by ID."""
        return self._classroom_map.get(classroom_id)

    def get_section(self, section_id: str) -> Optional[Section]:
        """Get section by ID."""
        return self._section_map.get(section_id)

    def get_course_teachers(self, course: Course) -> list[Teacher]:
        """Get the candidate teachers of a course, in preference order."""
        return [self._teacher_map[t] for t in course.teachers if t in self._teacher_map]

    def get_missing_teacher_ids(self, course: Course) -> list[str]:
        """Teacher ids a course lists that match no teacher."""
        return [t for t in course.teachers if t not in self._teacher_map]

    def get_teacher_courses(self, teacher_id: str) -> list[Course]:
        """Get all courses listing a teacher as candidate."""
        return [c for c in self.courses if teacher_id in c.teachers]

    # -------------------------------------------------------------------------
    # Statistics
    # -------------------------------------------------------------------------

    @property
    def counts(self) -> dict[str, int]:
        """Entity counts, keyed by collection name."""
        return {
            "teachers": len(self.teachers),
            "courses": len(self.courses),
            "classrooms": len(self.classrooms),
            "sections": len(self.sections),
        }

    @property
    def total_requested_periods(self) -> int:
        """Periods requested across every (section, course) pair."""
        per_section = sum(c.target_periods for c in self.courses)
        return per_section * len(self.sections)

    def summary(self) -> dict[str, Any]:
        """Get a summary of the snapshot."""
        return {
            **self.counts,
            "lab_courses": sum(1 for c in self.courses if c.is_lab),
            "total_requested_periods": self.total_requested_periods,
            "total_slots": len(self.sections) * NUM_DAYS * PERIODS_PER_DAY,
        }


# =============================================================================
# Schedule Models
# =============================================================================

class PeriodSlot(BaseModel):
    """One period of a section's day: empty, or a course/teacher/classroom triple."""
    model_config = ConfigDict(extra="forbid")

    course_id: Optional[str] = Field(default=None, description="Course ID")
    teacher_id: Optional[str] = Field(default=None, description="Teacher ID")
    classroom_id: Optional[str] = Field(default=None, description="Classroom ID")

    @model_validator(mode="after")
    def validate_triple(self) -> "PeriodSlot":
        """A slot is either fully empty or fully assigned."""
        values = (self.course_id, self.teacher_id, self.classroom_id)
        if any(v is None for v in values) and any(v is not None for v in values):
            raise ValueError("course_id, teacher_id and classroom_id must be set together")
        return self

    @property
    def is_empty(self) -> bool:
        return self.course_id is None


def _empty_periods() -> list[PeriodSlot]:
    return [PeriodSlot() for _ in range(PERIODS_PER_DAY)]


class DaySchedule(BaseModel):
    """The 8 period slots of one weekday."""
    model_config = ConfigDict(extra="forbid")

    periods: list[PeriodSlot] = Field(
        default_factory=_empty_periods,
        min_length=PERIODS_PER_DAY,
        max_length=PERIODS_PER_DAY,
    )


class WeeklySchedule(BaseModel):
    """
    Weekly schedule owned by a single section.

    This is the record handed to the schedule store. Slots hold IDs only;
    see `timetabler.output.resolver` for the fully-resolved view.
    """
    model_config = ConfigDict(extra="forbid")

    section_id: str = Field(min_length=1, description="Owning section ID")
    monday: DaySchedule = Field(default_factory=DaySchedule)
    tuesday: DaySchedule = Field(default_factory=DaySchedule)
    wednesday: DaySchedule = Field(default_factory=DaySchedule)
    thursday: DaySchedule = Field(default_factory=DaySchedule)
    friday: DaySchedule = Field(default_factory=DaySchedule)

    def day(self, day: int) -> DaySchedule:
        """Get the schedule of a day by index."""
        return getattr(self, DAY_KEYS[day])

    def slot(self, day: int, period: int) -> PeriodSlot:
        """Get a single slot."""
        return self.day(day).periods[period]

    def is_free(self, day: int, period: int, span: int = 1) -> bool:
        """Whether `span` consecutive slots starting at `period` exist and are empty."""
        if period < 0 or period + span > PERIODS_PER_DAY:
            return False
        periods = self.day(day).periods
        return all(periods[p].is_empty for p in range(period, period + span))

    def assign(
        self,
        day: int,
        period: int,
        course_id: str,
        teacher_id: str,
        classroom_id: str,
    ) -> None:
        """
        Fill a slot.

        Raises:
            SlotOccupiedError: If the slot already holds a course
        """
        current = self.slot(day, period)
        if not current.is_empty:
            raise SlotOccupiedError(
                f"Section {self.section_id}: {day_name(day)} period {period} "
                f"already holds course {current.course_id}"
            )
        self.day(day).periods[period] = PeriodSlot(
            course_id=course_id,
            teacher_id=teacher_id,
            classroom_id=classroom_id,
        )

    def iter_slots(self) -> Iterator[tuple[int, int, PeriodSlot]]:
        """Yield (day, period, slot) for every slot in grid order."""
        for day in range(NUM_DAYS):
            for period, slot in enumerate(self.day(day).periods):
                yield day, period, slot

    def iter_filled(self) -> Iterator[tuple[int, int, PeriodSlot]]:
        """Yield (day, period, slot) for every filled slot in grid order."""
        for day, period, slot in self.iter_slots():
            if not slot.is_empty:
                yield day, period, slot

    def filled_count(self, day: Optional[int] = None) -> int:
        """Number of filled slots, for one day or the whole week."""
        if day is not None:
            return sum(1 for slot in self.day(day).periods if not slot.is_empty)
        return sum(1 for _ in self.iter_filled())

    def course_periods(self, course_id: str) -> int:
        """Number of slots holding a course."""
        return sum(1 for _, _, slot in self.iter_filled() if slot.course_id == course_id)
