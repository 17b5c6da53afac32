"""
Independent checks of generated schedules against the hard rules.

Used by the CLI `check` command and by the test suite to confirm that the
engine's output never double-books, never breaks a lab block, and respects
workload caps, classroom capacity and teacher availability.
"""

from __future__ import annotations

from collections import defaultdict
from dataclasses import dataclass
from enum import Enum
from typing import Optional

from .config import WorkloadScope
from .data.models import NUM_DAYS, Snapshot, WeeklySchedule, day_name


class ViolationKind(str, Enum):
    """Kinds of rule violations."""
    TEACHER_DOUBLE_BOOKED = "teacher_double_booked"
    CLASSROOM_DOUBLE_BOOKED = "classroom_double_booked"
    LAB_NOT_CONTIGUOUS = "lab_not_contiguous"
    WORKLOAD_EXCEEDED = "workload_exceeded"
    CAPACITY_EXCEEDED = "capacity_exceeded"
    TEACHER_UNAVAILABLE = "teacher_unavailable"
    TEACHER_NOT_CANDIDATE = "teacher_not_candidate"
    UNKNOWN_REFERENCE = "unknown_reference"


@dataclass
class Violation:
    """A single broken rule."""
    kind: ViolationKind
    message: str
    section_id: Optional[str] = None
    day: Optional[int] = None
    period: Optional[int] = None

    def __str__(self) -> str:
        return f"[{self.kind.value}] {self.message}"


def find_violations(
    schedules: list[WeeklySchedule],
    snapshot: Snapshot,
    workload_scope: WorkloadScope = WorkloadScope.RUN,
) -> list[Violation]:
    """
    Check schedules against every hard rule.

    Args:
        schedules: Schedules of one generation run
        snapshot: Snapshot the schedules were generated from
        workload_scope: How teacher workload caps are counted

    Returns:
        List of violations (empty if the schedules are valid)
    """
    violations: list[Violation] = []
    violations.extend(check_references(schedules, snapshot))
    violations.extend(check_no_double_booking(schedules))
    violations.extend(check_lab_contiguity(schedules, snapshot))
    violations.extend(check_workload(schedules, snapshot, workload_scope))
    violations.extend(check_capacity(schedules, snapshot))
    violations.extend(check_availability(schedules, snapshot))
    return violations


def check_references(schedules: list[WeeklySchedule], snapshot: Snapshot) -> list[Violation]:
    """Every slot references existing entities, and the teacher is a candidate of the course."""
    violations = []
    for schedule in schedules:
        if snapshot.get_section(schedule.section_id) is None:
            violations.append(Violation(
                ViolationKind.UNKNOWN_REFERENCE,
                f"Schedule references unknown section '{schedule.section_id}'",
                section_id=schedule.section_id,
            ))

        for day, period, slot in schedule.iter_filled():
            where = f"section {schedule.section_id} {day_name(day)} period {period}"
            course = snapshot.get_course(slot.course_id)
            if course is None:
                violations.append(Violation(
                    ViolationKind.UNKNOWN_REFERENCE, f"Unknown course '{slot.course_id}' at {where}",
                    schedule.section_id, day, period,
                ))
            elif slot.teacher_id not in course.teachers:
                violations.append(Violation(
                    ViolationKind.TEACHER_NOT_CANDIDATE,
                    f"Teacher '{slot.teacher_id}' is not a candidate for {course.code} at {where}",
                    schedule.section_id, day, period,
                ))
            if snapshot.get_teacher(slot.teacher_id) is None:
                violations.append(Violation(
                    ViolationKind.UNKNOWN_REFERENCE, f"Unknown teacher '{slot.teacher_id}' at {where}",
                    schedule.section_id, day, period,
                ))
            if snapshot.get_classroom(slot.classroom_id) is None:
                violations.append(Violation(
                    ViolationKind.UNKNOWN_REFERENCE, f"Unknown classroom '{slot.classroom_id}' at {where}",
                    schedule.section_id, day, period,
                ))
    return violations


def check_no_double_booking(schedules: list[WeeklySchedule]) -> list[Violation]:
    """No teacher or classroom appears in two sections at the same (day, period)."""
    teacher_slots: dict[tuple[int, int, str], list[str]] = defaultdict(list)
    classroom_slots: dict[tuple[int, int, str], list[str]] = defaultdict(list)

    for schedule in schedules:
        for day, period, slot in schedule.iter_filled():
            teacher_slots[(day, period, slot.teacher_id)].append(schedule.section_id)
            classroom_slots[(day, period, slot.classroom_id)].append(schedule.section_id)

    violations = []
    for kind, label, table in (
        (ViolationKind.TEACHER_DOUBLE_BOOKED, "Teacher", teacher_slots),
        (ViolationKind.CLASSROOM_DOUBLE_BOOKED, "Classroom", classroom_slots),
    ):
        for (day, period, resource_id), sections in table.items():
            if len(sections) > 1:
                violations.append(Violation(
                    kind,
                    f"{label} '{resource_id}' booked by sections {', '.join(sections)} "
                    f"on {day_name(day)} period {period}",
                    day=day,
                    period=period,
                ))
    return violations


def check_lab_contiguity(schedules: list[WeeklySchedule], snapshot: Snapshot) -> list[Violation]:
    """Lab slots come in adjacent pairs sharing teacher and classroom."""
    violations = []
    for schedule in schedules:
        for day in range(NUM_DAYS):
            periods = schedule.day(day).periods
            period = 0
            while period < len(periods):
                slot = periods[period]
                course = snapshot.get_course(slot.course_id) if not slot.is_empty else None
                if course is None or not course.is_lab:
                    period += 1
                    continue

                # Length of the run of identical lab slots starting here
                end = period
                while end < len(periods) and periods[end] == slot:
                    end += 1
                if (end - period) % 2 != 0:
                    violations.append(Violation(
                        ViolationKind.LAB_NOT_CONTIGUOUS,
                        f"Lab {course.code} in section {schedule.section_id} has an unpaired "
                        f"period on {day_name(day)} (periods {period}-{end - 1})",
                        schedule.section_id, day, period,
                    ))
                period = end
    return violations


def check_workload(
    schedules: list[WeeklySchedule],
    snapshot: Snapshot,
    workload_scope: WorkloadScope = WorkloadScope.RUN,
) -> list[Violation]:
    """No teacher is assigned more periods than their max_workload."""
    if workload_scope == WorkloadScope.SECTION:
        groups = [[s] for s in schedules]
    else:
        groups = [schedules]

    violations = []
    for group in groups:
        loads: dict[str, int] = defaultdict(int)
        for schedule in group:
            for _, _, slot in schedule.iter_filled():
                loads[slot.teacher_id] += 1

        for teacher_id, load in loads.items():
            teacher = snapshot.get_teacher(teacher_id)
            if teacher is not None and load > teacher.max_workload:
                section_id = group[0].section_id if workload_scope == WorkloadScope.SECTION else None
                violations.append(Violation(
                    ViolationKind.WORKLOAD_EXCEEDED,
                    f"Teacher '{teacher.name}' has {load} periods but max is {teacher.max_workload}",
                    section_id=section_id,
                ))
    return violations


def check_capacity(schedules: list[WeeklySchedule], snapshot: Snapshot) -> list[Violation]:
    """Every classroom used by a section seats all its students."""
    violations = []
    for schedule in schedules:
        section = snapshot.get_section(schedule.section_id)
        if section is None:
            continue
        for day, period, slot in schedule.iter_filled():
            classroom = snapshot.get_classroom(slot.classroom_id)
            if classroom is not None and classroom.capacity < section.student_count:
                violations.append(Violation(
                    ViolationKind.CAPACITY_EXCEEDED,
                    f"{classroom} seats {classroom.capacity} but section {section.name} "
                    f"has {section.student_count} students",
                    schedule.section_id, day, period,
                ))
    return violations


def check_availability(schedules: list[WeeklySchedule], snapshot: Snapshot) -> list[Violation]:
    """Teachers are only assigned to periods marked free."""
    violations = []
    for schedule in schedules:
        for day, period, slot in schedule.iter_filled():
            teacher = snapshot.get_teacher(slot.teacher_id)
            if teacher is not None and not teacher.availability.is_available(day, period):
                violations.append(Violation(
                    ViolationKind.TEACHER_UNAVAILABLE,
                    f"Teacher '{teacher.name}' is unavailable on {day_name(day)} period {period}",
                    schedule.section_id, day, period,
                ))
    return violations
