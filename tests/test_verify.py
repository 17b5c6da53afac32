"""Tests for schedule rule checks, including checks of generated schedules."""

from __future__ import annotations

import pytest

from timetabler.config import DayOrder, EngineConfig, WorkloadScope
from timetabler.data.generator import (
    GeneratorConfig,
    generate_sample_snapshot,
    generate_large_snapshot,
    generate_medium_snapshot,
    generate_small_snapshot,
)
from timetabler.data.models import (
    Classroom,
    Course,
    Section,
    Snapshot,
    Teacher,
    WeeklyAvailability,
    WeeklySchedule,
)
from timetabler.engine import generate_schedules
from timetabler.verify import (
    ViolationKind,
    check_availability,
    check_capacity,
    check_lab_contiguity,
    check_no_double_booking,
    check_references,
    check_workload,
    find_violations,
)


@pytest.fixture
def snapshot() -> Snapshot:
    """Two teachers, a theory course and a lab, two rooms, two sections."""
    return Snapshot(
        teachers=[
            Teacher(id="t1", name="Ada", availability=WeeklyAvailability.always(), max_workload=3),
            Teacher(
                id="t2",
                name="Alan",
                availability=WeeklyAvailability.from_free_slots([(0, 0), (0, 1), (0, 2)]),
                max_workload=10,
            ),
        ],
        courses=[
            Course(id="ma101", code="MA101", min_periods=2, max_periods=2, teachers=["t1"]),
            Course(id="cs151", code="CS151", min_periods=2, max_periods=2, is_lab=True, teachers=["t2"]),
        ],
        classrooms=[
            Classroom(id="r1", room_number="101", capacity=30),
            Classroom(id="r2", room_number="102", capacity=60),
        ],
        sections=[
            Section(id="s1", name="CSE-A", student_count=25),
            Section(id="s2", name="CSE-B", student_count=50),
        ],
    )


def kinds(violations) -> list[ViolationKind]:
    return [v.kind for v in violations]


class TestChecks:
    """Each check on hand-built schedules."""

    def test_valid_schedules(self, snapshot):
        s1 = WeeklySchedule(section_id="s1")
        s1.assign(0, 0, "cs151", "t2", "r1")
        s1.assign(0, 1, "cs151", "t2", "r1")
        s1.assign(0, 2, "ma101", "t1", "r1")
        s2 = WeeklySchedule(section_id="s2")
        s2.assign(0, 0, "ma101", "t1", "r2")

        assert find_violations([s1, s2], snapshot) == []

    def test_teacher_double_booked(self, snapshot):
        s1 = WeeklySchedule(section_id="s1")
        s1.assign(1, 3, "ma101", "t1", "r1")
        s2 = WeeklySchedule(section_id="s2")
        s2.assign(1, 3, "ma101", "t1", "r2")

        violations = check_no_double_booking([s1, s2])

        assert kinds(violations) == [ViolationKind.TEACHER_DOUBLE_BOOKED]
        assert "s1, s2" in violations[0].message

    def test_classroom_double_booked(self, snapshot):
        s1 = WeeklySchedule(section_id="s1")
        s1.assign(0, 0, "ma101", "t1", "r2")
        s2 = WeeklySchedule(section_id="s2")
        s2.assign(0, 0, "cs151", "t2", "r2")

        assert kinds(check_no_double_booking([s1, s2])) == [ViolationKind.CLASSROOM_DOUBLE_BOOKED]

    def test_unpaired_lab_period(self, snapshot):
        schedule = WeeklySchedule(section_id="s1")
        schedule.assign(0, 0, "cs151", "t2", "r1")

        assert kinds(check_lab_contiguity([schedule], snapshot)) == [ViolationKind.LAB_NOT_CONTIGUOUS]

    def test_lab_pair_with_different_rooms(self, snapshot):
        schedule = WeeklySchedule(section_id="s1")
        schedule.assign(0, 0, "cs151", "t2", "r1")
        schedule.assign(0, 1, "cs151", "t2", "r2")

        assert len(check_lab_contiguity([schedule], snapshot)) == 2

    def test_two_adjacent_lab_blocks(self, snapshot):
        schedule = WeeklySchedule(section_id="s1")
        for period in range(4):
            schedule.assign(2, period, "cs151", "t2", "r1")

        assert check_lab_contiguity([schedule], snapshot) == []

    def test_workload_counted_across_sections(self, snapshot):
        s1 = WeeklySchedule(section_id="s1")
        s1.assign(0, 0, "ma101", "t1", "r1")
        s1.assign(0, 1, "ma101", "t1", "r1")
        s2 = WeeklySchedule(section_id="s2")
        s2.assign(0, 2, "ma101", "t1", "r2")
        s2.assign(0, 3, "ma101", "t1", "r2")

        assert kinds(check_workload([s1, s2], snapshot)) == [ViolationKind.WORKLOAD_EXCEEDED]
        assert check_workload([s1, s2], snapshot, WorkloadScope.SECTION) == []

    def test_capacity(self, snapshot):
        schedule = WeeklySchedule(section_id="s2")
        schedule.assign(0, 0, "ma101", "t1", "r1")

        violations = check_capacity([schedule], snapshot)

        assert kinds(violations) == [ViolationKind.CAPACITY_EXCEEDED]
        assert "Room 101 seats 30" in violations[0].message

    def test_availability(self, snapshot):
        schedule = WeeklySchedule(section_id="s1")
        schedule.assign(3, 5, "cs151", "t2", "r1")

        violations = check_availability([schedule], snapshot)

        assert kinds(violations) == [ViolationKind.TEACHER_UNAVAILABLE]
        assert (violations[0].day, violations[0].period) == (3, 5)

    def test_teacher_not_candidate(self, snapshot):
        schedule = WeeklySchedule(section_id="s1")
        schedule.assign(0, 0, "ma101", "t2", "r1")

        assert kinds(check_references([schedule], snapshot)) == [ViolationKind.TEACHER_NOT_CANDIDATE]

    def test_unknown_references(self, snapshot):
        schedule = WeeklySchedule(section_id="s9")
        schedule.assign(0, 0, "xx999", "t9", "r9")

        violations = check_references([schedule], snapshot)

        assert kinds(violations) == [ViolationKind.UNKNOWN_REFERENCE] * 4

    def test_violation_str(self, snapshot):
        schedule = WeeklySchedule(section_id="s1")
        schedule.assign(0, 0, "cs151", "t2", "r1")

        violation = check_lab_contiguity([schedule], snapshot)[0]

        assert str(violation).startswith("[lab_not_contiguous] Lab CS151")


class TestGeneratedSchedulesFollowRules:
    """The engine's output passes every check on generated institutions."""

    @pytest.mark.parametrize("seed", [1, 2, 3, 42])
    def test_small(self, seed):
        snapshot = generate_small_snapshot(seed=seed)

        result = generate_schedules(snapshot)

        assert find_violations(result.schedules, snapshot) == []

    @pytest.mark.parametrize("seed", [5, 17])
    def test_medium(self, seed):
        snapshot = generate_medium_snapshot(seed=seed)

        result = generate_schedules(snapshot)

        assert find_violations(result.schedules, snapshot) == []

    def test_large(self):
        snapshot = generate_large_snapshot(seed=11)

        result = generate_schedules(snapshot)

        assert find_violations(result.schedules, snapshot) == []

    def test_balanced_day_order(self):
        snapshot = generate_medium_snapshot(seed=9)

        result = generate_schedules(snapshot, EngineConfig(day_order=DayOrder.BALANCED))

        assert find_violations(result.schedules, snapshot) == []

    def test_section_workload_scope(self):
        snapshot = generate_medium_snapshot(seed=9)
        config = EngineConfig(workload_scope=WorkloadScope.SECTION)

        result = generate_schedules(snapshot, config)

        assert find_violations(result.schedules, snapshot, WorkloadScope.SECTION) == []

    def test_scarce_resources(self):
        """Few rooms and tight workloads leave gaps but never break a rule."""
        config = GeneratorConfig(
            num_teachers=5,
            num_sections=10,
            num_classrooms=2,
            num_courses=8,
            num_labs=4,
            teacher_min_workload=4,
            teacher_max_workload=10,
            teacher_max_blocked_periods=20,
            seed=23,
        )
        snapshot = generate_sample_snapshot(config)

        result = generate_schedules(snapshot)

        assert result.total_allocated < result.total_requested
        assert find_violations(result.schedules, snapshot) == []

    def test_allocated_counts_match_schedules(self):
        snapshot = generate_medium_snapshot(seed=4)

        result = generate_schedules(snapshot)

        for allocation in result.allocations:
            schedule = result.schedule_for(allocation.section_id)
            assert schedule.course_periods(allocation.course_id) == allocation.allocated
