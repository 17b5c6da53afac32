"""Tests for the greedy first-fit allocation engine."""

from __future__ import annotations

import pytest

from timetabler.config import DayOrder, EngineConfig, WorkloadScope
from timetabler.data.generator import generate_medium_snapshot
from timetabler.data.models import (
    Classroom,
    Course,
    Section,
    Snapshot,
    Teacher,
    WeeklyAvailability,
    WeeklySchedule,
)
from timetabler.engine import AllocationEngine, generate_schedules
from timetabler.engine.occupancy import AllocationState
from timetabler.errors import InsufficientDataError


def teacher(id: str = "t1", max_workload: int = 10, availability: WeeklyAvailability | None = None) -> Teacher:
    return Teacher(
        id=id,
        name=f"Teacher {id}",
        availability=availability or WeeklyAvailability.always(),
        max_workload=max_workload,
    )


def course(id: str = "c1", min_periods: int = 3, max_periods: int = 3, is_lab: bool = False, teachers=("t1",)) -> Course:
    return Course(
        id=id,
        code=id.upper(),
        min_periods=min_periods,
        max_periods=max_periods,
        is_lab=is_lab,
        teachers=list(teachers),
    )


def classroom(id: str = "r1", capacity: int = 30) -> Classroom:
    return Classroom(id=id, room_number=id.upper(), capacity=capacity)


def section(id: str = "s1", student_count: int = 30) -> Section:
    return Section(id=id, name=f"Section {id}", student_count=student_count)


def filled(schedule: WeeklySchedule) -> list[tuple[int, int, str, str, str]]:
    return [
        (day, period, slot.course_id, slot.teacher_id, slot.classroom_id)
        for day, period, slot in schedule.iter_filled()
    ]


@pytest.fixture
def single_course_snapshot() -> Snapshot:
    """One section, one theory course, one always-available teacher, one classroom."""
    return Snapshot(
        teachers=[teacher()],
        courses=[course()],
        classrooms=[classroom()],
        sections=[section()],
    )


class TestScenarios:
    """End-to-end allocation scenarios."""

    def test_theory_course_fills_first_periods_of_monday(self, single_course_snapshot):
        result = AllocationEngine(single_course_snapshot).run()

        assert result.count == 1
        assert filled(result.schedules[0]) == [
            (0, 0, "c1", "t1", "r1"),
            (0, 1, "c1", "t1", "r1"),
            (0, 2, "c1", "t1", "r1"),
        ]
        assert result.allocations[0].allocated == 3
        assert result.allocations[0].is_complete

    def test_lab_takes_one_double_period(self):
        availability = WeeklyAvailability.from_free_slots([(0, 0), (0, 1), (1, 0), (1, 1)])
        snapshot = Snapshot(
            teachers=[teacher(availability=availability)],
            courses=[course(min_periods=2, max_periods=4, is_lab=True)],
            classrooms=[classroom()],
            sections=[section()],
        )

        result = AllocationEngine(snapshot).run()

        assert filled(result.schedules[0]) == [
            (0, 0, "c1", "t1", "r1"),
            (0, 1, "c1", "t1", "r1"),
        ]
        assert result.allocations[0].requested == 2
        assert result.allocations[0].allocated == 2

    def test_classrooms_too_small_allocates_nothing(self):
        snapshot = Snapshot(
            teachers=[teacher()],
            courses=[course(), course("c2", is_lab=True, min_periods=2, max_periods=2)],
            classrooms=[classroom(capacity=20), classroom("r2", capacity=25)],
            sections=[section(student_count=30), section("s2", student_count=40)],
        )

        result = AllocationEngine(snapshot).run()

        assert result.count == 2
        assert result.total_allocated == 0
        assert all(s.filled_count() == 0 for s in result.schedules)
        assert len(result.incomplete) == 4


class TestInsufficientData:
    """Tests for the empty-collection precondition."""

    @pytest.mark.parametrize("empty", ["teachers", "courses", "classrooms", "sections"])
    def test_any_empty_collection_raises(self, single_course_snapshot, empty):
        data = {
            "teachers": single_course_snapshot.teachers,
            "courses": single_course_snapshot.courses,
            "classrooms": single_course_snapshot.classrooms,
            "sections": single_course_snapshot.sections,
        }
        data[empty] = []
        if empty == "teachers":
            data["courses"] = [course(teachers=())]

        with pytest.raises(InsufficientDataError) as exc_info:
            AllocationEngine(Snapshot(**data)).run()

        assert exc_info.value.counts[empty] == 0
        assert empty in str(exc_info.value)

    def test_error_reports_all_counts(self):
        with pytest.raises(InsufficientDataError) as exc_info:
            generate_schedules(Snapshot(sections=[section()]))

        assert exc_info.value.counts == {"teachers": 0, "courses": 0, "classrooms": 0, "sections": 1}


class TestCourseAllocation:
    """Tests for per-course outcomes."""

    def test_course_without_teachers_is_skipped(self):
        snapshot = Snapshot(
            teachers=[teacher()],
            courses=[course("c1", teachers=()), course("c2")],
            classrooms=[classroom()],
            sections=[section()],
        )

        result = AllocationEngine(snapshot).run()
        skipped, placed = result.allocations

        assert skipped.allocated == 0
        assert skipped.skipped_reason == "no teachers assigned"
        assert placed.allocated == 3
        assert placed.skipped_reason is None

    def test_deleted_teacher_is_passed_over(self):
        snapshot = Snapshot(
            teachers=[teacher("t1", max_workload=1), teacher("t2")],
            courses=[course(teachers=("t1", "deleted-teacher", "t2"))],
            classrooms=[classroom()],
            sections=[section()],
        )

        result = AllocationEngine(snapshot).run()

        assert result.allocations[0].allocated == 3
        assert [slot[3] for slot in filled(result.schedules[0])] == ["t1", "t2", "t2"]

    def test_course_whose_teachers_were_all_deleted_is_skipped(self):
        snapshot = Snapshot(
            teachers=[teacher()],
            courses=[course(teachers=("gone",))],
            classrooms=[classroom()],
            sections=[section()],
        )

        result = AllocationEngine(snapshot).run()

        assert result.allocations[0].allocated == 0
        assert result.allocations[0].skipped_reason == "no teachers assigned"

    def test_target_is_min_periods(self):
        snapshot = Snapshot(
            teachers=[teacher()],
            courses=[course(min_periods=2, max_periods=5)],
            classrooms=[classroom()],
            sections=[section()],
        )

        result = AllocationEngine(snapshot).run()

        assert result.schedules[0].course_periods("c1") == 2

    def test_allocations_in_section_then_course_order(self):
        snapshot = Snapshot(
            teachers=[teacher(max_workload=40)],
            courses=[course("c1", 1, 1), course("c2", 1, 1)],
            classrooms=[classroom()],
            sections=[section("s1"), section("s2")],
        )

        result = AllocationEngine(snapshot).run()

        assert [(a.section_id, a.course_id) for a in result.allocations] == [
            ("s1", "c1"), ("s1", "c2"), ("s2", "c1"), ("s2", "c2"),
        ]
        assert [a.course_id for a in result.allocations_for("s2")] == ["c1", "c2"]
        assert result.total_requested == 4
        assert result.total_allocated == 4

    def test_shortfall(self):
        snapshot = Snapshot(
            teachers=[teacher(max_workload=2)],
            courses=[course()],
            classrooms=[classroom()],
            sections=[section()],
        )

        allocation = AllocationEngine(snapshot).run().allocations[0]

        assert allocation.allocated == 2
        assert allocation.shortfall == 1
        assert not allocation.is_complete


class TestConstraints:
    """Tests for each hard constraint in isolation."""

    def test_teachers_tried_in_order_per_slot(self):
        # t1 is busy Monday period 0 only
        busy_first = WeeklyAvailability.always()
        busy_first.monday[0] = False
        snapshot = Snapshot(
            teachers=[teacher("t1", availability=busy_first), teacher("t2")],
            courses=[course(min_periods=2, max_periods=2, teachers=("t1", "t2"))],
            classrooms=[classroom()],
            sections=[section()],
        )

        result = AllocationEngine(snapshot).run()

        assert filled(result.schedules[0]) == [
            (0, 0, "c1", "t2", "r1"),
            (0, 1, "c1", "t1", "r1"),
        ]

    def test_first_classroom_large_enough(self):
        snapshot = Snapshot(
            teachers=[teacher()],
            courses=[course(min_periods=1, max_periods=1)],
            classrooms=[classroom("r1", 20), classroom("r2", 40), classroom("r3", 60)],
            sections=[section(student_count=30)],
        )

        result = AllocationEngine(snapshot).run()

        assert result.schedules[0].slot(0, 0).classroom_id == "r2"

    def test_teacher_not_double_booked_across_sections(self):
        snapshot = Snapshot(
            teachers=[teacher(max_workload=20)],
            courses=[course()],
            classrooms=[classroom(), classroom("r2")],
            sections=[section("s1"), section("s2")],
        )

        result = AllocationEngine(snapshot).run()

        assert [p for _, p, _ in result.schedules[0].iter_filled()] == [0, 1, 2]
        assert [p for _, p, _ in result.schedules[1].iter_filled()] == [3, 4, 5]

    def test_classroom_not_double_booked_across_sections(self):
        snapshot = Snapshot(
            teachers=[teacher("t1"), teacher("t2")],
            courses=[course(teachers=("t1",)), course("c2", teachers=("t2",))],
            classrooms=[classroom()],
            sections=[section("s1"), section("s2")],
        )

        result = AllocationEngine(snapshot).run()
        first, second = result.schedules

        # s1 holds r1 Monday 0-5; s2 has to wait for the room
        assert [p for _, p, _ in first.iter_filled()] == [0, 1, 2, 3, 4, 5]
        assert [(d, p) for d, p, _ in second.iter_filled()][0] == (0, 6)

    def test_unavailable_teacher_never_assigned(self):
        availability = WeeklyAvailability.from_free_slots([(2, 4), (4, 7)])
        snapshot = Snapshot(
            teachers=[teacher(availability=availability)],
            courses=[course()],
            classrooms=[classroom()],
            sections=[section()],
        )

        result = AllocationEngine(snapshot).run()

        assert [(d, p) for d, p, _ in result.schedules[0].iter_filled()] == [(2, 4), (4, 7)]
        assert result.allocations[0].shortfall == 1


class TestLabs:
    """Tests for double-period lab placement."""

    def lab_snapshot(self, **kwargs) -> Snapshot:
        data = {
            "teachers": [teacher()],
            "courses": [course(min_periods=2, max_periods=2, is_lab=True)],
            "classrooms": [classroom()],
            "sections": [section()],
        }
        data.update(kwargs)
        return Snapshot(**data)

    def test_lab_needs_two_consecutive_free_periods(self):
        availability = WeeklyAvailability.from_free_slots([(0, 0), (0, 2), (0, 3)])
        snapshot = self.lab_snapshot(teachers=[teacher(availability=availability)])

        result = AllocationEngine(snapshot).run()

        assert [(d, p) for d, p, _ in result.schedules[0].iter_filled()] == [(0, 2), (0, 3)]

    def test_lab_never_spans_days(self):
        availability = WeeklyAvailability.from_free_slots([(0, 7), (1, 0)])
        snapshot = self.lab_snapshot(teachers=[teacher(availability=availability)])

        result = AllocationEngine(snapshot).run()

        assert result.total_allocated == 0

    def test_lab_skips_teacher_busy_in_second_period(self):
        snapshot = self.lab_snapshot()
        engine = AllocationEngine(snapshot)
        state = AllocationState()
        state.teachers.claim("t1", 0, 1, "other")
        lab = snapshot.get_course("c1")

        placement = engine.find_placement(
            snapshot.sections[0], lab, snapshot.get_course_teachers(lab),
            WeeklySchedule(section_id="s1"), state,
        )

        assert (placement.day, placement.period, placement.span) == (0, 2, 2)

    def test_lab_skips_classroom_busy_in_second_period(self):
        snapshot = self.lab_snapshot(classrooms=[classroom("r1"), classroom("r2")])
        engine = AllocationEngine(snapshot)
        state = AllocationState()
        state.classrooms.claim("r1", 0, 1, "other")
        lab = snapshot.get_course("c1")

        placement = engine.find_placement(
            snapshot.sections[0], lab, snapshot.get_course_teachers(lab),
            WeeklySchedule(section_id="s1"), state,
        )

        assert (placement.day, placement.period) == (0, 0)
        assert placement.classroom.id == "r2"

    def test_lab_skips_section_slot_filled_in_second_period(self):
        snapshot = self.lab_snapshot()
        engine = AllocationEngine(snapshot)
        schedule = WeeklySchedule(section_id="s1")
        schedule.assign(0, 1, "other", "t9", "r9")
        lab = snapshot.get_course("c1")

        placement = engine.find_placement(
            snapshot.sections[0], lab, snapshot.get_course_teachers(lab), schedule, AllocationState(),
        )

        assert (placement.day, placement.period) == (0, 2)

    def test_lab_pair_shares_teacher_and_classroom(self):
        result = AllocationEngine(self.lab_snapshot()).run()
        schedule = result.schedules[0]

        assert schedule.slot(0, 0) == schedule.slot(0, 1)

    def test_lab_counts_two_toward_workload(self):
        snapshot = self.lab_snapshot(teachers=[teacher(max_workload=1)])

        result = AllocationEngine(snapshot).run()

        assert result.total_allocated == 0

    def test_lab_fits_exact_workload(self):
        snapshot = self.lab_snapshot(teachers=[teacher(max_workload=2)])

        result = AllocationEngine(snapshot).run()

        assert result.total_allocated == 2


class TestWorkload:
    """Tests for workload counting."""

    @pytest.fixture
    def two_section_snapshot(self) -> Snapshot:
        return Snapshot(
            teachers=[teacher(max_workload=4)],
            courses=[course()],
            classrooms=[classroom()],
            sections=[section("s1"), section("s2")],
        )

    def test_workload_accumulates_across_sections(self, two_section_snapshot):
        result = AllocationEngine(two_section_snapshot).run()

        assert [a.allocated for a in result.allocations] == [3, 1]

    def test_workload_per_section_scope(self, two_section_snapshot):
        config = EngineConfig(workload_scope=WorkloadScope.SECTION)

        result = AllocationEngine(two_section_snapshot, config).run()

        assert [a.allocated for a in result.allocations] == [3, 3]
        # Occupancy is still shared: s2 cannot reuse the teacher's Monday 0-2
        assert [p for _, p, _ in result.schedules[1].iter_filled()] == [3, 4, 5]

    def test_zero_workload_teacher_never_assigned(self):
        snapshot = Snapshot(
            teachers=[teacher("t1", max_workload=0), teacher("t2")],
            courses=[course(min_periods=1, max_periods=1, teachers=("t1", "t2"))],
            classrooms=[classroom()],
            sections=[section()],
        )

        result = AllocationEngine(snapshot).run()

        assert result.schedules[0].slot(0, 0).teacher_id == "t2"


class TestDayOrder:
    """Tests for day scan strategies."""

    def test_fixed_order_packs_monday(self, single_course_snapshot):
        result = AllocationEngine(single_course_snapshot, EngineConfig(day_order=DayOrder.FIXED)).run()

        assert [(d, p) for d, p, _ in result.schedules[0].iter_filled()] == [(0, 0), (0, 1), (0, 2)]

    def test_balanced_order_spreads_across_days(self, single_course_snapshot):
        result = AllocationEngine(single_course_snapshot, EngineConfig(day_order=DayOrder.BALANCED)).run()

        assert [(d, p) for d, p, _ in result.schedules[0].iter_filled()] == [(0, 0), (1, 0), (2, 0)]

    def test_balanced_day_order_ties_keep_weekday_order(self, single_course_snapshot):
        engine = AllocationEngine(single_course_snapshot, EngineConfig(day_order=DayOrder.BALANCED))
        schedule = WeeklySchedule(section_id="s1")
        schedule.assign(0, 0, "c1", "t1", "r1")
        schedule.assign(2, 0, "c1", "t1", "r1")

        assert engine.day_order(schedule) == [1, 3, 4, 0, 2]


class TestDeterminism:
    """Tests for repeatable runs."""

    def test_same_snapshot_same_schedules(self):
        snapshot = generate_medium_snapshot(seed=7)

        first = AllocationEngine(snapshot).run()
        second = AllocationEngine(snapshot).run()

        assert [s.model_dump_json() for s in first.schedules] == [s.model_dump_json() for s in second.schedules]

    def test_runs_do_not_share_state(self, single_course_snapshot):
        engine = AllocationEngine(single_course_snapshot)

        engine.run()
        second = engine.run()

        assert second.allocations[0].allocated == 3

    def test_one_schedule_per_section_in_order(self):
        snapshot = generate_medium_snapshot(seed=3)

        result = generate_schedules(snapshot)

        assert [s.section_id for s in result.schedules] == [s.id for s in snapshot.sections]
        assert result.schedule_for("s2") is result.schedules[1]
        assert result.schedule_for("missing") is None
