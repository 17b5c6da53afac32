"""
Sample snapshot generator for testing the allocation engine.

Generates institution data of configurable size: teachers with partial
availability, a course catalogue mixing theory and lab courses, classrooms
of varying capacity, and student sections.

Usage:
    from timetabler.data.generator import generate_sample_snapshot, generate_small_snapshot

    # Generate with custom config
    snapshot = generate_sample_snapshot(GeneratorConfig(num_teachers=30))

    # Quick test data
    small = generate_small_snapshot(seed=42)
"""

from __future__ import annotations

import json
import random
from dataclasses import dataclass
from pathlib import Path
from typing import Optional, Union

from .loader import snapshot_to_dict
from .models import (
    DAY_KEYS,
    NUM_DAYS,
    PERIODS_PER_DAY,
    Classroom,
    Course,
    Section,
    Snapshot,
    Teacher,
    WeeklyAvailability,
)


# =============================================================================
# Name Data
# =============================================================================

FIRST_NAMES = [
    "Asha", "Bilal", "Chen", "Divya", "Elena", "Farid", "Grace", "Hiro",
    "Imani", "Jonas", "Kavya", "Luca", "Maya", "Nikhil", "Olga", "Pedro",
    "Quinn", "Rhea", "Samir", "Tara", "Uma", "Victor", "Wen", "Yusuf",
]

LAST_NAMES = [
    "Rao", "Khan", "Li", "Iyer", "Petrova", "Haddad", "Okafor", "Tanaka",
    "Mensah", "Berg", "Menon", "Rossi", "Cohen", "Sharma", "Ivanova", "Silva",
    "Walsh", "Kapoor", "Nasser", "Das", "Bose", "Costa", "Zhou", "Demir",
]


# =============================================================================
# Course Catalogue
# =============================================================================

COURSE_CATALOGUE = [
    {"code": "MA101", "name": "Calculus", "min_periods": 4, "max_periods": 5},
    {"code": "PH101", "name": "Physics", "min_periods": 3, "max_periods": 4},
    {"code": "CS101", "name": "Programming Fundamentals", "min_periods": 3, "max_periods": 4},
    {"code": "EN101", "name": "Technical English", "min_periods": 2, "max_periods": 3},
    {"code": "CH101", "name": "Chemistry", "min_periods": 3, "max_periods": 3},
    {"code": "EE101", "name": "Basic Electrical Engineering", "min_periods": 3, "max_periods": 4},
    {"code": "ME101", "name": "Engineering Graphics", "min_periods": 2, "max_periods": 3},
    {"code": "HS101", "name": "Economics", "min_periods": 2, "max_periods": 2},
]

LAB_CATALOGUE = [
    {"code": "PH151", "name": "Physics Lab", "min_periods": 2, "max_periods": 2},
    {"code": "CS151", "name": "Programming Lab", "min_periods": 2, "max_periods": 4},
    {"code": "CH151", "name": "Chemistry Lab", "min_periods": 2, "max_periods": 2},
    {"code": "EE151", "name": "Electrical Workshop", "min_periods": 2, "max_periods": 2},
]


# =============================================================================
# Generator Configuration
# =============================================================================

@dataclass
class GeneratorConfig:
    """Configuration for snapshot generation.

    Note: nothing here guarantees every course fits. The engine leaves
    unplaceable periods unallocated; `get_generation_stats` reports the
    demand/supply ratios that make shortfalls likely.
    """
    # Entity counts
    num_teachers: int = 16
    num_sections: int = 6
    num_classrooms: int = 6
    num_courses: int = 6
    num_labs: int = 2

    # Teacher settings
    teachers_per_course_min: int = 1
    teachers_per_course_max: int = 3
    teacher_min_blocked_periods: int = 0
    teacher_max_blocked_periods: int = 8
    teacher_min_workload: int = 12
    teacher_max_workload: int = 30

    # Section settings
    min_students: int = 30
    max_students: int = 60

    # Classroom settings
    classroom_capacity_min: int = 40
    classroom_capacity_max: int = 72

    # Randomization
    seed: Optional[int] = None


# =============================================================================
# Generator Functions
# =============================================================================

def generate_sample_snapshot(config: GeneratorConfig | None = None) -> Snapshot:
    """
    Generate a sample snapshot.

    Args:
        config: Generator configuration (uses defaults if None)

    Returns:
        Snapshot with generated data
    """
    if config is None:
        config = GeneratorConfig()

    rng = random.Random(config.seed)

    teachers = _generate_teachers(config, rng)
    courses = _generate_courses(config, teachers, rng)
    classrooms = _generate_classrooms(config, rng)
    sections = _generate_sections(config, rng)

    return Snapshot(
        teachers=teachers,
        courses=courses,
        classrooms=classrooms,
        sections=sections,
    )


def generate_small_snapshot(seed: int | None = None) -> Snapshot:
    """
    Generate a small institution for quick testing.

    - 8 teachers
    - 3 sections
    - 3 classrooms
    - 4 theory courses + 1 lab
    """
    config = GeneratorConfig(
        num_teachers=8,
        num_sections=3,
        num_classrooms=3,
        num_courses=4,
        num_labs=1,
        seed=seed,
    )
    return generate_sample_snapshot(config)


def generate_medium_snapshot(seed: int | None = None) -> Snapshot:
    """
    Generate a medium institution for standard testing.

    - 20 teachers
    - 8 sections
    - 8 classrooms
    - 6 theory courses + 2 labs
    """
    config = GeneratorConfig(
        num_teachers=20,
        num_sections=8,
        num_classrooms=8,
        num_courses=6,
        num_labs=2,
        seed=seed,
    )
    return generate_sample_snapshot(config)


def generate_large_snapshot(seed: int | None = None) -> Snapshot:
    """
    Generate a large institution for stress testing.

    - 48 teachers
    - 24 sections
    - 20 classrooms
    - 8 theory courses + 4 labs
    """
    config = GeneratorConfig(
        num_teachers=48,
        num_sections=24,
        num_classrooms=20,
        num_courses=8,
        num_labs=4,
        teacher_max_workload=40,
        seed=seed,
    )
    return generate_sample_snapshot(config)


# =============================================================================
# Private Generator Helpers
# =============================================================================

def _generate_teachers(config: GeneratorConfig, rng: random.Random) -> list[Teacher]:
    """Generate teachers with randomly blocked periods."""
    teachers = []
    used_names: set[str] = set()

    for i in range(config.num_teachers):
        name = _unique_name(rng, used_names, i)
        blocked = rng.randint(config.teacher_min_blocked_periods, config.teacher_max_blocked_periods)

        teachers.append(Teacher(
            id=f"t{i+1}",
            name=name,
            availability=_generate_availability(blocked, rng),
            max_workload=rng.randint(config.teacher_min_workload, config.teacher_max_workload),
        ))

    return teachers


def _unique_name(rng: random.Random, used: set[str], index: int) -> str:
    """Pick an unused full name, falling back to a numbered one."""
    for _ in range(20):
        name = f"{rng.choice(FIRST_NAMES)} {rng.choice(LAST_NAMES)}"
        if name not in used:
            used.add(name)
            return name
    name = f"Teacher {index + 1}"
    used.add(name)
    return name


def _generate_availability(blocked_periods: int, rng: random.Random) -> WeeklyAvailability:
    """Full availability with `blocked_periods` random periods marked busy."""
    grid = {key: [True] * PERIODS_PER_DAY for key in DAY_KEYS}
    all_slots = [(day, period) for day in range(NUM_DAYS) for period in range(PERIODS_PER_DAY)]
    for day, period in rng.sample(all_slots, min(blocked_periods, len(all_slots))):
        grid[DAY_KEYS[day]][period] = False
    return WeeklyAvailability(**grid)


def _generate_courses(
    config: GeneratorConfig,
    teachers: list[Teacher],
    rng: random.Random,
) -> list[Course]:
    """Pick courses from the catalogue and assign candidate teachers."""
    picked = COURSE_CATALOGUE[:min(config.num_courses, len(COURSE_CATALOGUE))]
    picked_labs = LAB_CATALOGUE[:min(config.num_labs, len(LAB_CATALOGUE))]

    courses = []
    for data, is_lab in [(d, False) for d in picked] + [(d, True) for d in picked_labs]:
        num_teachers = rng.randint(config.teachers_per_course_min, config.teachers_per_course_max)
        candidates = rng.sample(teachers, min(num_teachers, len(teachers))) if teachers else []

        courses.append(Course(
            id=data["code"].lower(),
            code=data["code"],
            name=data["name"],
            min_periods=data["min_periods"],
            max_periods=data["max_periods"],
            is_lab=is_lab,
            teachers=[t.id for t in candidates],
        ))

    return courses


def _generate_classrooms(config: GeneratorConfig, rng: random.Random) -> list[Classroom]:
    """Generate classrooms numbered by floor."""
    classrooms = []
    for i in range(config.num_classrooms):
        floor = i // 10 + 1
        classrooms.append(Classroom(
            id=f"r{i+1}",
            room_number=f"{floor}{i % 10 + 1:02d}",
            capacity=rng.randint(config.classroom_capacity_min, config.classroom_capacity_max),
        ))
    return classrooms


def _generate_sections(config: GeneratorConfig, rng: random.Random) -> list[Section]:
    """Generate sections named A, B, C, ..."""
    sections = []
    for i in range(config.num_sections):
        letter = chr(ord("A") + i % 26)
        suffix = "" if i < 26 else str(i // 26 + 1)
        sections.append(Section(
            id=f"s{i+1}",
            name=f"Section {letter}{suffix}",
            student_count=rng.randint(config.min_students, config.max_students),
        ))
    return sections


# =============================================================================
# Utility Functions
# =============================================================================

def save_generated_snapshot(snapshot: Snapshot, filepath: Union[str, Path]) -> None:
    """
    Save a snapshot to a JSON file in the loader's camelCase format.

    Args:
        snapshot: Generated Snapshot
        filepath: Path to save JSON file
    """
    path = Path(filepath)
    path.parent.mkdir(parents=True, exist_ok=True)

    with open(path, "w") as f:
        json.dump(snapshot_to_dict(snapshot), f, indent=2)


def get_generation_stats(snapshot: Snapshot) -> dict:
    """
    Get supply/demand statistics about a snapshot.

    Args:
        snapshot: Snapshot to analyze

    Returns:
        Dictionary with statistics
    """
    week_periods = NUM_DAYS * PERIODS_PER_DAY
    requested = snapshot.total_requested_periods
    section_slots = len(snapshot.sections) * week_periods
    classroom_slots = len(snapshot.classrooms) * week_periods
    teacher_capacity = sum(t.max_workload for t in snapshot.teachers)

    largest_room = max((r.capacity for r in snapshot.classrooms), default=0)
    unseatable = [s.id for s in snapshot.sections if s.student_count > largest_room]

    def ratio(a: int, b: int) -> float:
        return round(a / b * 100, 1) if b > 0 else 0.0

    return {
        **snapshot.counts,
        "lab_courses": sum(1 for c in snapshot.courses if c.is_lab),
        "requested_periods": requested,
        "section_slots": section_slots,
        "classroom_slots": classroom_slots,
        "teacher_capacity": teacher_capacity,
        "section_utilization_percent": ratio(requested, section_slots),
        "classroom_utilization_percent": ratio(requested, classroom_slots),
        "teacher_utilization_percent": ratio(requested, teacher_capacity),
        "unseatable_sections": unseatable,
        "likely_complete": (
            requested <= classroom_slots
            and requested <= teacher_capacity
            and not unseatable
        ),
    }
