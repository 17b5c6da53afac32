"""
Output formatters for resolved schedules.

- Week grid: rich table of one section's week, periods as rows
- CSV: one row per filled slot, for spreadsheets
- JSON: resolved schedules with camelCase keys
"""

from __future__ import annotations

import csv
import json
from io import StringIO
from pathlib import Path
from typing import TYPE_CHECKING, Union

from rich.table import Table

from timetabler.data.models import DAY_NAMES, PERIODS_PER_DAY

if TYPE_CHECKING:
    from .schema import ResolvedSchedule, SlotOutput


DAY_ABBREV = ["Mon", "Tue", "Wed", "Thu", "Fri"]

CSV_COLUMNS = [
    "section_id",
    "section_name",
    "day",
    "day_name",
    "period",
    "course_code",
    "course_name",
    "is_lab",
    "teacher_id",
    "teacher_name",
    "classroom_id",
    "room_number",
]


# =============================================================================
# Week Grid
# =============================================================================

def format_slot_cell(slot: SlotOutput, show_teacher: bool = True, show_room: bool = True) -> str:
    """Render one slot as a (possibly multi-line) table cell."""
    if slot.is_empty:
        return "[dim]-[/dim]"

    lines = [f"[bold]{slot.course.code}[/bold]" + (" [magenta](lab)[/magenta]" if slot.course.is_lab else "")]
    if show_teacher and slot.teacher is not None:
        lines.append(slot.teacher.name)
    if show_room and slot.classroom is not None:
        lines.append(f"[cyan]{slot.classroom.room_number}[/cyan]")
    return "\n".join(lines)


def format_week_grid(
    schedule: ResolvedSchedule,
    show_teacher: bool = True,
    show_room: bool = True,
) -> Table:
    """
    Build a rich table of a section's week.

    Args:
        schedule: Resolved schedule of a section
        show_teacher: Include teacher names in cells
        show_room: Include room numbers in cells

    Returns:
        rich Table with one row per period and one column per day
    """
    title = schedule.section.name if schedule.section else schedule.section_id
    table = Table(title=title, show_header=True, header_style="bold cyan", show_lines=True)
    table.add_column("Period", style="dim", justify="center")
    for abbrev in DAY_ABBREV:
        table.add_column(abbrev, justify="center")

    for period in range(PERIODS_PER_DAY):
        row = [str(period + 1)]
        for day in schedule.days:
            row.append(format_slot_cell(day.periods[period], show_teacher, show_room))
        table.add_row(*row)

    return table


# =============================================================================
# CSV
# =============================================================================

def iter_csv_rows(schedules: list[ResolvedSchedule]):
    """Yield one dict per filled slot, in section/day/period order."""
    for schedule in schedules:
        for day in schedule.days:
            for slot in day.periods:
                if slot.is_empty:
                    continue
                yield {
                    "section_id": schedule.section_id,
                    "section_name": schedule.section.name if schedule.section else "",
                    "day": day.day,
                    "day_name": DAY_NAMES[day.day],
                    "period": slot.period,
                    "course_code": slot.course.code,
                    "course_name": slot.course.name or "",
                    "is_lab": slot.course.is_lab,
                    "teacher_id": slot.teacher.id if slot.teacher else "",
                    "teacher_name": slot.teacher.name if slot.teacher else "",
                    "classroom_id": slot.classroom.id if slot.classroom else "",
                    "room_number": slot.classroom.room_number if slot.classroom else "",
                }


def format_csv(schedules: list[ResolvedSchedule]) -> str:
    """Format filled slots of all schedules as CSV."""
    buffer = StringIO()
    writer = csv.DictWriter(buffer, fieldnames=CSV_COLUMNS)
    writer.writeheader()
    for row in iter_csv_rows(schedules):
        writer.writerow(row)
    return buffer.getvalue()


# =============================================================================
# JSON
# =============================================================================

def format_json(schedules: list[ResolvedSchedule], indent: int = 2) -> str:
    """Format resolved schedules as a JSON array."""
    return json.dumps([s.to_dict() for s in schedules], indent=indent)


# =============================================================================
# File Utilities
# =============================================================================

def save_csv(schedules: list[ResolvedSchedule], filepath: Union[str, Path]) -> None:
    """Save schedules as CSV."""
    path = Path(filepath)
    path.parent.mkdir(parents=True, exist_ok=True)
    with open(path, "w", newline="") as f:
        f.write(format_csv(schedules))


def save_json(schedules: list[ResolvedSchedule], filepath: Union[str, Path]) -> None:
    """Save schedules as JSON."""
    path = Path(filepath)
    path.parent.mkdir(parents=True, exist_ok=True)
    with open(path, "w") as f:
        f.write(format_json(schedules))
