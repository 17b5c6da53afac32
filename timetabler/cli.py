"""
Command-line interface for the timetabler.

Usage:
    python -m timetabler generate school.json --store timetables.json
    python -m timetabler list school.json
    python -m timetabler show school.json s1
    python -m timetabler validate school.json
    python -m timetabler check school.json
    python -m timetabler metrics school.json
    python -m timetabler export school.json -o timetables.csv
    python -m timetabler sample school.json --size medium --seed 42
"""

from __future__ import annotations

import json
from enum import Enum
from pathlib import Path
from typing import Optional

import typer
from rich.console import Console
from rich.panel import Panel
from rich.table import Table
from rich.text import Text

from .config import DayOrder, EngineConfig, WorkloadScope
from .data.generator import (
    generate_large_snapshot,
    generate_medium_snapshot,
    generate_small_snapshot,
    get_generation_stats,
    save_generated_snapshot,
)
from .data.loader import JsonSnapshotLoader, load_snapshot
from .data.models import NUM_DAYS, PERIODS_PER_DAY, Snapshot
from .errors import TimetablerError
from .log import configure_logging
from .output.formatters import format_csv, format_week_grid, save_csv, save_json
from .output.metrics import calculate_metrics
from .output.schema import GenerationOutput
from .service import TimetableService
from .store import JsonScheduleStore
from .verify import find_violations

# Create Typer app
app = typer.Typer(
    name="timetabler",
    help="Weekly section timetable generator using greedy first-fit allocation.",
    add_completion=False,
)

# Rich console for pretty output
console = Console()

DEFAULT_STORE = "timetables.json"
STORE_ENVVAR = "TIMETABLER_STORE"


class SampleSize(str, Enum):
    SMALL = "small"
    MEDIUM = "medium"
    LARGE = "large"


class ShowFormat(str, Enum):
    GRID = "grid"
    JSON = "json"
    CSV = "csv"


# =============================================================================
# Helper Functions
# =============================================================================

def load_input(input_path: Path) -> Snapshot:
    """Load and validate a snapshot file."""
    if not input_path.exists():
        console.print(f"[red]Error:[/red] Input file not found: {input_path}")
        raise typer.Exit(code=1)

    try:
        return load_snapshot(input_path)
    except TimetablerError as e:
        console.print(f"[red]Error loading input:[/red] {e}")
        raise typer.Exit(code=1)


def make_service(input_path: Path, store_path: Path, config: EngineConfig | None = None) -> TimetableService:
    """Build a service reading from a snapshot file and a JSON store."""
    if not input_path.exists():
        console.print(f"[red]Error:[/red] Input file not found: {input_path}")
        raise typer.Exit(code=1)
    return TimetableService(JsonSnapshotLoader(input_path), JsonScheduleStore(store_path), config)


def fail(error: Exception | str) -> None:
    """Print an error and exit with status 1."""
    console.print(f"[red]Error:[/red] {error}")
    raise typer.Exit(code=1)


def print_summary(output: GenerationOutput) -> None:
    """Print generation summary to console."""
    complete = output.allocated_periods >= output.requested_periods
    status_color = "green" if complete else "yellow"
    status_text = Text(
        "COMPLETE" if complete else "PARTIAL",
        style=f"bold {status_color}",
    )

    console.print(Panel(
        status_text,
        title="Schedules generated",
        subtitle=f"{output.count} sections",
    ))

    table = Table(title="Summary", show_header=False, box=None)
    table.add_column("Metric", style="cyan")
    table.add_column("Value", style="white")

    table.add_row("Schedules", str(output.count))
    table.add_row("Requested periods", str(output.requested_periods))
    table.add_row("Allocated periods", str(output.allocated_periods))
    table.add_row("Courses short", str(len(output.incomplete)))

    console.print(table)


def print_shortfalls(output: GenerationOutput) -> None:
    """Print courses that could not be fully allocated."""
    if not output.incomplete:
        return

    sections = {s.section_id: s.section.name if s.section else s.section_id for s in output.schedules}

    table = Table(title="Under-allocated courses", show_header=True, header_style="bold yellow")
    table.add_column("Section")
    table.add_column("Course")
    table.add_column("Allocated", justify="right")
    table.add_column("Requested", justify="right")
    table.add_column("Note")

    for allocation in output.incomplete:
        table.add_row(
            sections.get(allocation.section_id, allocation.section_id),
            allocation.course_code,
            str(allocation.allocated),
            str(allocation.requested),
            allocation.skipped_reason or "",
        )

    console.print(table)


# =============================================================================
# Commands
# =============================================================================

@app.command()
def generate(
    input_file: Path = typer.Argument(
        ...,
        help="Path to snapshot JSON file (teachers, courses, classrooms, sections)",
    ),
    store: Path = typer.Option(
        DEFAULT_STORE,
        "--store", "-s",
        envvar=STORE_ENVVAR,
        help="Path of the JSON schedule store (replaced on every run)",
    ),
    output: Optional[Path] = typer.Option(
        None,
        "--output", "-o",
        help="Also write the resolved generation output to this JSON file",
    ),
    day_order: DayOrder = typer.Option(
        DayOrder.FIXED,
        "--day-order",
        help="Day scan order: fixed (Monday first) or balanced (least-filled day first)",
    ),
    workload_scope: WorkloadScope = typer.Option(
        WorkloadScope.RUN,
        "--workload-scope",
        help="Count teacher workload across the whole run or per section",
    ),
    show: bool = typer.Option(
        False,
        "--show",
        help="Print the week grid of every section",
    ),
    verbose: bool = typer.Option(
        False,
        "--verbose", "-v",
        help="Log every placement",
    ),
) -> None:
    """
    Generate schedules for every section, replacing stored ones.

    Example:
        python -m timetabler generate school.json --store timetables.json
    """
    configure_logging(verbose)

    config = EngineConfig(day_order=day_order, workload_scope=workload_scope)
    service = make_service(input_file, store, config)

    console.print(f"\n[bold]Generating from:[/bold] {input_file}")

    try:
        result = service.generate()
    except TimetablerError as e:
        fail(e)

    console.print()
    print_summary(result)
    print_shortfalls(result)

    if show:
        for schedule in result.schedules:
            console.print(format_week_grid(schedule))

    if output:
        try:
            output.parent.mkdir(parents=True, exist_ok=True)
            with open(output, "w", encoding="utf-8") as f:
                f.write(result.to_json())
        except OSError as e:
            fail(f"Could not write output to {output}: {e}")
        console.print(f"\n[green]Output saved to:[/green] {output}")

    console.print(f"\n[green]Schedules stored in:[/green] {store}\n")


@app.command("list")
def list_schedules(
    input_file: Path = typer.Argument(..., help="Path to snapshot JSON file"),
    store: Path = typer.Option(DEFAULT_STORE, "--store", "-s", envvar=STORE_ENVVAR, help="Schedule store"),
) -> None:
    """
    List stored schedules.

    Example:
        python -m timetabler list school.json
    """
    service = make_service(input_file, store)

    try:
        schedules = service.list_schedules()
    except TimetablerError as e:
        fail(e)

    if not schedules:
        console.print("[yellow]No schedules stored. Run 'generate' first.[/yellow]")
        return

    total = NUM_DAYS * PERIODS_PER_DAY
    table = Table(title="Stored schedules", show_header=True, header_style="bold cyan")
    table.add_column("Section ID")
    table.add_column("Section")
    table.add_column("Students", justify="right")
    table.add_column("Filled", justify="right")

    for schedule in schedules:
        section = schedule.section
        table.add_row(
            schedule.section_id,
            section.name if section else "[red]unknown[/red]",
            str(section.student_count) if section else "-",
            f"{schedule.filled_count}/{total}",
        )

    console.print(table)


@app.command()
def show(
    input_file: Path = typer.Argument(..., help="Path to snapshot JSON file"),
    section_id: str = typer.Argument(..., help="Section ID"),
    store: Path = typer.Option(DEFAULT_STORE, "--store", "-s", envvar=STORE_ENVVAR, help="Schedule store"),
    format: ShowFormat = typer.Option(ShowFormat.GRID, "--format", "-f", help="grid, json or csv"),
) -> None:
    """
    Show the schedule of one section.

    Examples:
        python -m timetabler show school.json s1
        python -m timetabler show school.json s1 --format json
    """
    service = make_service(input_file, store)

    try:
        schedule = service.get_schedule(section_id)
    except TimetablerError as e:
        fail(e)

    if format == ShowFormat.JSON:
        typer.echo(schedule.to_json())
    elif format == ShowFormat.CSV:
        typer.echo(format_csv([schedule]), nl=False)
    else:
        console.print(format_week_grid(schedule))


@app.command()
def export(
    input_file: Path = typer.Argument(..., help="Path to snapshot JSON file"),
    output: Path = typer.Option(..., "--output", "-o", help="File to write (.csv or .json)"),
    store: Path = typer.Option(DEFAULT_STORE, "--store", "-s", envvar=STORE_ENVVAR, help="Schedule store"),
) -> None:
    """
    Export all stored schedules, resolved, to CSV or JSON.

    Example:
        python -m timetabler export school.json -o timetables.csv
    """
    service = make_service(input_file, store)

    try:
        schedules = service.list_schedules()
    except TimetablerError as e:
        fail(e)

    try:
        if output.suffix.lower() == ".csv":
            save_csv(schedules, output)
        else:
            save_json(schedules, output)
    except OSError as e:
        fail(f"Could not write {output}: {e}")

    console.print(f"[green]Exported {len(schedules)} schedules to:[/green] {output}")


@app.command()
def validate(
    input_file: Path = typer.Argument(..., help="Path to snapshot JSON file to validate"),
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Show detailed statistics"),
) -> None:
    """
    Validate a snapshot file.

    Checks for:
    - Valid JSON structure
    - Schema compliance
    - Reference integrity (course teacher IDs, duplicates)
    - Conditions that will leave courses under-allocated

    Example:
        python -m timetabler validate school.json
    """
    console.print(f"\n[bold]Validating:[/bold] {input_file}\n")

    if not input_file.exists():
        console.print(f"[red]Error:[/red] File not found: {input_file}")
        raise typer.Exit(code=1)

    # Step 1: JSON parsing
    console.print("[cyan]1. Checking JSON syntax...[/cyan]")
    try:
        with open(input_file, encoding="utf-8") as f:
            json.load(f)
        console.print("   [green]JSON syntax is valid[/green]")
    except (json.JSONDecodeError, UnicodeDecodeError) as e:
        console.print(f"   [red]Invalid JSON:[/red] {e}")
        raise typer.Exit(code=1)

    # Step 2: Schema validation
    console.print("[cyan]2. Validating against schema...[/cyan]")
    try:
        snapshot = load_snapshot(input_file)
        console.print("   [green]Schema validation passed[/green]")
    except TimetablerError as e:
        console.print("   [red]Schema validation failed:[/red]")
        for line in str(e).split("\n"):
            console.print(f"   {line}", markup=False)
        raise typer.Exit(code=1)

    # Step 3: Allocation readiness
    console.print("[cyan]3. Checking allocation readiness...[/cyan]")
    warnings = collect_warnings(snapshot)

    if warnings:
        console.print("   [yellow]Warnings found:[/yellow]")
        for w in warnings:
            console.print(f"   - {w}", markup=False)
    else:
        console.print("   [green]No allocation issues found[/green]")

    # Summary
    console.print("\n[bold]Summary:[/bold]")
    table = Table(show_header=False, box=None)
    table.add_column("Entity", style="cyan")
    table.add_column("Count", style="white")

    for name, value in snapshot.summary().items():
        table.add_row(name.replace("_", " ").capitalize(), str(value))

    console.print(table)

    if verbose:
        console.print("\n[bold]Supply and demand:[/bold]")
        for key, value in get_generation_stats(snapshot).items():
            console.print(f"  {key}: {value}", markup=False)

    console.print("\n[green]Validation complete.[/green]\n")


def collect_warnings(snapshot: Snapshot) -> list[str]:
    """Conditions under which the engine will leave periods unallocated."""
    warnings = []

    if any(count == 0 for count in snapshot.counts.values()):
        empty = [name for name, count in snapshot.counts.items() if count == 0]
        warnings.append(f"No {', '.join(empty)}: generation will be refused")

    largest_room = max((r.capacity for r in snapshot.classrooms), default=0)
    for section in snapshot.sections:
        if section.student_count > largest_room:
            warnings.append(
                f"Section '{section.name}' has {section.student_count} students "
                f"but the largest classroom seats {largest_room}"
            )

    for course in snapshot.courses:
        missing = snapshot.get_missing_teacher_ids(course)
        if missing:
            warnings.append(f"Course {course.code} lists unknown teachers: {', '.join(missing)}")

        if not snapshot.get_course_teachers(course):
            warnings.append(f"Course {course.code} has no teachers and will be skipped")
        elif course.is_lab and not any(
            t.availability.is_available_block(day, period, course.block_size)
            for t in snapshot.get_course_teachers(course)
            for day in range(NUM_DAYS)
            for period in range(PERIODS_PER_DAY - 1)
        ):
            warnings.append(f"Lab {course.code}: no teacher has two consecutive free periods")

    num_sections = len(snapshot.sections)
    for teacher in snapshot.teachers:
        courses = snapshot.get_teacher_courses(teacher.id)
        if len(courses) == 1 and courses[0].teachers == [teacher.id]:
            demand = courses[0].target_periods * num_sections
            if demand > teacher.max_workload:
                warnings.append(
                    f"Teacher '{teacher.name}' is the only teacher of {courses[0].code}: "
                    f"{demand} periods requested but max workload is {teacher.max_workload}"
                )

    return warnings


@app.command()
def check(
    input_file: Path = typer.Argument(..., help="Path to snapshot JSON file"),
    store: Path = typer.Option(DEFAULT_STORE, "--store", "-s", envvar=STORE_ENVVAR, help="Schedule store"),
    workload_scope: WorkloadScope = typer.Option(
        WorkloadScope.RUN,
        "--workload-scope",
        help="How workload caps were counted when generating",
    ),
) -> None:
    """
    Check stored schedules against every hard rule.

    Example:
        python -m timetabler check school.json
    """
    snapshot = load_input(input_file)

    try:
        schedules = JsonScheduleStore(store).list_schedules()
    except TimetablerError as e:
        fail(e)

    violations = find_violations(schedules, snapshot, workload_scope)

    if not violations:
        console.print(f"[green]All {len(schedules)} schedules satisfy every rule.[/green]")
        return

    table = Table(title="Violations", show_header=True, header_style="bold red")
    table.add_column("Kind")
    table.add_column("Details")
    for v in violations:
        table.add_row(v.kind.value, v.message)
    console.print(table)
    raise typer.Exit(code=1)


@app.command()
def metrics(
    input_file: Path = typer.Argument(..., help="Path to snapshot JSON file"),
    store: Path = typer.Option(DEFAULT_STORE, "--store", "-s", envvar=STORE_ENVVAR, help="Schedule store"),
    format: str = typer.Option("table", "--format", "-f", help="Output format: table or json"),
) -> None:
    """
    Show fill rate, teacher load and classroom usage of stored schedules.

    Examples:
        python -m timetabler metrics school.json
        python -m timetabler metrics school.json --format json
    """
    snapshot = load_input(input_file)

    try:
        schedules = JsonScheduleStore(store).list_schedules()
    except TimetablerError as e:
        fail(e)

    report = calculate_metrics(schedules, snapshot)

    if format == "json":
        typer.echo(json.dumps(report.to_dict(), indent=2))
        return

    console.print(Panel("[bold]Timetable Metrics[/bold]"))

    table = Table(show_header=False, box=None)
    table.add_column("Metric", style="cyan")
    table.add_column("Value")
    table.add_row("Filled slots", f"{report.filled_slots}/{report.total_slots} ({report.fill_rate}%)")
    if report.allocation_rate is not None:
        table.add_row("Allocated of requested", f"{report.allocation_rate}%")
    table.add_row("Courses short", str(len(report.unmet)))
    console.print(table)

    teachers = Table(title="Teacher load", show_header=True, header_style="bold cyan")
    teachers.add_column("Teacher")
    teachers.add_column("Assigned", justify="right")
    teachers.add_column("Max", justify="right")
    teachers.add_column("Use %", justify="right")
    for load in report.teacher_loads:
        color = "red" if load.assigned > load.max_workload else "white"
        teachers.add_row(load.name, f"[{color}]{load.assigned}[/{color}]", str(load.max_workload), str(load.utilization))
    console.print(teachers)

    rooms = Table(title="Classroom usage", show_header=True, header_style="bold cyan")
    rooms.add_column("Room")
    rooms.add_column("Periods used", justify="right")
    rooms.add_column("Use %", justify="right")
    for usage in report.classroom_usage:
        rooms.add_row(usage.room_number, str(usage.used), str(usage.utilization))
    console.print(rooms)


@app.command()
def sample(
    output: Path = typer.Argument(..., help="Path to write the generated snapshot JSON"),
    size: SampleSize = typer.Option(SampleSize.SMALL, "--size", help="small, medium or large"),
    seed: Optional[int] = typer.Option(None, "--seed", help="Random seed for reproducible data"),
) -> None:
    """
    Generate a sample snapshot file.

    Example:
        python -m timetabler sample school.json --size medium --seed 42
    """
    generators = {
        SampleSize.SMALL: generate_small_snapshot,
        SampleSize.MEDIUM: generate_medium_snapshot,
        SampleSize.LARGE: generate_large_snapshot,
    }
    snapshot = generators[size](seed=seed)
    save_generated_snapshot(snapshot, output)

    counts = snapshot.counts
    console.print(
        f"[green]Sample written to:[/green] {output} "
        f"({counts['teachers']} teachers, {counts['courses']} courses, "
        f"{counts['classrooms']} classrooms, {counts['sections']} sections)"
    )


# =============================================================================
# Main Entry Point
# =============================================================================

def main() -> None:
    """Main entry point for the CLI."""
    app()


if __name__ == "__main__":
    main()
