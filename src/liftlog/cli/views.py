"""
CLI view formatters using Rich for pretty console output.

Handles table formatting and display of workouts, programs and progress.
"""

from datetime import timedelta

from rich.console import Console
from rich.table import Table

from ..core.exercises import ExerciseEntry
from ..core.models import Program, ProgramWeek, Workout, is_active_day
from ..core.strength import (
    ExerciseE1RMPoint,
    WeeklyExerciseFrequencyPoint,
    WeeklyExerciseVolumePoint,
    WorkoutTopSet,
    start_of_day,
)
from ..core.units import format_weight, weight_for_display

console = Console()


def _fmt_sets(sets: list, unit: str) -> str:
    """Compact set display, e.g. "100x5@2, 100x5@1"."""
    return ", ".join(
        f"{weight_for_display(s.weight, unit):g}x{s.reps}@{s.rir}" for s in sets
    )


def format_workout_table(workouts: list[Workout], unit: str = "kg") -> Table:
    """
    Create a Rich table listing workouts.

    Args:
        workouts: Workouts to display (already ordered)
        unit: Display weight unit

    Returns:
        Rich Table object
    """
    table = Table(title="Workouts")

    table.add_column("ID", style="dim")
    table.add_column("Date", style="cyan")
    table.add_column("Status", style="magenta")
    table.add_column("Exercises")
    table.add_column("Sets", justify="right")
    table.add_column("Volume", justify="right", style="bold")
    table.add_column("Notes", style="dim")

    for workout in workouts:
        sets_count = sum(len(ex.sets) for ex in workout.exercises)
        table.add_row(
            workout.id[:8],
            workout.date.strftime("%Y-%m-%d"),
            "done" if workout.validated else "planned",
            ", ".join(ex.name for ex in workout.exercises),
            str(sets_count),
            format_weight(workout.total_volume, unit),
            workout.notes or "",
        )

    return table


def print_workouts(workouts: list[Workout], unit: str = "kg") -> None:
    if not workouts:
        console.print("[yellow]No workouts recorded yet.[/yellow]")
        return
    console.print(format_workout_table(workouts, unit))


def print_workout(workout: Workout, unit: str = "kg") -> None:
    """Print one workout with every exercise block and its sets."""
    status = "[green]done[/green]" if workout.validated else "[yellow]planned[/yellow]"
    console.print(f"[bold]{workout.date:%Y-%m-%d}[/bold]  {status}  [dim]{workout.id}[/dim]")
    if workout.notes:
        console.print(f"  [dim]{workout.notes}[/dim]")
    for ex in sorted(workout.exercises, key=lambda e: e.order):
        console.print(f"  {ex.order}. [cyan]{ex.name}[/cyan]  {_fmt_sets(ex.sets, unit)}")


def print_exercises(entries: list[ExerciseEntry]) -> None:
    if not entries:
        console.print("[yellow]No exercises in the catalog yet.[/yellow]")
        return

    table = Table(title="Exercises")
    table.add_column("ID", style="dim")
    table.add_column("Name", style="cyan")
    table.add_column("Category")
    table.add_column("Body part")
    table.add_column("Units")
    table.add_column("Source", style="dim")

    for entry in entries:
        table.add_row(
            entry.id,
            entry.name,
            entry.category or "-",
            entry.body_part or "-",
            ", ".join(entry.allowed_units),
            entry.source,
        )
    console.print(table)


def print_programs(programs: list[Program]) -> None:
    if not programs:
        console.print("[yellow]No programs yet.[/yellow]")
        return

    table = Table(title="Programs")
    table.add_column("ID", style="dim")
    table.add_column("Name", style="cyan")
    table.add_column("Type", style="magenta")
    table.add_column("Custom", justify="center")
    table.add_column("Description", style="dim")

    for program in programs:
        table.add_row(
            program.id or "-",
            program.name,
            program.type,
            "yes" if program.is_custom else "no",
            program.description,
        )
    console.print(table)


def _print_week(week: ProgramWeek, title: str) -> None:
    console.print(f"  [bold]{title}[/bold]")
    for slot_index, day in enumerate(week.days, 1):
        if not is_active_day(day):
            console.print(f"    Day{slot_index}: [dim]rest[/dim]")
            continue
        console.print(f"    {day.name}:")  # type: ignore[union-attr]
        for ex in day.exercises:  # type: ignore[union-attr]
            sets = ", ".join(f"{s.reps}@{s.rir}" for s in ex.sets)
            console.print(f"      [cyan]{ex.name}[/cyan]  {sets}")


def print_program(program: Program) -> None:
    """Print a program week by week (sets shown as reps@rir)."""
    console.print(f"[bold cyan]{program.name}[/bold cyan]  [magenta]{program.type}[/magenta]")
    console.print(f"[dim]{program.description}[/dim]")

    if program.type == "simple":
        _print_week(program.week, "Week")  # type: ignore[union-attr]
    elif program.type == "alternating":
        week_a, week_b = program.alternating_weeks  # type: ignore[union-attr]
        _print_week(week_a, "Week A")
        _print_week(week_b, "Week B")
    else:
        for phase in program.phases:  # type: ignore[union-attr]
            console.print(f"[bold]{phase.name}[/bold] [dim]{phase.description}[/dim]")
            for i, week in enumerate(phase.weeks, 1):
                _print_week(week, f"Week {i}")


def print_e1rm_series(points: list[ExerciseE1RMPoint], unit: str = "kg") -> None:
    if not points:
        console.print("[yellow]No estimated 1RM data for this exercise.[/yellow]")
        return

    table = Table(title=f"Estimated 1RM: {points[-1].exercise_name}")
    table.add_column("Date", style="cyan")
    table.add_column("e1RM", justify="right", style="bold")

    best = max(p.estimated_1rm for p in points)
    for p in points:
        value = format_weight(round(p.estimated_1rm, 2), unit)
        if p.estimated_1rm == best:
            value = f"[green]{value}[/green]"
        table.add_row(start_of_day(p.date).isoformat(), value)
    console.print(table)


def print_top_sets(top_sets: list[WorkoutTopSet], unit: str = "kg") -> None:
    if not top_sets:
        console.print("[yellow]No sets recorded yet.[/yellow]")
        return

    table = Table(title="Top sets")
    table.add_column("Date", style="cyan")
    table.add_column("Exercise")
    table.add_column("Set #", justify="right", style="dim")
    table.add_column("Weight", justify="right", style="bold")
    table.add_column("Reps", justify="right")
    table.add_column("RIR", justify="right")

    for top in top_sets:
        table.add_row(
            start_of_day(top.date).isoformat(),
            top.exercise_name,
            str(top.set_index + 1),
            format_weight(top.set.weight, unit),
            str(top.set.reps),
            str(top.set.rir),
        )
    console.print(table)


def _week_label(start, week_index: int) -> str:
    return (start_of_day(start) + timedelta(days=7 * week_index)).isoformat()


def print_weekly_volume(points: list[WeeklyExerciseVolumePoint], start, unit: str = "kg") -> None:
    """
    Print weekly volume per exercise.

    Args:
        points: Output of build_weekly_exercise_volume_by_week
        start: Start date used for the buckets (labels each week)
        unit: Display weight unit
    """
    if not points:
        console.print("[yellow]No volume in this period.[/yellow]")
        return

    table = Table(title="Weekly volume")
    table.add_column("Week of", style="cyan")
    table.add_column("Exercise")
    table.add_column("Volume", justify="right", style="bold")

    for p in points:
        table.add_row(_week_label(start, p.week_index), p.exercise_name, format_weight(p.total_volume, unit))
    console.print(table)


def print_weekly_frequency(points: list[WeeklyExerciseFrequencyPoint], start) -> None:
    if not points:
        console.print("[yellow]No sessions in this period.[/yellow]")
        return

    table = Table(title="Weekly frequency")
    table.add_column("Week of", style="cyan")
    table.add_column("Exercise")
    table.add_column("Sessions", justify="right", style="bold")

    for p in points:
        table.add_row(_week_label(start, p.week_index), p.exercise_name, str(p.sessions))
    console.print(table)


def print_success(message: str) -> None:
    """Print a success message."""
    console.print(f"[green]{message}[/green]")


def print_error(message: str) -> None:
    """Print an error message."""
    console.print(f"[red]Error: {message}[/red]")


def print_warning(message: str) -> None:
    """Print a warning message."""
    console.print(f"[yellow]Warning: {message}[/yellow]")


def print_info(message: str) -> None:
    """Print an info message."""
    console.print(f"[blue]{message}[/blue]")


def confirm_action(message: str) -> bool:
    """
    Prompt user for confirmation.

    Args:
        message: Confirmation message

    Returns:
        True if confirmed, False otherwise
    """
    response = console.input(f"{message} [y/N]: ")
    return response.lower() in ("y", "yes")
