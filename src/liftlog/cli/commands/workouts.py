"""Workout commands: log-workout, list-workouts, show-workout, next-workout, validate/unvalidate/delete, export."""

import json
from pathlib import Path
from typing import Annotated, Optional

import typer

from ...core.errors import CompositionError, NotFoundError, ServiceError, ValidationError
from ...core.models import WorkoutExercise, WorkoutInput, WorkoutSet, program_weeks
from ...core.prefill import apply_program_day
from ...core.units import lb_to_kg
from ...io.export import (
    EXPORT_FORMATS,
    filter_workouts_by_date_range,
    workout_to_export_dict,
    workouts_to_csv,
    workouts_to_json,
)
from ...io.serializers import parse_sets_string
from ...io.store import DocumentStore
from .. import views
from ..app import DataDirOption, JsonOption, app, get_settings, get_store, parse_day_option, today


def _exercise_name(store: DocumentStore, exercise_id: str) -> str:
    """Catalog name of an exercise, or its id when it is not in the catalog."""
    try:
        return store.get_exercise(exercise_id).name
    except ServiceError:
        return exercise_id


def _parse_exercise_option(
    store: DocumentStore,
    raw: str,
    order: int,
    unit: str,
) -> WorkoutExercise:
    """
    Parse one --exercise value: EXERCISE_ID=WEIGHTxREPS@RIR,...

    Weights are typed in the display unit and stored in kg.
    """
    exercise_id, sep, sets_str = raw.partition("=")
    if not sep or not exercise_id.strip():
        raise ValidationError(
            "workout.invalidInput",
            f"Invalid exercise {raw!r}: expected EXERCISE_ID=WEIGHTxREPS@RIR,...",
        )
    exercise_id = exercise_id.strip()
    sets = [
        WorkoutSet(weight=lb_to_kg(w) if unit == "lb" else w, reps=reps, rir=rir)
        for w, reps, rir in parse_sets_string(sets_str)
    ]
    return WorkoutExercise(
        exercise_id=exercise_id,
        name=_exercise_name(store, exercise_id),
        order=order,
        sets=sets,
    )


@app.command("log-workout")
def log_workout(
    date: Annotated[
        Optional[str],
        typer.Option("--date", "-d", help="Workout date (YYYY-MM-DD, default: today)"),
    ] = None,
    exercise: Annotated[
        Optional[list[str]],
        typer.Option(
            "--exercise", "-e",
            help="EXERCISE_ID=WEIGHTxREPS@RIR,... (repeat for several exercises)",
        ),
    ] = None,
    program_id: Annotated[
        Optional[str],
        typer.Option("--program", help="Pre-fill from this program's day (weights start at 0)"),
    ] = None,
    week: Annotated[
        int,
        typer.Option("--week", help="Program week (1-based) used with --program"),
    ] = 1,
    day: Annotated[
        Optional[int],
        typer.Option("--day", help="Program day slot 1-7 used with --program"),
    ] = None,
    notes: Annotated[
        Optional[str],
        typer.Option("--notes", "-n", help="Workout notes"),
    ] = None,
    done: Annotated[
        bool,
        typer.Option("--done", help="Mark the workout as performed right away"),
    ] = False,
    data_dir: DataDirOption = None,
    json_out: JsonOption = False,
) -> None:
    """
    Log a workout (or plan one).

      liftlog log-workout --date 2026-02-18 \\
        -e "bench-press=100x5@2,100x5@1" -e "squat=140x5@2"

      liftlog log-workout --program <id> --week 1 --day 3
    """
    settings = get_settings()
    store = get_store(data_dir)
    workout_day = parse_day_option(date, "--date") or today()

    try:
        if program_id is not None:
            if exercise:
                views.print_error("Use either --exercise or --program, not both")
                raise typer.Exit(1)
            if day is None:
                views.print_error("--day is required with --program")
                raise typer.Exit(1)
            program = store.get_program(program_id)
            if program is None:
                raise NotFoundError("program.notFound", program_id)
            weeks = program_weeks(program)
            if not 1 <= week <= len(weeks) or not 1 <= day <= 7:
                views.print_error(f"Program has {len(weeks)} week(s) of 7 days")
                raise typer.Exit(1)
            workout_input = apply_program_day(weeks[week - 1].days[day - 1], workout_day, notes)
        else:
            exercises = [
                _parse_exercise_option(store, raw, order, settings.weight_unit)
                for order, raw in enumerate(exercise or [], 1)
            ]
            workout_input = WorkoutInput(date=workout_day, exercises=exercises, notes=notes)

        workout = store.create_workout(workout_input)
        if done:
            workout = store.validate_workout(workout.id)
    except (ServiceError, CompositionError) as e:
        views.print_error(f"{e.code}: {e}")
        raise typer.Exit(1)

    if json_out:
        print(json.dumps(workout_to_export_dict(workout), indent=2))
        return

    views.print_success(f"Logged workout {workout.id} on {workout.date:%Y-%m-%d}")
    views.print_workout(workout, settings.weight_unit)


@app.command("list-workouts")
def list_workouts(
    from_date: Annotated[
        Optional[str],
        typer.Option("--from", help="First day to include (YYYY-MM-DD)"),
    ] = None,
    to_date: Annotated[
        Optional[str],
        typer.Option("--to", help="Last day to include (YYYY-MM-DD)"),
    ] = None,
    data_dir: DataDirOption = None,
    json_out: JsonOption = False,
) -> None:
    """
    List workouts, newest first.
    """
    settings = get_settings()
    store = get_store(data_dir)
    workouts = filter_workouts_by_date_range(
        store.get_workouts(),
        parse_day_option(from_date, "--from"),
        parse_day_option(to_date, "--to"),
    )

    if json_out:
        print(json.dumps([workout_to_export_dict(w) for w in workouts], indent=2))
        return

    views.print_workouts(workouts, settings.weight_unit)


@app.command("show-workout")
def show_workout(
    workout_id: Annotated[str, typer.Argument(help="Workout ID")],
    data_dir: DataDirOption = None,
    json_out: JsonOption = False,
) -> None:
    """
    Show one workout with all of its sets.
    """
    store = get_store(data_dir)
    try:
        workout = store.get_workout(workout_id)
    except ValidationError as e:
        views.print_error(f"{e.code}: {e}")
        raise typer.Exit(1)
    if workout is None:
        views.print_error(f"Workout not found: {workout_id}")
        raise typer.Exit(1)

    if json_out:
        print(json.dumps(workout_to_export_dict(workout), indent=2))
        return
    views.print_workout(workout, get_settings().weight_unit)


@app.command("next-workout")
def next_workout(
    data_dir: DataDirOption = None,
    json_out: JsonOption = False,
) -> None:
    """
    Show today's workout, or else the next planned one.
    """
    store = get_store(data_dir)
    workout = store.get_todays_workout(today()) or store.get_earliest_non_validated_future_workout(today())

    if json_out:
        print(json.dumps(workout_to_export_dict(workout) if workout else None, indent=2))
        return

    if workout is None:
        views.print_info("Nothing planned. Log a workout with 'log-workout'.")
        latest = store.get_latest_validated_workout()
        if latest is not None:
            views.print_info(f"Last completed workout: {latest.date:%Y-%m-%d}")
        return
    views.print_workout(workout, get_settings().weight_unit)


def _set_validated(workout_id: str, data_dir: Path | None, validated: bool) -> None:
    store = get_store(data_dir)
    try:
        workout = store.validate_workout(workout_id) if validated else store.unvalidate_workout(workout_id)
    except ServiceError as e:
        views.print_error(f"{e.code}: {e}")
        raise typer.Exit(1)
    state = "done" if workout.validated else "planned"
    views.print_success(f"Workout {workout.id} ({workout.date:%Y-%m-%d}) marked {state}")


@app.command("validate-workout")
def validate_workout(
    workout_id: Annotated[str, typer.Argument(help="Workout ID")],
    data_dir: DataDirOption = None,
) -> None:
    """
    Mark a workout as performed.
    """
    _set_validated(workout_id, data_dir, True)


@app.command("unvalidate-workout")
def unvalidate_workout(
    workout_id: Annotated[str, typer.Argument(help="Workout ID")],
    data_dir: DataDirOption = None,
) -> None:
    """
    Mark a workout as planned again.
    """
    _set_validated(workout_id, data_dir, False)


@app.command("delete-workout")
def delete_workout(
    workout_id: Annotated[str, typer.Argument(help="Workout ID")],
    force: Annotated[
        bool,
        typer.Option("--force", "-f", help="Skip confirmation prompt"),
    ] = False,
    data_dir: DataDirOption = None,
) -> None:
    """
    Delete a workout by ID.
    """
    store = get_store(data_dir)
    if not force and not views.confirm_action(f"Delete workout {workout_id}?"):
        views.print_info("Cancelled.")
        return
    try:
        store.delete_workout(workout_id)
    except NotFoundError as e:
        views.print_error(f"{e.code}: {workout_id}")
        raise typer.Exit(1)
    views.print_success(f"Deleted workout {workout_id}")


@app.command()
def export(
    fmt: Annotated[
        str,
        typer.Option("--format", "-f", help="Export format: csv | json"),
    ] = "csv",
    from_date: Annotated[
        Optional[str],
        typer.Option("--from", help="First day to include (YYYY-MM-DD)"),
    ] = None,
    to_date: Annotated[
        Optional[str],
        typer.Option("--to", help="Last day to include (YYYY-MM-DD)"),
    ] = None,
    output: Annotated[
        Optional[Path],
        typer.Option("--output", "-o", help="Write to this file instead of stdout"),
    ] = None,
    data_dir: DataDirOption = None,
) -> None:
    """
    Export workouts as CSV (one row per set) or JSON.
    """
    if fmt not in EXPORT_FORMATS:
        views.print_error(f"Format must be one of: {', '.join(EXPORT_FORMATS)}")
        raise typer.Exit(1)

    store = get_store(data_dir)
    workouts = filter_workouts_by_date_range(
        store.get_workouts(),
        parse_day_option(from_date, "--from"),
        parse_day_option(to_date, "--to"),
    )
    if not workouts:
        views.print_error("No workouts found in the selected date range")
        raise typer.Exit(1)

    content = workouts_to_csv(workouts) if fmt == "csv" else workouts_to_json(workouts)
    if output is None:
        print(content)
        return

    output.write_text(content + "\n", encoding="utf-8")
    views.print_success(f"Exported {len(workouts)} workout(s) to {output}")
