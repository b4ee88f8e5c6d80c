"""Progress commands: e1rm, top-sets, volume, frequency."""

import json
from datetime import date, timedelta
from typing import Annotated, Optional

import typer

from ...core.strength import (
    build_exercise_e1rm_series,
    build_weekly_exercise_frequency_by_week,
    build_weekly_exercise_volume_by_week,
    build_workout_top_sets,
)
from .. import views
from ..app import DataDirOption, JsonOption, app, get_settings, get_store, parse_day_option, today

# Default analytics window when --from is not given
DEFAULT_WINDOW_WEEKS = 4

ValidatedOnlyOption = Annotated[
    bool,
    typer.Option("--all/--validated-only", help="Include planned (not yet validated) workouts"),
]


def _window(from_date: str | None, to_date: str | None) -> tuple[date, date]:
    end = parse_day_option(to_date, "--to") or today()
    start = parse_day_option(from_date, "--from") or end - timedelta(weeks=DEFAULT_WINDOW_WEEKS) + timedelta(days=1)
    return start, end


def _history(data_dir, include_planned: bool):
    workouts = get_store(data_dir).get_workouts()
    if include_planned:
        return workouts
    return [w for w in workouts if w.validated]


@app.command()
def e1rm(
    exercise_id: Annotated[str, typer.Argument(help="Exercise ID, e.g. bench-press")],
    include_planned: ValidatedOnlyOption = False,
    data_dir: DataDirOption = None,
    json_out: JsonOption = False,
) -> None:
    """
    Show the estimated 1RM trend of one exercise (best set per workout).
    """
    settings = get_settings()
    points = build_exercise_e1rm_series(
        _history(data_dir, include_planned),
        exercise_id,
        zero_rir_policy=settings.zero_rir_policy,
    )

    if json_out:
        print(json.dumps({
            "exercise_id": exercise_id,
            "points": [
                {"date": p.date.strftime("%Y-%m-%d"), "estimated_1rm": round(p.estimated_1rm, 2)}
                for p in points
            ],
        }, indent=2))
        return
    views.print_e1rm_series(points, settings.weight_unit)


@app.command("top-sets")
def top_sets(
    exercise_id: Annotated[
        Optional[str],
        typer.Option("--exercise", "-e", help="Only this exercise"),
    ] = None,
    include_planned: ValidatedOnlyOption = False,
    data_dir: DataDirOption = None,
    json_out: JsonOption = False,
) -> None:
    """
    Show the heaviest set of each exercise in each workout.
    """
    settings = get_settings()
    records = build_workout_top_sets(_history(data_dir, include_planned))
    if exercise_id is not None:
        records = [r for r in records if r.exercise_id == exercise_id]

    if json_out:
        print(json.dumps([
            {
                "workout_id": r.workout_id,
                "date": r.date.strftime("%Y-%m-%d"),
                "exercise_id": r.exercise_id,
                "exercise_name": r.exercise_name,
                "set_index": r.set_index,
                "weight": r.set.weight,
                "reps": r.set.reps,
                "rir": r.set.rir,
            }
            for r in records
        ], indent=2))
        return
    views.print_top_sets(records, settings.weight_unit)


@app.command()
def volume(
    from_date: Annotated[
        Optional[str],
        typer.Option("--from", help=f"First day of week 0 (default: {DEFAULT_WINDOW_WEEKS} weeks ago)"),
    ] = None,
    to_date: Annotated[
        Optional[str],
        typer.Option("--to", help="Last day (default: today)"),
    ] = None,
    include_planned: ValidatedOnlyOption = False,
    data_dir: DataDirOption = None,
    json_out: JsonOption = False,
) -> None:
    """
    Show weekly volume (weight x reps) per exercise.
    """
    settings = get_settings()
    start, end = _window(from_date, to_date)
    points = build_weekly_exercise_volume_by_week(_history(data_dir, include_planned), start, end)

    if json_out:
        print(json.dumps({
            "start": start.isoformat(),
            "end": end.isoformat(),
            "weeks": [
                {"week_index": p.week_index, "exercise_id": p.exercise_id,
                 "exercise_name": p.exercise_name, "total_volume": p.total_volume}
                for p in points
            ],
        }, indent=2))
        return
    views.print_weekly_volume(points, start, settings.weight_unit)


@app.command()
def frequency(
    from_date: Annotated[
        Optional[str],
        typer.Option("--from", help=f"First day of week 0 (default: {DEFAULT_WINDOW_WEEKS} weeks ago)"),
    ] = None,
    to_date: Annotated[
        Optional[str],
        typer.Option("--to", help="Last day (default: today)"),
    ] = None,
    include_planned: ValidatedOnlyOption = False,
    data_dir: DataDirOption = None,
    json_out: JsonOption = False,
) -> None:
    """
    Show how many workouts per week included each exercise.
    """
    start, end = _window(from_date, to_date)
    points = build_weekly_exercise_frequency_by_week(_history(data_dir, include_planned), start, end)

    if json_out:
        print(json.dumps({
            "start": start.isoformat(),
            "end": end.isoformat(),
            "weeks": [
                {"week_index": p.week_index, "exercise_id": p.exercise_id,
                 "exercise_name": p.exercise_name, "sessions": p.sessions}
                for p in points
            ],
        }, indent=2))
        return
    views.print_weekly_frequency(points, start)
