"""
Workout export to CSV and JSON.

Dates are written at day granularity (YYYY-MM-DD); createdAt/updatedAt
keep their full ISO timestamps in JSON.
"""

import csv
import io
import json
from datetime import date as date_type
from datetime import datetime
from typing import Any, Sequence

from ..core.models import Workout
from .serializers import normalize_workout_date

EXPORT_FORMATS = ("csv", "json")

CSV_HEADERS = [
    "Workout ID",
    "Date",
    "Notes",
    "Validated",
    "Exercise Name",
    "Exercise ID",
    "Exercise Order",
    "Set Number",
    "Weight (kg)",
    "Reps",
    "RIR",
]


def _day(value: datetime | date_type | str) -> date_type:
    return normalize_workout_date(value).date()


def _number(value: float) -> str:
    """Render 100.0 as "100" and 102.5 as "102.5"."""
    if isinstance(value, float) and value.is_integer():
        return str(int(value))
    return str(value)


def filter_workouts_by_date_range(
    workouts: Sequence[Workout],
    from_date: datetime | date_type | str | None = None,
    to_date: datetime | date_type | str | None = None,
) -> list[Workout]:
    """
    Keep workouts dated within [from_date, to_date], compared by day.

    Either bound may be None (open-ended).
    """
    start = _day(from_date) if from_date is not None else None
    end = _day(to_date) if to_date is not None else None

    selected: list[Workout] = []
    for workout in workouts:
        day = _day(workout.date)
        if start is not None and day < start:
            continue
        if end is not None and day > end:
            continue
        selected.append(workout)
    return selected


def workouts_to_csv(workouts: Sequence[Workout]) -> str:
    """
    One CSV row per logged set, every cell quoted.

    Returns:
        CSV text, or "" when there are no workouts
    """
    if not workouts:
        return ""

    buffer = io.StringIO()
    writer = csv.writer(buffer, quoting=csv.QUOTE_ALL, lineterminator="\n")
    writer.writerow(CSV_HEADERS)
    for workout in workouts:
        day = _day(workout.date).isoformat()
        for exercise in workout.exercises:
            for set_number, s in enumerate(exercise.sets, 1):
                writer.writerow([
                    workout.id,
                    day,
                    workout.notes or "",
                    "Yes" if workout.validated else "No",
                    exercise.name,
                    exercise.exercise_id,
                    str(exercise.order),
                    str(set_number),
                    _number(s.weight),
                    str(s.reps),
                    str(s.rir),
                ])
    return buffer.getvalue().rstrip("\n")


def workout_to_export_dict(workout: Workout) -> dict[str, Any]:
    return {
        "id": workout.id,
        "date": _day(workout.date).isoformat(),
        "notes": workout.notes,
        "validated": workout.validated,
        "exercises": [
            {
                "exerciseId": ex.exercise_id,
                "name": ex.name,
                "order": ex.order,
                "sets": [{"weight": s.weight, "reps": s.reps, "rir": s.rir} for s in ex.sets],
            }
            for ex in workout.exercises
        ],
        "createdAt": workout.created_at.isoformat(),
        "updatedAt": workout.updated_at.isoformat(),
    }


def workouts_to_json(workouts: Sequence[Workout]) -> str:
    """Pretty-printed JSON array of workouts."""
    return json.dumps([workout_to_export_dict(w) for w in workouts], indent=2)
