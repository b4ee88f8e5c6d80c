"""
Strength progression analytics.

All functions are pure and typed for testability: they read an
already-validated workout history and never mutate it.

Estimated 1RM uses a reps-plus-reserve adjusted Epley formula:

    e1RM = weight * (1 + (reps + rir) / 30)

Weekly aggregates bucket workouts into contiguous 7-day windows counted
from the query's start date:

    week_index = floor(days_between(start, workout_date) / 7)
"""

from dataclasses import dataclass
from datetime import date as date_type
from datetime import datetime, time
from typing import Sequence

from .config import (
    DAYS_PER_BUCKET,
    DEFAULT_ZERO_RIR_POLICY,
    E1RM_DIVISOR,
    UNKNOWN_EXERCISE_NAME,
)
from .models import Workout, WorkoutExercise, WorkoutSet

DateLike = datetime | date_type | str


@dataclass(frozen=True)
class ExerciseE1RMPoint:
    """Best estimated 1RM for one exercise in one workout."""

    date: DateLike
    exercise_id: str
    exercise_name: str
    estimated_1rm: float


@dataclass(frozen=True)
class WorkoutTopSet:
    """The heaviest set of one exercise in one workout."""

    workout_id: str
    date: DateLike
    exercise_id: str
    exercise_name: str
    set_index: int
    set: WorkoutSet


@dataclass(frozen=True)
class WeeklyExerciseVolumePoint:
    week_index: int
    exercise_id: str
    exercise_name: str
    total_volume: float


@dataclass(frozen=True)
class WeeklyExerciseFrequencyPoint:
    week_index: int
    exercise_id: str
    exercise_name: str
    sessions: int


# =============================================================================
# DATE HELPERS
# =============================================================================


def to_datetime(value: DateLike) -> datetime:
    """
    Coerce a date, datetime or ISO string to a datetime.

    Raises:
        ValueError: If a string is not ISO formatted
    """
    if isinstance(value, datetime):
        return value
    if isinstance(value, date_type):
        return datetime.combine(value, time())
    text = str(value).strip()
    if text.endswith("Z"):
        text = text[:-1] + "+00:00"
    return datetime.fromisoformat(text)


def start_of_day(value: DateLike) -> date_type:
    """Calendar day of a date-like value (time of day discarded)."""
    return to_datetime(value).date()


def _chronological_key(value: DateLike) -> float:
    return to_datetime(value).timestamp()


# =============================================================================
# ESTIMATED 1RM
# =============================================================================


def calculate_estimated_1rm(
    weight: float,
    reps: float,
    rir: float,
    zero_rir_policy: str = DEFAULT_ZERO_RIR_POLICY,
) -> float:
    """
    Estimate a one-rep max from a logged set.

    e1RM = weight * (1 + (reps + rir) / 30)

    A single at zero reps in reserve is the 1RM itself and returns weight.
    Otherwise, with the default "zero" policy, any non-positive weight,
    reps or rir yields 0, so to-failure sets do not feed the trend.
    With the "epley" policy rir == 0 uses the formula and only negative
    rir yields 0.

    Args:
        weight: Load in kg
        reps: Reps performed
        rir: Reps in reserve
        zero_rir_policy: "zero" or "epley"

    Returns:
        Estimated 1RM in kg, or 0.0
    """
    if weight > 0 and reps == 1 and rir == 0:
        return float(weight)
    if weight <= 0 or reps <= 0:
        return 0.0
    if zero_rir_policy == "epley":
        if rir < 0:
            return 0.0
    elif rir <= 0:
        return 0.0
    return weight * (1 + (reps + rir) / E1RM_DIVISOR)


def _exercise_sets(exercise: WorkoutExercise) -> list[WorkoutSet]:
    return list(exercise.sets or [])


def build_exercise_e1rm_series(
    workouts: Sequence[Workout],
    exercise_id: str,
    zero_rir_policy: str = DEFAULT_ZERO_RIR_POLICY,
) -> list[ExerciseE1RMPoint]:
    """
    Build the estimated-1RM time series of one exercise.

    Each workout contributes at most one point: the best e1RM across every
    set of every block matching exercise_id. Workouts whose best is 0 (or
    that do not contain the exercise) contribute nothing. The name comes
    from the last matching block scanned.

    Args:
        workouts: Workout history, any order
        exercise_id: Exercise to chart

    Returns:
        Points sorted ascending by date
    """
    points: list[ExerciseE1RMPoint] = []

    for workout in workouts:
        best = 0.0
        exercise_name = ""

        for exercise in workout.exercises:
            if exercise.exercise_id != exercise_id:
                continue
            exercise_name = exercise.name
            for s in _exercise_sets(exercise):
                e1rm = calculate_estimated_1rm(s.weight, s.reps, s.rir, zero_rir_policy)
                if e1rm > best:
                    best = e1rm

        if best > 0:
            points.append(
                ExerciseE1RMPoint(
                    date=workout.date,
                    exercise_id=exercise_id,
                    exercise_name=exercise_name or UNKNOWN_EXERCISE_NAME,
                    estimated_1rm=best,
                )
            )

    points.sort(key=lambda p: _chronological_key(p.date))
    return points


# =============================================================================
# TOP SETS
# =============================================================================


def build_workout_top_sets(workouts: Sequence[Workout]) -> list[WorkoutTopSet]:
    """
    Extract the top set of every exercise in every workout.

    The top set is the heaviest by weight; on equal weight the first
    occurrence (lowest set index) wins. Exercises without sets are skipped.

    Returns:
        One record per (workout, exercise) in encounter order
    """
    top_sets: list[WorkoutTopSet] = []

    for workout in workouts:
        for exercise in workout.exercises:
            sets = _exercise_sets(exercise)
            if not sets:
                continue

            best_index = 0
            for idx, s in enumerate(sets):
                if s.weight > sets[best_index].weight:
                    best_index = idx

            top_sets.append(
                WorkoutTopSet(
                    workout_id=workout.id,
                    date=workout.date,
                    exercise_id=exercise.exercise_id,
                    exercise_name=exercise.name,
                    set_index=best_index,
                    set=sets[best_index],
                )
            )

    return top_sets


# =============================================================================
# WEEKLY AGGREGATES
# =============================================================================


def week_index(start: date_type, day: date_type) -> int:
    """Zero-based 7-day bucket of ``day`` counted from ``start``."""
    return (day - start).days // DAYS_PER_BUCKET


def _workouts_in_window(
    workouts: Sequence[Workout],
    start_date: DateLike,
    end_date: DateLike,
) -> list[tuple[int, Workout]]:
    """Pair each workout inside [start, end] (inclusive, by day) with its week index."""
    start = start_of_day(start_date)
    end = start_of_day(end_date)
    if end < start:
        return []

    in_window: list[tuple[int, Workout]] = []
    for workout in workouts:
        day = start_of_day(workout.date)
        if day < start or day > end:
            continue
        in_window.append((week_index(start, day), workout))
    return in_window


def build_weekly_exercise_volume_by_week(
    workouts: Sequence[Workout],
    start_date: DateLike,
    end_date: DateLike,
) -> list[WeeklyExerciseVolumePoint]:
    """
    Sum weight × reps per exercise per week.

    RIR plays no part in volume. (week, exercise) pairs whose accumulated
    volume is <= 0 are left out rather than reported as zero.

    Args:
        workouts: Workout history
        start_date: First day of week 0 (inclusive)
        end_date: Last day of the window (inclusive)

    Returns:
        Points sorted by week_index; empty if end_date < start_date
    """
    totals: dict[tuple[int, str], float] = {}
    names: dict[tuple[int, str], str] = {}

    for idx, workout in _workouts_in_window(workouts, start_date, end_date):
        for exercise in workout.exercises:
            key = (idx, exercise.exercise_id)
            volume = sum(s.weight * s.reps for s in _exercise_sets(exercise))
            totals[key] = totals.get(key, 0.0) + volume
            names.setdefault(key, exercise.name)

    points = [
        WeeklyExerciseVolumePoint(
            week_index=idx,
            exercise_id=exercise_id,
            exercise_name=names[(idx, exercise_id)],
            total_volume=total,
        )
        for (idx, exercise_id), total in totals.items()
        if total > 0
    ]
    points.sort(key=lambda p: p.week_index)
    return points


def build_weekly_exercise_frequency_by_week(
    workouts: Sequence[Workout],
    start_date: DateLike,
    end_date: DateLike,
) -> list[WeeklyExerciseFrequencyPoint]:
    """
    Count, per exercise per week, the workouts in which the exercise appears.

    An exercise logged in two blocks of the same workout counts once.

    Returns:
        Points sorted by week_index; empty if end_date < start_date
    """
    sessions: dict[tuple[int, str], int] = {}
    names: dict[tuple[int, str], str] = {}

    for idx, workout in _workouts_in_window(workouts, start_date, end_date):
        seen_in_workout: set[str] = set()
        for exercise in workout.exercises:
            if exercise.exercise_id in seen_in_workout:
                continue
            seen_in_workout.add(exercise.exercise_id)
            key = (idx, exercise.exercise_id)
            sessions[key] = sessions.get(key, 0) + 1
            names.setdefault(key, exercise.name)

    points = [
        WeeklyExerciseFrequencyPoint(
            week_index=idx,
            exercise_id=exercise_id,
            exercise_name=names[(idx, exercise_id)],
            sessions=count,
        )
        for (idx, exercise_id), count in sessions.items()
    ]
    points.sort(key=lambda p: p.week_index)
    return points
