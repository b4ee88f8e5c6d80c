"""
Tests for workout export (date filtering, CSV, JSON).
"""

import json
from datetime import date, datetime

from liftlog.core.models import Workout, WorkoutExercise, WorkoutSet
from liftlog.io.export import (
    CSV_HEADERS,
    filter_workouts_by_date_range,
    workouts_to_csv,
    workouts_to_json,
)

CREATED = datetime(2024, 3, 1, 8, 30)


def _workout(workout_id: str, day: datetime, notes: str = "", validated: bool = True) -> Workout:
    return Workout(
        id=workout_id,
        date=day,
        notes=notes,
        exercises=[
            WorkoutExercise("bench-press", "Bench Press", 1, [WorkoutSet(100.0, 5, 2), WorkoutSet(102.5, 3, 1)]),
            WorkoutExercise("squat", "Squat", 2, [WorkoutSet(140.0, 5, 2)]),
        ],
        validated=validated,
        created_at=CREATED,
        updated_at=CREATED,
    )


class TestFilterByDateRange:
    """Inclusive by day; either bound optional."""

    def _workouts(self) -> list[Workout]:
        return [_workout(f"w{d}", datetime(2024, 3, d)) for d in (1, 5, 10)]

    def test_no_bounds_returns_everything(self):
        assert len(filter_workouts_by_date_range(self._workouts())) == 3

    def test_inclusive_bounds(self):
        selected = filter_workouts_by_date_range(self._workouts(), date(2024, 3, 5), date(2024, 3, 10))
        assert [w.id for w in selected] == ["w5", "w10"]

    def test_only_upper_bound(self):
        selected = filter_workouts_by_date_range(self._workouts(), None, "2024-03-05")
        assert [w.id for w in selected] == ["w1", "w5"]

    def test_time_of_day_on_bound_is_ignored(self):
        selected = filter_workouts_by_date_range(self._workouts(), None, datetime(2024, 3, 1, 0, 0))
        assert [w.id for w in selected] == ["w1"]


class TestCSV:
    """One quoted row per set under a fixed header row."""

    def test_empty_is_empty_string(self):
        assert workouts_to_csv([]) == ""

    def test_rows_per_set(self):
        text = workouts_to_csv([_workout("w1", datetime(2024, 3, 5), notes='said "light"', validated=False)])
        lines = text.split("\n")
        assert lines[0] == ",".join(f'"{h}"' for h in CSV_HEADERS)
        assert len(lines) == 4
        assert lines[1] == '"w1","2024-03-05","said ""light""","No","Bench Press","bench-press","1","1","100","5","2"'
        assert lines[2].endswith('"2","102.5","3","1"')
        assert lines[3].startswith('"w1","2024-03-05"')
        assert '"Squat","squat","2","1","140"' in lines[3]


class TestJSON:
    def test_dates_and_structure(self):
        data = json.loads(workouts_to_json([_workout("w1", datetime(2024, 3, 5))]))
        assert data[0]["date"] == "2024-03-05"
        assert data[0]["createdAt"] == "2024-03-01T08:30:00"
        assert data[0]["exercises"][0]["exerciseId"] == "bench-press"
        assert data[0]["exercises"][0]["sets"][1] == {"weight": 102.5, "reps": 3, "rir": 1}

    def test_empty_list(self):
        assert json.loads(workouts_to_json([])) == []
