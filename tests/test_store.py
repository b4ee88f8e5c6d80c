"""
Tests for the JSONL document store.
"""

import json
import logging
from datetime import date, datetime, timedelta

import pytest

from liftlog.core.errors import AlreadyExistsError, NotFoundError, ValidationError
from liftlog.io.store import DocumentStore

T0 = datetime(2024, 3, 10, 9, 0, 0)


class _Clock:
    """Deterministic clock for createdAt/updatedAt."""

    def __init__(self, start: datetime = T0):
        self.current = start

    def __call__(self) -> datetime:
        return self.current

    def advance(self, **kwargs) -> None:
        self.current += timedelta(**kwargs)


@pytest.fixture
def clock():
    return _Clock()


@pytest.fixture
def store(tmp_path, clock):
    s = DocumentStore(tmp_path / "data", now=clock)
    s.init()
    return s


# ---------------------------------------------------------------------------
# Shared helpers
# ---------------------------------------------------------------------------


def _workout_input(day: str, exercise_id: str = "bench-press", weight: float = 100) -> dict:
    return {
        "date": day,
        "notes": "",
        "exercises": [{
            "exerciseId": exercise_id,
            "name": exercise_id.replace("-", " ").title(),
            "order": 1,
            "sets": [{"weight": weight, "reps": 5, "rir": 2}],
        }],
    }


def _week() -> dict:
    day = {
        "name": "Day1",
        "exercises": [{"id": "bench-press", "name": "Bench Press", "sets": [{"reps": 5, "rir": 2}]}],
    }
    return {"days": [day] + ["rest"] * 6}


def _program_input(name: str = "Push", program_type: str = "simple") -> dict:
    doc = {"name": name, "description": f"{name} program", "type": program_type}
    if program_type == "simple":
        doc["week"] = _week()
    elif program_type == "alternating":
        doc["alternatingWeeks"] = [_week(), _week()]
    else:
        doc["phases"] = [{"name": "Base", "description": "", "weeks": [_week()]}]
    return doc


def _raw_lines(path) -> list[dict]:
    return [json.loads(line) for line in path.read_text().splitlines() if line.strip()]


# ===========================================================================
# Workouts
# ===========================================================================


class TestWorkouts:
    """Workout create/update/validate/delete."""

    def test_init_creates_files(self, store):
        assert store.exists()
        assert store.workouts_path.exists()
        assert store.programs_path.exists()
        assert store.exercises_path.exists()

    def test_create_and_get(self, store):
        created = store.create_workout(_workout_input("2024-03-05T18:30:00"))
        assert created.validated is False
        assert created.date == datetime(2024, 3, 5)
        assert created.created_at == created.updated_at == T0
        assert store.get_workout(created.id) == created
        assert len(_raw_lines(store.workouts_path)) == 1

    def test_create_rejects_empty_workout(self, store):
        payload = _workout_input("2024-03-05")
        payload["exercises"] = []
        with pytest.raises(ValidationError) as exc:
            store.create_workout(payload)
        assert exc.value.code == "workout.invalidInput"
        assert _raw_lines(store.workouts_path) == []

    def test_update_preserves_created_at_and_validated(self, store, clock):
        created = store.create_workout(_workout_input("2024-03-05"))
        clock.advance(hours=1)
        store.validate_workout(created.id)
        clock.advance(hours=1)

        updated = store.update_workout(created.id, _workout_input("2024-03-06", "squat", 140))
        assert updated.created_at == created.created_at
        assert updated.validated is True
        assert updated.updated_at == T0 + timedelta(hours=2)
        assert updated.date == datetime(2024, 3, 6)
        assert [ex.exercise_id for ex in updated.exercises] == ["squat"]

    def test_update_missing(self, store):
        with pytest.raises(NotFoundError) as exc:
            store.update_workout("nope", _workout_input("2024-03-05"))
        assert exc.value.code == "workout.notFound"

    def test_validate_and_unvalidate(self, store, clock):
        created = store.create_workout(_workout_input("2024-03-05"))
        clock.advance(minutes=5)
        assert store.validate_workout(created.id).validated is True
        unvalidated = store.unvalidate_workout(created.id)
        assert unvalidated.validated is False
        assert unvalidated.exercises == created.exercises
        assert unvalidated.updated_at == T0 + timedelta(minutes=5)

    def test_validate_missing(self, store):
        with pytest.raises(NotFoundError):
            store.validate_workout("nope")

    def test_delete(self, store):
        created = store.create_workout(_workout_input("2024-03-05"))
        store.delete_workout(created.id)
        assert store.get_workout(created.id) is None
        with pytest.raises(NotFoundError):
            store.delete_workout(created.id)

    def test_list_is_newest_first_and_skips_corrupt(self, store, caplog):
        store.create_workout(_workout_input("2024-03-01"))
        store.create_workout(_workout_input("2024-03-09"))
        store.create_workout(_workout_input("2024-03-05"))
        with open(store.workouts_path, "a") as f:
            f.write("not json\n")
            f.write(json.dumps({"id": "broken", "date": "2024-03-07"}) + "\n")

        with caplog.at_level(logging.WARNING, logger="liftlog.io.store"):
            workouts = store.get_workouts()
        assert [w.date.day for w in workouts] == [9, 5, 1]
        assert "broken" in caplog.text

    def test_offset_dates_sort_with_local_dates(self, store):
        store.create_workout(_workout_input("2024-03-05"))
        store.create_workout(_workout_input("2024-03-01"))
        with open(store.workouts_path, "a") as f:
            f.write(json.dumps({
                "id": "utc",
                "date": "2024-03-03T12:00:00Z",
                "notes": "",
                "exercises": _workout_input("2024-03-03")["exercises"],
                "validated": True,
                "createdAt": "2024-03-03T12:00:00Z",
                "updatedAt": "2024-03-03T12:00:00+02:00",
            }) + "\n")

        workouts = store.get_workouts()
        assert [w.date.day for w in workouts] == [5, 3, 1]
        assert all(w.date.tzinfo is None and w.date.hour == 0 for w in workouts)
        utc = store.get_workout("utc")
        assert utc.created_at.tzinfo is None and utc.updated_at.tzinfo is None
        assert store.get_latest_validated_workout().id == "utc"

    def test_single_read_of_corrupt_document_raises(self, store):
        with open(store.workouts_path, "a") as f:
            f.write(json.dumps({"id": "broken", "date": "2024-03-07"}) + "\n")
        with pytest.raises(ValidationError) as exc:
            store.get_workout("broken")
        assert exc.value.code == "workout.invalidData"

    def test_latest_validated(self, store):
        assert store.get_latest_validated_workout() is None
        first = store.create_workout(_workout_input("2024-03-01"))
        second = store.create_workout(_workout_input("2024-03-04"))
        store.create_workout(_workout_input("2024-03-08"))
        store.validate_workout(first.id)
        store.validate_workout(second.id)
        assert store.get_latest_validated_workout().id == second.id

    def test_earliest_non_validated_future(self, store):
        store.create_workout(_workout_input("2024-03-08"))  # past
        done_today = store.create_workout(_workout_input("2024-03-10"))
        store.validate_workout(done_today.id)
        later = store.create_workout(_workout_input("2024-03-15"))
        sooner = store.create_workout(_workout_input("2024-03-12"))

        today = date(2024, 3, 10)
        assert store.get_earliest_non_validated_future_workout(today).id == sooner.id
        store.delete_workout(sooner.id)
        assert store.get_earliest_non_validated_future_workout(today).id == later.id

    def test_earliest_includes_today(self, store):
        planned = store.create_workout(_workout_input("2024-03-10"))
        assert store.get_earliest_non_validated_future_workout(date(2024, 3, 10)).id == planned.id

    def test_todays_workout_prefers_planned(self, store):
        done = store.create_workout(_workout_input("2024-03-10"))
        store.validate_workout(done.id)
        planned = store.create_workout(_workout_input("2024-03-10", "squat"))
        today = date(2024, 3, 10)
        assert store.get_todays_workout(today).id == planned.id
        store.delete_workout(planned.id)
        assert store.get_todays_workout(today).id == done.id
        assert store.get_todays_workout(date(2024, 3, 11)) is None


# ===========================================================================
# Programs
# ===========================================================================


class TestPrograms:
    """Program persistence and library import."""

    def test_create_program(self, store):
        program = store.create_program(_program_input())
        assert program.id
        assert program.is_custom is True
        assert program.created_at == T0
        assert store.get_program(program.id) == program

    def test_create_rejects_invalid_input(self, store):
        doc = _program_input()
        del doc["week"]
        with pytest.raises(ValidationError) as exc:
            store.create_program(doc)
        assert exc.value.code == "program.invalidInput"

    def test_list_newest_created_first(self, store, clock):
        store.create_program(_program_input("Old"))
        clock.advance(days=1)
        store.create_program(_program_input("New"))
        assert [p.name for p in store.get_programs()] == ["New", "Old"]

    def test_update_switches_variant(self, store, clock):
        program = store.create_program(_program_input())
        clock.advance(hours=3)
        updated = store.update_program(program.id, _program_input("Push A/B", "alternating"))
        assert updated.type == "alternating"
        assert updated.created_at == program.created_at
        assert updated.updated_at == T0 + timedelta(hours=3)
        assert updated.is_custom is True

        raw = _raw_lines(store.programs_path)[0]
        assert "week" not in raw
        assert len(raw["alternatingWeeks"]) == 2

    def test_update_missing(self, store):
        with pytest.raises(NotFoundError) as exc:
            store.update_program("nope", _program_input())
        assert exc.value.code == "program.notFound"

    def test_delete(self, store):
        program = store.create_program(_program_input())
        store.delete_program(program.id)
        assert store.get_program(program.id) is None
        with pytest.raises(NotFoundError):
            store.delete_program(program.id)

    def test_corrupt_program(self, store):
        store.create_program(_program_input("Good"))
        with open(store.programs_path, "a") as f:
            f.write(json.dumps({"id": "bad", "name": "Bad", "description": "x", "type": "simple",
                                "createdAt": "2024-03-01T00:00:00"}) + "\n")
        with pytest.raises(ValidationError) as exc:
            store.get_program("bad")
        assert exc.value.code == "program.missingWeek"
        assert [p.name for p in store.get_programs()] == ["Good"]

    @pytest.mark.parametrize("bad_type", [["simple"], {"a": 1}])
    def test_non_string_type_is_skipped(self, store, bad_type):
        store.create_program(_program_input("Good"))
        with open(store.programs_path, "a") as f:
            f.write(json.dumps({"id": "bad", "name": "Bad", "description": "x", "type": bad_type}) + "\n")
        assert [p.name for p in store.get_programs()] == ["Good"]
        with pytest.raises(ValidationError) as exc:
            store.get_program("bad")
        assert exc.value.code == "program.invalidData"

    def test_offset_created_at_sorts_with_local(self, store):
        store.create_program(_program_input("Local"))
        with open(store.programs_path, "a") as f:
            f.write(json.dumps(dict(_program_input("Utc"), id="utc", createdAt="2024-01-01T00:00:00Z")) + "\n")
        programs = store.get_programs()
        assert [p.name for p in programs] == ["Local", "Utc"]
        assert programs[1].created_at.tzinfo is None

    def test_import_library_programs(self, store):
        library = [
            dict(_program_input("5x5"), id="lib-5x5"),
            dict(_program_input("PPL", "advanced"), id="lib-ppl"),
            {"id": "lib-broken", "name": "Broken", "description": "x", "type": "simple"},
        ]
        assert store.import_library_programs(library) == 2
        programs = {p.id: p for p in store.get_programs()}
        assert set(programs) == {"lib-5x5", "lib-ppl"}
        assert all(not p.is_custom for p in programs.values())

        assert store.import_library_programs(library) == 0
        assert len(_raw_lines(store.programs_path)) == 2


# ===========================================================================
# Exercises
# ===========================================================================


class TestExercises:
    """Exercise catalog entries."""

    def test_create_derives_id(self, store):
        entry = store.create_exercise("  Bench Press ", "Barbell", "Chest")
        assert entry.id == "bench-press"
        assert entry.name == "Bench Press"
        assert entry.allowed_units == ["load", "reps"]
        assert store.get_exercise("bench-press") == entry

    def test_duplicate_name(self, store):
        store.create_exercise("Bench Press")
        with pytest.raises(AlreadyExistsError) as exc:
            store.create_exercise("bench press")
        assert exc.value.code == "exercise.alreadyExists"

    def test_blank_name(self, store):
        with pytest.raises(ValidationError):
            store.create_exercise("   ")

    def test_get_missing(self, store):
        with pytest.raises(NotFoundError) as exc:
            store.get_exercise("deadlift")
        assert exc.value.code == "exercise.notFound"

    def test_list_sorted_by_name(self, store):
        store.create_exercise("Squat")
        store.create_exercise("bench press")
        assert [e.id for e in store.get_exercises()] == ["bench-press", "squat"]

    def test_update_keeps_id_and_source(self, store):
        store.create_exercise("Pull Up", "Barbell")
        updated = store.update_exercise("pull-up", category="Bodyweight", body_part="Back")
        assert updated.id == "pull-up"
        assert updated.source == "user"
        assert updated.body_part == "Back"
        assert updated.allowed_units == ["reps"]
        assert store.get_exercise("pull-up") == updated

    def test_update_unknown_field(self, store):
        store.create_exercise("Squat")
        with pytest.raises(ValidationError):
            store.update_exercise("squat", source="library")
