"""
Document serialization and structural validation.

Handles conversion between domain dataclasses and the camelCase documents
kept by the store. Every ``dict_to_*`` parser checks the shape of its input
and raises ValidationError carrying a stable code; ``validate`` wraps a
parser so callers get a ValidationResult instead of an exception.

The workout serializer functions normalize create/update payloads before
they reach storage: the date is truncated to local midnight and only the
stored field set is kept.
"""

import json
import re
from dataclasses import dataclass
from datetime import date as date_type
from datetime import datetime, time
from functools import partial
from typing import Any, Callable, Generic, Mapping, TypeVar

from ..core.config import (
    ALTERNATING_WEEK_COUNT,
    DAY_LABELS,
    DAYS_PER_WEEK,
    PROGRAM_TYPES,
    REST_DAY,
)
from ..core.errors import NotFoundError, ValidationError
from ..core.exercises import ExerciseEntry, allowed_units_for_category
from ..core.models import (
    AdvancedProgram,
    AlternatingProgram,
    Day,
    Program,
    ProgramDay,
    ProgramExercise,
    ProgramPhase,
    ProgramSet,
    ProgramWeek,
    SimpleProgram,
    Workout,
    WorkoutExercise,
    WorkoutInput,
    WorkoutSet,
)

T = TypeVar("T")

_MISSING_VARIANT_CODES = {
    "simple": ("week", "program.missingWeek"),
    "alternating": ("alternatingWeeks", "program.missingAlternatingWeeks"),
    "advanced": ("phases", "program.missingPhases"),
}


# =============================================================================
# FIELD VALIDATORS
# =============================================================================


def _mapping(data: Any, code: str, what: str) -> Mapping[str, Any]:
    if not isinstance(data, Mapping):
        raise ValidationError(code, f"{what} must be an object, got {type(data).__name__}")
    return data


def _string(data: Mapping[str, Any], key: str, code: str, *, non_empty: bool = False) -> str:
    value = data.get(key)
    if not isinstance(value, str):
        raise ValidationError(code, f"{key} must be a string, got {value!r}")
    if non_empty and not value.strip():
        raise ValidationError(code, f"{key} must not be empty")
    return value


def _optional_string(data: Mapping[str, Any], key: str, code: str, default: str | None = None) -> str | None:
    if data.get(key) is None:
        return default
    return _string(data, key, code)


def _bool(data: Mapping[str, Any], key: str, code: str, default: bool | None = None) -> bool:
    value = data.get(key)
    if value is None and default is not None:
        return default
    if not isinstance(value, bool):
        raise ValidationError(code, f"{key} must be a boolean, got {value!r}")
    return value


def _number(data: Mapping[str, Any], key: str, code: str) -> float:
    """Non-negative int or float (bool is rejected)."""
    value = data.get(key)
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        raise ValidationError(code, f"{key} must be a number, got {value!r}")
    if value != value or value < 0:
        raise ValidationError(code, f"{key} must be non-negative, got {value}")
    return value


def _whole(data: Mapping[str, Any], key: str, code: str) -> int:
    """Non-negative whole number; integral floats are accepted."""
    value = _number(data, key, code)
    if isinstance(value, float):
        if not value.is_integer():
            raise ValidationError(code, f"{key} must be a whole number, got {value}")
        return int(value)
    return value


def _list(data: Mapping[str, Any], key: str, code: str, *, non_empty: bool = False) -> list:
    value = data.get(key)
    if not isinstance(value, list):
        raise ValidationError(code, f"{key} must be a list, got {value!r}")
    if non_empty and not value:
        raise ValidationError(code, f"{key} must not be empty")
    return value


def parse_datetime(value: Any, code: str, what: str = "date") -> datetime:
    """
    Accept a datetime, a date, or an ISO 8601 string.

    Raises:
        ValidationError: If value is none of these
    """
    if isinstance(value, datetime):
        return value
    if isinstance(value, date_type):
        return datetime.combine(value, time())
    if isinstance(value, str):
        text = value.strip()
        if text.endswith("Z"):
            text = text[:-1] + "+00:00"
        try:
            return datetime.fromisoformat(text)
        except ValueError as e:
            raise ValidationError(code, f"Invalid {what}: {value!r}") from e
    raise ValidationError(code, f"{what} must be a date, got {value!r}")


def _stored_datetime(value: Any, code: str, what: str = "date") -> datetime:
    """Parse a stored timestamp as naive local time."""
    dt = parse_datetime(value, code, what)
    if dt.tzinfo is not None:
        dt = dt.astimezone().replace(tzinfo=None)
    return dt


def _optional_datetime(data: Mapping[str, Any], key: str, code: str) -> datetime | None:
    if data.get(key) is None:
        return None
    return _stored_datetime(data[key], code, key)


# =============================================================================
# PROGRAMS
# =============================================================================


def program_set_to_dict(s: ProgramSet) -> dict[str, Any]:
    return {"reps": s.reps, "rir": s.rir}


def dict_to_program_set(data: Any, code: str = "program.invalidData") -> ProgramSet:
    data = _mapping(data, code, "set")
    return ProgramSet(reps=_whole(data, "reps", code), rir=_whole(data, "rir", code))


def program_exercise_to_dict(exercise: ProgramExercise) -> dict[str, Any]:
    return {
        "id": exercise.id,
        "name": exercise.name,
        "isGlobal": exercise.is_global,
        "sets": [program_set_to_dict(s) for s in exercise.sets],
    }


def dict_to_program_exercise(data: Any, code: str = "program.invalidData") -> ProgramExercise:
    """Parse a program exercise; it must keep at least one set."""
    data = _mapping(data, code, "exercise")
    return ProgramExercise(
        id=_string(data, "id", code, non_empty=True),
        name=_string(data, "name", code),
        is_global=_bool(data, "isGlobal", code, default=False),
        sets=[dict_to_program_set(s, code) for s in _list(data, "sets", code, non_empty=True)],
    )


def day_to_dict(day: Day) -> Any:
    if not isinstance(day, ProgramDay):
        return REST_DAY
    return {
        "name": day.name,
        "exercises": [program_exercise_to_dict(ex) for ex in day.exercises],
    }


def dict_to_day(data: Any, code: str = "program.invalidData") -> Day:
    """Parse a day slot: the "rest" marker or an active day with exercises."""
    if data == REST_DAY:
        return REST_DAY
    data = _mapping(data, code, "day")
    name = data.get("name")
    if name not in DAY_LABELS:
        raise ValidationError(code, f"Day name must be one of {DAY_LABELS}, got {name!r}")
    return ProgramDay(
        name=name,
        exercises=[
            dict_to_program_exercise(ex, code)
            for ex in _list(data, "exercises", code, non_empty=True)
        ],
    )


def week_to_dict(week: ProgramWeek) -> dict[str, Any]:
    return {"days": [day_to_dict(d) for d in week.days]}


def dict_to_week(data: Any, code: str = "program.invalidData") -> ProgramWeek:
    data = _mapping(data, code, "week")
    days = _list(data, "days", code)
    if len(days) != DAYS_PER_WEEK:
        raise ValidationError(code, f"A week must have {DAYS_PER_WEEK} days, got {len(days)}")
    return ProgramWeek(days=[dict_to_day(d, code) for d in days])


def phase_to_dict(phase: ProgramPhase) -> dict[str, Any]:
    return {
        "name": phase.name,
        "description": phase.description,
        "weeks": [week_to_dict(w) for w in phase.weeks],
    }


def dict_to_phase(data: Any, code: str = "program.invalidData") -> ProgramPhase:
    data = _mapping(data, code, "phase")
    return ProgramPhase(
        name=_string(data, "name", code, non_empty=True),
        description=_optional_string(data, "description", code, default="") or "",
        weeks=[dict_to_week(w, code) for w in _list(data, "weeks", code, non_empty=True)],
    )


def program_to_dict(program: Program) -> dict[str, Any]:
    """
    Convert a Program to its stored document.

    Only the payload key of the program's own variant is written.
    Metadata keys are omitted while unset (freshly composed programs).
    """
    d: dict[str, Any] = {
        "name": program.name,
        "description": program.description,
        "type": program.type,
    }
    if isinstance(program, SimpleProgram):
        d["week"] = week_to_dict(program.week)
    elif isinstance(program, AlternatingProgram):
        d["alternatingWeeks"] = [week_to_dict(w) for w in program.alternating_weeks]
    elif isinstance(program, AdvancedProgram):
        d["phases"] = [phase_to_dict(p) for p in program.phases]
    else:
        raise ValueError(f"Unknown program type: {program.type!r}")

    if program.id is not None:
        d["id"] = program.id
    if program.created_at is not None:
        d["createdAt"] = program.created_at
    if program.updated_at is not None:
        d["updatedAt"] = program.updated_at
    d["isCustom"] = program.is_custom
    return d


def dict_to_program(data: Any, code: str = "program.invalidData") -> Program:
    """
    Convert a program document to the matching Program variant.

    Raises:
        ValidationError: If the document does not match the variant's shape
    """
    data = _mapping(data, code, "program")
    program_type = data.get("type")
    if program_type not in PROGRAM_TYPES:
        raise ValidationError(code, f"type must be one of {PROGRAM_TYPES}, got {program_type!r}")

    common: dict[str, Any] = {
        "name": _string(data, "name", code),
        "description": _string(data, "description", code),
        "id": _optional_string(data, "id", code),
        "created_at": _optional_datetime(data, "createdAt", code),
        "updated_at": _optional_datetime(data, "updatedAt", code),
        "is_custom": _bool(data, "isCustom", code, default=True),
    }

    if program_type == "simple":
        return SimpleProgram(week=dict_to_week(data.get("week"), code), **common)

    if program_type == "alternating":
        weeks = _list(data, "alternatingWeeks", code)
        if len(weeks) != ALTERNATING_WEEK_COUNT:
            raise ValidationError(
                code,
                f"alternatingWeeks must hold exactly {ALTERNATING_WEEK_COUNT} weeks, got {len(weeks)}",
            )
        return AlternatingProgram(
            alternating_weeks=(dict_to_week(weeks[0], code), dict_to_week(weeks[1], code)),
            **common,
        )

    phases = _list(data, "phases", code, non_empty=True)
    return AdvancedProgram(phases=[dict_to_phase(p, code) for p in phases], **common)


def validate_program_shape(raw: Any, stored: bool = True) -> Program:
    """
    Check a program document against its declared variant.

    Args:
        raw: Program document
        stored: True for documents read back from storage, False for
            inbound editor output

    Returns:
        The validated Program

    Raises:
        ValidationError: program.missingWeek / missingAlternatingWeeks /
            missingPhases when a stored document lacks its variant payload,
            otherwise program.invalidData (stored) or program.invalidInput
    """
    code = "program.invalidData" if stored else "program.invalidInput"
    if stored and isinstance(raw, Mapping) and isinstance(raw.get("type"), str):
        key, missing_code = _MISSING_VARIANT_CODES.get(raw["type"], (None, None))
        if key is not None and raw.get(key) is None:
            raise ValidationError(missing_code, f"{raw.get('type')} program has no {key}")
    return dict_to_program(raw, code)


# =============================================================================
# WORKOUTS
# =============================================================================


def workout_set_to_dict(s: WorkoutSet) -> dict[str, Any]:
    return {"weight": s.weight, "reps": s.reps, "rir": s.rir}


def dict_to_workout_set(data: Any, code: str = "workout.invalidData") -> WorkoutSet:
    data = _mapping(data, code, "set")
    return WorkoutSet(
        weight=_number(data, "weight", code),
        reps=_whole(data, "reps", code),
        rir=_whole(data, "rir", code),
    )


def workout_exercise_to_dict(exercise: WorkoutExercise) -> dict[str, Any]:
    """Shape an exercise block to exactly the stored field set."""
    return {
        "exerciseId": exercise.exercise_id,
        "name": exercise.name,
        "order": exercise.order,
        "sets": [workout_set_to_dict(s) for s in exercise.sets],
    }


def dict_to_workout_exercise(data: Any, code: str = "workout.invalidData") -> WorkoutExercise:
    data = _mapping(data, code, "exercise")
    order = data.get("order")
    if isinstance(order, bool) or not isinstance(order, int):
        raise ValidationError(code, f"order must be an integer, got {order!r}")
    return WorkoutExercise(
        exercise_id=_string(data, "exerciseId", code, non_empty=True),
        name=_string(data, "name", code),
        order=order,
        sets=[dict_to_workout_set(s, code) for s in _list(data, "sets", code)],
    )


def workout_input_to_dict(workout_input: WorkoutInput) -> dict[str, Any]:
    return {
        "date": workout_input.date,
        "notes": workout_input.notes,
        "exercises": [workout_exercise_to_dict(ex) for ex in workout_input.exercises],
    }


def dict_to_workout_input(data: Any, code: str = "workout.invalidInput") -> WorkoutInput:
    """
    Parse a create/update payload.

    A workout must contain at least one exercise.
    """
    if isinstance(data, WorkoutInput):
        data = workout_input_to_dict(data)
    data = _mapping(data, code, "workout")
    return WorkoutInput(
        date=parse_datetime(data.get("date"), code),
        notes=_optional_string(data, "notes", code),
        exercises=[
            dict_to_workout_exercise(ex, code)
            for ex in _list(data, "exercises", code, non_empty=True)
        ],
    )


def workout_to_dict(workout: Workout) -> dict[str, Any]:
    return {
        "id": workout.id,
        "date": workout.date,
        "notes": workout.notes,
        "exercises": [workout_exercise_to_dict(ex) for ex in workout.exercises],
        "validated": workout.validated,
        "createdAt": workout.created_at,
        "updatedAt": workout.updated_at,
    }


def dict_to_workout(data: Any, code: str = "workout.invalidData") -> Workout:
    """Convert a stored workout document to a Workout."""
    data = _mapping(data, code, "workout")
    day = _stored_datetime(data.get("date"), code)
    return Workout(
        id=_string(data, "id", code, non_empty=True),
        date=datetime(day.year, day.month, day.day),
        notes=_optional_string(data, "notes", code, default="") or "",
        exercises=[dict_to_workout_exercise(ex, code) for ex in _list(data, "exercises", code)],
        validated=_bool(data, "validated", code, default=False),
        created_at=_stored_datetime(data.get("createdAt"), code, "createdAt"),
        updated_at=_stored_datetime(data.get("updatedAt"), code, "updatedAt"),
    )


def validate_workout_shape(raw: Any) -> Workout:
    """
    Check a stored workout document.

    Raises:
        ValidationError: workout.invalidData
    """
    return dict_to_workout(raw, "workout.invalidData")


def normalize_workout_date(value: datetime | date_type | str) -> datetime:
    """
    Truncate a workout date to local midnight.

    Aware datetimes are first converted to local time so the stored day is
    the day the user saw.
    """
    dt = parse_datetime(value, "workout.invalidInput")
    if dt.tzinfo is not None:
        dt = dt.astimezone().replace(tzinfo=None)
    return datetime(dt.year, dt.month, dt.day)


def _serialize_payload(workout_input: WorkoutInput | Mapping[str, Any]) -> dict[str, Any]:
    parsed = dict_to_workout_input(workout_input)
    return {
        "date": normalize_workout_date(parsed.date),
        "notes": parsed.notes if parsed.notes is not None else "",
        "exercises": [workout_exercise_to_dict(ex) for ex in parsed.exercises],
    }


def serialize_workout_for_create(
    workout_input: WorkoutInput | Mapping[str, Any],
    now: datetime | None = None,
) -> dict[str, Any]:
    """
    Build the stored document for a new workout.

    Args:
        workout_input: Editor payload
        now: Timestamp for createdAt/updatedAt (defaults to datetime.now())

    Returns:
        Document with validated=False and createdAt == updatedAt

    Raises:
        ValidationError: workout.invalidInput
    """
    now = now or datetime.now()
    payload = _serialize_payload(workout_input)
    payload["validated"] = False
    payload["createdAt"] = now
    payload["updatedAt"] = now
    return payload


def _existing_field(existing: Workout | Mapping[str, Any], attr: str, key: str, default: Any) -> Any:
    if isinstance(existing, Workout):
        return getattr(existing, attr)
    value = existing.get(key)
    return default if value is None else value


def serialize_workout_for_update(
    existing: Workout | Mapping[str, Any] | None,
    workout_input: WorkoutInput | Mapping[str, Any],
    now: datetime | None = None,
) -> dict[str, Any]:
    """
    Build the replacement document for an existing workout.

    Every payload field is overwritten; createdAt and validated are copied
    forward from the existing record unchanged.

    Raises:
        NotFoundError: workout.notFound if existing is None
        ValidationError: workout.invalidInput
    """
    if existing is None:
        raise NotFoundError("workout.notFound")
    now = now or datetime.now()
    payload = _serialize_payload(workout_input)
    payload["validated"] = _existing_field(existing, "validated", "validated", False)
    payload["createdAt"] = _existing_field(existing, "created_at", "createdAt", now)
    payload["updatedAt"] = now
    return payload


def set_workout_validated(
    existing: Workout | Mapping[str, Any] | None,
    validated: bool,
    now: datetime | None = None,
) -> dict[str, Any]:
    """
    Build the partial update flipping a workout's validated flag.

    Only validated and updatedAt are touched.

    Raises:
        NotFoundError: workout.notFound if existing is None
    """
    if existing is None:
        raise NotFoundError("workout.notFound")
    return {"validated": validated, "updatedAt": now or datetime.now()}


# =============================================================================
# EXERCISES
# =============================================================================


def exercise_entry_to_dict(entry: ExerciseEntry) -> dict[str, Any]:
    d: dict[str, Any] = {
        "id": entry.id,
        "name": entry.name,
        "category": entry.category,
        "bodyPart": entry.body_part,
        "allowedUnits": list(entry.allowed_units),
        "source": entry.source,
    }
    if entry.description is not None:
        d["description"] = entry.description
    return d


def dict_to_exercise_entry(data: Any, code: str = "exercise.invalidData") -> ExerciseEntry:
    data = _mapping(data, code, "exercise")
    category = _optional_string(data, "category", code, default="") or ""
    units = data.get("allowedUnits")
    if units is None:
        units = allowed_units_for_category(category)
    elif not isinstance(units, list) or not all(isinstance(u, str) for u in units):
        raise ValidationError(code, f"allowedUnits must be a list of strings, got {units!r}")
    source = data.get("source", "user")
    if source not in ("library", "user"):
        raise ValidationError(code, f"source must be 'library' or 'user', got {source!r}")
    return ExerciseEntry(
        id=_string(data, "id", code, non_empty=True),
        name=_string(data, "name", code, non_empty=True),
        allowed_units=list(units),
        category=category,
        body_part=_optional_string(data, "bodyPart", code, default="") or "",
        description=_optional_string(data, "description", code),
        source=source,
    )


# =============================================================================
# GENERIC VALIDATION
# =============================================================================


@dataclass(frozen=True)
class ValidationResult(Generic[T]):
    """Outcome of validate(): either a value or the rejection."""

    ok: bool
    value: T | None = None
    error: ValidationError | None = None

    @property
    def code(self) -> str | None:
        return self.error.code if self.error is not None else None


def validate(candidate: Any, shape: Callable[[Any], T]) -> ValidationResult[T]:
    """
    Check a candidate against a shape without raising on mismatch.

    Args:
        candidate: Raw object (typically a decoded document)
        shape: One of the *_SHAPE parsers

    Returns:
        ValidationResult with ok=True and the parsed value, or ok=False
        and the ValidationError
    """
    try:
        return ValidationResult(ok=True, value=shape(candidate))
    except ValidationError as e:
        return ValidationResult(ok=False, error=e)


PROGRAM_SHAPE: Callable[[Any], Program] = validate_program_shape
PROGRAM_INPUT_SHAPE: Callable[[Any], Program] = partial(validate_program_shape, stored=False)
WORKOUT_SHAPE: Callable[[Any], Workout] = validate_workout_shape
WORKOUT_INPUT_SHAPE: Callable[[Any], WorkoutInput] = dict_to_workout_input
EXERCISE_SHAPE: Callable[[Any], ExerciseEntry] = dict_to_exercise_entry


# =============================================================================
# JSON ENCODING
# =============================================================================


def _jsonable(value: Any) -> Any:
    if isinstance(value, datetime):
        return value.isoformat()
    if isinstance(value, date_type):
        return value.isoformat()
    if isinstance(value, Mapping):
        return {k: _jsonable(v) for k, v in value.items()}
    if isinstance(value, (list, tuple)):
        return [_jsonable(v) for v in value]
    return value


def encode_document(document: Mapping[str, Any]) -> str:
    """
    Serialize a document to a single JSON line (datetimes as ISO strings).

    Returns:
        JSON string (single line, no trailing newline)
    """
    return json.dumps(_jsonable(document), separators=(",", ":"))


def decode_document(line: str) -> dict[str, Any]:
    """
    Deserialize a JSON line.

    Raises:
        ValidationError: store.invalidJson if the line is not a JSON object
    """
    try:
        data = json.loads(line.strip())
    except json.JSONDecodeError as e:
        raise ValidationError("store.invalidJson", str(e)) from e
    if not isinstance(data, dict):
        raise ValidationError("store.invalidJson", "document must be a JSON object")
    return data


# =============================================================================
# SET STRINGS
# =============================================================================

_SET_PATTERN = re.compile(r"^(\d+(?:\.\d+)?)\s*[xX×]\s*(\d+)\s*(?:@\s*(\d+))?$")


def parse_sets_string(sets_str: str, default_rir: int = 0) -> list[tuple[float, int, int]]:
    """
    Parse a comma-separated sets string.

    Each set is WEIGHTxREPS@RIR, e.g. "100x5@2, 102.5x5@1". The @RIR part
    may be omitted and then defaults to default_rir. Weight is returned as
    typed; unit conversion is left to the caller.

    Args:
        sets_str: Sets string to parse
        default_rir: RIR used when a set omits it

    Returns:
        List of (weight, reps, rir) tuples

    Raises:
        ValidationError: workout.invalidInput if any part is malformed
    """
    if not sets_str or not sets_str.strip():
        raise ValidationError("workout.invalidInput", "Sets string cannot be empty")

    sets: list[tuple[float, int, int]] = []
    for part in (p.strip() for p in sets_str.split(",")):
        if not part:
            continue
        match = _SET_PATTERN.match(part)
        if match is None:
            raise ValidationError(
                "workout.invalidInput",
                f"Invalid set {part!r}: expected WEIGHTxREPS@RIR, e.g. 100x5@2",
            )
        weight, reps, rir = match.groups()
        sets.append((float(weight), int(reps), int(rir) if rir is not None else default_rir))

    if not sets:
        raise ValidationError("workout.invalidInput", "Sets string cannot be empty")
    return sets
