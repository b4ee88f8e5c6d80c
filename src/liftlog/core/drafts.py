"""
Mutable editor state for programs.

Draft types mirror the program shape but hold raw text for set values and
carry ephemeral ids so the editor can reorder and remove rows. They are
only ever turned into a Program by composer.compose_program.

Edit operations mutate drafts in place; the editor applies them one at a
time in response to discrete user actions.
"""

import uuid
from dataclasses import dataclass, field
from typing import Any, Literal, Union

from .config import DAYS_PER_WEEK, REST_DAY
from .errors import EditRejected
from .exercises import ExerciseEntry
from .models import Program, ProgramExercise, ProgramWeek, is_active_day

SetField = Literal["reps", "rir"]


def new_draft_id() -> str:
    """Return a fresh ephemeral id for a draft row."""
    return uuid.uuid4().hex[:12]


@dataclass
class SetDraft:
    """One set row; values are text as typed into the editor."""

    id: str = field(default_factory=new_draft_id)
    reps: str = ""
    rir: str = ""


@dataclass
class ExerciseDraft:
    exercise_id: str
    name: str
    is_global: bool = False
    sets: list[SetDraft] = field(default_factory=list)
    id: str = field(default_factory=new_draft_id)


@dataclass
class DayDraft:
    exercises: list[ExerciseDraft] = field(default_factory=list)


DaySlotDraft = Union[DayDraft, Literal["rest"]]


def _rest_week() -> list[DaySlotDraft]:
    return [REST_DAY] * DAYS_PER_WEEK


@dataclass
class WeekDraft:
    name: str = ""
    days: list[DaySlotDraft] = field(default_factory=_rest_week)
    id: str = field(default_factory=new_draft_id)


@dataclass
class PhaseDraft:
    name: str = ""
    description: str = ""
    weeks: list[WeekDraft] = field(default_factory=list)
    id: str = field(default_factory=new_draft_id)


@dataclass
class ProgramDraft:
    """
    Whole editor state.

    Only the collection matching ``program_type`` is read at composition
    time; the others are kept so switching type in the editor is lossless.
    """

    name: str = ""
    description: str = ""
    program_type: str = "simple"
    weeks: list[WeekDraft] = field(default_factory=list)
    alternating_weeks: list[WeekDraft] = field(default_factory=list)
    phases: list[PhaseDraft] = field(default_factory=list)


# =============================================================================
# EDIT OPERATIONS
# =============================================================================


def _active_day(week: WeekDraft, day_index: int) -> DayDraft:
    if not 0 <= day_index < len(week.days):
        raise IndexError(f"Day index {day_index} out of range (0-{len(week.days) - 1})")
    day = week.days[day_index]
    if not isinstance(day, DayDraft):
        raise EditRejected(
            "program.dayIsRest",
            f"Day {day_index + 1} is a rest day",
            subject=f"Day{day_index + 1}",
        )
    return day


def _find_exercise(day: DayDraft, exercise_draft_id: str) -> ExerciseDraft:
    for ex in day.exercises:
        if ex.id == exercise_draft_id:
            return ex
    raise KeyError(exercise_draft_id)


def set_day_active(week: WeekDraft, day_index: int, active: bool) -> None:
    """
    Toggle a day slot between rest and active.

    Activating an already-active day keeps its exercises; resting a day
    drops them.
    """
    if not 0 <= day_index < len(week.days):
        raise IndexError(f"Day index {day_index} out of range (0-{len(week.days) - 1})")
    current = week.days[day_index]
    if active:
        if not isinstance(current, DayDraft):
            week.days[day_index] = DayDraft()
    else:
        week.days[day_index] = REST_DAY


def add_exercise(week: WeekDraft, day_index: int, entry: ExerciseEntry) -> ExerciseDraft:
    """Append a catalog exercise to an active day, starting with one empty set row."""
    day = _active_day(week, day_index)
    draft = ExerciseDraft(
        exercise_id=entry.id,
        name=entry.name,
        is_global=entry.is_global,
        sets=[SetDraft()],
    )
    day.exercises.append(draft)
    return draft


def remove_exercise(week: WeekDraft, day_index: int, exercise_draft_id: str) -> None:
    day = _active_day(week, day_index)
    day.exercises = [ex for ex in day.exercises if ex.id != exercise_draft_id]


def add_set(exercise: ExerciseDraft, reps: str = "", rir: str = "") -> SetDraft:
    s = SetDraft(reps=reps, rir=rir)
    exercise.sets.append(s)
    return s


def remove_set(exercise: ExerciseDraft, set_id: str) -> None:
    """
    Remove a set row.

    Raises:
        KeyError: If no set row has set_id
        EditRejected: If it is the exercise's only set row
    """
    if all(s.id != set_id for s in exercise.sets):
        raise KeyError(set_id)
    if len(exercise.sets) <= 1:
        raise EditRejected(
            "workout.eachExerciseMustHaveSet",
            f"{exercise.name} must keep at least one set",
            subject=exercise.name,
        )
    exercise.sets = [s for s in exercise.sets if s.id != set_id]


def update_set_field(exercise: ExerciseDraft, set_id: str, field_name: SetField, value: str) -> None:
    """Overwrite the reps or rir text of one set row."""
    if field_name not in ("reps", "rir"):
        raise ValueError(f"Invalid set field: {field_name!r}. Must be 'reps' or 'rir'")
    for s in exercise.sets:
        if s.id == set_id:
            setattr(s, field_name, value)
            return
    raise KeyError(set_id)


def add_week(weeks: list[WeekDraft], name: str = "") -> WeekDraft:
    week = WeekDraft(name=name)
    weeks.append(week)
    return week


def add_phase(draft: ProgramDraft, name: str = "", description: str = "") -> PhaseDraft:
    phase = PhaseDraft(name=name, description=description)
    draft.phases.append(phase)
    return phase


# =============================================================================
# CONVERSIONS
# =============================================================================


def _exercise_to_draft(exercise: ProgramExercise) -> ExerciseDraft:
    return ExerciseDraft(
        exercise_id=exercise.id,
        name=exercise.name,
        is_global=exercise.is_global,
        sets=[SetDraft(reps=str(s.reps), rir=str(s.rir)) for s in exercise.sets],
    )


def _week_to_draft(week: ProgramWeek, name: str = "") -> WeekDraft:
    days: list[DaySlotDraft] = []
    for day in week.days:
        if is_active_day(day):
            days.append(DayDraft(exercises=[_exercise_to_draft(ex) for ex in day.exercises]))  # type: ignore[union-attr]
        else:
            days.append(REST_DAY)
    return WeekDraft(name=name, days=days)


def program_to_draft(program: Program) -> ProgramDraft:
    """Turn a stored program back into editable draft state."""
    draft = ProgramDraft(
        name=program.name,
        description=program.description,
        program_type=program.type,
    )
    if program.type == "simple":
        draft.weeks = [_week_to_draft(program.week)]  # type: ignore[union-attr]
    elif program.type == "alternating":
        draft.alternating_weeks = [_week_to_draft(w) for w in program.alternating_weeks]  # type: ignore[union-attr]
    elif program.type == "advanced":
        draft.phases = [
            PhaseDraft(
                name=phase.name,
                description=phase.description,
                weeks=[_week_to_draft(w) for w in phase.weeks],
            )
            for phase in program.phases  # type: ignore[union-attr]
        ]
    else:
        raise ValueError(f"Unknown program type: {program.type!r}")
    return draft


def _text(value: Any) -> str:
    return "" if value is None else str(value)


def _set_from_dict(data: dict[str, Any]) -> SetDraft:
    return SetDraft(reps=_text(data.get("reps")), rir=_text(data.get("rir")))


def _exercise_from_dict(data: dict[str, Any]) -> ExerciseDraft:
    return ExerciseDraft(
        exercise_id=str(data.get("exerciseId") or data.get("id") or ""),
        name=str(data.get("name", "")),
        is_global=bool(data.get("isGlobal", False)),
        sets=[_set_from_dict(s) for s in data.get("sets", [])],
    )


def _week_from_dict(data: dict[str, Any]) -> WeekDraft:
    days: list[DaySlotDraft] = []
    for day in data.get("days", []):
        if day == REST_DAY or day is None:
            days.append(REST_DAY)
        else:
            days.append(DayDraft(exercises=[_exercise_from_dict(ex) for ex in day.get("exercises", [])]))
    return WeekDraft(name=str(data.get("name", "")), days=days)


def draft_from_dict(data: dict[str, Any]) -> ProgramDraft:
    """
    Build draft state from a plain mapping (e.g. an editor state JSON file).

    Missing collections default to empty; set values are kept as text so
    the composer applies its usual presence filter and coercion. A stored
    simple program's single "week" is accepted in place of "weeks".
    """
    weeks = data.get("weeks")
    if weeks is None:
        weeks = [data["week"]] if data.get("week") is not None else []
    return ProgramDraft(
        name=str(data.get("name", "")),
        description=str(data.get("description", "")),
        program_type=str(data.get("type", "simple")),
        weeks=[_week_from_dict(w) for w in weeks],
        alternating_weeks=[_week_from_dict(w) for w in data.get("alternatingWeeks", [])],
        phases=[
            PhaseDraft(
                name=str(p.get("name", "")),
                description=str(p.get("description", "")),
                weeks=[_week_from_dict(w) for w in p.get("weeks", [])],
            )
            for p in data.get("phases", [])
        ],
    )
