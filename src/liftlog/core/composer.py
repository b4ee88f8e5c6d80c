"""
Program composition: draft editor state → validated Program.

compose_program is the only bridge from drafts.ProgramDraft to the
immutable Program variants. Every rule violation raises CompositionError
immediately; no partial program is ever returned.

Per exercise, set rows are filtered to those with both reps and rir
filled in (whatever the value). Rows failing the filter are dropped, not
defaulted, and an exercise left with no rows fails the whole composition.
Text is converted to integers only after that filter.
"""

from .config import ALTERNATING_WEEK_COUNT, DAY_LABELS, DAYS_PER_WEEK, RIR_MAX, RIR_MIN
from .drafts import DayDraft, ExerciseDraft, PhaseDraft, ProgramDraft, SetDraft, WeekDraft
from .errors import CompositionError
from .models import (
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
)
from ..io.serializers import program_to_dict, validate_program_shape


def _has_value(text: str | None) -> bool:
    return text is not None and str(text).strip() != ""


def _parse_count(text: str, what: str, exercise_name: str) -> int:
    """Convert set text to a non-negative integer."""
    raw = str(text).strip()
    try:
        value = int(raw)
    except ValueError:
        try:
            as_float = float(raw)
        except ValueError:
            as_float = None
        if as_float is None or not as_float.is_integer():
            raise CompositionError(
                "program.invalidSetValue",
                f"{exercise_name}: {what} must be a whole number, got {raw!r}",
                subject=exercise_name,
            ) from None
        value = int(as_float)
    if value < 0:
        raise CompositionError(
            "program.invalidSetValue",
            f"{exercise_name}: {what} must be non-negative, got {value}",
            subject=exercise_name,
        )
    return value


def _compose_set(set_draft: SetDraft, exercise_name: str, rir_max: int) -> ProgramSet:
    reps = _parse_count(set_draft.reps, "reps", exercise_name)
    rir = _parse_count(set_draft.rir, "RIR", exercise_name)
    if not RIR_MIN <= rir <= rir_max:
        raise CompositionError(
            "program.invalidSetValue",
            f"{exercise_name}: RIR must be between {RIR_MIN} and {rir_max}, got {rir}",
            subject=exercise_name,
        )
    return ProgramSet(reps=reps, rir=rir)


def compose_exercise(exercise: ExerciseDraft, rir_max: int = RIR_MAX) -> ProgramExercise:
    """
    Convert one exercise draft.

    Raises:
        CompositionError: If no set row has both reps and rir, or a value is invalid
    """
    complete = [s for s in exercise.sets if _has_value(s.reps) and _has_value(s.rir)]
    if not complete:
        raise CompositionError(
            "program.exerciseMustHaveValidSet",
            f"{exercise.name} must have at least one valid set",
            subject=exercise.name,
        )
    return ProgramExercise(
        id=exercise.exercise_id,
        name=exercise.name,
        is_global=exercise.is_global,
        sets=[_compose_set(s, exercise.name, rir_max) for s in complete],
    )


def compose_week(week: WeekDraft, locator: str = "Week 1", rir_max: int = RIR_MAX) -> ProgramWeek:
    """
    Convert one week draft.

    Day labels are positional: slot 0 is Day1 and slot 6 is Day7, whether
    or not the other slots are rest days.
    """
    if len(week.days) != DAYS_PER_WEEK:
        raise CompositionError(
            "program.weekMustHaveSevenDays",
            f"{locator} must have exactly {DAYS_PER_WEEK} day slots",
            subject=locator,
        )
    if not any(isinstance(d, DayDraft) for d in week.days):
        raise CompositionError(
            "program.weekMustHaveActiveDays",
            f"{locator} must have at least one training day",
            subject=locator,
        )

    days: list[Day] = []
    for index, slot in enumerate(week.days):
        if not isinstance(slot, DayDraft):
            days.append("rest")
            continue
        label = DAY_LABELS[index]
        if not slot.exercises:
            raise CompositionError(
                "program.dayMustHaveExercise",
                f"{locator}, {label} must have at least one exercise",
                subject=f"{locator} / {label}",
            )
        days.append(
            ProgramDay(
                name=label,  # type: ignore[arg-type]
                exercises=[compose_exercise(ex, rir_max) for ex in slot.exercises],
            )
        )
    return ProgramWeek(days=days)


def _compose_phase(phase: PhaseDraft, position: int, rir_max: int) -> ProgramPhase:
    name = phase.name.strip()
    if not name:
        raise CompositionError(
            "program.allPhasesMustHaveName",
            "All phases must have a name",
            subject=f"Phase {position}",
        )
    if not phase.weeks:
        raise CompositionError(
            "program.phaseMustHaveWeek",
            f"Phase {name} must have at least one week",
            subject=name,
        )
    return ProgramPhase(
        name=name,
        description=phase.description.strip(),
        weeks=[
            compose_week(w, f"{name}, week {i}", rir_max)
            for i, w in enumerate(phase.weeks, 1)
        ],
    )


def compose_program(draft: ProgramDraft, rir_max: int = RIR_MAX) -> Program:
    """
    Fold editor state into one immutable Program variant.

    Args:
        draft: Editor state
        rir_max: Upper bound accepted for RIR values

    Returns:
        SimpleProgram, AlternatingProgram or AdvancedProgram, already
        checked against the stored program shape

    Raises:
        CompositionError: On the first rule violation
    """
    name = draft.name.strip()
    description = draft.description.strip()
    if not name:
        raise CompositionError("program.nameRequired", "Program name is required")
    if not description:
        raise CompositionError("program.descriptionRequired", "Program description is required")

    program: Program
    if draft.program_type == "simple":
        if not draft.weeks:
            raise CompositionError(
                "program.simpleProgramMustHaveWeek",
                "A simple program must have a week",
            )
        program = SimpleProgram(
            name=name,
            description=description,
            week=compose_week(draft.weeks[0], "Week 1", rir_max),
        )
    elif draft.program_type == "alternating":
        if len(draft.alternating_weeks) != ALTERNATING_WEEK_COUNT:
            raise CompositionError(
                "program.alternatingProgramMustHaveWeeks",
                f"An alternating program must have exactly {ALTERNATING_WEEK_COUNT} weeks, "
                f"got {len(draft.alternating_weeks)}",
            )
        week_a, week_b = draft.alternating_weeks
        program = AlternatingProgram(
            name=name,
            description=description,
            alternating_weeks=(
                compose_week(week_a, "Week A", rir_max),
                compose_week(week_b, "Week B", rir_max),
            ),
        )
    elif draft.program_type == "advanced":
        if not draft.phases:
            raise CompositionError(
                "program.advancedProgramMustHavePhase",
                "An advanced program must have at least one phase",
            )
        program = AdvancedProgram(
            name=name,
            description=description,
            phases=[_compose_phase(p, i, rir_max) for i, p in enumerate(draft.phases, 1)],
        )
    else:
        raise CompositionError(
            "program.invalidType",
            f"Unknown program type: {draft.program_type!r}",
        )

    return validate_program_shape(program_to_dict(program), stored=False)
