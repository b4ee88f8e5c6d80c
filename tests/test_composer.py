"""
Tests for program drafts and the program composer.

Drafts are built through the same edit operations the editor uses.
"""

import pytest

from liftlog.core.composer import compose_program
from liftlog.core.drafts import (
    ExerciseDraft,
    PhaseDraft,
    ProgramDraft,
    WeekDraft,
    add_exercise,
    add_phase,
    add_set,
    add_week,
    draft_from_dict,
    program_to_draft,
    remove_set,
    set_day_active,
    update_set_field,
)
from liftlog.core.errors import CompositionError, EditRejected
from liftlog.core.exercises import ExerciseEntry
from liftlog.core.models import (
    AdvancedProgram,
    AlternatingProgram,
    ProgramSet,
    SimpleProgram,
)

BENCH = ExerciseEntry(id="bench-press", name="Bench Press")
SQUAT = ExerciseEntry(id="squat", name="Squat", source="library")

# ---------------------------------------------------------------------------
# Shared helpers
# ---------------------------------------------------------------------------


def _fill(exercise: ExerciseDraft, reps: str, rir: str) -> None:
    """Fill the first (auto-created) set row."""
    set_id = exercise.sets[0].id
    update_set_field(exercise, set_id, "reps", reps)
    update_set_field(exercise, set_id, "rir", rir)


def _training_week(weeks: list[WeekDraft], day_index: int = 0, entry: ExerciseEntry = BENCH) -> ExerciseDraft:
    week = add_week(weeks)
    set_day_active(week, day_index, True)
    exercise = add_exercise(week, day_index, entry)
    _fill(exercise, "5", "2")
    return exercise


def _simple_draft() -> ProgramDraft:
    draft = ProgramDraft(name="Push", description="Bench focus", program_type="simple")
    _training_week(draft.weeks)
    return draft


def _alternating_draft(n_weeks: int = 2) -> ProgramDraft:
    draft = ProgramDraft(name="A/B", description="Alternating split", program_type="alternating")
    for i in range(n_weeks):
        _training_week(draft.alternating_weeks, day_index=i, entry=SQUAT if i % 2 else BENCH)
    return draft


# ===========================================================================
# Draft edit operations
# ===========================================================================


class TestDraftEdits:
    """Edit operations on mutable editor state."""

    def test_new_week_is_all_rest(self):
        week = WeekDraft()
        assert week.days == ["rest"] * 7

    def test_add_exercise_starts_with_one_empty_set(self):
        week = WeekDraft()
        set_day_active(week, 2, True)
        exercise = add_exercise(week, 2, SQUAT)
        assert len(exercise.sets) == 1
        assert exercise.sets[0].reps == "" and exercise.sets[0].rir == ""
        assert exercise.is_global is True

    def test_add_exercise_to_rest_day_is_rejected(self):
        week = WeekDraft()
        with pytest.raises(EditRejected) as exc:
            add_exercise(week, 0, BENCH)
        assert exc.value.code == "program.dayIsRest"

    def test_removing_last_set_is_rejected(self):
        week = WeekDraft()
        set_day_active(week, 0, True)
        exercise = add_exercise(week, 0, BENCH)
        with pytest.raises(EditRejected) as exc:
            remove_set(exercise, exercise.sets[0].id)
        assert exc.value.code == "workout.eachExerciseMustHaveSet"
        assert len(exercise.sets) == 1

    def test_remove_set_when_several(self):
        week = WeekDraft()
        set_day_active(week, 0, True)
        exercise = add_exercise(week, 0, BENCH)
        extra = add_set(exercise, "8", "1")
        remove_set(exercise, exercise.sets[0].id)
        assert [s.id for s in exercise.sets] == [extra.id]

    def test_remove_unknown_set(self):
        week = WeekDraft()
        set_day_active(week, 0, True)
        exercise = add_exercise(week, 0, BENCH)
        add_set(exercise, "8", "1")
        with pytest.raises(KeyError):
            remove_set(exercise, "missing")
        assert len(exercise.sets) == 2

    def test_resting_a_day_drops_its_exercises(self):
        week = WeekDraft()
        set_day_active(week, 0, True)
        add_exercise(week, 0, BENCH)
        set_day_active(week, 0, False)
        assert week.days[0] == "rest"

    def test_update_set_field_rejects_unknown_field(self):
        exercise = ExerciseDraft(exercise_id="x", name="X")
        s = add_set(exercise)
        with pytest.raises(ValueError):
            update_set_field(exercise, s.id, "weight", "100")  # type: ignore[arg-type]


# ===========================================================================
# compose_program: simple
# ===========================================================================


class TestComposeSimple:
    """Simple programs: one repeating week."""

    def test_composes_simple_program(self):
        program = compose_program(_simple_draft())
        assert isinstance(program, SimpleProgram)
        assert program.name == "Push"
        day = program.week.days[0]
        assert day.name == "Day1"
        assert day.exercises[0].id == "bench-press"
        assert day.exercises[0].sets == [ProgramSet(reps=5, rir=2)]
        assert program.week.days[1:] == ["rest"] * 6

    def test_day_labels_are_positional(self):
        draft = ProgramDraft(name="Legs", description="Thursday only")
        _training_week(draft.weeks, day_index=3, entry=SQUAT)
        program = compose_program(draft)
        assert program.week.days[3].name == "Day4"
        assert program.week.days[:3] == ["rest"] * 3

    def test_name_and_description_are_trimmed(self):
        draft = _simple_draft()
        draft.name = "  Push  "
        draft.description = " Bench focus \n"
        program = compose_program(draft)
        assert program.name == "Push"
        assert program.description == "Bench focus"

    def test_incomplete_sets_are_dropped(self):
        draft = _simple_draft()
        exercise = draft.weeks[0].days[0].exercises[0]
        add_set(exercise, reps="", rir="1")
        add_set(exercise, reps="8", rir="")
        add_set(exercise, reps="3", rir="0")
        program = compose_program(draft)
        assert program.week.days[0].exercises[0].sets == [
            ProgramSet(reps=5, rir=2),
            ProgramSet(reps=3, rir=0),
        ]

    def test_exercise_without_complete_set_fails(self):
        draft = ProgramDraft(name="Push", description="Bench focus")
        week = add_week(draft.weeks)
        set_day_active(week, 0, True)
        exercise = add_exercise(week, 0, BENCH)
        update_set_field(exercise, exercise.sets[0].id, "rir", "2")  # reps left empty
        with pytest.raises(CompositionError) as exc:
            compose_program(draft)
        assert exc.value.code == "program.exerciseMustHaveValidSet"
        assert exc.value.message == "Bench Press must have at least one valid set"
        assert exc.value.subject == "Bench Press"

    @pytest.mark.parametrize("field_name,value", [("name", ""), ("description", "   ")])
    def test_name_and_description_required(self, field_name, value):
        draft = _simple_draft()
        setattr(draft, field_name, value)
        with pytest.raises(CompositionError) as exc:
            compose_program(draft)
        assert exc.value.code == f"program.{field_name}Required"

    def test_missing_week(self):
        draft = ProgramDraft(name="Push", description="Bench focus")
        with pytest.raises(CompositionError) as exc:
            compose_program(draft)
        assert exc.value.code == "program.simpleProgramMustHaveWeek"

    def test_week_without_training_day(self):
        draft = ProgramDraft(name="Push", description="Bench focus")
        add_week(draft.weeks)
        with pytest.raises(CompositionError) as exc:
            compose_program(draft)
        assert exc.value.code == "program.weekMustHaveActiveDays"

    def test_active_day_without_exercise(self):
        draft = _simple_draft()
        set_day_active(draft.weeks[0], 4, True)
        with pytest.raises(CompositionError) as exc:
            compose_program(draft)
        assert exc.value.code == "program.dayMustHaveExercise"

    @pytest.mark.parametrize("reps,rir", [("five", "2"), ("5", "-1"), ("5", "11"), ("2.5", "1")])
    def test_invalid_set_values(self, reps, rir):
        draft = ProgramDraft(name="Push", description="Bench focus")
        exercise = _training_week(draft.weeks)
        _fill(exercise, reps, rir)
        with pytest.raises(CompositionError) as exc:
            compose_program(draft)
        assert exc.value.code == "program.invalidSetValue"

    def test_rir_max_is_configurable(self):
        draft = ProgramDraft(name="Push", description="Bench focus")
        exercise = _training_week(draft.weeks)
        _fill(exercise, "5", "4")
        with pytest.raises(CompositionError):
            compose_program(draft, rir_max=3)

    def test_unknown_type(self):
        draft = _simple_draft()
        draft.program_type = "circuit"
        with pytest.raises(CompositionError) as exc:
            compose_program(draft)
        assert exc.value.code == "program.invalidType"


# ===========================================================================
# compose_program: alternating / advanced
# ===========================================================================


class TestComposeAlternating:
    """Alternating programs: exactly two weeks, each composed independently."""

    def test_two_weeks(self):
        program = compose_program(_alternating_draft())
        assert isinstance(program, AlternatingProgram)
        week_a, week_b = program.alternating_weeks
        assert week_a.days[0].exercises[0].id == "bench-press"
        assert week_b.days[1].name == "Day2"
        assert week_b.days[1].exercises[0].is_global is True

    @pytest.mark.parametrize("n_weeks", [0, 1, 3])
    def test_wrong_week_count(self, n_weeks):
        with pytest.raises(CompositionError) as exc:
            compose_program(_alternating_draft(n_weeks))
        assert exc.value.code == "program.alternatingProgramMustHaveWeeks"

    def test_each_week_must_validate(self):
        draft = _alternating_draft()
        draft.alternating_weeks[1] = WeekDraft()
        with pytest.raises(CompositionError) as exc:
            compose_program(draft)
        assert exc.value.code == "program.weekMustHaveActiveDays"
        assert exc.value.subject == "Week B"


class TestComposeAdvanced:
    """Advanced programs: named phases of one or more weeks."""

    def _draft(self) -> ProgramDraft:
        draft = ProgramDraft(name="Block", description="Hypertrophy then strength", program_type="advanced")
        for name in ("Hypertrophy", "Strength"):
            phase = add_phase(draft, name, f"{name} block")
            _training_week(phase.weeks)
            _training_week(phase.weeks, day_index=2, entry=SQUAT)
        return draft

    def test_phases(self):
        program = compose_program(self._draft())
        assert isinstance(program, AdvancedProgram)
        assert [p.name for p in program.phases] == ["Hypertrophy", "Strength"]
        assert all(len(p.weeks) == 2 for p in program.phases)

    def test_requires_a_phase(self):
        draft = ProgramDraft(name="Block", description="x", program_type="advanced")
        with pytest.raises(CompositionError) as exc:
            compose_program(draft)
        assert exc.value.code == "program.advancedProgramMustHavePhase"

    def test_phase_needs_name(self):
        draft = self._draft()
        draft.phases[1].name = "  "
        with pytest.raises(CompositionError) as exc:
            compose_program(draft)
        assert exc.value.code == "program.allPhasesMustHaveName"

    def test_phase_needs_week(self):
        draft = self._draft()
        draft.phases.append(PhaseDraft(name="Peak"))
        with pytest.raises(CompositionError) as exc:
            compose_program(draft)
        assert exc.value.code == "program.phaseMustHaveWeek"
        assert exc.value.subject == "Peak"


# ===========================================================================
# Conversions
# ===========================================================================


class TestDraftConversions:
    """program_to_draft / draft_from_dict feed back into the composer."""

    def test_stored_program_recomposes_unchanged(self):
        program = compose_program(_alternating_draft())
        assert compose_program(program_to_draft(program)) == program

    def test_draft_from_editor_json(self):
        data = {
            "name": "Pull",
            "description": "Back day",
            "type": "simple",
            "weeks": [{
                "days": [
                    {"exercises": [{
                        "exerciseId": "pull-up",
                        "name": "Pull Up",
                        "sets": [{"reps": 8, "rir": 2}, {"reps": "", "rir": 1}],
                    }]},
                    "rest", "rest", "rest", "rest", "rest", "rest",
                ],
            }],
        }
        program = compose_program(draft_from_dict(data))
        assert program.week.days[0].exercises[0].sets == [ProgramSet(reps=8, rir=2)]

    def test_draft_from_stored_simple_document(self):
        data = {
            "name": "Pull",
            "description": "Back day",
            "type": "simple",
            "week": {"days": ["rest"] * 6 + [{
                "name": "Day7",
                "exercises": [{"id": "row", "name": "Row", "sets": [{"reps": 10, "rir": 1}]}],
            }]},
        }
        program = compose_program(draft_from_dict(data))
        assert program.week.days[6].name == "Day7"
