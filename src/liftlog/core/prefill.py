"""Turn a program day into a pre-filled workout payload."""

from datetime import date as date_type
from datetime import datetime
from typing import cast

from .errors import CompositionError
from .models import Day, ProgramDay, WorkoutExercise, WorkoutInput, WorkoutSet, is_active_day


def apply_program_day(day: Day, date: datetime | date_type | str, notes: str | None = None) -> WorkoutInput:
    """
    Pre-fill a workout from a program day.

    Exercises keep their program order (1-based); each template set becomes
    a logged set with weight 0 for the user to fill in.

    Raises:
        CompositionError: If the day is a rest day
    """
    if not is_active_day(day):
        raise CompositionError(
            "program.restDayCannotBeApplied",
            "A rest day has no exercises to apply",
        )
    program_day = cast(ProgramDay, day)
    exercises = [
        WorkoutExercise(
            exercise_id=ex.id,
            name=ex.name,
            order=index,
            sets=[WorkoutSet(weight=0.0, reps=s.reps, rir=s.rir) for s in ex.sets],
        )
        for index, ex in enumerate(program_day.exercises, 1)
    ]
    return WorkoutInput(date=date, exercises=exercises, notes=notes)
