"""
Data models for liftlog.

Validated, immutable shapes for programs and workouts. A Program is a
tagged union discriminated on ``type``; mutable editor state lives in
drafts.py and only reaches these types through composer.compose_program.
"""

from dataclasses import dataclass, field
from datetime import date as date_type
from datetime import datetime
from typing import Literal, Union

from .config import REST_DAY

DayLabel = Literal["Day1", "Day2", "Day3", "Day4", "Day5", "Day6", "Day7"]
ProgramType = Literal["simple", "alternating", "advanced"]
RestDay = Literal["rest"]


# =============================================================================
# PROGRAM TEMPLATE
# =============================================================================


@dataclass(frozen=True)
class ProgramSet:
    """A prescribed set: target reps with reps in reserve."""

    reps: int
    rir: int


@dataclass(frozen=True)
class ProgramExercise:
    """An exercise slot inside a program day."""

    id: str  # exercise catalog id
    name: str
    sets: list[ProgramSet]
    is_global: bool = False  # True when the exercise comes from the shared library


@dataclass(frozen=True)
class ProgramDay:
    """An active training day; ``name`` is the positional label (Day1..Day7)."""

    name: DayLabel
    exercises: list[ProgramExercise] = field(default_factory=list)


Day = Union[ProgramDay, RestDay]


@dataclass(frozen=True)
class ProgramWeek:
    """Seven day slots in canonical order."""

    days: list[Day]

    @property
    def active_days(self) -> list[ProgramDay]:
        return [d for d in self.days if is_active_day(d)]  # type: ignore[misc]


@dataclass(frozen=True)
class ProgramPhase:
    """A named block of weeks inside an advanced program."""

    name: str
    description: str
    weeks: list[ProgramWeek]


@dataclass(frozen=True)
class SimpleProgram:
    """One week, repeated."""

    name: str
    description: str
    week: ProgramWeek
    type: Literal["simple"] = "simple"
    id: str | None = None
    created_at: datetime | None = None
    updated_at: datetime | None = None
    is_custom: bool = True


@dataclass(frozen=True)
class AlternatingProgram:
    """Two weeks, alternated (A/B)."""

    name: str
    description: str
    alternating_weeks: tuple[ProgramWeek, ProgramWeek]
    type: Literal["alternating"] = "alternating"
    id: str | None = None
    created_at: datetime | None = None
    updated_at: datetime | None = None
    is_custom: bool = True


@dataclass(frozen=True)
class AdvancedProgram:
    """Phased program: each phase holds one or more weeks."""

    name: str
    description: str
    phases: list[ProgramPhase]
    type: Literal["advanced"] = "advanced"
    id: str | None = None
    created_at: datetime | None = None
    updated_at: datetime | None = None
    is_custom: bool = True


Program = Union[SimpleProgram, AlternatingProgram, AdvancedProgram]


def is_active_day(day: Day) -> bool:
    """A day is active iff it is not the rest marker."""
    return day != REST_DAY


def program_weeks(program: Program) -> list[ProgramWeek]:
    """
    Return every week of a program, in order, whatever its variant.

    Raises:
        ValueError: If the program type is unknown
    """
    if program.type == "simple":
        return [program.week]  # type: ignore[union-attr]
    if program.type == "alternating":
        return list(program.alternating_weeks)  # type: ignore[union-attr]
    if program.type == "advanced":
        return [w for phase in program.phases for w in phase.weeks]  # type: ignore[union-attr]
    raise ValueError(f"Unknown program type: {program.type!r}")


# =============================================================================
# WORKOUT LOG
# =============================================================================


@dataclass(frozen=True)
class WorkoutSet:
    """A logged set. Weight is stored in kilograms."""

    weight: float
    reps: int
    rir: int

    @property
    def volume(self) -> float:
        return self.weight * self.reps


@dataclass(frozen=True)
class WorkoutExercise:
    """One exercise block inside a workout."""

    exercise_id: str
    name: str
    order: int
    sets: list[WorkoutSet] = field(default_factory=list)


@dataclass(frozen=True)
class WorkoutInput:
    """
    Create/update payload for a workout, as produced by the editor.

    ``date`` may carry a time of day; the serializer truncates it.
    """

    date: datetime | date_type | str
    exercises: list[WorkoutExercise]
    notes: str | None = None


@dataclass(frozen=True)
class Workout:
    """A stored, validated workout."""

    id: str
    date: datetime  # local midnight
    notes: str
    exercises: list[WorkoutExercise]
    validated: bool
    created_at: datetime
    updated_at: datetime

    @property
    def total_volume(self) -> float:
        return sum(s.volume for ex in self.exercises for s in ex.sets)
