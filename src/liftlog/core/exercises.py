"""
Exercise catalog entries.

The catalog itself (library lookups, user-created exercises) lives behind
the store; the core only receives already-fetched ExerciseEntry values.
"""

import re
from dataclasses import dataclass, field
from typing import Literal

from .config import BODYWEIGHT_CATEGORY, LOAD_UNIT, REPS_UNIT

ExerciseSource = Literal["library", "user"]


@dataclass(frozen=True)
class ExerciseEntry:
    """An exercise as returned by the catalog."""

    id: str
    name: str
    allowed_units: list[str] = field(default_factory=lambda: [LOAD_UNIT, REPS_UNIT])
    category: str = ""
    body_part: str = ""
    description: str | None = None
    source: ExerciseSource = "user"

    @property
    def is_global(self) -> bool:
        """Library exercises are shared across users."""
        return self.source == "library"

    @property
    def is_bodyweight(self) -> bool:
        return is_bodyweight_exercise(self.allowed_units)


def exercise_id_from_name(name: str) -> str:
    """
    Derive a catalog id from an exercise name.

    "  Bench  Press " -> "bench-press"
    """
    return re.sub(r"\s+", "-", name.strip().lower())


def allowed_units_for_category(category: str) -> list[str]:
    """Bodyweight exercises log reps only; everything else logs load and reps."""
    if category.strip().lower() == BODYWEIGHT_CATEGORY.lower():
        return [REPS_UNIT]
    return [LOAD_UNIT, REPS_UNIT]


def has_load_unit(allowed_units: list[str] | None, default: bool = False) -> bool:
    """
    Check whether an exercise supports a load (weight) unit.

    Args:
        allowed_units: Units of the exercise, or None if unknown
        default: Value returned when allowed_units is None

    Returns:
        True if "load" is allowed
    """
    if allowed_units is None:
        return default
    return LOAD_UNIT in allowed_units


def is_bodyweight_exercise(allowed_units: list[str] | None) -> bool:
    """An exercise is bodyweight-only when reps is its single allowed unit."""
    if not allowed_units:
        return False
    return list(allowed_units) == [REPS_UNIT]
