"""
Configuration constants for the liftlog domain model and analytics.

All adjustable parameters are centralized here. User-level overrides
(data directory, weight unit, e1RM policy) are merged on top of these
defaults by config_loader.
"""

from typing import Final, Literal

# =============================================================================
# PROGRAM STRUCTURE
# =============================================================================

DAY_LABELS: Final[tuple[str, ...]] = (
    "Day1",
    "Day2",
    "Day3",
    "Day4",
    "Day5",
    "Day6",
    "Day7",
)
DAYS_PER_WEEK: Final[int] = len(DAY_LABELS)
ALTERNATING_WEEK_COUNT: Final[int] = 2  # alternatingWeeks is always [A, B]
REST_DAY: Final[str] = "rest"

PROGRAM_TYPES: Final[tuple[str, ...]] = ("simple", "alternating", "advanced")

# =============================================================================
# SET VALUE POLICY (composer-level, not a storage invariant)
# =============================================================================

RIR_MIN: Final[int] = 0
RIR_MAX: Final[int] = 10

# =============================================================================
# ESTIMATED 1RM (reps-plus-reserve adjusted Epley)
# =============================================================================

E1RM_DIVISOR: Final[float] = 30.0

ZeroRirPolicy = Literal["zero", "epley"]

# "zero":  a set logged at rir <= 0 contributes an e1RM of 0
# "epley": rir == 0 uses the general formula, negative rir still yields 0
ZERO_RIR_POLICIES: Final[tuple[str, ...]] = ("zero", "epley")
DEFAULT_ZERO_RIR_POLICY: Final[ZeroRirPolicy] = "zero"

UNKNOWN_EXERCISE_NAME: Final[str] = "Unknown exercise"

# =============================================================================
# WEEKLY AGGREGATION
# =============================================================================

DAYS_PER_BUCKET: Final[int] = 7

# =============================================================================
# UNITS
# =============================================================================

WeightUnit = Literal["kg", "lb"]

WEIGHT_UNITS: Final[tuple[str, ...]] = ("kg", "lb")
DEFAULT_WEIGHT_UNIT: Final[WeightUnit] = "kg"
LB_PER_KG: Final[float] = 2.20462

# =============================================================================
# EXERCISE CATALOG
# =============================================================================

BODYWEIGHT_CATEGORY: Final[str] = "Bodyweight"
LOAD_UNIT: Final[str] = "load"
REPS_UNIT: Final[str] = "reps"
