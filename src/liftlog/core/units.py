"""
Weight unit conversion.

All weights are stored in kilograms; display and input convert according
to the user's preferred unit.
"""

from .config import LB_PER_KG


def kg_to_lb(kg: float) -> float:
    return round(kg * LB_PER_KG, 2)


def lb_to_kg(lb: float) -> float:
    return round(lb / LB_PER_KG, 2)


def weight_for_display(kg: float, unit: str) -> float:
    """Convert a stored kg value to the display unit."""
    if unit == "lb":
        return kg_to_lb(kg)
    return kg


def format_weight(kg: float, unit: str) -> str:
    """
    Format a stored weight for display.

    >>> format_weight(100, "kg")
    '100.0 kg'
    >>> format_weight(100, "lb")
    '220.46 lbs'
    """
    if unit == "lb":
        return f"{kg_to_lb(kg)} lbs"
    return f"{kg:.1f} kg"


def parse_weight_input(value: str, unit: str) -> float:
    """
    Parse typed weight text and convert it to kg for storage.

    Non-numeric input yields 0.
    """
    try:
        number = float(value.strip())
    except (ValueError, AttributeError):
        return 0.0
    if number != number:  # NaN
        return 0.0
    if unit == "lb":
        return lb_to_kg(number)
    return number
