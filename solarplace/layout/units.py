"""
Unit Conversion

User-entered dimensions arrive in either inches (imperial) or millimetres
(metric). Everything downstream of input works in inches; wire lengths are
reported in feet.
"""

import math
from typing import Union

from .abstraction import MeasurementSystem

MM_PER_INCH = 25.4
INCHES_PER_FOOT = 12.0


def _system(system: Union[MeasurementSystem, str]) -> MeasurementSystem:
    if isinstance(system, MeasurementSystem):
        return system
    return MeasurementSystem(system)


def to_inches(value: float, system: Union[MeasurementSystem, str]) -> float:
    """Convert a value in the given unit system to inches."""
    if _system(system) is MeasurementSystem.METRIC:
        return value / MM_PER_INCH
    return value


def from_inches(value: float, system: Union[MeasurementSystem, str]) -> float:
    """Convert inches to the given unit system."""
    if _system(system) is MeasurementSystem.METRIC:
        return value * MM_PER_INCH
    return value


def inches_to_feet(inches: float) -> float:
    return inches / INCHES_PER_FOOT


def unit_label(system: Union[MeasurementSystem, str], short: bool = True) -> str:
    """Label used next to input fields ("in"/"mm" or "inches"/"mm")."""
    if _system(system) is MeasurementSystem.METRIC:
        return "mm"
    return "in" if short else "inches"


def _parse_number(text: Union[str, float, int], what: str) -> float:
    if isinstance(text, str):
        text = text.strip()
        if not text:
            raise ValueError(f"{what} is required")
    try:
        value = float(text)
    except (TypeError, ValueError):
        raise ValueError(f"{what} must be a number, got {text!r}") from None
    if not math.isfinite(value):
        raise ValueError(f"{what} must be a finite number")
    return value


def parse_dimension(text: Union[str, float, int],
                    system: Union[MeasurementSystem, str],
                    what: str = "Dimension") -> float:
    """
    Parse a user-entered panel dimension and convert it to inches.

    Raises:
        ValueError: if the input is empty, not numeric, or not positive
    """
    value = _parse_number(text, what)
    if value <= 0:
        raise ValueError(f"{what} must be greater than zero")
    return to_inches(value, system)


def parse_spacing(text: Union[str, float, int],
                  system: Union[MeasurementSystem, str],
                  what: str = "Spacing") -> float:
    """Parse a user-entered gap (zero allowed) and convert it to inches."""
    value = _parse_number(text, what)
    if value < 0:
        raise ValueError(f"{what} cannot be negative")
    return to_inches(value, system)


def format_length(inches: float, system: Union[MeasurementSystem, str]) -> str:
    """Format an inch value for display in the given unit system."""
    system = _system(system)
    if system is MeasurementSystem.METRIC:
        return f"{from_inches(inches, system):.1f} mm"
    return f"{inches:.2f} in"
