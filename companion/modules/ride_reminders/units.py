"""Unit conversion and number formatting for reminder display values."""

from __future__ import annotations

from decimal import ROUND_HALF_EVEN, Decimal

METERS_PER_KILOMETER = 1000.0
METERS_PER_MILE = 1609.344

_TWO_PLACES = Decimal("0.01")


def normalize_unit(unit: str | None) -> str:
    """Normalize a unit string to 'metric' or 'imperial'."""
    if unit and unit.lower() in ("imperial", "mi", "miles"):
        return "imperial"
    return "metric"


def meters_per_unit(unit: str) -> float:
    """Meters in one display distance unit (km or mi)."""
    return METERS_PER_MILE if unit == "imperial" else METERS_PER_KILOMETER


def to_meters(value: float, unit: str) -> float:
    return value * meters_per_unit(unit)


def distance_suffix(unit: str) -> str:
    return " mi" if unit == "imperial" else " km"


def format_decimal(value: float) -> str:
    """Format like the ``#.##`` pattern: at most two decimals, no trailing zeros.

    Rounds half-even on the exact binary value, so ``2.675`` becomes ``2.67``
    and ``0.125`` becomes ``0.12``.
    """
    rounded = Decimal(value).quantize(_TWO_PLACES, rounding=ROUND_HALF_EVEN)
    text = format(rounded, "f")
    if "." in text:
        text = text.rstrip("0").rstrip(".")
    if text in ("-0", ""):
        return "0"
    return text
