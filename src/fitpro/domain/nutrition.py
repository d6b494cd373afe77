"""Nutrition domain models."""

import math
from dataclasses import dataclass


@dataclass(frozen=True)
class MacroTotals:
    """Calories plus protein, carbs and fat in grams."""

    calories: float
    protein_g: float
    carbs_g: float
    fat_g: float


ZERO_TOTALS = MacroTotals(calories=0, protein_g=0.0, carbs_g=0.0, fat_g=0.0)


@dataclass(frozen=True)
class FoodCandidate:
    """Normalized food database result with values per 100 g."""

    barcode: str
    name: str
    calories: float
    protein_g: float
    carbs_g: float
    fat_g: float
    brand: str | None = None
    image_url: str | None = None
    fiber_g: float | None = None
    sugar_g: float | None = None
    nutriscore: str | None = None


def round_half_up(value: float, digits: int = 0) -> float:
    """Round half up (2.5 -> 3), unlike the built-in banker's rounding."""
    if not math.isfinite(value):
        raise ValueError(f"Cannot round non-finite value {value}")
    factor = 10**digits
    return math.floor(value * factor + 0.5) / factor


def round_int(value: float) -> int:
    """Round half up to an integer."""
    return int(round_half_up(value))


def round1(value: float) -> float:
    """Round half up to one decimal place."""
    return round_half_up(value, 1)
