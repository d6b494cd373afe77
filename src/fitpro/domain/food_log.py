"""Domain models for the daily food log."""

from dataclasses import dataclass
from datetime import date, datetime
from enum import StrEnum
from uuid import UUID

from fitpro.domain.nutrition import MacroTotals


class MealType(StrEnum):
    """Meal bucket a food entry belongs to."""

    BREAKFAST = "breakfast"
    LUNCH = "lunch"
    DINNER = "dinner"
    SNACK = "snack"


MEAL_TYPES: tuple[MealType, ...] = (
    MealType.BREAKFAST,
    MealType.LUNCH,
    MealType.DINNER,
    MealType.SNACK,
)


@dataclass(frozen=True)
class FoodEntry:
    """A logged food item. Macros are absolute for the logged amount."""

    id: UUID
    day: date
    name: str
    amount: float
    unit: str
    calories: float
    protein_g: float
    carbs_g: float
    fat_g: float
    meal_type: str
    logged_at: datetime
    brand: str | None = None
    barcode: str | None = None
    fiber_g: float | None = None
    sugar_g: float | None = None


@dataclass(frozen=True)
class NewFoodEntry:
    """Food entry ready to be stored, without an id."""

    name: str
    amount: float
    unit: str
    calories: float
    protein_g: float
    carbs_g: float
    fat_g: float
    meal_type: MealType
    logged_at: datetime
    brand: str | None = None
    barcode: str | None = None
    fiber_g: float | None = None
    sugar_g: float | None = None


@dataclass(frozen=True)
class MealSummary:
    """Entries and totals for one meal bucket."""

    meal_type: MealType
    entries: list[FoodEntry]
    totals: MacroTotals


@dataclass(frozen=True)
class DailyNutrition:
    """Roll-up of a day's food log against the user's targets."""

    day: date
    meals: dict[MealType, MealSummary]
    consumed: MacroTotals
    targets: MacroTotals
    remaining: MacroTotals
    over: MacroTotals
    calorie_progress_percent: float
    protein_progress: float
    carbs_progress: float
    fat_progress: float

    @property
    def is_over_calories(self) -> bool:
        """Return True when consumed calories exceed the target."""
        return self.over.calories > 0

    @property
    def is_over_protein(self) -> bool:
        return self.over.protein_g > 0

    @property
    def is_over_carbs(self) -> bool:
        return self.over.carbs_g > 0

    @property
    def is_over_fat(self) -> bool:
        return self.over.fat_g > 0
