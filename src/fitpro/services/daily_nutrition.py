"""Daily nutrition roll-up against the user's targets."""

import math
from dataclasses import dataclass
from datetime import UTC, date, datetime
from typing import Protocol
from uuid import UUID

from fitpro.domain.food_log import (
    MEAL_TYPES,
    DailyNutrition,
    FoodEntry,
    MealSummary,
    MealType,
)
from fitpro.domain.nutrition import ZERO_TOTALS, MacroTotals, round1, round_int
from fitpro.domain.profile import UserProfile

DEFAULT_TARGETS = MacroTotals(calories=2000, protein_g=150, carbs_g=200, fat_g=65)


class FoodLogReader(Protocol):
    """Read access to a user's food log."""

    def list_entries(self, user_id: UUID, day: date) -> list[FoodEntry]:
        """Return the entries logged for a calendar day."""


class ProfileReader(Protocol):
    """Read access to user profiles."""

    def get_profile(self, user_id: UUID) -> UserProfile | None:
        """Return the profile for a user, if present."""


@dataclass
class DailyNutritionService:
    """Builds the daily summary from stored entries and profile targets."""

    food_log: FoodLogReader
    profiles: ProfileReader

    def get_day(self, user_id: UUID, day: date) -> DailyNutrition:
        """Return the nutrition summary for one day."""
        profile = self.profiles.get_profile(user_id)
        entries = self.food_log.list_entries(user_id, day)
        return aggregate_day(day, entries, targets_from_profile(profile))


def targets_from_profile(profile: UserProfile | None) -> MacroTotals:
    """Return stored daily targets, or the defaults when none are stored."""
    if profile is None or profile.metrics is None:
        return DEFAULT_TARGETS
    metrics = profile.metrics
    return MacroTotals(
        calories=metrics.daily_calorie_target,
        protein_g=metrics.daily_protein_target,
        carbs_g=metrics.daily_carbs_target,
        fat_g=metrics.daily_fat_target,
    )


def aggregate_day(
    day: date, entries: list[FoodEntry], targets: MacroTotals | None = None
) -> DailyNutrition:
    """Split entries into meal buckets and compare the totals with targets.

    Unknown meal types fall into the snack bucket. Zero or missing targets
    are replaced by ``DEFAULT_TARGETS`` so ratios stay finite.
    """
    buckets: dict[MealType, list[FoodEntry]] = {meal: [] for meal in MEAL_TYPES}
    for entry in sorted(entries, key=_logged_at_utc):
        buckets[_meal_type(entry.meal_type)].append(entry)

    meals = {
        meal: MealSummary(meal_type=meal, entries=items, totals=_sum_entries(items))
        for meal, items in buckets.items()
    }
    consumed = _sum_totals([summary.totals for summary in meals.values()])
    resolved = _resolve_targets(targets)

    return DailyNutrition(
        day=day,
        meals=meals,
        consumed=consumed,
        targets=resolved,
        remaining=MacroTotals(
            calories=max(0, resolved.calories - consumed.calories),
            protein_g=round1(max(0.0, resolved.protein_g - consumed.protein_g)),
            carbs_g=round1(max(0.0, resolved.carbs_g - consumed.carbs_g)),
            fat_g=round1(max(0.0, resolved.fat_g - consumed.fat_g)),
        ),
        over=MacroTotals(
            calories=max(0, consumed.calories - resolved.calories),
            protein_g=round1(max(0.0, consumed.protein_g - resolved.protein_g)),
            carbs_g=round1(max(0.0, consumed.carbs_g - resolved.carbs_g)),
            fat_g=round1(max(0.0, consumed.fat_g - resolved.fat_g)),
        ),
        calorie_progress_percent=_clamp(
            consumed.calories / resolved.calories * 100, 0.0, 100.0
        ),
        protein_progress=_clamp(consumed.protein_g / resolved.protein_g, 0.0, 1.0),
        carbs_progress=_clamp(consumed.carbs_g / resolved.carbs_g, 0.0, 1.0),
        fat_progress=_clamp(consumed.fat_g / resolved.fat_g, 0.0, 1.0),
    )


def _logged_at_utc(entry: FoodEntry) -> datetime:
    if entry.logged_at.tzinfo is None:
        return entry.logged_at.replace(tzinfo=UTC)
    return entry.logged_at


def _meal_type(value: str) -> MealType:
    try:
        return MealType(value)
    except ValueError:
        return MealType.SNACK


def _sum_entries(entries: list[FoodEntry]) -> MacroTotals:
    calories = protein = carbs = fat = 0.0
    for entry in entries:
        calories += entry.calories
        protein += entry.protein_g
        carbs += entry.carbs_g
        fat += entry.fat_g
    return MacroTotals(
        calories=round_int(calories),
        protein_g=round1(protein),
        carbs_g=round1(carbs),
        fat_g=round1(fat),
    )


def _sum_totals(totals: list[MacroTotals]) -> MacroTotals:
    """Sum already rounded bucket totals so buckets reconcile with the day."""
    result = ZERO_TOTALS
    for item in totals:
        result = MacroTotals(
            calories=result.calories + item.calories,
            protein_g=result.protein_g + item.protein_g,
            carbs_g=result.carbs_g + item.carbs_g,
            fat_g=result.fat_g + item.fat_g,
        )
    return MacroTotals(
        calories=round_int(result.calories),
        protein_g=round1(result.protein_g),
        carbs_g=round1(result.carbs_g),
        fat_g=round1(result.fat_g),
    )


def _resolve_targets(targets: MacroTotals | None) -> MacroTotals:
    if targets is None:
        return DEFAULT_TARGETS
    return MacroTotals(
        calories=_positive_or(targets.calories, DEFAULT_TARGETS.calories),
        protein_g=_positive_or(targets.protein_g, DEFAULT_TARGETS.protein_g),
        carbs_g=_positive_or(targets.carbs_g, DEFAULT_TARGETS.carbs_g),
        fat_g=_positive_or(targets.fat_g, DEFAULT_TARGETS.fat_g),
    )


def _positive_or(value: float | None, fallback: float) -> float:
    if value is None or not math.isfinite(value) or value <= 0:
        return fallback
    return value


def _clamp(value: float, low: float, high: float) -> float:
    return min(high, max(low, value))
