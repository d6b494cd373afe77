"""Food diary service: scaling, storing and deleting logged foods."""

import logging
import math
from collections.abc import Callable
from dataclasses import dataclass, field
from datetime import UTC, date, datetime
from typing import Protocol
from uuid import UUID

from fitpro.domain.food_log import FoodEntry, MealType, NewFoodEntry
from fitpro.domain.nutrition import FoodCandidate, round_int
from fitpro.services.food_search import scale_per_100g
from fitpro.services.live import ChangeFeed, food_log_topic
from fitpro.services.recent_foods import RecentFoodsService

DEFAULT_PORTION_GRAMS = 100.0

_logger = logging.getLogger(__name__)


class FoodEntryNotFoundError(LookupError):
    """No entry with the given id exists for that day."""


class FoodEntryValidationError(ValueError):
    """Food values are negative or not finite."""


class FoodLogRepository(Protocol):
    """Persistence interface for the per-day food log."""

    def add_entries(
        self, user_id: UUID, day: date, entries: list[NewFoodEntry]
    ) -> list[FoodEntry]:
        """Append entries to a day and return them with ids."""

    def list_entries(self, user_id: UUID, day: date) -> list[FoodEntry]:
        """Return the entries of a day ordered by logged time."""

    def delete_entry(self, user_id: UUID, day: date, entry_id: UUID) -> bool:
        """Delete one entry; return False when it does not exist."""


@dataclass(frozen=True)
class FoodPortion:
    """A food candidate (per 100 g) and the amount the user ate."""

    food: FoodCandidate
    grams: float


@dataclass
class FoodLogService:
    """Application service for logging foods into the diary."""

    repository: FoodLogRepository
    recent_foods: RecentFoodsService
    feed: ChangeFeed
    clock: Callable[[], datetime] = field(default=lambda: datetime.now(tz=UTC))

    def add_entries(
        self,
        user_id: UUID,
        day: date,
        portions: list[FoodPortion],
        meal_type: MealType,
    ) -> list[FoodEntry]:
        """Scale portions to absolute values and append them to the day."""
        if not portions:
            return []
        logged_at = self.clock()
        new_entries = [
            build_entry(portion, meal_type, logged_at) for portion in portions
        ]
        created = self.repository.add_entries(user_id, day, new_entries)
        for portion, entry in zip(portions, new_entries, strict=True):
            self._remember(user_id, portion.food, entry.amount)
        self._publish(user_id, day)
        return created

    def list_entries(self, user_id: UUID, day: date) -> list[FoodEntry]:
        """Return the entries logged on a day."""
        return self.repository.list_entries(user_id, day)

    def delete_entry(self, user_id: UUID, day: date, entry_id: UUID) -> None:
        """Delete one entry from a day."""
        if not self.repository.delete_entry(user_id, day, entry_id):
            raise FoodEntryNotFoundError(str(entry_id))
        self._publish(user_id, day)

    def _remember(self, user_id: UUID, food: FoodCandidate, grams: float) -> None:
        try:
            self.recent_foods.record_use(user_id, food, grams)
        except Exception:
            _logger.exception("Failed to record recent food %s", food.name)

    def _publish(self, user_id: UUID, day: date) -> None:
        self.feed.publish(
            food_log_topic(user_id, day), self.repository.list_entries(user_id, day)
        )


def build_entry(
    portion: FoodPortion, meal_type: MealType, logged_at: datetime
) -> NewFoodEntry:
    """Scale per-100 g values to the portion; missing amounts count as 100 g."""
    _check_values(portion)
    grams = portion.grams if portion.grams > 0 else DEFAULT_PORTION_GRAMS
    food = portion.food
    return NewFoodEntry(
        name=food.name,
        brand=food.brand,
        barcode=food.barcode or None,
        amount=grams,
        unit="g",
        calories=round_int(scale_per_100g(food.calories, grams)),
        protein_g=scale_per_100g(food.protein_g, grams),
        carbs_g=scale_per_100g(food.carbs_g, grams),
        fat_g=scale_per_100g(food.fat_g, grams),
        fiber_g=_scale_optional(food.fiber_g, grams),
        sugar_g=_scale_optional(food.sugar_g, grams),
        meal_type=meal_type,
        logged_at=logged_at,
    )


def _check_values(portion: FoodPortion) -> None:
    food = portion.food
    values = {
        "grams": portion.grams,
        "calories": food.calories,
        "protein_g": food.protein_g,
        "carbs_g": food.carbs_g,
        "fat_g": food.fat_g,
        "fiber_g": food.fiber_g,
        "sugar_g": food.sugar_g,
    }
    for name, value in values.items():
        if value is None:
            continue
        if not math.isfinite(value) or value < 0:
            raise FoodEntryValidationError(f"{name} must be a non-negative number")


def _scale_optional(value: float | None, grams: float) -> float | None:
    return scale_per_100g(value, grams) if value is not None else None
