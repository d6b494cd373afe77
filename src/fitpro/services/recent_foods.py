"""Recently used foods, offered as quick picks when logging."""

import re
from collections.abc import Callable
from dataclasses import dataclass, field
from datetime import UTC, datetime
from typing import Protocol
from uuid import UUID

from fitpro.domain.nutrition import FoodCandidate
from fitpro.domain.recent_foods import RecentFood

_MIN_BARCODE_LENGTH = 4
_MAX_KEY_LENGTH = 60


class RecentFoodRepository(Protocol):
    """Persistence interface for recent foods."""

    def get_use_count(self, user_id: UUID, food_key: str) -> int:
        """Return the stored use count for a food, or 0."""

    def upsert_recent_food(
        self, user_id: UUID, food_key: str, recent: RecentFood
    ) -> None:
        """Insert or replace the recent food stored under a key."""

    def list_recent_foods(self, user_id: UUID, limit: int) -> list[RecentFood]:
        """Return recent foods, most recently used first."""


@dataclass
class RecentFoodsService:
    """Application service for the recent foods list."""

    repository: RecentFoodRepository
    clock: Callable[[], datetime] = field(default=lambda: datetime.now(tz=UTC))

    def record_use(self, user_id: UUID, food: FoodCandidate, grams: float) -> RecentFood:
        """Store a food as recently used.

        The count is read then written, so concurrent writes can lose an
        increment; it is a usage hint, not an exact counter.
        """
        key = food_key(food)
        recent = RecentFood(
            food=food,
            last_used_at=self.clock(),
            use_count=self.repository.get_use_count(user_id, key) + 1,
            last_amount=grams,
        )
        self.repository.upsert_recent_food(user_id, key, recent)
        return recent

    def list_recent(self, user_id: UUID, limit: int = 20) -> list[RecentFood]:
        """Return recent foods, most recently used first."""
        return self._rank(self.repository.list_recent_foods(user_id, limit))[:limit]

    @staticmethod
    def _rank(items: list[RecentFood]) -> list[RecentFood]:
        """Rank foods by recent use then frequency."""
        return sorted(
            items,
            key=lambda item: (item.last_used_at, item.use_count),
            reverse=True,
        )


def food_key(food: FoodCandidate) -> str:
    """Return the storage key: the barcode, or a slug of the name."""
    if food.barcode and len(food.barcode) >= _MIN_BARCODE_LENGTH:
        return food.barcode
    return re.sub(r"[^a-z0-9]", "-", food.name.lower())[:_MAX_KEY_LENGTH]
