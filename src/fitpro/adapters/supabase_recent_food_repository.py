"""Supabase implementation for recently used foods."""

from dataclasses import dataclass
from datetime import datetime
from uuid import UUID

from supabase import Client

from fitpro.domain.nutrition import FoodCandidate
from fitpro.domain.recent_foods import RecentFood
from fitpro.services.recent_foods import RecentFoodRepository


@dataclass
class SupabaseRecentFoodRepository(RecentFoodRepository):
    """Supabase-backed repository for the recent foods list."""

    client: Client

    def get_use_count(self, user_id: UUID, food_key: str) -> int:
        """Return the stored use count for a food, or 0."""
        response = (
            self.client.table("recent_foods")
            .select("use_count")
            .eq("user_id", str(user_id))
            .eq("food_key", food_key)
            .limit(1)
            .execute()
        )
        if not response.data:
            return 0
        return int(response.data[0].get("use_count") or 0)

    def upsert_recent_food(
        self, user_id: UUID, food_key: str, recent: RecentFood
    ) -> None:
        """Insert or replace the recent food row for a key."""
        food = recent.food
        self.client.table("recent_foods").upsert(
            {
                "user_id": str(user_id),
                "food_key": food_key,
                "barcode": food.barcode,
                "name": food.name,
                "brand": food.brand,
                "image_url": food.image_url,
                "calories": food.calories,
                "protein_g": food.protein_g,
                "carbs_g": food.carbs_g,
                "fat_g": food.fat_g,
                "fiber_g": food.fiber_g,
                "sugar_g": food.sugar_g,
                "nutriscore": food.nutriscore,
                "last_used_at": recent.last_used_at.isoformat(),
                "use_count": recent.use_count,
                "last_amount": recent.last_amount,
            },
            on_conflict="user_id,food_key",
        ).execute()

    def list_recent_foods(self, user_id: UUID, limit: int) -> list[RecentFood]:
        """Return recent foods, most recently used first."""
        response = (
            self.client.table("recent_foods")
            .select("*")
            .eq("user_id", str(user_id))
            .order("last_used_at", desc=True)
            .limit(limit)
            .execute()
        )
        return [_parse_recent(row) for row in response.data or []]


def _parse_recent(row: dict[str, object]) -> RecentFood:
    """Parse a recent food row into a domain model."""
    return RecentFood(
        food=FoodCandidate(
            barcode=str(row.get("barcode") or ""),
            name=str(row.get("name", "")),
            brand=row.get("brand"),
            image_url=row.get("image_url"),
            calories=float(row.get("calories") or 0.0),
            protein_g=float(row.get("protein_g") or 0.0),
            carbs_g=float(row.get("carbs_g") or 0.0),
            fat_g=float(row.get("fat_g") or 0.0),
            fiber_g=row.get("fiber_g"),
            sugar_g=row.get("sugar_g"),
            nutriscore=row.get("nutriscore"),
        ),
        last_used_at=datetime.fromisoformat(str(row["last_used_at"])),
        use_count=int(row.get("use_count") or 0),
        last_amount=float(row.get("last_amount") or 0.0),
    )
