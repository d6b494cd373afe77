"""Supabase repository for the per-day food log."""

from dataclasses import dataclass
from datetime import UTC, date, datetime
from uuid import UUID

from supabase import Client

from fitpro.domain.food_log import FoodEntry, NewFoodEntry
from fitpro.services.food_log import FoodLogRepository

_COLUMNS = (
    "id, day, name, brand, barcode, amount, unit, calories, protein_g, carbs_g, "
    "fat_g, fiber_g, sugar_g, meal_type, logged_at"
)


@dataclass
class SupabaseFoodLogRepository(FoodLogRepository):
    """Supabase implementation for food entries."""

    client: Client

    def add_entries(
        self, user_id: UUID, day: date, entries: list[NewFoodEntry]
    ) -> list[FoodEntry]:
        """Insert entry rows and return them with ids."""
        payload = [
            {
                "user_id": str(user_id),
                "day": day.isoformat(),
                "name": entry.name,
                "brand": entry.brand,
                "barcode": entry.barcode,
                "amount": entry.amount,
                "unit": entry.unit,
                "calories": entry.calories,
                "protein_g": entry.protein_g,
                "carbs_g": entry.carbs_g,
                "fat_g": entry.fat_g,
                "fiber_g": entry.fiber_g,
                "sugar_g": entry.sugar_g,
                "meal_type": entry.meal_type.value,
                "logged_at": entry.logged_at.isoformat(),
            }
            for entry in entries
        ]
        if not payload:
            return []
        response = self.client.table("food_entries").insert(payload).execute()
        if not response.data:
            raise RuntimeError("Failed to create food entries")
        return [_parse_entry(row) for row in response.data]

    def list_entries(self, user_id: UUID, day: date) -> list[FoodEntry]:
        """Return the entries of a day in logging order."""
        response = (
            self.client.table("food_entries")
            .select(_COLUMNS)
            .eq("user_id", str(user_id))
            .eq("day", day.isoformat())
            .order("logged_at", desc=False)
            .execute()
        )
        return [_parse_entry(row) for row in response.data or []]

    def delete_entry(self, user_id: UUID, day: date, entry_id: UUID) -> bool:
        """Delete one entry scoped to the user and day."""
        response = (
            self.client.table("food_entries")
            .delete()
            .eq("id", str(entry_id))
            .eq("user_id", str(user_id))
            .eq("day", day.isoformat())
            .execute()
        )
        return bool(response.data)


def _parse_entry(row: dict[str, object]) -> FoodEntry:
    return FoodEntry(
        id=UUID(str(row["id"])),
        day=date.fromisoformat(str(row["day"])[:10]),
        name=str(row.get("name") or ""),
        brand=row.get("brand"),
        barcode=row.get("barcode"),
        amount=float(row.get("amount") or 0.0),
        unit=str(row.get("unit") or "g"),
        calories=float(row.get("calories") or 0.0),
        protein_g=float(row.get("protein_g") or 0.0),
        carbs_g=float(row.get("carbs_g") or 0.0),
        fat_g=float(row.get("fat_g") or 0.0),
        fiber_g=_optional_float(row.get("fiber_g")),
        sugar_g=_optional_float(row.get("sugar_g")),
        meal_type=str(row.get("meal_type") or "snack"),
        logged_at=_parse_timestamp(row["logged_at"]),
    )


def _optional_float(value: object) -> float | None:
    if value is None:
        return None
    return float(value)


def _parse_timestamp(value: object) -> datetime:
    """Parse a timestamp; naive values are taken as UTC."""
    parsed = datetime.fromisoformat(str(value))
    if parsed.tzinfo is None:
        return parsed.replace(tzinfo=UTC)
    return parsed
