"""Supabase-backed profile repository."""

from dataclasses import dataclass
from datetime import UTC, date, datetime
from enum import Enum
from typing import TypeVar
from uuid import UUID

from supabase import Client

from fitpro.domain.profile import (
    ActivityLevel,
    CalculatedMetrics,
    Gender,
    Goal,
    Occupation,
    UserProfile,
)
from fitpro.services.profile import ProfileRepository

_METRIC_COLUMNS = (
    "age",
    "bmr",
    "tdee",
    "daily_calorie_target",
    "daily_protein_target",
    "daily_carbs_target",
    "daily_fat_target",
)

E = TypeVar("E", bound=Enum)


@dataclass
class SupabaseProfileRepository(ProfileRepository):
    """Supabase implementation for profile documents."""

    client: Client

    def get_profile(self, user_id: UUID) -> UserProfile | None:
        """Return the profile row for a user, if present."""
        response = (
            self.client.table("profiles")
            .select("*")
            .eq("user_id", str(user_id))
            .limit(1)
            .execute()
        )
        if not response.data:
            return None
        return _parse_profile(response.data[0])

    def merge_profile(self, user_id: UUID, changes: dict[str, object]) -> UserProfile:
        """Upsert only the changed columns and return the merged row."""
        payload: dict[str, object] = {
            "user_id": str(user_id),
            "updated_at": datetime.now(tz=UTC).isoformat(),
        }
        for key, value in changes.items():
            if isinstance(value, CalculatedMetrics):
                payload.update(
                    {column: getattr(value, column) for column in _METRIC_COLUMNS}
                )
            else:
                payload[key] = _serialize(value)
        response = (
            self.client.table("profiles")
            .upsert(payload, on_conflict="user_id")
            .execute()
        )
        if not response.data:
            raise RuntimeError("Failed to update profile")
        return _parse_profile(response.data[0])


def _serialize(value: object) -> object:
    if isinstance(value, Enum):
        return value.value
    if isinstance(value, date):
        return value.isoformat()
    return value


def _parse_profile(row: dict[str, object]) -> UserProfile:
    is_onboarded = bool(row.get("is_onboarded"))
    metrics = None
    if is_onboarded and all(row.get(column) is not None for column in _METRIC_COLUMNS):
        metrics = CalculatedMetrics(
            **{column: int(row[column]) for column in _METRIC_COLUMNS}
        )
    return UserProfile(
        user_id=UUID(str(row["user_id"])),
        birthday=_parse_date(row.get("birthday")),
        gender=_parse_enum(Gender, row.get("gender")),
        height_cm=_parse_float(row.get("height_cm")),
        weight_kg=_parse_float(row.get("weight_kg")),
        occupation=_parse_enum(Occupation, row.get("occupation")),
        activity_level=_parse_enum(ActivityLevel, row.get("activity_level")),
        goal=_parse_enum(Goal, row.get("goal")),
        target_weight_kg=_parse_float(row.get("target_weight_kg")),
        target_date=_parse_date(row.get("target_date")),
        metrics=metrics,
        is_onboarded=is_onboarded and metrics is not None,
    )


def _parse_date(value: object) -> date | None:
    if not isinstance(value, str) or not value:
        return None
    return date.fromisoformat(value[:10])


def _parse_float(value: object) -> float | None:
    if isinstance(value, bool) or value is None:
        return None
    try:
        return float(value)
    except (TypeError, ValueError):
        return None


def _parse_enum(enum_type: type[E], value: object) -> E | None:
    try:
        return enum_type(value)
    except ValueError:
        return None
