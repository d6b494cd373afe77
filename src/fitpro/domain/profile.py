"""Domain models for user profiles and onboarding."""

from dataclasses import dataclass
from datetime import date
from enum import StrEnum
from uuid import UUID


class Gender(StrEnum):
    """Gender used by the BMR formula."""

    MALE = "male"
    FEMALE = "female"
    UNDISCLOSED = "undisclosed"


class Goal(StrEnum):
    """Body weight goal."""

    LOSE = "lose"
    MAINTAIN = "maintain"
    GAIN = "gain"


class ActivityLevel(StrEnum):
    """Daily activity level."""

    SEDENTARY = "sedentary"
    LIGHTLY_ACTIVE = "lightly_active"
    MODERATELY_ACTIVE = "moderately_active"
    VERY_ACTIVE = "very_active"
    EXTREMELY_ACTIVE = "extremely_active"


class Occupation(StrEnum):
    """Occupation captured during onboarding."""

    STUDENT = "student"
    FULLTIME = "fulltime"
    PARTTIME = "parttime"
    FREELANCE = "freelance"
    HOMEMAKER = "homemaker"
    RETIRED = "retired"
    UNEMPLOYED = "unemployed"


@dataclass(frozen=True)
class CalculatedMetrics:
    """Energy and macro targets derived from a profile."""

    age: int
    bmr: int
    tdee: int
    daily_calorie_target: int
    daily_protein_target: int
    daily_carbs_target: int
    daily_fat_target: int


@dataclass(frozen=True)
class UserProfile:
    """Profile document for a user, filled in step by step during onboarding."""

    user_id: UUID
    birthday: date | None = None
    gender: Gender | None = None
    height_cm: float | None = None
    weight_kg: float | None = None
    occupation: Occupation | None = None
    activity_level: ActivityLevel | None = None
    goal: Goal | None = None
    target_weight_kg: float | None = None
    target_date: date | None = None
    metrics: CalculatedMetrics | None = None
    is_onboarded: bool = False
