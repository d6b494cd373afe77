"""Energy and macro target calculations (Mifflin-St Jeor)."""

import logging
from dataclasses import dataclass
from datetime import date

from fitpro.domain.nutrition import round_int
from fitpro.domain.profile import (
    ActivityLevel,
    CalculatedMetrics,
    Gender,
    Goal,
    UserProfile,
)

ACTIVITY_MULTIPLIERS: dict[ActivityLevel, float] = {
    ActivityLevel.SEDENTARY: 1.2,
    ActivityLevel.LIGHTLY_ACTIVE: 1.375,
    ActivityLevel.MODERATELY_ACTIVE: 1.55,
    ActivityLevel.VERY_ACTIVE: 1.725,
    ActivityLevel.EXTREMELY_ACTIVE: 1.9,
}

GOAL_CALORIE_DELTA: dict[Goal, int] = {
    Goal.LOSE: -500,
    Goal.MAINTAIN: 0,
    Goal.GAIN: 350,
}

# (protein, carbs, fat) share of the calorie target
GOAL_MACRO_RATIOS: dict[Goal, tuple[float, float, float]] = {
    Goal.LOSE: (0.35, 0.35, 0.30),
    Goal.MAINTAIN: (0.30, 0.40, 0.30),
    Goal.GAIN: (0.30, 0.45, 0.25),
}

GENDER_OFFSETS: dict[Gender, int] = {
    Gender.MALE: 5,
    Gender.FEMALE: -161,
    Gender.UNDISCLOSED: -78,
}

MIN_DAILY_CALORIES = 1200
KCAL_PER_G_PROTEIN = 4
KCAL_PER_G_CARBS = 4
KCAL_PER_G_FAT = 9

_logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class EnergyTargets:
    """Daily expenditure and intake targets derived from a BMR."""

    tdee: int
    calories: int
    protein_g: int
    carbs_g: int
    fat_g: int


def calculate_age(birthday: date, today: date | None = None) -> int:
    """Return full years between birthday and today."""
    current = today or date.today()
    age = current.year - birthday.year
    if (current.month, current.day) < (birthday.month, birthday.day):
        age -= 1
    return age


def has_required_age(
    birthday: date, minimum_age: int, today: date | None = None
) -> bool:
    """Return True when the birthday is in the past and old enough."""
    current = today or date.today()
    if minimum_age < 0 or birthday > current:
        return False
    return calculate_age(birthday, current) >= minimum_age


def calculate_bmr(weight_kg: float, height_cm: float, age: int, gender: Gender) -> int:
    """Basal metabolic rate in kcal/day."""
    base = 10 * weight_kg + 6.25 * height_cm - 5 * age
    return round_int(base + GENDER_OFFSETS[gender])


def calculate_user_metrics(
    profile: UserProfile, today: date | None = None
) -> CalculatedMetrics | None:
    """Compute BMR, TDEE and daily targets, or None if the profile is incomplete."""
    missing = [
        name
        for name, value in (
            ("birthday", profile.birthday),
            ("weight_kg", profile.weight_kg),
            ("height_cm", profile.height_cm),
            ("gender", profile.gender),
            ("activity_level", profile.activity_level),
            ("goal", profile.goal),
        )
        if not value or (isinstance(value, int | float) and value <= 0)
    ]
    if missing:
        _logger.warning(
            "Cannot calculate metrics for user %s, missing fields: %s",
            profile.user_id,
            ", ".join(missing),
        )
        return None

    age = calculate_age(profile.birthday, today)
    bmr = calculate_bmr(profile.weight_kg, profile.height_cm, age, profile.gender)
    targets = calculate_targets(bmr, profile.activity_level, profile.goal)
    return CalculatedMetrics(
        age=age,
        bmr=bmr,
        tdee=targets.tdee,
        daily_calorie_target=targets.calories,
        daily_protein_target=targets.protein_g,
        daily_carbs_target=targets.carbs_g,
        daily_fat_target=targets.fat_g,
    )


def calculate_targets(
    bmr: int, activity_level: ActivityLevel, goal: Goal
) -> EnergyTargets:
    """Scale BMR by activity, apply the goal delta and split into macros.

    The calorie target never drops below ``MIN_DAILY_CALORIES``. Each gram
    target is rounded on its own, so their kcal sum may differ slightly from
    the calorie target.
    """
    tdee = round_int(bmr * ACTIVITY_MULTIPLIERS[activity_level])
    calories = max(MIN_DAILY_CALORIES, tdee + GOAL_CALORIE_DELTA[goal])
    protein_ratio, carbs_ratio, fat_ratio = GOAL_MACRO_RATIOS[goal]
    return EnergyTargets(
        tdee=tdee,
        calories=calories,
        protein_g=round_int(calories * protein_ratio / KCAL_PER_G_PROTEIN),
        carbs_g=round_int(calories * carbs_ratio / KCAL_PER_G_CARBS),
        fat_g=round_int(calories * fat_ratio / KCAL_PER_G_FAT),
    )
