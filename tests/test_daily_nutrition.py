"""Tests for the daily food log aggregation."""

import math
from dataclasses import replace
from datetime import UTC, date, datetime, timedelta
from uuid import uuid4

from fitpro.domain.food_log import FoodEntry, MealType
from fitpro.domain.nutrition import MacroTotals
from fitpro.domain.profile import CalculatedMetrics, UserProfile
from fitpro.services.daily_nutrition import (
    DEFAULT_TARGETS,
    DailyNutritionService,
    aggregate_day,
    targets_from_profile,
)

DAY = date(2026, 10, 19)
START = datetime(2026, 10, 19, 7, 0, tzinfo=UTC)
TARGETS = MacroTotals(calories=2000, protein_g=150, carbs_g=200, fat_g=65)


def _entry(
    meal_type: str,
    calories: float,
    protein_g: float = 0.0,
    carbs_g: float = 0.0,
    fat_g: float = 0.0,
    minutes: int = 0,
) -> FoodEntry:
    return FoodEntry(
        id=uuid4(),
        day=DAY,
        name="food",
        amount=100.0,
        unit="g",
        calories=calories,
        protein_g=protein_g,
        carbs_g=carbs_g,
        fat_g=fat_g,
        meal_type=meal_type,
        logged_at=START + timedelta(minutes=minutes),
    )


def test_meal_buckets_and_day_total() -> None:
    summary = aggregate_day(
        DAY, [_entry("breakfast", 400), _entry("lunch", 500)], TARGETS
    )

    assert summary.meals[MealType.BREAKFAST].totals.calories == 400
    assert summary.meals[MealType.LUNCH].totals.calories == 500
    assert summary.meals[MealType.DINNER].entries == []
    assert summary.consumed.calories == 900
    assert summary.remaining.calories == 1100
    assert summary.calorie_progress_percent == 45.0


def test_over_target_clamps_remaining_and_progress() -> None:
    summary = aggregate_day(DAY, [_entry("dinner", 2500, protein_g=160)], TARGETS)

    assert summary.remaining.calories == 0
    assert summary.calorie_progress_percent == 100.0
    assert summary.over.calories == 500
    assert summary.is_over_calories
    assert summary.protein_progress == 1.0
    assert summary.over.protein_g == 10.0
    assert not summary.is_over_fat


def test_every_entry_lands_in_exactly_one_bucket() -> None:
    entries = [
        _entry("breakfast", 100, minutes=3),
        _entry("snack", 50, minutes=1),
        _entry("brunch", 70, minutes=2),
        _entry("dinner", 300, minutes=4),
    ]

    summary = aggregate_day(DAY, entries, TARGETS)
    bucketed = [entry for meal in summary.meals.values() for entry in meal.entries]

    assert sorted(entry.id for entry in bucketed) == sorted(entry.id for entry in entries)
    snack = summary.meals[MealType.SNACK].entries
    assert [entry.meal_type for entry in snack] == ["snack", "brunch"]


def test_bucket_totals_add_up_to_day_total() -> None:
    entries = [
        _entry("breakfast", 120.4, protein_g=3.04, carbs_g=10.05, fat_g=1.15),
        _entry("breakfast", 80.3, protein_g=2.04, carbs_g=5.05, fat_g=0.15),
        _entry("lunch", 410.5, protein_g=20.26, carbs_g=33.33, fat_g=12.44),
    ]

    summary = aggregate_day(DAY, entries, TARGETS)
    buckets = [meal.totals for meal in summary.meals.values()]

    assert summary.consumed.calories == sum(total.calories for total in buckets)
    assert math.isclose(
        summary.consumed.protein_g, sum(total.protein_g for total in buckets)
    )
    assert summary.meals[MealType.BREAKFAST].totals.protein_g == 5.1


def test_zero_or_missing_targets_fall_back_to_defaults() -> None:
    summary = aggregate_day(
        DAY,
        [_entry("lunch", 500)],
        MacroTotals(calories=0, protein_g=-1, carbs_g=float("nan"), fat_g=65),
    )

    assert summary.targets.calories == DEFAULT_TARGETS.calories
    assert summary.targets.protein_g == DEFAULT_TARGETS.protein_g
    assert summary.targets.carbs_g == DEFAULT_TARGETS.carbs_g
    assert math.isfinite(summary.calorie_progress_percent)
    assert aggregate_day(DAY, []).targets == DEFAULT_TARGETS


def test_targets_from_onboarded_profile() -> None:
    profile = UserProfile(
        user_id=uuid4(),
        metrics=CalculatedMetrics(
            age=30,
            bmr=1649,
            tdee=2556,
            daily_calorie_target=2056,
            daily_protein_target=180,
            daily_carbs_target=180,
            daily_fat_target=69,
        ),
        is_onboarded=True,
    )

    assert targets_from_profile(profile) == MacroTotals(2056, 180, 180, 69)
    assert targets_from_profile(None) == DEFAULT_TARGETS


def test_daily_nutrition_service_reads_both_stores(
    food_log_repository, profile_repository
) -> None:
    user_id = uuid4()
    food_log_repository.entries[(user_id, DAY)] = [_entry("lunch", 650)]
    service = DailyNutritionService(food_log_repository, profile_repository)

    summary = service.get_day(user_id, DAY)

    assert summary.consumed.calories == 650
    assert summary.targets == DEFAULT_TARGETS


def test_two_breakfast_entries_and_lunch() -> None:
    summary = aggregate_day(
        DAY,
        [
            _entry("breakfast", 300, minutes=0),
            _entry("lunch", 500, minutes=300),
            _entry("breakfast", 100, minutes=30),
        ],
        TARGETS,
    )

    breakfast = summary.meals[MealType.BREAKFAST]
    assert [entry.calories for entry in breakfast.entries] == [300, 100]
    assert breakfast.totals.calories == 400
    assert summary.meals[MealType.LUNCH].totals.calories == 500
    assert summary.consumed.calories == 900


def test_mixed_naive_and_aware_timestamps_sort() -> None:
    naive = replace(_entry("snack", 50), logged_at=datetime(2026, 10, 19, 8, 0))
    aware = _entry("snack", 70, minutes=-60)

    summary = aggregate_day(DAY, [naive, aware], TARGETS)

    assert [entry.calories for entry in summary.meals[MealType.SNACK].entries] == [70, 50]
