"""Tests for logging foods and the recent foods list."""

import logging
import math
from dataclasses import replace
from datetime import UTC, date, datetime
from uuid import uuid4

import pytest

from fitpro.domain.food_log import MealType
from fitpro.domain.nutrition import FoodCandidate, round_half_up
from fitpro.services.food_log import (
    FoodEntryNotFoundError,
    FoodEntryValidationError,
    FoodLogService,
    FoodPortion,
    build_entry,
)
from fitpro.services.live import ChangeFeed, food_log_topic
from fitpro.services.recent_foods import RecentFoodsService, food_key

DAY = date(2026, 10, 19)
SKYR = FoodCandidate(
    barcode="4008452011004",
    name="Skyr Natur",
    brand="Milbona",
    calories=63,
    protein_g=11,
    carbs_g=4,
    fat_g=0.2,
    sugar_g=4,
)
OATS = FoodCandidate(
    barcode="",
    name="Haferflocken (zart)",
    calories=372,
    protein_g=13.5,
    carbs_g=58.7,
    fat_g=7,
)


def test_build_entry_scales_to_portion() -> None:
    entry = build_entry(
        FoodPortion(SKYR, 150), MealType.BREAKFAST, datetime(2026, 10, 19, tzinfo=UTC)
    )

    assert entry.amount == 150
    assert entry.calories == 95
    assert entry.protein_g == 16.5
    assert entry.fat_g == 0.3
    assert entry.sugar_g == 6.0
    assert entry.fiber_g is None
    assert entry.barcode == "4008452011004"


def test_build_entry_defaults_missing_amount_to_100g() -> None:
    entry = build_entry(
        FoodPortion(OATS, 0), MealType.SNACK, datetime(2026, 10, 19, tzinfo=UTC)
    )

    assert entry.amount == 100
    assert entry.calories == 372
    assert entry.barcode is None


def test_add_entries_stores_publishes_and_records_recent(
    food_log_service: FoodLogService,
    recent_foods_service: RecentFoodsService,
    feed: ChangeFeed,
) -> None:
    user_id = uuid4()
    published: list[object] = []
    feed.subscribe(food_log_topic(user_id, DAY), published.append)

    created = food_log_service.add_entries(
        user_id, DAY, [FoodPortion(SKYR, 150), FoodPortion(OATS, 50)], MealType.BREAKFAST
    )

    assert [entry.name for entry in created] == ["Skyr Natur", "Haferflocken (zart)"]
    assert all(entry.meal_type == "breakfast" for entry in created)
    assert len(published) == 1
    assert len(published[0]) == 2
    recent = recent_foods_service.list_recent(user_id)
    assert {item.food.name for item in recent} == {"Skyr Natur", "Haferflocken (zart)"}


def test_add_entries_counts_repeated_use(
    food_log_service: FoodLogService,
    recent_foods_service: RecentFoodsService,
) -> None:
    user_id = uuid4()
    food_log_service.add_entries(user_id, DAY, [FoodPortion(SKYR, 150)], MealType.LUNCH)
    food_log_service.add_entries(user_id, DAY, [FoodPortion(SKYR, 200)], MealType.DINNER)

    [recent] = recent_foods_service.list_recent(user_id)

    assert recent.use_count == 2
    assert recent.last_amount == 200


def test_recent_food_failure_does_not_block_logging(
    food_log_service: FoodLogService, recent_food_repository, caplog
) -> None:
    recent_food_repository.fail_writes = True
    user_id = uuid4()

    with caplog.at_level(logging.ERROR):
        created = food_log_service.add_entries(
            user_id, DAY, [FoodPortion(SKYR, 100)], MealType.SNACK
        )

    assert len(created) == 1
    assert "Failed to record recent food" in caplog.text


def test_delete_entry(food_log_service: FoodLogService, feed: ChangeFeed) -> None:
    user_id = uuid4()
    [entry] = food_log_service.add_entries(
        user_id, DAY, [FoodPortion(SKYR, 100)], MealType.SNACK
    )
    published: list[object] = []
    feed.subscribe(food_log_topic(user_id, DAY), published.append)

    food_log_service.delete_entry(user_id, DAY, entry.id)

    assert food_log_service.list_entries(user_id, DAY) == []
    assert published == [[]]
    with pytest.raises(FoodEntryNotFoundError):
        food_log_service.delete_entry(user_id, DAY, entry.id)


def test_add_entries_without_items_is_a_no_op(food_log_service: FoodLogService) -> None:
    assert food_log_service.add_entries(uuid4(), DAY, [], MealType.LUNCH) == []


def test_food_key_prefers_barcode() -> None:
    assert food_key(SKYR) == "4008452011004"
    assert food_key(OATS) == "haferflocken--zart-"


def test_build_entry_keeps_zero_fiber_and_sugar() -> None:
    water = FoodCandidate(
        barcode="",
        name="Mineralwasser",
        calories=0,
        protein_g=0,
        carbs_g=0,
        fat_g=0,
        fiber_g=0.0,
        sugar_g=0.0,
    )

    entry = build_entry(
        FoodPortion(water, 500), MealType.LUNCH, datetime(2026, 10, 19, tzinfo=UTC)
    )

    assert entry.fiber_g == 0.0
    assert entry.sugar_g == 0.0


@pytest.mark.parametrize(
    "food",
    [
        replace(SKYR, calories=-500),
        replace(SKYR, protein_g=-20),
        replace(SKYR, calories=math.nan),
        replace(SKYR, fat_g=math.inf),
        replace(SKYR, fiber_g=-1.0),
    ],
)
def test_build_entry_rejects_negative_or_non_finite_values(food: FoodCandidate) -> None:
    with pytest.raises(FoodEntryValidationError):
        build_entry(
            FoodPortion(food, 100), MealType.SNACK, datetime(2026, 10, 19, tzinfo=UTC)
        )


def test_add_entries_rejects_negative_amount(food_log_service: FoodLogService) -> None:
    user_id = uuid4()

    with pytest.raises(FoodEntryValidationError):
        food_log_service.add_entries(
            user_id, DAY, [FoodPortion(SKYR, -50)], MealType.SNACK
        )

    assert food_log_service.list_entries(user_id, DAY) == []


def test_round_half_up_rejects_non_finite_values() -> None:
    assert round_half_up(2.5) == 3
    with pytest.raises(ValueError):
        round_half_up(math.nan)
