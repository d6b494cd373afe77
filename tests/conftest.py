"""Shared test fixtures."""

import logging
from dataclasses import dataclass, field, replace
from datetime import UTC, date, datetime
from uuid import UUID, uuid4

import httpx
import pytest

from fitpro.adapters.off_client import FoodDatabaseClient
from fitpro.config import Settings
from fitpro.containers import AppContainer
from fitpro.domain.food_log import FoodEntry, NewFoodEntry
from fitpro.domain.profile import UserProfile
from fitpro.domain.recent_foods import RecentFood
from fitpro.domain.recipes import Recipe
from fitpro.services.cache import InMemoryCache
from fitpro.services.daily_nutrition import DailyNutritionService
from fitpro.services.food_log import FoodLogRepository, FoodLogService
from fitpro.services.food_search import FoodSearchService
from fitpro.services.live import ChangeFeed
from fitpro.services.profile import ProfileRepository, ProfileService
from fitpro.services.recent_foods import RecentFoodRepository, RecentFoodsService
from fitpro.services.recipes import (
    RecipeImageStore,
    RecipeRelationRepository,
    RecipeRepository,
    RecipeService,
    RecipeSocialService,
)

TODAY = date(2026, 10, 19)
NOW = datetime(2026, 10, 19, 12, 0, tzinfo=UTC)


@dataclass
class InMemoryProfileRepository(ProfileRepository):
    """In-memory profile repository for tests."""

    profiles: dict[UUID, UserProfile] = field(default_factory=dict)
    merges: list[dict[str, object]] = field(default_factory=list)

    def get_profile(self, user_id: UUID) -> UserProfile | None:
        return self.profiles.get(user_id)

    def merge_profile(self, user_id: UUID, changes: dict[str, object]) -> UserProfile:
        self.merges.append(dict(changes))
        current = self.profiles.get(user_id) or UserProfile(user_id=user_id)
        merged = replace(current, **changes)
        self.profiles[user_id] = merged
        return merged


@dataclass
class InMemoryFoodLogRepository(FoodLogRepository):
    """In-memory food log repository for tests."""

    entries: dict[tuple[UUID, date], list[FoodEntry]] = field(default_factory=dict)

    def add_entries(
        self, user_id: UUID, day: date, entries: list[NewFoodEntry]
    ) -> list[FoodEntry]:
        created = [
            FoodEntry(
                id=uuid4(),
                day=day,
                name=entry.name,
                brand=entry.brand,
                barcode=entry.barcode,
                amount=entry.amount,
                unit=entry.unit,
                calories=entry.calories,
                protein_g=entry.protein_g,
                carbs_g=entry.carbs_g,
                fat_g=entry.fat_g,
                fiber_g=entry.fiber_g,
                sugar_g=entry.sugar_g,
                meal_type=entry.meal_type.value,
                logged_at=entry.logged_at,
            )
            for entry in entries
        ]
        self.entries.setdefault((user_id, day), []).extend(created)
        return created

    def list_entries(self, user_id: UUID, day: date) -> list[FoodEntry]:
        return list(self.entries.get((user_id, day), []))

    def delete_entry(self, user_id: UUID, day: date, entry_id: UUID) -> bool:
        items = self.entries.get((user_id, day), [])
        remaining = [entry for entry in items if entry.id != entry_id]
        self.entries[(user_id, day)] = remaining
        return len(remaining) != len(items)


@dataclass
class InMemoryRecentFoodRepository(RecentFoodRepository):
    """In-memory recent foods repository for tests."""

    foods: dict[tuple[UUID, str], RecentFood] = field(default_factory=dict)
    fail_writes: bool = False

    def get_use_count(self, user_id: UUID, food_key: str) -> int:
        recent = self.foods.get((user_id, food_key))
        return recent.use_count if recent else 0

    def upsert_recent_food(
        self, user_id: UUID, food_key: str, recent: RecentFood
    ) -> None:
        if self.fail_writes:
            raise RuntimeError("Failed to store recent food")
        self.foods[(user_id, food_key)] = recent

    def list_recent_foods(self, user_id: UUID, limit: int) -> list[RecentFood]:
        items = [recent for (owner, _), recent in self.foods.items() if owner == user_id]
        return sorted(items, key=lambda item: item.last_used_at, reverse=True)[:limit]


@dataclass
class InMemoryRecipeRepository(RecipeRepository):
    """In-memory recipe repository for tests."""

    recipes: dict[UUID, Recipe] = field(default_factory=dict)
    fail_like_count: bool = False

    def insert_recipe(self, recipe: Recipe) -> Recipe:
        self.recipes[recipe.id] = recipe
        return recipe

    def update_recipe(self, recipe: Recipe) -> Recipe:
        self.recipes[recipe.id] = recipe
        return recipe

    def get_recipe(self, recipe_id: UUID) -> Recipe | None:
        return self.recipes.get(recipe_id)

    def delete_recipe(self, recipe_id: UUID) -> None:
        self.recipes.pop(recipe_id, None)

    def list_by_author(self, author_id: UUID) -> list[Recipe]:
        items = [recipe for recipe in self.recipes.values() if recipe.author_id == author_id]
        return sorted(items, key=lambda recipe: recipe.created_at, reverse=True)

    def list_public(self, limit: int) -> list[Recipe]:
        items = [recipe for recipe in self.recipes.values() if recipe.is_public]
        return sorted(items, key=lambda recipe: recipe.like_count, reverse=True)[:limit]

    def list_by_ids(self, recipe_ids: list[UUID]) -> list[Recipe]:
        return [self.recipes[item] for item in recipe_ids if item in self.recipes]

    def set_image_path(self, recipe_id: UUID, image_path: str) -> None:
        self.recipes[recipe_id] = replace(self.recipes[recipe_id], image_path=image_path)

    def adjust_like_count(self, recipe_id: UUID, delta: int) -> int:
        if self.fail_like_count:
            raise RuntimeError("Failed to update like count")
        recipe = self.recipes[recipe_id]
        like_count = max(0, recipe.like_count + delta)
        self.recipes[recipe_id] = replace(recipe, like_count=like_count)
        return like_count


@dataclass
class InMemoryRecipeRelationRepository(RecipeRelationRepository):
    """In-memory like/save relations for tests."""

    relations: list[tuple[str, UUID, UUID]] = field(default_factory=list)
    fail_writes: bool = False

    def has_relation(self, kind: str, user_id: UUID, recipe_id: UUID) -> bool:
        return (kind, user_id, recipe_id) in self.relations

    def add_relation(self, kind: str, user_id: UUID, recipe_id: UUID) -> None:
        if self.fail_writes:
            raise RuntimeError("Failed to store relation")
        if (kind, user_id, recipe_id) not in self.relations:
            self.relations.append((kind, user_id, recipe_id))

    def remove_relation(self, kind: str, user_id: UUID, recipe_id: UUID) -> None:
        if self.fail_writes:
            raise RuntimeError("Failed to delete relation")
        if (kind, user_id, recipe_id) in self.relations:
            self.relations.remove((kind, user_id, recipe_id))

    def list_recipe_ids(self, kind: str, user_id: UUID) -> list[UUID]:
        return [
            recipe_id
            for relation_kind, owner, recipe_id in reversed(self.relations)
            if relation_kind == kind and owner == user_id
        ]


@dataclass
class InMemoryRecipeImageStore(RecipeImageStore):
    """Records uploads and signs URLs with a counter."""

    objects: dict[str, tuple[bytes, str]] = field(default_factory=dict)
    signed: int = 0

    def upload(self, path: str, content: bytes, content_type: str) -> None:
        self.objects[path] = (content, content_type)

    def signed_url(self, path: str, ttl_seconds: int) -> str:
        self.signed += 1
        return f"https://storage.test/{path}?ttl={ttl_seconds}&n={self.signed}"


@dataclass
class FakeFoodDatabaseClient(FoodDatabaseClient):
    """Fake food database returning canned payloads."""

    products: list[dict[str, object]] = field(default_factory=list)
    barcodes: dict[str, dict[str, object]] = field(default_factory=dict)
    error: Exception | None = None
    search_calls: list[str] = field(default_factory=list)
    barcode_calls: list[str] = field(default_factory=list)

    async def search_products(self, query: str, page_size: int) -> dict[str, object]:
        self.search_calls.append(query)
        if self.error is not None:
            raise self.error
        return {"count": len(self.products), "products": self.products}

    async def get_product(self, barcode: str) -> dict[str, object]:
        self.barcode_calls.append(barcode)
        if self.error is not None:
            raise self.error
        product = self.barcodes.get(barcode)
        if product is None:
            return {"status": 0, "status_verbose": "product not found"}
        return {"status": 1, "product": product}


def off_product(name: str = "Skyr Natur", **overrides: object) -> dict[str, object]:
    """Build a raw Open Food Facts product."""
    product: dict[str, object] = {
        "code": "4008452011004",
        "product_name": name,
        "brands": "Milbona, Lidl",
        "image_front_small_url": "https://images.test/skyr.jpg",
        "nutrition_grades": "a",
        "nutriments": {
            "energy-kcal_100g": 63,
            "proteins_100g": 11,
            "carbohydrates_100g": 4,
            "fat_100g": 0.2,
        },
    }
    product.update(overrides)
    return product


def http_status_error(status_code: int) -> httpx.HTTPStatusError:
    """Build an httpx status error for the given code."""
    request = httpx.Request("GET", "https://world.openfoodfacts.test/cgi/search.pl")
    response = httpx.Response(status_code, request=request)
    return httpx.HTTPStatusError("error", request=request, response=response)


@pytest.fixture(autouse=True)
def _propagate_app_logs() -> None:
    """Let caplog see records even after configure_logging disabled propagation."""
    logging.getLogger("fitpro").propagate = True


@pytest.fixture
def settings() -> Settings:
    return Settings(
        supabase_url="https://example.supabase.co",
        supabase_service_key="header.payload.signature",
        api_token="api-token",
        search_debounce_seconds=0.0,
    )


@pytest.fixture
def feed() -> ChangeFeed:
    return ChangeFeed()


@pytest.fixture
def profile_repository() -> InMemoryProfileRepository:
    return InMemoryProfileRepository()


@pytest.fixture
def food_log_repository() -> InMemoryFoodLogRepository:
    return InMemoryFoodLogRepository()


@pytest.fixture
def recent_food_repository() -> InMemoryRecentFoodRepository:
    return InMemoryRecentFoodRepository()


@pytest.fixture
def recipe_repository() -> InMemoryRecipeRepository:
    return InMemoryRecipeRepository()


@pytest.fixture
def relation_repository() -> InMemoryRecipeRelationRepository:
    return InMemoryRecipeRelationRepository()


@pytest.fixture
def image_store() -> InMemoryRecipeImageStore:
    return InMemoryRecipeImageStore()


@pytest.fixture
def food_database_client() -> FakeFoodDatabaseClient:
    return FakeFoodDatabaseClient(products=[off_product()])


@pytest.fixture
def profile_service(
    profile_repository: InMemoryProfileRepository, feed: ChangeFeed
) -> ProfileService:
    return ProfileService(profile_repository, feed, today=lambda: TODAY)


@pytest.fixture
def recent_foods_service(
    recent_food_repository: InMemoryRecentFoodRepository,
) -> RecentFoodsService:
    return RecentFoodsService(recent_food_repository, clock=lambda: NOW)


@pytest.fixture
def food_log_service(
    food_log_repository: InMemoryFoodLogRepository,
    recent_foods_service: RecentFoodsService,
    feed: ChangeFeed,
) -> FoodLogService:
    return FoodLogService(
        repository=food_log_repository,
        recent_foods=recent_foods_service,
        feed=feed,
        clock=lambda: NOW,
    )


@pytest.fixture
def food_search_service(
    food_database_client: FakeFoodDatabaseClient,
) -> FoodSearchService:
    return FoodSearchService(client=food_database_client, cache=InMemoryCache())


@pytest.fixture
def recipe_service(
    recipe_repository: InMemoryRecipeRepository,
    relation_repository: InMemoryRecipeRelationRepository,
    image_store: InMemoryRecipeImageStore,
) -> RecipeService:
    return RecipeService(
        repository=recipe_repository,
        relations=relation_repository,
        images=image_store,
        clock=lambda: NOW,
    )


@pytest.fixture
def recipe_social_service(
    recipe_repository: InMemoryRecipeRepository,
    relation_repository: InMemoryRecipeRelationRepository,
) -> RecipeSocialService:
    return RecipeSocialService(recipe_repository, relation_repository)


@pytest.fixture
def container(  # noqa: PLR0913
    settings: Settings,
    feed: ChangeFeed,
    profile_service: ProfileService,
    food_log_service: FoodLogService,
    recent_foods_service: RecentFoodsService,
    food_search_service: FoodSearchService,
    recipe_service: RecipeService,
    recipe_social_service: RecipeSocialService,
) -> AppContainer:
    async def close_resources() -> None:
        return None

    return AppContainer(
        settings=settings,
        change_feed=feed,
        profile_service=profile_service,
        food_log_service=food_log_service,
        daily_nutrition_service=DailyNutritionService(
            food_log=food_log_service.repository,
            profiles=profile_service.repository,
        ),
        recent_foods_service=recent_foods_service,
        food_search_service=food_search_service,
        recipe_service=recipe_service,
        recipe_social_service=recipe_social_service,
        close_resources=close_resources,
    )
