"""Dependency container wiring for the application."""

from collections.abc import Awaitable, Callable
from dataclasses import dataclass

from supabase import create_client

from fitpro.adapters.off_client import HttpxOpenFoodFactsClient
from fitpro.adapters.supabase_food_log_repository import SupabaseFoodLogRepository
from fitpro.adapters.supabase_profile_repository import SupabaseProfileRepository
from fitpro.adapters.supabase_recent_food_repository import (
    SupabaseRecentFoodRepository,
)
from fitpro.adapters.supabase_recipe_image_store import SupabaseRecipeImageStore
from fitpro.adapters.supabase_recipe_repository import (
    SupabaseRecipeRelationRepository,
    SupabaseRecipeRepository,
)
from fitpro.config import Settings
from fitpro.services.cache import InMemoryCache
from fitpro.services.daily_nutrition import DailyNutritionService
from fitpro.services.food_log import FoodLogService
from fitpro.services.food_search import FoodSearchService, SearchDebouncer
from fitpro.services.live import ChangeFeed
from fitpro.services.profile import ProfileService
from fitpro.services.recent_foods import RecentFoodsService
from fitpro.services.recipes import RecipeService, RecipeSocialService


@dataclass
class AppContainer:
    """Holds application-wide dependencies."""

    settings: Settings
    change_feed: ChangeFeed
    profile_service: ProfileService
    food_log_service: FoodLogService
    daily_nutrition_service: DailyNutritionService
    recent_foods_service: RecentFoodsService
    food_search_service: FoodSearchService
    recipe_service: RecipeService
    recipe_social_service: RecipeSocialService
    close_resources: Callable[[], Awaitable[None]]

    def new_search_debouncer(self) -> SearchDebouncer:
        """Return a debouncer for one search-as-you-type session."""
        return SearchDebouncer(
            service=self.food_search_service,
            delay_seconds=self.settings.search_debounce_seconds,
        )


def build_container(settings: Settings | None = None) -> AppContainer:
    """Create the default dependency container."""
    resolved_settings = settings or Settings()
    supabase_client = create_client(
        resolved_settings.supabase_url, resolved_settings.supabase_service_key
    )
    profile_repository = SupabaseProfileRepository(supabase_client)
    food_log_repository = SupabaseFoodLogRepository(supabase_client)
    recent_food_repository = SupabaseRecentFoodRepository(supabase_client)
    recipe_repository = SupabaseRecipeRepository(supabase_client)
    relation_repository = SupabaseRecipeRelationRepository(supabase_client)
    image_store = SupabaseRecipeImageStore(
        supabase_client, bucket=resolved_settings.recipe_image_bucket
    )
    change_feed = ChangeFeed()
    off_client = HttpxOpenFoodFactsClient.create(
        base_url=resolved_settings.off_base_url,
        user_agent=resolved_settings.off_user_agent,
        locale=resolved_settings.off_locale,
        timeout_seconds=resolved_settings.search_timeout_seconds,
    )
    food_search_service = FoodSearchService(
        client=off_client,
        cache=InMemoryCache(),
        locale=resolved_settings.off_locale,
        page_size=resolved_settings.off_page_size,
        search_ttl_seconds=resolved_settings.search_cache_ttl_seconds,
    )
    recent_foods_service = RecentFoodsService(recent_food_repository)
    profile_service = ProfileService(profile_repository, change_feed)
    food_log_service = FoodLogService(
        repository=food_log_repository,
        recent_foods=recent_foods_service,
        feed=change_feed,
    )
    daily_nutrition_service = DailyNutritionService(
        food_log=food_log_repository,
        profiles=profile_repository,
    )
    recipe_service = RecipeService(
        repository=recipe_repository,
        relations=relation_repository,
        images=image_store,
        image_url_ttl_seconds=resolved_settings.recipe_image_url_ttl_seconds,
    )
    recipe_social_service = RecipeSocialService(
        repository=recipe_repository,
        relations=relation_repository,
    )

    async def close_resources() -> None:
        await off_client.close()

    return AppContainer(
        settings=resolved_settings,
        change_feed=change_feed,
        profile_service=profile_service,
        food_log_service=food_log_service,
        daily_nutrition_service=daily_nutrition_service,
        recent_foods_service=recent_foods_service,
        food_search_service=food_search_service,
        recipe_service=recipe_service,
        recipe_social_service=recipe_social_service,
        close_resources=close_resources,
    )
