"""Application configuration."""

import os

from pydantic_settings import BaseSettings, SettingsConfigDict

_ENVIRONMENT = os.getenv("ENVIRONMENT", "local")


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    supabase_url: str
    supabase_service_key: str
    api_token: str
    off_base_url: str = "https://world.openfoodfacts.org"
    off_user_agent: str = "FitPro/1.0 (fitpro@example.com)"
    off_locale: str = "de"
    off_page_size: int = 24
    search_timeout_seconds: float = 8.0
    search_debounce_seconds: float = 0.35
    search_cache_ttl_seconds: int = 3600
    recipe_image_bucket: str = "recipe-images"
    recipe_image_url_ttl_seconds: int = 3600
    environment: str = _ENVIRONMENT

    model_config = SettingsConfigDict(
        env_file=(f".env.{_ENVIRONMENT}", ".env"),
        extra="ignore",
    )
