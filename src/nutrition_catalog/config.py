"""Application configuration."""

import os

from pydantic_settings import BaseSettings, SettingsConfigDict

_ENVIRONMENT = os.getenv("ENVIRONMENT", "local")


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    supabase_url: str
    supabase_service_key: str
    asset_bucket: str = "food-images"
    asset_local_dir: str = "var/food_images"
    legacy_store_dir: str = "var/legacy_foods"
    asset_upload_timeout_seconds: float = 5.0
    asset_upload_retry_attempts: int = 1
    asset_upload_retry_delay_seconds: float = 3.0
    catalog_cache_ttl_seconds: int = 900
    catalog_cache_max_size: int = 1000
    moderator_user_ids: str | None = None
    moderator_emails: str | None = None
    environment: str = _ENVIRONMENT

    model_config = SettingsConfigDict(
        env_file=(f".env.{_ENVIRONMENT}", ".env"),
        extra="ignore",
    )


def parse_csv_values(raw: str | None) -> frozenset[str]:
    """Parse a comma-separated allow-list from env."""
    if raw is None:
        return frozenset()
    values = {chunk.strip() for chunk in raw.split(",")}
    values.discard("")
    return frozenset(values)
