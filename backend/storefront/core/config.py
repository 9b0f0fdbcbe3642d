"""
Application configuration settings.

All configuration is loaded from environment variables with sensible defaults.
"""
import json
from typing import Annotated, Any
from functools import lru_cache

from pydantic import field_validator
from pydantic_settings import BaseSettings, NoDecode, SettingsConfigDict


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    # Application
    app_name: str = "Storefront Directory"
    api_debug: bool = True

    # Database
    postgres_host: str = "db"
    postgres_port: int = 5432
    postgres_user: str = "storefront"
    postgres_password: str = "storefront"
    postgres_db: str = "storefront"
    database_url: str | None = None

    # Redis
    redis_url: str = "redis://redis:6379/0"
    celery_broker_url: str = "redis://redis:6379/0"
    celery_result_backend: str = "redis://redis:6379/0"

    # Directory materialization
    # A tenant whose last external sync is older than this is left out of the directory
    directory_freshness_hours: float = 24.0
    directory_refresh_interval_minutes: int = 15

    # Promotions
    promotion_tiers: Annotated[list[str], NoDecode] = ["basic", "premium", "featured"]
    promotion_sweep_interval_minutes: int = 5

    # Category provider
    category_provider: str = "http"  # http, memory
    category_provider_base_url: str = "https://categories.example.com/api/v1"
    category_provider_api_token: str = ""
    category_provider_timeout_seconds: float = 15.0
    category_reconcile_interval_hours: int = 6
    category_lock_timeout_seconds: int = 300

    # Retry policy for provider calls
    provider_max_retries: int = 3
    provider_backoff_factor: float = 2.0
    provider_backoff_base_seconds: float = 0.5
    provider_backoff_max_seconds: float = 10.0

    @field_validator("promotion_tiers", mode="before")
    @classmethod
    def parse_promotion_tiers(cls, v: Any) -> list[str]:
        """Parse tiers from a JSON list or a comma separated string."""
        if isinstance(v, str):
            try:
                v = json.loads(v)
            except json.JSONDecodeError:
                v = v.split(",")
        return [str(tier).strip().lower() for tier in v if str(tier).strip()]

    @property
    def database_url_computed(self) -> str:
        """Compute database URL from components if not explicitly set."""
        if self.database_url:
            return self.database_url
        return (
            f"postgresql+asyncpg://{self.postgres_user}:{self.postgres_password}"
            f"@{self.postgres_host}:{self.postgres_port}/{self.postgres_db}"
        )


@lru_cache()
def get_settings() -> Settings:
    """Get cached settings instance."""
    return Settings()


settings = get_settings()
