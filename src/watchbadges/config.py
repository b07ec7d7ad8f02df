"""Application settings via pydantic-settings."""

from functools import lru_cache

from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Application configuration loaded from environment variables with WB_ prefix."""

    model_config = SettingsConfigDict(
        env_prefix="WB_",
        env_file=".env",
        case_sensitive=False,
    )

    # --- Core ---
    app_version: str = "0.1.0"
    debug: bool = False
    environment: str = "development"
    redis_url: str = "redis://localhost:6379/0"
    log_level: str = "INFO"
    log_format: str = "json"

    # --- Shared store ---
    store_key_prefix: str = "wb:"
    store_transaction_max_retries: int = 25

    # --- Badge engine ---
    badge_cache_ttl_seconds: int = 1800  # 30 minutes
    badge_commit_attempts: int = 3
    badge_commit_retry_delay_seconds: float = 0.2
    engine_registry_max_size: int = 10_000

    # --- Counters ---
    default_timezone: str = "UTC"


@lru_cache
def get_settings() -> Settings:
    """Get cached application settings."""
    return Settings()
