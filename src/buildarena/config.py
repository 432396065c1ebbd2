"""Application settings via pydantic-settings."""

from functools import lru_cache

from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Configuration loaded from environment variables with BUILDARENA_ prefix."""

    model_config = SettingsConfigDict(
        env_prefix="BUILDARENA_",
        env_file=".env",
        case_sensitive=False,
    )

    # --- Core ---
    app_version: str = "0.1.0"
    debug: bool = False
    environment: str = "development"
    log_level: str = "INFO"
    log_format: str = "json"

    # --- Storage ---
    # Unset -> process-local memory store (dev / tests only, not shared across workers)
    redis_url: str | None = None
    redis_max_connections: int = 50
    run_ttl_seconds: int = 7 * 24 * 3600

    # --- Locks ---
    lock_timeout_seconds: float = 30.0
    lock_blocking_timeout_seconds: float = 10.0


@lru_cache
def get_settings() -> Settings:
    """Get cached application settings."""
    return Settings()
