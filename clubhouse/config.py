"""Typed settings configuration - single source of truth."""

from functools import lru_cache

from pydantic import model_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    model_config = SettingsConfigDict(env_file=".env", env_file_encoding="utf-8", extra="ignore")

    # Database
    database_url: str = "sqlite+aiosqlite:///./clubhouse.db"

    # Cache (shared tier is disabled when unset)
    redis_url: str | None = None

    # Membership cache lifetimes (seconds)
    membership_cache_ttl_seconds: int = 24 * 3600
    membership_cache_local_ttl_seconds: int = 24 * 3600
    membership_cache_key_prefix: str = "user-clubs"

    # Logging
    log_level: str = "INFO"

    @model_validator(mode="after")
    def _local_ttl_within_shared_ttl(self) -> "Settings":
        if self.membership_cache_local_ttl_seconds > self.membership_cache_ttl_seconds:
            raise ValueError(
                "membership_cache_local_ttl_seconds must not exceed membership_cache_ttl_seconds"
            )
        return self


@lru_cache
def get_settings() -> Settings:
    """Get cached settings instance."""
    return Settings()
