"""
Configuration Utility - Environment Variables Management

Centralized configuration loading from .env files using pydantic-settings.
Type-safe access to all environment variables with validation.

Connection strings may also be supplied under the host-style names
``ConnectionStrings__Redis`` and ``ConnectionStrings__Postgres``.

Usage:
    from utils.config import settings

    redis_url = settings.REDIS_URL
    queue_name = settings.QUEUE_NAME
"""

from functools import lru_cache

from pydantic import AliasChoices, Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    # Redis Configuration
    REDIS_URL: str = Field(
        default="redis://localhost:6379/0",
        validation_alias=AliasChoices("REDIS_URL", "ConnectionStrings__Redis"),
    )
    REDIS_MAX_CONNECTIONS: int = Field(default=10)
    QUEUE_NAME: str = Field(default="persons_queue")

    # Database Configuration
    POSTGRES_DSN: str | None = Field(
        default=None,
        validation_alias=AliasChoices("POSTGRES_DSN", "ConnectionStrings__Postgres"),
    )
    DB_CONNECT_TIMEOUT: int = Field(default=10)

    # Worker Configuration
    EMPTY_BACKOFF_SECONDS: float = Field(default=1.0, gt=0)
    ERROR_BACKOFF_SECONDS: float = Field(default=5.0, gt=0)
    RUN_ONCE: bool = Field(default=False)

    # Logging Configuration
    LOG_LEVEL: str = Field(default="INFO")
    LOG_FORMAT: str = Field(default="json")

    # Application Metadata
    APP_NAME: str = Field(default="person-worker")

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=True,
        extra="ignore",
    )

    @field_validator("REDIS_URL")
    @classmethod
    def normalize_redis_url(cls, v: str) -> str:
        """Accept bare ``host:port`` endpoints as well as full redis URLs."""
        v = v.strip()
        if "://" not in v:
            return f"redis://{v}"
        return v


@lru_cache()
def get_settings() -> Settings:
    """Get cached settings instance.

    Returns:
        Singleton Settings instance
    """
    return Settings()


# Global settings instance
settings = get_settings()
