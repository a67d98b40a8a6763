"""Environment-based configuration using pydantic-settings.

Provides type-safe, validated configuration from environment variables
with sensible defaults. Supports .env files and nested configuration.

Example:
    >>> from retrycase.foundation.config import get_settings
    >>> settings = get_settings()
    >>> settings.retry.max_attempts
    3
    >>> settings.logging.level
    'INFO'

    # Or with environment variables:
    # RETRYCASE_RETRY_MAX_ATTEMPTS=5
    # RETRYCASE_RETRY_BACK_OFF_PERIOD=0.25
    # RETRYCASE_RETRY_RETRYABLE='["transient"]'
    # RETRYCASE_LOG_LEVEL=DEBUG
"""

from __future__ import annotations

from functools import lru_cache
from typing import TYPE_CHECKING, Literal

from pydantic import Field, PositiveInt, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

if TYPE_CHECKING:
    from retrycase.runtime.retry.config import RetryPolicyConfig


class RetrySettings(BaseSettings):
    """Default retry policy configuration."""

    model_config = SettingsConfigDict(
        env_prefix="RETRYCASE_RETRY_",
        extra="ignore",
    )

    max_attempts: PositiveInt = Field(default=3, description="Total attempts including the first")
    back_off_period: float = Field(
        default=1.0, ge=0, allow_inf_nan=False, description="Delay between attempts in seconds",
    )
    retryable: list[str] | str | None = Field(
        default_factory=lambda: ["any"],
        description="Retryable failure category names; empty or null never retries",
    )

    @field_validator("retryable", mode="before")
    @classmethod
    def _split_names(cls, v: object) -> object:
        """Accept a comma-separated string as well as a JSON list."""
        if isinstance(v, str):
            return [s.strip() for s in v.split(",") if s.strip()]
        return v

    def to_policy_config(self) -> RetryPolicyConfig:
        from retrycase.runtime.retry.config import RetryPolicyConfig
        return RetryPolicyConfig.build(
            max_attempts=self.max_attempts, back_off_period=self.back_off_period, retryable=self.retryable,
        )


class LoggingSettings(BaseSettings):
    """Logging configuration."""

    model_config = SettingsConfigDict(
        env_prefix="RETRYCASE_LOG_",
        extra="ignore",
    )

    level: Literal["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"] = "INFO"
    format: Literal["json", "text"] = "text"

    @field_validator("level", mode="before")
    @classmethod
    def _upper(cls, v: str) -> str:
        return v.upper() if isinstance(v, str) else v


class RetrycaseSettings(BaseSettings):
    """Root settings for retrycase.

    Loads configuration from environment variables with RETRYCASE_ prefix.

    Example environment variables:
        RETRYCASE_RETRY_MAX_ATTEMPTS=5
        RETRYCASE_LOG_FORMAT=json
    """

    model_config = SettingsConfigDict(
        env_prefix="RETRYCASE_",
        env_file=".env",
        env_file_encoding="utf-8",
        env_nested_delimiter="__",
        extra="ignore",
        validate_default=True,
    )

    # Nested settings (loaded with RETRYCASE_RETRY_, RETRYCASE_LOG_)
    retry: RetrySettings = Field(default_factory=RetrySettings)
    logging: LoggingSettings = Field(default_factory=LoggingSettings)


@lru_cache(maxsize=1)
def get_settings() -> RetrycaseSettings:
    """Get the global settings instance (cached)."""
    return RetrycaseSettings()


def clear_settings_cache() -> None:
    """Clear the settings cache (useful for testing).

    After calling this, the next get_settings() call will
    reload configuration from environment.
    """
    get_settings.cache_clear()
