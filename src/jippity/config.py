"""Configuration management for Jippity."""

from __future__ import annotations

from typing import Any

from pydantic import AliasChoices, Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

from jippity.logging_utils import LogProfile

MIN_THINK_INTERVAL_SECONDS = 1.0


class Settings(BaseSettings):
    """Application settings."""

    model_config = SettingsConfigDict(
        env_prefix="JIPPITY_",
        case_sensitive=False,
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
        populate_by_name=True,
    )

    # Completion service
    api_key: str | None = Field(
        None,
        description="API key for the completion service",
        validation_alias=AliasChoices("JIPPITY_API_KEY", "OPENAI_API_KEY"),
    )
    model: str = Field(
        default="gpt-4o-mini",
        description="Model name",
        validation_alias=AliasChoices("JIPPITY_MODEL", "OPENAI_MODEL"),
    )
    api_base: str | None = Field(None, description="Optional OpenAI-compatible API base URL")
    max_tokens: int = Field(default=2048, description="Maximum completion tokens per request")
    temperature: float = Field(default=1.0, description="Sampling temperature")
    request_timeout_seconds: float = Field(default=90.0, description="HTTP timeout for completion requests")

    # Game API server
    host: str = Field(default="127.0.0.1", description="WebSocket bind address")
    port: int = Field(default=8000, description="WebSocket port")

    # Session
    think_interval_seconds: float = Field(default=10.0, description="Seconds between nudges that let the model think unprompted")
    proactive: bool = Field(default=True, description="Let the model think when the game is quiet")
    system_prompt: str | None = Field(None, description="Overrides the built-in system prompt")
    retry_failed_forced_actions: bool = Field(default=False, description="Retry a forced action that failed")

    # Logging
    log_level: str = Field(default="INFO", description="Log level")
    log_profile: LogProfile = Field(default="default", description="Log output profile")

    @field_validator("think_interval_seconds")
    @classmethod
    def _clamp_think_interval(cls, value: float) -> float:
        return max(value, MIN_THINK_INTERVAL_SECONDS)

    @field_validator("log_level")
    @classmethod
    def _normalize_log_level(cls, value: str) -> str:
        return value.strip().upper()


def get_settings(**overrides: Any) -> Settings:
    """Load settings from the environment, applying non-``None`` overrides.

    Args:
        **overrides: field values that take precedence, typically CLI options.

    Returns:
        Settings instance
    """
    return Settings(**{key: value for key, value in overrides.items() if value is not None})
