"""
Application Settings - Main Layer

Use Pydantic Settings for configuration management.
Settings come from environment variables, an optional .env file and
defaults. Secrets may also be provided through ``<NAME>_FILE`` variables.
"""

from typing import Optional

from pydantic import AliasChoices, Field
from pydantic_settings import BaseSettings, SettingsConfigDict

from src.shared import EnumEnvironment, EnumLogLevel
from src.shared.env import load_secret_file_variables  # noqa: F401


class ServiceSettings(BaseSettings):
    """Service identity and HTTP server settings."""

    title: str = Field(default="Forecasting Engine", description="Service title")
    description: str = Field(
        default="Business time-series forecasting with scenarios, "
        "risk assessment and recommendations",
        description="Service description",
    )
    version: str = Field(default="1.0.0", description="Service version")
    git_commit: str = Field(
        default="unknown",
        description="Git commit hash",
        validation_alias=AliasChoices("APP_GIT_COMMIT", "GIT_COMMIT"),
    )
    build_time: str = Field(
        default="unknown",
        description="Build timestamp",
        validation_alias=AliasChoices("APP_BUILD_TIME", "BUILD_TIME"),
    )
    host: str = Field(default="0.0.0.0", description="Interface to bind")
    port: int = Field(default=8000, description="Port to bind the server")
    reload: bool = Field(
        default=False, description="Enable auto-reload for development"
    )

    model_config = SettingsConfigDict(
        env_prefix="APP_", case_sensitive=False, extra="ignore"
    )


class ForecastSettings(BaseSettings):
    """Forecast result cache settings."""

    cache_ttl_seconds: int = Field(
        default=86400, description="Validity window of a cached forecast"
    )
    cache_max_entries: int = Field(
        default=256, description="Cached forecasts kept before eviction"
    )

    model_config = SettingsConfigDict(
        env_prefix="FORECAST_", case_sensitive=False, extra="ignore"
    )


class TextGenerationSettings(BaseSettings):
    """Text-generation collaborator settings."""

    enabled: bool = Field(
        default=True, description="Request narrative insights when true"
    )
    base_url: str = Field(
        default="http://localhost:8080", description="Text-generation service URL"
    )
    api_key: Optional[str] = Field(
        default=None,
        description="Bearer token, also read from TEXTGEN_API_KEY_FILE",
    )
    model: str = Field(default="default", description="Model name to request")
    timeout: float = Field(default=10.0, description="Per-call timeout in seconds")
    max_retries: int = Field(
        default=1, description="Retries after a timed out or failed call"
    )

    model_config = SettingsConfigDict(
        env_prefix="TEXTGEN_", case_sensitive=False, extra="ignore"
    )


class LoggingSettings(BaseSettings):
    """Logging configuration settings."""

    level: EnumLogLevel = Field(default=EnumLogLevel.INFO, description="Logging level")
    file_path: Optional[str] = Field(
        default=None, description="Log file path (if None, logs to console)"
    )

    model_config = SettingsConfigDict(
        env_prefix="LOG_", case_sensitive=False, extra="ignore"
    )


class AppSettings(BaseSettings):
    """Main application settings, aggregating all sub-settings."""

    environment: EnumEnvironment = Field(
        default=EnumEnvironment.DEVELOPMENT, description="Application environment"
    )

    app: ServiceSettings = Field(default_factory=ServiceSettings)
    logging: LoggingSettings = Field(default_factory=LoggingSettings)
    forecast: ForecastSettings = Field(default_factory=ForecastSettings)
    text_generation: TextGenerationSettings = Field(
        default_factory=TextGenerationSettings
    )

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        env_nested_delimiter="__",
        extra="ignore",
    )


def get_settings() -> AppSettings:
    """
    Build the application settings.

    Kept as a function so tests can patch it with different settings.
    """
    return AppSettings()
