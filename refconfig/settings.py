"""Runtime settings for refconfig itself.

These settings only control how the library logs and reports; they are read
from ``REFCONFIG_*`` environment variables.

Usage:
    from refconfig.settings import configure_observability, get_settings

    configure_observability(get_settings())
"""

from functools import lru_cache
from typing import Literal

from pydantic import BaseModel, Field
from pydantic_settings import BaseSettings, SettingsConfigDict

from refconfig.observability.logging import setup_logging
from refconfig.observability.metrics import setup_metrics

LogLevel = Literal["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"]
LogFormat = Literal["json", "console"]


class LoggingConfig(BaseModel):
    """Logging configuration."""

    level: LogLevel = Field(default="INFO", description="Log level")
    format: LogFormat = Field(default="json", description="Output format")
    redact_secrets: bool = Field(
        default=True,
        description="Mask values whose key names look like secrets",
    )


class MetricsConfig(BaseModel):
    """Metrics configuration."""

    enabled: bool = Field(default=True, description="Enable metrics")


class Settings(BaseSettings):
    """Library settings.

    Environment variables use the ``REFCONFIG_`` prefix and ``__`` for nesting,
    e.g. ``REFCONFIG_LOGGING__LEVEL=DEBUG``.
    """

    model_config = SettingsConfigDict(
        env_prefix="REFCONFIG_",
        env_nested_delimiter="__",
        case_sensitive=False,
        extra="ignore",
    )

    logging: LoggingConfig = Field(
        default_factory=LoggingConfig,
        description="Logging settings",
    )
    metrics: MetricsConfig = Field(
        default_factory=MetricsConfig,
        description="Metrics settings",
    )


@lru_cache(maxsize=1)
def get_settings() -> Settings:
    """Get the singleton settings instance.

    Call `get_settings.cache_clear()` or `reload_settings()` to re-read the
    environment.
    """
    return Settings()


def reload_settings() -> Settings:
    """Clear the settings cache and reload settings."""
    get_settings.cache_clear()
    return get_settings()


def configure_observability(settings: Settings | None = None) -> None:
    """Apply logging and metrics settings."""
    settings = settings or get_settings()
    setup_logging(
        level=settings.logging.level,
        format=settings.logging.format,
        redact_secrets=settings.logging.redact_secrets,
    )
    if settings.metrics.enabled:
        setup_metrics()
