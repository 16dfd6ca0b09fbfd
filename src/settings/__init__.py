"""Centralized configuration for the MovieLens report generator.

Values come from environment variables or a .env file and otherwise
fall back to defaults. Nothing here is secret: every setting is run
tuning (paths, logging, partitioning, report set).

Usage:
    from src.settings import settings

    settings.aggregation.chunk_size
    settings.reports.genres
"""

from typing import Any

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

from src.settings.base import ENV_CONFIG, LoggingSettings, PathsSettings
from src.settings.reports import AggregationSettings, ReportSettings

__all__ = [
    # Main
    "Settings",
    "settings",
    # Base
    "PathsSettings",
    "LoggingSettings",
    # Reports
    "AggregationSettings",
    "ReportSettings",
    # Utilities
    "get_settings_summary",
]

VALID_ENVIRONMENTS = ("development", "production", "test")


# =============================================================================
# GLOBAL SETTINGS
# =============================================================================


class Settings(BaseSettings):
    """All configuration sections behind one object.

    Import the module-level `settings` instance rather than building
    a new one.
    """

    environment: str = Field(default="development", alias="ENVIRONMENT")
    debug: bool = Field(default=False, alias="DEBUG")

    paths: PathsSettings = Field(default_factory=PathsSettings)
    logging: LoggingSettings = Field(default_factory=LoggingSettings)
    aggregation: AggregationSettings = Field(default_factory=AggregationSettings)
    reports: ReportSettings = Field(default_factory=ReportSettings)

    model_config = SettingsConfigDict(**ENV_CONFIG, case_sensitive=False)

    @field_validator("environment")
    @classmethod
    def validate_environment(cls, v: str) -> str:
        """Lowercase the environment name and check it is known."""
        name = v.strip().lower()
        if name not in VALID_ENVIRONMENTS:
            raise ValueError(f"Invalid ENVIRONMENT '{v}'. Valid: {', '.join(VALID_ENVIRONMENTS)}")
        return name


settings = Settings()


def get_settings_summary() -> dict[str, Any]:
    """Tuning values of a report run, flat and safe to log."""
    aggregation = settings.aggregation
    return {
        "environment": settings.environment,
        "chunk_size": aggregation.chunk_size,
        "max_workers": aggregation.max_workers,
        "executor": aggregation.executor,
        "top_n": settings.reports.top_n,
        "genres": settings.reports.genres,
        "output_dir": str(settings.paths.output_dir),
    }
