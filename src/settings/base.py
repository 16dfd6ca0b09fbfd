"""Base configuration settings.

Project paths (datasets, reports, logs) and logging options.
"""

import logging
from pathlib import Path

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

# =============================================================================
# PROJECT ROOT DETECTION
# =============================================================================

_PROJECT_ROOT = Path(__file__).resolve().parent.parent.parent

ENV_CONFIG = SettingsConfigDict(
    env_file=".env",
    env_file_encoding="utf-8",
    extra="ignore",
)
"""Shared model_config of the settings sections."""


# =============================================================================
# PATH SETTINGS
# =============================================================================


class PathsSettings(BaseSettings):
    """Where datasets are looked up and reports and logs are written.

    Attributes:
        output_root: Report root folder; a relative value is taken from
            the project root.
    """

    output_root: str = Field(default="Output", alias="REPORT_OUTPUT_DIR")

    model_config = ENV_CONFIG

    @property
    def project_root(self) -> Path:
        return _PROJECT_ROOT

    @property
    def output_dir(self) -> Path:
        """Resolved report root (mode sub-folders go underneath)."""
        configured = Path(self.output_root)
        return configured if configured.is_absolute() else _PROJECT_ROOT / configured


# =============================================================================
# LOGGING SETTINGS
# =============================================================================

VALID_LOG_LEVELS = ("DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL")


class LoggingSettings(BaseSettings):
    """Logging configuration.

    Attributes:
        level: Level name, one of VALID_LOG_LEVELS.
        log_dir: Log folder, relative to the project root.
        to_file: Write a dated log file next to console output.
    """

    level: str = Field(default="INFO", alias="LOG_LEVEL")
    log_dir: str = Field(default="logs", alias="LOG_DIR")
    to_file: bool = Field(default=True, alias="LOG_TO_FILE")

    model_config = ENV_CONFIG

    @property
    def numeric_level(self) -> int:
        """Level as understood by the logging module."""
        return logging.getLevelName(self.level)

    @field_validator("level")
    @classmethod
    def validate_log_level(cls, v: str) -> str:
        """Normalise the level name and reject unknown ones."""
        name = v.strip().upper()
        if name not in VALID_LOG_LEVELS:
            raise ValueError(f"Invalid LOG_LEVEL '{v}'. Valid: {', '.join(VALID_LOG_LEVELS)}")
        return name
