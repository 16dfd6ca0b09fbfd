"""Aggregation and report configuration settings.

Tuning values for the partitioned aggregation pass and the
top-N report set produced from the merged statistics.
"""

import os

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings

from src.settings.base import ENV_CONFIG

DEFAULT_CHUNK_SIZE = 10_000
"""Ratings per partition in multi-threaded mode."""

DEFAULT_TARGET_GENRES = "Action,Drama,Comedy,Fantasy"
"""Genres reported when no explicit list is configured."""

VALID_EXECUTORS = {"thread", "process"}


def _default_max_workers() -> int:
    return os.cpu_count() or 1


class AggregationSettings(BaseSettings):
    """Partitioned aggregation configuration.

    Attributes:
        chunk_size: Number of ratings handled by one worker task.
        max_workers: Upper bound of concurrently running workers.
        executor: Worker pool kind ("thread" or "process").
    """

    chunk_size: int = Field(default=DEFAULT_CHUNK_SIZE, alias="AGGREGATION_CHUNK_SIZE")
    max_workers: int = Field(
        default_factory=_default_max_workers,
        alias="AGGREGATION_MAX_WORKERS",
    )
    executor: str = Field(default="thread", alias="AGGREGATION_EXECUTOR")

    model_config = ENV_CONFIG

    @field_validator("chunk_size")
    @classmethod
    def validate_chunk_size(cls, v: int) -> int:
        """Validate chunk size is strictly positive."""
        if v < 1:
            raise ValueError("AGGREGATION_CHUNK_SIZE must be >= 1")
        return v

    @field_validator("max_workers")
    @classmethod
    def validate_max_workers(cls, v: int) -> int:
        """Validate worker bound is strictly positive."""
        if v < 1:
            raise ValueError("AGGREGATION_MAX_WORKERS must be >= 1")
        return v

    @field_validator("executor")
    @classmethod
    def validate_executor(cls, v: str) -> str:
        """Validate executor kind."""
        v_lower = v.lower()
        if v_lower not in VALID_EXECUTORS:
            raise ValueError(f"AGGREGATION_EXECUTOR must be one of {VALID_EXECUTORS}")
        return v_lower


class ReportSettings(BaseSettings):
    """Top-N report configuration.

    Attributes:
        top_n: Rows per report.
        genres_raw: Comma-separated genres to report on.
        file_prefix: Report filename prefix (followed by top_n).
    """

    top_n: int = Field(default=10, alias="REPORT_TOP_N")
    genres_raw: str = Field(default=DEFAULT_TARGET_GENRES, alias="REPORT_GENRES")
    file_prefix: str = Field(default="Top", alias="REPORT_FILE_PREFIX")

    model_config = ENV_CONFIG

    @property
    def genres(self) -> list[str]:
        """Parse target genres from comma-separated string."""
        return [g.strip() for g in self.genres_raw.split(",") if g.strip()]

    def report_prefix(self, top_n: int | None = None) -> str:
        """Filename prefix such as 'Top10' (top_n defaults to the configured one)."""
        return f"{self.file_prefix}{self.top_n if top_n is None else top_n}"

    @field_validator("top_n")
    @classmethod
    def validate_top_n(cls, v: int) -> int:
        """Validate report size is strictly positive."""
        if v < 1:
            raise ValueError("REPORT_TOP_N must be >= 1")
        return v
