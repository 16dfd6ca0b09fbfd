"""Tests for aggregation and report settings.

Uses monkeypatch to isolate from environment variables.
"""

import os

import pytest
from pydantic import ValidationError

from src.settings.reports import (
    DEFAULT_CHUNK_SIZE,
    AggregationSettings,
    ReportSettings,
)


@pytest.fixture
def clean_env(monkeypatch: pytest.MonkeyPatch) -> None:
    """Remove all relevant environment variables for isolated testing."""
    env_vars = [
        "AGGREGATION_CHUNK_SIZE",
        "AGGREGATION_MAX_WORKERS",
        "AGGREGATION_EXECUTOR",
        "REPORT_TOP_N",
        "REPORT_GENRES",
        "REPORT_FILE_PREFIX",
    ]
    for var in env_vars:
        monkeypatch.delenv(var, raising=False)


@pytest.mark.usefixtures("clean_env")
class TestAggregationSettings:
    """Tests for AggregationSettings class."""

    @staticmethod
    def test_default_values() -> None:
        """Defaults: 10,000 ratings per chunk, one worker per CPU, threads."""
        settings = AggregationSettings(_env_file=None)
        assert settings.chunk_size == DEFAULT_CHUNK_SIZE == 10_000
        assert settings.max_workers == (os.cpu_count() or 1)
        assert settings.executor == "thread"

    @staticmethod
    def test_from_env(monkeypatch: pytest.MonkeyPatch) -> None:
        """Values are read from environment variables."""
        monkeypatch.setenv("AGGREGATION_CHUNK_SIZE", "250")
        monkeypatch.setenv("AGGREGATION_MAX_WORKERS", "3")
        monkeypatch.setenv("AGGREGATION_EXECUTOR", "PROCESS")
        settings = AggregationSettings(_env_file=None)
        assert settings.chunk_size == 250
        assert settings.max_workers == 3
        assert settings.executor == "process"

    @staticmethod
    @pytest.mark.parametrize(
        ("var", "value"),
        [
            ("AGGREGATION_CHUNK_SIZE", "0"),
            ("AGGREGATION_MAX_WORKERS", "-2"),
            ("AGGREGATION_EXECUTOR", "fiber"),
        ],
    )
    def test_invalid_values(monkeypatch: pytest.MonkeyPatch, var: str, value: str) -> None:
        """Non-positive tuning values and unknown executors are rejected."""
        monkeypatch.setenv(var, value)
        with pytest.raises(ValidationError):
            AggregationSettings(_env_file=None)


@pytest.mark.usefixtures("clean_env")
class TestReportSettings:
    """Tests for ReportSettings class."""

    @staticmethod
    def test_default_values() -> None:
        """Default report set targets four genres, ten rows each."""
        settings = ReportSettings(_env_file=None)
        assert settings.top_n == 10
        assert settings.genres == ["Action", "Drama", "Comedy", "Fantasy"]
        assert settings.report_prefix() == "Top10"

    @staticmethod
    def test_genres_parsing(monkeypatch: pytest.MonkeyPatch) -> None:
        """Comma-separated genres are stripped and blanks dropped."""
        monkeypatch.setenv("REPORT_GENRES", " Horror , Sci-Fi,,")
        settings = ReportSettings(_env_file=None)
        assert settings.genres == ["Horror", "Sci-Fi"]

    @staticmethod
    def test_report_prefix(monkeypatch: pytest.MonkeyPatch) -> None:
        """Prefix combines the file prefix and top_n."""
        monkeypatch.setenv("REPORT_TOP_N", "5")
        monkeypatch.setenv("REPORT_FILE_PREFIX", "Best")
        assert ReportSettings(_env_file=None).report_prefix() == "Best5"

    @staticmethod
    def test_report_prefix_with_explicit_top_n(monkeypatch: pytest.MonkeyPatch) -> None:
        """An explicit top_n overrides the configured one."""
        monkeypatch.setenv("REPORT_FILE_PREFIX", "Best")
        assert ReportSettings(_env_file=None).report_prefix(3) == "Best3"

    @staticmethod
    def test_invalid_top_n(monkeypatch: pytest.MonkeyPatch) -> None:
        """REPORT_TOP_N must be positive."""
        monkeypatch.setenv("REPORT_TOP_N", "0")
        with pytest.raises(ValidationError):
            ReportSettings(_env_file=None)
