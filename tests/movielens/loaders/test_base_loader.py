"""Unit tests for the base loader and LoaderStats."""

from datetime import datetime, timedelta
from pathlib import Path

import pytest

from src.movielens.exceptions import DatasetFileNotFoundError
from src.movielens.loaders.base import BaseLoader, FileStats, LoaderStats
from src.movielens.models import Dataset


class _LinesLoader(BaseLoader):
    variant = "test-lines"
    REQUIRED_FILES = ("lines.txt",)

    def _load(self, folder: Path) -> Dataset:
        path = folder / "lines.txt"
        for line in self._iter_lines(path):
            self._mark(path, parsed=line.isdigit())
        return Dataset(movies={}, ratings=[], variant=self.variant)


# -------------------------------------------------------------------------
# LoaderStats
# -------------------------------------------------------------------------


class TestLoaderStats:
    @staticmethod
    def test_defaults() -> None:
        stats = LoaderStats(variant="ml-100k")
        assert stats.files == {}
        assert stats.skipped == 0
        assert stats.duration_seconds == 0.0

    @staticmethod
    def test_file_creates_counters() -> None:
        stats = LoaderStats(variant="ml-100k")
        counters = stats.file("u.data")
        assert isinstance(counters, FileStats)
        assert stats.file("u.data") is counters

    @staticmethod
    def test_skipped_sums_files() -> None:
        stats = LoaderStats(variant="ml-10m")
        stats.file("movies.dat").skipped = 2
        stats.file("ratings.dat").skipped = 3
        assert stats.skipped == 5

    @staticmethod
    def test_duration() -> None:
        start = datetime(2024, 1, 1, 12, 0, 0)
        stats = LoaderStats(variant="x", start_time=start, end_time=start + timedelta(seconds=3))
        assert stats.duration_seconds == 3.0

    @staticmethod
    def test_to_dict() -> None:
        stats = LoaderStats(variant="ml-25m")
        stats.file("ratings.csv").total_lines = 4
        data = stats.to_dict()
        assert data["variant"] == "ml-25m"
        assert data["files"]["ratings.csv"] == {"total": 4, "parsed": 0, "skipped": 0}

    @staticmethod
    def test_reset() -> None:
        stats = LoaderStats(variant="x", start_time=datetime.now())
        stats.file("a").parsed = 1
        stats.reset()
        assert stats.files == {}
        assert stats.start_time is None


# -------------------------------------------------------------------------
# BaseLoader
# -------------------------------------------------------------------------


class TestBaseLoader:
    @staticmethod
    def test_cannot_instantiate_abstract() -> None:
        with pytest.raises(TypeError):
            BaseLoader()  # type: ignore[abstract]

    @staticmethod
    def test_missing_file_is_fatal(tmp_path: Path) -> None:
        with pytest.raises(DatasetFileNotFoundError) as exc_info:
            _LinesLoader().load(tmp_path)
        assert exc_info.value.path == tmp_path / "lines.txt"

    @staticmethod
    def test_counts_lines(tmp_path: Path) -> None:
        (tmp_path / "lines.txt").write_text("1\n2\n\nthree\n4\r\n", encoding="utf-8")
        loader = _LinesLoader()
        loader.load(tmp_path)
        counters = loader.stats.file("lines.txt")
        assert counters.total_lines == 4
        assert counters.parsed == 3
        assert counters.skipped == 1
        assert loader.stats.end_time is not None

    @staticmethod
    def test_stats_reset_between_loads(tmp_path: Path) -> None:
        (tmp_path / "lines.txt").write_text("1\n", encoding="utf-8")
        loader = _LinesLoader()
        loader.load(tmp_path)
        loader.load(tmp_path)
        assert loader.stats.file("lines.txt").parsed == 1

    @staticmethod
    def test_safe_int() -> None:
        assert BaseLoader._safe_int(" 42 ") == 42
        assert BaseLoader._safe_int("4.5") is None
        assert BaseLoader._safe_int(None) is None

    @staticmethod
    def test_safe_float_invariant_decimal() -> None:
        assert BaseLoader._safe_float("3.5") == 3.5
        assert BaseLoader._safe_float("3,5") is None
        assert BaseLoader._safe_float("") is None
