"""Abstract base class for MovieLens dataset loaders."""

from abc import ABC, abstractmethod
from collections.abc import Iterator
from dataclasses import dataclass, field
from datetime import datetime
from pathlib import Path
from typing import Any

from src.movielens.exceptions import DatasetFileNotFoundError, DatasetLoadError
from src.movielens.models import Dataset
from src.movielens.utils import get_logger


@dataclass
class FileStats:
    """Line counters for one source file."""

    total_lines: int = 0
    parsed: int = 0
    skipped: int = 0


@dataclass
class LoaderStats:
    """Standardized loading metrics.

    Attributes:
        variant: Dataset variant name.
        files: Per-file line counters keyed by file name.
        start_time: Load start timestamp.
        end_time: Load end timestamp.
    """

    variant: str
    files: dict[str, FileStats] = field(default_factory=dict)
    start_time: datetime | None = None
    end_time: datetime | None = None

    @property
    def duration_seconds(self) -> float:
        """Calculate load duration in seconds."""
        if self.start_time and self.end_time:
            return (self.end_time - self.start_time).total_seconds()
        return 0.0

    @property
    def skipped(self) -> int:
        """Malformed records skipped across all files."""
        return sum(f.skipped for f in self.files.values())

    def file(self, name: str) -> FileStats:
        """Return (creating if needed) the counters of one file."""
        return self.files.setdefault(name, FileStats())

    def to_dict(self) -> dict[str, Any]:
        """Convert metrics to dictionary."""
        return {
            "variant": self.variant,
            "duration_seconds": round(self.duration_seconds, 2),
            "files": {
                name: {"total": f.total_lines, "parsed": f.parsed, "skipped": f.skipped}
                for name, f in self.files.items()
            },
        }

    def reset(self) -> None:
        """Reset metrics for a new load."""
        self.files.clear()
        self.start_time = None
        self.end_time = None


class BaseLoader(ABC):
    """Contract shared by the three dataset variants.

    Subclasses declare their REQUIRED_FILES and implement _load().
    Missing files abort the load before anything is read; malformed
    lines are skipped and counted.

    Attributes:
        variant: Dataset variant name.
        stats: Metrics of the last load.
    """

    variant: str = "unknown"
    REQUIRED_FILES: tuple[str, ...] = ()

    def __init__(self) -> None:
        """Initialize loader with logging and metrics."""
        self.stats = LoaderStats(variant=self.variant)
        self.logger = get_logger(f"movielens.loader.{self.variant}")

    def load(self, folder: Path | str) -> Dataset:
        """Load a dataset folder.

        Args:
            folder: Folder holding the variant's files.

        Returns:
            Immutable Dataset.

        Raises:
            DatasetFileNotFoundError: If a required file is missing.
            DatasetLoadError: If a file cannot be read at all.
        """
        folder = Path(folder)
        self.validate_folder(folder)

        self.stats.reset()
        self.stats.start_time = datetime.now()
        self.logger.info(f"load_started: {self.variant} from {folder}")

        dataset = self._load(folder)

        self.stats.end_time = datetime.now()
        self._log_stats(dataset)
        return dataset

    def validate_folder(self, folder: Path) -> None:
        """Check that every required file exists.

        Raises:
            DatasetFileNotFoundError: On the first missing file.
        """
        for name in self.REQUIRED_FILES:
            path = folder / name
            if not path.is_file():
                raise DatasetFileNotFoundError(path)

    @abstractmethod
    def _load(self, folder: Path) -> Dataset:
        """Parse the variant's files into a Dataset."""

    # -------------------------------------------------------------------------
    # Helpers
    # -------------------------------------------------------------------------

    def _iter_lines(self, path: Path, encoding: str = "utf-8") -> Iterator[str]:
        """Yield non-blank lines of a file, counting them.

        Args:
            path: File to read.
            encoding: Text encoding of the file.
        """
        counters = self.stats.file(path.name)
        try:
            with path.open("r", encoding=encoding, errors="replace") as f:
                for raw in f:
                    line = raw.rstrip("\r\n")
                    if not line.strip():
                        continue
                    counters.total_lines += 1
                    yield line
        except OSError as err:
            raise DatasetLoadError(f"Cannot read {path}: {err}") from err

    def _mark(self, path: Path, parsed: bool) -> None:
        """Record the outcome of one line."""
        counters = self.stats.file(path.name)
        if parsed:
            counters.parsed += 1
        else:
            counters.skipped += 1

    @staticmethod
    def _safe_int(value: str | None) -> int | None:
        """Safely convert string to int."""
        if value is None:
            return None
        try:
            return int(value.strip())
        except (ValueError, TypeError):
            return None

    @staticmethod
    def _safe_float(value: str | None) -> float | None:
        """Safely convert string to float (invariant '.' decimal)."""
        if value is None:
            return None
        try:
            return float(value.strip())
        except (ValueError, TypeError):
            return None

    def _log_stats(self, dataset: Dataset) -> None:
        """Log loading statistics."""
        summary = dataset.summary()
        self.logger.info("=" * 60)
        self.logger.info(f"DATASET LOADED ({self.variant})")
        self.logger.info("-" * 60)
        self.logger.info(f"Movies             : {summary['movies']:,}")
        self.logger.info(f"Users              : {summary['users']:,}")
        self.logger.info(f"Ratings            : {summary['ratings']:,}")
        self.logger.info(f"Skipped records    : {self.stats.skipped:,}")
        self.logger.info(f"Duration           : {self.stats.duration_seconds:.2f}s")
        self.logger.info("=" * 60)
