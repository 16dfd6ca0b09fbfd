"""CSV writer for top-N reports.

Cells containing a comma, a quote or a newline are quoted with inner
quotes doubled; existing files are overwritten.
"""

import csv
import logging
from collections.abc import Iterable, Sequence
from pathlib import Path

from src.movielens.aggregation.dimensions import (
    DIMENSION_AGE,
    DIMENSION_GENDER,
    DIMENSION_GENRE,
)
from src.movielens.aggregation.ranking import RankedRow, ReportSpec
from src.movielens.models import Gender

logger = logging.getLogger(__name__)


# =============================================================================
# CONSTANTS
# =============================================================================

COL_MOVIE_ID = "MovieId"
COL_TITLE = "Title"
COL_GENRE = "Genre"
COL_AGE_GROUP = "AgeGroup"
COL_AVERAGE = "AverageRating"
COL_COUNT = "RatingCount"

BASE_HEADER: tuple[str, ...] = (COL_MOVIE_ID, COL_TITLE, COL_AVERAGE, COL_COUNT)

SLICE_COLUMNS: dict[str, str] = {
    DIMENSION_GENRE: COL_GENRE,
    DIMENSION_AGE: COL_AGE_GROUP,
}
"""Dimensions whose reports repeat the slice label in a column."""

GENDER_SUFFIXES: dict[str, str] = {
    Gender.MALE.value: "Male",
    Gender.FEMALE.value: "Female",
}


def format_average(value: float) -> str:
    """Format an average rating with exactly two decimals."""
    return f"{value:.2f}"


def safe_label(label: str) -> str:
    """Turn a slice label into a filename fragment ('<18' -> 'lt18')."""
    return (
        label.replace(" ", "_")
        .replace("+", "plus")
        .replace("<", "lt")
        .replace("-", "_")
    )


# =============================================================================
# WRITER
# =============================================================================


class ReportWriter:
    """Writes ranked rows as CSV files.

    Attributes:
        prefix: Filename prefix such as 'Top10'.
    """

    def __init__(self, prefix: str = "Top10") -> None:
        """Initialize writer.

        Args:
            prefix: Filename prefix for derived report names.
        """
        self.prefix = prefix

    def write(
        self,
        path: Path,
        header: Sequence[str],
        rows: Iterable[Sequence[str]],
    ) -> Path:
        """Write a header and string rows to a CSV file.

        Args:
            path: Target file (overwritten if present).
            header: Column names.
            rows: Cells aligned to the header.

        Returns:
            Path of the written file.
        """
        path.parent.mkdir(parents=True, exist_ok=True)
        with open(path, "w", encoding="utf-8", newline="") as f:
            writer = csv.writer(f, quoting=csv.QUOTE_MINIMAL, lineterminator="\n")
            writer.writerow(header)
            writer.writerows(rows)
        logger.debug("Report written: %s", path)
        return path

    def write_report(self, output_dir: Path, spec: ReportSpec, rows: Sequence[RankedRow]) -> Path:
        """Write one report, deriving filename and header from its spec.

        Args:
            output_dir: Destination folder.
            spec: Report specification.
            rows: Ranked rows of the report.

        Returns:
            Path of the written file.
        """
        path = output_dir / self.filename(spec)
        return self.write(path, self.header(spec), (self.format_row(spec, row) for row in rows))

    def filename(self, spec: ReportSpec) -> str:
        """Derive the report filename from its spec."""
        if spec.dimension is None:
            return f"{self.prefix}_General.csv"
        key = spec.key or ""
        if spec.dimension == DIMENSION_GENDER:
            return f"{self.prefix}_{GENDER_SUFFIXES.get(key.upper(), key)}.csv"
        if spec.dimension == DIMENSION_GENRE:
            return f"{self.prefix}_Genre_{key.replace(' ', '_')}.csv"
        if spec.dimension == DIMENSION_AGE:
            return f"{self.prefix}_Age_{safe_label(key)}.csv"
        return f"{self.prefix}_{spec.dimension}_{safe_label(key)}.csv"

    @staticmethod
    def header(spec: ReportSpec) -> list[str]:
        """Column names of a report."""
        slice_column = SLICE_COLUMNS.get(spec.dimension or "")
        if slice_column is None:
            return list(BASE_HEADER)
        return [COL_MOVIE_ID, COL_TITLE, slice_column, COL_AVERAGE, COL_COUNT]

    @staticmethod
    def format_row(spec: ReportSpec, row: RankedRow) -> list[str]:
        """String cells of one row, aligned with header(spec)."""
        cells = [str(row.movie_id), row.title]
        if spec.dimension in SLICE_COLUMNS:
            cells.append(row.slice_label or "")
        cells.extend([format_average(row.average), str(row.count)])
        return cells
