"""Report selection on top of a merged bucket.

Defines which reports a dataset supports and turns a bucket slice into
ranked rows carrying the movie title from the catalog.
"""

from collections.abc import Iterable, Mapping
from dataclasses import dataclass

from src.movielens.aggregation.bucket import AggregateBucket
from src.movielens.aggregation.dimensions import (
    AGE_BRACKETS,
    DIMENSION_AGE,
    DIMENSION_GENDER,
    DIMENSION_GENRE,
)
from src.movielens.exceptions import RankingInvariantError
from src.movielens.models import Dataset, Gender, Movie

OVERALL_REPORT_ID = "overall"


@dataclass(frozen=True)
class ReportSpec:
    """One report of the report set.

    Attributes:
        dimension: Dimension name, None for the overall report.
        key: Slice key within the dimension.
    """

    dimension: str | None = None
    key: str | None = None

    @property
    def is_overall(self) -> bool:
        """True for the unsliced report."""
        return self.dimension is None

    @property
    def report_id(self) -> str:
        """Stable identifying label (dimension name + key)."""
        if self.dimension is None:
            return OVERALL_REPORT_ID
        return f"{self.dimension}_{self.key}"


@dataclass(frozen=True)
class RankedRow:
    """One row of a top-N report."""

    movie_id: int
    title: str
    slice_label: str | None
    average: float
    count: int


def build_report_specs(dataset: Dataset, genres: Iterable[str]) -> list[ReportSpec]:
    """Return the reports supported by a dataset, in output order.

    Gender and age reports require demographic data.

    Args:
        dataset: Loaded dataset.
        genres: Target genres to report on.

    Returns:
        Report specifications.
    """
    specs = [ReportSpec()]

    if dataset.has_demographics:
        specs.extend(ReportSpec(DIMENSION_GENDER, gender.value) for gender in Gender)

    specs.extend(ReportSpec(DIMENSION_GENRE, genre) for genre in genres)

    if dataset.has_demographics:
        specs.extend(ReportSpec(DIMENSION_AGE, bracket) for bracket in AGE_BRACKETS)

    return specs


def select_top(
    bucket: AggregateBucket,
    movies: Mapping[int, Movie],
    spec: ReportSpec,
    n: int,
) -> list[RankedRow]:
    """Produce the ranked rows of one report.

    Args:
        bucket: Merged bucket.
        movies: Catalog used to resolve titles.
        spec: Report to build.
        n: Maximum number of rows.

    Returns:
        Rows ordered by average desc, count desc, movie id asc.

    Raises:
        RankingInvariantError: If a ranked movie is missing from the catalog.
    """
    ranked = bucket.top_n(n, spec.dimension, spec.key)
    label = spec.key if spec.dimension is not None else None

    rows: list[RankedRow] = []
    for movie_id, stats in ranked:
        movie = movies.get(movie_id)
        if movie is None:
            raise RankingInvariantError(movie_id, spec.report_id)
        rows.append(
            RankedRow(
                movie_id=movie_id,
                title=movie.title,
                slice_label=label,
                average=stats.average,
                count=stats.count,
            )
        )
    return rows
