"""Exception hierarchy for the MovieLens report generator.

Three failure classes exist:
- load-fatal errors abort a run before any aggregation starts,
- record-level problems are never raised (they are skipped and counted),
- internal invariant violations signal a defect, not bad input.
"""

from pathlib import Path


class MovieLensError(Exception):
    """Base class for all report generator errors."""


class DatasetLoadError(MovieLensError):
    """A dataset folder could not be turned into a Dataset."""


class DatasetFileNotFoundError(DatasetLoadError, FileNotFoundError):
    """A file required by the dataset variant is missing."""

    def __init__(self, path: Path) -> None:
        self.path = path
        super().__init__(f"Missing file: {path}")


class UnknownVariantError(MovieLensError, ValueError):
    """Dataset variant name (or folder layout) is not recognised."""


class RankingInvariantError(MovieLensError, AssertionError):
    """A ranked movie id is absent from the catalog.

    Ratings are only aggregated after their movie was found in the
    catalog, so this can only happen through a defect upstream.
    """

    def __init__(self, movie_id: int, report_id: str) -> None:
        self.movie_id = movie_id
        self.report_id = report_id
        super().__init__(f"Ranked movie {movie_id} missing from catalog (report {report_id})")
