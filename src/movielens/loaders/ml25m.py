"""MovieLens 25M loader (movies.csv, ratings.csv) backed by Polars.

At 25M ratings the files are parsed by Polars' multi-threaded CSV
reader instead of line by line. Unparseable cells become nulls
(ignore_errors) and rows with a null required field are skipped.
"""

from pathlib import Path
from typing import Final

import polars as pl

from src.movielens.exceptions import DatasetLoadError
from src.movielens.loaders.base import BaseLoader
from src.movielens.loaders.ml10m import parse_genres
from src.movielens.models import Dataset, Movie, Rating

MOVIES_FILE: Final[str] = "movies.csv"
RATINGS_FILE: Final[str] = "ratings.csv"

MOVIE_SCHEMA: Final[dict[str, pl.DataType]] = {
    "movieId": pl.Int64,
    "title": pl.Utf8,
    "genres": pl.Utf8,
}

RATING_SCHEMA: Final[dict[str, pl.DataType]] = {
    "userId": pl.Int64,
    "movieId": pl.Int64,
    "rating": pl.Float64,
    "timestamp": pl.Int64,
}


class MovieLens25MLoader(BaseLoader):
    """Loads the header-bearing CSV layout of ml-25m (and ml-latest)."""

    variant = "ml-25m"
    REQUIRED_FILES = (MOVIES_FILE, RATINGS_FILE)

    def _load(self, folder: Path) -> Dataset:
        movies = self._read_movies(folder / MOVIES_FILE)
        ratings = self._read_ratings(folder / RATINGS_FILE)
        return Dataset(movies=movies, ratings=ratings, variant=self.variant)

    def _read_movies(self, path: Path) -> dict[int, Movie]:
        """Parse 'movieId,title,genres' rows."""
        frame = self._read_frame(path, MOVIE_SCHEMA)
        valid = frame.filter(pl.col("movieId").is_not_null() & pl.col("title").is_not_null())
        self._record_counts(path, total=frame.height, parsed=valid.height)

        return {
            movie_id: Movie(movie_id=movie_id, title=title, genres=parse_genres(genres or ""))
            for movie_id, title, genres in valid.iter_rows()
        }

    def _read_ratings(self, path: Path) -> list[Rating]:
        """Parse 'userId,movieId,rating,timestamp' rows."""
        frame = self._read_frame(path, RATING_SCHEMA)
        valid = frame.filter(
            pl.col("userId").is_not_null()
            & pl.col("movieId").is_not_null()
            & pl.col("rating").is_not_null()
        ).with_columns(pl.col("timestamp").fill_null(0))
        self._record_counts(path, total=frame.height, parsed=valid.height)

        return [
            Rating(user_id=user_id, movie_id=movie_id, value=value, timestamp=timestamp)
            for user_id, movie_id, value, timestamp in valid.iter_rows()
        ]

    def _read_frame(self, path: Path, schema: dict[str, pl.DataType]) -> pl.DataFrame:
        """Read the schema's columns from a CSV file.

        Args:
            path: CSV file with a header row.
            schema: Expected columns and their types, in output order.

        Returns:
            DataFrame restricted to the schema's columns.

        Raises:
            DatasetLoadError: If the header lacks a required column.
        """
        if path.stat().st_size == 0:
            return pl.DataFrame(schema=schema)

        self.logger.info(f"loading_csv: {path.name}")
        try:
            frame = pl.read_csv(
                path,
                columns=list(schema),
                schema_overrides=schema,
                ignore_errors=True,
                truncate_ragged_lines=True,
                raise_if_empty=False,
            )
        except pl.exceptions.PolarsError as err:
            raise DatasetLoadError(f"Cannot read {path}: {err}") from err

        return frame.select(list(schema))

    def _record_counts(self, path: Path, total: int, parsed: int) -> None:
        counters = self.stats.file(path.name)
        counters.total_lines += total
        counters.parsed += parsed
        counters.skipped += total - parsed
