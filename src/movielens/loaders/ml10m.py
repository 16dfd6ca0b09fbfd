"""MovieLens 10M loader (movies.dat, ratings.dat, '::' separated)."""

from pathlib import Path

from src.movielens.loaders.base import BaseLoader
from src.movielens.models import Dataset, Movie, Rating

MOVIES_FILE = "movies.dat"
RATINGS_FILE = "ratings.dat"

FIELD_SEPARATOR = "::"
GENRE_SEPARATOR = "|"
NO_GENRES = "(no genres listed)"


def parse_genres(field: str) -> frozenset[str]:
    """Split a pipe-separated genre field into a set of names."""
    genres = (g.strip() for g in field.split(GENRE_SEPARATOR))
    return frozenset(g for g in genres if g and g != NO_GENRES)


class MovieLens10MLoader(BaseLoader):
    """Loads the ml-10m layout: fractional ratings, no demographics."""

    variant = "ml-10m"
    REQUIRED_FILES = (MOVIES_FILE, RATINGS_FILE)

    def _load(self, folder: Path) -> Dataset:
        movies = self._read_movies(folder / MOVIES_FILE)
        ratings = self._read_ratings(folder / RATINGS_FILE)
        return Dataset(movies=movies, ratings=ratings, variant=self.variant)

    def _read_movies(self, path: Path) -> dict[int, Movie]:
        """Parse 'MovieID::Title::Genres' lines.

        The id is the first field and genres the last one; anything in
        between belongs to the title, which may itself contain '::'.
        """
        movies: dict[int, Movie] = {}
        for line in self._iter_lines(path):
            parts = line.split(FIELD_SEPARATOR)
            movie_id = self._safe_int(parts[0]) if len(parts) >= 3 else None
            if movie_id is None:
                self._mark(path, parsed=False)
                continue

            movies[movie_id] = Movie(
                movie_id=movie_id,
                title=FIELD_SEPARATOR.join(parts[1:-1]),
                genres=parse_genres(parts[-1]),
            )
            self._mark(path, parsed=True)
        return movies

    def _read_ratings(self, path: Path) -> list[Rating]:
        """Parse 'UserID::MovieID::Rating::Timestamp' lines."""
        ratings: list[Rating] = []
        for line in self._iter_lines(path):
            parts = line.split(FIELD_SEPARATOR)
            if len(parts) < 4:
                self._mark(path, parsed=False)
                continue

            user_id = self._safe_int(parts[0])
            movie_id = self._safe_int(parts[1])
            value = self._safe_float(parts[2])
            if user_id is None or movie_id is None or value is None:
                self._mark(path, parsed=False)
                continue

            ratings.append(
                Rating(
                    user_id=user_id,
                    movie_id=movie_id,
                    value=value,
                    timestamp=self._safe_int(parts[3]) or 0,
                )
            )
            self._mark(path, parsed=True)
        return ratings
