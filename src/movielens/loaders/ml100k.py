"""MovieLens 100K loader (u.user, u.item, u.data).

The only variant shipping demographics: each user carries age and
gender, enabling the gender and age-bracket reports.
"""

import re
from pathlib import Path

from src.movielens.loaders.base import BaseLoader
from src.movielens.models import Dataset, Gender, Movie, Rating, User

# Genre flag columns at the end of every u.item line, in file order.
GENRE_NAMES: tuple[str, ...] = (
    "Unknown",
    "Action",
    "Adventure",
    "Animation",
    "Children's",
    "Comedy",
    "Crime",
    "Documentary",
    "Drama",
    "Fantasy",
    "Film-Noir",
    "Horror",
    "Musical",
    "Mystery",
    "Romance",
    "Sci-Fi",
    "Thriller",
    "War",
    "Western",
)

GENRE_FLAGS_OFFSET = 5
"""Flags never start before id, title, release date, video date and URL."""

USERS_FILE = "u.user"
ITEMS_FILE = "u.item"
RATINGS_FILE = "u.data"

# u.item and u.user are ISO-8859-1 encoded
LEGACY_ENCODING = "latin-1"

_RATING_SEPARATORS = re.compile(r"[\t ,]+")


class MovieLens100KLoader(BaseLoader):
    """Loads the pipe/tab separated ml-100k layout."""

    variant = "ml-100k"
    REQUIRED_FILES = (RATINGS_FILE, ITEMS_FILE, USERS_FILE)

    def _load(self, folder: Path) -> Dataset:
        users = self._read_users(folder / USERS_FILE)
        movies = self._read_movies(folder / ITEMS_FILE)
        ratings = self._read_ratings(folder / RATINGS_FILE)
        return Dataset(movies=movies, ratings=ratings, users=users, variant=self.variant)

    def _read_users(self, path: Path) -> dict[int, User]:
        """Parse 'id|age|gender|occupation|zip' lines."""
        users: dict[int, User] = {}
        for line in self._iter_lines(path, LEGACY_ENCODING):
            parts = line.split("|")
            user_id = self._safe_int(parts[0]) if len(parts) >= 5 else None
            if user_id is None:
                self._mark(path, parsed=False)
                continue

            users[user_id] = User(
                user_id=user_id,
                age=self._safe_int(parts[1]) or 0,
                gender=Gender.parse(parts[2]),
                occupation=parts[3].strip(),
                zip_code=parts[4].strip(),
            )
            self._mark(path, parsed=True)
        return users

    def _read_movies(self, path: Path) -> dict[int, Movie]:
        """Parse 'id|title|release|video release|url|19 genre flags' lines."""
        movies: dict[int, Movie] = {}
        for line in self._iter_lines(path, LEGACY_ENCODING):
            parts = line.split("|")
            movie_id = self._safe_int(parts[0]) if len(parts) >= 6 else None
            if movie_id is None:
                self._mark(path, parsed=False)
                continue

            movies[movie_id] = Movie(
                movie_id=movie_id,
                title=parts[1],
                genres=self._parse_genre_flags(parts),
            )
            self._mark(path, parsed=True)
        return movies

    def _read_ratings(self, path: Path) -> list[Rating]:
        """Parse 'user movie rating timestamp' lines (tab separated)."""
        ratings: list[Rating] = []
        for line in self._iter_lines(path):
            parts = _RATING_SEPARATORS.split(line.strip())
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

    @staticmethod
    def _parse_genre_flags(parts: list[str]) -> frozenset[str]:
        """Map the trailing 0/1 flag columns onto genre names."""
        start = max(GENRE_FLAGS_OFFSET, len(parts) - len(GENRE_NAMES))
        flags = parts[start:]
        return frozenset(
            name for name, flag in zip(GENRE_NAMES, flags, strict=False) if flag.strip() == "1"
        )
