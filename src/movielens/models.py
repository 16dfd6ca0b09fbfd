"""Entity model shared by loaders, aggregation and reports.

All entities are immutable once a loader has built them. A single
generic shape covers the three dataset variants: ratings are always
real numbers and demographic data is optional.
"""

from collections.abc import Mapping, Sequence
from dataclasses import dataclass, field
from enum import Enum
from types import MappingProxyType


class Gender(Enum):
    """User gender as recorded in the demographic file."""

    MALE = "M"
    FEMALE = "F"

    @classmethod
    def parse(cls, value: str | None) -> "Gender | None":
        """Parse a raw gender code, case-insensitively.

        Args:
            value: Raw code such as 'M' or 'f'.

        Returns:
            Matching Gender, or None when the code is empty or unknown.
        """
        if not value:
            return None
        code = value.strip().upper()
        for member in cls:
            if member.value == code:
                return member
        return None


@dataclass(frozen=True, slots=True)
class Movie:
    """Catalog entry."""

    movie_id: int
    title: str
    genres: frozenset[str] = frozenset()


@dataclass(frozen=True, slots=True)
class User:
    """Rater demographics (only the smallest variant ships them)."""

    user_id: int
    age: int
    gender: Gender | None
    occupation: str = ""
    zip_code: str = ""


@dataclass(frozen=True, slots=True)
class Rating:
    """One user's rating of one movie."""

    user_id: int
    movie_id: int
    value: float
    timestamp: int = 0


@dataclass(frozen=True)
class Dataset:
    """Fully loaded, read-only dataset.

    Attributes:
        movies: Catalog keyed by movie id.
        ratings: Ratings in file order.
        users: Demographics keyed by user id (empty when unavailable).
        variant: Name of the on-disk layout the data came from.
    """

    movies: Mapping[int, Movie]
    ratings: Sequence[Rating]
    users: Mapping[int, User] = field(default_factory=dict)
    variant: str = "unknown"

    def __post_init__(self) -> None:
        # Read-only views, safe to share across workers.
        object.__setattr__(self, "movies", MappingProxyType(dict(self.movies)))
        object.__setattr__(self, "users", MappingProxyType(dict(self.users)))
        object.__setattr__(self, "ratings", tuple(self.ratings))

    @property
    def has_demographics(self) -> bool:
        """Whether gender and age dimensions can be computed."""
        return len(self.users) > 0

    def summary(self) -> dict[str, int | str | bool]:
        """Return dataset sizes for logging."""
        return {
            "variant": self.variant,
            "movies": len(self.movies),
            "users": len(self.users),
            "ratings": len(self.ratings),
            "has_demographics": self.has_demographics,
        }
