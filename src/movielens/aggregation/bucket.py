"""Per-movie rating accumulators.

SumCount keeps the sum and count of a mean so that partial results
merge exactly. AggregateBucket holds one SumCount per
movie overall plus one per movie inside every dimension slice.
"""

import heapq
from collections.abc import Iterator
from dataclasses import dataclass
from typing import Self

from src.movielens.aggregation.dimensions import normalize_key


MovieStats = dict[int, "SumCount"]


# =============================================================================
# SUM / COUNT
# =============================================================================


@dataclass(slots=True)
class SumCount:
    """Running sum and count of rating values.

    Attributes:
        sum: Sum of rating values.
        count: Number of ratings (never negative).
    """

    sum: float = 0.0
    count: int = 0

    @property
    def average(self) -> float:
        """Mean rating, 0.0 when nothing was recorded."""
        if self.count == 0:
            return 0.0
        return self.sum / self.count

    def add(self, value: float) -> None:
        """Record one rating value."""
        self.sum += value
        self.count += 1

    def merge(self, other: "SumCount") -> None:
        """Add another accumulator's totals into this one."""
        self.sum += other.sum
        self.count += other.count


def _ranking_key(item: tuple[int, SumCount]) -> tuple[float, int, int]:
    movie_id, stats = item
    return (-stats.average, -stats.count, movie_id)


def _merge_stats(target: MovieStats, source: MovieStats) -> None:
    for movie_id, stats in source.items():
        existing = target.get(movie_id)
        if existing is None:
            target[movie_id] = SumCount(stats.sum, stats.count)
        else:
            existing.merge(stats)


# =============================================================================
# AGGREGATE BUCKET
# =============================================================================


class AggregateBucket:
    """Rating statistics for one partition (or the merged whole).

    Layout:
        overall: movie_id -> SumCount
        slices: dimension -> normalised key -> movie_id -> SumCount

    Every contribution to a slice is also recorded in overall by the
    caller; the bucket itself only stores what it is given.
    """

    def __init__(self) -> None:
        """Initialize an empty bucket."""
        self._overall: MovieStats = {}
        self._slices: dict[str, dict[str, MovieStats]] = {}
        self._labels: dict[str, dict[str, str]] = {}

    # =========================================================================
    # Updates
    # =========================================================================

    def add_rating(self, movie_id: int, value: float) -> None:
        """Record a rating in the overall statistics.

        Args:
            movie_id: Rated movie (already known to exist in the catalog).
            value: Rating value.
        """
        stats = self._overall.get(movie_id)
        if stats is None:
            stats = self._overall[movie_id] = SumCount()
        stats.add(value)

    def add_rating_for_dimension(
        self,
        dimension: str,
        key: str | None,
        movie_id: int,
        value: float,
    ) -> None:
        """Record a rating inside one dimension slice.

        An empty or unset key is skipped: the rating is then simply not
        attributed to that dimension.

        Args:
            dimension: Dimension name (gender, genre, age).
            key: Slice key within the dimension.
            movie_id: Rated movie.
            value: Rating value.
        """
        normalized = normalize_key(key)
        if normalized is None:
            return

        keyed = self._slices.get(dimension)
        if keyed is None:
            keyed = self._slices[dimension] = {}
            self._labels[dimension] = {}

        movies = keyed.get(normalized)
        if movies is None:
            movies = keyed[normalized] = {}
            self._labels[dimension][normalized] = key.strip()

        stats = movies.get(movie_id)
        if stats is None:
            stats = movies[movie_id] = SumCount()
        stats.add(value)

    def merge(self, other: "AggregateBucket") -> Self:
        """Add another bucket's statistics into this one, in place.

        Merging is purely additive, so it is associative and commutative:
        merging per-chunk buckets yields the same totals as aggregating
        the whole sequence at once.

        Args:
            other: Bucket to fold in. It is left untouched.

        Returns:
            This bucket, for chaining.
        """
        _merge_stats(self._overall, other._overall)

        for dimension, keyed in other._slices.items():
            own_keyed = self._slices.setdefault(dimension, {})
            own_labels = self._labels.setdefault(dimension, {})
            other_labels = other._labels.get(dimension, {})
            for key, movies in keyed.items():
                own_labels.setdefault(key, other_labels.get(key, key))
                _merge_stats(own_keyed.setdefault(key, {}), movies)

        return self

    # =========================================================================
    # Queries
    # =========================================================================

    def top_n(
        self,
        n: int,
        dimension: str | None = None,
        key: str | None = None,
    ) -> list[tuple[int, SumCount]]:
        """Return the best rated movies of the bucket or of one slice.

        Order: average descending, then rating count descending, then
        movie id ascending, so the output is fully reproducible.

        Args:
            n: Maximum number of movies.
            dimension: Optional dimension name.
            key: Slice key, required when dimension is given.

        Returns:
            (movie_id, SumCount) pairs; empty for an unknown slice.
        """
        if n <= 0:
            return []

        movies = self._select(dimension, key)
        if not movies:
            return []

        candidates = ((mid, sc) for mid, sc in movies.items() if sc.count > 0)
        return heapq.nsmallest(n, candidates, key=_ranking_key)

    def stats(
        self,
        movie_id: int,
        dimension: str | None = None,
        key: str | None = None,
    ) -> SumCount:
        """Return a copy of one movie's statistics (zero when absent)."""
        movies = self._select(dimension, key) or {}
        found = movies.get(movie_id)
        if found is None:
            return SumCount()
        return SumCount(found.sum, found.count)

    def total_count(self, dimension: str | None = None, key: str | None = None) -> int:
        """Number of ratings recorded overall or in one slice."""
        movies = self._select(dimension, key) or {}
        return sum(sc.count for sc in movies.values())

    def dimensions(self) -> list[str]:
        """Dimension names that received at least one rating."""
        return sorted(self._slices)

    def keys(self, dimension: str) -> list[str]:
        """Display labels of a dimension's slices, sorted."""
        return sorted(self._labels.get(dimension, {}).values())

    def label(self, dimension: str, key: str) -> str | None:
        """Original spelling of a slice key, or None when unknown."""
        normalized = normalize_key(key)
        if normalized is None:
            return None
        return self._labels.get(dimension, {}).get(normalized)

    def movie_ids(self) -> Iterator[int]:
        """Iterate over movie ids present in the overall statistics."""
        return iter(self._overall)

    @property
    def is_empty(self) -> bool:
        """True when no rating was recorded."""
        return not self._overall and not self._slices

    def __len__(self) -> int:
        return len(self._overall)

    def __repr__(self) -> str:
        return (
            f"AggregateBucket(movies={len(self._overall)}, "
            f"dimensions={self.dimensions()})"
        )

    def _select(self, dimension: str | None, key: str | None) -> MovieStats | None:
        if dimension is None:
            return self._overall
        normalized = normalize_key(key)
        if normalized is None:
            return None
        return self._slices.get(dimension, {}).get(normalized)
