"""Aggregation driver: builds and merges rating buckets.

The rating sequence is either scanned in one pass or cut into
contiguous chunks, each aggregated by its own worker into a bucket it
owns exclusively. Once every worker has finished, a single
coordinator merges the partial buckets in chunk order. No lock is
taken inside the aggregation loop.
"""

import logging
from collections.abc import Mapping, Sequence
from concurrent.futures import Executor, ProcessPoolExecutor, ThreadPoolExecutor
from dataclasses import dataclass, field
from datetime import datetime
from typing import Any

from src.movielens.aggregation.bucket import AggregateBucket
from src.movielens.aggregation.dimensions import (
    DIMENSION_AGE,
    DIMENSION_GENDER,
    DIMENSION_GENRE,
    age_bracket,
)
from src.movielens.models import Dataset, Movie, Rating, User
from src.settings import settings

logger = logging.getLogger(__name__)


# =============================================================================
# CONSTANTS
# =============================================================================

MODE_SINGLE = "single"
MODE_PARTITIONED = "partitioned"

EXECUTOR_THREAD = "thread"
EXECUTOR_PROCESS = "process"


# =============================================================================
# AGGREGATION STATISTICS
# =============================================================================


@dataclass
class AggregationStats:
    """Audit counters for one aggregation run.

    Attributes:
        mode: 'single' or 'partitioned'.
        total_ratings: Ratings handed to the driver.
        aggregated: Ratings recorded in the overall statistics.
        dropped_unknown_movie: Ratings whose movie is not in the catalog.
        partitions: Number of chunks built.
        workers: Worker bound used for the pool.
        start_time: Run start timestamp.
        end_time: Run end timestamp.
    """

    mode: str = MODE_SINGLE
    total_ratings: int = 0
    aggregated: int = 0
    dropped_unknown_movie: int = 0
    partitions: int = 0
    workers: int = 1
    start_time: datetime | None = None
    end_time: datetime | None = None

    @property
    def duration_seconds(self) -> float:
        """Calculate run duration in seconds."""
        if not self.start_time or not self.end_time:
            return 0.0
        delta = self.end_time - self.start_time
        return round(delta.total_seconds(), 3)

    def to_dict(self) -> dict[str, Any]:
        """Convert stats to dictionary for reporting."""
        return {
            "mode": self.mode,
            "total_ratings": self.total_ratings,
            "aggregated": self.aggregated,
            "dropped_unknown_movie": self.dropped_unknown_movie,
            "partitions": self.partitions,
            "workers": self.workers,
            "duration_seconds": self.duration_seconds,
        }

    def log_summary(self) -> None:
        """Log aggregation summary."""
        logger.info(
            "Aggregation (%s) complete in %.3fs: %d/%d ratings, %d dropped, %d partitions, %d workers",
            self.mode,
            self.duration_seconds,
            self.aggregated,
            self.total_ratings,
            self.dropped_unknown_movie,
            self.partitions,
            self.workers,
        )


@dataclass
class ChunkResult:
    """Bucket built from one chunk plus its drop counter."""

    index: int
    bucket: AggregateBucket = field(default_factory=AggregateBucket)
    dropped: int = 0


# =============================================================================
# PARTITIONING
# =============================================================================


def partition(ratings: Sequence[Rating], chunk_size: int) -> list[Sequence[Rating]]:
    """Split ratings into contiguous chunks of chunk_size.

    The last chunk may be shorter. An empty input still yields one
    (empty) partition, never zero.

    Args:
        ratings: Ratings to split.
        chunk_size: Maximum chunk length.

    Returns:
        Chunks covering every rating exactly once, in order.

    Raises:
        ValueError: If chunk_size is lower than 1.
    """
    if chunk_size < 1:
        raise ValueError(f"chunk_size must be >= 1, got {chunk_size}")
    if not ratings:
        return [ratings[0:0]]
    return [ratings[start : start + chunk_size] for start in range(0, len(ratings), chunk_size)]


# =============================================================================
# CHUNK AGGREGATION
# =============================================================================


def aggregate_chunk(
    index: int,
    ratings: Sequence[Rating],
    movies: Mapping[int, Movie],
    users: Mapping[int, User],
) -> ChunkResult:
    """Aggregate one chunk into a fresh bucket.

    Reads only the chunk and the read-only catalog/user maps.

    Args:
        index: Chunk position, kept for ordered merging.
        ratings: Ratings of the chunk.
        movies: Movie catalog.
        users: User demographics (may be empty).

    Returns:
        ChunkResult owning its bucket.
    """
    result = ChunkResult(index=index)
    bucket = result.bucket

    for rating in ratings:
        movie = movies.get(rating.movie_id)
        if movie is None:
            result.dropped += 1
            continue

        value = rating.value
        movie_id = rating.movie_id
        bucket.add_rating(movie_id, value)

        user = users.get(rating.user_id) if users else None
        if user is not None:
            gender = user.gender.value if user.gender is not None else None
            bucket.add_rating_for_dimension(DIMENSION_GENDER, gender, movie_id, value)
            bucket.add_rating_for_dimension(DIMENSION_AGE, age_bracket(user.age), movie_id, value)

        for genre in movie.genres:
            bucket.add_rating_for_dimension(DIMENSION_GENRE, genre, movie_id, value)

    return result


# Worker-process state, populated once per process by the pool initializer.
_WORKER_MOVIES: dict[int, Movie] = {}
_WORKER_USERS: dict[int, User] = {}


def _init_process_worker(movies: dict[int, Movie], users: dict[int, User]) -> None:
    global _WORKER_MOVIES, _WORKER_USERS
    _WORKER_MOVIES = movies
    _WORKER_USERS = users


def _aggregate_chunk_in_process(index: int, ratings: Sequence[Rating]) -> ChunkResult:
    return aggregate_chunk(index, ratings, _WORKER_MOVIES, _WORKER_USERS)


# =============================================================================
# DRIVER
# =============================================================================


class AggregationDriver:
    """Builds the merged AggregateBucket for a dataset.

    Attributes:
        dataset: Read-only dataset shared by all workers.
        stats: Counters of the last run.
    """

    def __init__(
        self,
        dataset: Dataset,
        chunk_size: int | None = None,
        max_workers: int | None = None,
        executor: str | None = None,
    ) -> None:
        """Initialize driver with tuning values (defaults from settings).

        Args:
            dataset: Loaded dataset.
            chunk_size: Ratings per partition.
            max_workers: Upper bound of concurrent workers.
            executor: 'thread' or 'process'.

        Raises:
            ValueError: On a non-positive tuning value or unknown executor.
        """
        self.dataset = dataset
        self.chunk_size = chunk_size if chunk_size is not None else settings.aggregation.chunk_size
        self.max_workers = max_workers if max_workers is not None else settings.aggregation.max_workers
        self.executor = (executor or settings.aggregation.executor).lower()
        self.stats = AggregationStats()

        self._validate(self.chunk_size, self.max_workers)
        if self.executor not in (EXECUTOR_THREAD, EXECUTOR_PROCESS):
            raise ValueError(f"Unknown executor: {self.executor}")

    # =========================================================================
    # Public API
    # =========================================================================

    def build_aggregates(self, ratings: Sequence[Rating]) -> AggregateBucket:
        """Aggregate ratings into a single bucket.

        Ratings referencing a movie absent from the catalog are dropped.
        Gender and age slices are filled only when the rater is known;
        every genre of the movie receives the rating.

        Args:
            ratings: Ratings to aggregate.

        Returns:
            Populated bucket.
        """
        self._start(MODE_SINGLE, len(ratings), partitions=1, workers=1)

        result = aggregate_chunk(0, ratings, self.dataset.movies, self.dataset.users)
        self.stats.dropped_unknown_movie = result.dropped

        self._finish()
        return result.bucket

    def run_single_threaded(self, ratings: Sequence[Rating] | None = None) -> AggregateBucket:
        """Aggregate the full rating sequence in the calling thread.

        Args:
            ratings: Ratings to aggregate (defaults to the dataset's).

        Returns:
            Bucket covering every rating.
        """
        return self.build_aggregates(self._resolve(ratings))

    def run_partitioned(
        self,
        ratings: Sequence[Rating] | None = None,
        chunk_size: int | None = None,
        max_workers: int | None = None,
    ) -> AggregateBucket:
        """Aggregate contiguous chunks concurrently, then merge them.

        Each chunk is processed by exactly one worker task. The call
        returns only after all tasks completed; if any task fails its
        exception propagates and no partial bucket is merged.

        Counts match a single-threaded run exactly. Rating sums are
        floats added in a different order, so they may differ from a
        single pass in the last bits.

        Args:
            ratings: Ratings to aggregate (defaults to the dataset's).
            chunk_size: Override of the configured chunk size.
            max_workers: Override of the configured worker bound.

        Returns:
            Merged bucket.
        """
        ratings = self._resolve(ratings)
        chunk_size = chunk_size if chunk_size is not None else self.chunk_size
        max_workers = max_workers if max_workers is not None else self.max_workers
        self._validate(chunk_size, max_workers)

        chunks = partition(ratings, chunk_size)
        workers = min(max_workers, len(chunks))
        self._start(MODE_PARTITIONED, len(ratings), partitions=len(chunks), workers=workers)
        logger.debug(
            "Partitioned %d ratings into %d chunks of <= %d (%s pool, %d workers)",
            len(ratings),
            len(chunks),
            chunk_size,
            self.executor,
            workers,
        )

        results = self._run_chunks(chunks, workers)
        merged = self.merge_results(results)

        self._finish()
        return merged

    def merge_results(self, results: list[ChunkResult]) -> AggregateBucket:
        """Merge partial buckets in chunk order into a new bucket.

        Merging in chunk order keeps the result independent of task
        completion order; float sums still follow chunk boundaries.

        Args:
            results: Completed chunk results.

        Returns:
            Merged bucket.
        """
        merged = AggregateBucket()
        for result in sorted(results, key=lambda r: r.index):
            merged.merge(result.bucket)
            self.stats.dropped_unknown_movie += result.dropped
        return merged

    # =========================================================================
    # Internals
    # =========================================================================

    def _run_chunks(self, chunks: list[Sequence[Rating]], workers: int) -> list[ChunkResult]:
        with self._create_executor(workers) as pool:
            if self.executor == EXECUTOR_PROCESS:
                futures = [
                    pool.submit(_aggregate_chunk_in_process, idx, chunk)
                    for idx, chunk in enumerate(chunks)
                ]
            else:
                movies, users = self.dataset.movies, self.dataset.users
                futures = [
                    pool.submit(aggregate_chunk, idx, chunk, movies, users)
                    for idx, chunk in enumerate(chunks)
                ]
            # Barrier: result() re-raises the first worker failure.
            return [future.result() for future in futures]

    def _create_executor(self, workers: int) -> Executor:
        if self.executor == EXECUTOR_PROCESS:
            return ProcessPoolExecutor(
                max_workers=workers,
                initializer=_init_process_worker,
                initargs=(dict(self.dataset.movies), dict(self.dataset.users)),
            )
        return ThreadPoolExecutor(max_workers=workers, thread_name_prefix="aggregate")

    def _resolve(self, ratings: Sequence[Rating] | None) -> Sequence[Rating]:
        return self.dataset.ratings if ratings is None else ratings

    def _start(self, mode: str, total: int, partitions: int, workers: int) -> None:
        self.stats = AggregationStats(
            mode=mode,
            total_ratings=total,
            partitions=partitions,
            workers=workers,
            start_time=datetime.now(),
        )

    def _finish(self) -> None:
        self.stats.end_time = datetime.now()
        self.stats.aggregated = self.stats.total_ratings - self.stats.dropped_unknown_movie
        self.stats.log_summary()

    @staticmethod
    def _validate(chunk_size: int, max_workers: int) -> None:
        if chunk_size < 1:
            raise ValueError(f"chunk_size must be >= 1, got {chunk_size}")
        if max_workers < 1:
            raise ValueError(f"max_workers must be >= 1, got {max_workers}")
