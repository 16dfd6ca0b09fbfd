"""Aggregation engine for MovieLens rating statistics.

Accumulates per-movie sum/count statistics (overall and per dimension
slice), partitions the work across concurrent workers, merges the
partial results and ranks movies for the top-N reports.

Example:
    >>> from src.movielens.aggregation import AggregationDriver, select_top, ReportSpec
    >>> driver = AggregationDriver(dataset, chunk_size=10_000)
    >>> bucket = driver.run_partitioned()
    >>> rows = select_top(bucket, dataset.movies, ReportSpec(), n=10)
"""

from src.movielens.aggregation.bucket import AggregateBucket, SumCount
from src.movielens.aggregation.dimensions import (
    AGE_18_TO_29,
    AGE_30_PLUS,
    AGE_BRACKETS,
    AGE_UNDER_18,
    DIMENSION_AGE,
    DIMENSION_GENDER,
    DIMENSION_GENRE,
    age_bracket,
    normalize_key,
)
from src.movielens.aggregation.driver import (
    AggregationDriver,
    AggregationStats,
    ChunkResult,
    aggregate_chunk,
    partition,
)
from src.movielens.aggregation.ranking import (
    OVERALL_REPORT_ID,
    RankedRow,
    ReportSpec,
    build_report_specs,
    select_top,
)

__all__ = [
    # Accumulators
    "AggregateBucket",
    "SumCount",
    # Dimensions
    "DIMENSION_AGE",
    "DIMENSION_GENDER",
    "DIMENSION_GENRE",
    "AGE_UNDER_18",
    "AGE_18_TO_29",
    "AGE_30_PLUS",
    "AGE_BRACKETS",
    "age_bracket",
    "normalize_key",
    # Driver
    "AggregationDriver",
    "AggregationStats",
    "ChunkResult",
    "aggregate_chunk",
    "partition",
    # Ranking
    "OVERALL_REPORT_ID",
    "RankedRow",
    "ReportSpec",
    "build_report_specs",
    "select_top",
]
