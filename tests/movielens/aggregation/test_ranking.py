"""Unit tests for report specifications and top-N selection."""

import pytest
from pytest import approx

from src.movielens.aggregation.bucket import AggregateBucket
from src.movielens.aggregation.dimensions import DIMENSION_AGE, DIMENSION_GENDER, DIMENSION_GENRE
from src.movielens.aggregation.driver import AggregationDriver
from src.movielens.aggregation.ranking import (
    OVERALL_REPORT_ID,
    RankedRow,
    ReportSpec,
    build_report_specs,
    select_top,
)
from src.movielens.exceptions import RankingInvariantError
from src.movielens.models import Dataset, Movie

GENRES = ["Action", "Drama", "Comedy", "Fantasy"]


class TestReportSpec:
    @staticmethod
    def test_overall() -> None:
        spec = ReportSpec()
        assert spec.is_overall
        assert spec.report_id == OVERALL_REPORT_ID

    @staticmethod
    def test_sliced_report_id() -> None:
        spec = ReportSpec(DIMENSION_GENRE, "Action")
        assert not spec.is_overall
        assert spec.report_id == "genre_Action"

    @staticmethod
    def test_hashable() -> None:
        assert len({ReportSpec(DIMENSION_AGE, "<18"), ReportSpec(DIMENSION_AGE, "<18")}) == 1


class TestBuildReportSpecs:
    @staticmethod
    def test_with_demographics(sample_dataset: Dataset) -> None:
        ids = [spec.report_id for spec in build_report_specs(sample_dataset, GENRES)]
        assert ids == [
            "overall",
            "gender_M",
            "gender_F",
            "genre_Action",
            "genre_Drama",
            "genre_Comedy",
            "genre_Fantasy",
            "age_<18",
            "age_18-29",
            "age_30+",
        ]

    @staticmethod
    def test_without_demographics(sample_dataset_no_users: Dataset) -> None:
        specs = build_report_specs(sample_dataset_no_users, GENRES)
        assert len(specs) == 5
        assert all(spec.dimension in (None, DIMENSION_GENRE) for spec in specs)

    @staticmethod
    def test_no_genres(sample_dataset_no_users: Dataset) -> None:
        assert build_report_specs(sample_dataset_no_users, []) == [ReportSpec()]


@pytest.fixture
def bucket(sample_dataset: Dataset) -> AggregateBucket:
    """Merged bucket of the sample dataset."""
    return AggregationDriver(sample_dataset).run_single_threaded()


class TestSelectTop:
    @staticmethod
    def test_overall_rows(bucket: AggregateBucket, sample_dataset: Dataset) -> None:
        rows = select_top(bucket, sample_dataset.movies, ReportSpec(), 3)
        assert [row.movie_id for row in rows] == [3, 5, 2]
        assert rows[0] == RankedRow(3, "Heat (1995)", None, approx(4.5), 2)

    @staticmethod
    def test_genre_rows_carry_label(bucket: AggregateBucket, sample_dataset: Dataset) -> None:
        rows = select_top(bucket, sample_dataset.movies, ReportSpec(DIMENSION_GENRE, "Drama"), 10)
        assert [row.movie_id for row in rows] == [3, 4]
        assert {row.slice_label for row in rows} == {"Drama"}

    @staticmethod
    def test_gender_tie_broken_by_movie_id(bucket: AggregateBucket, sample_dataset: Dataset) -> None:
        rows = select_top(bucket, sample_dataset.movies, ReportSpec(DIMENSION_GENDER, "F"), 10)
        assert [row.movie_id for row in rows] == [1, 2, 5, 4]

    @staticmethod
    def test_unknown_slice_is_empty(bucket: AggregateBucket, sample_dataset: Dataset) -> None:
        assert select_top(bucket, sample_dataset.movies, ReportSpec(DIMENSION_GENRE, "Western"), 10) == []

    @staticmethod
    def test_missing_catalog_entry_raises(bucket: AggregateBucket) -> None:
        partial_catalog = {3: Movie(3, "Heat (1995)")}
        with pytest.raises(RankingInvariantError) as exc_info:
            select_top(bucket, partial_catalog, ReportSpec(), 10)
        assert exc_info.value.movie_id == 5
        assert exc_info.value.report_id == OVERALL_REPORT_ID
