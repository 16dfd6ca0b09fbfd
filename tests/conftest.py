"""Shared pytest fixtures for report generator tests."""

from pathlib import Path

import pytest

from src.movielens.models import Dataset, Gender, Movie, Rating, User
from src.settings import settings


@pytest.fixture(autouse=True, scope="function")
def mock_env_for_tests(monkeypatch: pytest.MonkeyPatch) -> None:
    """Mock env variables for reproducible tests."""
    monkeypatch.setenv("ENVIRONMENT", "test")
    monkeypatch.setenv("DEBUG", "false")
    monkeypatch.setenv("LOG_LEVEL", "INFO")
    monkeypatch.setenv("LOG_TO_FILE", "false")

    # The singleton is built at import time: patch the live values too
    monkeypatch.setattr(settings.logging, "to_file", False)
    monkeypatch.setattr(settings.aggregation, "chunk_size", 10_000)
    monkeypatch.setattr(settings.aggregation, "max_workers", 4)
    monkeypatch.setattr(settings.aggregation, "executor", "thread")


@pytest.fixture
def tmp_output_dir(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> Path:
    """Temporary report output root."""
    output_dir = tmp_path / "Output"
    monkeypatch.setattr(settings.paths, "output_root", str(output_dir))
    return output_dir


# =============================================================================
# IN-MEMORY DATASETS
# =============================================================================


@pytest.fixture
def sample_movies() -> dict[int, Movie]:
    """Small catalog covering several genres."""
    return {
        1: Movie(1, "Toy Story (1995)", frozenset({"Animation", "Comedy"})),
        2: Movie(2, "GoldenEye (1995)", frozenset({"Action", "Thriller"})),
        3: Movie(3, "Heat (1995)", frozenset({"Action", "Drama"})),
        4: Movie(4, "Casino (1995)", frozenset({"Drama"})),
        5: Movie(5, "Jumanji (1995)", frozenset({"Fantasy", "Adventure"})),
    }


@pytest.fixture
def sample_users() -> dict[int, User]:
    """Users spanning both genders and all age brackets."""
    return {
        10: User(10, 16, Gender.MALE),
        11: User(11, 18, Gender.FEMALE),
        12: User(12, 29, Gender.MALE),
        13: User(13, 30, Gender.FEMALE),
        14: User(14, 45, None),
    }


@pytest.fixture
def sample_ratings() -> list[Rating]:
    """Ratings including one for a movie missing from the catalog."""
    return [
        Rating(10, 1, 5.0),
        Rating(11, 1, 4.0),
        Rating(12, 2, 3.0),
        Rating(13, 2, 4.0),
        Rating(14, 3, 5.0),
        Rating(10, 3, 4.0),
        Rating(11, 4, 2.0),
        Rating(12, 5, 4.5),
        Rating(13, 5, 3.5),
        Rating(99, 1, 1.0),
        Rating(10, 999, 5.0),
        Rating(14, 4, 3.0),
    ]


@pytest.fixture
def sample_dataset(
    sample_movies: dict[int, Movie],
    sample_users: dict[int, User],
    sample_ratings: list[Rating],
) -> Dataset:
    """Dataset with demographics."""
    return Dataset(
        movies=sample_movies,
        ratings=sample_ratings,
        users=sample_users,
        variant="ml-100k",
    )


@pytest.fixture
def sample_dataset_no_users(sample_movies: dict[int, Movie], sample_ratings: list[Rating]) -> Dataset:
    """Dataset without demographics."""
    return Dataset(movies=sample_movies, ratings=sample_ratings, variant="ml-10m")


# =============================================================================
# ON-DISK DATASET FOLDERS
# =============================================================================


def _genre_flags(*indexes: int) -> str:
    flags = ["0"] * 19
    for idx in indexes:
        flags[idx] = "1"
    return "|".join(flags)


@pytest.fixture
def ml100k_dir(tmp_path: Path) -> Path:
    """Minimal ml-100k folder (u.user, u.item, u.data)."""
    folder = tmp_path / "ml-100k"
    folder.mkdir()

    (folder / "u.user").write_text(
        "1|24|M|technician|85711\n"
        "2|53|F|other|94043\n"
        "3|17|m|student|32067\n"
        "broken line\n",
        encoding="latin-1",
    )
    # Flag indexes: 1=Action, 5=Comedy, 8=Drama, 9=Fantasy
    (folder / "u.item").write_text(
        f"1|Toy Story (1995)|01-Jan-1995||http://example.org/1|{_genre_flags(3, 5)}\n"
        f"2|GoldenEye (1995)|01-Jan-1995||http://example.org/2|{_genre_flags(1, 16)}\n"
        f"3|Café Society (1995)|01-Jan-1995||http://example.org/3|{_genre_flags(8)}\n"
        "x|bad id|||\n",
        encoding="latin-1",
    )
    (folder / "u.data").write_text(
        "1\t1\t5\t881250949\n"
        "2\t1\t3\t881250950\n"
        "3\t2\t4\t881250951\n"
        "1\t3\t2\t881250952\n"
        "2\t42\t5\t881250953\n"
        "not a rating\n"
        "\n",
        encoding="utf-8",
    )
    return folder


@pytest.fixture
def ml10m_dir(tmp_path: Path) -> Path:
    """Minimal ml-10m folder (movies.dat, ratings.dat)."""
    folder = tmp_path / "ml-10M100K"
    folder.mkdir()

    (folder / "movies.dat").write_text(
        "1::Toy Story (1995)::Adventure|Animation|Children|Comedy|Fantasy\n"
        "2::Jumanji (1995)::Adventure|Children|Fantasy\n"
        "3::Grumpier Old Men (1995)::(no genres listed)\n"
        "oops\n",
        encoding="utf-8",
    )
    (folder / "ratings.dat").write_text(
        "1::1::5::838985046\n"
        "1::2::3.5::838983525\n"
        "2::1::4.5::838983392\n"
        "2::3::bad::838983421\n"
        "3::2\n",
        encoding="utf-8",
    )
    return folder


@pytest.fixture
def ml25m_dir(tmp_path: Path) -> Path:
    """Minimal ml-25m folder (movies.csv, ratings.csv)."""
    folder = tmp_path / "ml-25m"
    folder.mkdir()

    (folder / "movies.csv").write_text(
        "movieId,title,genres\n"
        "1,Toy Story (1995),Adventure|Animation|Children|Comedy|Fantasy\n"
        '2,"American President, The (1995)",Comedy|Drama|Romance\n'
        "3,Heat (1995),Action|Crime|Thriller\n",
        encoding="utf-8",
    )
    (folder / "ratings.csv").write_text(
        "userId,movieId,rating,timestamp\n"
        "1,1,4.0,1147880044\n"
        "1,2,3.5,1147868817\n"
        "2,2,5.0,1147868828\n"
        "2,3,abc,1147878820\n"
        "3,3,4.5,1147868510\n",
        encoding="utf-8",
    )
    return folder
