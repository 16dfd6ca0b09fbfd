"""Dataset loaders for the three MovieLens on-disk layouts.

Usage:
    from src.movielens.loaders import get_loader, detect_variant

    loader = get_loader(detect_variant(folder))
    dataset = loader.load(folder)
"""

from pathlib import Path

from src.movielens.exceptions import UnknownVariantError
from src.movielens.loaders.base import BaseLoader, FileStats, LoaderStats
from src.movielens.loaders.ml10m import MovieLens10MLoader
from src.movielens.loaders.ml25m import MovieLens25MLoader
from src.movielens.loaders.ml100k import MovieLens100KLoader

LOADERS: dict[str, type[BaseLoader]] = {
    MovieLens100KLoader.variant: MovieLens100KLoader,
    MovieLens10MLoader.variant: MovieLens10MLoader,
    MovieLens25MLoader.variant: MovieLens25MLoader,
}

VARIANTS: tuple[str, ...] = tuple(LOADERS)


def get_loader(variant: str) -> BaseLoader:
    """Instantiate the loader of a dataset variant.

    Args:
        variant: One of VARIANTS (case-insensitive).

    Returns:
        Loader instance.

    Raises:
        UnknownVariantError: If the variant is not supported.
    """
    loader_cls = LOADERS.get(variant.strip().lower())
    if loader_cls is None:
        raise UnknownVariantError(f"Unknown dataset variant '{variant}'. Valid: {VARIANTS}")
    return loader_cls()


def detect_variant(folder: Path | str) -> str:
    """Guess the dataset variant from the files present in a folder.

    A variant matches when all of its required files exist; the first
    match in VARIANTS order wins.

    Args:
        folder: Dataset folder.

    Returns:
        Variant name.

    Raises:
        UnknownVariantError: If no variant's files are all present.
    """
    folder = Path(folder)
    for variant, loader_cls in LOADERS.items():
        if all((folder / name).is_file() for name in loader_cls.REQUIRED_FILES):
            return variant
    raise UnknownVariantError(f"No MovieLens layout recognised in {folder}")


__all__ = [
    "BaseLoader",
    "FileStats",
    "LoaderStats",
    "MovieLens100KLoader",
    "MovieLens10MLoader",
    "MovieLens25MLoader",
    "LOADERS",
    "VARIANTS",
    "get_loader",
    "detect_variant",
]
