"""Report dimensions and slice key handling.

A dimension is a named way of partitioning ratings (gender, genre,
age bracket). Keys are stored normalised so that 'action' and
'Action' land in the same slice, while the first spelling seen is
kept as the display label.
"""

from typing import Final

# =============================================================================
# DIMENSION NAMES
# =============================================================================

DIMENSION_GENDER: Final[str] = "gender"
DIMENSION_GENRE: Final[str] = "genre"
DIMENSION_AGE: Final[str] = "age"

DEMOGRAPHIC_DIMENSIONS: Final[tuple[str, ...]] = (DIMENSION_GENDER, DIMENSION_AGE)
"""Dimensions that need user data."""


# =============================================================================
# AGE BRACKETS
# =============================================================================

AGE_UNDER_18: Final[str] = "<18"
AGE_18_TO_29: Final[str] = "18-29"
AGE_30_PLUS: Final[str] = "30+"

AGE_BRACKETS: Final[tuple[str, ...]] = (AGE_UNDER_18, AGE_18_TO_29, AGE_30_PLUS)
"""Bracket labels in report order."""


def age_bracket(age: int) -> str:
    """Map an age onto its bracket label.

    Boundaries: age < 18, 18 <= age < 30, age >= 30.

    Args:
        age: User age in years.

    Returns:
        One of AGE_BRACKETS.
    """
    if age < 18:
        return AGE_UNDER_18
    if age < 30:
        return AGE_18_TO_29
    return AGE_30_PLUS


# =============================================================================
# KEY NORMALISATION
# =============================================================================


def normalize_key(key: str | None) -> str | None:
    """Return the internal form of a slice key.

    Args:
        key: Raw key (gender code, genre name, bracket label).

    Returns:
        Case-folded, stripped key, or None when the key is unset.
    """
    if key is None:
        return None
    normalized = key.strip().casefold()
    return normalized or None
