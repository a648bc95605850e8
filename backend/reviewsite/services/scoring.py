"""Review score calculation.

final_score = round((rhymes + structure + implementation + individuality) * 1.4 * multiplier)

The atmosphere slider (1-10) maps linearly onto a multiplier in
[1.0000, 1.6072], which pins the best possible review at exactly 90.
"""
from typing import NamedTuple

from reviewsite.exceptions import InvalidRatingError

RATING_MIN = 1
RATING_MAX = 10

BASE_WEIGHT = 1.4
MULTIPLIER_MIN = 1.0
MULTIPLIER_RANGE = 0.6072
MULTIPLIER_STEP = MULTIPLIER_RANGE / (RATING_MAX - RATING_MIN)
MULTIPLIER_PRECISION = 4  # Stored multiplier keeps 4 decimals

RATING_FIELDS = (
    "rating_rhymes",
    "rating_structure",
    "rating_implementation",
    "rating_individuality",
)


class Score(NamedTuple):
    """Computed score and the multiplier stored alongside it."""
    final_score: int
    multiplier: float


def validate_rating(field: str, value) -> int:
    """Return ``value`` if it is an integer rating in [1, 10]."""
    if isinstance(value, bool) or not isinstance(value, int):
        raise InvalidRatingError(field, value)
    if value < RATING_MIN or value > RATING_MAX:
        raise InvalidRatingError(field, value)
    return value


def _multiplier(atmosphere_rating: int) -> float:
    return MULTIPLIER_MIN + (atmosphere_rating - RATING_MIN) * MULTIPLIER_STEP


def atmosphere_multiplier(atmosphere_rating: int) -> float:
    """Convert the 1-10 atmosphere slider to its multiplier (1.0000-1.6072)."""
    validate_rating("atmosphere_rating", atmosphere_rating)
    return round(_multiplier(atmosphere_rating), MULTIPLIER_PRECISION)


def compute_score(
    rating_rhymes: int,
    rating_structure: int,
    rating_implementation: int,
    rating_individuality: int,
    atmosphere_rating: int,
) -> Score:
    """Compute the final integer score for a set of ratings.

    Rounds half away from zero; every intermediate value is non-negative so
    adding 0.5 and truncating is enough.

    Raises:
        InvalidRatingError: naming the first field outside [1, 10]
    """
    ratings = (rating_rhymes, rating_structure, rating_implementation, rating_individuality)
    for field, value in zip(RATING_FIELDS, ratings):
        validate_rating(field, value)
    validate_rating("atmosphere_rating", atmosphere_rating)

    raw = sum(ratings) * BASE_WEIGHT * _multiplier(atmosphere_rating)
    return Score(
        final_score=int(raw + 0.5),
        multiplier=round(_multiplier(atmosphere_rating), MULTIPLIER_PRECISION),
    )
