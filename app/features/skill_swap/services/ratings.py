"""
Rating aggregation.

A user's displayed rating is the mean of every feedback entry addressed to
them, rounded half-up to one decimal, or DEFAULT_RATING when there is none.
"""

from collections.abc import Iterable
from decimal import ROUND_HALF_UP, Decimal

from app.features.skill_swap.domain import DEFAULT_RATING, Feedback, NewFeedback, SwapRequest

from .errors import InvalidFeedback

MIN_FEEDBACK_RATING = 1
MAX_FEEDBACK_RATING = 5


def round_rating(value: float) -> float:
    """Round to one decimal place, halves away from zero (4.25 -> 4.3)."""
    return float(Decimal(str(value)).quantize(Decimal("0.1"), rounding=ROUND_HALF_UP))


def mean_rating(ratings: Iterable[int], default: float = DEFAULT_RATING) -> float:
    values = list(ratings)
    if not values:
        return default
    return round_rating(sum(values) / len(values))


def validate_feedback(
    draft: NewFeedback,
    reviewer_id: str,
    swap: SwapRequest,
    existing: Iterable[Feedback],
) -> str:
    """
    Check a feedback draft against its swap and the feedback already on file.

    Returns:
        The id of the user being reviewed (the reviewer's counterpart).

    Raises:
        InvalidFeedback: swap not completed, reviewer not a participant,
            rating out of range, or reviewer already rated this swap.
    """
    if swap.status != "completed":
        raise InvalidFeedback(
            "Feedback can only be left on completed swaps",
            swap_id=swap.id,
            status=swap.status,
        )

    reviewee_id = swap.counterpart_of(reviewer_id)
    if reviewee_id is None:
        raise InvalidFeedback(
            "Only swap participants can leave feedback", swap_id=swap.id, reviewer_id=reviewer_id
        )

    if not MIN_FEEDBACK_RATING <= draft.rating <= MAX_FEEDBACK_RATING:
        raise InvalidFeedback(
            f"Rating must be between {MIN_FEEDBACK_RATING} and {MAX_FEEDBACK_RATING}",
            rating=draft.rating,
        )

    if any(
        entry.swap_request_id == swap.id and entry.from_user_id == reviewer_id for entry in existing
    ):
        raise InvalidFeedback(
            "Feedback already recorded for this swap", swap_id=swap.id, reviewer_id=reviewer_id
        )

    return reviewee_id
