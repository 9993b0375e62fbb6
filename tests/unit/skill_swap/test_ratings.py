"""
Tests for rating aggregation and feedback validation.
"""

import pytest

from app.features.skill_swap.domain import NewFeedback
from app.features.skill_swap.services.errors import InvalidFeedback
from app.features.skill_swap.services.ratings import (
    mean_rating,
    round_rating,
    validate_feedback,
)
from factories import make_feedback, make_swap


class TestRounding:
    @pytest.mark.parametrize(
        "value, expected",
        [(4.25, 4.3), (4.35, 4.4), (4.24, 4.2), (3.0, 3.0), (4.666, 4.7), (1.05, 1.1)],
    )
    def test_half_up_to_one_decimal(self, value, expected):
        assert round_rating(value) == expected

    def test_mean_of_nothing_is_default(self):
        assert mean_rating([]) == 5.0
        assert mean_rating([], default=3.5) == 3.5

    def test_mean(self):
        assert mean_rating([5, 4]) == 4.5
        assert mean_rating([5, 4, 4]) == 4.3
        assert mean_rating([1]) == 1.0


class TestValidateFeedback:
    def test_returns_counterpart(self):
        swap = make_swap("s1", "alice", "bob", status="completed")

        assert validate_feedback(NewFeedback(swap_request_id="s1", rating=5), "alice", swap, []) == "bob"
        assert validate_feedback(NewFeedback(swap_request_id="s1", rating=2), "bob", swap, []) == "alice"

    @pytest.mark.parametrize("status", ["pending", "accepted", "rejected", "cancelled"])
    def test_swap_must_be_completed(self, status):
        swap = make_swap("s1", "alice", "bob", status=status)

        with pytest.raises(InvalidFeedback):
            validate_feedback(NewFeedback(swap_request_id="s1", rating=5), "alice", swap, [])

    def test_reviewer_must_be_participant(self):
        swap = make_swap("s1", "alice", "bob", status="completed")

        with pytest.raises(InvalidFeedback):
            validate_feedback(NewFeedback(swap_request_id="s1", rating=5), "eve", swap, [])

    @pytest.mark.parametrize("rating", [0, 6, -1])
    def test_rating_range(self, rating):
        swap = make_swap("s1", "alice", "bob", status="completed")

        with pytest.raises(InvalidFeedback):
            validate_feedback(NewFeedback(swap_request_id="s1", rating=rating), "alice", swap, [])

    def test_one_review_per_reviewer_per_swap(self):
        swap = make_swap("s1", "alice", "bob", status="completed")
        existing = [make_feedback("f1", "s1", "alice", "bob", 4)]

        with pytest.raises(InvalidFeedback):
            validate_feedback(NewFeedback(swap_request_id="s1", rating=5), "alice", swap, existing)

        # the other participant can still review
        assert validate_feedback(NewFeedback(swap_request_id="s1", rating=5), "bob", swap, existing) == "alice"
