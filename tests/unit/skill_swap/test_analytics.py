"""
Tests for admin analytics and the daily activity report.
"""

from datetime import UTC, date, datetime

from app.features.skill_swap.services.analytics import (
    compute_activity_report,
    compute_analytics,
    top_skills,
)
from factories import make_feedback, make_swap, make_user


class TestPlatformAnalytics:
    def test_empty_platform(self):
        analytics = compute_analytics([], [], [])

        assert analytics.total_users == 0
        assert analytics.total_swaps == 0
        assert analytics.average_rating == 5.0
        assert analytics.swap_success_rate == 0.0
        assert analytics.active_user_rate == 0.0
        assert analytics.top_skills == []

    def test_counts_exclude_admins(self, users):
        swaps = [
            make_swap("s1", "alice", "bob", status="completed"),
            make_swap("s2", "alice", "bob"),
            make_swap("s3", "bob", "alice", status="rejected"),
        ]
        feedback = [
            make_feedback("f1", "s1", "alice", "bob", 5),
            make_feedback("f2", "s1", "bob", "alice", 4),
        ]

        analytics = compute_analytics(users, swaps, feedback)

        assert analytics.total_users == 4
        assert analytics.active_users == 3
        assert analytics.pending_swaps == 1
        assert analytics.completed_swaps == 1
        assert analytics.total_swaps == 3
        assert analytics.average_rating == 4.5
        assert analytics.swap_success_rate == 33.3
        assert analytics.active_user_rate == 75.0

    def test_top_skills_limit_and_order(self, users):
        analytics = compute_analytics(users, [], [], top_skills_limit=2)

        assert [(s.skill, s.count) for s in analytics.top_skills] == [("Python", 2), ("Cooking", 1)]


def test_top_skills_ties_keep_first_seen_order():
    users = [
        make_user("a", skills_offered=["Go", "Rust"]),
        make_user("b", skills_offered=["Rust", "Go", "Zig"]),
        make_user("c", skills_offered=["Zig"]),
    ]

    assert [s.skill for s in top_skills(users, limit=5)] == ["Go", "Rust", "Zig"]
    assert [s.skill for s in top_skills(users, limit=1)] == ["Go"]


class TestActivityReport:
    def test_one_row_per_day_oldest_first(self):
        report = compute_activity_report([], [], days=3, today=date(2025, 3, 5))

        assert [row.day for row in report] == [date(2025, 3, 3), date(2025, 3, 4), date(2025, 3, 5)]
        assert all(row.new_users == row.new_swaps == row.completed_swaps == 0 for row in report)

    def test_counts_by_day(self):
        users = [
            make_user("alice", join_date=date(2025, 3, 4)),
            make_user("bob", join_date=date(2025, 3, 5)),
            make_user("root", role="admin", join_date=date(2025, 3, 5)),
            make_user("old", join_date=date(2025, 1, 1)),
        ]
        swaps = [
            make_swap(
                "s1",
                "alice",
                "bob",
                status="completed",
                created_at=datetime(2025, 3, 4, 10, tzinfo=UTC),
                updated_at=datetime(2025, 3, 5, 18, tzinfo=UTC),
            ),
            make_swap("s2", "bob", "alice", created_at=datetime(2025, 3, 5, 8, tzinfo=UTC)),
        ]

        report = compute_activity_report(users, swaps, days=2, today=date(2025, 3, 5))

        assert [(r.new_users, r.new_swaps, r.completed_swaps) for r in report] == [
            (1, 1, 0),
            (1, 1, 1),
        ]

    def test_non_positive_days_is_empty(self):
        assert compute_activity_report([], [], days=0) == []
