"""
Admin analytics reductions.

Pure functions over the store's collections; they never raise on empty input.
"""

from collections import Counter
from collections.abc import Sequence
from datetime import UTC, date, datetime, timedelta

from app.features.skill_swap.domain import (
    ActivityDay,
    Feedback,
    PlatformAnalytics,
    SkillCount,
    SwapRequest,
    User,
)

from .ratings import mean_rating

TOP_SKILLS_LIMIT = 5


def _percent(part: int, whole: int) -> float:
    return round(part / whole * 100, 1) if whole else 0.0


def top_skills(users: Sequence[User], limit: int = TOP_SKILLS_LIMIT) -> list[SkillCount]:
    """Most offered skills; equal counts keep first-encountered order."""
    counts = Counter(skill for user in users for skill in user.skills_offered)
    # most_common is a stable sort over insertion order
    return [SkillCount(skill=skill, count=count) for skill, count in counts.most_common(limit)]


def compute_analytics(
    users: Sequence[User],
    swap_requests: Sequence[SwapRequest],
    feedback: Sequence[Feedback],
    top_skills_limit: int = TOP_SKILLS_LIMIT,
) -> PlatformAnalytics:
    """Platform summary for the admin dashboard. Admin accounts are not counted."""
    regular_users = [user for user in users if not user.is_admin]
    active_users = sum(1 for user in regular_users if user.is_active)
    pending = sum(1 for request in swap_requests if request.status == "pending")
    completed = sum(1 for request in swap_requests if request.status == "completed")

    return PlatformAnalytics(
        total_users=len(regular_users),
        active_users=active_users,
        pending_swaps=pending,
        completed_swaps=completed,
        total_swaps=len(swap_requests),
        average_rating=mean_rating(entry.rating for entry in feedback),
        top_skills=top_skills(regular_users, top_skills_limit),
        swap_success_rate=_percent(completed, len(swap_requests)),
        active_user_rate=_percent(active_users, len(regular_users)),
    )


def compute_activity_report(
    users: Sequence[User],
    swap_requests: Sequence[SwapRequest],
    days: int = 7,
    today: date | None = None,
) -> list[ActivityDay]:
    """
    Daily new-user, new-swap and completed-swap counts, oldest day first.

    Completion is dated by the swap's updated_at, the moment it entered
    `completed`.
    """
    if days < 1:
        return []

    today = today or datetime.now(UTC).date()
    report = {
        today - timedelta(days=offset): ActivityDay(day=today - timedelta(days=offset))
        for offset in range(days - 1, -1, -1)
    }

    for user in users:
        if not user.is_admin and user.join_date in report:
            report[user.join_date].new_users += 1

    for request in swap_requests:
        created = request.created_at.date()
        if created in report:
            report[created].new_swaps += 1
        if request.status == "completed":
            finished = request.updated_at.date()
            if finished in report:
                report[finished].completed_swaps += 1

    return list(report.values())
