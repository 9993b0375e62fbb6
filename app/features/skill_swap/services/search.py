"""
Browse/search over the user collection.
"""

from collections.abc import Iterable

from app.features.skill_swap.domain import SearchFilters, User


def matches_query(user: User, query: str) -> bool:
    """Case-insensitive substring match on name or any offered skill."""
    needle = query.strip().lower()
    if not needle:
        return True
    if needle in user.name.lower():
        return True
    return any(needle in skill.lower() for skill in user.skills_offered)


def matches_filters(user: User, filters: SearchFilters) -> bool:
    location = (filters.location or "").strip().lower()
    if location:
        if not user.location or location not in user.location.lower():
            return False
    if filters.min_rating is not None and user.rating < filters.min_rating:
        return False
    if filters.availability and filters.availability not in user.availability:
        return False
    return True


def search_users(
    users: Iterable[User],
    query: str = "",
    filters: SearchFilters | None = None,
    exclude_user_id: str | None = None,
) -> list[User]:
    """
    Eligible users matching the query and every given filter.

    Only public, active, non-admin users are eligible. Results keep the input
    order, so the same collection and arguments always give the same list.
    """
    filters = filters or SearchFilters()
    return [
        user
        for user in users
        if user.is_discoverable
        and user.id != exclude_user_id
        and matches_query(user, query)
        and matches_filters(user, filters)
    ]
