"""
Tests for member browse/search.
"""

from app.features.skill_swap.domain import SearchFilters
from app.features.skill_swap.services.search import search_users


def _ids(users):
    return [user.id for user in users]


def test_only_public_active_regular_users_are_listed(users):
    # carol is private, dave inactive, root admin
    assert _ids(search_users(users)) == ["alice", "bob"]


def test_query_matches_name_or_offered_skill_case_insensitively(users):
    assert _ids(search_users(users, "  python ")) == ["alice"]
    assert _ids(search_users(users, "PHOTO")) == ["bob"]
    assert _ids(search_users(users, "ali")) == ["alice"]


def test_query_ignores_wanted_skills(users):
    # bob wants Python but doesn't offer it
    assert "bob" not in _ids(search_users(users, "python"))


def test_no_match(users):
    assert search_users(users, "underwater basket weaving") == []


def test_location_filter_requires_a_location(users):
    assert _ids(search_users(users, filters=SearchFilters(location="berlin"))) == ["bob"]


def test_min_rating_filter(users):
    users[0] = users[0].model_copy(update={"rating": 3.9})

    assert _ids(search_users(users, filters=SearchFilters(min_rating=4.0))) == ["bob"]
    assert _ids(search_users(users, filters=SearchFilters(min_rating=3.9))) == ["alice", "bob"]


def test_availability_filter_is_exact(users):
    assert _ids(search_users(users, filters=SearchFilters(availability="Evenings"))) == ["bob"]
    assert _ids(search_users(users, filters=SearchFilters(availability="Mornings"))) == []


def test_filters_combine(users):
    filters = SearchFilters(location="Berlin", availability="Weekends")

    assert search_users(users, filters=filters) == []


def test_caller_can_be_excluded(users):
    assert _ids(search_users(users, exclude_user_id="alice")) == ["bob"]


def test_same_input_gives_same_order(users):
    assert search_users(users, "o") == search_users(users, "o")


def test_blank_location_is_no_filter(users):
    assert _ids(search_users(users, filters=SearchFilters(location="   "))) == ["alice", "bob"]
