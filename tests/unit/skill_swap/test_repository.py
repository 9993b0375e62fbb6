"""
Tests for the Postgres repository with the SQL helpers mocked out.
"""

from contextlib import asynccontextmanager
from datetime import UTC, date, datetime
from unittest.mock import AsyncMock
from uuid import UUID

import psycopg
import pytest

from app.features.skill_swap.repository import marketplace_repository as repo_module
from app.features.skill_swap.repository import (
    MarketplaceRepositoryError,
    PostgresMarketplaceRepository,
)

USER_ID = UUID("00000000-0000-0000-0000-0000000000a1")
OTHER_ID = UUID("00000000-0000-0000-0000-0000000000b2")
SWAP_ID = UUID("00000000-0000-0000-0000-0000000000c3")
NOW = datetime(2025, 3, 3, 9, 0, tzinfo=UTC)


def user_row(user_id=USER_ID, **overrides):
    row = {
        "id": user_id,
        "name": "Alice",
        "email": "alice@example.com",
        "location": None,
        "profile_photo": None,
        "skills_offered": ["Python"],
        "skills_wanted": None,
        "availability": None,
        "is_public": True,
        "role": "user",
        "rating": 5.0,
        "total_swaps": 0,
        "is_active": True,
        "join_date": date(2025, 3, 1),
        "created_at": NOW,
        "updated_at": NOW,
    }
    row.update(overrides)
    return row


def swap_row(status="pending"):
    return {
        "id": SWAP_ID,
        "from_user_id": USER_ID,
        "to_user_id": OTHER_ID,
        "skill_offered": "Python",
        "skill_wanted": "Guitar",
        "message": None,
        "status": status,
        "created_at": NOW,
        "updated_at": NOW,
    }


@pytest.fixture
def repo():
    return PostgresMarketplaceRepository()


@pytest.fixture
def fake_transaction(monkeypatch):
    conn = object()

    @asynccontextmanager
    async def _transaction():
        yield conn

    monkeypatch.setattr(repo_module, "get_db_transaction", AsyncMock(return_value=_transaction()))
    return conn


class TestRowMapping:
    @pytest.mark.asyncio
    async def test_get_users_stringifies_ids_and_nulls(self, repo, monkeypatch):
        monkeypatch.setattr(repo_module, "fetch_all", AsyncMock(return_value=[user_row()]))

        users = await repo.get_users()

        assert users[0].id == str(USER_ID)
        assert users[0].skills_wanted == []
        assert users[0].availability == []

    @pytest.mark.asyncio
    async def test_missing_user_is_none(self, repo, monkeypatch):
        monkeypatch.setattr(repo_module, "fetch_one", AsyncMock(return_value=None))

        assert await repo.get_user_by_id("nope") is None

    @pytest.mark.asyncio
    async def test_swap_message_null_becomes_empty(self, repo, monkeypatch):
        monkeypatch.setattr(repo_module, "fetch_all", AsyncMock(return_value=[swap_row()]))

        swaps = await repo.get_swap_requests()

        assert swaps[0].message == ""
        assert swaps[0].from_user_id == str(USER_ID)


class TestUpdates:
    @pytest.mark.asyncio
    async def test_update_user_builds_set_clause(self, repo, monkeypatch):
        fetch_one = AsyncMock(return_value=user_row(location="Lisbon"))
        monkeypatch.setattr(repo_module, "fetch_one", fetch_one)

        user = await repo.update_user("u1", {"location": "Lisbon", "is_public": False})

        query, params = fetch_one.call_args.args
        assert "location = %s, is_public = %s" in query
        assert params == ("Lisbon", False, "u1")
        assert user.location == "Lisbon"

    @pytest.mark.asyncio
    async def test_update_user_rejects_derived_columns(self, repo, monkeypatch):
        fetch_one = AsyncMock()
        monkeypatch.setattr(repo_module, "fetch_one", fetch_one)

        with pytest.raises(MarketplaceRepositoryError):
            await repo.update_user("u1", {"rating": 1.0})

        fetch_one.assert_not_called()

    @pytest.mark.asyncio
    async def test_update_swap_request_guards_on_expected_status(self, repo, monkeypatch):
        fetch_one = AsyncMock(return_value=None)
        monkeypatch.setattr(repo_module, "fetch_one", fetch_one)

        result = await repo.update_swap_request(
            "s1", status="accepted", updated_at=NOW, expected_status="pending"
        )

        query, params = fetch_one.call_args.args
        assert "AND status = %s" in query
        assert params == ("accepted", NOW, "s1", "pending")
        assert result is None

    @pytest.mark.asyncio
    async def test_delete_admin_message(self, repo, monkeypatch):
        monkeypatch.setattr(repo_module, "execute_query", AsyncMock(side_effect=[1, 0]))

        assert await repo.delete_admin_message("m1") is True
        assert await repo.delete_admin_message("m1") is False


class TestCompleteSwap:
    @pytest.mark.asyncio
    async def test_completes_and_counts_in_one_transaction(self, repo, monkeypatch, fake_transaction):
        fetch_one = AsyncMock(return_value=swap_row("completed"))
        execute_query = AsyncMock(return_value=2)
        monkeypatch.setattr(repo_module, "fetch_one", fetch_one)
        monkeypatch.setattr(repo_module, "execute_query", execute_query)

        swap = await repo.complete_swap_request(str(SWAP_ID), updated_at=NOW)

        assert swap.status == "completed"
        assert fetch_one.call_args.kwargs["connection"] is fake_transaction
        assert execute_query.call_args.kwargs["connection"] is fake_transaction
        assert execute_query.call_args.args[1] == (str(USER_ID), str(OTHER_ID))

    @pytest.mark.asyncio
    async def test_not_accepted_returns_none(self, repo, monkeypatch, fake_transaction):
        execute_query = AsyncMock()
        monkeypatch.setattr(repo_module, "fetch_one", AsyncMock(return_value=None))
        monkeypatch.setattr(repo_module, "execute_query", execute_query)

        assert await repo.complete_swap_request("s1", updated_at=NOW) is None
        execute_query.assert_not_called()

    @pytest.mark.asyncio
    async def test_missing_participant_aborts(self, repo, monkeypatch, fake_transaction):
        monkeypatch.setattr(repo_module, "fetch_one", AsyncMock(return_value=swap_row("completed")))
        monkeypatch.setattr(repo_module, "execute_query", AsyncMock(return_value=1))

        with pytest.raises(MarketplaceRepositoryError):
            await repo.complete_swap_request("s1", updated_at=NOW)

    @pytest.mark.asyncio
    async def test_driver_error_is_wrapped(self, repo, monkeypatch, fake_transaction):
        monkeypatch.setattr(
            repo_module, "fetch_one", AsyncMock(side_effect=psycopg.OperationalError("gone"))
        )

        with pytest.raises(MarketplaceRepositoryError) as exc_info:
            await repo.complete_swap_request("s1", updated_at=NOW)

        assert exc_info.value.operation == "complete_swap_request"


class TestCreateFeedback:
    @pytest.mark.asyncio
    async def test_stores_recipient_rating(self, repo, monkeypatch, fake_transaction):
        row = {
            "id": UUID("00000000-0000-0000-0000-0000000000f4"),
            "from_user_id": USER_ID,
            "to_user_id": OTHER_ID,
            "swap_request_id": SWAP_ID,
            "rating": 4,
            "comment": "great",
            "created_at": NOW,
        }
        execute_query = AsyncMock(return_value=1)
        monkeypatch.setattr(repo_module, "fetch_one", AsyncMock(return_value=row))
        monkeypatch.setattr(repo_module, "execute_query", execute_query)

        feedback = await repo.create_feedback(
            from_user_id=str(USER_ID),
            to_user_id=str(OTHER_ID),
            swap_request_id=str(SWAP_ID),
            rating=4,
            comment="great",
            recipient_rating=4.5,
        )

        assert feedback.swap_request_id == str(SWAP_ID)
        assert execute_query.call_args.args[1] == (4.5, str(OTHER_ID))
