"""
Persistence layer for the skill swap marketplace.

`MarketplaceRepository` is the capability the store depends on;
`PostgresMarketplaceRepository` implements it against the Supabase Postgres
tables (users, swap_requests, feedback, admin_messages). Every method raises
DatabaseError on failure and returns None when a write matched no row.
"""

from datetime import datetime
from typing import Any, Protocol
from uuid import UUID

import psycopg

from app.db.helpers import DatabaseError, execute_query, fetch_all, fetch_one
from app.db.pool import get_db_transaction
from app.features.skill_swap.domain import AdminMessage, Feedback, SwapRequest, SwapStatus, User
from app.infrastructure.observability.logging import get_logger

logger = get_logger(__name__)


class MarketplaceRepositoryError(DatabaseError):
    """More specific exception for repository failures."""


class MarketplaceRepository(Protocol):
    async def get_users(self) -> list[User]: ...

    async def get_user_by_id(self, user_id: str) -> User | None: ...

    async def create_user(self, user: User) -> User | None: ...

    async def update_user(self, user_id: str, changes: dict[str, Any]) -> User | None: ...

    async def get_swap_requests(self) -> list[SwapRequest]: ...

    async def create_swap_request(
        self,
        from_user_id: str,
        to_user_id: str,
        skill_offered: str,
        skill_wanted: str,
        message: str,
    ) -> SwapRequest | None: ...

    async def update_swap_request(
        self,
        swap_id: str,
        *,
        status: SwapStatus,
        updated_at: datetime,
        expected_status: SwapStatus,
    ) -> SwapRequest | None: ...

    async def complete_swap_request(
        self, swap_id: str, *, updated_at: datetime
    ) -> SwapRequest | None: ...

    async def get_feedback(self) -> list[Feedback]: ...

    async def create_feedback(
        self,
        *,
        from_user_id: str,
        to_user_id: str,
        swap_request_id: str,
        rating: int,
        comment: str,
        recipient_rating: float,
    ) -> Feedback | None: ...

    async def get_admin_messages(self) -> list[AdminMessage]: ...

    async def create_admin_message(
        self, title: str, content: str, message_type: str, is_active: bool
    ) -> AdminMessage | None: ...

    async def update_admin_message(
        self, message_id: str, changes: dict[str, Any]
    ) -> AdminMessage | None: ...

    async def delete_admin_message(self, message_id: str) -> bool: ...


def _stringify_ids(row: dict[str, Any]) -> dict[str, Any]:
    # uuid columns come back as UUID objects; the domain works with strings
    return {key: str(value) if isinstance(value, UUID) else value for key, value in row.items()}


class PostgresMarketplaceRepository:
    """SQL implementation of MarketplaceRepository over the shared connection pool."""

    USER_COLUMNS = """
        id, name, email, location, profile_photo, skills_offered, skills_wanted,
        availability, is_public, role, rating, total_swaps, is_active, join_date,
        created_at, updated_at
    """
    SWAP_COLUMNS = """
        id, from_user_id, to_user_id, skill_offered, skill_wanted, message,
        status, created_at, updated_at
    """
    FEEDBACK_COLUMNS = """
        id, from_user_id, to_user_id, swap_request_id, rating, comment, created_at
    """
    MESSAGE_COLUMNS = "id, title, content, type, is_active, created_at"

    # Columns a partial update may touch; anything else is a programming error
    USER_UPDATABLE = frozenset(
        {
            "name",
            "location",
            "profile_photo",
            "skills_offered",
            "skills_wanted",
            "availability",
            "is_public",
            "is_active",
        }
    )
    MESSAGE_UPDATABLE = frozenset({"title", "content", "type", "is_active"})

    @staticmethod
    def _row_to_user(row: dict | None) -> User | None:
        return User.model_validate(_stringify_ids(row)) if row else None

    @staticmethod
    def _row_to_swap(row: dict | None) -> SwapRequest | None:
        return SwapRequest.model_validate(_stringify_ids(row)) if row else None

    @staticmethod
    def _row_to_feedback(row: dict | None) -> Feedback | None:
        return Feedback.model_validate(_stringify_ids(row)) if row else None

    @staticmethod
    def _row_to_message(row: dict | None) -> AdminMessage | None:
        return AdminMessage.model_validate(_stringify_ids(row)) if row else None

    @staticmethod
    def _set_clause(changes: dict[str, Any], allowed: frozenset[str]) -> tuple[str, tuple]:
        unknown = set(changes) - allowed
        if unknown:
            raise MarketplaceRepositoryError(
                f"Columns not updatable: {sorted(unknown)}", operation="update", recoverable=False
            )
        columns = list(changes)
        clause = ", ".join(f"{column} = %s" for column in columns)
        return clause, tuple(changes[column] for column in columns)

    # ------------------------------------------------------------------ users

    async def get_users(self) -> list[User]:
        rows = await fetch_all(
            f"SELECT {self.USER_COLUMNS} FROM users ORDER BY created_at DESC NULLS LAST"
        )
        return [self._row_to_user(row) for row in rows]

    async def get_user_by_id(self, user_id: str) -> User | None:
        row = await fetch_one(f"SELECT {self.USER_COLUMNS} FROM users WHERE id = %s", (user_id,))
        return self._row_to_user(row)

    async def create_user(self, user: User) -> User | None:
        query = f"""
            INSERT INTO users (
                id, name, email, location, profile_photo, skills_offered, skills_wanted,
                availability, is_public, role, rating, total_swaps, is_active, join_date
            )
            VALUES (%s, %s, %s, %s, %s, %s, %s, %s, %s, %s, %s, %s, %s, %s)
            RETURNING {self.USER_COLUMNS}
        """
        params = (
            user.id,
            user.name,
            user.email,
            user.location,
            user.profile_photo,
            user.skills_offered,
            user.skills_wanted,
            list(user.availability),
            user.is_public,
            user.role,
            user.rating,
            user.total_swaps,
            user.is_active,
            user.join_date,
        )
        row = await fetch_one(query, params)
        logger.info("User row created", user_id=user.id)
        return self._row_to_user(row)

    async def update_user(self, user_id: str, changes: dict[str, Any]) -> User | None:
        clause, params = self._set_clause(changes, self.USER_UPDATABLE)
        query = f"""
            UPDATE users SET {clause}, updated_at = NOW()
            WHERE id = %s
            RETURNING {self.USER_COLUMNS}
        """
        row = await fetch_one(query, (*params, user_id))
        return self._row_to_user(row)

    # ---------------------------------------------------------- swap requests

    async def get_swap_requests(self) -> list[SwapRequest]:
        rows = await fetch_all(
            f"SELECT {self.SWAP_COLUMNS} FROM swap_requests ORDER BY created_at DESC"
        )
        return [self._row_to_swap(row) for row in rows]

    async def create_swap_request(
        self,
        from_user_id: str,
        to_user_id: str,
        skill_offered: str,
        skill_wanted: str,
        message: str,
    ) -> SwapRequest | None:
        query = f"""
            INSERT INTO swap_requests (
                from_user_id, to_user_id, skill_offered, skill_wanted, message, status
            )
            VALUES (%s, %s, %s, %s, %s, 'pending')
            RETURNING {self.SWAP_COLUMNS}
        """
        row = await fetch_one(query, (from_user_id, to_user_id, skill_offered, skill_wanted, message))
        return self._row_to_swap(row)

    async def update_swap_request(
        self,
        swap_id: str,
        *,
        status: SwapStatus,
        updated_at: datetime,
        expected_status: SwapStatus,
    ) -> SwapRequest | None:
        """
        Move a swap to `status` only if it is still in `expected_status`.

        Returns None when another session changed the row first.
        """
        query = f"""
            UPDATE swap_requests SET status = %s, updated_at = %s
            WHERE id = %s AND status = %s
            RETURNING {self.SWAP_COLUMNS}
        """
        row = await fetch_one(query, (status, updated_at, swap_id, expected_status))
        return self._row_to_swap(row)

    async def complete_swap_request(
        self, swap_id: str, *, updated_at: datetime
    ) -> SwapRequest | None:
        """
        Mark an accepted swap completed and bump both participants' total_swaps
        in one transaction.
        """
        try:
            async with await get_db_transaction() as conn:
                swap_row = await fetch_one(
                    f"""
                    UPDATE swap_requests SET status = 'completed', updated_at = %s
                    WHERE id = %s AND status = 'accepted'
                    RETURNING {self.SWAP_COLUMNS}
                    """,
                    (updated_at, swap_id),
                    connection=conn,
                )
                if not swap_row:
                    logger.warning("Swap completion matched no accepted row", swap_id=swap_id)
                    return None

                swap = self._row_to_swap(swap_row)
                counted = await execute_query(
                    """
                    UPDATE users SET total_swaps = total_swaps + 1, updated_at = NOW()
                    WHERE id IN (%s, %s)
                    """,
                    (swap.from_user_id, swap.to_user_id),
                    connection=conn,
                )
                if counted != 2:
                    raise MarketplaceRepositoryError(
                        "Swap participants missing while completing swap",
                        operation="complete_swap_request",
                    )
        except psycopg.Error as e:
            logger.error("Swap completion transaction failed", swap_id=swap_id, error=str(e))
            raise MarketplaceRepositoryError(
                f"Transaction failed: {e}", operation="complete_swap_request"
            ) from e

        logger.info("Swap completed", swap_id=swap_id)
        return swap

    # --------------------------------------------------------------- feedback

    async def get_feedback(self) -> list[Feedback]:
        rows = await fetch_all(f"SELECT {self.FEEDBACK_COLUMNS} FROM feedback ORDER BY created_at DESC")
        return [self._row_to_feedback(row) for row in rows]

    async def create_feedback(
        self,
        *,
        from_user_id: str,
        to_user_id: str,
        swap_request_id: str,
        rating: int,
        comment: str,
        recipient_rating: float,
    ) -> Feedback | None:
        """Insert feedback and store the recipient's recomputed rating in one transaction."""
        try:
            async with await get_db_transaction() as conn:
                row = await fetch_one(
                    f"""
                    INSERT INTO feedback (from_user_id, to_user_id, swap_request_id, rating, comment)
                    VALUES (%s, %s, %s, %s, %s)
                    RETURNING {self.FEEDBACK_COLUMNS}
                    """,
                    (from_user_id, to_user_id, swap_request_id, rating, comment),
                    connection=conn,
                )
                updated = await execute_query(
                    "UPDATE users SET rating = %s, updated_at = NOW() WHERE id = %s",
                    (recipient_rating, to_user_id),
                    connection=conn,
                )
                if updated != 1:
                    raise MarketplaceRepositoryError(
                        "Feedback recipient missing", operation="create_feedback"
                    )
        except psycopg.Error as e:
            logger.error("Feedback transaction failed", swap_id=swap_request_id, error=str(e))
            raise MarketplaceRepositoryError(
                f"Transaction failed: {e}", operation="create_feedback"
            ) from e

        return self._row_to_feedback(row)

    # --------------------------------------------------------- admin messages

    async def get_admin_messages(self) -> list[AdminMessage]:
        rows = await fetch_all(
            f"SELECT {self.MESSAGE_COLUMNS} FROM admin_messages ORDER BY created_at DESC"
        )
        return [self._row_to_message(row) for row in rows]

    async def create_admin_message(
        self, title: str, content: str, message_type: str, is_active: bool
    ) -> AdminMessage | None:
        row = await fetch_one(
            f"""
            INSERT INTO admin_messages (title, content, type, is_active)
            VALUES (%s, %s, %s, %s)
            RETURNING {self.MESSAGE_COLUMNS}
            """,
            (title, content, message_type, is_active),
        )
        return self._row_to_message(row)

    async def update_admin_message(
        self, message_id: str, changes: dict[str, Any]
    ) -> AdminMessage | None:
        clause, params = self._set_clause(changes, self.MESSAGE_UPDATABLE)
        row = await fetch_one(
            f"UPDATE admin_messages SET {clause} WHERE id = %s RETURNING {self.MESSAGE_COLUMNS}",
            (*params, message_id),
        )
        return self._row_to_message(row)

    async def delete_admin_message(self, message_id: str) -> bool:
        deleted = await execute_query("DELETE FROM admin_messages WHERE id = %s", (message_id,))
        return deleted > 0
