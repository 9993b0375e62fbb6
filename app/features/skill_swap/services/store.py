"""
In-memory marketplace store.

Holds the four collections for the lifetime of the process. It is seeded from
the repository by `load()`, and every mutation is persisted first and applied
locally only after the repository confirms it, so a failed write leaves
memory untouched. Mutations are serialised by a single asyncio.Lock so
persist-then-apply sequences never interleave.
"""

import asyncio
from collections.abc import Awaitable
from datetime import UTC, datetime
from typing import TypeVar

from app.db.helpers import DatabaseError
from app.features.skill_swap.domain import (
    DEFAULT_RATING,
    SWAP_COMMAND_TARGETS,
    ActivityDay,
    AdminMessage,
    Feedback,
    NewAdminMessage,
    NewFeedback,
    NewSwapRequest,
    NewUser,
    PlatformAnalytics,
    SearchFilters,
    SetUserActive,
    SwapCommand,
    SwapRequest,
    SwapStatus,
    UpdateAdminMessage,
    UpdateProfile,
    User,
    UserSwaps,
)
from app.features.skill_swap.repository import MarketplaceRepository
from app.infrastructure.observability.logging import get_logger

from .analytics import TOP_SKILLS_LIMIT, compute_activity_report, compute_analytics
from .errors import (
    Forbidden,
    InvalidProfile,
    InvalidSwapRequest,
    NotFound,
    PersistenceFailure,
)
from .lifecycle import apply_swap_counters, transition
from .ratings import mean_rating, validate_feedback
from .search import search_users

logger = get_logger(__name__)

T = TypeVar("T")


def _match_skill(skills: list[str], wanted: str) -> str | None:
    """Return the listed spelling of `wanted`, compared case-insensitively."""
    needle = wanted.strip().lower()
    for skill in skills:
        if skill.lower() == needle:
            return skill
    return None


class MarketplaceStore:
    """Authoritative session state for users, swaps, feedback and announcements."""

    def __init__(
        self,
        repository: MarketplaceRepository,
        *,
        default_rating: float = DEFAULT_RATING,
        top_skills_limit: int = TOP_SKILLS_LIMIT,
    ):
        self._repository = repository
        self._default_rating = default_rating
        self._top_skills_limit = top_skills_limit
        self._lock = asyncio.Lock()

        self.users: list[User] = []
        self.swap_requests: list[SwapRequest] = []
        self.feedback: list[Feedback] = []
        self.admin_messages: list[AdminMessage] = []
        self.loaded = False

    async def load(self) -> None:
        """Seed every collection from the repository."""
        try:
            users, swap_requests, feedback, admin_messages = await asyncio.gather(
                self._repository.get_users(),
                self._repository.get_swap_requests(),
                self._repository.get_feedback(),
                self._repository.get_admin_messages(),
            )
        except DatabaseError as e:
            logger.error("Failed to load marketplace data", error=str(e))
            raise PersistenceFailure(
                f"Could not load marketplace data: {e}", operation="load"
            ) from e

        async with self._lock:
            self.users = list(users)
            self.swap_requests = list(swap_requests)
            self.feedback = list(feedback)
            self.admin_messages = list(admin_messages)
            self.loaded = True

        logger.info(
            "Marketplace store loaded",
            users=len(self.users),
            swap_requests=len(self.swap_requests),
            feedback=len(self.feedback),
            admin_messages=len(self.admin_messages),
        )

    # ---------------------------------------------------------------- lookups

    def find_user(self, user_id: str) -> User | None:
        return next((user for user in self.users if user.id == user_id), None)

    def get_user(self, user_id: str) -> User:
        user = self.find_user(user_id)
        if user is None:
            raise NotFound(f"User {user_id} not found", user_id=user_id)
        return user

    def get_swap_request(self, swap_id: str) -> SwapRequest:
        for request in self.swap_requests:
            if request.id == swap_id:
                return request
        raise NotFound(f"Swap request {swap_id} not found", swap_id=swap_id)

    def get_admin_message(self, message_id: str) -> AdminMessage:
        for message in self.admin_messages:
            if message.id == message_id:
                return message
        raise NotFound(f"Admin message {message_id} not found", message_id=message_id)

    def require_admin(self, actor_id: str) -> User:
        actor = self.get_user(actor_id)
        if not actor.is_admin or not actor.is_active:
            raise Forbidden("Admin role required", actor_id=actor_id)
        return actor

    # ---------------------------------------------------------------- helpers

    async def _persist(self, operation: str, call: Awaitable[T], **context) -> T:
        """Await a repository call, turning failures and empty results into PersistenceFailure."""
        try:
            result = await call
        except DatabaseError as e:
            logger.error("Persistence call failed", operation=operation, error=str(e), **context)
            raise PersistenceFailure(
                f"Could not {operation.replace('_', ' ')}: {e}", operation=operation, **context
            ) from e

        if result is None or result is False:
            logger.error("Persistence call returned nothing", operation=operation, **context)
            raise PersistenceFailure(
                f"Could not {operation.replace('_', ' ')}: no row affected",
                operation=operation,
                **context,
            )
        return result

    def _replace_user(self, updated: User) -> None:
        self.users = [updated if user.id == updated.id else user for user in self.users]

    def _replace_swap(self, updated: SwapRequest) -> None:
        self.swap_requests = [
            updated if request.id == updated.id else request for request in self.swap_requests
        ]

    def _replace_message(self, updated: AdminMessage) -> None:
        self.admin_messages = [
            updated if message.id == updated.id else message for message in self.admin_messages
        ]

    # ------------------------------------------------------------------ users

    async def register_user(self, user_id: str, draft: NewUser) -> User:
        """Create the marketplace profile for an authenticated account."""
        async with self._lock:
            if self.find_user(user_id):
                raise InvalidProfile("User already registered", user_id=user_id)
            if any(user.email.lower() == draft.email for user in self.users):
                raise InvalidProfile("Email already registered", user_id=user_id)

            user = User(
                id=user_id,
                **draft.model_dump(),
                role="user",
                rating=self._default_rating,
                total_swaps=0,
                is_active=True,
                join_date=datetime.now(UTC).date(),
            )
            created = await self._persist(
                "create_user", self._repository.create_user(user), user_id=user_id
            )
            self.users = [*self.users, created]

        logger.info("User registered", user_id=user_id)
        return created

    async def update_profile(self, user_id: str, command: UpdateProfile) -> User:
        """Apply a validated profile edit. Derived fields are never touched here."""
        async with self._lock:
            self.get_user(user_id)
            changes = command.changes()
            updated = await self._persist(
                "update_user", self._repository.update_user(user_id, changes), user_id=user_id
            )
            self._replace_user(updated)

        logger.info("Profile updated", user_id=user_id, fields=sorted(changes))
        return updated

    async def set_user_active(self, actor_id: str, command: SetUserActive) -> User:
        """Ban or unban a regular user (admin only)."""
        async with self._lock:
            self.require_admin(actor_id)
            target = self.get_user(command.user_id)
            if target.is_admin:
                raise Forbidden("Admin accounts cannot be banned", user_id=target.id)
            if target.is_active == command.is_active:
                return target

            updated = await self._persist(
                "update_user",
                self._repository.update_user(target.id, {"is_active": command.is_active}),
                user_id=target.id,
            )
            self._replace_user(updated)

        logger.info(
            "User active flag changed",
            admin_id=actor_id,
            user_id=target.id,
            is_active=command.is_active,
        )
        return updated

    def search(
        self,
        query: str = "",
        filters: SearchFilters | None = None,
        exclude_user_id: str | None = None,
    ) -> list[User]:
        return search_users(self.users, query, filters, exclude_user_id)

    # ---------------------------------------------------------- swap requests

    async def create_swap_request(self, actor_id: str, draft: NewSwapRequest) -> SwapRequest:
        """Open a pending swap request from `actor_id` to `draft.to_user_id`."""
        async with self._lock:
            requester = self.get_user(actor_id)
            recipient = self.get_user(draft.to_user_id)

            if requester.id == recipient.id:
                raise InvalidSwapRequest("Cannot request a swap with yourself", user_id=actor_id)
            if requester.is_admin or recipient.is_admin:
                raise InvalidSwapRequest("Admin accounts do not take part in swaps")
            if not (requester.is_active and recipient.is_active):
                raise InvalidSwapRequest("Both users must be active to swap")

            skill_offered = _match_skill(requester.skills_offered, draft.skill_offered)
            if skill_offered is None:
                raise InvalidSwapRequest(
                    f"{draft.skill_offered!r} is not one of your offered skills",
                    skill=draft.skill_offered,
                )
            skill_wanted = _match_skill(recipient.skills_offered, draft.skill_wanted)
            if skill_wanted is None:
                raise InvalidSwapRequest(
                    f"{draft.skill_wanted!r} is not offered by the recipient",
                    skill=draft.skill_wanted,
                )

            created = await self._persist(
                "create_swap_request",
                self._repository.create_swap_request(
                    requester.id, recipient.id, skill_offered, skill_wanted, draft.message
                ),
                from_user_id=requester.id,
                to_user_id=recipient.id,
            )
            # Newest first, matching the load order
            self.swap_requests = [created, *self.swap_requests]

        logger.info(
            "Swap request created",
            swap_id=created.id,
            from_user_id=created.from_user_id,
            to_user_id=created.to_user_id,
        )
        return created

    async def apply_swap_command(self, actor_id: str, command: SwapCommand) -> SwapRequest:
        """
        Run accept/reject/cancel/complete through the lifecycle engine.

        Completion persists the status change and both participants' counter
        bumps in one transaction; every other edge is a guarded status update.

        Raises:
            NotFound: actor or swap unknown
            InvalidTransition: edge not allowed for this actor
            PersistenceFailure: write failed (nothing applied locally)
        """
        target: SwapStatus = SWAP_COMMAND_TARGETS[command.kind]

        async with self._lock:
            actor = self.get_user(actor_id)
            request = self.get_swap_request(command.swap_id)

            outcome = transition(request, target, actor)

            if outcome.completes_swap:
                persisted = await self._persist(
                    "complete_swap_request",
                    self._repository.complete_swap_request(
                        request.id, updated_at=outcome.request.updated_at
                    ),
                    swap_id=request.id,
                )
            else:
                persisted = await self._persist(
                    "update_swap_request",
                    self._repository.update_swap_request(
                        request.id,
                        status=target,
                        updated_at=outcome.request.updated_at,
                        expected_status=request.status,
                    ),
                    swap_id=request.id,
                )

            self._replace_swap(persisted)
            if outcome.completes_swap:
                self.users = apply_swap_counters(self.users, outcome.counted_user_ids)

        logger.info(
            "Swap request transitioned",
            swap_id=persisted.id,
            actor_id=actor_id,
            from_status=outcome.previous_status,
            to_status=persisted.status,
        )
        return persisted

    def swaps_for_user(self, user_id: str) -> UserSwaps:
        """Incoming pending, outgoing open, and completed swaps for one user."""
        self.get_user(user_id)
        return UserSwaps(
            incoming=[
                r for r in self.swap_requests if r.to_user_id == user_id and r.status == "pending"
            ],
            outgoing=[
                r
                for r in self.swap_requests
                if r.from_user_id == user_id and r.status in ("pending", "accepted")
            ],
            completed=[
                r for r in self.swap_requests if r.involves(user_id) and r.status == "completed"
            ],
        )

    def list_swaps(self, status: SwapStatus | None = None) -> list[SwapRequest]:
        if status is None:
            return list(self.swap_requests)
        return [request for request in self.swap_requests if request.status == status]

    # --------------------------------------------------------------- feedback

    async def record_feedback(self, actor_id: str, draft: NewFeedback) -> Feedback:
        """
        Store a participant's review of a completed swap and refresh the
        reviewed user's rating, including the new entry.
        """
        async with self._lock:
            reviewer = self.get_user(actor_id)
            swap = self.get_swap_request(draft.swap_request_id)

            reviewee_id = validate_feedback(draft, reviewer.id, swap, self.feedback)

            reviewee = self.get_user(reviewee_id)
            new_rating = mean_rating(
                [entry.rating for entry in self.feedback if entry.to_user_id == reviewee_id]
                + [draft.rating],
                self._default_rating,
            )

            created = await self._persist(
                "create_feedback",
                self._repository.create_feedback(
                    from_user_id=reviewer.id,
                    to_user_id=reviewee_id,
                    swap_request_id=swap.id,
                    rating=draft.rating,
                    comment=draft.comment,
                    recipient_rating=new_rating,
                ),
                swap_id=swap.id,
            )
            self.feedback = [created, *self.feedback]
            self._replace_user(reviewee.model_copy(update={"rating": new_rating}))

        logger.info(
            "Feedback recorded",
            swap_id=swap.id,
            reviewer_id=reviewer.id,
            reviewee_id=reviewee_id,
            rating=draft.rating,
            new_rating=new_rating,
        )
        return created

    def feedback_for_user(self, user_id: str) -> list[Feedback]:
        self.get_user(user_id)
        return [entry for entry in self.feedback if entry.to_user_id == user_id]

    # --------------------------------------------------------- admin messages

    def active_admin_messages(self) -> list[AdminMessage]:
        return [message for message in self.admin_messages if message.is_active]

    async def create_admin_message(self, actor_id: str, draft: NewAdminMessage) -> AdminMessage:
        async with self._lock:
            self.require_admin(actor_id)
            created = await self._persist(
                "create_admin_message",
                self._repository.create_admin_message(
                    draft.title, draft.content, draft.type, draft.is_active
                ),
            )
            self.admin_messages = [created, *self.admin_messages]

        logger.info("Admin message created", admin_id=actor_id, message_id=created.id, type=created.type)
        return created

    async def update_admin_message(
        self, actor_id: str, message_id: str, command: UpdateAdminMessage
    ) -> AdminMessage:
        async with self._lock:
            self.require_admin(actor_id)
            current = self.get_admin_message(message_id)
            changes = command.changes()
            if not changes:
                return current

            updated = await self._persist(
                "update_admin_message",
                self._repository.update_admin_message(message_id, changes),
                message_id=message_id,
            )
            self._replace_message(updated)

        logger.info("Admin message updated", admin_id=actor_id, message_id=message_id)
        return updated

    async def delete_admin_message(self, actor_id: str, message_id: str) -> None:
        async with self._lock:
            self.require_admin(actor_id)
            self.get_admin_message(message_id)
            await self._persist(
                "delete_admin_message",
                self._repository.delete_admin_message(message_id),
                message_id=message_id,
            )
            self.admin_messages = [m for m in self.admin_messages if m.id != message_id]

        logger.info("Admin message deleted", admin_id=actor_id, message_id=message_id)

    # -------------------------------------------------------------- analytics

    def analytics(self) -> PlatformAnalytics:
        return compute_analytics(
            self.users, self.swap_requests, self.feedback, self._top_skills_limit
        )

    def activity_report(self, days: int = 7) -> list[ActivityDay]:
        return compute_activity_report(self.users, self.swap_requests, days)
