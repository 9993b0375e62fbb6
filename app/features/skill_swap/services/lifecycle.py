"""
Swap request state machine.

Pure functions: they validate an edge against the transition table and return
the updated request plus the users whose swap counters the change bumps. The
store decides when (and whether) those results become visible.
"""

from dataclasses import dataclass
from datetime import UTC, datetime

from app.features.skill_swap.domain import SwapRequest, SwapStatus, User

from .errors import InvalidTransition

# (from, to) -> participant roles allowed to take the edge
TRANSITIONS: dict[tuple[str, str], frozenset[str]] = {
    ("pending", "accepted"): frozenset({"recipient"}),
    ("pending", "rejected"): frozenset({"recipient"}),
    ("pending", "cancelled"): frozenset({"requester", "admin"}),
    ("accepted", "completed"): frozenset({"requester", "recipient"}),
    ("accepted", "cancelled"): frozenset({"admin"}),
}


@dataclass(slots=True, frozen=True)
class TransitionOutcome:
    """Result of a validated transition, not yet persisted."""

    request: SwapRequest
    previous_status: SwapStatus
    counted_user_ids: tuple[str, ...] = ()

    @property
    def completes_swap(self) -> bool:
        return bool(self.counted_user_ids)


def actor_roles(request: SwapRequest, actor: User) -> frozenset[str]:
    """Roles the actor holds with respect to this request."""
    roles = set()
    if actor.id == request.from_user_id:
        roles.add("requester")
    if actor.id == request.to_user_id:
        roles.add("recipient")
    if actor.is_admin:
        roles.add("admin")
    return frozenset(roles)


def check_transition(request: SwapRequest, target: SwapStatus, actor: User) -> None:
    """Raise InvalidTransition unless `actor` may move `request` to `target`."""
    allowed = TRANSITIONS.get((request.status, target))
    if allowed is None:
        raise InvalidTransition(
            f"Cannot move swap request from {request.status} to {target}",
            swap_id=request.id,
            status=request.status,
            target=target,
        )

    if not actor_roles(request, actor) & allowed:
        raise InvalidTransition(
            f"User {actor.id} is not allowed to move swap request to {target}",
            swap_id=request.id,
            status=request.status,
            target=target,
            actor_id=actor.id,
        )


def transition(
    request: SwapRequest,
    target: SwapStatus,
    actor: User,
    now: datetime | None = None,
) -> TransitionOutcome:
    """
    Validate and compute a status change.

    Args:
        request: Current swap request (left untouched)
        target: Requested status
        actor: User attempting the change
        now: Clock override for tests

    Returns:
        TransitionOutcome with the updated copy; counted_user_ids names both
        participants when the swap completes.

    Raises:
        InvalidTransition: edge not in TRANSITIONS or actor not authorized
    """
    check_transition(request, target, actor)

    now = now or datetime.now(UTC)
    updated = request.model_copy(
        update={"status": target, "updated_at": max(now, _as_utc(request.updated_at))}
    )

    counted = (request.from_user_id, request.to_user_id) if target == "completed" else ()
    return TransitionOutcome(request=updated, previous_status=request.status, counted_user_ids=counted)


def _as_utc(value: datetime) -> datetime:
    # Rows written outside the app may come back without tzinfo; treat them as UTC
    if value.tzinfo is None:
        return value.replace(tzinfo=UTC)
    return value


def apply_swap_counters(users: list[User], counted_user_ids: tuple[str, ...]) -> list[User]:
    """Return users with total_swaps bumped once for each counted participant."""
    return [
        user.model_copy(update={"total_swaps": user.total_swaps + 1})
        if user.id in counted_user_ids
        else user
        for user in users
    ]
