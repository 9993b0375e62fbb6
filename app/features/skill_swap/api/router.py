"""
Member-facing skill swap routes.

Usage:
    1. POST /users - Register the authenticated account as a member
    2. GET/PATCH /users/me - Own profile
    3. GET /users/search - Browse public members
    4. GET /users/{user_id} - Public profile
    5. GET /users/{user_id}/feedback - Reviews received
    6. POST /swaps - Propose a swap
    7. GET /swaps/mine - Incoming, outgoing and completed swaps
    8. POST /swaps/{swap_id}/{accept|reject|cancel|complete} - Lifecycle actions
    9. POST /swaps/{swap_id}/feedback - Review the other participant
    10. GET /messages - Active platform announcements
"""

from typing import Literal

from fastapi import APIRouter, Depends, Query, status

from app.auth.verify import current_user_id
from app.features.skill_swap.domain import (
    AcceptSwap,
    Availability,
    CancelSwap,
    CompleteSwap,
    Feedback,
    NewFeedback,
    NewSwapRequest,
    NewUser,
    RejectSwap,
    SearchFilters,
    SwapRequest,
    UpdateProfile,
    User,
    UserSwaps,
)
from app.features.skill_swap.services.errors import NotFound, SkillSwapError
from app.features.skill_swap.services.store import MarketplaceStore
from app.infrastructure.observability.logging import get_logger

from .dependencies import get_store
from .errors import to_http_exception
from .schemas import (
    AdminMessagesResponse,
    FeedbackCreateRequest,
    PublicUserResponse,
    UserFeedbackResponse,
    UserSearchResponse,
)

router = APIRouter(tags=["skill-swap"])
logger = get_logger(__name__)

SWAP_ACTIONS = {
    "accept": AcceptSwap,
    "reject": RejectSwap,
    "cancel": CancelSwap,
    "complete": CompleteSwap,
}


# ---------------------------------------------------------------------- users


@router.post("/users", response_model=User, status_code=status.HTTP_201_CREATED)
async def register(
    body: NewUser,
    user_id: str = Depends(current_user_id),
    store: MarketplaceStore = Depends(get_store),
):
    """
    Create the marketplace profile for the authenticated account.

    Raises:
        422: Already registered or email taken
        503: Storage unavailable
    """
    try:
        return await store.register_user(user_id, body)
    except SkillSwapError as e:
        raise to_http_exception(e) from e


@router.get("/users/me", response_model=User)
async def get_me(
    user_id: str = Depends(current_user_id),
    store: MarketplaceStore = Depends(get_store),
):
    try:
        return store.get_user(user_id)
    except SkillSwapError as e:
        raise to_http_exception(e) from e


@router.patch("/users/me", response_model=User)
async def update_me(
    body: UpdateProfile,
    user_id: str = Depends(current_user_id),
    store: MarketplaceStore = Depends(get_store),
):
    """Edit own profile. Rating, swap count and role are not editable."""
    try:
        return await store.update_profile(user_id, body)
    except SkillSwapError as e:
        raise to_http_exception(e) from e


@router.get("/users/search", response_model=UserSearchResponse)
async def search_users(
    q: str = Query("", description="Matches name or offered skill"),
    location: str | None = None,
    min_rating: float | None = Query(None, ge=0.0, le=5.0),
    availability: Availability | None = None,
    user_id: str = Depends(current_user_id),
    store: MarketplaceStore = Depends(get_store),
):
    filters = SearchFilters(location=location, min_rating=min_rating, availability=availability)
    users = store.search(q, filters, exclude_user_id=user_id)

    logger.info("User search", user_id=user_id, query=q, results=len(users))
    return UserSearchResponse(
        users=[PublicUserResponse.from_user(user) for user in users], count=len(users)
    )


@router.get("/users/{target_id}", response_model=PublicUserResponse)
async def get_public_profile(
    target_id: str,
    user_id: str = Depends(current_user_id),
    store: MarketplaceStore = Depends(get_store),
):
    """
    Public profile of another member.

    Raises:
        404: Unknown user, or the profile is hidden from this caller
    """
    try:
        target = store.get_user(target_id)
    except SkillSwapError as e:
        raise to_http_exception(e) from e

    if target.id != user_id and not target.is_discoverable:
        raise to_http_exception(NotFound(f"User {target_id} not found", user_id=target_id))
    return PublicUserResponse.from_user(target)


@router.get("/users/{target_id}/feedback", response_model=UserFeedbackResponse)
async def get_user_feedback(
    target_id: str,
    user_id: str = Depends(current_user_id),
    store: MarketplaceStore = Depends(get_store),
):
    try:
        target = store.get_user(target_id)
        entries = store.feedback_for_user(target_id)
    except SkillSwapError as e:
        raise to_http_exception(e) from e

    if target.id != user_id and not target.is_discoverable:
        raise to_http_exception(NotFound(f"User {target_id} not found", user_id=target_id))
    return UserFeedbackResponse(user_id=target_id, rating=target.rating, feedback=entries)


# ---------------------------------------------------------------------- swaps


@router.post("/swaps", response_model=SwapRequest, status_code=status.HTTP_201_CREATED)
async def create_swap(
    body: NewSwapRequest,
    user_id: str = Depends(current_user_id),
    store: MarketplaceStore = Depends(get_store),
):
    """
    Propose a swap to another member.

    Raises:
        404: Recipient not found
        422: Self-swap, inactive participant, or skill not listed
        503: Storage unavailable
    """
    try:
        return await store.create_swap_request(user_id, body)
    except SkillSwapError as e:
        raise to_http_exception(e) from e


@router.get("/swaps/mine", response_model=UserSwaps)
async def my_swaps(
    user_id: str = Depends(current_user_id),
    store: MarketplaceStore = Depends(get_store),
):
    try:
        return store.swaps_for_user(user_id)
    except SkillSwapError as e:
        raise to_http_exception(e) from e


# Registered before the action route so "feedback" is not taken as an action
@router.post(
    "/swaps/{swap_id}/feedback", response_model=Feedback, status_code=status.HTTP_201_CREATED
)
async def leave_feedback(
    swap_id: str,
    body: FeedbackCreateRequest,
    user_id: str = Depends(current_user_id),
    store: MarketplaceStore = Depends(get_store),
):
    """
    Review the other participant of a completed swap.

    Raises:
        404: Swap not found
        422: Swap not completed, not a participant, bad rating, or already reviewed
        503: Storage unavailable
    """
    draft = NewFeedback(swap_request_id=swap_id, rating=body.rating, comment=body.comment)
    try:
        return await store.record_feedback(user_id, draft)
    except SkillSwapError as e:
        raise to_http_exception(e) from e


@router.post("/swaps/{swap_id}/{action}", response_model=SwapRequest)
async def act_on_swap(
    swap_id: str,
    action: Literal["accept", "reject", "cancel", "complete"],
    user_id: str = Depends(current_user_id),
    store: MarketplaceStore = Depends(get_store),
):
    """
    Accept, reject, cancel or complete a swap request.

    Raises:
        404: Swap not found
        409: Transition not allowed from the current status or for this user
        503: Storage unavailable
    """
    command = SWAP_ACTIONS[action](swap_id=swap_id)
    try:
        return await store.apply_swap_command(user_id, command)
    except SkillSwapError as e:
        raise to_http_exception(e) from e


# ------------------------------------------------------------- announcements


@router.get("/messages", response_model=AdminMessagesResponse)
async def active_messages(
    user_id: str = Depends(current_user_id),
    store: MarketplaceStore = Depends(get_store),
):
    return AdminMessagesResponse(messages=store.active_admin_messages())
