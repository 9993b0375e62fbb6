"""
Admin-only skill swap routes.

The caller must be an active member with role 'admin'; the store enforces it
and these handlers only translate errors.
"""

from fastapi import APIRouter, Depends, Query, Response, status

from app.auth.verify import current_user_id
from app.config import settings
from app.features.skill_swap.domain import (
    AdminMessage,
    CancelSwap,
    NewAdminMessage,
    PlatformAnalytics,
    SetUserActive,
    SwapRequest,
    SwapStatus,
    UpdateAdminMessage,
    User,
)
from app.features.skill_swap.services.errors import SkillSwapError
from app.features.skill_swap.services.store import MarketplaceStore
from app.infrastructure.observability.logging import get_logger

from .dependencies import get_store
from .errors import to_http_exception
from .schemas import ActivityReportResponse, AdminMessagesResponse, SwapListResponse

router = APIRouter(prefix="/admin", tags=["skill-swap-admin"])
logger = get_logger(__name__)


def require_admin(
    user_id: str = Depends(current_user_id),
    store: MarketplaceStore = Depends(get_store),
) -> str:
    """Dependency resolving to the admin's user id, or 403/404."""
    try:
        store.require_admin(user_id)
    except SkillSwapError as e:
        raise to_http_exception(e) from e
    return user_id


@router.get("/analytics", response_model=PlatformAnalytics)
async def analytics(
    admin_id: str = Depends(require_admin),
    store: MarketplaceStore = Depends(get_store),
):
    return store.analytics()


@router.get("/activity", response_model=ActivityReportResponse)
async def activity(
    days: int = Query(settings.ACTIVITY_REPORT_DAYS, ge=1, le=90),
    admin_id: str = Depends(require_admin),
    store: MarketplaceStore = Depends(get_store),
):
    return ActivityReportResponse(days=days, report=store.activity_report(days))


@router.get("/swaps", response_model=SwapListResponse)
async def list_swaps(
    swap_status: SwapStatus | None = Query(None, alias="status"),
    admin_id: str = Depends(require_admin),
    store: MarketplaceStore = Depends(get_store),
):
    swaps = store.list_swaps(swap_status)
    return SwapListResponse(swaps=swaps, count=len(swaps))


@router.post("/swaps/{swap_id}/cancel", response_model=SwapRequest)
async def force_cancel_swap(
    swap_id: str,
    admin_id: str = Depends(require_admin),
    store: MarketplaceStore = Depends(get_store),
):
    """
    Cancel a pending or accepted swap.

    Raises:
        404: Swap not found
        409: Swap already finished
        503: Storage unavailable
    """
    try:
        return await store.apply_swap_command(admin_id, CancelSwap(swap_id=swap_id))
    except SkillSwapError as e:
        raise to_http_exception(e) from e


@router.post("/users/{user_id}/ban", response_model=User)
async def ban_user(
    user_id: str,
    admin_id: str = Depends(require_admin),
    store: MarketplaceStore = Depends(get_store),
):
    try:
        return await store.set_user_active(admin_id, SetUserActive(user_id=user_id, is_active=False))
    except SkillSwapError as e:
        raise to_http_exception(e) from e


@router.post("/users/{user_id}/unban", response_model=User)
async def unban_user(
    user_id: str,
    admin_id: str = Depends(require_admin),
    store: MarketplaceStore = Depends(get_store),
):
    try:
        return await store.set_user_active(admin_id, SetUserActive(user_id=user_id, is_active=True))
    except SkillSwapError as e:
        raise to_http_exception(e) from e


# ------------------------------------------------------------- announcements


@router.get("/messages", response_model=AdminMessagesResponse)
async def list_messages(
    admin_id: str = Depends(require_admin),
    store: MarketplaceStore = Depends(get_store),
):
    """All announcements, inactive ones included."""
    return AdminMessagesResponse(messages=store.admin_messages)


@router.post("/messages", response_model=AdminMessage, status_code=status.HTTP_201_CREATED)
async def create_message(
    body: NewAdminMessage,
    admin_id: str = Depends(require_admin),
    store: MarketplaceStore = Depends(get_store),
):
    try:
        return await store.create_admin_message(admin_id, body)
    except SkillSwapError as e:
        raise to_http_exception(e) from e


@router.patch("/messages/{message_id}", response_model=AdminMessage)
async def update_message(
    message_id: str,
    body: UpdateAdminMessage,
    admin_id: str = Depends(require_admin),
    store: MarketplaceStore = Depends(get_store),
):
    try:
        return await store.update_admin_message(admin_id, message_id, body)
    except SkillSwapError as e:
        raise to_http_exception(e) from e


@router.delete("/messages/{message_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_message(
    message_id: str,
    admin_id: str = Depends(require_admin),
    store: MarketplaceStore = Depends(get_store),
):
    try:
        await store.delete_admin_message(admin_id, message_id)
    except SkillSwapError as e:
        raise to_http_exception(e) from e
    return Response(status_code=status.HTTP_204_NO_CONTENT)
