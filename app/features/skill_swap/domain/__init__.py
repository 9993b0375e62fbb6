"""
Domain subpackage for the skill swap feature.
"""

from .commands import (
    SWAP_COMMAND_TARGETS,
    AcceptSwap,
    CancelSwap,
    CompleteSwap,
    NewAdminMessage,
    NewFeedback,
    NewSwapRequest,
    NewUser,
    RejectSwap,
    SetUserActive,
    SwapCommand,
    UpdateAdminMessage,
    UpdateProfile,
)
from .models import (
    DEFAULT_RATING,
    TERMINAL_STATUSES,
    ActivityDay,
    AdminMessage,
    Availability,
    Feedback,
    PlatformAnalytics,
    SearchFilters,
    SkillCount,
    SwapRequest,
    SwapStatus,
    User,
    UserSwaps,
)

__all__ = [
    "DEFAULT_RATING",
    "SWAP_COMMAND_TARGETS",
    "TERMINAL_STATUSES",
    "AcceptSwap",
    "ActivityDay",
    "AdminMessage",
    "Availability",
    "CancelSwap",
    "CompleteSwap",
    "Feedback",
    "NewAdminMessage",
    "NewFeedback",
    "NewSwapRequest",
    "NewUser",
    "PlatformAnalytics",
    "RejectSwap",
    "SearchFilters",
    "SetUserActive",
    "SkillCount",
    "SwapCommand",
    "SwapRequest",
    "SwapStatus",
    "UpdateAdminMessage",
    "UpdateProfile",
    "User",
    "UserSwaps",
]
