"""
Service layer for the skill swap feature.
"""

from .errors import (
    Forbidden,
    InvalidFeedback,
    InvalidProfile,
    InvalidSwapRequest,
    InvalidTransition,
    NotFound,
    PersistenceFailure,
    SkillSwapError,
)
from .store import MarketplaceStore

__all__ = [
    "MarketplaceStore",
    "SkillSwapError",
    "InvalidTransition",
    "InvalidFeedback",
    "InvalidSwapRequest",
    "InvalidProfile",
    "Forbidden",
    "NotFound",
    "PersistenceFailure",
]
