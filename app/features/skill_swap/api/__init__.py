"""
HTTP layer for the skill swap feature.
"""

from .admin_router import router as admin_router
from .dependencies import get_store
from .router import router

__all__ = ["router", "admin_router", "get_store"]
