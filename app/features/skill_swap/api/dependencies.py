"""
FastAPI dependencies for the skill swap routes.
"""

from fastapi import HTTPException, Request, status

from app.features.skill_swap.services.store import MarketplaceStore


def get_store(request: Request) -> MarketplaceStore:
    """Process-wide store created during application startup."""
    store = getattr(request.app.state, "marketplace_store", None)
    if store is None or not store.loaded:
        raise HTTPException(
            status_code=status.HTTP_503_SERVICE_UNAVAILABLE, detail="Marketplace not loaded"
        )
    return store
