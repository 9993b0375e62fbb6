"""
Repository subpackage for the skill swap feature.
"""

from .marketplace_repository import (
    MarketplaceRepository,
    MarketplaceRepositoryError,
    PostgresMarketplaceRepository,
)

__all__ = [
    "MarketplaceRepository",
    "MarketplaceRepositoryError",
    "PostgresMarketplaceRepository",
]
