"""
Skill swap feature package.

Members list the skills they offer and want, propose one-for-one swaps, move
them through the request lifecycle, and rate each other afterwards. Every
layer (domain models, repository, services, API routers) lives here.
"""

# Re-export the primary building blocks for easy access.
from .api import admin_router, router as skill_swap_router  # noqa: F401
from .repository import PostgresMarketplaceRepository  # noqa: F401
from .services import MarketplaceStore  # noqa: F401
