# app/main.py
"""
SkillSwap API: application factory wiring, lifespan and HTTP middleware.
"""

import time
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request

from app.config import settings
from app.db.pool import db_pool
from app.features.skill_swap import (
    MarketplaceStore,
    PostgresMarketplaceRepository,
    admin_router,
    skill_swap_router,
)
from app.infrastructure.observability.logging import get_logger, log_request, setup_logging
from app.middleware import CORSMiddleware, RequestContextMiddleware
from app.routes import health

# Setup logging before creating the app
setup_logging(log_level=settings.LOG_LEVEL)
logger = get_logger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Open the pool, load the marketplace into memory, and tear down on exit."""

    logger.info("Application starting", environment=settings.environment, debug=settings.debug)

    await db_pool.initialize()
    try:
        store = MarketplaceStore(
            PostgresMarketplaceRepository(),
            default_rating=settings.DEFAULT_USER_RATING,
            top_skills_limit=settings.TOP_SKILLS_LIMIT,
        )
        await store.load()
    except Exception as e:
        logger.error("Failed to load marketplace store", error=str(e))
        await db_pool.close()
        raise

    app.state.marketplace_store = store
    logger.info("All services initialized successfully")

    yield

    logger.info("Application shutting down")
    try:
        await db_pool.close()
    except Exception as e:
        logger.error("Error closing database pool", error=str(e))


def create_app(use_lifespan: bool = True) -> FastAPI:
    """Build the FastAPI app. Tests pass use_lifespan=False and seed app.state themselves."""
    app = FastAPI(
        title="SkillSwap",
        description="Skill exchange marketplace API",
        version="0.1.0",
        lifespan=lifespan if use_lifespan else None,
    )

    app.include_router(health.router)
    app.include_router(skill_swap_router)
    app.include_router(admin_router)

    @app.middleware("http")
    async def log_requests(request: Request, call_next):
        """Log HTTP requests with timing."""
        start_time = time.time()
        response = await call_next(request)
        log_request(
            method=request.method,
            path=request.url.path,
            status_code=response.status_code,
            duration_ms=round((time.time() - start_time) * 1000, 2),
        )
        return response

    # Last added runs outermost, so request_id is bound before anything logs
    app.add_middleware(CORSMiddleware, allowed_origins=settings.CORS_ALLOWED_ORIGINS)
    app.add_middleware(RequestContextMiddleware)

    return app


app = create_app()


if __name__ == "__main__":
    import uvicorn

    uvicorn.run(app, host="0.0.0.0", port=8000)
