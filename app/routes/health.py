# app/routes/health.py
"""
Health check endpoints with database pool and store readiness.
"""

import time

from fastapi import APIRouter, Request

from app.config import settings
from app.db.pool import db_health_check

router = APIRouter()


@router.get("/healthz")
async def healthz():
    """Basic health check - always returns 200 if app is running."""
    return {"status": "ok", "service": "skillswap"}


@router.get("/readyz")
async def readyz(request: Request):
    """
    Readiness check: database pool, in-memory store and configuration.
    """
    checks = {}
    overall_ok = True

    # 1) Database pool
    t0 = time.time()
    db_health = await db_health_check()
    is_healthy = db_health.get("healthy", False)
    checks["database"] = {
        "ok": is_healthy,
        "latency_ms": round((time.time() - t0) * 1000, 1),
    }
    if "pool_stats" in db_health:
        pool_stats = db_health["pool_stats"]
        checks["database"].update(
            {
                "pool_size": pool_stats.get("pool_size", 0),
                "pool_available": pool_stats.get("pool_available", 0),
                "connection_time_ms": db_health.get("connection_time_ms", 0),
            }
        )
    if db_health.get("warnings"):
        checks["database"]["warnings"] = db_health["warnings"]
    if not is_healthy:
        checks["database"]["error"] = db_health.get("error", "Database unhealthy")
    overall_ok = overall_ok and is_healthy

    # 2) Marketplace store loaded at startup
    store = getattr(request.app.state, "marketplace_store", None)
    store_ok = bool(store and store.loaded)
    checks["store"] = {"ok": store_ok}
    if store_ok:
        checks["store"].update(
            {
                "users": len(store.users),
                "swap_requests": len(store.swap_requests),
                "feedback": len(store.feedback),
                "admin_messages": len(store.admin_messages),
            }
        )
    overall_ok = overall_ok and store_ok

    # 3) Configuration
    config_issues = []
    if not settings.SUPABASE_DB_URL:
        config_issues.append("SUPABASE_DB_URL not set")
    if not settings.SUPABASE_URL:
        config_issues.append("SUPABASE_URL not set")

    checks["configuration"] = {
        "ok": not config_issues,
        "issues": config_issues or None,
        "environment": settings.environment,
    }
    overall_ok = overall_ok and not config_issues

    return {"overall_ok": overall_ok, "checks": checks, "timestamp": time.time()}


@router.get("/health/database")
async def database_health():
    """Detailed database pool health information."""
    return await db_health_check()
