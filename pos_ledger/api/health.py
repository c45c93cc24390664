from fastapi import APIRouter
from sqlalchemy import text

from pos_ledger.utils.cache import redis_client, cache_service
from pos_ledger.database import engine

router = APIRouter(prefix="/health", tags=["Health"])


@router.get(
    "/",
    summary="Health check",
    description="Basic health check endpoint."
)
def health_check():
    """Simple health check."""
    return {"status": "healthy"}


@router.get(
    "/ready",
    summary="Readiness check",
    description="Check if the database (and Redis, when caching is on) is ready."
)
def readiness_check():
    """
    Readiness check for all dependencies.

    Returns status of:
    - Database connection
    - Redis connection (skipped when the cache is disabled)
    """
    checks = {
        "database": False,
        "redis": False,
        "cache_enabled": cache_service.enabled
    }

    try:
        with engine.connect() as conn:
            conn.execute(text("SELECT 1"))
            checks["database"] = True
    except Exception as e:
        checks["database_error"] = str(e)

    if cache_service.enabled:
        try:
            redis_client.ping()
            checks["redis"] = True
        except Exception as e:
            checks["redis_error"] = str(e)

    all_healthy = checks["database"] and (checks["redis"] or not cache_service.enabled)

    return {
        "status": "ready" if all_healthy else "not_ready",
        "checks": checks
    }


@router.get(
    "/cache/stats",
    summary="Cache statistics",
    description="Get Redis cache statistics."
)
def cache_stats():
    """Get cache statistics."""
    if not cache_service.enabled:
        return {"enabled": False}
    try:
        info = redis_client.info()
        return {
            "enabled": True,
            "connected_clients": info.get("connected_clients"),
            "used_memory": info.get("used_memory_human"),
            "total_keys": redis_client.dbsize(),
            "uptime_seconds": info.get("uptime_in_seconds")
        }
    except Exception as e:
        return {"enabled": True, "error": str(e)}
