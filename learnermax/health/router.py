"""Health check endpoints."""

from fastapi import APIRouter, Request

from learnermax.config import get_settings


router = APIRouter(prefix="/health", tags=["health"])


@router.get("/live")
async def liveness() -> dict[str, str]:
    """Liveness check - the process is running."""
    return {"status": "alive"}


@router.get("/ready")
async def readiness(request: Request) -> dict[str, str | bool]:
    """Readiness check - reports which backing services are wired."""
    state = request.app.state
    database = getattr(state, "progress_store", None) is not None
    return {
        "status": "ready" if database else "degraded",
        "database": database,
        "cache": getattr(state, "redis", None) is not None,
        "video_delivery": getattr(state, "credential_issuer", None) is not None,
    }


@router.get("")
async def health() -> dict[str, str]:
    """General health check endpoint."""
    settings = get_settings()
    return {
        "status": "healthy",
        "app_name": settings.app_name,
        "version": settings.app_version,
        "environment": settings.environment,
    }
