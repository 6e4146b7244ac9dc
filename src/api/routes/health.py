"""
Health check endpoints.

Provides endpoints for monitoring application health and status.
"""

from typing import Dict, Any
from fastapi import APIRouter

from config.constants import TABLES
from config.settings import get_settings
from config.database import get_supabase_client_optional


router = APIRouter(tags=["Health"])


@router.get("/health")
async def health_check() -> Dict[str, Any]:
    """Basic health check endpoint."""
    return {
        "status": "healthy",
        "service": "fitzty-api",
    }


@router.get("/health/detailed")
def detailed_health_check() -> Dict[str, Any]:
    """
    Detailed health check with dependency status.

    Checks:
    - Supabase connection (reads one avatar row)
    - Generation provider credential present
    """
    settings = get_settings()

    supabase_status = "unknown"
    supabase_error = None
    try:
        client = get_supabase_client_optional()
        if client:
            client.table(TABLES.AVATARS).select("id").limit(1).execute()
            supabase_status = "connected"
        else:
            supabase_status = "not_configured"
    except Exception as e:
        supabase_status = "error"
        supabase_error = str(e)

    generation_status = "configured" if settings.generation_api_key else "not_configured"
    healthy = supabase_status == "connected" and generation_status == "configured"

    return {
        "status": "healthy" if healthy else "degraded",
        "service": "fitzty-api",
        "environment": settings.environment,
        "checks": {
            "config": "ok",
            "supabase": {
                "status": supabase_status,
                "error": supabase_error,
            },
            "generation": {
                "status": generation_status,
                "provider": settings.generation_provider,
            },
        },
    }


@router.get("/ready")
async def readiness_check() -> Dict[str, str]:
    """Kubernetes-style readiness probe."""
    client = get_supabase_client_optional()
    if client is None:
        return {"status": "not_ready", "reason": "database_not_configured"}

    return {"status": "ready"}


@router.get("/live")
async def liveness_check() -> Dict[str, str]:
    """Kubernetes-style liveness probe."""
    return {"status": "alive"}
