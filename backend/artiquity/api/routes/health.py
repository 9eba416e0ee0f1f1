"""Health & Readiness Probes — liveness and readiness endpoints for container orchestration.

Invariants:
    - GET /health/ always returns 200 if process is up (liveness)
    - GET /health/ready returns 503 if database is unreachable (readiness)
    - The service map reports which providers have keys, never the keys

Design Decisions:
    - Separate liveness/readiness: liveness restarts, readiness removes from
      load balancer (ADR: production readiness)
"""

import logging
from fastapi import APIRouter, status
from fastapi.responses import JSONResponse

from artiquity import __version__
from artiquity.config import get_settings
from artiquity.infrastructure.database import get_db_manager

logger = logging.getLogger(__name__)
router = APIRouter(prefix="/api/v1/health", tags=["health"])


def _configured(key: str) -> str:
    return "configured" if key else "not_configured"


@router.get("/", status_code=status.HTTP_200_OK)
async def health_check():
    """Basic liveness probe. Returns 200 if the process is up."""
    settings = get_settings()
    return {
        "status": "healthy",
        "service": "artiquity-api",
        "version": __version__,
        "services": {
            "llm": settings.llm_provider,
            "gemini": _configured(settings.gemini_api_key),
            "anthropic": _configured(settings.anthropic_api_key),
            "perplexity": _configured(settings.perplexity_api_key),
            "fal": _configured(settings.fal_api_key),
            "pollinations": "available",
        },
    }


@router.get("/ready")
async def readiness_check():
    """Readiness probe — includes database connectivity."""
    try:
        db_ok = await get_db_manager().health_check()
    except RuntimeError:
        db_ok = False
    if not db_ok:
        return JSONResponse(
            status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
            content={
                "status": "not_ready",
                "reason": "database_unavailable",
            },
        )
    return {"status": "ready", "checks": {"database": "healthy"}}
