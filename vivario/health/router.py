"""
Health Check Endpoint
=====================
Reports whether content data is loaded and the engine can answer.
"""

from datetime import datetime

from fastapi import APIRouter

from vivario import __version__
from vivario.config import get_settings

router = APIRouter(prefix="/api/v1/health", tags=["Health"])


@router.get("")
def health():
    """
    Engine health check.

    Content problems are reported, not raised: the endpoint itself always
    answers 200.
    """
    settings = get_settings()
    status = {
        "timestamp": datetime.utcnow().isoformat() + "Z",
        "api_version": __version__,
        "environment": settings.environment,
        "components": {},
    }

    try:
        from vivario.content import get_loader
        status["components"]["content"] = {"status": "healthy", **get_loader().status()}
    except Exception as e:
        status["components"]["content"] = {
            "status": "error",
            "error": str(e),
        }

    healthy = all(c.get("status") == "healthy" for c in status["components"].values())
    status["status"] = "healthy" if healthy else "degraded"
    return status
