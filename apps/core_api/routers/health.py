"""
Health Check Endpoints.

- GET /healthz: Liveness probe (API running)
- GET /readyz: Readiness probe (orchestrator wired)
"""

from fastapi import APIRouter, Depends, Request
from fastapi.responses import JSONResponse

from apps.core_api.deps import get_settings
from rampart_config.settings import Settings

router = APIRouter()


@router.get("/healthz")
async def healthz():
    """
    Liveness probe - is the API process running?

    Returns 200 OK if server is alive.
    """
    return {"status": "healthy", "service": "rampart-api"}


@router.get("/readyz")
async def readyz(request: Request, settings: Settings = Depends(get_settings)):
    """
    Readiness probe - has the lifespan built the event bus and orchestrator?

    Returns:
        200 OK with the number of in-flight actions
        503 Service Unavailable before startup completes
    """
    orchestrator = getattr(request.app.state, "orchestrator", None)
    if orchestrator is None:
        return JSONResponse(status_code=503, content={"status": "starting"})

    return {
        "status": "ready",
        "environment": settings.ENVIRONMENT,
        "active_actions": len(orchestrator.active_action_ids),
    }
