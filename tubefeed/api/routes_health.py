"""Health check endpoints for the aggregator API."""

from fastapi import APIRouter, Request
from fastapi.responses import JSONResponse

router = APIRouter(tags=["health"])


@router.get("/healthz")
async def health_check():
    """Liveness probe: the process is up and serving requests."""
    return {"ok": True}


@router.get("/readyz")
async def readiness_check(request: Request):
    """
    Readiness probe.

    The app is ready once its lifespan has built the feed service and
    started the cache sweeper.

    Returns:
        ``{"ok": true, "cacheSweeper": bool}``, or 503 before startup finished
    """
    service = getattr(request.app.state, "feed_service", None)
    if service is None:
        return JSONResponse(status_code=503, content={"ok": False})
    return {"ok": True, "cacheSweeper": service.cache.running}
