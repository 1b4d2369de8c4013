"""
NoteStore Backend - Health Check Route
========================================

What:  Health check endpoint for monitoring and container probes.
How:   The service can only do its job if the storage directory exists, so
       that is the one dependency checked.

    Status levels:
    - healthy:   storage directory present (HTTP 200)
    - unhealthy: storage directory missing or not a directory (HTTP 503)
"""

import logging
import time

from fastapi import APIRouter, Depends, Request
from fastapi.responses import JSONResponse

from notestore import __version__
from notestore.dependencies import get_note_store
from notestore.schemas.note import HealthResponse
from notestore.services.note_store import NoteStore

logger = logging.getLogger(__name__)

router = APIRouter(tags=["Health"])


@router.get(
    "/health",
    response_model=HealthResponse,
    responses={503: {"description": "Storage unavailable", "model": HealthResponse}},
    summary="Service health check",
)
async def health_check(
    request: Request,
    store: NoteStore = Depends(get_note_store),
) -> JSONResponse:
    storage = "available"
    overall = "healthy"

    try:
        if not await store.storage_available():
            storage = "unavailable"
            overall = "unhealthy"
    except OSError as e:
        storage = "unavailable"
        overall = "unhealthy"
        logger.warning("Health check: storage check failed: %s", str(e))

    if overall != "healthy":
        logger.warning("Health check: storage directory %s unavailable", store.storage_root)

    body = HealthResponse(
        status=overall,
        version=__version__,
        storage=storage,
        uptime_seconds=round(time.time() - request.app.state.started_at, 2),
    )
    return JSONResponse(
        status_code=200 if overall == "healthy" else 503,
        content=body.model_dump(),
    )
