"""Health & Readiness Probes.

Invariants:
    - GET /healthz always returns 200 "ok" if the process is up (liveness)
    - GET /readyz returns 503 if the store does not answer a probe (readiness)
"""

import logging

from fastapi import APIRouter, Depends, status
from fastapi.responses import JSONResponse, PlainTextResponse

from sciplayer.core.repository_protocols import PlaylistStore
from sciplayer.infrastructure.playlist_store import get_store

logger = logging.getLogger(__name__)
router = APIRouter(tags=["health"])


@router.get("/healthz", response_class=PlainTextResponse)
async def health_check():
    """Basic liveness probe."""
    return "ok"


@router.get("/readyz")
async def readiness_check(store: PlaylistStore = Depends(get_store)):
    """Readiness probe: includes store connectivity."""
    if not await store.health_check():
        logger.warning("Readiness probe failed: store unavailable")
        return JSONResponse(
            status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
            content={"error": "store unavailable"},
        )
    return {"status": "ready"}
