"""
Album API — Health Check Route
===============================

What:  GET /health reports database liveness and connection pool counters.
How:   Delegates to AlbumStore.health(), which pings the database with a
       one second timeout.

Failure policy:
    An unreachable database is not reported as "degraded". The store raises
    DatabaseUnavailableError; its handler in main.py answers 503 and stops
    the server, and the process exits with status 1.

Example (healthy):
    {
        "status": "up",
        "message": "It's healthy",
        "open_connections": "1",
        "in_use": "0",
        "idle": "1",
        "wait_count": "0",
        "wait_duration": "0s",
        "max_idle_closed": "0",
        "max_lifetime_closed": "0"
    }
"""

from typing import Dict

from fastapi import APIRouter, Depends

from album_api.dependencies import get_album_store
from album_api.services.protocols import AlbumStore

router = APIRouter(tags=["Health"])


@router.get(
    "/health",
    summary="Database health check",
    responses={503: {"description": "Database unreachable; the server shuts down"}},
)
@router.get("/health/", include_in_schema=False)
async def health_check(
    store: AlbumStore = Depends(get_album_store),
) -> Dict[str, str]:
    return await store.health()
