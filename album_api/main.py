"""
Album API — FastAPI Application Factory
========================================

What:  Creates and configures the FastAPI application instance.
How:   create_app() wires middleware, exception handlers and routers; the
       lifespan owns the single Database/AlbumService of the process.
Who:   Called by the process entry point (album_api.__main__) and by tests,
       which pass their own AlbumStore.

Application Architecture:
    ┌──────────────────────────────────────────────────────┐
    │                    FastAPI App                       │
    │                                                      │
    │  Middleware Chain:                                   │
    │  ┌──────────────┐ ┌──────────────┐                   │
    │  │   Req ID     │→│   Logging    │                   │
    │  └──────────────┘ └──────────────┘                   │
    │                                                      │
    │  Routes:                                             │
    │  ┌──────┐ ┌──────────────────────┐ ┌──────────────┐  │
    │  │ GET /│ │ GET/POST/DELETE album│ │ GET /health  │  │
    │  └──────┘ └──────────────────────┘ └──────────────┘  │
    │                                                      │
    │  Exception Handlers:                                 │
    │  ┌────────────────────────────────────────────────┐  │
    │  │ BadID/BadBody→400 │ NotFound→404 │ DB→500      │  │
    │  │ DB unreachable→503 + shutdown                  │  │
    │  └────────────────────────────────────────────────┘  │
    └──────────────────────────────────────────────────────┘

Lifecycle:
    Startup:  configure logging, build Database + AlbumService (unless a
              store was injected), log the listen port
    Shutdown: close the store (disposes the engine), log shutdown
"""

import logging
import os
import signal
import sys
from contextlib import asynccontextmanager
from http import HTTPStatus
from typing import AsyncGenerator, Optional

from fastapi import FastAPI, Request
from starlette.exceptions import HTTPException as StarletteHTTPException

from album_api import __version__
from album_api.config import Settings, settings
from album_api.database import Database
from album_api.exceptions import (
    AlbumNotFoundError,
    DatabaseError,
    DatabaseUnavailableError,
    InvalidAlbumIDError,
    InvalidAlbumPayloadError,
)
from album_api.middleware.logging import RequestLoggingMiddleware
from album_api.middleware.request_id import RequestIDMiddleware, request_id_var
from album_api.responses import NewlineJSONResponse
from album_api.routes import albums, health, root
from album_api.services.album_service import AlbumService
from album_api.services.protocols import AlbumStore

logger = logging.getLogger(__name__)

# Client-facing text for a DatabaseError, keyed by the failing operation
DATABASE_ERROR_MESSAGES = {
    "list_albums": "Could not get Albums",
    "get_album": "Could not get the album",
    "add_album": "Could not add Album to the Database",
    "delete_album": "Could not delete album from database",
}


# ══════════════════════════════════════════════════════════════════════════
# Logging Configuration
# ══════════════════════════════════════════════════════════════════════════

def setup_logging(level: str = "INFO") -> None:
    """
    Configure logging for the entire application.

    Format: %(asctime)s [%(levelname)s] %(name)s: %(message)s, on stdout.
    Called once at startup, before anything else logs.
    """
    logging.basicConfig(
        level=getattr(logging, level, logging.INFO),
        format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
        datefmt="%Y-%m-%dT%H:%M:%S",
        handlers=[logging.StreamHandler(sys.stdout)],
        force=True,
    )

    # Third-party loggers that are chatty at INFO
    logging.getLogger("uvicorn.access").setLevel(logging.WARNING)
    logging.getLogger("sqlalchemy.engine").setLevel(logging.WARNING)


# ══════════════════════════════════════════════════════════════════════════
# Application Lifespan (Startup & Shutdown)
# ══════════════════════════════════════════════════════════════════════════

@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
    """
    Own the process-wide AlbumStore.

    If create_app() was given a store, the caller owns it and it is left
    open at shutdown. Otherwise one Database is built from settings here and
    closed after the server stops accepting requests.
    """
    app_settings: Settings = app.state.settings
    setup_logging(app_settings.log_level)

    owns_store = app.state.album_store is None
    if owns_store:
        app.state.album_store = AlbumService(Database.from_settings(app_settings))
        logger.info(
            "Database target: %s:%d/%s",
            app_settings.db_host,
            app_settings.db_port,
            app_settings.db_database,
        )

    logger.info("Server running on port %d", app_settings.port)

    yield

    logger.info("Album API shutting down...")
    if owns_store:
        await app.state.album_store.close()
        app.state.album_store = None
    logger.info("Shutdown complete.")


# ══════════════════════════════════════════════════════════════════════════
# Exception Handlers
# ══════════════════════════════════════════════════════════════════════════

def register_exception_handlers(app: FastAPI) -> None:
    """
    Map exception types to status codes and JSON envelopes.

        InvalidAlbumIDError        → 400 {"error": "Invalid ID Format: <raw>"}
        InvalidAlbumPayloadError   → 400 {"error": "Could not parse the Album data"}
        AlbumNotFoundError         → 404 {"error": "Album ID not found"}
        DatabaseError              → 500 {"error": <per-operation text>}
        DatabaseUnavailableError   → 503 {"status": "down", "error": ...}, fatal
        HTTPException (framework)  → {"message": "404 Not Found"} etc.
        Exception (fallback)       → 500 {"error": "Internal Server Error"}

    Driver error text is logged, never returned.
    """

    @app.exception_handler(InvalidAlbumIDError)
    async def handle_invalid_id(request: Request, exc: InvalidAlbumIDError):
        rid = request_id_var.get("")
        logger.warning("[%s] Invalid album id %r on %s", rid, exc.raw_id, request.url.path)
        return NewlineJSONResponse(status_code=400, content={"error": exc.message})

    @app.exception_handler(InvalidAlbumPayloadError)
    async def handle_invalid_payload(request: Request, exc: InvalidAlbumPayloadError):
        rid = request_id_var.get("")
        logger.warning("[%s] %s | Context: %s", rid, exc.message, exc.context)
        return NewlineJSONResponse(status_code=400, content={"error": exc.message})

    @app.exception_handler(AlbumNotFoundError)
    async def handle_not_found(request: Request, exc: AlbumNotFoundError):
        rid = request_id_var.get("")
        logger.info("[%s] %s", rid, exc.message)
        return NewlineJSONResponse(status_code=404, content={"error": "Album ID not found"})

    @app.exception_handler(DatabaseError)
    async def handle_database_error(request: Request, exc: DatabaseError):
        rid = request_id_var.get("")
        logger.error("[%s] Database error: %s | Context: %s", rid, exc.message, exc.context)
        message = DATABASE_ERROR_MESSAGES.get(exc.operation, "Database operation failed")
        return NewlineJSONResponse(status_code=500, content={"error": message})

    @app.exception_handler(DatabaseUnavailableError)
    async def handle_database_unavailable(request: Request, exc: DatabaseUnavailableError):
        """
        The database is gone: answer this request, then stop serving.

        The error is kept on app.state so the entry point can exit non-zero
        once the server has shut down.
        """
        rid = request_id_var.get("")
        logger.critical("[%s] %s; shutting down", rid, exc.message)
        request.app.state.fatal_error = exc
        request_shutdown = request.app.state.request_shutdown
        if request_shutdown is not None:
            request_shutdown()
        return NewlineJSONResponse(
            status_code=503,
            content={"status": "down", "error": exc.message},
        )

    @app.exception_handler(StarletteHTTPException)
    async def handle_http_exception(request: Request, exc: StarletteHTTPException):
        phrase = HTTPStatus(exc.status_code).phrase
        return NewlineJSONResponse(
            status_code=exc.status_code,
            content={"message": f"{exc.status_code} {phrase}"},
            headers=getattr(exc, "headers", None),
        )

    @app.exception_handler(Exception)
    async def handle_unexpected_error(request: Request, exc: Exception):
        rid = request_id_var.get("")
        logger.error("[%s] Unexpected error: %s", rid, str(exc), exc_info=True)
        return NewlineJSONResponse(status_code=500, content={"error": "Internal Server Error"})


def _terminate_process() -> None:
    """Default shutdown hook: deliver SIGTERM so the server stops gracefully."""
    os.kill(os.getpid(), signal.SIGTERM)


# ══════════════════════════════════════════════════════════════════════════
# Application Factory
# ══════════════════════════════════════════════════════════════════════════

def create_app(
    album_store: Optional[AlbumStore] = None,
    app_settings: Optional[Settings] = None,
) -> FastAPI:
    """
    Create and configure the FastAPI application.

    Args:
        album_store: Store to serve requests from. When omitted, the
            lifespan builds an AlbumService over a new Database.
        app_settings: Settings to use instead of the module singleton.
    """
    app = FastAPI(
        title="Album API",
        description="CRUD over album records stored in PostgreSQL, plus a database health check.",
        version=__version__,
        lifespan=lifespan,
        default_response_class=NewlineJSONResponse,
        redirect_slashes=False,  # both slash forms are registered explicitly
    )

    app.state.settings = app_settings or settings
    app.state.album_store = album_store
    app.state.fatal_error = None
    app.state.request_shutdown = _terminate_process

    # ── Register Middleware ───────────────────────────────────────────────
    # Last added runs first: RequestID → Logging → routes
    app.add_middleware(RequestLoggingMiddleware)
    app.add_middleware(RequestIDMiddleware)

    # ── Register Exception Handlers ───────────────────────────────────────
    register_exception_handlers(app)

    # ── Register Routes ───────────────────────────────────────────────────
    app.include_router(root.router)
    app.include_router(health.router)
    app.include_router(albums.router)

    return app
