"""
NoteStore Backend - FastAPI Application Factory
=================================================

What:  Creates and configures the FastAPI application instance.
How:   create_app(settings) returns a configured app; the settings and the
       NoteStore built from them live on `app.state` and reach handlers
       through the dependencies in notestore.dependencies.
Who:   The CLI (notestore.cli), or uvicorn directly:
           uvicorn --factory notestore.main:create_app
       which reads NOTESTORE_HOST / NOTESTORE_PORT / NOTESTORE_STORAGE_ROOT.

Application Architecture:
    ┌─────────────────────────────────────────────────────┐
    │                   FastAPI App                       │
    │                                                     │
    │  Middleware Chain:                                  │
    │  ┌──────────────┐ ┌──────────┐ ┌─────────────────┐  │
    │  │  Rate Limit  │→│ Req ID   │→│  Logging        │  │
    │  └──────────────┘ └──────────┘ └─────────────────┘  │
    │                                                     │
    │  Routes:                                            │
    │  ┌──────────────┐ ┌──────────┐ ┌─────────────────┐  │
    │  │ /notes       │ │ /Upload- │ │ GET /health     │  │
    │  │ POST /write  │ │ Form.html│ │                 │  │
    │  └──────────────┘ └──────────┘ └─────────────────┘  │
    │                                                     │
    │  Exception Handlers:                                │
    │  ┌──────────────────────────────────────────────┐   │
    │  │ Validation/Exists→400 │ NotFound→404 │ →500  │   │
    │  └──────────────────────────────────────────────┘   │
    └─────────────────────────────────────────────────────┘

Lifecycle:
    Startup:  configure logging, create the storage directory, log the address
    Shutdown: log
"""

import logging
import sys
import time
from contextlib import asynccontextmanager
from typing import AsyncGenerator, Optional

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.middleware.gzip import GZipMiddleware
from fastapi.responses import JSONResponse

from notestore import __version__
from notestore.config import Settings
from notestore.exceptions import (
    FileStorageError,
    NoteAlreadyExistsError,
    NoteNotFoundError,
    NoteStoreError,
    RateLimitExceededError,
    ValidationError,
)
from notestore.middleware.logging import RequestLoggingMiddleware
from notestore.middleware.rate_limit import RateLimitMiddleware
from notestore.middleware.request_id import RequestIDLogFilter, RequestIDMiddleware
from notestore.routes import form, health, notes
from notestore.services.note_store import NoteStore

logger = logging.getLogger(__name__)

LOG_FORMAT = "%(asctime)s [%(levelname)s] %(name)s [%(request_id)s]: %(message)s"


# ══════════════════════════════════════════════════════════════════════════
# Logging Configuration
# ══════════════════════════════════════════════════════════════════════════

def setup_logging(level: str = "INFO") -> None:
    """
    Configure logging for the whole process.

    Every record gets the current request ID (or "-") through
    RequestIDLogFilter, so lines from one request can be grepped together.
    """
    handler = logging.StreamHandler(sys.stdout)
    handler.addFilter(RequestIDLogFilter())

    logging.basicConfig(
        level=getattr(logging, level.upper(), logging.INFO),
        format=LOG_FORMAT,
        datefmt="%Y-%m-%dT%H:%M:%S",
        handlers=[handler],
        force=True,
    )

    # RequestLoggingMiddleware already writes one line per request
    logging.getLogger("uvicorn.access").setLevel(logging.WARNING)


# ══════════════════════════════════════════════════════════════════════════
# Application Lifespan
# ══════════════════════════════════════════════════════════════════════════

@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
    settings: Settings = app.state.settings
    store: NoteStore = app.state.note_store

    setup_logging(settings.log_level)
    logger.info("NoteStore %s starting up...", __version__)

    try:
        await store.ensure_storage()
        logger.info("Storage directory: %s", store.storage_root)
    except FileStorageError as e:
        # Keep serving: /health reports the problem and every note request fails cleanly
        logger.error("%s: %s", e.message, e.context)

    logger.info("Server is running at http://%s:%d", settings.host, settings.port)

    yield

    logger.info("NoteStore shutting down.")


# ══════════════════════════════════════════════════════════════════════════
# Exception Handlers
# ══════════════════════════════════════════════════════════════════════════

def error_response(exc: NoteStoreError) -> JSONResponse:
    """Render an application error as `{"error": message}` with its status code."""
    headers = {}
    if isinstance(exc, RateLimitExceededError):
        headers["Retry-After"] = str(exc.retry_after)
    return JSONResponse(
        status_code=exc.status_code,
        content={"error": exc.message},
        headers=headers or None,
    )


def register_exception_handlers(app: FastAPI) -> None:
    """
    Map application exceptions to HTTP responses.

    Handler hierarchy:
        ValidationError         → 400 (includes InvalidNoteNameError)
        NoteAlreadyExistsError  → 400
        NoteNotFoundError       → 404
        FileStorageError        → 500
        NoteStoreError (base)   → its status_code
        Exception (fallback)    → 500

    Context dicts (paths, OS errors) are logged, never returned.
    """

    @app.exception_handler(ValidationError)
    async def handle_validation_error(request: Request, exc: ValidationError):
        logger.warning("Validation error: %s | Context: %s", exc.message, exc.context)
        return error_response(exc)

    @app.exception_handler(NoteAlreadyExistsError)
    async def handle_already_exists(request: Request, exc: NoteAlreadyExistsError):
        logger.info("Refused to overwrite existing note %r", exc.name)
        return error_response(exc)

    @app.exception_handler(NoteNotFoundError)
    async def handle_not_found(request: Request, exc: NoteNotFoundError):
        logger.debug("Note not found: %r | Context: %s", exc.name, exc.context)
        return error_response(exc)

    @app.exception_handler(FileStorageError)
    async def handle_file_storage_error(request: Request, exc: FileStorageError):
        logger.error("File storage error: %s | Context: %s", exc.message, exc.context)
        return error_response(exc)

    @app.exception_handler(NoteStoreError)
    async def handle_note_store_error(request: Request, exc: NoteStoreError):
        logger.error("Application error: %s | Context: %s", exc.message, exc.context)
        return error_response(exc)

    @app.exception_handler(Exception)
    async def handle_unexpected_error(request: Request, exc: Exception):
        logger.error(
            "Unexpected error on %s %s: %s",
            request.method,
            request.url.path,
            str(exc),
            exc_info=True,
        )
        # Runs outside RequestIDMiddleware, whose context var is reset by now
        request_id = getattr(request.state, "request_id", None)
        return JSONResponse(
            status_code=500,
            content={"error": "Internal server error"},
            headers={"X-Request-ID": request_id} if request_id else None,
        )


# ══════════════════════════════════════════════════════════════════════════
# Application Factory
# ══════════════════════════════════════════════════════════════════════════

def create_app(settings: Optional[Settings] = None) -> FastAPI:
    """
    Create and configure the FastAPI application.

    Args:
        settings: Startup configuration. None loads it from the environment,
                  which is what `uvicorn --factory` relies on.
    """
    if settings is None:
        settings = Settings()

    app = FastAPI(
        title="NoteStore API",
        description="Create, read, update, delete and list plain-text notes stored as files.",
        version=__version__,
        docs_url="/docs",
        redoc_url="/redoc",
        openapi_url="/openapi.json",
        lifespan=lifespan,
    )

    app.state.settings = settings
    app.state.note_store = NoteStore(settings.storage_root)
    app.state.started_at = time.time()

    # ── Register Middleware ───────────────────────────────────────────────
    # Last added runs first: RateLimit → RequestID → Logging → GZip → CORS
    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origins_list,
        allow_methods=["*"],
        allow_headers=["*"],
        expose_headers=["X-Request-ID", "Retry-After"],
    )
    app.add_middleware(GZipMiddleware, minimum_size=500)
    app.add_middleware(RequestLoggingMiddleware)
    app.add_middleware(RequestIDMiddleware)
    if settings.rate_limit_enabled:
        app.add_middleware(RateLimitMiddleware, settings=settings)

    register_exception_handlers(app)

    app.include_router(notes.router)
    app.include_router(form.router)
    app.include_router(health.router)

    return app
