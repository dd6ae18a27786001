"""
Notes API — FastAPI Application Factory
=========================================

What:  Creates and configures the FastAPI application instance.
How:   Factory pattern: create_app() returns a configured FastAPI instance.
Who:   Called by uvicorn to start the server (uvicorn notes_api.main:app),
       by `python -m notes_api`, and by the test suite with its own engine.

Application Architecture:
    ┌─────────────────────────────────────────────────────┐
    │                   FastAPI App                       │
    │                                                     │
    │  Middleware Chain:                                  │
    │  ┌──────────┐ ┌─────────────────┐ ┌──────────────┐  │
    │  │  Req ID  │→│  Logging        │→│  CORS        │  │
    │  └──────────┘ └─────────────────┘ └──────────────┘  │
    │                                                     │
    │  Routes:                                            │
    │  ┌────────────────────────┐ ┌────────────────────┐  │
    │  │ /api/notes[/{id}] CRUD │ │ /health            │  │
    │  └────────────────────────┘ └────────────────────┘  │
    │                                                     │
    │  Exception Handlers:                                │
    │  ┌──────────────────────────────────────────────┐   │
    │  │ NotFound→404 │ Duplicate→409 │ Store→500     │   │
    │  │ RequestValidation→422 │ Exception→500        │   │
    │  └──────────────────────────────────────────────┘   │
    └─────────────────────────────────────────────────────┘

Lifecycle:
    Startup:
    1. Initialize logging
    2. Verify the database is reachable (failure aborts startup)
    3. Create the notes table if DB_CREATE_TABLES is on

    Shutdown:
    1. Dispose database engine (close all pooled connections)
"""

import logging
import sys
from contextlib import asynccontextmanager
from typing import AsyncGenerator, Optional

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from sqlalchemy.ext.asyncio import AsyncEngine
from starlette.exceptions import HTTPException as StarletteHTTPException

from notes_api import __version__
from notes_api.config import Settings, get_settings
from notes_api.database import (
    build_engine,
    build_session_factory,
    create_tables,
    dispose_engine,
    verify_connection,
)
from notes_api.exceptions import NotesAPIError, StoreError
from notes_api.middleware.logging import RequestLoggingMiddleware
from notes_api.middleware.request_id import RequestIDMiddleware, request_id_var
from notes_api.routes import health, notes

logger = logging.getLogger(__name__)


# ══════════════════════════════════════════════════════════════════════════
# Logging Configuration
# ══════════════════════════════════════════════════════════════════════════

def setup_logging(log_level: str = "INFO") -> None:
    """
    Configure logging for the entire application.

    Format: 2024-01-15T12:00:00 [INFO] notes_api.repositories.note_repository: ...
    """
    logging.basicConfig(
        level=getattr(logging, log_level, logging.INFO),
        format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
        datefmt="%Y-%m-%dT%H:%M:%S",
        handlers=[logging.StreamHandler(sys.stdout)],
        force=True,
    )

    # Reduce noise from third-party libraries
    logging.getLogger("uvicorn.access").setLevel(logging.WARNING)
    logging.getLogger("sqlalchemy.engine").setLevel(
        logging.INFO if log_level == "DEBUG" else logging.WARNING
    )


# ══════════════════════════════════════════════════════════════════════════
# Application Lifespan (Startup & Shutdown)
# ══════════════════════════════════════════════════════════════════════════

@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
    """
    Startup: logging, connectivity check, table creation.
    Shutdown: dispose the engine.

    A database that cannot be reached at startup is fatal: the error is logged
    and re-raised, and uvicorn exits instead of serving requests.
    """
    settings: Settings = app.state.settings
    engine: AsyncEngine = app.state.engine

    # ── Startup ───────────────────────────────────────────────────────────
    setup_logging(settings.log_level)
    logger.info("Notes API %s starting up...", __version__)

    try:
        await verify_connection(engine)
    except Exception as e:
        logger.critical(
            "Failed to connect to the database at %s: %s", settings.database_host, str(e)
        )
        raise
    logger.info("Connection to the database at %s is successful", settings.database_host)

    if settings.db_create_tables:
        await create_tables(engine)

    logger.info("Server ready at http://%s:%d", settings.backend_host, settings.backend_port)

    yield

    # ── Shutdown ──────────────────────────────────────────────────────────
    logger.info("Notes API shutting down...")
    await dispose_engine(engine)
    logger.info("Shutdown complete.")


# ══════════════════════════════════════════════════════════════════════════
# Exception Handlers
# ══════════════════════════════════════════════════════════════════════════

def _request_id(request: Request) -> str:
    return getattr(request.state, "request_id", "") or request_id_var.get("")


def _error_response(status_code: int, message: str) -> JSONResponse:
    """The {status, message} envelope shared by every error response."""
    return JSONResponse(
        status_code=status_code,
        content={
            "status": "error" if status_code >= 500 else "fail",
            "message": message,
        },
    )


def _describe_validation_errors(exc: RequestValidationError) -> str:
    parts = []
    for error in exc.errors():
        location = ".".join(str(item) for item in error.get("loc", ()) if item != "body")
        parts.append(f"{location}: {error.get('msg')}" if location else str(error.get("msg")))
    return "; ".join(parts) or "Invalid request"


def register_exception_handlers(app: FastAPI) -> None:
    """
    Map exception types to HTTP status codes and the shared error envelope.

    Handler hierarchy:
        NotesAPIError subclasses → exc.status_code (404, 409, 422, 500)
        RequestValidationError   → 422 (malformed JSON, bad UUID, bad query params)
        HTTPException            → its own status (unknown route, wrong method)
        Exception (fallback)     → 500

    Store error details are logged server-side and never returned.
    """

    @app.exception_handler(NotesAPIError)
    async def handle_notes_api_error(request: Request, exc: NotesAPIError):
        rid = _request_id(request)
        if isinstance(exc, StoreError):
            logger.error("[%s] Store error: %s | Context: %s", rid, exc.message, exc.context)
        else:
            logger.info("[%s] %s: %s", rid, type(exc).__name__, exc.message)
        return _error_response(exc.status_code, exc.message)

    @app.exception_handler(RequestValidationError)
    async def handle_request_validation_error(request: Request, exc: RequestValidationError):
        message = _describe_validation_errors(exc)
        logger.info("[%s] Request validation error: %s", _request_id(request), message)
        return _error_response(422, message)

    @app.exception_handler(StarletteHTTPException)
    async def handle_http_exception(request: Request, exc: StarletteHTTPException):
        response = _error_response(exc.status_code, str(exc.detail))
        if exc.headers:
            response.headers.update(exc.headers)
        return response

    @app.exception_handler(Exception)
    async def handle_unexpected_error(request: Request, exc: Exception):
        logger.error(
            "[%s] Unexpected error: %s",
            _request_id(request),
            str(exc),
            exc_info=exc,
        )
        return _error_response(500, "An unexpected error occurred. Please try again later.")


# ══════════════════════════════════════════════════════════════════════════
# Application Factory
# ══════════════════════════════════════════════════════════════════════════

def create_app(
    settings: Optional[Settings] = None,
    engine: Optional[AsyncEngine] = None,
) -> FastAPI:
    """
    Create and configure the FastAPI application.

    Args:
        settings: Defaults to get_settings() (environment / .env)
        engine:   Defaults to a new pooled engine for settings.database_url.
                  Creating the engine does not connect; the lifespan does.

    Returns: Fully configured FastAPI instance ready to receive requests.
    """
    settings = settings or get_settings()
    engine = engine or build_engine(settings)

    app = FastAPI(
        title="Notes API",
        description="CRUD API for notes backed by a single relational table.",
        version=__version__,
        lifespan=lifespan,
    )

    # Process-wide resources; sessions are drawn per request in get_db_session()
    app.state.settings = settings
    app.state.engine = engine
    app.state.session_factory = build_session_factory(engine)

    # ── Register Middleware ───────────────────────────────────────────────
    # Executes in REVERSE order of addition: RequestID → Logging → CORS
    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origins_list,
        allow_credentials=True,
        allow_methods=["GET", "POST", "PATCH", "DELETE"],
        allow_headers=["Authorization", "Accept", "Content-Type"],
        expose_headers=["X-Request-ID"],
    )
    app.add_middleware(RequestLoggingMiddleware)
    app.add_middleware(RequestIDMiddleware)

    # ── Register Exception Handlers ───────────────────────────────────────
    register_exception_handlers(app)

    # ── Register Routes ───────────────────────────────────────────────────
    app.include_router(notes.router)
    app.include_router(health.router)

    return app


# ── Application Instance ─────────────────────────────────────────────────
# uvicorn expects `notes_api.main:app` to be importable
app = create_app()
