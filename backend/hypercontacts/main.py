"""
Hypercontacts — FastAPI Application Factory
============================================

What:  Creates and configures the FastAPI application instance.
Why:   Centralizes middleware registration, route mounting, exception
       handling, and lifecycle management in one place.
How:   Factory pattern: create_app() returns a configured FastAPI instance.
Who:   Called by uvicorn (uvicorn hypercontacts.main:app).

Application Architecture:
    ┌──────────────────────────────────────────────────────┐
    │                    FastAPI App                       │
    │                                                      │
    │  Middleware: Request ID → Logging → Session → GZip   │
    │                                                      │
    │  Routes:                                             │
    │  ┌──────────────┐ ┌───────────────┐ ┌─────────────┐  │
    │  │ /contacts/*  │ │ /api/v1/*     │ │ /health     │  │
    │  │ HTML + htmx  │ │ JSON          │ │             │  │
    │  └──────────────┘ └───────────────┘ └─────────────┘  │
    │                                                      │
    │  Exception Handlers:                                 │
    │  ValidationError→400 │ NotFound→404 │ DB/other→500   │
    └──────────────────────────────────────────────────────┘

Lifecycle:
    Startup:  logging → settings check → create tables (optional)
    Shutdown: dispose database engine
"""

import logging
import sys
from contextlib import asynccontextmanager
from typing import AsyncGenerator

from fastapi import FastAPI, Request
from fastapi.middleware.gzip import GZipMiddleware
from fastapi.responses import JSONResponse, PlainTextResponse, Response
from sqlalchemy.exc import SQLAlchemyError
from starlette.middleware.sessions import SessionMiddleware

from hypercontacts import __version__
from hypercontacts.config import settings
from hypercontacts.database import create_tables, dispose_engine
from hypercontacts.exceptions import (
    DatabaseError,
    NotFoundError,
    ValidationError,
)
from hypercontacts.middleware.logging import RequestLoggingMiddleware
from hypercontacts.middleware.request_id import RequestIDMiddleware, request_id_var
from hypercontacts.routes import api, contacts, health

logger = logging.getLogger(__name__)

API_PREFIX = "/api/"
INTERNAL_ERROR_MESSAGE = "An internal error occurred. Please try again later."


# ══════════════════════════════════════════════════════════════════════════
# Logging Configuration
# ══════════════════════════════════════════════════════════════════════════

def setup_logging() -> None:
    """
    Configure logging for the entire application.

    Format: %(asctime)s [%(levelname)s] %(name)s: %(message)s
    Called once during startup, before any other initialization.
    """
    logging.basicConfig(
        level=getattr(logging, settings.log_level, logging.INFO),
        format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
        datefmt="%Y-%m-%dT%H:%M:%S",
        handlers=[logging.StreamHandler(sys.stdout)],
        force=True,
    )

    logging.getLogger("uvicorn.access").setLevel(logging.WARNING)
    logging.getLogger("sqlalchemy.engine").setLevel(logging.WARNING)


# ══════════════════════════════════════════════════════════════════════════
# Application Lifespan (Startup & Shutdown)
# ══════════════════════════════════════════════════════════════════════════

@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
    setup_logging()
    logger.info("Hypercontacts %s starting up...", __version__)

    try:
        settings.validate_required_for_production()
    except ValueError as e:
        # Development can run with defaults; production logs say why not to
        logger.warning("%s", str(e))

    if settings.db_create_tables:
        await create_tables()
        logger.info("Contacts table ready")

    logger.info("Server ready at http://%s:%d", settings.backend_host, settings.backend_port)

    yield

    logger.info("Hypercontacts shutting down...")
    await dispose_engine()
    logger.info("Shutdown complete.")


# ══════════════════════════════════════════════════════════════════════════
# Exception Handlers
# ══════════════════════════════════════════════════════════════════════════

def _internal_error(request: Request) -> Response:
    """
    The one 500 response both surfaces share.

    JSON under /api/, plain text for the HTML pages. Never any detail.
    """
    rid = request_id_var.get("")
    if request.url.path.startswith(API_PREFIX):
        return JSONResponse(
            status_code=500,
            content={
                "error": "server_error",
                "message": INTERNAL_ERROR_MESSAGE,
                "request_id": rid,
            },
        )
    return PlainTextResponse(INTERNAL_ERROR_MESSAGE, status_code=500)


def register_exception_handlers(app: FastAPI) -> None:
    """
    Map exception types to HTTP responses.

    Handler hierarchy:
        ValidationError → 400 (JSON API business rule)
        NotFoundError   → 404 (JSON API lookup)
        DatabaseError   → 500 (query failed inside a service)
        SQLAlchemyError → 500 (failed commit or pool acquisition outside a service)
        Exception       → 500 (anything unexpected)

    Details go to the log, keyed by request id; responses carry none.
    """

    @app.exception_handler(ValidationError)
    async def handle_validation_error(request: Request, exc: ValidationError):
        rid = request_id_var.get("")
        logger.info("[%s] Validation error: %s", rid, exc.message)
        return JSONResponse(
            status_code=400,
            content={
                "error": "validation_error",
                "message": exc.message,
                "details": exc.context,
                "request_id": rid,
            },
        )

    @app.exception_handler(NotFoundError)
    async def handle_not_found(request: Request, exc: NotFoundError):
        rid = request_id_var.get("")
        return JSONResponse(
            status_code=404,
            content={
                "error": "not_found",
                "message": exc.message,
                "request_id": rid,
            },
        )

    @app.exception_handler(DatabaseError)
    async def handle_database_error(request: Request, exc: DatabaseError):
        rid = request_id_var.get("")
        logger.error("[%s] Database error: %s | Context: %s", rid, exc.message, exc.context)
        return _internal_error(request)

    @app.exception_handler(SQLAlchemyError)
    async def handle_sqlalchemy_error(request: Request, exc: SQLAlchemyError):
        rid = request_id_var.get("")
        logger.error("[%s] Unhandled database error: %s", rid, str(exc), exc_info=exc)
        return _internal_error(request)

    @app.exception_handler(Exception)
    async def handle_unexpected_error(request: Request, exc: Exception):
        rid = request_id_var.get("")
        logger.error("[%s] Unexpected error: %s", rid, str(exc), exc_info=exc)
        return _internal_error(request)


# ══════════════════════════════════════════════════════════════════════════
# Application Factory
# ══════════════════════════════════════════════════════════════════════════

def create_app() -> FastAPI:
    """
    Create and configure the FastAPI application.

    Returns: Fully configured FastAPI instance ready to receive requests.
    """
    app = FastAPI(
        title="Hypercontacts",
        description=(
            "Contacts manager with a hypermedia HTML interface and a JSON API "
            "over the same records."
        ),
        version=__version__,
        docs_url="/docs",
        redoc_url="/redoc",
        openapi_url="/openapi.json",
        lifespan=lifespan,
    )

    # Middleware executes in REVERSE order of addition (last added = outermost)
    app.add_middleware(GZipMiddleware, minimum_size=500)

    # Signed cookie holding flash messages between a redirect and the next page
    app.add_middleware(
        SessionMiddleware,
        secret_key=settings.session_secret_key,
        session_cookie=settings.flash_cookie_name,
        same_site="lax",
    )

    app.add_middleware(RequestLoggingMiddleware)
    app.add_middleware(RequestIDMiddleware)

    register_exception_handlers(app)

    app.include_router(contacts.router)
    app.include_router(api.router)
    app.include_router(health.router)

    return app


app = create_app()
