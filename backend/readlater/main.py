"""
Readlater Backend — FastAPI Application Factory
=================================================

What:  Assembles configuration, database, services, middleware, routes and
       exception handlers into one FastAPI application.
How:   create_app() loads the config once, builds the engine and the
       Services bundle eagerly and keeps them on app.state. The lifespan
       only configures logging and releases resources on shutdown.
Who:   uvicorn, in factory mode:

    uvicorn readlater.main:create_app --factory --host 0.0.0.0 --port 8000

Application Architecture:
    ┌──────────────────────────────────────────────────────────┐
    │  Middleware:  Request ID → Access Log → CORS → GZip       │
    │                                                          │
    │  Routes:                                                 │
    │    POST /svc/following/save      (shared-secret token)    │
    │    POST /api/links/archive       (bearer JWT)             │
    │    /api/rules, /api/device-tokens (bearer JWT)            │
    │    GET  /health                                          │
    │                                                          │
    │  Exception Handlers:                                     │
    │    ValidationError→400  Unauthorized→401  NotFound→404    │
    │    DatabaseError / SQLAlchemyError / Exception→500       │
    └──────────────────────────────────────────────────────────┘
"""

import logging
import sys
from contextlib import asynccontextmanager
from typing import AsyncGenerator, Optional

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.middleware.gzip import GZipMiddleware
from fastapi.responses import JSONResponse
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncEngine

from readlater import __version__
from readlater.config import AppConfig, load_config
from readlater.database import create_engine_from_config, dispose_engine
from readlater.dependencies import build_services
from readlater.exceptions import (
    DatabaseError,
    NotFoundError,
    ReadlaterError,
    UnauthorizedError,
    ValidationError,
)
from readlater.middleware.logging import RequestLoggingMiddleware
from readlater.middleware.request_id import RequestIDMiddleware, request_id_var
from readlater.routes import device_tokens, following, health, links, rules
from readlater.services.analytics import AnalyticsClient

logger = logging.getLogger(__name__)


# ══════════════════════════════════════════════════════════════════════════
# Logging
# ══════════════════════════════════════════════════════════════════════════

def setup_logging(level: str = "INFO") -> None:
    """
    Configure the root logger once for the process.

    Format: 2024-01-15T12:00:00 [INFO] readlater.services.rule_service: ...
    """
    logging.basicConfig(
        level=getattr(logging, level, logging.INFO),
        format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
        datefmt="%Y-%m-%dT%H:%M:%S",
        handlers=[logging.StreamHandler(sys.stdout)],
        force=True,
    )

    # Per-request/per-statement chatter from third-party libraries
    logging.getLogger("uvicorn.access").setLevel(logging.WARNING)
    logging.getLogger("sqlalchemy.engine").setLevel(logging.WARNING)
    logging.getLogger("httpcore").setLevel(logging.WARNING)
    logging.getLogger("httpx").setLevel(logging.WARNING)


# ══════════════════════════════════════════════════════════════════════════
# Lifespan
# ══════════════════════════════════════════════════════════════════════════

@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
    config: AppConfig = app.state.config
    setup_logging(config.runtime.log_level)
    logger.info("Readlater API %s starting (env=%s, instance=%s)",
                __version__, config.server.api_env, config.server.instance_id)
    if not app.state.services.analytics.enabled:
        logger.info("SEGMENT_WRITE_KEY is empty; analytics events will be dropped")

    yield

    logger.info("Readlater API shutting down...")
    await app.state.services.analytics.aclose()
    await dispose_engine(app.state.engine)
    logger.info("Shutdown complete.")


# ══════════════════════════════════════════════════════════════════════════
# Exception Handlers
# ══════════════════════════════════════════════════════════════════════════

def _error_body(error: str, message: str, details: Optional[dict] = None) -> dict:
    body = {"error": error, "message": message, "request_id": request_id_var.get("")}
    if details:
        body["details"] = details
    return body


def register_exception_handlers(app: FastAPI) -> None:
    """
    Map exception types to HTTP responses.

        ValidationError     → 400
        UnauthorizedError   → 401
        NotFoundError       → 404
        DatabaseError       → 500
        SQLAlchemyError     → 500 (raw driver/ORM failure reaching the edge)
        ReadlaterError      → 500
        Exception           → 500

    Response bodies never contain stack traces or SQL; those are logged.
    """

    @app.exception_handler(ValidationError)
    async def handle_validation_error(request: Request, exc: ValidationError):
        logger.warning("[%s] Validation error: %s", request_id_var.get(""), exc.message)
        return JSONResponse(
            status_code=400,
            content=_error_body("validation_error", exc.message, exc.context),
        )

    @app.exception_handler(UnauthorizedError)
    async def handle_unauthorized(request: Request, exc: UnauthorizedError):
        return JSONResponse(
            status_code=401,
            content=_error_body("unauthorized", exc.message),
            headers={"WWW-Authenticate": "Bearer"},
        )

    @app.exception_handler(NotFoundError)
    async def handle_not_found(request: Request, exc: NotFoundError):
        return JSONResponse(
            status_code=404,
            content=_error_body("not_found", exc.message),
        )

    @app.exception_handler(DatabaseError)
    async def handle_database_error(request: Request, exc: DatabaseError):
        logger.error("[%s] Database error: %s | Context: %s",
                     request_id_var.get(""), exc.message, exc.context)
        return JSONResponse(
            status_code=500,
            content=_error_body("server_error", "An internal error occurred. Please try again later."),
        )

    @app.exception_handler(SQLAlchemyError)
    async def handle_sqlalchemy_error(request: Request, exc: SQLAlchemyError):
        logger.error("[%s] Unhandled database error: %s",
                     request_id_var.get(""), type(exc).__name__, exc_info=exc)
        return JSONResponse(
            status_code=500,
            content=_error_body("server_error", "An internal error occurred. Please try again later."),
        )

    @app.exception_handler(ReadlaterError)
    async def handle_readlater_error(request: Request, exc: ReadlaterError):
        logger.error("[%s] %s: %s", request_id_var.get(""), type(exc).__name__, exc.message)
        return JSONResponse(
            status_code=500,
            content=_error_body("server_error", exc.message),
        )

    @app.exception_handler(Exception)
    async def handle_unexpected_error(request: Request, exc: Exception):
        logger.error("[%s] Unexpected error: %s", request_id_var.get(""), str(exc), exc_info=True)
        return JSONResponse(
            status_code=500,
            content=_error_body(
                "internal_server_error",
                "An unexpected error occurred. Please try again or contact support.",
            ),
        )


# ══════════════════════════════════════════════════════════════════════════
# Application Factory
# ══════════════════════════════════════════════════════════════════════════

def create_app(
    config: Optional[AppConfig] = None,
    *,
    engine: Optional[AsyncEngine] = None,
    analytics: Optional[AnalyticsClient] = None,
) -> FastAPI:
    """
    Build the application.

    Args:
        config: Defaults to load_config() over the process environment.
        engine: Defaults to an engine built from config (tests pass SQLite).
        analytics: Defaults to a Segment client keyed by SEGMENT_WRITE_KEY.

    Raises:
        ConfigurationError: A required environment variable is missing.
    """
    config = config or load_config()
    engine = engine or create_engine_from_config(config)
    analytics = analytics or AnalyticsClient(
        write_key=config.segment.write_key,
        endpoint=config.runtime.analytics_endpoint,
        timeout=config.runtime.analytics_timeout,
    )

    app = FastAPI(
        title="Readlater API",
        description="Read-it-later library backend: links, rules, device tokens and following feeds.",
        version=__version__,
        lifespan=lifespan,
    )
    app.state.config = config
    app.state.engine = engine
    app.state.services = build_services(config, engine, analytics)

    # Added in reverse: the last one added runs first
    app.add_middleware(
        CORSMiddleware,
        allow_origins=config.runtime.cors_origins_list,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
        expose_headers=["X-Request-ID"],
    )
    app.add_middleware(GZipMiddleware, minimum_size=500)
    app.add_middleware(RequestLoggingMiddleware)
    app.add_middleware(RequestIDMiddleware)

    register_exception_handlers(app)

    app.include_router(following.router)
    app.include_router(links.router)
    app.include_router(rules.router)
    app.include_router(device_tokens.router)
    app.include_router(health.router)

    return app
