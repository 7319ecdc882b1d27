"""
Customer Orders API - FastAPI Application Factory
==================================================

What:  Creates and configures the FastAPI application instance.
How:   create_app() registers middleware, exception handlers and routers;
       the module-level `app` is what uvicorn serves
       (uvicorn orders_api.main:app --port 3000).

Application Architecture:
    ┌─────────────────────────────────────────────────────┐
    │                   FastAPI App                       │
    │                                                     │
    │  Middleware Chain:                                  │
    │  ┌──────────┐ ┌──────────┐ ┌─────────┐ ┌─────────┐  │
    │  │  Req ID  │→│ Logging  │→│ Timeout │→│  CORS   │  │
    │  └──────────┘ └──────────┘ └─────────┘ └─────────┘  │
    │                                                     │
    │  Routes:                                            │
    │  /customers  /customers/{id}/orders[/{order_num}]   │
    │  /health     /docs  /redoc  /openapi.json           │
    │                                                     │
    │  Exception Handlers:                                │
    │  Validation→400 │ NotFound→404 │ Database→500       │
    │  unmatched route / method → 404, empty body         │
    └─────────────────────────────────────────────────────┘

Error body (400 and 500):
    {"errors": [{"msg": str, "value": any | null, "param": str | null}]}
"""

import logging
import sys
from contextlib import asynccontextmanager
from typing import Any, AsyncGenerator, Dict, List

from fastapi import FastAPI, Request, status
from fastapi.encoders import jsonable_encoder
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.middleware.gzip import GZipMiddleware
from fastapi.responses import JSONResponse, Response
from sqlalchemy.engine import make_url
from starlette.exceptions import HTTPException as StarletteHTTPException

from orders_api.config import settings
from orders_api.database import dispose_engine
from orders_api.exceptions import (
    DatabaseError,
    NotFoundError,
    ValidationError,
    violation,
)
from orders_api.middleware.logging import RequestLoggingMiddleware
from orders_api.middleware.request_id import RequestIDMiddleware, request_id_var
from orders_api.middleware.timeout import RequestTimeoutMiddleware
from orders_api.routes import customers, health, orders

logger = logging.getLogger(__name__)


# ══════════════════════════════════════════════════════════════════════════
# Logging Configuration
# ══════════════════════════════════════════════════════════════════════════

def setup_logging() -> None:
    """
    Configure logging for the entire application.

    Format: %(asctime)s [%(levelname)s] %(name)s: %(message)s
    Called once during startup, before anything else logs.
    """
    logging.basicConfig(
        level=getattr(logging, settings.log_level, logging.INFO),
        format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
        datefmt="%Y-%m-%dT%H:%M:%S",
        handlers=[logging.StreamHandler(sys.stdout)],
        force=True,
    )

    # The access middleware already logs every request.
    logging.getLogger("uvicorn.access").setLevel(logging.WARNING)
    logging.getLogger("sqlalchemy.engine").setLevel(logging.WARNING)


# ══════════════════════════════════════════════════════════════════════════
# Application Lifespan
# ══════════════════════════════════════════════════════════════════════════

@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
    """
    Startup: configure logging, announce the database target (password masked).
    Shutdown: dispose the engine so every pooled connection is closed.
    """
    setup_logging()
    logger.info("=" * 60)
    logger.info("%s %s starting up...", settings.api_title, settings.api_version)
    logger.info(
        "Database: %s",
        make_url(settings.database_url).render_as_string(hide_password=True),
    )
    logger.info("Server ready at http://%s:%d", settings.backend_host, settings.backend_port)
    logger.info("API docs: http://%s:%d/docs", settings.backend_host, settings.backend_port)
    logger.info("=" * 60)

    yield

    logger.info("Shutting down...")
    await dispose_engine()
    logger.info("Shutdown complete.")


# ══════════════════════════════════════════════════════════════════════════
# Exception Handlers
# ══════════════════════════════════════════════════════════════════════════

_VALUE_ERROR_PREFIX = "Value error, "


def request_violations(exc: RequestValidationError) -> List[Dict[str, Any]]:
    """
    Flatten FastAPI/pydantic validation errors into violation records.

    - param: the last element of the error location ("id", "ord_amount");
      None for errors about the body as a whole
    - value: the offending input; None for missing fields and whole-body errors
    """
    violations = []
    for err in exc.errors():
        loc = err.get("loc", ())
        whole_body = len(loc) <= 1 or err.get("type") == "json_invalid"
        param = None if whole_body else str(loc[-1])
        value = None if whole_body or err.get("type") == "missing" else err.get("input")

        msg = err.get("msg", "Invalid value")
        if msg.startswith(_VALUE_ERROR_PREFIX):
            msg = msg[len(_VALUE_ERROR_PREFIX):]

        violations.append(violation(msg, value, param))
    return violations


def _errors_response(status_code: int, violations: List[Dict[str, Any]]) -> JSONResponse:
    return JSONResponse(
        status_code=status_code,
        content=jsonable_encoder({"errors": violations}),
    )


def register_exception_handlers(app: FastAPI) -> None:
    """
    Map exception types to HTTP responses.

    Handler table:
        RequestValidationError  → 400, every violation
        ValidationError         → 400, every violation
        NotFoundError           → 404, empty body
        DatabaseError           → 500, single violation with the backend message
        404 / 405 from routing  → 404, empty body
        Exception (fallback)    → 500, single violation
    """

    @app.exception_handler(RequestValidationError)
    async def handle_request_validation_error(request: Request, exc: RequestValidationError):
        violations = request_violations(exc)
        logger.warning(
            "[%s] Validation failed: %s",
            request_id_var.get(""),
            ", ".join(str(v["param"]) for v in violations),
        )
        return _errors_response(status.HTTP_400_BAD_REQUEST, violations)

    @app.exception_handler(ValidationError)
    async def handle_validation_error(request: Request, exc: ValidationError):
        logger.warning("[%s] Validation error: %s", request_id_var.get(""), exc.message)
        return _errors_response(status.HTTP_400_BAD_REQUEST, exc.violations)

    @app.exception_handler(NotFoundError)
    async def handle_not_found(request: Request, exc: NotFoundError):
        logger.info("[%s] %s", request_id_var.get(""), exc.message)
        return Response(status_code=status.HTTP_404_NOT_FOUND)

    @app.exception_handler(DatabaseError)
    async def handle_database_error(request: Request, exc: DatabaseError):
        logger.error(
            "[%s] Database error: %s | Context: %s",
            request_id_var.get(""),
            exc.message,
            exc.context,
        )
        message = exc.message if settings.expose_error_details else "An internal error occurred"
        return _errors_response(status.HTTP_500_INTERNAL_SERVER_ERROR, [violation(message)])

    @app.exception_handler(StarletteHTTPException)
    async def handle_http_exception(request: Request, exc: StarletteHTTPException):
        # Unknown paths and unsupported methods on known paths look the same.
        if exc.status_code in (status.HTTP_404_NOT_FOUND, status.HTTP_405_METHOD_NOT_ALLOWED):
            return Response(status_code=status.HTTP_404_NOT_FOUND)
        return JSONResponse(
            status_code=exc.status_code,
            content={"errors": [violation(str(exc.detail))]},
            headers=getattr(exc, "headers", None),
        )

    @app.exception_handler(Exception)
    async def handle_unexpected_error(request: Request, exc: Exception):
        logger.error(
            "[%s] Unexpected error: %s",
            request_id_var.get(""),
            str(exc),
            exc_info=True,
        )
        message = str(exc) if settings.expose_error_details else "An internal error occurred"
        return _errors_response(status.HTTP_500_INTERNAL_SERVER_ERROR, [violation(message)])


# ══════════════════════════════════════════════════════════════════════════
# Application Factory
# ══════════════════════════════════════════════════════════════════════════

def create_app() -> FastAPI:
    """
    Create and configure the FastAPI application.

    Returns a fresh instance on every call, so tests can build isolated apps
    and override dependencies without touching the module-level `app`.
    """
    app = FastAPI(
        title=settings.api_title,
        description=(
            "A REST interface over customers and their orders: read customers, "
            "and create, read, replace, patch and delete a customer's orders."
        ),
        version=settings.api_version,
        docs_url="/docs",
        redoc_url="/redoc",
        openapi_url="/openapi.json",
        lifespan=lifespan,
    )

    # ── Register Middleware ───────────────────────────────────────────────
    # Last added runs first: RequestID → Logging → Timeout → GZip → CORS.
    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origins_list,
        allow_credentials=False,
        allow_methods=["*"],
        allow_headers=["*"],
        expose_headers=["X-Request-ID", "Location"],
    )
    app.add_middleware(GZipMiddleware, minimum_size=500)
    app.add_middleware(RequestTimeoutMiddleware)
    app.add_middleware(RequestLoggingMiddleware)
    app.add_middleware(RequestIDMiddleware)

    # ── Register Exception Handlers ───────────────────────────────────────
    register_exception_handlers(app)

    # ── Register Routes ───────────────────────────────────────────────────
    app.include_router(customers.router)
    app.include_router(orders.router)
    app.include_router(health.router)

    return app


app = create_app()
