"""
api/main.py -- FastAPI application entry points for channelsync.

Two apps share one identity store:

  app        -- public API: identity resolution and channel authorization.
  admin_app  -- user management. Carries no HTTP auth of its own, so it must
                be bound to a private interface (localhost or an admin network).

Run with:  uvicorn api.main:app --port 4984
           uvicorn api.main:admin_app --host 127.0.0.1 --port 4985

Lifespan handles startup (store + Authenticator on app.state) and shutdown
(close the store) symmetrically.
"""

from __future__ import annotations

import logging
import time
from collections.abc import AsyncIterator
from contextlib import asynccontextmanager

from fastapi import FastAPI, HTTPException, Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse

from api.models import ErrorDetail, ErrorResponse, HealthResponse
from api.routes.v1.access import router as access_router
from api.routes.v1.users import router as users_router
from auth.authenticator import Authenticator
from core.config import get_settings
from core.errors import AuthenticationRequired, HTTPError
from store.documents import SQLDocumentStore

_VERSION = "0.1.0"

# ---------------------------------------------------------------------------
# Logging
# ---------------------------------------------------------------------------

logging.basicConfig(
    level=get_settings().log_level.upper(),
    format="%(asctime)s %(levelname)-5s %(name)s %(message)s",
    datefmt="%Y-%m-%d %H:%M:%S",
)
logger = logging.getLogger("channelsync.api")


# ---------------------------------------------------------------------------
# Lifespan -- modern startup / shutdown pattern (replaces @app.on_event)
# ---------------------------------------------------------------------------


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncIterator[None]:
    """Open the document store and wire the Authenticator onto app.state."""
    settings = get_settings()
    app.state.store = SQLDocumentStore(settings.store_url)
    app.state.authenticator = Authenticator(app.state.store, key_prefix=settings.user_key_prefix)
    logger.info(
        "%s starting up (access_control=%s)",
        app.title,
        settings.access_control_enabled,
    )

    yield

    app.state.store.close()
    logger.info("%s shutdown complete", app.title)


# ---------------------------------------------------------------------------
# Middleware and exception handlers
#
# Shared by both apps. All handlers return the same ErrorResponse envelope so
# clients can parse errors uniformly without inspecting status codes to
# choose a schema.
# ---------------------------------------------------------------------------


async def log_requests(request: Request, call_next):
    start = time.perf_counter()
    response = await call_next(request)
    ms = (time.perf_counter() - start) * 1000
    logger.info(
        "%s %s %d %.1fms %s",
        request.method,
        request.url.path,
        response.status_code,
        ms,
        request.client.host if request.client else "unknown",
    )
    return response


async def channelsync_error_handler(request: Request, exc: HTTPError) -> JSONResponse:
    """Map auth/ and store/ errors onto their HTTP status class.

    StoreError details stay in the log: the client only learns that the
    store failed. A 401 carries a Basic challenge so clients know how to log in.
    """
    if exc.status_code >= 500:
        logger.error("%s on %s %s: %s", type(exc).__name__, request.method, request.url.path, exc.message)
        message = "The identity store is unavailable."
    else:
        message = exc.message
    response = JSONResponse(
        status_code=exc.status_code,
        content=ErrorResponse(error=ErrorDetail(code=exc.code, message=message)).model_dump(),
    )
    if isinstance(exc, AuthenticationRequired):
        response.headers["WWW-Authenticate"] = 'Basic realm="channelsync"'
    return response


async def validation_error_handler(request: Request, exc: RequestValidationError) -> JSONResponse:
    """Return 422 with structured error when request body or query params fail validation."""
    return JSONResponse(
        status_code=422,
        content=ErrorResponse(
            error=ErrorDetail(
                code="validation_error",
                message="Request validation failed.",
                detail=str(exc.errors()),
            )
        ).model_dump(),
    )


async def http_exception_handler(request: Request, exc: HTTPException) -> JSONResponse:
    """Return a structured error for FastAPI/Starlette HTTP exceptions (404 routes, 405, ...)."""
    return JSONResponse(
        status_code=exc.status_code,
        content=ErrorResponse(
            error=ErrorDetail(
                code=f"http_{exc.status_code}",
                message=str(exc.detail),
            )
        ).model_dump(),
    )


async def generic_exception_handler(request: Request, exc: Exception) -> JSONResponse:
    """Catch-all handler for unexpected server errors.

    The raw exception goes to the log only, never to the response body.
    """
    logger.exception("Unhandled exception on %s %s", request.method, request.url.path)
    return JSONResponse(
        status_code=500,
        content=ErrorResponse(
            error=ErrorDetail(
                code="internal_error",
                message="An unexpected error occurred.",
            )
        ).model_dump(),
    )


async def health() -> HealthResponse:
    """Return API liveness and current version."""
    return HealthResponse(version=_VERSION)


def _build_app(title: str, description: str) -> FastAPI:
    application = FastAPI(title=title, description=description, version=_VERSION, lifespan=lifespan)
    application.middleware("http")(log_requests)
    application.add_exception_handler(HTTPError, channelsync_error_handler)
    application.add_exception_handler(RequestValidationError, validation_error_handler)
    application.add_exception_handler(HTTPException, http_exception_handler)
    application.add_exception_handler(Exception, generic_exception_handler)
    # No auth on health -- load balancers and monitoring must reach it.
    application.add_api_route("/api/v1/health", health, methods=["GET"], response_model=HealthResponse, tags=["Health"])
    return application


# ---------------------------------------------------------------------------
# App instantiation
# ---------------------------------------------------------------------------

app = _build_app(
    "channelsync API",
    "Identity resolution and channel authorization for document sync.",
)
app.include_router(access_router, prefix="/api/v1", tags=["Access"])

admin_app = _build_app(
    "channelsync Admin API",
    "User and guest management. Bind to a private interface only.",
)
admin_app.include_router(users_router, prefix="/api/v1", tags=["Users"])
