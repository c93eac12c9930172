"""FastAPI middleware for request tracing, error handling, and CORS.

Middleware stack (applied bottom-up):
    1. RequestIDMiddleware - injects X-Request-ID into every request/response
    2. ErrorHandlerMiddleware - catches domain exceptions -> structured JSON errors
    3. CORSMiddleware - handles the browser front-end
"""

from __future__ import annotations

import uuid
from typing import TYPE_CHECKING

import structlog
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from starlette.middleware.base import BaseHTTPMiddleware, RequestResponseEndpoint

from geodomain.domain.exceptions import (
    ConflictError,
    DuplicateOperationError,
    ForbiddenError,
    GeoDomainError,
    InvalidStateError,
    InvalidTransitionError,
    NotFoundError,
    ServiceUnavailableError,
    UnauthorizedError,
    ValidationError,
)

if TYPE_CHECKING:
    from fastapi import FastAPI, Request, Response

logger = structlog.get_logger(__name__)

# Most specific first; the first isinstance match wins.
STATUS_BY_ERROR: tuple[tuple[type[GeoDomainError], int], ...] = (
    (NotFoundError, 404),
    (UnauthorizedError, 401),
    (ForbiddenError, 403),
    (ConflictError, 409),
    (InvalidStateError, 409),
    (InvalidTransitionError, 409),
    (DuplicateOperationError, 409),
    (ValidationError, 400),
    (ServiceUnavailableError, 503),
)


def status_for(exc: GeoDomainError) -> int:
    for error_cls, status_code in STATUS_BY_ERROR:
        if isinstance(exc, error_cls):
            return status_code
    return 400


# ---------------------------------------------------------------------------
# 1. Request ID Middleware
# ---------------------------------------------------------------------------
class RequestIDMiddleware(BaseHTTPMiddleware):
    """Inject a unique X-Request-ID into every request for log correlation."""

    async def dispatch(
        self, request: Request, call_next: RequestResponseEndpoint
    ) -> Response:
        # Use client-provided ID or generate one
        request_id = request.headers.get("X-Request-ID", str(uuid.uuid4()))

        # Bind to structlog context for all log entries in this request
        structlog.contextvars.clear_contextvars()
        structlog.contextvars.bind_contextvars(request_id=request_id)

        response = await call_next(request)
        response.headers["X-Request-ID"] = request_id
        return response


# ---------------------------------------------------------------------------
# 2. Error Handler Middleware
# ---------------------------------------------------------------------------
class ErrorHandlerMiddleware(BaseHTTPMiddleware):
    """Catch domain exceptions and return structured JSON error responses."""

    async def dispatch(
        self, request: Request, call_next: RequestResponseEndpoint
    ) -> Response:
        try:
            return await call_next(request)
        except InvalidTransitionError as exc:
            logger.warning(
                "state_machine.invalid_transition",
                current=exc.current_state,
                attempted=exc.attempted,
            )
            return _error_response(exc)
        except GeoDomainError as exc:
            status_code = status_for(exc)
            log = logger.error if status_code >= 500 else logger.warning
            log("domain.error", error=exc.message, code=exc.code, status=status_code)
            return _error_response(exc, status_code)
        except Exception as exc:
            logger.exception("unhandled.error", error=str(exc))
            return JSONResponse(
                status_code=500,
                content={
                    "error": "INTERNAL_SERVER_ERROR",
                    "message": "An unexpected error occurred",
                },
            )


def _error_response(exc: GeoDomainError, status_code: int | None = None) -> JSONResponse:
    return JSONResponse(
        status_code=status_code or status_for(exc),
        content={"error": exc.code, "message": exc.message},
    )


# ---------------------------------------------------------------------------
# Setup function
# ---------------------------------------------------------------------------
def setup_middleware(app: FastAPI) -> None:
    """Register all middleware on the FastAPI application.

    Order matters - middleware is applied bottom-up, so the last added
    middleware runs first.
    """
    # CORS (runs first)
    app.add_middleware(
        CORSMiddleware,
        allow_origins=["*"],  # Tighten in production
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    # Error handling (runs second)
    app.add_middleware(ErrorHandlerMiddleware)

    # Request ID (runs last = outermost)
    app.add_middleware(RequestIDMiddleware)
