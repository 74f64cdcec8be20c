"""API middleware: CORS, request logging, and error mapping.

Provides helper functions and middleware classes to configure cross-origin
resource sharing, structured request logging (via structlog), and the
conversion of ``GameScoutError`` subclasses into JSON ``ErrorResponse``
bodies with an HTTP status that matches the failure.

# ─── EXECUTION ORDER ──────────────────────────────────────────────────
#
#   Client → RequestLogging → CORS → ExceptionMiddleware → route handler
#
# Domain errors are turned into responses by exception handlers
# registered on the app (configure_error_handlers), so
# RequestLoggingMiddleware sees the final status code (401, 503, ...).
# ──────────────────────────────────────────────────────────────────────
"""

from __future__ import annotations

import time

import structlog
from fastapi import FastAPI, Request, Response
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from starlette.middleware.base import BaseHTTPMiddleware, RequestResponseEndpoint

from src.api.schemas import ErrorResponse
from src.utils.errors import (
    GameScoutError,
    GenerationParseError,
    GenerationUnavailableError,
    ProfileConflictError,
    UnauthenticatedError,
    UpstreamUnavailableError,
)
from src.utils.logging import get_logger

_logger: structlog.BoundLogger = get_logger(__name__)

# Most specific first; anything else is a 500.
_STATUS_BY_ERROR: tuple[tuple[type[GameScoutError], int], ...] = (
    (UnauthenticatedError, 401),
    (ProfileConflictError, 409),
    (GenerationUnavailableError, 503),
    (GenerationParseError, 503),
    (UpstreamUnavailableError, 502),
)

# Client-caused errors whose own message is safe to return.
_EXPOSED_STATUSES = frozenset({401, 409})

_PUBLIC_MESSAGES: dict[int, str] = {
    503: "Could not generate recommendations right now. Please try again.",
    502: "The game catalog is unavailable right now. Please try again.",
    500: "Something went wrong while processing your request.",
}


def status_for_error(exc: GameScoutError) -> int:
    """Return the HTTP status code for a domain error."""
    for error_type, status_code in _STATUS_BY_ERROR:
        if isinstance(exc, error_type):
            return status_code
    return 500


# ---------------------------------------------------------------------------
# CORS
# ---------------------------------------------------------------------------


def configure_cors(app: FastAPI, *, allowed_origins: list[str] | None = None) -> None:
    """Add CORS middleware to the FastAPI application.

    Defaults to ``["*"]`` for development; production should pass the
    deployed front-end origin.
    """
    origins = allowed_origins or ["*"]
    app.add_middleware(
        CORSMiddleware,
        allow_origins=origins,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )


# ---------------------------------------------------------------------------
# Request Logging
# ---------------------------------------------------------------------------


class RequestLoggingMiddleware(BaseHTTPMiddleware):
    """Log every HTTP request with method, path, status code, and duration."""

    async def dispatch(
        self,
        request: Request,
        call_next: RequestResponseEndpoint,
    ) -> Response:
        start = time.perf_counter()
        response: Response | None = None

        try:
            response = await call_next(request)
            return response
        finally:
            duration_ms = round((time.perf_counter() - start) * 1000, 2)
            status_code = response.status_code if response else 500
            _logger.info(
                "http_request",
                method=request.method,
                path=str(request.url.path),
                status=status_code,
                duration_ms=duration_ms,
            )


# ---------------------------------------------------------------------------
# Error Handling
# ---------------------------------------------------------------------------


async def handle_gamescout_error(request: Request, exc: GameScoutError) -> JSONResponse:
    """Convert a ``GameScoutError`` into a sanitized JSON error response.

    Internal details (provider names, upstream messages) stay in the logs.
    Authentication failures and username conflicts keep their own message;
    every other error returns a fixed user-facing sentence for its status.
    """
    status_code = status_for_error(exc)
    log = _logger.warning if status_code < 500 else _logger.error
    log(
        "application_error",
        error_type=type(exc).__name__,
        message=exc.message,
        provider=exc.provider_name,
        path=str(request.url.path),
        status=status_code,
    )

    if status_code in _EXPOSED_STATUSES:
        detail = exc.message
    else:
        detail = _PUBLIC_MESSAGES.get(status_code)
    body = ErrorResponse(
        error=type(exc).__name__,
        detail=detail,
        retryable=exc.retryable,
    )
    headers = {"WWW-Authenticate": "Bearer"} if status_code == 401 else None
    return JSONResponse(status_code=status_code, content=body.model_dump(), headers=headers)


def configure_error_handlers(app: FastAPI) -> None:
    """Register the domain error handler on *app*."""
    app.add_exception_handler(GameScoutError, handle_gamescout_error)
