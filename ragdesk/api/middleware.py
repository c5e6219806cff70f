"""API middleware -- CORS, request logging, and error handling.

Starlette middleware is a stack (last added, first executed).  ``main.py``
adds ErrorHandlingMiddleware first and RequestLoggingMiddleware second, so
request logging sees the final status code after errors were converted.
"""

from __future__ import annotations

import time

import structlog
from fastapi import FastAPI, Request, Response
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from starlette.middleware.base import BaseHTTPMiddleware, RequestResponseEndpoint

from ragdesk.api.schemas import ErrorResponse
from ragdesk.utils.errors import NotFoundError, ProviderUnavailableError, RagDeskError
from ragdesk.utils.logging import get_logger

_logger: structlog.BoundLogger = get_logger(__name__)


# ---------------------------------------------------------------------------
# CORS
# ---------------------------------------------------------------------------


def configure_cors(app: FastAPI, *, allowed_origins: list[str] | None = None) -> None:
    """Add CORS middleware.  Defaults to ``["*"]`` when no origins are configured."""
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


def _status_for(exc: RagDeskError) -> int:
    if isinstance(exc, NotFoundError):
        return 404
    if isinstance(exc, ProviderUnavailableError):
        return 503
    return 500


class ErrorHandlingMiddleware(BaseHTTPMiddleware):
    """Convert ``RagDeskError`` subclasses into :class:`ErrorResponse` JSON.

    Details are logged server-side; the client sees the error class name
    and message only.  Errors raised while an SSE body is already
    streaming never reach this middleware; the chat route turns those
    into ``error`` events itself.
    """

    async def dispatch(
        self,
        request: Request,
        call_next: RequestResponseEndpoint,
    ) -> Response:
        try:
            return await call_next(request)
        except RagDeskError as exc:
            _logger.error(
                "application_error",
                error_type=type(exc).__name__,
                message=exc.message,
                provider=exc.provider_name,
                path=str(request.url.path),
            )
            body = ErrorResponse(
                error=type(exc).__name__,
                detail=exc.message,
            )
            return JSONResponse(
                status_code=_status_for(exc),
                content=body.model_dump(),
            )
