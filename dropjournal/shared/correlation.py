"""
Correlation IDs and request logging.

Every request gets a correlation ID, taken from X-Correlation-ID /
X-Request-ID when the caller sends one and minted otherwise. It lives in
request.state and in a context variable for the duration of the request, so
log records pick it up, and it is echoed on the response. One access-log
line is written per request under DropJournal.Requests.

Usage:
    from dropjournal.shared.correlation import CorrelationMiddleware, get_correlation_id

    app.add_middleware(CorrelationMiddleware)
"""

import contextvars
import logging
import time
import uuid
from typing import Callable, Optional

from starlette.middleware.base import BaseHTTPMiddleware
from starlette.requests import Request
from starlette.responses import Response

logger = logging.getLogger("DropJournal.Requests")

_correlation_id_ctx: contextvars.ContextVar[Optional[str]] = contextvars.ContextVar("correlation_id", default=None)

CORRELATION_HEADERS = ("X-Correlation-ID", "X-Request-ID")
RESPONSE_HEADER = "X-Correlation-ID"

# Uptime probes, excluded from the access log
QUIET_PATHS = frozenset({"/health"})


def get_correlation_id() -> Optional[str]:
    """Correlation ID of the current request context, or None outside a request."""
    return _correlation_id_ctx.get()


def generate_correlation_id() -> str:
    """Short random ID for log correlation."""
    return uuid.uuid4().hex[:8]


def _incoming_correlation_id(request: Request) -> Optional[str]:
    for header in CORRELATION_HEADERS:
        value = request.headers.get(header)
        if value:
            return value
    return None


class CorrelationMiddleware(BaseHTTPMiddleware):
    """Tag each request with a correlation ID and log its outcome."""

    async def dispatch(self, request: Request, call_next: Callable) -> Response:
        correlation_id = _incoming_correlation_id(request) or generate_correlation_id()
        request.state.correlation_id = correlation_id
        token = _correlation_id_ctx.set(correlation_id)
        started = time.perf_counter()

        try:
            response = await call_next(request)
            response.headers[RESPONSE_HEADER] = correlation_id
            if request.url.path not in QUIET_PATHS:
                logger.info(
                    f"{request.method} {request.url.path} -> {response.status_code}",
                    extra={
                        "method": request.method,
                        "path": request.url.path,
                        "status_code": response.status_code,
                        "duration_ms": round((time.perf_counter() - started) * 1000, 1),
                    },
                )
            return response
        finally:
            _correlation_id_ctx.reset(token)


class CorrelationContext:
    """
    Set a correlation ID outside of a request, e.g. in background work or tests.

    Example:
        with CorrelationContext("analysis-user-42"):
            logger.info("Running analysis")
    """

    def __init__(self, correlation_id: Optional[str] = None):
        self.correlation_id = correlation_id or generate_correlation_id()
        self._token: Optional[contextvars.Token] = None

    def __enter__(self) -> str:
        self._token = _correlation_id_ctx.set(self.correlation_id)
        return self.correlation_id

    def __exit__(self, exc_type, exc_val, exc_tb) -> None:
        if self._token is not None:
            _correlation_id_ctx.reset(self._token)
