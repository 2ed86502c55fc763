"""
Domain errors and standardized error responses.

Every failure the sequencer, the analysis pipeline and the stores can
surface is a DropJournalError subclass carrying an ErrorCode and an HTTP
status. The API layer turns them into one JSON envelope:

    {"error": {"code": "...", "message": "...", "details": {...}, "correlation_id": "..."}}

Usage:
    from dropjournal.shared.errors import GenerationFailed, NotFound

    raise NotFound("Analysis not found", resource_type="analysis", resource_id=7)
"""

import logging
from enum import Enum
from typing import Any, Optional

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from pydantic import BaseModel

logger = logging.getLogger("DropJournal.Errors")


class ErrorCode(str, Enum):
    """Error codes exposed to API clients."""

    # Client errors (4xx)
    VALIDATION_ERROR = "VALIDATION_ERROR"
    INVALID_ARGUMENT = "INVALID_ARGUMENT"
    INSUFFICIENT_ENTRIES = "INSUFFICIENT_ENTRIES"
    NOT_FOUND = "NOT_FOUND"
    UNAUTHORIZED = "UNAUTHORIZED"
    FORBIDDEN = "FORBIDDEN"
    CONFLICT = "CONFLICT"

    # Server errors (5xx)
    INTERNAL_ERROR = "INTERNAL_ERROR"
    SERVICE_UNAVAILABLE = "SERVICE_UNAVAILABLE"
    SOURCE_UNAVAILABLE = "SOURCE_UNAVAILABLE"
    SOURCE_EXHAUSTED = "SOURCE_EXHAUSTED"
    GENERATION_FAILED = "GENERATION_FAILED"
    EXTERNAL_SERVICE_ERROR = "EXTERNAL_SERVICE_ERROR"


class ErrorDetail(BaseModel):
    """Structured error detail model."""
    code: str
    message: str
    details: Optional[dict[str, Any]] = None
    correlation_id: Optional[str] = None


class ErrorResponse(BaseModel):
    """Standard error response wrapper."""
    error: ErrorDetail


# =============================================================================
# DOMAIN EXCEPTIONS
# =============================================================================

class DropJournalError(Exception):
    """Base class for errors that map onto an API error response."""

    code: ErrorCode = ErrorCode.INTERNAL_ERROR
    status_code: int = 500

    def __init__(self, message: str, details: Optional[dict[str, Any]] = None):
        super().__init__(message)
        self.message = message
        self.details = details


class InvalidArgument(DropJournalError):
    """A caller supplied a value outside the accepted domain."""
    code = ErrorCode.INVALID_ARGUMENT
    status_code = 400


class NotFound(DropJournalError):
    """Entity absent, or not owned by the caller. The two are indistinguishable."""
    code = ErrorCode.NOT_FOUND
    status_code = 404

    def __init__(
        self,
        message: str,
        resource_type: Optional[str] = None,
        resource_id: Optional[Any] = None,
    ):
        details = {}
        if resource_type:
            details["resource_type"] = resource_type
        if resource_id is not None:
            details["resource_id"] = str(resource_id)
        super().__init__(message, details or None)


class SourceUnavailable(DropJournalError):
    """Question source could not be reached or returned a malformed response."""
    code = ErrorCode.SOURCE_UNAVAILABLE
    status_code = 503


class SourceExhausted(DropJournalError):
    """No question matches the cursor even after wrapping back to 1."""
    code = ErrorCode.SOURCE_EXHAUSTED
    status_code = 503


class ServiceUnavailable(DropJournalError):
    """Store or transport failure; the operation is safe to retry."""
    code = ErrorCode.SERVICE_UNAVAILABLE
    status_code = 503


class GenerationFailed(DropJournalError):
    """Text generation failed or timed out; nothing was committed."""
    code = ErrorCode.GENERATION_FAILED
    status_code = 502


class BacklogConflict(DropJournalError):
    """The store refused a commit because part of the batch was already analyzed."""
    code = ErrorCode.CONFLICT
    status_code = 409


class TranscriptionFailed(DropJournalError):
    """Speech-to-text provider failed."""
    code = ErrorCode.EXTERNAL_SERVICE_ERROR
    status_code = 502


class Unauthorized(DropJournalError):
    code = ErrorCode.UNAUTHORIZED
    status_code = 401


class Forbidden(DropJournalError):
    code = ErrorCode.FORBIDDEN
    status_code = 403


# =============================================================================
# RESPONSE HELPERS
# =============================================================================

def get_correlation_id(request: Optional[Request] = None) -> Optional[str]:
    """Extract correlation ID from request state."""
    if request is None:
        return None
    return getattr(request.state, "correlation_id", None)


def error_response(
    code: ErrorCode,
    message: str,
    status_code: int,
    details: Optional[dict[str, Any]] = None,
    correlation_id: Optional[str] = None,
) -> JSONResponse:
    """
    Create a standardized JSON error response.

    Args:
        code: Error code from ErrorCode enum
        message: Human-readable error message
        status_code: HTTP status code
        details: Optional additional error details
        correlation_id: Request correlation ID for tracing

    Returns:
        JSONResponse with standardized error format
    """
    error_detail = ErrorDetail(
        code=code.value,
        message=message,
        details=details,
        correlation_id=correlation_id,
    )
    return JSONResponse(
        status_code=status_code,
        content={"error": error_detail.model_dump(exclude_none=True)},
    )


def register_exception_handlers(app: FastAPI) -> None:
    """Install handlers translating domain and validation errors into the envelope."""

    @app.exception_handler(DropJournalError)
    async def _handle_domain_error(request: Request, exc: DropJournalError) -> JSONResponse:
        if exc.status_code >= 500:
            logger.warning(f"{exc.code.value} on {request.url.path}: {exc.message}")
        return error_response(
            code=exc.code,
            message=exc.message,
            status_code=exc.status_code,
            details=exc.details,
            correlation_id=get_correlation_id(request),
        )

    @app.exception_handler(RequestValidationError)
    async def _handle_validation_error(request: Request, exc: RequestValidationError) -> JSONResponse:
        return error_response(
            code=ErrorCode.VALIDATION_ERROR,
            message="Invalid request",
            status_code=400,
            details={"errors": [
                {"loc": list(err.get("loc", [])), "msg": err.get("msg", "")}
                for err in exc.errors()
            ]},
            correlation_id=get_correlation_id(request),
        )
