"""
Error envelopes for the HTTP layer.

Every ``/api`` error is returned as ``ApiResponse`` JSON. Internal
details are logged server-side under a correlation ID and never sent to
the client.
"""

import logging
import uuid

from fastapi import Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from models import ApiResponse, ErrorDetail

logger = logging.getLogger(__name__)

_LOCATION_PREFIXES = {"body", "query", "path", "header"}


def _field_name(loc: tuple) -> str:
    """Turn a pydantic error location into a dotted field name."""
    if not loc:
        return "request"
    parts = [str(p) for p in loc if p not in _LOCATION_PREFIXES]
    return ".".join(parts) or str(loc[0])


def error_response(status_code: int, error: str, details: list[ErrorDetail] | None = None) -> JSONResponse:
    """Build a JSON error envelope."""
    body = ApiResponse(success=False, error=error, details=details)
    return JSONResponse(
        status_code=status_code,
        content=body.model_dump(by_alias=True, exclude_none=True),
    )


def internal_error(error: str, exc: BaseException) -> JSONResponse:
    """Log ``exc`` with a correlation ID and return a sanitized 500."""
    correlation_id = uuid.uuid4().hex[:12]
    logger.error("%s [%s]: %s", error, correlation_id, exc, exc_info=exc)
    return error_response(status.HTTP_500_INTERNAL_SERVER_ERROR, error)


async def validation_exception_handler(_request: Request, exc: RequestValidationError) -> JSONResponse:
    """Map request validation failures to 400 with one detail per field."""
    details = [
        ErrorDetail(field=_field_name(tuple(err.get("loc", ()))), message=err.get("msg", ""))
        for err in exc.errors()
    ]
    return error_response(status.HTTP_400_BAD_REQUEST, "Validation failed", details)


async def unhandled_exception_handler(_request: Request, exc: Exception) -> JSONResponse:
    """Last-resort handler for anything the routers did not map."""
    return internal_error("Internal server error", exc)
