"""
Exception handlers -- map shiftline errors to ``{"error": ...}`` responses.

Every failure leaves the API as a JSON object with a single ``error`` key,
the shape the mobile client reads. The status code comes from the error
category.
"""

from __future__ import annotations

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

from shiftline.core.errors import ErrorCategory, ShiftlineError, ValidationError
from shiftline.core.logging import get_logger

logger = get_logger(__name__)

# ── Error category → HTTP status mapping ─────────────────────────────────

CATEGORY_TO_STATUS: dict[ErrorCategory, int] = {
    ErrorCategory.VALIDATION: 400,
    ErrorCategory.SECURITY: 400,
    ErrorCategory.CONFIG: 500,
    ErrorCategory.DATABASE: 500,
    ErrorCategory.GPS: 500,
    ErrorCategory.INTERNAL: 500,
    ErrorCategory.UNKNOWN: 500,
}

MALFORMED_BODY_MESSAGE = "Malformed request body"


def status_for_error(exc: ShiftlineError) -> int:
    """Resolve an error category to HTTP status, defaulting to 500."""
    return CATEGORY_TO_STATUS.get(exc.category, 500)


def error_response(status: int, message: str) -> JSONResponse:
    return JSONResponse(status_code=status, content={"error": message})


async def shiftline_error_handler(request: Request, exc: ShiftlineError) -> JSONResponse:
    status = status_for_error(exc)
    log = logger.warning if status < 500 else logger.error
    log("api.request_failed", path=request.url.path, status=status, **exc.to_dict())
    message = exc.message
    if isinstance(exc, ValidationError) and exc.missing_fields:
        message = f"{exc.message}: {', '.join(exc.missing_fields)}"
    return error_response(status, message)


async def request_validation_handler(request: Request, exc: RequestValidationError) -> JSONResponse:
    logger.warning("api.malformed_body", path=request.url.path, errors=len(exc.errors()))
    return error_response(400, MALFORMED_BODY_MESSAGE)


async def http_exception_handler(request: Request, exc: StarletteHTTPException) -> JSONResponse:
    return JSONResponse(
        status_code=exc.status_code,
        content={"error": str(exc.detail)},
        headers=getattr(exc, "headers", None),
    )


async def unhandled_exception_handler(request: Request, exc: Exception) -> JSONResponse:
    """Catch-all for unhandled exceptions -- returns 500."""
    logger.exception("api.unhandled_error", path=request.url.path, error_type=type(exc).__name__)
    debug = getattr(request.app.state.settings, "debug", False)
    return error_response(500, str(exc) if debug else "Internal server error")


def install_error_handlers(app: FastAPI) -> None:
    app.add_exception_handler(ShiftlineError, shiftline_error_handler)
    app.add_exception_handler(RequestValidationError, request_validation_handler)
    app.add_exception_handler(StarletteHTTPException, http_exception_handler)
    app.add_exception_handler(Exception, unhandled_exception_handler)


__all__ = [
    "CATEGORY_TO_STATUS",
    "install_error_handlers",
    "status_for_error",
]
