"""Exception handlers rendering every failure as {"error", "code", "details"}."""

from typing import Any

from fastapi import FastAPI, Request
from fastapi.encoders import jsonable_encoder
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from slowapi import _rate_limit_exceeded_handler
from slowapi.errors import RateLimitExceeded

from playback_relay.exceptions import ErrorCode, RelayException
from playback_relay.logging_config import get_logger, log_with_context

logger = get_logger(__name__)


def error_response(
    status_code: int,
    message: str,
    code: ErrorCode,
    details: dict[str, Any] | None = None,
) -> JSONResponse:
    """Build the error body shared by all handlers.

    `error` stays a plain string so polling clients can show it as-is.
    """
    return JSONResponse(
        status_code=status_code,
        content={"error": message, "code": code.value, "details": jsonable_encoder(details or {})},
    )


async def relay_exception_handler(request: Request, exc: RelayException) -> JSONResponse:
    """Answer a RelayException with its own status code."""
    log_with_context(
        logger,
        "error" if exc.status_code >= 500 else "warning",
        "Relay error",
        error_code=exc.code.value,
        error_message=exc.message,
        status_code=exc.status_code,
        method=request.method,
        path=request.url.path,
        event_type="relay_error",
    )
    return error_response(exc.status_code, exc.message, exc.code, exc.details)


async def validation_exception_handler(request: Request, exc: RequestValidationError) -> JSONResponse:
    """Answer malformed request bodies with 400 instead of FastAPI's 422."""
    errors = [{"loc": list(err.get("loc", ())), "msg": err.get("msg", "")} for err in exc.errors()]
    log_with_context(
        logger,
        "warning",
        "Request validation failed",
        method=request.method,
        path=request.url.path,
        errors=errors,
        event_type="validation_error",
    )
    return error_response(400, "Invalid request body", ErrorCode.VALIDATION_ERROR, {"errors": errors})


async def general_exception_handler(request: Request, exc: Exception) -> JSONResponse:
    """Answer anything unexpected with a bare 500."""
    log_with_context(
        logger,
        "error",
        "Unhandled exception",
        error=str(exc),
        error_type=type(exc).__name__,
        method=request.method,
        path=request.url.path,
        event_type="unhandled_error",
    )
    logger.error("Exception traceback:", exc_info=exc)

    # Internals stay in the log
    return error_response(500, "Internal server error", ErrorCode.INTERNAL_ERROR)


def register_error_handlers(app: FastAPI) -> None:
    """Register all exception handlers with the application."""
    app.add_exception_handler(RelayException, relay_exception_handler)
    app.add_exception_handler(RequestValidationError, validation_exception_handler)
    app.add_exception_handler(RateLimitExceeded, _rate_limit_exceeded_handler)
    app.add_exception_handler(Exception, general_exception_handler)
