"""Global exception handlers for the FastAPI application.

This module provides centralized exception handling that:
1. Converts all exceptions to standardized error responses
2. Logs errors appropriately (with request context)
3. Sanitizes error messages to prevent information leakage

Every error body has the shape::

    {"error": {"code": ..., "message": ..., "details": ..., "request_id": ..., "timestamp": ...}}

Usage:
    from neighborguard.api.exception_handlers import register_exception_handlers
    app = FastAPI()
    register_exception_handlers(app)
"""

from __future__ import annotations

from collections.abc import Mapping
from datetime import UTC, datetime
from typing import Any

from fastapi import FastAPI, Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

from neighborguard.core.exceptions import NeighborGuardError
from neighborguard.core.logging import get_logger, sanitize_error

logger = get_logger(__name__)

STATUS_TO_CODE = {
    400: "BAD_REQUEST",
    401: "AUTHENTICATION_REQUIRED",
    403: "ACCESS_DENIED",
    404: "NOT_FOUND",
    405: "METHOD_NOT_ALLOWED",
    409: "CONFLICT",
    422: "VALIDATION_ERROR",
    500: "INTERNAL_ERROR",
}


def get_request_id(request: Request) -> str | None:
    """Extract request ID from request state or headers."""
    # Set by RequestIDMiddleware
    if hasattr(request.state, "request_id"):
        request_id: str = request.state.request_id
        return request_id

    return request.headers.get("X-Request-ID")


def _log_context(request: Request, **extra: Any) -> dict[str, Any]:
    context: dict[str, Any] = {
        "path": str(request.url.path),
        "method": request.method,
        **extra,
    }
    request_id = get_request_id(request)
    if request_id:
        context["request_id"] = request_id
    return context


def build_error_response(
    error_code: str,
    message: str,
    status_code: int,
    request: Request | None = None,
    details: dict[str, Any] | None = None,
    headers: Mapping[str, str] | None = None,
) -> JSONResponse:
    """Build a standardized error response.

    Args:
        error_code: Machine-readable error code
        message: Human-readable error message
        status_code: HTTP status code
        request: Optional request for extracting request ID
        details: Optional additional error details
        headers: Optional custom headers to include in response

    Returns:
        JSONResponse with standardized error format
    """
    error_body: dict[str, Any] = {
        "code": error_code,
        "message": message,
    }

    if details:
        error_body["details"] = details

    if request:
        request_id = get_request_id(request)
        if request_id:
            error_body["request_id"] = request_id

    error_body["timestamp"] = datetime.now(UTC).isoformat()

    return JSONResponse(
        status_code=status_code,
        content={"error": error_body},
        headers=headers,
    )


async def neighborguard_exception_handler(
    request: Request,
    exc: NeighborGuardError,
) -> JSONResponse:
    """Handle NeighborGuardError and its subclasses.

    4xx errors are logged at INFO, 5xx at ERROR with a traceback.
    """
    log_context = _log_context(request, error_code=exc.error_code, status_code=exc.status_code)
    if exc.details:
        log_context["details"] = exc.details

    if exc.status_code >= 500:
        logger.error(f"Internal error: {exc.message}", extra=log_context, exc_info=True)
    else:
        logger.info(f"Client error: {exc.message}", extra=log_context)

    return build_error_response(
        error_code=exc.error_code,
        message=exc.message,
        status_code=exc.status_code,
        request=request,
        details=exc.details or None,
    )


async def http_exception_handler(
    request: Request,
    exc: StarletteHTTPException,
) -> JSONResponse:
    """Handle standard HTTPException (unknown routes, wrong methods)."""
    error_code = STATUS_TO_CODE.get(exc.status_code, "ERROR")
    message = str(exc.detail) if exc.detail else "An error occurred"

    log_context = _log_context(request, status_code=exc.status_code)
    if exc.status_code >= 500:
        logger.error(f"HTTP error: {message}", extra=log_context)
    else:
        logger.info(f"Client error: {message}", extra=log_context)

    return build_error_response(
        error_code=error_code,
        message=message,
        status_code=exc.status_code,
        request=request,
        headers=exc.headers,
    )


async def validation_exception_handler(
    request: Request,
    exc: RequestValidationError,
) -> JSONResponse:
    """Handle Pydantic validation errors from request parsing.

    Converts validation errors to a structured format with field-level details.
    """
    errors = []
    for error in exc.errors():
        # Field path, e.g. "body.requestText" or "query.limit"
        loc = error.get("loc", ())
        field = ".".join(str(part) for part in loc) or "unknown"

        input_value = error.get("input")
        value = None
        if input_value is not None:
            value = str(input_value)[:100]

        errors.append(
            {
                "field": field,
                "message": error.get("msg", "Validation error"),
                "value": value,
            }
        )

    logger.info(
        "Request validation failed",
        extra=_log_context(request, error_count=len(errors)),
    )

    return build_error_response(
        error_code="VALIDATION_ERROR",
        message="Request validation failed",
        status_code=status.HTTP_422_UNPROCESSABLE_ENTITY,
        request=request,
        details={"errors": errors},
    )


async def generic_exception_handler(
    request: Request,
    exc: Exception,
) -> JSONResponse:
    """Handle any unhandled exception with a sanitized 500 response."""
    logger.error(
        f"Unhandled exception: {sanitize_error(exc)}",
        extra=_log_context(request, exception_type=type(exc).__name__),
        exc_info=True,
    )

    return build_error_response(
        error_code="INTERNAL_ERROR",
        message="An unexpected error occurred",
        status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
        request=request,
    )


def register_exception_handlers(app: FastAPI) -> None:
    """Register all exception handlers with the FastAPI application.

    Args:
        app: The FastAPI application instance
    """
    # Note: type ignores needed due to Starlette's overly strict handler typing
    app.add_exception_handler(
        NeighborGuardError,
        neighborguard_exception_handler,  # type: ignore[arg-type]
    )
    app.add_exception_handler(
        RequestValidationError,
        validation_exception_handler,  # type: ignore[arg-type]
    )
    app.add_exception_handler(
        StarletteHTTPException,
        http_exception_handler,  # type: ignore[arg-type]
    )

    # Catch-all for any unhandled exceptions
    app.add_exception_handler(Exception, generic_exception_handler)

    logger.info("Exception handlers registered")
