"""
Exception handlers for the REST surface (health checks, malformed GraphQL
requests, rate limiting).

Errors raised inside GraphQL execution never reach these handlers; they are
rendered into the response's ``errors`` array by bigha.api.gql.errors.

Envelope: ``{"error": {"code", "message", "details"}, "meta": {"request_id"}}``
"""

import logging

from fastapi import Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from slowapi.errors import RateLimitExceeded

from bigha.core.config import settings
from bigha.exceptions import AppException

logger = logging.getLogger(__name__)


def _envelope(request: Request, code: str, message: str, details=None) -> dict:
    return {
        "error": {
            "code": code,
            "message": message,
            "details": details if details is not None else {},
        },
        "meta": {
            "request_id": getattr(request.state, "request_id", None),
        },
    }


async def app_exception_handler(request: Request, exc: AppException) -> JSONResponse:
    """Render an AppException with its own status and code."""
    logger.warning(
        f"Application exception: {exc.error_code} - {exc.message} "
        f"(request_id={getattr(request.state, 'request_id', 'unknown')})"
    )

    return JSONResponse(
        status_code=exc.status_code,
        content=_envelope(request, exc.error_code, exc.message, exc.details),
    )


async def validation_exception_handler(
    request: Request, exc: RequestValidationError
) -> JSONResponse:
    logger.warning(
        f"Validation error: {exc.errors()} "
        f"(request_id={getattr(request.state, 'request_id', 'unknown')})"
    )

    errors = [
        {
            "field": ".".join(str(loc) for loc in error["loc"]),
            "message": error["msg"],
            "type": error["type"],
        }
        for error in exc.errors()
    ]

    return JSONResponse(
        status_code=status.HTTP_422_UNPROCESSABLE_ENTITY,
        content=_envelope(request, "BAD_USER_INPUT", "Request validation failed", errors),
    )


async def general_exception_handler(request: Request, exc: Exception) -> JSONResponse:
    """
    Handle unexpected exceptions.

    Logs the full error and returns a generic message unless running in
    debug mode.
    """
    logger.error(
        f"Unexpected error: {str(exc)} "
        f"(request_id={getattr(request.state, 'request_id', 'unknown')})",
        exc_info=True,
    )

    message = str(exc) if settings.debug else "An unexpected error occurred. Please contact support."
    return JSONResponse(
        status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
        content=_envelope(request, "INTERNAL_ERROR", message),
    )


async def rate_limit_handler(request: Request, exc: RateLimitExceeded) -> JSONResponse:
    logger.warning(
        f"Rate limit exceeded: {request.client.host if request.client else 'unknown'} "
        f"(request_id={getattr(request.state, 'request_id', 'unknown')})"
    )

    return JSONResponse(
        status_code=status.HTTP_429_TOO_MANY_REQUESTS,
        content=_envelope(
            request,
            "RATE_LIMITED",
            "Rate limit exceeded. Please try again later.",
            {"limit": str(exc.detail)},
        ),
    )
