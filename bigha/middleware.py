"""
Custom middleware for FastAPI application.

This module provides:
- Request ID generation and tracking
- Security headers middleware
- Request/response logging
"""

import logging
import time
import uuid
from typing import Callable

from fastapi import Request, Response
from starlette.middleware.base import BaseHTTPMiddleware
from starlette.types import ASGIApp

from bigha.core.logging import request_id_var

logger = logging.getLogger(__name__)


class RequestIDMiddleware(BaseHTTPMiddleware):
    """
    Middleware to generate and track request IDs.

    This middleware:
    - Reuses an incoming X-Request-ID header or generates a UUID
    - Stores it in request.state.request_id and in the logging context
    - Adds X-Request-ID header to responses

    The request ID ends up in log records, activity log rows and error
    envelopes.
    """

    async def dispatch(self, request: Request, call_next: Callable) -> Response:
        request_id = request.headers.get("X-Request-ID") or str(uuid.uuid4())
        request.state.request_id = request_id
        token = request_id_var.set(request_id)

        try:
            response = await call_next(request)
        finally:
            request_id_var.reset(token)

        response.headers["X-Request-ID"] = request_id
        return response


class SecurityHeadersMiddleware(BaseHTTPMiddleware):
    """
    Middleware to add security headers to all responses.

    Security headers added:
    - X-Content-Type-Options: nosniff
    - X-Frame-Options: DENY
    - Referrer-Policy: strict-origin-when-cross-origin
    - Content-Security-Policy: API responses load nothing
    - Strict-Transport-Security: production only
    """

    def __init__(self, app: ASGIApp, enable_hsts: bool = False):
        super().__init__(app)
        self.enable_hsts = enable_hsts

    async def dispatch(self, request: Request, call_next: Callable) -> Response:
        response = await call_next(request)

        response.headers["X-Content-Type-Options"] = "nosniff"
        response.headers["X-Frame-Options"] = "DENY"
        response.headers["Referrer-Policy"] = "strict-origin-when-cross-origin"
        response.headers["Content-Security-Policy"] = "default-src 'none'; frame-ancestors 'none'"

        if self.enable_hsts:
            # max-age=31536000 = 1 year
            response.headers["Strict-Transport-Security"] = (
                "max-age=31536000; includeSubDomains; preload"
            )

        return response


class RequestLoggingMiddleware(BaseHTTPMiddleware):
    """
    Log one line per request with its status, duration and correlation id.

    Health probes are not logged. GraphQL requests always answer 200, so the
    operation name is included to tell them apart.
    """

    QUIET_PATHS = frozenset({"/health", "/health/ready"})

    async def dispatch(self, request: Request, call_next: Callable) -> Response:
        started = time.perf_counter()
        path = request.url.path
        fields = {
            "method": request.method,
            "path": path,
            "client": request.client.host if request.client else "unknown",
            "request_id": getattr(request.state, "request_id", None),
        }

        try:
            response = await call_next(request)
        except Exception:
            fields["duration_ms"] = round((time.perf_counter() - started) * 1000, 1)
            logger.exception("Request crashed", extra=fields)
            raise

        duration_ms = round((time.perf_counter() - started) * 1000, 1)
        response.headers["X-Response-Time"] = f"{duration_ms}ms"
        if path in self.QUIET_PATHS:
            return response

        fields.update(
            status_code=response.status_code,
            duration_ms=duration_ms,
            operation=getattr(request.state, "operation_name", None),
        )
        if response.status_code >= 500:
            level = logging.ERROR
        elif response.status_code >= 400:
            level = logging.WARNING
        else:
            level = logging.INFO
        logger.log(level, "%s %s %s", request.method, path, response.status_code, extra=fields)
        return response
