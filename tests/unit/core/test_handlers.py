"""
Unit tests for REST exception handlers.

Tests cover:
- AppException handler response format
- Validation error handler formatting
- General exception handler (debug vs production)
- Rate limit handler response format
"""

import json
from unittest.mock import MagicMock, patch

import pytest
from fastapi import Request
from fastapi.exceptions import RequestValidationError
from slowapi.errors import RateLimitExceeded

from bigha.core.handlers import (
    app_exception_handler,
    general_exception_handler,
    rate_limit_handler,
    validation_exception_handler,
)
from bigha.exceptions import AppException, NotFoundError


@pytest.fixture
def mock_request() -> MagicMock:
    """Create a mock request with request_id in state."""
    request = MagicMock(spec=Request)
    request.state.request_id = "test-request-123"
    request.client.host = "127.0.0.1"
    return request


@pytest.fixture
def mock_request_no_id() -> MagicMock:
    """Create a mock request without request_id."""
    request = MagicMock(spec=Request)
    request.state = MagicMock(spec=[])
    request.client.host = "127.0.0.1"
    return request


class TestAppExceptionHandler:
    @pytest.mark.asyncio
    async def test_returns_exception_status_code(self, mock_request: MagicMock) -> None:
        response = await app_exception_handler(mock_request, NotFoundError("Property"))

        assert response.status_code == 404

    @pytest.mark.asyncio
    async def test_returns_envelope(self, mock_request: MagicMock) -> None:
        exc = AppException(
            message="Test error",
            status_code=400,
            error_code="TEST_ERROR",
            details={"field": "value"},
        )
        response = await app_exception_handler(mock_request, exc)
        body = json.loads(response.body)

        assert body["error"] == {
            "code": "TEST_ERROR",
            "message": "Test error",
            "details": {"field": "value"},
        }
        assert body["meta"]["request_id"] == "test-request-123"

    @pytest.mark.asyncio
    async def test_handles_missing_request_id(self, mock_request_no_id: MagicMock) -> None:
        response = await app_exception_handler(mock_request_no_id, NotFoundError("Role"))
        body = json.loads(response.body)

        assert body["meta"]["request_id"] is None


class TestValidationExceptionHandler:
    @pytest.mark.asyncio
    async def test_formats_validation_errors(self, mock_request: MagicMock) -> None:
        exc = RequestValidationError(
            [{"loc": ("body", "email"), "msg": "field required", "type": "missing"}]
        )
        response = await validation_exception_handler(mock_request, exc)
        body = json.loads(response.body)

        assert response.status_code == 422
        assert body["error"]["code"] == "BAD_USER_INPUT"
        assert body["error"]["details"] == [
            {"field": "body.email", "message": "field required", "type": "missing"}
        ]


class TestGeneralExceptionHandler:
    @pytest.mark.asyncio
    async def test_hides_details_in_production(self, mock_request: MagicMock) -> None:
        with patch("bigha.core.handlers.settings") as mock_settings:
            mock_settings.debug = False
            response = await general_exception_handler(mock_request, RuntimeError("db password leaked"))
        body = json.loads(response.body)

        assert response.status_code == 500
        assert body["error"]["code"] == "INTERNAL_ERROR"
        assert "db password leaked" not in body["error"]["message"]

    @pytest.mark.asyncio
    async def test_shows_details_in_debug(self, mock_request: MagicMock) -> None:
        with patch("bigha.core.handlers.settings") as mock_settings:
            mock_settings.debug = True
            response = await general_exception_handler(mock_request, RuntimeError("boom"))
        body = json.loads(response.body)

        assert body["error"]["message"] == "boom"


class TestRateLimitHandler:
    @pytest.mark.asyncio
    async def test_returns_429_with_code(self, mock_request: MagicMock) -> None:
        exc = MagicMock(spec=RateLimitExceeded)
        exc.detail = "120 per 1 minute"

        response = await rate_limit_handler(mock_request, exc)
        body = json.loads(response.body)

        assert response.status_code == 429
        assert body["error"]["code"] == "RATE_LIMITED"
        assert body["error"]["details"] == {"limit": "120 per 1 minute"}

    @pytest.mark.asyncio
    async def test_handles_missing_client(self) -> None:
        request = MagicMock(spec=Request)
        request.client = None
        request.state.request_id = "req-1"
        exc = MagicMock(spec=RateLimitExceeded)
        exc.detail = "1 per 1 minute"

        response = await rate_limit_handler(request, exc)

        assert response.status_code == 429
