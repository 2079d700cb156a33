"""
Unit tests for GraphQL error formatting and input validation.

All tests are fully mocked - no database or external dependencies.
"""

from unittest.mock import patch

import pytest
from graphql import GraphQLError
from pydantic import BaseModel, Field
from sqlalchemy.exc import IntegrityError

from bigha.api.gql.errors import (
    INTERNAL_ERROR_MESSAGE,
    error_payload,
    format_error,
    page_args,
    parse_input,
)
from bigha.exceptions import ForbiddenError, InvalidInputError, NotFoundError


class _Sample(BaseModel):
    start_date: int = Field(ge=0)
    name: str = Field(min_length=2)


class TestParseInput:
    def test_valid_input(self):
        result = parse_input(_Sample, {"start_date": 1, "name": "ok"})

        assert result == _Sample(start_date=1, name="ok")

    def test_none_is_empty_input(self):
        class _OptionalName(BaseModel):
            name: str | None = None

        assert parse_input(_OptionalName, None) == _OptionalName()

    def test_single_error_uses_its_message_and_camel_case_field(self):
        with pytest.raises(InvalidInputError) as exc_info:
            parse_input(_Sample, {"start_date": -1, "name": "ok"})

        exc = exc_info.value
        assert exc.error_code == "BAD_USER_INPUT"
        assert exc.details["errors"][0]["field"] == "startDate"
        assert exc.message == exc.details["errors"][0]["message"]

    def test_multiple_errors_are_all_reported(self):
        with pytest.raises(InvalidInputError) as exc_info:
            parse_input(_Sample, {"start_date": -1, "name": "x"})

        assert exc_info.value.message == "Input validation failed"
        assert {e["field"] for e in exc_info.value.details["errors"]} == {"startDate", "name"}


class TestPageArgs:
    def test_accepts_bounds(self):
        page = page_args(100, 0)

        assert (page.limit, page.offset) == (100, 0)

    @pytest.mark.parametrize("limit,offset", [(0, 0), (101, 0), (10, -1)])
    def test_rejects_out_of_range(self, limit, offset):
        with pytest.raises(InvalidInputError):
            page_args(limit, offset)


class TestFormatError:
    def test_app_exception_keeps_code_status_and_details(self):
        error = GraphQLError(
            "ignored",
            path=["approveProperty"],
            original_error=ForbiddenError(required_permissions=["properties:approve"]),
        )

        formatted = format_error(error)

        assert formatted["path"] == ["approveProperty"]
        assert formatted["message"] == "You do not have permission to perform this action"
        assert formatted["extensions"] == {
            "code": "FORBIDDEN",
            "statusCode": 403,
            "details": {"required_permissions": ["properties:approve"]},
        }

    def test_empty_details_are_omitted(self):
        formatted = format_error(GraphQLError("x", original_error=NotFoundError("Property")))

        assert formatted["message"] == "Property not found"
        assert formatted["extensions"] == {"code": "NOT_FOUND", "statusCode": 404}

    def test_document_errors_are_validation_failures(self):
        formatted = format_error(GraphQLError("Cannot query field 'nope' on type 'Query'."))

        assert formatted["extensions"]["code"] == "GRAPHQL_VALIDATION_FAILED"
        assert formatted["message"] == "Cannot query field 'nope' on type 'Query'."

    def test_integrity_error_becomes_conflict_without_driver_text(self):
        original = IntegrityError("INSERT ...", {}, Exception("duplicate key value violates unique constraint"))

        formatted = format_error(GraphQLError("x", original_error=original))

        assert formatted["extensions"]["code"] == "CONFLICT"
        assert "duplicate key" not in formatted["message"]

    def test_unexpected_error_is_masked(self):
        with patch("bigha.api.gql.errors.settings") as mock_settings:
            mock_settings.debug = False
            formatted = format_error(GraphQLError("x", original_error=RuntimeError("secret detail")))

        assert formatted["message"] == INTERNAL_ERROR_MESSAGE
        assert formatted["extensions"] == {"code": "INTERNAL_ERROR", "statusCode": 500}

    def test_unexpected_error_is_shown_in_debug(self):
        with patch("bigha.api.gql.errors.settings") as mock_settings:
            mock_settings.debug = True
            formatted = format_error(GraphQLError("x", original_error=RuntimeError("secret detail")))

        assert formatted["message"] == "secret detail"


def test_error_payload_shape():
    assert error_payload("Request timed out", "INTERNAL_ERROR", 500) == {
        "message": "Request timed out",
        "extensions": {"code": "INTERNAL_ERROR", "statusCode": 500},
    }
