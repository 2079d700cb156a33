"""
GraphQL error formatting.

Every error leaving the API has the shape
``{message, locations, path, extensions: {code, statusCode, details?}}``.
Raw storage exceptions never reach the caller: integrity violations become
CONFLICT, anything unclassified is logged with its traceback and becomes a
generic INTERNAL_ERROR.
"""

import logging
from typing import Any, TypeVar

from graphql import GraphQLError
from pydantic import BaseModel
from pydantic import ValidationError as PydanticValidationError
from sqlalchemy.exc import IntegrityError

from bigha.core.config import settings
from bigha.exceptions import AppException, InvalidInputError
from bigha.schemas.common import PaginationParams

logger = logging.getLogger(__name__)

ModelT = TypeVar("ModelT", bound=BaseModel)

INTERNAL_ERROR_MESSAGE = "An unexpected error occurred. Please contact support."


def _camel(name: str) -> str:
    head, *rest = name.split("_")
    return head + "".join(part.title() for part in rest)


def parse_input(model: type[ModelT], data: Any) -> ModelT:
    """
    Validate a GraphQL input object against a pydantic model.

    Raises:
        InvalidInputError: With one ``{field, message}`` entry per problem
    """
    try:
        return model.model_validate(dict(data or {}))
    except PydanticValidationError as exc:
        errors = [
            {
                "field": ".".join(_camel(str(part)) for part in error["loc"]) or None,
                "message": error["msg"],
            }
            for error in exc.errors()
        ]
        message = errors[0]["message"] if len(errors) == 1 else "Input validation failed"
        raise InvalidInputError(message, details={"errors": errors}) from exc


def page_args(limit: int, offset: int) -> PaginationParams:
    return parse_input(PaginationParams, {"limit": limit, "offset": offset})


def _extensions(code: str, status_code: int, details: Any = None) -> dict[str, Any]:
    extensions: dict[str, Any] = {"code": code, "statusCode": status_code}
    if details:
        extensions["details"] = details
    return extensions


def format_error(error: GraphQLError) -> dict[str, Any]:
    """Render one GraphQLError for the response ``errors`` array."""
    formatted: dict[str, Any] = {
        "message": error.message,
        "locations": [{"line": loc.line, "column": loc.column} for loc in error.locations or []] or None,
        "path": error.path,
    }
    original = error.original_error

    if original is None:
        formatted["extensions"] = _extensions("GRAPHQL_VALIDATION_FAILED", 400)
    elif isinstance(original, AppException):
        formatted["message"] = original.message
        formatted["extensions"] = _extensions(original.error_code, original.status_code, original.details)
    elif isinstance(original, IntegrityError):
        logger.warning(f"Integrity violation at {error.path}: {original.orig}")
        formatted["message"] = "The operation conflicts with existing data"
        formatted["extensions"] = _extensions("CONFLICT", 409)
    else:
        logger.error(
            f"Unexpected error resolving {error.path}: {original}",
            exc_info=(type(original), original, original.__traceback__),
        )
        formatted["message"] = str(original) if settings.debug else INTERNAL_ERROR_MESSAGE
        formatted["extensions"] = _extensions("INTERNAL_ERROR", 500)

    return formatted


def error_payload(message: str, code: str, status_code: int) -> dict[str, Any]:
    """A standalone ``errors`` entry for failures outside execution (deadline, bad request)."""
    return {"message": message, "extensions": _extensions(code, status_code)}
