"""
GraphQL endpoint.

One POST route executes every operation. The response is always
``{"data": ..., "errors"?: [...]}`` with HTTP 200 once the request body is
understood; a body that is not JSON or carries no query gets HTTP 400.
"""

import asyncio
import logging
from typing import Any

from fastapi import APIRouter, Depends, Request, status
from fastapi.encoders import jsonable_encoder
from fastapi.responses import JSONResponse
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from bigha.api.dependencies import build_context
from bigha.api.gql.errors import error_payload, format_error
from bigha.api.gql.schema import schema
from bigha.core.config import settings
from bigha.core.database import get_db, get_session_factory
from bigha.core.rate_limit import limiter

logger = logging.getLogger(__name__)

router = APIRouter(tags=["GraphQL"])


def _bad_request(message: str) -> JSONResponse:
    return JSONResponse(
        status_code=status.HTTP_400_BAD_REQUEST,
        content={"data": None, "errors": [error_payload(message, "BAD_REQUEST", 400)]},
    )


@router.post(settings.graphql_path)
@limiter.limit(settings.rate_limit_graphql)
async def graphql_endpoint(
    request: Request,
    db: AsyncSession = Depends(get_db),
    session_factory: async_sessionmaker[AsyncSession] = Depends(get_session_factory),
) -> JSONResponse:
    """
    Execute a GraphQL operation.

    Body: ``{"query": str, "variables"?: object, "operationName"?: str}``
    """
    try:
        body = await request.json()
    except ValueError:
        return _bad_request("Request body must be valid JSON")

    if not isinstance(body, dict):
        return _bad_request("Request body must be a JSON object")
    query = body.get("query")
    if not isinstance(query, str) or not query.strip():
        return _bad_request("Missing GraphQL query")
    variables = body.get("variables")
    if variables is not None and not isinstance(variables, dict):
        return _bad_request("Variables must be a JSON object")
    operation_name = body.get("operationName")
    request.state.operation_name = operation_name

    context = await build_context(request, db, session_factory)

    try:
        result = await asyncio.wait_for(
            schema.execute_async(
                query,
                variable_values=variables,
                operation_name=operation_name,
                context_value=context,
            ),
            timeout=settings.graphql_execution_timeout_seconds,
        )
    except asyncio.TimeoutError:
        logger.error(
            f"GraphQL operation {operation_name or '<anonymous>'} exceeded "
            f"{settings.graphql_execution_timeout_seconds}s"
        )
        await db.rollback()
        return JSONResponse(
            content={"data": None, "errors": [error_payload("Request timed out", "INTERNAL_ERROR", 500)]}
        )

    payload: dict[str, Any] = {"data": result.data}
    if result.errors:
        payload["errors"] = [format_error(error) for error in result.errors]
    return JSONResponse(content=jsonable_encoder(payload))
