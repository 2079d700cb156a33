"""
Resolver guards.

Each guarded resolver:
1. checks identity presence (UNAUTHENTICATED)
2. checks permissions through the request-scoped PermissionResolver (FORBIDDEN)
3. runs with exclusive use of the request's database session

If a mutation resolver fails, whatever it staged in the session is rolled
back so a later mutation in the same request cannot commit it.

Usage:
    @permission_required("properties:approve")
    async def resolve_approve_property(root, info, id, input=None):
        ...
"""

import functools
from collections.abc import Awaitable, Callable
from typing import Any

from graphql import GraphQLResolveInfo, OperationType

from bigha.api.gql.context import RequestContext

Resolver = Callable[..., Awaitable[Any]]


async def _run_exclusive(
    resolver: Resolver,
    root: Any,
    info: GraphQLResolveInfo,
    kwargs: dict[str, Any],
    check: Callable[[RequestContext], Awaitable[None]] | None = None,
) -> Any:
    ctx: RequestContext = info.context
    async with ctx.db_lock:
        try:
            if check is not None:
                await check(ctx)
            return await resolver(root, info, **kwargs)
        except Exception:
            if info.operation.operation == OperationType.MUTATION:
                await ctx.session.rollback()
            raise


def public(resolver: Resolver) -> Resolver:
    """Open to anonymous callers (login, OTP requests, token refresh)."""

    @functools.wraps(resolver)
    async def wrapper(root: Any, info: GraphQLResolveInfo, **kwargs: Any) -> Any:
        return await _run_exclusive(resolver, root, info, kwargs)

    return wrapper


def login_required(resolver: Resolver) -> Resolver:
    """Any authenticated admin."""

    @functools.wraps(resolver)
    async def wrapper(root: Any, info: GraphQLResolveInfo, **kwargs: Any) -> Any:
        info.context.require_admin()
        return await _run_exclusive(resolver, root, info, kwargs)

    return wrapper


def permission_required(*names: str, any_of: bool = False) -> Callable[[Resolver], Resolver]:
    """
    Authenticated admin holding ``names`` (all of them, or one with ``any_of``).

    The permission check runs before the resolver and never mutates state.
    """

    def decorator(resolver: Resolver) -> Resolver:
        async def check(ctx: RequestContext) -> None:
            await ctx.permissions.require(ctx.require_admin().id, *names, any_of=any_of)

        @functools.wraps(resolver)
        async def wrapper(root: Any, info: GraphQLResolveInfo, **kwargs: Any) -> Any:
            info.context.require_admin()
            return await _run_exclusive(resolver, root, info, kwargs, check=check)

        return wrapper

    return decorator
