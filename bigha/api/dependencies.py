"""
Request dependencies for the GraphQL endpoint.

This module provides:
- Bearer token extraction from the Authorization header
- Token -> identity resolution (session row, admin state, role slugs)
- RequestContext construction
"""

import logging

from fastapi import Request
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from bigha.api.gql.context import AdminIdentity, AnonymousIdentity, Identity, RequestContext
from bigha.repositories.admin_repository import AdminUserRepository
from bigha.repositories.role_repository import RoleAssignmentRepository
from bigha.services.activity_service import RequestMeta
from bigha.services.notification_service import NotificationService
from bigha.services.permission_service import PermissionResolver
from bigha.services.session_service import SessionService

logger = logging.getLogger(__name__)


def extract_bearer_token(authorization: str | None) -> str | None:
    """Token from an ``Authorization: Bearer <token>`` header, or None."""
    if not authorization:
        return None
    scheme, _, token = authorization.partition(" ")
    if scheme.lower() != "bearer" or not token.strip():
        return None
    return token.strip()


async def resolve_identity(session: AsyncSession, token: str | None) -> Identity:
    """
    Resolve a bearer token into an identity.

    Never raises for a bad credential: a missing, malformed, expired or
    revoked token, or one belonging to a disabled admin, resolves to
    AnonymousIdentity and guarded resolvers answer UNAUTHENTICATED.
    """
    if not token:
        return AnonymousIdentity()

    sessions = SessionService(session)
    claims = await sessions.validate(token)
    if claims is None:
        return AnonymousIdentity()

    admin = await AdminUserRepository(session).get_by_id(claims.admin_id)
    if admin is None or not admin.is_active:
        logger.info(f"Token presented for missing or disabled admin {claims.admin_id}")
        return AnonymousIdentity()

    roles = await RoleAssignmentRepository(session).get_role_slugs(admin.id, sessions.clock())
    return AdminIdentity(
        id=admin.id,
        email=admin.email,
        roles=tuple(roles),
        session_id=claims.session_id,
    )


def request_meta(request: Request) -> RequestMeta:
    return RequestMeta(
        ip_address=request.client.host if request.client else None,
        user_agent=request.headers.get("User-Agent"),
        request_id=getattr(request.state, "request_id", None),
    )


async def build_context(
    request: Request,
    session: AsyncSession,
    session_factory: async_sessionmaker[AsyncSession],
) -> RequestContext:
    """Everything a resolver needs for one request."""
    token = extract_bearer_token(request.headers.get("Authorization"))
    identity = await resolve_identity(session, token)
    # Resolvers start from a fresh transaction.
    await session.commit()
    return RequestContext(
        session=session,
        session_factory=session_factory,
        permissions=PermissionResolver(session),
        identity=identity,
        meta=request_meta(request),
        notifications=getattr(request.app.state, "notifications", None) or NotificationService(),
        access_token=token,
    )
