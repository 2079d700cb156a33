"""
Typed request context handed to every GraphQL resolver.

Resolvers never inspect the HTTP request. Everything they need (database
session, caller identity, permission resolver, client metadata) travels in
RequestContext, built once per request by the GraphQL route.
"""

import asyncio
import uuid
from dataclasses import dataclass, field

from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from bigha.exceptions import UnauthenticatedError
from bigha.services.activity_service import RequestMeta
from bigha.services.notification_service import NotificationService
from bigha.services.permission_service import PermissionResolver


@dataclass(frozen=True)
class AnonymousIdentity:
    """No (valid) credential was presented."""

    is_authenticated = False


@dataclass(frozen=True)
class AdminIdentity:
    """
    Authenticated admin.

    Attributes:
        id: Admin id
        email: Login email
        roles: Slugs of the active, unexpired roles held
        session_id: Backing admin_sessions row, used by logout
    """

    id: uuid.UUID
    email: str
    roles: tuple[str, ...] = ()
    session_id: uuid.UUID | None = None

    is_authenticated = True


Identity = AnonymousIdentity | AdminIdentity


@dataclass
class RequestContext:
    """
    Per-request state.

    ``db_lock`` serializes access to ``session``: graphql-core resolves
    sibling query fields concurrently, and one AsyncSession must never be
    used by two coroutines at once.
    """

    session: AsyncSession
    session_factory: async_sessionmaker[AsyncSession]
    permissions: PermissionResolver
    identity: Identity = field(default_factory=AnonymousIdentity)
    meta: RequestMeta = field(default_factory=RequestMeta)
    notifications: NotificationService = field(default_factory=NotificationService)
    access_token: str | None = None
    db_lock: asyncio.Lock = field(default_factory=asyncio.Lock)

    @property
    def is_authenticated(self) -> bool:
        return isinstance(self.identity, AdminIdentity)

    def require_admin(self) -> AdminIdentity:
        """
        Return the authenticated admin.

        Raises:
            UnauthenticatedError: For anonymous callers
        """
        if not isinstance(self.identity, AdminIdentity):
            raise UnauthenticatedError()
        return self.identity
