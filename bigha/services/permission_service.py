"""
Permission resolution for admin role-based access control.

Effective permissions of an admin are every permission reachable through

    admin -> unexpired role assignments -> active roles -> grants -> permissions

de-duplicated by permission name.

Usage:
    resolver = PermissionResolver(session)
    if await resolver.has_permission(admin.id, "properties:approve"):
        ...
    await resolver.require(admin.id, "admin:roles")   # raises ForbiddenError

A resolver is created per request. Results are memoized for the lifetime of
that request only, so one GraphQL operation touching several guarded fields
costs one round trip per distinct check.
"""

import logging
import uuid
from collections.abc import Callable, Iterable
from datetime import datetime

from sqlalchemy.ext.asyncio import AsyncSession

from bigha.exceptions import ForbiddenError
from bigha.models.admin import AdminPermission
from bigha.models.mixins import utcnow
from bigha.repositories.permission_repository import PermissionRepository

logger = logging.getLogger(__name__)


class PermissionResolver:
    """
    Request-scoped permission checker.

    ``has_permission`` and ``has_any_permission`` run a COUNT over the
    traversal instead of materializing the full set. When the full set has
    already been loaded for the admin it is used instead.
    """

    def __init__(self, session: AsyncSession, clock: Callable[[], datetime] = utcnow):
        self.session = session
        self.clock = clock
        self.permission_repo = PermissionRepository(session)
        self._effective: dict[uuid.UUID, set[str]] = {}
        self._checks: dict[tuple[uuid.UUID, frozenset[str]], bool] = {}

    async def get_effective_permissions(self, admin_id: uuid.UUID) -> set[str]:
        """Names of all permissions the admin currently holds."""
        if admin_id not in self._effective:
            self._effective[admin_id] = await self.permission_repo.get_effective_names(
                admin_id, self.clock()
            )
        return self._effective[admin_id]

    async def get_effective_permission_rows(self, admin_id: uuid.UUID) -> list[AdminPermission]:
        """Permission rows, for display. Not memoized."""
        return await self.permission_repo.get_effective_permissions(admin_id, self.clock())

    async def has_any_permission(self, admin_id: uuid.UUID, names: Iterable[str]) -> bool:
        wanted = frozenset(names)
        if not wanted:
            return False

        if admin_id in self._effective:
            return not wanted.isdisjoint(self._effective[admin_id])

        key = (admin_id, wanted)
        if key not in self._checks:
            granted = await self.permission_repo.count_granted(admin_id, sorted(wanted), self.clock())
            self._checks[key] = granted > 0
        return self._checks[key]

    async def has_permission(self, admin_id: uuid.UUID, name: str) -> bool:
        return await self.has_any_permission(admin_id, [name])

    async def has_all_permissions(self, admin_id: uuid.UUID, names: Iterable[str]) -> bool:
        for name in names:
            if not await self.has_permission(admin_id, name):
                return False
        return True

    async def require(self, admin_id: uuid.UUID, *names: str, any_of: bool = False) -> None:
        """
        Raise ForbiddenError unless the admin holds the permission(s).

        Args:
            admin_id: Admin to check
            names: Permission names
            any_of: Accept any one of ``names`` instead of requiring all
        """
        if any_of:
            allowed = await self.has_any_permission(admin_id, names)
        else:
            allowed = await self.has_all_permissions(admin_id, names)

        if not allowed:
            logger.info(f"Permission denied: admin={admin_id}, required={list(names)}")
            raise ForbiddenError(required_permissions=list(names))

    def invalidate(self, admin_id: uuid.UUID | None = None) -> None:
        """Forget memoized results, e.g. after the admin's roles changed."""
        if admin_id is None:
            self._effective.clear()
            self._checks.clear()
            return
        self._effective.pop(admin_id, None)
        for key in [key for key in self._checks if key[0] == admin_id]:
            del self._checks[key]
