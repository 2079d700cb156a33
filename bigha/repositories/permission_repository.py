"""
Permission repository.

Besides plain lookups, this repository owns the two traversal queries the
permission resolver is built on:

    admin -> admin_user_roles (unexpired) -> admin_roles (active)
          -> admin_role_permissions -> admin_permissions

``get_effective_names`` materializes the de-duplicated set; ``count_granted``
answers "does the admin hold any of these" with a single COUNT.
"""

import uuid
from datetime import datetime

from sqlalchemy import Select, func, or_, select
from sqlalchemy.ext.asyncio import AsyncSession

from bigha.models.admin import (
    AdminPermission,
    AdminRole,
    AdminRolePermission,
    AdminUserRole,
)
from bigha.repositories.base import BaseRepository


class PermissionRepository(BaseRepository[AdminPermission]):
    """Repository for AdminPermission model operations."""

    def __init__(self, session: AsyncSession):
        super().__init__(AdminPermission, session)

    async def get_by_name(self, name: str) -> AdminPermission | None:
        result = await self.session.execute(
            select(AdminPermission).where(AdminPermission.name == name)
        )
        return result.scalar_one_or_none()

    async def get_by_ids(self, permission_ids: list[uuid.UUID]) -> list[AdminPermission]:
        if not permission_ids:
            return []
        result = await self.session.execute(
            select(AdminPermission).where(AdminPermission.id.in_(permission_ids))
        )
        return list(result.scalars().all())

    async def list_ordered(self) -> list[AdminPermission]:
        """All permissions ordered by resource, then action."""
        result = await self.session.execute(
            select(AdminPermission).order_by(AdminPermission.resource, AdminPermission.action)
        )
        return list(result.scalars().all())

    # -------------------------------------------------------------------------
    # Effective permission traversal
    # -------------------------------------------------------------------------

    @staticmethod
    def _granted_to(admin_id: uuid.UUID, now: datetime, query: Select) -> Select:
        return (
            query.select_from(AdminUserRole)
            .join(AdminRole, AdminRole.id == AdminUserRole.role_id)
            .join(AdminRolePermission, AdminRolePermission.role_id == AdminRole.id)
            .join(AdminPermission, AdminPermission.id == AdminRolePermission.permission_id)
            .where(
                AdminUserRole.admin_id == admin_id,
                AdminRole.is_active.is_(True),
                or_(AdminUserRole.expires_at.is_(None), AdminUserRole.expires_at > now),
            )
        )

    async def get_effective_names(self, admin_id: uuid.UUID, now: datetime) -> set[str]:
        """Names of every permission reachable through the admin's current roles."""
        query = self._granted_to(admin_id, now, select(AdminPermission.name).distinct())
        result = await self.session.execute(query)
        return set(result.scalars().all())

    async def get_effective_permissions(
        self, admin_id: uuid.UUID, now: datetime
    ) -> list[AdminPermission]:
        """Permission rows reachable through the admin's current roles, ordered by name."""
        query = self._granted_to(admin_id, now, select(AdminPermission).distinct())
        query = query.order_by(AdminPermission.name)
        result = await self.session.execute(query)
        return list(result.scalars().all())

    async def count_granted(self, admin_id: uuid.UUID, names: list[str], now: datetime) -> int:
        """Number of grant paths from the admin to any of ``names`` (0 means none held)."""
        if not names:
            return 0
        query = self._granted_to(admin_id, now, select(func.count())).where(
            AdminPermission.name.in_(names)
        )
        result = await self.session.execute(query)
        return result.scalar_one()
