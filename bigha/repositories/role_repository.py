"""
Role and role-assignment repositories.

This module provides database operations for AdminRole, AdminRolePermission
and AdminUserRole: slug lookups, paginated listing with permissions and
holder counts, grant replacement and assignment bookkeeping.
"""

import uuid
from datetime import datetime

from sqlalchemy import delete, func, select
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import selectinload

from bigha.models.admin import AdminRole, AdminRolePermission, AdminUserRole
from bigha.models.mixins import utcnow
from bigha.repositories.base import BaseRepository


class RoleRepository(BaseRepository[AdminRole]):
    """Repository for AdminRole model operations."""

    def __init__(self, session: AsyncSession):
        super().__init__(AdminRole, session)

    def _with_permissions(self):
        return select(AdminRole).options(
            selectinload(AdminRole.permission_grants).selectinload(AdminRolePermission.permission)
        )

    async def get_with_permissions(self, role_id: uuid.UUID) -> AdminRole | None:
        query = (
            self._with_permissions()
            .where(AdminRole.id == role_id)
            .execution_options(populate_existing=True)
        )
        result = await self.session.execute(query)
        return result.scalar_one_or_none()

    async def get_by_ids(self, role_ids: list[uuid.UUID]) -> list[AdminRole]:
        if not role_ids:
            return []
        result = await self.session.execute(select(AdminRole).where(AdminRole.id.in_(role_ids)))
        return list(result.scalars().all())

    async def slug_exists(self, slug: str, exclude_id: uuid.UUID | None = None) -> bool:
        query = select(func.count()).select_from(AdminRole).where(AdminRole.slug == slug)
        if exclude_id is not None:
            query = query.where(AdminRole.id != exclude_id)
        return (await self.session.execute(query)).scalar_one() > 0

    async def name_exists(self, name: str, exclude_id: uuid.UUID | None = None) -> bool:
        query = select(func.count()).select_from(AdminRole).where(
            func.lower(AdminRole.name) == name.lower()
        )
        if exclude_id is not None:
            query = query.where(AdminRole.id != exclude_id)
        return (await self.session.execute(query)).scalar_one() > 0

    async def list_roles(self, offset: int = 0, limit: int = 50) -> tuple[list[AdminRole], int]:
        """
        List roles ordered by name, with permissions loaded.

        Returns:
            Tuple of (roles for this page, total number of roles)
        """
        total = await self.count()
        query = self._with_permissions().order_by(AdminRole.name).offset(offset).limit(limit)
        result = await self.session.execute(query)
        return list(result.scalars().all()), total

    async def count_holders(self, role_id: uuid.UUID) -> int:
        """Number of admins currently assigned the role (expired assignments included)."""
        query = select(func.count()).select_from(AdminUserRole).where(AdminUserRole.role_id == role_id)
        return (await self.session.execute(query)).scalar_one()

    async def admins_per_role(self) -> list[tuple[AdminRole, int]]:
        """Every role with the number of admins holding it, most populated first."""
        result = await self.session.execute(select(AdminRole).order_by(AdminRole.name))
        roles = list(result.scalars().all())
        return sorted(((role, role.user_count) for role in roles), key=lambda item: -item[1])

    async def replace_permissions(self, role_id: uuid.UUID, permission_ids: list[uuid.UUID]) -> None:
        """Replace the role's grant set with exactly ``permission_ids``."""
        await self.session.execute(
            delete(AdminRolePermission).where(AdminRolePermission.role_id == role_id)
        )
        for permission_id in dict.fromkeys(permission_ids):
            self.session.add(AdminRolePermission(role_id=role_id, permission_id=permission_id))
        await self.session.flush()


class RoleAssignmentRepository(BaseRepository[AdminUserRole]):
    """Repository for AdminUserRole (admin -> role) assignments."""

    def __init__(self, session: AsyncSession):
        super().__init__(AdminUserRole, session)

    async def get_for_admin(self, admin_id: uuid.UUID) -> list[AdminUserRole]:
        query = select(AdminUserRole).where(AdminUserRole.admin_id == admin_id)
        result = await self.session.execute(query)
        return list(result.scalars().all())

    async def get_role_slugs(self, admin_id: uuid.UUID, now: datetime) -> list[str]:
        """Slugs of the active, unexpired roles held by an admin, alphabetical."""
        query = (
            select(AdminRole.slug)
            .join(AdminUserRole, AdminUserRole.role_id == AdminRole.id)
            .where(
                AdminUserRole.admin_id == admin_id,
                AdminRole.is_active.is_(True),
                (AdminUserRole.expires_at.is_(None)) | (AdminUserRole.expires_at > now),
            )
            .order_by(AdminRole.slug)
        )
        result = await self.session.execute(query)
        return list(result.scalars().all())

    async def add_assignments(
        self,
        admin_id: uuid.UUID,
        role_ids: list[uuid.UUID],
        assigned_by: uuid.UUID | None,
        expires_at: datetime | None = None,
        now: datetime | None = None,
    ) -> list[uuid.UUID]:
        """
        Assign roles to an admin.

        A role the admin holds through an expired assignment, or with a
        different expiry than requested, is renewed in place: the
        ``(admin_id, role_id)`` pair is unique.

        Returns:
            Ids of the roles that were added or renewed
        """
        now = now or utcnow()
        existing = {assignment.role_id: assignment for assignment in await self.get_for_admin(admin_id)}
        changed = []
        for role_id in dict.fromkeys(role_ids):
            assignment = existing.get(role_id)
            if assignment is None:
                self.session.add(
                    AdminUserRole(
                        admin_id=admin_id,
                        role_id=role_id,
                        assigned_by=assigned_by,
                        assigned_at=now,
                        expires_at=expires_at,
                    )
                )
            elif not assignment.is_current(now) or assignment.expires_at != expires_at:
                assignment.assigned_by = assigned_by
                assignment.assigned_at = now
                assignment.expires_at = expires_at
            else:
                continue
            changed.append(role_id)
        await self.session.flush()
        return changed

    async def remove_assignments(self, admin_id: uuid.UUID, role_ids: list[uuid.UUID]) -> int:
        """Remove the given role assignments. Returns number of rows deleted."""
        if not role_ids:
            return 0
        result = await self.session.execute(
            delete(AdminUserRole).where(
                AdminUserRole.admin_id == admin_id,
                AdminUserRole.role_id.in_(role_ids),
            )
        )
        return result.rowcount or 0

    async def remove_all(self, admin_id: uuid.UUID) -> int:
        result = await self.session.execute(
            delete(AdminUserRole).where(AdminUserRole.admin_id == admin_id)
        )
        return result.rowcount or 0
