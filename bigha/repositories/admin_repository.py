"""
AdminUser repository.

Adds email lookups, eager loading of the role/permission graph and search
on top of BaseRepository.
"""

import uuid

from sqlalchemy import Select, func, or_, select
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import selectinload

from bigha.models.admin import AdminRole, AdminRolePermission, AdminUser, AdminUserRole
from bigha.repositories.base import BaseRepository


def _with_rbac_graph(query: Select) -> Select:
    """Eager-load assignments -> role -> grants -> permission."""
    return query.options(
        selectinload(AdminUser.role_assignments)
        .selectinload(AdminUserRole.role)
        .selectinload(AdminRole.permission_grants)
        .selectinload(AdminRolePermission.permission)
    )


class AdminUserRepository(BaseRepository[AdminUser]):
    """Repository for AdminUser model operations."""

    def __init__(self, session: AsyncSession):
        super().__init__(AdminUser, session)

    async def get_by_email(self, email: str) -> AdminUser | None:
        """Get an admin by email (case-insensitive), active or not."""
        query = select(AdminUser).where(func.lower(AdminUser.email) == email.lower())
        result = await self.session.execute(query)
        return result.scalar_one_or_none()

    async def get_active_by_email(self, email: str) -> AdminUser | None:
        """Get an active admin by email. Disabled admins are treated as unknown."""
        query = select(AdminUser).where(
            func.lower(AdminUser.email) == email.lower(),
            AdminUser.is_active.is_(True),
        )
        result = await self.session.execute(query)
        return result.scalar_one_or_none()

    async def email_exists(self, email: str, exclude_id: uuid.UUID | None = None) -> bool:
        query = select(func.count()).select_from(AdminUser).where(
            func.lower(AdminUser.email) == email.lower()
        )
        if exclude_id is not None:
            query = query.where(AdminUser.id != exclude_id)
        result = await self.session.execute(query)
        return result.scalar_one() > 0

    async def get_with_roles(self, admin_id: uuid.UUID) -> AdminUser | None:
        """
        Get an admin with the whole RBAC graph loaded.

        ``populate_existing`` makes sure assignments changed earlier in the
        same session are re-read rather than served from the identity map.
        """
        query = (
            _with_rbac_graph(select(AdminUser).where(AdminUser.id == admin_id))
            .execution_options(populate_existing=True)
        )
        result = await self.session.execute(query)
        return result.scalar_one_or_none()

    def _filtered(self, query: Select, search: str | None, is_active: bool | None) -> Select:
        if search:
            pattern = f"%{search.lower()}%"
            query = query.where(
                or_(
                    func.lower(AdminUser.email).like(pattern),
                    func.lower(AdminUser.first_name).like(pattern),
                    func.lower(AdminUser.last_name).like(pattern),
                    func.lower(AdminUser.department).like(pattern),
                )
            )
        if is_active is not None:
            query = query.where(AdminUser.is_active.is_(is_active))
        return query

    async def search(
        self,
        search: str | None = None,
        is_active: bool | None = None,
        offset: int = 0,
        limit: int = 20,
    ) -> tuple[list[AdminUser], int]:
        """
        List admins, newest first, with their roles loaded.

        Returns:
            Tuple of (admins for this page, total matching count)
        """
        count_query = self._filtered(select(func.count()).select_from(AdminUser), search, is_active)
        total = (await self.session.execute(count_query)).scalar_one()

        query = self._filtered(_with_rbac_graph(select(AdminUser)), search, is_active)
        query = query.order_by(AdminUser.created_at.desc()).offset(offset).limit(limit)
        result = await self.session.execute(query)
        return list(result.scalars().all()), total

    async def count_active(self) -> int:
        result = await self.session.execute(
            select(func.count()).select_from(AdminUser).where(AdminUser.is_active.is_(True))
        )
        return result.scalar_one()
