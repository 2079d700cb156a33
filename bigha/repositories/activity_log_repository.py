"""
AdminActivityLog repository.

Activity logs are append-only: this repository only creates and reads.
"""

import uuid

from sqlalchemy import Select, func, select
from sqlalchemy.ext.asyncio import AsyncSession

from bigha.models.activity_log import AdminActivityLog
from bigha.models.enums import ActivityAction
from bigha.repositories.base import BaseRepository


class ActivityLogRepository(BaseRepository[AdminActivityLog]):
    def __init__(self, session: AsyncSession):
        super().__init__(AdminActivityLog, session)

    async def create(self, entry: AdminActivityLog) -> AdminActivityLog:
        """Stage a new entry; it becomes durable with the caller's commit."""
        self.session.add(entry)
        await self.session.flush()
        return entry

    @staticmethod
    def _filtered(
        query: Select,
        admin_id: uuid.UUID | None,
        action: ActivityAction | None,
        resource: str | None,
        resource_id: uuid.UUID | None,
    ) -> Select:
        if admin_id is not None:
            query = query.where(AdminActivityLog.admin_id == admin_id)
        if action is not None:
            query = query.where(AdminActivityLog.action == action)
        if resource is not None:
            query = query.where(AdminActivityLog.resource == resource)
        if resource_id is not None:
            query = query.where(AdminActivityLog.resource_id == resource_id)
        return query

    async def search(
        self,
        admin_id: uuid.UUID | None = None,
        action: ActivityAction | None = None,
        resource: str | None = None,
        resource_id: uuid.UUID | None = None,
        offset: int = 0,
        limit: int = 50,
    ) -> tuple[list[AdminActivityLog], int]:
        """
        Filter activity logs, newest first.

        Returns:
            Tuple of (entries for this page, total matching count)
        """
        count_query = self._filtered(
            select(func.count()).select_from(AdminActivityLog),
            admin_id, action, resource, resource_id,
        )
        total = (await self.session.execute(count_query)).scalar_one()

        query = self._filtered(select(AdminActivityLog), admin_id, action, resource, resource_id)
        query = query.order_by(AdminActivityLog.created_at.desc()).offset(offset).limit(limit)
        result = await self.session.execute(query)
        return list(result.scalars().all()), total
