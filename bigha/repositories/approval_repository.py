"""PropertyApprovalHistory repository. History rows are never updated or deleted here."""

import uuid

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from bigha.models.approval import PropertyApprovalHistory
from bigha.repositories.base import BaseRepository


class ApprovalHistoryRepository(BaseRepository[PropertyApprovalHistory]):
    def __init__(self, session: AsyncSession):
        super().__init__(PropertyApprovalHistory, session)

    async def append(self, entry: PropertyApprovalHistory) -> PropertyApprovalHistory:
        """Stage a history row; it is committed with the property update."""
        self.session.add(entry)
        await self.session.flush()
        return entry

    async def list_for_property(
        self,
        property_id: uuid.UUID,
        offset: int = 0,
        limit: int = 100,
    ) -> list[PropertyApprovalHistory]:
        """History of one property, newest first."""
        query = (
            select(PropertyApprovalHistory)
            .where(PropertyApprovalHistory.property_id == property_id)
            .order_by(PropertyApprovalHistory.created_at.desc(), PropertyApprovalHistory.id)
            .offset(offset)
            .limit(limit)
        )
        result = await self.session.execute(query)
        return list(result.scalars().all())
