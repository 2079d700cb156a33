"""
Property repositories.

This module provides database operations for the property aggregate:
- PropertyRepository: detail loading, filtered listing, approval queues
- PropertySeoRepository: slug lookups
- PropertyImageRepository: gallery ordering and main-image bookkeeping
"""

import uuid

from sqlalchemy import Select, func, or_, select, update
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import selectinload

from bigha.models.enums import ApprovalStatus
from bigha.models.property import (
    Property,
    PropertyImage,
    PropertySeo,
)
from bigha.repositories.base import BaseRepository
from bigha.schemas.property import PropertyFilter


def _with_satellites(query: Select) -> Select:
    return query.options(
        selectinload(Property.seo),
        selectinload(Property.verification),
        selectinload(Property.images),
        selectinload(Property.price_history),
    )


class PropertyRepository(BaseRepository[Property]):
    """Repository for Property model operations."""

    def __init__(self, session: AsyncSession):
        super().__init__(Property, session)

    async def get_detail(self, property_id: uuid.UUID) -> Property | None:
        """
        Get a property with every satellite loaded.

        Uses ``populate_existing`` so that changes made earlier in the same
        session (new images, price history rows) are visible.
        """
        query = (
            _with_satellites(select(Property).where(Property.id == property_id))
            .execution_options(populate_existing=True)
        )
        result = await self.session.execute(query)
        return result.scalar_one_or_none()

    @staticmethod
    def _filtered(query: Select, filters: PropertyFilter | None) -> Select:
        if filters is None:
            return query
        if filters.approval_status is not None:
            query = query.where(Property.approval_status == filters.approval_status)
        if filters.status is not None:
            query = query.where(Property.status == filters.status)
        if filters.property_type is not None:
            query = query.where(Property.property_type == filters.property_type)
        if filters.city:
            query = query.where(func.lower(Property.city) == filters.city.lower())
        if filters.state:
            query = query.where(func.lower(Property.state) == filters.state.lower())
        if filters.is_active is not None:
            query = query.where(Property.is_active.is_(filters.is_active))
        if filters.is_featured is not None:
            query = query.where(Property.is_featured.is_(filters.is_featured))
        if filters.is_verified is not None:
            query = query.where(Property.is_verified.is_(filters.is_verified))
        if filters.search:
            pattern = f"%{filters.search.lower()}%"
            query = query.where(
                or_(
                    func.lower(Property.title).like(pattern),
                    func.lower(Property.city).like(pattern),
                )
            )
        return query

    async def search(
        self,
        filters: PropertyFilter | None = None,
        offset: int = 0,
        limit: int = 20,
        oldest_first: bool = False,
    ) -> tuple[list[Property], int]:
        """
        List properties matching ``filters``.

        Args:
            filters: Optional listing filters
            offset: Number of rows to skip
            limit: Page size
            oldest_first: Order by creation ascending (approval queues)

        Returns:
            Tuple of (properties for this page, total matching count)
        """
        count_query = self._filtered(select(func.count()).select_from(Property), filters)
        total = (await self.session.execute(count_query)).scalar_one()

        order = Property.created_at.asc() if oldest_first else Property.created_at.desc()
        query = self._filtered(_with_satellites(select(Property)), filters)
        query = query.order_by(order, Property.id).offset(offset).limit(limit)
        result = await self.session.execute(query)
        return list(result.scalars().all()), total

    async def by_approval_status(
        self,
        status: ApprovalStatus,
        offset: int = 0,
        limit: int = 20,
        oldest_first: bool = True,
    ) -> tuple[list[Property], int]:
        return await self.search(
            PropertyFilter(approval_status=status),
            offset=offset,
            limit=limit,
            oldest_first=oldest_first,
        )


class PropertySeoRepository(BaseRepository[PropertySeo]):
    def __init__(self, session: AsyncSession):
        super().__init__(PropertySeo, session)

    async def slug_exists(self, slug: str, exclude_property_id: uuid.UUID | None = None) -> bool:
        """True if another property already uses ``slug``."""
        query = select(func.count()).select_from(PropertySeo).where(PropertySeo.slug == slug)
        if exclude_property_id is not None:
            query = query.where(PropertySeo.property_id != exclude_property_id)
        return (await self.session.execute(query)).scalar_one() > 0


class PropertyImageRepository(BaseRepository[PropertyImage]):
    def __init__(self, session: AsyncSession):
        super().__init__(PropertyImage, session)

    async def get_for_property(self, property_id: uuid.UUID, image_id: uuid.UUID) -> PropertyImage | None:
        result = await self.session.execute(
            select(PropertyImage).where(
                PropertyImage.id == image_id,
                PropertyImage.property_id == property_id,
            )
        )
        return result.scalar_one_or_none()

    async def clear_main(self, property_id: uuid.UUID) -> None:
        """Demote the current main image, if any."""
        await self.session.execute(
            update(PropertyImage)
            .where(PropertyImage.property_id == property_id, PropertyImage.is_main.is_(True))
            .values(is_main=False)
        )

    async def next_sort_order(self, property_id: uuid.UUID) -> int:
        result = await self.session.execute(
            select(func.coalesce(func.max(PropertyImage.sort_order), -1)).where(
                PropertyImage.property_id == property_id
            )
        )
        return result.scalar_one() + 1

