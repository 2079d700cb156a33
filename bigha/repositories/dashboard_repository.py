"""
Dashboard repository.

Read-only aggregate queries behind the admin dashboard. Every method issues
a single statement and returns plain Python values, so DashboardService can
run them concurrently, each in its own session.

Time windows are half-open: ``start <= ts < end``.
"""

import uuid
from datetime import datetime
from typing import Any

from sqlalchemy import ColumnElement, case, distinct, func, select
from sqlalchemy.ext.asyncio import AsyncSession

from bigha.models.enums import ApprovalStatus, PublicationStatus
from bigha.models.inquiry import PropertyInquiry
from bigha.models.platform_user import PlatformUser
from bigha.models.property import Property, PropertyView
from bigha.schemas.dashboard import DashboardFilters


def property_conditions(
    filters: DashboardFilters | None,
    include_date_range: bool = True,
) -> list[ColumnElement[bool]]:
    """
    Translate dashboard filters into WHERE clauses on ``properties``.

    The date range applies to ``Property.created_at``.
    """
    conditions: list[ColumnElement[bool]] = []
    if filters is None:
        return conditions

    if include_date_range and filters.date_range is not None:
        conditions.append(Property.created_at >= filters.date_range.start_date)
        conditions.append(Property.created_at < filters.date_range.end_date)
    if filters.cities:
        conditions.append(Property.city.in_(filters.cities))
    if filters.states:
        conditions.append(Property.state.in_(filters.states))
    if filters.property_types:
        conditions.append(Property.property_type.in_(filters.property_types))
    if filters.agent_ids:
        conditions.append(Property.created_by_user_id.in_(filters.agent_ids))
    return conditions


def pending_conditions() -> list[ColumnElement[bool]]:
    return [Property.approval_status == ApprovalStatus.PENDING]


def active_listing_conditions() -> list[ColumnElement[bool]]:
    """A listing is live when it is active, approved and published."""
    return [
        Property.is_active.is_(True),
        Property.approval_status == ApprovalStatus.APPROVED,
        Property.status == PublicationStatus.PUBLISHED,
    ]


def property_id_condition(property_id: uuid.UUID) -> ColumnElement[bool]:
    return Property.id == property_id


def _to_float(value: Any) -> float:
    return float(value) if value is not None else 0.0


def _per_property_count(model):
    """``(property_id, total)`` subquery counting rows of ``model`` per property."""
    return (
        select(model.property_id, func.count(model.id).label("total"))
        .group_by(model.property_id)
        .subquery()
    )


class DashboardRepository:
    """Aggregate queries over properties, inquiries, views and platform users."""

    def __init__(self, session: AsyncSession):
        self.session = session

    async def _scalar(self, query) -> Any:
        result = await self.session.execute(query)
        return result.scalar_one()

    # -------------------------------------------------------------------------
    # Counts
    # -------------------------------------------------------------------------

    async def count_properties(self, conditions: list[ColumnElement[bool]]) -> int:
        query = select(func.count()).select_from(Property).where(*conditions)
        return await self._scalar(query)

    async def count_created_between(self, start: datetime, end: datetime) -> int:
        return await self.count_properties(
            [Property.created_at >= start, Property.created_at < end]
        )

    async def count_approved_between(self, start: datetime, end: datetime) -> int:
        """Properties currently APPROVED whose approval happened in the window."""
        return await self.count_properties(
            [
                Property.approval_status == ApprovalStatus.APPROVED,
                Property.approved_at >= start,
                Property.approved_at < end,
            ]
        )

    async def count_rejected_between(self, start: datetime, end: datetime) -> int:
        return await self.count_properties(
            [
                Property.approval_status == ApprovalStatus.REJECTED,
                Property.rejected_at >= start,
                Property.rejected_at < end,
            ]
        )

    async def count_inquiries_between(self, start: datetime, end: datetime) -> int:
        query = select(func.count()).select_from(PropertyInquiry).where(
            PropertyInquiry.created_at >= start,
            PropertyInquiry.created_at < end,
        )
        return await self._scalar(query)

    async def count_views_between(self, start: datetime, end: datetime) -> int:
        query = select(func.count()).select_from(PropertyView).where(
            PropertyView.viewed_at >= start,
            PropertyView.viewed_at < end,
        )
        return await self._scalar(query)

    async def revenue_between(self, start: datetime, end: datetime, commission_rate: float) -> float:
        """Commission proxy: ``sum(price) * rate`` over APPROVED rows updated in the window."""
        query = select(func.coalesce(func.sum(Property.price), 0)).where(
            Property.approval_status == ApprovalStatus.APPROVED,
            Property.updated_at >= start,
            Property.updated_at < end,
        )
        total = await self._scalar(query)
        return round(_to_float(total) * commission_rate, 2)

    # -------------------------------------------------------------------------
    # Activity sources
    # -------------------------------------------------------------------------

    async def recent_properties(self, limit: int) -> list[dict[str, Any]]:
        """Newest property creations, newest first."""
        query = (
            select(
                Property.id,
                Property.title,
                Property.owner_name,
                Property.city,
                Property.state,
                Property.created_at,
            )
            .order_by(Property.created_at.desc(), Property.id)
            .limit(limit)
        )
        result = await self.session.execute(query)
        return [dict(row._mapping) for row in result.all()]

    async def recent_inquiries(self, limit: int) -> list[dict[str, Any]]:
        """Newest inquiries with their property's location, newest first."""
        query = (
            select(
                PropertyInquiry.id,
                PropertyInquiry.property_id,
                PropertyInquiry.name,
                PropertyInquiry.created_at,
                Property.title,
                Property.city,
                Property.state,
            )
            .join(Property, Property.id == PropertyInquiry.property_id)
            .order_by(PropertyInquiry.created_at.desc(), PropertyInquiry.id)
            .limit(limit)
        )
        result = await self.session.execute(query)
        return [dict(row._mapping) for row in result.all()]

    # -------------------------------------------------------------------------
    # Distributions and rankings
    # -------------------------------------------------------------------------

    async def status_distribution(
        self, conditions: list[ColumnElement[bool]]
    ) -> list[tuple[ApprovalStatus, int]]:
        query = (
            select(Property.approval_status, func.count())
            .where(*conditions)
            .group_by(Property.approval_status)
        )
        result = await self.session.execute(query)
        return [(status, count) for status, count in result.all()]

    async def top_cities(
        self, conditions: list[ColumnElement[bool]], limit: int
    ) -> list[dict[str, Any]]:
        """
        Cities ranked by number of listings.

        Inquiries are pre-aggregated per property so the join keeps one row
        per listing and the average price is not skewed.
        """
        inquiries = _per_property_count(PropertyInquiry)
        listings = func.count(Property.id)
        query = (
            select(
                Property.city,
                Property.state,
                listings.label("property_count"),
                func.avg(Property.price).label("average_price"),
                func.coalesce(func.sum(inquiries.c.total), 0).label("inquiry_count"),
            )
            .select_from(Property)
            .outerjoin(inquiries, inquiries.c.property_id == Property.id)
            .where(Property.city.is_not(None), *conditions)
            .group_by(Property.city, Property.state)
            .order_by(listings.desc(), Property.city)
            .limit(limit)
        )
        result = await self.session.execute(query)
        return [
            {
                "city": row.city,
                "state": row.state,
                "property_count": row.property_count,
                "average_price": round(_to_float(row.average_price), 2),
                "inquiry_count": int(row.inquiry_count),
            }
            for row in result.all()
        ]

    async def agent_stats(
        self,
        conditions: list[ColumnElement[bool]],
        limit: int,
        commission_rate: float,
    ) -> list[dict[str, Any]]:
        """Listing volume per platform user, busiest first."""
        approved = Property.approval_status == ApprovalStatus.APPROVED
        query = (
            select(
                Property.created_by_user_id.label("agent_id"),
                func.count().label("total_listings"),
                func.sum(case((approved, 1), else_=0)).label("approved_listings"),
                func.coalesce(func.sum(case((approved, Property.price), else_=0)), 0).label("price_total"),
            )
            .where(Property.created_by_user_id.is_not(None), *conditions)
            .group_by(Property.created_by_user_id)
            .order_by(func.count().desc(), Property.created_by_user_id)
            .limit(limit)
        )
        result = await self.session.execute(query)
        return [
            {
                "agent_id": row.agent_id,
                "total_listings": row.total_listings,
                "approved_listings": int(row.approved_listings or 0),
                "revenue": round(_to_float(row.price_total) * commission_rate, 2),
            }
            for row in result.all()
        ]

    async def agent_inquiry_counts(
        self,
        agent_ids: list[uuid.UUID],
        conditions: list[ColumnElement[bool]],
    ) -> dict[uuid.UUID, int]:
        if not agent_ids:
            return {}
        query = (
            select(Property.created_by_user_id, func.count(PropertyInquiry.id))
            .select_from(Property)
            .join(PropertyInquiry, PropertyInquiry.property_id == Property.id)
            .where(Property.created_by_user_id.in_(agent_ids), *conditions)
            .group_by(Property.created_by_user_id)
        )
        result = await self.session.execute(query)
        return {agent_id: count for agent_id, count in result.all()}

    async def platform_user_names(self, user_ids: list[uuid.UUID]) -> dict[uuid.UUID, str]:
        if not user_ids:
            return {}
        result = await self.session.execute(
            select(PlatformUser).where(PlatformUser.id.in_(user_ids))
        )
        return {user.id: user.full_name for user in result.scalars().all()}

    # -------------------------------------------------------------------------
    # Property analytics
    # -------------------------------------------------------------------------

    @staticmethod
    def _event_window(column, start: datetime | None, end: datetime | None) -> list[ColumnElement[bool]]:
        window = []
        if start is not None:
            window.append(column >= start)
        if end is not None:
            window.append(column < end)
        return window

    async def view_totals(
        self,
        conditions: list[ColumnElement[bool]],
        start: datetime | None = None,
        end: datetime | None = None,
    ) -> tuple[int, int]:
        """(total views, distinct visitor IPs) for matching properties."""
        query = (
            select(func.count(PropertyView.id), func.count(distinct(PropertyView.ip_address)))
            .select_from(PropertyView)
            .join(Property, Property.id == PropertyView.property_id)
            .where(*conditions, *self._event_window(PropertyView.viewed_at, start, end))
        )
        result = await self.session.execute(query)
        total, unique = result.one()
        return total, unique

    async def inquiry_total(
        self,
        conditions: list[ColumnElement[bool]],
        start: datetime | None = None,
        end: datetime | None = None,
    ) -> int:
        query = (
            select(func.count(PropertyInquiry.id))
            .select_from(PropertyInquiry)
            .join(Property, Property.id == PropertyInquiry.property_id)
            .where(*conditions, *self._event_window(PropertyInquiry.created_at, start, end))
        )
        return await self._scalar(query)

    async def top_properties(
        self,
        conditions: list[ColumnElement[bool]],
        limit: int,
        commission_rate: float,
    ) -> list[dict[str, Any]]:
        """Properties ranked by views, then inquiries."""
        views = func.count(distinct(PropertyView.id))
        inquiries = func.count(distinct(PropertyInquiry.id))
        query = (
            select(
                Property.id,
                Property.title,
                Property.price,
                views.label("views"),
                inquiries.label("inquiries"),
            )
            .select_from(Property)
            .outerjoin(PropertyView, PropertyView.property_id == Property.id)
            .outerjoin(PropertyInquiry, PropertyInquiry.property_id == Property.id)
            .where(*conditions)
            .group_by(Property.id, Property.title, Property.price)
            .order_by(views.desc(), inquiries.desc(), Property.id)
            .limit(limit)
        )
        result = await self.session.execute(query)
        return [
            {
                "property_id": row.id,
                "title": row.title,
                "views": row.views,
                "inquiries": int(row.inquiries),
                "conversion_rate": round(row.inquiries / row.views * 100, 2) if row.views else 0.0,
                "revenue": round(_to_float(row.price) * commission_rate, 2),
            }
            for row in result.all()
        ]

    async def geographic_distribution(
        self, conditions: list[ColumnElement[bool]], limit: int = 15
    ) -> list[dict[str, Any]]:
        inquiries = _per_property_count(PropertyInquiry)
        listings = func.count(Property.id)
        query = (
            select(
                Property.city.label("region"),
                listings.label("properties"),
                func.coalesce(func.sum(inquiries.c.total), 0).label("inquiries"),
                func.avg(Property.price).label("average_price"),
            )
            .select_from(Property)
            .outerjoin(inquiries, inquiries.c.property_id == Property.id)
            .where(*conditions)
            .group_by(Property.city)
            .order_by(listings.desc(), Property.city)
            .limit(limit)
        )
        result = await self.session.execute(query)
        return [
            {
                "region": row.region,
                "properties": row.properties,
                "inquiries": int(row.inquiries),
                "average_price": round(_to_float(row.average_price), 2),
            }
            for row in result.all()
        ]

