"""
Dashboard aggregation service.

Every call recomputes from the live store. Independent sub-aggregates are
fanned out in an ``asyncio.TaskGroup``, each in its own session taken from
the request's session factory. The first failure cancels the rest and fails
the whole call.
"""

import asyncio
import calendar
import heapq
import logging
import uuid
from collections.abc import Awaitable, Callable, Coroutine
from datetime import datetime, timedelta
from itertools import islice
from typing import Any, TypeVar

from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from bigha.core.config import settings
from bigha.exceptions import AppException, InternalError
from bigha.models.enums import ActivityType, ApprovalStatus
from bigha.models.mixins import utcnow
from bigha.repositories.dashboard_repository import (
    DashboardRepository,
    active_listing_conditions,
    pending_conditions,
    property_conditions,
    property_id_condition,
)
from bigha.schemas.dashboard import (
    ActivityFeed,
    AgentPerformance,
    CityStats,
    DashboardFilters,
    DashboardMetric,
    DashboardStats,
    DateRange,
    GeographicStat,
    MonthlyTrend,
    PropertyAnalytics,
    PropertyStatusCount,
    RealTimeMetrics,
    RecentActivity,
    TodayActivity,
    TopProperty,
)

logger = logging.getLogger(__name__)

T = TypeVar("T")

TOP_PROPERTIES_LIMIT = 10
GEOGRAPHIC_REGIONS_LIMIT = 15


# =============================================================================
# Calendar helpers
# =============================================================================


def start_of_day(moment: datetime) -> datetime:
    return moment.replace(hour=0, minute=0, second=0, microsecond=0)


def shift_months(moment: datetime, months: int) -> datetime:
    """
    Move ``moment`` by whole calendar months, clamping the day.

    Example:
        >>> shift_months(datetime(2024, 3, 31), -1)
        datetime.datetime(2024, 2, 29, 0, 0)
    """
    index = moment.year * 12 + (moment.month - 1) + months
    year, month = divmod(index, 12)
    month += 1
    day = min(moment.day, calendar.monthrange(year, month)[1])
    return moment.replace(year=year, month=month, day=day)


def month_windows(now: datetime, months: int) -> list[tuple[datetime, datetime]]:
    """Half-open calendar-month windows ending with the current month, oldest first."""
    current = start_of_day(now).replace(day=1)
    windows = []
    for back in range(months - 1, -1, -1):
        start = shift_months(current, -back)
        windows.append((start, shift_months(start, 1)))
    return windows


def _location(city: str | None, state: str | None) -> str | None:
    return ", ".join(part for part in (city, state) if part) or None


def _property_activity(row: dict[str, Any]) -> RecentActivity:
    return RecentActivity(
        id=f"property-{row['id']}",
        type=ActivityType.PROPERTY_CREATED,
        title="New property listed",
        description=row["title"],
        timestamp=row["created_at"],
        property_id=row["id"],
        user_name=row["owner_name"],
        location=_location(row["city"], row["state"]),
    )


def _inquiry_activity(row: dict[str, Any]) -> RecentActivity:
    return RecentActivity(
        id=f"inquiry-{row['id']}",
        type=ActivityType.INQUIRY_RECEIVED,
        title="New inquiry received",
        description=f"Inquiry for {row['title']}",
        timestamp=row["created_at"],
        property_id=row["property_id"],
        user_name=row["name"],
        location=_location(row["city"], row["state"]),
    )


class DashboardService:
    """
    Service class for admin dashboard analytics.

    Usage:
        dashboard = DashboardService(session_factory)
        stats = await dashboard.get_dashboard_stats(DashboardFilters(cities=["Karnal"]))
    """

    def __init__(
        self,
        session_factory: async_sessionmaker[AsyncSession],
        clock: Callable[[], datetime] = utcnow,
    ):
        self.session_factory = session_factory
        self.clock = clock
        self.commission_rate = settings.dashboard_commission_rate

    async def _run(self, work: Callable[..., Awaitable[T]], *args: Any) -> T:
        """Run ``work(repo, *args)`` in a dedicated read-only session."""
        async with self.session_factory() as session:
            return await work(DashboardRepository(session), *args)

    async def _gather(self, *aws: Coroutine[Any, Any, Any]) -> list[Any]:
        """
        Run sub-aggregates concurrently and fail as a whole.

        The first failure cancels every sibling still running, so no session
        outlives the call.
        """
        try:
            async with asyncio.TaskGroup() as group:
                tasks = [group.create_task(aw) for aw in aws]
        except ExceptionGroup as exc_group:
            app_errors = [exc for exc in exc_group.exceptions if isinstance(exc, AppException)]
            if app_errors:
                raise app_errors[0] from None
            logger.error("Dashboard aggregation failed", exc_info=exc_group)
            raise InternalError("Failed to compute dashboard data") from exc_group
        return [task.result() for task in tasks]

    # -------------------------------------------------------------------------
    # Sub-aggregates (each runs on its own repository/session)
    # -------------------------------------------------------------------------

    async def _today_activity(self, repo: DashboardRepository, now: datetime) -> TodayActivity:
        start = start_of_day(now)
        end = start + timedelta(days=1)
        return TodayActivity(
            views=await repo.count_views_between(start, end),
            inquiries=await repo.count_inquiries_between(start, end),
            new_listings=await repo.count_created_between(start, end),
            approvals=await repo.count_approved_between(start, end),
            rejections=await repo.count_rejected_between(start, end),
        )

    async def _month_trend(
        self, repo: DashboardRepository, start: datetime, end: datetime
    ) -> MonthlyTrend:
        return MonthlyTrend(
            month=calendar.month_name[start.month],
            year=start.year,
            properties=await repo.count_created_between(start, end),
            inquiries=await repo.count_inquiries_between(start, end),
            approvals=await repo.count_approved_between(start, end),
            revenue=await repo.revenue_between(start, end, self.commission_rate),
        )

    async def _status_distribution(
        self, repo: DashboardRepository, conditions: list
    ) -> list[PropertyStatusCount]:
        counts = dict(await repo.status_distribution(conditions))
        total = sum(counts.values())
        return [
            PropertyStatusCount(
                status=status,
                count=counts.get(status, 0),
                percentage=round(counts.get(status, 0) / total * 100, 2) if total else 0.0,
            )
            for status in ApprovalStatus
        ]

    async def _top_cities(
        self, repo: DashboardRepository, conditions: list, limit: int
    ) -> list[CityStats]:
        return [CityStats(**row) for row in await repo.top_cities(conditions, limit)]

    async def _agents(
        self, repo: DashboardRepository, conditions: list, limit: int
    ) -> list[AgentPerformance]:
        """Agent ranking; inquiry counts and names need the agent ids first."""
        stats = await repo.agent_stats(conditions, limit, self.commission_rate)
        agent_ids = [row["agent_id"] for row in stats]
        inquiries = await repo.agent_inquiry_counts(agent_ids, conditions)
        names = await repo.platform_user_names(agent_ids)
        return [
            AgentPerformance(
                agent_id=row["agent_id"],
                agent_name=names.get(row["agent_id"], "Unknown agent"),
                total_listings=row["total_listings"],
                approved_listings=row["approved_listings"],
                inquiry_count=inquiries.get(row["agent_id"], 0),
                revenue=row["revenue"],
            )
            for row in stats
        ]

    async def _activity_stream(
        self,
        repo: DashboardRepository,
        depth: int,
        activity_types: list[ActivityType] | None,
    ) -> list[RecentActivity]:
        """
        k-way merge of the newest events of each source, newest first.

        Each source is already ordered by timestamp descending, so
        ``heapq.merge`` only has to interleave them.
        """
        wanted = set(activity_types or ActivityType)
        sources = []
        if ActivityType.PROPERTY_CREATED in wanted:
            sources.append(map(_property_activity, await repo.recent_properties(depth)))
        if ActivityType.INQUIRY_RECEIVED in wanted:
            sources.append(map(_inquiry_activity, await repo.recent_inquiries(depth)))
        merged = heapq.merge(*sources, key=lambda activity: activity.timestamp, reverse=True)
        return list(islice(merged, depth))

    # -------------------------------------------------------------------------
    # Public operations
    # -------------------------------------------------------------------------

    async def get_dashboard_stats(self, filters: DashboardFilters | None = None) -> DashboardStats:
        """
        Full dashboard snapshot.

        Headline metrics compare the filtered set with the same filters
        restricted to the last month.
        """
        now = self.clock()
        filters = filters or DashboardFilters()
        last_month = filters.model_copy(
            update={"date_range": DateRange(start_date=shift_months(now, -1), end_date=now)}
        )
        current = property_conditions(filters)
        previous = property_conditions(last_month)
        windows = month_windows(now, settings.dashboard_trend_months)

        (
            total_now,
            total_before,
            pending_now,
            pending_before,
            active_now,
            active_before,
            today,
            recent,
            distribution,
            top_cities,
            agents,
            *trends,
        ) = await self._gather(
            self._run(DashboardRepository.count_properties, current),
            self._run(DashboardRepository.count_properties, previous),
            self._run(DashboardRepository.count_properties, current + pending_conditions()),
            self._run(DashboardRepository.count_properties, previous + pending_conditions()),
            self._run(DashboardRepository.count_properties, current + active_listing_conditions()),
            self._run(DashboardRepository.count_properties, previous + active_listing_conditions()),
            self._run(self._today_activity, now),
            self._run(self._activity_stream, settings.dashboard_recent_activity_limit, None),
            self._run(self._status_distribution, current),
            self._run(self._top_cities, current, settings.dashboard_top_cities_limit),
            self._run(self._agents, current, settings.dashboard_top_agents_limit),
            *(self._run(self._month_trend, start, end) for start, end in windows),
        )

        return DashboardStats(
            total_properties=DashboardMetric.from_values(total_now, total_before),
            pending_approvals=DashboardMetric.from_values(pending_now, pending_before),
            active_listings=DashboardMetric.from_values(active_now, active_before),
            today_activity=today,
            recent_activities=recent,
            property_status_distribution=distribution,
            monthly_trends=trends,
            top_cities=top_cities,
            agent_performance=agents,
            generated_at=now,
        )

    async def get_real_time_metrics(self) -> RealTimeMetrics:
        now = self.clock()
        today, pending, active = await self._gather(
            self._run(self._today_activity, now),
            self._run(DashboardRepository.count_properties, pending_conditions()),
            self._run(DashboardRepository.count_properties, active_listing_conditions()),
        )
        return RealTimeMetrics(
            today_activity=today,
            pending_approvals=pending,
            active_listings=active,
            generated_at=now,
        )

    async def get_activity_feed(
        self,
        limit: int = 50,
        offset: int = 0,
        activity_types: list[ActivityType] | None = None,
    ) -> ActivityFeed:
        """Merged activity feed, newest first, with offset paging."""
        depth = offset + limit + 1
        (events,) = await self._gather(self._run(self._activity_stream, depth, activity_types))
        return ActivityFeed(
            items=events[offset : offset + limit],
            has_more=len(events) > offset + limit,
        )

    async def get_agent_performance(
        self,
        filters: DashboardFilters | None = None,
        limit: int = 10,
    ) -> list[AgentPerformance]:
        (agents,) = await self._gather(self._run(self._agents, property_conditions(filters), limit))
        return agents

    async def get_property_analytics(
        self,
        property_id: uuid.UUID | None = None,
        date_range: DateRange | None = None,
        filters: DashboardFilters | None = None,
    ) -> PropertyAnalytics:
        """
        View and inquiry analytics.

        ``date_range`` bounds the view and inquiry events; ``filters`` and
        ``property_id`` select the properties.
        """
        conditions = property_conditions(filters, include_date_range=False)
        if property_id is not None:
            conditions.append(property_id_condition(property_id))
        start = date_range.start_date if date_range else None
        end = date_range.end_date if date_range else None

        (total_views, unique_visitors), total_inquiries, top, regions = await self._gather(
            self._run(DashboardRepository.view_totals, conditions, start, end),
            self._run(DashboardRepository.inquiry_total, conditions, start, end),
            self._run(
                DashboardRepository.top_properties,
                conditions,
                TOP_PROPERTIES_LIMIT,
                self.commission_rate,
            ),
            self._run(DashboardRepository.geographic_distribution, conditions, GEOGRAPHIC_REGIONS_LIMIT),
        )

        return PropertyAnalytics(
            total_views=total_views,
            unique_visitors=unique_visitors,
            total_inquiries=total_inquiries,
            conversion_rate=round(total_inquiries / total_views * 100, 2) if total_views else 0.0,
            top_performing_properties=[TopProperty(**row) for row in top],
            geographic_distribution=[GeographicStat(**row) for row in regions],
        )
