"""
Dashboard analytics queries. All of them require ``analytics:view``.

DashboardService opens its own sessions from the request's session
factory, so these resolvers never touch the request session.
"""

import graphene

from bigha.api.gql.errors import page_args, parse_input
from bigha.api.gql.guards import permission_required
from bigha.api.gql.types import (
    ActivityFeed,
    ActivityTypeEnum,
    AgentPerformance,
    DashboardStats,
    PropertyAnalytics,
    PropertyTypeEnum,
    RealTimeMetrics,
)
from bigha.core.config import settings
from bigha.schemas.dashboard import DashboardFilters, DateRange
from bigha.services.dashboard_service import DashboardService


def _dashboard(info) -> DashboardService:
    return DashboardService(info.context.session_factory)


class DateRangeInput(graphene.InputObjectType):
    start_date = graphene.DateTime(required=True)
    end_date = graphene.DateTime(required=True)


class AdminDashboardFilters(graphene.InputObjectType):
    date_range = graphene.InputField(DateRangeInput)
    cities = graphene.List(graphene.NonNull(graphene.String))
    states = graphene.List(graphene.NonNull(graphene.String))
    property_types = graphene.List(graphene.NonNull(PropertyTypeEnum))
    agent_ids = graphene.List(graphene.NonNull(graphene.UUID))


def _filters(filters) -> DashboardFilters:
    # Explicit nulls mean "no filter" for the list fields.
    data = {key: value for key, value in dict(filters or {}).items() if value is not None}
    if "date_range" in data:
        data["date_range"] = dict(data["date_range"])
    return parse_input(DashboardFilters, data)


class DashboardQuery(graphene.ObjectType):
    admin_dashboard_stats = graphene.Field(
        DashboardStats,
        required=True,
        filters=AdminDashboardFilters(),
    )
    real_time_dashboard_metrics = graphene.Field(RealTimeMetrics, required=True)
    admin_activity_feed = graphene.Field(
        ActivityFeed,
        required=True,
        limit=graphene.Int(default_value=50),
        offset=graphene.Int(default_value=0),
        activity_types=graphene.List(graphene.NonNull(ActivityTypeEnum)),
    )
    agent_performance_analytics = graphene.List(
        graphene.NonNull(AgentPerformance),
        required=True,
        filters=AdminDashboardFilters(),
        limit=graphene.Int(default_value=settings.dashboard_top_agents_limit),
    )
    property_analytics = graphene.Field(
        PropertyAnalytics,
        required=True,
        property_id=graphene.UUID(),
        date_range=DateRangeInput(),
        filters=AdminDashboardFilters(),
    )

    @staticmethod
    @permission_required("analytics:view")
    async def resolve_admin_dashboard_stats(root, info, filters=None):
        return await _dashboard(info).get_dashboard_stats(_filters(filters))

    @staticmethod
    @permission_required("analytics:view")
    async def resolve_real_time_dashboard_metrics(root, info):
        return await _dashboard(info).get_real_time_metrics()

    @staticmethod
    @permission_required("analytics:view")
    async def resolve_admin_activity_feed(root, info, limit, offset, activity_types=None):
        page = page_args(limit, offset)
        return await _dashboard(info).get_activity_feed(
            limit=page.limit,
            offset=page.offset,
            activity_types=activity_types or None,
        )

    @staticmethod
    @permission_required("analytics:view")
    async def resolve_agent_performance_analytics(root, info, limit, filters=None):
        page = page_args(limit, 0)
        return await _dashboard(info).get_agent_performance(_filters(filters), limit=page.limit)

    @staticmethod
    @permission_required("analytics:view")
    async def resolve_property_analytics(root, info, property_id=None, date_range=None, filters=None):
        date_range = parse_input(DateRange, date_range) if date_range is not None else None
        return await _dashboard(info).get_property_analytics(
            property_id=property_id,
            date_range=date_range,
            filters=_filters(filters),
        )
