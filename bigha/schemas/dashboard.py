"""
Dashboard Pydantic schemas.

This module provides:
- Filter inputs (date range, cities, states, property types, agents)
- Result models produced by DashboardService

Fields prefixed ``estimated_`` are metrics the platform does not track yet.
They are always None rather than synthesized numbers.
"""

import uuid
from datetime import UTC, datetime

from pydantic import BaseModel, Field, field_validator, model_validator

from bigha.models.enums import ActivityType, ApprovalStatus, ChangeType, PropertyType


def _as_utc(value: datetime | None) -> datetime | None:
    if value is None:
        return None
    if value.tzinfo is None:
        return value.replace(tzinfo=UTC)
    return value.astimezone(UTC)


# =============================================================================
# Inputs
# =============================================================================


class DateRange(BaseModel):
    """
    Inclusive-exclusive time window ``[start_date, end_date)``.

    A range whose end precedes its start is rejected; it never yields
    an empty or negative result silently.
    """

    start_date: datetime
    end_date: datetime

    @field_validator("start_date", "end_date")
    @classmethod
    def normalize_timezone(cls, value: datetime) -> datetime:
        return _as_utc(value)

    @model_validator(mode="after")
    def check_order(self) -> "DateRange":
        if self.end_date < self.start_date:
            raise ValueError("endDate must not be earlier than startDate")
        return self


class DashboardFilters(BaseModel):
    date_range: DateRange | None = None
    cities: list[str] = Field(default_factory=list)
    states: list[str] = Field(default_factory=list)
    property_types: list[PropertyType] = Field(default_factory=list)
    agent_ids: list[uuid.UUID] = Field(default_factory=list)


# =============================================================================
# Results
# =============================================================================


class DashboardMetric(BaseModel):
    """Current value compared with the value over the last month."""

    value: float
    change: float
    change_type: ChangeType
    previous_value: float

    @classmethod
    def from_values(cls, current: float, previous: float) -> "DashboardMetric":
        """
        Build a metric from two measurements.

        ``change`` is the percentage change rounded to two decimals; it is 0
        when ``previous`` is 0 so the division is always defined.
        """
        if previous == 0:
            change = 0.0
        else:
            change = round((current - previous) / previous * 100, 2)

        if change > 0:
            change_type = ChangeType.INCREASE
        elif change < 0:
            change_type = ChangeType.DECREASE
        else:
            change_type = ChangeType.NEUTRAL

        return cls(
            value=current,
            change=change,
            change_type=change_type,
            previous_value=previous,
        )


class TodayActivity(BaseModel):
    views: int = 0
    inquiries: int = 0
    new_listings: int = 0
    approvals: int = 0
    rejections: int = 0
    estimated_response_rate: float | None = None


class RecentActivity(BaseModel):
    id: str
    type: ActivityType
    title: str
    description: str
    timestamp: datetime
    property_id: uuid.UUID | None = None
    user_name: str | None = None
    location: str | None = None


class PropertyStatusCount(BaseModel):
    status: ApprovalStatus
    count: int
    percentage: float
    estimated_change: float | None = None


class MonthlyTrend(BaseModel):
    month: str
    year: int
    properties: int
    inquiries: int
    approvals: int
    revenue: float


class CityStats(BaseModel):
    city: str
    state: str | None = None
    property_count: int
    average_price: float
    inquiry_count: int
    estimated_growth_percent: float | None = None


class AgentPerformance(BaseModel):
    agent_id: uuid.UUID
    agent_name: str
    total_listings: int
    approved_listings: int
    inquiry_count: int
    revenue: float
    estimated_response_rate: float | None = None
    estimated_average_response_time: float | None = None
    estimated_rating: float | None = None


class DashboardStats(BaseModel):
    total_properties: DashboardMetric
    pending_approvals: DashboardMetric
    active_listings: DashboardMetric
    today_activity: TodayActivity
    recent_activities: list[RecentActivity]
    property_status_distribution: list[PropertyStatusCount]
    monthly_trends: list[MonthlyTrend]
    top_cities: list[CityStats]
    agent_performance: list[AgentPerformance]
    generated_at: datetime


class RealTimeMetrics(BaseModel):
    today_activity: TodayActivity
    pending_approvals: int
    active_listings: int
    generated_at: datetime


class ActivityFeed(BaseModel):
    items: list[RecentActivity]
    has_more: bool


class TopProperty(BaseModel):
    property_id: uuid.UUID
    title: str
    views: int
    inquiries: int
    conversion_rate: float
    revenue: float


class GeographicStat(BaseModel):
    region: str | None = None
    properties: int
    inquiries: int
    average_price: float
    estimated_growth_percent: float | None = None


class PropertyAnalytics(BaseModel):
    total_views: int
    unique_visitors: int
    total_inquiries: int
    conversion_rate: float
    top_performing_properties: list[TopProperty]
    geographic_distribution: list[GeographicStat]
    estimated_average_time_on_page: float | None = None
