"""
Unit tests for dashboard aggregation.

Tests cover:
- Calendar helpers (month shifting and trend windows)
- Metric change computation
- Date range validation
- Activity feed merging and paging
- Failure mapping of the fan-out

All tests are fully mocked - no database or external dependencies.
"""

import asyncio
import uuid
from datetime import UTC, datetime, timedelta
from unittest.mock import AsyncMock, MagicMock, patch

import pytest
from pydantic import ValidationError

from bigha.exceptions import InternalError, NotFoundError
from bigha.models.enums import ActivityType, ApprovalStatus, ChangeType
from bigha.schemas.dashboard import DashboardFilters, DashboardMetric, DateRange
from bigha.services.dashboard_service import (
    DashboardService,
    month_windows,
    shift_months,
    start_of_day,
)

NOW = datetime(2024, 3, 31, 15, 30, tzinfo=UTC)


# ============================================================================
# Calendar helpers
# ============================================================================
class TestShiftMonths:
    def test_clamps_to_end_of_shorter_month(self):
        assert shift_months(datetime(2024, 3, 31), -1) == datetime(2024, 2, 29)

    def test_crosses_year_boundary(self):
        assert shift_months(datetime(2024, 1, 15), -2) == datetime(2023, 11, 15)
        assert shift_months(datetime(2023, 12, 15), 1) == datetime(2024, 1, 15)

    def test_keeps_time_and_timezone(self):
        assert shift_months(NOW, -12) == datetime(2023, 3, 31, 15, 30, tzinfo=UTC)


class TestMonthWindows:
    def test_windows_end_with_current_month_oldest_first(self):
        windows = month_windows(NOW, 3)

        assert windows == [
            (datetime(2024, 1, 1, tzinfo=UTC), datetime(2024, 2, 1, tzinfo=UTC)),
            (datetime(2024, 2, 1, tzinfo=UTC), datetime(2024, 3, 1, tzinfo=UTC)),
            (datetime(2024, 3, 1, tzinfo=UTC), datetime(2024, 4, 1, tzinfo=UTC)),
        ]

    def test_windows_are_contiguous(self):
        windows = month_windows(NOW, 12)

        assert len(windows) == 12
        for (_, end), (start, _) in zip(windows, windows[1:]):
            assert end == start

    def test_start_of_day(self):
        assert start_of_day(NOW) == datetime(2024, 3, 31, tzinfo=UTC)


# ============================================================================
# Metrics and inputs
# ============================================================================
class TestDashboardMetric:
    def test_increase(self):
        metric = DashboardMetric.from_values(150, 100)

        assert metric.change == 50.0
        assert metric.change_type == ChangeType.INCREASE
        assert metric.previous_value == 100

    def test_decrease_is_rounded(self):
        metric = DashboardMetric.from_values(2, 3)

        assert metric.change == -33.33
        assert metric.change_type == ChangeType.DECREASE

    def test_zero_previous_is_neutral(self):
        metric = DashboardMetric.from_values(42, 0)

        assert metric.change == 0.0
        assert metric.change_type == ChangeType.NEUTRAL


class TestDateRange:
    def test_end_before_start_is_rejected(self):
        with pytest.raises(ValidationError):
            DateRange(start_date=NOW, end_date=NOW - timedelta(days=1))

    def test_empty_range_is_allowed(self):
        assert DateRange(start_date=NOW, end_date=NOW).start_date == NOW

    def test_naive_datetimes_are_treated_as_utc(self):
        value = DateRange(start_date=datetime(2024, 1, 1), end_date=datetime(2024, 2, 1))

        assert value.start_date.tzinfo is UTC

    def test_filters_default_to_everything(self):
        filters = DashboardFilters()

        assert filters.date_range is None
        assert filters.cities == [] and filters.property_types == []


# ============================================================================
# Service
# ============================================================================
def _property_row(minutes_ago: int) -> dict:
    return {
        "id": uuid.uuid4(),
        "title": f"Listing {minutes_ago}",
        "created_at": NOW - timedelta(minutes=minutes_ago),
        "owner_name": "Ravi",
        "city": "Karnal",
        "state": "Haryana",
    }


def _inquiry_row(minutes_ago: int) -> dict:
    return {
        "id": uuid.uuid4(),
        "property_id": uuid.uuid4(),
        "title": "Farm plot",
        "name": "Asha",
        "created_at": NOW - timedelta(minutes=minutes_ago),
        "city": "Karnal",
        "state": None,
    }


@pytest.fixture
def mock_repo():
    repo = AsyncMock()
    repo.recent_properties.return_value = [_property_row(1), _property_row(5), _property_row(9)]
    repo.recent_inquiries.return_value = [_inquiry_row(3), _inquiry_row(7)]
    return repo


@pytest.fixture
def repo_class(mock_repo):
    with patch("bigha.services.dashboard_service.DashboardRepository") as repo_class:
        repo_class.return_value = mock_repo
        yield repo_class


@pytest.fixture
def dashboard(repo_class):
    return DashboardService(MagicMock(), clock=lambda: NOW)


class TestActivityFeed:
    @pytest.mark.asyncio
    async def test_sources_are_merged_newest_first(self, dashboard):
        feed = await dashboard.get_activity_feed(limit=10)

        assert [item.timestamp for item in feed.items] == sorted(
            (item.timestamp for item in feed.items), reverse=True
        )
        assert [item.type for item in feed.items] == [
            ActivityType.PROPERTY_CREATED,
            ActivityType.INQUIRY_RECEIVED,
            ActivityType.PROPERTY_CREATED,
            ActivityType.INQUIRY_RECEIVED,
            ActivityType.PROPERTY_CREATED,
        ]
        assert feed.has_more is False

    @pytest.mark.asyncio
    async def test_offset_paging(self, dashboard, mock_repo):
        feed = await dashboard.get_activity_feed(limit=2, offset=1)

        assert [item.type for item in feed.items] == [
            ActivityType.INQUIRY_RECEIVED,
            ActivityType.PROPERTY_CREATED,
        ]
        assert feed.has_more is True
        mock_repo.recent_properties.assert_awaited_once_with(4)

    @pytest.mark.asyncio
    async def test_type_filter_skips_other_sources(self, dashboard, mock_repo):
        feed = await dashboard.get_activity_feed(activity_types=[ActivityType.INQUIRY_RECEIVED])

        assert {item.type for item in feed.items} == {ActivityType.INQUIRY_RECEIVED}
        mock_repo.recent_properties.assert_not_awaited()

    @pytest.mark.asyncio
    async def test_activity_location_joins_city_and_state(self, dashboard):
        feed = await dashboard.get_activity_feed(limit=2)

        assert feed.items[0].location == "Karnal, Haryana"
        assert feed.items[1].location == "Karnal"


class TestRealTimeMetrics:
    @pytest.mark.asyncio
    async def test_counts_today_and_queues(self, dashboard, repo_class, mock_repo):
        repo_class.count_properties = AsyncMock(side_effect=[4, 11])
        for name in (
            "count_views_between",
            "count_inquiries_between",
            "count_created_between",
            "count_approved_between",
            "count_rejected_between",
        ):
            getattr(mock_repo, name).return_value = 2

        metrics = await dashboard.get_real_time_metrics()

        assert metrics.pending_approvals == 4
        assert metrics.active_listings == 11
        assert metrics.today_activity.views == 2
        assert metrics.today_activity.estimated_response_rate is None
        start, end = mock_repo.count_views_between.await_args.args
        assert (start, end) == (datetime(2024, 3, 31, tzinfo=UTC), datetime(2024, 4, 1, tzinfo=UTC))


class TestStatusDistribution:
    @pytest.mark.asyncio
    async def test_every_status_is_reported(self, dashboard, mock_repo):
        mock_repo.status_distribution.return_value = [
            (ApprovalStatus.PENDING, 1),
            (ApprovalStatus.APPROVED, 3),
        ]

        result = await dashboard._status_distribution(mock_repo, [])

        by_status = {row.status: row for row in result}
        assert set(by_status) == set(ApprovalStatus)
        assert by_status[ApprovalStatus.APPROVED].percentage == 75.0
        assert by_status[ApprovalStatus.REJECTED].count == 0

    @pytest.mark.asyncio
    async def test_empty_store_has_zero_percentages(self, dashboard, mock_repo):
        mock_repo.status_distribution.return_value = []

        result = await dashboard._status_distribution(mock_repo, [])

        assert all(row.percentage == 0.0 for row in result)


class TestFailureMapping:
    @pytest.mark.asyncio
    async def test_storage_failure_becomes_internal_error(self, dashboard, mock_repo):
        mock_repo.recent_properties.side_effect = RuntimeError("connection reset")

        with pytest.raises(InternalError):
            await dashboard.get_activity_feed()

    @pytest.mark.asyncio
    async def test_app_exceptions_pass_through(self, dashboard, mock_repo):
        mock_repo.recent_inquiries.side_effect = NotFoundError("Property")

        with pytest.raises(NotFoundError):
            await dashboard.get_activity_feed()

    @pytest.mark.asyncio
    async def test_failure_cancels_running_siblings(self, dashboard):
        finished = []
        cancelled = []

        async def slow_aggregate():
            try:
                await asyncio.sleep(0.2)
                finished.append("slow")
            except asyncio.CancelledError:
                cancelled.append("slow")
                raise

        async def broken_aggregate():
            raise RuntimeError("connection reset")

        with pytest.raises(InternalError):
            await dashboard._gather(slow_aggregate(), broken_aggregate())
        await asyncio.sleep(0.3)

        assert cancelled == ["slow"]
        assert finished == []

    @pytest.mark.asyncio
    async def test_results_keep_submission_order(self, dashboard):
        async def value(result, delay):
            await asyncio.sleep(delay)
            return result

        assert await dashboard._gather(value("first", 0.02), value("second", 0)) == ["first", "second"]
