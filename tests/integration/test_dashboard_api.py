"""
Integration tests for dashboard analytics over GraphQL.
"""

import pytest

from bigha.core.config import settings
from bigha.models.enums import ApprovalStatus, PublicationStatus

STATS = """
query Stats($filters: AdminDashboardFilters) {
  adminDashboardStats(filters: $filters) {
    totalProperties { value changeType }
    pendingApprovals { value }
    activeListings { value }
    todayActivity { newListings approvals estimatedResponseRate }
    propertyStatusDistribution { status count percentage }
    monthlyTrends { month year properties }
    topCities { city propertyCount }
    generatedAt
  }
}
"""


class TestDashboardStats:
    @pytest.mark.asyncio
    async def test_empty_store(self, graphql, super_admin_headers):
        body = await graphql(STATS, headers=super_admin_headers)

        stats = body["data"]["adminDashboardStats"]
        assert stats["totalProperties"] == {"value": 0, "changeType": "NEUTRAL"}
        assert stats["todayActivity"]["estimatedResponseRate"] is None
        assert {row["status"] for row in stats["propertyStatusDistribution"]} == {
            status.value for status in ApprovalStatus
        }
        assert all(row["percentage"] == 0 for row in stats["propertyStatusDistribution"])
        assert len(stats["monthlyTrends"]) == settings.dashboard_trend_months
        assert stats["topCities"] == []

    @pytest.mark.asyncio
    async def test_counts_listings(self, graphql, super_admin_headers, make_property):
        await make_property("Waiting plot")
        await make_property(
            "Live plot",
            approval_status=ApprovalStatus.APPROVED,
            status=PublicationStatus.PUBLISHED,
        )
        await make_property("Draft plot", approval_status=ApprovalStatus.APPROVED, city="Panipat")

        body = await graphql(STATS, headers=super_admin_headers)

        stats = body["data"]["adminDashboardStats"]
        assert stats["totalProperties"]["value"] == 3
        assert stats["pendingApprovals"]["value"] == 1
        assert stats["activeListings"]["value"] == 1
        assert stats["todayActivity"]["newListings"] == 3
        assert stats["monthlyTrends"][-1]["properties"] == 3
        assert stats["topCities"][0] == {"city": "Karnal", "propertyCount": 2}

    @pytest.mark.asyncio
    async def test_city_filter(self, graphql, super_admin_headers, make_property):
        await make_property("Karnal plot")
        await make_property("Panipat plot", city="Panipat")

        body = await graphql(STATS, {"filters": {"cities": ["Panipat"]}}, headers=super_admin_headers)

        assert body["data"]["adminDashboardStats"]["totalProperties"]["value"] == 1

    @pytest.mark.asyncio
    async def test_inverted_date_range_is_rejected(self, graphql, super_admin_headers):
        body = await graphql(
            STATS,
            {
                "filters": {
                    "dateRange": {
                        "startDate": "2024-06-01T00:00:00+00:00",
                        "endDate": "2024-05-01T00:00:00+00:00",
                    }
                }
            },
            headers=super_admin_headers,
        )

        assert body["errors"][0]["extensions"]["code"] == "BAD_USER_INPUT"

    @pytest.mark.asyncio
    async def test_requires_analytics_permission(self, graphql, make_admin, auth_headers):
        viewer = await make_admin("viewer@2bigha.com", permissions=["properties:view"])

        body = await graphql(STATS, headers=await auth_headers(viewer))

        extensions = body["errors"][0]["extensions"]
        assert extensions["code"] == "FORBIDDEN"
        assert extensions["details"]["required_permissions"] == ["analytics:view"]


class TestDashboardFeeds:
    @pytest.mark.asyncio
    async def test_real_time_metrics(self, graphql, super_admin_headers, make_property):
        await make_property()

        body = await graphql(
            "{ realTimeDashboardMetrics { pendingApprovals activeListings todayActivity { newListings } } }",
            headers=super_admin_headers,
        )

        assert body["data"]["realTimeDashboardMetrics"] == {
            "pendingApprovals": 1,
            "activeListings": 0,
            "todayActivity": {"newListings": 1},
        }

    @pytest.mark.asyncio
    async def test_activity_feed_lists_new_listings(self, graphql, super_admin_headers, make_property):
        await make_property("Older plot")
        await make_property("Newer plot")

        body = await graphql(
            "{ adminActivityFeed(limit: 1) { hasMore items { type title } } }",
            headers=super_admin_headers,
        )

        feed = body["data"]["adminActivityFeed"]
        assert feed["hasMore"] is True
        assert feed["items"][0]["type"] == "PROPERTY_CREATED"

    @pytest.mark.asyncio
    async def test_property_analytics_on_empty_store(self, graphql, super_admin_headers):
        body = await graphql(
            "{ propertyAnalytics { totalViews totalInquiries conversionRate topPerformingProperties { title } } }",
            headers=super_admin_headers,
        )

        assert body["data"]["propertyAnalytics"] == {
            "totalViews": 0,
            "totalInquiries": 0,
            "conversionRate": 0.0,
            "topPerformingProperties": [],
        }
