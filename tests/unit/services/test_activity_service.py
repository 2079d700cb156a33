"""
Unit tests for ActivityService.log_activity.

The repository is mocked; only the staged entry is inspected.
"""

import uuid
from datetime import UTC, datetime
from decimal import Decimal
from unittest.mock import AsyncMock, MagicMock, patch

import pytest

from bigha.models.enums import ActivityAction, ApprovalStatus
from bigha.services.activity_service import ActivityService, RequestMeta


@pytest.fixture
def activity_service():
    service = ActivityService(MagicMock())
    service.log_repo = MagicMock()
    service.log_repo.create = AsyncMock(side_effect=lambda entry: entry)
    return service


# ============================================================================
# Details serialisation
# ============================================================================


class TestDetails:
    @pytest.mark.asyncio
    async def test_details_are_stored_json_safe(self, activity_service):
        role_id = uuid.uuid4()
        when = datetime(2024, 6, 1, 12, 0, tzinfo=UTC)

        entry = await activity_service.log_activity(
            admin_id=uuid.uuid4(),
            action=ActivityAction.LOGIN,
            resource="admin",
            details={
                "role_ids": [role_id],
                "expires_at": when,
                "status": ApprovalStatus.APPROVED,
                "price": Decimal("1250000.50"),
                "nested": {"ids": (role_id,)},
            },
        )

        assert entry.details == {
            "role_ids": [str(role_id)],
            "expires_at": when.isoformat(),
            "status": "APPROVED",
            "price": 1250000.5,
            "nested": {"ids": [str(role_id)]},
        }

    @pytest.mark.asyncio
    async def test_empty_details_are_stored_as_null(self, activity_service):
        entry = await activity_service.log_activity(
            admin_id=None,
            action=ActivityAction.LOGIN_FAILED,
            resource="admin",
            details={},
            success=False,
        )

        assert entry.details is None
        assert entry.success is False

    @pytest.mark.asyncio
    async def test_request_meta_is_copied(self, activity_service):
        meta = RequestMeta(ip_address="10.0.0.1", user_agent="pytest", request_id="req-1")

        entry = await activity_service.log_activity(
            admin_id=uuid.uuid4(),
            action=ActivityAction.LOGOUT,
            resource="session",
            meta=meta,
        )

        assert (entry.ip_address, entry.user_agent, entry.request_id) == ("10.0.0.1", "pytest", "req-1")

    @pytest.mark.asyncio
    async def test_disabled_logging_stages_nothing(self, activity_service):
        with patch("bigha.services.activity_service.settings") as mock_settings:
            mock_settings.activity_log_enabled = False
            entry = await activity_service.log_activity(
                admin_id=uuid.uuid4(),
                action=ActivityAction.LOGIN,
                resource="admin",
            )

        assert entry is None
        activity_service.log_repo.create.assert_not_awaited()
