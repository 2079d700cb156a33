"""
Unit tests for OTPService (resend cooldown, hourly cap, verification).

All tests are fully mocked - no database or external dependencies.
"""

import uuid
from datetime import UTC, datetime, timedelta
from types import SimpleNamespace
from unittest.mock import AsyncMock, MagicMock, patch

import pytest

from bigha.core.config import settings
from bigha.core.security import hash_otp
from bigha.exceptions import InvalidOTPError, RateLimitExceededError
from bigha.models.enums import OTPType
from bigha.services.notification_service import NotificationTemplate
from bigha.services.otp_service import OTPService

NOW = datetime(2024, 6, 1, 12, 0, tzinfo=UTC)
EMAIL = "ops@2bigha.com"


def _sent(minutes_ago: float, used: bool = False):
    created = NOW - timedelta(minutes=minutes_ago)
    return SimpleNamespace(
        created_at=created,
        is_used=used,
        expires_at=created + timedelta(minutes=settings.otp_expire_minutes),
    )


@pytest.fixture
def mock_session():
    session = AsyncMock()
    session.add = MagicMock()
    return session


@pytest.fixture
def mock_otp_repo():
    repo = AsyncMock()
    repo.list_since.return_value = []
    repo.add.side_effect = lambda otp: otp
    return repo


@pytest.fixture
def mock_notifications():
    notifications = AsyncMock()
    notifications.notify.return_value = True
    return notifications


@pytest.fixture
def otp_service(mock_session, mock_otp_repo, mock_notifications):
    with (
        patch("bigha.services.otp_service.OTPRepository", return_value=mock_otp_repo),
        patch("bigha.services.otp_service.ActivityService", return_value=AsyncMock()),
    ):
        return OTPService(mock_session, notifications=mock_notifications, clock=lambda: NOW)


class TestOTPStatus:
    @pytest.mark.asyncio
    async def test_fresh_email_can_send(self, otp_service):
        status = await otp_service.get_otp_status(EMAIL, OTPType.LOGIN)

        assert status.can_resend is True
        assert status.next_resend_in == 0
        assert status.attempts_remaining == settings.otp_max_per_hour
        assert status.is_blocked is False

    @pytest.mark.asyncio
    async def test_cooldown_while_latest_code_is_live(self, otp_service, mock_otp_repo):
        mock_otp_repo.list_since.return_value = [_sent(minutes_ago=0.5)]

        status = await otp_service.get_otp_status(EMAIL, OTPType.LOGIN)

        assert status.can_resend is (settings.otp_resend_cooldown_seconds <= 30)
        assert status.next_resend_in == max(0, settings.otp_resend_cooldown_seconds - 30)
        assert status.attempts_remaining == settings.otp_max_per_hour - 1

    @pytest.mark.asyncio
    async def test_used_code_does_not_start_cooldown(self, otp_service, mock_otp_repo):
        mock_otp_repo.list_since.return_value = [_sent(minutes_ago=0.5, used=True)]

        status = await otp_service.get_otp_status(EMAIL, OTPType.LOGIN)

        assert status.next_resend_in == 0

    @pytest.mark.asyncio
    async def test_blocked_after_hourly_cap(self, otp_service, mock_otp_repo):
        sent = [_sent(minutes_ago=50 - i) for i in range(settings.otp_max_per_hour)]
        mock_otp_repo.list_since.return_value = sent

        status = await otp_service.get_otp_status(EMAIL, OTPType.LOGIN)

        assert status.is_blocked is True
        assert status.can_resend is False
        assert status.attempts_remaining == 0
        assert status.block_expires_in == 10 * 60


class TestRequestOTP:
    @pytest.mark.asyncio
    async def test_issues_hashed_code_and_sends_it(
        self, otp_service, mock_otp_repo, mock_session, mock_notifications
    ):
        admin_id = uuid.uuid4()

        otp, _ = await otp_service.request_otp(EMAIL, OTPType.LOGIN, admin_id=admin_id)

        mock_otp_repo.invalidate_unused.assert_awaited_once_with(EMAIL, OTPType.LOGIN, NOW)
        mock_session.commit.assert_awaited_once()
        assert otp.expires_at == NOW + timedelta(minutes=settings.otp_expire_minutes)

        template, recipient = mock_notifications.notify.await_args.args
        code = mock_notifications.notify.await_args.kwargs["code"]
        assert template == NotificationTemplate.OTP_CODE
        assert recipient == EMAIL
        assert otp.code_hash == hash_otp(code)
        assert otp.code_hash != code

    @pytest.mark.asyncio
    async def test_blocked_request_raises_rate_limited(self, otp_service, mock_otp_repo, mock_session):
        mock_otp_repo.list_since.return_value = [
            _sent(minutes_ago=59) for _ in range(settings.otp_max_per_hour)
        ]

        with pytest.raises(RateLimitExceededError) as exc_info:
            await otp_service.request_otp(EMAIL, OTPType.LOGIN)

        assert exc_info.value.retry_after == 60
        mock_session.commit.assert_not_awaited()


class TestVerifyOTP:
    @pytest.mark.asyncio
    async def test_valid_code_is_consumed(self, otp_service, mock_otp_repo):
        row = SimpleNamespace(id=uuid.uuid4(), admin_id=uuid.uuid4(), is_used=False, used_at=None)
        mock_otp_repo.get_valid.return_value = row

        result = await otp_service.verify_otp(EMAIL, " 123456 ", OTPType.LOGIN)

        assert result.is_used is True
        assert result.used_at == NOW
        mock_otp_repo.get_valid.assert_awaited_once_with(EMAIL, OTPType.LOGIN, hash_otp("123456"), NOW)

    @pytest.mark.asyncio
    async def test_unknown_code_is_rejected(self, otp_service, mock_otp_repo):
        mock_otp_repo.get_valid.return_value = None

        with pytest.raises(InvalidOTPError):
            await otp_service.verify_otp(EMAIL, "000000", OTPType.LOGIN)
