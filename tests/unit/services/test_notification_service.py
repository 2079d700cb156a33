"""
Unit tests for notification rendering and delivery.
"""

from unittest.mock import AsyncMock

import pytest

from bigha.services.notification_service import (
    NotificationService,
    NotificationTemplate,
    render,
)


class TestRender:
    def test_otp_template(self):
        message = render(NotificationTemplate.OTP_CODE, "ops@2bigha.com", code="482913", expires_minutes=10)

        assert message.recipient == "ops@2bigha.com"
        assert "482913" in message.body
        assert "10 minutes" in message.body

    def test_missing_optional_fields_use_defaults(self):
        message = render(NotificationTemplate.PROPERTY_REJECTED, "owner@example.com", title="Farm plot", name=None)

        assert message.subject == 'Your property "Farm plot" needs changes'
        assert message.body.startswith("Hello there,")
        assert "Reason: Not specified" in message.body

    def test_body_has_no_trailing_blank_line(self):
        message = render(NotificationTemplate.PROPERTY_APPROVED, "owner@example.com", title="Farm plot")

        assert not message.body.endswith("\n")


class TestNotify:
    @pytest.mark.asyncio
    async def test_sends_rendered_message(self):
        sender = AsyncMock()
        service = NotificationService(sender)

        sent = await service.notify(NotificationTemplate.PROPERTY_APPROVED, "owner@example.com", title="Farm plot")

        assert sent is True
        message = sender.send.await_args.args[0]
        assert message.recipient == "owner@example.com"

    @pytest.mark.asyncio
    async def test_no_recipient_is_skipped(self):
        sender = AsyncMock()

        sent = await NotificationService(sender).notify(NotificationTemplate.PROPERTY_APPROVED, None, title="x")

        assert sent is False
        sender.send.assert_not_awaited()

    @pytest.mark.asyncio
    async def test_delivery_failure_returns_false(self):
        sender = AsyncMock()
        sender.send.side_effect = ConnectionError("smtp down")

        sent = await NotificationService(sender).notify(
            NotificationTemplate.PROPERTY_FLAGGED, "owner@example.com", title="x"
        )

        assert sent is False
