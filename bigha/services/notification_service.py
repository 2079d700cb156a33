"""
Notification templates and the pluggable sender.

Only the "send this templated message" capability lives here. Delivery
providers are not part of this service: the default sender logs the
rendered message.
"""

import logging
from dataclasses import dataclass
from enum import Enum
from typing import Any, Protocol

logger = logging.getLogger(__name__)


class NotificationTemplate(str, Enum):
    OTP_CODE = "OTP_CODE"
    PROPERTY_APPROVED = "PROPERTY_APPROVED"
    PROPERTY_REJECTED = "PROPERTY_REJECTED"
    PROPERTY_FLAGGED = "PROPERTY_FLAGGED"


@dataclass(frozen=True)
class RenderedMessage:
    recipient: str
    subject: str
    body: str


_TEMPLATES: dict[NotificationTemplate, tuple[str, str]] = {
    NotificationTemplate.OTP_CODE: (
        "Your 2bigha admin verification code",
        "Your verification code is {code}. It expires in {expires_minutes} minutes.\n"
        "If you did not request this code, you can ignore this message.",
    ),
    NotificationTemplate.PROPERTY_APPROVED: (
        "Your property \"{title}\" is live on 2bigha",
        "Hello {name},\n\nGood news: your property \"{title}\" has been approved.\n{message}",
    ),
    NotificationTemplate.PROPERTY_REJECTED: (
        "Your property \"{title}\" needs changes",
        "Hello {name},\n\nYour property \"{title}\" was not approved.\nReason: {reason}\n{message}",
    ),
    NotificationTemplate.PROPERTY_FLAGGED: (
        "Your property \"{title}\" is under review",
        "Hello {name},\n\nYour property \"{title}\" has been flagged for review.\nReason: {reason}\n{message}",
    ),
}


def render(template: NotificationTemplate, recipient: str, **context: Any) -> RenderedMessage:
    """
    Render a template.

    Missing optional fields (``name``, ``message``, ``reason``) render as
    sensible defaults rather than raising KeyError.
    """
    values = {"name": "there", "message": "", "reason": "Not specified"}
    values.update({key: value for key, value in context.items() if value is not None})
    subject, body = _TEMPLATES[template]
    return RenderedMessage(
        recipient=recipient,
        subject=subject.format(**values),
        body=body.format(**values).rstrip(),
    )


class NotificationSender(Protocol):
    async def send(self, message: RenderedMessage) -> None: ...


class LoggingNotificationSender:
    """Default sender: writes the message to the application log."""

    async def send(self, message: RenderedMessage) -> None:
        logger.info(f"Notification to {message.recipient}: {message.subject}")
        logger.debug(f"Notification body for {message.recipient}:\n{message.body}")


class NotificationService:
    """
    Renders templates and hands them to a sender.

    Delivery failures are logged and swallowed by ``notify``: a notification
    must never undo the state change it reports.
    """

    def __init__(self, sender: NotificationSender | None = None):
        self.sender = sender or LoggingNotificationSender()

    async def notify(self, template: NotificationTemplate, recipient: str | None, **context: Any) -> bool:
        """
        Render and send a message.

        Returns:
            True if the sender accepted the message, False if there was no
            recipient or delivery failed
        """
        if not recipient:
            return False
        message = render(template, recipient, **context)
        try:
            await self.sender.send(message)
        except Exception:
            logger.exception(f"Failed to send {template.value} notification to {recipient}")
            return False
        return True
