"""
One-time password service.

Policy (per email and OTP type):
- at most ``otp_max_per_hour`` codes in any rolling hour
- at least ``otp_resend_cooldown_seconds`` between sends while the previous
  code is still usable
- codes expire after ``otp_expire_minutes`` and work once
- issuing a code invalidates every earlier unused code of the same type

Codes are stored as SHA-256 digests only.
"""

import logging
import math
import uuid
from collections.abc import Callable
from datetime import datetime, timedelta

from sqlalchemy.ext.asyncio import AsyncSession

from bigha.core.config import settings
from bigha.core.security import generate_otp, hash_otp
from bigha.exceptions import InvalidOTPError, RateLimitExceededError
from bigha.models.enums import ActivityAction, OTPType
from bigha.models.mixins import utcnow
from bigha.models.otp import AdminOTP
from bigha.repositories.otp_repository import OTPRepository
from bigha.schemas.auth import OTPStatus
from bigha.services.activity_service import ActivityService, RequestMeta
from bigha.services.notification_service import NotificationService, NotificationTemplate

logger = logging.getLogger(__name__)

BLOCK_WINDOW = timedelta(hours=1)


def _seconds_until(moment: datetime, now: datetime) -> int:
    return max(0, math.ceil((moment - now).total_seconds()))


class OTPService:
    def __init__(
        self,
        session: AsyncSession,
        notifications: NotificationService | None = None,
        clock: Callable[[], datetime] = utcnow,
    ):
        self.session = session
        self.clock = clock
        self.otp_repo = OTPRepository(session)
        self.activity = ActivityService(session)
        self.notifications = notifications or NotificationService()

    async def get_otp_status(self, email: str, otp_type: OTPType) -> OTPStatus:
        """
        Compute resend eligibility for ``email``.

        ``block_expires_in`` is the time until the oldest code in the rolling
        hour falls out of the window, freeing one attempt.
        """
        now = self.clock()
        recent = await self.otp_repo.list_since(email, otp_type, now - BLOCK_WINDOW)

        attempts_remaining = max(0, settings.otp_max_per_hour - len(recent))
        is_blocked = attempts_remaining == 0
        block_expires_in = _seconds_until(recent[0].created_at + BLOCK_WINDOW, now) if is_blocked else 0

        next_resend_in = 0
        if recent:
            latest = recent[-1]
            if not latest.is_used and latest.expires_at > now:
                cooldown_ends = latest.created_at + timedelta(seconds=settings.otp_resend_cooldown_seconds)
                next_resend_in = _seconds_until(cooldown_ends, now)

        return OTPStatus(
            can_resend=not is_blocked and next_resend_in == 0,
            next_resend_in=next_resend_in,
            attempts_remaining=attempts_remaining,
            is_blocked=is_blocked,
            block_expires_in=block_expires_in,
        )

    async def request_otp(
        self,
        email: str,
        otp_type: OTPType,
        admin_id: uuid.UUID | None = None,
        meta: RequestMeta | None = None,
    ) -> tuple[AdminOTP, OTPStatus]:
        """
        Issue and send a new code.

        Raises:
            RateLimitExceededError: If the hourly cap is reached or the
                resend cooldown is still running (``retry_after`` in seconds)

        Returns:
            Tuple of (persisted OTP row, status after issuing)
        """
        status = await self.get_otp_status(email, otp_type)
        if status.is_blocked:
            minutes = max(1, math.ceil(status.block_expires_in / 60))
            raise RateLimitExceededError(
                message=f"Too many OTP requests. Please try again in {minutes} minute(s).",
                retry_after=status.block_expires_in,
            )
        if not status.can_resend:
            raise RateLimitExceededError(
                message=f"Please wait {status.next_resend_in} seconds before requesting another OTP.",
                retry_after=status.next_resend_in,
            )

        now = self.clock()
        await self.otp_repo.invalidate_unused(email, otp_type, now)

        code = generate_otp()
        otp = await self.otp_repo.add(
            AdminOTP(
                admin_id=admin_id,
                email=email.lower(),
                otp_type=otp_type,
                code_hash=hash_otp(code),
                expires_at=now + timedelta(minutes=settings.otp_expire_minutes),
                created_at=now,
            )
        )
        await self.activity.log_activity(
            admin_id=admin_id,
            action=ActivityAction.OTP_CREATED,
            resource="otp",
            resource_id=otp.id,
            details={"type": otp_type},
            meta=meta,
        )
        await self.session.commit()

        await self.notifications.notify(
            NotificationTemplate.OTP_CODE,
            email,
            code=code,
            expires_minutes=settings.otp_expire_minutes,
        )
        logger.info(f"OTP issued: email={email}, type={otp_type.value}")

        return otp, await self.get_otp_status(email, otp_type)

    async def verify_otp(
        self,
        email: str,
        code: str,
        otp_type: OTPType,
        meta: RequestMeta | None = None,
    ) -> AdminOTP:
        """
        Consume a code.

        The caller commits; marking the code used and whatever the code
        unlocks (e.g. a login session) become durable together.

        Raises:
            InvalidOTPError: If the code is wrong, expired or already used
        """
        now = self.clock()
        otp = await self.otp_repo.get_valid(email, otp_type, hash_otp(code.strip()), now)
        if otp is None:
            logger.warning(f"Invalid OTP presented: email={email}, type={otp_type.value}")
            raise InvalidOTPError()

        otp.is_used = True
        otp.used_at = now
        await self.session.flush()

        await self.activity.log_activity(
            admin_id=otp.admin_id,
            action=ActivityAction.OTP_VERIFIED,
            resource="otp",
            resource_id=otp.id,
            details={"type": otp_type},
            meta=meta,
        )
        return otp
