"""AdminOTP repository: issuance history, invalidation and code lookup."""

from datetime import datetime

from sqlalchemy import select, update
from sqlalchemy.ext.asyncio import AsyncSession

from bigha.models.enums import OTPType
from bigha.models.otp import AdminOTP
from bigha.repositories.base import BaseRepository


class OTPRepository(BaseRepository[AdminOTP]):
    def __init__(self, session: AsyncSession):
        super().__init__(AdminOTP, session)

    async def list_since(self, email: str, otp_type: OTPType, since: datetime) -> list[AdminOTP]:
        """OTPs issued to ``email`` at or after ``since``, oldest first."""
        query = (
            select(AdminOTP)
            .where(
                AdminOTP.email == email.lower(),
                AdminOTP.otp_type == otp_type,
                AdminOTP.created_at >= since,
            )
            .order_by(AdminOTP.created_at)
        )
        result = await self.session.execute(query)
        return list(result.scalars().all())

    async def invalidate_unused(self, email: str, otp_type: OTPType, now: datetime) -> int:
        """Mark every outstanding code of this type as used so only the newest one works."""
        result = await self.session.execute(
            update(AdminOTP)
            .where(
                AdminOTP.email == email.lower(),
                AdminOTP.otp_type == otp_type,
                AdminOTP.is_used.is_(False),
            )
            .values(is_used=True, used_at=now)
        )
        return result.rowcount or 0

    async def get_valid(
        self,
        email: str,
        otp_type: OTPType,
        code_hash: str,
        now: datetime,
    ) -> AdminOTP | None:
        """Unused, unexpired code matching ``code_hash``."""
        query = select(AdminOTP).where(
            AdminOTP.email == email.lower(),
            AdminOTP.otp_type == otp_type,
            AdminOTP.code_hash == code_hash,
            AdminOTP.is_used.is_(False),
            AdminOTP.expires_at > now,
        )
        result = await self.session.execute(query)
        return result.scalars().first()
