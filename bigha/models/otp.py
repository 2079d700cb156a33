"""AdminOTP model: hashed one-time passwords for login, password reset and email verification."""

import uuid
from datetime import datetime
from typing import Optional

from sqlalchemy import Boolean, Enum, ForeignKey, Index, String, Uuid
from sqlalchemy.orm import Mapped, mapped_column

from bigha.models.base import Base
from bigha.models.enums import OTPType
from bigha.models.mixins import UTCDateTime, utcnow


class AdminOTP(Base):
    """
    One-time password issued to an admin email.

    Only the SHA-256 digest of the code is stored. A code is accepted at
    most once (``is_used``) and only before ``expires_at``.
    """

    __tablename__ = "admin_otps"
    __table_args__ = (
        Index("ix_admin_otps_email_type_created", "email", "otp_type", "created_at"),
    )

    admin_id: Mapped[Optional[uuid.UUID]] = mapped_column(
        Uuid(as_uuid=True),
        ForeignKey("admin_users.id", ondelete="CASCADE"),
        nullable=True,
    )
    email: Mapped[str] = mapped_column(String(255), nullable=False)
    otp_type: Mapped[OTPType] = mapped_column(Enum(OTPType, name="admin_otp_type_enum"), nullable=False)
    code_hash: Mapped[str] = mapped_column(String(64), nullable=False)

    is_used: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False)
    used_at: Mapped[Optional[datetime]] = mapped_column(UTCDateTime(), nullable=True)
    expires_at: Mapped[datetime] = mapped_column(UTCDateTime(), nullable=False)
    created_at: Mapped[datetime] = mapped_column(UTCDateTime(), nullable=False, default=utcnow)
