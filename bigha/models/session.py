"""
AdminSession model.

Every admin credential is backed by a row in ``admin_sessions``:

- ACCESS rows back signed session tokens. The token's ``sid`` claim is the
  row id; a token whose row is inactive or expired does not validate, even
  though its signature is intact.
- REFRESH rows back opaque refresh tokens. Only the SHA-256 digest of the
  token is stored in ``token_hash``.

Several rows per admin may be active at once (multi-device).
"""

import uuid
from datetime import datetime
from typing import Optional

from sqlalchemy import Boolean, Enum, ForeignKey, Index, String, Uuid
from sqlalchemy.orm import Mapped, mapped_column

from bigha.models.base import Base
from bigha.models.enums import SessionType
from bigha.models.mixins import UTCDateTime, utcnow


class AdminSession(Base):
    """
    Persisted session or refresh-token record.

    Attributes:
        admin_id: Owner of the credential
        session_type: ACCESS or REFRESH
        token_hash: SHA-256 of the refresh token (REFRESH rows only)
        is_active: False once revoked
        expires_at: Hard expiry, independent from the token's own claims
        last_used_at: Touched on every successful validation
        revoked_at: When the row was deactivated
    """

    __tablename__ = "admin_sessions"
    __table_args__ = (
        Index("ix_admin_sessions_admin_active", "admin_id", "is_active"),
    )

    admin_id: Mapped[uuid.UUID] = mapped_column(
        Uuid(as_uuid=True),
        ForeignKey("admin_users.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    session_type: Mapped[SessionType] = mapped_column(
        Enum(SessionType, name="admin_session_type_enum"),
        nullable=False,
    )
    token_hash: Mapped[Optional[str]] = mapped_column(String(64), nullable=True, unique=True)

    ip_address: Mapped[Optional[str]] = mapped_column(String(45), nullable=True)
    user_agent: Mapped[Optional[str]] = mapped_column(String(500), nullable=True)

    is_active: Mapped[bool] = mapped_column(Boolean, nullable=False, default=True)
    expires_at: Mapped[datetime] = mapped_column(UTCDateTime(), nullable=False)
    last_used_at: Mapped[Optional[datetime]] = mapped_column(UTCDateTime(), nullable=True)
    created_at: Mapped[datetime] = mapped_column(UTCDateTime(), nullable=False, default=utcnow)
    revoked_at: Mapped[Optional[datetime]] = mapped_column(UTCDateTime(), nullable=True)

    def is_usable(self, now: datetime) -> bool:
        return self.is_active and self.expires_at > now

    def __repr__(self) -> str:
        return (
            f"AdminSession(id={self.id}, admin_id={self.admin_id}, "
            f"type={self.session_type}, active={self.is_active})"
        )
