"""
AdminActivityLog model.

Append-only trail of what admins did: logins, RBAC changes and property
moderation. Rows are written in the same transaction as the change they
describe, so a rolled-back mutation leaves no log entry behind.
"""

import uuid
from datetime import datetime
from typing import Any, Optional

from sqlalchemy import JSON, Boolean, Enum, ForeignKey, Index, String, Text, Uuid
from sqlalchemy.orm import Mapped, mapped_column

from bigha.models.base import Base
from bigha.models.enums import ActivityAction
from bigha.models.mixins import UTCDateTime, utcnow


class AdminActivityLog(Base):
    """
    Attributes:
        admin_id: Admin who acted (SET NULL if the admin is later removed)
        action: What happened
        resource: Kind of entity affected ("property", "role", "admin", "session")
        resource_id: Id of the affected entity
        details: Free-form JSON context
        success: False for failed attempts (e.g. LOGIN_FAILED)
    """

    __tablename__ = "admin_activity_logs"
    __table_args__ = (
        Index("ix_admin_activity_logs_resource", "resource", "resource_id"),
    )

    admin_id: Mapped[Optional[uuid.UUID]] = mapped_column(
        Uuid(as_uuid=True),
        ForeignKey("admin_users.id", ondelete="SET NULL"),
        nullable=True,
        index=True,
    )
    action: Mapped[ActivityAction] = mapped_column(
        Enum(ActivityAction, name="admin_activity_action_enum"),
        nullable=False,
        index=True,
    )
    resource: Mapped[str] = mapped_column(String(50), nullable=False)
    resource_id: Mapped[Optional[uuid.UUID]] = mapped_column(Uuid(as_uuid=True), nullable=True)
    details: Mapped[Optional[dict[str, Any]]] = mapped_column(JSON, nullable=True)

    ip_address: Mapped[Optional[str]] = mapped_column(String(45), nullable=True)
    user_agent: Mapped[Optional[str]] = mapped_column(String(500), nullable=True)
    request_id: Mapped[Optional[str]] = mapped_column(String(100), nullable=True)

    success: Mapped[bool] = mapped_column(Boolean, nullable=False, default=True)
    error_message: Mapped[Optional[str]] = mapped_column(Text, nullable=True)

    created_at: Mapped[datetime] = mapped_column(UTCDateTime(), nullable=False, default=utcnow, index=True)

    def __repr__(self) -> str:
        return (
            f"AdminActivityLog(id={self.id}, admin_id={self.admin_id}, "
            f"action={self.action}, success={self.success})"
        )
