"""
PropertyApprovalHistory model.

Immutable, append-only record of every approval-status transition on a
property. Exactly one row is written per transition, in the same
transaction as the property update.
"""

import uuid
from datetime import datetime
from typing import Optional

from sqlalchemy import Boolean, Enum, ForeignKey, String, Text, Uuid
from sqlalchemy.orm import Mapped, mapped_column

from bigha.models.base import Base
from bigha.models.enums import ApprovalAction, ApprovalStatus
from bigha.models.mixins import UTCDateTime, utcnow


class PropertyApprovalHistory(Base):
    """
    Attributes:
        property_id: Property that changed (history is removed with it)
        admin_id: Admin who performed the transition (SET NULL)
        action: APPROVE, REJECT, FLAG or REOPEN
        previous_status / new_status: The transition itself
        message: Public message shown to the listing owner
        admin_notes: Private notes for other admins
        reason: Why (mandatory for rejections)
    """

    __tablename__ = "property_approval_history"

    property_id: Mapped[uuid.UUID] = mapped_column(
        Uuid(as_uuid=True),
        ForeignKey("properties.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    admin_id: Mapped[Optional[uuid.UUID]] = mapped_column(
        Uuid(as_uuid=True),
        ForeignKey("admin_users.id", ondelete="SET NULL"),
        nullable=True,
    )
    action: Mapped[ApprovalAction] = mapped_column(
        Enum(ApprovalAction, name="approval_action_enum"),
        nullable=False,
    )
    previous_status: Mapped[ApprovalStatus] = mapped_column(
        Enum(ApprovalStatus, name="approval_status_enum"),
        nullable=False,
    )
    new_status: Mapped[ApprovalStatus] = mapped_column(
        Enum(ApprovalStatus, name="approval_status_enum"),
        nullable=False,
    )
    message: Mapped[Optional[str]] = mapped_column(Text, nullable=True)
    admin_notes: Mapped[Optional[str]] = mapped_column(Text, nullable=True)
    reason: Mapped[Optional[str]] = mapped_column(Text, nullable=True)

    ip_address: Mapped[Optional[str]] = mapped_column(String(45), nullable=True)
    user_agent: Mapped[Optional[str]] = mapped_column(String(500), nullable=True)
    is_system_action: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False)

    created_at: Mapped[datetime] = mapped_column(UTCDateTime(), nullable=False, default=utcnow, index=True)
