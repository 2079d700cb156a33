"""
Property aggregate models.

This module defines:
- Property: the listing itself, with two independent status axes
  (approval_status and publication status) and attribution columns
- PropertySeo: one-to-one SEO metadata, unique slug
- PropertyVerification: one-to-one verification record
- PropertyImage: ordered gallery, at most one main image
- PropertyPriceHistory: append-only price changes
- PropertyView: raw view events used by analytics

Satellite rows cascade with their property. Columns that point at the
admin or platform user who did something are SET NULL, so removing an
account never destroys listing history.
"""

import uuid
from datetime import datetime
from decimal import Decimal
from typing import Any, Optional

from sqlalchemy import (
    JSON,
    Boolean,
    Enum,
    ForeignKey,
    Index,
    Integer,
    Numeric,
    String,
    Text,
    Uuid,
)
from sqlalchemy.orm import Mapped, mapped_column, relationship

from bigha.models.base import Base
from bigha.models.enums import (
    ApprovalStatus,
    AreaUnit,
    CreatedByType,
    ListingAs,
    PropertyType,
    PublicationStatus,
)
from bigha.models.mixins import TimestampMixin, UTCDateTime, utcnow


class Property(Base, TimestampMixin):
    """
    Property listing.

    Invariants:
        - approval_status starts at PENDING and only changes through
          ApprovalService, which appends a history row for every change
        - approval_status = APPROVED implies approved_by/approved_at were set
          by the transition; REJECTED implies rejected_by/rejected_at and
          rejection_reason
        - is_verified is independent from approval_status
    """

    __tablename__ = "properties"
    __table_args__ = (
        Index("ix_properties_approval_status_created", "approval_status", "created_at"),
        Index("ix_properties_city_state", "city", "state"),
    )

    title: Mapped[str] = mapped_column(String(255), nullable=False)
    description: Mapped[Optional[str]] = mapped_column(Text, nullable=True)
    property_type: Mapped[PropertyType] = mapped_column(
        Enum(PropertyType, name="property_type_enum"),
        nullable=False,
        index=True,
    )
    status: Mapped[PublicationStatus] = mapped_column(
        Enum(PublicationStatus, name="property_status_enum"),
        nullable=False,
        default=PublicationStatus.DRAFT,
    )

    # Pricing and area
    price: Mapped[Optional[Decimal]] = mapped_column(Numeric(15, 2), nullable=True)
    price_per_unit: Mapped[Optional[Decimal]] = mapped_column(Numeric(15, 2), nullable=True)
    area: Mapped[Optional[Decimal]] = mapped_column(Numeric(12, 2), nullable=True)
    area_unit: Mapped[Optional[AreaUnit]] = mapped_column(
        Enum(AreaUnit, name="area_unit_enum"),
        nullable=True,
    )

    # Land record identifiers
    khasra_number: Mapped[Optional[str]] = mapped_column(String(100), nullable=True)
    murabba_number: Mapped[Optional[str]] = mapped_column(String(100), nullable=True)
    khewat_number: Mapped[Optional[str]] = mapped_column(String(100), nullable=True)

    # Location
    address: Mapped[Optional[str]] = mapped_column(Text, nullable=True)
    city: Mapped[Optional[str]] = mapped_column(String(100), nullable=True)
    district: Mapped[Optional[str]] = mapped_column(String(100), nullable=True)
    state: Mapped[Optional[str]] = mapped_column(String(100), nullable=True)
    country: Mapped[str] = mapped_column(String(100), nullable=False, default="India")
    pin_code: Mapped[Optional[str]] = mapped_column(String(10), nullable=True)
    location: Mapped[Optional[dict[str, Any]]] = mapped_column(JSON, nullable=True)

    # Ownership attribution
    created_by_type: Mapped[CreatedByType] = mapped_column(
        Enum(CreatedByType, name="created_by_type_enum"),
        nullable=False,
        default=CreatedByType.USER,
    )
    listing_as: Mapped[ListingAs] = mapped_column(
        Enum(ListingAs, name="listing_as_enum"),
        nullable=False,
        default=ListingAs.OWNER,
    )
    owner_name: Mapped[Optional[str]] = mapped_column(String(255), nullable=True)
    owner_phone: Mapped[Optional[str]] = mapped_column(String(20), nullable=True)
    owner_whatsapp: Mapped[Optional[str]] = mapped_column(String(20), nullable=True)
    owner_email: Mapped[Optional[str]] = mapped_column(String(255), nullable=True)
    created_by_admin_id: Mapped[Optional[uuid.UUID]] = mapped_column(
        Uuid(as_uuid=True),
        ForeignKey("admin_users.id", ondelete="SET NULL"),
        nullable=True,
    )
    created_by_user_id: Mapped[Optional[uuid.UUID]] = mapped_column(
        Uuid(as_uuid=True),
        ForeignKey("platform_users.id", ondelete="SET NULL"),
        nullable=True,
        index=True,
    )

    # Flags and counters
    is_featured: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False)
    is_verified: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False)
    is_active: Mapped[bool] = mapped_column(Boolean, nullable=False, default=True, index=True)
    view_count: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    inquiry_count: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    published_at: Mapped[Optional[datetime]] = mapped_column(UTCDateTime(), nullable=True)

    # Moderation
    approval_status: Mapped[ApprovalStatus] = mapped_column(
        Enum(ApprovalStatus, name="approval_status_enum"),
        nullable=False,
        default=ApprovalStatus.PENDING,
    )
    approval_message: Mapped[Optional[str]] = mapped_column(Text, nullable=True)
    approved_by: Mapped[Optional[uuid.UUID]] = mapped_column(
        Uuid(as_uuid=True),
        ForeignKey("admin_users.id", ondelete="SET NULL"),
        nullable=True,
    )
    approved_at: Mapped[Optional[datetime]] = mapped_column(UTCDateTime(), nullable=True)
    rejection_reason: Mapped[Optional[str]] = mapped_column(Text, nullable=True)
    rejected_by: Mapped[Optional[uuid.UUID]] = mapped_column(
        Uuid(as_uuid=True),
        ForeignKey("admin_users.id", ondelete="SET NULL"),
        nullable=True,
    )
    rejected_at: Mapped[Optional[datetime]] = mapped_column(UTCDateTime(), nullable=True)
    flag_reason: Mapped[Optional[str]] = mapped_column(Text, nullable=True)
    flagged_by: Mapped[Optional[uuid.UUID]] = mapped_column(
        Uuid(as_uuid=True),
        ForeignKey("admin_users.id", ondelete="SET NULL"),
        nullable=True,
    )
    flagged_at: Mapped[Optional[datetime]] = mapped_column(UTCDateTime(), nullable=True)
    admin_notes: Mapped[Optional[str]] = mapped_column(Text, nullable=True)
    last_reviewed_by: Mapped[Optional[uuid.UUID]] = mapped_column(
        Uuid(as_uuid=True),
        ForeignKey("admin_users.id", ondelete="SET NULL"),
        nullable=True,
    )
    last_reviewed_at: Mapped[Optional[datetime]] = mapped_column(UTCDateTime(), nullable=True)

    # Satellites
    seo: Mapped[Optional["PropertySeo"]] = relationship(
        back_populates="property",
        cascade="all, delete-orphan",
        passive_deletes=True,
        uselist=False,
    )
    verification: Mapped[Optional["PropertyVerification"]] = relationship(
        back_populates="property",
        cascade="all, delete-orphan",
        passive_deletes=True,
        uselist=False,
    )
    images: Mapped[list["PropertyImage"]] = relationship(
        back_populates="property",
        cascade="all, delete-orphan",
        passive_deletes=True,
        order_by="PropertyImage.sort_order",
    )
    price_history: Mapped[list["PropertyPriceHistory"]] = relationship(
        back_populates="property",
        cascade="all, delete-orphan",
        passive_deletes=True,
        order_by="PropertyPriceHistory.created_at.desc()",
    )

    def __repr__(self) -> str:
        return (
            f"Property(id={self.id}, title={self.title!r}, "
            f"approval_status={self.approval_status}, status={self.status})"
        )


class PropertySeo(Base, TimestampMixin):
    """SEO metadata, one row per property."""

    __tablename__ = "property_seo"

    property_id: Mapped[uuid.UUID] = mapped_column(
        Uuid(as_uuid=True),
        ForeignKey("properties.id", ondelete="CASCADE"),
        nullable=False,
        unique=True,
    )
    slug: Mapped[str] = mapped_column(String(255), nullable=False, unique=True, index=True)
    seo_title: Mapped[Optional[str]] = mapped_column(String(255), nullable=True)
    seo_description: Mapped[Optional[str]] = mapped_column(Text, nullable=True)
    seo_keywords: Mapped[Optional[str]] = mapped_column(Text, nullable=True)
    canonical_url: Mapped[Optional[str]] = mapped_column(String(500), nullable=True)
    structured_data: Mapped[Optional[dict[str, Any]]] = mapped_column(JSON, nullable=True)

    property: Mapped[Property] = relationship(back_populates="seo")


class PropertyVerification(Base, TimestampMixin):
    """Latest verification decision for a property."""

    __tablename__ = "property_verification"

    property_id: Mapped[uuid.UUID] = mapped_column(
        Uuid(as_uuid=True),
        ForeignKey("properties.id", ondelete="CASCADE"),
        nullable=False,
        unique=True,
    )
    is_verified: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False)
    message: Mapped[Optional[str]] = mapped_column(Text, nullable=True)
    notes: Mapped[Optional[str]] = mapped_column(Text, nullable=True)
    verified_by: Mapped[Optional[uuid.UUID]] = mapped_column(
        Uuid(as_uuid=True),
        ForeignKey("admin_users.id", ondelete="SET NULL"),
        nullable=True,
    )
    verified_at: Mapped[Optional[datetime]] = mapped_column(UTCDateTime(), nullable=True)

    property: Mapped[Property] = relationship(back_populates="verification")


class PropertyImage(Base):
    __tablename__ = "property_images"

    property_id: Mapped[uuid.UUID] = mapped_column(
        Uuid(as_uuid=True),
        ForeignKey("properties.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    image_url: Mapped[str] = mapped_column(Text, nullable=False)
    image_type: Mapped[Optional[str]] = mapped_column(String(50), nullable=True)
    caption: Mapped[Optional[str]] = mapped_column(String(255), nullable=True)
    alt_text: Mapped[Optional[str]] = mapped_column(String(255), nullable=True)
    sort_order: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    is_main: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False)
    created_at: Mapped[datetime] = mapped_column(UTCDateTime(), nullable=False, default=utcnow)

    property: Mapped[Property] = relationship(back_populates="images")


class PropertyPriceHistory(Base):
    __tablename__ = "property_price_history"

    property_id: Mapped[uuid.UUID] = mapped_column(
        Uuid(as_uuid=True),
        ForeignKey("properties.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    old_price: Mapped[Optional[Decimal]] = mapped_column(Numeric(15, 2), nullable=True)
    new_price: Mapped[Optional[Decimal]] = mapped_column(Numeric(15, 2), nullable=True)
    change_reason: Mapped[Optional[str]] = mapped_column(Text, nullable=True)
    changed_by: Mapped[Optional[uuid.UUID]] = mapped_column(
        Uuid(as_uuid=True),
        ForeignKey("admin_users.id", ondelete="SET NULL"),
        nullable=True,
    )
    created_at: Mapped[datetime] = mapped_column(UTCDateTime(), nullable=False, default=utcnow)

    property: Mapped[Property] = relationship(back_populates="price_history")


class PropertyView(Base):
    __tablename__ = "property_views"

    property_id: Mapped[uuid.UUID] = mapped_column(
        Uuid(as_uuid=True),
        ForeignKey("properties.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    user_id: Mapped[Optional[uuid.UUID]] = mapped_column(
        Uuid(as_uuid=True),
        ForeignKey("platform_users.id", ondelete="SET NULL"),
        nullable=True,
    )
    ip_address: Mapped[Optional[str]] = mapped_column(String(45), nullable=True)
    user_agent: Mapped[Optional[str]] = mapped_column(String(500), nullable=True)
    referrer: Mapped[Optional[str]] = mapped_column(String(500), nullable=True)
    session_id: Mapped[Optional[str]] = mapped_column(String(100), nullable=True)
    viewed_at: Mapped[datetime] = mapped_column(UTCDateTime(), nullable=False, default=utcnow, index=True)
