"""
Site-level SEO models.

This module defines:
- GlobalSeoSettings: site-wide defaults, a single row
- SeoPage: SEO entry for one public page, keyed by its URL path
- SchemaSetting: schema.org JSON-LD snippets the public site embeds

Property listings keep their own SEO rows (see PropertySeo).
"""

import uuid
from datetime import datetime
from typing import Any, Optional

from sqlalchemy import JSON, Boolean, Enum, ForeignKey, String, Text, Uuid
from sqlalchemy.orm import Mapped, mapped_column

from bigha.models.base import Base
from bigha.models.enums import SeoPageStatus
from bigha.models.mixins import TimestampMixin, UTCDateTime

HOME_PAGE_URLS = ("/", "/home")


class GlobalSeoSettings(Base, TimestampMixin):
    """Site title and default meta/Open Graph tags."""

    __tablename__ = "global_seo_settings"

    site_title: Mapped[str] = mapped_column(String(255), nullable=False)
    meta_description: Mapped[Optional[str]] = mapped_column(Text, nullable=True)
    keywords: Mapped[Optional[str]] = mapped_column(Text, nullable=True)
    og_title: Mapped[Optional[str]] = mapped_column(String(255), nullable=True)
    og_description: Mapped[Optional[str]] = mapped_column(Text, nullable=True)
    og_image: Mapped[Optional[str]] = mapped_column(String(500), nullable=True)
    updated_by: Mapped[Optional[uuid.UUID]] = mapped_column(
        Uuid(as_uuid=True),
        ForeignKey("admin_users.id", ondelete="SET NULL"),
        nullable=True,
    )


class SeoPage(Base, TimestampMixin):
    """
    SEO entry for a static page of the public site.

    Attributes:
        page: Human label shown in the admin console ("About us")
        url: Normalized path, unique ("/about")
        status: DRAFT, ACTIVE or INACTIVE
        published_at: First time the entry went ACTIVE
    """

    __tablename__ = "seo_pages"

    page: Mapped[str] = mapped_column(String(255), nullable=False)
    url: Mapped[str] = mapped_column(String(500), nullable=False, unique=True, index=True)
    title: Mapped[str] = mapped_column(String(255), nullable=False)
    description: Mapped[Optional[str]] = mapped_column(Text, nullable=True)
    keywords: Mapped[Optional[str]] = mapped_column(Text, nullable=True)
    image: Mapped[Optional[str]] = mapped_column(String(500), nullable=True)
    status: Mapped[SeoPageStatus] = mapped_column(
        Enum(SeoPageStatus, name="seo_page_status_enum"),
        nullable=False,
        default=SeoPageStatus.DRAFT,
        index=True,
    )
    schema_type: Mapped[str] = mapped_column(String(100), nullable=False, default="WebPage")
    schema_description: Mapped[Optional[str]] = mapped_column(Text, nullable=True)
    published_at: Mapped[Optional[datetime]] = mapped_column(UTCDateTime(), nullable=True)

    created_by: Mapped[Optional[uuid.UUID]] = mapped_column(
        Uuid(as_uuid=True),
        ForeignKey("admin_users.id", ondelete="SET NULL"),
        nullable=True,
    )
    updated_by: Mapped[Optional[uuid.UUID]] = mapped_column(
        Uuid(as_uuid=True),
        ForeignKey("admin_users.id", ondelete="SET NULL"),
        nullable=True,
    )

    @property
    def is_home_page(self) -> bool:
        return self.url in HOME_PAGE_URLS

    def __repr__(self) -> str:
        return f"SeoPage(id={self.id}, url={self.url}, status={self.status})"


class SchemaSetting(Base, TimestampMixin):
    """A schema.org block ("Organization", "RealEstateAgent", ...) and whether it is emitted."""

    __tablename__ = "schema_settings"

    type: Mapped[str] = mapped_column(String(100), nullable=False, index=True)
    data: Mapped[dict[str, Any]] = mapped_column(JSON, nullable=False)
    is_active: Mapped[bool] = mapped_column(Boolean, nullable=False, default=True)
