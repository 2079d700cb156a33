"""
Property Pydantic schemas for service-layer input validation.

This module provides:
- Property creation and partial update schemas
- Listing filters
- SEO, image and moderation inputs
"""

from decimal import Decimal
from typing import Any

from pydantic import BaseModel, EmailStr, Field, field_validator

from bigha.models.enums import (
    ApprovalStatus,
    AreaUnit,
    ListingAs,
    PropertyType,
    PublicationStatus,
)


class PropertyBase(BaseModel):
    """Fields shared by create and update."""

    title: str | None = Field(default=None, min_length=3, max_length=255)
    description: str | None = Field(default=None, max_length=10000)
    price: Decimal | None = Field(default=None, ge=0, max_digits=15, decimal_places=2)
    area: Decimal | None = Field(default=None, gt=0, max_digits=12, decimal_places=2)
    area_unit: AreaUnit | None = None
    khasra_number: str | None = Field(default=None, max_length=100)
    murabba_number: str | None = Field(default=None, max_length=100)
    khewat_number: str | None = Field(default=None, max_length=100)
    address: str | None = None
    city: str | None = Field(default=None, max_length=100)
    district: str | None = Field(default=None, max_length=100)
    state: str | None = Field(default=None, max_length=100)
    country: str | None = Field(default=None, max_length=100)
    pin_code: str | None = Field(default=None, max_length=10)
    location: dict[str, Any] | None = None
    listing_as: ListingAs | None = None
    owner_name: str | None = Field(default=None, max_length=255)
    owner_phone: str | None = Field(default=None, max_length=20)
    owner_whatsapp: str | None = Field(default=None, max_length=20)
    owner_email: EmailStr | None = None

    @field_validator("title", "city", "district", "state", "owner_name")
    @classmethod
    def strip_text(cls, value: str | None) -> str | None:
        if value is None:
            return None
        value = value.strip()
        return value or None

    @field_validator("location")
    @classmethod
    def validate_location(cls, value: dict[str, Any] | None) -> dict[str, Any] | None:
        """Coordinates, when given, must be a valid lat/lng pair."""
        if value is None:
            return None
        lat, lng = value.get("lat"), value.get("lng")
        if lat is not None and not -90 <= float(lat) <= 90:
            raise ValueError("Latitude must be between -90 and 90")
        if lng is not None and not -180 <= float(lng) <= 180:
            raise ValueError("Longitude must be between -180 and 180")
        return value


class PropertyCreate(PropertyBase):
    """
    Schema for creating a property from the admin panel.

    New listings always start in approval state PENDING.
    """

    title: str = Field(min_length=3, max_length=255)
    property_type: PropertyType
    status: PublicationStatus = PublicationStatus.DRAFT
    is_featured: bool = False


class PropertyUpdate(PropertyBase):
    """Partial update; only fields explicitly set are applied."""

    property_type: PropertyType | None = None
    price_change_reason: str | None = Field(default=None, max_length=500)


class PropertyFilter(BaseModel):
    """Listing filters for the admin property table."""

    approval_status: ApprovalStatus | None = None
    status: PublicationStatus | None = None
    property_type: PropertyType | None = None
    city: str | None = None
    state: str | None = None
    is_active: bool | None = None
    is_featured: bool | None = None
    is_verified: bool | None = None
    search: str | None = Field(default=None, max_length=100)


class PropertySeoUpdate(BaseModel):
    """SEO overrides. Slugs are normalized before they are stored."""

    slug: str | None = Field(default=None, min_length=1, max_length=255)
    seo_title: str | None = Field(default=None, max_length=255)
    seo_description: str | None = Field(default=None, max_length=500)
    seo_keywords: str | None = Field(default=None, max_length=1000)
    canonical_url: str | None = Field(default=None, max_length=500)
    structured_data: dict[str, Any] | None = None


class PropertyImageCreate(BaseModel):
    image_url: str = Field(min_length=1)
    image_type: str | None = Field(default=None, max_length=50)
    caption: str | None = Field(default=None, max_length=255)
    alt_text: str | None = Field(default=None, max_length=255)
    sort_order: int = Field(default=0, ge=0)
    is_main: bool = False


class ModerationInput(BaseModel):
    """Optional texts attached to an approval-state transition."""

    message: str | None = Field(default=None, max_length=2000)
    admin_notes: str | None = Field(default=None, max_length=5000)
    reason: str | None = Field(default=None, max_length=2000)
