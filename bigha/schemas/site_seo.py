"""
Site SEO Pydantic schemas.

This module provides:
- Global SEO settings update (creates the row on first use)
- SEO page create and partial update, with URL path normalization
- Home page SEO input
- Schema markup create and partial update
"""

import re
from typing import Any

from pydantic import BaseModel, Field, field_validator

from bigha.models.enums import SeoPageStatus

_WHITESPACE = re.compile(r"\s")


def normalize_url_path(value: str) -> str:
    """
    Canonical form of a site path: one leading slash, no trailing slash.

    Example:
        >>> normalize_url_path(" about-us/ ")
        '/about-us'
        >>> normalize_url_path("/")
        '/'
    """
    value = value.strip()
    if not value:
        raise ValueError("URL must not be empty")
    if _WHITESPACE.search(value):
        raise ValueError("URL must not contain whitespace")
    if "://" in value:
        raise ValueError("URL must be a site path such as /about, not an absolute URL")
    return "/" + value.strip("/")


class GlobalSeoSettingsUpdate(BaseModel):
    """Partial update. ``site_title`` is required the first time settings are saved."""

    site_title: str | None = Field(default=None, min_length=1, max_length=255)
    meta_description: str | None = Field(default=None, max_length=500)
    keywords: str | None = Field(default=None, max_length=1000)
    og_title: str | None = Field(default=None, max_length=255)
    og_description: str | None = Field(default=None, max_length=500)
    og_image: str | None = Field(default=None, max_length=500)

    @field_validator("site_title")
    @classmethod
    def site_title_not_null(cls, value: str | None) -> str:
        if value is None:
            raise ValueError("Site title cannot be removed")
        return value


class SeoPageFields(BaseModel):
    """Optional metadata shared by every SEO page input."""

    description: str | None = Field(default=None, max_length=500)
    keywords: str | None = Field(default=None, max_length=1000)
    image: str | None = Field(default=None, max_length=500)
    schema_type: str | None = Field(default=None, min_length=1, max_length=100)
    schema_description: str | None = Field(default=None, max_length=2000)

    @field_validator("schema_type")
    @classmethod
    def schema_type_not_null(cls, value: str | None) -> str:
        if value is None:
            raise ValueError("Schema type cannot be removed")
        return value


class SeoPageCreate(SeoPageFields):
    page: str = Field(min_length=1, max_length=255)
    url: str = Field(min_length=1, max_length=500)
    title: str = Field(min_length=1, max_length=255)
    status: SeoPageStatus = SeoPageStatus.DRAFT

    @field_validator("url")
    @classmethod
    def normalize_url(cls, value: str) -> str:
        return normalize_url_path(value)


class SeoPageUpdate(SeoPageFields):
    """Partial update; only fields explicitly set are applied. Status has its own mutations."""

    page: str | None = Field(default=None, min_length=1, max_length=255)
    url: str | None = Field(default=None, min_length=1, max_length=500)
    title: str | None = Field(default=None, min_length=1, max_length=255)

    @field_validator("page", "url", "title")
    @classmethod
    def required_columns_not_null(cls, value: str | None) -> str:
        if value is None:
            raise ValueError("Field cannot be removed")
        return value

    @field_validator("url")
    @classmethod
    def normalize_url(cls, value: str) -> str:
        return normalize_url_path(value)


class HomePageSeoInput(SeoPageFields):
    """Home page entry. Its URL and label are fixed, the title is required on creation."""

    title: str | None = Field(default=None, min_length=1, max_length=255)

    @field_validator("title")
    @classmethod
    def title_not_null(cls, value: str | None) -> str:
        if value is None:
            raise ValueError("Title cannot be removed")
        return value


class SchemaSettingCreate(BaseModel):
    type: str = Field(min_length=1, max_length=100)
    data: dict[str, Any]
    is_active: bool = True


class SchemaSettingUpdate(BaseModel):
    type: str | None = Field(default=None, min_length=1, max_length=100)
    data: dict[str, Any] | None = None
    is_active: bool | None = None

    @field_validator("type", "data", "is_active")
    @classmethod
    def required_columns_not_null(cls, value: Any) -> Any:
        if value is None:
            raise ValueError("Field cannot be removed")
        return value
