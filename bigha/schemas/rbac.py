"""
RBAC Pydantic schemas for admin and role management.

This module provides:
- Admin creation and update schemas
- Role creation and update schemas
- Permission creation schema
- RBAC statistics
"""

import re
import uuid
from datetime import datetime

from pydantic import BaseModel, EmailStr, Field, field_validator

from bigha.core.security import validate_password_strength

_SLUG_PATTERN = re.compile(r"^[a-z0-9]+(?:[_-][a-z0-9]+)*$")
_COLOR_PATTERN = re.compile(r"^#[0-9a-fA-F]{6}$")


class AdminCreate(BaseModel):
    """
    Schema for creating a new admin user.

    Attributes:
        email: Login email, unique
        password: Initial password, must satisfy strength rules
        role_ids: Roles granted immediately
    """

    email: EmailStr
    password: str = Field(min_length=8, max_length=128)
    first_name: str = Field(min_length=1, max_length=100)
    last_name: str = Field(min_length=1, max_length=100)
    department: str | None = Field(default=None, max_length=100)
    employee_id: str | None = Field(default=None, max_length=50)
    phone: str | None = Field(default=None, max_length=20)
    avatar: str | None = None
    bio: str | None = Field(default=None, max_length=2000)
    two_factor_enabled: bool = False
    role_ids: list[uuid.UUID] = Field(default_factory=list)

    @field_validator("password")
    @classmethod
    def validate_password(cls, value: str) -> str:
        is_valid, error_message = validate_password_strength(value)
        if not is_valid:
            raise ValueError(error_message)
        return value


class AdminUpdate(BaseModel):
    """Partial admin profile update. Email and password have dedicated flows."""

    first_name: str | None = Field(default=None, min_length=1, max_length=100)
    last_name: str | None = Field(default=None, min_length=1, max_length=100)
    department: str | None = Field(default=None, max_length=100)
    employee_id: str | None = Field(default=None, max_length=50)
    phone: str | None = Field(default=None, max_length=20)
    avatar: str | None = None
    bio: str | None = Field(default=None, max_length=2000)
    two_factor_enabled: bool | None = None


class RoleCreate(BaseModel):
    name: str = Field(min_length=2, max_length=100)
    slug: str | None = Field(default=None, min_length=2, max_length=100)
    description: str | None = Field(default=None, max_length=1000)
    color: str | None = None
    permission_ids: list[uuid.UUID] = Field(default_factory=list)

    @field_validator("slug")
    @classmethod
    def validate_slug(cls, value: str | None) -> str | None:
        if value is not None and not _SLUG_PATTERN.match(value):
            raise ValueError("Slug may only contain lowercase letters, digits, '-' and '_'")
        return value

    @field_validator("color")
    @classmethod
    def validate_color(cls, value: str | None) -> str | None:
        if value is not None and not _COLOR_PATTERN.match(value):
            raise ValueError("Color must be a hex value like #1f2937")
        return value


class RoleUpdate(BaseModel):
    """Partial role update. ``permission_ids``, when given, replaces all grants."""

    name: str | None = Field(default=None, min_length=2, max_length=100)
    description: str | None = Field(default=None, max_length=1000)
    color: str | None = None
    is_active: bool | None = None
    permission_ids: list[uuid.UUID] | None = None

    @field_validator("color")
    @classmethod
    def validate_color(cls, value: str | None) -> str | None:
        if value is not None and not _COLOR_PATTERN.match(value):
            raise ValueError("Color must be a hex value like #1f2937")
        return value


class PermissionCreate(BaseModel):
    resource: str = Field(min_length=1, max_length=50, pattern=r"^[a-z_]+$")
    action: str = Field(min_length=1, max_length=50, pattern=r"^[a-z_]+$")
    description: str | None = Field(default=None, max_length=500)


class RoleAssignment(BaseModel):
    admin_id: uuid.UUID
    role_ids: list[uuid.UUID] = Field(min_length=1)
    expires_at: datetime | None = None


class RoleHolderCount(BaseModel):
    role_id: uuid.UUID
    role_name: str
    role_slug: str
    admin_count: int


class RBACStats(BaseModel):
    total_admins: int
    active_admins: int
    total_roles: int
    total_permissions: int
    admins_by_role: list[RoleHolderCount]
