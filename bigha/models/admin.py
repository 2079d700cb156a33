"""
Admin user and role-based access control models.

This module defines:
- AdminUser: back-office account with authentication and profile fields
- AdminRole: named, sluggified bundle of permissions
- AdminPermission: atomic (resource, action) pair, unique by derived name
- AdminRolePermission: role -> permission grant (junction)
- AdminUserRole: admin -> role assignment with grantor and optional expiry

Effective permissions of an admin are the union of the permissions of every
active role assigned to them whose assignment has not expired.
"""

import uuid
from datetime import datetime
from typing import Optional

from sqlalchemy import (
    Boolean,
    ForeignKey,
    String,
    Text,
    UniqueConstraint,
    Uuid,
    func,
    select,
)
from sqlalchemy.orm import Mapped, column_property, mapped_column, relationship

from bigha.models.base import Base
from bigha.models.mixins import TimestampMixin, UTCDateTime, utcnow


class AdminUser(Base, TimestampMixin):
    """
    Admin user model.

    Attributes:
        email: Unique login email
        password_hash: Argon2id hash (never store plain passwords)
        is_active: Disabled admins cannot log in and their sessions stop validating
        is_verified: Email verified flag
        two_factor_enabled: Login requires an emailed OTP as a second step
        last_login_at: Timestamp of last successful login
    """

    __tablename__ = "admin_users"

    email: Mapped[str] = mapped_column(String(255), nullable=False, unique=True, index=True)
    password_hash: Mapped[str] = mapped_column(String(255), nullable=False)

    first_name: Mapped[str] = mapped_column(String(100), nullable=False)
    last_name: Mapped[str] = mapped_column(String(100), nullable=False)

    is_active: Mapped[bool] = mapped_column(Boolean, nullable=False, default=True, index=True)
    is_verified: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False)
    email_verified_at: Mapped[Optional[datetime]] = mapped_column(UTCDateTime(), nullable=True)
    last_login_at: Mapped[Optional[datetime]] = mapped_column(UTCDateTime(), nullable=True)
    two_factor_enabled: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False)

    # Profile fields
    department: Mapped[Optional[str]] = mapped_column(String(100), nullable=True)
    employee_id: Mapped[Optional[str]] = mapped_column(String(50), nullable=True, unique=True)
    phone: Mapped[Optional[str]] = mapped_column(String(20), nullable=True)
    avatar: Mapped[Optional[str]] = mapped_column(Text, nullable=True)
    bio: Mapped[Optional[str]] = mapped_column(Text, nullable=True)

    role_assignments: Mapped[list["AdminUserRole"]] = relationship(
        back_populates="admin",
        foreign_keys="AdminUserRole.admin_id",
        cascade="all, delete-orphan",
        passive_deletes=True,
    )

    @property
    def full_name(self) -> str:
        return f"{self.first_name} {self.last_name}".strip()

    def active_assignments(self, now: datetime | None = None) -> list["AdminUserRole"]:
        """Assignments that currently grant permissions (requires role_assignments loaded)."""
        now = now or utcnow()
        return [
            assignment
            for assignment in self.role_assignments
            if assignment.is_current(now) and assignment.role.is_active
        ]

    def __repr__(self) -> str:
        return f"AdminUser(id={self.id}, email={self.email})"


class AdminPermission(Base, TimestampMixin):
    """
    Atomic permission, e.g. ``properties:approve``.

    ``name`` is always ``f"{resource}:{action}"`` and is globally unique,
    which also makes the (resource, action) pair unique.
    """

    __tablename__ = "admin_permissions"
    __table_args__ = (UniqueConstraint("resource", "action", name="uq_admin_permissions_resource_action"),)

    resource: Mapped[str] = mapped_column(String(50), nullable=False, index=True)
    action: Mapped[str] = mapped_column(String(50), nullable=False)
    name: Mapped[str] = mapped_column(String(100), nullable=False, unique=True)
    description: Mapped[Optional[str]] = mapped_column(Text, nullable=True)

    @staticmethod
    def build_name(resource: str, action: str) -> str:
        return f"{resource}:{action}"

    def __repr__(self) -> str:
        return f"AdminPermission(name={self.name})"


class AdminRole(Base, TimestampMixin):
    """
    Role model.

    System roles (``is_system_role``) are seeded with the platform and can
    never be deleted.
    """

    __tablename__ = "admin_roles"

    name: Mapped[str] = mapped_column(String(100), nullable=False, unique=True)
    slug: Mapped[str] = mapped_column(String(100), nullable=False, unique=True, index=True)
    description: Mapped[Optional[str]] = mapped_column(Text, nullable=True)
    color: Mapped[Optional[str]] = mapped_column(String(7), nullable=True)
    is_system_role: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False)
    is_active: Mapped[bool] = mapped_column(Boolean, nullable=False, default=True)

    permission_grants: Mapped[list["AdminRolePermission"]] = relationship(
        back_populates="role",
        cascade="all, delete-orphan",
        passive_deletes=True,
    )

    @property
    def permissions(self) -> list[AdminPermission]:
        """Granted permissions (requires permission_grants loaded)."""
        return sorted(
            (grant.permission for grant in self.permission_grants),
            key=lambda permission: permission.name,
        )

    def __repr__(self) -> str:
        return f"AdminRole(slug={self.slug})"


class AdminRolePermission(Base):
    """Role -> permission grant. Deleting either side removes the grant."""

    __tablename__ = "admin_role_permissions"
    __table_args__ = (UniqueConstraint("role_id", "permission_id", name="uq_admin_role_permissions_role_permission"),)

    role_id: Mapped[uuid.UUID] = mapped_column(
        Uuid(as_uuid=True),
        ForeignKey("admin_roles.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    permission_id: Mapped[uuid.UUID] = mapped_column(
        Uuid(as_uuid=True),
        ForeignKey("admin_permissions.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    created_at: Mapped[datetime] = mapped_column(UTCDateTime(), nullable=False, default=utcnow)

    role: Mapped[AdminRole] = relationship(back_populates="permission_grants")
    permission: Mapped[AdminPermission] = relationship()


class AdminUserRole(Base):
    """
    Admin -> role assignment.

    ``assigned_by`` is attribution only (SET NULL when the grantor is removed).
    An assignment whose ``expires_at`` has passed grants nothing.
    """

    __tablename__ = "admin_user_roles"
    __table_args__ = (UniqueConstraint("admin_id", "role_id", name="uq_admin_user_roles_admin_role"),)

    admin_id: Mapped[uuid.UUID] = mapped_column(
        Uuid(as_uuid=True),
        ForeignKey("admin_users.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    role_id: Mapped[uuid.UUID] = mapped_column(
        Uuid(as_uuid=True),
        ForeignKey("admin_roles.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    assigned_by: Mapped[Optional[uuid.UUID]] = mapped_column(
        Uuid(as_uuid=True),
        ForeignKey("admin_users.id", ondelete="SET NULL"),
        nullable=True,
    )
    assigned_at: Mapped[datetime] = mapped_column(UTCDateTime(), nullable=False, default=utcnow)
    expires_at: Mapped[Optional[datetime]] = mapped_column(UTCDateTime(), nullable=True)

    admin: Mapped[AdminUser] = relationship(back_populates="role_assignments", foreign_keys=[admin_id])
    role: Mapped[AdminRole] = relationship()

    def is_current(self, now: datetime) -> bool:
        return self.expires_at is None or self.expires_at > now


# Number of admins holding a role, loaded with every role query.
AdminRole.user_count = column_property(
    select(func.count(AdminUserRole.id))
    .where(AdminUserRole.role_id == AdminRole.id)
    .correlate_except(AdminUserRole)
    .scalar_subquery(),
    deferred=False,
)
