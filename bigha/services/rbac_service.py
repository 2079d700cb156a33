"""
RBAC administration service.

This module provides:
- Permission listing and creation
- Role CRUD with system-role protection
- Admin CRUD, disable/enable
- Role assignment (assign, revoke, replace)
- RBAC statistics

Each mutating method runs in one transaction together with its activity
log row.
"""

import logging
import uuid
from collections import defaultdict
from collections.abc import Callable
from datetime import datetime

from sqlalchemy.ext.asyncio import AsyncSession

from bigha.core.security import hash_password
from bigha.exceptions import (
    AlreadyExistsError,
    ConflictError,
    ForbiddenError,
    InvalidInputError,
    NotFoundError,
)
from bigha.models.admin import AdminPermission, AdminRole, AdminUser
from bigha.models.enums import ActivityAction
from bigha.models.mixins import utcnow
from bigha.repositories.admin_repository import AdminUserRepository
from bigha.repositories.permission_repository import PermissionRepository
from bigha.repositories.role_repository import RoleAssignmentRepository, RoleRepository
from bigha.schemas.common import Page
from bigha.schemas.rbac import (
    AdminCreate,
    AdminUpdate,
    PermissionCreate,
    RBACStats,
    RoleCreate,
    RoleHolderCount,
    RoleUpdate,
)
from bigha.services.activity_service import ActivityService, RequestMeta
from bigha.services.seo_service import generate_slug
from bigha.services.session_service import SessionService

logger = logging.getLogger(__name__)


class RBACService:
    """
    Service class for role-based access control administration.

    Usage:
        rbac = RBACService(session)
        role = await rbac.create_role(RoleCreate(name="Property Manager"), actor_id=admin.id)
        await rbac.assign_roles(target.id, [role.id], actor_id=admin.id)
    """

    def __init__(self, session: AsyncSession, clock: Callable[[], datetime] = utcnow):
        self.session = session
        self.clock = clock
        self.admin_repo = AdminUserRepository(session)
        self.role_repo = RoleRepository(session)
        self.assignment_repo = RoleAssignmentRepository(session)
        self.permission_repo = PermissionRepository(session)
        self.sessions = SessionService(session, clock=clock)
        self.activity = ActivityService(session)

    # -------------------------------------------------------------------------
    # Permissions
    # -------------------------------------------------------------------------

    async def list_permissions(self) -> list[AdminPermission]:
        return await self.permission_repo.list_ordered()

    async def permissions_by_resource(self) -> dict[str, list[AdminPermission]]:
        grouped: dict[str, list[AdminPermission]] = defaultdict(list)
        for permission in await self.permission_repo.list_ordered():
            grouped[permission.resource].append(permission)
        return dict(grouped)

    async def create_permission(
        self,
        data: PermissionCreate,
        actor_id: uuid.UUID,
        meta: RequestMeta | None = None,
    ) -> AdminPermission:
        """
        Create a permission named ``resource:action``.

        Raises:
            AlreadyExistsError: If the name is taken
        """
        name = AdminPermission.build_name(data.resource, data.action)
        if await self.permission_repo.get_by_name(name) is not None:
            raise AlreadyExistsError("Permission", "name")

        permission = await self.permission_repo.add(
            AdminPermission(
                resource=data.resource,
                action=data.action,
                name=name,
                description=data.description,
            )
        )
        await self.activity.log_activity(
            admin_id=actor_id,
            action=ActivityAction.PERMISSION_CREATE,
            resource="permission",
            resource_id=permission.id,
            details={"name": name},
            meta=meta,
        )
        await self.session.commit()
        logger.info(f"Permission created: {name}")
        return permission

    async def _require_permissions(self, permission_ids: list[uuid.UUID]) -> list[AdminPermission]:
        unique_ids = list(dict.fromkeys(permission_ids))
        permissions = await self.permission_repo.get_by_ids(unique_ids)
        if len(permissions) != len(unique_ids):
            found = {permission.id for permission in permissions}
            missing = [str(pid) for pid in unique_ids if pid not in found]
            raise NotFoundError("Permission", details={"missing_ids": missing})
        return permissions

    # -------------------------------------------------------------------------
    # Roles
    # -------------------------------------------------------------------------

    async def list_roles(self, limit: int = 50, offset: int = 0) -> Page[AdminRole]:
        roles, total = await self.role_repo.list_roles(offset=offset, limit=limit)
        return Page(items=roles, total=total, limit=limit, offset=offset)

    async def get_role(self, role_id: uuid.UUID) -> AdminRole:
        role = await self.role_repo.get_with_permissions(role_id)
        if role is None:
            raise NotFoundError("Role")
        return role

    async def create_role(
        self,
        data: RoleCreate,
        actor_id: uuid.UUID,
        meta: RequestMeta | None = None,
    ) -> AdminRole:
        """
        Create a role, deriving the slug from the name when none is given.

        Raises:
            AlreadyExistsError: Duplicate name or slug
            NotFoundError: Unknown permission ids
        """
        slug = data.slug or generate_slug(data.name)
        if not slug:
            raise InvalidInputError("Role name must contain at least one letter or digit")
        if await self.role_repo.name_exists(data.name):
            raise AlreadyExistsError("Role", "name")
        if await self.role_repo.slug_exists(slug):
            raise AlreadyExistsError("Role", "slug")

        await self._require_permissions(data.permission_ids)

        role = await self.role_repo.add(
            AdminRole(
                name=data.name,
                slug=slug,
                description=data.description,
                color=data.color,
                is_system_role=False,
                is_active=True,
            )
        )
        await self.role_repo.replace_permissions(role.id, data.permission_ids)
        await self.activity.log_activity(
            admin_id=actor_id,
            action=ActivityAction.ROLE_CREATE,
            resource="role",
            resource_id=role.id,
            details={"slug": slug, "permission_ids": data.permission_ids},
            meta=meta,
        )
        await self.session.commit()

        logger.info(f"Role created: {slug} ({role.id})")
        return await self.get_role(role.id)

    async def update_role(
        self,
        role_id: uuid.UUID,
        data: RoleUpdate,
        actor_id: uuid.UUID,
        meta: RequestMeta | None = None,
    ) -> AdminRole:
        """
        Partially update a role.

        When ``permission_ids`` is provided the grant set is replaced
        atomically with the rest of the update.
        """
        role = await self.get_role(role_id)
        changes = data.model_dump(exclude_unset=True)
        permission_ids = changes.pop("permission_ids", None)

        if "name" in changes and changes["name"] is not None:
            if await self.role_repo.name_exists(changes["name"], exclude_id=role.id):
                raise AlreadyExistsError("Role", "name")

        for field, value in changes.items():
            if value is None and field in ("name", "is_active"):
                continue
            setattr(role, field, value)

        if permission_ids is not None:
            await self._require_permissions(permission_ids)
            await self.role_repo.replace_permissions(role.id, permission_ids)

        await self.session.flush()
        await self.activity.log_activity(
            admin_id=actor_id,
            action=ActivityAction.ROLE_UPDATE,
            resource="role",
            resource_id=role.id,
            details={"fields": sorted(changes), "permission_ids": permission_ids},
            meta=meta,
        )
        await self.session.commit()
        return await self.get_role(role.id)

    async def delete_role(
        self,
        role_id: uuid.UUID,
        actor_id: uuid.UUID,
        meta: RequestMeta | None = None,
    ) -> bool:
        """
        Delete a role. Grants cascade.

        Raises:
            NotFoundError: Role does not exist
            ForbiddenError: System roles are never deleted
            ConflictError: Admins still hold the role
        """
        role = await self.role_repo.get_by_id(role_id)
        if role is None:
            raise NotFoundError("Role")
        if role.is_system_role:
            raise ForbiddenError("System roles cannot be deleted")

        holders = await self.role_repo.count_holders(role.id)
        if holders > 0:
            raise ConflictError(
                f"Role is assigned to {holders} admin(s); revoke it before deleting",
                details={"holders": holders},
            )

        slug = role.slug
        await self.role_repo.delete(role)
        await self.activity.log_activity(
            admin_id=actor_id,
            action=ActivityAction.ROLE_DELETE,
            resource="role",
            resource_id=role_id,
            details={"slug": slug},
            meta=meta,
        )
        await self.session.commit()
        logger.info(f"Role deleted: {slug} ({role_id})")
        return True

    async def _require_roles(self, role_ids: list[uuid.UUID]) -> list[AdminRole]:
        unique_ids = list(dict.fromkeys(role_ids))
        roles = await self.role_repo.get_by_ids(unique_ids)
        if len(roles) != len(unique_ids):
            found = {role.id for role in roles}
            missing = [str(rid) for rid in unique_ids if rid not in found]
            raise NotFoundError("Role", details={"missing_ids": missing})
        return roles

    # -------------------------------------------------------------------------
    # Admins
    # -------------------------------------------------------------------------

    async def list_admins(
        self,
        limit: int = 20,
        offset: int = 0,
        search: str | None = None,
        is_active: bool | None = None,
    ) -> Page[AdminUser]:
        admins, total = await self.admin_repo.search(
            search=search, is_active=is_active, offset=offset, limit=limit
        )
        return Page(items=admins, total=total, limit=limit, offset=offset)

    async def get_admin(self, admin_id: uuid.UUID) -> AdminUser:
        admin = await self.admin_repo.get_with_roles(admin_id)
        if admin is None:
            raise NotFoundError("Admin")
        return admin

    async def create_admin(
        self,
        data: AdminCreate,
        actor_id: uuid.UUID,
        meta: RequestMeta | None = None,
    ) -> AdminUser:
        """
        Create an admin with a hashed password and optional initial roles.

        Raises:
            AlreadyExistsError: Email already registered
            NotFoundError: Unknown role ids
        """
        if await self.admin_repo.email_exists(data.email):
            raise AlreadyExistsError("Admin", "email")
        await self._require_roles(data.role_ids)

        admin = await self.admin_repo.add(
            AdminUser(
                email=data.email.lower(),
                password_hash=hash_password(data.password),
                first_name=data.first_name,
                last_name=data.last_name,
                department=data.department,
                employee_id=data.employee_id,
                phone=data.phone,
                avatar=data.avatar,
                bio=data.bio,
                two_factor_enabled=data.two_factor_enabled,
                is_active=True,
                is_verified=False,
            )
        )
        await self.assignment_repo.add_assignments(
            admin.id, data.role_ids, assigned_by=actor_id, now=self.clock()
        )
        await self.activity.log_activity(
            admin_id=actor_id,
            action=ActivityAction.ADMIN_CREATE,
            resource="admin",
            resource_id=admin.id,
            details={"email": admin.email, "role_ids": data.role_ids},
            meta=meta,
        )
        await self.session.commit()

        logger.info(f"Admin created: {admin.id} ({admin.email})")
        return await self.get_admin(admin.id)

    async def update_admin(
        self,
        admin_id: uuid.UUID,
        data: AdminUpdate,
        actor_id: uuid.UUID,
        meta: RequestMeta | None = None,
    ) -> AdminUser:
        admin = await self.get_admin(admin_id)
        changes = data.model_dump(exclude_unset=True)
        for field, value in changes.items():
            if value is None and field in ("first_name", "last_name", "two_factor_enabled"):
                continue
            setattr(admin, field, value)

        await self.session.flush()
        await self.activity.log_activity(
            admin_id=actor_id,
            action=ActivityAction.ADMIN_UPDATE,
            resource="admin",
            resource_id=admin.id,
            details={"fields": sorted(changes)},
            meta=meta,
        )
        await self.session.commit()
        return await self.get_admin(admin.id)

    async def set_admin_active(
        self,
        admin_id: uuid.UUID,
        is_active: bool,
        actor_id: uuid.UUID,
        meta: RequestMeta | None = None,
    ) -> AdminUser:
        """
        Disable or enable an admin.

        Disabling revokes every session and refresh token of the admin.

        Raises:
            InvalidInputError: An admin tried to disable themselves
        """
        if not is_active and admin_id == actor_id:
            raise InvalidInputError("You cannot disable your own account")

        admin = await self.get_admin(admin_id)
        admin.is_active = is_active

        revoked = 0
        if not is_active:
            revoked = await self.sessions.revoke_all_sessions(admin.id)

        await self.session.flush()
        await self.activity.log_activity(
            admin_id=actor_id,
            action=ActivityAction.ADMIN_ENABLE if is_active else ActivityAction.ADMIN_DISABLE,
            resource="admin",
            resource_id=admin.id,
            details={"revoked_sessions": revoked} if not is_active else None,
            meta=meta,
        )
        await self.session.commit()

        logger.info(f"Admin {'enabled' if is_active else 'disabled'}: {admin.id}")
        return await self.get_admin(admin.id)

    # -------------------------------------------------------------------------
    # Role assignment
    # -------------------------------------------------------------------------

    async def assign_roles(
        self,
        admin_id: uuid.UUID,
        role_ids: list[uuid.UUID],
        actor_id: uuid.UUID,
        expires_at: datetime | None = None,
        meta: RequestMeta | None = None,
    ) -> AdminUser:
        """
        Assign roles, recording the grantor.

        Roles already held through an expired assignment (or with another
        expiry) are renewed with ``expires_at``.
        """
        await self.get_admin(admin_id)
        await self._require_roles(role_ids)
        if expires_at is not None and expires_at <= self.clock():
            raise InvalidInputError("expiresAt must be in the future")

        added = await self.assignment_repo.add_assignments(
            admin_id, role_ids, assigned_by=actor_id, expires_at=expires_at, now=self.clock()
        )
        await self.activity.log_activity(
            admin_id=actor_id,
            action=ActivityAction.ROLE_ASSIGN,
            resource="admin",
            resource_id=admin_id,
            details={"role_ids": added, "expires_at": expires_at},
            meta=meta,
        )
        await self.session.commit()
        return await self.get_admin(admin_id)

    async def revoke_roles(
        self,
        admin_id: uuid.UUID,
        role_ids: list[uuid.UUID],
        actor_id: uuid.UUID,
        meta: RequestMeta | None = None,
    ) -> AdminUser:
        await self.get_admin(admin_id)
        removed = await self.assignment_repo.remove_assignments(admin_id, role_ids)
        await self.activity.log_activity(
            admin_id=actor_id,
            action=ActivityAction.ROLE_REVOKE,
            resource="admin",
            resource_id=admin_id,
            details={"role_ids": role_ids, "removed": removed},
            meta=meta,
        )
        await self.session.commit()
        return await self.get_admin(admin_id)

    async def replace_roles(
        self,
        admin_id: uuid.UUID,
        role_ids: list[uuid.UUID],
        actor_id: uuid.UUID,
        meta: RequestMeta | None = None,
    ) -> AdminUser:
        """Make ``role_ids`` the admin's exact role set."""
        await self.get_admin(admin_id)
        await self._require_roles(role_ids)

        await self.assignment_repo.remove_all(admin_id)
        await self.assignment_repo.add_assignments(
            admin_id, role_ids, assigned_by=actor_id, now=self.clock()
        )
        await self.activity.log_activity(
            admin_id=actor_id,
            action=ActivityAction.ROLE_REPLACE,
            resource="admin",
            resource_id=admin_id,
            details={"role_ids": role_ids},
            meta=meta,
        )
        await self.session.commit()
        return await self.get_admin(admin_id)

    # -------------------------------------------------------------------------
    # Statistics
    # -------------------------------------------------------------------------

    async def stats(self) -> RBACStats:
        per_role = await self.role_repo.admins_per_role()
        return RBACStats(
            total_admins=await self.admin_repo.count(),
            active_admins=await self.admin_repo.count_active(),
            total_roles=await self.role_repo.count(),
            total_permissions=await self.permission_repo.count(),
            admins_by_role=[
                RoleHolderCount(
                    role_id=role.id,
                    role_name=role.name,
                    role_slug=role.slug,
                    admin_count=count,
                )
                for role, count in per_role
            ],
        )
