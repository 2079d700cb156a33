"""
RBAC administration operations: permissions, roles, admins, role
assignment, statistics and the activity log.

Reads need ``admin:view``. Writes need the matching ``admin:create``,
``admin:edit`` or ``admin:delete``; role assignment needs ``admin:roles``.
"""

import graphene

from bigha.api.gql.errors import page_args, parse_input
from bigha.api.gql.guards import permission_required
from bigha.api.gql.types import (
    ActivityActionEnum,
    ActivityLogPage,
    Admin,
    AdminPage,
    OperationResult,
    Permission,
    PermissionGroup,
    RBACStats,
    Role,
    RolePage,
)
from bigha.schemas.rbac import (
    AdminCreate,
    AdminUpdate,
    PermissionCreate,
    RoleAssignment,
    RoleCreate,
    RoleUpdate,
)
from bigha.services.activity_service import ActivityService
from bigha.services.rbac_service import RBACService


def _rbac(info) -> RBACService:
    return RBACService(info.context.session)


# =============================================================================
# Inputs
# =============================================================================


class CreatePermissionInput(graphene.InputObjectType):
    resource = graphene.String(required=True)
    action = graphene.String(required=True)
    description = graphene.String()


class CreateRoleInput(graphene.InputObjectType):
    name = graphene.String(required=True)
    slug = graphene.String()
    description = graphene.String()
    color = graphene.String()
    permission_ids = graphene.List(graphene.NonNull(graphene.UUID))


class UpdateRoleInput(graphene.InputObjectType):
    name = graphene.String()
    description = graphene.String()
    color = graphene.String()
    is_active = graphene.Boolean()
    permission_ids = graphene.List(graphene.NonNull(graphene.UUID))


class CreateAdminInput(graphene.InputObjectType):
    email = graphene.String(required=True)
    password = graphene.String(required=True)
    first_name = graphene.String(required=True)
    last_name = graphene.String(required=True)
    department = graphene.String()
    employee_id = graphene.String()
    phone = graphene.String()
    avatar = graphene.String()
    bio = graphene.String()
    two_factor_enabled = graphene.Boolean()
    role_ids = graphene.List(graphene.NonNull(graphene.UUID))


class UpdateAdminInput(graphene.InputObjectType):
    first_name = graphene.String()
    last_name = graphene.String()
    department = graphene.String()
    employee_id = graphene.String()
    phone = graphene.String()
    avatar = graphene.String()
    bio = graphene.String()
    two_factor_enabled = graphene.Boolean()


# =============================================================================
# Queries
# =============================================================================


class RBACQuery(graphene.ObjectType):
    permissions = graphene.List(graphene.NonNull(Permission), required=True)
    permissions_by_resource = graphene.List(graphene.NonNull(PermissionGroup), required=True)
    roles = graphene.Field(
        RolePage,
        required=True,
        limit=graphene.Int(default_value=50),
        offset=graphene.Int(default_value=0),
    )
    role = graphene.Field(Role, required=True, id=graphene.UUID(required=True))
    admins = graphene.Field(
        AdminPage,
        required=True,
        limit=graphene.Int(default_value=20),
        offset=graphene.Int(default_value=0),
        search=graphene.String(),
        is_active=graphene.Boolean(),
    )
    admin = graphene.Field(Admin, required=True, id=graphene.UUID(required=True))
    rbac_stats = graphene.Field(RBACStats, required=True)
    admin_activity_logs = graphene.Field(
        ActivityLogPage,
        required=True,
        admin_id=graphene.UUID(),
        action=graphene.Argument(ActivityActionEnum),
        resource=graphene.String(),
        resource_id=graphene.UUID(),
        limit=graphene.Int(default_value=50),
        offset=graphene.Int(default_value=0),
    )

    @staticmethod
    @permission_required("admin:view")
    async def resolve_permissions(root, info):
        return await _rbac(info).list_permissions()

    @staticmethod
    @permission_required("admin:view")
    async def resolve_permissions_by_resource(root, info):
        grouped = await _rbac(info).permissions_by_resource()
        return [PermissionGroup(resource=resource, permissions=items) for resource, items in grouped.items()]

    @staticmethod
    @permission_required("admin:view")
    async def resolve_roles(root, info, limit, offset):
        page = page_args(limit, offset)
        return await _rbac(info).list_roles(limit=page.limit, offset=page.offset)

    @staticmethod
    @permission_required("admin:view")
    async def resolve_role(root, info, id):
        return await _rbac(info).get_role(id)

    @staticmethod
    @permission_required("admin:view")
    async def resolve_admins(root, info, limit, offset, search=None, is_active=None):
        page = page_args(limit, offset)
        return await _rbac(info).list_admins(
            limit=page.limit, offset=page.offset, search=search, is_active=is_active
        )

    @staticmethod
    @permission_required("admin:view")
    async def resolve_admin(root, info, id):
        return await _rbac(info).get_admin(id)

    @staticmethod
    @permission_required("admin:view")
    async def resolve_rbac_stats(root, info):
        return await _rbac(info).stats()

    @staticmethod
    @permission_required("admin:view")
    async def resolve_admin_activity_logs(
        root, info, limit, offset, admin_id=None, action=None, resource=None, resource_id=None
    ):
        page = page_args(limit, offset)
        return await ActivityService(info.context.session).list_logs(
            admin_id=admin_id,
            action=action,
            resource=resource,
            resource_id=resource_id,
            limit=page.limit,
            offset=page.offset,
        )


# =============================================================================
# Mutations
# =============================================================================


class CreatePermission(graphene.Mutation):
    class Arguments:
        input = CreatePermissionInput(required=True)

    Output = Permission

    @staticmethod
    @permission_required("admin:create")
    async def mutate(root, info, input):
        data = parse_input(PermissionCreate, input)
        return await _rbac(info).create_permission(data, info.context.require_admin().id, meta=info.context.meta)


class CreateRole(graphene.Mutation):
    class Arguments:
        input = CreateRoleInput(required=True)

    Output = Role

    @staticmethod
    @permission_required("admin:create")
    async def mutate(root, info, input):
        data = parse_input(RoleCreate, input)
        return await _rbac(info).create_role(data, info.context.require_admin().id, meta=info.context.meta)


class UpdateRole(graphene.Mutation):
    class Arguments:
        id = graphene.UUID(required=True)
        input = UpdateRoleInput(required=True)

    Output = Role

    @staticmethod
    @permission_required("admin:edit")
    async def mutate(root, info, id, input):
        data = parse_input(RoleUpdate, input)
        role = await _rbac(info).update_role(id, data, info.context.require_admin().id, meta=info.context.meta)
        info.context.permissions.invalidate()
        return role


class DeleteRole(graphene.Mutation):
    class Arguments:
        id = graphene.UUID(required=True)

    Output = OperationResult

    @staticmethod
    @permission_required("admin:delete")
    async def mutate(root, info, id):
        deleted = await _rbac(info).delete_role(id, info.context.require_admin().id, meta=info.context.meta)
        info.context.permissions.invalidate()
        return OperationResult(success=deleted, message="Role deleted")


class CreateAdmin(graphene.Mutation):
    class Arguments:
        input = CreateAdminInput(required=True)

    Output = Admin

    @staticmethod
    @permission_required("admin:create")
    async def mutate(root, info, input):
        data = parse_input(AdminCreate, input)
        return await _rbac(info).create_admin(data, info.context.require_admin().id, meta=info.context.meta)


class UpdateAdmin(graphene.Mutation):
    class Arguments:
        id = graphene.UUID(required=True)
        input = UpdateAdminInput(required=True)

    Output = Admin

    @staticmethod
    @permission_required("admin:edit")
    async def mutate(root, info, id, input):
        data = parse_input(AdminUpdate, input)
        return await _rbac(info).update_admin(id, data, info.context.require_admin().id, meta=info.context.meta)


class DisableAdmin(graphene.Mutation):
    class Arguments:
        id = graphene.UUID(required=True)

    Output = Admin

    @staticmethod
    @permission_required("admin:edit")
    async def mutate(root, info, id):
        return await _rbac(info).set_admin_active(
            id, False, info.context.require_admin().id, meta=info.context.meta
        )


class EnableAdmin(graphene.Mutation):
    class Arguments:
        id = graphene.UUID(required=True)

    Output = Admin

    @staticmethod
    @permission_required("admin:edit")
    async def mutate(root, info, id):
        return await _rbac(info).set_admin_active(
            id, True, info.context.require_admin().id, meta=info.context.meta
        )


class AssignRoles(graphene.Mutation):
    class Arguments:
        admin_id = graphene.UUID(required=True)
        role_ids = graphene.List(graphene.NonNull(graphene.UUID), required=True)
        expires_at = graphene.DateTime()

    Output = Admin

    @staticmethod
    @permission_required("admin:roles")
    async def mutate(root, info, admin_id, role_ids, expires_at=None):
        data = parse_input(
            RoleAssignment,
            {"admin_id": admin_id, "role_ids": role_ids, "expires_at": expires_at},
        )
        admin = await _rbac(info).assign_roles(
            data.admin_id,
            data.role_ids,
            info.context.require_admin().id,
            expires_at=data.expires_at,
            meta=info.context.meta,
        )
        info.context.permissions.invalidate(data.admin_id)
        return admin


class RevokeRoles(graphene.Mutation):
    class Arguments:
        admin_id = graphene.UUID(required=True)
        role_ids = graphene.List(graphene.NonNull(graphene.UUID), required=True)

    Output = Admin

    @staticmethod
    @permission_required("admin:roles")
    async def mutate(root, info, admin_id, role_ids):
        admin = await _rbac(info).revoke_roles(
            admin_id, role_ids, info.context.require_admin().id, meta=info.context.meta
        )
        info.context.permissions.invalidate(admin_id)
        return admin


class ReplaceRoles(graphene.Mutation):
    class Arguments:
        admin_id = graphene.UUID(required=True)
        role_ids = graphene.List(graphene.NonNull(graphene.UUID), required=True)

    Output = Admin

    @staticmethod
    @permission_required("admin:roles")
    async def mutate(root, info, admin_id, role_ids):
        admin = await _rbac(info).replace_roles(
            admin_id, role_ids, info.context.require_admin().id, meta=info.context.meta
        )
        info.context.permissions.invalidate(admin_id)
        return admin


class RBACMutation(graphene.ObjectType):
    create_permission = CreatePermission.Field()
    create_role = CreateRole.Field()
    update_role = UpdateRole.Field()
    delete_role = DeleteRole.Field()
    create_admin = CreateAdmin.Field()
    update_admin = UpdateAdmin.Field()
    disable_admin = DisableAdmin.Field()
    enable_admin = EnableAdmin.Field()
    assign_roles = AssignRoles.Field()
    revoke_roles = RevokeRoles.Field()
    replace_roles = ReplaceRoles.Field()
