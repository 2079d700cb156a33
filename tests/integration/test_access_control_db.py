"""
Integration tests for sessions, identity resolution and permission
resolution against a real (SQLite) database.
"""

from datetime import timedelta

import pytest
from sqlalchemy import select

from bigha.api.dependencies import resolve_identity
from bigha.api.gql.context import AdminIdentity, AnonymousIdentity
from bigha.exceptions import ForbiddenError
from bigha.models import AdminUserRole
from bigha.models.mixins import utcnow
from bigha.services.permission_service import PermissionResolver
from bigha.services.rbac_service import RBACService
from bigha.services.session_service import SessionService


# ============================================================================
# Sessions
# ============================================================================
class TestSessionValidation:
    @pytest.mark.asyncio
    async def test_fresh_token_validates(self, db_session, make_admin):
        admin = await make_admin()
        sessions = SessionService(db_session)
        token, row = await sessions.create_session(admin)
        await db_session.commit()

        claims = await sessions.validate(token)

        assert claims is not None
        assert claims.admin_id == admin.id
        assert claims.session_id == row.id
        assert claims.email == admin.email

    @pytest.mark.asyncio
    async def test_revoked_row_invalidates_signed_token(self, db_session, make_admin):
        admin = await make_admin()
        sessions = SessionService(db_session)
        token, _ = await sessions.create_session(admin)
        await db_session.commit()

        assert await sessions.revoke(token) is True
        await db_session.commit()

        assert await sessions.validate(token) is None
        assert await sessions.revoke(token) is False

    @pytest.mark.asyncio
    async def test_row_expiry_is_enforced(self, db_session, make_admin):
        admin = await make_admin()
        sessions = SessionService(db_session)
        token, row = await sessions.create_session(admin)
        row.expires_at = utcnow() - timedelta(seconds=1)
        await db_session.commit()

        assert await sessions.validate(token) is None

    @pytest.mark.asyncio
    async def test_role_claim_is_first_active_role(self, db_session, make_admin):
        admin = await make_admin(permissions=["properties:view"])
        sessions = SessionService(db_session)

        role = await sessions.primary_role(admin.id)

        assert role == f"role-{admin.id.hex[:8]}"

    @pytest.mark.asyncio
    async def test_revoke_all_keeps_current(self, db_session, make_admin):
        admin = await make_admin()
        sessions = SessionService(db_session)
        current, current_row = await sessions.create_session(admin)
        other, _ = await sessions.create_session(admin)
        await sessions.create_refresh_token(admin.id)
        await db_session.commit()

        revoked = await sessions.revoke_all_sessions(admin.id, except_session_id=current_row.id)
        await db_session.commit()

        assert revoked == 2
        assert await sessions.validate(current) is not None
        assert await sessions.validate(other) is None


class TestResolveIdentity:
    @pytest.mark.asyncio
    async def test_active_admin(self, db_session, make_admin):
        admin = await make_admin(permissions=["analytics:view"])
        token, row = await SessionService(db_session).create_session(admin)
        await db_session.commit()

        identity = await resolve_identity(db_session, token)

        assert isinstance(identity, AdminIdentity)
        assert identity.id == admin.id
        assert identity.session_id == row.id
        assert identity.roles == (f"role-{admin.id.hex[:8]}",)

    @pytest.mark.asyncio
    async def test_disabled_admin_is_anonymous(self, db_session, make_admin):
        admin = await make_admin()
        token, _ = await SessionService(db_session).create_session(admin)
        admin.is_active = False
        await db_session.commit()

        assert isinstance(await resolve_identity(db_session, token), AnonymousIdentity)

    @pytest.mark.asyncio
    async def test_missing_token_is_anonymous(self, db_session):
        assert isinstance(await resolve_identity(db_session, None), AnonymousIdentity)


# ============================================================================
# Permissions
# ============================================================================
class TestPermissionResolution:
    @pytest.mark.asyncio
    async def test_permissions_from_active_role(self, db_session, make_admin):
        admin = await make_admin(permissions=["properties:view", "properties:approve"])
        resolver = PermissionResolver(db_session)

        assert await resolver.get_effective_permissions(admin.id) == {
            "properties:view",
            "properties:approve",
        }
        assert await resolver.has_permission(admin.id, "properties:approve") is True
        assert await resolver.has_permission(admin.id, "admin:roles") is False

    @pytest.mark.asyncio
    async def test_expired_assignment_grants_nothing(self, db_session, make_admin):
        admin = await make_admin(
            permissions=["properties:view"],
            expires_at=utcnow() - timedelta(hours=1),
        )
        resolver = PermissionResolver(db_session)

        assert await resolver.get_effective_permissions(admin.id) == set()
        assert await resolver.has_permission(admin.id, "properties:view") is False

    @pytest.mark.asyncio
    async def test_future_expiry_still_grants(self, db_session, make_admin):
        admin = await make_admin(
            permissions=["properties:view"],
            expires_at=utcnow() + timedelta(days=1),
        )

        assert await PermissionResolver(db_session).has_permission(admin.id, "properties:view") is True

    @pytest.mark.asyncio
    async def test_inactive_role_grants_nothing(self, db_session, make_admin):
        admin = await make_admin(permissions=["properties:view"], role_active=False)

        assert await PermissionResolver(db_session).get_effective_permissions(admin.id) == set()

    @pytest.mark.asyncio
    async def test_permissions_shared_by_roles_are_deduplicated(
        self, db_session, make_admin, make_role
    ):
        admin = await make_admin(permissions=["properties:view"])
        extra = await make_role("Reviewer", ["properties:view", "analytics:view"])
        db_session.add(AdminUserRole(admin_id=admin.id, role_id=extra.id))
        await db_session.commit()

        rows = await PermissionResolver(db_session).get_effective_permission_rows(admin.id)

        assert sorted(row.name for row in rows) == ["analytics:view", "properties:view"]

    @pytest.mark.asyncio
    async def test_require_lists_missing_permissions(self, db_session, make_admin):
        admin = await make_admin(permissions=["properties:view"])

        with pytest.raises(ForbiddenError) as exc_info:
            await PermissionResolver(db_session).require(admin.id, "properties:view", "properties:approve")

        assert exc_info.value.details["required_permissions"] == ["properties:view", "properties:approve"]


# ============================================================================
# Role assignment renewal
# ============================================================================
class TestRoleAssignmentRenewal:
    async def _assignment(self, db_session, admin_id) -> AdminUserRole:
        result = await db_session.execute(
            select(AdminUserRole)
            .where(AdminUserRole.admin_id == admin_id)
            .execution_options(populate_existing=True)
        )
        return result.scalar_one()

    @pytest.mark.asyncio
    async def test_expired_assignment_is_renewed(self, db_session, make_admin, super_admin):
        admin = await make_admin(
            permissions=["properties:view"],
            expires_at=utcnow() - timedelta(hours=1),
        )
        role_id = (await self._assignment(db_session, admin.id)).role_id
        assert await PermissionResolver(db_session).has_permission(admin.id, "properties:view") is False

        await RBACService(db_session).assign_roles(
            admin.id, [role_id], super_admin.id, expires_at=utcnow() + timedelta(days=7)
        )

        assert await PermissionResolver(db_session).has_permission(admin.id, "properties:view") is True
        assignment = await self._assignment(db_session, admin.id)
        assert assignment.assigned_by == super_admin.id
        assert assignment.is_current(utcnow())

    @pytest.mark.asyncio
    async def test_current_assignment_is_left_alone(self, db_session, make_admin, super_admin):
        admin = await make_admin(permissions=["properties:view"])
        before = await self._assignment(db_session, admin.id)
        assigned_at = before.assigned_at

        added = await RBACService(db_session).assignment_repo.add_assignments(
            admin.id, [before.role_id], assigned_by=super_admin.id
        )

        assert added == []
        after = await self._assignment(db_session, admin.id)
        assert after.assigned_by is None
        assert after.assigned_at == assigned_at
