"""
Unit tests for resolver guards.

All tests are fully mocked - no database or external dependencies.
"""

import uuid
from types import SimpleNamespace
from unittest.mock import AsyncMock, MagicMock

import pytest
from graphql import OperationType

from bigha.api.gql.context import AdminIdentity, AnonymousIdentity, RequestContext
from bigha.api.gql.guards import login_required, permission_required, public
from bigha.exceptions import ConflictError, ForbiddenError, UnauthenticatedError


def _info(identity=None, operation=OperationType.QUERY):
    ctx = RequestContext(
        session=AsyncMock(),
        session_factory=MagicMock(),
        permissions=AsyncMock(),
        identity=identity or AnonymousIdentity(),
    )
    return SimpleNamespace(context=ctx, operation=SimpleNamespace(operation=operation))


@pytest.fixture
def admin_identity():
    return AdminIdentity(id=uuid.uuid4(), email="ops@2bigha.com", roles=("moderator",))


class TestPublic:
    @pytest.mark.asyncio
    async def test_anonymous_caller_reaches_resolver(self):
        resolver = AsyncMock(return_value="ok")
        info = _info()

        result = await public(resolver)(None, info, email="a@b.com")

        assert result == "ok"
        resolver.assert_awaited_once_with(None, info, email="a@b.com")


class TestLoginRequired:
    @pytest.mark.asyncio
    async def test_anonymous_caller_is_unauthenticated(self):
        resolver = AsyncMock()

        with pytest.raises(UnauthenticatedError):
            await login_required(resolver)(None, _info())

        resolver.assert_not_awaited()

    @pytest.mark.asyncio
    async def test_authenticated_caller_reaches_resolver(self, admin_identity):
        resolver = AsyncMock(return_value=admin_identity.id)

        result = await login_required(resolver)(None, _info(admin_identity))

        assert result == admin_identity.id


class TestPermissionRequired:
    @pytest.mark.asyncio
    async def test_checks_all_named_permissions(self, admin_identity):
        resolver = AsyncMock(return_value="done")
        info = _info(admin_identity)

        guarded = permission_required("properties:view", "properties:approve")(resolver)
        result = await guarded(None, info, id="p1")

        assert result == "done"
        info.context.permissions.require.assert_awaited_once_with(
            admin_identity.id, "properties:view", "properties:approve", any_of=False
        )

    @pytest.mark.asyncio
    async def test_any_of_is_forwarded(self, admin_identity):
        info = _info(admin_identity)

        await permission_required("a:b", "c:d", any_of=True)(AsyncMock())(None, info)

        info.context.permissions.require.assert_awaited_once_with(
            admin_identity.id, "a:b", "c:d", any_of=True
        )

    @pytest.mark.asyncio
    async def test_forbidden_stops_before_resolver(self, admin_identity):
        resolver = AsyncMock()
        info = _info(admin_identity)
        info.context.permissions.require.side_effect = ForbiddenError(required_permissions=["x:y"])

        with pytest.raises(ForbiddenError):
            await permission_required("x:y")(resolver)(None, info)

        resolver.assert_not_awaited()

    @pytest.mark.asyncio
    async def test_anonymous_never_reaches_permission_check(self):
        info = _info()

        with pytest.raises(UnauthenticatedError):
            await permission_required("x:y")(AsyncMock())(None, info)

        info.context.permissions.require.assert_not_awaited()


class TestFailureHandling:
    @pytest.mark.asyncio
    async def test_failed_mutation_rolls_back(self, admin_identity):
        resolver = AsyncMock(side_effect=ConflictError("Property is already APPROVED"))
        info = _info(admin_identity, OperationType.MUTATION)

        with pytest.raises(ConflictError):
            await login_required(resolver)(None, info)

        info.context.session.rollback.assert_awaited_once()
        assert not info.context.db_lock.locked()

    @pytest.mark.asyncio
    async def test_failed_query_does_not_roll_back(self, admin_identity):
        resolver = AsyncMock(side_effect=ConflictError("nope"))
        info = _info(admin_identity, OperationType.QUERY)

        with pytest.raises(ConflictError):
            await login_required(resolver)(None, info)

        info.context.session.rollback.assert_not_awaited()

    @pytest.mark.asyncio
    async def test_forbidden_mutation_rolls_back(self, admin_identity):
        info = _info(admin_identity, OperationType.MUTATION)
        info.context.permissions.require.side_effect = ForbiddenError()

        with pytest.raises(ForbiddenError):
            await permission_required("x:y")(AsyncMock())(None, info)

        info.context.session.rollback.assert_awaited_once()


class TestRequestContext:
    def test_require_admin_returns_identity(self, admin_identity):
        info = _info(admin_identity)

        assert info.context.is_authenticated is True
        assert info.context.require_admin() is admin_identity

    def test_require_admin_rejects_anonymous(self):
        with pytest.raises(UnauthenticatedError):
            _info().context.require_admin()
