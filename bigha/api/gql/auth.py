"""
Authentication operations.

Login, OTP and refresh are open to anonymous callers; everything else
acts on the caller's own sessions.
"""

import graphene

from bigha.api.gql.errors import parse_input
from bigha.api.gql.guards import login_required, public
from bigha.api.gql.types import (
    Admin,
    AuthPayload,
    OperationResult,
    OTPRequestResult,
    OTPStatus,
    OTPTypeEnum,
    TokenVerification,
)
from bigha.schemas.auth import LoginInput
from bigha.services.auth_service import AuthService
from bigha.services.rbac_service import RBACService


def _auth_service(info) -> AuthService:
    ctx = info.context
    return AuthService(ctx.session, notifications=ctx.notifications)


class AuthQuery(graphene.ObjectType):
    me = graphene.Field(Admin, required=True)
    verify_admin_token = graphene.Field(
        TokenVerification,
        required=True,
        token=graphene.String(required=True),
    )
    admin_otp_status = graphene.Field(
        OTPStatus,
        required=True,
        email=graphene.String(required=True),
        type=graphene.Argument(OTPTypeEnum, required=True),
    )

    @staticmethod
    @login_required
    async def resolve_me(root, info):
        return await RBACService(info.context.session).get_admin(info.context.require_admin().id)

    @staticmethod
    @public
    async def resolve_verify_admin_token(root, info, token):
        admin = await _auth_service(info).verify_token(token)
        return TokenVerification(valid=admin is not None, admin=admin)

    @staticmethod
    @public
    async def resolve_admin_otp_status(root, info, email, type):
        return await _auth_service(info).otp_status(email, type)


class AdminLogin(graphene.Mutation):
    class Arguments:
        email = graphene.String(required=True)
        password = graphene.String(required=True)

    Output = AuthPayload

    @staticmethod
    @public
    async def mutate(root, info, email, password):
        credentials = parse_input(LoginInput, {"email": email, "password": password})
        return await _auth_service(info).login(credentials.email, credentials.password, meta=info.context.meta)


class VerifyAdminLoginOtp(graphene.Mutation):
    class Arguments:
        email = graphene.String(required=True)
        otp = graphene.String(required=True)

    Output = AuthPayload

    @staticmethod
    @public
    async def mutate(root, info, email, otp):
        return await _auth_service(info).verify_login_otp(email, otp, meta=info.context.meta)


class RefreshAdminToken(graphene.Mutation):
    class Arguments:
        refresh_token = graphene.String(required=True)

    Output = AuthPayload

    @staticmethod
    @public
    async def mutate(root, info, refresh_token):
        return await _auth_service(info).refresh(refresh_token, meta=info.context.meta)


class AdminLogout(graphene.Mutation):
    class Arguments:
        refresh_token = graphene.String()

    Output = OperationResult

    @staticmethod
    @login_required
    async def mutate(root, info, refresh_token=None):
        identity = info.context.require_admin()
        await _auth_service(info).logout(
            identity.id,
            identity.session_id,
            refresh_token=refresh_token,
            meta=info.context.meta,
        )
        return OperationResult(success=True, message="Logged out")


class AdminLogoutAll(graphene.Mutation):
    Output = OperationResult

    @staticmethod
    @login_required
    async def mutate(root, info):
        count = await _auth_service(info).logout_all(info.context.require_admin().id, meta=info.context.meta)
        return OperationResult(success=True, message="All sessions revoked", count=count)


class ChangeAdminPassword(graphene.Mutation):
    class Arguments:
        current_password = graphene.String(required=True)
        new_password = graphene.String(required=True)

    Output = OperationResult

    @staticmethod
    @login_required
    async def mutate(root, info, current_password, new_password):
        identity = info.context.require_admin()
        revoked = await _auth_service(info).change_password(
            identity.id,
            current_password,
            new_password,
            current_session_id=identity.session_id,
            meta=info.context.meta,
        )
        return OperationResult(success=True, message="Password changed", count=revoked)


class RequestAdminOtp(graphene.Mutation):
    class Arguments:
        email = graphene.String(required=True)
        type = graphene.Argument(OTPTypeEnum, required=True)

    Output = OTPRequestResult

    @staticmethod
    @public
    async def mutate(root, info, email, type):
        return await _auth_service(info).request_otp(email, type, meta=info.context.meta)


class AuthMutation(graphene.ObjectType):
    admin_login = AdminLogin.Field()
    verify_admin_login_otp = VerifyAdminLoginOtp.Field()
    refresh_admin_token = RefreshAdminToken.Field()
    admin_logout = AdminLogout.Field()
    admin_logout_all = AdminLogoutAll.Field()
    change_admin_password = ChangeAdminPassword.Field()
    request_admin_otp = RequestAdminOtp.Field()
