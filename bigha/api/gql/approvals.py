"""
Approval workflow operations.

Transitions go through ApprovalService, which validates them against the
state machine and records history and activity in one transaction.
"""

import graphene

from bigha.api.gql.errors import page_args, parse_input
from bigha.api.gql.guards import permission_required
from bigha.api.gql.types import (
    ApprovalHistoryEntry,
    ApprovalStatusEnum,
    Property,
    PropertyPage,
)
from bigha.schemas.property import ModerationInput
from bigha.services.approval_service import ApprovalService


def _approvals(info) -> ApprovalService:
    ctx = info.context
    return ApprovalService(ctx.session, notifications=ctx.notifications)


class ApprovalInput(graphene.InputObjectType):
    message = graphene.String()
    admin_notes = graphene.String()
    reason = graphene.String()


class ApprovalQuery(graphene.ObjectType):
    property_approval_history = graphene.List(
        graphene.NonNull(ApprovalHistoryEntry),
        required=True,
        property_id=graphene.UUID(required=True),
        limit=graphene.Int(default_value=100),
        offset=graphene.Int(default_value=0),
    )
    pending_approval_properties = graphene.Field(
        PropertyPage,
        required=True,
        limit=graphene.Int(default_value=20),
        offset=graphene.Int(default_value=0),
    )
    properties_by_approval_status = graphene.Field(
        PropertyPage,
        required=True,
        status=graphene.Argument(ApprovalStatusEnum, required=True),
        limit=graphene.Int(default_value=20),
        offset=graphene.Int(default_value=0),
    )

    @staticmethod
    @permission_required("properties:view")
    async def resolve_property_approval_history(root, info, property_id, limit, offset):
        page = page_args(limit, offset)
        return await _approvals(info).history(property_id, limit=page.limit, offset=page.offset)

    @staticmethod
    @permission_required("properties:view")
    async def resolve_pending_approval_properties(root, info, limit, offset):
        page = page_args(limit, offset)
        return await _approvals(info).pending(limit=page.limit, offset=page.offset)

    @staticmethod
    @permission_required("properties:view")
    async def resolve_properties_by_approval_status(root, info, status, limit, offset):
        page = page_args(limit, offset)
        return await _approvals(info).by_status(status, limit=page.limit, offset=page.offset)


class ApproveProperty(graphene.Mutation):
    class Arguments:
        id = graphene.UUID(required=True)
        input = ApprovalInput()

    Output = Property

    @staticmethod
    @permission_required("properties:approve")
    async def mutate(root, info, id, input=None):
        data = parse_input(ModerationInput, input)
        return await _approvals(info).approve(id, data, info.context.require_admin().id, meta=info.context.meta)


class RejectProperty(graphene.Mutation):
    class Arguments:
        id = graphene.UUID(required=True)
        input = ApprovalInput(required=True)

    Output = Property

    @staticmethod
    @permission_required("properties:reject")
    async def mutate(root, info, id, input):
        data = parse_input(ModerationInput, input)
        return await _approvals(info).reject(id, data, info.context.require_admin().id, meta=info.context.meta)


class FlagProperty(graphene.Mutation):
    class Arguments:
        id = graphene.UUID(required=True)
        input = ApprovalInput()

    Output = Property

    @staticmethod
    @permission_required("properties:approve")
    async def mutate(root, info, id, input=None):
        data = parse_input(ModerationInput, input)
        return await _approvals(info).flag(id, data, info.context.require_admin().id, meta=info.context.meta)


class ReopenProperty(graphene.Mutation):
    class Arguments:
        id = graphene.UUID(required=True)
        input = ApprovalInput()

    Output = Property

    @staticmethod
    @permission_required("properties:approve")
    async def mutate(root, info, id, input=None):
        data = parse_input(ModerationInput, input)
        return await _approvals(info).reopen(id, data, info.context.require_admin().id, meta=info.context.meta)


class ApprovalMutation(graphene.ObjectType):
    approve_property = ApproveProperty.Field()
    reject_property = RejectProperty.Field()
    flag_property = FlagProperty.Field()
    reopen_property = ReopenProperty.Field()
