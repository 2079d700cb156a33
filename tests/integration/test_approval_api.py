"""
Integration tests for the property approval workflow over GraphQL.
"""

import pytest
from sqlalchemy import func, select

from bigha.models import ActivityAction, AdminActivityLog, PropertyApprovalHistory
from bigha.models.enums import ApprovalStatus

APPROVE = """
mutation Approve($id: UUID!, $input: ApprovalInput) {
  approveProperty(id: $id, input: $input) {
    approvalStatus approvedBy approvalMessage
    approvalHistory { action previousStatus newStatus message }
  }
}
"""

REJECT = """
mutation Reject($id: UUID!, $input: ApprovalInput!) {
  rejectProperty(id: $id, input: $input) { approvalStatus rejectionReason }
}
"""

FLAG = """
mutation Flag($id: UUID!, $input: ApprovalInput) {
  flagProperty(id: $id, input: $input) { approvalStatus flagReason }
}
"""

REOPEN = "mutation($id: UUID!) { reopenProperty(id: $id) { approvalStatus } }"


class TestApprove:
    @pytest.mark.asyncio
    async def test_pending_listing_is_approved(
        self, graphql, super_admin, super_admin_headers, make_property, db_session, outbox
    ):
        prop = await make_property(owner_email="owner@example.com", owner_name="Ravi")

        body = await graphql(
            APPROVE,
            {"id": str(prop.id), "input": {"message": "Documents verified"}},
            headers=super_admin_headers,
        )

        result = body["data"]["approveProperty"]
        assert result["approvalStatus"] == "APPROVED"
        assert result["approvedBy"] == str(super_admin.id)
        assert result["approvalMessage"] == "Documents verified"
        assert result["approvalHistory"] == [
            {
                "action": "APPROVE",
                "previousStatus": "PENDING",
                "newStatus": "APPROVED",
                "message": "Documents verified",
            }
        ]

        history_rows = await db_session.scalar(
            select(func.count()).select_from(PropertyApprovalHistory)
        )
        assert history_rows == 1
        activity = (
            await db_session.execute(
                select(AdminActivityLog).where(AdminActivityLog.action == ActivityAction.PROPERTY_APPROVE)
            )
        ).scalar_one()
        assert activity.resource_id == prop.id

        assert len(outbox) == 1
        assert outbox[0].recipient == "owner@example.com"
        assert "is live on 2bigha" in outbox[0].subject

    @pytest.mark.asyncio
    async def test_second_approval_conflicts(self, graphql, super_admin_headers, make_property, db_session):
        prop = await make_property()
        await graphql(APPROVE, {"id": str(prop.id)}, headers=super_admin_headers)

        body = await graphql(APPROVE, {"id": str(prop.id)}, headers=super_admin_headers)

        error = body["errors"][0]
        assert error["extensions"]["code"] == "CONFLICT"
        assert error["extensions"]["details"] == {"current_status": "APPROVED"}
        history_rows = await db_session.scalar(
            select(func.count()).select_from(PropertyApprovalHistory)
        )
        assert history_rows == 1

    @pytest.mark.asyncio
    async def test_view_only_admin_is_forbidden(self, graphql, make_admin, auth_headers, make_property):
        viewer = await make_admin("viewer@2bigha.com", permissions=["properties:view"])
        prop = await make_property()

        body = await graphql(APPROVE, {"id": str(prop.id)}, headers=await auth_headers(viewer))

        extensions = body["errors"][0]["extensions"]
        assert extensions["code"] == "FORBIDDEN"
        assert extensions["details"]["required_permissions"] == ["properties:approve"]

    @pytest.mark.asyncio
    async def test_unknown_listing(self, graphql, super_admin_headers):
        body = await graphql(
            APPROVE, {"id": "00000000-0000-0000-0000-000000000001"}, headers=super_admin_headers
        )

        assert body["errors"][0]["extensions"]["code"] == "NOT_FOUND"


class TestRejectFlagReopen:
    @pytest.mark.asyncio
    async def test_reject_requires_reason(self, graphql, super_admin_headers, make_property):
        prop = await make_property()

        body = await graphql(REJECT, {"id": str(prop.id), "input": {}}, headers=super_admin_headers)

        assert body["errors"][0]["extensions"]["code"] == "BAD_USER_INPUT"

    @pytest.mark.asyncio
    async def test_reject_with_reason(self, graphql, super_admin_headers, make_property):
        prop = await make_property()

        body = await graphql(
            REJECT,
            {"id": str(prop.id), "input": {"reason": " Unclear title deed "}},
            headers=super_admin_headers,
        )

        assert body["data"]["rejectProperty"] == {
            "approvalStatus": "REJECTED",
            "rejectionReason": "Unclear title deed",
        }

    @pytest.mark.asyncio
    async def test_flag_then_reopen(self, graphql, super_admin_headers, make_property):
        prop = await make_property(approval_status=ApprovalStatus.APPROVED)

        flagged = await graphql(
            FLAG, {"id": str(prop.id), "input": {"reason": "Reported as sold"}}, headers=super_admin_headers
        )
        assert flagged["data"]["flagProperty"] == {"approvalStatus": "FLAGGED", "flagReason": "Reported as sold"}

        reopened = await graphql(REOPEN, {"id": str(prop.id)}, headers=super_admin_headers)
        assert reopened["data"]["reopenProperty"]["approvalStatus"] == "PENDING"

    @pytest.mark.asyncio
    async def test_rejected_listing_cannot_be_flagged(self, graphql, super_admin_headers, make_property):
        prop = await make_property(approval_status=ApprovalStatus.REJECTED)

        body = await graphql(FLAG, {"id": str(prop.id)}, headers=super_admin_headers)

        assert body["errors"][0]["extensions"]["code"] == "CONFLICT"


class TestApprovalQueues:
    @pytest.mark.asyncio
    async def test_pending_queue(self, graphql, super_admin_headers, make_property):
        await make_property("Waiting plot")
        await make_property("Live plot", approval_status=ApprovalStatus.APPROVED)

        body = await graphql(
            "{ pendingApprovalProperties { total items { title approvalStatus } } }",
            headers=super_admin_headers,
        )

        page = body["data"]["pendingApprovalProperties"]
        assert page["total"] == 1
        assert page["items"] == [{"title": "Waiting plot", "approvalStatus": "PENDING"}]

    @pytest.mark.asyncio
    async def test_by_status(self, graphql, super_admin_headers, make_property):
        await make_property("Flagged plot", approval_status=ApprovalStatus.FLAGGED)

        body = await graphql(
            "{ propertiesByApprovalStatus(status: FLAGGED) { total items { title } } }",
            headers=super_admin_headers,
        )

        assert body["data"]["propertiesByApprovalStatus"]["items"] == [{"title": "Flagged plot"}]

    @pytest.mark.asyncio
    async def test_history_query(self, graphql, super_admin_headers, make_property):
        prop = await make_property()
        await graphql(
            REJECT, {"id": str(prop.id), "input": {"reason": "Blurry photos"}}, headers=super_admin_headers
        )
        await graphql(REOPEN, {"id": str(prop.id)}, headers=super_admin_headers)

        body = await graphql(
            "query($id: UUID!) { propertyApprovalHistory(propertyId: $id) { action newStatus } }",
            {"id": str(prop.id)},
            headers=super_admin_headers,
        )

        assert body["data"]["propertyApprovalHistory"] == [
            {"action": "REOPEN", "newStatus": "PENDING"},
            {"action": "REJECT", "newStatus": "REJECTED"},
        ]
