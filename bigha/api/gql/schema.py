"""
Root GraphQL schema.

Each feature module contributes a Query and a Mutation mixin; the roots
below combine them.
"""

import graphene

from bigha.api.gql.approvals import ApprovalMutation, ApprovalQuery
from bigha.api.gql.auth import AuthMutation, AuthQuery
from bigha.api.gql.dashboard import DashboardQuery
from bigha.api.gql.properties import PropertyMutation, PropertyQuery
from bigha.api.gql.rbac import RBACMutation, RBACQuery
from bigha.api.gql.site_seo import SiteSeoMutation, SiteSeoQuery


class Query(
    AuthQuery,
    RBACQuery,
    PropertyQuery,
    ApprovalQuery,
    DashboardQuery,
    SiteSeoQuery,
    graphene.ObjectType,
):
    pass


class Mutation(
    AuthMutation,
    RBACMutation,
    PropertyMutation,
    ApprovalMutation,
    SiteSeoMutation,
    graphene.ObjectType,
):
    pass


schema = graphene.Schema(query=Query, mutation=Mutation)
