"""
HTTP routes: the GraphQL endpoint and health checks.
"""

from bigha.api.routes import graphql, health

__all__ = ["graphql", "health"]
