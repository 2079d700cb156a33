"""
2bigha admin backend.

GraphQL API for the 2bigha real-estate platform administration panel:
admin authentication, role-based access control, property moderation,
SEO metadata and dashboard analytics.
"""

__version__ = "0.1.0"
