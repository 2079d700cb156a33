"""
HTTP and GraphQL surface of the admin backend.
"""
