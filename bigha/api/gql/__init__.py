"""
GraphQL schema, resolvers, request context and error formatting.
"""
