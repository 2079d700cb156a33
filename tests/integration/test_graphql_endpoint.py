"""
Integration tests for the HTTP surface: the GraphQL endpoint envelope and
health checks.
"""

import pytest
from httpx import AsyncClient

from bigha.main import app


class TestGraphQLEnvelope:
    """Request parsing and error envelope of POST /graphql."""

    @pytest.mark.asyncio
    async def test_invalid_json_is_bad_request(self, async_client: AsyncClient):
        response = await async_client.post(
            "/graphql",
            content=b"{not json",
            headers={"Content-Type": "application/json"},
        )

        assert response.status_code == 400
        body = response.json()
        assert body["data"] is None
        assert body["errors"][0]["extensions"] == {"code": "BAD_REQUEST", "statusCode": 400}

    @pytest.mark.asyncio
    @pytest.mark.parametrize(
        "payload",
        [
            {},
            {"query": "   "},
            {"query": "{ me { id } }", "variables": ["not", "an", "object"]},
            ["query"],
        ],
    )
    async def test_malformed_body_is_bad_request(self, async_client: AsyncClient, payload):
        response = await async_client.post("/graphql", json=payload)

        assert response.status_code == 400

    @pytest.mark.asyncio
    async def test_unknown_field_fails_validation(self, graphql):
        body = await graphql("{ doesNotExist }")

        assert body["data"] is None
        extensions = body["errors"][0]["extensions"]
        assert extensions == {"code": "GRAPHQL_VALIDATION_FAILED", "statusCode": 400}
        assert body["errors"][0]["locations"]

    @pytest.mark.asyncio
    async def test_anonymous_me_is_unauthenticated(self, graphql):
        body = await graphql("{ me { id email } }")

        assert body["data"] is None
        error = body["errors"][0]
        assert error["path"] == ["me"]
        assert error["extensions"]["code"] == "UNAUTHENTICATED"
        assert error["extensions"]["statusCode"] == 401

    @pytest.mark.asyncio
    async def test_garbage_bearer_token_is_anonymous(self, graphql):
        body = await graphql("{ me { id } }", headers={"Authorization": "Bearer not-a-token"})

        assert body["errors"][0]["extensions"]["code"] == "UNAUTHENTICATED"

    @pytest.mark.asyncio
    async def test_request_id_is_echoed(self, async_client: AsyncClient):
        response = await async_client.post(
            "/graphql",
            json={"query": "{ me { id } }"},
            headers={"X-Request-ID": "req-123"},
        )

        assert response.headers["X-Request-ID"] == "req-123"
        assert response.headers["X-Content-Type-Options"] == "nosniff"


class TestHealth:
    @pytest.mark.asyncio
    async def test_liveness(self, async_client: AsyncClient):
        response = await async_client.get("/health")

        assert response.status_code == 200
        assert response.json()["status"] == "healthy"

    @pytest.mark.asyncio
    async def test_readiness_with_database(self, async_client: AsyncClient, session_factory, monkeypatch):
        monkeypatch.setattr(app.state, "sessionmaker", session_factory, raising=False)

        response = await async_client.get("/health/ready")

        body = response.json()
        assert body["status"] == "ready"
        assert body["checks"]["database"] == "ok"

    @pytest.mark.asyncio
    async def test_readiness_without_database(self, async_client: AsyncClient, monkeypatch):
        monkeypatch.setattr(app.state, "sessionmaker", None, raising=False)

        response = await async_client.get("/health/ready")

        body = response.json()
        assert body["status"] == "degraded"
        assert body["checks"]["database"] == "ko"
