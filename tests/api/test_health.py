"""Tests for FastAPI health and version endpoints."""

import pytest
from httpx import AsyncClient


class TestHealthEndpoint:
    """GET /health always answers 200, degraded when the database is down."""

    @pytest.mark.anyio
    async def test_health_returns_200(self, client: AsyncClient) -> None:
        response = await client.get("/health")
        assert response.status_code == 200

    @pytest.mark.anyio
    async def test_health_response_body(self, client: AsyncClient) -> None:
        data = (await client.get("/health")).json()
        assert data["status"] in {"ok", "degraded"}
        assert data["checks"]["api"] is True
        assert "environment" in data


class TestVersionEndpoint:
    @pytest.mark.anyio
    async def test_version_response_body(self, client: AsyncClient) -> None:
        response = await client.get("/api/version")
        assert response.status_code == 200
        data = response.json()
        assert data["name"] == "GreenPass"
        assert "version" in data
