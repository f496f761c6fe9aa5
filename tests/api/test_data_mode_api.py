"""Tests for POST /v1/data-mode/enforce response contract."""

import pytest
from httpx import AsyncClient

from greenpass.models.common import DataMode
from greenpass.repositories.tenants import TenantSettingsRepository

URL = "/v1/data-mode/enforce"


class TestEnforceDataMode:
    @pytest.mark.anyio
    async def test_unauthorized(self, client: AsyncClient) -> None:
        response = await client.post(URL, json={"provenance": "USER_PROVIDED"})
        assert response.status_code == 401
        assert response.json() == {"error": "Unauthorized"}

    @pytest.mark.anyio
    async def test_live_tenant_rejects_test_fixture(
        self, client: AsyncClient, auth_headers,
    ) -> None:
        response = await client.post(URL, json={"provenance": "TEST_FIXTURE"}, headers=auth_headers)
        assert response.status_code == 403
        body = response.json()
        assert body["error"] == "DATA_MODE_VIOLATION"
        assert body["data_mode"] == "LIVE"
        assert body["message"]
        assert body["request_id"]

    @pytest.mark.anyio
    async def test_live_tenant_accepts_user_data(self, client: AsyncClient, auth_headers) -> None:
        response = await client.post(
            URL, json={"provenance": "USER_PROVIDED"}, headers=auth_headers,
        )
        assert response.status_code == 200
        body = response.json()
        assert body["success"] is True
        assert body["data_mode"] == "LIVE"
        assert set(body) == {"success", "data_mode", "request_id"}

    @pytest.mark.anyio
    async def test_demo_tenant_accepts_test_fixture(
        self, client: AsyncClient, auth_headers, user, db_session,
    ) -> None:
        await TenantSettingsRepository(db_session).set_data_mode(user.tenant_id, DataMode.DEMO)
        response = await client.post(URL, json={"provenance": "TEST_FIXTURE"}, headers=auth_headers)
        assert response.status_code == 200
        assert response.json()["data_mode"] == "DEMO"

    @pytest.mark.anyio
    async def test_request_ids_are_unique(self, client: AsyncClient, auth_headers) -> None:
        ids = set()
        for _ in range(3):
            response = await client.post(URL, json={}, headers=auth_headers)
            ids.add(response.json()["request_id"])
        assert len(ids) == 3

    @pytest.mark.anyio
    async def test_malformed_body_is_500(self, client: AsyncClient, auth_headers) -> None:
        response = await client.post(
            URL, content=b"{not json", headers={**auth_headers, "Content-Type": "application/json"},
        )
        assert response.status_code == 500
        assert "request_id" in response.json()
        assert "error" in response.json()
