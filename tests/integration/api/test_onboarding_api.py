"""Integration tests for the onboarding API."""

import pytest
from httpx import AsyncClient

from tests.conftest import FakePlatform


class TestRunEndpoints:
    @pytest.mark.asyncio
    async def test_invite(self, client: AsyncClient, platform: FakePlatform) -> None:
        response = await client.post("/api/v1/invite", json={"environment": "dev"})

        assert response.status_code == 200
        data = response.json()
        assert data["environment"] == "dev"
        assert data["succeeded"] == ["teama", "teamb"]
        assert len(platform.calls_to("POST", "/api/v1/users/invitations")) == 1

    @pytest.mark.asyncio
    async def test_setup_defaults_to_dev(self, client: AsyncClient) -> None:
        response = await client.post("/api/v1/setup", json={})

        assert response.status_code == 200
        data = response.json()
        assert data["succeeded"] == ["teama"]
        assert data["skipped"] == {"teamb": "no credential"}

    @pytest.mark.asyncio
    async def test_unknown_group_ids_return_404(self, client: AsyncClient) -> None:
        response = await client.post("/api/v1/setup", json={"group_ids": ["ghost"]})

        assert response.status_code == 404
        assert response.json()["error_code"] == "NO_MATCHING_TARGETS"

    @pytest.mark.asyncio
    async def test_invalid_environment_is_rejected(self, client: AsyncClient) -> None:
        response = await client.post("/api/v1/invite", json={"environment": "staging"})

        assert response.status_code == 422
        assert response.json()["error_code"] == "VALIDATION_ERROR"

    @pytest.mark.asyncio
    async def test_cleanup_with_both_scopes_returns_400(self, client: AsyncClient) -> None:
        response = await client.post(
            "/api/v1/cleanup", json={"sources_only": True, "groups_only": True}
        )

        assert response.status_code == 400
        assert response.json()["error_code"] == "INVALID_CLEANUP_SCOPE"

    @pytest.mark.asyncio
    async def test_cleanup_sources_only(self, client: AsyncClient, platform: FakePlatform) -> None:
        await client.post("/api/v1/setup", json={})

        response = await client.post("/api/v1/cleanup", json={"sources_only": True})

        assert response.status_code == 200
        assert [c for c in platform.calls if c[0] == "DELETE"] == [
            ("DELETE", "/api/v1/sources/s-1")
        ]

    @pytest.mark.asyncio
    async def test_reset(self, client: AsyncClient) -> None:
        await client.post("/api/v1/invite", json={})

        response = await client.post("/api/v1/reset", json={"group_ids": ["teamA"]})

        assert response.status_code == 200
        assert response.json()["succeeded"] == ["teama"]


class TestStatusEndpoints:
    @pytest.mark.asyncio
    async def test_status(self, client: AsyncClient) -> None:
        await client.post("/api/v1/invite", json={})
        await client.post("/api/v1/setup", json={})

        response = await client.get("/api/v1/status/dev")

        assert response.status_code == 200
        body = response.json()
        assert body["meta"] == {"environment": "dev", "total": 2, "complete": 1}
        team_a = body["data"][0]
        assert team_a["user_id"] == "teama"
        assert team_a["group_api_id"] == "g-1"
        assert team_a["has_credential"] is True

    @pytest.mark.asyncio
    async def test_status_of_other_environment_is_empty_progress(
        self, client: AsyncClient
    ) -> None:
        await client.post("/api/v1/invite", json={"environment": "dev"})

        response = await client.get("/api/v1/status/qa")

        assert response.status_code == 200
        assert not any(row["invited"] for row in response.json()["data"])

    @pytest.mark.asyncio
    async def test_operations(self, client: AsyncClient) -> None:
        await client.post("/api/v1/setup", json={})

        response = await client.get("/api/v1/operations/dev", params={"user_id": "teama"})

        assert response.status_code == 200
        data = response.json()["data"]
        assert [row["operation_type"] for row in data] == [
            "setup",
            "create_source",
            "create_group",
        ]
        assert data[0]["status"] == "success"


class TestGroupsEndpoint:
    @pytest.mark.asyncio
    async def test_list_groups(self, client: AsyncClient) -> None:
        response = await client.get("/api/v1/groups")

        assert response.status_code == 200
        body = response.json()
        assert body["meta"]["total"] == 2
        assert body["data"][0]["id"] == "teama"
        assert body["data"][0]["source"]["config"]["group_id"] == "<group_id>"
