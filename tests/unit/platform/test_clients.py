"""Unit tests for the platform API clients."""

import json

import httpx
import pytest

from core.exceptions import (
    ConflictError,
    ErrorCode,
    ExternalAPIError,
    ExternalTimeoutError,
    NotFoundError,
)
from infrastructure.platform.detections import DetectionsClient
from infrastructure.platform.integrations import IntegrationsClient

BASE_URL = "https://detections.test"


def _client(handler, cls=DetectionsClient):  # type: ignore[no-untyped-def]
    return cls(BASE_URL, transport=httpx.MockTransport(handler))


class TestSendInvitations:
    @pytest.mark.asyncio
    async def test_posts_all_emails_with_bearer_token(self) -> None:
        seen: list[httpx.Request] = []

        def handler(request: httpx.Request) -> httpx.Response:
            seen.append(request)
            return httpx.Response(200, json={"invitations": ["a@example.com"]})

        async with _client(handler) as client:
            invited = await client.send_invitations("tok", ["a@example.com", "b@example.com"])

        assert invited == ["a@example.com"]
        assert seen[0].url.path == "/api/v1/users/invitations"
        assert seen[0].headers["Authorization"] == "Bearer tok"
        assert json.loads(seen[0].content) == {"emails": ["a@example.com", "b@example.com"]}

    @pytest.mark.asyncio
    @pytest.mark.parametrize(
        "body",
        [
            {"data": {"invitations": ["a@example.com"]}},
            {"invitedEmails": ["a@example.com"]},
        ],
    )
    async def test_alternative_response_shapes(self, body: dict) -> None:
        async with _client(lambda request: httpx.Response(200, json=body)) as client:
            assert await client.send_invitations("tok", ["a@example.com"]) == ["a@example.com"]

    @pytest.mark.asyncio
    async def test_missing_list_means_nobody_new(self) -> None:
        async with _client(lambda request: httpx.Response(200, json={})) as client:
            assert await client.send_invitations("tok", ["a@example.com"]) == []


class TestGroups:
    @pytest.mark.asyncio
    async def test_create_returns_id(self) -> None:
        async with _client(lambda request: httpx.Response(201, json={"id": 42})) as client:
            assert await client.create_group("tok", {"name": "Team A"}) == "42"

    @pytest.mark.asyncio
    async def test_create_accepts_group_id_key(self) -> None:
        handler = lambda request: httpx.Response(201, json={"group_id": "g-7"})  # noqa: E731
        async with _client(handler) as client:
            assert await client.create_group("tok", {"name": "Team A"}) == "g-7"

    @pytest.mark.asyncio
    async def test_create_without_id_fails(self) -> None:
        async with _client(lambda request: httpx.Response(201, json={"ok": True})) as client:
            with pytest.raises(ExternalAPIError, match="no id"):
                await client.create_group("tok", {"name": "Team A"})

    @pytest.mark.asyncio
    async def test_conflict_is_raised_as_conflict_error(self) -> None:
        handler = lambda request: httpx.Response(409, json={"detail": "exists"})  # noqa: E731
        async with _client(handler) as client:
            with pytest.raises(ConflictError) as exc_info:
                await client.create_group("tok", {"name": "Team A"})

        assert exc_info.value.upstream_status == 409
        assert exc_info.value.response_body == {"detail": "exists"}

    @pytest.mark.asyncio
    async def test_duplicate_message_on_400_is_conflict(self) -> None:
        handler = lambda request: httpx.Response(  # noqa: E731
            400, json={"error": "Group name already exists"}
        )
        async with _client(handler) as client:
            with pytest.raises(ConflictError):
                await client.create_group("tok", {"name": "Team A"})

    @pytest.mark.asyncio
    async def test_server_error_keeps_status_and_body(self) -> None:
        handler = lambda request: httpx.Response(500, text="boom")  # noqa: E731
        async with _client(handler) as client:
            with pytest.raises(ExternalAPIError) as exc_info:
                await client.create_group("tok", {"name": "Team A"})

        assert not isinstance(exc_info.value, ConflictError)
        assert exc_info.value.upstream_status == 500
        assert exc_info.value.response_body == "boom"
        assert exc_info.value.message.startswith("Failed to create group: 500")

    @pytest.mark.asyncio
    async def test_delete_treats_404_as_done(self) -> None:
        handler = lambda request: httpx.Response(404, json={"detail": "gone"})  # noqa: E731
        async with _client(handler) as client:
            await client.delete_group("tok", "g-1")

    @pytest.mark.asyncio
    async def test_delete_failure_raises(self) -> None:
        handler = lambda request: httpx.Response(403, json={"detail": "forbidden"})  # noqa: E731
        async with _client(handler) as client:
            with pytest.raises(ExternalAPIError):
                await client.delete_group("tok", "g-1")


class TestSources:
    @pytest.mark.asyncio
    async def test_create_posts_to_generic_endpoint(self) -> None:
        seen: list[httpx.Request] = []

        def handler(request: httpx.Request) -> httpx.Response:
            seen.append(request)
            return httpx.Response(201, json={"source_id": "s-1"})

        async with _client(handler, IntegrationsClient) as client:
            source_id = await client.create_source("tok", {"name": "Feed", "group_id": "g-1"})

        assert source_id == "s-1"
        assert seen[0].url.path == "/api/v1/sources/generic"

    @pytest.mark.asyncio
    async def test_delete_uses_source_path(self) -> None:
        seen: list[str] = []

        def handler(request: httpx.Request) -> httpx.Response:
            seen.append(f"{request.method} {request.url.path}")
            return httpx.Response(204)

        async with _client(handler, IntegrationsClient) as client:
            await client.delete_source("tok", "s-1")

        assert seen == ["DELETE /api/v1/sources/s-1"]

    @pytest.mark.asyncio
    async def test_not_found_outside_delete_is_raised(self) -> None:
        handler = lambda request: httpx.Response(404, json={})  # noqa: E731
        async with _client(handler, IntegrationsClient) as client:
            with pytest.raises(NotFoundError):
                await client.create_source("tok", {"name": "Feed"})


class TestTransportFailures:
    @pytest.mark.asyncio
    async def test_timeout(self) -> None:
        def handler(request: httpx.Request) -> httpx.Response:
            raise httpx.ReadTimeout("slow", request=request)

        async with _client(handler) as client:
            with pytest.raises(ExternalTimeoutError) as exc_info:
                await client.create_group("tok", {"name": "Team A"})

        assert exc_info.value.error_code == ErrorCode.EXTERNAL_TIMEOUT
        assert exc_info.value.status_code == 504

    @pytest.mark.asyncio
    async def test_connection_error(self) -> None:
        def handler(request: httpx.Request) -> httpx.Response:
            raise httpx.ConnectError("refused", request=request)

        async with _client(handler) as client:
            with pytest.raises(ExternalAPIError, match="refused"):
                await client.send_invitations("tok", ["a@example.com"])
