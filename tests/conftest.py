"""Pytest configuration and fixtures."""

import json
import os
import sys
from collections.abc import AsyncGenerator
from pathlib import Path
from typing import Any

# Disable rate limiting in tests
os.environ["RATE_LIMIT_ENABLED"] = "false"

import httpx
import pytest
from sqlalchemy.ext.asyncio import AsyncEngine, AsyncSession, async_sessionmaker

# Add src to path
sys.path.insert(0, str(Path(__file__).parent.parent / "src"))

from core.config import Settings
from domain.services.state_store import StateStore
from infrastructure.database.session import create_engine, create_session_factory, init_database
from infrastructure.database.sqlalchemy_uow import SQLAlchemyUnitOfWork

USERS_JSON: dict[str, Any] = {
    "admin": {"email": "admin@example.com"},
    "users": [
        {"id": "teamA", "email": "a@example.com"},
        {"id": "teamB", "email": "b@example.com"},
    ],
}

GROUPS_JSON: dict[str, Any] = {
    "groups": [
        {
            "id": "teama",
            "name": "Team A",
            "description": "First partner",
            "group": {"name": "Team A", "visibility": "public"},
            "source": {
                "name": "Team A Feed",
                "config": {"group_id": "<group_id>", "tags": ["partner", "<group_id>"]},
            },
        },
        {
            "id": "teamb",
            "name": "Team B",
            "description": "",
            "group": {"name": "Team B"},
            "source": {"name": "Team B Feed", "group": "<group_id>"},
        },
    ]
}


@pytest.fixture
async def engine(tmp_path: Path) -> AsyncGenerator[AsyncEngine, None]:
    """File-backed SQLite so WAL and foreign keys behave as in production."""
    engine = create_engine(f"sqlite+aiosqlite:///{tmp_path / 'state.db'}")
    await init_database(engine)
    yield engine
    await engine.dispose()


@pytest.fixture
def session_factory(engine: AsyncEngine) -> async_sessionmaker[AsyncSession]:
    return create_session_factory(engine)


@pytest.fixture
def store(session_factory: async_sessionmaker[AsyncSession]) -> StateStore:
    """State store over the temporary database."""
    return StateStore(lambda: SQLAlchemyUnitOfWork(session_factory))


@pytest.fixture
def config_dir(tmp_path: Path) -> Path:
    """Config directory with users.json and groups.json for teama and teamb."""
    directory = tmp_path / "config"
    directory.mkdir()
    (directory / "users.json").write_text(json.dumps(USERS_JSON), encoding="utf-8")
    (directory / "groups.json").write_text(json.dumps(GROUPS_JSON), encoding="utf-8")
    return directory


@pytest.fixture
def test_settings(config_dir: Path) -> Settings:
    """Settings with a token for teama only."""
    return Settings(  # type: ignore[call-arg]
        _env_file=None,
        config_dir=str(config_dir),
        credential_mode="static",
        admin_token="admin-token",
        user_tokens={"teama": "token-a", "teamb": "REPLACE_AFTER_VERIFICATION"},
        rate_limit_enabled=False,
    )


class FakePlatform:
    """In-memory stand-in for the detections and integrations services.

    Serves both hosts through one ``httpx.MockTransport`` and records every
    request as ``(method, path)``.
    """

    def __init__(self) -> None:
        self.calls: list[tuple[str, str]] = []
        self.registered_emails: set[str] = set()
        self.duplicate_group_names: set[str] = set()
        self.failing_group_names: set[str] = set()
        self.source_payloads: list[dict[str, Any]] = []
        self.group_tokens: list[str] = []
        self._groups = 0
        self._sources = 0

    @property
    def transport(self) -> httpx.MockTransport:
        return httpx.MockTransport(self.handler)

    def calls_to(self, method: str, path_prefix: str) -> list[tuple[str, str]]:
        return [c for c in self.calls if c[0] == method and c[1].startswith(path_prefix)]

    def handler(self, request: httpx.Request) -> httpx.Response:
        path = request.url.path
        self.calls.append((request.method, path))
        body = json.loads(request.content) if request.content else None

        if request.method == "POST" and path == "/api/v1/users/invitations":
            invited = [e for e in body["emails"] if e not in self.registered_emails]
            self.registered_emails.update(invited)
            return httpx.Response(200, json={"invitations": invited})

        if request.method == "POST" and path == "/api/v1/groups":
            self.group_tokens.append(request.headers["Authorization"])
            if body["name"] in self.duplicate_group_names:
                return httpx.Response(409, json={"detail": "Group already exists"})
            if body["name"] in self.failing_group_names:
                return httpx.Response(500, json={"detail": "boom"})
            self._groups += 1
            return httpx.Response(201, json={"id": f"g-{self._groups}"})

        if request.method == "POST" and path == "/api/v1/sources/generic":
            self.source_payloads.append(body)
            self._sources += 1
            return httpx.Response(201, json={"source_id": f"s-{self._sources}"})

        if request.method == "DELETE":
            return httpx.Response(204)

        return httpx.Response(404, json={"detail": "not found"})


@pytest.fixture
def platform() -> FakePlatform:
    return FakePlatform()
