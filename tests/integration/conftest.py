"""Fixtures for tests that drive the HTTP API."""

from collections.abc import AsyncGenerator

import pytest
from httpx import ASGITransport, AsyncClient
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from api.v1.dependencies import get_runner, get_state_store
from core.config import Settings
from domain.services.state_store import StateStore
from infrastructure.database.session import get_async_session
from infrastructure.runner import OnboardingRunner
from main import create_app
from tests.conftest import FakePlatform


@pytest.fixture
def runner(store: StateStore, test_settings: Settings, platform: FakePlatform) -> OnboardingRunner:
    """Runner bound to the temporary store, config directory and fake platform."""
    return OnboardingRunner(
        store,
        settings_for=lambda environment: test_settings,
        transport=platform.transport,
    )


@pytest.fixture
async def client(
    store: StateStore,
    runner: OnboardingRunner,
    session_factory: async_sessionmaker[AsyncSession],
) -> AsyncGenerator[AsyncClient, None]:
    """HTTP client for the app with the state store and runner overridden."""
    app = create_app()

    async def override_session() -> AsyncGenerator[AsyncSession, None]:
        async with session_factory() as session:
            yield session

    app.dependency_overrides[get_state_store] = lambda: store
    app.dependency_overrides[get_runner] = lambda: runner
    app.dependency_overrides[get_async_session] = override_session

    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as c:
        yield c
