"""Shared fixtures for unit tests."""

from typing import Any
from unittest.mock import AsyncMock

import pytest

from domain.entities.user import User


class FakeUnitOfWork:
    """Fake Unit of Work with all 5 repository mocks for unit testing."""

    def __init__(self) -> None:
        self.users = AsyncMock()
        self.invitations = AsyncMock()
        self.groups = AsyncMock()
        self.sources = AsyncMock()
        self.operations = AsyncMock()
        self.committed = False
        self.rolled_back = False

    async def commit(self) -> None:
        self.committed = True

    async def rollback(self) -> None:
        self.rolled_back = True

    async def __aenter__(self) -> "FakeUnitOfWork":
        return self

    async def __aexit__(self, *args: Any) -> None:
        pass


@pytest.fixture
def uow() -> FakeUnitOfWork:
    """Create a fresh FakeUnitOfWork."""
    return FakeUnitOfWork()


@pytest.fixture
def team_a() -> User:
    return User(id="teama", email="a@example.com")


@pytest.fixture
def team_b() -> User:
    return User(id="teamb", email="b@example.com")


@pytest.fixture
def admin() -> User:
    return User(id="admin", email="admin@example.com", is_admin=True)
