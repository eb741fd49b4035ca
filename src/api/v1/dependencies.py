"""Dependency injection factories for API v1."""

from functools import lru_cache
from typing import Callable

from domain.services.state_store import StateStore
from infrastructure.database.session import async_session_factory
from infrastructure.database.sqlalchemy_uow import SQLAlchemyUnitOfWork
from infrastructure.runner import OnboardingRunner


def get_uow_factory() -> Callable[[], SQLAlchemyUnitOfWork]:
    """Factory for creating Unit of Work instances."""

    def factory() -> SQLAlchemyUnitOfWork:
        return SQLAlchemyUnitOfWork(async_session_factory)

    return factory


@lru_cache
def get_state_store() -> StateStore:
    """Get the process-wide state store."""
    return StateStore(get_uow_factory())


@lru_cache
def get_runner() -> OnboardingRunner:
    """Get the workflow runner."""
    return OnboardingRunner(get_state_store())
