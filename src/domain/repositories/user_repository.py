"""User repository protocol."""

from typing import Protocol

from domain.entities.environment import Environment
from domain.entities.status import OnboardingStatus
from domain.entities.user import User


class IUserRepository(Protocol):
    """Repository interface for User entities."""

    async def ensure(self, user: User) -> None:
        """Insert the user unless a row with the same id exists."""
        ...

    async def get(self, id: str) -> User | None:
        """Get a user by id."""
        ...

    async def get_statuses(self, environment: Environment) -> list[OnboardingStatus]:
        """Get the status of every non-admin user in an environment, ordered by id."""
        ...
