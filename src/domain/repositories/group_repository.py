"""Group repository protocol."""

from typing import Protocol

from domain.entities.environment import Environment
from domain.entities.group import GroupRecord


class IGroupRepository(Protocol):
    """Repository interface for GroupRecord entities."""

    async def get(self, user_id: str, environment: Environment) -> GroupRecord | None:
        """Get the group record for a user in an environment."""
        ...

    async def upsert(
        self, user_id: str, environment: Environment, api_id: str, name: str
    ) -> None:
        """Insert or update the group record in one statement."""
        ...

    async def delete_for(self, environment: Environment, user_id: str | None = None) -> int:
        """Delete records for an environment, optionally narrowed to one user."""
        ...
