"""Source repository protocol."""

from typing import Protocol

from domain.entities.environment import Environment
from domain.entities.source import SourceRecord


class ISourceRepository(Protocol):
    """Repository interface for SourceRecord entities."""

    async def get(self, user_id: str, environment: Environment) -> SourceRecord | None:
        """Get the source record for a user in an environment."""
        ...

    async def upsert_linked(
        self, user_id: str, environment: Environment, api_id: str, name: str
    ) -> bool:
        """Upsert the source linked to the user's group record.

        Returns False, writing nothing, when no group record exists.
        """
        ...

    async def delete_for(self, environment: Environment, user_id: str | None = None) -> int:
        """Delete records for an environment, optionally narrowed to one user."""
        ...
