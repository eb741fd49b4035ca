"""Invitation repository protocol."""

from typing import Protocol

from domain.entities.environment import Environment
from domain.entities.invitation import InvitationRecord


class IInvitationRepository(Protocol):
    """Repository interface for InvitationRecord entities."""

    async def get(self, user_id: str, environment: Environment) -> InvitationRecord | None:
        """Get the invitation record for a user in an environment."""
        ...

    async def upsert(self, user_id: str, environment: Environment, already_existed: bool) -> None:
        """Insert or replace the invitation record in one statement."""
        ...

    async def delete_for(self, environment: Environment, user_id: str | None = None) -> int:
        """Delete records for an environment, optionally narrowed to one user."""
        ...
