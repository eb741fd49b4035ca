"""Protocols for the platform APIs the workflows call."""

from typing import Any, Protocol


class IInvitationGateway(Protocol):
    """Batch invitation endpoint, called as an administrator."""

    async def send_invitations(self, token: str, emails: list[str]) -> list[str]:
        """Invite all emails in one call; return the emails that were newly invited."""
        ...


class IGroupGateway(Protocol):
    """Group endpoints, called as the owning user."""

    async def create_group(self, token: str, definition: dict[str, Any]) -> str:
        """Create a group and return its upstream id.

        Raises:
            ConflictError: If a group with the same name already exists.
        """
        ...

    async def delete_group(self, token: str, group_id: str) -> None:
        """Delete a group. Treats 404 as already deleted."""
        ...


class ISourceGateway(Protocol):
    """Source endpoints, called as the owning user."""

    async def create_source(self, token: str, definition: dict[str, Any]) -> str:
        """Create a source and return its upstream id."""
        ...

    async def delete_source(self, token: str, source_id: str) -> None:
        """Delete a source. Treats 404 as already deleted."""
        ...
