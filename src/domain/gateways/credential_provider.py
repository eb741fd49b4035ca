"""Credential provider protocol."""

from typing import Protocol

from domain.entities.user import User


class ICredentialProvider(Protocol):
    """Supplies bearer tokens for the admin actor and for partner users."""

    def has_credential(self, user: User) -> bool:
        """Whether a usable credential is configured for the user.

        Placeholder sentinels count as absent. Must not perform I/O.
        """
        ...

    async def get_token(self, user: User) -> str:
        """Return a bearer token for the user.

        Raises:
            ConfigurationError: If no usable credential is configured.
            ExternalAPIError: If exchanging the credential failed.
        """
        ...

    async def get_admin_token(self) -> str:
        """Return a bearer token for the administrator."""
        ...
