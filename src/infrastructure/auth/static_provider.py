"""Credential provider backed by pre-issued bearer tokens."""

import os
from collections.abc import Mapping

from core.config import Settings
from core.exceptions import ConfigurationError
from domain.entities.user import User
from domain.services.selection import is_usable_credential

USER_TOKEN_PREFIX = "USER_TOKEN_"


def user_env_key(prefix: str, user_id: str) -> str:
    """Environment variable holding a per-user secret, e.g. ``USER_TOKEN_SIGMA_HQ``."""
    return prefix + user_id.upper().replace("-", "_")


class StaticTokenProvider:
    """Looks tokens up by user id; placeholder values count as missing."""

    def __init__(self, admin_token: str | None, user_tokens: Mapping[str, str]) -> None:
        self._admin_token = admin_token
        self._user_tokens = {user_id.lower(): token for user_id, token in user_tokens.items()}

    @classmethod
    def from_settings(cls, settings: Settings, users: list[User]) -> "StaticTokenProvider":
        """Combine ``user_tokens`` with ``USER_TOKEN_<ID>`` environment variables."""
        tokens = dict(settings.user_tokens)
        for user in users:
            env_token = os.environ.get(user_env_key(USER_TOKEN_PREFIX, user.id))
            if env_token:
                tokens.setdefault(user.id, env_token)
        return cls(admin_token=settings.admin_token, user_tokens=tokens)

    def has_credential(self, user: User) -> bool:
        return is_usable_credential(self._user_tokens.get(user.id))

    async def get_token(self, user: User) -> str:
        token = self._user_tokens.get(user.id)
        if not is_usable_credential(token):
            raise ConfigurationError(
                f"No token configured for {user.id}",
                details={"user_id": user.id},
            )
        return token.strip()  # type: ignore[union-attr]

    async def get_admin_token(self) -> str:
        if not is_usable_credential(self._admin_token):
            raise ConfigurationError("ADMIN_TOKEN is required to send invitations")
        return self._admin_token.strip()  # type: ignore[union-attr]
