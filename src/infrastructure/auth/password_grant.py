"""Credential provider using the OAuth2 resource-owner password grant.

Tokens are requested from ``https://<AUTH0_DOMAIN>/oauth/token`` and cached
per account until shortly before they expire.
"""

import os
import time
from collections.abc import Mapping
from typing import Any

import httpx
import structlog

from core.config import Settings
from core.exceptions import ConfigurationError, ExternalAPIError, ExternalTimeoutError
from domain.entities.user import User
from domain.services.selection import is_usable_credential
from infrastructure.auth.static_provider import user_env_key

logger = structlog.get_logger()

USER_PASSWORD_PREFIX = "USER_PASSWORD_"

# Refresh this many seconds before the reported expiry
_EXPIRY_MARGIN_SECONDS = 60


class PasswordGrantProvider:
    """Exchanges configured email/password pairs for bearer tokens."""

    def __init__(
        self,
        domain: str,
        client_id: str,
        client_secret: str,
        admin_email: str,
        admin_password: str,
        passwords: Mapping[str, str] | None = None,
        audience: str = "",
        timeout: float = 30.0,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        self._domain = domain
        self._client_id = client_id
        self._client_secret = client_secret
        self._admin_email = admin_email
        self._admin_password = admin_password
        self._passwords = {user_id.lower(): pw for user_id, pw in (passwords or {}).items()}
        self._audience = audience
        self._timeout = timeout
        self._transport = transport
        self._cache: dict[str, tuple[str, float]] = {}

    @classmethod
    def from_settings(cls, settings: Settings, users: list[User]) -> "PasswordGrantProvider":
        """Merge ``user_passwords`` with passwords from users.json and the environment."""
        passwords = dict(settings.user_passwords)
        for user in users:
            env_password = os.environ.get(user_env_key(USER_PASSWORD_PREFIX, user.id))
            if env_password:
                passwords.setdefault(user.id, env_password)
            elif user.password:
                passwords.setdefault(user.id, user.password)
        return cls(
            domain=settings.auth0_domain,
            client_id=settings.auth0_client_id,
            client_secret=settings.auth0_client_secret,
            admin_email=settings.admin_email,
            admin_password=settings.admin_password,
            passwords=passwords,
            audience=settings.auth0_audience,
            timeout=settings.http_timeout_seconds,
        )

    def _password_for(self, user: User) -> str | None:
        password = self._passwords.get(user.id, user.password)
        return password if is_usable_credential(password) else None

    def has_credential(self, user: User) -> bool:
        return self._password_for(user) is not None

    async def get_token(self, user: User) -> str:
        password = self._password_for(user)
        if password is None:
            raise ConfigurationError(
                f"No password configured for {user.id}",
                details={"user_id": user.id},
            )
        return await self._exchange(user.email, password)

    async def get_admin_token(self) -> str:
        if not self._admin_email or not is_usable_credential(self._admin_password):
            raise ConfigurationError("ADMIN_EMAIL and ADMIN_PASSWORD are required")
        return await self._exchange(self._admin_email, self._admin_password)

    async def _exchange(self, email: str, password: str) -> str:
        cached = self._cache.get(email)
        if cached and cached[1] > time.monotonic():
            return cached[0]

        if not (self._domain and self._client_id and self._client_secret):
            raise ConfigurationError(
                "AUTH0_DOMAIN, AUTH0_CLIENT_ID and AUTH0_CLIENT_SECRET are required"
            )

        payload: dict[str, Any] = {
            "grant_type": "password",
            "username": email,
            "password": password,
            "client_id": self._client_id,
            "client_secret": self._client_secret,
            "scope": "openid profile email",
        }
        if self._audience:
            payload["audience"] = self._audience

        url = f"https://{self._domain}/oauth/token"
        try:
            async with httpx.AsyncClient(timeout=self._timeout, transport=self._transport) as client:
                response = await client.post(url, json=payload)
        except httpx.TimeoutException as exc:
            raise ExternalTimeoutError(f"Login timed out for {email}") from exc
        except httpx.HTTPError as exc:
            raise ExternalAPIError(f"Login failed for {email}: {exc}") from exc

        if not response.is_success:
            logger.warning("password_grant_failed", email=email, status_code=response.status_code)
            raise ExternalAPIError(
                f"Login failed for {email}: {response.status_code}",
                status_code=response.status_code,
                response_body=response.text,
            )

        try:
            body = response.json()
            token = body.get("access_token")
            expires_in = int(body.get("expires_in", 3600))
        except (ValueError, TypeError, AttributeError) as exc:
            raise ExternalAPIError(
                f"Login failed for {email}: malformed token response",
                status_code=response.status_code,
                response_body=response.text,
            ) from exc
        if not token:
            raise ExternalAPIError(f"Login failed for {email}: no access_token in response")

        self._cache[email] = (token, time.monotonic() + expires_in - _EXPIRY_MARGIN_SECONDS)
        logger.info("password_grant_succeeded", email=email)
        return str(token)
