"""Select the credential provider configured by ``CREDENTIAL_MODE``."""

from core.config import Settings
from domain.entities.user import User
from domain.gateways.credential_provider import ICredentialProvider
from infrastructure.auth.password_grant import PasswordGrantProvider
from infrastructure.auth.static_provider import StaticTokenProvider


def build_credential_provider(settings: Settings, users: list[User]) -> ICredentialProvider:
    if settings.credential_mode == "password":
        return PasswordGrantProvider.from_settings(settings, users)
    return StaticTokenProvider.from_settings(settings, users)
