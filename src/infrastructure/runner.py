"""Wire catalog, credentials, platform clients and workflows for one run.

Shared by the HTTP routes and the CLI so both surfaces behave identically.
"""

from collections.abc import Callable, Sequence
from dataclasses import dataclass

import httpx

from core.config import Settings, get_environment_settings
from domain.entities.environment import Environment
from domain.entities.group import GroupDefinition
from domain.entities.result import BatchResult
from domain.entities.status import OnboardingStatus
from domain.entities.user import User
from domain.gateways.credential_provider import ICredentialProvider
from domain.services.cleanup_workflow import CleanupWorkflow
from domain.services.invitation_workflow import InvitationWorkflow
from domain.services.selection import parse_group_ids, select_targets
from domain.services.setup_workflow import SetupWorkflow
from domain.services.state_store import StateStore
from infrastructure.auth.factory import build_credential_provider
from infrastructure.config_files.loader import ConfigCatalog
from infrastructure.platform.detections import DetectionsClient
from infrastructure.platform.integrations import IntegrationsClient


@dataclass
class UserStatusView:
    """A status row plus whether setup could run for the user right now."""

    status: OnboardingStatus
    has_credential: bool


class OnboardingRunner:
    """Runs workflows for an environment against the configured platform."""

    def __init__(
        self,
        state_store: StateStore,
        settings_for: Callable[[Environment], Settings] = get_environment_settings,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        self._store = state_store
        self._settings_for = settings_for
        self._transport = transport

    def _catalog(self, settings: Settings) -> ConfigCatalog:
        return ConfigCatalog(settings.config_dir)

    def _credentials(self, settings: Settings, users: list[User]) -> ICredentialProvider:
        return build_credential_provider(settings, users)

    def _clients(
        self, settings: Settings, environment: Environment
    ) -> tuple[DetectionsClient, IntegrationsClient]:
        endpoints = settings.endpoints_for(environment)
        detections = DetectionsClient(
            endpoints.detections_url,
            timeout=settings.http_timeout_seconds,
            transport=self._transport,
        )
        integrations = IntegrationsClient(
            endpoints.integrations_url,
            timeout=settings.http_timeout_seconds,
            transport=self._transport,
        )
        return detections, integrations

    def list_groups(self, environment: Environment = Environment.DEV) -> list[GroupDefinition]:
        return self._catalog(self._settings_for(environment)).load_groups()

    async def invite(
        self, environment: Environment, group_ids: str | Sequence[str] | None = None
    ) -> BatchResult:
        env = Environment(environment)
        settings = self._settings_for(env)
        catalog = self._catalog(settings)
        users = catalog.load_users()
        admin = catalog.load_admin()

        detections, integrations = self._clients(settings, env)
        async with detections, integrations:
            workflow = InvitationWorkflow(
                self._store, detections, self._credentials(settings, users), env
            )
            return await workflow.execute(users, parse_group_ids(group_ids), admin=admin)

    async def setup(
        self, environment: Environment, group_ids: str | Sequence[str] | None = None
    ) -> BatchResult:
        env = Environment(environment)
        settings = self._settings_for(env)
        catalog = self._catalog(settings)
        users = catalog.load_users()
        definitions = catalog.load_groups()

        detections, integrations = self._clients(settings, env)
        async with detections, integrations:
            workflow = SetupWorkflow(
                self._store,
                detections,
                integrations,
                self._credentials(settings, users),
                env,
            )
            return await workflow.execute(users, definitions, parse_group_ids(group_ids))

    async def cleanup(
        self,
        environment: Environment,
        group_ids: str | Sequence[str] | None = None,
        sources_only: bool = False,
        groups_only: bool = False,
    ) -> BatchResult:
        env = Environment(environment)
        settings = self._settings_for(env)
        users = self._catalog(settings).load_users()

        detections, integrations = self._clients(settings, env)
        async with detections, integrations:
            workflow = CleanupWorkflow(
                self._store,
                detections,
                integrations,
                self._credentials(settings, users),
                env,
            )
            return await workflow.execute(
                users,
                parse_group_ids(group_ids),
                sources_only=sources_only,
                groups_only=groups_only,
            )

    async def reset(
        self, environment: Environment, group_ids: str | Sequence[str] | None = None
    ) -> BatchResult:
        """Forget local progress only; nothing is deleted upstream.

        Without a subset the whole environment is reset.
        """
        env = Environment(environment)
        wanted = parse_group_ids(group_ids)
        result = BatchResult(environment=env)

        if wanted is None:
            await self._store.reset_environment(env)
            result.succeeded = [status.user_id for status in await self._store.get_all_statuses(env)]
            return result

        users = self._catalog(self._settings_for(env)).load_users()
        for user in select_targets(users, wanted):
            await self._store.reset_user(user.id, env)
            result.succeeded.append(user.id)
        return result

    async def statuses(self, environment: Environment) -> list[UserStatusView]:
        env = Environment(environment)
        settings = self._settings_for(env)
        users = self._catalog(settings).load_users()
        credentials = self._credentials(settings, users)
        by_id = {user.id: user for user in users}

        views = []
        for status in await self._store.get_all_statuses(env):
            user = by_id.get(status.user_id)
            views.append(
                UserStatusView(
                    status=status,
                    has_credential=user is not None and credentials.has_credential(user),
                )
            )
        return views
