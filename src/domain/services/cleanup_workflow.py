"""Cleanup: delete recorded sources and groups upstream, then forget them."""

from collections.abc import Sequence

import structlog

from core.exceptions import InvalidCleanupScopeError, StateStoreError
from domain.entities.environment import Environment
from domain.entities.operation_log import OperationStatus, OperationType
from domain.entities.result import BatchResult, SkipReasons
from domain.entities.user import User
from domain.gateways.credential_provider import ICredentialProvider
from domain.gateways.platform_gateway import IGroupGateway, ISourceGateway
from domain.services.selection import select_targets
from domain.services.state_store import StateStore

logger = structlog.get_logger()


class CleanupWorkflow:
    """Remove upstream resources recorded in the state store."""

    def __init__(
        self,
        state_store: StateStore,
        groups: IGroupGateway,
        sources: ISourceGateway,
        credentials: ICredentialProvider,
        environment: Environment,
    ) -> None:
        self._store = state_store
        self._groups = groups
        self._sources = sources
        self._credentials = credentials
        self._environment = Environment(environment)

    async def execute(
        self,
        users: Sequence[User],
        group_ids: Sequence[str] | None = None,
        sources_only: bool = False,
        groups_only: bool = False,
    ) -> BatchResult:
        """Delete sources before groups, then drop the matching records.

        Records are only removed for a user once every requested deletion
        succeeded (a 404 counts as success), so a failed run can be repeated.

        Raises:
            InvalidCleanupScopeError: If both ``sources_only`` and ``groups_only`` are set.
            NoMatchingTargetsError: If ``group_ids`` matched no user.
        """
        if sources_only and groups_only:
            raise InvalidCleanupScopeError()

        env = self._environment
        delete_sources = not groups_only
        delete_groups = not sources_only
        selected = select_targets(users, group_ids)
        result = BatchResult(environment=env)

        for user in selected:
            if not self._credentials.has_credential(user):
                result.skipped[user.id] = SkipReasons.NO_CREDENTIAL
                continue

            status = await self._store.get_status(user.id, env)
            source_id = status.source_api_id if delete_sources and status.source_created else None
            group_id = status.group_api_id if delete_groups and status.group_created else None
            if not source_id and not group_id:
                result.skipped[user.id] = SkipReasons.NOTHING_TO_DELETE
                continue

            try:
                token = await self._credentials.get_token(user)
                if source_id:
                    await self._sources.delete_source(token, source_id)
                if group_id:
                    await self._groups.delete_group(token, group_id)
            except StateStoreError:
                raise
            except Exception as exc:
                error = str(exc) or type(exc).__name__
                logger.error(
                    "cleanup_user_failed",
                    user_id=user.id,
                    error=error,
                    error_type=type(exc).__name__,
                )
                await self._store.log_operation(
                    OperationType.CLEANUP, user.id, env, OperationStatus.FAILED, error=error
                )
                result.failed[user.id] = error
                continue

            if delete_sources and delete_groups:
                await self._store.reset_user(user.id, env)
            elif delete_groups:
                await self._store.reset_user_groups(user.id, env)
            else:
                await self._store.reset_user_sources(user.id, env)

            await self._store.log_operation(
                OperationType.CLEANUP,
                user.id,
                env,
                OperationStatus.SUCCESS,
                details={"source_api_id": source_id, "group_api_id": group_id},
            )
            logger.info("cleanup_user_completed", user_id=user.id, environment=env.value)
            result.succeeded.append(user.id)

        return result
