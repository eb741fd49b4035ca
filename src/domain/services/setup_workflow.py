"""Setup phase: create each user's group, then its source, exactly once."""

from collections.abc import Sequence

import structlog

from core.exceptions import ConflictError, OrphanSourceError, StateStoreError
from domain.entities.environment import Environment
from domain.entities.group import GroupDefinition
from domain.entities.operation_log import OperationStatus, OperationType
from domain.entities.result import BatchResult, SkipReasons
from domain.entities.user import User
from domain.gateways.credential_provider import ICredentialProvider
from domain.gateways.platform_gateway import IGroupGateway, ISourceGateway
from domain.services.selection import plan_setup, select_targets
from domain.services.state_store import StateStore

logger = structlog.get_logger()


class SetupWorkflow:
    """Create groups and sources for ready users, one user at a time.

    Every external call is gated by the state store, so re-running for a
    complete user makes no calls at all. A collaborator failure only aborts
    the user it happened for.
    """

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
        definitions: Sequence[GroupDefinition],
        group_ids: Sequence[str] | None = None,
    ) -> BatchResult:
        """Run the setup phase.

        Raises:
            NoMatchingTargetsError: If ``group_ids`` matched no user.
            StateStoreError: If the state store could not be read or written.
        """
        env = self._environment
        selected = select_targets(users, group_ids)

        for user in selected:
            await self._store.ensure_user(user.id, user.email)

        statuses = {user.id: await self._store.get_status(user.id, env) for user in selected}
        plan = plan_setup(selected, self._credentials.has_credential, statuses)

        result = BatchResult(
            environment=env,
            skipped={user.id: SkipReasons.NO_CREDENTIAL for user in plan.not_ready},
            already_done=[user.id for user in plan.already_done],
        )
        logger.info(
            "setup_precheck",
            environment=env.value,
            ready=len(plan.ready),
            not_ready=len(plan.not_ready),
            already_done=len(plan.already_done),
        )

        by_id = {definition.id.lower(): definition for definition in definitions}
        for user in plan.ready:
            await self._setup_user(user, by_id.get(user.id), result)

        logger.info(
            "setup_completed",
            environment=env.value,
            succeeded=len(result.succeeded),
            failed=len(result.failed),
            skipped=len(result.skipped),
        )
        return result

    async def _setup_user(
        self,
        user: User,
        definition: GroupDefinition | None,
        result: BatchResult,
    ) -> None:
        env = self._environment
        log = logger.bind(user_id=user.id, environment=env.value)

        if definition is None:
            log.warning("setup_user_skipped", reason=SkipReasons.NO_GROUP_DEFINITION)
            await self._store.log_operation(
                OperationType.SETUP,
                user.id,
                env,
                OperationStatus.SKIPPED,
                error="No group definition found",
            )
            result.skipped[user.id] = SkipReasons.NO_GROUP_DEFINITION
            return

        try:
            token = await self._credentials.get_token(user)
            group_api_id = await self.ensure_group(user, definition, token)
            if group_api_id is None:
                result.skipped[user.id] = SkipReasons.DUPLICATE_GROUP_NAME
                return
            source_api_id = await self.ensure_source(user, definition, token, group_api_id)
        except StateStoreError:
            raise
        except Exception as exc:
            error = str(exc) or type(exc).__name__
            log.error("setup_user_failed", error=error, error_type=type(exc).__name__)
            await self._store.log_operation(
                OperationType.SETUP, user.id, env, OperationStatus.FAILED, error=error
            )
            result.failed[user.id] = error
            return

        await self._store.log_operation(
            OperationType.SETUP,
            user.id,
            env,
            OperationStatus.SUCCESS,
            details={"group_api_id": group_api_id, "source_api_id": source_api_id},
        )
        log.info("setup_user_completed", group_api_id=group_api_id)
        result.succeeded.append(user.id)

    async def ensure_group(
        self, user: User, definition: GroupDefinition, token: str
    ) -> str | None:
        """Return the user's group id, creating the group if none is recorded.

        Returns None when the API reports a duplicate name: the existing
        group's id cannot be inferred, so it is not adopted.
        """
        env = self._environment
        existing = await self._store.get_group_api_id(user.id, env)
        if existing:
            logger.debug("group_exists", user_id=user.id, group_api_id=existing)
            return existing

        try:
            group_api_id = await self._groups.create_group(token, definition.group)
        except ConflictError as exc:
            logger.warning("group_duplicate_name", user_id=user.id, error=exc.message)
            await self._store.log_operation(
                OperationType.CREATE_GROUP,
                user.id,
                env,
                OperationStatus.SKIPPED,
                error=exc.message,
            )
            return None

        await self._store.record_group_creation(user.id, env, group_api_id, definition.name)
        await self._store.log_operation(
            OperationType.CREATE_GROUP,
            user.id,
            env,
            OperationStatus.SUCCESS,
            details={"group_api_id": group_api_id},
        )
        logger.info("group_created", user_id=user.id, group_api_id=group_api_id)
        return group_api_id

    async def ensure_source(
        self,
        user: User,
        definition: GroupDefinition,
        token: str,
        group_api_id: str | None = None,
    ) -> str | None:
        """Create the user's source unless one is recorded.

        The group id comes from the caller or, failing that, the state store.

        Raises:
            OrphanSourceError: If no group id can be resolved; no call is made.
        """
        env = self._environment
        if await self._store.is_source_created(user.id, env):
            status = await self._store.get_status(user.id, env)
            return status.source_api_id

        group_api_id = group_api_id or await self._store.get_group_api_id(user.id, env)
        if not group_api_id:
            raise OrphanSourceError(user.id, env.value)

        payload = definition.render_source(group_api_id)
        source_api_id = await self._sources.create_source(token, payload)

        await self._store.record_source_creation(
            user.id, env, source_api_id, definition.source_name
        )
        await self._store.log_operation(
            OperationType.CREATE_SOURCE,
            user.id,
            env,
            OperationStatus.SUCCESS,
            details={"source_api_id": source_api_id, "group_api_id": group_api_id},
        )
        logger.info("source_created", user_id=user.id, source_api_id=source_api_id)
        return source_api_id
