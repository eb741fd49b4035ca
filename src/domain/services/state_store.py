"""Persistent onboarding state: the single source of truth for what already happened."""

from collections.abc import Awaitable, Callable
from typing import Any

import structlog

from core.exceptions import OrphanSourceError, StateStoreError
from domain.entities.environment import Environment
from domain.entities.operation_log import OperationLogEntry, OperationStatus, OperationType
from domain.entities.status import OnboardingStatus
from domain.entities.user import User
from domain.repositories.unit_of_work import IUnitOfWork

logger = structlog.get_logger()


class StateStore:
    """Service layer over the onboarding tables.

    Each call runs in its own short Unit of Work, so no transaction is ever
    held open while a workflow awaits an external API. Upserts are single
    statements; resets delete all three progress tables in one transaction.
    """

    def __init__(
        self,
        uow_factory: Callable[[], IUnitOfWork],
        on_close: Callable[[], Awaitable[None]] | None = None,
    ) -> None:
        self._uow_factory = uow_factory
        self._on_close = on_close

    # --- Users ---

    async def ensure_user(self, user_id: str, email: str, is_admin: bool = False) -> None:
        """Insert the user if absent. Never updates an existing row."""
        async with self._uow_factory() as uow:
            await uow.users.ensure(User(id=user_id, email=email, is_admin=is_admin))
            await uow.commit()

    # --- Invitations ---

    async def is_invited(self, user_id: str, environment: Environment) -> bool:
        async with self._uow_factory() as uow:
            record = await uow.invitations.get(user_id, Environment(environment))
            return record is not None and record.is_invited

    async def record_invitation(
        self, user_id: str, environment: Environment, already_existed: bool
    ) -> None:
        """Record an invitation outcome, replacing any previous one for the key."""
        async with self._uow_factory() as uow:
            await uow.invitations.upsert(user_id, Environment(environment), already_existed)
            await uow.commit()

    # --- Groups ---

    async def is_group_created(self, user_id: str, environment: Environment) -> bool:
        async with self._uow_factory() as uow:
            record = await uow.groups.get(user_id, Environment(environment))
            return record is not None and record.created

    async def get_group_api_id(self, user_id: str, environment: Environment) -> str | None:
        async with self._uow_factory() as uow:
            record = await uow.groups.get(user_id, Environment(environment))
            return record.api_id if record else None

    async def record_group_creation(
        self, user_id: str, environment: Environment, api_id: str, name: str
    ) -> None:
        """Mark the user's group as created upstream with the given id."""
        if not api_id:
            raise ValueError("api_id is required to record a created group")
        async with self._uow_factory() as uow:
            await uow.groups.upsert(user_id, Environment(environment), api_id, name)
            await uow.commit()

    # --- Sources ---

    async def is_source_created(self, user_id: str, environment: Environment) -> bool:
        async with self._uow_factory() as uow:
            record = await uow.sources.get(user_id, Environment(environment))
            return record is not None and record.created

    async def record_source_creation(
        self, user_id: str, environment: Environment, api_id: str, name: str
    ) -> None:
        """Mark the user's source as created, linked to the current group record.

        Raises:
            OrphanSourceError: If no group record exists for the key.
        """
        if not api_id:
            raise ValueError("api_id is required to record a created source")
        env = Environment(environment)
        async with self._uow_factory() as uow:
            linked = await uow.sources.upsert_linked(user_id, env, api_id, name)
            if not linked:
                raise OrphanSourceError(user_id, env.value)
            await uow.commit()

    # --- Status ---

    async def get_status(self, user_id: str, environment: Environment) -> OnboardingStatus:
        """Aggregate the three progress records for one user."""
        env = Environment(environment)
        async with self._uow_factory() as uow:
            user = await uow.users.get(user_id)
            invitation = await uow.invitations.get(user_id, env)
            group = await uow.groups.get(user_id, env)
            source = await uow.sources.get(user_id, env)

        return OnboardingStatus(
            user_id=user_id,
            environment=env,
            email=user.email if user else None,
            invited=invitation is not None and invitation.is_invited,
            group_created=group is not None and group.created,
            source_created=source is not None and source.created,
            group_api_id=group.api_id if group else None,
            source_api_id=source.api_id if source else None,
        )

    async def get_all_statuses(self, environment: Environment) -> list[OnboardingStatus]:
        """Status of every non-admin user, ordered by id, including inactive users."""
        async with self._uow_factory() as uow:
            return await uow.users.get_statuses(Environment(environment))

    # --- Resets ---

    async def reset_user(self, user_id: str, environment: Environment) -> None:
        """Forget all progress for one user in one environment."""
        env = Environment(environment)
        async with self._uow_factory() as uow:
            await uow.sources.delete_for(env, user_id)
            await uow.groups.delete_for(env, user_id)
            await uow.invitations.delete_for(env, user_id)
            await uow.commit()
        logger.info("state_reset", user_id=user_id, environment=env.value)

    async def reset_user_groups(self, user_id: str, environment: Environment) -> None:
        """Forget the user's group record only; the source keeps its row."""
        env = Environment(environment)
        async with self._uow_factory() as uow:
            await uow.groups.delete_for(env, user_id)
            await uow.commit()

    async def reset_user_sources(self, user_id: str, environment: Environment) -> None:
        """Forget the user's source record only."""
        env = Environment(environment)
        async with self._uow_factory() as uow:
            await uow.sources.delete_for(env, user_id)
            await uow.commit()

    async def reset_environment(self, environment: Environment) -> None:
        """Forget all progress for every user in an environment."""
        env = Environment(environment)
        async with self._uow_factory() as uow:
            sources = await uow.sources.delete_for(env)
            groups = await uow.groups.delete_for(env)
            invitations = await uow.invitations.delete_for(env)
            await uow.commit()
        logger.info(
            "environment_reset",
            environment=env.value,
            invitations=invitations,
            groups=groups,
            sources=sources,
        )

    # --- Operation log ---

    async def log_operation(
        self,
        operation_type: OperationType,
        user_id: str,
        environment: Environment,
        status: OperationStatus,
        error: str | None = None,
        details: dict[str, Any] | None = None,
    ) -> OperationLogEntry | None:
        """Append an audit entry.

        Best-effort: a failed write is logged and swallowed so the audit trail
        never aborts the operation it describes. Returns None in that case.
        """
        entry = OperationLogEntry(
            operation_type=OperationType(operation_type),
            user_id=user_id,
            environment=Environment(environment),
            status=OperationStatus(status),
            error_message=error,
            details=details,
        )
        try:
            async with self._uow_factory() as uow:
                created = await uow.operations.create(entry)
                await uow.commit()
                return created
        except StateStoreError as exc:
            logger.warning(
                "operation_log_write_failed",
                operation_type=entry.operation_type.value,
                user_id=user_id,
                environment=entry.environment.value,
                error=exc.message,
            )
            return None

    async def list_operations(
        self,
        environment: Environment,
        user_id: str | None = None,
        limit: int = 50,
    ) -> list[OperationLogEntry]:
        """Recent audit entries for an environment, newest first."""
        async with self._uow_factory() as uow:
            return await uow.operations.get_for_environment(
                Environment(environment), user_id=user_id, limit=limit
            )

    async def close(self) -> None:
        """Release the underlying storage handle."""
        if self._on_close is not None:
            await self._on_close()
            self._on_close = None
