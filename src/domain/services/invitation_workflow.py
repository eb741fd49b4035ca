"""Invitation phase: one batch invite call per run, reconciled against the state store."""

from collections.abc import Sequence

import structlog

from domain.entities.environment import Environment
from domain.entities.operation_log import OperationStatus, OperationType
from domain.entities.result import BatchResult, SkipReasons
from domain.entities.user import User
from domain.gateways.credential_provider import ICredentialProvider
from domain.gateways.platform_gateway import IInvitationGateway
from domain.services.selection import plan_invitations, select_targets
from domain.services.state_store import StateStore

logger = structlog.get_logger()


class InvitationWorkflow:
    """Invite every selected user not yet recorded as invited in one environment."""

    def __init__(
        self,
        state_store: StateStore,
        invitations: IInvitationGateway,
        credentials: ICredentialProvider,
        environment: Environment,
    ) -> None:
        self._store = state_store
        self._invitations = invitations
        self._credentials = credentials
        self._environment = Environment(environment)

    async def execute(
        self,
        users: Sequence[User],
        group_ids: Sequence[str] | None = None,
        admin: User | None = None,
    ) -> BatchResult:
        """Run the invitation phase.

        Args:
            users: All known partner users.
            group_ids: Optional subset of user ids to restrict the run to.
            admin: The administrator account, recorded so it can be excluded
                from status listings.

        Returns:
            ``succeeded`` holds newly invited ids, ``skipped`` the ids the API
            reported as already registered, ``already_done`` the ids the state
            store had recorded before this run.

        Raises:
            NoMatchingTargetsError: If ``group_ids`` matched no user.
            ConfigurationError: If no admin credential is configured.
            ExternalAPIError: If the batch call failed; nothing is recorded.
        """
        env = self._environment
        selected = select_targets(users, group_ids)

        for user in selected:
            await self._store.ensure_user(user.id, user.email)
        if admin is not None:
            await self._store.ensure_user(admin.id, admin.email, is_admin=True)

        invited = {user.id: await self._store.is_invited(user.id, env) for user in selected}
        plan = plan_invitations(selected, invited)
        result = BatchResult(
            environment=env,
            already_done=[user.id for user in plan.already_invited],
        )

        logger.info(
            "invitation_precheck",
            environment=env.value,
            needs_invite=len(plan.needs_invite),
            already_invited=len(plan.already_invited),
        )
        if plan.is_noop:
            return result

        token = await self._credentials.get_admin_token()
        emails = [user.email for user in plan.needs_invite]
        newly_invited = await self._invitations.send_invitations(token, emails)
        logger.info(
            "invitation_batch_sent",
            environment=env.value,
            requested=len(emails),
            invited=len(newly_invited),
        )

        invited_emails = {email.strip().lower() for email in newly_invited}
        for user in plan.needs_invite:
            if user.email.lower() in invited_emails:
                await self._store.record_invitation(user.id, env, already_existed=False)
                await self._store.log_operation(
                    OperationType.INVITE, user.id, env, OperationStatus.SUCCESS
                )
                result.succeeded.append(user.id)
            else:
                await self._store.record_invitation(user.id, env, already_existed=True)
                await self._store.log_operation(
                    OperationType.INVITE,
                    user.id,
                    env,
                    OperationStatus.SKIPPED,
                    error="User already exists",
                )
                result.skipped[user.id] = SkipReasons.ALREADY_EXISTED

        return result
