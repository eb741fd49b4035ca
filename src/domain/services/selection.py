"""Target selection and idempotency partitioning.

Every workflow classifies its targets here before any external call is
made, so network operations are only attempted for targets that both need
and can receive them.
"""

from collections.abc import Callable, Iterable, Mapping, Sequence
from dataclasses import dataclass, field

from core.exceptions import NoMatchingTargetsError
from domain.entities.status import OnboardingStatus
from domain.entities.user import User

# Credential values that mean "intentionally not configured"
PLACEHOLDER_CREDENTIALS = frozenset({"skip", "replace_after_verification", "needs verification"})


def is_usable_credential(value: str | None) -> bool:
    """A credential is usable unless it is missing, blank or a placeholder."""
    if value is None:
        return False
    stripped = value.strip()
    return bool(stripped) and stripped.lower() not in PLACEHOLDER_CREDENTIALS


def parse_group_ids(raw: str | Sequence[str] | None) -> list[str] | None:
    """Normalize a target subset; ``None``, empty or ``all`` means every user."""
    if raw is None:
        return None
    parts = raw.split(",") if isinstance(raw, str) else list(raw)
    ids = [part.strip().lower() for part in parts if part and part.strip()]
    if not ids or ids == ["all"]:
        return None
    return ids


def select_targets(users: Iterable[User], group_ids: Sequence[str] | None = None) -> list[User]:
    """Restrict known non-admin users to an optional id subset.

    Raises:
        NoMatchingTargetsError: If a subset was given and matched no user.
    """
    candidates = [user for user in users if not user.is_admin]
    wanted = parse_group_ids(group_ids)
    if wanted is None:
        return candidates

    selected = [user for user in candidates if user.id in wanted]
    if not selected:
        raise NoMatchingTargetsError(list(wanted))
    return selected


@dataclass
class InvitePlan:
    """Invitation-phase partition."""

    needs_invite: list[User] = field(default_factory=list)
    already_invited: list[User] = field(default_factory=list)

    @property
    def is_noop(self) -> bool:
        return not self.needs_invite


@dataclass
class SetupPlan:
    """Setup-phase partition."""

    ready: list[User] = field(default_factory=list)
    not_ready: list[User] = field(default_factory=list)
    already_done: list[User] = field(default_factory=list)


def plan_invitations(users: Iterable[User], invited: Mapping[str, bool]) -> InvitePlan:
    """Split users by whether the state store already records an invitation."""
    plan = InvitePlan()
    for user in users:
        if invited.get(user.id, False):
            plan.already_invited.append(user)
        else:
            plan.needs_invite.append(user)
    return plan


def plan_setup(
    users: Iterable[User],
    has_credential: Callable[[User], bool],
    statuses: Mapping[str, OnboardingStatus],
) -> SetupPlan:
    """Split users into ready, blocked on a credential, and already complete.

    A missing credential is reported ahead of completion.
    """
    plan = SetupPlan()
    for user in users:
        status = statuses.get(user.id)
        if not has_credential(user):
            plan.not_ready.append(user)
        elif status is not None and status.is_complete:
            plan.already_done.append(user)
        else:
            plan.ready.append(user)
    return plan
