"""Invitation progress record."""

from dataclasses import dataclass, field
from datetime import datetime

from domain.entities.environment import Environment


@dataclass
class InvitationRecord:
    """Outcome of inviting a user to one environment."""

    user_id: str
    environment: Environment
    sent: bool = False
    already_existed: bool = False
    sent_at: datetime = field(default_factory=datetime.utcnow)
    id: int | None = None

    @property
    def is_invited(self) -> bool:
        """A user counts as invited once sent or already registered upstream."""
        return self.sent or self.already_existed
