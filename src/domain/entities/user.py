"""User domain entity."""

from dataclasses import dataclass, field
from datetime import datetime

ADMIN_USER_ID = "admin"


@dataclass
class User:
    """A partner account; its id doubles as the id of the group it owns.

    ``password`` is only carried in memory for the password-grant credential
    provider and is never persisted.
    """

    id: str
    email: str
    is_admin: bool = False
    password: str | None = field(default=None, repr=False)
    created_at: datetime = field(default_factory=datetime.utcnow)

    def __post_init__(self) -> None:
        self.id = self.id.strip().lower()
        self.email = self.email.strip()
