"""Source progress record."""

from dataclasses import dataclass, field
from datetime import datetime

from domain.entities.environment import Environment


@dataclass
class SourceRecord:
    """A content source created upstream for a user's group."""

    user_id: str
    environment: Environment
    api_id: str
    name: str
    created: bool = True
    created_at: datetime = field(default_factory=datetime.utcnow)
    group_id: int | None = None
    id: int | None = None
