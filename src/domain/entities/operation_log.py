"""Operation log domain entity and enumerations."""

from dataclasses import dataclass, field
from datetime import datetime
from enum import StrEnum
from typing import Any

from domain.entities.environment import Environment


class OperationType(StrEnum):
    """Kind of workflow step being audited."""

    INVITE = "invite"
    CREATE_GROUP = "create_group"
    CREATE_SOURCE = "create_source"
    SETUP = "setup"
    CLEANUP = "cleanup"


class OperationStatus(StrEnum):
    """Outcome of an audited step."""

    SUCCESS = "success"
    FAILED = "failed"
    SKIPPED = "skipped"


@dataclass
class OperationLogEntry:
    """Append-only audit entry; never updated or deleted."""

    operation_type: OperationType
    user_id: str
    environment: Environment
    status: OperationStatus
    error_message: str | None = None
    details: dict[str, Any] | None = None
    created_at: datetime = field(default_factory=datetime.utcnow)
    id: int | None = None
