"""Operation log repository protocol."""

from typing import Protocol

from domain.entities.environment import Environment
from domain.entities.operation_log import OperationLogEntry


class IOperationLogRepository(Protocol):
    """Repository interface for the append-only operation log."""

    async def create(self, entry: OperationLogEntry) -> OperationLogEntry:
        """Append an entry."""
        ...

    async def get_for_environment(
        self,
        environment: Environment,
        user_id: str | None = None,
        limit: int = 50,
    ) -> list[OperationLogEntry]:
        """Get entries for an environment, newest first."""
        ...
