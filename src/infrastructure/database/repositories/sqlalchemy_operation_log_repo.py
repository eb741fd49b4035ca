"""SQLAlchemy implementation of OperationLog repository."""

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from domain.entities.environment import Environment
from domain.entities.operation_log import OperationLogEntry, OperationStatus, OperationType
from infrastructure.database.models import OperationLogModel


class SQLAlchemyOperationLogRepository:
    """SQLAlchemy implementation of IOperationLogRepository."""

    def __init__(self, session: AsyncSession) -> None:
        self._session = session

    async def create(self, entry: OperationLogEntry) -> OperationLogEntry:
        """Append an audit entry."""
        model = self._to_model(entry)
        self._session.add(model)
        await self._session.flush()
        await self._session.refresh(model)
        return self._to_entity(model)

    async def get_for_environment(
        self,
        environment: Environment,
        user_id: str | None = None,
        limit: int = 50,
    ) -> list[OperationLogEntry]:
        """Get entries for an environment, newest first."""
        stmt = select(OperationLogModel).where(
            OperationLogModel.environment == environment.value
        )
        if user_id is not None:
            stmt = stmt.where(OperationLogModel.user_id == user_id)
        stmt = stmt.order_by(
            OperationLogModel.created_at.desc(), OperationLogModel.id.desc()
        ).limit(limit)
        result = await self._session.execute(stmt)
        return [self._to_entity(model) for model in result.scalars()]

    def _to_entity(self, model: OperationLogModel) -> OperationLogEntry:
        """Convert ORM model to domain entity."""
        return OperationLogEntry(
            id=model.id,
            operation_type=OperationType(model.operation_type),
            user_id=model.user_id,
            environment=Environment(model.environment),
            status=OperationStatus(model.status),
            error_message=model.error_message,
            details=model.details,
            created_at=model.created_at,
        )

    def _to_model(self, entity: OperationLogEntry) -> OperationLogModel:
        """Convert domain entity to ORM model."""
        return OperationLogModel(
            id=entity.id,
            operation_type=entity.operation_type.value,
            user_id=entity.user_id,
            environment=entity.environment.value,
            status=entity.status.value,
            error_message=entity.error_message,
            details=entity.details,
            created_at=entity.created_at,
        )
