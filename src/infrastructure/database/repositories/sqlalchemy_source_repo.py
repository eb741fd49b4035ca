"""SQLAlchemy implementation of Source repository."""

from datetime import datetime

from sqlalchemy import Boolean, DateTime, String, delete, literal, select
from sqlalchemy.ext.asyncio import AsyncSession

from domain.entities.environment import Environment
from domain.entities.source import SourceRecord
from infrastructure.database.models import GroupModel, SourceModel
from infrastructure.database.upsert import USER_ENV_KEY, dialect_insert


class SQLAlchemySourceRepository:
    """SQLAlchemy implementation of ISourceRepository."""

    def __init__(self, session: AsyncSession) -> None:
        self._session = session

    async def get(self, user_id: str, environment: Environment) -> SourceRecord | None:
        stmt = select(SourceModel).where(
            SourceModel.user_id == user_id,
            SourceModel.environment == environment.value,
        )
        result = await self._session.execute(stmt)
        model = result.scalar_one_or_none()
        return self._to_entity(model) if model else None

    async def upsert_linked(
        self, user_id: str, environment: Environment, api_id: str, name: str
    ) -> bool:
        """Upsert the source pointing at the current group row.

        The group id is resolved by the INSERT ... SELECT itself, so the
        statement writes nothing when the key has no group record; returns
        False in that case.
        """
        linked = select(
            literal(user_id, String),
            literal(environment.value, String),
            GroupModel.id,
            literal(api_id, String),
            literal(name, String),
            literal(True, Boolean),
            literal(datetime.utcnow(), DateTime),
        ).where(
            GroupModel.user_id == user_id,
            GroupModel.environment == environment.value,
        )
        stmt = dialect_insert(self._session, SourceModel).from_select(
            [
                "user_id",
                "environment",
                "group_id",
                "source_api_id",
                "source_name",
                "source_created",
                "source_created_at",
            ],
            linked,
        )
        stmt = stmt.on_conflict_do_update(
            index_elements=USER_ENV_KEY,
            set_={
                column: stmt.excluded[column]
                for column in (
                    "group_id",
                    "source_api_id",
                    "source_name",
                    "source_created",
                    "source_created_at",
                )
            },
        ).returning(SourceModel.id)
        result = await self._session.execute(stmt)
        return result.scalar_one_or_none() is not None

    async def delete_for(self, environment: Environment, user_id: str | None = None) -> int:
        stmt = delete(SourceModel).where(SourceModel.environment == environment.value)
        if user_id is not None:
            stmt = stmt.where(SourceModel.user_id == user_id)
        result = await self._session.execute(stmt)
        return result.rowcount  # type: ignore[attr-defined, no-any-return]

    def _to_entity(self, model: SourceModel) -> SourceRecord:
        """Convert ORM model to domain entity."""
        return SourceRecord(
            id=model.id,
            user_id=model.user_id,
            environment=Environment(model.environment),
            api_id=model.source_api_id or "",
            name=model.source_name or "",
            created=model.source_created,
            created_at=model.source_created_at,
            group_id=model.group_id,
        )
