"""SQLAlchemy implementation of Group repository."""

from datetime import datetime

from sqlalchemy import delete, select
from sqlalchemy.ext.asyncio import AsyncSession

from domain.entities.environment import Environment
from domain.entities.group import GroupRecord
from infrastructure.database.models import GroupModel
from infrastructure.database.upsert import USER_ENV_KEY, dialect_insert


class SQLAlchemyGroupRepository:
    """SQLAlchemy implementation of IGroupRepository."""

    def __init__(self, session: AsyncSession) -> None:
        self._session = session

    async def get(self, user_id: str, environment: Environment) -> GroupRecord | None:
        stmt = select(GroupModel).where(
            GroupModel.user_id == user_id,
            GroupModel.environment == environment.value,
        )
        result = await self._session.execute(stmt)
        model = result.scalar_one_or_none()
        return self._to_entity(model) if model else None

    async def upsert(
        self, user_id: str, environment: Environment, api_id: str, name: str
    ) -> None:
        values = {
            "group_api_id": api_id,
            "group_name": name,
            "group_created": True,
            "group_created_at": datetime.utcnow(),
        }
        stmt = dialect_insert(self._session, GroupModel).values(
            user_id=user_id, environment=environment.value, **values
        )
        stmt = stmt.on_conflict_do_update(index_elements=USER_ENV_KEY, set_=values)
        await self._session.execute(stmt)

    async def delete_for(self, environment: Environment, user_id: str | None = None) -> int:
        stmt = delete(GroupModel).where(GroupModel.environment == environment.value)
        if user_id is not None:
            stmt = stmt.where(GroupModel.user_id == user_id)
        result = await self._session.execute(stmt)
        return result.rowcount  # type: ignore[attr-defined, no-any-return]

    def _to_entity(self, model: GroupModel) -> GroupRecord:
        """Convert ORM model to domain entity."""
        return GroupRecord(
            id=model.id,
            user_id=model.user_id,
            environment=Environment(model.environment),
            api_id=model.group_api_id or "",
            name=model.group_name or "",
            created=model.group_created,
            created_at=model.group_created_at,
        )
