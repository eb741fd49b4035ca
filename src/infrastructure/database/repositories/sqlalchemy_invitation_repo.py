"""SQLAlchemy implementation of Invitation repository."""

from datetime import datetime

from sqlalchemy import delete, select
from sqlalchemy.ext.asyncio import AsyncSession

from domain.entities.environment import Environment
from domain.entities.invitation import InvitationRecord
from infrastructure.database.models import InvitationModel
from infrastructure.database.upsert import USER_ENV_KEY, dialect_insert


class SQLAlchemyInvitationRepository:
    """SQLAlchemy implementation of IInvitationRepository."""

    def __init__(self, session: AsyncSession) -> None:
        self._session = session

    async def get(self, user_id: str, environment: Environment) -> InvitationRecord | None:
        stmt = select(InvitationModel).where(
            InvitationModel.user_id == user_id,
            InvitationModel.environment == environment.value,
        )
        result = await self._session.execute(stmt)
        model = result.scalar_one_or_none()
        return self._to_entity(model) if model else None

    async def upsert(self, user_id: str, environment: Environment, already_existed: bool) -> None:
        """Record the latest invitation outcome for the key."""
        values = {
            "invitation_sent": not already_existed,
            "invitation_sent_at": datetime.utcnow(),
            "already_existed": already_existed,
        }
        stmt = dialect_insert(self._session, InvitationModel).values(
            user_id=user_id, environment=environment.value, **values
        )
        stmt = stmt.on_conflict_do_update(index_elements=USER_ENV_KEY, set_=values)
        await self._session.execute(stmt)

    async def delete_for(self, environment: Environment, user_id: str | None = None) -> int:
        stmt = delete(InvitationModel).where(InvitationModel.environment == environment.value)
        if user_id is not None:
            stmt = stmt.where(InvitationModel.user_id == user_id)
        result = await self._session.execute(stmt)
        return result.rowcount  # type: ignore[attr-defined, no-any-return]

    def _to_entity(self, model: InvitationModel) -> InvitationRecord:
        """Convert ORM model to domain entity."""
        return InvitationRecord(
            id=model.id,
            user_id=model.user_id,
            environment=Environment(model.environment),
            sent=model.invitation_sent,
            already_existed=model.already_existed,
            sent_at=model.invitation_sent_at,
        )
