"""SQLAlchemy implementation of User repository."""

from sqlalchemy import and_, select
from sqlalchemy.ext.asyncio import AsyncSession

from domain.entities.environment import Environment
from domain.entities.status import OnboardingStatus
from domain.entities.user import User
from infrastructure.database.models import GroupModel, InvitationModel, SourceModel, UserModel
from infrastructure.database.upsert import dialect_insert


class SQLAlchemyUserRepository:
    """SQLAlchemy implementation of IUserRepository."""

    def __init__(self, session: AsyncSession) -> None:
        self._session = session

    async def ensure(self, user: User) -> None:
        """Insert the user unless the id is already known."""
        stmt = (
            dialect_insert(self._session, UserModel)
            .values(
                id=user.id,
                email=user.email,
                is_admin=user.is_admin,
                created_at=user.created_at,
            )
            .on_conflict_do_nothing(index_elements=["id"])
        )
        await self._session.execute(stmt)

    async def get(self, user_id: str) -> User | None:
        stmt = select(UserModel).where(UserModel.id == user_id)
        result = await self._session.execute(stmt)
        model = result.scalar_one_or_none()
        return self._to_entity(model) if model else None

    async def get_statuses(self, environment: Environment) -> list[OnboardingStatus]:
        """Outer-join every non-admin user with its progress in one environment."""
        env = environment.value
        stmt = (
            select(
                UserModel.id,
                UserModel.email,
                InvitationModel.invitation_sent,
                InvitationModel.already_existed,
                GroupModel.group_created,
                GroupModel.group_api_id,
                SourceModel.source_created,
                SourceModel.source_api_id,
            )
            .outerjoin(
                InvitationModel,
                and_(InvitationModel.user_id == UserModel.id, InvitationModel.environment == env),
            )
            .outerjoin(
                GroupModel,
                and_(GroupModel.user_id == UserModel.id, GroupModel.environment == env),
            )
            .outerjoin(
                SourceModel,
                and_(SourceModel.user_id == UserModel.id, SourceModel.environment == env),
            )
            .where(UserModel.is_admin.is_(False))
            .order_by(UserModel.id)
        )
        result = await self._session.execute(stmt)
        return [
            OnboardingStatus(
                user_id=row.id,
                environment=environment,
                email=row.email,
                invited=bool(row.invitation_sent or row.already_existed),
                group_created=bool(row.group_created),
                source_created=bool(row.source_created),
                group_api_id=row.group_api_id,
                source_api_id=row.source_api_id,
            )
            for row in result
        ]

    def _to_entity(self, model: UserModel) -> User:
        """Convert ORM model to domain entity."""
        return User(
            id=model.id,
            email=model.email,
            is_admin=model.is_admin,
            created_at=model.created_at,
        )
