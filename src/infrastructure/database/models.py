"""SQLAlchemy ORM models."""

from datetime import datetime
from typing import Any

from sqlalchemy import (
    JSON,
    Boolean,
    CheckConstraint,
    DateTime,
    ForeignKey,
    Integer,
    String,
    Text,
    UniqueConstraint,
)
from sqlalchemy.dialects.postgresql import JSONB
from sqlalchemy.orm import DeclarativeBase, Mapped, mapped_column

_ENVIRONMENT_CHECK = "environment IN ('dev', 'qa', 'prod')"


class Base(DeclarativeBase):
    """Base class for all ORM models."""

    pass


class UserModel(Base):
    """Known partner and admin accounts, shared by every environment."""

    __tablename__ = "users"

    id: Mapped[str] = mapped_column(String(100), primary_key=True)
    email: Mapped[str] = mapped_column(String(255), nullable=False)
    is_admin: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False)
    created_at: Mapped[datetime] = mapped_column(DateTime, default=datetime.utcnow)


class InvitationModel(Base):
    """Invitation outcome per user and environment."""

    __tablename__ = "invitations"
    __table_args__ = (
        UniqueConstraint("user_id", "environment", name="uq_invitations_user_env"),
        CheckConstraint(_ENVIRONMENT_CHECK, name="ck_invitations_environment"),
    )

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    user_id: Mapped[str] = mapped_column(String(100), nullable=False, index=True)
    environment: Mapped[str] = mapped_column(String(10), nullable=False)
    invitation_sent: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False)
    invitation_sent_at: Mapped[datetime | None] = mapped_column(DateTime)
    already_existed: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False)


class GroupModel(Base):
    """Upstream group created for a user in one environment."""

    __tablename__ = "groups"
    __table_args__ = (
        UniqueConstraint("user_id", "environment", name="uq_groups_user_env"),
        CheckConstraint(_ENVIRONMENT_CHECK, name="ck_groups_environment"),
    )

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    user_id: Mapped[str] = mapped_column(String(100), nullable=False, index=True)
    environment: Mapped[str] = mapped_column(String(10), nullable=False)
    group_api_id: Mapped[str | None] = mapped_column(String(255))
    group_name: Mapped[str | None] = mapped_column(String(255))
    group_created: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False)
    group_created_at: Mapped[datetime | None] = mapped_column(DateTime)


class SourceModel(Base):
    """Upstream content source, linked to the group record it was created for."""

    __tablename__ = "sources"
    __table_args__ = (
        UniqueConstraint("user_id", "environment", name="uq_sources_user_env"),
        CheckConstraint(_ENVIRONMENT_CHECK, name="ck_sources_environment"),
    )

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    user_id: Mapped[str] = mapped_column(String(100), nullable=False, index=True)
    environment: Mapped[str] = mapped_column(String(10), nullable=False)
    group_id: Mapped[int | None] = mapped_column(
        Integer,
        ForeignKey("groups.id", ondelete="SET NULL"),
    )
    source_api_id: Mapped[str | None] = mapped_column(String(255))
    source_name: Mapped[str | None] = mapped_column(String(255))
    source_created: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False)
    source_created_at: Mapped[datetime | None] = mapped_column(DateTime)


class OperationLogModel(Base):
    """Append-only audit trail of workflow steps."""

    __tablename__ = "operation_logs"
    __table_args__ = (
        CheckConstraint(
            "operation_type IN ('invite', 'create_group', 'create_source', 'setup', 'cleanup')",
            name="ck_operation_logs_type",
        ),
        CheckConstraint(
            "status IN ('success', 'failed', 'skipped')",
            name="ck_operation_logs_status",
        ),
    )

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    operation_type: Mapped[str] = mapped_column(String(30), nullable=False)
    user_id: Mapped[str] = mapped_column(String(100), nullable=False)
    environment: Mapped[str] = mapped_column(String(10), nullable=False, index=True)
    status: Mapped[str] = mapped_column(String(20), nullable=False)
    error_message: Mapped[str | None] = mapped_column(Text)
    details: Mapped[dict[str, Any] | None] = mapped_column(
        JSON().with_variant(JSONB, "postgresql")
    )
    created_at: Mapped[datetime] = mapped_column(DateTime, default=datetime.utcnow, nullable=False)
