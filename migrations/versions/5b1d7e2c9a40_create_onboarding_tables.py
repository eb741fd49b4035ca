"""create_onboarding_tables

Revision ID: 5b1d7e2c9a40
Revises:
Create Date: 2026-10-19 11:40:12.318204

"""
from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa
from sqlalchemy.dialects import postgresql


# revision identifiers, used by Alembic.
revision: str = '5b1d7e2c9a40'
down_revision: Union[str, Sequence[str], None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None

ENVIRONMENT_CHECK = "environment IN ('dev', 'qa', 'prod')"


def upgrade() -> None:
    """Create users, per-environment progress tables and the operation log."""
    op.create_table('users',
        sa.Column('id', sa.String(length=100), nullable=False),
        sa.Column('email', sa.String(length=255), nullable=False),
        sa.Column('is_admin', sa.Boolean(), nullable=False, server_default=sa.false()),
        sa.Column('created_at', sa.DateTime(), nullable=True),
        sa.PrimaryKeyConstraint('id'),
    )

    op.create_table('invitations',
        sa.Column('id', sa.Integer(), autoincrement=True, nullable=False),
        sa.Column('user_id', sa.String(length=100), nullable=False),
        sa.Column('environment', sa.String(length=10), nullable=False),
        sa.Column('invitation_sent', sa.Boolean(), nullable=False, server_default=sa.false()),
        sa.Column('invitation_sent_at', sa.DateTime(), nullable=True),
        sa.Column('already_existed', sa.Boolean(), nullable=False, server_default=sa.false()),
        sa.CheckConstraint(ENVIRONMENT_CHECK, name='ck_invitations_environment'),
        sa.PrimaryKeyConstraint('id'),
        sa.UniqueConstraint('user_id', 'environment', name='uq_invitations_user_env'),
    )
    op.create_index('ix_invitations_user_id', 'invitations', ['user_id'], unique=False)

    op.create_table('groups',
        sa.Column('id', sa.Integer(), autoincrement=True, nullable=False),
        sa.Column('user_id', sa.String(length=100), nullable=False),
        sa.Column('environment', sa.String(length=10), nullable=False),
        sa.Column('group_api_id', sa.String(length=255), nullable=True),
        sa.Column('group_name', sa.String(length=255), nullable=True),
        sa.Column('group_created', sa.Boolean(), nullable=False, server_default=sa.false()),
        sa.Column('group_created_at', sa.DateTime(), nullable=True),
        sa.CheckConstraint(ENVIRONMENT_CHECK, name='ck_groups_environment'),
        sa.PrimaryKeyConstraint('id'),
        sa.UniqueConstraint('user_id', 'environment', name='uq_groups_user_env'),
    )
    op.create_index('ix_groups_user_id', 'groups', ['user_id'], unique=False)

    op.create_table('sources',
        sa.Column('id', sa.Integer(), autoincrement=True, nullable=False),
        sa.Column('user_id', sa.String(length=100), nullable=False),
        sa.Column('environment', sa.String(length=10), nullable=False),
        sa.Column('group_id', sa.Integer(), nullable=True),
        sa.Column('source_api_id', sa.String(length=255), nullable=True),
        sa.Column('source_name', sa.String(length=255), nullable=True),
        sa.Column('source_created', sa.Boolean(), nullable=False, server_default=sa.false()),
        sa.Column('source_created_at', sa.DateTime(), nullable=True),
        sa.CheckConstraint(ENVIRONMENT_CHECK, name='ck_sources_environment'),
        sa.ForeignKeyConstraint(['group_id'], ['groups.id'], ondelete='SET NULL'),
        sa.PrimaryKeyConstraint('id'),
        sa.UniqueConstraint('user_id', 'environment', name='uq_sources_user_env'),
    )
    op.create_index('ix_sources_user_id', 'sources', ['user_id'], unique=False)

    op.create_table('operation_logs',
        sa.Column('id', sa.Integer(), autoincrement=True, nullable=False),
        sa.Column('operation_type', sa.String(length=30), nullable=False),
        sa.Column('user_id', sa.String(length=100), nullable=False),
        sa.Column('environment', sa.String(length=10), nullable=False),
        sa.Column('status', sa.String(length=20), nullable=False),
        sa.Column('error_message', sa.Text(), nullable=True),
        sa.Column('details', sa.JSON().with_variant(postgresql.JSONB(), 'postgresql'), nullable=True),
        sa.Column('created_at', sa.DateTime(), nullable=False),
        sa.CheckConstraint(
            "operation_type IN ('invite', 'create_group', 'create_source', 'setup', 'cleanup')",
            name='ck_operation_logs_type',
        ),
        sa.CheckConstraint("status IN ('success', 'failed', 'skipped')", name='ck_operation_logs_status'),
        sa.PrimaryKeyConstraint('id'),
    )
    op.create_index('ix_operation_logs_environment', 'operation_logs', ['environment'], unique=False)


def downgrade() -> None:
    """Drop onboarding tables."""
    op.drop_index('ix_operation_logs_environment', table_name='operation_logs')
    op.drop_table('operation_logs')
    op.drop_index('ix_sources_user_id', table_name='sources')
    op.drop_table('sources')
    op.drop_index('ix_groups_user_id', table_name='groups')
    op.drop_table('groups')
    op.drop_index('ix_invitations_user_id', table_name='invitations')
    op.drop_table('invitations')
    op.drop_table('users')
