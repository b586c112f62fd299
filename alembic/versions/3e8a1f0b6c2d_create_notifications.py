"""create notifications

Revision ID: 3e8a1f0b6c2d
Revises:
Create Date: 2026-10-19 10:00:00.000000

"""
from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa
from sqlalchemy.dialects import mysql


# revision identifiers, used by Alembic.
revision: str = '3e8a1f0b6c2d'
down_revision: Union[str, Sequence[str], None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def _timestamp() -> sa.types.TypeEngine:
    return sa.DateTime(timezone=True).with_variant(mysql.DATETIME(fsp=6), 'mysql')


def upgrade() -> None:
    """Upgrade schema."""
    op.create_table(
        'notifications',
        sa.Column('id', sa.Integer(), primary_key=True),
        sa.Column('target_type', sa.String(length=100), nullable=False),
        sa.Column('target_id', sa.String(length=100), nullable=False),
        sa.Column('notifiable_type', sa.String(length=100), nullable=False),
        sa.Column('notifiable_id', sa.String(length=100), nullable=False),
        sa.Column('key', sa.String(length=255), nullable=False),
        sa.Column('group_type', sa.String(length=100), nullable=True),
        sa.Column('group_id', sa.String(length=100), nullable=True),
        sa.Column('group_owner_id', sa.Integer(), sa.ForeignKey('notifications.id'), nullable=True),
        sa.Column('notifier_type', sa.String(length=100), nullable=True),
        sa.Column('notifier_id', sa.String(length=100), nullable=True),
        sa.Column('parameters', sa.JSON(), nullable=False),
        sa.Column('opened_at', _timestamp(), nullable=True),
        sa.Column('created_at', _timestamp(), nullable=False),
    )
    op.create_index('ix_notifications_target', 'notifications', ['target_type', 'target_id'])
    op.create_index('ix_notifications_notifiable', 'notifications', ['notifiable_type', 'notifiable_id'])
    op.create_index('ix_notifications_group', 'notifications', ['group_type', 'group_id'])
    op.create_index('ix_notifications_key', 'notifications', ['key'])
    op.create_index('ix_notifications_group_owner_id', 'notifications', ['group_owner_id'])
    op.create_index('ix_notifications_opened_at', 'notifications', ['opened_at'])
    op.create_index('ix_notifications_created_at', 'notifications', ['created_at'])


def downgrade() -> None:
    """Downgrade schema."""
    for name in (
        'ix_notifications_created_at',
        'ix_notifications_opened_at',
        'ix_notifications_group_owner_id',
        'ix_notifications_key',
        'ix_notifications_group',
        'ix_notifications_notifiable',
        'ix_notifications_target',
    ):
        op.drop_index(name, table_name='notifications')
    op.drop_table('notifications')
