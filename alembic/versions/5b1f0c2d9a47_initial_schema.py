"""initial schema: users, notes, shares, chat messages, notifications

Revision ID: 5b1f0c2d9a47
Revises:
Create Date: 2026-10-18 09:12:40.118402

"""
from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa
from sqlalchemy.dialects import postgresql

# revision identifiers, used by Alembic.
revision: str = '5b1f0c2d9a47'
down_revision: Union[str, None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def _base_columns():
    return [
        sa.Column('id', postgresql.UUID(as_uuid=True), primary_key=True),
        sa.Column('created_at', sa.DateTime(timezone=True), nullable=False),
        sa.Column('updated_at', sa.DateTime(timezone=True), nullable=False),
    ]


def _user_fk(name: str, nullable: bool = False) -> sa.Column:
    return sa.Column(
        name,
        postgresql.UUID(as_uuid=True),
        sa.ForeignKey('users.id', ondelete='CASCADE'),
        nullable=nullable,
    )


def upgrade() -> None:
    op.create_table(
        'users',
        *_base_columns(),
        sa.Column('username', sa.String(length=50), nullable=False, unique=True),
        sa.Column('email', sa.String(length=255), nullable=True, unique=True),
        sa.Column('password_hash', sa.String(length=255), nullable=False),
        sa.Column('full_name', sa.String(length=100), nullable=True),
        sa.Column('is_active', sa.Boolean(), nullable=False),
        sa.Column('is_verified', sa.Boolean(), nullable=False),
        sa.CheckConstraint('length(username) <= 50', name='ck_users_username_len'),
        sa.CheckConstraint(
            'full_name IS NULL OR length(full_name) <= 100', name='ck_users_full_name_len'
        ),
    )
    op.create_index('idx_users_active', 'users', ['is_active'])

    op.create_table(
        'notes',
        *_base_columns(),
        sa.Column('title', sa.String(length=200), nullable=False),
        sa.Column('description', sa.Text(), nullable=True),
        sa.Column('content', sa.Text(), nullable=False),
        sa.Column('course_code', sa.String(length=30), nullable=False),
        sa.Column('instructor', sa.String(length=100), nullable=True),
        _user_fk('owner_id'),
        sa.CheckConstraint('length(title) <= 200', name='ck_notes_title_len'),
        sa.CheckConstraint('length(course_code) <= 30', name='ck_notes_course_code_len'),
    )
    op.create_index('idx_notes_owner_id', 'notes', ['owner_id'])
    op.create_index('idx_notes_course_code', 'notes', ['course_code'])

    op.create_table(
        'shares',
        *_base_columns(),
        sa.Column(
            'note_id',
            postgresql.UUID(as_uuid=True),
            sa.ForeignKey('notes.id', ondelete='CASCADE'),
            nullable=False,
        ),
        _user_fk('shared_by_user_id'),
        _user_fk('shared_with_user_id'),
        sa.Column('shared_at', sa.DateTime(timezone=True), nullable=False),
        sa.Column('share_message', sa.String(length=500), nullable=True),
        sa.UniqueConstraint('note_id', 'shared_with_user_id', name='uq_shares_note_recipient'),
        sa.CheckConstraint(
            'share_message IS NULL OR length(share_message) <= 500', name='ck_shares_message_len'
        ),
    )
    op.create_index('idx_shares_shared_by', 'shares', ['shared_by_user_id'])
    op.create_index('idx_shares_shared_with', 'shares', ['shared_with_user_id'])

    op.create_table(
        'chat_messages',
        *_base_columns(),
        _user_fk('sender_id'),
        _user_fk('recipient_id'),
        sa.Column('body', sa.Text(), nullable=False),
        sa.Column('read', sa.Boolean(), nullable=False),
        sa.Column('read_at', sa.DateTime(timezone=True), nullable=True),
    )
    op.create_index(
        'idx_chat_messages_pair_created',
        'chat_messages',
        ['sender_id', 'recipient_id', 'created_at'],
    )
    op.create_index('idx_chat_messages_recipient_read', 'chat_messages', ['recipient_id', 'read'])

    op.create_table(
        'notifications',
        *_base_columns(),
        _user_fk('recipient_id'),
        _user_fk('sender_id'),
        sa.Column('type', sa.String(length=20), nullable=False),
        sa.Column('reference_id', postgresql.UUID(as_uuid=True), nullable=False),
        sa.Column('reference_type', sa.String(length=20), nullable=False),
        sa.Column('content', sa.String(length=500), nullable=True),
        sa.Column('read', sa.Boolean(), nullable=False),
    )
    op.create_index(
        'idx_notifications_recipient_created', 'notifications', ['recipient_id', 'created_at']
    )
    op.create_index('idx_notifications_recipient_read', 'notifications', ['recipient_id', 'read'])


def downgrade() -> None:
    op.drop_table('notifications')
    op.drop_table('chat_messages')
    op.drop_table('shares')
    op.drop_table('notes')
    op.drop_table('users')
