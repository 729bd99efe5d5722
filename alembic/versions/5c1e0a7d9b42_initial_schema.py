"""initial_schema

Revision ID: 5c1e0a7d9b42
Revises:
Create Date: 2026-10-19 09:12:44.118204

Production-safe migration: only creates tables that do not exist yet.
"""
from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa
from sqlalchemy import inspect


# revision identifiers, used by Alembic.
revision: str = '5c1e0a7d9b42'
down_revision: Union[str, None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def table_exists(table_name: str) -> bool:
    """Check if a table exists in the database."""
    bind = op.get_bind()
    inspector = inspect(bind)
    return table_name in inspector.get_table_names()


def _timestamps():
    return [
        sa.Column('created_at', sa.DateTime(timezone=True), server_default=sa.text('(CURRENT_TIMESTAMP)'), nullable=False),
        sa.Column('updated_at', sa.DateTime(timezone=True), server_default=sa.text('(CURRENT_TIMESTAMP)'), nullable=False),
    ]


def upgrade() -> None:
    if not table_exists('users'):
        op.create_table('users',
            sa.Column('id', sa.Integer(), nullable=False),
            sa.Column('google_id', sa.String(), nullable=False),
            sa.Column('email', sa.String(), nullable=False),
            sa.Column('name', sa.String(length=100), nullable=False),
            *_timestamps(),
            sa.PrimaryKeyConstraint('id')
        )
        op.create_index(op.f('ix_users_id'), 'users', ['id'], unique=False)
        op.create_index(op.f('ix_users_google_id'), 'users', ['google_id'], unique=True)
        op.create_index(op.f('ix_users_email'), 'users', ['email'], unique=True)

    if not table_exists('job_applications'):
        op.create_table('job_applications',
            sa.Column('id', sa.Integer(), nullable=False),
            sa.Column('user_id', sa.Integer(), nullable=False),
            sa.Column('title', sa.String(length=200), nullable=False),
            sa.Column('company', sa.String(length=100), nullable=False),
            sa.Column('description', sa.Text(), nullable=False),
            sa.Column('location', sa.String(length=200), nullable=True),
            sa.Column('url', sa.String(), nullable=True),
            sa.Column('requirements', sa.JSON(), nullable=False),
            sa.Column('skills', sa.JSON(), nullable=False),
            sa.Column('salary', sa.String(length=100), nullable=True),
            sa.Column('job_type', sa.String(length=20), nullable=True),
            sa.Column('experience_level', sa.String(length=20), nullable=True),
            sa.Column('application_status', sa.String(length=20), nullable=False),
            sa.Column('date_applied', sa.DateTime(timezone=True), nullable=True),
            *_timestamps(),
            sa.ForeignKeyConstraint(['user_id'], ['users.id'], ),
            sa.PrimaryKeyConstraint('id')
        )
        op.create_index(op.f('ix_job_applications_id'), 'job_applications', ['id'], unique=False)
        op.create_index(op.f('ix_job_applications_user_id'), 'job_applications', ['user_id'], unique=False)
        op.create_index(op.f('ix_job_applications_company'), 'job_applications', ['company'], unique=False)
        op.create_index(op.f('ix_job_applications_created_at'), 'job_applications', ['created_at'], unique=False)
        op.create_index('idx_job_applications_user_created', 'job_applications', ['user_id', 'created_at'], unique=False)

    if not table_exists('questions'):
        op.create_table('questions',
            sa.Column('id', sa.Integer(), nullable=False),
            sa.Column('user_id', sa.Integer(), nullable=False),
            sa.Column('job_id', sa.Integer(), nullable=False),
            sa.Column('type', sa.String(length=20), nullable=False),
            sa.Column('title', sa.String(length=200), nullable=False),
            sa.Column('description', sa.Text(), nullable=True),
            sa.Column('difficulty', sa.String(length=10), nullable=True),
            sa.Column('tags', sa.JSON(), nullable=False),
            sa.Column('external_url', sa.String(), nullable=True),
            sa.Column('status', sa.String(length=20), nullable=False),
            *_timestamps(),
            sa.ForeignKeyConstraint(['user_id'], ['users.id'], ),
            sa.ForeignKeyConstraint(['job_id'], ['job_applications.id'], ),
            sa.PrimaryKeyConstraint('id')
        )
        op.create_index(op.f('ix_questions_id'), 'questions', ['id'], unique=False)
        op.create_index(op.f('ix_questions_user_id'), 'questions', ['user_id'], unique=False)
        op.create_index(op.f('ix_questions_job_id'), 'questions', ['job_id'], unique=False)
        op.create_index('idx_questions_user_job_type', 'questions', ['user_id', 'job_id', 'type'], unique=False)

    if not table_exists('interview_sessions'):
        op.create_table('interview_sessions',
            sa.Column('id', sa.Integer(), nullable=False),
            sa.Column('user_id', sa.Integer(), nullable=False),
            sa.Column('job_id', sa.Integer(), nullable=False),
            sa.Column('question_ids', sa.JSON(), nullable=False),
            sa.Column('current_question_index', sa.Integer(), nullable=False),
            sa.Column('status', sa.String(length=20), nullable=False),
            sa.Column('total_questions', sa.Integer(), nullable=False),
            sa.Column('answered_questions', sa.Integer(), nullable=False),
            sa.Column('started_at', sa.DateTime(timezone=True), server_default=sa.text('(CURRENT_TIMESTAMP)'), nullable=False),
            sa.Column('completed_at', sa.DateTime(timezone=True), nullable=True),
            *_timestamps(),
            sa.CheckConstraint('total_questions >= 1', name='ck_interview_sessions_total_questions'),
            sa.CheckConstraint('current_question_index >= 0', name='ck_interview_sessions_current_index'),
            sa.ForeignKeyConstraint(['user_id'], ['users.id'], ),
            sa.ForeignKeyConstraint(['job_id'], ['job_applications.id'], ),
            sa.PrimaryKeyConstraint('id')
        )
        op.create_index(op.f('ix_interview_sessions_id'), 'interview_sessions', ['id'], unique=False)
        op.create_index(op.f('ix_interview_sessions_user_id'), 'interview_sessions', ['user_id'], unique=False)
        op.create_index(op.f('ix_interview_sessions_job_id'), 'interview_sessions', ['job_id'], unique=False)
        op.create_index(op.f('ix_interview_sessions_status'), 'interview_sessions', ['status'], unique=False)
        op.create_index(op.f('ix_interview_sessions_created_at'), 'interview_sessions', ['created_at'], unique=False)
        op.create_index(
            'uq_sessions_one_active_per_job',
            'interview_sessions',
            ['user_id', 'job_id'],
            unique=True,
            postgresql_where=sa.text("status = 'active'"),
            sqlite_where=sa.text("status = 'active'"),
        )

    if not table_exists('discussions'):
        op.create_table('discussions',
            sa.Column('id', sa.Integer(), nullable=False),
            sa.Column('creator_id', sa.Integer(), nullable=False),
            sa.Column('topic', sa.String(length=100), nullable=False),
            sa.Column('description', sa.String(length=500), nullable=False),
            sa.Column('message_count', sa.Integer(), nullable=False),
            sa.Column('participant_count', sa.Integer(), nullable=False),
            sa.Column('last_activity_at', sa.DateTime(timezone=True), server_default=sa.text('(CURRENT_TIMESTAMP)'), nullable=False),
            *_timestamps(),
            sa.ForeignKeyConstraint(['creator_id'], ['users.id'], ),
            sa.PrimaryKeyConstraint('id')
        )
        op.create_index(op.f('ix_discussions_id'), 'discussions', ['id'], unique=False)
        op.create_index(op.f('ix_discussions_creator_id'), 'discussions', ['creator_id'], unique=False)
        op.create_index(op.f('ix_discussions_last_activity_at'), 'discussions', ['last_activity_at'], unique=False)

    if not table_exists('discussion_messages'):
        op.create_table('discussion_messages',
            sa.Column('id', sa.Integer(), nullable=False),
            sa.Column('discussion_id', sa.Integer(), nullable=False),
            sa.Column('user_id', sa.Integer(), nullable=False),
            sa.Column('content', sa.Text(), nullable=False),
            *_timestamps(),
            sa.ForeignKeyConstraint(['discussion_id'], ['discussions.id'], ),
            sa.ForeignKeyConstraint(['user_id'], ['users.id'], ),
            sa.PrimaryKeyConstraint('id')
        )
        op.create_index(op.f('ix_discussion_messages_id'), 'discussion_messages', ['id'], unique=False)
        op.create_index(op.f('ix_discussion_messages_discussion_id'), 'discussion_messages', ['discussion_id'], unique=False)
        op.create_index(op.f('ix_discussion_messages_user_id'), 'discussion_messages', ['user_id'], unique=False)
        op.create_index('idx_discussion_messages_discussion_created', 'discussion_messages', ['discussion_id', 'created_at'], unique=False)


def downgrade() -> None:
    for table_name in (
        'discussion_messages',
        'discussions',
        'interview_sessions',
        'questions',
        'job_applications',
        'users',
    ):
        if table_exists(table_name):
            op.drop_table(table_name)
