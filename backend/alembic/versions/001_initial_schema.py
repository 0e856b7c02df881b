"""Initial schema - user profiles, runs, analyses, conversations

Revision ID: 001_initial_schema
Revises:
Create Date: 2026-10-19

"""
from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa


# revision identifiers, used by Alembic.
revision: str = '001_initial_schema'
down_revision: Union[str, None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def upgrade() -> None:
    # Create user_profiles table
    op.create_table(
        'user_profiles',
        sa.Column('id', sa.String(64), primary_key=True),
        sa.Column('strava_id', sa.String(20), nullable=False),
        sa.Column('access_token', sa.Text(), nullable=False),
        sa.Column('refresh_token', sa.Text(), nullable=False),
        sa.Column('token_expires_at', sa.DateTime(timezone=True), nullable=False),
        sa.Column('created_at', sa.DateTime(timezone=True), nullable=True),
        sa.Column('updated_at', sa.DateTime(timezone=True), nullable=True),
    )
    op.create_index('ix_user_profiles_strava_id', 'user_profiles', ['strava_id'], unique=True)

    # Create runs table
    op.create_table(
        'runs',
        sa.Column('id', sa.Integer(), primary_key=True, autoincrement=True),
        sa.Column('user_id', sa.String(64), nullable=False),
        sa.Column('strava_activity_id', sa.String(20), nullable=False, unique=True),
        sa.Column('name', sa.String(255), nullable=True),
        sa.Column('date', sa.DateTime(timezone=True), nullable=False),
        sa.Column('distance', sa.Integer(), nullable=True),
        sa.Column('duration', sa.Integer(), nullable=True),
        sa.Column('pace', sa.Float(), nullable=True),
        sa.Column('avg_heart_rate', sa.Integer(), nullable=True),
        sa.Column('cadence', sa.Integer(), nullable=True),
        sa.Column('elevation_gain', sa.Integer(), nullable=True),
        sa.Column('created_at', sa.DateTime(timezone=True), nullable=True),
        sa.Column('updated_at', sa.DateTime(timezone=True), nullable=True),
    )
    op.create_index('ix_runs_user_id', 'runs', ['user_id'])
    op.create_index('ix_runs_date', 'runs', ['date'])

    # Create run_analyses table
    op.create_table(
        'run_analyses',
        sa.Column('id', sa.Integer(), primary_key=True, autoincrement=True),
        sa.Column(
            'run_id', sa.Integer(),
            sa.ForeignKey('runs.id', ondelete='CASCADE'),
            nullable=False, unique=True
        ),
        sa.Column('user_id', sa.String(64), nullable=False),
        sa.Column('summary', sa.Text(), nullable=False),
        sa.Column('insights', sa.JSON(), nullable=False),
        sa.Column('recommendations', sa.JSON(), nullable=False),
        sa.Column('created_at', sa.DateTime(timezone=True), nullable=True),
    )
    op.create_index('ix_run_analyses_user_id', 'run_analyses', ['user_id'])

    # Create conversations table
    op.create_table(
        'conversations',
        sa.Column('id', sa.Integer(), primary_key=True, autoincrement=True),
        sa.Column('user_id', sa.String(64), nullable=False),
        sa.Column(
            'run_id', sa.Integer(),
            sa.ForeignKey('runs.id', ondelete='CASCADE'),
            nullable=False
        ),
        sa.Column('messages', sa.JSON(), nullable=False),
        sa.Column('created_at', sa.DateTime(timezone=True), nullable=True),
        sa.Column('updated_at', sa.DateTime(timezone=True), nullable=True),
        sa.UniqueConstraint('user_id', 'run_id', name='uq_conversations_user_run'),
    )
    op.create_index('ix_conversations_user_id', 'conversations', ['user_id'])


def downgrade() -> None:
    op.drop_index('ix_conversations_user_id', 'conversations')
    op.drop_table('conversations')
    op.drop_index('ix_run_analyses_user_id', 'run_analyses')
    op.drop_table('run_analyses')
    op.drop_index('ix_runs_date', 'runs')
    op.drop_index('ix_runs_user_id', 'runs')
    op.drop_table('runs')
    op.drop_index('ix_user_profiles_strava_id', 'user_profiles')
    op.drop_table('user_profiles')
