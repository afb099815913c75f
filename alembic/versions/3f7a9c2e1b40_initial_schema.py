"""initial_schema

Revision ID: 3f7a9c2e1b40
Revises:
Create Date: 2026-10-18 00:00:00.000000

"""
from alembic import op
import sqlalchemy as sa


# revision identifiers, used by Alembic.
revision = '3f7a9c2e1b40'
down_revision = None
branch_labels = None
depends_on = None


def upgrade():
    op.create_table(
        'polls',
        sa.Column('id', sa.Integer(), autoincrement=True, nullable=False),
        sa.Column('title', sa.String(length=200), nullable=False),
        sa.Column('description', sa.Text(), nullable=False),
        sa.Column('location', sa.String(length=200), nullable=False),
        sa.Column('time_zone', sa.String(length=64), nullable=True),
        sa.Column('admin_token', sa.String(length=100), nullable=False),
        sa.Column('admin_mail', sa.String(length=320), nullable=True),
        sa.Column('admin_push', sa.JSON(), nullable=True),
        sa.Column('deadline', sa.DateTime(timezone=True), nullable=True),
        sa.Column('allow_maybe', sa.Boolean(), nullable=False),
        sa.Column('allow_edit', sa.Boolean(), nullable=False),
        sa.Column('anonymous', sa.Boolean(), nullable=False),
        sa.Column('booked_events', sa.JSON(), nullable=False),
        sa.Column('created_at', sa.DateTime(timezone=True), nullable=False),
        sa.PrimaryKeyConstraint('id'),
    )
    op.create_index('idx_polls_admin_token', 'polls', ['admin_token'])
    op.create_index('idx_polls_created_at', 'polls', ['created_at'])

    op.create_table(
        'poll_events',
        sa.Column('id', sa.Integer(), autoincrement=True, nullable=False),
        sa.Column('poll_id', sa.Integer(), nullable=False),
        sa.Column('start', sa.DateTime(timezone=True), nullable=False),
        sa.Column('end', sa.DateTime(timezone=True), nullable=False),
        sa.Column('note', sa.String(length=500), nullable=True),
        sa.ForeignKeyConstraint(['poll_id'], ['polls.id'], ondelete='CASCADE'),
        sa.PrimaryKeyConstraint('id'),
    )
    op.create_index('idx_poll_events_poll', 'poll_events', ['poll_id'])

    op.create_table(
        'participants',
        sa.Column('id', sa.Integer(), autoincrement=True, nullable=False),
        sa.Column('poll_id', sa.Integer(), nullable=False),
        sa.Column('name', sa.String(length=100), nullable=False),
        sa.Column('mail', sa.String(length=320), nullable=True),
        sa.Column('token', sa.String(length=100), nullable=False),
        sa.Column('created_at', sa.DateTime(timezone=True), nullable=False),
        sa.ForeignKeyConstraint(['poll_id'], ['polls.id'], ondelete='CASCADE'),
        sa.PrimaryKeyConstraint('id'),
    )
    op.create_index('idx_participants_poll', 'participants', ['poll_id'])
    op.create_index('idx_participants_token', 'participants', ['token'])

    op.create_table(
        'selections',
        sa.Column('id', sa.Integer(), autoincrement=True, nullable=False),
        sa.Column('participant_id', sa.Integer(), nullable=False),
        sa.Column('event_id', sa.Integer(), nullable=False),
        sa.Column('choice', sa.String(length=5), nullable=False),
        sa.ForeignKeyConstraint(['participant_id'], ['participants.id'], ondelete='CASCADE'),
        sa.ForeignKeyConstraint(['event_id'], ['poll_events.id'], ondelete='CASCADE'),
        sa.PrimaryKeyConstraint('id'),
        sa.UniqueConstraint('participant_id', 'event_id', name='uq_participant_event'),
    )
    op.create_index('idx_selections_event', 'selections', ['event_id'])


def downgrade():
    op.drop_index('idx_selections_event', table_name='selections')
    op.drop_table('selections')
    op.drop_index('idx_participants_token', table_name='participants')
    op.drop_index('idx_participants_poll', table_name='participants')
    op.drop_table('participants')
    op.drop_index('idx_poll_events_poll', table_name='poll_events')
    op.drop_table('poll_events')
    op.drop_index('idx_polls_created_at', table_name='polls')
    op.drop_index('idx_polls_admin_token', table_name='polls')
    op.drop_table('polls')
