"""create_polling_tables

Revision ID: 3f9a1c2e7b10
Revises:
Create Date: 2026-03-01 00:00:00.000000

"""
from alembic import op
import sqlalchemy as sa


# revision identifiers, used by Alembic.
revision = '3f9a1c2e7b10'
down_revision = None
branch_labels = None
depends_on = None


def upgrade():
    op.create_table(
        'polls',
        sa.Column('id', sa.Uuid(), nullable=False),
        sa.Column('title', sa.String(length=255), nullable=False),
        sa.Column('description', sa.Text(), nullable=True),
        sa.Column('created_by', sa.Uuid(), nullable=False),
        sa.Column('created_at', sa.DateTime(timezone=True), nullable=False),
        sa.Column('updated_at', sa.DateTime(timezone=True), nullable=False),
        sa.Column('expires_at', sa.DateTime(timezone=True), nullable=True),
        sa.Column('is_active', sa.Boolean(), nullable=False, server_default=sa.true()),
        sa.Column('allow_multiple_votes', sa.Boolean(), nullable=False, server_default=sa.false()),
        sa.Column('is_anonymous', sa.Boolean(), nullable=False, server_default=sa.false()),
        sa.Column('max_votes_per_user', sa.Integer(), nullable=False, server_default='1'),
        sa.PrimaryKeyConstraint('id'),
        sa.CheckConstraint('length(title) >= 3', name='ck_polls_title_length'),
        sa.CheckConstraint('max_votes_per_user > 0', name='ck_polls_max_votes_positive'),
    )
    op.create_index('idx_polls_created_by', 'polls', ['created_by'])
    op.create_index('idx_polls_active', 'polls', ['is_active', 'created_at'])
    op.create_index('idx_polls_expires_at', 'polls', ['expires_at'])

    op.create_table(
        'poll_options',
        sa.Column('id', sa.Uuid(), nullable=False),
        sa.Column('poll_id', sa.Uuid(), nullable=False),
        sa.Column('option_text', sa.String(length=500), nullable=False),
        sa.Column('order_index', sa.Integer(), nullable=False, server_default='0'),
        sa.Column('created_at', sa.DateTime(timezone=True), nullable=False),
        sa.ForeignKeyConstraint(['poll_id'], ['polls.id'], ondelete='CASCADE'),
        sa.PrimaryKeyConstraint('id'),
        sa.CheckConstraint('length(option_text) >= 1', name='ck_poll_options_text_length'),
        sa.UniqueConstraint('poll_id', 'order_index', name='uq_poll_options_poll_order'),
    )
    op.create_index('idx_poll_options_poll', 'poll_options', ['poll_id', 'order_index'])

    op.create_table(
        'votes',
        sa.Column('id', sa.Uuid(), nullable=False),
        sa.Column('poll_id', sa.Uuid(), nullable=False),
        sa.Column('option_id', sa.Uuid(), nullable=False),
        sa.Column('user_id', sa.Uuid(), nullable=True),
        sa.Column('voter_ip', sa.String(length=45), nullable=True),
        sa.Column('created_at', sa.DateTime(timezone=True), nullable=False),
        sa.ForeignKeyConstraint(['poll_id'], ['polls.id'], ondelete='CASCADE'),
        sa.ForeignKeyConstraint(['option_id'], ['poll_options.id'], ondelete='CASCADE'),
        sa.PrimaryKeyConstraint('id'),
        sa.UniqueConstraint('poll_id', 'user_id', 'option_id', name='uq_votes_poll_user_option'),
    )
    op.create_index('idx_votes_poll', 'votes', ['poll_id'])
    op.create_index('idx_votes_user', 'votes', ['user_id'])
    op.create_index('idx_votes_option', 'votes', ['option_id'])

    op.create_table(
        'poll_views',
        sa.Column('id', sa.Uuid(), nullable=False),
        sa.Column('poll_id', sa.Uuid(), nullable=False),
        sa.Column('user_id', sa.Uuid(), nullable=True),
        sa.Column('viewer_ip', sa.String(length=45), nullable=True),
        sa.Column('created_at', sa.DateTime(timezone=True), nullable=False),
        sa.ForeignKeyConstraint(['poll_id'], ['polls.id'], ondelete='CASCADE'),
        sa.PrimaryKeyConstraint('id'),
    )
    op.create_index('idx_poll_views_poll', 'poll_views', ['poll_id', 'created_at'])


def downgrade():
    # Children first, so foreign keys never dangle
    op.drop_index('idx_poll_views_poll', table_name='poll_views')
    op.drop_table('poll_views')

    op.drop_index('idx_votes_option', table_name='votes')
    op.drop_index('idx_votes_user', table_name='votes')
    op.drop_index('idx_votes_poll', table_name='votes')
    op.drop_table('votes')

    op.drop_index('idx_poll_options_poll', table_name='poll_options')
    op.drop_table('poll_options')

    op.drop_index('idx_polls_expires_at', table_name='polls')
    op.drop_index('idx_polls_active', table_name='polls')
    op.drop_index('idx_polls_created_by', table_name='polls')
    op.drop_table('polls')
