# alembic/versions/001_initial.py

"""Initial schema

Revision ID: 001
Revises:
Create Date: 2026-10-17
"""
from alembic import op
import sqlalchemy as sa

# revision identifiers
revision = '001'
down_revision = None
branch_labels = None
depends_on = None


def upgrade():
    # Create settings table
    op.create_table('settings',
        sa.Column('id', sa.String(length=64), nullable=False),
        sa.Column('current_formation_id', sa.String(length=64), nullable=False),
        sa.Column('last_check_date', sa.DateTime(), nullable=False),
        sa.Column('auto_check_enabled', sa.Boolean(), nullable=False),
        sa.Column('created_at', sa.DateTime(), nullable=False),
        sa.Column('updated_at', sa.DateTime(), nullable=False),
        sa.PrimaryKeyConstraint('id')
    )
    op.create_index('ix_settings_updated_at', 'settings', ['updated_at'])

    # Create budget table
    op.create_table('budget',
        sa.Column('id', sa.String(length=64), nullable=False),
        sa.Column('funds', sa.Numeric(precision=14, scale=2), nullable=False),
        sa.Column('start', sa.Numeric(precision=14, scale=2), nullable=False),
        sa.Column('profit', sa.Numeric(precision=14, scale=2), nullable=False),
        sa.Column('updated_at', sa.DateTime(), nullable=False),
        sa.PrimaryKeyConstraint('id')
    )
    op.create_index('ix_budget_updated_at', 'budget', ['updated_at'])

    # Create holdings table
    op.create_table('holdings',
        sa.Column('id', sa.String(length=64), nullable=False),
        sa.Column('ticker', sa.String(length=10), nullable=False),
        sa.Column('tier', sa.Integer(), nullable=False),
        sa.Column('entry_price', sa.Numeric(precision=12, scale=4), nullable=False),
        sa.Column('hold_shares', sa.Integer(), nullable=False),
        sa.Column('goal_shares', sa.Integer(), nullable=False),
        sa.Column('updated_at', sa.DateTime(), nullable=False),
        sa.PrimaryKeyConstraint('id')
    )
    op.create_index('ix_holdings_ticker', 'holdings', ['ticker'])
    op.create_index('ix_holdings_tier_ticker', 'holdings', ['tier', 'ticker'])

    # Create formation_usage table
    op.create_table('formation_usage',
        sa.Column('id', sa.String(length=96), nullable=False),
        sa.Column('formation_id', sa.String(length=64), nullable=False),
        sa.Column('usage_count', sa.Integer(), nullable=False),
        sa.Column('total_days', sa.Integer(), nullable=False),
        sa.Column('usage_percentage', sa.Numeric(precision=5, scale=2), nullable=False),
        sa.Column('last_used_date', sa.DateTime(), nullable=False),
        sa.Column('created_at', sa.DateTime(), nullable=False),
        sa.PrimaryKeyConstraint('id')
    )
    op.create_index('ix_formation_usage_formation_id', 'formation_usage', ['formation_id'], unique=True)

    # Create formation_history table (insert-only)
    op.create_table('formation_history',
        sa.Column('id', sa.String(length=64), nullable=False),
        sa.Column('from_formation_id', sa.String(length=64), nullable=True),
        sa.Column('to_formation_id', sa.String(length=64), nullable=False),
        sa.Column('changed_at', sa.DateTime(), nullable=False),
        sa.Column('reason', sa.Text(), nullable=True),
        sa.PrimaryKeyConstraint('id')
    )
    op.create_index('ix_formation_history_changed_at', 'formation_history', ['changed_at'])
    op.create_index('ix_formation_history_to_formation', 'formation_history', ['to_formation_id'])


def downgrade():
    op.drop_index('ix_formation_history_to_formation', table_name='formation_history')
    op.drop_index('ix_formation_history_changed_at', table_name='formation_history')
    op.drop_table('formation_history')
    op.drop_index('ix_formation_usage_formation_id', table_name='formation_usage')
    op.drop_table('formation_usage')
    op.drop_index('ix_holdings_tier_ticker', table_name='holdings')
    op.drop_index('ix_holdings_ticker', table_name='holdings')
    op.drop_table('holdings')
    op.drop_index('ix_budget_updated_at', table_name='budget')
    op.drop_table('budget')
    op.drop_index('ix_settings_updated_at', table_name='settings')
    op.drop_table('settings')
