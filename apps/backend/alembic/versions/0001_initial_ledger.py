"""
Create user, account and transaction tables

Revision ID: 0001_initial_ledger
Revises:
Create Date: 2026-10-19 09:00:00
"""

from alembic import op
import sqlalchemy as sa

# revision identifiers, used by Alembic.
revision = '0001_initial_ledger'
down_revision = None
branch_labels = None
depends_on = None


def upgrade() -> None:
    op.create_table(
        'user',
        sa.Column('id', sa.Integer(), primary_key=True, nullable=False),
        sa.Column('clerk_user_id', sa.String(length=128), nullable=False, unique=True),
        sa.Column('email', sa.String(length=320), nullable=True, unique=True),
        sa.Column('name', sa.String(length=100), nullable=True),
        sa.Column('created_at', sa.DateTime(), nullable=False, server_default=sa.text('(CURRENT_TIMESTAMP)')),
        sa.Column('updated_at', sa.DateTime(), nullable=False, server_default=sa.text('(CURRENT_TIMESTAMP)')),
    )

    op.create_table(
        'account',
        sa.Column('id', sa.Integer(), primary_key=True, nullable=False),
        sa.Column('user_id', sa.Integer(), sa.ForeignKey('user.id', ondelete='CASCADE'), nullable=False),
        sa.Column('name', sa.String(length=100), nullable=False),
        sa.Column('type', sa.Enum('CURRENT', 'SAVINGS', name='account_type'), nullable=False),
        sa.Column('balance', sa.BigInteger(), nullable=False, server_default='0'),
        sa.Column('is_default', sa.Boolean(), nullable=False, server_default=sa.text('0')),
        sa.Column('created_at', sa.DateTime(), nullable=False, server_default=sa.text('(CURRENT_TIMESTAMP)')),
        sa.Column('updated_at', sa.DateTime(), nullable=False, server_default=sa.text('(CURRENT_TIMESTAMP)')),
    )
    op.create_index('ix_account_user', 'account', ['user_id'])

    op.create_table(
        'transaction',
        sa.Column('id', sa.Integer(), primary_key=True, nullable=False),
        sa.Column('user_id', sa.Integer(), sa.ForeignKey('user.id', ondelete='CASCADE'), nullable=False),
        sa.Column('account_id', sa.Integer(), sa.ForeignKey('account.id', ondelete='CASCADE'), nullable=False),
        sa.Column('type', sa.Enum('INCOME', 'EXPENSE', name='txn_type'), nullable=False),
        sa.Column('amount', sa.BigInteger(), nullable=False),
        sa.Column('date', sa.DateTime(), nullable=False),
        sa.Column('description', sa.Text(), nullable=True),
        sa.Column('category', sa.String(length=50), nullable=False),
        sa.Column('receipt_url', sa.String(length=500), nullable=True),
        sa.Column(
            'status',
            sa.Enum('PENDING', 'COMPLETED', 'FAILED', name='transaction_status'),
            nullable=False,
            server_default='COMPLETED',
        ),
        sa.Column('is_recurring', sa.Boolean(), nullable=False, server_default=sa.text('0')),
        sa.Column(
            'recurring_interval',
            sa.Enum('DAILY', 'WEEKLY', 'MONTHLY', 'YEARLY', name='recurring_interval'),
            nullable=True,
        ),
        sa.Column('next_recurring_date', sa.DateTime(), nullable=True),
        sa.Column('last_processed', sa.DateTime(), nullable=True),
        sa.Column('created_at', sa.DateTime(), nullable=False, server_default=sa.text('(CURRENT_TIMESTAMP)')),
        sa.Column('updated_at', sa.DateTime(), nullable=False, server_default=sa.text('(CURRENT_TIMESTAMP)')),
        sa.CheckConstraint('amount >= 0', name='ck_transaction_amount_magnitude'),
    )
    op.create_index('ix_transaction_user', 'transaction', ['user_id'])
    op.create_index('ix_transaction_account', 'transaction', ['account_id'])


def downgrade() -> None:
    op.drop_index('ix_transaction_account', table_name='transaction')
    op.drop_index('ix_transaction_user', table_name='transaction')
    op.drop_table('transaction')
    op.drop_index('ix_account_user', table_name='account')
    op.drop_table('account')
    op.drop_table('user')
