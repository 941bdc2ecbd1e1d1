"""create transaction and debt tables

Revision ID: 5d1c0e7a9b42
Revises:
Create Date: 2025-01-08 19:42:11.204518

"""
from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa
import sqlmodel


# revision identifiers, used by Alembic.
revision: str = '5d1c0e7a9b42'
down_revision: Union[str, Sequence[str], None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None

recurrence_interval = sa.Enum('once', 'weekly', 'biweekly', 'monthly', 'semiannually', name='recurrenceinterval')


def upgrade() -> None:
    """Upgrade schema: ledger tables."""
    op.create_table(
        'transaction',
        sa.Column('id', sa.Integer(), primary_key=True, nullable=False),
        sa.Column('household_id', sqlmodel.AutoString(), nullable=False),
        sa.Column('creditor', sqlmodel.AutoString(), nullable=False),
        sa.Column('participants', sa.JSON(), nullable=False),
        sa.Column('amount', sa.Float(), nullable=False),
        sa.Column('description', sqlmodel.AutoString(), nullable=False, server_default=''),
        sa.Column('created_at', sa.DateTime(timezone=True), nullable=False, server_default=sa.func.now()),
        sa.Column('is_settlement', sa.Boolean(), nullable=False, server_default=sa.false()),
        sa.Column('debtor', sqlmodel.AutoString(), nullable=True),
        sa.Column('is_recurring', sa.Boolean(), nullable=False, server_default=sa.false()),
        sa.Column('recurrence_interval', recurrence_interval, nullable=True),
        sa.Column('start_date', sa.Date(), nullable=True),
        sa.Column('next_payment_date', sa.Date(), nullable=True),
    )
    op.create_index('ix_transaction_household_id', 'transaction', ['household_id'])
    op.create_index('ix_transaction_is_recurring', 'transaction', ['is_recurring'])
    op.create_index('ix_transaction_next_payment_date', 'transaction', ['next_payment_date'])

    op.create_table(
        'debt',
        sa.Column('id', sa.Integer(), primary_key=True, nullable=False),
        sa.Column('household_id', sqlmodel.AutoString(), nullable=False),
        sa.Column('creditor', sqlmodel.AutoString(), nullable=False),
        sa.Column('debtor', sqlmodel.AutoString(), nullable=False),
        sa.Column('amount', sa.Float(), nullable=False),
        sa.Column('description', sqlmodel.AutoString(), nullable=True),
        sa.Column('related_transaction_id', sa.Integer(), sa.ForeignKey('transaction.id'), nullable=True),
        sa.Column('is_settled', sa.Boolean(), nullable=False, server_default=sa.false()),
        sa.Column('created_at', sa.DateTime(timezone=True), nullable=False, server_default=sa.func.now()),
    )
    op.create_index('ix_debt_household_id', 'debt', ['household_id'])
    op.create_index('ix_debt_creditor', 'debt', ['creditor'])
    op.create_index('ix_debt_debtor', 'debt', ['debtor'])
    op.create_index('ix_debt_related_transaction_id', 'debt', ['related_transaction_id'])


def downgrade() -> None:
    """Downgrade schema: drop ledger tables."""
    op.drop_table('debt')
    op.drop_table('transaction')
    recurrence_interval.drop(op.get_bind(), checkfirst=True)
