"""create users, accounts, categories, transactions, budgets and projections tables

Revision ID: 3f1c2a9b7d10
Revises:
Create Date: 2026-10-18 10:12:44.318207

"""
from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa


# revision identifiers, used by Alembic.
revision: str = '3f1c2a9b7d10'
down_revision: Union[str, Sequence[str], None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


ACCOUNT_TYPES = ('CHECKING', 'SAVINGS', 'INVESTMENT', 'CREDIT_CARD', 'LOAN', 'MORTGAGE',
                 'OTHER_ASSET', 'OTHER_LIABILITY')


def _timestamps():
    return [
        sa.Column('created_at', sa.DateTime, nullable=False),
        sa.Column('updated_at', sa.DateTime, nullable=False),
    ]


def upgrade() -> None:
    op.create_table(
        'users',
        sa.Column('id', sa.Uuid, primary_key=True),
        sa.Column('firebase_uid', sa.String(128), nullable=False),
        sa.Column('email', sa.String(255), nullable=False),
        sa.Column('display_name', sa.String(100), nullable=True),
        sa.Column('photo_url', sa.String(500), nullable=True),
        sa.Column('date_of_birth', sa.Date, nullable=True),
        sa.Column('role', sa.Enum('USER', 'ADMIN', name='userrole'), nullable=False),
        *_timestamps(),
        sa.UniqueConstraint('firebase_uid', name='uq_user_firebase_uid'),
        sa.UniqueConstraint('email', name='uq_user_email'),
    )
    op.create_index('idx_users_email', 'users', ['email'])

    op.create_table(
        'accounts',
        sa.Column('id', sa.Uuid, primary_key=True),
        sa.Column('user_id', sa.Uuid, sa.ForeignKey('users.id', ondelete='CASCADE'), nullable=False),
        sa.Column('name', sa.String(100), nullable=False),
        sa.Column('type', sa.Enum(*ACCOUNT_TYPES, name='accounttype'), nullable=False),
        sa.Column('subtype', sa.String(50), nullable=True),
        sa.Column('institution', sa.String(100), nullable=True),
        sa.Column('account_number', sa.String(20), nullable=True),
        sa.Column('balance', sa.DECIMAL(15, 2), nullable=False),
        sa.Column('currency', sa.String(3), nullable=False),
        sa.Column('interest_rate', sa.DECIMAL(7, 4), nullable=True),
        sa.Column('is_active', sa.Boolean, nullable=False),
        *_timestamps(),
    )
    op.create_index('idx_accounts_user', 'accounts', ['user_id'])

    op.create_table(
        'categories',
        sa.Column('id', sa.Uuid, primary_key=True),
        sa.Column('user_id', sa.Uuid, sa.ForeignKey('users.id', ondelete='CASCADE'), nullable=False),
        sa.Column('parent_id', sa.Uuid, sa.ForeignKey('categories.id', ondelete='SET NULL'), nullable=True),
        sa.Column('name', sa.String(50), nullable=False),
        sa.Column('type', sa.Enum('INCOME', 'EXPENSE', name='categorytype'), nullable=False),
        sa.Column('color', sa.String(7), nullable=True),
        sa.Column('icon', sa.String(50), nullable=True),
        sa.Column('is_default', sa.Boolean, nullable=False),
        *_timestamps(),
        sa.UniqueConstraint('user_id', 'name', 'type', name='uq_user_category_name_type'),
    )

    op.create_table(
        'transactions',
        sa.Column('id', sa.Uuid, primary_key=True),
        sa.Column('user_id', sa.Uuid, sa.ForeignKey('users.id', ondelete='CASCADE'), nullable=False),
        sa.Column('account_id', sa.Uuid, sa.ForeignKey('accounts.id', ondelete='CASCADE'), nullable=False),
        sa.Column('category_id', sa.Uuid, sa.ForeignKey('categories.id', ondelete='SET NULL'), nullable=True),
        sa.Column('amount', sa.DECIMAL(15, 2), nullable=False),
        sa.Column('type', sa.Enum('INCOME', 'EXPENSE', name='transactiontype'), nullable=False),
        sa.Column('transaction_date', sa.Date, nullable=False),
        sa.Column('description', sa.String(200), nullable=True),
        sa.Column('notes', sa.String(500), nullable=True),
        sa.Column('is_recurring', sa.Boolean, nullable=False),
        sa.Column('recurring_id', sa.Uuid, nullable=True),
        *_timestamps(),
    )
    op.create_index('idx_transactions_user_date', 'transactions', ['user_id', 'transaction_date'])
    op.create_index('idx_transactions_user_account', 'transactions', ['user_id', 'account_id'])

    op.create_table(
        'budgets',
        sa.Column('id', sa.Uuid, primary_key=True),
        sa.Column('user_id', sa.Uuid, sa.ForeignKey('users.id', ondelete='CASCADE'), nullable=False),
        sa.Column('category_id', sa.Uuid, sa.ForeignKey('categories.id', ondelete='CASCADE'), nullable=False),
        sa.Column('amount', sa.DECIMAL(15, 2), nullable=False),
        sa.Column('period', sa.Enum('WEEKLY', 'MONTHLY', 'QUARTERLY', 'YEARLY', name='budgetperiod'), nullable=False),
        sa.Column('start_date', sa.Date, nullable=False),
        sa.Column('end_date', sa.Date, nullable=True),
        sa.Column('is_active', sa.Boolean, nullable=False),
        *_timestamps(),
    )

    op.create_table(
        'projections',
        sa.Column('id', sa.Uuid, primary_key=True),
        sa.Column('user_id', sa.Uuid, sa.ForeignKey('users.id', ondelete='CASCADE'), nullable=False),
        sa.Column('name', sa.String(100), nullable=False),
        sa.Column('description', sa.String(500), nullable=True),
        sa.Column('income_growth_rate', sa.DECIMAL(7, 3), nullable=False),
        sa.Column('investment_return', sa.DECIMAL(7, 3), nullable=False),
        sa.Column('inflation_rate', sa.DECIMAL(7, 3), nullable=False),
        sa.Column('expense_growth', sa.Enum('INFLATION', 'FLAT', name='expensegrowth'), nullable=False),
        sa.Column('expected_salary', sa.DECIMAL(15, 2), nullable=True),
        sa.Column('expected_expenses', sa.DECIMAL(15, 2), nullable=True),
        sa.Column('years', sa.Integer, nullable=False),
        *_timestamps(),
        sa.UniqueConstraint('user_id', 'name', name='uq_user_projection_name'),
    )


def downgrade() -> None:
    op.drop_table('projections')
    op.drop_table('budgets')
    op.drop_index('idx_transactions_user_account', table_name='transactions')
    op.drop_index('idx_transactions_user_date', table_name='transactions')
    op.drop_table('transactions')
    op.drop_table('categories')
    op.drop_index('idx_accounts_user', table_name='accounts')
    op.drop_table('accounts')
    op.drop_index('idx_users_email', table_name='users')
    op.drop_table('users')
    for enum_name in ('expensegrowth', 'budgetperiod', 'transactiontype', 'categorytype', 'accounttype', 'userrole'):
        sa.Enum(name=enum_name).drop(op.get_bind(), checkfirst=True)
