"""create cityvizor tables

Revision ID: 3f9c1a7d2b10
Revises:
Create Date: 2026-10-19

"""
from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa


# revision identifiers, used by Alembic.
revision: str = '3f9c1a7d2b10'
down_revision: Union[str, None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def upgrade() -> None:
    op.execute("CREATE SCHEMA IF NOT EXISTS app")
    op.execute("CREATE SCHEMA IF NOT EXISTS data")

    # 1. profiles
    op.create_table(
        'profiles',
        sa.Column('id', sa.Integer(), primary_key=True),
        sa.Column('name', sa.String(255), nullable=True),
        sa.Column('status', sa.String(16), nullable=False),
        sa.Column('url', sa.String(255), nullable=True),
        sa.Column('email', sa.String(255), nullable=True),
        sa.Column('ico', sa.String(32), nullable=True),
        sa.Column('edesky', sa.Integer(), nullable=True),
        sa.Column('mapasamospravy', sa.Integer(), nullable=True),
        sa.Column('gps_x', sa.Numeric(precision=12, scale=8), nullable=True),
        sa.Column('gps_y', sa.Numeric(precision=12, scale=8), nullable=True),
        sa.Column('avatar_type', sa.String(16), nullable=True),
        schema='app',
    )

    # 2. years
    op.create_table(
        'years',
        sa.Column('profile_id', sa.Integer(), nullable=False),
        sa.Column('year', sa.SmallInteger(), nullable=False),
        sa.Column('validity', sa.Date(), nullable=True),
        sa.Column('hidden', sa.Boolean(), nullable=False, server_default='false'),
        sa.PrimaryKeyConstraint('profile_id', 'year'),
        schema='app',
    )

    # 3. events
    op.create_table(
        'events',
        sa.Column('profile_id', sa.Integer(), nullable=False),
        sa.Column('year', sa.SmallInteger(), nullable=False),
        sa.Column('id', sa.Integer(), autoincrement=False, nullable=False),
        sa.Column('name', sa.Text(), nullable=True),
        sa.PrimaryKeyConstraint('profile_id', 'year', 'id'),
        schema='data',
    )

    # 4. payments
    op.create_table(
        'payments',
        sa.Column('id', sa.Integer(), primary_key=True),
        sa.Column('profile_id', sa.Integer(), nullable=False),
        sa.Column('year', sa.SmallInteger(), nullable=True),
        sa.Column('paragraph', sa.Integer(), nullable=True),
        sa.Column('item', sa.Integer(), nullable=True),
        sa.Column('unit', sa.Integer(), nullable=True),
        sa.Column('event', sa.Integer(), nullable=True),
        sa.Column('amount', sa.Numeric(precision=20, scale=2), nullable=False, server_default='0'),
        sa.Column('date', sa.Date(), nullable=True),
        sa.Column('counterparty_id', sa.String(64), nullable=True),
        sa.Column('counterparty_name', sa.Text(), nullable=True),
        sa.Column('description', sa.Text(), nullable=True),
        schema='data',
    )
    op.create_index('ix_payments_profile_year', 'payments', ['profile_id', 'year'], schema='data')

    # 5. accounting
    op.create_table(
        'accounting',
        sa.Column('id', sa.Integer(), primary_key=True),
        sa.Column('profile_id', sa.Integer(), nullable=False),
        sa.Column('year', sa.SmallInteger(), nullable=False),
        sa.Column('type', sa.String(3), nullable=False),
        sa.Column('paragraph', sa.Integer(), nullable=True),
        sa.Column('item', sa.Integer(), nullable=True),
        sa.Column('unit', sa.Integer(), nullable=True),
        sa.Column('event', sa.Integer(), nullable=True),
        sa.Column('amount', sa.Numeric(precision=20, scale=2), nullable=False),
        sa.CheckConstraint("type IN ('UCT', 'ROZ')", name='ck_accounting_type'),
        schema='data',
    )
    op.create_index('ix_accounting_profile_year', 'accounting', ['profile_id', 'year'], schema='data')


def downgrade() -> None:
    op.drop_index('ix_accounting_profile_year', table_name='accounting', schema='data')
    op.drop_table('accounting', schema='data')
    op.drop_index('ix_payments_profile_year', table_name='payments', schema='data')
    op.drop_table('payments', schema='data')
    op.drop_table('events', schema='data')
    op.drop_table('years', schema='app')
    op.drop_table('profiles', schema='app')
