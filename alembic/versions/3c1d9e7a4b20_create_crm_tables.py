"""Create CRM client and order tables

Revision ID: 3c1d9e7a4b20
Revises:
Create Date: 2026-10-12 09:00:00.000000

"""
from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa
from sqlalchemy.dialects import postgresql


# revision identifiers, used by Alembic.
revision: str = '3c1d9e7a4b20'
down_revision: Union[str, None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def upgrade() -> None:
    # gen_random_uuid() is built in from Postgres 13; older servers need pgcrypto
    op.execute('CREATE EXTENSION IF NOT EXISTS pgcrypto')

    op.create_table('manual_clients',
    sa.Column('id', postgresql.UUID(as_uuid=True), server_default=sa.text('gen_random_uuid()'), nullable=False),
    sa.Column('first_name', sa.String(length=255), nullable=False),
    sa.Column('last_name', sa.String(length=255), nullable=False),
    sa.Column('email', sa.String(length=255), nullable=False),
    sa.Column('phone', sa.String(length=50), nullable=True),
    sa.Column('address', sa.String(length=500), nullable=True),
    sa.Column('city', sa.String(length=255), nullable=True),
    sa.Column('postcode', sa.String(length=20), nullable=True),
    sa.Column('created_at', sa.DateTime(timezone=True), server_default=sa.text('now()'), nullable=False),
    sa.PrimaryKeyConstraint('id')
    )
    op.create_index(op.f('ix_manual_clients_email'), 'manual_clients', ['email'], unique=True)
    op.create_index(op.f('ix_manual_clients_phone'), 'manual_clients', ['phone'], unique=False)

    op.create_table('manual_orders',
    sa.Column('id', postgresql.UUID(as_uuid=True), server_default=sa.text('gen_random_uuid()'), nullable=False),
    sa.Column('client_id', postgresql.UUID(as_uuid=True), nullable=False),
    sa.Column('product_name', sa.String(length=255), nullable=False),
    sa.Column('start_date', sa.Date(), nullable=False),
    sa.Column('duration_days', sa.Integer(), nullable=False),
    sa.Column('address', sa.String(length=500), nullable=False),
    sa.Column('payment_method', sa.String(length=100), server_default='gotovina', nullable=False),
    sa.Column('status', sa.String(length=50), server_default='processing', nullable=False),
    sa.Column('customer_note', sa.Text(), nullable=True),
    sa.Column('created_at', sa.DateTime(timezone=True), server_default=sa.text('now()'), nullable=False),
    sa.ForeignKeyConstraint(['client_id'], ['manual_clients.id'], ondelete='RESTRICT'),
    sa.PrimaryKeyConstraint('id')
    )
    op.create_index(op.f('ix_manual_orders_client_id'), 'manual_orders', ['client_id'], unique=False)
    op.create_index(op.f('ix_manual_orders_start_date'), 'manual_orders', ['start_date'], unique=False)

    op.create_table('cached_clients',
    sa.Column('id', postgresql.UUID(as_uuid=True), server_default=sa.text('gen_random_uuid()'), nullable=False),
    sa.Column('email', sa.String(length=255), nullable=False),
    sa.Column('phone', sa.String(length=50), nullable=True),
    sa.Column('first_name', sa.String(length=255), nullable=False),
    sa.Column('last_name', sa.String(length=255), nullable=False),
    sa.Column('address', sa.String(length=500), nullable=True),
    sa.Column('city', sa.String(length=255), nullable=True),
    sa.Column('wc_customer_id', sa.Integer(), nullable=True),
    sa.Column('source', sa.Enum('guest', 'registered', name='clientsource'), nullable=False),
    sa.Column('order_count', sa.Integer(), server_default='0', nullable=False),
    sa.Column('last_order_date', sa.DateTime(timezone=True), nullable=True),
    sa.Column('updated_at', sa.DateTime(timezone=True), server_default=sa.text('now()'), nullable=False),
    sa.PrimaryKeyConstraint('id')
    )
    op.create_index(op.f('ix_cached_clients_email'), 'cached_clients', ['email'], unique=True)
    op.create_index(op.f('ix_cached_clients_phone'), 'cached_clients', ['phone'], unique=False)

    op.create_table('cached_client_orders',
    sa.Column('order_id', sa.Integer(), autoincrement=False, nullable=False),
    sa.Column('email', sa.String(length=255), nullable=False),
    sa.Column('recorded_at', sa.DateTime(timezone=True), server_default=sa.text('now()'), nullable=False),
    sa.PrimaryKeyConstraint('order_id')
    )
    op.create_index(op.f('ix_cached_client_orders_email'), 'cached_client_orders', ['email'], unique=False)


def downgrade() -> None:
    op.drop_index(op.f('ix_cached_client_orders_email'), table_name='cached_client_orders')
    op.drop_table('cached_client_orders')
    op.drop_index(op.f('ix_cached_clients_phone'), table_name='cached_clients')
    op.drop_index(op.f('ix_cached_clients_email'), table_name='cached_clients')
    op.drop_table('cached_clients')
    sa.Enum('guest', 'registered', name='clientsource').drop(op.get_bind(), checkfirst=True)
    op.drop_index(op.f('ix_manual_orders_start_date'), table_name='manual_orders')
    op.drop_index(op.f('ix_manual_orders_client_id'), table_name='manual_orders')
    op.drop_table('manual_orders')
    op.drop_index(op.f('ix_manual_clients_phone'), table_name='manual_clients')
    op.drop_index(op.f('ix_manual_clients_email'), table_name='manual_clients')
    op.drop_table('manual_clients')
