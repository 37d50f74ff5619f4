"""Initial schema - Pet Store

Revision ID: 0000_initial
Revises:
Create Date: 2026-10-19

Complete database schema including:
- Catalog tables (stores, pets)
- Order tables (orders, order_items)
"""

from alembic import op
import sqlalchemy as sa
from sqlalchemy.dialects.postgresql import UUID

revision = '0000_initial'
down_revision = None
branch_labels = None
depends_on = None


def upgrade():
    # =========================================================================
    # CATALOG TABLES
    # =========================================================================

    op.create_table(
        'stores',
        sa.Column('id', UUID(as_uuid=True), server_default=sa.text('gen_random_uuid()'), nullable=False),
        sa.Column('name', sa.String(100), nullable=False),
        sa.Column('owner_id', sa.String(50), nullable=False),
        sa.Column('created_at', sa.DateTime(timezone=True), server_default=sa.text('now()'), nullable=False),
        sa.Column('updated_at', sa.DateTime(timezone=True), server_default=sa.text('now()'), nullable=False),
        sa.PrimaryKeyConstraint('id'),
        sa.UniqueConstraint('owner_id', name='uq_stores_owner_id')
    )

    op.create_table(
        'pets',
        sa.Column('id', UUID(as_uuid=True), server_default=sa.text('gen_random_uuid()'), nullable=False),
        sa.Column('store_id', UUID(as_uuid=True), nullable=False),
        sa.Column('name', sa.String(100), nullable=False),
        sa.Column('species', sa.String(10), nullable=False),
        sa.Column('age', sa.Integer(), nullable=False),
        sa.Column('picture_url', sa.String(500), nullable=True),
        sa.Column('description', sa.Text(), nullable=True),
        sa.Column('breeder_name', sa.String(100), nullable=False),
        sa.Column('breeder_email_encrypted', sa.Text(), nullable=False),
        sa.Column('status', sa.String(20), server_default='available', nullable=False),
        sa.Column('created_at', sa.DateTime(timezone=True), server_default=sa.text('now()'), nullable=False),
        sa.Column('updated_at', sa.DateTime(timezone=True), server_default=sa.text('now()'), nullable=False),
        sa.PrimaryKeyConstraint('id'),
        sa.ForeignKeyConstraint(['store_id'], ['stores.id'], ondelete='CASCADE'),
        sa.CheckConstraint("status IN ('available', 'sold')", name='ck_pets_status'),
        sa.CheckConstraint("species IN ('Cat', 'Dog', 'Frog')", name='ck_pets_species'),
        sa.CheckConstraint('age >= 0 AND age <= 50', name='ck_pets_age')
    )
    op.create_index('ix_pets_store_id', 'pets', ['store_id'])
    op.create_index('idx_pets_store_status', 'pets', ['store_id', 'status'])
    op.create_index('idx_pets_store_created', 'pets', ['store_id', 'created_at'])

    # =========================================================================
    # ORDER TABLES
    # =========================================================================

    op.create_table(
        'orders',
        sa.Column('id', UUID(as_uuid=True), server_default=sa.text('gen_random_uuid()'), nullable=False),
        sa.Column('customer_id', sa.String(50), nullable=False),
        sa.Column('store_id', UUID(as_uuid=True), nullable=False),
        sa.Column('total_pets', sa.Integer(), nullable=False),
        sa.Column('created_at', sa.DateTime(timezone=True), server_default=sa.text('now()'), nullable=False),
        sa.PrimaryKeyConstraint('id'),
        sa.ForeignKeyConstraint(['store_id'], ['stores.id']),
        sa.CheckConstraint('total_pets >= 1 AND total_pets <= 10', name='ck_orders_total_pets')
    )
    op.create_index('ix_orders_customer_id', 'orders', ['customer_id'])
    op.create_index('ix_orders_store_id', 'orders', ['store_id'])

    op.create_table(
        'order_items',
        sa.Column('id', UUID(as_uuid=True), server_default=sa.text('gen_random_uuid()'), nullable=False),
        sa.Column('order_id', UUID(as_uuid=True), nullable=False),
        sa.Column('pet_id', UUID(as_uuid=True), nullable=False),
        sa.Column('position', sa.Integer(), nullable=False),
        sa.Column('purchased_at', sa.DateTime(timezone=True), server_default=sa.text('now()'), nullable=False),
        sa.PrimaryKeyConstraint('id'),
        sa.ForeignKeyConstraint(['order_id'], ['orders.id'], ondelete='CASCADE'),
        sa.ForeignKeyConstraint(['pet_id'], ['pets.id']),
        sa.UniqueConstraint('pet_id', name='uq_order_items_pet_id')
    )
    op.create_index('ix_order_items_order_id', 'order_items', ['order_id'])
    op.create_index('idx_order_items_order_position', 'order_items', ['order_id', 'position'])


def downgrade():
    op.drop_index('idx_order_items_order_position', table_name='order_items')
    op.drop_index('ix_order_items_order_id', table_name='order_items')
    op.drop_table('order_items')

    op.drop_index('ix_orders_store_id', table_name='orders')
    op.drop_index('ix_orders_customer_id', table_name='orders')
    op.drop_table('orders')

    op.drop_index('idx_pets_store_created', table_name='pets')
    op.drop_index('idx_pets_store_status', table_name='pets')
    op.drop_index('ix_pets_store_id', table_name='pets')
    op.drop_table('pets')

    op.drop_table('stores')
