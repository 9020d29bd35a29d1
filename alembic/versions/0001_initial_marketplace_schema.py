"""initial_marketplace_schema

Revision ID: 0001
Revises:
Create Date: 2026-10-18 09:00:00.000000

"""
from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa
from sqlalchemy.dialects import postgresql


# revision identifiers, used by Alembic.
revision: str = '0001'
down_revision: Union[str, Sequence[str], None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None

user_role_enum = sa.Enum('customer', 'vendor', 'admin', name='user_role_enum')
application_status_enum = sa.Enum(
    'pending', 'approved', 'rejected', name='application_status_enum'
)
order_status_enum = sa.Enum(
    'pending', 'paid', 'delivered', 'cancelled', name='order_status_enum'
)
json_type = sa.JSON().with_variant(postgresql.JSONB(), 'postgresql')


def upgrade() -> None:
    """Upgrade schema - users, vendors, applications, catalog, orders."""

    op.create_table(
        'users',
        sa.Column('id', sa.Uuid(), nullable=False),
        sa.Column('email', sa.String(255), nullable=False),
        sa.Column('password_hash', sa.String(255), nullable=False),
        sa.Column('first_name', sa.String(100), nullable=False),
        sa.Column('last_name', sa.String(100), nullable=False),
        sa.Column('role', user_role_enum, server_default='customer', nullable=False),
        sa.Column('created_at', sa.DateTime(timezone=True), nullable=True),
        sa.PrimaryKeyConstraint('id', name='pk_users'),
        sa.UniqueConstraint('email', name='uq_users_email'),
    )

    op.create_table(
        'vendors',
        sa.Column('id', sa.Uuid(), nullable=False),
        sa.Column('user_id', sa.Uuid(), nullable=False),
        sa.Column('store_name', sa.String(255), nullable=False),
        sa.Column('description', sa.Text(), nullable=True),
        sa.Column('email', sa.String(255), nullable=True),
        sa.Column('phone', sa.String(50), nullable=True),
        sa.Column('address', sa.String(500), nullable=True),
        sa.Column('is_approved', sa.Boolean(), server_default=sa.false(), nullable=False),
        sa.Column('created_at', sa.DateTime(timezone=True), nullable=True),
        sa.ForeignKeyConstraint(
            ['user_id'], ['users.id'],
            name='fk_vendors_user_id_users', ondelete='CASCADE',
        ),
        sa.PrimaryKeyConstraint('id', name='pk_vendors'),
        sa.UniqueConstraint('user_id', name='uq_vendors_user_id'),
    )

    op.create_table(
        'vendor_applications',
        sa.Column('id', sa.Uuid(), nullable=False),
        sa.Column('store_name', sa.String(255), nullable=False),
        sa.Column('email', sa.String(255), nullable=False),
        sa.Column('phone', sa.String(50), nullable=True),
        sa.Column('address', sa.String(500), nullable=True),
        sa.Column('description', sa.Text(), nullable=True),
        sa.Column('status', application_status_enum, server_default='pending', nullable=False),
        sa.Column('user_id', sa.Uuid(), nullable=True),
        sa.Column('vendor_id', sa.Uuid(), nullable=True),
        sa.Column('created_at', sa.DateTime(timezone=True), nullable=True),
        sa.Column('updated_at', sa.DateTime(timezone=True), nullable=True),
        sa.ForeignKeyConstraint(
            ['user_id'], ['users.id'],
            name='fk_vendor_applications_user_id_users', ondelete='SET NULL',
        ),
        sa.ForeignKeyConstraint(
            ['vendor_id'], ['vendors.id'],
            name='fk_vendor_applications_vendor_id_vendors', ondelete='SET NULL',
        ),
        sa.PrimaryKeyConstraint('id', name='pk_vendor_applications'),
        sa.UniqueConstraint('user_id', name='uq_vendor_applications_user_id'),
    )
    op.create_index(
        'ix_vendor_applications_status_created_at',
        'vendor_applications', ['status', 'created_at'],
    )
    op.create_index('ix_vendor_applications_email', 'vendor_applications', ['email'])

    op.create_table(
        'categories',
        sa.Column('id', sa.Uuid(), nullable=False),
        sa.Column('name', sa.String(100), nullable=False),
        sa.Column('description', sa.Text(), nullable=True),
        sa.Column('icon', sa.String(50), nullable=False),
        sa.PrimaryKeyConstraint('id', name='pk_categories'),
        sa.UniqueConstraint('name', name='uq_categories_name'),
    )

    op.create_table(
        'products',
        sa.Column('id', sa.Uuid(), nullable=False),
        sa.Column('vendor_id', sa.Uuid(), nullable=False),
        sa.Column('category_id', sa.Uuid(), nullable=False),
        sa.Column('name', sa.String(255), nullable=False),
        sa.Column('description', sa.Text(), nullable=False),
        sa.Column('price', sa.Numeric(10, 2), nullable=False),
        sa.Column('stock', sa.Integer(), nullable=False),
        sa.Column('image_url', sa.String(1000), nullable=False),
        sa.Column('is_active', sa.Boolean(), server_default=sa.true(), nullable=False),
        sa.Column('created_at', sa.DateTime(timezone=True), nullable=True),
        sa.CheckConstraint('stock >= 0', name='ck_products_non_negative_stock'),
        sa.CheckConstraint('price >= 0', name='ck_products_non_negative_price'),
        sa.ForeignKeyConstraint(
            ['vendor_id'], ['vendors.id'],
            name='fk_products_vendor_id_vendors', ondelete='CASCADE',
        ),
        sa.ForeignKeyConstraint(
            ['category_id'], ['categories.id'],
            name='fk_products_category_id_categories',
        ),
        sa.PrimaryKeyConstraint('id', name='pk_products'),
    )
    op.create_index('ix_products_vendor_id_is_active', 'products', ['vendor_id', 'is_active'])
    op.create_index('ix_products_category_id_is_active', 'products', ['category_id', 'is_active'])

    op.create_table(
        'orders',
        sa.Column('id', sa.Uuid(), nullable=False),
        sa.Column('vendor_id', sa.Uuid(), nullable=False),
        sa.Column('customer_id', sa.Uuid(), nullable=True),
        sa.Column('customer_name', sa.String(255), nullable=False),
        sa.Column('customer_email', sa.String(255), nullable=False),
        sa.Column('customer_phone', sa.String(50), nullable=True),
        sa.Column('currency', sa.String(8), server_default='NLE', nullable=False),
        sa.Column('rate', sa.Numeric(12, 4), server_default='1', nullable=False),
        sa.Column('subtotal', sa.Numeric(14, 2), nullable=False),
        sa.Column('shipping_fee', sa.Numeric(14, 2), server_default='0', nullable=False),
        sa.Column('total', sa.Numeric(14, 2), nullable=False),
        sa.Column('payment_method', sa.String(50), nullable=False),
        sa.Column('notes', sa.Text(), nullable=True),
        sa.Column('shipping_address', json_type, nullable=False),
        sa.Column('status', order_status_enum, server_default='pending', nullable=False),
        sa.Column('created_at', sa.DateTime(timezone=True), nullable=True),
        sa.ForeignKeyConstraint(
            ['vendor_id'], ['vendors.id'],
            name='fk_orders_vendor_id_vendors', ondelete='CASCADE',
        ),
        sa.ForeignKeyConstraint(
            ['customer_id'], ['users.id'],
            name='fk_orders_customer_id_users', ondelete='SET NULL',
        ),
        sa.PrimaryKeyConstraint('id', name='pk_orders'),
    )
    op.create_index('ix_orders_vendor_id_created_at', 'orders', ['vendor_id', 'created_at'])
    op.create_index('ix_orders_customer_id', 'orders', ['customer_id'])

    op.create_table(
        'order_items',
        sa.Column('id', sa.Uuid(), nullable=False),
        sa.Column('order_id', sa.Uuid(), nullable=False),
        sa.Column('product_id', sa.Uuid(), nullable=False),
        sa.Column('vendor_id', sa.Uuid(), nullable=False),
        sa.Column('name', sa.String(255), nullable=False),
        sa.Column('image_url', sa.String(1000), nullable=True),
        sa.Column('price', sa.Numeric(14, 2), nullable=False),
        sa.Column('quantity', sa.Integer(), nullable=False),
        sa.Column('position', sa.Integer(), nullable=False),
        sa.CheckConstraint('quantity > 0', name='ck_order_items_positive_quantity'),
        sa.ForeignKeyConstraint(
            ['order_id'], ['orders.id'],
            name='fk_order_items_order_id_orders', ondelete='CASCADE',
        ),
        sa.ForeignKeyConstraint(
            ['product_id'], ['products.id'],
            name='fk_order_items_product_id_products',
        ),
        sa.ForeignKeyConstraint(
            ['vendor_id'], ['vendors.id'],
            name='fk_order_items_vendor_id_vendors', ondelete='CASCADE',
        ),
        sa.PrimaryKeyConstraint('id', name='pk_order_items'),
    )
    op.create_index('ix_order_items_order_id', 'order_items', ['order_id'])


def downgrade() -> None:
    """Downgrade schema - drop every marketplace table."""
    op.drop_index('ix_order_items_order_id', table_name='order_items')
    op.drop_table('order_items')
    op.drop_index('ix_orders_customer_id', table_name='orders')
    op.drop_index('ix_orders_vendor_id_created_at', table_name='orders')
    op.drop_table('orders')
    op.drop_index('ix_products_category_id_is_active', table_name='products')
    op.drop_index('ix_products_vendor_id_is_active', table_name='products')
    op.drop_table('products')
    op.drop_table('categories')
    op.drop_index('ix_vendor_applications_email', table_name='vendor_applications')
    op.drop_index('ix_vendor_applications_status_created_at', table_name='vendor_applications')
    op.drop_table('vendor_applications')
    op.drop_table('vendors')
    op.drop_table('users')

    bind = op.get_bind()
    order_status_enum.drop(bind, checkfirst=True)
    application_status_enum.drop(bind, checkfirst=True)
    user_role_enum.drop(bind, checkfirst=True)
