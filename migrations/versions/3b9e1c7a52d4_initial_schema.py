"""initial schema: accounts, catalog, cart, wishlist, checkout

Revision ID: 3b9e1c7a52d4
Revises:
Create Date: 2026-10-19 10:12:31.402117

"""
from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa


# revision identifiers, used by Alembic.
revision: str = '3b9e1c7a52d4'
down_revision: Union[str, Sequence[str], None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def _timestamps():
    return [
        sa.Column('created_at', sa.DateTime(timezone=True), nullable=False),
        sa.Column('updated_at', sa.DateTime(timezone=True), nullable=False),
    ]


def upgrade():
    op.create_table(
        'users',
        sa.Column('id', sa.Integer(), primary_key=True),
        sa.Column('public_id', sa.Uuid(), nullable=False),
        sa.Column('email', sa.String(320), nullable=False),
        sa.Column('first_name', sa.String(128), nullable=True),
        sa.Column('last_name', sa.String(128), nullable=True),
        sa.Column('phone_number', sa.String(20), nullable=True),
        sa.Column('role', sa.String(16), nullable=False),
        *_timestamps(),
        sa.Column('deleted_at', sa.DateTime(timezone=True), nullable=True),
        sa.UniqueConstraint('email', name='users_email_key'),
    )
    op.create_index('ix_users_public_id', 'users', ['public_id'], unique=True)

    op.create_table(
        'credential',
        sa.Column('id', sa.Integer(), primary_key=True),
        sa.Column('user_id', sa.Integer(), sa.ForeignKey('users.id', ondelete='CASCADE'), nullable=False),
        sa.Column('password_hash', sa.Text(), nullable=False),
        *_timestamps(),
    )
    op.create_index('ix_credential_user_id', 'credential', ['user_id'], unique=True)

    op.create_table(
        'product',
        sa.Column('id', sa.Integer(), primary_key=True),
        sa.Column('public_id', sa.Uuid(), nullable=False),
        sa.Column('name', sa.String(100), nullable=False),
        sa.Column('description', sa.String(500), nullable=False),
        sa.Column('price', sa.Numeric(12, 2), nullable=False),
        sa.Column('stock', sa.Integer(), nullable=False),
        sa.Column('category', sa.String(64), nullable=False),
        sa.Column('images', sa.JSON(), nullable=False),
        *_timestamps(),
        sa.Column('deleted_at', sa.DateTime(timezone=True), nullable=True),
    )
    op.create_index('ix_product_public_id', 'product', ['public_id'], unique=True)

    op.create_table(
        'cart',
        sa.Column('id', sa.Integer(), primary_key=True),
        sa.Column('user_id', sa.Integer(), sa.ForeignKey('users.id', ondelete='CASCADE'), nullable=False),
        sa.Column('total_price', sa.Numeric(12, 2), nullable=False),
        *_timestamps(),
    )
    op.create_index('ix_cart_user_id', 'cart', ['user_id'], unique=True)

    op.create_table(
        'cartitem',
        sa.Column('id', sa.Integer(), primary_key=True),
        sa.Column('cart_id', sa.Integer(), sa.ForeignKey('cart.id', ondelete='CASCADE'), nullable=False),
        sa.Column('product_id', sa.Integer(), sa.ForeignKey('product.id'), nullable=False),
        sa.Column('quantity', sa.Integer(), nullable=False),
        sa.Column('created_at', sa.DateTime(timezone=True), nullable=False),
        sa.UniqueConstraint('cart_id', 'product_id', name='uq_cart_product'),
    )
    op.create_index('ix_cartitem_cart_id', 'cartitem', ['cart_id'])

    op.create_table(
        'wishlist',
        sa.Column('id', sa.Integer(), primary_key=True),
        sa.Column('user_id', sa.Integer(), sa.ForeignKey('users.id', ondelete='CASCADE'), nullable=False),
        *_timestamps(),
    )
    op.create_index('ix_wishlist_user_id', 'wishlist', ['user_id'], unique=True)

    op.create_table(
        'wishlistitem',
        sa.Column('id', sa.Integer(), primary_key=True),
        sa.Column('wishlist_id', sa.Integer(), sa.ForeignKey('wishlist.id', ondelete='CASCADE'), nullable=False),
        sa.Column('product_id', sa.Integer(), sa.ForeignKey('product.id', ondelete='CASCADE'), nullable=False),
        sa.Column('created_at', sa.DateTime(timezone=True), nullable=False),
        sa.UniqueConstraint('wishlist_id', 'product_id', name='uq_wishlist_product'),
    )
    op.create_index('ix_wishlistitem_wishlist_id', 'wishlistitem', ['wishlist_id'])

    op.create_table(
        'checkoutrecord',
        sa.Column('id', sa.Integer(), primary_key=True),
        sa.Column('public_id', sa.Uuid(), nullable=False),
        sa.Column('user_id', sa.Integer(), sa.ForeignKey('users.id', ondelete='CASCADE'), nullable=False),
        sa.Column('cart_id', sa.Integer(), nullable=False),
        sa.Column('total_price', sa.Numeric(12, 2), nullable=True),
        sa.Column('payment_method', sa.String(32), nullable=False),
        sa.Column('shipping_address', sa.Text(), nullable=False),
        sa.Column('status', sa.String(16), nullable=False),
        sa.Column('payment_reference', sa.String(128), nullable=False),
        sa.Column('gateway', sa.String(32), nullable=True),
        sa.Column('transaction_id', sa.String(64), nullable=True),
        sa.Column('paid_at', sa.DateTime(timezone=True), nullable=True),
        sa.Column('channel', sa.String(32), nullable=True),
        sa.Column('currency', sa.String(8), nullable=True),
        sa.Column('ip_address', sa.String(64), nullable=True),
        *_timestamps(),
    )
    op.create_index('ix_checkoutrecord_public_id', 'checkoutrecord', ['public_id'], unique=True)
    op.create_index('ix_checkoutrecord_user_id', 'checkoutrecord', ['user_id'])
    op.create_index('ix_checkoutrecord_cart_id', 'checkoutrecord', ['cart_id'])
    op.create_index('ix_checkoutrecord_status', 'checkoutrecord', ['status'])
    op.create_index('ix_checkoutrecord_payment_reference', 'checkoutrecord', ['payment_reference'], unique=True)

    op.create_table(
        'checkoutitem',
        sa.Column('id', sa.Integer(), primary_key=True),
        sa.Column('checkout_id', sa.Integer(), sa.ForeignKey('checkoutrecord.id', ondelete='CASCADE'), nullable=False),
        sa.Column('product_id', sa.Integer(), nullable=False),
        sa.Column('name', sa.String(100), nullable=False),
        sa.Column('unit_price', sa.Numeric(12, 2), nullable=False),
        sa.Column('quantity', sa.Integer(), nullable=False),
        sa.Column('image', sa.String(1024), nullable=False),
    )
    op.create_index('ix_checkoutitem_checkout_id', 'checkoutitem', ['checkout_id'])


def downgrade():
    op.drop_table('checkoutitem')
    op.drop_table('checkoutrecord')
    op.drop_table('wishlistitem')
    op.drop_table('wishlist')
    op.drop_table('cartitem')
    op.drop_table('cart')
    op.drop_table('product')
    op.drop_table('credential')
    op.drop_table('users')
