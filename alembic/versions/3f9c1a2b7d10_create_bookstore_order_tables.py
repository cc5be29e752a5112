"""create bookstore order tables

Revision ID: 3f9c1a2b7d10
Revises:
Create Date: 2026-10-18 09:12:40.118302

"""
from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa


# revision identifiers, used by Alembic.
revision: str = '3f9c1a2b7d10'
down_revision: Union[str, Sequence[str], None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None

cart_status = sa.Enum('ACTIVE', 'CONVERTED', name='cartstatus')
discount_type = sa.Enum('PERCENTAGE', 'FIXED_AMOUNT', name='discounttype')
order_status = sa.Enum(
    'PENDING', 'CONFIRMED', 'SHIPPED', 'DELIVERED', 'CANCELLED', 'RETURNED',
    name='orderstatus',
)
payment_status = sa.Enum('PENDING', 'PAID', 'REFUNDED', name='paymentstatus')
return_status = sa.Enum('REQUESTED', 'APPROVED', 'REJECTED', 'PROCESSED', name='returnstatus')


def upgrade() -> None:
    op.create_table(
        'user',
        sa.Column('id', sa.Integer(), primary_key=True, nullable=False),
        sa.Column('username', sa.String(), nullable=False),
        sa.Column('email', sa.String(), nullable=False),
        sa.Column('role', sa.String(), nullable=False),
        sa.Column('can_login', sa.Boolean(), nullable=False),
        sa.Column('created_at', sa.DateTime(), nullable=False),
    )
    op.create_index('ix_user_username', 'user', ['username'], unique=True)

    op.create_table(
        'category',
        sa.Column('id', sa.Integer(), primary_key=True, nullable=False),
        sa.Column('name', sa.String(), nullable=False),
        sa.Column('description', sa.String(), nullable=True),
        sa.Column('created_at', sa.DateTime(), nullable=False),
    )
    op.create_index('ix_category_name', 'category', ['name'], unique=True)

    op.create_table(
        'book',
        sa.Column('id', sa.Integer(), primary_key=True, nullable=False),
        sa.Column('title', sa.String(), nullable=False),
        sa.Column('author', sa.String(), nullable=False),
        sa.Column('price', sa.Numeric(precision=10, scale=2), nullable=False),
        sa.Column('stock', sa.Integer(), nullable=False),
        sa.Column('created_at', sa.DateTime(), nullable=False),
        sa.Column('updated_at', sa.DateTime(), nullable=False),
        sa.Column('category_id', sa.Integer(), sa.ForeignKey('category.id'), nullable=True),
        sa.CheckConstraint('stock >= 0', name='ck_book_stock_non_negative'),
    )

    op.create_table(
        'discountcode',
        sa.Column('id', sa.Integer(), primary_key=True, nullable=False),
        sa.Column('code', sa.String(), nullable=False),
        sa.Column('description', sa.String(), nullable=True),
        sa.Column('discount_type', discount_type, nullable=False),
        sa.Column('discount_value', sa.Numeric(precision=10, scale=2), nullable=False),
        sa.Column('valid_from', sa.DateTime(), nullable=False),
        sa.Column('valid_to', sa.DateTime(), nullable=False),
        sa.Column('min_order_amount', sa.Numeric(precision=10, scale=2), nullable=False),
        sa.Column('max_discount', sa.Numeric(precision=10, scale=2), nullable=True),
        sa.Column('usage_limit', sa.Integer(), nullable=True),
        sa.Column('used_count', sa.Integer(), nullable=False),
        sa.Column('is_active', sa.Boolean(), nullable=False),
        sa.Column('created_at', sa.DateTime(), nullable=False),
        sa.Column('updated_at', sa.DateTime(), nullable=False),
    )
    op.create_index('ix_discountcode_code', 'discountcode', ['code'], unique=True)

    op.create_table(
        'cart',
        sa.Column('id', sa.Integer(), primary_key=True, nullable=False),
        sa.Column('user_id', sa.Integer(), sa.ForeignKey('user.id'), nullable=False),
        sa.Column('status', cart_status, nullable=False),
        sa.Column('created_at', sa.DateTime(), nullable=False),
        sa.Column('updated_at', sa.DateTime(), nullable=False),
    )
    op.create_index('ix_cart_user_id', 'cart', ['user_id'])
    op.create_index(
        'uq_cart_active_user', 'cart', ['user_id'],
        unique=True,
        postgresql_where=sa.text("status = 'ACTIVE'"),
        sqlite_where=sa.text("status = 'ACTIVE'"),
    )

    op.create_table(
        'cartitem',
        sa.Column('id', sa.Integer(), primary_key=True, nullable=False),
        sa.Column('cart_id', sa.Integer(), sa.ForeignKey('cart.id'), nullable=False),
        sa.Column('book_id', sa.Integer(), sa.ForeignKey('book.id'), nullable=False),
        sa.Column('quantity', sa.Integer(), nullable=False),
        sa.Column('created_at', sa.DateTime(), nullable=False),
        sa.UniqueConstraint('cart_id', 'book_id', name='uq_cartitem_cart_book'),
    )
    op.create_index('ix_cartitem_cart_id', 'cartitem', ['cart_id'])

    op.create_table(
        'order',
        sa.Column('id', sa.Integer(), primary_key=True, nullable=False),
        sa.Column('order_number', sa.String(), nullable=False),
        sa.Column('user_id', sa.Integer(), sa.ForeignKey('user.id'), nullable=False),
        sa.Column('order_date', sa.DateTime(), nullable=False),
        sa.Column('status', order_status, nullable=False),
        sa.Column('payment_status', payment_status, nullable=False),
        sa.Column('original_amount', sa.Numeric(precision=10, scale=2), nullable=False),
        sa.Column('discount_amount', sa.Numeric(precision=10, scale=2), nullable=False),
        sa.Column('total_amount', sa.Numeric(precision=10, scale=2), nullable=False),
        sa.Column('applied_discount_code_id', sa.Integer(), sa.ForeignKey('discountcode.id'), nullable=True),
        sa.Column('shipping_address', sa.String(), nullable=True),
        sa.Column('billing_address', sa.String(), nullable=True),
        sa.Column('customer_email', sa.String(), nullable=True),
        sa.Column('customer_phone', sa.String(), nullable=True),
        sa.Column('delivered_date', sa.DateTime(), nullable=True),
        sa.Column('cancelled_date', sa.DateTime(), nullable=True),
        sa.Column('updated_at', sa.DateTime(), nullable=False),
    )
    op.create_index('ix_order_order_number', 'order', ['order_number'], unique=True)
    op.create_index('ix_order_user_id', 'order', ['user_id'])

    op.create_table(
        'orderitem',
        sa.Column('id', sa.Integer(), primary_key=True, nullable=False),
        sa.Column('order_id', sa.Integer(), sa.ForeignKey('order.id'), nullable=False),
        sa.Column('book_id', sa.Integer(), sa.ForeignKey('book.id'), nullable=False),
        sa.Column('quantity', sa.Integer(), nullable=False),
        sa.Column('unit_price', sa.Numeric(precision=10, scale=2), nullable=False),
        sa.Column('total_price', sa.Numeric(precision=10, scale=2), nullable=False),
    )
    op.create_index('ix_orderitem_order_id', 'orderitem', ['order_id'])

    op.create_table(
        'returnrequest',
        sa.Column('id', sa.Integer(), primary_key=True, nullable=False),
        sa.Column('return_number', sa.String(), nullable=False),
        sa.Column('order_id', sa.Integer(), sa.ForeignKey('order.id'), nullable=False),
        sa.Column('book_id', sa.Integer(), sa.ForeignKey('book.id'), nullable=False),
        sa.Column('user_id', sa.Integer(), sa.ForeignKey('user.id'), nullable=False),
        sa.Column('quantity', sa.Integer(), nullable=False),
        sa.Column('reason', sa.String(), nullable=False),
        sa.Column('status', return_status, nullable=False),
        sa.Column('refund_amount', sa.Numeric(precision=10, scale=2), nullable=False),
        sa.Column('admin_notes', sa.String(), nullable=True),
        sa.Column('request_date', sa.DateTime(), nullable=False),
        sa.Column('processed_date', sa.DateTime(), nullable=True),
        sa.Column('updated_at', sa.DateTime(), nullable=False),
    )
    op.create_index('ix_returnrequest_return_number', 'returnrequest', ['return_number'], unique=True)
    op.create_index('ix_returnrequest_order_id', 'returnrequest', ['order_id'])
    op.create_index('ix_returnrequest_user_id', 'returnrequest', ['user_id'])

    op.create_table(
        'review',
        sa.Column('id', sa.Integer(), primary_key=True, nullable=False),
        sa.Column('book_id', sa.Integer(), sa.ForeignKey('book.id'), nullable=False),
        sa.Column('user_id', sa.Integer(), sa.ForeignKey('user.id'), nullable=False),
        sa.Column('rating', sa.Integer(), nullable=False),
        sa.Column('title', sa.String(), nullable=True),
        sa.Column('comment', sa.String(), nullable=True),
        sa.Column('is_verified_purchase', sa.Boolean(), nullable=False),
        sa.Column('created_at', sa.DateTime(), nullable=False),
        sa.UniqueConstraint('book_id', 'user_id', name='uq_review_book_user'),
    )
    op.create_index('ix_review_book_id', 'review', ['book_id'])
    op.create_index('ix_review_user_id', 'review', ['user_id'])


def downgrade() -> None:
    op.drop_table('review')
    op.drop_table('returnrequest')
    op.drop_table('orderitem')
    op.drop_table('order')
    op.drop_table('cartitem')
    op.drop_table('cart')
    op.drop_table('discountcode')
    op.drop_table('book')
    op.drop_table('category')
    op.drop_table('user')

    bind = op.get_bind()
    for enum_type in (return_status, payment_status, order_status, discount_type, cart_status):
        enum_type.drop(bind, checkfirst=True)
