"""baseline_schema

Revision ID: 3a1c9e0b7d21
Revises:
Create Date: 2026-10-19 09:12:44.518203

Creates the full schema. Tables that already exist are left alone so the
migration can be stamped onto a database created by init_db().
"""
from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa
from sqlalchemy import inspect


# revision identifiers, used by Alembic.
revision: str = '3a1c9e0b7d21'
down_revision: Union[str, None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None

OPEN_STATUS_CLAUSE = "status IN ('PENDING', 'ACTIVE')"


def table_exists(table_name: str) -> bool:
    bind = op.get_bind()
    return table_name in inspect(bind).get_table_names()


def _timestamps():
    return [
        sa.Column('created_at', sa.DateTime(), nullable=False),
        sa.Column('updated_at', sa.DateTime(), nullable=False),
    ]


def upgrade() -> None:
    if not table_exists('accounts'):
        op.create_table('accounts',
            sa.Column('id', sa.Integer(), nullable=False),
            sa.Column('email', sa.String(length=255), nullable=False),
            sa.Column('phone', sa.String(length=32), nullable=True),
            sa.Column('password_hash', sa.String(), nullable=False),
            sa.Column('user_type', sa.String(length=20), nullable=False),
            sa.Column('email_verified', sa.Boolean(), nullable=False),
            sa.Column('is_active', sa.Boolean(), nullable=False),
            sa.Column('last_login_at', sa.DateTime(), nullable=True),
            *_timestamps(),
            sa.PrimaryKeyConstraint('id'),
            sa.UniqueConstraint('phone'),
        )
        op.create_index(op.f('ix_accounts_id'), 'accounts', ['id'], unique=False)
        op.create_index(op.f('ix_accounts_email'), 'accounts', ['email'], unique=True)

    if not table_exists('refresh_tokens'):
        op.create_table('refresh_tokens',
            sa.Column('id', sa.Integer(), nullable=False),
            sa.Column('account_id', sa.Integer(), nullable=False),
            sa.Column('token', sa.String(length=512), nullable=False),
            sa.Column('expires_at', sa.DateTime(), nullable=False),
            sa.Column('revoked_at', sa.DateTime(), nullable=True),
            sa.Column('created_at', sa.DateTime(), nullable=False),
            sa.ForeignKeyConstraint(['account_id'], ['accounts.id'], ondelete='CASCADE'),
            sa.PrimaryKeyConstraint('id'),
            sa.UniqueConstraint('token'),
        )
        op.create_index(op.f('ix_refresh_tokens_id'), 'refresh_tokens', ['id'], unique=False)
        op.create_index(op.f('ix_refresh_tokens_account_id'), 'refresh_tokens', ['account_id'], unique=False)

    if not table_exists('email_verifications'):
        op.create_table('email_verifications',
            sa.Column('id', sa.Integer(), nullable=False),
            sa.Column('email', sa.String(length=255), nullable=False),
            sa.Column('otp', sa.String(length=6), nullable=False),
            sa.Column('account_id', sa.Integer(), nullable=True),
            sa.Column('expires_at', sa.DateTime(), nullable=False),
            sa.Column('verified_at', sa.DateTime(), nullable=True),
            sa.Column('created_at', sa.DateTime(), nullable=False),
            sa.ForeignKeyConstraint(['account_id'], ['accounts.id'], ondelete='CASCADE'),
            sa.PrimaryKeyConstraint('id'),
        )
        op.create_index(op.f('ix_email_verifications_id'), 'email_verifications', ['id'], unique=False)
        op.create_index(op.f('ix_email_verifications_email'), 'email_verifications', ['email'], unique=False)

    if not table_exists('user_profiles'):
        op.create_table('user_profiles',
            sa.Column('id', sa.Integer(), nullable=False),
            sa.Column('account_id', sa.Integer(), nullable=False),
            sa.Column('username', sa.String(length=50), nullable=False),
            sa.Column('first_name', sa.String(length=100), nullable=True),
            sa.Column('last_name', sa.String(length=100), nullable=True),
            sa.Column('avatar_url', sa.String(), nullable=True),
            sa.Column('height', sa.Float(), nullable=True),
            sa.Column('weight', sa.Float(), nullable=True),
            sa.Column('age', sa.Integer(), nullable=True),
            sa.Column('gender', sa.String(length=20), nullable=True),
            *_timestamps(),
            sa.ForeignKeyConstraint(['account_id'], ['accounts.id'], ondelete='CASCADE'),
            sa.PrimaryKeyConstraint('id'),
            sa.UniqueConstraint('account_id'),
        )
        op.create_index(op.f('ix_user_profiles_id'), 'user_profiles', ['id'], unique=False)
        op.create_index(op.f('ix_user_profiles_username'), 'user_profiles', ['username'], unique=True)

    if not table_exists('gyms'):
        op.create_table('gyms',
            sa.Column('id', sa.Integer(), nullable=False),
            sa.Column('owner_id', sa.Integer(), nullable=False),
            sa.Column('name', sa.String(length=200), nullable=False),
            sa.Column('slug', sa.String(length=200), nullable=False),
            sa.Column('description', sa.Text(), nullable=True),
            sa.Column('address', sa.String(), nullable=True),
            sa.Column('city', sa.String(length=100), nullable=True),
            sa.Column('region', sa.String(length=100), nullable=True),
            sa.Column('country', sa.String(length=100), nullable=False),
            sa.Column('latitude', sa.Float(), nullable=True),
            sa.Column('longitude', sa.Float(), nullable=True),
            sa.Column('phone', sa.String(length=32), nullable=True),
            sa.Column('email', sa.String(length=255), nullable=True),
            sa.Column('website', sa.String(), nullable=True),
            sa.Column('logo_url', sa.String(), nullable=True),
            sa.Column('cover_image_url', sa.String(), nullable=True),
            sa.Column('operating_hours', sa.JSON(), nullable=True),
            sa.Column('is_active', sa.Boolean(), nullable=False),
            *_timestamps(),
            sa.ForeignKeyConstraint(['owner_id'], ['user_profiles.id'], ),
            sa.PrimaryKeyConstraint('id'),
        )
        op.create_index(op.f('ix_gyms_id'), 'gyms', ['id'], unique=False)
        op.create_index(op.f('ix_gyms_owner_id'), 'gyms', ['owner_id'], unique=False)
        op.create_index(op.f('ix_gyms_slug'), 'gyms', ['slug'], unique=True)

    if not table_exists('employments'):
        op.create_table('employments',
            sa.Column('id', sa.Integer(), nullable=False),
            sa.Column('profile_id', sa.Integer(), nullable=False),
            sa.Column('gym_id', sa.Integer(), nullable=False),
            sa.Column('role', sa.String(length=20), nullable=False),
            sa.Column('is_active', sa.Boolean(), nullable=False),
            sa.Column('start_date', sa.DateTime(), nullable=False),
            sa.Column('end_date', sa.DateTime(), nullable=True),
            *_timestamps(),
            sa.ForeignKeyConstraint(['gym_id'], ['gyms.id'], ),
            sa.ForeignKeyConstraint(['profile_id'], ['user_profiles.id'], ),
            sa.PrimaryKeyConstraint('id'),
            sa.UniqueConstraint('profile_id', 'gym_id', name='uq_employment_profile_gym'),
        )
        op.create_index(op.f('ix_employments_id'), 'employments', ['id'], unique=False)
        op.create_index(op.f('ix_employments_gym_id'), 'employments', ['gym_id'], unique=False)
        op.create_index(op.f('ix_employments_profile_id'), 'employments', ['profile_id'], unique=False)

    if not table_exists('subscription_plans'):
        op.create_table('subscription_plans',
            sa.Column('id', sa.Integer(), nullable=False),
            sa.Column('gym_id', sa.Integer(), nullable=False),
            sa.Column('name', sa.String(length=100), nullable=False),
            sa.Column('description', sa.Text(), nullable=True),
            sa.Column('price', sa.Numeric(precision=10, scale=2), nullable=False),
            sa.Column('currency', sa.String(length=3), nullable=False),
            sa.Column('duration', sa.Integer(), nullable=False),
            sa.Column('duration_unit', sa.String(length=10), nullable=False),
            sa.Column('features', sa.JSON(), nullable=True),
            sa.Column('max_visits', sa.Integer(), nullable=True),
            sa.Column('is_active', sa.Boolean(), nullable=False),
            sa.Column('sort_order', sa.Integer(), nullable=False),
            *_timestamps(),
            sa.CheckConstraint('duration > 0', name='ck_subscription_plan_duration_positive'),
            sa.ForeignKeyConstraint(['gym_id'], ['gyms.id'], ),
            sa.PrimaryKeyConstraint('id'),
        )
        op.create_index(op.f('ix_subscription_plans_id'), 'subscription_plans', ['id'], unique=False)
        op.create_index(op.f('ix_subscription_plans_gym_id'), 'subscription_plans', ['gym_id'], unique=False)
        op.create_index('idx_plan_gym_sort', 'subscription_plans', ['gym_id', 'sort_order'], unique=False)

    if not table_exists('memberships'):
        op.create_table('memberships',
            sa.Column('id', sa.Integer(), nullable=False),
            sa.Column('profile_id', sa.Integer(), nullable=False),
            sa.Column('gym_id', sa.Integer(), nullable=False),
            sa.Column('plan_id', sa.Integer(), nullable=False),
            sa.Column('status', sa.String(length=20), nullable=False),
            sa.Column('start_date', sa.DateTime(), nullable=False),
            sa.Column('end_date', sa.DateTime(), nullable=True),
            sa.Column('auto_renew', sa.Boolean(), nullable=False),
            sa.Column('visits_used', sa.Integer(), nullable=False),
            sa.Column('cancelled_at', sa.DateTime(), nullable=True),
            sa.Column('last_payment_id', sa.Integer(), nullable=True),
            *_timestamps(),
            sa.ForeignKeyConstraint(['gym_id'], ['gyms.id'], ),
            sa.ForeignKeyConstraint(['plan_id'], ['subscription_plans.id'], ),
            sa.ForeignKeyConstraint(['profile_id'], ['user_profiles.id'], ),
            sa.PrimaryKeyConstraint('id'),
        )
        op.create_index(op.f('ix_memberships_id'), 'memberships', ['id'], unique=False)
        op.create_index(op.f('ix_memberships_gym_id'), 'memberships', ['gym_id'], unique=False)
        op.create_index(op.f('ix_memberships_profile_id'), 'memberships', ['profile_id'], unique=False)
        op.create_index('idx_membership_gym_status', 'memberships', ['gym_id', 'status'], unique=False)
        op.create_index(
            'uq_membership_open_per_plan', 'memberships', ['profile_id', 'gym_id', 'plan_id'],
            unique=True,
            sqlite_where=sa.text(OPEN_STATUS_CLAUSE),
            postgresql_where=sa.text(OPEN_STATUS_CLAUSE),
        )

    if not table_exists('payments'):
        op.create_table('payments',
            sa.Column('id', sa.Integer(), nullable=False),
            sa.Column('profile_id', sa.Integer(), nullable=False),
            sa.Column('gym_id', sa.Integer(), nullable=False),
            sa.Column('membership_id', sa.Integer(), nullable=True),
            sa.Column('reference', sa.String(length=64), nullable=False),
            sa.Column('amount', sa.Numeric(precision=10, scale=2), nullable=False),
            sa.Column('currency', sa.String(length=3), nullable=False),
            sa.Column('status', sa.String(length=20), nullable=False),
            sa.Column('provider', sa.String(length=32), nullable=False),
            sa.Column('channel', sa.String(length=20), nullable=False),
            sa.Column('metadata', sa.JSON(), nullable=True),
            sa.Column('paid_at', sa.DateTime(), nullable=True),
            *_timestamps(),
            sa.ForeignKeyConstraint(['gym_id'], ['gyms.id'], ),
            sa.ForeignKeyConstraint(['membership_id'], ['memberships.id'], ),
            sa.ForeignKeyConstraint(['profile_id'], ['user_profiles.id'], ),
            sa.PrimaryKeyConstraint('id'),
        )
        op.create_index(op.f('ix_payments_id'), 'payments', ['id'], unique=False)
        op.create_index(op.f('ix_payments_reference'), 'payments', ['reference'], unique=True)
        op.create_index(op.f('ix_payments_profile_id'), 'payments', ['profile_id'], unique=False)
        op.create_index(op.f('ix_payments_gym_id'), 'payments', ['gym_id'], unique=False)
        op.create_index(op.f('ix_payments_membership_id'), 'payments', ['membership_id'], unique=False)

    if not table_exists('products'):
        op.create_table('products',
            sa.Column('id', sa.Integer(), nullable=False),
            sa.Column('vendor_id', sa.Integer(), nullable=False),
            sa.Column('name', sa.String(length=200), nullable=False),
            sa.Column('description', sa.Text(), nullable=True),
            sa.Column('category', sa.String(length=50), nullable=True),
            sa.Column('price', sa.Numeric(precision=10, scale=2), nullable=False),
            sa.Column('currency', sa.String(length=3), nullable=False),
            sa.Column('stock', sa.Integer(), nullable=False),
            sa.Column('sku', sa.String(length=64), nullable=True),
            sa.Column('image_url', sa.String(), nullable=True),
            sa.Column('status', sa.String(length=20), nullable=False),
            sa.Column('rating', sa.Float(), nullable=True),
            sa.Column('is_active', sa.Boolean(), nullable=False),
            *_timestamps(),
            sa.ForeignKeyConstraint(['vendor_id'], ['user_profiles.id'], ),
            sa.PrimaryKeyConstraint('id'),
            sa.UniqueConstraint('sku'),
        )
        op.create_index(op.f('ix_products_id'), 'products', ['id'], unique=False)
        op.create_index(op.f('ix_products_vendor_id'), 'products', ['vendor_id'], unique=False)
        op.create_index(op.f('ix_products_name'), 'products', ['name'], unique=False)
        op.create_index(op.f('ix_products_category'), 'products', ['category'], unique=False)

    if not table_exists('orders'):
        op.create_table('orders',
            sa.Column('id', sa.Integer(), nullable=False),
            sa.Column('customer_id', sa.Integer(), nullable=False),
            sa.Column('order_number', sa.String(length=64), nullable=False),
            sa.Column('total', sa.Numeric(precision=12, scale=2), nullable=False),
            sa.Column('currency', sa.String(length=3), nullable=False),
            sa.Column('status', sa.String(length=20), nullable=False),
            sa.Column('shipping_address', sa.JSON(), nullable=True),
            sa.Column('notes', sa.String(), nullable=True),
            *_timestamps(),
            sa.ForeignKeyConstraint(['customer_id'], ['user_profiles.id'], ),
            sa.PrimaryKeyConstraint('id'),
        )
        op.create_index(op.f('ix_orders_id'), 'orders', ['id'], unique=False)
        op.create_index(op.f('ix_orders_customer_id'), 'orders', ['customer_id'], unique=False)
        op.create_index(op.f('ix_orders_order_number'), 'orders', ['order_number'], unique=True)

    if not table_exists('order_items'):
        op.create_table('order_items',
            sa.Column('id', sa.Integer(), nullable=False),
            sa.Column('order_id', sa.Integer(), nullable=False),
            sa.Column('product_id', sa.Integer(), nullable=False),
            sa.Column('quantity', sa.Integer(), nullable=False),
            sa.Column('price', sa.Numeric(precision=10, scale=2), nullable=False),
            sa.Column('subtotal', sa.Numeric(precision=12, scale=2), nullable=False),
            sa.ForeignKeyConstraint(['order_id'], ['orders.id'], ondelete='CASCADE'),
            sa.ForeignKeyConstraint(['product_id'], ['products.id'], ),
            sa.PrimaryKeyConstraint('id'),
        )
        op.create_index(op.f('ix_order_items_id'), 'order_items', ['id'], unique=False)
        op.create_index(op.f('ix_order_items_order_id'), 'order_items', ['order_id'], unique=False)


def downgrade() -> None:
    for table in (
        'order_items', 'orders', 'products', 'payments', 'memberships',
        'subscription_plans', 'employments', 'gyms', 'user_profiles',
        'email_verifications', 'refresh_tokens', 'accounts',
    ):
        if table_exists(table):
            op.drop_table(table)
