"""Create loyalty portal tables.

Revision ID: a1b2c3d4e5f6
Revises:
Create Date: 2026-10-19
"""
from alembic import op
import sqlalchemy as sa


# revision identifiers, used by Alembic.
revision = 'a1b2c3d4e5f6'
down_revision = None
branch_labels = None
depends_on = None


def upgrade():
    """Create the tables the portal reads."""
    op.create_table(
        'clients',
        sa.Column('id', sa.Integer(), primary_key=True),
        sa.Column('email', sa.String(255), nullable=False, unique=True),
        sa.Column('first_name', sa.String(100)),
        sa.Column('last_name', sa.String(100)),
        sa.Column('phone', sa.String(50)),
        sa.Column('points_balance', sa.Integer(), server_default='0'),
        sa.Column('referral_code', sa.String(50), unique=True),
        sa.Column('preferences', sa.JSON()),
        sa.Column('created_at', sa.DateTime()),
        sa.Column('updated_at', sa.DateTime()),
    )

    op.create_table(
        'loyalty_settings',
        sa.Column('id', sa.Integer(), primary_key=True),
        sa.Column('point_value', sa.Numeric(10, 4)),
        sa.Column('points_per_pound', sa.Numeric(10, 4)),
        sa.Column('min_redemption_points', sa.Integer()),
        sa.Column('redemption_increment', sa.Integer()),
        sa.Column('currency', sa.String(3)),
        sa.Column('referrer_bonus_points', sa.Integer()),
        sa.Column('referee_bonus_points', sa.Integer()),
        sa.Column('points_expire_after_days', sa.Integer()),
        sa.Column('updated_at', sa.DateTime()),
    )

    op.create_table(
        'bookings',
        sa.Column('id', sa.Integer(), primary_key=True),
        sa.Column('client_id', sa.Integer(), sa.ForeignKey('clients.id'), nullable=False),
        sa.Column('booking_reference', sa.String(50), unique=True),
        sa.Column('event_name', sa.String(255)),
        sa.Column('event_start_date', sa.Date()),
        sa.Column('event_end_date', sa.Date()),
        sa.Column('status', sa.String(20), server_default='pending'),
        sa.Column('total_amount', sa.Numeric(10, 2)),
        sa.Column('currency', sa.String(3)),
        sa.Column('booked_at', sa.DateTime()),
        sa.Column('confirmed_at', sa.DateTime()),
        sa.Column('updated_at', sa.DateTime()),
        sa.Column('points_earned', sa.Integer(), server_default='0'),
        sa.Column('points_used', sa.Integer(), server_default='0'),
    )
    op.create_index('ix_bookings_client_id', 'bookings', ['client_id'])

    op.create_table(
        'loyalty_transactions',
        sa.Column('id', sa.Integer(), primary_key=True),
        sa.Column('client_id', sa.Integer(), sa.ForeignKey('clients.id'), nullable=False),
        sa.Column('transaction_type', sa.String(20), nullable=False),
        sa.Column('source', sa.String(50)),
        sa.Column('source_reference_id', sa.Integer()),
        sa.Column('points', sa.Integer(), nullable=False),
        sa.Column('balance_after', sa.Integer()),
        sa.Column('description', sa.String(500)),
        sa.Column('created_at', sa.DateTime()),
    )
    op.create_index('ix_loyalty_transactions_client_id', 'loyalty_transactions', ['client_id'])
    op.create_index('ix_loyalty_transactions_created_at', 'loyalty_transactions', ['created_at'])

    op.create_table(
        'redemptions',
        sa.Column('id', sa.Integer(), primary_key=True),
        sa.Column('client_id', sa.Integer(), sa.ForeignKey('clients.id'), nullable=False),
        sa.Column('booking_id', sa.Integer(), sa.ForeignKey('bookings.id')),
        sa.Column('points_redeemed', sa.Integer(), nullable=False),
        sa.Column('discount_amount', sa.Numeric(10, 2)),
        sa.Column('status', sa.String(20), server_default='pending'),
        sa.Column('created_at', sa.DateTime()),
        sa.Column('applied_at', sa.DateTime()),
    )
    op.create_index('ix_redemptions_client_id', 'redemptions', ['client_id'])

    op.create_table(
        'referrals',
        sa.Column('id', sa.Integer(), primary_key=True),
        sa.Column('referrer_client_id', sa.Integer(), sa.ForeignKey('clients.id'), nullable=False),
        sa.Column('referee_email', sa.String(255), nullable=False),
        sa.Column('referral_code', sa.String(50)),
        sa.Column('referral_link', sa.String(500)),
        sa.Column('status', sa.String(20), server_default='pending'),
        sa.Column('bonus_points', sa.Integer(), server_default='0'),
        sa.Column('created_at', sa.DateTime()),
        sa.Column('completed_at', sa.DateTime()),
        sa.UniqueConstraint('referrer_client_id', 'referee_email', name='uq_referrals_referrer_email'),
    )


def downgrade():
    """Drop portal tables."""
    op.drop_table('referrals')
    op.drop_index('ix_redemptions_client_id', table_name='redemptions')
    op.drop_table('redemptions')
    op.drop_index('ix_loyalty_transactions_created_at', table_name='loyalty_transactions')
    op.drop_index('ix_loyalty_transactions_client_id', table_name='loyalty_transactions')
    op.drop_table('loyalty_transactions')
    op.drop_index('ix_bookings_client_id', table_name='bookings')
    op.drop_table('bookings')
    op.drop_table('loyalty_settings')
    op.drop_table('clients')
