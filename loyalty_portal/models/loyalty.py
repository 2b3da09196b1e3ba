"""
Loyalty settings, points transactions, and redemption requests.

Rows are written by database RPC functions and back-office tooling; the
portal reads them to build the points hub and redeem pages.
"""
from datetime import datetime
from enum import Enum
from ..extensions import db


class TransactionType(str, Enum):
    """Types of loyalty transactions."""
    EARN = 'earn'       # Points earned (positive)
    SPEND = 'spend'     # Points used on a booking (negative)
    REFUND = 'refund'   # Points returned after a cancellation (positive)
    EXPIRE = 'expire'   # Points expired (negative)
    ADJUST = 'adjust'   # Manual adjustment (+/-)


class TransactionSource(str, Enum):
    """Where earned points came from."""
    PURCHASE = 'purchase'
    REFERRAL = 'referral'
    BONUS = 'bonus'
    MANUAL = 'manual'


class RedemptionStatus(str, Enum):
    PENDING = 'pending'      # Reserved, not yet applied to a booking
    APPLIED = 'applied'
    CANCELLED = 'cancelled'


class LoyaltySettings(db.Model):
    """
    Program-wide loyalty configuration. Singleton row (id=1).

    Invariants (checked at read time, see services.loyalty_settings):
    redemption_increment > 0, min_redemption_points >= 0.
    """
    __tablename__ = 'loyalty_settings'

    id = db.Column(db.Integer, primary_key=True)

    point_value = db.Column(db.Numeric(10, 4))            # Currency units per point
    points_per_pound = db.Column(db.Numeric(10, 4))       # Accrual rate
    min_redemption_points = db.Column(db.Integer)
    redemption_increment = db.Column(db.Integer)
    currency = db.Column(db.String(3))

    referrer_bonus_points = db.Column(db.Integer)
    referee_bonus_points = db.Column(db.Integer)

    points_expire_after_days = db.Column(db.Integer)      # null = never expire

    updated_at = db.Column(db.DateTime, default=datetime.utcnow, onupdate=datetime.utcnow)

    def __repr__(self):
        return f'<LoyaltySettings {self.id}: {self.point_value} {self.currency}/pt>'

    def to_dict(self):
        return {
            'point_value': float(self.point_value) if self.point_value is not None else None,
            'points_per_pound': float(self.points_per_pound) if self.points_per_pound is not None else None,
            'min_redemption_points': self.min_redemption_points,
            'redemption_increment': self.redemption_increment,
            'currency': self.currency,
            'referrer_bonus_points': self.referrer_bonus_points,
            'referee_bonus_points': self.referee_bonus_points,
            'points_expire_after_days': self.points_expire_after_days,
        }


class LoyaltyTransaction(db.Model):
    """Ledger row for every points movement on a client account."""
    __tablename__ = 'loyalty_transactions'

    id = db.Column(db.Integer, primary_key=True)
    client_id = db.Column(db.Integer, db.ForeignKey('clients.id'), nullable=False, index=True)

    transaction_type = db.Column(db.String(20), nullable=False)  # earn, spend, refund, expire, adjust
    source = db.Column(db.String(50))                            # purchase, referral, bonus, manual
    source_reference_id = db.Column(db.Integer)                  # booking id for purchase/spend rows
    points = db.Column(db.Integer, nullable=False)               # Positive for earn, negative for spend
    balance_after = db.Column(db.Integer)
    description = db.Column(db.String(500))

    created_at = db.Column(db.DateTime, default=datetime.utcnow, index=True)

    def __repr__(self):
        return f'<LoyaltyTransaction {self.id}: {self.points} pts for client {self.client_id}>'

    def to_dict(self):
        return {
            'id': self.id,
            'client_id': self.client_id,
            'transaction_type': self.transaction_type,
            'source': self.source,
            'source_reference_id': self.source_reference_id,
            'points': self.points,
            'balance_after': self.balance_after,
            'description': self.description,
            'created_at': self.created_at.isoformat() if self.created_at else None,
        }


class Redemption(db.Model):
    """A request to turn points into a booking discount."""
    __tablename__ = 'redemptions'

    id = db.Column(db.Integer, primary_key=True)
    client_id = db.Column(db.Integer, db.ForeignKey('clients.id'), nullable=False, index=True)
    booking_id = db.Column(db.Integer, db.ForeignKey('bookings.id'))

    points_redeemed = db.Column(db.Integer, nullable=False)
    discount_amount = db.Column(db.Numeric(10, 2))
    status = db.Column(db.String(20), default=RedemptionStatus.PENDING.value)

    created_at = db.Column(db.DateTime, default=datetime.utcnow)
    applied_at = db.Column(db.DateTime)

    def __repr__(self):
        return f'<Redemption {self.id}: {self.points_redeemed} pts ({self.status})>'

    def to_dict(self):
        return {
            'id': self.id,
            'booking_id': self.booking_id,
            'points_redeemed': self.points_redeemed,
            'discount_amount': float(self.discount_amount) if self.discount_amount is not None else None,
            'status': self.status,
            'created_at': self.created_at.isoformat() if self.created_at else None,
            'applied_at': self.applied_at.isoformat() if self.applied_at else None,
        }
