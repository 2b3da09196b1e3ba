"""
Client (customer) and referral models.
"""
from datetime import datetime
from ..extensions import db


class Client(db.Model):
    """
    A travel-booking customer with a loyalty account.

    points_balance is maintained by the database (lifetime accrued minus spent
    minus expired); the portal only reads it.
    """
    __tablename__ = 'clients'

    id = db.Column(db.Integer, primary_key=True)
    email = db.Column(db.String(255), nullable=False, unique=True)
    first_name = db.Column(db.String(100))
    last_name = db.Column(db.String(100))
    phone = db.Column(db.String(50))

    # Loyalty
    points_balance = db.Column(db.Integer, default=0)
    referral_code = db.Column(db.String(50), unique=True)

    # Free-form preferences; may hold 'preferred_currency'
    preferences = db.Column(db.JSON, default=dict)

    # Timestamps
    created_at = db.Column(db.DateTime, default=datetime.utcnow)
    updated_at = db.Column(db.DateTime, default=datetime.utcnow, onupdate=datetime.utcnow)

    # Relationships
    bookings = db.relationship('Booking', backref='client', lazy='dynamic')
    redemptions = db.relationship('Redemption', backref='client', lazy='dynamic')
    transactions = db.relationship('LoyaltyTransaction', backref='client', lazy='dynamic')
    referrals = db.relationship('Referral', backref='referrer', lazy='dynamic')

    def __repr__(self):
        return f'<Client {self.id}: {self.email}>'

    @property
    def name(self):
        return ' '.join(part for part in (self.first_name, self.last_name) if part) or None

    def to_dict(self):
        return {
            'id': self.id,
            'email': self.email,
            'first_name': self.first_name,
            'last_name': self.last_name,
            'name': self.name,
            'points_balance': self.points_balance or 0,
            'referral_code': self.referral_code,
            'preferences': self.preferences or {},
            'created_at': self.created_at.isoformat() if self.created_at else None,
        }


class Referral(db.Model):
    """A friend invited by a client. Bonus issuance happens in the database."""
    __tablename__ = 'referrals'
    __table_args__ = (
        db.UniqueConstraint('referrer_client_id', 'referee_email', name='uq_referrals_referrer_email'),
    )

    id = db.Column(db.Integer, primary_key=True)
    referrer_client_id = db.Column(db.Integer, db.ForeignKey('clients.id'), nullable=False)
    referee_email = db.Column(db.String(255), nullable=False)
    referral_code = db.Column(db.String(50))
    referral_link = db.Column(db.String(500))
    status = db.Column(db.String(20), default='pending')  # pending, completed
    bonus_points = db.Column(db.Integer, default=0)

    created_at = db.Column(db.DateTime, default=datetime.utcnow)
    completed_at = db.Column(db.DateTime)

    def __repr__(self):
        return f'<Referral {self.id}: {self.referee_email} ({self.status})>'

    def to_dict(self):
        return {
            'id': self.id,
            'referee_email': self.referee_email,
            'referral_code': self.referral_code,
            'status': self.status,
            'bonus_points': self.bonus_points or 0,
            'created_at': self.created_at.isoformat() if self.created_at else None,
            'completed_at': self.completed_at.isoformat() if self.completed_at else None,
        }
