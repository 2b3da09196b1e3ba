"""
Booking model: one trip (event package) booked by a client.
"""
from datetime import datetime
from enum import Enum
from ..extensions import db


class BookingStatus(str, Enum):
    PENDING = 'pending'
    CONFIRMED = 'confirmed'
    CANCELLED = 'cancelled'
    COMPLETED = 'completed'


class Booking(db.Model):
    __tablename__ = 'bookings'

    id = db.Column(db.Integer, primary_key=True)
    client_id = db.Column(db.Integer, db.ForeignKey('clients.id'), nullable=False, index=True)
    booking_reference = db.Column(db.String(50), unique=True)

    # Event
    event_name = db.Column(db.String(255))
    event_start_date = db.Column(db.Date)
    event_end_date = db.Column(db.Date)

    # Booking
    status = db.Column(db.String(20), default=BookingStatus.PENDING.value)
    total_amount = db.Column(db.Numeric(10, 2))
    currency = db.Column(db.String(3))
    booked_at = db.Column(db.DateTime, default=datetime.utcnow)
    confirmed_at = db.Column(db.DateTime)
    updated_at = db.Column(db.DateTime, default=datetime.utcnow, onupdate=datetime.utcnow)

    # Loyalty
    points_earned = db.Column(db.Integer, default=0)
    points_used = db.Column(db.Integer, default=0)

    # Relationships
    redemptions = db.relationship('Redemption', backref='booking', lazy='dynamic')

    def __repr__(self):
        return f'<Booking {self.booking_reference}: {self.event_name} ({self.status})>'

    def to_dict(self):
        return {
            'id': self.id,
            'booking_reference': self.booking_reference,
            'event_name': self.event_name,
            'event_start_date': self.event_start_date.isoformat() if self.event_start_date else None,
            'event_end_date': self.event_end_date.isoformat() if self.event_end_date else None,
            'status': self.status,
            'total_amount': float(self.total_amount) if self.total_amount is not None else None,
            'currency': self.currency,
            'booked_at': self.booked_at.isoformat() if self.booked_at else None,
            'confirmed_at': self.confirmed_at.isoformat() if self.confirmed_at else None,
            'updated_at': self.updated_at.isoformat() if self.updated_at else None,
            'points_earned': self.points_earned or 0,
            'points_used': self.points_used or 0,
        }
