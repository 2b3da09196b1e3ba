"""
Shared pytest fixtures for the loyalty portal.
"""
import pytest
from datetime import date, datetime, timedelta

from loyalty_portal import create_app
from loyalty_portal.extensions import db
from loyalty_portal.models import Booking, Client, LoyaltySettings


@pytest.fixture
def app():
    """Create test application with a fresh in-memory database."""
    app = create_app('testing')
    with app.app_context():
        db.create_all()
        yield app
        db.session.remove()
        db.drop_all()


@pytest.fixture
def client(app):
    """Flask test client."""
    return app.test_client()


@pytest.fixture
def loyalty_settings(app):
    """Standard program: 1 pt = £1, redeem from 100 in steps of 100."""
    settings = LoyaltySettings(
        id=1,
        point_value=1,
        points_per_pound=1,
        min_redemption_points=100,
        redemption_increment=100,
        currency='GBP',
        referrer_bonus_points=250,
        referee_bonus_points=100,
    )
    db.session.add(settings)
    db.session.commit()
    return settings


@pytest.fixture
def sample_client(app, loyalty_settings):
    """A client with 650 points and no currency preference."""
    customer = Client(
        email='traveller@example.com',
        first_name='Ada',
        last_name='Lovelace',
        points_balance=650,
        referral_code='ADA123',
        preferences={},
    )
    db.session.add(customer)
    db.session.commit()
    return customer


@pytest.fixture
def other_client(app, loyalty_settings):
    customer = Client(email='someone.else@example.com', points_balance=0)
    db.session.add(customer)
    db.session.commit()
    return customer


@pytest.fixture
def auth_headers(sample_client):
    """Headers the identity gateway would forward for sample_client."""
    return {
        'X-Client-ID': str(sample_client.id),
        'Content-Type': 'application/json'
    }


@pytest.fixture
def sample_booking(sample_client):
    """Confirmed booking two months out, booked well before the lock window."""
    booking = Booking(
        client_id=sample_client.id,
        booking_reference='GPGT-1001',
        event_name='Monaco Grand Prix',
        event_start_date=date.today() + timedelta(days=60),
        event_end_date=date.today() + timedelta(days=63),
        booked_at=datetime.utcnow() - timedelta(days=10),
        status='confirmed',
        total_amount=5000,
        currency='GBP',
        points_earned=500,
        points_used=200,
    )
    db.session.add(booking)
    db.session.commit()
    return booking
