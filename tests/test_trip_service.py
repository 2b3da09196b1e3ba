"""
Tests for the Trip Service.

Covers the trips list tabs, booking ownership, the loyalty summary on the trip page, cancelled
booking refunds, and the combined trip detail payload.
"""
import pytest
from datetime import date, datetime
from unittest.mock import MagicMock

from loyalty_portal.extensions import db
from loyalty_portal.models import Booking, LoyaltyTransaction, Redemption
from loyalty_portal.services.currency_service import CurrencyService
from loyalty_portal.services.trip_service import TripService, map_booking_status
from loyalty_portal.utils.exceptions import BookingNotFoundError, ValidationError


@pytest.fixture
def booking_activity(sample_client, sample_booking):
    """Earn and spend ledger rows plus an applied redemption for the booking."""
    db.session.add_all([
        LoyaltyTransaction(
            client_id=sample_client.id,
            transaction_type='spend',
            source_reference_id=sample_booking.id,
            points=-200,
            balance_after=450,
            created_at=datetime(2026, 10, 9, 10, 0),
        ),
        LoyaltyTransaction(
            client_id=sample_client.id,
            transaction_type='earn',
            source='purchase',
            source_reference_id=sample_booking.id,
            points=500,
            balance_after=950,
            created_at=datetime(2026, 10, 9, 10, 5),
        ),
        Redemption(
            client_id=sample_client.id,
            booking_id=sample_booking.id,
            points_redeemed=200,
            discount_amount=200,
            status='applied',
        ),
    ])
    db.session.commit()


class TestGetBooking:

    def test_own_booking(self, app, sample_client, sample_booking):
        booking = TripService(sample_client).get_booking(sample_booking.id)

        assert booking.booking_reference == 'GPGT-1001'

    def test_missing_booking(self, app, sample_client):
        with pytest.raises(BookingNotFoundError) as exc_info:
            TripService(sample_client).get_booking(9999)

        assert exc_info.value.code == 'BOOKING_NOT_FOUND'
        assert exc_info.value.status_code == 404

    def test_other_clients_booking(self, app, other_client, sample_booking):
        with pytest.raises(BookingNotFoundError):
            TripService(other_client).get_booking(sample_booking.id)


class TestLoyaltySummary:

    def test_summary_with_activity(self, app, sample_client, sample_booking, booking_activity):
        summary = TripService(sample_client).get_loyalty_summary(sample_booking)

        assert summary['points_earned'] == 500
        assert summary['points_used'] == 200
        assert summary['net_points'] == 300
        assert summary['net_label'] == 'Net gain'
        assert summary['discount_value'] == 200.0
        assert summary['formatted_discount_value'] == '£200.00'
        assert summary['earn_balance_after'] == 950
        assert summary['spend_balance_after'] == 450
        assert len(summary['redemptions']) == 1
        assert summary['redemptions'][0]['points_redeemed'] == 200
        assert summary['has_activity'] is True
        assert summary['refund'] is None

    def test_no_activity(self, app, sample_client):
        booking = Booking(client_id=sample_client.id, booking_reference='GPGT-1002')
        db.session.add(booking)
        db.session.commit()

        summary = TripService(sample_client).get_loyalty_summary(booking)

        assert summary['has_activity'] is False
        assert summary['earn_balance_after'] is None
        assert summary['redemptions'] == []

    def test_net_points_used(self, app, sample_client, sample_booking):
        sample_booking.points_earned = 100
        sample_booking.points_used = 300
        db.session.commit()

        summary = TripService(sample_client).get_loyalty_summary(sample_booking)

        assert summary['net_points'] == -200
        assert summary['net_label'] == 'Net used'

    def test_cancelled_booking_refund(self, app, sample_client, sample_booking):
        sample_booking.status = 'cancelled'
        db.session.commit()

        summary = TripService(sample_client).get_loyalty_summary(sample_booking)

        assert summary['refund'] == {
            'points_refunded': 200,
            'discount_refunded': 200.0,
            'points_deducted': 500,
            'net_points': -300,
        }


class TestTripDetails:

    def test_trip_details(self, app, sample_client, sample_booking):
        currency_service = MagicMock(spec=CurrencyService)

        details = TripService(sample_client, currency_service=currency_service).get_trip_details(
            sample_booking.id, now=datetime.utcnow()
        )

        assert details['booking']['event_name'] == 'Monaco Grand Prix'
        assert details['event_dates']['start'] == sample_booking.event_start_date.strftime('%d %b %Y')
        assert details['edit_lock']['is_locked'] is False
        assert details['edit_lock']['days_until_lock'] >= 30
        assert details['loyalty']['points_used'] == 200
        assert details['discount']['formatted_converted'] == '£200.00'
        assert details['display_label'] == '£200.00'
        currency_service.convert_currency.assert_not_called()

    def test_trip_details_in_preferred_currency(self, app, sample_client, sample_booking):
        sample_client.preferences = {'preferred_currency': 'EUR'}
        db.session.commit()
        currency_service = MagicMock(spec=CurrencyService)
        currency_service.convert_currency.return_value = {
            'converted_amount': 237.8,
            'rate': 1.16,
            'adjusted_rate': 1.189,
        }

        details = TripService(sample_client, currency_service=currency_service).get_trip_details(
            sample_booking.id
        )

        currency_service.convert_currency.assert_called_once_with(200.0, 'GBP', 'EUR')
        assert details['discount']['formatted_converted'] == '€237.80'
        assert details['display_label'] == '£200.00 (≈ €237.80)'

    def test_cancelled_trip_permanently_locked(self, app, sample_client, sample_booking):
        sample_booking.status = 'cancelled'
        db.session.commit()

        details = TripService(sample_client).get_trip_details(sample_booking.id)

        assert details['edit_lock']['is_permanently_locked'] is True


TODAY = datetime(2026, 6, 1, 9, 0)


@pytest.fixture
def trip_history(sample_client, other_client):
    """Bookings spread across every tab, relative to TODAY."""
    def booking(reference, status, start, end, client=sample_client, **kwargs):
        item = Booking(
            client_id=client.id,
            booking_reference=reference,
            event_name=reference,
            event_start_date=start,
            event_end_date=end,
            status=status,
            total_amount=1000,
            currency='GBP',
            **kwargs
        )
        db.session.add(item)
        return item

    trips = {
        'silverstone': booking('SILVERSTONE', 'confirmed', date(2026, 7, 10), date(2026, 7, 12)),
        'le_mans': booking('LE-MANS', 'pending_payment', date(2026, 6, 15), date(2026, 6, 16)),
        'today': booking('MONZA', 'draft', date(2026, 6, 1), date(2026, 6, 3)),
        'bahrain': booking('BAHRAIN', 'completed', date(2026, 3, 1), date(2026, 3, 3)),
        'miami': booking('MIAMI', 'confirmed', date(2026, 5, 1), date(2026, 5, 4)),
        'imola': booking('IMOLA', 'refunded', date(2026, 5, 16), date(2026, 5, 18),
                         updated_at=datetime(2026, 5, 20)),
        'spa': booking('SPA', 'cancelled', date(2026, 7, 24), date(2026, 7, 26),
                       updated_at=datetime(2026, 5, 25)),
        'suzuka': booking('SUZUKA', 'completed', date(2026, 9, 1), date(2026, 9, 3)),
        'not_mine': booking('OTHER-1', 'confirmed', date(2026, 7, 1), date(2026, 7, 2), client=other_client),
    }
    db.session.flush()
    db.session.add(Redemption(
        client_id=sample_client.id,
        booking_id=trips['silverstone'].id,
        points_redeemed=150,
        discount_amount=150,
        status='applied',
    ))
    db.session.commit()
    return trips


class TestMapBookingStatus:

    @pytest.mark.parametrize('status,expected', [
        ('confirmed', 'confirmed'),
        ('completed', 'completed'),
        ('cancelled', 'cancelled'),
        ('refunded', 'cancelled'),
        ('pending', 'pending'),
        ('pending_payment', 'pending'),
        ('provisional', 'pending'),
        (None, 'pending'),
    ])
    def test_maps(self, status, expected):
        assert map_booking_status(status) == expected


class TestListTrips:
    """Tests for the trips page tabs."""

    def test_counts(self, app, sample_client, trip_history):
        result = TripService(sample_client).list_trips(now=TODAY)

        assert result['counts'] == {'upcoming': 3, 'past': 2, 'cancelled': 2}

    def test_upcoming_soonest_first(self, app, sample_client, trip_history):
        result = TripService(sample_client).list_trips('upcoming', now=TODAY)

        assert result['tab'] == 'upcoming'
        assert [t['booking_reference'] for t in result['trips']] == ['MONZA', 'LE-MANS', 'SILVERSTONE']
        assert [t['booking_status'] for t in result['trips']] == ['pending', 'pending', 'confirmed']

    def test_past_most_recent_first(self, app, sample_client, trip_history):
        result = TripService(sample_client).list_trips('past', now=TODAY)

        assert [t['booking_reference'] for t in result['trips']] == ['MIAMI', 'BAHRAIN']

    def test_cancelled_most_recently_updated_first(self, app, sample_client, trip_history):
        result = TripService(sample_client).list_trips('cancelled', now=TODAY)

        assert [t['booking_reference'] for t in result['trips']] == ['SPA', 'IMOLA']
        assert all(t['booking_status'] == 'cancelled' for t in result['trips'])

    def test_discount_applied(self, app, sample_client, trip_history):
        trips = TripService(sample_client).list_trips('upcoming', now=TODAY)['trips']
        silverstone = next(t for t in trips if t['booking_reference'] == 'SILVERSTONE')
        le_mans = next(t for t in trips if t['booking_reference'] == 'LE-MANS')

        assert silverstone['discount_applied'] == 150.0
        assert silverstone['formatted_discount_applied'] == '£150.00'
        assert silverstone['formatted_total_amount'] == '£1,000.00'
        assert le_mans['discount_applied'] == 0.0

    def test_no_bookings(self, app, other_client):
        result = TripService(other_client).list_trips('past', now=TODAY)

        assert result['trips'] == []
        assert result['counts'] == {'upcoming': 0, 'past': 0, 'cancelled': 0}

    def test_unknown_tab(self, app, sample_client):
        with pytest.raises(ValidationError) as exc_info:
            TripService(sample_client).list_trips('archived')

        assert exc_info.value.code == 'INVALID_TAB'
