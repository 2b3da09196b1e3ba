"""
Trip list and trip detail service.

The list splits bookings into upcoming, past and cancelled tabs. The detail
page combines one booking with its edit-lock window and its loyalty summary
(points earned and used, the discount they were worth, and for cancelled
bookings the refund picture).
"""
from datetime import date, datetime
from typing import Any, Dict, List, Optional

from ..models import Booking, Client, LoyaltyTransaction, Redemption
from ..utils.currency import format_currency_with_symbol
from ..utils.dates import format_calendar_date
from ..utils.exceptions import BookingNotFoundError, ValidationError
from .currency_conversion import (
    convert_discount_to_preferred_currency,
    format_conversion_label,
    get_display_currency,
)
from .currency_service import CurrencyService
from .edit_lock import compute_edit_lock
from .loyalty_settings import get_loyalty_settings


TRIP_TABS = ('upcoming', 'past', 'cancelled')


def map_booking_status(status: Optional[str]) -> str:
    """Collapse booking statuses onto the four the portal shows."""
    if status in ('cancelled', 'refunded'):
        return 'cancelled'
    if status in ('confirmed', 'completed'):
        return status
    # draft, provisional, pending_payment
    return 'pending'


def _in_tab(booking: Booking, status: str, tab: str, today: date) -> bool:
    if tab == 'upcoming':
        return (
            booking.event_start_date is not None
            and booking.event_start_date >= today
            and status in ('confirmed', 'pending')
        )
    if tab == 'past':
        return (
            booking.event_end_date is not None
            and booking.event_end_date < today
            and status in ('confirmed', 'completed')
        )
    return status == 'cancelled'


class TripService:
    """
    Trip pages for one client.

    Usage:
        service = TripService(client)
        details = service.get_trip_details(booking_id)
    """

    def __init__(
        self,
        client: Client,
        settings: Optional[Dict[str, Any]] = None,
        currency_service: Optional[CurrencyService] = None
    ):
        self.client = client
        self.settings = settings or get_loyalty_settings()
        self.currency_service = currency_service or CurrencyService()

    def get_booking(self, booking_id: int) -> Booking:
        """
        Load a booking owned by the client.

        Raises:
            BookingNotFoundError: Missing, or belongs to another client
        """
        booking = Booking.query.filter_by(id=booking_id, client_id=self.client.id).first()
        if not booking:
            raise BookingNotFoundError(booking_id)
        return booking

    def get_edit_lock(self, booking: Booking, now: Optional[datetime] = None) -> Dict[str, Any]:
        return compute_edit_lock(
            booking.event_start_date,
            booking.event_end_date,
            booking.booked_at,
            booking.status,
            now=now
        )

    def _trip_summary(self, booking: Booking) -> Dict[str, Any]:
        currency = booking.currency or self.settings['currency']
        redemption = booking.redemptions.order_by(Redemption.created_at.asc()).first()
        discount_applied = float(redemption.discount_amount or 0) if redemption else 0.0
        return {
            **booking.to_dict(),
            'booking_status': map_booking_status(booking.status),
            'discount_applied': discount_applied,
            'formatted_discount_applied': format_currency_with_symbol(discount_applied, currency),
            'formatted_total_amount': (
                format_currency_with_symbol(booking.total_amount, currency)
                if booking.total_amount is not None else None
            ),
        }

    def list_trips(self, tab: str = 'upcoming', now: Optional[datetime] = None) -> Dict[str, Any]:
        """
        Trips page: one tab of bookings plus the count for every tab.

        Upcoming is soonest first, past is most recent first, cancelled is
        most recently updated first.

        Raises:
            ValidationError: Unknown tab
        """
        tab = (tab or 'upcoming').lower()
        if tab not in TRIP_TABS:
            raise ValidationError(f"tab must be one of {', '.join(TRIP_TABS)}", field='tab')

        today = (now or datetime.utcnow()).date()
        bookings = Booking.query.filter_by(client_id=self.client.id).all()

        tabs = {name: [] for name in TRIP_TABS}
        for booking in bookings:
            status = map_booking_status(booking.status)
            for name in TRIP_TABS:
                if _in_tab(booking, status, name, today):
                    tabs[name].append(booking)

        selected = tabs[tab]
        if tab == 'upcoming':
            selected.sort(key=lambda b: b.event_start_date)
        elif tab == 'past':
            selected.sort(key=lambda b: b.event_start_date or date.min, reverse=True)
        else:
            selected.sort(key=lambda b: b.updated_at or b.booked_at or datetime.min, reverse=True)

        return {
            'tab': tab,
            'counts': {name: len(items) for name, items in tabs.items()},
            'trips': [self._trip_summary(b) for b in selected],
        }

    def _booking_transactions(self, booking: Booking) -> List[LoyaltyTransaction]:
        return LoyaltyTransaction.query.filter_by(
            client_id=self.client.id,
            source_reference_id=booking.id
        ).order_by(LoyaltyTransaction.created_at.asc()).all()

    def get_loyalty_summary(self, booking: Booking) -> Dict[str, Any]:
        """
        Points section of the trip page.

        Net points are earned minus used. Cancelled bookings report a refund
        summary instead: used points come back, earned points are deducted.
        """
        point_value = self.settings['point_value']
        currency = self.settings['currency']
        points_earned = booking.points_earned or 0
        points_used = booking.points_used or 0
        net_points = points_earned - points_used

        transactions = self._booking_transactions(booking)
        earn_transaction = next((t for t in transactions if t.transaction_type == 'earn'), None)
        spend_transaction = next((t for t in transactions if t.transaction_type == 'spend'), None)

        redemptions = booking.redemptions.order_by(Redemption.created_at.asc()).all()

        summary = {
            'points_earned': points_earned,
            'points_used': points_used,
            'net_points': net_points,
            'net_label': 'Net gain' if net_points >= 0 else 'Net used',
            'discount_value': points_used * point_value,
            'formatted_discount_value': format_currency_with_symbol(points_used * point_value, currency),
            'earn_balance_after': earn_transaction.balance_after if earn_transaction else None,
            'spend_balance_after': spend_transaction.balance_after if spend_transaction else None,
            'redemptions': [r.to_dict() for r in redemptions],
            'has_activity': points_earned > 0 or points_used > 0,
            'refund': None,
        }

        if booking.status == 'cancelled':
            summary['refund'] = {
                'points_refunded': points_used,
                'discount_refunded': points_used * point_value,
                'points_deducted': points_earned,
                'net_points': points_used - points_earned,
            }

        return summary

    def get_trip_details(self, booking_id: int, now: Optional[datetime] = None) -> Dict[str, Any]:
        """Booking, edit lock, loyalty summary, and discount in the client's currency."""
        booking = self.get_booking(booking_id)
        loyalty = self.get_loyalty_summary(booking)

        base_currency = self.settings['currency']
        preferred_currency = get_display_currency(self.client.preferences, base_currency)
        discount = convert_discount_to_preferred_currency(
            loyalty['discount_value'], base_currency, preferred_currency, self.currency_service
        )

        return {
            'booking': booking.to_dict(),
            'event_dates': {
                'start': format_calendar_date(booking.event_start_date, fallback='TBC'),
                'end': format_calendar_date(booking.event_end_date, fallback='TBC'),
            },
            'edit_lock': self.get_edit_lock(booking, now=now),
            'loyalty': loyalty,
            'discount': discount,
            'display_label': format_conversion_label(discount),
        }
