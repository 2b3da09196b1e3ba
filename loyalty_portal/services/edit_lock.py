"""
Edit-lock window for traveller and flight details.

Customers can edit trip details until 28 days before the event starts.
Late bookings (made after that cutoff) get a short grace period from the
booking date so they can still enter traveller and flight details:

    days from booking to event   grace
    < 7                          2 days
    7 - 13                       3 days
    14 - 20                      5 days
    >= 21                        none

The effective lock date is the later of the standard cutoff and
booked_at + grace. Cancelled or completed bookings, and trips that have
already ended, are locked permanently.

Recomputed from the wall clock on every request; nothing is stored.
"""
import logging
import math
from datetime import datetime, timedelta
from typing import Any, Dict, Optional

from ..utils.dates import DateLike, parse_calendar_date

logger = logging.getLogger(__name__)

STANDARD_LOCK_DAYS = 28

# (exclusive upper bound on days from booking to event, grace days)
GRACE_PERIOD_TIERS = (
    (7, 2),
    (14, 3),
    (21, 5),
)

PERMANENTLY_LOCKED_STATUSES = frozenset({'cancelled', 'completed'})


def grace_days_for(days_from_booking_to_event: int) -> int:
    """Grace days granted to a booking made this many days before the event."""
    for upper_bound, grace_days in GRACE_PERIOD_TIERS:
        if days_from_booking_to_event < upper_bound:
            return grace_days
    return 0


def compute_lock_threshold(event_start: datetime, booked_at: Optional[datetime]) -> datetime:
    """Moment at which edits lock, before considering the current time."""
    standard_threshold = event_start - timedelta(days=STANDARD_LOCK_DAYS)
    if booked_at is None or booked_at <= standard_threshold:
        return standard_threshold

    days_to_event = (event_start - booked_at).days
    grace_days = grace_days_for(days_to_event)
    if not grace_days:
        return standard_threshold

    return max(standard_threshold, booked_at + timedelta(days=grace_days))


def _result(is_locked: bool, days_until_lock=None, permanent=False, lock_date=None) -> Dict[str, Any]:
    return {
        'is_locked': is_locked,
        'days_until_lock': days_until_lock,
        'is_permanently_locked': permanent,
        'lock_date': lock_date.isoformat() if lock_date else None,
    }


def compute_edit_lock(
    event_start_date: DateLike,
    event_end_date: DateLike,
    booked_at: DateLike,
    booking_status: Optional[str],
    now: Optional[datetime] = None
) -> Dict[str, Any]:
    """
    Work out whether trip details can still be edited.

    Args:
        event_start_date: Event start (date, datetime, or ISO string)
        event_end_date: Event end, used for the "trip is over" lock
        booked_at: When the booking was made
        booking_status: Booking status string
        now: Current time (defaults to datetime.utcnow())

    Returns:
        {
            'is_locked': bool,
            'days_until_lock': int or None,   # only when not locked
            'is_permanently_locked': bool,
            'lock_date': ISO string or None,
        }

    A missing or unparseable start date yields "not locked" without raising.
    """
    now = now or datetime.utcnow()

    if (booking_status or '').lower() in PERMANENTLY_LOCKED_STATUSES:
        return _result(True, permanent=True)

    event_end = parse_calendar_date(event_end_date)
    if event_end and event_end.date() < now.date():
        return _result(True, permanent=True)

    event_start = parse_calendar_date(event_start_date)
    if event_start is None:
        if event_start_date:
            logger.warning('Edit lock skipped: unparseable event start date %r', event_start_date)
        return _result(False)

    booked = parse_calendar_date(booked_at)
    if booked_at and booked is None:
        logger.warning('Edit lock ignoring unparseable booking date %r', booked_at)

    threshold = compute_lock_threshold(event_start, booked)

    if now >= threshold:
        return _result(True, lock_date=threshold)

    days_until_lock = math.floor((threshold - now).total_seconds() / 86400)
    return _result(False, days_until_lock=days_until_lock, lock_date=threshold)
