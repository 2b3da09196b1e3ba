"""
Points Service for the loyalty portal.

Builds everything the points hub and redeem pages show for one client:
- Balance view (balance, reserved by pending redemptions, available)
- Available discount (database RPC first, local formula as fallback)
- Progress toward the next redemption milestone
- Year-over-year stat cards (earned, spent, booking points, referrals)
- Paginated transaction history
- Redemption quotes for the redeem calculator

The authenticated client is passed in explicitly; nothing is read from
ambient request state.
"""
import math
from datetime import datetime
from typing import Any, Callable, Dict, Optional

from flask import current_app
from sqlalchemy import func

from ..extensions import db
from ..models import Client, LoyaltyTransaction, Redemption, Referral, RedemptionStatus
from ..utils.exceptions import InsufficientPointsError, ValidationError
from . import redemption_calculator as calc
from .currency_conversion import (
    convert_discount_to_preferred_currency,
    format_conversion_label,
    get_display_currency,
)
from .currency_service import CurrencyService
from .discount_rpc import calculate_available_discount
from .loyalty_settings import get_loyalty_settings

DEFAULT_PAGE_SIZE = 10
MAX_PAGE_SIZE = 100

# Amount used for the "points can be redeemed in X increments" line
EXAMPLE_REDEMPTION_POINTS = 100


class PointsService:
    """
    Read-side points operations for one client.

    Usage:
        service = PointsService(client)
        overview = service.get_points_overview(page=1)
        quote = service.quote_redemption(300, booking_amount=5000)
    """

    def __init__(
        self,
        client: Client,
        settings: Optional[Dict[str, Any]] = None,
        discount_rpc: Optional[Callable[[int], Dict[str, Any]]] = None,
        currency_service: Optional[CurrencyService] = None
    ):
        """
        Initialize PointsService.

        Args:
            client: Authenticated client
            settings: Validated loyalty settings (loaded from the database if omitted)
            discount_rpc: calculate_available_discount implementation
            currency_service: CurrencyService for preferred-currency display
        """
        self.client = client
        self.settings = settings or get_loyalty_settings()
        self.discount_rpc = discount_rpc or calculate_available_discount
        self.currency_service = currency_service or CurrencyService()

    # ==================== Balance ====================

    def get_reserved_points(self) -> int:
        """Sum of points held by this client's pending redemptions."""
        reserved = db.session.query(
            func.coalesce(func.sum(Redemption.points_redeemed), 0)
        ).filter(
            Redemption.client_id == self.client.id,
            Redemption.status == RedemptionStatus.PENDING.value
        ).scalar()
        return int(reserved or 0)

    def get_balance_view(self) -> Dict[str, int]:
        points_balance = self.client.points_balance or 0
        reserved_points = self.get_reserved_points()
        return {
            'points_balance': points_balance,
            'reserved_points': reserved_points,
            'available_points': calc.calculate_available_points(points_balance, reserved_points),
        }

    def get_available_discount(self, balance: Optional[Dict[str, int]] = None) -> Dict[str, Any]:
        """
        Usable points and discount for the client.

        Prefers the database RPC; on any RPC failure logs a warning and uses
        the local formula on the available (unreserved) balance.

        Returns:
            {
                'points_balance', 'usable_points', 'discount_amount',
                'meets_minimum', 'source'  # 'rpc' or 'local'
            }
        """
        balance = balance or self.get_balance_view()
        min_redemption = self.settings['min_redemption_points']

        try:
            rpc_result = self.discount_rpc(self.client.id)
            usable_points = int(rpc_result['usable_points'])
            result = {
                'points_balance': int(rpc_result['points_balance']),
                'usable_points': usable_points,
                'discount_amount': float(rpc_result['discount_amount']),
                'meets_minimum': usable_points >= min_redemption,
                'source': 'rpc',
            }
        except Exception as e:
            db.session.rollback()
            current_app.logger.warning(
                f"calculate_available_discount failed for client {self.client.id}, "
                f"using local calculation: {e}"
            )
        else:
            return result

        quote = calc.compute_redemption(
            balance['available_points'],
            self.settings['point_value'],
            min_redemption,
            self.settings['redemption_increment']
        )
        return {
            'points_balance': balance['points_balance'],
            'usable_points': quote['usable_points'],
            'discount_amount': quote['discount_amount'],
            'meets_minimum': quote['meets_minimum'],
            'source': 'local',
        }

    def get_progress(self, available_points: Optional[int] = None) -> Dict[str, Any]:
        """Milestone progress on the available balance."""
        if available_points is None:
            available_points = self.get_balance_view()['available_points']
        return calc.compute_milestone(
            available_points,
            self.settings['redemption_increment'],
            self.settings['min_redemption_points']
        )

    # ==================== Statistics ====================

    def _sum_points(self, start: datetime, end: datetime, **filters) -> int:
        query = db.session.query(
            func.coalesce(func.sum(LoyaltyTransaction.points), 0)
        ).filter(
            LoyaltyTransaction.client_id == self.client.id,
            LoyaltyTransaction.created_at >= start,
            LoyaltyTransaction.created_at < end
        )
        for column, value in filters.items():
            query = query.filter(getattr(LoyaltyTransaction, column) == value)
        return int(query.scalar() or 0)

    def _count_referrals(self, start: datetime, end: datetime) -> int:
        return Referral.query.filter(
            Referral.referrer_client_id == self.client.id,
            Referral.created_at >= start,
            Referral.created_at < end
        ).count()

    def get_yearly_stats(self, now: Optional[datetime] = None) -> Dict[str, Any]:
        """
        Stat cards comparing this calendar year with last year.

        Each stat has 'current', 'previous', 'change' (percent) and
        'change_label' ('+12.5%' or '').
        """
        now = now or datetime.utcnow()
        this_year = datetime(now.year, 1, 1)
        last_year = datetime(now.year - 1, 1, 1)
        next_year = datetime(now.year + 1, 1, 1)

        def periods(fn, **kwargs):
            return fn(this_year, next_year, **kwargs), fn(last_year, this_year, **kwargs)

        earned = periods(self._sum_points, transaction_type='earn')
        spent = periods(self._sum_points, transaction_type='spend')
        from_bookings = periods(self._sum_points, transaction_type='earn', source='purchase')
        referrals = periods(self._count_referrals)

        def stat(current, previous):
            change = calc.percentage_change(current, previous)
            return {
                'current': current,
                'previous': previous,
                'change': change,
                'change_label': calc.format_percentage_change(change),
            }

        return {
            'points_earned': stat(*earned),
            'points_spent': stat(abs(spent[0]), abs(spent[1])),
            'points_from_bookings': stat(*from_bookings),
            'friends_referred': stat(*referrals),
        }

    # ==================== History ====================

    def get_transactions_page(self, page: int = 1, page_size: Optional[int] = None) -> Dict[str, Any]:
        """Most recent transactions first, one page at a time."""
        page_size = page_size or current_app.config.get('POINTS_PAGE_SIZE', DEFAULT_PAGE_SIZE)
        page_size = min(max(page_size, 1), MAX_PAGE_SIZE)
        page = max(page or 1, 1)

        pagination = LoyaltyTransaction.query.filter_by(
            client_id=self.client.id
        ).order_by(
            LoyaltyTransaction.created_at.desc(), LoyaltyTransaction.id.desc()
        ).paginate(page=page, per_page=page_size, error_out=False)

        return {
            'transactions': [t.to_dict() for t in pagination.items],
            'pagination': {
                'page': page,
                'per_page': page_size,
                'total': pagination.total,
                'pages': pagination.pages,
                'has_next': pagination.has_next,
                'has_prev': pagination.has_prev,
            }
        }

    def get_referral_info(self) -> Dict[str, Any]:
        code = self.client.referral_code
        base_url = (current_app.config.get('SITE_URL') or '').rstrip('/')
        link = f'{base_url}/signup?ref={code}' if code and base_url else None
        return {'referral_code': code, 'referral_link': link}

    # ==================== Pages ====================

    def get_points_overview(self, page: int = 1, now: Optional[datetime] = None) -> Dict[str, Any]:
        """Everything the points hub shows."""
        balance = self.get_balance_view()
        discount = self.get_available_discount(balance)

        return {
            'balance': balance,
            'available_discount': discount,
            'progress': self.get_progress(balance['available_points']),
            'stats': self.get_yearly_stats(now),
            'history': self.get_transactions_page(page),
            'referral': self.get_referral_info(),
            'settings': {
                'point_value': self.settings['point_value'],
                'min_redemption_points': self.settings['min_redemption_points'],
                'redemption_increment': self.settings['redemption_increment'],
                'currency': self.settings['currency'],
            },
        }

    def get_redeem_summary(self) -> Dict[str, Any]:
        """Redeem page: usable points, discount in base and preferred currency."""
        base_currency = self.settings['currency']
        preferred_currency = get_display_currency(self.client.preferences, base_currency)

        balance = self.get_balance_view()
        discount = self.get_available_discount(balance)

        discount_conversion = convert_discount_to_preferred_currency(
            discount['discount_amount'], base_currency, preferred_currency, self.currency_service
        )
        example_conversion = convert_discount_to_preferred_currency(
            EXAMPLE_REDEMPTION_POINTS * self.settings['point_value'],
            base_currency, preferred_currency, self.currency_service
        )

        return {
            'balance': balance,
            'usable_points': discount['usable_points'],
            'meets_minimum': discount['meets_minimum'],
            'discount': discount_conversion,
            'display_label': format_conversion_label(discount_conversion),
            'example_increment': {
                'points': EXAMPLE_REDEMPTION_POINTS,
                **example_conversion,
            },
            'progress': self.get_progress(balance['available_points']),
            'base_currency': base_currency,
            'preferred_currency': preferred_currency,
            'min_redemption_points': self.settings['min_redemption_points'],
            'redemption_increment': self.settings['redemption_increment'],
            'point_value': self.settings['point_value'],
        }

    def quote_redemption(self, requested_points: Any, booking_amount: Any = None) -> Dict[str, Any]:
        """
        Snap a requested amount onto a valid redemption and price it.

        Raises:
            ValidationError: requested_points or booking_amount is not a finite number
            InsufficientPointsError: usable points are below the minimum
        """
        try:
            requested = int(requested_points)
        except (TypeError, ValueError, OverflowError):
            raise ValidationError('points must be a whole number', field='points')

        min_redemption = self.settings['min_redemption_points']
        increment = self.settings['redemption_increment']

        discount = self.get_available_discount()
        usable_points = discount['usable_points']
        if usable_points < min_redemption:
            raise InsufficientPointsError(usable_points, min_redemption)

        points = calc.clamp_points_to_redeem(requested, usable_points, min_redemption, increment)
        discount_amount = points * self.settings['point_value']

        quote = {
            'requested_points': requested,
            'points': points,
            'adjusted': points != requested,
            'discount_amount': discount_amount,
            'usable_points': usable_points,
            'currency': self.settings['currency'],
        }

        if booking_amount not in (None, ''):
            try:
                amount = float(booking_amount)
            except (TypeError, ValueError):
                raise ValidationError('booking_amount must be a number', field='booking_amount')
            if not math.isfinite(amount):
                raise ValidationError('booking_amount must be a number', field='booking_amount')
            final_price = calc.calculate_final_price(amount, discount_amount)
            quote['booking_amount'] = amount
            quote['final_price'] = final_price
            quote['covers_booking'] = amount > 0 and final_price == 0

        return quote

    def estimate_points_earned(self, amount: Any) -> Dict[str, Any]:
        """Earn calculator: points and discount value for a booking amount."""
        points = calc.calculate_points_earned(amount, self.settings['points_per_pound'])
        return {
            'points': points,
            'discount_value': points * self.settings['point_value'],
            'points_per_pound': self.settings['points_per_pound'],
            'currency': self.settings['currency'],
        }
