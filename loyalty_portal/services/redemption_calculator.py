"""
Redemption, milestone, and earning arithmetic.

Every page that shows usable points, discounts, or progress bars goes through
these functions so the numbers agree everywhere:
- Points hub (GET /api/points)
- Redeem page (GET /api/points/redeem, POST /api/points/redeem/quote)
- Trip detail (GET /api/trips/<id>)
- Earn calculator (GET /api/points/calculator/earn)

All functions are pure: plain numbers in, plain dicts/numbers out.
"""
import math
from typing import Any, Dict, Optional, Union

from ..utils.exceptions import ValidationError

Number = Union[int, float]


def _require_positive_increment(redemption_increment: Number) -> None:
    if redemption_increment is None or redemption_increment <= 0:
        raise ValidationError(
            'Redemption increment must be greater than zero',
            field='redemption_increment'
        )


def floor_to_increment(points: Number, redemption_increment: Number) -> int:
    """Round points down to the nearest multiple of the increment."""
    _require_positive_increment(redemption_increment)
    return int(math.floor(points / redemption_increment) * redemption_increment)


def calculate_available_points(points_balance: Optional[int], reserved_points: Optional[int]) -> int:
    """Balance minus points held by pending redemptions. Not clamped at zero."""
    return (points_balance or 0) - (reserved_points or 0)


def compute_redemption(
    available_points: Number,
    point_value: Number,
    min_redemption: Number,
    redemption_increment: Number
) -> Dict[str, Any]:
    """
    Quote how much of the available balance can be redeemed right now.

    Args:
        available_points: Balance minus reserved points
        point_value: Currency units per point
        min_redemption: Minimum points for a redemption to be submitted
        redemption_increment: Step size points are redeemed in

    Returns:
        {
            'usable_points': int,        # available floored to the increment
            'discount_amount': float,    # usable_points * point_value
            'meets_minimum': bool,       # usable_points >= min_redemption
            'redeemable_points': int,    # usable_points, or 0 below the minimum
        }

    Raises:
        ValidationError: redemption_increment is zero or negative
    """
    usable_points = floor_to_increment(available_points, redemption_increment)
    meets_minimum = usable_points >= (min_redemption or 0)

    return {
        'usable_points': usable_points,
        'discount_amount': usable_points * point_value,
        'meets_minimum': meets_minimum,
        'redeemable_points': usable_points if meets_minimum else 0,
    }


def clamp_percentage(value: Number) -> float:
    """Clamp a percentage into [0, 100] for progress-bar widths."""
    return float(max(0, min(100, value)))


def compute_milestone(
    current_points: Number,
    redemption_increment: Number,
    min_redemption_points: Number
) -> Dict[str, Any]:
    """
    Next redemption milestone and progress toward it.

    Below the minimum, the milestone is the minimum itself. From there on,
    milestones are successive multiples of the increment.

    Returns:
        {
            'next_milestone': int,
            'points_to_next': int,
            'progress_percentage': float,   # clamped to [0, 100]
            'current_level_points': int,    # last multiple reached (0 below minimum)
            'below_minimum': bool,
        }
    """
    _require_positive_increment(redemption_increment)

    if min_redemption_points and current_points < min_redemption_points:
        next_milestone = min_redemption_points
        progress = current_points / min_redemption_points * 100
        current_level_points = 0
        below_minimum = True
    else:
        current_level = math.floor(current_points / redemption_increment)
        next_milestone = (current_level + 1) * redemption_increment
        # Sign follows current_points; negative balances clamp to 0%
        progress = math.fmod(current_points, redemption_increment) / redemption_increment * 100
        current_level_points = current_level * redemption_increment
        below_minimum = False

    return {
        'next_milestone': int(next_milestone),
        'points_to_next': int(next_milestone - current_points),
        'progress_percentage': clamp_percentage(progress),
        'current_level_points': int(current_level_points),
        'below_minimum': below_minimum,
    }


def clamp_points_to_redeem(
    requested_points: Number,
    usable_points: Number,
    min_redemption: Number,
    redemption_increment: Number
) -> int:
    """
    Snap a slider/input value onto a valid redemption amount.

    Rounds down to the increment, then clamps into
    [min_redemption, usable_points floored to the increment]. The minimum wins
    when usable points are below it; callers must still check eligibility.
    """
    ceiling = floor_to_increment(usable_points, redemption_increment)
    rounded = floor_to_increment(requested_points or 0, redemption_increment)
    return int(max(min_redemption or 0, min(rounded, ceiling)))


def calculate_final_price(booking_amount: Number, discount_amount: Number) -> float:
    """Booking price after the points discount, never below zero."""
    return float(max(0, (booking_amount or 0) - (discount_amount or 0)))


def calculate_points_earned(amount: Any, points_per_pound: Number) -> int:
    """
    Points a booking of the given amount would earn.

    Non-numeric, non-finite or negative amounts earn nothing.
    """
    try:
        value = float(amount)
    except (TypeError, ValueError):
        return 0
    if not math.isfinite(value) or value <= 0:
        return 0
    return int(math.floor(value * float(points_per_pound or 0)))


def percentage_change(current: Number, previous: Number) -> float:
    """
    Year-over-year change for stat cards.

    No previous activity counts as +100% when there is current activity,
    otherwise 0.
    """
    if previous and previous > 0:
        return (current - previous) / previous * 100
    return 100.0 if current and current > 0 else 0.0


def format_percentage_change(value: Number) -> str:
    """'+12.5%', '-3.0%', or '' for no change."""
    if not value:
        return ''
    sign = '+' if value > 0 else ''
    return f'{sign}{value:.1f}%'
