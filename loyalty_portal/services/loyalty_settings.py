"""
Read boundary for the loyalty_settings singleton.

Missing rows and NULL columns take DEFAULT_LOYALTY_SETTINGS. Values that
would break the redemption arithmetic (a non-positive increment, a negative
minimum) are rejected here instead of surfacing as a ZeroDivisionError on
some page later.
"""
import logging
from typing import Any, Dict

from ..extensions import db
from ..models import LoyaltySettings
from ..utils.currency import is_valid_currency, DEFAULT_CURRENCY
from ..utils.exceptions import ConfigurationError
from ..utils.settings_defaults import get_settings_with_defaults

logger = logging.getLogger(__name__)

SETTINGS_ROW_ID = 1


def validate_loyalty_settings(settings: Dict[str, Any]) -> Dict[str, Any]:
    """
    Check settings invariants and normalise types.

    Raises:
        ConfigurationError: redemption_increment <= 0 or min_redemption_points < 0
    """
    increment = settings['redemption_increment']
    if increment is None or int(increment) <= 0:
        raise ConfigurationError(
            f'loyalty_settings.redemption_increment must be greater than zero (got {increment})'
        )

    minimum = settings['min_redemption_points']
    if int(minimum) < 0:
        raise ConfigurationError(
            f'loyalty_settings.min_redemption_points must not be negative (got {minimum})'
        )

    currency = (settings['currency'] or DEFAULT_CURRENCY).upper()
    if not is_valid_currency(currency):
        logger.warning('Unsupported loyalty currency %s, using %s', currency, DEFAULT_CURRENCY)
        currency = DEFAULT_CURRENCY

    return {
        **settings,
        'point_value': float(settings['point_value']),
        'points_per_pound': float(settings['points_per_pound']),
        'redemption_increment': int(increment),
        'min_redemption_points': int(minimum),
        'currency': currency,
    }


def get_loyalty_settings() -> Dict[str, Any]:
    """
    Load, default, and validate the loyalty settings row.

    Returns:
        Dict with every key of DEFAULT_LOYALTY_SETTINGS
    """
    row = db.session.get(LoyaltySettings, SETTINGS_ROW_ID)
    if row is None:
        logger.warning('loyalty_settings row %s missing, using defaults', SETTINGS_ROW_ID)
        stored = {}
    else:
        stored = row.to_dict()

    return validate_loyalty_settings(get_settings_with_defaults(stored))
