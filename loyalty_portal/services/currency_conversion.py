"""
Convert discount amounts from the loyalty base currency into the client's
preferred currency for display.

Conversion failure is never fatal: the unconverted base amount is shown
instead and a warning is logged.
"""
import logging
from typing import Any, Dict, Optional, Union

from .currency_service import CurrencyService
from ..utils.currency import (
    format_currency_with_symbol,
    get_client_preferred_currency,
    normalize_currency_code,
)
from ..utils.exceptions import PortalError

logger = logging.getLogger(__name__)


def convert_discount_to_preferred_currency(
    amount: float,
    base_currency: str,
    preferred_currency: str,
    service: Optional[CurrencyService] = None
) -> Dict[str, Any]:
    """
    Convert a base-currency amount for display.

    Args:
        amount: Amount in the loyalty_settings currency
        base_currency: loyalty_settings currency
        preferred_currency: Client display currency
        service: CurrencyService to use (one is created from app config if omitted)

    Returns:
        Dict with original/converted amounts and currencies, rate,
        adjusted_rate, formatted strings, and 'converted' (False when the
        fallback was used).
    """
    base_code = normalize_currency_code(base_currency)
    preferred_code = normalize_currency_code(preferred_currency)
    formatted_original = format_currency_with_symbol(amount, base_code)

    fallback = {
        'original_amount': amount,
        'converted_amount': amount,
        'original_currency': base_code,
        'preferred_currency': preferred_code,
        'rate': 1,
        'adjusted_rate': 1,
        'formatted_original': formatted_original,
        'formatted_converted': formatted_original,
        'converted': base_code == preferred_code,
    }

    if base_code == preferred_code:
        return fallback

    service = service or CurrencyService()
    try:
        conversion = service.convert_currency(amount, base_code, preferred_code)
    except PortalError as e:
        logger.warning(
            'Currency conversion %s->%s failed, showing base amount: %s',
            base_code, preferred_code, e.message
        )
        fallback['converted'] = False
        return fallback

    return {
        'original_amount': amount,
        'converted_amount': conversion['converted_amount'],
        'original_currency': base_code,
        'preferred_currency': preferred_code,
        'rate': conversion['rate'],
        'adjusted_rate': conversion['adjusted_rate'],
        'formatted_original': formatted_original,
        'formatted_converted': format_currency_with_symbol(conversion['converted_amount'], preferred_code),
        'converted': True,
    }


def get_display_currency(preferences: Union[dict, str, None], base_currency: str = 'GBP') -> str:
    """Client's preferred currency, or the base currency."""
    return get_client_preferred_currency(preferences, base_currency)


def format_discount_with_conversion(
    amount: float,
    base_currency: str,
    preferred_currency: str,
    converted_amount: Optional[float] = None
) -> str:
    """
    Show both currencies when they differ: '£100.00 (≈ $128.13)'.

    Without a converted amount the base amount is shown under the preferred
    symbol.
    """
    if normalize_currency_code(base_currency) == normalize_currency_code(preferred_currency):
        return format_currency_with_symbol(amount, base_currency)

    base_formatted = format_currency_with_symbol(amount, base_currency)
    preferred_formatted = format_currency_with_symbol(
        converted_amount if converted_amount else amount, preferred_currency
    )
    return f'{base_formatted} (≈ {preferred_formatted})'


def format_conversion_label(conversion: Dict[str, Any]) -> str:
    """Display label for a convert_discount_to_preferred_currency result."""
    if not conversion['converted']:
        return conversion['formatted_original']
    return format_discount_with_conversion(
        conversion['original_amount'],
        conversion['original_currency'],
        conversion['preferred_currency'],
        conversion['converted_amount']
    )
