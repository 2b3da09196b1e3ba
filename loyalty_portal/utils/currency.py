"""
Currency lookup table and formatting helpers.

Codes are case-insensitive. Unknown, empty, or None codes fall back to GBP
without raising.

Usage:
    from loyalty_portal.utils.currency import format_currency_with_symbol

    format_currency_with_symbol(1234.5, 'usd')   # '$1,234.50'
    format_currency_with_symbol(10, 'BHD')       # '.د.ب10.000'
"""
import json
import logging
from typing import Any, Dict, List, Optional, Union

logger = logging.getLogger(__name__)

DEFAULT_CURRENCY = 'GBP'

CURRENCY_MAP: Dict[str, Dict[str, Any]] = {
    'GBP': {'symbol': '£', 'name': 'British Pound', 'code': 'GBP', 'position': 'before', 'decimal_places': 2},
    'USD': {'symbol': '$', 'name': 'US Dollar', 'code': 'USD', 'position': 'before', 'decimal_places': 2},
    'EUR': {'symbol': '€', 'name': 'Euro', 'code': 'EUR', 'position': 'before', 'decimal_places': 2},
    'CAD': {'symbol': 'C$', 'name': 'Canadian Dollar', 'code': 'CAD', 'position': 'before', 'decimal_places': 2},
    'AUD': {'symbol': 'A$', 'name': 'Australian Dollar', 'code': 'AUD', 'position': 'before', 'decimal_places': 2},
    'AED': {'symbol': 'د.إ', 'name': 'UAE Dirham', 'code': 'AED', 'position': 'before', 'decimal_places': 2},
    'BHD': {'symbol': '.د.ب', 'name': 'Bahraini Dinar', 'code': 'BHD', 'position': 'before', 'decimal_places': 3},
    'SGD': {'symbol': 'S$', 'name': 'Singapore Dollar', 'code': 'SGD', 'position': 'before', 'decimal_places': 2},
    'NZD': {'symbol': 'NZ$', 'name': 'New Zealand Dollar', 'code': 'NZD', 'position': 'before', 'decimal_places': 2},
    'ZAR': {'symbol': 'R', 'name': 'South African Rand', 'code': 'ZAR', 'position': 'before', 'decimal_places': 2},
    'MYR': {'symbol': 'RM', 'name': 'Malaysian Ringgit', 'code': 'MYR', 'position': 'before', 'decimal_places': 2},
    'QAR': {'symbol': 'ر.ق', 'name': 'Qatari Riyal', 'code': 'QAR', 'position': 'before', 'decimal_places': 2},
    'SAR': {'symbol': 'ر.س', 'name': 'Saudi Riyal', 'code': 'SAR', 'position': 'before', 'decimal_places': 2},
    'INR': {'symbol': '₹', 'name': 'Indian Rupee', 'code': 'INR', 'position': 'before', 'decimal_places': 2},
}


def normalize_currency_code(currency: Optional[str]) -> str:
    """Upper-case a code; None/empty becomes the default currency."""
    return (currency or DEFAULT_CURRENCY).strip().upper() or DEFAULT_CURRENCY


def get_currency_info(currency: Optional[str]) -> Dict[str, Any]:
    """Full currency record, GBP for anything unrecognised."""
    return CURRENCY_MAP.get(normalize_currency_code(currency), CURRENCY_MAP[DEFAULT_CURRENCY])


def get_currency_symbol(currency: Optional[str]) -> str:
    return get_currency_info(currency)['symbol']


def get_currency_name(currency: Optional[str]) -> str:
    return get_currency_info(currency)['name']


def is_valid_currency(currency: Optional[str]) -> bool:
    if not currency:
        return False
    return currency.strip().upper() in CURRENCY_MAP


def get_supported_currencies() -> List[str]:
    return list(CURRENCY_MAP.keys())


def format_currency_with_symbol(
    amount: Union[int, float],
    currency: Optional[str] = DEFAULT_CURRENCY,
    minimum_fraction_digits: Optional[int] = None,
    maximum_fraction_digits: Optional[int] = None,
) -> str:
    """
    Format an amount with grouped thousands and the currency symbol.

    Fraction digits default to the currency's decimal places. When only a
    maximum is given, trailing zeros beyond the minimum are trimmed.
    """
    info = get_currency_info(currency)
    places = info['decimal_places']
    min_digits = places if minimum_fraction_digits is None else minimum_fraction_digits
    max_digits = places if maximum_fraction_digits is None else maximum_fraction_digits
    max_digits = max(max_digits, min_digits)

    formatted = f"{float(amount or 0):,.{max_digits}f}"
    if max_digits > min_digits and '.' in formatted:
        whole, fraction = formatted.split('.')
        fraction = fraction.rstrip('0')
        if len(fraction) < min_digits:
            fraction = fraction.ljust(min_digits, '0')
        formatted = f"{whole}.{fraction}" if fraction else whole

    if info['position'] == 'before':
        return f"{info['symbol']}{formatted}"
    return f"{formatted} {info['symbol']}"


def parse_client_preferences(preferences: Union[dict, str, None]) -> Dict[str, Any]:
    """Client preferences as a dict; stored either as JSON text or a mapping."""
    if not preferences:
        return {}
    if isinstance(preferences, str):
        try:
            preferences = json.loads(preferences)
        except ValueError:
            logger.debug('Unparseable client preferences, ignoring')
            return {}
    return dict(preferences) if isinstance(preferences, dict) else {}


def get_client_preferred_currency(
    preferences: Union[dict, str, None],
    default_currency: str = DEFAULT_CURRENCY
) -> str:
    """
    Resolve the client's preferred display currency.

    Args:
        preferences: Client preferences as a dict or JSON string. Looks at
            'preferred_currency' first, then 'currency'.
        default_currency: Usually the loyalty_settings base currency

    Returns:
        Upper-case currency code
    """
    fallback = normalize_currency_code(default_currency)
    preferences = parse_client_preferences(preferences)

    preferred = preferences.get('preferred_currency') or preferences.get('currency')
    if preferred and is_valid_currency(preferred):
        return preferred.strip().upper()

    return fallback
