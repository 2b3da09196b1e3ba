"""
Exchange rate lookup and currency conversion.

Rates come from exchangerate-api.com (v6). A 2.5% spread is added on top of
the market rate to cover movement between quote and payment.

Caching:
- Rate tables are cached per base currency in the shared app cache
  (EXCHANGE_RATE_CACHE_SECONDS, 40 minutes by default)
- Within a request, each (from, to) pair is looked up once, so several
  widgets converting the same pair cost one lookup

Usage:
    service = CurrencyService()
    result = service.convert_currency(100, 'GBP', 'USD')
    result['converted_amount'], result['rate'], result['adjusted_rate']
"""
import logging
from typing import Any, Dict, Optional

import requests
from flask import current_app, g, has_app_context, has_request_context

from ..utils.cache import cache, cache_key
from ..utils.currency import normalize_currency_code
from ..utils.exceptions import ConfigurationError, CurrencyConversionError

logger = logging.getLogger(__name__)

DEFAULT_API_BASE = 'https://v6.exchangerate-api.com/v6'
DEFAULT_SPREAD = 0.025
DEFAULT_CACHE_SECONDS = 40 * 60
DEFAULT_TIMEOUT = 10

REQUEST_MEMO_ATTR = '_currency_rate_memo'


def _config(key: str, default=None):
    if has_app_context():
        return current_app.config.get(key, default)
    return default


class CurrencyService:
    """
    Converts amounts between the supported currencies.

    All constructor arguments default to the Flask app config, so inside a
    request `CurrencyService()` is enough.
    """

    def __init__(
        self,
        api_key: Optional[str] = None,
        api_base: Optional[str] = None,
        spread: Optional[float] = None,
        cache_seconds: Optional[int] = None,
        timeout: Optional[float] = None
    ):
        self.api_key = api_key if api_key is not None else _config('EXCHANGE_RATE_API_KEY', '')
        self.api_base = (api_base or _config('EXCHANGE_RATE_API_BASE', DEFAULT_API_BASE)).rstrip('/')
        self.spread = spread if spread is not None else _config('CURRENCY_SPREAD', DEFAULT_SPREAD)
        self.cache_seconds = cache_seconds or _config('EXCHANGE_RATE_CACHE_SECONDS', DEFAULT_CACHE_SECONDS)
        self.timeout = timeout or _config('EXCHANGE_RATE_TIMEOUT', DEFAULT_TIMEOUT)

    # ==================== Rate Lookup ====================

    def fetch_exchange_rates(self, base_currency: str = 'GBP') -> Dict[str, Any]:
        """
        Fetch the rate table for a base currency.

        Returns:
            API payload: {'result', 'base_code', 'conversion_rates', ...}

        Raises:
            ConfigurationError: No API key configured
            CurrencyConversionError: HTTP failure or error payload
        """
        base_currency = normalize_currency_code(base_currency)
        key = cache_key('exchange_rates', base=base_currency)

        if has_app_context():
            cached = cache.get(key)
            if cached:
                logger.debug('Using cached exchange rates for %s', base_currency)
                return cached

        if not self.api_key:
            raise ConfigurationError('EXCHANGE_RATE_API_KEY is not configured')

        url = f'{self.api_base}/{self.api_key}/latest/{base_currency}'
        logger.info('Fetching exchange rates for %s', base_currency)

        try:
            response = requests.get(url, timeout=self.timeout)
            response.raise_for_status()
            data = response.json()
        except requests.RequestException as e:
            logger.error('Exchange rate request failed for %s: %s', base_currency, e)
            raise CurrencyConversionError(
                f'Failed to fetch exchange rates for {base_currency}', original_error=e
            ) from e
        except ValueError as e:
            raise CurrencyConversionError(
                f'Invalid exchange rate payload for {base_currency}', original_error=e
            ) from e

        if data.get('result') != 'success' or not isinstance(data.get('conversion_rates'), dict):
            error_type = data.get('error-type', 'unknown')
            raise CurrencyConversionError(
                f'Exchange rate API returned an error for {base_currency}: {error_type}'
            )

        if has_app_context():
            cache.set(key, data, timeout=self.cache_seconds)

        return data

    def get_rate(self, from_currency: str, to_currency: str) -> float:
        """Market rate (no spread) from one currency to another."""
        rates = self.fetch_exchange_rates(from_currency)
        rate = rates['conversion_rates'].get(to_currency)
        if not rate:
            raise CurrencyConversionError(f'Exchange rate not found for {to_currency}')
        return float(rate)

    # ==================== Conversion ====================

    def convert_currency(self, amount: float, from_currency: str, to_currency: str) -> Dict[str, Any]:
        """
        Convert an amount, applying the spread.

        Same-currency conversions (case-insensitive) short-circuit with rate 1
        and never touch the rate lookup.

        Returns:
            {
                'from_currency', 'to_currency',
                'amount', 'converted_amount',
                'rate',            # market rate, 3 d.p.
                'adjusted_rate',   # rate with spread, 3 d.p.
            }

        Raises:
            CurrencyConversionError: Lookup failed or pair unsupported
        """
        from_code = normalize_currency_code(from_currency)
        to_code = normalize_currency_code(to_currency)

        if from_code == to_code:
            return {
                'from_currency': from_code,
                'to_currency': to_code,
                'amount': amount,
                'converted_amount': amount,
                'rate': 1,
                'adjusted_rate': 1,
            }

        base_rate = self._memoized_rate(from_code, to_code)
        adjusted_rate = base_rate * (1 + self.spread)

        return {
            'from_currency': from_code,
            'to_currency': to_code,
            'amount': amount,
            'converted_amount': amount * adjusted_rate,
            'rate': round(base_rate, 3),
            'adjusted_rate': round(adjusted_rate, 3),
        }

    def _memoized_rate(self, from_code: str, to_code: str) -> float:
        if not has_request_context():
            return self.get_rate(from_code, to_code)

        memo = getattr(g, REQUEST_MEMO_ATTR, None)
        if memo is None:
            memo = {}
            setattr(g, REQUEST_MEMO_ATTR, memo)

        pair = (from_code, to_code)
        if pair not in memo:
            memo[pair] = self.get_rate(from_code, to_code)
        return memo[pair]

    def clear_cache(self, base_currency: Optional[str] = None) -> None:
        """Drop cached rate tables (one base currency, or everything)."""
        if base_currency:
            cache.delete(cache_key('exchange_rates', base=normalize_currency_code(base_currency)))
        else:
            cache.clear()
