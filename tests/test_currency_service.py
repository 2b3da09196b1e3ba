"""
Tests for the exchange rate service.

The rate API is never called; requests.get is patched in every test.
"""
import pytest
import requests
from unittest.mock import MagicMock, patch

from loyalty_portal.services.currency_service import CurrencyService
from loyalty_portal.utils.exceptions import ConfigurationError, CurrencyConversionError

RATES_URL = 'https://v6.exchangerate-api.com/v6/test-key/latest/GBP'


def rates_response(rates=None, result='success', **extra):
    """Fake requests.Response for the rate API."""
    response = MagicMock()
    response.raise_for_status.return_value = None
    response.json.return_value = {
        'result': result,
        'base_code': 'GBP',
        'conversion_rates': rates if rates is not None else {'GBP': 1, 'USD': 1.2, 'EUR': 1.16},
        **extra,
    }
    return response


@pytest.fixture
def mock_get():
    with patch('loyalty_portal.services.currency_service.requests.get') as mocked:
        mocked.return_value = rates_response()
        yield mocked


class TestConvertCurrency:

    def test_applies_spread(self, app, mock_get):
        result = CurrencyService().convert_currency(100, 'GBP', 'USD')

        assert result['from_currency'] == 'GBP'
        assert result['to_currency'] == 'USD'
        assert result['amount'] == 100
        assert result['rate'] == 1.2
        assert result['adjusted_rate'] == 1.23
        assert result['converted_amount'] == pytest.approx(123.0)

    def test_rates_rounded_to_three_places(self, app, mock_get):
        mock_get.return_value = rates_response({'USD': 1.23456})

        result = CurrencyService().convert_currency(100, 'GBP', 'USD')

        assert result['rate'] == 1.235
        assert result['adjusted_rate'] == 1.265
        assert result['converted_amount'] == pytest.approx(126.5424)

    def test_calls_rate_api(self, app, mock_get):
        CurrencyService().convert_currency(50, 'gbp', 'usd')

        mock_get.assert_called_once_with(RATES_URL, timeout=10.0)

    def test_same_currency_short_circuits(self, app, mock_get):
        result = CurrencyService().convert_currency(75, 'gbp', 'GBP')

        assert result['converted_amount'] == 75
        assert result['rate'] == 1
        assert result['adjusted_rate'] == 1
        mock_get.assert_not_called()

    def test_missing_rate(self, app, mock_get):
        with pytest.raises(CurrencyConversionError) as exc_info:
            CurrencyService().convert_currency(100, 'GBP', 'INR')

        assert 'INR' in exc_info.value.message

    def test_custom_spread(self, app, mock_get):
        result = CurrencyService(spread=0).convert_currency(100, 'GBP', 'USD')

        assert result['adjusted_rate'] == 1.2


class TestRateFailures:

    def test_connection_error(self, app, mock_get):
        mock_get.side_effect = requests.ConnectionError('connection refused')

        with pytest.raises(CurrencyConversionError) as exc_info:
            CurrencyService().convert_currency(100, 'GBP', 'USD')

        assert exc_info.value.code == 'CURRENCY_CONVERSION_ERROR'
        assert isinstance(exc_info.value.original_error, requests.ConnectionError)

    def test_http_error(self, app, mock_get):
        mock_get.return_value.raise_for_status.side_effect = requests.HTTPError('503 Server Error')

        with pytest.raises(CurrencyConversionError):
            CurrencyService().fetch_exchange_rates('GBP')

    def test_error_payload(self, app, mock_get):
        mock_get.return_value = rates_response(result='error', **{'error-type': 'invalid-key'})

        with pytest.raises(CurrencyConversionError) as exc_info:
            CurrencyService().fetch_exchange_rates('GBP')

        assert 'invalid-key' in exc_info.value.message

    def test_missing_api_key(self, app, mock_get):
        with pytest.raises(ConfigurationError):
            CurrencyService(api_key='').fetch_exchange_rates('GBP')

        mock_get.assert_not_called()

    def test_failures_are_not_cached(self, app, mock_get):
        service = CurrencyService()
        mock_get.side_effect = [requests.Timeout('timed out'), rates_response()]

        with pytest.raises(CurrencyConversionError):
            service.fetch_exchange_rates('GBP')
        data = service.fetch_exchange_rates('GBP')

        assert data['conversion_rates']['USD'] == 1.2
        assert mock_get.call_count == 2


class TestRateCaching:

    def test_rate_table_cached_per_base(self, app, mock_get):
        service = CurrencyService()

        service.convert_currency(100, 'GBP', 'USD')
        service.convert_currency(200, 'GBP', 'EUR')
        CurrencyService().convert_currency(10, 'GBP', 'USD')

        assert mock_get.call_count == 1

    def test_different_base_fetched_separately(self, app, mock_get):
        service = CurrencyService()

        service.fetch_exchange_rates('GBP')
        service.fetch_exchange_rates('USD')

        assert mock_get.call_count == 2
        assert mock_get.call_args_list[1].args[0].endswith('/latest/USD')

    def test_clear_cache_forces_refetch(self, app, mock_get):
        service = CurrencyService()

        service.fetch_exchange_rates('GBP')
        service.clear_cache('gbp')
        service.fetch_exchange_rates('GBP')

        assert mock_get.call_count == 2

    def test_pair_memoized_within_request(self, app, mock_get):
        """A cleared cache does not trigger a second lookup inside one request."""
        with app.test_request_context('/api/points/redeem'):
            service = CurrencyService()
            service.convert_currency(100, 'GBP', 'USD')
            service.clear_cache()
            service.convert_currency(300, 'GBP', 'USD')

        assert mock_get.call_count == 1

    def test_no_app_context(self, mock_get):
        """Usable from scripts without an app: nothing is cached."""
        service = CurrencyService(api_key='test-key')

        service.convert_currency(100, 'GBP', 'USD')
        service.convert_currency(100, 'GBP', 'USD')

        assert mock_get.call_count == 2
        mock_get.assert_called_with(RATES_URL, timeout=10)
