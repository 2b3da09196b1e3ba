"""
Tests for the Currency API endpoints.
"""
import pytest
import requests
from unittest.mock import MagicMock, patch


@pytest.fixture
def mock_rates():
    response = MagicMock()
    response.json.return_value = {
        'result': 'success',
        'base_code': 'GBP',
        'conversion_rates': {'GBP': 1, 'USD': 1.2},
    }
    with patch('loyalty_portal.services.currency_service.requests.get', return_value=response) as mocked:
        yield mocked


class TestSupportedCurrencies:

    def test_list_without_auth(self, client):
        response = client.get('/api/currency/supported')

        assert response.status_code == 200
        currencies = response.get_json()['currencies']
        assert len(currencies) == 14
        assert currencies[0] == {'code': 'GBP', 'name': 'British Pound', 'symbol': '£'}


class TestConvert:
    """Tests for GET /api/currency/convert."""

    def test_convert(self, client, auth_headers, mock_rates):
        response = client.get('/api/currency/convert?amount=100&from=GBP&to=usd', headers=auth_headers)

        assert response.status_code == 200
        data = response.get_json()
        assert data['to_currency'] == 'USD'
        assert data['rate'] == 1.2
        assert data['adjusted_rate'] == 1.23
        assert data['formatted_converted'] == '$123.00'

    def test_requires_auth(self, client, mock_rates):
        response = client.get('/api/currency/convert?amount=100&from=GBP&to=USD')

        assert response.status_code == 401
        mock_rates.assert_not_called()

    def test_unsupported_currency(self, client, auth_headers, mock_rates):
        response = client.get('/api/currency/convert?amount=100&from=GBP&to=XYZ', headers=auth_headers)

        assert response.status_code == 400
        assert response.get_json()['error']['code'] == 'INVALID_FIELD'

    def test_amount_must_be_numeric(self, client, auth_headers, mock_rates):
        response = client.get('/api/currency/convert?amount=lots&from=GBP&to=USD', headers=auth_headers)

        assert response.status_code == 400

    @pytest.mark.parametrize('amount', ['nan', 'inf', '-inf'])
    def test_amount_must_be_finite(self, client, auth_headers, mock_rates, amount):
        response = client.get(f'/api/currency/convert?amount={amount}&from=GBP&to=USD', headers=auth_headers)

        assert response.status_code == 400
        assert response.get_json()['error']['code'] == 'INVALID_FIELD'
        mock_rates.assert_not_called()

    def test_rate_api_failure(self, client, auth_headers, mock_rates):
        mock_rates.side_effect = requests.ConnectionError('connection refused')

        response = client.get('/api/currency/convert?amount=100&from=GBP&to=USD', headers=auth_headers)

        assert response.status_code == 502
        assert response.get_json()['error']['code'] == 'CURRENCY_CONVERSION_ERROR'
