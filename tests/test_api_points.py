"""
Tests for the Points API endpoints.

Tests cover:
- Client authentication header
- Points hub overview, progress, and history
- Redeem summary and quotes
- Earn calculator
"""
import pytest

from loyalty_portal.extensions import db


class TestClientAuth:
    """Requests without a resolvable client are rejected."""

    def test_missing_header(self, client, sample_client):
        response = client.get('/api/points')

        assert response.status_code == 401
        assert response.get_json()['error']['code'] == 'AUTH_REQUIRED'

    def test_malformed_header(self, client, sample_client):
        response = client.get('/api/points', headers={'X-Client-ID': 'not-a-number'})

        assert response.status_code == 401

    def test_unknown_client(self, client, sample_client):
        response = client.get('/api/points', headers={'X-Client-ID': '9999'})

        assert response.status_code == 401
        assert response.get_json()['error']['message'] == 'Client account not found'


class TestPointsOverview:
    """Tests for GET /api/points."""

    def test_overview(self, client, auth_headers):
        response = client.get('/api/points', headers=auth_headers)

        assert response.status_code == 200
        data = response.get_json()
        assert data['balance']['points_balance'] == 650
        assert data['available_discount']['usable_points'] == 600
        assert data['available_discount']['source'] == 'local'
        assert data['progress']['next_milestone'] == 700
        assert data['referral']['referral_link'] == 'http://portal.test/signup?ref=ADA123'
        assert 'points_earned' in data['stats']

    def test_progress(self, client, auth_headers):
        response = client.get('/api/points/progress', headers=auth_headers)

        assert response.status_code == 200
        data = response.get_json()
        assert data['available_points'] == 650
        assert data['points_to_next'] == 50
        assert data['progress_percentage'] == 50.0

    def test_transactions(self, client, auth_headers):
        response = client.get('/api/points/transactions?page=1&per_page=5', headers=auth_headers)

        assert response.status_code == 200
        data = response.get_json()
        assert data['transactions'] == []
        assert data['pagination']['per_page'] == 5
        assert data['pagination']['total'] == 0


class TestRedeem:
    """Tests for /api/points/redeem endpoints."""

    def test_redeem_summary(self, client, auth_headers):
        response = client.get('/api/points/redeem', headers=auth_headers)

        assert response.status_code == 200
        data = response.get_json()
        assert data['usable_points'] == 600
        assert data['meets_minimum'] is True
        assert data['discount']['formatted_converted'] == '£600.00'
        assert data['display_label'] == '£600.00'
        assert data['redemption_increment'] == 100

    def test_quote(self, client, auth_headers):
        response = client.post(
            '/api/points/redeem/quote',
            json={'points': 350, 'booking_amount': 5000},
            headers=auth_headers
        )

        assert response.status_code == 200
        data = response.get_json()
        assert data['points'] == 300
        assert data['adjusted'] is True
        assert data['final_price'] == 4700.0

    def test_quote_requires_points(self, client, auth_headers):
        response = client.post('/api/points/redeem/quote', json={}, headers=auth_headers)

        assert response.status_code == 400
        assert response.get_json()['error']['code'] == 'INVALID_REQUEST'

    def test_quote_invalid_points(self, client, auth_headers):
        response = client.post('/api/points/redeem/quote', json={'points': 'lots'}, headers=auth_headers)

        assert response.status_code == 400
        assert response.get_json()['error']['code'] == 'INVALID_POINTS'

    def test_quote_overflowing_points(self, client, auth_headers):
        """A JSON number too large for a float parses as infinity."""
        response = client.post(
            '/api/points/redeem/quote',
            data='{"points": 1e400}',
            headers=auth_headers
        )

        assert response.status_code == 400
        assert response.get_json()['error']['code'] == 'INVALID_POINTS'

    def test_quote_nan_booking_amount(self, client, auth_headers):
        response = client.post(
            '/api/points/redeem/quote',
            data='{"points": 300, "booking_amount": NaN}',
            headers=auth_headers
        )

        assert response.status_code == 400
        assert response.get_json()['error']['code'] == 'INVALID_BOOKING_AMOUNT'

    def test_quote_insufficient_points(self, client, auth_headers, sample_client):
        sample_client.points_balance = 50
        db.session.commit()

        response = client.post('/api/points/redeem/quote', json={'points': 100}, headers=auth_headers)

        assert response.status_code == 422
        assert response.get_json()['error']['code'] == 'INSUFFICIENT_POINTS'


class TestEarnCalculator:
    """Tests for GET /api/points/calculator/earn."""

    @pytest.mark.parametrize('amount,expected', [
        ('250.5', 250),
        ('0', 0),
        ('abc', 0),
    ])
    def test_estimate(self, client, auth_headers, amount, expected):
        response = client.get(f'/api/points/calculator/earn?amount={amount}', headers=auth_headers)

        assert response.status_code == 200
        assert response.get_json()['points'] == expected

    def test_amount_required(self, client, auth_headers):
        response = client.get('/api/points/calculator/earn', headers=auth_headers)

        assert response.status_code == 400


class TestHealth:

    def test_health(self, client):
        response = client.get('/health')

        assert response.status_code == 200
        assert response.get_json() == {'status': 'healthy', 'service': 'loyalty-portal'}
