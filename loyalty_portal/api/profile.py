"""
Profile API endpoints.

Handles:
- Client profile
- Display preferences (preferred currency)
"""
from flask import Blueprint, request, jsonify

from ..middleware.client_auth import require_client_auth
from ..services.loyalty_settings import get_loyalty_settings
from ..services.profile_service import update_preferred_currency
from ..utils.currency import get_client_preferred_currency
from ..utils.errors import bad_request

profile_bp = Blueprint('profile', __name__)


@profile_bp.route('', methods=['GET'])
@require_client_auth
def get_profile(client):
    """Client profile with the resolved display currency."""
    base_currency = get_loyalty_settings()['currency']
    return jsonify({
        'client': client.to_dict(),
        'preferred_currency': get_client_preferred_currency(client.preferences, base_currency),
        'base_currency': base_currency,
    })


@profile_bp.route('/preferences', methods=['PUT'])
@require_client_auth
def update_preferences(client):
    """
    Update display preferences.

    Request body:
        preferred_currency: ISO currency code
    """
    data = request.get_json(silent=True) or {}
    if 'preferred_currency' not in data:
        return bad_request('preferred_currency is required')

    preferences = update_preferred_currency(client, data['preferred_currency'])
    return jsonify({
        'success': True,
        'preferences': preferences,
    })
