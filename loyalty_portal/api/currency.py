"""
Currency API endpoints.

Handles:
- Supported currency list (for the currency selector)
- Ad-hoc conversion
"""
import math

from flask import Blueprint, request, jsonify

from ..middleware.client_auth import require_client_auth
from ..services.currency_service import CurrencyService
from ..utils.currency import (
    format_currency_with_symbol,
    get_currency_name,
    get_currency_symbol,
    get_supported_currencies,
    is_valid_currency,
)
from ..utils.errors import bad_request, ErrorCode

currency_bp = Blueprint('currency', __name__)


@currency_bp.route('/supported', methods=['GET'])
def list_supported_currencies():
    """Currencies the portal can display."""
    return jsonify({
        'currencies': [
            {'code': code, 'name': get_currency_name(code), 'symbol': get_currency_symbol(code)}
            for code in get_supported_currencies()
        ]
    })


@currency_bp.route('/convert', methods=['GET'])
@require_client_auth
def convert(client):
    """
    Convert an amount between two supported currencies.

    Query params:
        amount: Amount to convert (required)
        from: Source currency code (required)
        to: Target currency code (required)

    Errors from the rate lookup surface as 502 here; pages use the
    fallback wrapper instead.
    """
    amount = request.args.get('amount', type=float)
    from_currency = request.args.get('from', '')
    to_currency = request.args.get('to', '')

    if amount is None or not math.isfinite(amount):
        return bad_request('amount must be a number', ErrorCode.INVALID_FIELD)
    for code in (from_currency, to_currency):
        if not is_valid_currency(code):
            return bad_request(f'Unsupported currency: {code or "(missing)"}', ErrorCode.INVALID_FIELD)

    result = CurrencyService().convert_currency(amount, from_currency, to_currency)
    result['formatted_converted'] = format_currency_with_symbol(
        result['converted_amount'], result['to_currency']
    )
    return jsonify(result)
