"""
Points API endpoints for the loyalty portal.

Handles:
- Points hub overview (balance, discount, progress, stats, history)
- Redeem page summary and redemption quotes
- Earn calculator
"""
from flask import Blueprint, request, jsonify

from ..middleware.client_auth import require_client_auth
from ..services.points_service import PointsService
from ..utils.errors import bad_request

points_bp = Blueprint('points', __name__)


# ==============================================================================
# POINTS HUB
# ==============================================================================

@points_bp.route('', methods=['GET'])
@require_client_auth
def get_points_overview(client):
    """
    Points hub for the authenticated client.

    Query params:
        page: Transaction history page (default 1)

    Returns:
        Balance view, available discount, milestone progress, yearly stats,
        paginated history, and referral link
    """
    page = request.args.get('page', 1, type=int)
    service = PointsService(client)
    return jsonify(service.get_points_overview(page=page))


@points_bp.route('/progress', methods=['GET'])
@require_client_auth
def get_points_progress(client):
    """Progress toward the next redemption milestone."""
    service = PointsService(client)
    balance = service.get_balance_view()
    return jsonify({
        'available_points': balance['available_points'],
        **service.get_progress(balance['available_points'])
    })


@points_bp.route('/transactions', methods=['GET'])
@require_client_auth
def get_points_transactions(client):
    """
    Paginated transaction history.

    Query params:
        page: Page number (default 1)
        per_page: Items per page (default POINTS_PAGE_SIZE, max 100)
    """
    page = request.args.get('page', 1, type=int)
    per_page = request.args.get('per_page', type=int)
    service = PointsService(client)
    return jsonify(service.get_transactions_page(page=page, page_size=per_page))


# ==============================================================================
# REDEMPTION
# ==============================================================================

@points_bp.route('/redeem', methods=['GET'])
@require_client_auth
def get_redeem_summary(client):
    """Usable points and the discount they are worth, in the client's currency."""
    service = PointsService(client)
    return jsonify(service.get_redeem_summary())


@points_bp.route('/redeem/quote', methods=['POST'])
@require_client_auth
def quote_redemption(client):
    """
    Quote a redemption for the redeem calculator.

    Request body:
        points: Points the client wants to redeem (snapped to the increment)
        booking_amount: Optional booking price to show the final price

    Returns:
        Snapped points, discount amount, and optional final price.
        422 when the client's usable points are below the minimum.
    """
    data = request.get_json(silent=True) or {}
    if 'points' not in data:
        return bad_request('points is required')

    service = PointsService(client)
    quote = service.quote_redemption(data['points'], booking_amount=data.get('booking_amount'))
    return jsonify(quote)


# ==============================================================================
# EARN CALCULATOR
# ==============================================================================

@points_bp.route('/calculator/earn', methods=['GET'])
@require_client_auth
def estimate_points_earned(client):
    """
    How many points a booking amount would earn.

    Query params:
        amount: Booking amount in the loyalty currency
    """
    amount = request.args.get('amount')
    if amount is None:
        return bad_request('amount is required')

    service = PointsService(client)
    return jsonify(service.estimate_points_earned(amount))
