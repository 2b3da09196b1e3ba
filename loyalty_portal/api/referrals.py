"""
Referral API endpoints.

Handles:
- Referral code, share link, and invite history
- Inviting a friend by email
"""
from flask import Blueprint, request, jsonify

from ..middleware.client_auth import require_client_auth
from ..services.referral_service import ReferralService
from ..utils.errors import bad_request

referrals_bp = Blueprint('referrals', __name__)


@referrals_bp.route('', methods=['GET'])
@require_client_auth
def get_referrals(client):
    """Referral code, link, invite history and stats."""
    service = ReferralService(client)
    return jsonify(service.get_history())


@referrals_bp.route('/invite', methods=['POST'])
@require_client_auth
def invite_friend(client):
    """
    Invite a friend by email.

    Request body:
        email: Friend's email address

    Returns:
        201 with the referral. 409 when this email was already invited.
    """
    data = request.get_json(silent=True) or {}
    if 'email' not in data:
        return bad_request('email is required')

    service = ReferralService(client)
    referral = service.invite(data['email'])
    return jsonify({
        'success': True,
        'referral': referral.to_dict(),
        'referral_link': referral.referral_link,
    }), 201
