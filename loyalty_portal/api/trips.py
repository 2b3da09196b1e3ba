"""
Trip API endpoints.

Handles:
- Trip list (upcoming, past, cancelled tabs)
- Trip detail (booking, edit lock, loyalty points section)
- Edit-lock status on its own, for the traveller and flight forms
"""
from flask import Blueprint, request, jsonify

from ..middleware.client_auth import require_client_auth
from ..services.trip_service import TripService

trips_bp = Blueprint('trips', __name__)


@trips_bp.route('', methods=['GET'])
@require_client_auth
def list_trips(client):
    """
    Trips page.

    Query params:
        tab: upcoming (default), past, or cancelled
    """
    tab = request.args.get('tab', 'upcoming')
    service = TripService(client)
    return jsonify(service.list_trips(tab=tab))


@trips_bp.route('/<int:booking_id>', methods=['GET'])
@require_client_auth
def get_trip(client, booking_id):
    """Full trip detail for one of the client's bookings."""
    service = TripService(client)
    return jsonify(service.get_trip_details(booking_id))


@trips_bp.route('/<int:booking_id>/edit-lock', methods=['GET'])
@require_client_auth
def get_trip_edit_lock(client, booking_id):
    """Whether traveller and flight details can still be edited."""
    service = TripService(client)
    booking = service.get_booking(booking_id)
    return jsonify({
        'booking_id': booking.id,
        **service.get_edit_lock(booking)
    })
