"""
Client Authentication Middleware.

The identity gateway in front of the portal authenticates the customer and
forwards their client id in a trusted header (CLIENT_AUTH_HEADER, default
X-Client-ID). This decorator resolves that id to a Client row and hands it to
the view as an explicit `client` argument.
"""
import logging
from functools import wraps
from typing import Optional

from flask import current_app, request

from ..extensions import db
from ..models import Client
from ..utils.errors import unauthorized

logger = logging.getLogger(__name__)


def get_client_id_from_request() -> Optional[int]:
    """
    Read the authenticated client id from the gateway header.

    Returns:
        Client id, or None when missing or malformed
    """
    header = current_app.config.get('CLIENT_AUTH_HEADER', 'X-Client-ID')
    raw = request.headers.get(header)
    if not raw:
        return None
    try:
        return int(raw)
    except (TypeError, ValueError):
        logger.warning('Malformed %s header: %r', header, raw)
        return None


def require_client_auth(f):
    """
    Decorator requiring an authenticated client.

    Usage:
        @points_bp.route('', methods=['GET'])
        @require_client_auth
        def get_points(client):
            ...
    """
    @wraps(f)
    def decorated_function(*args, **kwargs):
        client_id = get_client_id_from_request()
        if client_id is None:
            return unauthorized()

        client = db.session.get(Client, client_id)
        if client is None:
            logger.warning('Authenticated client %s has no client record', client_id)
            return unauthorized('Client account not found')

        kwargs['client'] = client
        return f(*args, **kwargs)

    return decorated_function
