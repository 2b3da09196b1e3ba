"""
Middleware package for the loyalty portal.
"""
from .client_auth import require_client_auth, get_client_id_from_request
