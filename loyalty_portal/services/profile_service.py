"""
Profile preferences for the loyalty portal.

Preferences are stored on the client as a JSON mapping (older rows hold it
as JSON text). Updates merge into what is already there.
"""
from typing import Any, Dict

from flask import current_app

from ..extensions import db
from ..models import Client
from ..utils.currency import is_valid_currency, parse_client_preferences
from ..utils.exceptions import ValidationError


def update_preferred_currency(client: Client, currency: Any) -> Dict[str, Any]:
    """
    Set the client's display currency.

    Args:
        client: Authenticated client
        currency: ISO code, any case

    Returns:
        The merged preferences

    Raises:
        ValidationError: Missing or unsupported currency
    """
    if not isinstance(currency, str) or not currency.strip():
        raise ValidationError('Currency is required', field='preferred_currency')
    if not is_valid_currency(currency):
        raise ValidationError('Invalid currency code', field='preferred_currency')

    preferences = parse_client_preferences(client.preferences)
    preferences['preferred_currency'] = currency.strip().upper()

    # New object so the JSON column is flagged dirty
    client.preferences = preferences
    db.session.commit()

    current_app.logger.info(
        f"Client {client.id} preferred currency set to {preferences['preferred_currency']}"
    )
    return preferences
