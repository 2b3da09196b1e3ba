"""
Adapter for the database's calculate_available_discount function.

The function lives in the hosted Postgres database and is the authoritative
source for a client's usable points. Callers treat any failure as "RPC
unavailable" and fall back to the local formula.
"""
from typing import Any, Dict

from sqlalchemy import text

from ..extensions import db

CALCULATE_AVAILABLE_DISCOUNT_SQL = text(
    'SELECT points_balance, usable_points, discount_amount '
    'FROM calculate_available_discount(:client_id)'
)


def calculate_available_discount(client_id: int) -> Dict[str, Any]:
    """
    Call calculate_available_discount(client_id).

    Returns:
        {'points_balance': int, 'usable_points': int, 'discount_amount': float}

    Raises:
        sqlalchemy.exc.SQLAlchemyError: Function missing or failed
        LookupError: Function returned no row
    """
    row = db.session.execute(
        CALCULATE_AVAILABLE_DISCOUNT_SQL, {'client_id': client_id}
    ).mappings().first()

    if row is None:
        raise LookupError(f'calculate_available_discount returned no row for client {client_id}')

    return {
        'points_balance': int(row['points_balance'] or 0),
        'usable_points': int(row['usable_points'] or 0),
        'discount_amount': float(row['discount_amount'] or 0),
    }
