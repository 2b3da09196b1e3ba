"""
Database models for the loyalty portal.
Mirrors the tables the portal reads from the hosted database.
"""
from .client import Client, Referral
from .booking import Booking, BookingStatus
from .loyalty import (
    # Enums
    TransactionType,
    TransactionSource,
    RedemptionStatus,
    # Models
    LoyaltySettings,
    LoyaltyTransaction,
    Redemption,
)

__all__ = [
    'Client',
    'Referral',
    'Booking',
    'BookingStatus',
    # Loyalty
    'TransactionType',
    'TransactionSource',
    'RedemptionStatus',
    'LoyaltySettings',
    'LoyaltyTransaction',
    'Redemption',
]
