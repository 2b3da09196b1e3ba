"""
Default loyalty settings.

Applied whenever the loyalty_settings row is missing or a column is NULL.
Shared between the settings service and the CLI to avoid circular imports.
"""

DEFAULT_LOYALTY_SETTINGS = {
    'point_value': 1,               # Currency units per point (1 = 1 pt is worth £1)
    'points_per_pound': 1,          # Points earned per unit of booking spend
    'min_redemption_points': 100,   # Minimum points for a first redemption
    'redemption_increment': 100,    # Points are redeemed in multiples of this
    'currency': 'GBP',              # Base currency of point_value
    'referrer_bonus_points': 0,     # Awarded to the referrer by the referral RPC
    'referee_bonus_points': 0,      # Awarded to the new customer
    'points_expire_after_days': None,  # None = points never expire
}


def get_settings_with_defaults(settings: dict) -> dict:
    """Merge stored settings with defaults. NULL/missing values take the default."""
    settings = settings or {}
    result = {}
    for key, default_value in DEFAULT_LOYALTY_SETTINGS.items():
        value = settings.get(key)
        result[key] = default_value if value is None else value
    return result
