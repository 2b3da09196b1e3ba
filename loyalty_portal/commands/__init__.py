"""
CLI Commands for the loyalty portal.

Usage:
    flask currency rates --base GBP
    flask currency convert 100 GBP USD
    flask currency clear-cache
    flask loyalty check-settings
"""
from .currency import init_app as init_currency_commands
from .loyalty import init_app as init_loyalty_commands


def init_app(app):
    """Register all CLI commands with the Flask app."""
    init_currency_commands(app)
    init_loyalty_commands(app)
