"""
CLI Commands for loyalty settings.

    flask loyalty check-settings    # Validate the loyalty_settings row
"""
import click
from flask.cli import with_appcontext

from ..services.loyalty_settings import get_loyalty_settings
from ..utils.exceptions import ConfigurationError


@click.group('loyalty')
def loyalty_cli():
    """Loyalty program commands."""
    pass


@loyalty_cli.command('check-settings')
@with_appcontext
def check_settings():
    """Load and validate loyalty settings, printing the effective values."""
    try:
        settings = get_loyalty_settings()
    except ConfigurationError as e:
        raise click.ClickException(e.message)

    click.echo("Effective loyalty settings:")
    for key, value in settings.items():
        click.echo(f"  {key}: {value}")


def init_app(app):
    app.cli.add_command(loyalty_cli)
