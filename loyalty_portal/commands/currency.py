"""
CLI Commands for exchange rates.

    flask currency rates --base GBP          # Show the cached/fetched rate table
    flask currency convert 100 GBP USD       # Convert with the 2.5% spread
    flask currency clear-cache               # Drop cached rate tables
"""
import click
from flask.cli import with_appcontext

from ..services.currency_service import CurrencyService
from ..utils.currency import format_currency_with_symbol, get_supported_currencies
from ..utils.exceptions import PortalError


@click.group('currency')
def currency_cli():
    """Exchange rate commands."""
    pass


@currency_cli.command('rates')
@click.option('--base', default='GBP', show_default=True, help='Base currency code')
@with_appcontext
def show_rates(base):
    """Show rates from BASE to every supported currency."""
    try:
        data = CurrencyService().fetch_exchange_rates(base)
    except PortalError as e:
        raise click.ClickException(e.message)

    rates = data['conversion_rates']
    click.echo(f"Rates for {data.get('base_code', base.upper())}:")
    for code in get_supported_currencies():
        rate = rates.get(code)
        click.echo(f"  {code}: {rate if rate is not None else 'n/a'}")


@currency_cli.command('convert')
@click.argument('amount', type=float)
@click.argument('from_currency')
@click.argument('to_currency')
@with_appcontext
def convert(amount, from_currency, to_currency):
    """Convert AMOUNT from FROM_CURRENCY to TO_CURRENCY."""
    try:
        result = CurrencyService().convert_currency(amount, from_currency, to_currency)
    except PortalError as e:
        raise click.ClickException(e.message)

    click.echo(
        f"{format_currency_with_symbol(amount, result['from_currency'])} = "
        f"{format_currency_with_symbol(result['converted_amount'], result['to_currency'])} "
        f"(rate {result['rate']}, with spread {result['adjusted_rate']})"
    )


@currency_cli.command('clear-cache')
@click.option('--base', default=None, help='Only clear this base currency')
@with_appcontext
def clear_cache(base):
    """Drop cached exchange rate tables."""
    CurrencyService().clear_cache(base)
    click.echo(f"Cleared exchange rate cache{' for ' + base.upper() if base else ''}")


def init_app(app):
    app.cli.add_command(currency_cli)
