import click
from pydantic import ValidationError as SettingsError

from orderflow.infrastructure.bootstrap import setup_logging
from orderflow.infrastructure.cli.order_commands import (
    order_allocate,
    order_approve,
    order_cancel,
    order_create,
    order_deliver,
    order_dispatch,
    order_history,
    order_list,
    order_reject,
    order_show,
)


@click.group()
def cli() -> None:
    """orderflow — sales order fulfillment"""
    try:
        setup_logging()
    except SettingsError as exc:
        raise click.ClickException(f"Invalid configuration: {exc}")


@cli.group()
def order() -> None:
    """Manage sales orders."""


# Register subcommands
order.add_command(order_allocate)
order.add_command(order_approve)
order.add_command(order_cancel)
order.add_command(order_create)
order.add_command(order_deliver)
order.add_command(order_dispatch)
order.add_command(order_history)
order.add_command(order_list)
order.add_command(order_reject)
order.add_command(order_show)
