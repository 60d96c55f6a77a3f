import click

from stockledger.infrastructure.cli.order_commands import (
    order_add_item,
    order_create,
    order_reconcile,
    order_return,
    order_show,
    order_transition,
)
from stockledger.infrastructure.cli.stock_commands import (
    stock_history,
    stock_rebuild,
    stock_verify,
)
from stockledger.infrastructure.cli.variant_commands import (
    variant_add,
    variant_list,
    variant_update,
    variant_update_many,
)
from stockledger.infrastructure.logging_config import configure_logging


@click.group()
@click.option(
    "--log-level",
    default="WARNING",
    type=click.Choice(["DEBUG", "INFO", "WARNING", "ERROR"], case_sensitive=False),
    help="Minimum level of log events written to stderr.",
)
@click.option("--json-logs", is_flag=True, default=False, help="Emit log events as JSON.")
def cli(log_level: str, json_logs: bool) -> None:
    """Stock ledger: stock movements and order-driven stock reconciliation"""
    configure_logging(log_level, json_output=json_logs)


@cli.group()
def variant() -> None:
    """Manage variants and their stock on hand."""


@cli.group()
def stock() -> None:
    """Inspect the stock movement ledger."""


@cli.group()
def order() -> None:
    """Manage orders."""


# Register subcommands
variant.add_command(variant_add)
variant.add_command(variant_list)
variant.add_command(variant_update)
variant.add_command(variant_update_many)
stock.add_command(stock_history)
stock.add_command(stock_rebuild)
stock.add_command(stock_verify)
order.add_command(order_add_item)
order.add_command(order_create)
order.add_command(order_reconcile)
order.add_command(order_return)
order.add_command(order_show)
order.add_command(order_transition)
