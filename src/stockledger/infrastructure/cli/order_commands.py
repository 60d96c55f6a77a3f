"""CLI commands for the Order aggregate."""

from __future__ import annotations

import click

from stockledger.application.add_item_to_order import AddItemToOrderHandler
from stockledger.application.create_order import CreateOrderHandler
from stockledger.application.dto import LineStockResult, OrderDTO
from stockledger.application.reconcile_order_stock import ReconcileOrderStockHandler
from stockledger.application.return_order_lines import ReturnOrderLinesHandler
from stockledger.application.show_order import ShowOrderHandler
from stockledger.application.transition_order import TransitionOrderHandler
from stockledger.domain.exceptions import DomainException
from stockledger.domain.model.order import OrderState
from stockledger.infrastructure.bootstrap import container


def _parse_line_quantities(raw: str) -> dict[str, int]:
    """Parse 'lineA:1,lineB:2' into {line_id: qty} dict."""
    result: dict[str, int] = {}
    for pair in raw.split(","):
        pair = pair.strip()
        if ":" not in pair:
            raise click.BadParameter(
                f"Invalid line format '{pair}'. Expected 'LineId:Quantity'."
            )
        line_id, qty_str = pair.rsplit(":", 1)
        try:
            qty = int(qty_str)
        except ValueError:
            raise click.BadParameter(
                f"Invalid quantity '{qty_str}' for line '{line_id}'."
            )
        result[line_id.strip()] = qty
    return result


def _display_order(dto: OrderDTO) -> None:
    """Shared formatting for displaying an order."""
    click.echo(f"Order #{dto.id}  (state={dto.state})")
    click.echo(f"Created:  {dto.created_at}")
    click.echo()
    click.echo(f"  {'Line':<34} {'Variant':<8} {'Qty':>5} {'Stock':>6}")
    click.echo(f"  {'-'*56}")
    for line in dto.lines:
        stock = "ok" if line.stock_reconciled else "-"
        click.echo(f"  {line.id:<34} {line.variant_id:<8} {line.quantity:>5} {stock:>6}")
    click.echo(f"  {'-'*56}")
    for step in dto.history:
        click.echo(f"  {step}")


def _display_line_results(results: list[LineStockResult]) -> None:
    for r in results:
        suffix = f" ({r.message})" if r.message else ""
        click.echo(f"  {r.line_id} [{r.variant_id}]: {r.outcome.value}{suffix}")


@click.command("create")
def order_create() -> None:
    """Open a new empty order."""
    dto = CreateOrderHandler(order_repo=container().order_repo).handle()
    click.echo(f"Order #{dto.id} created  (state={dto.state})")


@click.command("add-item")
@click.option("--id", "order_id", required=True, type=int, help="Order ID.")
@click.option("--variant", "variant_id", required=True, help="Variant ID.")
@click.option("--quantity", required=True, type=int, help="Quantity to add.")
def order_add_item(order_id: int, variant_id: str, quantity: int) -> None:
    """Add a variant to an order that is still collecting items."""
    c = container()
    handler = AddItemToOrderHandler(order_repo=c.order_repo, variant_repo=c.variant_repo)

    try:
        dto = handler.handle(order_id, variant_id, quantity)
    except DomainException as exc:
        raise click.ClickException(str(exc))

    _display_order(dto)


@click.command("transition")
@click.option("--id", "order_id", required=True, type=int, help="Order ID.")
@click.option(
    "--state",
    required=True,
    type=click.Choice([s.value for s in OrderState]),
    help="Target state.",
)
def order_transition(order_id: int, state: str) -> None:
    """Move an order to another state."""
    c = container()
    handler = TransitionOrderHandler(order_repo=c.order_repo, state_machine=c.state_machine)

    try:
        dto = handler.handle(order_id, state)
    except DomainException as exc:
        raise click.ClickException(str(exc))

    click.echo(f"Order #{order_id} is now {dto.state}.")
    if dto.state == OrderState.PAYMENT_SETTLED.value and not dto.stock_reconciled:
        click.echo("Warning: some lines could not be deducted from stock; see log.", err=True)


@click.command("show")
@click.option("--id", "order_id", required=True, type=int, help="Order ID to display.")
def order_show(order_id: int) -> None:
    """Show details of an existing order."""
    handler = ShowOrderHandler(order_repo=container().order_repo)

    try:
        dto = handler.handle(order_id)
    except DomainException as exc:
        raise click.ClickException(str(exc))

    _display_order(dto)


@click.command("reconcile")
@click.option("--id", "order_id", required=True, type=int, help="Order ID.")
def order_reconcile(order_id: int) -> None:
    """Re-run stock deductions for a settled order (safe to repeat)."""
    c = container()
    handler = ReconcileOrderStockHandler(order_repo=c.order_repo, hook=c.stock_hook)

    try:
        results = handler.handle(order_id)
    except DomainException as exc:
        raise click.ClickException(str(exc))

    click.echo(f"Order #{order_id} stock reconciliation:")
    _display_line_results(results)


@click.command("return")
@click.option("--id", "order_id", required=True, type=int, help="Order ID.")
@click.option("--lines", "lines_str", required=True, help="Lines as 'LineId:Qty,LineId:Qty'.")
def order_return(order_id: int, lines_str: str) -> None:
    """Return units of settled order lines to stock."""
    c = container()
    handler = ReturnOrderLinesHandler(order_repo=c.order_repo, ledger=c.ledger)

    try:
        movements = handler.handle(order_id, _parse_line_quantities(lines_str))
    except DomainException as exc:
        raise click.ClickException(str(exc))

    for m in movements:
        click.echo(f"Returned {m.quantity} of variant #{m.variant_id} (line {m.order_line_id})")
