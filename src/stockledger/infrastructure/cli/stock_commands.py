"""CLI commands for the stock movement ledger."""

from __future__ import annotations

import click

from stockledger.application.list_stock_movements import ListStockMovementsHandler
from stockledger.application.verify_stock import VerifyStockHandler
from stockledger.domain.exceptions import DomainException
from stockledger.infrastructure.bootstrap import container


@click.command("history")
@click.option("--variant", "variant_id", required=True, help="Variant ID.")
@click.option("--skip", default=0, type=int, help="Movements to skip.")
@click.option("--take", default=None, type=int, help="Maximum movements to show.")
def stock_history(variant_id: str, skip: int, take: int | None) -> None:
    """Show the stock movement history of a variant, oldest first."""
    c = container()
    handler = ListStockMovementsHandler(variant_repo=c.variant_repo, ledger=c.ledger)

    try:
        page = handler.handle(variant_id, skip=skip, take=take)
    except DomainException as exc:
        raise click.ClickException(str(exc))

    click.echo(f"{page.total_items} movement(s) for variant #{variant_id}")
    if not page.items:
        return

    click.echo(f"{'ID':<6} {'Type':<14} {'Qty':>6}  {'Created':<24} Order line")
    click.echo("-" * 72)
    for m in page.items:
        click.echo(
            f"{m.id:<6} {m.type:<14} {m.quantity:>+6}  {m.created_at:<24} {m.order_line_id or '-'}"
        )


@click.command("verify")
@click.option("--repair", is_flag=True, default=False, help="Rebuild mismatched variants from history.")
def stock_verify(repair: bool) -> None:
    """Check every variant's stock on hand against its movement history."""
    c = container()
    discrepancies = VerifyStockHandler(variant_repo=c.variant_repo, ledger=c.ledger).handle(
        repair=repair
    )

    if not discrepancies:
        click.echo("All variants agree with their movement history.")
        return

    for d in discrepancies:
        click.echo(f"#{d.variant_id}: cached {d.cached}, history {d.from_history}")
    if repair:
        click.echo(f"Rebuilt {len(discrepancies)} variant(s) from history.")
    else:
        raise click.ClickException(f"{len(discrepancies)} variant(s) out of sync")


@click.command("rebuild")
@click.option("--variant", "variant_id", required=True, help="Variant ID.")
def stock_rebuild(variant_id: str) -> None:
    """Rebuild a variant's stock on hand from its movement history."""
    c = container()
    try:
        dto = VerifyStockHandler(variant_repo=c.variant_repo, ledger=c.ledger).rebuild(variant_id)
    except DomainException as exc:
        raise click.ClickException(str(exc))

    click.echo(f"Variant #{dto.id} stock on hand: {dto.stock_on_hand}")
