"""CLI commands for product variants and their stock on hand."""

from __future__ import annotations

import click

from stockledger.application.add_variant import AddVariantHandler
from stockledger.application.dto import StockUpdateRequest
from stockledger.application.list_variants import ListVariantsHandler
from stockledger.application.update_stock_on_hand import UpdateStockOnHandHandler
from stockledger.domain.exceptions import DomainException
from stockledger.infrastructure.bootstrap import container


def _update_handler() -> UpdateStockOnHandHandler:
    c = container()
    return UpdateStockOnHandHandler(variant_repo=c.variant_repo, ledger=c.ledger)


def _parse_stock_pairs(raw: str) -> list[StockUpdateRequest]:
    """Parse '1:10,2:5' into StockUpdateRequest list."""
    requests: list[StockUpdateRequest] = []
    for pair in raw.split(","):
        pair = pair.strip()
        if ":" not in pair:
            raise click.BadParameter(
                f"Invalid format '{pair}'. Expected 'VariantId:StockOnHand'."
            )
        variant_id, qty_str = pair.rsplit(":", 1)
        try:
            qty = int(qty_str)
        except ValueError:
            raise click.BadParameter(
                f"Invalid stock level '{qty_str}' for variant '{variant_id}'."
            )
        requests.append(StockUpdateRequest(variant_id=variant_id.strip(), stock_on_hand=qty))
    return requests


@click.command("add")
@click.option("--name", required=True, help="Variant name.")
@click.option("--untracked", is_flag=True, default=False, help="Do not track inventory.")
def variant_add(name: str, untracked: bool) -> None:
    """Add a new variant to the catalog."""
    handler = AddVariantHandler(variant_repo=container().variant_repo)

    try:
        dto = handler.handle(name=name, track_inventory=not untracked)
    except DomainException as exc:
        raise click.ClickException(str(exc))

    click.echo(f"Variant #{dto.id} '{dto.name}' added")


@click.command("list")
def variant_list() -> None:
    """List all variants with their stock on hand."""
    variants = ListVariantsHandler(variant_repo=container().variant_repo).handle()

    if not variants:
        click.echo("No variants found.")
        return

    click.echo(f"{'ID':<6} {'Name':<20} {'On hand':>8} {'Tracked':>8}")
    click.echo("-" * 45)
    for v in variants:
        tracked = "yes" if v.track_inventory else "no"
        click.echo(f"{v.id:<6} {v.name:<20} {v.stock_on_hand:>8} {tracked:>8}")


@click.command("update")
@click.option("--id", "variant_id", required=True, help="Variant ID.")
@click.option("--stock-on-hand", type=int, default=None, help="New stock on hand.")
@click.option("--track/--no-track", "track", default=None, help="Track inventory for this variant.")
def variant_update(variant_id: str, stock_on_hand: int | None, track: bool | None) -> None:
    """Set stock on hand and/or inventory tracking for a variant."""
    if stock_on_hand is None and track is None:
        raise click.UsageError("Nothing to update: pass --stock-on-hand and/or --track/--no-track")

    try:
        result = _update_handler().handle(
            variant_id, stock_on_hand=stock_on_hand, track_inventory=track
        )
    except DomainException as exc:
        raise click.ClickException(str(exc))

    click.echo(f"Variant #{variant_id} stock on hand: {result.variant.stock_on_hand}")
    if result.movement is not None:
        click.echo(f"Recorded {result.movement.type} of {result.movement.quantity:+d}")


@click.command("update-many")
@click.option("--set", "pairs", required=True, help="Stock levels as 'Id:Qty,Id:Qty'.")
def variant_update_many(pairs: str) -> None:
    """Set stock on hand for several variants; each is updated independently."""
    results = _update_handler().handle_batch(_parse_stock_pairs(pairs))

    for result in results:
        if result.success:
            click.echo(f"#{result.variant_id}: {result.variant.stock_on_hand}")
        else:
            click.echo(f"#{result.variant_id}: FAILED ({result.error})")

    if not all(r.success for r in results):
        raise click.ClickException("Some variants could not be updated")
