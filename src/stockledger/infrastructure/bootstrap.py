"""Composition root: wires concrete implementations to domain interfaces.

This is the only place in the codebase that knows about *all* layers.
Every other module depends only on abstractions.

Repositories, the lock arena and the state machine are built once per
data directory, so every handler in the process shares the same
per-variant locks and the stock hook is subscribed exactly once.
"""

from __future__ import annotations

import os
from dataclasses import dataclass
from functools import lru_cache
from pathlib import Path

from stockledger.application.order_stock_hook import OrderStockHook
from stockledger.domain.service.order_state_machine import OrderStateMachine
from stockledger.domain.service.stock_ledger import StockLedger
from stockledger.domain.service.stock_level import LockArena
from stockledger.infrastructure.persistence.json_order_repository import (
    JsonOrderRepository,
)
from stockledger.infrastructure.persistence.json_stock_movement_repository import (
    JsonStockMovementRepository,
)
from stockledger.infrastructure.persistence.json_variant_repository import (
    JsonVariantRepository,
)

DATA_DIR_ENV = "STOCKLEDGER_DATA_DIR"

# When installed in editable mode the project root is the repo root.
_DEFAULT_DATA_DIR = Path(__file__).resolve().parents[3] / "data"


def data_dir() -> Path:
    configured = os.environ.get(DATA_DIR_ENV)
    return Path(configured) if configured else _DEFAULT_DATA_DIR


@dataclass(frozen=True)
class Container:
    variant_repo: JsonVariantRepository
    movement_repo: JsonStockMovementRepository
    order_repo: JsonOrderRepository
    locks: LockArena
    ledger: StockLedger
    state_machine: OrderStateMachine
    stock_hook: OrderStockHook


@lru_cache(maxsize=None)
def _build(directory: Path) -> Container:
    variant_repo = JsonVariantRepository(directory / "variants.json")
    movement_repo = JsonStockMovementRepository(directory / "stock_movements.json")
    order_repo = JsonOrderRepository(directory / "orders.json")

    locks = LockArena()
    ledger = StockLedger(variant_repo, movement_repo, locks)
    state_machine = OrderStateMachine(order_repo, locks)
    stock_hook = OrderStockHook(order_repo, ledger, locks)
    state_machine.subscribe(stock_hook)

    return Container(
        variant_repo=variant_repo,
        movement_repo=movement_repo,
        order_repo=order_repo,
        locks=locks,
        ledger=ledger,
        state_machine=state_machine,
        stock_hook=stock_hook,
    )


def container() -> Container:
    return _build(data_dir().resolve())
