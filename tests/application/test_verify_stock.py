"""Integration tests for the VerifyStock use case."""

import threading
import time
from concurrent.futures import ThreadPoolExecutor

import pytest

from stockledger.application.verify_stock import VerifyStockHandler
from stockledger.domain.exceptions import EntityNotFoundError
from stockledger.domain.model.stock_movement import StockMovement, StockMovementType
from stockledger.domain.model.variant import ProductVariant
from tests.builders import build_system


def _setup():
    system = build_system(
        ProductVariant(id="1", name="Widget"),
        ProductVariant(id="2", name="Gadget"),
    )
    system.ledger.append("1", StockMovementType.ADJUSTMENT, 4)
    system.ledger.append("2", StockMovementType.ADJUSTMENT, 6)
    return system, VerifyStockHandler(system.variant_repo, system.ledger)


def _drift(system, variant_id, value):
    variant = system.variant_repo.get_by_id(variant_id)
    variant.stock_on_hand = value
    system.variant_repo.save(variant)


class TestVerify:

    def test_consistent_ledger_reports_nothing(self):
        _, handler = _setup()
        assert handler.handle() == []

    def test_drift_is_reported_but_not_repaired(self):
        system, handler = _setup()
        _drift(system, "2", 99)

        discrepancies = handler.handle()

        assert [(d.variant_id, d.cached, d.from_history) for d in discrepancies] == [
            ("2", 99, 6)
        ]
        assert system.stock_on_hand("2") == 99

    def test_repair_rebuilds_from_history(self):
        system, handler = _setup()
        _drift(system, "2", 99)

        handler.handle(repair=True)

        assert system.stock_on_hand("2") == 6
        assert handler.handle() == []

    def test_rebuild_single_variant(self):
        system, handler = _setup()
        _drift(system, "1", -3)
        assert handler.rebuild("1").stock_on_hand == 4

    def test_rebuild_unknown_variant_rejected(self):
        _, handler = _setup()
        with pytest.raises(EntityNotFoundError):
            handler.rebuild("99")


class TestVerifyUnderConcurrentWrites:

    def test_waits_for_an_append_in_progress(self):
        system, handler = _setup()
        holding = threading.Event()
        release = threading.Event()

        def append_in_two_steps():
            # History is written before the cache, both under the variant lock.
            with system.ledger.locked("2") as variant:
                system.movement_repo.add(
                    StockMovement(system.movement_repo.next_id(), "2", StockMovementType.ADJUSTMENT, 3)
                )
                holding.set()
                release.wait(timeout=5)
                variant.apply_movement(3)
                system.variant_repo.save(variant)

        with ThreadPoolExecutor(max_workers=2) as pool:
            writer = pool.submit(append_in_two_steps)
            assert holding.wait(timeout=5)
            check = pool.submit(handler.handle)
            time.sleep(0.2)
            assert not check.done()
            release.set()
            writer.result(timeout=5)
            assert check.result(timeout=5) == []

        assert system.stock_on_hand("2") == 9
