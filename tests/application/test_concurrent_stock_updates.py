"""Concurrency tests: adjustments and settlements running side by side."""

import threading
from concurrent.futures import ThreadPoolExecutor

from stockledger.application.update_stock_on_hand import UpdateStockOnHandHandler
from stockledger.domain.model.stock_movement import StockMovementType
from stockledger.domain.model.variant import ProductVariant
from tests.builders import build_system


def _setup():
    system = build_system(
        ProductVariant(id="A", name="Widget"),
        ProductVariant(id="B", name="Gadget"),
    )
    system.ledger.append("B", StockMovementType.ADJUSTMENT, 50)
    return system, UpdateStockOnHandHandler(system.variant_repo, system.ledger)


class TestDistinctVariants:

    def test_adjustment_and_settlement_do_not_wait_on_each_other(self):
        system, handler = _setup()
        order = system.place_order(("B", 3))
        release = threading.Event()
        holding = threading.Event()

        def hold_b_then_settle():
            # Keep B busy; the adjustment of A must still finish meanwhile.
            with system.ledger.locked("B"):
                holding.set()
                release.wait(timeout=5)
            system.settle(order)

        with ThreadPoolExecutor(max_workers=2) as pool:
            settling = pool.submit(hold_b_then_settle)
            assert holding.wait(timeout=5)
            adjusting = pool.submit(handler.handle, "A", 7)
            result = adjusting.result(timeout=5)
            release.set()
            settling.result(timeout=5)

        assert result.variant.stock_on_hand == 7
        assert system.stock_on_hand("A") == 7
        assert system.stock_on_hand("B") == 47

    def test_parallel_orders_on_disjoint_variants(self):
        system, handler = _setup()
        handler.handle("A", stock_on_hand=50)
        orders = [system.place_order(("A", 1)) for _ in range(10)]
        orders += [system.place_order(("B", 2)) for _ in range(10)]

        with ThreadPoolExecutor(max_workers=8) as pool:
            list(pool.map(system.settle, orders))

        assert system.stock_on_hand("A") == 40
        assert system.stock_on_hand("B") == 30
        for variant_id in ("A", "B"):
            assert system.stock_on_hand(variant_id) == system.ledger.stock_on_hand_from_history(variant_id)


class TestSameVariant:

    def test_concurrent_settlements_never_oversell(self):
        system, _ = _setup()
        orders = [system.place_order(("B", 4)) for _ in range(20)]

        with ThreadPoolExecutor(max_workers=8) as pool:
            list(pool.map(system.settle, orders))

        # 50 units cover twelve orders of four.
        assert system.stock_on_hand("B") == 2
        assert system.ledger.stock_on_hand_from_history("B") == 2
        reconciled = [system.order_repo.get_by_id(o.id).is_stock_reconciled for o in orders]
        assert reconciled.count(True) == 12

    def test_adjustments_and_sales_keep_cache_consistent(self):
        system, handler = _setup()
        orders = [system.place_order(("B", 1)) for _ in range(10)]

        def adjust(target: int):
            handler.handle("B", stock_on_hand=target)

        with ThreadPoolExecutor(max_workers=8) as pool:
            futures = [pool.submit(system.settle, o) for o in orders]
            futures += [pool.submit(adjust, t) for t in (5, 20, 0, 12)]
            for f in futures:
                f.result(timeout=10)

        on_hand = system.stock_on_hand("B")
        assert on_hand >= 0
        assert on_hand == system.ledger.stock_on_hand_from_history("B")
