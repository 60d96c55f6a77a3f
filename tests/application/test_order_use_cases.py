"""Integration tests for the catalog and order placement use cases."""

import pytest

from stockledger.application.add_item_to_order import AddItemToOrderHandler
from stockledger.application.add_variant import AddVariantHandler
from stockledger.application.create_order import CreateOrderHandler
from stockledger.application.list_stock_movements import ListStockMovementsHandler
from stockledger.application.list_variants import ListVariantsHandler
from stockledger.application.show_order import ShowOrderHandler
from stockledger.application.transition_order import TransitionOrderHandler
from stockledger.domain.exceptions import EntityNotFoundError, ValidationError
from stockledger.domain.model.stock_movement import StockMovementType
from stockledger.domain.model.variant import ProductVariant
from tests.builders import build_system


def _setup():
    system = build_system(ProductVariant(id="1", name="Widget"))
    system.ledger.append("1", StockMovementType.ADJUSTMENT, 5)
    return system


class TestVariants:

    def test_new_variant_has_empty_history(self):
        system = build_system()
        dto = AddVariantHandler(system.variant_repo).handle("Widget")

        page = ListStockMovementsHandler(system.variant_repo, system.ledger).handle(dto.id)

        assert dto.stock_on_hand == 0
        assert dto.track_inventory is True
        assert page.items == []
        assert page.total_items == 0

    def test_untracked_variant(self):
        system = build_system()
        dto = AddVariantHandler(system.variant_repo).handle("Gift card", track_inventory=False)
        assert dto.track_inventory is False

    def test_blank_name_rejected(self):
        system = build_system()
        with pytest.raises(ValidationError, match="name is required"):
            AddVariantHandler(system.variant_repo).handle("  ")

    def test_list_variants(self):
        system = _setup()
        variants = ListVariantsHandler(system.variant_repo).handle()
        assert [(v.id, v.stock_on_hand) for v in variants] == [("1", 5)]

    def test_history_of_unknown_variant_rejected(self):
        system = _setup()
        with pytest.raises(EntityNotFoundError):
            ListStockMovementsHandler(system.variant_repo, system.ledger).handle("99")


class TestOrderPlacement:

    def test_create_add_settle(self):
        system = _setup()
        dto = CreateOrderHandler(system.order_repo).handle()
        assert dto.state == "AddingItems"

        dto = AddItemToOrderHandler(system.order_repo, system.variant_repo).handle(dto.id, "1", 2)
        assert [(l.variant_id, l.quantity) for l in dto.lines] == [("1", 2)]

        transition = TransitionOrderHandler(system.order_repo, system.state_machine)
        transition.handle(dto.id, "ArrangingPayment")
        dto = transition.handle(dto.id, "PaymentSettled")

        assert dto.state == "PaymentSettled"
        assert dto.stock_reconciled
        assert dto.history == [
            "AddingItems -> ArrangingPayment",
            "ArrangingPayment -> PaymentSettled",
        ]
        assert system.stock_on_hand("1") == 3

    def test_add_unknown_variant_rejected(self):
        system = _setup()
        dto = CreateOrderHandler(system.order_repo).handle()
        with pytest.raises(EntityNotFoundError, match="Variant"):
            AddItemToOrderHandler(system.order_repo, system.variant_repo).handle(dto.id, "9", 1)

    def test_add_zero_quantity_rejected(self):
        system = _setup()
        dto = CreateOrderHandler(system.order_repo).handle()
        with pytest.raises(ValidationError, match="must be positive"):
            AddItemToOrderHandler(system.order_repo, system.variant_repo).handle(dto.id, "1", 0)

    def test_unknown_state_rejected(self):
        system = _setup()
        dto = CreateOrderHandler(system.order_repo).handle()
        with pytest.raises(ValidationError, match="Unknown order state"):
            TransitionOrderHandler(system.order_repo, system.state_machine).handle(dto.id, "Shipped")

    def test_show_order(self):
        system = _setup()
        dto = CreateOrderHandler(system.order_repo).handle()
        assert ShowOrderHandler(system.order_repo).handle(dto.id).id == dto.id

    def test_show_unknown_order_rejected(self):
        system = _setup()
        with pytest.raises(EntityNotFoundError, match="not found"):
            ShowOrderHandler(system.order_repo).handle(404)
