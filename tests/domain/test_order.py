"""Unit tests for the Order aggregate and its transition table."""

import pytest

from stockledger.domain.exceptions import ValidationError
from stockledger.domain.model.order import Order, OrderState
from stockledger.domain.model.value_objects import Quantity


def _order_with_line() -> Order:
    order = Order(id=1)
    order.add_item("1", Quantity(2))
    return order


def _settled_order() -> Order:
    order = _order_with_line()
    order.transition_to(OrderState.ARRANGING_PAYMENT)
    order.transition_to(OrderState.PAYMENT_SETTLED)
    return order


class TestAddItem:

    def test_new_order_is_adding_items(self):
        assert Order.create().state is OrderState.ADDING_ITEMS

    def test_add_item_creates_line(self):
        order = _order_with_line()
        assert len(order.lines) == 1
        assert order.lines[0].variant_id == "1"
        assert order.lines[0].quantity.value == 2

    def test_same_variant_merges_into_one_line(self):
        order = _order_with_line()
        line = order.add_item("1", Quantity(3))
        assert len(order.lines) == 1
        assert line.quantity.value == 5

    def test_line_ids_are_unique(self):
        order = _order_with_line()
        order.add_item("2", Quantity(1))
        assert order.lines[0].id != order.lines[1].id

    def test_cannot_add_after_adding_items(self):
        order = _order_with_line()
        order.transition_to(OrderState.ARRANGING_PAYMENT)
        with pytest.raises(ValidationError, match="Cannot add items"):
            order.add_item("2", Quantity(1))

    def test_find_unknown_line_rejected(self):
        with pytest.raises(ValidationError, match="not found"):
            _order_with_line().find_line("nope")


class TestTransitions:

    def test_happy_path_records_history(self):
        order = _settled_order()
        order.transition_to(OrderState.COMPLETED)
        assert [(t.from_state, t.to_state) for t in order.history] == [
            (OrderState.ADDING_ITEMS, OrderState.ARRANGING_PAYMENT),
            (OrderState.ARRANGING_PAYMENT, OrderState.PAYMENT_SETTLED),
            (OrderState.PAYMENT_SETTLED, OrderState.COMPLETED),
        ]
        assert [t.sequence for t in order.history] == [1, 2, 3]

    def test_cannot_arrange_payment_without_lines(self):
        with pytest.raises(ValidationError, match="no lines"):
            Order(id=1).transition_to(OrderState.ARRANGING_PAYMENT)

    def test_unsaved_order_cannot_transition(self):
        order = Order.create()
        order.add_item("1", Quantity(1))
        with pytest.raises(ValidationError, match="must be saved"):
            order.transition_to(OrderState.ARRANGING_PAYMENT)

    def test_cannot_skip_payment(self):
        with pytest.raises(ValidationError, match="Cannot transition"):
            _order_with_line().transition_to(OrderState.PAYMENT_SETTLED)

    def test_settled_order_cannot_return_to_adding_items(self):
        order = _settled_order()
        with pytest.raises(ValidationError, match="Cannot transition"):
            order.transition_to(OrderState.ADDING_ITEMS)
        assert order.state is OrderState.PAYMENT_SETTLED

    def test_settled_self_transition_rejected(self):
        with pytest.raises(ValidationError, match="Cannot transition"):
            _settled_order().transition_to(OrderState.PAYMENT_SETTLED)

    def test_declined_payment_can_be_retried(self):
        order = _order_with_line()
        order.transition_to(OrderState.ARRANGING_PAYMENT)
        order.transition_to(OrderState.PAYMENT_DECLINED)
        order.transition_to(OrderState.ARRANGING_PAYMENT)
        order.transition_to(OrderState.PAYMENT_SETTLED)
        assert order.state is OrderState.PAYMENT_SETTLED

    @pytest.mark.parametrize("terminal", [OrderState.COMPLETED, OrderState.CANCELLED])
    def test_terminal_states_have_no_exits(self, terminal):
        order = _settled_order()
        order.transition_to(terminal)
        for state in OrderState:
            assert not order.can_transition_to(state)

    def test_failed_transition_changes_nothing(self):
        order = _order_with_line()
        with pytest.raises(ValidationError):
            order.transition_to(OrderState.COMPLETED)
        assert order.state is OrderState.ADDING_ITEMS
        assert order.history == []


class TestSettlementEdge:

    def test_settlement_is_found_in_history(self):
        order = _settled_order()
        assert order.settlement is not None
        assert order.settlement.is_settlement
        assert order.settlement.sequence == 2

    def test_unsettled_order_has_no_settlement(self):
        assert _order_with_line().settlement is None

    def test_cancel_after_settlement_is_flagged(self):
        order = _settled_order()
        transition = order.transition_to(OrderState.CANCELLED)
        assert transition.is_settled_cancellation
        assert not transition.is_settlement

    def test_cancel_before_settlement_is_not_flagged(self):
        order = _order_with_line()
        transition = order.transition_to(OrderState.CANCELLED)
        assert not transition.is_settled_cancellation
