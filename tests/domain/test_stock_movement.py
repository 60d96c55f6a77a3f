"""Unit tests for StockMovement shape rules."""

import pytest

from stockledger.domain.exceptions import ValidationError
from stockledger.domain.model.stock_movement import StockMovement, StockMovementType


class TestRecord:

    def test_adjustment(self):
        m = StockMovement.record(1, "1", StockMovementType.ADJUSTMENT, 5)
        assert m.type is StockMovementType.ADJUSTMENT
        assert m.quantity == 5
        assert m.order_line_id is None

    def test_sale_references_line(self):
        m = StockMovement.record(1, "1", StockMovementType.SALE, -3, order_line_id="L1")
        assert m.order_line_id == "L1"

    def test_zero_quantity_rejected(self):
        with pytest.raises(ValidationError, match="cannot be zero"):
            StockMovement.record(1, "1", StockMovementType.ADJUSTMENT, 0)

    def test_non_integer_rejected(self):
        with pytest.raises(ValidationError, match="must be an integer"):
            StockMovement.record(1, "1", StockMovementType.ADJUSTMENT, 1.5)  # type: ignore[arg-type]

    def test_sale_without_line_rejected(self):
        with pytest.raises(ValidationError, match="must reference an order line"):
            StockMovement.record(1, "1", StockMovementType.SALE, -1)

    def test_adjustment_with_line_rejected(self):
        with pytest.raises(ValidationError, match="cannot reference an order line"):
            StockMovement.record(1, "1", StockMovementType.ADJUSTMENT, 1, order_line_id="L1")

    def test_positive_sale_rejected(self):
        with pytest.raises(ValidationError, match="must decrease stock"):
            StockMovement.record(1, "1", StockMovementType.SALE, 2, order_line_id="L1")

    @pytest.mark.parametrize(
        "movement_type", [StockMovementType.CANCELLATION, StockMovementType.RETURN]
    )
    def test_negative_restock_rejected(self, movement_type):
        with pytest.raises(ValidationError, match="must increase stock"):
            StockMovement.record(1, "1", movement_type, -2, order_line_id="L1")

    def test_movement_is_immutable(self):
        m = StockMovement.record(1, "1", StockMovementType.ADJUSTMENT, 5)
        with pytest.raises(AttributeError):
            m.quantity = 6  # type: ignore[misc]
