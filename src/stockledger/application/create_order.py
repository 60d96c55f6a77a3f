"""Application service: Create Order use case."""

from __future__ import annotations

from stockledger.application.dto import OrderDTO
from stockledger.domain.model.order import Order
from stockledger.domain.repository.order_repository import OrderRepository


class CreateOrderHandler:

    def __init__(self, order_repo: OrderRepository) -> None:
        self._order_repo = order_repo

    def handle(self) -> OrderDTO:
        """Open a new, empty order in the AddingItems state."""
        order = Order.create()
        self._order_repo.save(order)
        return OrderDTO.from_domain(order)
