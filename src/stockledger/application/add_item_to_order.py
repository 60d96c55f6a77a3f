"""Application service: Add Item To Order use case.

Only variants known to the catalog can be added.  Adding a variant that
is already on the order increases that line's quantity.
"""

from __future__ import annotations

from stockledger.application.dto import OrderDTO
from stockledger.domain.exceptions import EntityNotFoundError
from stockledger.domain.model.value_objects import Quantity
from stockledger.domain.repository.order_repository import OrderRepository
from stockledger.domain.repository.variant_repository import VariantRepository


class AddItemToOrderHandler:

    def __init__(
        self,
        order_repo: OrderRepository,
        variant_repo: VariantRepository,
    ) -> None:
        self._order_repo = order_repo
        self._variant_repo = variant_repo

    def handle(self, order_id: int, variant_id: str, quantity: int) -> OrderDTO:
        order = self._order_repo.get_by_id(order_id)
        if order is None:
            raise EntityNotFoundError(f"Order #{order_id} not found")
        if self._variant_repo.get_by_id(variant_id) is None:
            raise EntityNotFoundError(f"Variant '{variant_id}' not found")

        order.add_item(variant_id, Quantity(quantity))
        self._order_repo.save(order)
        return OrderDTO.from_domain(order)
