"""Application service: Transition Order use case.

Thin wrapper over the order state machine so that callers (the CLI, the
payment collaborator) can name the target state as a string.
"""

from __future__ import annotations

from stockledger.application.dto import OrderDTO
from stockledger.domain.exceptions import EntityNotFoundError, ValidationError
from stockledger.domain.model.order import OrderState
from stockledger.domain.repository.order_repository import OrderRepository
from stockledger.domain.service.order_state_machine import OrderStateMachine


class TransitionOrderHandler:

    def __init__(
        self,
        order_repo: OrderRepository,
        state_machine: OrderStateMachine,
    ) -> None:
        self._order_repo = order_repo
        self._state_machine = state_machine

    def handle(self, order_id: int, state: str) -> OrderDTO:
        try:
            to_state = OrderState(state)
        except ValueError:
            valid = ", ".join(s.value for s in OrderState)
            raise ValidationError(f"Unknown order state '{state}' (expected one of {valid})")

        self._state_machine.transition(order_id, to_state)

        order = self._order_repo.get_by_id(order_id)
        if order is None:
            raise EntityNotFoundError(f"Order #{order_id} not found")
        return OrderDTO.from_domain(order)
