"""Domain service: Order State Machine.

Applies transitions to orders, commits them, and then notifies
subscribers with the immutable ``OrderTransition`` record for the edge
just taken.  Each transition is delivered once, after it is committed.
A failing subscriber is reported and never undoes the transition.
"""

from __future__ import annotations

from collections.abc import Callable

import structlog

from stockledger.domain.exceptions import EntityNotFoundError
from stockledger.domain.model.order import Order, OrderState, OrderTransition
from stockledger.domain.repository.order_repository import OrderRepository
from stockledger.domain.service.stock_level import LockArena

logger = structlog.get_logger(__name__)

TransitionListener = Callable[[Order, OrderTransition], None]


class OrderStateMachine:

    def __init__(self, order_repo: OrderRepository, locks: LockArena | None = None) -> None:
        self._order_repo = order_repo
        self._locks = locks if locks is not None else LockArena()
        self._listeners: list[TransitionListener] = []

    def subscribe(self, listener: TransitionListener) -> None:
        if listener not in self._listeners:
            self._listeners.append(listener)

    def transition(self, order_id: int, to_state: OrderState) -> OrderTransition:
        """Move an order to *to_state*, persist it, then notify subscribers."""
        with self._locks.lock_for(("order", order_id)):
            order = self._order_repo.get_by_id(order_id)
            if order is None:
                raise EntityNotFoundError(f"Order #{order_id} not found")
            transition = order.transition_to(to_state)
            self._order_repo.save(order)

        logger.info(
            "Order transitioned",
            order_id=order_id,
            from_state=transition.from_state.value,
            to_state=transition.to_state.value,
            sequence=transition.sequence,
        )
        self._notify(order, transition)
        return transition

    def _notify(self, order: Order, transition: OrderTransition) -> None:
        for listener in list(self._listeners):
            try:
                listener(order, transition)
            except Exception:
                logger.exception(
                    "Order transition subscriber failed",
                    order_id=transition.order_id,
                    to_state=transition.to_state.value,
                    subscriber=getattr(listener, "__qualname__", repr(listener)),
                )
