"""Domain-level exceptions.

All business rule violations are expressed as subclasses of DomainException
so the CLI layer can catch them uniformly and display user-friendly messages.
"""


class DomainException(Exception):
    """Base class for all domain errors."""


class ValidationError(DomainException):
    """Malformed or disallowed input, rejected before any write."""


class EntityNotFoundError(DomainException):
    """A requested entity does not exist."""


class InsufficientStockError(DomainException):
    """A write would drive a tracked variant's stock on hand below zero."""

    def __init__(self, variant_id: str, stock_on_hand: int, requested_delta: int) -> None:
        self.variant_id = variant_id
        self.stock_on_hand = stock_on_hand
        self.requested_delta = requested_delta
        super().__init__(
            f"Insufficient stock for variant '{variant_id}' "
            f"(on hand {stock_on_hand}, change {requested_delta})"
        )
