"""Order domain exceptions.

Raised by the model and the Service Layer when business rules are
violated; each subclasses a classified base from
``shared.domain.errors``.
"""

from __future__ import annotations

from shared.domain.errors import ConflictError, NotFoundError, ValidationFailed


class OrderNotFound(NotFoundError):
    """The requested order does not exist or has been soft-deleted."""


class OrderItemNotFound(NotFoundError):
    """The item does not exist or belongs to another order."""


class InvalidStatusTransition(ValidationFailed):
    """The (from, to) pair is not in the transition table."""

    def __init__(self, from_status: str, to_status: str) -> None:
        self.from_status = from_status
        self.to_status = to_status
        super().__init__(
            f"Cannot transition order from '{from_status}' to '{to_status}'."
        )


class EmptyOrder(ValidationFailed):
    """An order without items cannot be confirmed."""


class OrderLocked(ValidationFailed):
    """Cancelled and refunded orders can no longer be edited."""


class InvalidDiscount(ValidationFailed):
    """The discount exceeds subtotal + tax + shipping."""


class DuplicateOrderItem(ConflictError):
    """The order already has a line for this product."""


class OrderNumberExhausted(RuntimeError):
    """No unique order number could be generated."""
