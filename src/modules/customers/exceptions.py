"""Customer domain exceptions.

Raised by the Service Layer when business rules are violated.  Each one
subclasses a classified base from ``shared.domain.errors`` so the
exception normalizer knows which ``ErrorCode`` it carries.
"""

from __future__ import annotations

from shared.domain.errors import (
    BadRequestError,
    ConflictError,
    NotFoundError,
    ValidationFailed,
)


class CustomerAlreadyExists(ConflictError):
    """A customer with the same email already exists."""


class CustomerNotFound(NotFoundError):
    """The requested customer does not exist or has been soft-deleted."""


class AddressNotFound(NotFoundError):
    """The requested address does not exist or has been soft-deleted."""


class AddressOwnershipMismatch(BadRequestError):
    """The address belongs to a different customer."""


class AddressTypeMismatch(BadRequestError):
    """A billing-only address used for shipping, or the reverse."""


class InactiveCustomer(ValidationFailed):
    """The customer is inactive and cannot place orders."""
