"""Catalog domain exceptions.

Raised by the Service Layer when business rules are violated; each one
subclasses a classified base so the exception normalizer knows its
``ErrorCode``.
"""

from __future__ import annotations

from shared.domain.errors import ConflictError, NotFoundError, ValidationFailed


class ProductAlreadyExists(ConflictError):
    """A product with the same SKU already exists."""


class ProductNotFound(NotFoundError):
    """The requested product does not exist or has been soft-deleted."""


class InactiveProduct(ValidationFailed):
    """The product is inactive and cannot be sold."""


class CategoryNotFound(NotFoundError):
    pass


class CategoryAlreadyExists(ConflictError):
    pass


class ProductImageNotFound(NotFoundError):
    pass


class InvalidProductImage(ValidationFailed):
    """An image needs exactly one source: an uploaded file or a URL."""
