"""Catalog repository interfaces.

Extend ``IRepository`` with the look-ups the catalog rules need:
unique SKU, unique category slug and the per-product primary image.
"""

from __future__ import annotations

from abc import abstractmethod
from typing import TYPE_CHECKING, Any, Dict, Optional

from django.db import models

from modules.core.repositories.interfaces import IRepository

if TYPE_CHECKING:
    from modules.products.models import Category, Product, ProductImage


class IProductRepository(IRepository["Product"]):
    """Repository contract for the Product aggregate."""

    @abstractmethod
    def list(
        self, filters: Optional[Dict[str, Any]] = None
    ) -> "models.QuerySet[Product]":
        """List live products with optional filters."""

    @abstractmethod
    def get_by_sku(self, sku: str) -> Optional[Product]:
        """Retrieve a product by SKU."""

    @abstractmethod
    def search(self, term: str) -> "models.QuerySet[Product]":
        """Match ``term`` against SKU, name and description."""


class ICategoryRepository(IRepository["Category"]):
    @abstractmethod
    def list(
        self, filters: Optional[Dict[str, Any]] = None
    ) -> "models.QuerySet[Category]":
        """List live categories with optional filters."""

    @abstractmethod
    def get_by_slug(self, slug: str) -> Optional[Category]:
        """Retrieve a category by slug."""


class IProductImageRepository(IRepository["ProductImage"]):
    @abstractmethod
    def list(
        self, filters: Optional[Dict[str, Any]] = None
    ) -> "models.QuerySet[ProductImage]":
        """List images with optional filters."""

    @abstractmethod
    def clear_primary(self, product_id: str, exclude_id: Optional[str] = None) -> int:
        """Unset ``is_primary`` on the product's other images."""
