"""Django ORM implementations of the catalog repositories.

Methods return ``None`` for missing rows instead of raising; the Service
Layer decides how to classify a missing entity.
"""

from __future__ import annotations

from typing import Any, Dict, Optional

import structlog
from django.core.exceptions import ValidationError
from django.db import models, transaction
from django.db.models import Q

from modules.products.models import Category, Product, ProductImage
from modules.products.repositories.interfaces import (
    ICategoryRepository,
    IProductImageRepository,
    IProductRepository,
)

logger = structlog.get_logger(__name__)


class ProductDjangoRepository(IProductRepository):
    """Concrete Product repository backed by Django ORM."""

    def get_by_id(self, id: str) -> Optional[Product]:
        """Retrieve a live product by primary key.

        Returns ``None`` for non-existent or invalid IDs.
        """
        try:
            return (
                Product.objects.alive()
                .select_related("category")
                .filter(id=id)
                .first()
            )
        except (ValueError, ValidationError):
            return None

    def list(
        self, filters: Optional[Dict[str, Any]] = None
    ) -> "models.QuerySet[Product]":
        """List products with optional Django ORM look-ups.

        Examples of valid filters::

            {"status": "active"}
            {"category_id": category.id}
        """
        queryset = Product.objects.alive().select_related("category")
        if filters:
            queryset = queryset.filter(**filters)
        return queryset

    def search(self, term: str) -> "models.QuerySet[Product]":
        term = term.strip()
        queryset = self.list()
        if not term:
            return queryset
        return queryset.filter(
            Q(sku__icontains=term)
            | Q(name__icontains=term)
            | Q(description__icontains=term)
        )

    @transaction.atomic
    def save(self, entity: Product) -> Product:
        entity.save()
        logger.info("product.saved", product_id=str(entity.id), sku=entity.sku)
        return entity

    @transaction.atomic
    def delete(self, id: str) -> bool:
        """Soft-delete a product; ``False`` when nothing matched."""
        product = self.get_by_id(id)
        if not product:
            return False
        product.delete()
        return True

    def get_by_sku(self, sku: str) -> Optional[Product]:
        """Retrieve a product by SKU (case-insensitive via upper normalisation)."""
        return Product.objects.alive().filter(sku=sku.strip().upper()).first()


class CategoryDjangoRepository(ICategoryRepository):
    def get_by_id(self, id: str) -> Optional[Category]:
        try:
            return Category.objects.alive().filter(id=id).first()
        except (ValueError, ValidationError):
            return None

    def list(
        self, filters: Optional[Dict[str, Any]] = None
    ) -> "models.QuerySet[Category]":
        queryset = Category.objects.alive()
        if filters:
            queryset = queryset.filter(**filters)
        return queryset

    @transaction.atomic
    def save(self, entity: Category) -> Category:
        entity.save()
        logger.info("category.saved", category_id=str(entity.id), slug=entity.slug)
        return entity

    @transaction.atomic
    def delete(self, id: str) -> bool:
        category = self.get_by_id(id)
        if not category:
            return False
        category.delete()
        return True

    def get_by_slug(self, slug: str) -> Optional[Category]:
        return Category.objects.alive().filter(slug=slug).first()


class ProductImageDjangoRepository(IProductImageRepository):
    def get_by_id(self, id: str) -> Optional[ProductImage]:
        try:
            return ProductImage.objects.filter(id=id).first()
        except (ValueError, ValidationError):
            return None

    def list(
        self, filters: Optional[Dict[str, Any]] = None
    ) -> "models.QuerySet[ProductImage]":
        queryset = ProductImage.objects.all()
        if filters:
            queryset = queryset.filter(**filters)
        return queryset

    @transaction.atomic
    def save(self, entity: ProductImage) -> ProductImage:
        entity.save()
        logger.info(
            "product_image.saved",
            image_id=str(entity.id),
            product_id=str(entity.product_id),
        )
        return entity

    @transaction.atomic
    def delete(self, id: str) -> bool:
        """Images have no audit value: the row and its file are removed."""
        image = self.get_by_id(id)
        if not image:
            return False
        if image.file:
            image.file.delete(save=False)
        image.delete()
        return True

    def clear_primary(self, product_id: str, exclude_id: Optional[str] = None) -> int:
        queryset = ProductImage.objects.filter(product_id=product_id, is_primary=True)
        if exclude_id is not None:
            queryset = queryset.exclude(id=exclude_id)
        return queryset.update(is_primary=False)
