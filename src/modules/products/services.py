"""Catalog service layer (Use Cases).

Orchestrates business logic for products, categories and product
images, delegating persistence to the injected repositories.

Business rules enforced here:
- SKU must be unique; category slug must be unique.
- Price must be greater than zero (validated by DTO).
- An image has exactly one source: an uploaded file or an external URL.
- At most one primary image per product.
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Any, Dict, Optional

import structlog
from django.core.files.uploadedfile import UploadedFile
from django.db import models, transaction

from modules.products.exceptions import (
    CategoryAlreadyExists,
    CategoryNotFound,
    InvalidProductImage,
    ProductAlreadyExists,
    ProductImageNotFound,
    ProductNotFound,
)
from modules.products.models import Category, Product, ProductImage

if TYPE_CHECKING:
    from modules.products.dtos import (
        CreateCategoryDTO,
        CreateProductDTO,
        CreateProductImageDTO,
        UpdateCategoryDTO,
        UpdateProductDTO,
    )
    from modules.products.repositories.interfaces import (
        ICategoryRepository,
        IProductImageRepository,
        IProductRepository,
    )

logger = structlog.get_logger(__name__)


class ProductService:
    """Application service for Product use-cases.

    Receives its repositories via constructor injection.
    """

    def __init__(
        self,
        repository: IProductRepository,
        category_repository: ICategoryRepository,
    ) -> None:
        self._repo = repository
        self._categories = category_repository

    # ------------------------------------------------------------------
    # Commands
    # ------------------------------------------------------------------

    @transaction.atomic
    def create_product(self, dto: CreateProductDTO) -> Product:
        """Create a new product after enforcing uniqueness rules.

        Raises:
            ProductAlreadyExists: if the SKU is already taken.
            CategoryNotFound: if ``category_id`` names no live category.
        """
        log = logger.bind(sku=dto.sku)

        if self._repo.get_by_sku(dto.sku):
            log.warning("product.duplicate_sku")
            raise ProductAlreadyExists(f"SKU '{dto.sku}' already registered.")

        product = Product(
            sku=dto.sku,
            name=dto.name,
            price=dto.price,
            description=dto.description,
            category=self._resolve_category(dto.category_id),
            stock_quantity=dto.stock_quantity,
            status=dto.status,
        )
        product = self._repo.save(product)
        log.info("product.created", product_id=str(product.id))
        return product

    @transaction.atomic
    def update_product(self, id: str, dto: UpdateProductDTO) -> Product:
        """Update an existing product with the supplied fields.

        Raises:
            ProductNotFound: if the product does not exist.
            CategoryNotFound: if ``category_id`` names no live category.
        """
        product = self.get_product(id)
        changes = dto.model_dump(exclude_none=True)

        category_id = changes.pop("category_id", None)
        if category_id is not None:
            product.category = self._resolve_category(category_id)
        for field, value in changes.items():
            setattr(product, field, value)

        product = self._repo.save(product)
        logger.info("product.updated", product_id=str(id))
        return product

    @transaction.atomic
    def delete_product(self, id: str) -> None:
        """Soft-delete a product; order items keep their reference.

        Raises:
            ProductNotFound: if the product does not exist.
        """
        self.get_product(id)
        self._repo.delete(id)
        logger.info("product.soft_deleted", product_id=str(id))

    # ------------------------------------------------------------------
    # Queries
    # ------------------------------------------------------------------

    def list_products(
        self, filters: Optional[Dict[str, Any]] = None
    ) -> "models.QuerySet[Product]":
        return self._repo.list(filters)

    def search_products(self, term: str) -> "models.QuerySet[Product]":
        return self._repo.search(term)

    def get_product(self, id: str) -> Product:
        """Retrieve a single product by ID.

        Raises:
            ProductNotFound: if the product does not exist.
        """
        product = self._repo.get_by_id(id)
        if not product:
            raise ProductNotFound(f"Product {id} not found.")
        return product

    def _resolve_category(self, category_id) -> Optional[Category]:
        if category_id is None:
            return None
        category = self._categories.get_by_id(str(category_id))
        if not category:
            raise CategoryNotFound(f"Category {category_id} not found.")
        return category


class CategoryService:
    def __init__(
        self,
        repository: ICategoryRepository,
        product_repository: IProductRepository,
    ) -> None:
        self._repo = repository
        self._products = product_repository

    @transaction.atomic
    def create_category(self, dto: CreateCategoryDTO) -> Category:
        """Raises ``CategoryAlreadyExists`` when the slug is taken."""
        if self._repo.get_by_slug(dto.slug):
            logger.warning("category.duplicate_slug", slug=dto.slug)
            raise CategoryAlreadyExists(f"Category slug '{dto.slug}' already registered.")

        category = self._repo.save(Category(**dto.model_dump()))
        logger.info("category.created", category_id=str(category.id))
        return category

    @transaction.atomic
    def update_category(self, id: str, dto: UpdateCategoryDTO) -> Category:
        category = self.get_category(id)
        for field, value in dto.model_dump(exclude_none=True).items():
            setattr(category, field, value)
        category = self._repo.save(category)
        logger.info("category.updated", category_id=str(id))
        return category

    @transaction.atomic
    def delete_category(self, id: str) -> None:
        self.get_category(id)
        self._repo.delete(id)
        logger.info("category.soft_deleted", category_id=str(id))

    def list_categories(
        self, filters: Optional[Dict[str, Any]] = None
    ) -> "models.QuerySet[Category]":
        return self._repo.list(filters)

    def get_category(self, id: str) -> Category:
        category = self._repo.get_by_id(id)
        if not category:
            raise CategoryNotFound(f"Category {id} not found.")
        return category

    def list_category_products(self, id: str) -> "models.QuerySet[Product]":
        """Live products of one category.

        Raises:
            CategoryNotFound: if the category does not exist.
        """
        category = self.get_category(id)
        return self._products.list({"category_id": category.id})


class ProductImageService:
    def __init__(
        self,
        repository: IProductImageRepository,
        product_repository: IProductRepository,
    ) -> None:
        self._repo = repository
        self._products = product_repository

    def list_images(self, product_id: str) -> "models.QuerySet[ProductImage]":
        product = self._get_product(product_id)
        return self._repo.list({"product_id": product.id})

    @transaction.atomic
    def add_image(
        self,
        product_id: str,
        dto: CreateProductImageDTO,
        upload: Optional[UploadedFile] = None,
    ) -> ProductImage:
        """Attach an image given either ``dto.url`` or an uploaded file.

        Raises:
            ProductNotFound: if the product does not exist.
            InvalidProductImage: if both or neither source is given.
        """
        product = self._get_product(product_id)
        if bool(dto.url) == (upload is not None):
            raise InvalidProductImage(
                "Provide either an image URL or an uploaded file."
            )
        if upload is not None and not upload.size:
            raise InvalidProductImage("Uploaded file is empty.")

        image = ProductImage(
            product=product,
            external_url=dto.url,
            alt_text=dto.alt_text,
            is_primary=dto.is_primary,
            sort_order=dto.sort_order,
        )
        if upload is not None:
            image.file.save(upload.name, upload, save=False)
        image = self._repo.save(image)
        if image.is_primary:
            self._repo.clear_primary(str(product.id), exclude_id=str(image.id))

        logger.info(
            "product_image.created",
            image_id=str(image.id),
            product_id=str(product.id),
            uploaded=upload is not None,
        )
        return image

    @transaction.atomic
    def delete_image(self, product_id: str, image_id: str) -> None:
        """Raises ``ProductImageNotFound`` if the image is not the product's."""
        product = self._get_product(product_id)
        image = self._repo.get_by_id(image_id)
        if not image or image.product_id != product.id:
            raise ProductImageNotFound(f"Image {image_id} not found.")
        self._repo.delete(image_id)
        logger.info("product_image.deleted", image_id=str(image_id))

    def _get_product(self, product_id: str) -> Product:
        product = self._products.get_by_id(product_id)
        if not product:
            raise ProductNotFound(f"Product {product_id} not found.")
        return product
