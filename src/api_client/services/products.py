"""Catalog access: products, product images and categories."""

from __future__ import annotations

from typing import Any, List, Optional

from api_client.executor import QueryParams, RequestExecutor
from api_client.models import Category, Product, ProductImage
from api_client.services.orders import with_search
from shared.domain.envelope import Envelope, Paginated


class ProductsService:
    products_url = "products"
    categories_url = "categories"

    def __init__(self, executor: RequestExecutor) -> None:
        self._executor = executor

    def list_products(self, params: Optional[QueryParams] = None) -> Envelope:
        return self._executor.get(self.products_url, params, Paginated[Product])

    def get_product(self, product_id: Any) -> Envelope:
        return self._executor.get(f"{self.products_url}/{product_id}", response_model=Product)

    def create_product(self, product: Any) -> Envelope:
        return self._executor.post(self.products_url, product, Product)

    def update_product(self, product_id: Any, changes: Any) -> Envelope:
        return self._executor.patch(f"{self.products_url}/{product_id}", changes, Product)

    def delete_product(self, product_id: Any) -> Envelope:
        return self._executor.delete(f"{self.products_url}/{product_id}")

    def search_products(self, query: str, params: Optional[QueryParams] = None) -> Envelope:
        return self._executor.get(
            f"{self.products_url}/search", with_search(query, params), Paginated[Product]
        )

    # ------------------------------------------------------------------
    # Images
    # ------------------------------------------------------------------

    def list_product_images(self, product_id: Any) -> Envelope:
        return self._executor.get(
            f"{self.products_url}/{product_id}/images", response_model=List[ProductImage]
        )

    def create_product_image(self, product_id: Any, image: Any) -> Envelope:
        return self._executor.post(
            f"{self.products_url}/{product_id}/images", image, ProductImage
        )

    def delete_product_image(self, product_id: Any, image_id: Any) -> Envelope:
        return self._executor.delete(f"{self.products_url}/{product_id}/images/{image_id}")

    def upload_product_image(
        self, product_id: Any, file: Any, alt_text: Optional[str] = None
    ) -> Envelope:
        return self._executor.upload_file(
            f"{self.products_url}/{product_id}/images/upload",
            file,
            fields={"altText": alt_text},
            response_model=ProductImage,
        )

    # ------------------------------------------------------------------
    # Categories
    # ------------------------------------------------------------------

    def list_categories(self, params: Optional[QueryParams] = None) -> Envelope:
        return self._executor.get(self.categories_url, params, Paginated[Category])

    def get_category(self, category_id: Any) -> Envelope:
        return self._executor.get(
            f"{self.categories_url}/{category_id}", response_model=Category
        )

    def list_category_products(
        self, category_id: Any, params: Optional[QueryParams] = None
    ) -> Envelope:
        return self._executor.get(
            f"{self.categories_url}/{category_id}/products", params, Paginated[Product]
        )
