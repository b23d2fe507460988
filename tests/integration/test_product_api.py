"""Integration tests for the catalog API.

Covers products, their images (URL and multipart upload) and categories.
"""

from __future__ import annotations

from uuid import uuid4

import pytest
from django.core.files.uploadedfile import SimpleUploadedFile

from modules.products.models import ProductImage

pytestmark = pytest.mark.integration

PRODUCTS_URL = "/api/v1/products"
CATEGORIES_URL = "/api/v1/categories"


@pytest.fixture()
def media_root(settings, tmp_path):
    settings.MEDIA_ROOT = str(tmp_path)
    return tmp_path


class TestProductCRUD:
    def test_create(self, auth_client, category):
        payload = {
            "sku": " book-003 ",
            "name": "Sketch of the Analytical Engine",
            "price": "12.99",
            "categoryId": str(category.id),
            "stockQuantity": 7,
        }
        response = auth_client.post(PRODUCTS_URL, payload, format="json")
        assert response.status_code == 201
        data = response.json()["data"]
        assert data["sku"] == "BOOK-003"
        assert data["price"] == "12.99"
        assert data["categoryId"] == str(category.id)
        assert data["isActive"] is True

    def test_duplicate_sku(self, auth_client, product):
        payload = {"sku": "BOOK-001", "name": "Copy", "price": "1.00"}
        response = auth_client.post(PRODUCTS_URL, payload, format="json")
        assert response.status_code == 409
        assert response.json()["error"]["code"] == "CONFLICT"

    def test_non_positive_price(self, auth_client):
        payload = {"sku": "FREE-1", "name": "Free", "price": "0.00"}
        response = auth_client.post(PRODUCTS_URL, payload, format="json")
        assert response.status_code == 400
        assert response.json()["error"]["code"] == "VALIDATION_ERROR"

    def test_unknown_category(self, auth_client):
        payload = {"sku": "X-1", "name": "X", "price": "1.00", "categoryId": str(uuid4())}
        response = auth_client.post(PRODUCTS_URL, payload, format="json")
        assert response.status_code == 404

    def test_retrieve(self, auth_client, product):
        data = auth_client.get(f"{PRODUCTS_URL}/{product.id}").json()["data"]
        assert data["sku"] == "BOOK-001"
        assert data["stockQuantity"] == 100

    def test_update(self, auth_client, product):
        response = auth_client.patch(
            f"{PRODUCTS_URL}/{product.id}", {"price": "11.00"}, format="json"
        )
        assert response.status_code == 200
        assert response.json()["data"]["price"] == "11.00"

    def test_delete(self, auth_client, product):
        assert auth_client.delete(f"{PRODUCTS_URL}/{product.id}").status_code == 200
        assert auth_client.get(f"{PRODUCTS_URL}/{product.id}").status_code == 404

    def test_filter_by_price(self, auth_client, product, product_b):
        page = auth_client.get(PRODUCTS_URL, {"minPrice": "20"}).json()["data"]
        assert [p["sku"] for p in page["items"]] == ["BOOK-002"]

    def test_filter_inactive(self, auth_client, product, inactive_product):
        page = auth_client.get(PRODUCTS_URL, {"active": "false"}).json()["data"]
        assert [p["sku"] for p in page["items"]] == ["BOOK-OLD"]

    def test_search(self, auth_client, product, product_b):
        page = auth_client.get(f"{PRODUCTS_URL}/search", {"search": "economy"}).json()["data"]
        assert page["total"] == 1
        assert page["items"][0]["sku"] == "BOOK-002"


class TestProductImages:
    def test_add_by_url(self, auth_client, product):
        url = f"{PRODUCTS_URL}/{product.id}/images"
        payload = {"url": "https://cdn.example.com/book.png", "isPrimary": True}
        response = auth_client.post(url, payload, format="json")
        assert response.status_code == 201
        data = response.json()["data"]
        assert data["url"] == "https://cdn.example.com/book.png"
        assert data["isPrimary"] is True

        listed = auth_client.get(url).json()["data"]
        assert [i["id"] for i in listed] == [data["id"]]

    def test_new_primary_demotes_old(self, auth_client, product):
        url = f"{PRODUCTS_URL}/{product.id}/images"
        first = auth_client.post(
            url, {"url": "https://cdn.example.com/a.png", "isPrimary": True}, format="json"
        ).json()["data"]
        auth_client.post(
            url, {"url": "https://cdn.example.com/b.png", "isPrimary": True}, format="json"
        )
        assert ProductImage.objects.get(id=first["id"]).is_primary is False

    def test_upload(self, auth_client, product, media_root):
        upload = SimpleUploadedFile("cover.png", b"\x89PNG fake", content_type="image/png")
        response = auth_client.post(
            f"{PRODUCTS_URL}/{product.id}/images/upload",
            {"file": upload, "altText": "Cover"},
            format="multipart",
        )
        assert response.status_code == 201
        data = response.json()["data"]
        assert data["altText"] == "Cover"
        assert "/media/products/" in data["url"]
        assert any(media_root.rglob("cover*.png"))

    def test_upload_without_file(self, auth_client, product, media_root):
        response = auth_client.post(
            f"{PRODUCTS_URL}/{product.id}/images/upload", {"altText": "x"}, format="multipart"
        )
        assert response.status_code == 400
        assert "file" in response.json()["message"]

    def test_delete_image(self, auth_client, product):
        url = f"{PRODUCTS_URL}/{product.id}/images"
        image = auth_client.post(
            url, {"url": "https://cdn.example.com/a.png"}, format="json"
        ).json()["data"]
        response = auth_client.delete(f"{url}/{image['id']}")
        assert response.status_code == 200
        assert auth_client.get(url).json()["data"] == []

    def test_delete_unknown_image(self, auth_client, product):
        response = auth_client.delete(f"{PRODUCTS_URL}/{product.id}/images/{uuid4()}")
        assert response.status_code == 404

    def test_images_of_unknown_product(self, auth_client):
        response = auth_client.get(f"{PRODUCTS_URL}/{uuid4()}/images")
        assert response.status_code == 404


class TestCategories:
    def test_list(self, auth_client, category):
        page = auth_client.get(CATEGORIES_URL).json()["data"]
        assert [c["slug"] for c in page["items"]] == ["books"]

    def test_create(self, auth_client):
        response = auth_client.post(
            CATEGORIES_URL, {"name": "Music", "slug": "music"}, format="json"
        )
        assert response.status_code == 201
        assert response.json()["data"]["isActive"] is True

    def test_duplicate_slug(self, auth_client, category):
        response = auth_client.post(
            CATEGORIES_URL, {"name": "Books again", "slug": "books"}, format="json"
        )
        assert response.status_code == 409

    def test_retrieve(self, auth_client, category):
        data = auth_client.get(f"{CATEGORIES_URL}/{category.id}").json()["data"]
        assert data["name"] == "Books"

    def test_category_products(self, auth_client, category, product, product_b):
        page = auth_client.get(f"{CATEGORIES_URL}/{category.id}/products").json()["data"]
        assert page["total"] == 1
        assert page["items"][0]["sku"] == "BOOK-001"

    def test_unknown_category_products(self, auth_client):
        response = auth_client.get(f"{CATEGORIES_URL}/{uuid4()}/products")
        assert response.status_code == 404

    def test_category_products_search(self, auth_client, category, product):
        url = f"{CATEGORIES_URL}/{category.id}/products"
        assert auth_client.get(url, {"search": "Notes"}).json()["data"]["total"] == 1
        assert auth_client.get(url, {"search": "nothing"}).json()["data"]["total"] == 0

    def test_category_products_filter_and_ordering(self, auth_client, category, product):
        url = f"{CATEGORIES_URL}/{category.id}/products"
        response = auth_client.get(url, {"maxPrice": "5", "ordering": "-price"})
        assert response.status_code == 200
        assert response.json()["data"]["total"] == 0
