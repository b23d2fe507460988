"""Integration tests for the paginated list envelope."""

from decimal import Decimal

import pytest

from modules.products.models import Product, ProductStatus

pytestmark = pytest.mark.integration


@pytest.fixture()
def many_products():
    return Product.objects.bulk_create(
        [
            Product(
                sku=f"SKU-{i:03d}",
                name=f"Product {i:03d}",
                price=Decimal("1.00") + i,
                status=ProductStatus.ACTIVE,
            )
            for i in range(25)
        ]
    )


class TestPagination:
    def test_default_page(self, auth_client, many_products):
        body = auth_client.get("/api/v1/products").json()
        assert body["success"] is True
        page = body["data"]
        assert page["total"] == 25
        assert page["page"] == 1
        assert page["pageSize"] == 20
        assert len(page["items"]) == 20

    def test_second_page(self, auth_client, many_products):
        page = auth_client.get("/api/v1/products", {"page": 2}).json()["data"]
        assert page["page"] == 2
        assert len(page["items"]) == 5
        assert page["items"][0]["sku"] == "SKU-020"

    def test_custom_page_size(self, auth_client, many_products):
        page = auth_client.get("/api/v1/products", {"pageSize": 10}).json()["data"]
        assert page["pageSize"] == 10
        assert len(page["items"]) == 10
        assert page["total"] == 25

    def test_page_size_is_capped(self, auth_client, many_products):
        page = auth_client.get("/api/v1/products", {"pageSize": 1000}).json()["data"]
        assert page["pageSize"] == 100

    def test_page_out_of_range(self, auth_client, many_products):
        response = auth_client.get("/api/v1/products", {"page": 99})
        assert response.status_code == 404
        assert response.json()["error"]["code"] == "NOT_FOUND"

    def test_empty_list(self, auth_client):
        page = auth_client.get("/api/v1/products").json()["data"]
        assert page == {"items": [], "total": 0, "page": 1, "pageSize": 20}

    def test_ordering(self, auth_client, many_products):
        page = auth_client.get("/api/v1/products", {"ordering": "-price"}).json()["data"]
        assert page["items"][0]["sku"] == "SKU-024"
