"""Integration tests for Customer and Address API endpoints.

Covers:
- CRUD operations via /api/v1/customers and /api/v1/addresses.
- Domain exception mapping (404, 409, 400).
- Customer sub-resources (orders, addresses) and search.
"""

from __future__ import annotations

from uuid import uuid4

import pytest

from modules.customers.models import Customer

pytestmark = pytest.mark.integration

CUSTOMERS_URL = "/api/v1/customers"
ADDRESSES_URL = "/api/v1/addresses"


@pytest.fixture()
def address_payload(customer):
    return {
        "customerId": str(customer.id),
        "type": "shipping",
        "firstName": "Ada",
        "lastName": "Lovelace",
        "addressLine1": "1 Marylebone Road",
        "city": "London",
        "state": "London",
        "postalCode": "NW1 5LR",
        "country": "gb",
    }


class TestCustomerList:
    def test_list_empty(self, auth_client):
        body = auth_client.get(CUSTOMERS_URL).json()
        assert body["data"]["items"] == []
        assert body["data"]["total"] == 0

    def test_list_returns_customers(self, auth_client, customer):
        items = auth_client.get(CUSTOMERS_URL).json()["data"]["items"]
        assert len(items) == 1
        assert items[0]["fullName"] == "Ada Lovelace"

    def test_filter_active(self, auth_client, customer, inactive_customer):
        items = auth_client.get(CUSTOMERS_URL, {"active": "false"}).json()["data"]["items"]
        assert [c["email"] for c in items] == ["charles@example.com"]

    def test_search(self, auth_client, customer, inactive_customer):
        page = auth_client.get(f"{CUSTOMERS_URL}/search", {"search": "lovelace"}).json()["data"]
        assert page["total"] == 1
        assert page["items"][0]["id"] == str(customer.id)


class TestCustomerCreate:
    def test_create(self, auth_client):
        payload = {"firstName": "Grace", "lastName": "Hopper", "email": "Grace@Example.com"}
        response = auth_client.post(CUSTOMERS_URL, payload, format="json")
        assert response.status_code == 201
        data = response.json()["data"]
        assert data["email"] == "grace@example.com"
        assert data["isActive"] is True
        assert Customer.objects.filter(id=data["id"]).exists()

    def test_duplicate_email(self, auth_client, customer):
        payload = {"firstName": "Ada", "lastName": "Byron", "email": "ada@example.com"}
        response = auth_client.post(CUSTOMERS_URL, payload, format="json")
        assert response.status_code == 409
        assert response.json()["message"] == "Email already registered."

    def test_invalid_email(self, auth_client):
        payload = {"firstName": "Grace", "lastName": "Hopper", "email": "not-an-email"}
        response = auth_client.post(CUSTOMERS_URL, payload, format="json")
        assert response.status_code == 400
        assert response.json()["error"]["code"] == "VALIDATION_ERROR"


class TestCustomerDetail:
    def test_retrieve(self, auth_client, customer):
        data = auth_client.get(f"{CUSTOMERS_URL}/{customer.id}").json()["data"]
        assert data["firstName"] == "Ada"
        assert data["lastName"] == "Lovelace"

    def test_retrieve_unknown(self, auth_client):
        response = auth_client.get(f"{CUSTOMERS_URL}/{uuid4()}")
        assert response.status_code == 404

    def test_update(self, auth_client, customer):
        response = auth_client.patch(
            f"{CUSTOMERS_URL}/{customer.id}", {"phone": "+44 20 7946 0000"}, format="json"
        )
        assert response.status_code == 200
        assert response.json()["data"]["phone"] == "+44 20 7946 0000"

    def test_update_to_taken_email(self, auth_client, customer, inactive_customer):
        response = auth_client.patch(
            f"{CUSTOMERS_URL}/{customer.id}", {"email": "charles@example.com"}, format="json"
        )
        assert response.status_code == 409

    def test_delete(self, auth_client, customer):
        response = auth_client.delete(f"{CUSTOMERS_URL}/{customer.id}")
        assert response.status_code == 200
        assert response.json()["data"] is None
        assert auth_client.get(f"{CUSTOMERS_URL}/{customer.id}").status_code == 404
        assert Customer.objects.dead().filter(id=customer.id).exists()


class TestCustomerSubResources:
    def test_addresses(self, auth_client, customer, address):
        body = auth_client.get(f"{CUSTOMERS_URL}/{customer.id}/addresses").json()
        assert [a["id"] for a in body["data"]] == [str(address.id)]

    def test_orders(self, auth_client, customer, order_service, product):
        from modules.orders.dtos import CreateOrderDTO, CreateOrderItemDTO

        order = order_service.create_order(
            CreateOrderDTO(
                customer_id=customer.id,
                items=[CreateOrderItemDTO(product_id=product.id, quantity=1)],
            )
        )
        page = auth_client.get(f"{CUSTOMERS_URL}/{customer.id}/orders").json()["data"]
        assert page["total"] == 1
        assert page["items"][0]["orderNumber"] == order.order_number

    def test_orders_filtered_by_status(self, auth_client, customer, order_service, product):
        from modules.orders.dtos import CreateOrderDTO, CreateOrderItemDTO

        order_service.create_order(
            CreateOrderDTO(
                customer_id=customer.id,
                items=[CreateOrderItemDTO(product_id=product.id, quantity=1)],
            )
        )
        url = f"{CUSTOMERS_URL}/{customer.id}/orders"
        assert auth_client.get(url, {"status": "pending"}).json()["data"]["total"] == 1
        assert auth_client.get(url, {"status": "shipped"}).json()["data"]["total"] == 0
        assert auth_client.get(url, {"search": "ORD-"}).json()["data"]["total"] == 1

    def test_orders_of_unknown_customer(self, auth_client):
        response = auth_client.get(f"{CUSTOMERS_URL}/{uuid4()}/orders")
        assert response.status_code == 404


class TestAddressAPI:
    def test_create(self, auth_client, address_payload):
        response = auth_client.post(ADDRESSES_URL, address_payload, format="json")
        assert response.status_code == 201
        data = response.json()["data"]
        assert data["country"] == "GB"
        assert data["type"] == "shipping"

    def test_create_for_unknown_customer(self, auth_client, address_payload):
        address_payload["customerId"] = str(uuid4())
        response = auth_client.post(ADDRESSES_URL, address_payload, format="json")
        assert response.status_code == 404

    def test_list_filtered_by_customer(self, auth_client, address, inactive_customer):
        page = auth_client.get(ADDRESSES_URL, {"customerId": str(address.customer_id)}).json()
        assert page["data"]["total"] == 1
        page = auth_client.get(ADDRESSES_URL, {"customerId": str(inactive_customer.id)}).json()
        assert page["data"]["total"] == 0

    def test_update(self, auth_client, address):
        response = auth_client.patch(
            f"{ADDRESSES_URL}/{address.id}", {"city": "Cambridge"}, format="json"
        )
        assert response.status_code == 200
        assert response.json()["data"]["city"] == "Cambridge"

    def test_delete(self, auth_client, address):
        assert auth_client.delete(f"{ADDRESSES_URL}/{address.id}").status_code == 200
        assert auth_client.get(f"{ADDRESSES_URL}/{address.id}").status_code == 404
