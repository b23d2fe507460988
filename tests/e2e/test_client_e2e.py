"""End-to-end: the API client talking to the real Django application.

Requests go through ``httpx.WSGITransport`` straight into the WSGI
handler, so the whole stack runs (middleware, JWT authentication,
envelope exception handler) without opening a socket.
"""

from __future__ import annotations

from decimal import Decimal
from uuid import uuid4

import httpx
import pytest
from django.core.signals import request_finished, request_started
from django.core.wsgi import get_wsgi_application
from django.db import close_old_connections
from rest_framework_simplejwt.tokens import AccessToken

from api_client.config import ClientConfig
from api_client.executor import RequestExecutor
from api_client.models import (
    CreateOrderRequest,
    CustomerInput,
    OrderItemInput,
    OrderStatus,
    ProductInput,
    UpdateOrderRequest,
)
from api_client.services.orders import OrdersService
from api_client.services.products import ProductsService
from shared.domain.errors import ErrorCode

pytestmark = pytest.mark.e2e

BASE_URL = "http://testserver/api/v1"


@pytest.fixture()
def wsgi_transport():
    # Same arrangement as django.test.Client: keep the test transaction's
    # connection open across requests.
    request_started.disconnect(close_old_connections)
    request_finished.disconnect(close_old_connections)
    try:
        yield httpx.WSGITransport(app=get_wsgi_application())
    finally:
        request_started.connect(close_old_connections)
        request_finished.connect(close_old_connections)


@pytest.fixture()
def executor(wsgi_transport, user):
    token = str(AccessToken.for_user(user))
    config = ClientConfig(base_url=BASE_URL, token_provider=lambda: token)
    with RequestExecutor(config, transport=wsgi_transport) as executor:
        yield executor


@pytest.fixture()
def anonymous_executor(wsgi_transport):
    with RequestExecutor(ClientConfig(base_url=BASE_URL), transport=wsgi_transport) as executor:
        yield executor


@pytest.fixture()
def orders(executor):
    return OrdersService(executor)


@pytest.fixture()
def products(executor):
    return ProductsService(executor)


class TestOrderLifecycle:
    def test_create_confirm_and_ship(self, orders, customer, address, product):
        created = orders.create_order(
            CreateOrderRequest(
                customer_id=customer.id,
                shipping_address_id=address.id,
                items=[OrderItemInput(product_id=product.id, quantity=3)],
                shipping_amount=Decimal("5.00"),
            )
        )
        assert created.success, created.message
        order = created.data
        assert order.status is OrderStatus.PENDING
        assert order.total_amount == Decimal("35.00")

        for status in (OrderStatus.CONFIRMED, OrderStatus.PROCESSING, OrderStatus.SHIPPED):
            result = orders.update_order(order.id, UpdateOrderRequest(status=status))
            assert result.success, result.message

        shipped = orders.get_order(order.id).data
        assert shipped.status is OrderStatus.SHIPPED
        assert shipped.shipped_date is not None
        assert [h.new_status for h in shipped.status_history] == [
            OrderStatus.PENDING,
            OrderStatus.CONFIRMED,
            OrderStatus.PROCESSING,
            OrderStatus.SHIPPED,
        ]

    def test_retry_with_idempotency_key_replays_first_order(self, orders, customer, product):
        request = CreateOrderRequest(
            customer_id=customer.id,
            items=[OrderItemInput(product_id=product.id, quantity=1)],
        )
        first = orders.create_order(request, idempotency_key="checkout-7")
        retry = orders.create_order(request, idempotency_key="checkout-7")
        other = orders.create_order(request)

        assert first.success and retry.success and other.success
        assert retry.data.id == first.data.id
        assert other.data.id != first.data.id

    def test_items_and_statistics(self, orders, customer, product, product_b):
        order = orders.create_order(
            CreateOrderRequest(
                customer_id=customer.id,
                items=[OrderItemInput(product_id=product.id, quantity=1)],
            )
        ).data

        added = orders.add_order_item(
            order.id, OrderItemInput(product_id=product_b.id, quantity=2)
        )
        assert added.success
        assert added.data.total_price == Decimal("51.00")

        items = orders.list_order_items(order.id).data
        assert {i.product_sku for i in items} == {"BOOK-001", "BOOK-002"}

        stats = orders.get_statistics().data
        assert stats.total_orders == 1
        assert stats.total_revenue == Decimal("61.00")
        assert stats.orders_by_status["pending"] == 1
        assert stats.recent_orders[0].id == order.id

    def test_cancel_and_list(self, orders, customer, product):
        order = orders.create_order(
            CreateOrderRequest(
                customer_id=customer.id,
                items=[OrderItemInput(product_id=product.id, quantity=1)],
            )
        ).data

        cancelled = orders.cancel_order(order.id, notes="Duplicate")
        assert cancelled.data.status is OrderStatus.CANCELLED

        page = orders.list_orders({"status": "cancelled"}).data
        assert page.total == 1
        assert page.items[0].order_number == order.order_number

        found = orders.search_orders(order.order_number).data
        assert found.total == 1


class TestErrorPassThrough:
    def test_server_envelope_reaches_caller(self, orders, customer, product):
        order = orders.create_order(
            CreateOrderRequest(
                customer_id=customer.id,
                items=[OrderItemInput(product_id=product.id, quantity=1)],
            )
        ).data

        result = orders.update_order(order.id, UpdateOrderRequest(status=OrderStatus.DELIVERED))

        assert result.success is False
        assert result.data is None
        assert result.error.code is ErrorCode.VALIDATION_ERROR
        assert "'pending' to 'delivered'" in result.message

    def test_not_found(self, orders):
        result = orders.get_order(uuid4())
        assert result.error.code is ErrorCode.NOT_FOUND

    def test_conflict(self, orders, customer):
        result = orders.create_customer(
            CustomerInput(first_name="Ada", last_name="L", email="ada@example.com")
        )
        assert result.error.code is ErrorCode.CONFLICT

    def test_missing_token(self, anonymous_executor):
        result = OrdersService(anonymous_executor).list_orders()
        assert result.success is False
        assert result.error.code is ErrorCode.UNAUTHORIZED

    def test_unreachable_server(self):
        def refuse(request):
            raise httpx.ConnectError("Connection refused", request=request)

        config = ClientConfig(base_url=BASE_URL)
        with RequestExecutor(config, transport=httpx.MockTransport(refuse)) as executor:
            result = OrdersService(executor).list_orders()
        assert result.error.code is ErrorCode.NETWORK_ERROR


class TestCatalog:
    def test_product_round_trip(self, products, category):
        created = products.create_product(
            ProductInput(sku="mus-1", name="Ode", price=Decimal("9.99"), category_id=category.id)
        )
        assert created.success, created.message
        assert created.data.sku == "MUS-1"

        fetched = products.get_product(created.data.id).data
        assert fetched.price == Decimal("9.99")

        in_category = products.list_category_products(category.id).data
        assert [p.sku for p in in_category.items] == ["MUS-1"]

        deleted = products.delete_product(created.data.id)
        assert deleted.success is True
        assert deleted.data is None
        assert products.get_product(created.data.id).error.code is ErrorCode.NOT_FOUND

    def test_upload_image(self, products, product, settings, tmp_path):
        settings.MEDIA_ROOT = str(tmp_path)
        result = products.upload_product_image(
            product.id, ("cover.png", b"\x89PNG fake", "image/png"), alt_text="Cover"
        )
        assert result.success, result.message
        assert result.data.alt_text == "Cover"
        assert result.data.url.startswith("http://testserver/media/products/")
