from decimal import Decimal

import pytest
from django.contrib.auth import get_user_model
from django.core.cache import cache
from rest_framework.test import APIClient

from modules.customers.models import Address, AddressType, Customer
from modules.customers.repositories.django_repository import (
    AddressDjangoRepository,
    CustomerDjangoRepository,
)
from modules.orders.repositories.django_repository import OrderDjangoRepository
from modules.orders.services import OrderService
from modules.products.models import Category, Product, ProductStatus
from modules.products.repositories.django_repository import ProductDjangoRepository


@pytest.fixture(autouse=True)
def _use_db(db):
    """Automatically use the test database for all tests."""


@pytest.fixture(autouse=True)
def _clear_cache():
    """Throttle counters live in the cache; start every test from zero."""
    cache.clear()
    yield
    cache.clear()


@pytest.fixture()
def api_client():
    """DRF APIClient for testing API endpoints."""
    return APIClient()


@pytest.fixture()
def user():
    return get_user_model().objects.create_user(username="clerk", password="testpass123")


@pytest.fixture()
def auth_client(user):
    """APIClient with a force-authenticated Django user."""
    client = APIClient()
    client.force_authenticate(user=user)
    return client


@pytest.fixture()
def customer():
    return Customer.objects.create(
        first_name="Ada",
        last_name="Lovelace",
        email="ada@example.com",
        is_active=True,
    )


@pytest.fixture()
def inactive_customer():
    return Customer.objects.create(
        first_name="Charles",
        last_name="Babbage",
        email="charles@example.com",
        is_active=False,
    )


@pytest.fixture()
def address(customer):
    return Address.objects.create(
        customer=customer,
        type=AddressType.BOTH,
        first_name="Ada",
        last_name="Lovelace",
        address_line1="12 St James's Square",
        city="London",
        state="London",
        postal_code="SW1Y 4JH",
        country="GB",
        is_default=True,
    )


@pytest.fixture()
def category():
    return Category.objects.create(name="Books", slug="books")


@pytest.fixture()
def product(category):
    return Product.objects.create(
        sku="BOOK-001",
        name="Notes on the Analytical Engine",
        price=Decimal("10.00"),
        category=category,
        stock_quantity=100,
        status=ProductStatus.ACTIVE,
    )


@pytest.fixture()
def product_b():
    return Product.objects.create(
        sku="BOOK-002",
        name="On the Economy of Machinery",
        price=Decimal("25.50"),
        stock_quantity=50,
        status=ProductStatus.ACTIVE,
    )


@pytest.fixture()
def inactive_product():
    return Product.objects.create(
        sku="BOOK-OLD",
        name="Out of print",
        price=Decimal("5.00"),
        status=ProductStatus.INACTIVE,
    )


@pytest.fixture()
def order_service():
    return OrderService(
        order_repository=OrderDjangoRepository(),
        customer_repository=CustomerDjangoRepository(),
        address_repository=AddressDjangoRepository(),
        product_repository=ProductDjangoRepository(),
    )
