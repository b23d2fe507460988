"""Orders, customers, addresses and statistics over the storefront API."""

from __future__ import annotations

from typing import Any, Dict, List, Optional

from api_client.executor import QueryParams, RequestExecutor
from api_client.models import (
    Address,
    Customer,
    Order,
    OrderItem,
    OrderStatistics,
    OrderSummary,
)
from shared.domain.envelope import Envelope, Paginated

IDEMPOTENCY_KEY_HEADER = "Idempotency-Key"


def with_search(query: str, params: Optional[QueryParams] = None) -> Dict[str, Any]:
    """Copy ``params`` and set ``search``; the caller's mapping is untouched."""
    merged = dict(params or {})
    merged["search"] = query
    return merged


class OrdersService:
    orders_url = "orders"
    customers_url = "customers"
    addresses_url = "addresses"
    statistics_url = "statistics"

    def __init__(self, executor: RequestExecutor) -> None:
        self._executor = executor

    # ------------------------------------------------------------------
    # Orders
    # ------------------------------------------------------------------

    def list_orders(self, params: Optional[QueryParams] = None) -> Envelope:
        return self._executor.get(self.orders_url, params, Paginated[OrderSummary])

    def get_order(self, order_id: Any) -> Envelope:
        return self._executor.get(f"{self.orders_url}/{order_id}", response_model=Order)

    def create_order(self, order: Any, idempotency_key: Optional[str] = None) -> Envelope:
        """POST a new order.

        Retrying with the same ``idempotency_key`` replays the order the
        server created first instead of creating another one.
        """
        headers = {IDEMPOTENCY_KEY_HEADER: idempotency_key} if idempotency_key else None
        return self._executor.post(self.orders_url, order, Order, headers=headers)

    def update_order(self, order_id: Any, changes: Any) -> Envelope:
        return self._executor.patch(f"{self.orders_url}/{order_id}", changes, Order)

    def cancel_order(self, order_id: Any, notes: str = "") -> Envelope:
        return self._executor.post(
            f"{self.orders_url}/{order_id}/cancel", {"notes": notes}, Order
        )

    def delete_order(self, order_id: Any) -> Envelope:
        return self._executor.delete(f"{self.orders_url}/{order_id}")

    def search_orders(self, query: str, params: Optional[QueryParams] = None) -> Envelope:
        return self._executor.get(
            f"{self.orders_url}/search", with_search(query, params), Paginated[OrderSummary]
        )

    # ------------------------------------------------------------------
    # Order items
    # ------------------------------------------------------------------

    def list_order_items(self, order_id: Any) -> Envelope:
        return self._executor.get(
            f"{self.orders_url}/{order_id}/items", response_model=List[OrderItem]
        )

    def add_order_item(self, order_id: Any, item: Any) -> Envelope:
        return self._executor.post(f"{self.orders_url}/{order_id}/items", item, OrderItem)

    def update_order_item(self, order_id: Any, item_id: Any, changes: Any) -> Envelope:
        return self._executor.patch(
            f"{self.orders_url}/{order_id}/items/{item_id}", changes, OrderItem
        )

    def remove_order_item(self, order_id: Any, item_id: Any) -> Envelope:
        return self._executor.delete(f"{self.orders_url}/{order_id}/items/{item_id}")

    # ------------------------------------------------------------------
    # Customers
    # ------------------------------------------------------------------

    def list_customers(self, params: Optional[QueryParams] = None) -> Envelope:
        return self._executor.get(self.customers_url, params, Paginated[Customer])

    def get_customer(self, customer_id: Any) -> Envelope:
        return self._executor.get(
            f"{self.customers_url}/{customer_id}", response_model=Customer
        )

    def create_customer(self, customer: Any) -> Envelope:
        return self._executor.post(self.customers_url, customer, Customer)

    def update_customer(self, customer_id: Any, changes: Any) -> Envelope:
        return self._executor.patch(f"{self.customers_url}/{customer_id}", changes, Customer)

    def delete_customer(self, customer_id: Any) -> Envelope:
        return self._executor.delete(f"{self.customers_url}/{customer_id}")

    def search_customers(self, query: str, params: Optional[QueryParams] = None) -> Envelope:
        return self._executor.get(
            f"{self.customers_url}/search", with_search(query, params), Paginated[Customer]
        )

    def list_customer_orders(
        self, customer_id: Any, params: Optional[QueryParams] = None
    ) -> Envelope:
        return self._executor.get(
            f"{self.customers_url}/{customer_id}/orders", params, Paginated[OrderSummary]
        )

    def list_customer_addresses(self, customer_id: Any) -> Envelope:
        return self._executor.get(
            f"{self.customers_url}/{customer_id}/addresses", response_model=List[Address]
        )

    # ------------------------------------------------------------------
    # Addresses
    # ------------------------------------------------------------------

    def list_addresses(self, params: Optional[QueryParams] = None) -> Envelope:
        return self._executor.get(self.addresses_url, params, Paginated[Address])

    def get_address(self, address_id: Any) -> Envelope:
        return self._executor.get(f"{self.addresses_url}/{address_id}", response_model=Address)

    def create_address(self, address: Any) -> Envelope:
        return self._executor.post(self.addresses_url, address, Address)

    def update_address(self, address_id: Any, changes: Any) -> Envelope:
        return self._executor.patch(f"{self.addresses_url}/{address_id}", changes, Address)

    def delete_address(self, address_id: Any) -> Envelope:
        return self._executor.delete(f"{self.addresses_url}/{address_id}")

    # ------------------------------------------------------------------
    # Statistics
    # ------------------------------------------------------------------

    def get_statistics(self) -> Envelope:
        return self._executor.get(self.statistics_url, response_model=OrderStatistics)
