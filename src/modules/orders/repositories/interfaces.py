"""Order repository interface.

Extends ``IRepository[Order]`` with what the Order aggregate needs:
row locking for status changes, line items, the status history
trail and idempotency-key look-up.  The Service Layer depends
exclusively on this contract.
"""

from __future__ import annotations

from abc import abstractmethod
from typing import TYPE_CHECKING, Any, Dict, Optional

from django.db import models

from modules.core.repositories.interfaces import IRepository

if TYPE_CHECKING:
    from modules.orders.models import Order, OrderItem, OrderStatusHistory


class IOrderRepository(IRepository["Order"]):
    """Repository contract for the Order aggregate root.

    The aggregate includes OrderItem children and OrderStatusHistory
    records.  Mutations must be atomic.
    """

    @abstractmethod
    def list(
        self, filters: Optional[Dict[str, Any]] = None
    ) -> "models.QuerySet[Order]":
        """List live orders with optional filters."""

    @abstractmethod
    def search(self, term: str) -> "models.QuerySet[Order]":
        """Match ``term`` against order number, notes and customer."""

    @abstractmethod
    def get_for_update(self, id: str) -> Optional[Order]:
        """Retrieve an order with a row-level lock (SELECT FOR UPDATE)."""

    @abstractmethod
    def get_by_idempotency_key(self, key: str) -> Optional[Order]:
        """Retrieve an order by its idempotency key."""

    @abstractmethod
    def add_history(
        self,
        order: Order,
        new_status: str,
        old_status: Optional[str] = None,
        notes: str = "",
        changed_by: str = "",
    ) -> OrderStatusHistory:
        """Record a status change in the order's audit trail."""

    @abstractmethod
    def list_items(self, order_id: str) -> "models.QuerySet[OrderItem]":
        """Line items of one order."""

    @abstractmethod
    def get_item(self, order_id: str, item_id: str) -> Optional[OrderItem]:
        """Retrieve a line item, only if it belongs to ``order_id``."""

    @abstractmethod
    def save_item(self, item: OrderItem) -> OrderItem:
        """Persist (create or update) a line item."""

    @abstractmethod
    def delete_item(self, item: OrderItem) -> None:
        """Remove a line item."""
