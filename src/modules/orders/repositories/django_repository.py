"""Django ORM implementation of the Order repository.

Satisfies ``IOrderRepository`` using Django's QuerySet API.
Concurrency control on status updates uses ``select_for_update()``
(no ``version`` field exists on the model).
"""

from __future__ import annotations

from typing import Any, Dict, Optional

import structlog
from django.core.exceptions import ValidationError
from django.db import models, transaction
from django.db.models import Q

from modules.orders.models import Order, OrderItem, OrderStatusHistory
from modules.orders.repositories.interfaces import IOrderRepository

logger = structlog.get_logger(__name__)


def _orders() -> "models.QuerySet[Order]":
    return (
        Order.objects.alive()
        .select_related("customer")
        .prefetch_related("items__product", "status_history")
    )


class OrderDjangoRepository(IOrderRepository):
    """Concrete Order repository backed by Django ORM."""

    # ------------------------------------------------------------------
    # Read
    # ------------------------------------------------------------------

    def get_by_id(self, id: str) -> Optional[Order]:
        """Retrieve a live order with eager-loaded relations.

        Returns ``None`` for non-existent or invalid IDs.
        """
        try:
            return _orders().filter(id=id).first()
        except (ValueError, ValidationError):
            return None

    def list(
        self, filters: Optional[Dict[str, Any]] = None
    ) -> "models.QuerySet[Order]":
        """List orders with optional filters and eager-loaded relations.

        Examples of valid filters::

            {"status": "pending"}
            {"customer_id": customer.id}
        """
        queryset = _orders()
        if filters:
            queryset = queryset.filter(**filters)
        return queryset

    def search(self, term: str) -> "models.QuerySet[Order]":
        term = term.strip()
        queryset = _orders()
        if not term:
            return queryset
        return queryset.filter(
            Q(order_number__icontains=term)
            | Q(notes__icontains=term)
            | Q(customer__first_name__icontains=term)
            | Q(customer__last_name__icontains=term)
            | Q(customer__email__icontains=term)
        )

    def get_for_update(self, id: str) -> Optional[Order]:
        """Retrieve an order with a row-level lock (SELECT FOR UPDATE).

        Must run inside ``transaction.atomic``.  Returns ``None`` for
        non-existent or invalid IDs.
        """
        try:
            return Order.objects.alive().select_for_update().filter(id=id).first()
        except (ValueError, ValidationError):
            return None

    def get_by_idempotency_key(self, key: str) -> Optional[Order]:
        return _orders().filter(idempotency_key=key).first()

    # ------------------------------------------------------------------
    # Write
    # ------------------------------------------------------------------

    @transaction.atomic
    def save(self, entity: Order) -> Order:
        entity.save()
        logger.info("order.saved", order_id=str(entity.id), status=entity.status)
        return entity

    @transaction.atomic
    def delete(self, id: str) -> bool:
        """Soft-delete an order by ID."""
        order = self.get_by_id(id)
        if not order:
            return False
        order.delete()
        return True

    @transaction.atomic
    def add_history(
        self,
        order: Order,
        new_status: str,
        old_status: Optional[str] = None,
        notes: str = "",
        changed_by: str = "",
    ) -> OrderStatusHistory:
        history = OrderStatusHistory.objects.create(
            order=order,
            old_status=old_status,
            new_status=new_status,
            notes=notes,
            changed_by=changed_by,
        )
        logger.info(
            "order.history_added",
            order_id=str(order.id),
            old_status=old_status,
            new_status=new_status,
        )
        return history

    # ------------------------------------------------------------------
    # Items
    # ------------------------------------------------------------------

    def list_items(self, order_id: str) -> "models.QuerySet[OrderItem]":
        return OrderItem.objects.select_related("product").filter(order_id=order_id)

    def get_item(self, order_id: str, item_id: str) -> Optional[OrderItem]:
        try:
            return self.list_items(order_id).filter(id=item_id).first()
        except (ValueError, ValidationError):
            return None

    @transaction.atomic
    def save_item(self, item: OrderItem) -> OrderItem:
        item.save()
        return item

    @transaction.atomic
    def delete_item(self, item: OrderItem) -> None:
        item.delete()
