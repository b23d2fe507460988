"""Order, OrderItem, and OrderStatusHistory models.

Business rules implemented:
- Status changes follow ``VALID_TRANSITIONS``; re-entering the current
  status is a no-op.  ``shipped_date`` / ``delivered_date`` are stamped
  the first time the order enters ``shipped`` / ``delivered`` and never
  overwritten.
- ``total_amount = subtotal + tax + shipping - discount`` and
  ``subtotal = sum(item.total_price)``, kept by ``recalculate_totals``.
- OrderItem snapshots the product price at creation (``unit_price``);
  ``total_price`` is always ``quantity * unit_price``.
- Customer / address / product FKs use PROTECT to preserve history.
- Soft delete via ``deleted_at`` (inherited from SoftDeleteModel).
"""

from __future__ import annotations

import secrets
from datetime import datetime
from decimal import Decimal
from typing import Any, Optional

import structlog
from django.core.validators import MinValueValidator
from django.db import models
from django.utils import timezone

from modules.core.models import BaseModel, SoftDeleteModel
from modules.orders.constants import (
    ORDER_NUMBER_MAX_RETRIES,
    TERMINAL_STATES,
    VALID_TRANSITIONS,
    OrderStatus,
)
from modules.orders.exceptions import (
    InvalidDiscount,
    InvalidStatusTransition,
    OrderNumberExhausted,
)

logger = structlog.get_logger(__name__)

ZERO = Decimal("0.00")
CENT = Decimal("0.01")


def _money_field(**kwargs: Any) -> models.DecimalField:
    return models.DecimalField(
        max_digits=10,
        decimal_places=2,
        default=ZERO,
        validators=[MinValueValidator(ZERO)],
        **kwargs,
    )


class Order(SoftDeleteModel):
    """Order aggregate root.

    ``order_number`` is a human-readable identifier auto-generated on first
    save (format: ``ORD-YYYYMMDD-XXXXXX``).  The UUIDv7 ``id`` is used for
    all internal references and API lookups.
    """

    order_number = models.CharField(max_length=20, unique=True, editable=False)
    customer = models.ForeignKey(
        "customers.Customer",
        on_delete=models.PROTECT,
        related_name="orders",
    )
    shipping_address = models.ForeignKey(
        "customers.Address",
        on_delete=models.PROTECT,
        null=True,
        blank=True,
        related_name="+",
    )
    billing_address = models.ForeignKey(
        "customers.Address",
        on_delete=models.PROTECT,
        null=True,
        blank=True,
        related_name="+",
    )
    status = models.CharField(
        max_length=20,
        choices=OrderStatus.choices,
        default=OrderStatus.PENDING,
    )
    subtotal = _money_field()
    tax_amount = _money_field()
    shipping_amount = _money_field()
    discount_amount = _money_field()
    total_amount = _money_field()
    notes = models.TextField(blank=True, default="")
    order_date = models.DateTimeField(default=timezone.now)
    shipped_date = models.DateTimeField(null=True, blank=True)
    delivered_date = models.DateTimeField(null=True, blank=True)
    idempotency_key = models.CharField(
        max_length=255,
        unique=True,
        null=True,
        blank=True,
    )

    class Meta:
        db_table = "orders"
        ordering = ["-order_date", "id"]
        indexes = [
            models.Index(fields=["status"], name="orders_status_idx"),
            models.Index(fields=["-order_date"], name="orders_order_date_idx"),
        ]

    # ------------------------------------------------------------------
    # State machine
    # ------------------------------------------------------------------

    @property
    def is_terminal(self) -> bool:
        return self.status in TERMINAL_STATES

    @property
    def is_locked(self) -> bool:
        """Cancelled/refunded orders accept no further edits."""
        return self.is_terminal

    def can_transition_to(self, new_status: str) -> bool:
        return new_status in VALID_TRANSITIONS.get(self.status, set())

    def transition_to(self, new_status: str, at: Optional[datetime] = None) -> bool:
        """Move to ``new_status``; return ``False`` when already there.

        Does not save.

        Raises:
            InvalidStatusTransition: the pair is not legal (unknown
                statuses included).
        """
        if new_status == self.status:
            return False
        if not self.can_transition_to(new_status):
            raise InvalidStatusTransition(self.status, new_status)

        at = at or timezone.now()
        self.status = new_status
        if new_status == OrderStatus.SHIPPED and self.shipped_date is None:
            self.shipped_date = at
        elif new_status == OrderStatus.DELIVERED and self.delivered_date is None:
            self.delivered_date = at
        return True

    # ------------------------------------------------------------------
    # Money
    # ------------------------------------------------------------------

    def compute_total(self) -> Decimal:
        return (
            self.subtotal + self.tax_amount + self.shipping_amount - self.discount_amount
        ).quantize(CENT)

    def recalculate_totals(self, items=None) -> Decimal:
        """Recompute ``subtotal`` and ``total_amount`` from ``items``.

        ``items`` defaults to the persisted lines.  Does not save.

        Raises:
            InvalidDiscount: the discount would make the total negative.
        """
        if items is None:
            items = [] if self._state.adding else self.items.all()
        self.subtotal = sum((item.total_price for item in items), ZERO).quantize(CENT)
        total = self.compute_total()
        if total < ZERO:
            raise InvalidDiscount(
                f"Discount {self.discount_amount} exceeds the order amount "
                f"{self.subtotal + self.tax_amount + self.shipping_amount}."
            )
        self.total_amount = total
        return total

    # ------------------------------------------------------------------
    # Order number generation
    # ------------------------------------------------------------------

    @staticmethod
    def generate_order_number() -> str:
        """Generate a human-readable order number: ``ORD-YYYYMMDD-XXXXXX``."""
        now = timezone.now()
        suffix = secrets.token_hex(3).upper()
        return f"ORD-{now:%Y%m%d}-{suffix}"

    def save(self, *args: Any, **kwargs: Any) -> None:
        if not self.order_number:
            for _ in range(ORDER_NUMBER_MAX_RETRIES):
                candidate = self.generate_order_number()
                if not Order.objects.filter(order_number=candidate).exists():
                    self.order_number = candidate
                    break
            else:
                raise OrderNumberExhausted(
                    f"Failed to generate unique order_number after "
                    f"{ORDER_NUMBER_MAX_RETRIES} attempts"
                )
        super().save(*args, **kwargs)

    def __str__(self) -> str:
        return f"{self.order_number} ({self.status})"


class OrderItem(BaseModel):
    """Line item linking an Order to a Product.

    ``unit_price`` is a snapshot of the product price at the time of
    purchase unless given explicitly.  ``total_price`` is recalculated on
    every save.  Lines are removed outright: the order's totals and
    status history carry the audit trail.
    """

    order = models.ForeignKey(
        "orders.Order",
        on_delete=models.CASCADE,
        related_name="items",
    )
    product = models.ForeignKey(
        "products.Product",
        on_delete=models.PROTECT,
        related_name="order_items",
    )
    quantity = models.PositiveIntegerField(
        default=1,
        validators=[MinValueValidator(1)],
    )
    unit_price = models.DecimalField(max_digits=10, decimal_places=2)
    total_price = models.DecimalField(max_digits=10, decimal_places=2, editable=False)

    class Meta:
        db_table = "order_items"
        ordering = ["created_at", "id"]
        constraints = [
            models.CheckConstraint(
                condition=models.Q(quantity__gte=1),
                name="order_items_quantity_positive",
            ),
            models.UniqueConstraint(
                fields=["order", "product"],
                name="order_items_unique_product",
            ),
        ]

    def compute_total(self) -> Decimal:
        return (self.quantity * self.unit_price).quantize(CENT)

    def save(self, *args: Any, **kwargs: Any) -> None:
        if self.unit_price is None:
            self.unit_price = self.product.price
        self.total_price = self.compute_total()
        super().save(*args, **kwargs)

    def __str__(self) -> str:
        return f"{self.product_id} x{self.quantity} ({self.total_price})"


class OrderStatusHistory(BaseModel):
    """Append-only audit trail for order status transitions.

    Audit records are immutable, so this is a ``BaseModel`` (never
    soft-deleted).  ``changed_by`` holds the username; empty means the
    system.
    """

    order = models.ForeignKey(
        "orders.Order",
        on_delete=models.CASCADE,
        related_name="status_history",
    )
    old_status = models.CharField(  # noqa: DJ01
        max_length=20,
        choices=OrderStatus.choices,
        null=True,
        blank=True,
    )
    new_status = models.CharField(max_length=20, choices=OrderStatus.choices)
    changed_by = models.CharField(max_length=150, blank=True, default="")
    notes = models.TextField(blank=True, default="")

    class Meta:
        db_table = "order_status_history"
        ordering = ["created_at", "id"]
        indexes = [
            models.Index(fields=["order", "created_at"], name="osh_order_created_idx"),
        ]

    def __str__(self) -> str:
        return f"{self.order_id} : {self.old_status} -> {self.new_status}"
