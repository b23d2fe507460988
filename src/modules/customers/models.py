"""Customer and Address reference data.

Both are plain CRUD entities; orders point at them by foreign key and
never own them.  Rules:

- Email is unique across customers (case-insensitive, stored lowercase).
- At most one default address per customer *and* type; setting a new
  default clears the previous one (enforced at service layer).
- Soft delete via ``deleted_at`` (inherited from SoftDeleteModel).
"""

from __future__ import annotations

import structlog
from django.db import models

from modules.core.models import SoftDeleteModel

logger = structlog.get_logger(__name__)


class AddressType(models.TextChoices):
    SHIPPING = "shipping", "Shipping"
    BILLING = "billing", "Billing"
    BOTH = "both", "Shipping and billing"


class Customer(SoftDeleteModel):
    first_name = models.CharField(max_length=100)
    last_name = models.CharField(max_length=100)
    email = models.EmailField(max_length=254, unique=True)
    phone = models.CharField(max_length=20, blank=True, default="")
    date_of_birth = models.DateField(null=True, blank=True)
    is_active = models.BooleanField(default=True)

    class Meta:
        db_table = "customers"
        ordering = ["-created_at"]
        indexes = [
            models.Index(fields=["-created_at"], name="customers_created_idx"),
            models.Index(fields=["is_active"], name="customers_active_idx"),
        ]

    @property
    def full_name(self) -> str:
        return f"{self.first_name} {self.last_name}".strip()

    def save(self, *args, **kwargs) -> None:
        if self.email:
            self.email = self.email.strip().lower()
        super().save(*args, **kwargs)

    def __str__(self) -> str:
        # e-mail stays out of reprs and log lines
        return f"{self.full_name} ({self.id})"


class Address(SoftDeleteModel):
    customer = models.ForeignKey(
        "customers.Customer",
        on_delete=models.PROTECT,
        related_name="addresses",
    )
    type = models.CharField(
        max_length=10,
        choices=AddressType.choices,
        default=AddressType.SHIPPING,
    )
    first_name = models.CharField(max_length=100)
    last_name = models.CharField(max_length=100)
    company = models.CharField(max_length=150, blank=True, default="")
    address_line1 = models.CharField(max_length=255)
    address_line2 = models.CharField(max_length=255, blank=True, default="")
    city = models.CharField(max_length=100)
    state = models.CharField(max_length=100)
    postal_code = models.CharField(max_length=20)
    country = models.CharField(max_length=2)
    phone = models.CharField(max_length=20, blank=True, default="")
    is_default = models.BooleanField(default=False)

    class Meta:
        db_table = "addresses"
        ordering = ["-is_default", "-created_at"]
        indexes = [
            models.Index(fields=["customer", "type"], name="addresses_customer_type_idx"),
        ]

    def serves(self, purpose: str) -> bool:
        """Whether this address can be used as a ``shipping``/``billing`` address."""
        return self.type in (purpose, AddressType.BOTH)

    def save(self, *args, **kwargs) -> None:
        if self.country:
            self.country = self.country.strip().upper()
        super().save(*args, **kwargs)

    def __str__(self) -> str:
        return f"{self.address_line1}, {self.city} ({self.type})"
