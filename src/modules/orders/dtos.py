"""Order DTOs for the Service Layer.

Framework-agnostic data transfer objects using Pydantic v2.
These are the contracts between the API layer (DRF Serializers)
and the Service layer.  DTOs are immutable (``frozen=True``).
"""

from __future__ import annotations

from decimal import Decimal
from typing import Annotated, List, Optional
from uuid import UUID

from pydantic import BaseModel, ConfigDict, Field, model_validator

from modules.orders.constants import OrderStatus

Money = Annotated[Decimal, Field(ge=0, max_digits=10, decimal_places=2)]
Price = Annotated[Decimal, Field(gt=0, max_digits=10, decimal_places=2)]

ZERO = Decimal("0.00")


class CreateOrderItemDTO(BaseModel):
    """A single order line.

    ``unit_price`` is resolved from the product catalog when omitted.
    """

    model_config = ConfigDict(frozen=True)

    product_id: UUID
    quantity: int = Field(ge=1)
    unit_price: Optional[Price] = None


class CreateOrderDTO(BaseModel):
    """Order creation request.

    Items may be added later; an order only needs items to be confirmed.
    """

    model_config = ConfigDict(frozen=True)

    customer_id: UUID
    shipping_address_id: Optional[UUID] = None
    billing_address_id: Optional[UUID] = None
    items: List[CreateOrderItemDTO] = []
    tax_amount: Money = ZERO
    shipping_amount: Money = ZERO
    discount_amount: Money = ZERO
    notes: str = ""
    idempotency_key: Optional[str] = None

    @model_validator(mode="after")
    def no_duplicate_products(self):
        """Prevent duplicate product IDs in the same order."""
        product_ids = [item.product_id for item in self.items]
        if len(product_ids) != len(set(product_ids)):
            raise ValueError("Duplicate product IDs are not allowed in the same order.")
        return self


class UpdateOrderDTO(BaseModel):
    """Partial order edit; ``None`` leaves a field unchanged."""

    model_config = ConfigDict(frozen=True)

    shipping_address_id: Optional[UUID] = None
    billing_address_id: Optional[UUID] = None
    tax_amount: Optional[Money] = None
    shipping_amount: Optional[Money] = None
    discount_amount: Optional[Money] = None
    notes: Optional[str] = None
    status: Optional[OrderStatus] = None

    def edits(self) -> dict:
        """The non-status fields that were supplied."""
        return self.model_dump(exclude_none=True, exclude={"status"})


class UpdateOrderItemDTO(BaseModel):
    model_config = ConfigDict(frozen=True)

    quantity: Optional[int] = Field(default=None, ge=1)
    unit_price: Optional[Price] = None
