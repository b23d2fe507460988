"""Typed views of the storefront wire format.

Wire keys are camelCase; attributes are snake_case.  Money arrives as
decimal strings and is parsed into ``Decimal``.  Unknown keys are ignored
so the server can add fields without breaking older clients.
"""

from __future__ import annotations

from datetime import date, datetime
from decimal import Decimal
from enum import Enum
from typing import Dict, List, Optional
from uuid import UUID

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel


class WireModel(BaseModel):
    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        frozen=True,
        extra="ignore",
    )


class OrderStatus(str, Enum):
    PENDING = "pending"
    CONFIRMED = "confirmed"
    PROCESSING = "processing"
    SHIPPED = "shipped"
    DELIVERED = "delivered"
    CANCELLED = "cancelled"
    REFUNDED = "refunded"


# ---------------------------------------------------------------------------
# Customers
# ---------------------------------------------------------------------------


class Customer(WireModel):
    id: UUID
    first_name: str
    last_name: str
    full_name: str = ""
    email: str
    phone: str = ""
    date_of_birth: Optional[date] = None
    is_active: bool = True
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None


class Address(WireModel):
    id: UUID
    customer_id: UUID
    type: str
    first_name: str
    last_name: str
    company: str = ""
    address_line1: str
    address_line2: str = ""
    city: str
    state: str
    postal_code: str
    country: str
    phone: str = ""
    is_default: bool = False
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None


class CustomerInput(WireModel):
    first_name: Optional[str] = None
    last_name: Optional[str] = None
    email: Optional[str] = None
    phone: Optional[str] = None
    date_of_birth: Optional[date] = None
    is_active: Optional[bool] = None


class AddressInput(WireModel):
    customer_id: Optional[UUID] = None
    type: Optional[str] = None
    first_name: Optional[str] = None
    last_name: Optional[str] = None
    company: Optional[str] = None
    address_line1: Optional[str] = None
    address_line2: Optional[str] = None
    city: Optional[str] = None
    state: Optional[str] = None
    postal_code: Optional[str] = None
    country: Optional[str] = None
    phone: Optional[str] = None
    is_default: Optional[bool] = None


# ---------------------------------------------------------------------------
# Catalog
# ---------------------------------------------------------------------------


class Category(WireModel):
    id: UUID
    name: str
    slug: str
    description: str = ""
    is_active: bool = True
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None


class Product(WireModel):
    id: UUID
    sku: str
    name: str
    description: str = ""
    price: Decimal
    category_id: Optional[UUID] = None
    stock_quantity: int = 0
    status: str = "active"
    is_active: bool = True
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None


class ProductImage(WireModel):
    id: UUID
    product_id: UUID
    url: Optional[str] = None
    alt_text: str = ""
    is_primary: bool = False
    sort_order: int = 0
    created_at: Optional[datetime] = None


class ProductInput(WireModel):
    sku: Optional[str] = None
    name: Optional[str] = None
    description: Optional[str] = None
    price: Optional[Decimal] = None
    category_id: Optional[UUID] = None
    stock_quantity: Optional[int] = None
    status: Optional[str] = None


class ProductImageInput(WireModel):
    url: str
    alt_text: Optional[str] = None
    is_primary: Optional[bool] = None
    sort_order: Optional[int] = None


# ---------------------------------------------------------------------------
# Orders
# ---------------------------------------------------------------------------


class OrderItem(WireModel):
    id: UUID
    order_id: UUID
    product_id: UUID
    product_name: str = ""
    product_sku: str = ""
    quantity: int
    unit_price: Decimal
    total_price: Decimal
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None


class StatusChange(WireModel):
    id: UUID
    old_status: Optional[OrderStatus] = None
    new_status: OrderStatus
    notes: str = ""
    changed_by: str = ""
    created_at: datetime


class OrderSummary(WireModel):
    """An order header, as returned by list endpoints."""

    id: UUID
    order_number: str
    customer_id: UUID
    shipping_address_id: Optional[UUID] = None
    billing_address_id: Optional[UUID] = None
    status: OrderStatus
    subtotal: Decimal
    tax_amount: Decimal
    shipping_amount: Decimal
    discount_amount: Decimal
    total_amount: Decimal
    notes: str = ""
    order_date: datetime
    shipped_date: Optional[datetime] = None
    delivered_date: Optional[datetime] = None
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None


class Order(OrderSummary):
    items: List[OrderItem] = Field(default_factory=list)
    status_history: List[StatusChange] = Field(default_factory=list)


class OrderStatistics(WireModel):
    total_orders: int
    total_revenue: Decimal
    average_order_value: Decimal
    orders_by_status: Dict[str, int]
    recent_orders: List[OrderSummary] = Field(default_factory=list)


class OrderItemInput(WireModel):
    product_id: Optional[UUID] = None
    quantity: Optional[int] = None
    unit_price: Optional[Decimal] = None


class CreateOrderRequest(WireModel):
    customer_id: UUID
    shipping_address_id: Optional[UUID] = None
    billing_address_id: Optional[UUID] = None
    items: List[OrderItemInput] = Field(default_factory=list)
    tax_amount: Optional[Decimal] = None
    shipping_amount: Optional[Decimal] = None
    discount_amount: Optional[Decimal] = None
    notes: Optional[str] = None


class UpdateOrderRequest(WireModel):
    shipping_address_id: Optional[UUID] = None
    billing_address_id: Optional[UUID] = None
    tax_amount: Optional[Decimal] = None
    shipping_amount: Optional[Decimal] = None
    discount_amount: Optional[Decimal] = None
    notes: Optional[str] = None
    status: Optional[OrderStatus] = None
