"""Order DRF serializers for API input/output.

Parse camelCase request bodies and render camelCase responses.  Money
is rendered as decimal strings.  Business logic lives in the Service
Layer, which receives Pydantic DTOs from ``dtos.py``.
"""

from __future__ import annotations

from decimal import Decimal

from rest_framework import serializers

from modules.orders.constants import OrderStatus
from modules.orders.models import Order, OrderItem, OrderStatusHistory


def _money(**kwargs) -> serializers.DecimalField:
    return serializers.DecimalField(max_digits=10, decimal_places=2, **kwargs)


# ---------------------------------------------------------------------------
# Input Serializers
# ---------------------------------------------------------------------------


class CreateOrderItemSerializer(serializers.Serializer):
    """Validates a single item in an order creation request."""

    productId = serializers.UUIDField(source="product_id")
    quantity = serializers.IntegerField(min_value=1)
    unitPrice = _money(source="unit_price", required=False, min_value=Decimal("0.01"))


class UpdateOrderItemSerializer(serializers.Serializer):
    quantity = serializers.IntegerField(min_value=1, required=False)
    unitPrice = _money(source="unit_price", required=False, min_value=Decimal("0.01"))


class CreateOrderSerializer(serializers.Serializer):
    """Validates the order creation request payload."""

    customerId = serializers.UUIDField(source="customer_id")
    shippingAddressId = serializers.UUIDField(
        source="shipping_address_id", required=False, allow_null=True
    )
    billingAddressId = serializers.UUIDField(
        source="billing_address_id", required=False, allow_null=True
    )
    items = CreateOrderItemSerializer(many=True, required=False)
    taxAmount = _money(source="tax_amount", required=False, min_value=0)
    shippingAmount = _money(source="shipping_amount", required=False, min_value=0)
    discountAmount = _money(source="discount_amount", required=False, min_value=0)
    notes = serializers.CharField(required=False, allow_blank=True)


class UpdateOrderSerializer(serializers.Serializer):
    shippingAddressId = serializers.UUIDField(source="shipping_address_id", required=False)
    billingAddressId = serializers.UUIDField(source="billing_address_id", required=False)
    taxAmount = _money(source="tax_amount", required=False, min_value=0)
    shippingAmount = _money(source="shipping_amount", required=False, min_value=0)
    discountAmount = _money(source="discount_amount", required=False, min_value=0)
    notes = serializers.CharField(required=False, allow_blank=True)
    status = serializers.ChoiceField(choices=OrderStatus.choices, required=False)


class CancelOrderSerializer(serializers.Serializer):
    notes = serializers.CharField(required=False, allow_blank=True, default="")


# ---------------------------------------------------------------------------
# Output Serializers (Read)
# ---------------------------------------------------------------------------


class OrderItemSerializer(serializers.ModelSerializer):
    """Line item with a product snapshot."""

    orderId = serializers.UUIDField(source="order_id", read_only=True)
    productId = serializers.UUIDField(source="product_id", read_only=True)
    productName = serializers.CharField(source="product.name", read_only=True)
    productSku = serializers.CharField(source="product.sku", read_only=True)
    unitPrice = _money(source="unit_price", read_only=True)
    totalPrice = _money(source="total_price", read_only=True)
    createdAt = serializers.DateTimeField(source="created_at", read_only=True)
    updatedAt = serializers.DateTimeField(source="updated_at", read_only=True)

    class Meta:
        model = OrderItem
        fields = [
            "id",
            "orderId",
            "productId",
            "productName",
            "productSku",
            "quantity",
            "unitPrice",
            "totalPrice",
            "createdAt",
            "updatedAt",
        ]
        read_only_fields = fields


class StatusHistorySerializer(serializers.ModelSerializer):
    oldStatus = serializers.CharField(source="old_status", read_only=True, allow_null=True)
    newStatus = serializers.CharField(source="new_status", read_only=True)
    changedBy = serializers.CharField(source="changed_by", read_only=True)
    createdAt = serializers.DateTimeField(source="created_at", read_only=True)

    class Meta:
        model = OrderStatusHistory
        fields = ["id", "oldStatus", "newStatus", "notes", "changedBy", "createdAt"]
        read_only_fields = fields


class OrderListSerializer(serializers.ModelSerializer):
    """Order header without nested relations."""

    orderNumber = serializers.CharField(source="order_number", read_only=True)
    customerId = serializers.UUIDField(source="customer_id", read_only=True)
    shippingAddressId = serializers.UUIDField(
        source="shipping_address_id", read_only=True, allow_null=True
    )
    billingAddressId = serializers.UUIDField(
        source="billing_address_id", read_only=True, allow_null=True
    )
    subtotal = _money(read_only=True)
    taxAmount = _money(source="tax_amount", read_only=True)
    shippingAmount = _money(source="shipping_amount", read_only=True)
    discountAmount = _money(source="discount_amount", read_only=True)
    totalAmount = _money(source="total_amount", read_only=True)
    orderDate = serializers.DateTimeField(source="order_date", read_only=True)
    shippedDate = serializers.DateTimeField(source="shipped_date", read_only=True)
    deliveredDate = serializers.DateTimeField(source="delivered_date", read_only=True)
    createdAt = serializers.DateTimeField(source="created_at", read_only=True)
    updatedAt = serializers.DateTimeField(source="updated_at", read_only=True)

    class Meta:
        model = Order
        fields = [
            "id",
            "orderNumber",
            "customerId",
            "shippingAddressId",
            "billingAddressId",
            "status",
            "subtotal",
            "taxAmount",
            "shippingAmount",
            "discountAmount",
            "totalAmount",
            "notes",
            "orderDate",
            "shippedDate",
            "deliveredDate",
            "createdAt",
            "updatedAt",
        ]
        read_only_fields = fields


class OrderSerializer(OrderListSerializer):
    """Order with nested items and status history."""

    items = OrderItemSerializer(many=True, read_only=True)
    statusHistory = StatusHistorySerializer(
        source="status_history", many=True, read_only=True
    )

    class Meta(OrderListSerializer.Meta):
        fields = OrderListSerializer.Meta.fields + ["items", "statusHistory"]
        read_only_fields = fields


class OrderStatisticsSerializer(serializers.Serializer):
    totalOrders = serializers.IntegerField(source="total_orders")
    totalRevenue = _money(source="total_revenue")
    averageOrderValue = _money(source="average_order_value")
    ordersByStatus = serializers.DictField(
        source="orders_by_status", child=serializers.IntegerField()
    )
    recentOrders = OrderListSerializer(source="recent_orders", many=True)
