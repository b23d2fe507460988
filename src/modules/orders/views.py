"""Order API views.

Expose ``OrderService`` via DRF.  Domain exceptions propagate to the
envelope exception handler; views only translate between wire
payloads and DTOs.
"""

from __future__ import annotations

from django_filters.rest_framework import DjangoFilterBackend
from rest_framework.decorators import action
from rest_framework.filters import OrderingFilter, SearchFilter
from rest_framework.request import Request
from rest_framework.response import Response
from rest_framework.views import APIView
from rest_framework.viewsets import GenericViewSet

from modules.core.pagination import PaginatedListMixin
from modules.core.responses import created_response, deleted_response, envelope_response
from modules.customers.repositories.django_repository import (
    AddressDjangoRepository,
    CustomerDjangoRepository,
)
from modules.orders.dtos import (
    CreateOrderDTO,
    CreateOrderItemDTO,
    UpdateOrderDTO,
    UpdateOrderItemDTO,
)
from modules.orders.filters import OrderFilter
from modules.orders.models import Order
from modules.orders.repositories.django_repository import OrderDjangoRepository
from modules.orders.serializers import (
    CancelOrderSerializer,
    CreateOrderItemSerializer,
    CreateOrderSerializer,
    OrderItemSerializer,
    OrderListSerializer,
    OrderSerializer,
    OrderStatisticsSerializer,
    UpdateOrderItemSerializer,
    UpdateOrderSerializer,
)
from modules.orders.services import OrderService
from modules.products.repositories.django_repository import ProductDjangoRepository

UUID_PATTERN = r"[0-9a-fA-F-]{32,36}"


def build_order_service() -> OrderService:
    return OrderService(
        order_repository=OrderDjangoRepository(),
        customer_repository=CustomerDjangoRepository(),
        address_repository=AddressDjangoRepository(),
        product_repository=ProductDjangoRepository(),
    )


def _username(request: Request) -> str:
    user = getattr(request, "user", None)
    return user.get_username() if user is not None and user.is_authenticated else ""


class OrderViewSet(PaginatedListMixin, GenericViewSet):
    """Orders, their items and status changes.

    Does **not** extend ``ModelViewSet``: all ORM access goes through
    the service/repository layer.
    """

    queryset = Order.objects.all()
    serializer_class = OrderListSerializer
    filterset_class = OrderFilter
    search_fields = ["order_number", "notes", "customer__first_name", "customer__last_name"]
    ordering_fields = ["order_date", "created_at", "total_amount", "status"]
    ordering = ["-order_date", "id"]
    filter_backends = [DjangoFilterBackend, SearchFilter, OrderingFilter]

    def __init__(self, **kwargs) -> None:
        super().__init__(**kwargs)
        self._service = build_order_service()

    def get_queryset(self):
        return self._service.list_orders()

    # ------------------------------------------------------------------
    # Queries
    # ------------------------------------------------------------------

    def list(self, request: Request) -> Response:
        """GET /api/v1/orders

        Filtering (status, customer, date range, total range) is handled
        by ``OrderFilter``; ordering by ``OrderingFilter``.
        """
        return self.paginated_response(self.get_queryset())

    @action(detail=False, methods=["get"])
    def search(self, request: Request) -> Response:
        """GET /api/v1/orders/search?search=..."""
        term = request.query_params.get("search", "")
        return self.paginated_response(self._service.search_orders(term))

    def retrieve(self, request: Request, pk: str | None = None) -> Response:
        """GET /api/v1/orders/{pk}"""
        order = self._service.get_order(pk)
        return envelope_response(OrderSerializer(order).data)

    # ------------------------------------------------------------------
    # Commands
    # ------------------------------------------------------------------

    def create(self, request: Request) -> Response:
        """POST /api/v1/orders

        Supports idempotency via the ``Idempotency-Key`` header.
        """
        serializer = CreateOrderSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)

        data = dict(serializer.validated_data)
        items = [CreateOrderItemDTO(**item) for item in data.pop("items", [])]
        dto = CreateOrderDTO(
            **data,
            items=items,
            idempotency_key=request.headers.get("Idempotency-Key"),
        )
        order = self._service.create_order(dto, changed_by=_username(request))
        return created_response(OrderSerializer(order).data, "Order created.")

    def partial_update(self, request: Request, pk: str | None = None) -> Response:
        """PATCH /api/v1/orders/{pk}

        Edits amounts, addresses and notes, and/or changes ``status``.
        """
        serializer = UpdateOrderSerializer(data=request.data, partial=True)
        serializer.is_valid(raise_exception=True)
        order = self._service.update_order(
            pk,
            UpdateOrderDTO(**serializer.validated_data),
            changed_by=_username(request),
        )
        return envelope_response(OrderSerializer(order).data, "Order updated.")

    def update(self, request: Request, pk: str | None = None) -> Response:
        """PUT /api/v1/orders/{pk}"""
        return self.partial_update(request, pk)

    def destroy(self, request: Request, pk: str | None = None) -> Response:
        """DELETE /api/v1/orders/{pk}"""
        self._service.delete_order(pk)
        return deleted_response("Order deleted.")

    @action(detail=True, methods=["post"])
    def cancel(self, request: Request, pk: str | None = None) -> Response:
        """POST /api/v1/orders/{pk}/cancel"""
        serializer = CancelOrderSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        order = self._service.cancel_order(
            pk,
            notes=serializer.validated_data["notes"],
            changed_by=_username(request),
        )
        return envelope_response(OrderSerializer(order).data, "Order cancelled.")

    # ------------------------------------------------------------------
    # Items
    # ------------------------------------------------------------------

    @action(detail=True, methods=["get", "post"])
    def items(self, request: Request, pk: str | None = None) -> Response:
        """GET/POST /api/v1/orders/{pk}/items"""
        if request.method == "GET":
            items = self._service.list_items(pk)
            return envelope_response(OrderItemSerializer(items, many=True).data)

        serializer = CreateOrderItemSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        item = self._service.add_item(pk, CreateOrderItemDTO(**serializer.validated_data))
        return created_response(OrderItemSerializer(item).data, "Item added.")

    @action(
        detail=True,
        methods=["patch", "put", "delete"],
        url_path=rf"items/(?P<item_id>{UUID_PATTERN})",
    )
    def item_detail(
        self, request: Request, pk: str | None = None, item_id: str | None = None
    ) -> Response:
        """PATCH/PUT/DELETE /api/v1/orders/{pk}/items/{item_id}"""
        if request.method == "DELETE":
            self._service.remove_item(pk, item_id)
            return deleted_response("Item removed.")

        serializer = UpdateOrderItemSerializer(data=request.data, partial=True)
        serializer.is_valid(raise_exception=True)
        item = self._service.update_item(
            pk, item_id, UpdateOrderItemDTO(**serializer.validated_data)
        )
        return envelope_response(OrderItemSerializer(item).data, "Item updated.")


class OrderStatisticsView(APIView):
    """GET /api/v1/statistics"""

    def get(self, request: Request) -> Response:
        statistics = build_order_service().get_statistics()
        return envelope_response(
            OrderStatisticsSerializer(statistics).data, "Statistics retrieved."
        )
