"""Customer and Address API views.

Expose ``CustomerService`` / ``AddressService`` via DRF ViewSets.
Domain exceptions propagate to the envelope exception handler; views
only translate between wire payloads and DTOs.
"""

from __future__ import annotations

from django_filters.rest_framework import DjangoFilterBackend
from rest_framework.decorators import action
from rest_framework.filters import OrderingFilter, SearchFilter
from rest_framework.request import Request
from rest_framework.response import Response
from rest_framework.viewsets import GenericViewSet

from modules.core.pagination import PaginatedListMixin
from modules.core.responses import created_response, deleted_response, envelope_response
from modules.customers.dtos import (
    CreateAddressDTO,
    CreateCustomerDTO,
    UpdateAddressDTO,
    UpdateCustomerDTO,
)
from modules.customers.filters import AddressFilter, CustomerFilter
from modules.customers.models import Address, Customer
from modules.customers.repositories.django_repository import (
    AddressDjangoRepository,
    CustomerDjangoRepository,
)
from modules.customers.serializers import (
    AddressInputSerializer,
    AddressSerializer,
    AddressUpdateSerializer,
    CustomerInputSerializer,
    CustomerSerializer,
)
from modules.customers.services import AddressService, CustomerService
from modules.orders.filters import OrderFilter
from modules.orders.serializers import OrderListSerializer
from modules.orders.views import build_order_service


class CustomerViewSet(PaginatedListMixin, GenericViewSet):
    """Customer CRUD plus ``search``, ``orders`` and ``addresses``.

    Does **not** extend ``ModelViewSet``: all ORM access goes through
    the service/repository layer.
    """

    filterset_class = CustomerFilter
    search_fields = ["first_name", "last_name", "email", "phone"]
    ordering_fields = ["first_name", "last_name", "email", "created_at"]
    ordering = ["-created_at", "-id"]
    filter_backends = [DjangoFilterBackend, SearchFilter, OrderingFilter]
    queryset = Customer.objects.all()
    serializer_class = CustomerSerializer

    def __init__(self, **kwargs) -> None:
        super().__init__(**kwargs)
        customers = CustomerDjangoRepository()
        self._service = CustomerService(repository=customers)
        self._addresses = AddressService(
            address_repository=AddressDjangoRepository(),
            customer_repository=customers,
        )

    def get_queryset(self):
        return self._service.list_customers()

    # ------------------------------------------------------------------
    # Queries
    # ------------------------------------------------------------------

    def list(self, request: Request) -> Response:
        """GET /api/v1/customers"""
        return self.paginated_response(self.get_queryset())

    @action(detail=False, methods=["get"])
    def search(self, request: Request) -> Response:
        """GET /api/v1/customers/search?search=..."""
        term = request.query_params.get("search", "")
        return self.paginated_response(self._service.search_customers(term))

    def retrieve(self, request: Request, pk: str | None = None) -> Response:
        """GET /api/v1/customers/{pk}"""
        customer = self._service.get_customer(pk)
        return envelope_response(CustomerSerializer(customer).data)

    @action(
        detail=True,
        methods=["get"],
        filterset_class=OrderFilter,
        search_fields=["order_number", "notes"],
        ordering_fields=["order_date", "created_at", "total_amount", "status"],
        ordering=["-order_date", "id"],
    )
    def orders(self, request: Request, pk: str | None = None) -> Response:
        """GET /api/v1/customers/{pk}/orders"""
        orders = build_order_service().list_customer_orders(pk)
        return self.paginated_response(orders, OrderListSerializer)

    @action(detail=True, methods=["get"])
    def addresses(self, request: Request, pk: str | None = None) -> Response:
        """GET /api/v1/customers/{pk}/addresses"""
        addresses = self._addresses.list_customer_addresses(pk)
        data = AddressSerializer(addresses, many=True).data
        return envelope_response(data)

    # ------------------------------------------------------------------
    # Commands
    # ------------------------------------------------------------------

    def create(self, request: Request) -> Response:
        """POST /api/v1/customers"""
        serializer = CustomerInputSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        customer = self._service.create_customer(
            CreateCustomerDTO(**serializer.validated_data)
        )
        return created_response(CustomerSerializer(customer).data, "Customer created.")

    def partial_update(self, request: Request, pk: str | None = None) -> Response:
        """PATCH /api/v1/customers/{pk}"""
        serializer = CustomerInputSerializer(data=request.data, partial=True)
        serializer.is_valid(raise_exception=True)
        customer = self._service.update_customer(
            pk, UpdateCustomerDTO(**serializer.validated_data)
        )
        return envelope_response(CustomerSerializer(customer).data, "Customer updated.")

    def update(self, request: Request, pk: str | None = None) -> Response:
        """PUT /api/v1/customers/{pk}"""
        return self.partial_update(request, pk)

    def destroy(self, request: Request, pk: str | None = None) -> Response:
        """DELETE /api/v1/customers/{pk}"""
        self._service.delete_customer(pk)
        return deleted_response("Customer deleted.")


class AddressViewSet(PaginatedListMixin, GenericViewSet):
    """Address CRUD.  The owner is fixed at creation."""

    filterset_class = AddressFilter
    ordering_fields = ["created_at", "city", "type"]
    ordering = ["-is_default", "-created_at"]
    filter_backends = [DjangoFilterBackend, OrderingFilter]
    queryset = Address.objects.all()
    serializer_class = AddressSerializer

    def __init__(self, **kwargs) -> None:
        super().__init__(**kwargs)
        self._service = AddressService(
            address_repository=AddressDjangoRepository(),
            customer_repository=CustomerDjangoRepository(),
        )

    def get_queryset(self):
        return self._service.list_addresses()

    def list(self, request: Request) -> Response:
        """GET /api/v1/addresses"""
        return self.paginated_response(self.get_queryset())

    def retrieve(self, request: Request, pk: str | None = None) -> Response:
        """GET /api/v1/addresses/{pk}"""
        address = self._service.get_address(pk)
        return envelope_response(AddressSerializer(address).data)

    def create(self, request: Request) -> Response:
        """POST /api/v1/addresses"""
        serializer = AddressInputSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        address = self._service.create_address(
            CreateAddressDTO(**serializer.validated_data)
        )
        return created_response(AddressSerializer(address).data, "Address created.")

    def partial_update(self, request: Request, pk: str | None = None) -> Response:
        """PATCH /api/v1/addresses/{pk}"""
        serializer = AddressUpdateSerializer(data=request.data, partial=True)
        serializer.is_valid(raise_exception=True)
        address = self._service.update_address(
            pk, UpdateAddressDTO(**serializer.validated_data)
        )
        return envelope_response(AddressSerializer(address).data, "Address updated.")

    def update(self, request: Request, pk: str | None = None) -> Response:
        """PUT /api/v1/addresses/{pk}"""
        return self.partial_update(request, pk)

    def destroy(self, request: Request, pk: str | None = None) -> Response:
        """DELETE /api/v1/addresses/{pk}"""
        self._service.delete_address(pk)
        return deleted_response("Address deleted.")
