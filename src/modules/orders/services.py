"""Order service layer (Use Cases).

Orchestrates order creation, edits, line items, status management and
statistics.  All write operations are atomic: the service defines the
unit-of-work boundary and locks the order row before mutating it.

Business rules enforced:
- Customer must exist and be active; addresses must belong to it.
- Products must exist and be active.
- Status transitions follow the state machine on ``Order``.
- Confirming requires at least one item.
- Cancelled/refunded orders are read-only.
- Every effective status change is recorded in the history.
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Any, Dict, Iterable, Optional
from uuid import UUID

import structlog
from django.db import models, transaction

from modules.customers.exceptions import (
    AddressNotFound,
    AddressOwnershipMismatch,
    AddressTypeMismatch,
    CustomerNotFound,
    InactiveCustomer,
)
from modules.orders.constants import RECENT_ORDERS_LIMIT, OrderStatus
from modules.orders.exceptions import (
    DuplicateOrderItem,
    EmptyOrder,
    InvalidStatusTransition,
    OrderItemNotFound,
    OrderLocked,
    OrderNotFound,
)
from modules.orders.models import Order, OrderItem
from modules.orders.statistics import OrderStatistics, compute_order_statistics
from modules.products.exceptions import InactiveProduct, ProductNotFound

if TYPE_CHECKING:
    from modules.customers.models import Address, Customer
    from modules.customers.repositories.interfaces import (
        IAddressRepository,
        ICustomerRepository,
    )
    from modules.orders.dtos import (
        CreateOrderDTO,
        CreateOrderItemDTO,
        UpdateOrderDTO,
        UpdateOrderItemDTO,
    )
    from modules.orders.repositories.interfaces import IOrderRepository
    from modules.products.models import Product
    from modules.products.repositories.interfaces import IProductRepository

logger = structlog.get_logger(__name__)


class OrderService:
    """Application service for Order use-cases.

    Receives repositories via constructor injection.
    """

    def __init__(
        self,
        order_repository: IOrderRepository,
        customer_repository: ICustomerRepository,
        address_repository: IAddressRepository,
        product_repository: IProductRepository,
    ) -> None:
        self._order_repo = order_repository
        self._customer_repo = customer_repository
        self._address_repo = address_repository
        self._product_repo = product_repository

    # ------------------------------------------------------------------
    # Commands
    # ------------------------------------------------------------------

    @transaction.atomic
    def create_order(self, dto: CreateOrderDTO, changed_by: str = "") -> Order:
        """Create a ``pending`` order with its items.

        A repeated ``idempotency_key`` returns the order created first.

        Raises:
            CustomerNotFound / InactiveCustomer: bad customer.
            AddressNotFound / AddressOwnershipMismatch / AddressTypeMismatch:
                bad shipping or billing address.
            ProductNotFound / InactiveProduct: bad line item.
            InvalidDiscount: discount larger than the order amount.
        """
        log = logger.bind(customer_id=str(dto.customer_id))

        if dto.idempotency_key:
            existing = self._order_repo.get_by_idempotency_key(dto.idempotency_key)
            if existing:
                log.info("order.idempotency_hit", order_id=str(existing.id))
                return existing

        customer = self._customer_repo.get_by_id(str(dto.customer_id))
        if not customer:
            raise CustomerNotFound(f"Customer {dto.customer_id} not found.")
        if not customer.is_active:
            raise InactiveCustomer(f"Customer {dto.customer_id} is inactive.")

        order = Order(
            customer=customer,
            shipping_address=self._resolve_address(
                customer, dto.shipping_address_id, "shipping"
            ),
            billing_address=self._resolve_address(
                customer, dto.billing_address_id, "billing"
            ),
            tax_amount=dto.tax_amount,
            shipping_amount=dto.shipping_amount,
            discount_amount=dto.discount_amount,
            notes=dto.notes,
            idempotency_key=dto.idempotency_key,
        )

        items = []
        for item_dto in dto.items:
            product = self._get_sellable_product(item_dto.product_id)
            item = OrderItem(
                order=order,
                product=product,
                quantity=item_dto.quantity,
                unit_price=item_dto.unit_price or product.price,
            )
            item.total_price = item.compute_total()
            items.append(item)

        order.recalculate_totals(items)
        self._order_repo.save(order)
        for item in items:
            item.order = order
            self._order_repo.save_item(item)

        self._order_repo.add_history(
            order, OrderStatus.PENDING, notes="Order created", changed_by=changed_by
        )
        log.info(
            "order.created",
            order_id=str(order.id),
            order_number=order.order_number,
            item_count=len(items),
        )
        return self.get_order(str(order.id))

    @transaction.atomic
    def update_order(
        self, order_id: str, dto: UpdateOrderDTO, changed_by: str = ""
    ) -> Order:
        """Apply edits, then the status change if one was supplied.

        Raises:
            OrderNotFound: order does not exist.
            OrderLocked: edits on a cancelled/refunded order.
            InvalidStatusTransition / EmptyOrder: bad status change.
        """
        order = self._lock(order_id)
        edits = dto.edits()

        if edits:
            self._ensure_editable(order)
            if "shipping_address_id" in edits:
                order.shipping_address = self._resolve_address(
                    order.customer, edits.pop("shipping_address_id"), "shipping"
                )
            if "billing_address_id" in edits:
                order.billing_address = self._resolve_address(
                    order.customer, edits.pop("billing_address_id"), "billing"
                )
            for field, value in edits.items():
                setattr(order, field, value)
            order.recalculate_totals()
            self._order_repo.save(order)
            logger.info("order.updated", order_id=str(order.id), fields=sorted(edits))

        if dto.status is not None:
            self._transition(order, dto.status, changed_by=changed_by)

        return self.get_order(order_id)

    @transaction.atomic
    def update_status(
        self,
        order_id: str,
        new_status: str,
        notes: str = "",
        changed_by: str = "",
    ) -> Order:
        """Transition an order to ``new_status``.

        Acquires a row-level lock on the order before validating the
        transition.  Re-entering the current status changes nothing.

        Raises:
            OrderNotFound: order does not exist.
            InvalidStatusTransition: transition is not allowed.
            EmptyOrder: confirming an order without items.
        """
        order = self._lock(order_id)
        self._transition(order, new_status, notes=notes, changed_by=changed_by)
        return self.get_order(order_id)

    def cancel_order(self, order_id: str, notes: str = "", changed_by: str = "") -> Order:
        return self.update_status(
            order_id,
            OrderStatus.CANCELLED,
            notes=notes or "Order cancelled",
            changed_by=changed_by,
        )

    @transaction.atomic
    def delete_order(self, order_id: str) -> None:
        """Soft-delete an order; statistics stop counting it.

        Raises:
            OrderNotFound: order does not exist.
        """
        self._lock(order_id)
        self._order_repo.delete(order_id)
        logger.info("order.soft_deleted", order_id=str(order_id))

    # ------------------------------------------------------------------
    # Items
    # ------------------------------------------------------------------

    def list_items(self, order_id: str) -> "models.QuerySet[OrderItem]":
        order = self.get_order(order_id)
        return self._order_repo.list_items(str(order.id))

    @transaction.atomic
    def add_item(self, order_id: str, dto: CreateOrderItemDTO) -> OrderItem:
        """Add a line and recompute the order totals.

        Raises:
            OrderNotFound / OrderLocked: bad order.
            ProductNotFound / InactiveProduct: bad product.
            DuplicateOrderItem: the product already has a line.
        """
        order = self._lock(order_id)
        self._ensure_editable(order)
        product = self._get_sellable_product(dto.product_id)

        if self._order_repo.list_items(str(order.id)).filter(product=product).exists():
            raise DuplicateOrderItem(
                f"Order {order.order_number} already has a line for product {product.sku}."
            )

        item = OrderItem(
            order=order,
            product=product,
            quantity=dto.quantity,
            unit_price=dto.unit_price or product.price,
        )
        self._order_repo.save_item(item)
        self._refresh_totals(order)
        logger.info("order.item_added", order_id=str(order.id), item_id=str(item.id))
        return item

    @transaction.atomic
    def update_item(
        self, order_id: str, item_id: str, dto: UpdateOrderItemDTO
    ) -> OrderItem:
        order = self._lock(order_id)
        self._ensure_editable(order)
        item = self._get_item(order, item_id)

        for field, value in dto.model_dump(exclude_none=True).items():
            setattr(item, field, value)
        self._order_repo.save_item(item)
        self._refresh_totals(order)
        logger.info("order.item_updated", order_id=str(order.id), item_id=str(item.id))
        return item

    @transaction.atomic
    def remove_item(self, order_id: str, item_id: str) -> None:
        order = self._lock(order_id)
        self._ensure_editable(order)
        item = self._get_item(order, item_id)
        if (
            order.status != OrderStatus.PENDING
            and self._order_repo.list_items(str(order.id)).count() <= 1
        ):
            raise EmptyOrder(
                f"The last item of a {order.status} order cannot be removed."
            )

        self._order_repo.delete_item(item)
        self._refresh_totals(order)
        logger.info("order.item_removed", order_id=str(order.id), item_id=str(item_id))

    # ------------------------------------------------------------------
    # Queries
    # ------------------------------------------------------------------

    def get_order(self, order_id: str) -> Order:
        """Retrieve a single order by ID.

        Raises:
            OrderNotFound: if the order does not exist.
        """
        order = self._order_repo.get_by_id(order_id)
        if not order:
            raise OrderNotFound(f"Order {order_id} not found.")
        return order

    def list_orders(
        self, filters: Optional[Dict[str, Any]] = None
    ) -> "models.QuerySet[Order]":
        return self._order_repo.list(filters)

    def search_orders(self, term: str) -> "models.QuerySet[Order]":
        return self._order_repo.search(term)

    def list_customer_orders(self, customer_id: str) -> "models.QuerySet[Order]":
        """Raises ``CustomerNotFound`` when the customer is unknown."""
        customer = self._customer_repo.get_by_id(customer_id)
        if not customer:
            raise CustomerNotFound(f"Customer {customer_id} not found.")
        return self._order_repo.list({"customer_id": customer.id})

    def get_statistics(
        self,
        orders: Optional[Iterable[Order]] = None,
        recent_limit: int = RECENT_ORDERS_LIMIT,
    ) -> OrderStatistics:
        """Point-in-time statistics over live orders (or ``orders``)."""
        if orders is None:
            orders = self._order_repo.list()
        return compute_order_statistics(orders, recent_limit=recent_limit)

    # ------------------------------------------------------------------
    # Helpers
    # ------------------------------------------------------------------

    def _lock(self, order_id: str) -> Order:
        order = self._order_repo.get_for_update(str(order_id))
        if not order:
            raise OrderNotFound(f"Order {order_id} not found.")
        return order

    def _transition(
        self, order: Order, new_status: str, notes: str = "", changed_by: str = ""
    ) -> bool:
        log = logger.bind(
            order_id=str(order.id),
            current_status=order.status,
            new_status=str(new_status),
        )
        old_status = order.status

        if (
            new_status == OrderStatus.CONFIRMED
            and order.can_transition_to(new_status)
            and not self._order_repo.list_items(str(order.id)).exists()
        ):
            log.warning("order.confirm_without_items")
            raise EmptyOrder("An order without items cannot be confirmed.")

        try:
            changed = order.transition_to(new_status)
        except InvalidStatusTransition:
            log.warning("order.invalid_transition")
            raise

        if not changed:
            log.info("order.status_unchanged")
            return False

        self._order_repo.save(order)
        self._order_repo.add_history(
            order,
            new_status,
            old_status=old_status,
            notes=notes,
            changed_by=changed_by,
        )
        log.info("order.status_updated")
        return True

    def _ensure_editable(self, order: Order) -> None:
        if order.is_locked:
            raise OrderLocked(
                f"Order {order.order_number} is {order.status} and can no longer be edited."
            )

    def _refresh_totals(self, order: Order) -> None:
        order.recalculate_totals(list(self._order_repo.list_items(str(order.id))))
        self._order_repo.save(order)

    def _get_item(self, order: Order, item_id: str) -> OrderItem:
        item = self._order_repo.get_item(str(order.id), str(item_id))
        if not item:
            raise OrderItemNotFound(f"Item {item_id} not found in order {order.order_number}.")
        return item

    def _get_sellable_product(self, product_id: UUID) -> Product:
        product = self._product_repo.get_by_id(str(product_id))
        if not product:
            raise ProductNotFound(f"Product {product_id} not found.")
        if not product.is_active:
            raise InactiveProduct(f"Product {product.sku} is inactive.")
        return product

    def _resolve_address(
        self, customer: Customer, address_id: Optional[UUID], purpose: str
    ) -> Optional[Address]:
        if address_id is None:
            return None
        address = self._address_repo.get_by_id(str(address_id))
        if not address:
            raise AddressNotFound(f"Address {address_id} not found.")
        if address.customer_id != customer.id:
            raise AddressOwnershipMismatch(
                f"Address {address_id} does not belong to customer {customer.id}."
            )
        if not address.serves(purpose):
            raise AddressTypeMismatch(
                f"Address {address_id} cannot be used as a {purpose} address."
            )
        return address
