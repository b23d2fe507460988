"""Customer service layer (Use Cases).

Orchestrates business logic for customers and their addresses,
delegating persistence to the injected repositories.

Business rules enforced here:
- Email is unique across live customers.
- An address always belongs to exactly one customer; it cannot be
  moved to another one after creation.
- A customer has at most one default address; marking a new default
  clears the previous one.
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Any, Dict, Optional

import structlog
from django.db import models, transaction

from modules.customers.exceptions import (
    AddressNotFound,
    CustomerAlreadyExists,
    CustomerNotFound,
)
from modules.customers.models import Address, Customer

if TYPE_CHECKING:
    from modules.customers.dtos import (
        CreateAddressDTO,
        CreateCustomerDTO,
        UpdateAddressDTO,
        UpdateCustomerDTO,
    )
    from modules.customers.repositories.interfaces import (
        IAddressRepository,
        ICustomerRepository,
    )

logger = structlog.get_logger(__name__)


class CustomerService:
    """Application service for Customer use-cases.

    Receives an ``ICustomerRepository`` via constructor injection.
    """

    def __init__(self, repository: ICustomerRepository) -> None:
        self._repo = repository

    # ------------------------------------------------------------------
    # Commands
    # ------------------------------------------------------------------

    @transaction.atomic
    def create_customer(self, dto: CreateCustomerDTO) -> Customer:
        """Create a customer.

        Raises:
            CustomerAlreadyExists: if the email is already registered.
        """
        if self._repo.get_by_email(dto.email):
            logger.warning("customer.duplicate_email")
            raise CustomerAlreadyExists("Email already registered.")

        customer = Customer(
            first_name=dto.first_name,
            last_name=dto.last_name,
            email=dto.email,
            phone=dto.phone,
            date_of_birth=dto.date_of_birth,
            is_active=dto.is_active,
        )
        customer = self._repo.save(customer)
        logger.info("customer.created", customer_id=str(customer.id))
        return customer

    @transaction.atomic
    def update_customer(self, id: str, dto: UpdateCustomerDTO) -> Customer:
        """Apply the fields present in ``dto``.

        Raises:
            CustomerNotFound: if the customer does not exist.
            CustomerAlreadyExists: if the new email collides.
        """
        customer = self.get_customer(id)
        log = logger.bind(customer_id=str(id))

        if dto.email is not None and dto.email.lower() != customer.email:
            if self._repo.get_by_email(dto.email):
                log.warning("customer.duplicate_email")
                raise CustomerAlreadyExists("Email already registered.")

        for field, value in dto.model_dump(exclude_none=True).items():
            setattr(customer, field, value)

        customer = self._repo.save(customer)
        log.info("customer.updated")
        return customer

    @transaction.atomic
    def delete_customer(self, id: str) -> None:
        """Soft-delete a customer; past orders keep pointing at it.

        Raises:
            CustomerNotFound: if the customer does not exist.
        """
        self.get_customer(id)
        self._repo.delete(id)
        logger.info("customer.soft_deleted", customer_id=str(id))

    # ------------------------------------------------------------------
    # Queries
    # ------------------------------------------------------------------

    def list_customers(
        self, filters: Optional[Dict[str, Any]] = None
    ) -> "models.QuerySet[Customer]":
        return self._repo.list(filters)

    def search_customers(self, term: str) -> "models.QuerySet[Customer]":
        return self._repo.search(term)

    def get_customer(self, id: str) -> Customer:
        """Retrieve a single live customer.

        Raises:
            CustomerNotFound: if the customer does not exist.
        """
        customer = self._repo.get_by_id(id)
        if not customer:
            raise CustomerNotFound(f"Customer {id} not found.")
        return customer


class AddressService:
    """Application service for customer addresses."""

    def __init__(
        self,
        address_repository: IAddressRepository,
        customer_repository: ICustomerRepository,
    ) -> None:
        self._repo = address_repository
        self._customers = customer_repository

    @transaction.atomic
    def create_address(self, dto: CreateAddressDTO) -> Address:
        """Create an address for an existing customer.

        Raises:
            CustomerNotFound: if the owning customer does not exist.
        """
        customer = self._customers.get_by_id(str(dto.customer_id))
        if not customer:
            raise CustomerNotFound(f"Customer {dto.customer_id} not found.")

        fields = dto.model_dump(exclude={"customer_id"})
        address = Address(customer=customer, **fields)
        address = self._repo.save(address)
        if address.is_default:
            self._repo.clear_default(str(customer.id), exclude_id=str(address.id))

        logger.info(
            "address.created",
            address_id=str(address.id),
            customer_id=str(customer.id),
        )
        return address

    @transaction.atomic
    def update_address(self, id: str, dto: UpdateAddressDTO) -> Address:
        address = self.get_address(id)
        for field, value in dto.model_dump(exclude_none=True).items():
            setattr(address, field, value)
        address = self._repo.save(address)
        if dto.is_default:
            self._repo.clear_default(str(address.customer_id), exclude_id=str(address.id))
        logger.info("address.updated", address_id=str(id))
        return address

    @transaction.atomic
    def delete_address(self, id: str) -> None:
        self.get_address(id)
        self._repo.delete(id)
        logger.info("address.soft_deleted", address_id=str(id))

    def get_address(self, id: str) -> Address:
        """Raises ``AddressNotFound`` for missing or deleted addresses."""
        address = self._repo.get_by_id(id)
        if not address:
            raise AddressNotFound(f"Address {id} not found.")
        return address

    def list_addresses(
        self, filters: Optional[Dict[str, Any]] = None
    ) -> "models.QuerySet[Address]":
        return self._repo.list(filters)

    def list_customer_addresses(self, customer_id: str) -> "models.QuerySet[Address]":
        """Raises ``CustomerNotFound`` when the customer is unknown."""
        if not self._customers.get_by_id(customer_id):
            raise CustomerNotFound(f"Customer {customer_id} not found.")
        return self._repo.list_for_customer(customer_id)
