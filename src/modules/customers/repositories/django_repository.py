"""Django ORM implementations of the Customer and Address repositories.

Methods return ``None`` for missing rows instead of raising; the Service
Layer decides how to classify a missing entity.  Soft-deleted rows are
invisible to every read.
"""

from __future__ import annotations

from typing import Any, Dict, Optional

import structlog
from django.core.exceptions import ValidationError
from django.db import models, transaction
from django.db.models import Q

from modules.customers.models import Address, Customer
from modules.customers.repositories.interfaces import (
    IAddressRepository,
    ICustomerRepository,
)

logger = structlog.get_logger(__name__)


class CustomerDjangoRepository(ICustomerRepository):
    """Concrete Customer repository backed by Django ORM."""

    def get_by_id(self, id: str) -> Optional[Customer]:
        """Retrieve a live customer by primary key.

        Returns ``None`` for non-existent or invalid IDs (e.g. malformed UUID).
        """
        try:
            return Customer.objects.alive().filter(id=id).first()
        except (ValueError, ValidationError):
            return None

    def list(
        self, filters: Optional[Dict[str, Any]] = None
    ) -> "models.QuerySet[Customer]":
        """List customers with optional Django ORM look-ups.

        Examples of valid filters::

            {"is_active": True}
            {"last_name__icontains": "smith"}
        """
        queryset = Customer.objects.alive()
        if filters:
            queryset = queryset.filter(**filters)
        return queryset

    def search(self, term: str) -> "models.QuerySet[Customer]":
        term = term.strip()
        queryset = Customer.objects.alive()
        if not term:
            return queryset
        return queryset.filter(
            Q(first_name__icontains=term)
            | Q(last_name__icontains=term)
            | Q(email__icontains=term)
            | Q(phone__icontains=term)
        )

    @transaction.atomic
    def save(self, entity: Customer) -> Customer:
        is_new = entity._state.adding
        entity.save()
        logger.info("customer.saved", customer_id=str(entity.id), is_new=is_new)
        return entity

    @transaction.atomic
    def delete(self, id: str) -> bool:
        """Soft-delete a customer; ``False`` when nothing matched."""
        customer = self.get_by_id(id)
        if not customer:
            return False
        customer.delete()
        return True

    def get_by_email(self, email: str) -> Optional[Customer]:
        return Customer.objects.alive().filter(email__iexact=email.strip()).first()


class AddressDjangoRepository(IAddressRepository):
    """Concrete Address repository backed by Django ORM."""

    def get_by_id(self, id: str) -> Optional[Address]:
        try:
            return (
                Address.objects.alive()
                .select_related("customer")
                .filter(id=id)
                .first()
            )
        except (ValueError, ValidationError):
            return None

    def list(
        self, filters: Optional[Dict[str, Any]] = None
    ) -> "models.QuerySet[Address]":
        queryset = Address.objects.alive().select_related("customer")
        if filters:
            queryset = queryset.filter(**filters)
        return queryset

    def list_for_customer(self, customer_id: str) -> "models.QuerySet[Address]":
        return self.list({"customer_id": customer_id})

    @transaction.atomic
    def save(self, entity: Address) -> Address:
        is_new = entity._state.adding
        entity.save()
        logger.info("address.saved", address_id=str(entity.id), is_new=is_new)
        return entity

    @transaction.atomic
    def delete(self, id: str) -> bool:
        address = self.get_by_id(id)
        if not address:
            return False
        address.delete()
        return True

    def clear_default(self, customer_id: str, exclude_id: Optional[str] = None) -> int:
        queryset = Address.objects.alive().filter(
            customer_id=customer_id, is_default=True
        )
        if exclude_id is not None:
            queryset = queryset.exclude(id=exclude_id)
        return queryset.update(is_default=False)
