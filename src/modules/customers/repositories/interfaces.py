"""Customer and Address repository interfaces.

Extend ``IRepository`` with the look-ups the customer rules need:
unique email and the per-customer default address.
"""

from __future__ import annotations

from abc import abstractmethod
from typing import TYPE_CHECKING, Any, Dict, Optional

from django.db import models

from modules.core.repositories.interfaces import IRepository

if TYPE_CHECKING:
    from modules.customers.models import Address, Customer


class ICustomerRepository(IRepository["Customer"]):
    """Repository contract for the Customer aggregate."""

    @abstractmethod
    def list(
        self, filters: Optional[Dict[str, Any]] = None
    ) -> "models.QuerySet[Customer]":
        """List live customers with optional filters."""

    @abstractmethod
    def get_by_email(self, email: str) -> Optional[Customer]:
        """Retrieve a customer by email address (case-insensitive)."""

    @abstractmethod
    def search(self, term: str) -> "models.QuerySet[Customer]":
        """Match ``term`` against names, email and phone."""


class IAddressRepository(IRepository["Address"]):
    """Repository contract for customer addresses."""

    @abstractmethod
    def list(
        self, filters: Optional[Dict[str, Any]] = None
    ) -> "models.QuerySet[Address]":
        """List live addresses with optional filters."""

    @abstractmethod
    def list_for_customer(self, customer_id: str) -> "models.QuerySet[Address]":
        """All live addresses of one customer."""

    @abstractmethod
    def clear_default(self, customer_id: str, exclude_id: Optional[str] = None) -> int:
        """Unset ``is_default`` on the customer's other addresses."""
