"""Base repository contract shared by every module.

Services receive repositories through their constructors and only ever
see these abstractions; the Django implementations live next to each
module's models.  Look-ups never raise for a missing row: they return
``None`` and the service decides which ``NotFoundError`` to raise.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from typing import Any, Dict, Generic, Optional, TypeVar

from django.db import models

T = TypeVar("T", bound=models.Model)


class IRepository(ABC, Generic[T]):
    """CRUD over one aggregate ``T`` (``Customer``, ``Product``, ``Order``...)."""

    @abstractmethod
    def get_by_id(self, id: str) -> Optional[T]:
        """Live row with primary key ``id``; ``None`` when absent or malformed."""

    @abstractmethod
    def list(self, filters: Optional[Dict[str, Any]] = None) -> "models.QuerySet[T]":
        """Live rows, narrowed by ORM look-ups such as ``{"customer_id": ...}``."""

    @abstractmethod
    def save(self, entity: T) -> T:
        """Insert or update ``entity`` and return it."""

    @abstractmethod
    def delete(self, id: str) -> bool:
        """Soft-delete where the model supports it; ``False`` if nothing matched."""
