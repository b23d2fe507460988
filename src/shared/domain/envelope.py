"""Universal response envelope.

Every request outcome, server or client side, is an ``Envelope``::

    {"success": bool, "data": T | null, "message": str,
     "error": {"code": str, "message": str, "timestamp": str} | null}

The model refuses to be built in a state that breaks the envelope
invariant, so a value of this type is always well formed.
"""

from __future__ import annotations

from datetime import datetime, timezone
from typing import Any, Generic, List, Optional, TypeVar

from pydantic import BaseModel, ConfigDict, Field, model_validator

from shared.domain.errors import ErrorCode

T = TypeVar("T")


def utc_timestamp(moment: Optional[datetime] = None) -> str:
    """Return ``moment`` (default: now) as ISO-8601 UTC with a ``Z`` suffix."""
    moment = moment or datetime.now(timezone.utc)
    moment = moment.astimezone(timezone.utc)
    return moment.isoformat(timespec="milliseconds").replace("+00:00", "Z")


class ErrorDetail(BaseModel):
    model_config = ConfigDict(frozen=True)

    code: ErrorCode
    message: str
    timestamp: str


class Envelope(BaseModel, Generic[T]):
    """Uniform success/error/data wrapper.

    ``data`` may be ``None`` on success only for void operations
    (e.g. DELETE), which is why the invariant is checked one way.
    """

    model_config = ConfigDict(frozen=True)

    success: bool
    data: Optional[T] = None
    message: str
    error: Optional[ErrorDetail] = None

    @model_validator(mode="after")
    def _check_invariant(self) -> "Envelope[T]":
        if self.success and self.error is not None:
            raise ValueError("A successful envelope cannot carry an error.")
        if not self.success:
            if self.error is None:
                raise ValueError("A failed envelope must carry an error.")
            if self.data is not None:
                raise ValueError("A failed envelope cannot carry data.")
        return self

    # ------------------------------------------------------------------
    # Constructors
    # ------------------------------------------------------------------

    @classmethod
    def ok(cls, data: Any = None, message: str = "OK") -> "Envelope[Any]":
        return cls(success=True, data=data, message=message, error=None)

    @classmethod
    def fail(
        cls,
        code: ErrorCode,
        message: Optional[str] = None,
        timestamp: Optional[str] = None,
    ) -> "Envelope[Any]":
        message = message or code.default_message
        return cls(
            success=False,
            data=None,
            message=message,
            error=ErrorDetail(
                code=code,
                message=message,
                timestamp=timestamp or utc_timestamp(),
            ),
        )

    # ------------------------------------------------------------------
    # Wire
    # ------------------------------------------------------------------

    def to_wire(self) -> dict:
        return self.model_dump(mode="json", by_alias=True)


class Paginated(BaseModel, Generic[T]):
    """One page of a list endpoint; ``total`` counts the full matching set."""

    model_config = ConfigDict(frozen=True, populate_by_name=True)

    items: List[T]
    total: int = Field(ge=0)
    page: int = Field(ge=1)
    page_size: int = Field(ge=1, alias="pageSize")

    @model_validator(mode="after")
    def _page_fits(self) -> "Paginated[T]":
        if len(self.items) > self.page_size:
            raise ValueError("A page cannot hold more items than its page size.")
        return self


def is_envelope_shaped(payload: Any) -> bool:
    """``True`` for dicts that already look like an envelope."""
    return (
        isinstance(payload, dict)
        and isinstance(payload.get("success"), bool)
        and "message" in payload
    )


def is_failure_envelope(payload: Any) -> bool:
    """``True`` for any dict with ``success: false``; nothing else is required."""
    return isinstance(payload, dict) and payload.get("success") is False
