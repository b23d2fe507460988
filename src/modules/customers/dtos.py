"""Customer and Address DTOs for the Service Layer.

Framework-agnostic data transfer objects using Pydantic v2, immutable
(``frozen=True``).  Update DTOs are partial: ``None`` means "leave the
field unchanged".
"""

from __future__ import annotations

from datetime import date
from typing import Annotated, Optional
from uuid import UUID

from pydantic import AfterValidator, BaseModel, ConfigDict, EmailStr, field_validator

from modules.customers.models import AddressType


def _not_blank(value: str) -> str:
    if not value.strip():
        raise ValueError("Must not be blank.")
    return value.strip()


def _alpha2(value: str) -> str:
    value = value.strip().upper()
    if len(value) != 2 or not value.isalpha():
        raise ValueError("Country must be an ISO 3166-1 alpha-2 code.")
    return value


NonBlankStr = Annotated[str, AfterValidator(_not_blank)]


class CreateCustomerDTO(BaseModel):
    model_config = ConfigDict(frozen=True)

    first_name: NonBlankStr
    last_name: NonBlankStr
    email: EmailStr
    phone: str = ""
    date_of_birth: Optional[date] = None
    is_active: bool = True


class UpdateCustomerDTO(BaseModel):
    model_config = ConfigDict(frozen=True)

    first_name: Optional[NonBlankStr] = None
    last_name: Optional[NonBlankStr] = None
    email: Optional[EmailStr] = None
    phone: Optional[str] = None
    date_of_birth: Optional[date] = None
    is_active: Optional[bool] = None


class CreateAddressDTO(BaseModel):
    """Immutable DTO for address creation.

    Validates ``country`` as an ISO 3166-1 alpha-2 code.
    """

    model_config = ConfigDict(frozen=True)

    customer_id: UUID
    type: AddressType = AddressType.SHIPPING
    first_name: NonBlankStr
    last_name: NonBlankStr
    company: str = ""
    address_line1: NonBlankStr
    address_line2: str = ""
    city: NonBlankStr
    state: NonBlankStr
    postal_code: NonBlankStr
    country: str
    phone: str = ""
    is_default: bool = False

    @field_validator("country")
    @classmethod
    def country_is_alpha2(cls, v: str) -> str:
        return _alpha2(v)


class UpdateAddressDTO(BaseModel):
    model_config = ConfigDict(frozen=True)

    type: Optional[AddressType] = None
    first_name: Optional[NonBlankStr] = None
    last_name: Optional[NonBlankStr] = None
    company: Optional[str] = None
    address_line1: Optional[NonBlankStr] = None
    address_line2: Optional[str] = None
    city: Optional[NonBlankStr] = None
    state: Optional[NonBlankStr] = None
    postal_code: Optional[NonBlankStr] = None
    country: Optional[str] = None
    phone: Optional[str] = None
    is_default: Optional[bool] = None

    @field_validator("country")
    @classmethod
    def country_is_alpha2(cls, v: Optional[str]) -> Optional[str]:
        return None if v is None else _alpha2(v)
