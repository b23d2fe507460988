"""Explicit configuration for the storefront API client."""

from __future__ import annotations

from typing import Callable, Optional

from decouple import config
from pydantic import BaseModel, ConfigDict, Field, field_validator

TokenProvider = Callable[[], Optional[str]]

DEFAULT_TIMEOUT = 30.0


class ClientConfig(BaseModel):
    """Where the API lives, how long to wait, and who is calling.

    ``token_provider`` is called once per request; returning ``None`` sends
    the request unauthenticated.  Storing and refreshing the token is the
    caller's business.
    """

    model_config = ConfigDict(frozen=True)

    base_url: str
    timeout: float = Field(default=DEFAULT_TIMEOUT, gt=0)
    token_provider: Optional[TokenProvider] = None

    @field_validator("base_url")
    @classmethod
    def base_url_is_absolute(cls, v: str) -> str:
        v = v.strip()
        if not v.startswith(("http://", "https://")):
            raise ValueError("base_url must be an absolute http(s) URL.")
        return v

    @classmethod
    def from_env(cls, token_provider: Optional[TokenProvider] = None) -> "ClientConfig":
        return cls(
            base_url=config("STOREFRONT_API_URL", default="http://localhost:8000/api/v1"),
            timeout=config("STOREFRONT_API_TIMEOUT", default=DEFAULT_TIMEOUT, cast=float),
            token_provider=token_provider,
        )
