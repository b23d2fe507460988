"""Error taxonomy shared by the API server and the API client.

``ErrorCode`` is the closed classification every failure ends up in.
Each code maps to one conventional HTTP status so generic transport
tooling keeps working, but application code reads the envelope, not
the status line.

``DomainError`` and its subclasses are the *classified conditions*:
the layer that detects a failure raises one of them, and the exception
normalizer turns it into an envelope exactly once.
"""

from __future__ import annotations

from enum import Enum
from typing import Any, Dict, Optional


class ErrorCode(str, Enum):
    UNAUTHORIZED = "UNAUTHORIZED"
    FORBIDDEN = "FORBIDDEN"
    NOT_FOUND = "NOT_FOUND"
    BAD_REQUEST = "BAD_REQUEST"
    VALIDATION_ERROR = "VALIDATION_ERROR"
    CONFLICT = "CONFLICT"
    TOO_MANY_REQUESTS = "TOO_MANY_REQUESTS"
    INTERNAL_ERROR = "INTERNAL_ERROR"
    TIMEOUT = "TIMEOUT"
    NETWORK_ERROR = "NETWORK_ERROR"

    @property
    def http_status(self) -> int:
        return HTTP_STATUS_BY_CODE[self]

    @property
    def default_message(self) -> str:
        return DEFAULT_MESSAGES[self]


HTTP_STATUS_BY_CODE: Dict[ErrorCode, int] = {
    ErrorCode.UNAUTHORIZED: 401,
    ErrorCode.FORBIDDEN: 403,
    ErrorCode.NOT_FOUND: 404,
    ErrorCode.BAD_REQUEST: 400,
    ErrorCode.VALIDATION_ERROR: 400,
    ErrorCode.CONFLICT: 409,
    ErrorCode.TOO_MANY_REQUESTS: 429,
    ErrorCode.INTERNAL_ERROR: 500,
    ErrorCode.TIMEOUT: 504,
    ErrorCode.NETWORK_ERROR: 503,
}

DEFAULT_MESSAGES: Dict[ErrorCode, str] = {
    ErrorCode.UNAUTHORIZED: "Unauthorized.",
    ErrorCode.FORBIDDEN: "Forbidden.",
    ErrorCode.NOT_FOUND: "Resource not found.",
    ErrorCode.BAD_REQUEST: "Bad request.",
    ErrorCode.VALIDATION_ERROR: "Invalid input data.",
    ErrorCode.CONFLICT: "Request conflicts with the current state of the resource.",
    ErrorCode.TOO_MANY_REQUESTS: "Too many requests.",
    ErrorCode.INTERNAL_ERROR: "Internal server error.",
    ErrorCode.TIMEOUT: "The request timed out.",
    ErrorCode.NETWORK_ERROR: "Could not reach the server.",
}

# Default map used when a failed response carries no envelope.
# Anything not listed falls back to INTERNAL_ERROR.
STATUS_TO_ERROR_CODE: Dict[int, ErrorCode] = {
    400: ErrorCode.BAD_REQUEST,
    401: ErrorCode.UNAUTHORIZED,
    403: ErrorCode.FORBIDDEN,
    404: ErrorCode.NOT_FOUND,
    500: ErrorCode.INTERNAL_ERROR,
}


# ---------------------------------------------------------------------------
# Classified conditions
# ---------------------------------------------------------------------------


class DomainError(Exception):
    """Base class for failures classified at the point of detection.

    Subclasses only override ``code``.  ``message`` is optional: when it
    is omitted the normalizer falls back to ``code.default_message``.
    """

    code: ErrorCode = ErrorCode.INTERNAL_ERROR

    def __init__(self, message: Optional[str] = None) -> None:
        super().__init__(message or "")
        self.message = message

    @property
    def default_message(self) -> str:
        return self.code.default_message


class BadRequestError(DomainError):
    code = ErrorCode.BAD_REQUEST


class UnauthorizedError(DomainError):
    code = ErrorCode.UNAUTHORIZED


class ForbiddenError(DomainError):
    code = ErrorCode.FORBIDDEN


class NotFoundError(DomainError):
    code = ErrorCode.NOT_FOUND


class ValidationFailed(DomainError):
    code = ErrorCode.VALIDATION_ERROR


class ConflictError(DomainError):
    code = ErrorCode.CONFLICT


class EnvelopeError(Exception):
    """A failure that already carries a fully built envelope payload.

    Raised by collaborators (e.g. authentication) that produce their own
    envelope.  The normalizer returns ``payload`` untouched.
    """

    def __init__(self, payload: Dict[str, Any], status_code: Optional[int] = None):
        super().__init__(payload.get("message", ""))
        self.payload = payload
        self.status_code = status_code
