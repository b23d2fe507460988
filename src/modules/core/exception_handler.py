"""Exception normalizer: the single place failures become envelopes.

Wired as DRF's ``EXCEPTION_HANDLER``.  Policy, in order:

1. A raised condition that already carries a failure envelope is
   returned unchanged (no re-wrapping).
2. The message is the structured ``message`` field when present, else
   the condition's own message, else the per-code fallback.
3. The ``ErrorCode`` comes from the condition's declared kind and
   defaults to ``INTERNAL_ERROR``.
4. ``timestamp`` is the normalization instant, ISO-8601 UTC.

A response is returned for *every* exception so no traceback ever
reaches the client.
"""

from __future__ import annotations

from typing import Any, Dict, Iterator, Optional, Tuple

import structlog
from django.core.exceptions import ObjectDoesNotExist
from django.core.exceptions import PermissionDenied as DjangoPermissionDenied
from django.core.exceptions import ValidationError as DjangoValidationError
from django.db import IntegrityError
from django.http import Http404
from pydantic import ValidationError as PydanticValidationError
from rest_framework import exceptions
from rest_framework.response import Response
from rest_framework.settings import api_settings
from rest_framework.views import set_rollback

from shared.domain.envelope import Envelope, is_failure_envelope
from shared.domain.errors import DomainError, ErrorCode

logger = structlog.get_logger(__name__)

# Order matters: subclasses before their bases.
_CLASSIFICATION: Tuple[Tuple[type, ErrorCode], ...] = (
    (exceptions.NotAuthenticated, ErrorCode.UNAUTHORIZED),
    (exceptions.AuthenticationFailed, ErrorCode.UNAUTHORIZED),
    (exceptions.PermissionDenied, ErrorCode.FORBIDDEN),
    (exceptions.NotFound, ErrorCode.NOT_FOUND),
    (exceptions.ValidationError, ErrorCode.VALIDATION_ERROR),
    (exceptions.ParseError, ErrorCode.BAD_REQUEST),
    (exceptions.UnsupportedMediaType, ErrorCode.BAD_REQUEST),
    (exceptions.MethodNotAllowed, ErrorCode.BAD_REQUEST),
    (exceptions.NotAcceptable, ErrorCode.BAD_REQUEST),
    (exceptions.Throttled, ErrorCode.TOO_MANY_REQUESTS),
    (Http404, ErrorCode.NOT_FOUND),
    (ObjectDoesNotExist, ErrorCode.NOT_FOUND),
    (DjangoPermissionDenied, ErrorCode.FORBIDDEN),
    (DjangoValidationError, ErrorCode.VALIDATION_ERROR),
    (PydanticValidationError, ErrorCode.VALIDATION_ERROR),
    (IntegrityError, ErrorCode.CONFLICT),
)


def envelope_exception_handler(
    exc: Exception, context: Dict[str, Any]
) -> Response:
    """DRF entry point: normalize ``exc`` and build the HTTP response."""
    payload, status_code = normalize_exception(exc)
    set_rollback()

    headers: Dict[str, str] = {}
    auth_header = getattr(exc, "auth_header", None)
    if auth_header:
        headers["WWW-Authenticate"] = auth_header
    wait = getattr(exc, "wait", None)
    if wait:
        headers["Retry-After"] = str(int(wait))

    view = context.get("view")
    log = logger.bind(
        view=type(view).__name__ if view else None,
        error_code=(payload.get("error") or {}).get("code"),
        status_code=status_code,
    )
    if status_code >= 500:
        log.error("request.failed", exc_info=exc)
    else:
        log.warning("request.rejected", error_message=payload.get("message"))

    return Response(payload, status=status_code, headers=headers)


def normalize_exception(exc: BaseException) -> Tuple[Dict[str, Any], int]:
    """Return ``(envelope_payload, http_status)`` for any raised condition."""
    existing = _existing_envelope(exc)
    if existing is not None:
        return existing, _status_for_existing(exc, existing)

    code = classify(exc)
    message = extract_message(exc, code)
    envelope = Envelope.fail(code, message)

    status_code = getattr(exc, "status_code", None)
    if not isinstance(exc, exceptions.APIException) or status_code is None:
        status_code = code.http_status
    return envelope.to_wire(), status_code


def classify(exc: BaseException) -> ErrorCode:
    if isinstance(exc, DomainError):
        return exc.code
    for exc_type, code in _CLASSIFICATION:
        if isinstance(exc, exc_type):
            return code
    return ErrorCode.INTERNAL_ERROR


def extract_message(exc: BaseException, code: ErrorCode) -> str:
    if isinstance(exc, DomainError):
        return exc.message or exc.default_message

    detail = getattr(exc, "detail", None)
    if isinstance(detail, dict) and isinstance(detail.get("message"), str):
        return str(detail["message"])
    # SimpleJWT: {"detail": ..., "code": ..., "messages": [...]}
    if isinstance(detail, dict) and "detail" in detail:
        return str(detail["detail"])

    if isinstance(exc, exceptions.ValidationError):
        messages = list(_flatten_detail(detail))
        return "; ".join(messages) if messages else code.default_message
    if isinstance(exc, exceptions.APIException):
        return str(detail) if detail else code.default_message
    if isinstance(exc, DjangoValidationError):
        return "; ".join(str(m) for m in exc.messages) or code.default_message
    if isinstance(exc, PydanticValidationError):
        errors = exc.errors()
        return errors[0]["msg"] if errors else code.default_message
    if isinstance(exc, IntegrityError):
        # driver messages leak schema details
        return code.default_message

    own = str(exc)
    return own or code.default_message


# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------


def _existing_envelope(exc: BaseException) -> Optional[Dict[str, Any]]:
    payload = getattr(exc, "payload", None)
    if is_failure_envelope(payload):
        return payload
    args = getattr(exc, "args", ())
    if args and is_failure_envelope(args[0]):
        return args[0]
    return None


def _status_for_existing(exc: BaseException, payload: Dict[str, Any]) -> int:
    status_code = getattr(exc, "status_code", None)
    if isinstance(status_code, int):
        return status_code
    error = payload.get("error") or {}
    try:
        return ErrorCode(error.get("code")).http_status
    except ValueError:
        return ErrorCode.INTERNAL_ERROR.http_status


def _flatten_detail(detail: Any, prefix: str = "") -> Iterator[str]:
    """Yield ``"field: reason"`` lines from a nested DRF error detail."""
    if isinstance(detail, dict):
        for key, value in detail.items():
            if isinstance(key, int):
                child = f"{prefix}[{key}]"
            else:
                name = "" if key == api_settings.NON_FIELD_ERRORS_KEY else str(key)
                child = f"{prefix}.{name}" if prefix and name else (name or prefix)
            yield from _flatten_detail(value, child)
    elif isinstance(detail, list):
        for index, value in enumerate(detail):
            child = f"{prefix}[{index}]" if isinstance(value, dict) else prefix
            yield from _flatten_detail(value, child)
    elif detail is not None:
        yield f"{prefix}: {detail}" if prefix else str(detail)
