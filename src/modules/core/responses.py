"""Success-path envelope responses for DRF views."""

from __future__ import annotations

from typing import Any

from rest_framework import status as http_status
from rest_framework.response import Response

from shared.domain.envelope import Envelope


def envelope_response(
    data: Any = None,
    message: str = "OK",
    status: int = http_status.HTTP_200_OK,
) -> Response:
    return Response(Envelope.ok(data, message).to_wire(), status=status)


def created_response(data: Any, message: str = "Resource created.") -> Response:
    return envelope_response(data, message, status=http_status.HTTP_201_CREATED)


def deleted_response(message: str = "Resource deleted.") -> Response:
    return envelope_response(None, message)
