import time
from typing import Any, Dict

import structlog
from django.core.cache import cache
from django.db import connections
from django.http import HttpRequest, JsonResponse
from django.utils import timezone
from rest_framework.permissions import IsAuthenticated
from rest_framework.request import Request
from rest_framework.response import Response
from rest_framework.views import APIView

from modules.core.responses import envelope_response
from shared.domain.envelope import Envelope
from shared.domain.errors import ErrorCode

logger = structlog.get_logger(__name__)


def health_check(request: HttpRequest) -> JsonResponse:
    services: Dict[str, Dict[str, Any]] = {}
    overall_healthy = True

    try:
        start = time.monotonic()
        conn = connections["default"]
        conn.ensure_connection()
        with conn.cursor() as cursor:
            cursor.execute("SELECT 1")
            cursor.fetchone()
        services["database"] = {
            "status": "up",
            "response_time_ms": round((time.monotonic() - start) * 1000, 2),
        }
    except Exception:
        services["database"] = {"status": "down"}
        overall_healthy = False
        logger.error("health_check_db_failure", exc_info=True)

    try:
        start = time.monotonic()
        cache.set("_health_check", "ok", 10)
        if cache.get("_health_check") != "ok":
            raise ConnectionError("Cache read failed")
        services["cache"] = {
            "status": "up",
            "response_time_ms": round((time.monotonic() - start) * 1000, 2),
        }
    except Exception:
        services["cache"] = {"status": "down"}
        overall_healthy = False
        logger.error("health_check_cache_failure", exc_info=True)

    state = "healthy" if overall_healthy else "unhealthy"
    logger.info("health_check_completed", status=state)

    body = {
        "status": state,
        "timestamp": timezone.now().isoformat(),
        "services": services,
    }
    if overall_healthy:
        envelope = Envelope.ok(body, message="Service healthy.")
        return JsonResponse(envelope.to_wire(), status=200)
    # Failed envelopes carry no data, so the check details go to the logs.
    envelope = Envelope.fail(ErrorCode.INTERNAL_ERROR, "Service unhealthy.")
    return JsonResponse(envelope.to_wire(), status=503)


class CurrentUserView(APIView):
    """``GET /api/v1/me``: who the bearer token belongs to."""

    permission_classes = [IsAuthenticated]

    def get(self, request: Request) -> Response:
        user = request.user
        return envelope_response(
            {
                "id": str(user.pk),
                "username": user.get_username(),
                "isStaff": bool(user.is_staff),
            },
            message="Authenticated.",
        )


# ---------------------------------------------------------------------------
# Django-level error handlers (outside DRF views)
# ---------------------------------------------------------------------------


def not_found(request: HttpRequest, exception: Exception) -> JsonResponse:
    envelope = Envelope.fail(ErrorCode.NOT_FOUND, f"No route for {request.path}.")
    return JsonResponse(envelope.to_wire(), status=404)


def server_error(request: HttpRequest) -> JsonResponse:
    logger.error("unhandled_server_error", path=request.path)
    envelope = Envelope.fail(ErrorCode.INTERNAL_ERROR)
    return JsonResponse(envelope.to_wire(), status=500)
