"""Request Executor: every HTTP call the client makes goes through here.

The executor never raises for request outcomes.  Whatever happens
(timeout, refused connection, non-2xx status, a body that is not an
envelope) the caller gets an ``Envelope`` back:

* transport failures become ``TIMEOUT`` / ``NETWORK_ERROR``, and a body
  that cannot be decoded becomes ``INTERNAL_ERROR``;
* a failed response that already carries an envelope is passed through;
* a failed response without one is classified from its status code;
* a successful non-envelope JSON body is wrapped as success and an empty
  body is a void success.

Nothing is retried.  A timed-out mutation may or may not have happened.
"""

from __future__ import annotations

import uuid
from functools import lru_cache
from typing import Any, Dict, List, Mapping, Optional, Tuple

import httpx
import structlog
from pydantic import BaseModel, TypeAdapter
from pydantic import ValidationError as PydanticValidationError

from api_client.config import ClientConfig
from shared.domain.envelope import Envelope, is_envelope_shaped, is_failure_envelope
from shared.domain.errors import STATUS_TO_ERROR_CODE, ErrorCode

logger = structlog.get_logger(__name__)

REQUEST_ID_HEADER = "X-Request-ID"
UPLOAD_TIMEOUT_FACTOR = 2

QueryParams = Mapping[str, Any]


class RequestExecutor:
    """Synchronous executor over a pooled ``httpx.Client``.

    ``transport`` is handed to httpx as-is; tests pass an
    ``httpx.MockTransport`` or an ``httpx.WSGITransport``.
    """

    def __init__(
        self,
        config: ClientConfig,
        transport: Optional[httpx.BaseTransport] = None,
    ) -> None:
        self._config = config
        self._client = httpx.Client(
            base_url=config.base_url,
            timeout=httpx.Timeout(config.timeout),
            headers={"Accept": "application/json"},
            transport=transport,
        )

    @property
    def config(self) -> ClientConfig:
        return self._config

    @property
    def upload_timeout(self) -> float:
        return self._config.timeout * UPLOAD_TIMEOUT_FACTOR

    # ------------------------------------------------------------------
    # Verbs
    # ------------------------------------------------------------------

    def get(
        self,
        path: str,
        params: Optional[QueryParams] = None,
        response_model: Any = None,
    ) -> Envelope:
        return self.request("GET", path, params=params, response_model=response_model)

    def post(
        self,
        path: str,
        body: Any = None,
        response_model: Any = None,
        headers: Optional[Mapping[str, str]] = None,
    ) -> Envelope:
        return self.request(
            "POST", path, body=body, response_model=response_model, headers=headers
        )

    def put(self, path: str, body: Any = None, response_model: Any = None) -> Envelope:
        return self.request("PUT", path, body=body, response_model=response_model)

    def patch(self, path: str, body: Any = None, response_model: Any = None) -> Envelope:
        return self.request("PATCH", path, body=body, response_model=response_model)

    def delete(self, path: str, response_model: Any = None) -> Envelope:
        return self.request("DELETE", path, response_model=response_model)

    def upload_file(
        self,
        path: str,
        file: Any,
        fields: Optional[Mapping[str, Any]] = None,
        response_model: Any = None,
    ) -> Envelope:
        """Multipart POST of ``file`` under the ``file`` part.

        ``file`` is anything httpx accepts for a part: a binary file object
        or a ``(filename, content, content_type)`` tuple.
        """
        return self.request(
            "POST",
            path,
            files={"file": file},
            data=dict(build_query_params(fields)),
            timeout=self.upload_timeout,
            response_model=response_model,
        )

    # ------------------------------------------------------------------
    # Core
    # ------------------------------------------------------------------

    def request(
        self,
        method: str,
        path: str,
        *,
        params: Optional[QueryParams] = None,
        body: Any = None,
        files: Optional[Dict[str, Any]] = None,
        data: Optional[Dict[str, str]] = None,
        timeout: Optional[float] = None,
        response_model: Any = None,
        headers: Optional[Mapping[str, str]] = None,
    ) -> Envelope:
        request_id = str(uuid.uuid4())
        log = logger.bind(method=method, path=path, request_id=request_id)

        try:
            response = self._client.request(
                method,
                path,
                params=build_query_params(params),
                json=_encode_body(body),
                files=files,
                data=data,
                headers=self._headers(request_id, headers),
                timeout=timeout if timeout is not None else self._config.timeout,
            )
        except httpx.TimeoutException as exc:
            envelope = Envelope.fail(ErrorCode.TIMEOUT, str(exc) or None)
        except httpx.TransportError as exc:
            envelope = Envelope.fail(ErrorCode.NETWORK_ERROR, str(exc) or None)
        except httpx.DecodingError as exc:
            envelope = Envelope.fail(ErrorCode.INTERNAL_ERROR, str(exc) or None)
        except httpx.RequestError as exc:
            envelope = Envelope.fail(ErrorCode.NETWORK_ERROR, str(exc) or None)
        else:
            envelope = envelope_from_response(response)

        if envelope.success and response_model is not None:
            envelope = _typed(envelope, response_model)

        if not envelope.success:
            log.warning(
                "api_client.request_failed",
                error_code=envelope.error.code.value,
                error_message=envelope.message,
            )
        return envelope

    def _headers(
        self, request_id: str, extra: Optional[Mapping[str, str]] = None
    ) -> Dict[str, str]:
        headers = dict(extra or {})
        headers[REQUEST_ID_HEADER] = request_id
        if self._config.token_provider is not None:
            token = self._config.token_provider()
            if token:
                headers["Authorization"] = f"Bearer {token}"
        return headers

    # ------------------------------------------------------------------
    # Lifecycle
    # ------------------------------------------------------------------

    def close(self) -> None:
        self._client.close()

    def __enter__(self) -> "RequestExecutor":
        return self

    def __exit__(self, *exc_info: Any) -> None:
        self.close()


# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------


def build_query_params(params: Optional[QueryParams]) -> List[Tuple[str, str]]:
    """Drop ``None`` and ``""``; keep ``0`` and ``False``; lowercase booleans."""
    if not params:
        return []
    pairs: List[Tuple[str, str]] = []
    for key, value in params.items():
        if value is None or value == "":
            continue
        if isinstance(value, bool):
            pairs.append((key, "true" if value else "false"))
        else:
            pairs.append((key, str(value)))
    return pairs


def envelope_from_response(response: httpx.Response) -> Envelope:
    """Classify a completed HTTP exchange into an ``Envelope``."""
    payload = _json_or_none(response)

    if response.is_success:
        if not response.content:
            return Envelope.ok(None, "OK")
        if is_envelope_shaped(payload):
            parsed = _parse_envelope(payload)
            if parsed is not None:
                return parsed
        return Envelope.ok(payload if payload is not None else response.text)

    if is_failure_envelope(payload):
        parsed = _parse_envelope(payload)
        if parsed is not None:
            return parsed

    code = STATUS_TO_ERROR_CODE.get(response.status_code)
    if code is not None:
        return Envelope.fail(code)
    return Envelope.fail(
        ErrorCode.INTERNAL_ERROR,
        f"Error {response.status_code}: {response.reason_phrase}",
    )


def _json_or_none(response: httpx.Response) -> Any:
    if not response.content:
        return None
    try:
        return response.json()
    except ValueError:
        return None


def _parse_envelope(payload: Dict[str, Any]) -> Optional[Envelope]:
    try:
        return Envelope.model_validate(payload)
    except PydanticValidationError:
        return None


def _encode_body(body: Any) -> Any:
    if body is None:
        return None
    if isinstance(body, BaseModel):
        return body.model_dump(mode="json", by_alias=True, exclude_none=True)
    return _adapter(Any).dump_python(body, mode="json")


@lru_cache(maxsize=None)
def _adapter(model: Any) -> TypeAdapter:
    return TypeAdapter(model)


def _typed(envelope: Envelope, model: Any) -> Envelope:
    if envelope.data is None:
        return envelope
    try:
        data = _adapter(model).validate_python(envelope.data)
    except PydanticValidationError as exc:
        logger.error("api_client.unexpected_payload", model=str(model), errors=exc.error_count())
        return Envelope.fail(ErrorCode.INTERNAL_ERROR, "Unexpected response payload.")
    return Envelope.ok(data, envelope.message)
