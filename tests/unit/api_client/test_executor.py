"""Unit tests for the Request Executor over ``httpx.MockTransport``."""

from __future__ import annotations

import json
from decimal import Decimal
from typing import List

import httpx
import pytest
from pydantic import BaseModel

from api_client.config import ClientConfig
from api_client.executor import REQUEST_ID_HEADER, RequestExecutor, build_query_params
from shared.domain.envelope import Envelope, Paginated
from shared.domain.errors import ErrorCode

pytestmark = pytest.mark.unit

BASE_URL = "http://api.test/api/v1"


class Widget(BaseModel):
    id: int
    price: Decimal


class Recorder:
    """Transport handler that records requests and replays one response."""

    def __init__(self, response: httpx.Response | None = None, error: Exception | None = None):
        self.response = response or httpx.Response(200, json={"success": True, "data": {}, "message": "OK", "error": None})
        self.error = error
        self.requests: List[httpx.Request] = []

    def __call__(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        if self.error is not None:
            raise self.error
        return self.response

    @property
    def last(self) -> httpx.Request:
        return self.requests[-1]


def _executor(handler, **config) -> RequestExecutor:
    cfg = ClientConfig(base_url=config.pop("base_url", BASE_URL), **config)
    return RequestExecutor(cfg, transport=httpx.MockTransport(handler))


def _failure(code: str, message: str) -> dict:
    return Envelope.fail(ErrorCode(code), message).to_wire()


class TestQueryParams:
    def test_empty_values_dropped_falsy_values_kept(self):
        assert build_query_params({"search": "", "page": 2, "active": False}) == [
            ("page", "2"),
            ("active", "false"),
        ]

    def test_none_dropped_zero_kept(self):
        assert build_query_params({"status": None, "minTotal": 0, "active": True}) == [
            ("minTotal", "0"),
            ("active", "true"),
        ]

    def test_no_params(self):
        assert build_query_params(None) == []

    def test_query_string_on_the_wire(self):
        recorder = Recorder()
        with _executor(recorder) as executor:
            executor.get("orders", {"search": "", "page": 2, "active": False})
        assert recorder.last.url.query == b"page=2&active=false"


class TestUrls:
    @pytest.mark.parametrize("path", ["orders/abc", "/orders/abc"])
    def test_joined_without_double_slash(self, path):
        recorder = Recorder()
        with _executor(recorder, base_url=BASE_URL + "/") as executor:
            executor.get(path)
        assert str(recorder.last.url) == "http://api.test/api/v1/orders/abc"


class TestTransportFailures:
    def test_timeout_becomes_envelope(self):
        recorder = Recorder(error=httpx.ReadTimeout("timed out"))
        with _executor(recorder) as executor:
            envelope = executor.get("orders")
        assert envelope.success is False
        assert envelope.data is None
        assert envelope.error.code is ErrorCode.TIMEOUT
        assert envelope.message == "timed out"

    def test_connect_error_becomes_network_error(self):
        recorder = Recorder(error=httpx.ConnectError("connection refused"))
        with _executor(recorder) as executor:
            envelope = executor.post("orders", {"customerId": "x"})
        assert envelope.error.code is ErrorCode.NETWORK_ERROR
        assert envelope.message == "connection refused"

    def test_transport_error_without_message_uses_fallback(self):
        recorder = Recorder(error=httpx.ConnectError(""))
        with _executor(recorder) as executor:
            envelope = executor.delete("orders/1")
        assert envelope.message == ErrorCode.NETWORK_ERROR.default_message

    def test_undecodable_body_becomes_internal_error(self):
        def handler(request):
            return httpx.Response(200, headers={"Content-Encoding": "gzip"}, content=b"not-gzip")

        with _executor(handler) as executor:
            envelope = executor.get("orders")
        assert envelope.success is False
        assert envelope.error.code is ErrorCode.INTERNAL_ERROR

    def test_too_many_redirects_becomes_network_error(self):
        def handler(request):
            raise httpx.TooManyRedirects("Exceeded maximum allowed redirects.", request=request)

        with _executor(handler) as executor:
            envelope = executor.get("orders")
        assert envelope.error.code is ErrorCode.NETWORK_ERROR
        assert envelope.message == "Exceeded maximum allowed redirects."


class TestFailureStatus:
    def test_envelope_body_is_passed_through(self):
        body = _failure("CONFLICT", "Email already registered.")
        recorder = Recorder(httpx.Response(409, json=body))
        with _executor(recorder) as executor:
            envelope = executor.post("customers", {})
        assert envelope.to_wire() == body

    @pytest.mark.parametrize(
        "status, code",
        [
            (400, ErrorCode.BAD_REQUEST),
            (401, ErrorCode.UNAUTHORIZED),
            (403, ErrorCode.FORBIDDEN),
            (404, ErrorCode.NOT_FOUND),
            (500, ErrorCode.INTERNAL_ERROR),
        ],
    )
    def test_status_map(self, status, code):
        recorder = Recorder(httpx.Response(status, text="<html>nope</html>"))
        with _executor(recorder) as executor:
            envelope = executor.get("orders")
        assert envelope.error.code is code
        assert envelope.message == code.default_message

    def test_unmapped_status(self):
        recorder = Recorder(httpx.Response(502, json={"detail": "bad gateway"}))
        with _executor(recorder) as executor:
            envelope = executor.get("orders")
        assert envelope.error.code is ErrorCode.INTERNAL_ERROR
        assert envelope.message == "Error 502: Bad Gateway"

    def test_malformed_envelope_is_classified_by_status(self):
        body = {"success": False, "message": "x", "error": {"code": "WHATEVER"}}
        recorder = Recorder(httpx.Response(404, json=body))
        with _executor(recorder) as executor:
            envelope = executor.get("orders/1")
        assert envelope.error.code is ErrorCode.NOT_FOUND


class TestSuccessStatus:
    def test_envelope_body(self):
        body = Envelope.ok({"id": 1}, "Found.").to_wire()
        recorder = Recorder(httpx.Response(200, json=body))
        with _executor(recorder) as executor:
            envelope = executor.get("orders/1")
        assert envelope.success is True
        assert envelope.data == {"id": 1}
        assert envelope.message == "Found."

    def test_plain_json_is_wrapped(self):
        recorder = Recorder(httpx.Response(200, json=[1, 2, 3]))
        with _executor(recorder) as executor:
            envelope = executor.get("numbers")
        assert envelope.success is True
        assert envelope.data == [1, 2, 3]

    def test_empty_body_is_void_success(self):
        recorder = Recorder(httpx.Response(204))
        with _executor(recorder) as executor:
            envelope = executor.delete("orders/1")
        assert envelope.success is True
        assert envelope.data is None
        assert envelope.error is None

    def test_typed_response(self):
        body = Envelope.ok({"id": 7, "price": "9.90"}).to_wire()
        recorder = Recorder(httpx.Response(200, json=body))
        with _executor(recorder) as executor:
            envelope = executor.get("widgets/7", response_model=Widget)
        assert envelope.data == Widget(id=7, price=Decimal("9.90"))

    def test_typed_page(self):
        page = {"items": [{"id": 1, "price": "1.00"}], "total": 41, "page": 3, "pageSize": 20}
        recorder = Recorder(httpx.Response(200, json=Envelope.ok(page).to_wire()))
        with _executor(recorder) as executor:
            envelope = executor.get("widgets", {"page": 3}, Paginated[Widget])
        assert envelope.data.total == 41
        assert envelope.data.page_size == 20
        assert envelope.data.items[0].price == Decimal("1.00")

    def test_unexpected_payload_becomes_internal_error(self):
        body = Envelope.ok({"id": "seven"}).to_wire()
        recorder = Recorder(httpx.Response(200, json=body))
        with _executor(recorder) as executor:
            envelope = executor.get("widgets/7", response_model=Widget)
        assert envelope.success is False
        assert envelope.error.code is ErrorCode.INTERNAL_ERROR


class TestRequests:
    def test_body_is_json_with_decimals_as_strings(self):
        recorder = Recorder()
        with _executor(recorder) as executor:
            executor.patch("orders/1", {"taxAmount": Decimal("1.50")})
        assert json.loads(recorder.last.content) == {"taxAmount": "1.50"}
        assert recorder.last.method == "PATCH"

    def test_pydantic_body_uses_aliases_and_skips_none(self):
        from api_client.models import UpdateOrderRequest

        recorder = Recorder()
        with _executor(recorder) as executor:
            executor.put("orders/1", UpdateOrderRequest(notes="hi", shipping_amount=Decimal("2.00")))
        assert json.loads(recorder.last.content) == {"notes": "hi", "shippingAmount": "2.00"}

    def test_bearer_token_from_provider(self):
        recorder = Recorder()
        with _executor(recorder, token_provider=lambda: "abc.def") as executor:
            executor.get("me")
        assert recorder.last.headers["Authorization"] == "Bearer abc.def"

    def test_no_token_no_header(self):
        recorder = Recorder()
        with _executor(recorder, token_provider=lambda: None) as executor:
            executor.get("me")
        assert "Authorization" not in recorder.last.headers

    def test_fresh_request_id_per_call(self):
        recorder = Recorder()
        with _executor(recorder) as executor:
            executor.get("orders")
            executor.get("orders")
        ids = [r.headers[REQUEST_ID_HEADER] for r in recorder.requests]
        assert len(set(ids)) == 2

    def test_extra_headers_are_sent(self):
        recorder = Recorder()
        with _executor(recorder, token_provider=lambda: "abc.def") as executor:
            executor.post("orders", {"customerId": "x"}, headers={"Idempotency-Key": "key-1"})
        assert recorder.last.headers["Idempotency-Key"] == "key-1"
        assert recorder.last.headers["Authorization"] == "Bearer abc.def"


class TestTimeouts:
    def test_call_timeout_is_configured_timeout(self):
        recorder = Recorder()
        with _executor(recorder, timeout=7) as executor:
            executor.get("orders")
        assert recorder.last.extensions["timeout"]["read"] == 7

    def test_upload_timeout_is_exactly_twice(self):
        recorder = Recorder()
        with _executor(recorder, timeout=12.5) as executor:
            assert executor.upload_timeout == 25.0
            executor.upload_file("products/1/images/upload", ("a.png", b"png", "image/png"))
        assert recorder.last.extensions["timeout"]["read"] == 25.0

    def test_upload_is_multipart_with_fields(self):
        recorder = Recorder()
        with _executor(recorder) as executor:
            executor.upload_file(
                "products/1/images/upload",
                ("a.png", b"png-bytes", "image/png"),
                fields={"altText": "Front", "isPrimary": True, "sortOrder": None},
            )
        request = recorder.last
        assert request.headers["Content-Type"].startswith("multipart/form-data")
        content = request.read()
        assert b'name="file"; filename="a.png"' in content
        assert b'name="altText"' in content
        assert b'name="sortOrder"' not in content


class TestConfig:
    def test_defaults(self):
        config = ClientConfig(base_url=BASE_URL)
        assert config.timeout == 30.0
        assert config.token_provider is None

    def test_rejects_relative_base_url(self):
        with pytest.raises(ValueError):
            ClientConfig(base_url="/api/v1")

    def test_rejects_non_positive_timeout(self):
        with pytest.raises(ValueError):
            ClientConfig(base_url=BASE_URL, timeout=0)

    def test_from_env(self, monkeypatch):
        monkeypatch.setenv("STOREFRONT_API_URL", "https://shop.example.com/api/v1")
        monkeypatch.setenv("STOREFRONT_API_TIMEOUT", "5")
        config = ClientConfig.from_env()
        assert config.base_url == "https://shop.example.com/api/v1"
        assert config.timeout == 5.0
