import logging
import uuid

import pytest

from api_client.executor import REQUEST_ID_HEADER

pytestmark = pytest.mark.integration


@pytest.mark.parametrize(
    ("path", "status_code"),
    [("/health", 200), ("/api/v1/orders", 401), ("/api/v1/nowhere", 404)],
)
def test_request_id_is_echoed(client, path, status_code):
    response = client.get(path, HTTP_X_REQUEST_ID="req-42")
    assert response.status_code == status_code
    assert response[REQUEST_ID_HEADER] == "req-42"


def test_fresh_uuid4_when_header_missing(client):
    first = client.get("/health")[REQUEST_ID_HEADER]
    second = client.get("/health")[REQUEST_ID_HEADER]
    assert uuid.UUID(first).version == 4
    assert first != second


def test_request_id_bound_into_log_lines(client, caplog):
    with caplog.at_level(logging.INFO):
        client.get("/health", HTTP_X_REQUEST_ID="trace-me-789")
    messages = [record.getMessage() for record in caplog.records]
    assert any("trace-me-789" in message for message in messages), messages
