"""Integration tests for SimpleJWT authentication.

Validates:
  - /health is public (plain Django view, no DRF).
  - Tokens are issued for valid credentials and accepted on /api/v1/me.
  - Protected DRF endpoints return an UNAUTHORIZED envelope otherwise.
"""

import pytest

pytestmark = pytest.mark.integration

TOKEN_URL = "/api/v1/auth/token"


class TestPublicEndpoints:
    def test_health_is_public(self, client):
        response = client.get("/health")
        assert response.status_code == 200
        assert response.json()["data"]["status"] == "healthy"


class TestTokenFlow:
    def test_obtain_and_use_token(self, api_client, user):
        response = api_client.post(
            TOKEN_URL, {"username": "clerk", "password": "testpass123"}, format="json"
        )
        assert response.status_code == 200
        access = response.json()["access"]

        api_client.credentials(HTTP_AUTHORIZATION=f"Bearer {access}")
        body = api_client.get("/api/v1/me").json()
        assert body["success"] is True
        assert body["data"]["username"] == "clerk"

    def test_wrong_password(self, api_client, user):
        response = api_client.post(
            TOKEN_URL, {"username": "clerk", "password": "nope"}, format="json"
        )
        assert response.status_code == 401
        body = response.json()
        assert body["success"] is False
        assert body["error"]["code"] == "UNAUTHORIZED"

    def test_refresh(self, api_client, user):
        tokens = api_client.post(
            TOKEN_URL, {"username": "clerk", "password": "testpass123"}, format="json"
        ).json()
        response = api_client.post(
            f"{TOKEN_URL}/refresh", {"refresh": tokens["refresh"]}, format="json"
        )
        assert response.status_code == 200
        assert "access" in response.json()


class TestProtectedEndpoints:
    """All DRF endpoints require a valid JWT by default (Fail Closed)."""

    def test_no_token_returns_401(self, api_client):
        response = api_client.get("/api/v1/me")
        assert response.status_code == 401
        assert response.json()["error"]["code"] == "UNAUTHORIZED"

    def test_invalid_token_returns_401(self, api_client):
        api_client.credentials(HTTP_AUTHORIZATION="Bearer invalid.token.here")
        response = api_client.get("/api/v1/me")
        assert response.status_code == 401
        assert response.json()["error"]["code"] == "UNAUTHORIZED"

    def test_malformed_auth_header_returns_401(self, api_client):
        api_client.credentials(HTTP_AUTHORIZATION="Token some-token")
        response = api_client.get("/api/v1/me")
        assert response.status_code == 401

    def test_401_includes_www_authenticate_header(self, api_client):
        response = api_client.get("/api/v1/me")
        assert response.status_code == 401
        assert "Bearer" in response.get("WWW-Authenticate", "")
