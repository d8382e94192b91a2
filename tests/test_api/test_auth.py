"""
Tests for session token decoding and audit actor attribution
"""
from unittest.mock import MagicMock, patch

import pytest
from fastapi import HTTPException
from fastapi.testclient import TestClient
from jose import jwt

from shopdesk.api.dependencies import get_discount_service
from shopdesk.core.auth import TokenUser, actor_of, decode_session_token
from shopdesk.core.config import settings
from shopdesk.main import app

SECRET = "test-jwt-secret"


def make_token(**claims):
    payload = {"sub": "6f1c1e2a-0000-4000-8000-000000000001", "role": "authenticated", "aud": "authenticated"}
    payload.update(claims)
    return jwt.encode(payload, SECRET, algorithm="HS256")


@pytest.fixture(autouse=True)
def jwt_secret():
    with patch.object(settings, 'SUPABASE_JWT_SECRET', SECRET):
        yield


class TestDecodeSessionToken:

    def test_valid_token(self):
        payload = decode_session_token(make_token(email="admin@shop.test"))
        assert payload["email"] == "admin@shop.test"

    def test_tampered_token(self):
        token = jwt.encode({"sub": "x"}, "another-secret", algorithm="HS256")
        with pytest.raises(HTTPException) as exc_info:
            decode_session_token(token)
        assert exc_info.value.status_code == 401

    def test_expired_token(self):
        with pytest.raises(HTTPException) as exc_info:
            decode_session_token(make_token(exp=1))
        assert exc_info.value.detail == "Token has expired"


class TestActor:

    def test_actor_prefers_email(self):
        assert actor_of(TokenUser(id="u1", email="admin@shop.test")) == "admin@shop.test"
        assert actor_of(TokenUser(id="u1")) == "u1"
        assert actor_of(None) is None

    def test_endpoint_passes_actor_from_token(self):
        service = MagicMock()
        service.clear_all_discounts.return_value = 0
        app.dependency_overrides[get_discount_service] = lambda: service
        try:
            client = TestClient(app)
            response = client.delete(
                "/api/v1/discounts",
                headers={"Authorization": f"Bearer {make_token(email='ops@shop.test')}"}
            )
        finally:
            app.dependency_overrides.clear()

        assert response.status_code == 200
        service.clear_all_discounts.assert_called_once_with(actor="ops@shop.test")

    def test_invalid_token_is_anonymous(self):
        service = MagicMock()
        service.clear_all_discounts.return_value = 0
        app.dependency_overrides[get_discount_service] = lambda: service
        try:
            response = TestClient(app).delete("/api/v1/discounts", headers={"Authorization": "Bearer garbage"})
        finally:
            app.dependency_overrides.clear()

        assert response.status_code == 200
        service.clear_all_discounts.assert_called_once_with(actor=None)
