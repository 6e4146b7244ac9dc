"""
Tests for Supabase JWT verification.
"""

from unittest.mock import patch

import pytest
from fastapi import HTTPException

from conftest import generate_test_jwt


SECRET = "test-jwt-secret"


@pytest.fixture(autouse=True)
def auth_settings():
    from config.settings import get_settings_for_testing

    with patch("core.auth.get_settings", return_value=get_settings_for_testing(supabase_jwt_secret=SECRET)):
        yield


class TestVerifyJwt:

    def test_valid_token_returns_claims(self):
        from core.auth import extract_user, verify_jwt

        payload = verify_jwt(generate_test_jwt("user-42", secret=SECRET))
        user = extract_user(payload)

        assert user.id == "user-42"
        assert user.email == "user-42@test.com"
        assert user.role == "authenticated"
        assert user.is_anonymous is False

    def test_expired_token_rejected(self):
        from core.auth import verify_jwt

        with pytest.raises(HTTPException) as exc:
            verify_jwt(generate_test_jwt(exp_hours=-1, secret=SECRET))

        assert exc.value.status_code == 401
        assert exc.value.detail == "Token has expired"

    def test_wrong_secret_rejected(self):
        from core.auth import verify_jwt

        with pytest.raises(HTTPException) as exc:
            verify_jwt(generate_test_jwt(secret="some-other-secret"))

        assert exc.value.status_code == 401

    def test_wrong_audience_rejected(self):
        from core.auth import verify_jwt

        with pytest.raises(HTTPException) as exc:
            verify_jwt(generate_test_jwt(secret=SECRET, aud="anon"))

        assert exc.value.detail == "Invalid token audience"

    def test_unconfigured_secret_is_service_unavailable(self):
        from config.settings import get_settings_for_testing
        from core.auth import verify_jwt

        with patch("core.auth.get_settings", return_value=get_settings_for_testing(supabase_jwt_secret="")):
            with pytest.raises(HTTPException) as exc:
                verify_jwt(generate_test_jwt(secret=SECRET))

        assert exc.value.status_code == 503


class TestEnsureSameUser:

    def test_missing_claim_uses_token_subject(self):
        from core.auth import SupabaseUser, ensure_same_user

        assert ensure_same_user(SupabaseUser(id="u1"), None) == "u1"

    def test_matching_claim_accepted(self):
        from core.auth import SupabaseUser, ensure_same_user

        assert ensure_same_user(SupabaseUser(id="u1"), "u1") == "u1"

    def test_other_user_forbidden(self):
        from core.auth import SupabaseUser, ensure_same_user

        with pytest.raises(HTTPException) as exc:
            ensure_same_user(SupabaseUser(id="u1"), "u2")

        assert exc.value.status_code == 403


class TestRequireAuthEndpoint:
    """require_auth wired into the real app (no dependency override)."""

    def test_missing_header_is_401(self):
        from fastapi.testclient import TestClient
        from api.app import create_app

        client = TestClient(create_app())
        response = client.get("/api/wardrobe")

        assert response.status_code == 401

    def test_invalid_token_is_401(self):
        from fastapi.testclient import TestClient
        from api.app import create_app

        client = TestClient(create_app())
        response = client.get("/api/wardrobe", headers={"Authorization": "Bearer not-a-jwt"})

        assert response.status_code == 401
