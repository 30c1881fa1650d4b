"""
Security tests for the authentication module.

Tests cover:
- Password strength validation (strong passwords, weak passwords, missing complexity)
- JWT security (missing secret key)
- Token expiration handling
- Profile lookup and admin-only access
"""
import jwt
import pytest
from unittest.mock import patch

from auth_utils import create_jwt, decode_jwt
from config import settings
from tests.conftest import expired_jwt


def test_strong_password_success(client):
    """
    A signup request with a strong, 12+ character password succeeds and
    sets the auth cookie.
    """
    response = client.post(
        "/api/auth/signup",
        json={
            "email": "test_strong@example.com",
            "password": "StrongPass123!",
            "firstName": "Sam",
            "lastName": "Lifter",
        }
    )

    assert response.status_code == 200
    response_data = response.json()
    assert response_data["ok"] is True
    assert "user_id" in response_data
    assert "auth_token" in response.cookies


def test_duplicate_email_rejected(client):
    payload = {"email": "dupe@example.com", "password": "StrongPass123!"}
    assert client.post("/api/auth/signup", json=payload).status_code == 200

    response = client.post("/api/auth/signup", json={**payload, "email": "DUPE@example.com"})
    assert response.status_code == 400
    assert "already registered" in response.json()["detail"].lower()


def test_weak_password_rejection_min_length(client):
    """
    Signup is rejected (HTTP 400) if the password is less than 12 characters.
    """
    response = client.post(
        "/api/auth/signup",
        json={"email": "test_short@example.com", "password": "ShortPass1!"}
    )

    assert response.status_code == 400
    response_data = response.json()
    assert "detail" in response_data
    assert "12 characters" in response_data["detail"].lower()


def test_weak_password_rejection_missing_complexity(client):
    """
    Signup is rejected (HTTP 400) if the password is 12+ characters but
    lacks complexity (e.g., no uppercase, no digit).
    """
    test_cases = [
        ("lowercasepass123!", "uppercase"),
        ("NOLOWERCASE123!", "lowercase"),
        ("NoDigitsSpecial!", "digit"),
        ("NoSpecialChars123", "special"),
    ]

    for password, missing_type in test_cases:
        response = client.post(
            "/api/auth/signup",
            json={"email": f"test_{missing_type}@example.com", "password": password}
        )

        assert response.status_code == 400, f"Password '{password}' should be rejected for missing {missing_type}"
        detail = response.json()["detail"].lower()
        assert missing_type in detail or "password must" in detail


def test_invalid_email_rejected(client):
    response = client.post(
        "/api/auth/signup",
        json={"email": "not-an-email", "password": "StrongPass123!"}
    )
    assert response.status_code == 400
    assert "email" in response.json()["detail"].lower()


def test_login_and_profile(client):
    client.post(
        "/api/auth/signup",
        json={"email": "member@example.com", "password": "StrongPass123!", "firstName": "Kim"}
    )

    bad = client.post("/api/auth/login", json={"email": "member@example.com", "password": "WrongPass123!"})
    assert bad.status_code == 401

    response = client.post("/api/auth/login", json={"email": "Member@Example.com", "password": "StrongPass123!"})
    assert response.status_code == 200
    token = response.cookies.get("auth_token")
    assert token

    me = client.get("/api/auth/me", headers={"Authorization": f"Bearer {token}"})
    assert me.status_code == 200
    user = me.json()["user"]
    assert user["email"] == "member@example.com"
    assert user["firstName"] == "Kim"
    assert user["role"] == "student"
    assert "hashedPassword" not in user


def test_missing_token_is_unauthorized(client):
    response = client.get("/api/auth/user")
    assert response.status_code == 401


def test_admin_stats_forbidden_for_member(client):
    signup = client.post(
        "/api/auth/signup",
        json={"email": "plain@example.com", "password": "StrongPass123!"}
    )
    token = create_jwt(signup.json()["user_id"])

    response = client.get("/api/admin/stats", headers={"Authorization": f"Bearer {token}"})
    assert response.status_code == 403


def test_jwt_security_missing_key():
    """
    create_jwt() raises a ValueError if settings.jwt_secret_key is None or
    an empty string.
    """
    with patch('auth_utils.settings.jwt_secret_key', None):
        with pytest.raises(ValueError, match="JWT_SECRET_KEY is not set"):
            create_jwt("test_user_id")

    with patch('auth_utils.settings.jwt_secret_key', ""):
        with pytest.raises(ValueError, match="JWT_SECRET_KEY is not set"):
            create_jwt("test_user_id")


def test_authentication_failure_expired_token(client):
    """
    An endpoint protected by get_current_user returns HTTP 401 when given an
    expired JWT, through either the cookie or the Authorization header.
    """
    if not settings.jwt_secret_key:
        pytest.skip("JWT_SECRET_KEY not set - cannot test expired token")

    signup_response = client.post(
        "/api/auth/signup",
        json={"email": "test_expired@example.com", "password": "TestPassword123!"}
    )
    assert signup_response.status_code == 200
    user_id = signup_response.json()["user_id"]

    expired_token = expired_jwt(user_id)

    response = client.get("/api/auth/me", cookies={"auth_token": expired_token})
    assert response.status_code == 401
    detail = response.json()["detail"].lower()
    assert "expired" in detail or "invalid" in detail

    response = client.get("/api/auth/me", headers={"Authorization": f"Bearer {expired_token}"})
    assert response.status_code == 401
    detail = response.json()["detail"].lower()
    assert "expired" in detail or "invalid" in detail


def test_decode_jwt_rejects_expired_and_tampered_tokens():
    token = create_jwt("member-1")
    assert decode_jwt(token)["sub"] == "member-1"

    assert decode_jwt(expired_jwt("member-1")) is None
    forged = jwt.encode({"sub": "member-1"}, "a-different-signing-secret-for-forgery", algorithm="HS256")
    assert decode_jwt(forged) is None
    assert decode_jwt("not-a-token") is None
