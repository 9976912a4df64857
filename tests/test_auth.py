import asyncio

import pytest
from fastapi import HTTPException
from starlette.requests import Request

from medbook.api.deps import rate_limit_check
from medbook.core.config import settings
from medbook.core.security import create_access_token, verify_token, UserRole, create_user_token

from .conftest import FakeRedis

# Test data
test_user_data = {
    "name": "Test User",
    "email": "test@example.com",
    "password": "TestPassword123",
    "role": "patient",
    "phone": "555-0199"
}

test_login_data = {
    "email": "test@example.com",
    "password": "TestPassword123"
}

class TestAuthentication:

    def test_register_user(self, client):
        """Test user registration."""
        response = client.post("/api/v1/auth/register", json=test_user_data)
        assert response.status_code == 201

        data = response.json()
        assert data["email"] == test_user_data["email"]
        assert data["role"] == "patient"
        assert "password" not in data
        assert "password_hash" not in data

    def test_register_doctor_keeps_profile(self, client):
        doctor_data = dict(test_user_data, role="doctor", specialization="Neurology", experience=7)
        response = client.post("/api/v1/auth/register", json=doctor_data)
        assert response.status_code == 201

        data = response.json()
        assert data["specialization"] == "Neurology"
        assert data["experience"] == 7

    def test_register_doctor_requires_specialization(self, client):
        response = client.post("/api/v1/auth/register", json=dict(test_user_data, role="doctor"))
        assert response.status_code == 422
        assert "specialization" in response.json()["message"]

    def test_register_patient_drops_doctor_fields(self, client):
        response = client.post(
            "/api/v1/auth/register",
            json=dict(test_user_data, specialization="Surgery", experience=3)
        )
        assert response.status_code == 201
        assert response.json()["specialization"] is None

    def test_register_duplicate_email(self, client):
        """Test registration with duplicate email."""
        client.post("/api/v1/auth/register", json=test_user_data)

        response = client.post("/api/v1/auth/register", json=test_user_data)
        assert response.status_code == 400
        assert "already registered" in response.json()["message"]

    def test_register_invalid_password(self, client):
        """Test registration with invalid password."""
        invalid_data = test_user_data.copy()
        invalid_data["password"] = "weak"

        response = client.post("/api/v1/auth/register", json=invalid_data)
        assert response.status_code == 422

    def test_register_unknown_role(self, client):
        response = client.post("/api/v1/auth/register", json=dict(test_user_data, role="admin"))
        assert response.status_code == 422

    def test_login_success(self, client):
        """Test successful login."""
        client.post("/api/v1/auth/register", json=test_user_data)

        response = client.post("/api/v1/auth/login", json=test_login_data)
        assert response.status_code == 200

        data = response.json()
        assert "access_token" in data
        assert data["token_type"] == "bearer"
        assert data["user"]["email"] == test_user_data["email"]

    def test_login_invalid_credentials(self, client):
        """Test login with invalid credentials."""
        invalid_login = {
            "email": "nonexistent@example.com",
            "password": "wrongpassword"
        }

        response = client.post("/api/v1/auth/login", json=invalid_login)
        assert response.status_code == 401
        assert response.json() == {"message": "Invalid email or password"}

    def test_login_wrong_password(self, client):
        """Test login with wrong password."""
        client.post("/api/v1/auth/register", json=test_user_data)

        wrong_login = test_login_data.copy()
        wrong_login["password"] = "wrongpassword"

        response = client.post("/api/v1/auth/login", json=wrong_login)
        assert response.status_code == 401

    def test_get_current_user(self, client):
        """Test getting current user info."""
        client.post("/api/v1/auth/register", json=test_user_data)
        login_response = client.post("/api/v1/auth/login", json=test_login_data)

        token = login_response.json()["access_token"]
        headers = {"Authorization": f"Bearer {token}"}

        response = client.get("/api/v1/auth/me", headers=headers)
        assert response.status_code == 200
        assert response.json()["email"] == test_user_data["email"]

    def test_get_current_user_invalid_token(self, client):
        """Test get current user with invalid token."""
        headers = {"Authorization": "Bearer invalid_token"}

        response = client.get("/api/v1/auth/me", headers=headers)
        assert response.status_code == 401
        assert "message" in response.json()

    def test_get_current_user_without_token(self, client):
        response = client.get("/api/v1/auth/me")
        assert response.status_code == 401

    def test_token_for_deleted_user_is_rejected(self, client):
        token = create_user_token(9999, "ghost@example.com", UserRole.PATIENT).access_token
        response = client.get("/api/v1/auth/me", headers={"Authorization": f"Bearer {token}"})
        assert response.status_code == 401
        assert response.json()["message"] == "User not found"


class TestTokens:

    def test_user_token_round_trip_claims(self):
        token = create_user_token(42, "p@example.com", UserRole.DOCTOR)
        payload = verify_token(token.access_token)

        assert payload.user_id == 42
        assert payload.role == "doctor"
        assert payload.token_type == "access"
        assert token.expires_in == settings.ACCESS_TOKEN_EXPIRE_MINUTES * 60

    def test_tampered_token_is_rejected(self):
        token = create_access_token({"sub": "1"})
        assert verify_token(token + "x") is None

    def test_non_numeric_subject_has_no_user_id(self):
        payload = verify_token(create_access_token({"sub": "abc"}))
        assert payload.user_id is None


class TestRateLimit:

    @staticmethod
    def _request():
        return Request({
            "type": "http",
            "method": "POST",
            "path": "/api/v1/auth/login",
            "headers": [],
            "query_string": b"",
            "client": ("10.0.0.1", 1234),
            "server": ("testserver", 80),
            "scheme": "http",
        })

    def test_blocks_after_limit(self, monkeypatch):
        monkeypatch.setattr(settings, "RATE_LIMIT_REQUESTS", 3)
        redis_client = FakeRedis()

        for _ in range(3):
            asyncio.run(rate_limit_check(self._request(), redis_client))

        with pytest.raises(HTTPException) as exc_info:
            asyncio.run(rate_limit_check(self._request(), redis_client))
        assert exc_info.value.status_code == 429
