"""
Authentication Routes Integration Tests
========================================

Integration tests for authentication endpoints including:
- POST /auth/login
- GET /auth/me
"""

import pytest
from fastapi.testclient import TestClient

from app.models.profile import UserProfile

from conftest import make_token


pytestmark = pytest.mark.integration


class TestLoginEndpoint:
    """Integration tests for POST /auth/login endpoint."""

    def test_login_success(self, client: TestClient, fake_supabase, operator_profile: UserProfile):
        """Test successful login with valid credentials."""
        # Arrange
        fake_supabase.add_user(operator_profile.email, "Senha12345", user_id=operator_profile.id)

        # Act
        response = client.post(
            "/auth/login",
            json={"email": operator_profile.email, "password": "Senha12345"},
        )

        # Assert
        assert response.status_code == 200
        data = response.json()
        assert data["access_token"]
        assert data["refresh_token"] == "refresh-token"
        assert data["token_type"] == "bearer"
        assert data["user"]["email"] == operator_profile.email
        assert data["user"]["role"] == "operator"

    def test_login_token_works_on_protected_routes(self, client: TestClient, fake_supabase,
                                                   operator_profile: UserProfile):
        fake_supabase.add_user(operator_profile.email, "Senha12345", user_id=operator_profile.id)
        token = client.post(
            "/auth/login",
            json={"email": operator_profile.email, "password": "Senha12345"},
        ).json()["access_token"]

        response = client.get("/clients", headers={"Authorization": f"Bearer {token}"})

        assert response.status_code == 200

    def test_login_invalid_password(self, client: TestClient, fake_supabase, operator_profile: UserProfile):
        """Test login with wrong password."""
        fake_supabase.add_user(operator_profile.email, "Senha12345", user_id=operator_profile.id)

        response = client.post(
            "/auth/login",
            json={"email": operator_profile.email, "password": "Errada"},
        )

        assert response.status_code == 401
        assert "Invalid" in response.json()["message"]

    def test_login_without_profile(self, client: TestClient, fake_supabase):
        fake_supabase.add_user("semperfil@inbm.com.br", "Senha12345")

        response = client.post(
            "/auth/login",
            json={"email": "semperfil@inbm.com.br", "password": "Senha12345"},
        )

        assert response.status_code == 403

    def test_login_disabled_account(self, client: TestClient, fake_supabase, inactive_profile: UserProfile):
        fake_supabase.add_user(inactive_profile.email, "Senha12345", user_id=inactive_profile.id)

        response = client.post(
            "/auth/login",
            json={"email": inactive_profile.email, "password": "Senha12345"},
        )

        assert response.status_code == 403
        assert "disabled" in response.json()["message"]

    def test_login_invalid_email_format(self, client: TestClient):
        response = client.post("/auth/login", json={"email": "not-an-email", "password": "x"})

        assert response.status_code == 422
        assert response.json()["details"]["errors"][0]["field"] == "body.email"


class TestMeEndpoint:
    """Integration tests for GET /auth/me endpoint."""

    def test_me_returns_profile(self, client: TestClient, supervisor_profile: UserProfile, supervisor_headers):
        response = client.get("/auth/me", headers=supervisor_headers)

        assert response.status_code == 200
        data = response.json()
        assert data["id"] == str(supervisor_profile.id)
        assert data["role"] == "supervisor"

    def test_me_without_token(self, client: TestClient):
        response = client.get("/auth/me")

        assert response.status_code == 401

    def test_me_with_expired_token(self, client: TestClient, operator_profile: UserProfile):
        token = make_token(operator_profile.id, operator_profile.email, expires_in=-60)

        response = client.get("/auth/me", headers={"Authorization": f"Bearer {token}"})

        assert response.status_code == 401

    def test_me_with_garbage_token(self, client: TestClient):
        response = client.get("/auth/me", headers={"Authorization": "Bearer not.a.jwt"})

        assert response.status_code == 401

    def test_me_disabled_account(self, client: TestClient, inactive_headers):
        response = client.get("/auth/me", headers=inactive_headers)

        assert response.status_code == 403
