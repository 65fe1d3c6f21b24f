"""
Authentication Service Unit Tests
==================================

Tests for the AuthService login proxy covering:
- Successful sign-in through Supabase Auth
- Rejected credentials
- Missing and disabled profiles
- Malformed provider responses
"""

import httpx
import pytest
from sqlalchemy.orm import Session

from app.core.exceptions import (
    AccountDisabledError,
    InvalidCredentialsError,
    ProfileMissingError,
    UpstreamServiceError,
)
from app.models.profile import UserProfile
from app.services.auth_service import AuthService
from app.services.supabase_client import SupabaseAuthClient


pytestmark = pytest.mark.unit


class TestLogin:
    """Tests for AuthService.login."""

    def test_login_returns_tokens_and_profile(
        self, db_session: Session, auth_client, fake_supabase, operator_profile: UserProfile
    ):
        # Arrange
        fake_supabase.add_user(operator_profile.email, "Senha12345", user_id=operator_profile.id)

        # Act
        tokens = AuthService(db_session, auth_client).login(operator_profile.email, "Senha12345")

        # Assert
        assert tokens.access_token
        assert tokens.refresh_token == "refresh-token"
        assert tokens.token_type == "bearer"
        assert tokens.user.id == operator_profile.id
        assert tokens.user.role.value == "operator"

    def test_sign_in_uses_anon_key(self, db_session: Session, auth_client, fake_supabase, operator_profile):
        fake_supabase.add_user(operator_profile.email, "Senha12345", user_id=operator_profile.id)

        AuthService(db_session, auth_client).login(operator_profile.email, "Senha12345")

        request = fake_supabase.requests[-1]
        assert request.headers["apikey"] == "anon-key"
        assert request.url.params["grant_type"] == "password"

    def test_wrong_password(self, db_session: Session, auth_client, fake_supabase, operator_profile):
        fake_supabase.add_user(operator_profile.email, "Senha12345", user_id=operator_profile.id)

        with pytest.raises(InvalidCredentialsError):
            AuthService(db_session, auth_client).login(operator_profile.email, "errada")

    def test_user_without_profile(self, db_session: Session, auth_client, fake_supabase):
        """An auth user created outside the console has no access."""
        fake_supabase.add_user("solto@example.com", "Senha12345")

        with pytest.raises(ProfileMissingError):
            AuthService(db_session, auth_client).login("solto@example.com", "Senha12345")

    def test_disabled_profile(self, db_session: Session, auth_client, fake_supabase, inactive_profile):
        fake_supabase.add_user(inactive_profile.email, "Senha12345", user_id=inactive_profile.id)

        with pytest.raises(AccountDisabledError):
            AuthService(db_session, auth_client).login(inactive_profile.email, "Senha12345")

    def test_malformed_provider_response(self, db_session: Session):
        transport = httpx.MockTransport(lambda request: httpx.Response(200, json={"unexpected": True}))
        auth_client = SupabaseAuthClient(
            base_url="http://supabase.test", service_key="s", anon_key="a", transport=transport
        )

        with pytest.raises(UpstreamServiceError) as exc_info:
            AuthService(db_session, auth_client).login("ana@example.com", "Senha12345")

        assert exc_info.value.status_code == 502
