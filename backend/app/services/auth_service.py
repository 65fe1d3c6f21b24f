"""
Authentication Service Module
=============================

Login proxy for the console.

Passwords are verified by Supabase Auth. This service forwards the
credentials, then checks that the authenticated user has an active
profile before handing the tokens back to the caller.
"""

import uuid
from typing import Optional

from sqlalchemy.orm import Session

from app.core.exceptions import (
    AccountDisabledError,
    InvalidCredentialsError,
    ProfileMissingError,
    UpstreamServiceError,
)
from app.core.logging import get_logger, security_logger
from app.models.profile import UserProfile
from app.schemas.auth import TokenResponse
from app.schemas.user import UserResponse
from app.services.supabase_client import SupabaseAuthClient

# Initialize logger
logger = get_logger(__name__)


class AuthService:
    """
    Authentication operations.

    Usage:
        tokens = AuthService(db, auth_client).login(email, password, ip_address)
    """

    def __init__(self, db: Session, auth_client: SupabaseAuthClient):
        self.db = db
        self.auth_client = auth_client

    def login(self, email: str, password: str, ip_address: Optional[str] = None) -> TokenResponse:
        """
        Sign in with email and password.

        Raises:
            InvalidCredentialsError: If Supabase rejects the credentials
            ProfileMissingError: If the user has no profile
            AccountDisabledError: If the profile is disabled
        """
        try:
            session = self.auth_client.sign_in_with_password(email, password)
        except InvalidCredentialsError:
            security_logger.log_login_failed(email=email, ip_address=ip_address or "unknown")
            raise

        try:
            user_id = uuid.UUID(session["user"]["id"])
            access_token = session["access_token"]
        except (KeyError, TypeError, ValueError):
            logger.error("Unexpected sign-in response from auth provider")
            raise UpstreamServiceError("auth")

        profile = self.db.get(UserProfile, user_id)
        if profile is None:
            logger.warning("Login without profile", user_id=str(user_id))
            raise ProfileMissingError()
        if not profile.is_active:
            security_logger.log_login_failed(email=email, ip_address=ip_address or "unknown")
            raise AccountDisabledError()

        logger.info("User logged in", user_id=str(user_id), role=profile.role)

        return TokenResponse(
            access_token=access_token,
            refresh_token=session.get("refresh_token"),
            token_type=session.get("token_type", "bearer"),
            expires_in=session.get("expires_in"),
            user=UserResponse.model_validate(profile),
        )
