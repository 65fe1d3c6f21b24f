"""
Token Verification Service
==========================

Verifies access tokens issued by Supabase Auth and resolves the
caller's profile.

Supabase signs access tokens with the project JWT secret (HS256). The
``sub`` claim is the auth user id, which is also the primary key of
``profiles``.
"""

import uuid
from typing import Any, Dict

from jose import ExpiredSignatureError, JWTError, jwt
from pydantic import ValidationError as PydanticValidationError
from sqlalchemy.orm import Session

from app.core.config import settings
from app.core.exceptions import (
    AccountDisabledError,
    ProfileMissingError,
    TokenExpiredError,
    TokenInvalidError,
)
from app.core.logging import get_logger
from app.models.profile import UserProfile
from app.schemas.auth import TokenPayload

logger = get_logger(__name__)


class TokenService:
    """
    Validates bearer tokens and loads the matching profile.

    Usage:
        profile = TokenService(db).authenticate(token)
    """

    def __init__(self, db: Session):
        self.db = db

    @staticmethod
    def decode_token(token: str) -> TokenPayload:
        """
        Decode and verify a Supabase access token.

        Raises:
            TokenExpiredError: If the token has expired
            TokenInvalidError: If signature, audience or claims are invalid
        """
        try:
            claims: Dict[str, Any] = jwt.decode(
                token,
                settings.SUPABASE_JWT_SECRET,
                algorithms=[settings.JWT_ALGORITHM],
                audience=settings.SUPABASE_JWT_AUDIENCE,
            )
        except ExpiredSignatureError:
            raise TokenExpiredError()
        except JWTError as e:
            raise TokenInvalidError(reason=str(e))

        if not claims.get("sub"):
            raise TokenInvalidError(reason="missing subject")

        try:
            return TokenPayload.model_validate(claims)
        except PydanticValidationError:
            raise TokenInvalidError(reason="malformed claims")

    def authenticate(self, token: str) -> UserProfile:
        """
        Verify the token and return the active profile of its subject.

        Raises:
            TokenInvalidError: If the token is invalid
            ProfileMissingError: If no profile exists for the subject
            AccountDisabledError: If the profile is disabled
        """
        payload = self.decode_token(token)

        try:
            user_id = uuid.UUID(payload.sub)
        except ValueError:
            raise TokenInvalidError(reason="subject is not a user id")

        profile = self.db.get(UserProfile, user_id)
        if profile is None:
            logger.warning("Token subject has no profile", user_id=payload.sub)
            raise ProfileMissingError()

        if not profile.is_active:
            raise AccountDisabledError()

        return profile
