"""
Authentication Dependencies Module
==================================

FastAPI dependencies for authentication and caller extraction.

Features:
- Supabase access token validation
- Profile lookup for the token subject
- Account status verification

Usage:
    @router.get("/protected")
    def protected_route(user: UserProfile = Depends(get_current_user)):
        return {"user": user.email}
"""

from fastapi import Depends, Request
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from sqlalchemy.orm import Session

from app.core.exceptions import AuthenticationError, TokenExpiredError, TokenInvalidError
from app.core.logging import actor_id_context, get_logger, security_logger
from app.db.session import get_db
from app.models.profile import UserProfile
from app.services.token_service import TokenService

# Initialize logger
logger = get_logger(__name__)


# =====================================
# Bearer Scheme
# =====================================

bearer_scheme = HTTPBearer(
    auto_error=False,
    description="Supabase access token",
)


# =====================================
# Get Current User
# =====================================

def get_current_user(
    request: Request,
    credentials: HTTPAuthorizationCredentials | None = Depends(bearer_scheme),
    db: Session = Depends(get_db),
) -> UserProfile:
    """
    Validate the bearer token and return the caller's profile.

    Security checks performed:
    - Token signature validation
    - Token expiration check
    - Audience check
    - Profile existence and active status

    Raises:
        AuthenticationError: If the token is missing or invalid
        AuthorizationError: If the profile is missing or disabled
    """
    if credentials is None or not credentials.credentials:
        raise AuthenticationError("Not authenticated")

    try:
        profile = TokenService(db).authenticate(credentials.credentials)
    except (TokenInvalidError, TokenExpiredError) as e:
        security_logger.log_token_invalid(
            reason=e.details.get("reason", e.message),
            ip_address=request.client.host if request.client else "unknown",
        )
        raise

    # Set request context for logging
    request.state.user_id = str(profile.id)
    actor_id_context.set(str(profile.id))

    return profile

