"""
Authentication Routes Module
============================

Handles:
- Login proxied to Supabase Auth
- Current user profile

Security Features:
- Credentials are verified by Supabase, never stored here
- Login is rate limited per IP by the middleware
- Failed attempts are security logged
"""

from fastapi import APIRouter, Depends, Request
from sqlalchemy.orm import Session

from app.core.dependencies.auth import get_current_user
from app.core.logging import get_logger
from app.db.session import get_db
from app.models.profile import UserProfile
from app.schemas import ErrorResponse, LoginRequest, TokenResponse, UserResponse
from app.services.auth_service import AuthService
from app.services.supabase_client import SupabaseAuthClient, get_auth_client

# Initialize logger
logger = get_logger(__name__)


# =====================================
# Router Setup
# =====================================

router = APIRouter(
    prefix="/auth",
    tags=["Authentication"],
    responses={
        401: {"model": ErrorResponse, "description": "Authentication failed"},
        403: {"model": ErrorResponse, "description": "Access forbidden"},
        500: {"model": ErrorResponse, "description": "Internal server error"},
    },
)


# =====================================
# Login Endpoint
# =====================================

@router.post(
    "/login",
    response_model=TokenResponse,
    summary="User Login",
    description="""
    Authenticate with email and password.

    Credentials are checked by Supabase Auth. The returned access token
    must be sent as `Authorization: Bearer <token>` on every other call.

    - Rate limited per IP
    - The account must have an active profile
    """,
    responses={
        200: {"description": "Successfully authenticated"},
        401: {"model": ErrorResponse, "description": "Invalid credentials"},
        403: {"model": ErrorResponse, "description": "Profile missing or disabled"},
        429: {"model": ErrorResponse, "description": "Too many requests"},
        502: {"model": ErrorResponse, "description": "Auth provider failure"},
    },
)
def login(
    request: Request,
    login_data: LoginRequest,
    db: Session = Depends(get_db),
    auth_client: SupabaseAuthClient = Depends(get_auth_client),
) -> TokenResponse:
    """
    Authenticate the user and return the provider's tokens.

    Args:
        request: FastAPI request object
        login_data: Login credentials
        db: Database session
        auth_client: Supabase Auth client

    Returns:
        Token response with the caller's profile
    """
    client_ip = request.client.host if request.client else "unknown"
    return AuthService(db, auth_client).login(
        email=login_data.email,
        password=login_data.password,
        ip_address=client_ip,
    )


# =====================================
# Current User Endpoint
# =====================================

@router.get(
    "/me",
    response_model=UserResponse,
    summary="Get Current User",
    description="Get the profile of the currently authenticated user.",
    responses={
        200: {"description": "Current user profile"},
        401: {"model": ErrorResponse, "description": "Not authenticated"},
    },
)
def get_me(
    current_user: UserProfile = Depends(get_current_user),
) -> UserResponse:
    return UserResponse.model_validate(current_user)
