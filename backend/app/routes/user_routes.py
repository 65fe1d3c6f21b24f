"""
User Management Routes Module
=============================

Administrative endpoints for console users.

Security:
- All endpoints require the admin role
- All actions are audit logged
- Admins cannot delete their own account
"""

from typing import Optional
from uuid import UUID

from fastapi import APIRouter, Depends, Query, status
from sqlalchemy.orm import Session

from app.core.dependencies.pagination import PageParams, get_page_params
from app.core.dependencies.rbac import require_admin
from app.core.logging import audit_logger, get_logger
from app.db.session import get_db
from app.models.profile import UserProfile
from app.models.role_enum import Role
from app.schemas import (
    COMMON_RESPONSES,
    ErrorResponse,
    Page,
    UserCreate,
    UserResponse,
    UserUpdate,
)
from app.services.supabase_client import SupabaseAuthClient, get_auth_client
from app.services.user_service import UserService

# Initialize logger
logger = get_logger(__name__)


# =====================================
# Router Setup
# =====================================

router = APIRouter(
    prefix="/users",
    tags=["Users"],
    responses=COMMON_RESPONSES,
)


def get_user_service(
    db: Session = Depends(get_db),
    auth_client: SupabaseAuthClient = Depends(get_auth_client),
) -> UserService:
    return UserService(db, auth_client)


# =====================================
# User Management Endpoints
# =====================================

@router.get(
    "",
    response_model=Page[UserResponse],
    summary="List Users",
    description="List console users. Requires admin role.",
)
def list_users(
    search: Optional[str] = Query(None, description="Name, email or CPF"),
    role: Optional[Role] = Query(None, description="Filter by role"),
    paging: PageParams = Depends(get_page_params),
    current_user: UserProfile = Depends(require_admin),
    service: UserService = Depends(get_user_service),
) -> Page[UserResponse]:
    rows, total = service.list_users(
        search=search,
        role=role,
        page=paging.page,
        page_size=paging.page_size,
    )
    return Page[UserResponse](
        items=[UserResponse.model_validate(row) for row in rows],
        total=total,
        page=paging.page,
        page_size=paging.page_size,
    )


@router.get(
    "/{user_id}",
    response_model=UserResponse,
    summary="Get User",
    responses={404: {"model": ErrorResponse, "description": "User not found"}},
)
def get_user(
    user_id: UUID,
    current_user: UserProfile = Depends(require_admin),
    service: UserService = Depends(get_user_service),
) -> UserResponse:
    return UserResponse.model_validate(service.get_user(user_id))


@router.post(
    "",
    response_model=UserResponse,
    status_code=status.HTTP_201_CREATED,
    summary="Create User",
    description="""
    Create a console user.

    The auth user is created first with a confirmed email, then the profile.
    If the profile cannot be saved the auth user is removed again.
    """,
    responses={
        409: {"model": ErrorResponse, "description": "Email already registered"},
        502: {"model": ErrorResponse, "description": "Auth provider failure"},
    },
)
def create_user(
    payload: UserCreate,
    current_user: UserProfile = Depends(require_admin),
    service: UserService = Depends(get_user_service),
) -> UserResponse:
    profile = service.create_user(payload)
    audit_logger.log_record_created("user", str(profile.id), str(current_user.id))
    return UserResponse.model_validate(profile)


@router.put(
    "/{user_id}",
    response_model=UserResponse,
    summary="Update User",
    description="Update name, CPF, institution, role and active flag, and optionally the password.",
    responses={
        404: {"model": ErrorResponse, "description": "User not found"},
        502: {"model": ErrorResponse, "description": "Auth provider failure"},
    },
)
def update_user(
    user_id: UUID,
    payload: UserUpdate,
    current_user: UserProfile = Depends(require_admin),
    service: UserService = Depends(get_user_service),
) -> UserResponse:
    profile = service.update_user(user_id, payload)
    audit_logger.log_record_updated(
        "user",
        str(user_id),
        str(current_user.id),
        changes={
            "role": profile.role,
            "is_active": profile.is_active,
            "password_changed": payload.new_password is not None,
        },
    )
    return UserResponse.model_validate(profile)


@router.delete(
    "/{user_id}",
    status_code=status.HTTP_204_NO_CONTENT,
    summary="Delete User",
    description="Delete the profile and the auth user. Admins cannot delete themselves.",
    responses={
        404: {"model": ErrorResponse, "description": "User not found"},
        422: {"model": ErrorResponse, "description": "Attempt to delete own account"},
    },
)
def delete_user(
    user_id: UUID,
    current_user: UserProfile = Depends(require_admin),
    service: UserService = Depends(get_user_service),
) -> None:
    service.delete_user(user_id, actor=current_user)
    audit_logger.log_record_deleted("user", str(user_id), str(current_user.id))
