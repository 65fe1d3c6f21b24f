"""
Schemas Package Initialization
==============================

Exports the Pydantic schemas shared across routers.

Usage:
    from app.schemas import Page, ErrorResponse, LoginRequest
"""

from app.schemas.common import (
    COMMON_RESPONSES,
    ErrorResponse,
    MessageResponse,
    Page,
    ValidationErrorResponse,
)
from app.schemas.auth import LoginRequest, TokenPayload, TokenResponse
from app.schemas.user import UserCreate, UserResponse, UserUpdate

__all__ = [
    "COMMON_RESPONSES",
    "ErrorResponse",
    "MessageResponse",
    "Page",
    "ValidationErrorResponse",
    "LoginRequest",
    "TokenPayload",
    "TokenResponse",
    "UserCreate",
    "UserResponse",
    "UserUpdate",
]
