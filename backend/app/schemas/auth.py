"""
Authentication Schemas Module
=============================

Pydantic models for the login proxy and for the Supabase access token
payload.
"""

from typing import List, Optional, Union

from pydantic import BaseModel, ConfigDict, EmailStr, Field

from app.schemas.user import UserResponse


# ==========================
# Login Schemas
# ==========================

class LoginRequest(BaseModel):
    """Login request schema."""

    email: EmailStr = Field(
        ...,
        description="User email address",
        examples=["operador@inbm.com.br"]
    )
    password: str = Field(
        ...,
        min_length=1,
        description="User password",
    )

    model_config = ConfigDict(
        json_schema_extra={
            "example": {
                "email": "operador@inbm.com.br",
                "password": "SenhaSegura123"
            }
        }
    )


class TokenResponse(BaseModel):
    """Tokens issued by the auth provider, plus the caller's profile."""

    access_token: str = Field(
        ...,
        description="Supabase access token (JWT)"
    )
    refresh_token: Optional[str] = Field(
        default=None,
        description="Supabase refresh token"
    )
    token_type: str = Field(
        default="bearer",
        description="Token type"
    )
    expires_in: Optional[int] = Field(
        default=None,
        description="Access token lifetime in seconds"
    )
    user: Optional[UserResponse] = None

    model_config = ConfigDict(
        json_schema_extra={
            "example": {
                "access_token": "eyJhbGciOiJIUzI1NiIsInR5cCI6IkpXVCJ9...",
                "refresh_token": "v1.MjQ2Zjg...",
                "token_type": "bearer",
                "expires_in": 3600
            }
        }
    )


# ==========================
# Token Payload Schemas
# ==========================

class TokenPayload(BaseModel):
    """Claims of a Supabase access token used by this service."""

    sub: str  # Auth user id
    exp: int
    aud: Optional[Union[str, List[str]]] = None
    email: Optional[str] = None
    role: Optional[str] = None  # Postgres role, "authenticated"
