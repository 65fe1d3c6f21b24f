"""
User Schemas Module
===================

Pydantic models for console user management.

Passwords are only forwarded to the auth provider and never stored or
returned by this service.
"""

from datetime import datetime
from typing import Optional
from uuid import UUID

from pydantic import BaseModel, ConfigDict, EmailStr, Field, field_validator, model_validator

from app.models.role_enum import Role
from app.schemas.common import blank_to_none


# ==========================
# Request Schemas
# ==========================

class UserCreate(BaseModel):
    """Schema for creating a console user (admin use)."""

    full_name: str = Field(
        ...,
        min_length=3,
        max_length=255,
        description="Full name"
    )
    email: EmailStr = Field(
        ...,
        description="Login email"
    )
    cpf: str = Field(
        ...,
        min_length=11,
        max_length=14,
        description="CPF, with or without punctuation"
    )
    institution: Optional[str] = Field(
        default=None,
        max_length=255,
        description="Institution the user works for"
    )
    password: str = Field(
        ...,
        min_length=8,
        max_length=128,
        description="Initial password"
    )
    confirm_password: str = Field(
        ...,
        description="Must equal password"
    )
    role: Role = Field(
        default=Role.OPERATOR,
        description="Console role"
    )

    blank_institution = field_validator("institution", mode="before")(blank_to_none)

    @field_validator("full_name")
    @classmethod
    def strip_name(cls, v: str) -> str:
        v = v.strip()
        if len(v) < 3:
            raise ValueError("Full name must have at least 3 characters")
        return v

    @model_validator(mode="after")
    def passwords_match(self) -> "UserCreate":
        if self.password != self.confirm_password:
            raise ValueError("Passwords do not match")
        return self

    model_config = ConfigDict(
        json_schema_extra={
            "example": {
                "full_name": "Maria Souza",
                "email": "maria@inbm.com.br",
                "cpf": "123.456.789-09",
                "institution": "INBM",
                "password": "SenhaSegura123",
                "confirm_password": "SenhaSegura123",
                "role": "operator"
            }
        }
    )


class UserUpdate(BaseModel):
    """Schema for updating a console user."""

    full_name: str = Field(..., min_length=3, max_length=255)
    cpf: str = Field(..., min_length=11, max_length=14)
    institution: Optional[str] = Field(default=None, max_length=255)
    role: Role
    is_active: bool = True
    new_password: Optional[str] = Field(
        default=None,
        description="Optional new password (min 8 characters)"
    )
    confirm_new_password: Optional[str] = None

    blank_fields = field_validator(
        "institution", "new_password", "confirm_new_password", mode="before"
    )(blank_to_none)

    @model_validator(mode="after")
    def validate_new_password(self) -> "UserUpdate":
        if self.new_password is None:
            return self
        if len(self.new_password) < 8:
            raise ValueError("New password must be at least 8 characters")
        if self.new_password != self.confirm_new_password:
            raise ValueError("New passwords do not match")
        return self


# ==========================
# Response Schemas
# ==========================

class UserResponse(BaseModel):
    """Profile response schema."""

    id: UUID = Field(..., description="Auth user id")
    full_name: str
    email: str
    cpf: Optional[str] = None
    institution: Optional[str] = None
    role: Role
    is_active: bool
    created_at: Optional[datetime] = None

    model_config = ConfigDict(
        from_attributes=True,
        json_schema_extra={
            "example": {
                "id": "550e8400-e29b-41d4-a716-446655440000",
                "full_name": "Maria Souza",
                "email": "maria@inbm.com.br",
                "cpf": "12345678909",
                "institution": "INBM",
                "role": "operator",
                "is_active": True,
                "created_at": "2024-01-15T10:30:00Z"
            }
        }
    )
