"""
User Profile Model
==================

Application-side record of a Supabase auth user.

The auth provider owns credentials and sessions. The ``profiles`` row
holds everything this backend needs to authorize a request: the role,
the active flag and display data.

Database Indexes:
- Primary key: id (UUID, equal to the auth user id)
- Unique index: email
- Index: role
"""

import uuid
from datetime import datetime
from typing import Optional

from sqlalchemy import (
    String,
    Boolean,
    DateTime,
    Index,
    Uuid,
)
from sqlalchemy.sql import func
from sqlalchemy.orm import Mapped, mapped_column

from app.db.base import Base
from app.models.role_enum import Role


class UserProfile(Base):
    """
    Profile of a console user.

    Attributes:
        id: Supabase auth user id
        full_name: Display name
        email: Login email, mirrored from the auth provider
        cpf: Individual tax id
        institution: Optional institution the user works for
        role: One of admin, supervisor, operator, client
        is_active: Disabled profiles are rejected even with a valid token
        created_at: Creation timestamp
    """

    __tablename__ = "profiles"

    def __init__(self, **kwargs):
        """Initialize profile with Python-level defaults."""
        if "role" not in kwargs:
            kwargs["role"] = Role.CLIENT.value
        if "is_active" not in kwargs:
            kwargs["is_active"] = True
        super().__init__(**kwargs)

    # ==========================
    # Primary Key
    # ==========================
    id: Mapped[uuid.UUID] = mapped_column(
        Uuid,
        primary_key=True,
    )

    # ==========================
    # Identity
    # ==========================
    full_name: Mapped[str] = mapped_column(String(255), nullable=False)

    email: Mapped[str] = mapped_column(
        String(255),
        unique=True,
        nullable=False,
        index=True,
    )

    cpf: Mapped[Optional[str]] = mapped_column(String(14), nullable=True)

    institution: Mapped[Optional[str]] = mapped_column(String(255), nullable=True)

    # ==========================
    # Authorization
    # ==========================
    role: Mapped[str] = mapped_column(
        String(20),
        nullable=False,
        default=Role.CLIENT.value,
    )

    is_active: Mapped[bool] = mapped_column(
        Boolean,
        default=True,
        nullable=False,
    )

    # ==========================
    # Timestamps
    # ==========================
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        server_default=func.now(),
        nullable=False,
    )

    __table_args__ = (
        Index("ix_profiles_role", "role"),
    )

    def __repr__(self) -> str:
        return f"<UserProfile(id={self.id}, email={self.email}, role={self.role})>"

    @property
    def role_enum(self) -> Role:
        return Role(self.role)
