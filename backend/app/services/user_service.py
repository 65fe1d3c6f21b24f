"""
User Management Service Module
==============================

Console user management. Credentials live in Supabase Auth and the
application data lives in ``profiles``, so every write touches both:

- create: auth user first, then the profile. A failed profile insert
  deletes the auth user again.
- update: the optional new password is applied through the admin API
  before the profile is saved.
- delete: the profile first, then the auth user.
"""

from typing import List, Optional, Tuple
from uuid import UUID

from sqlalchemy.orm import Session

from app.core.exceptions import ConflictError, InbmException, NotFoundError, ValidationError
from app.core.logging import get_logger
from app.core.query.query_filter import QueryFilter, paginate
from app.db.errors import commit_or_raise
from app.models.profile import UserProfile
from app.models.role_enum import Role
from app.schemas.common import digits_only
from app.schemas.user import UserCreate, UserUpdate
from app.services.supabase_client import SupabaseAuthClient

# Initialize logger
logger = get_logger(__name__)

EMAIL_CONFLICT = "A user with this email already exists"


class UserService:
    """
    User management operations.

    Usage:
        service = UserService(db, auth_client)
        profile = service.create_user(payload)
    """

    def __init__(self, db: Session, auth_client: SupabaseAuthClient):
        self.db = db
        self.auth_client = auth_client

    def list_users(
        self,
        search: Optional[str],
        role: Optional[Role],
        page: int,
        page_size: int,
    ) -> Tuple[List[UserProfile], int]:
        query = (
            QueryFilter(self.db.query(UserProfile))
            .search([UserProfile.full_name, UserProfile.email, UserProfile.cpf], search)
            .equals(UserProfile.role, role.value if role else None)
            .build()
            .order_by(UserProfile.full_name)
        )
        return paginate(query, page, page_size)

    def get_user(self, user_id: UUID) -> UserProfile:
        profile = self.db.get(UserProfile, user_id)
        if profile is None:
            raise NotFoundError(resource="User", identifier=str(user_id))
        return profile

    def create_user(self, data: UserCreate) -> UserProfile:
        """
        Create the auth user and its profile.

        Raises:
            ConflictError: If the email is already registered
            UpstreamServiceError: If Supabase Auth fails
        """
        email = data.email.lower()
        if self.db.query(UserProfile).filter(UserProfile.email == email).first() is not None:
            raise ConflictError(EMAIL_CONFLICT)

        auth_user_id = self.auth_client.create_user(
            email=email,
            password=data.password,
            metadata={"full_name": data.full_name},
        )

        profile = UserProfile(
            id=UUID(auth_user_id),
            full_name=data.full_name,
            email=email,
            cpf=digits_only(data.cpf),
            institution=data.institution,
            role=data.role.value,
            is_active=True,
        )
        self.db.add(profile)

        try:
            commit_or_raise(self.db, "User", EMAIL_CONFLICT)
        except Exception:
            self._discard_auth_user(auth_user_id)
            raise

        self.db.refresh(profile)
        logger.info("User created", user_id=auth_user_id, role=profile.role)
        return profile

    def update_user(self, user_id: UUID, data: UserUpdate) -> UserProfile:
        profile = self.get_user(user_id)

        if data.new_password:
            self.auth_client.update_user_password(str(user_id), data.new_password)
            logger.info("User password changed", user_id=str(user_id))

        profile.full_name = data.full_name.strip()
        profile.cpf = digits_only(data.cpf)
        profile.institution = data.institution
        profile.role = data.role.value
        profile.is_active = data.is_active

        commit_or_raise(self.db, "User")
        self.db.refresh(profile)

        logger.info("User updated", user_id=str(user_id), role=profile.role, is_active=profile.is_active)
        return profile

    def delete_user(self, user_id: UUID, actor: UserProfile) -> None:
        """
        Delete the profile and the auth user.

        Raises:
            ValidationError: If an admin tries to delete their own account
        """
        if user_id == actor.id:
            raise ValidationError("You cannot delete your own account", field="id")

        profile = self.get_user(user_id)
        self.db.delete(profile)
        commit_or_raise(self.db, "User", deleting=True)

        self.auth_client.delete_user(str(user_id))
        logger.info("User deleted", user_id=str(user_id))

    def _discard_auth_user(self, auth_user_id: str) -> None:
        try:
            self.auth_client.delete_user(auth_user_id)
            logger.warning("Auth user removed after failed profile insert", user_id=auth_user_id)
        except InbmException as e:
            logger.error(
                "Could not remove auth user after failed profile insert",
                user_id=auth_user_id,
                error=e.message,
            )
