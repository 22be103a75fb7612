"""
User Application Services
==========================
"""

from abc import ABC, abstractmethod
from datetime import datetime, timezone
from typing import List, Optional

from grievance_cell.config import VALID_ROLES, Role
from grievance_cell.core import (
    PermissionDeniedException,
    ResourceNotFoundException,
    ValidationException,
)
from grievance_cell.shared.infrastructure.logging import get_logger
from grievance_cell.users.domain import User

logger = get_logger(__name__)


# ========== Repository Interfaces ==========

class IUserRepository(ABC):
    """Interface for user profile storage."""

    @abstractmethod
    async def list_all(self) -> List[User]:
        """All users, ordered by email."""

    @abstractmethod
    async def get_by_id(self, user_id: str) -> Optional[User]:
        """Get user by id."""

    @abstractmethod
    async def save(self, user: User) -> User:
        """Insert or update a user."""

    @abstractmethod
    async def delete(self, user_id: str) -> bool:
        """Remove a user; False when it did not exist."""


# ========== Application Services ==========

class UserService:
    """Role administration."""

    def __init__(self, repository: IUserRepository, main_admin_email: Optional[str] = None):
        self._repository = repository
        self._main_admin_email = main_admin_email

    async def list_users(self) -> List[User]:
        return await self._repository.list_all()

    async def register(
        self,
        user_id: str,
        email: str,
        name: Optional[str] = None,
        hostel_type: Optional[str] = None
    ) -> User:
        """Create or refresh a profile after sign-up. New users are always students."""
        existing = await self._repository.get_by_id(user_id)
        now = datetime.now(timezone.utc)

        if existing is not None:
            existing.email = email
            existing.name = name or existing.name
            existing.updated_at = now
            return await self._repository.save(existing)

        user = User(
            id=user_id,
            email=email,
            name=name,
            role=Role.STUDENT,
            hostel_type=hostel_type,
            created_at=now,
            updated_at=now,
        )
        logger.info("User registered", extra={"user_id": user_id, "role": user.role})
        return await self._repository.save(user)

    async def _get(self, user_id: str) -> User:
        user = await self._repository.get_by_id(user_id)
        if user is None:
            raise ResourceNotFoundException("User", user_id)
        return user

    async def update_role(self, user_id: str, role: Optional[str], hostel_type: Optional[str] = None) -> User:
        """
        Change a user's role.

        Raises:
            ValidationException: role missing or unknown
            PermissionDeniedException: the user is the main admin
            ResourceNotFoundException: unknown user
        """
        if not role:
            raise ValidationException("Role is required")
        if role not in VALID_ROLES:
            raise ValidationException(f"Invalid role: {role}", {"allowed": VALID_ROLES})

        user = await self._get(user_id)
        if user.is_protected(self._main_admin_email):
            raise PermissionDeniedException("Cannot modify the main admin account.")

        user.role = role
        user.hostel_type = hostel_type or None
        user.updated_at = datetime.now(timezone.utc)

        logger.info("User role updated", extra={"user_id": user_id, "role": role})
        return await self._repository.save(user)

    async def delete_user(self, user_id: str) -> None:
        """
        Raises:
            PermissionDeniedException: the user is the main admin
            ResourceNotFoundException: unknown user
        """
        user = await self._get(user_id)
        if user.is_protected(self._main_admin_email):
            raise PermissionDeniedException("Cannot delete the main admin account.")

        await self._repository.delete(user_id)
        logger.info("User deleted", extra={"user_id": user_id})
