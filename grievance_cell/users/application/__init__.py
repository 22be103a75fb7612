"""
User Application Layer
=======================
"""

from grievance_cell.users.application.dto import (
    UserCreateRequest,
    RoleUpdateRequest,
    UserResponse,
    MessageResponse,
)
from grievance_cell.users.application.services import UserService, IUserRepository

__all__ = [
    "UserCreateRequest",
    "RoleUpdateRequest",
    "UserResponse",
    "MessageResponse",
    "UserService",
    "IUserRepository",
]
