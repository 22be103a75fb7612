"""
User Controllers (API Routes)
==============================

Role administration for the admin dashboard.
"""

from typing import List

from fastapi import APIRouter, Depends, status
from sqlalchemy.ext.asyncio import AsyncSession

from grievance_cell.config import settings
from grievance_cell.infrastructure.database import get_session
from grievance_cell.users.application import (
    MessageResponse,
    RoleUpdateRequest,
    UserCreateRequest,
    UserResponse,
    UserService,
)
from grievance_cell.users.infrastructure import SQLAlchemyUserRepository

router = APIRouter(prefix="/api/users", tags=["Users"])


# ========== Dependencies ==========

async def get_user_service(session: AsyncSession = Depends(get_session)) -> UserService:
    return UserService(SQLAlchemyUserRepository(session), settings.main_admin_email)


# ========== Route Handlers ==========

@router.get("", response_model=List[UserResponse], summary="List users")
async def list_users(service: UserService = Depends(get_user_service)):
    return [UserResponse.model_validate(u) for u in await service.list_users()]


@router.post(
    "",
    response_model=UserResponse,
    status_code=status.HTTP_201_CREATED,
    summary="Register a profile after sign-up"
)
async def register_user(payload: UserCreateRequest, service: UserService = Depends(get_user_service)):
    user = await service.register(
        payload.id, payload.email, payload.name, payload.hostel_type
    )
    return UserResponse.model_validate(user)


@router.put(
    "/{user_id}/role",
    response_model=MessageResponse,
    summary="Change a user's role",
    responses={
        400: {"description": "Role missing or invalid"},
        403: {"description": "Main admin account"},
        404: {"description": "Unknown user"}
    }
)
async def update_user_role(
    user_id: str,
    payload: RoleUpdateRequest,
    service: UserService = Depends(get_user_service)
):
    await service.update_role(user_id, payload.role, payload.hostel_type)
    return MessageResponse(message="User role updated successfully")


@router.delete(
    "/{user_id}",
    response_model=MessageResponse,
    summary="Delete a user",
    responses={403: {"description": "Main admin account"}, 404: {"description": "Unknown user"}}
)
async def delete_user(user_id: str, service: UserService = Depends(get_user_service)):
    await service.delete_user(user_id)
    return MessageResponse(message="User deleted successfully")


# Export router for inclusion in main app
users_router = router
