"""
User Infrastructure Repositories
=================================
"""

from typing import List, Optional

from sqlalchemy import delete, select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from grievance_cell.core import ValidationException
from grievance_cell.users.application.services import IUserRepository
from grievance_cell.users.domain import User
from grievance_cell.users.infrastructure.models import UserModel


def _to_entity(model: UserModel) -> User:
    return User(
        id=model.id,
        email=model.email,
        name=model.name,
        role=model.role,
        hostel_type=model.hostel_type,
        created_at=model.created_at,
        updated_at=model.updated_at,
    )


class SQLAlchemyUserRepository(IUserRepository):
    """SQLAlchemy implementation for users."""

    def __init__(self, session: AsyncSession):
        self._session = session

    async def list_all(self) -> List[User]:
        result = await self._session.execute(select(UserModel).order_by(UserModel.email))
        return [_to_entity(m) for m in result.scalars().all()]

    async def get_by_id(self, user_id: str) -> Optional[User]:
        model = await self._session.get(UserModel, user_id)
        return _to_entity(model) if model else None

    async def save(self, user: User) -> User:
        model = await self._session.get(UserModel, user.id)
        if model is None:
            model = UserModel(id=user.id)
            self._session.add(model)

        model.email = user.email
        model.name = user.name
        model.role = user.role
        model.hostel_type = user.hostel_type
        if user.created_at is not None:
            model.created_at = user.created_at
        model.updated_at = user.updated_at

        try:
            await self._session.flush()
        except IntegrityError:
            raise ValidationException(f"Email already registered: {user.email}")
        return _to_entity(model)

    async def delete(self, user_id: str) -> bool:
        result = await self._session.execute(delete(UserModel).where(UserModel.id == user_id))
        return result.rowcount == 1
