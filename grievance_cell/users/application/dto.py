"""
User Application DTOs
======================
"""

from datetime import datetime
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel


class UserCreateRequest(BaseModel):
    """Profile written after sign-up. Roles are granted by an admin, never self-assigned."""
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True, str_strip_whitespace=True)

    id: str = Field(..., min_length=1, max_length=128, description="Identity provider uid")
    email: str = Field(..., min_length=3, max_length=255)
    name: Optional[str] = Field(None, max_length=255)
    hostel_type: Optional[str] = Field(None, max_length=64)


class RoleUpdateRequest(BaseModel):
    """Role change; role is validated by the service so a missing one reports 400."""
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    role: Optional[str] = None
    hostel_type: Optional[str] = Field(None, max_length=64)


class UserResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: str
    email: str
    name: Optional[str] = None
    role: str
    hostel_type: Optional[str] = None
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None


class MessageResponse(BaseModel):
    message: str
