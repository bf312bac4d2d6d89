"""
User schemas.
"""

import uuid

from pydantic import BaseModel, ConfigDict, EmailStr, Field


class UserCreate(BaseModel):
    """User registration request. No credentials are issued here."""

    model_config = ConfigDict(populate_by_name=True)

    user_name: str = Field(..., min_length=1, max_length=255, alias="userName")
    email: EmailStr


class UserResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: uuid.UUID
    user_name: str
    email: str
