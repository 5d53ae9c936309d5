"""Schemas for user profiles."""

import uuid
from datetime import date, datetime

from pydantic import BaseModel, ConfigDict, Field


class UserResponse(BaseModel):
    """Public user profile information."""

    id: uuid.UUID
    phone_number: str
    first_name: str
    last_name: str
    avatar_url: str | None = None
    bio: str | None = None
    date_of_birth: date | None = None
    verified: bool
    created_at: datetime

    model_config = ConfigDict(from_attributes=True)


class ProfileResponse(UserResponse):
    """The caller's own profile, with the roles they currently hold."""

    roles: list[str] = []


class ProfileUpdate(BaseModel):
    """Self-service profile edit. ``verified`` is deliberately absent."""

    first_name: str | None = Field(None, min_length=1, max_length=120)
    last_name: str | None = Field(None, min_length=1, max_length=120)
    avatar_url: str | None = Field(None, max_length=512)
    bio: str | None = None
    date_of_birth: date | None = None
