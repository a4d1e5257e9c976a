"""Pydantic schemas for auth and user administration."""

from datetime import datetime
from typing import List, Optional
from uuid import UUID

from pydantic import BaseModel, Field


class Credentials(BaseModel):
    """Email/password pair for signup and login."""

    model_config = {"str_strip_whitespace": True}

    email: str = Field(..., min_length=1)
    password: str = Field(..., min_length=1)


class UserCreateRequest(Credentials):
    roles: Optional[List[str]] = None


class RoleChangeRequest(BaseModel):
    roles: List[str]


class UserResponse(BaseModel):
    id: UUID
    email: str
    roles: List[str]
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None

    model_config = {"from_attributes": True}


class UserListResponse(BaseModel):
    users: List[UserResponse]


class AuthResponse(BaseModel):
    user: UserResponse
    token: str
