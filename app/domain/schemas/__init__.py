"""Domain schemas. Request/response and validation."""

from app.domain.schemas.task import (
    TaskCreateRequest,
    TaskListResponse,
    TaskResponse,
    TaskUpdateRequest,
)
from app.domain.schemas.user import (
    AuthResponse,
    Credentials,
    RoleChangeRequest,
    UserCreateRequest,
    UserListResponse,
    UserResponse,
)

__all__ = [
    "AuthResponse",
    "Credentials",
    "RoleChangeRequest",
    "TaskCreateRequest",
    "TaskListResponse",
    "TaskResponse",
    "TaskUpdateRequest",
    "UserCreateRequest",
    "UserListResponse",
    "UserResponse",
]
