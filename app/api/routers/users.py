"""Users API router (admin only): list, create, change role, delete."""

from typing import Annotated
from uuid import UUID

from fastapi import APIRouter, Depends

from app.api.dependencies import get_user_service, require_admin
from app.application.user_service import UserService
from app.domain.schemas.user import (
    RoleChangeRequest,
    UserCreateRequest,
    UserListResponse,
    UserResponse,
)
from app.infrastructure.database.models import UserRow

router = APIRouter()

Admin = Annotated[UserRow, Depends(require_admin)]
Users = Annotated[UserService, Depends(get_user_service)]


@router.get("/", response_model=UserListResponse)
async def list_users(admin: Admin, user_service: Users):
    users = await user_service.list_users()
    return UserListResponse(users=[UserResponse.model_validate(u) for u in users])


@router.post("/", response_model=UserResponse, status_code=201)
async def create_user(body: UserCreateRequest, admin: Admin, user_service: Users):
    return await user_service.create_user(admin, body)


@router.post("/{user_id}/role", response_model=UserResponse)
async def change_user_role(
    user_id: UUID, body: RoleChangeRequest, admin: Admin, user_service: Users
):
    return await user_service.change_roles(admin, user_id, body.roles)


@router.delete("/{user_id}")
async def delete_user(user_id: UUID, admin: Admin, user_service: Users):
    """Delete a user; their tasks are deleted (and audited) first."""
    await user_service.delete_user(admin, user_id)
    return {"detail": "User deleted successfully"}
