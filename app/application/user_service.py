"""User administration service. Admin-only operations; the API layer enforces the role."""

import logging
from typing import List, Optional
from uuid import UUID

from app.application.exceptions import ConflictError, InvalidOperationError, NotFoundError
from app.application.identity import actor_for
from app.audit.hooks import AuditedTaskRepository
from app.domain.models.user import DEFAULT_ROLES, Role
from app.domain.schemas.user import UserCreateRequest
from app.domain.validators.user_validator import normalize_email, validate_password, validate_roles
from app.infrastructure.database.models import UserRow
from app.infrastructure.database.user_repository_db import DbUserRepository
from app.security.passwords import hash_password


class UserService:
    def __init__(
        self,
        users: DbUserRepository,
        tasks: AuditedTaskRepository,
        logger: logging.Logger,
    ) -> None:
        self._users = users
        self._tasks = tasks
        self._logger = logger

    async def list_users(self) -> List[UserRow]:
        return await self._users.list_all()

    async def register(self, email: str, password: str, roles: Optional[List[str]] = None) -> UserRow:
        """Create a user with a hashed password. Raises ConflictError if the email is taken."""
        email = normalize_email(email)
        validate_password(password)
        roles = validate_roles(roles) if roles is not None else list(DEFAULT_ROLES)
        if await self._users.get_by_email(email) is not None:
            raise ConflictError("User already exists")
        return await self._users.add(
            UserRow(email=email, password_hash=hash_password(password), roles=roles)
        )

    async def create_user(self, admin: UserRow, request: UserCreateRequest) -> UserRow:
        user = await self.register(request.email, request.password, request.roles)
        self._logger.info(
            "user_created",
            extra={"created_user_id": str(user.id), "created_by": str(admin.id)},
        )
        return user

    async def change_roles(self, admin: UserRow, user_id: UUID, roles: List[str]) -> UserRow:
        roles = validate_roles(roles)
        user = await self._users.get(user_id)
        if user is None:
            raise NotFoundError("User not found")
        if user.id == admin.id and Role.ADMIN.value not in roles:
            raise InvalidOperationError("Cannot remove your own admin role")

        user.roles = roles
        user = await self._users.save(user)
        self._logger.info(
            "user_role_changed",
            extra={"target_user_id": str(user.id), "new_roles": roles, "changed_by": str(admin.id)},
        )
        return user

    async def delete_user(self, admin: UserRow, user_id: UUID) -> None:
        """Delete a user and their tasks. Each task deletion is audited as done by admin."""
        user = await self._users.get(user_id)
        if user is None:
            raise NotFoundError("User not found")
        if user.id == admin.id:
            raise InvalidOperationError("Cannot delete your own account")

        deleted_tasks = await self._tasks.delete_owned_by(user.id, actor=actor_for(admin))
        await self._users.remove(user)
        self._logger.info(
            "user_deleted",
            extra={
                "deleted_user_id": str(user_id),
                "deleted_by": str(admin.id),
                "deleted_tasks": deleted_tasks,
            },
        )
