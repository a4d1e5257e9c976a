"""Task application service: the transaction boundary. Authorization, then an audited mutation."""

import logging
from typing import List, Optional
from uuid import UUID

from app.application.exceptions import NotFoundError
from app.application.identity import actor_for
from app.audit.hooks import AuditedTaskRepository
from app.domain.schemas.task import TaskCreateRequest, TaskUpdateRequest
from app.infrastructure.database.models import TaskRow, UserRow
from app.infrastructure.database.user_repository_db import DbUserRepository
from app.security.rbac import RBACService


class TaskService:
    """
    Application-layer orchestration only. No HTTP, no FastAPI.
    Users manage their own tasks; admins manage any task and may (re)assign owners.
    Updates go through two pathways: PUT applies an atomic update, PATCH
    mutates the loaded task and saves it.
    """

    def __init__(
        self,
        repository: AuditedTaskRepository,
        users: DbUserRepository,
        rbac: RBACService,
        logger: logging.Logger,
    ) -> None:
        self._repository = repository
        self._users = users
        self._rbac = rbac
        self._logger = logger

    async def list_tasks(self, user: UserRow, owner: Optional[UUID] = None) -> List[TaskRow]:
        """Own tasks for users; all tasks (optionally one owner's) for admins."""
        if self._rbac.is_allowed(user.roles, "view_all_tasks"):
            return await self._repository.list_tasks(owner)
        return await self._repository.list_tasks(user.id)

    async def get_task(self, user: UserRow, task_id: UUID) -> TaskRow:
        task = await self._repository.get(task_id)
        if task is None:
            raise NotFoundError("Task not found")
        self._rbac_owner_or_admin(user, task, "Not authorized to access this task")
        return task

    async def create_task(self, user: UserRow, request: TaskCreateRequest) -> TaskRow:
        owner_id = user.id
        if request.owner is not None:
            self._rbac.check_permission(
                user.roles, "assign_owner", "Only admins can assign tasks to other users"
            )
            owner_id = await self._existing_owner(request.owner)

        task = TaskRow(
            title=request.title,
            description=request.description or "",
            completed=False,
            owner_id=owner_id,
        )
        created = await self._repository.create(task, actor=actor_for(user))
        self._logger.info(
            "task_created",
            extra={"task_id": str(created.id), "user_id": str(user.id), "title": created.title},
        )
        return created

    async def update_task(self, user: UserRow, task_id: UUID, request: TaskUpdateRequest) -> TaskRow:
        """Atomic update: one find-and-update statement with the sent fields."""
        await self._authorized_for_change(user, task_id, request)
        payload = request.to_payload()
        if "owner_id" in payload:
            payload["owner_id"] = await self._existing_owner(payload["owner_id"])

        updated = await self._repository.update_where(
            {"id": task_id}, payload, actor=actor_for(user)
        )
        if updated is None:
            raise NotFoundError("Task not found")
        self._logger.info(
            "task_updated",
            extra={"task_id": str(task_id), "user_id": str(user.id), "changes": sorted(payload)},
        )
        return updated

    async def patch_task(self, user: UserRow, task_id: UUID, request: TaskUpdateRequest) -> TaskRow:
        """In-memory update: mutate the loaded task, then save it."""
        task = await self._authorized_for_change(user, task_id, request)
        payload = request.to_payload()
        if "owner_id" in payload:
            payload["owner_id"] = await self._existing_owner(payload["owner_id"])
        for name, value in payload.items():
            setattr(task, name, value)

        saved = await self._repository.save(task, actor=actor_for(user))
        self._logger.info(
            "task_updated",
            extra={"task_id": str(task_id), "user_id": str(user.id), "changes": sorted(payload)},
        )
        return saved

    async def delete_task(self, user: UserRow, task_id: UUID) -> None:
        task = await self._repository.get(task_id)
        if task is None:
            raise NotFoundError("Task not found")
        self._rbac_owner_or_admin(user, task, "Not authorized to delete this task")

        deleted = await self._repository.delete_where({"id": task_id}, actor=actor_for(user))
        if not deleted:
            raise NotFoundError("Task not found")
        self._logger.info("task_deleted", extra={"task_id": str(task_id), "user_id": str(user.id)})

    async def _authorized_for_change(
        self, user: UserRow, task_id: UUID, request: TaskUpdateRequest
    ) -> TaskRow:
        task = await self._repository.get(task_id)
        if task is None:
            raise NotFoundError("Task not found")
        self._rbac_owner_or_admin(user, task, "Not authorized to update this task")
        if request.owner is not None:
            self._rbac.check_permission(user.roles, "assign_owner", "Only admins can reassign tasks")
        return task

    def _rbac_owner_or_admin(self, user: UserRow, task: TaskRow, message: str) -> None:
        if task.owner_id == user.id:
            return
        self._rbac.check_permission(user.roles, "view_all_tasks", message)

    async def _existing_owner(self, owner_id: UUID) -> UUID:
        if await self._users.get(owner_id) is None:
            raise NotFoundError("Owner not found")
        return owner_id
