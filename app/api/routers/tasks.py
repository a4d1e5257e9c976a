"""Tasks API router. Every mutation is audited with the caller as actor."""

from typing import Annotated, Optional
from uuid import UUID

from fastapi import APIRouter, Depends, Query

from app.api.dependencies import get_current_user, get_task_service
from app.application.task_service import TaskService
from app.domain.schemas.task import (
    TaskCreateRequest,
    TaskListResponse,
    TaskResponse,
    TaskUpdateRequest,
)
from app.infrastructure.database.models import UserRow

router = APIRouter()

CurrentUser = Annotated[UserRow, Depends(get_current_user)]
Tasks = Annotated[TaskService, Depends(get_task_service)]


@router.get("/", response_model=TaskListResponse)
async def list_tasks(
    user: CurrentUser,
    task_service: Tasks,
    owner: Annotated[Optional[UUID], Query()] = None,
):
    """Own tasks; admins see all tasks and may filter by owner."""
    tasks = await task_service.list_tasks(user, owner)
    return TaskListResponse(tasks=[TaskResponse.model_validate(t) for t in tasks])


@router.get("/{task_id}", response_model=TaskResponse)
async def get_task(task_id: UUID, user: CurrentUser, task_service: Tasks):
    return await task_service.get_task(user, task_id)


@router.post("/", response_model=TaskResponse, status_code=201)
async def create_task(body: TaskCreateRequest, user: CurrentUser, task_service: Tasks):
    return await task_service.create_task(user, body)


@router.put("/{task_id}", response_model=TaskResponse)
async def update_task(
    task_id: UUID, body: TaskUpdateRequest, user: CurrentUser, task_service: Tasks
):
    """Update in a single find-and-update statement."""
    return await task_service.update_task(user, task_id, body)


@router.patch("/{task_id}", response_model=TaskResponse)
async def patch_task(
    task_id: UUID, body: TaskUpdateRequest, user: CurrentUser, task_service: Tasks
):
    """Update by changing the loaded task and saving it."""
    return await task_service.patch_task(user, task_id, body)


@router.delete("/{task_id}")
async def delete_task(task_id: UUID, user: CurrentUser, task_service: Tasks):
    await task_service.delete_task(user, task_id)
    return {"detail": "Task deleted successfully"}
