"""Audit log API router (admin only): filtered, paginated trail; per-task history."""

from typing import Annotated, Optional
from uuid import UUID

from fastapi import APIRouter, Depends, Query

from app.api.dependencies import get_audit_query_service, get_rbac, get_current_user
from app.application.audit_query_service import AuditFilters, AuditQueryService
from app.audit.models import ChangeKind
from app.domain.schemas.audit import (
    AuditLogListResponse,
    AuditLogPageResponse,
    AuditRecordResponse,
    PaginationResponse,
)
from app.infrastructure.database.models import UserRow
from app.security.rbac import RBACService

router = APIRouter()


def require_audit_reader(
    user: Annotated[UserRow, Depends(get_current_user)],
    rbac: Annotated[RBACService, Depends(get_rbac)],
) -> UserRow:
    rbac.check_permission(user.roles, "view_audit_logs", "Admin access required")
    return user


Reader = Annotated[UserRow, Depends(require_audit_reader)]
Audit = Annotated[AuditQueryService, Depends(get_audit_query_service)]


@router.get("/", response_model=AuditLogPageResponse)
async def list_audit_logs(
    reader: Reader,
    audit_service: Audit,
    entity_type: Annotated[Optional[str], Query()] = None,
    task_id: Annotated[Optional[UUID], Query()] = None,
    user_id: Annotated[Optional[UUID], Query()] = None,
    change_type: Annotated[Optional[ChangeKind], Query()] = None,
    page: Annotated[Optional[int], Query()] = None,
    limit: Annotated[Optional[int], Query()] = None,
):
    """Newest first. Filters: entity type, task, acting user, change type."""
    result = await audit_service.list_records(
        AuditFilters(
            entity_type=entity_type,
            entity_id=task_id,
            actor_id=user_id,
            change_kind=change_type,
        ),
        page=page,
        limit=limit,
    )
    return AuditLogPageResponse(
        logs=[AuditRecordResponse.model_validate(r) for r in result.records],
        pagination=PaginationResponse(
            page=result.pagination.page,
            limit=result.pagination.limit,
            total=result.pagination.total,
            pages=result.pagination.pages,
        ),
    )


@router.get("/task/{task_id}", response_model=AuditLogListResponse)
async def task_audit_logs(task_id: UUID, reader: Reader, audit_service: Audit):
    records = await audit_service.list_for_entity(task_id)
    return AuditLogListResponse(logs=[AuditRecordResponse.model_validate(r) for r in records])
