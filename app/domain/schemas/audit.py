"""Pydantic schemas for reading the audit trail. Mirrors the stored record shape."""

from datetime import datetime
from typing import Any, List, Optional
from uuid import UUID

from pydantic import BaseModel

from app.audit.models import ChangeKind


class FieldChangeResponse(BaseModel):
    field_name: str
    from_value: Any = None
    to_value: Any = None

    model_config = {"from_attributes": True}


class ActorResponse(BaseModel):
    id: UUID
    display_name: str
    role: str

    model_config = {"from_attributes": True}


class AuditRecordResponse(BaseModel):
    entity_type: str
    entity_id: UUID
    change_kind: ChangeKind
    field_changes: List[FieldChangeResponse]
    actor: Optional[ActorResponse] = None
    occurred_at: datetime

    model_config = {"from_attributes": True}


class PaginationResponse(BaseModel):
    page: int
    limit: int
    total: int
    pages: int


class AuditLogPageResponse(BaseModel):
    logs: List[AuditRecordResponse]
    pagination: PaginationResponse


class AuditLogListResponse(BaseModel):
    logs: List[AuditRecordResponse]
