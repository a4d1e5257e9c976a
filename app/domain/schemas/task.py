"""Pydantic schemas for the task API. Strict validation, no DB or infrastructure."""

from datetime import datetime
from typing import Any, Dict, List, Optional
from uuid import UUID

from pydantic import BaseModel, Field, field_validator

from app.domain.models.task import DESCRIPTION_MAX_LENGTH, TITLE_MAX_LENGTH


# ---------------------------------------------------------------------------
# Request schemas
# ---------------------------------------------------------------------------

class TaskCreateRequest(BaseModel):
    """Request schema for creating a task. Owner may only be set by admins."""

    model_config = {"str_strip_whitespace": True}

    title: str = Field(..., min_length=1, max_length=TITLE_MAX_LENGTH)
    description: Optional[str] = Field(None, max_length=DESCRIPTION_MAX_LENGTH)
    owner: Optional[UUID] = None


class TaskUpdateRequest(BaseModel):
    """Request schema for updating a task. Only fields sent by the client are applied."""

    model_config = {"str_strip_whitespace": True}

    title: Optional[str] = Field(None, min_length=1, max_length=TITLE_MAX_LENGTH)
    description: Optional[str] = Field(None, max_length=DESCRIPTION_MAX_LENGTH)
    completed: Optional[bool] = None
    owner: Optional[UUID] = None

    @field_validator("title", "completed", "owner")
    @classmethod
    def must_not_be_null(cls, v: Any) -> Any:
        if v is None:
            raise ValueError("field may be omitted but not set to null")
        return v

    def to_payload(self) -> Dict[str, Any]:
        """Column-keyed payload containing only the fields the client sent."""
        sent = self.model_dump(exclude_unset=True)
        if "owner" in sent:
            sent["owner_id"] = sent.pop("owner")
        return sent


# ---------------------------------------------------------------------------
# Response schemas
# ---------------------------------------------------------------------------

class TaskResponse(BaseModel):
    id: UUID
    title: str
    description: Optional[str] = None
    completed: bool
    owner_id: UUID
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None

    model_config = {"from_attributes": True}


class TaskListResponse(BaseModel):
    tasks: List[TaskResponse]
