# app/infrastructure/database/models.py

import uuid
from datetime import datetime, timezone

from sqlalchemy import (
    JSON,
    Boolean,
    CheckConstraint,
    Column,
    DateTime,
    ForeignKey,
    String,
    Uuid,
)
from sqlalchemy.dialects.postgresql import JSONB

from app.domain.models.task import DESCRIPTION_MAX_LENGTH, TITLE_MAX_LENGTH
from app.domain.models.user import DEFAULT_ROLES
from app.infrastructure.database.session import Base

JSONType = JSON().with_variant(JSONB(), "postgresql")


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class TimestampedModel(Base):
    __abstract__ = True

    id = Column(Uuid, primary_key=True, default=uuid.uuid4)

    created_at = Column(DateTime(timezone=True), default=_utcnow)
    updated_at = Column(DateTime(timezone=True), default=_utcnow, onupdate=_utcnow)


class UserRow(TimestampedModel):
    __tablename__ = "users"

    email = Column(String(320), nullable=False, unique=True, index=True)
    password_hash = Column(String, nullable=False)
    roles = Column(JSONType, nullable=False, default=lambda: list(DEFAULT_ROLES))


class TaskRow(TimestampedModel):
    """ORM model for tasks, the audited entity."""

    __tablename__ = "tasks"

    title = Column(String(TITLE_MAX_LENGTH), nullable=False)
    description = Column(String(DESCRIPTION_MAX_LENGTH), nullable=True)
    completed = Column(Boolean, nullable=False, default=False)
    owner_id = Column(Uuid, ForeignKey("users.id"), nullable=False, index=True)


class AuditRecordRow(Base):
    """
    ORM model for the append-only audit trail. The actor snapshot is stored
    in plain columns (not a foreign key) so it survives user changes.
    """

    __tablename__ = "task_histories"
    __table_args__ = (
        CheckConstraint(
            "change_kind IN ('create', 'update', 'delete')",
            name="ck_task_histories_change_kind",
        ),
    )

    id = Column(Uuid, primary_key=True, default=uuid.uuid4)
    entity_type = Column(String(64), nullable=False, index=True)
    entity_id = Column(Uuid, nullable=False, index=True)
    change_kind = Column(String(16), nullable=False)
    field_changes = Column(JSONType, nullable=False)
    actor_id = Column(Uuid, nullable=True, index=True)
    actor_display_name = Column(String, nullable=True)
    actor_role = Column(String, nullable=True)
    occurred_at = Column(DateTime(timezone=True), nullable=False, index=True)
