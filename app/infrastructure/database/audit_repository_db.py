"""DB-backed audit repository. Append and query only; rows are never updated or deleted."""

from datetime import datetime, timezone
from typing import Any, Dict

from sqlalchemy import func, select
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from app.audit.actor import ActorContext
from app.audit.exceptions import AuditWriteError
from app.audit.models import AuditRecord, ChangeKind, FieldChange
from app.audit.repository import AuditPage, AuditQuery
from app.infrastructure.database.models import AuditRecordRow


def _aware(value: datetime) -> datetime:
    # SQLite hands back naive datetimes; everything is stored as UTC.
    if value is not None and value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value


def _change_from_json(data: Dict[str, Any]) -> FieldChange:
    return FieldChange(
        field_name=data["field_name"],
        from_value=data.get("from_value"),
        to_value=data.get("to_value"),
    )


def _row_to_record(row: AuditRecordRow) -> AuditRecord:
    actor = None
    if row.actor_id is not None:
        actor = ActorContext(
            id=row.actor_id,
            display_name=row.actor_display_name or "",
            role=row.actor_role or "",
        )
    return AuditRecord(
        entity_type=row.entity_type,
        entity_id=row.entity_id,
        change_kind=ChangeKind(row.change_kind),
        field_changes=tuple(_change_from_json(c) for c in row.field_changes or []),
        actor=actor,
        occurred_at=_aware(row.occurred_at),
    )


class DbAuditRepository:
    """
    Persists audit records to the task_histories table. Implements AuditRepository.
    Each append uses its own short-lived session, independent of the session the
    audited mutation ran in.
    """

    def __init__(self, session_factory: async_sessionmaker[AsyncSession]) -> None:
        self._session_factory = session_factory

    async def append(self, record: AuditRecord) -> None:
        payload = record.to_dict()
        row = AuditRecordRow(
            entity_type=record.entity_type,
            entity_id=record.entity_id,
            change_kind=record.change_kind.value,
            field_changes=payload["field_changes"],
            actor_id=record.actor.id if record.actor else None,
            actor_display_name=record.actor.display_name if record.actor else None,
            actor_role=record.actor.role if record.actor else None,
            occurred_at=record.occurred_at,
        )
        try:
            async with self._session_factory() as session:
                session.add(row)
                await session.commit()
        except SQLAlchemyError as e:
            raise AuditWriteError(f"Audit append failed: {e}") from e

    async def query(self, query: AuditQuery) -> AuditPage:
        conditions = []
        if query.entity_type is not None:
            conditions.append(AuditRecordRow.entity_type == query.entity_type)
        if query.entity_id is not None:
            conditions.append(AuditRecordRow.entity_id == query.entity_id)
        if query.actor_id is not None:
            conditions.append(AuditRecordRow.actor_id == query.actor_id)
        if query.change_kind is not None:
            conditions.append(AuditRecordRow.change_kind == query.change_kind.value)

        count_stmt = select(func.count()).select_from(AuditRecordRow).where(*conditions)
        stmt = (
            select(AuditRecordRow)
            .where(*conditions)
            .order_by(AuditRecordRow.occurred_at.desc())
            .offset(query.offset)
        )
        if query.limit is not None:
            stmt = stmt.limit(query.limit)

        async with self._session_factory() as session:
            total = (await session.execute(count_stmt)).scalar_one()
            rows = (await session.execute(stmt)).scalars().all()
        return AuditPage(records=[_row_to_record(r) for r in rows], total=total)
