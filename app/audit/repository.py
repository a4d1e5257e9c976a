"""Audit repository protocol. The audit subsystem depends on this; infrastructure implements it."""

from dataclasses import dataclass
from typing import List, Optional, Protocol
from uuid import UUID

from app.audit.models import AuditRecord, ChangeKind


@dataclass(frozen=True)
class AuditQuery:
    """Filters and window for reading the trail. Results are newest first."""

    entity_type: Optional[str] = None
    entity_id: Optional[UUID] = None
    actor_id: Optional[UUID] = None
    change_kind: Optional[ChangeKind] = None
    offset: int = 0
    limit: Optional[int] = None


@dataclass(frozen=True)
class AuditPage:
    records: List[AuditRecord]
    total: int


class AuditRepository(Protocol):
    """
    Append-only store for audit records. There is no way to
    update or delete a record through this interface.
    """

    async def append(self, record: AuditRecord) -> None:
        """Persist a new immutable audit record."""
        ...

    async def query(self, query: AuditQuery) -> AuditPage:
        """Return matching records sorted by occurred_at descending, plus the total match count."""
        ...
