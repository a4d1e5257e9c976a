"""Read side of the audit trail: filtered, paginated, newest first."""

import math
from dataclasses import dataclass
from typing import List, Optional
from uuid import UUID

from app.audit.models import AuditRecord, ChangeKind
from app.audit.repository import AuditQuery, AuditRepository
from app.domain.models.task import TASK_ENTITY_TYPE

DEFAULT_PAGE = 1
DEFAULT_LIMIT = 20
MAX_LIMIT = 100


@dataclass(frozen=True)
class AuditFilters:
    entity_type: Optional[str] = None
    entity_id: Optional[UUID] = None
    actor_id: Optional[UUID] = None
    change_kind: Optional[ChangeKind] = None


@dataclass(frozen=True)
class Pagination:
    page: int
    limit: int
    total: int

    @property
    def pages(self) -> int:
        return math.ceil(self.total / self.limit) if self.limit else 0


@dataclass(frozen=True)
class AuditLogPage:
    records: List[AuditRecord]
    pagination: Pagination


def normalize_window(page: Optional[int], limit: Optional[int]) -> tuple[int, int]:
    """Non-positive or missing values fall back to defaults; limit is capped."""
    page = page if page and page > 0 else DEFAULT_PAGE
    limit = limit if limit and limit > 0 else DEFAULT_LIMIT
    return page, min(limit, MAX_LIMIT)


class AuditQueryService:
    def __init__(self, repository: AuditRepository) -> None:
        self._repository = repository

    async def list_records(
        self,
        filters: AuditFilters,
        page: Optional[int] = None,
        limit: Optional[int] = None,
    ) -> AuditLogPage:
        page, limit = normalize_window(page, limit)
        result = await self._repository.query(
            AuditQuery(
                entity_type=filters.entity_type,
                entity_id=filters.entity_id,
                actor_id=filters.actor_id,
                change_kind=filters.change_kind,
                offset=(page - 1) * limit,
                limit=limit,
            )
        )
        return AuditLogPage(
            records=result.records,
            pagination=Pagination(page=page, limit=limit, total=result.total),
        )

    async def list_for_entity(
        self, entity_id: UUID, entity_type: str = TASK_ENTITY_TYPE
    ) -> List[AuditRecord]:
        result = await self._repository.query(
            AuditQuery(entity_type=entity_type, entity_id=entity_id)
        )
        return result.records
