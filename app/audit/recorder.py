"""Audit writes for the after-phase of a mutation. Best effort: never fails the caller."""

import logging
import time
from datetime import datetime, timezone
from typing import Callable, Optional, Sequence
from uuid import UUID

from app.audit.actor import ActorContext
from app.audit.models import AuditRecord, ChangeKind, FieldChange
from app.audit.repository import AuditRepository
from app.observability.error_reporter import ErrorReporter
from app.observability.metrics import MetricsCollector

logger = logging.getLogger(__name__)

AUDIT_RECORDS_WRITTEN = "audit_records_written"
AUDIT_WRITE_FAILURES = "audit_write_failures"
AUDIT_WRITE_LATENCY = "audit_write_latency"


class AuditRecorder:
    """
    Builds immutable audit records and appends them via the repository.
    occurred_at is taken when the record is built, i.e. after the primary
    mutation has committed.
    """

    def __init__(
        self,
        repository: AuditRepository,
        reporter: ErrorReporter,
        metrics: Optional[MetricsCollector] = None,
        clock: Callable[[], datetime] = lambda: datetime.now(timezone.utc),
    ) -> None:
        self._repository = repository
        self._reporter = reporter
        self._metrics = metrics
        self._clock = clock

    async def record(
        self,
        *,
        entity_type: str,
        entity_id: UUID,
        change_kind: ChangeKind,
        field_changes: Sequence[FieldChange],
        actor: Optional[ActorContext],
    ) -> AuditRecord:
        """Write one record. Errors from the store propagate."""
        record = AuditRecord(
            entity_type=entity_type,
            entity_id=entity_id,
            change_kind=change_kind,
            field_changes=tuple(field_changes),
            actor=actor,
            occurred_at=self._clock(),
        )
        started = time.perf_counter()
        await self._repository.append(record)
        if self._metrics is not None:
            self._metrics.observe_latency(
                AUDIT_WRITE_LATENCY, (time.perf_counter() - started) * 1000
            )
            self._metrics.increment(AUDIT_RECORDS_WRITTEN, category=change_kind.value)
        logger.debug(
            "audit_record_written",
            extra={
                "entity_type": entity_type,
                "entity_id": str(entity_id),
                "change_kind": change_kind.value,
                "field_count": len(record.field_changes),
            },
        )
        return record

    async def record_safely(
        self,
        build: Callable[[], Optional[dict]],
        *,
        context: dict,
    ) -> Optional[AuditRecord]:
        """
        After-phase boundary. `build` computes the record arguments (the diff
        runs inside it) and returns None when there is nothing to write.
        Any failure is reported and swallowed; there is no retry.
        """
        try:
            arguments = build()
            if arguments is None:
                return None
            return await self.record(**arguments)
        except Exception as e:
            if self._metrics is not None:
                self._metrics.increment(AUDIT_WRITE_FAILURES)
            self._reporter.report(e, context)
            return None
