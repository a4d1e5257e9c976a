"""
Chaos: audit store outage (append raises, times out, or the table is gone).
System must: apply every primary mutation, report and classify each lost
audit write, and leave no partial audit state behind.
"""

import logging

import pytest

from app.audit.actor import ActorContext
from app.audit.hooks import AuditedTaskRepository
from app.audit.recorder import AUDIT_WRITE_FAILURES, AuditRecorder
from app.infrastructure.database.audit_repository_db import DbAuditRepository
from app.infrastructure.database.models import TaskRow
from app.infrastructure.database.session import build_engine, build_sessionmaker
from app.infrastructure.database.task_store import SqlTaskStore
from app.observability.error_reporter import ERRORS_REPORTED, LoggingErrorReporter
from app.observability.metrics import MetricsCollector


class FailingAuditRepository:
    """Audit store that raises on every append (simulated outage)."""

    def __init__(self, error: Exception):
        self._error = error
        self.attempts = 0

    async def append(self, record):
        self.attempts += 1
        raise self._error

    async def query(self, query):
        raise self._error


@pytest.fixture
def metrics():
    return MetricsCollector()


@pytest.fixture
async def owner(make_user):
    return await make_user()


def _repo(session, audit_repository, metrics):
    reporter = LoggingErrorReporter(logger=logging.getLogger("chaos.audit"), metrics=metrics)
    recorder = AuditRecorder(audit_repository, reporter, metrics=metrics)
    return AuditedTaskRepository(SqlTaskStore(session), recorder)


async def _full_lifecycle(repo, owner):
    actor = ActorContext(owner.id, owner.email, "user")
    task = await repo.create(
        TaskRow(title="Buy milk", description="", owner_id=owner.id), actor=actor
    )
    updated = await repo.update_where({"id": task.id}, {"completed": True}, actor=actor)
    loaded = await repo.get(task.id)
    loaded.title = "Buy oat milk"
    saved = await repo.save(loaded, actor=actor)
    deleted = await repo.delete_where({"id": task.id}, actor=actor)
    return task, updated, saved, deleted


@pytest.mark.parametrize(
    "error,category",
    [
        (ConnectionError("audit store connection refused"), "STORE_ERROR"),
        (TimeoutError("audit store timed out"), "STORE_ERROR"),
        (RuntimeError("audit store exploded"), "UNEXPECTED_ERROR"),
    ],
)
async def test_primary_mutations_survive_audit_outage(session, owner, metrics, caplog, error, category):
    failing = FailingAuditRepository(error)
    repo = _repo(session, failing, metrics)

    with caplog.at_level(logging.ERROR, logger="chaos.audit"):
        task, updated, saved, deleted = await _full_lifecycle(repo, owner)

    assert updated.completed is True
    assert saved.title == "Buy oat milk"
    assert deleted is True
    assert await repo.get(task.id) is None

    assert failing.attempts == 4
    assert metrics.get_counter(AUDIT_WRITE_FAILURES) == 4
    assert metrics.get_counter(ERRORS_REPORTED, category=category) == 4
    failures = [r for r in caplog.records if r.getMessage() == "audit_write_failed"]
    assert [r.pathway for r in failures] == ["create", "atomic_update", "save", "atomic_delete"]


async def test_missing_audit_table_is_reported_not_raised(session, owner, metrics, tmp_path):
    """Audit store pointing at a database without the audit table."""
    engine = build_engine(f"sqlite+aiosqlite:///{tmp_path / 'no_audit_table.db'}")
    try:
        repo = _repo(session, DbAuditRepository(build_sessionmaker(engine)), metrics)
        task = await repo.create(
            TaskRow(title="Buy milk", description="", owner_id=owner.id), actor=None
        )
        assert (await repo.get(task.id)) is not None
        assert metrics.get_counter(ERRORS_REPORTED, category="STORE_ERROR") == 1
    finally:
        await engine.dispose()


async def test_recovered_store_resumes_recording(session, owner, metrics, audit_store):
    """After an outage, later mutations are recorded again; lost writes are not replayed."""
    failing = FailingAuditRepository(ConnectionError("down"))
    task = await _repo(session, failing, metrics).create(
        TaskRow(title="Buy milk", description="", owner_id=owner.id), actor=None
    )

    healthy = _repo(session, audit_store, metrics)
    await healthy.update_where({"id": task.id}, {"completed": True}, actor=None)

    assert [r.change_kind.value for r in audit_store.records] == ["update"]
