"""AuditRecorder tests: record shape, metrics, best-effort boundary."""

from datetime import datetime, timezone
from unittest.mock import MagicMock
from uuid import uuid4

import pytest

from app.audit.actor import ActorContext
from app.audit.exceptions import AuditWriteError
from app.audit.models import ChangeKind, FieldChange
from app.audit.recorder import (
    AUDIT_RECORDS_WRITTEN,
    AUDIT_WRITE_FAILURES,
    AUDIT_WRITE_LATENCY,
    AuditRecorder,
)
from app.observability.metrics import MetricsCollector

FIXED_NOW = datetime(2024, 5, 1, 12, 0, tzinfo=timezone.utc)


@pytest.fixture
def reporter():
    return MagicMock()


@pytest.fixture
def metrics():
    return MetricsCollector()


@pytest.fixture
def recorder(audit_store, reporter, metrics):
    return AuditRecorder(audit_store, reporter, metrics=metrics, clock=lambda: FIXED_NOW)


def _args(**overrides):
    args = {
        "entity_type": "Task",
        "entity_id": uuid4(),
        "change_kind": ChangeKind.UPDATE,
        "field_changes": [FieldChange("completed", False, True)],
        "actor": ActorContext(uuid4(), "alice@example.com", "user"),
    }
    args.update(overrides)
    return args


async def test_record_appends_immutable_record(recorder, audit_store, metrics):
    args = _args()
    record = await recorder.record(**args)
    assert audit_store.records == [record]
    assert record.entity_id == args["entity_id"]
    assert record.field_changes == (FieldChange("completed", False, True),)
    assert record.occurred_at == FIXED_NOW
    assert metrics.get_counter(AUDIT_RECORDS_WRITTEN, category="update") == 1
    with pytest.raises(AttributeError):
        record.entity_type = "Other"


async def test_record_propagates_store_errors(recorder, audit_store):
    audit_store.fail_with = AuditWriteError("down")
    with pytest.raises(AuditWriteError):
        await recorder.record(**_args())


async def test_record_safely_skips_when_nothing_to_write(recorder, audit_store, reporter):
    assert await recorder.record_safely(lambda: None, context={"event": "audit_write_failed"}) is None
    assert audit_store.calls == []
    reporter.report.assert_not_called()


async def test_record_safely_reports_store_failure(recorder, audit_store, reporter, metrics):
    audit_store.fail_with = AuditWriteError("down")
    context = {"event": "audit_write_failed", "entity_type": "Task"}
    result = await recorder.record_safely(lambda: _args(), context=context)
    assert result is None
    reporter.report.assert_called_once()
    error, reported_context = reporter.report.call_args.args
    assert isinstance(error, AuditWriteError)
    assert reported_context == context
    assert metrics.get_counter(AUDIT_WRITE_FAILURES) == 1


async def test_record_safely_reports_diff_failure(recorder, audit_store, reporter):
    def broken():
        raise TypeError("unserializable")

    assert await recorder.record_safely(broken, context={"event": "audit_write_failed"}) is None
    assert audit_store.records == []
    assert isinstance(reporter.report.call_args.args[0], TypeError)


async def test_record_observes_write_latency(recorder, metrics):
    await recorder.record(**_args())
    await recorder.record(**_args(change_kind=ChangeKind.CREATE))
    histogram = metrics.export_metrics()["histograms"][AUDIT_WRITE_LATENCY]
    assert histogram["count"] == 2
    assert histogram["sum"] >= 0


async def test_failed_write_observes_no_latency(recorder, audit_store, metrics):
    audit_store.fail_with = AuditWriteError("down")
    await recorder.record_safely(lambda: _args(), context={"event": "audit_write_failed"})
    assert AUDIT_WRITE_LATENCY not in metrics.export_metrics()["histograms"]
