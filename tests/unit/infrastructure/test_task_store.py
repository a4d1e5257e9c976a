"""SqlTaskStore tests: find-one semantics, atomic update/delete, ORM change tracking."""

from datetime import datetime, timedelta, timezone
from uuid import uuid4

import pytest

from app.infrastructure.database.models import TaskRow
from app.infrastructure.database.task_store import SqlTaskStore


@pytest.fixture
def store(session):
    return SqlTaskStore(session)


@pytest.fixture
async def owner(make_user):
    return await make_user()


async def _insert(store, owner, title="t", completed=False):
    return await store.insert(TaskRow(title=title, description="", completed=completed, owner_id=owner.id))


async def test_snapshot_one_reads_columns(store, owner):
    task = await _insert(store, owner, title="snap")
    snapshot = await store.snapshot_one({"id": task.id})
    assert snapshot["title"] == "snap"
    assert snapshot["owner_id"] == owner.id
    assert await store.snapshot_one({"id": uuid4()}) is None


async def test_update_one_touches_only_first_match(store, owner):
    await _insert(store, owner, title="a")
    await _insert(store, owner, title="b")

    updated = await store.update_one({"owner_id": owner.id, "completed": False}, {"completed": True})

    assert updated.completed is True
    remaining = await store.ids_where({"owner_id": owner.id, "completed": False})
    assert len(remaining) == 1


async def test_first_match_is_the_oldest_row_for_every_operation(store, owner):
    created = datetime(2024, 1, 1, tzinfo=timezone.utc)
    newer = await store.insert(
        TaskRow(title="newer", description="", owner_id=owner.id, created_at=created + timedelta(hours=1))
    )
    older = await store.insert(TaskRow(title="older", description="", owner_id=owner.id, created_at=created))
    newer_id, older_id = newer.id, older.id
    criteria = {"owner_id": owner.id}

    assert (await store.snapshot_one(criteria))["id"] == older_id
    assert (await store.find_one(criteria)).id == older_id
    assert (await store.update_one(criteria, {"completed": True})).id == older_id
    assert await store.delete_one(criteria) == older_id
    assert await store.ids_where(criteria) == [newer_id]


async def test_update_one_without_match(store):
    assert await store.update_one({"id": uuid4()}, {"completed": True}) is None


async def test_update_one_with_empty_values_returns_current(store, owner):
    task = await _insert(store, owner)
    assert (await store.update_one({"id": task.id}, {})).id == task.id


async def test_delete_one_returns_deleted_id(store, owner):
    task = await _insert(store, owner)
    task_id = task.id
    assert await store.delete_one({"id": task_id}) == task_id
    assert await store.delete_one({"id": task_id}) is None
    assert await store.find_one({"id": task_id}) is None


async def test_pending_changes_tracks_only_real_modifications(store, owner):
    task = await _insert(store, owner, title="a")
    task.title = "a"
    assert store.pending_changes(task) == (set(), {})

    task.title = "b"
    task.completed = True
    modified, before = store.pending_changes(task)
    assert modified == {"title", "completed"}
    assert before == {"title": "a", "completed": False}


async def test_list_tasks_filters_by_owner(store, owner, make_user):
    other = await make_user("bob@example.com")
    await _insert(store, owner)
    await _insert(store, other)
    assert len(await store.list_tasks()) == 2
    assert [t.owner_id for t in await store.list_tasks(other.id)] == [other.id]
