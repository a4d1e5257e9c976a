"""Shared fixtures: test settings, a throwaway SQLite database, an in-memory audit store."""

import os

os.environ.setdefault("JWT_SECRET", "test-jwt-secret-that-is-at-least-32-chars")
os.environ.setdefault("ENVIRONMENT", "test")
os.environ.setdefault("DATABASE_URL", "sqlite+aiosqlite:///:memory:")

import pytest

from app.audit.repository import AuditPage, AuditQuery
from app.infrastructure.database.models import UserRow
from app.infrastructure.database.session import build_engine, build_sessionmaker, create_tables


class RecordingAuditRepository:
    """In-memory AuditRepository. Records every call; can be told to fail appends."""

    def __init__(self):
        self.records = []
        self.calls: list[str] = []
        self.fail_with: Exception | None = None

    async def append(self, record):
        self.calls.append("append")
        if self.fail_with is not None:
            raise self.fail_with
        self.records.append(record)

    async def query(self, query: AuditQuery) -> AuditPage:
        self.calls.append("query")
        matches = [
            r
            for r in self.records
            if (query.entity_type is None or r.entity_type == query.entity_type)
            and (query.entity_id is None or r.entity_id == query.entity_id)
            and (query.actor_id is None or (r.actor is not None and r.actor.id == query.actor_id))
            and (query.change_kind is None or r.change_kind == query.change_kind)
        ]
        matches.sort(key=lambda r: r.occurred_at, reverse=True)
        end = None if query.limit is None else query.offset + query.limit
        return AuditPage(records=matches[query.offset:end], total=len(matches))


@pytest.fixture
def audit_store():
    return RecordingAuditRepository()


@pytest.fixture
async def engine(tmp_path):
    engine = build_engine(f"sqlite+aiosqlite:///{tmp_path / 'test.db'}")
    await create_tables(engine)
    yield engine
    await engine.dispose()


@pytest.fixture
def session_factory(engine):
    return build_sessionmaker(engine)


@pytest.fixture
async def session(session_factory):
    async with session_factory() as s:
        yield s


@pytest.fixture
def make_user(session):
    """Insert a user directly (no password hashing cost)."""

    async def _make(email: str = "alice@example.com", roles=None) -> UserRow:
        user = UserRow(email=email, password_hash="not-a-real-hash", roles=roles or ["user"])
        session.add(user)
        await session.commit()
        await session.refresh(user)
        return user

    return _make
