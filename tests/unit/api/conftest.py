"""Fixtures for API tests: app wired to a throwaway SQLite database, AsyncClient, auth headers."""

import pytest
from httpx import ASGITransport, AsyncClient

from app.api import dependencies
from app.infrastructure.database.audit_repository_db import DbAuditRepository
from app.infrastructure.database.session import get_db
from app.main import app


@pytest.fixture
def app_with_overrides(session_factory):
    """App with the request session and the audit store bound to the test database."""

    async def _get_db():
        async with session_factory() as session:
            yield session

    app.dependency_overrides[get_db] = _get_db
    app.dependency_overrides[dependencies.get_audit_repository] = lambda: DbAuditRepository(
        session_factory
    )
    yield app
    app.dependency_overrides.clear()


@pytest.fixture
async def async_client(app_with_overrides):
    """Async HTTP client for testing; uses overridden app."""
    transport = ASGITransport(app=app_with_overrides)
    async with AsyncClient(transport=transport, base_url="http://test") as client:
        yield client


@pytest.fixture
def auth_headers():
    def _headers(user):
        token = dependencies.get_token_service().issue(user.id)
        return {"Authorization": f"Bearer {token}"}

    return _headers


@pytest.fixture
async def alice(make_user):
    return await make_user("alice@example.com")


@pytest.fixture
async def bob(make_user):
    return await make_user("bob@example.com")


@pytest.fixture
async def admin(make_user):
    return await make_user("admin@example.com", ["admin"])
