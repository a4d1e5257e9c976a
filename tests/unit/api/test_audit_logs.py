"""Tests for /audit-logs: admin only, filters, pagination."""

from httpx import AsyncClient


async def _create(client, headers, title):
    r = await client.post("/tasks/", json={"title": title}, headers=headers)
    return r.json()


async def test_audit_logs_require_admin(async_client: AsyncClient, alice, auth_headers):
    r = await async_client.get("/audit-logs/", headers=auth_headers(alice))
    assert r.status_code == 403


async def test_audit_logs_paginated_newest_first(async_client: AsyncClient, alice, admin, auth_headers):
    for title in ("one", "two", "three"):
        await _create(async_client, auth_headers(alice), title)

    r = await async_client.get("/audit-logs/?limit=2", headers=auth_headers(admin))

    assert r.status_code == 200
    body = r.json()
    assert body["pagination"] == {"page": 1, "limit": 2, "total": 3, "pages": 2}
    titles = [log["field_changes"][0]["to_value"] for log in body["logs"]]
    assert titles == ["three", "two"]

    second = (await async_client.get("/audit-logs/?limit=2&page=2", headers=auth_headers(admin))).json()
    assert [log["field_changes"][0]["to_value"] for log in second["logs"]] == ["one"]


async def test_audit_logs_filters(async_client: AsyncClient, alice, bob, admin, auth_headers):
    task = await _create(async_client, auth_headers(alice), "alice's")
    await _create(async_client, auth_headers(bob), "bob's")
    await async_client.delete(f"/tasks/{task['id']}", headers=auth_headers(alice))
    headers = auth_headers(admin)

    by_user = (await async_client.get(f"/audit-logs/?user_id={bob.id}", headers=headers)).json()
    assert by_user["pagination"]["total"] == 1

    by_task = (await async_client.get(f"/audit-logs/?task_id={task['id']}", headers=headers)).json()
    assert [log["change_kind"] for log in by_task["logs"]] == ["delete", "create"]

    by_kind = (await async_client.get("/audit-logs/?change_type=create", headers=headers)).json()
    assert by_kind["pagination"]["total"] == 2

    by_type = (await async_client.get("/audit-logs/?entity_type=User", headers=headers)).json()
    assert by_type["logs"] == []


async def test_audit_logs_reject_unknown_change_type(async_client: AsyncClient, admin, auth_headers):
    r = await async_client.get("/audit-logs/?change_type=rename", headers=auth_headers(admin))
    assert r.status_code == 422
