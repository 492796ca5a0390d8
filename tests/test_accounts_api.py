"""Accounts and tasks endpoints — tenant isolation over HTTP."""

import pytest
from httpx import AsyncClient

from vpdash.services.tenant_storage import TenantStorage


async def _bootstrap(client: AsyncClient, slug: str):
    """Helper: bootstrap a tenant and return (headers, tenant_id)."""
    resp = await client.post("/v1/tenants", json={
        "tenant_name": f"{slug} Co",
        "tenant_slug": slug,
        "admin_email": f"admin@{slug}.com",
        "admin_password": "testpass123",
    })
    assert resp.status_code == 201
    data = resp.json()
    return {"Authorization": f"Bearer {data['api_token']}"}, data["tenant"]["id"]


# ── Accounts ─────────────────────────────────────────────────

@pytest.mark.asyncio
async def test_create_and_update_account(client: AsyncClient):
    headers, tenant_id = await _bootstrap(client, slug="acct-crud")

    resp = await client.post("/v1/accounts", json={
        "name": "Northside HVAC",
        "segment": "HVAC",
        "tenant_id": 999,
    }, headers=headers)
    assert resp.status_code == 201
    account = resp.json()
    assert account["tenant_id"] == tenant_id
    assert account["status"] == "active"

    resp = await client.patch(
        f"/v1/accounts/{account['id']}", json={"region": "Midwest"}, headers=headers
    )
    assert resp.status_code == 200
    assert resp.json()["region"] == "Midwest"
    assert resp.json()["name"] == "Northside HVAC"


@pytest.mark.asyncio
async def test_accounts_are_isolated(client: AsyncClient):
    headers_a, _ = await _bootstrap(client, slug="acct-a")
    headers_b, _ = await _bootstrap(client, slug="acct-b")

    resp = await client.post("/v1/accounts", json={"name": "A's customer"}, headers=headers_a)
    account_id = resp.json()["id"]

    resp = await client.get("/v1/accounts", headers=headers_b)
    assert resp.json() == []

    resp = await client.get(f"/v1/accounts/{account_id}", headers=headers_b)
    assert resp.status_code == 404
    resp = await client.patch(
        f"/v1/accounts/{account_id}", json={"name": "Hijacked"}, headers=headers_b
    )
    assert resp.status_code == 404
    resp = await client.get(f"/v1/accounts/{account_id}/gaps", headers=headers_b)
    assert resp.status_code == 404

    resp = await client.get(f"/v1/accounts/{account_id}", headers=headers_a)
    assert resp.json()["name"] == "A's customer"


@pytest.mark.asyncio
async def test_account_gaps_largest_first(client: AsyncClient, session):
    headers, tenant_id = await _bootstrap(client, slug="acct-gaps")
    store = TenantStorage(session, tenant_id)
    account = await store.create_account({"name": "Gap Co"})
    for category_id, gap in [(1, 4.0), (2, 19.5), (3, 11.0)]:
        await store.create_account_category_gap(
            {"account_id": account.id, "category_id": category_id, "gap_pct": gap}
        )

    resp = await client.get(f"/v1/accounts/{account.id}/gaps", headers=headers)
    assert resp.status_code == 200
    assert [g["gap_pct"] for g in resp.json()] == [19.5, 11.0, 4.0]


# ── Tasks ────────────────────────────────────────────────────

@pytest.mark.asyncio
async def test_tasks_paginate(client: AsyncClient):
    headers, _ = await _bootstrap(client, slug="tasks-page")
    resp = await client.post("/v1/accounts", json={"name": "Caller Co"}, headers=headers)
    account_id = resp.json()["id"]

    for i in range(3):
        resp = await client.post("/v1/tasks", json={
            "account_id": account_id,
            "task_type": "call",
            "title": f"Call {i}",
        }, headers=headers)
        assert resp.status_code == 201

    resp = await client.get("/v1/tasks", params={"page": 1, "limit": 2}, headers=headers)
    assert resp.status_code == 200
    page = resp.json()
    assert page["total"] == 3
    assert [t["title"] for t in page["tasks"]] == ["Call 2", "Call 1"]

    resp = await client.get("/v1/tasks", params={"page": 2, "limit": 2}, headers=headers)
    assert [t["title"] for t in resp.json()["tasks"]] == ["Call 0"]

    resp = await client.get(
        "/v1/tasks", params={"account_id": account_id + 1000}, headers=headers
    )
    assert resp.json()["total"] == 0


@pytest.mark.asyncio
async def test_task_page_bounds_validated(client: AsyncClient):
    headers, _ = await _bootstrap(client, slug="tasks-bounds")

    resp = await client.get("/v1/tasks", params={"page": 0}, headers=headers)
    assert resp.status_code == 422
    resp = await client.get("/v1/tasks", params={"limit": 10_000}, headers=headers)
    assert resp.status_code == 422


@pytest.mark.asyncio
async def test_tasks_are_isolated(client: AsyncClient):
    headers_a, _ = await _bootstrap(client, slug="tasks-a")
    headers_b, _ = await _bootstrap(client, slug="tasks-b")

    resp = await client.post("/v1/accounts", json={"name": "A's customer"}, headers=headers_a)
    account_id = resp.json()["id"]
    resp = await client.post("/v1/tasks", json={
        "account_id": account_id,
        "task_type": "visit",
        "title": "Site visit",
    }, headers=headers_a)
    task_id = resp.json()["id"]

    # B can neither see A's task nor attach one to A's account
    resp = await client.get(f"/v1/tasks/{task_id}", headers=headers_b)
    assert resp.status_code == 404
    resp = await client.patch(f"/v1/tasks/{task_id}", json={"status": "done"}, headers=headers_b)
    assert resp.status_code == 404
    resp = await client.post("/v1/tasks", json={
        "account_id": account_id,
        "task_type": "call",
        "title": "Poach",
    }, headers=headers_b)
    assert resp.status_code == 404

    resp = await client.get("/v1/tasks", headers=headers_b)
    assert resp.json()["total"] == 0
    resp = await client.get(f"/v1/tasks/{task_id}", headers=headers_a)
    assert resp.json()["status"] == "pending"
