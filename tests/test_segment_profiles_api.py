"""Segment profile (ICP) endpoints — plan cap, review trail and approval."""

import pytest
from httpx import AsyncClient

from vpdash.models.tenant import Tenant
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


async def _login_as_reviewer(client: AsyncClient, headers: dict, slug: str) -> dict:
    resp = await client.post("/v1/users", json={
        "email": f"reviewer@{slug}.com",
        "password": "reviewpass1",
        "role": "reviewer",
    }, headers=headers)
    assert resp.status_code == 201
    resp = await client.post("/v1/auth/login", json={
        "email": f"reviewer@{slug}.com",
        "password": "reviewpass1",
    })
    return {"Authorization": f"Bearer {resp.json()['access_token']}"}


@pytest.mark.asyncio
async def test_free_plan_allows_one_profile(client: AsyncClient):
    headers, _ = await _bootstrap(client, slug="icp-free")

    resp = await client.post(
        "/v1/segment-profiles", json={"segment": "HVAC", "name": "HVAC core"}, headers=headers
    )
    assert resp.status_code == 201
    assert resp.json()["status"] == "draft"

    resp = await client.post(
        "/v1/segment-profiles", json={"segment": "Plumbing", "name": "Plumbing core"}, headers=headers
    )
    assert resp.status_code == 403
    assert resp.json()["detail"]["feature"] == "icps"


@pytest.mark.asyncio
async def test_review_trail(client: AsyncClient, session):
    headers, tenant_id = await _bootstrap(client, slug="icp-trail")
    tenant = await session.get(Tenant, tenant_id)
    tenant.plan_type = "growth"
    tenant.subscription_status = "active"
    session.add(tenant)
    await session.commit()

    resp = await client.post(
        "/v1/segment-profiles", json={"segment": "HVAC", "name": "HVAC core"}, headers=headers
    )
    profile_id = resp.json()["id"]

    resp = await client.patch(
        f"/v1/segment-profiles/{profile_id}", json={"min_annual_revenue": 50000}, headers=headers
    )
    assert resp.status_code == 200
    assert resp.json()["min_annual_revenue"] == 50000

    reviewer = await _login_as_reviewer(client, headers, "icp-trail")

    # Reviewers approve but cannot edit
    resp = await client.patch(
        f"/v1/segment-profiles/{profile_id}", json={"name": "Renamed"}, headers=reviewer
    )
    assert resp.status_code == 403

    resp = await client.post(f"/v1/segment-profiles/{profile_id}/approve", headers=reviewer)
    assert resp.status_code == 200
    approved = resp.json()
    assert approved["status"] == "approved"
    assert approved["approved_at"] is not None

    store = TenantStorage(session, tenant_id)
    actions = sorted(entry.action for entry in await store.get_profile_review_log(profile_id))
    assert actions == ["adjusted", "approved", "created"]


@pytest.mark.asyncio
async def test_delete_removes_profile_data(client: AsyncClient, session):
    headers, tenant_id = await _bootstrap(client, slug="icp-delete")
    resp = await client.post(
        "/v1/segment-profiles", json={"segment": "HVAC", "name": "HVAC core"}, headers=headers
    )
    profile_id = resp.json()["id"]
    store = TenantStorage(session, tenant_id)
    await store.create_profile_category({"profile_id": profile_id, "category_id": 1, "expected_pct": 25.0})

    resp = await client.delete(f"/v1/segment-profiles/{profile_id}", headers=headers)
    assert resp.status_code == 204

    assert await store.get_segment_profile(profile_id) is None
    assert await store.get_profile_categories(profile_id) == []
    assert await store.get_profile_review_log(profile_id) == []

    # Frees the slot on the free plan
    resp = await client.post(
        "/v1/segment-profiles", json={"segment": "HVAC", "name": "HVAC v2"}, headers=headers
    )
    assert resp.status_code == 201


@pytest.mark.asyncio
async def test_profiles_are_isolated(client: AsyncClient):
    headers_a, _ = await _bootstrap(client, slug="icp-a")
    headers_b, _ = await _bootstrap(client, slug="icp-b")

    resp = await client.post(
        "/v1/segment-profiles", json={"segment": "HVAC", "name": "A's ICP"}, headers=headers_a
    )
    profile_id = resp.json()["id"]

    for method, path in [
        ("GET", f"/v1/segment-profiles/{profile_id}"),
        ("POST", f"/v1/segment-profiles/{profile_id}/approve"),
        ("DELETE", f"/v1/segment-profiles/{profile_id}"),
    ]:
        resp = await client.request(method, path, headers=headers_b)
        assert resp.status_code == 404, (method, path)

    resp = await client.get(f"/v1/segment-profiles/{profile_id}", headers=headers_a)
    assert resp.json()["status"] == "draft"
