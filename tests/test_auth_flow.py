"""End-to-end auth flow: bootstrap tenant → API token → JWT login."""

import pytest
from httpx import AsyncClient


@pytest.mark.asyncio
async def test_bootstrap_and_authenticate(client: AsyncClient):
    """Create a tenant, use its API token, then log in for a JWT."""

    # 1. Bootstrap a tenant (unauthenticated)
    resp = await client.post("/v1/tenants", json={
        "tenant_name": "Acme Supply",
        "tenant_slug": "acme",
        "admin_email": "admin@acme.com",
        "admin_password": "supersecret123",
    })
    assert resp.status_code == 201, resp.text
    data = resp.json()
    assert data["tenant"]["slug"] == "acme"
    assert data["tenant"]["plan_type"] == "free"
    raw_token = data["api_token"]
    assert len(raw_token) > 20  # token_urlsafe(32) → ~43 chars

    headers = {"Authorization": f"Bearer {raw_token}"}

    # 2. Use the token to get tenant info
    resp = await client.get("/v1/tenants/me", headers=headers)
    assert resp.status_code == 200
    assert resp.json()["slug"] == "acme"

    # 3. Log in with the admin's password
    resp = await client.post("/v1/auth/login", json={
        "email": "admin@acme.com",
        "password": "supersecret123",
    })
    assert resp.status_code == 200, resp.text
    login = resp.json()
    assert "." in login["access_token"]  # JWT has dots
    assert login["user"]["role"] == "super_admin"
    assert login["tenant"]["id"] == data["tenant"]["id"]

    # 4. The JWT resolves to the same user and tenant
    jwt_headers = {"Authorization": f"Bearer {login['access_token']}"}
    resp = await client.get("/v1/auth/me", headers=jwt_headers)
    assert resp.status_code == 200
    me = resp.json()
    assert me["user"]["email"] == "admin@acme.com"
    assert me["tenant"]["slug"] == "acme"
    assert "manage_users" in me["permissions"]
    assert me["subscription"]["plan_type"] == "free"
    assert me["subscription"]["is_active"] is False


@pytest.mark.asyncio
async def test_duplicate_slug_rejected(client: AsyncClient):
    """Registering the same slug twice returns 409."""
    payload = {
        "tenant_name": "First",
        "tenant_slug": "dup-slug",
        "admin_email": "a@first.com",
        "admin_password": "password123",
    }
    resp = await client.post("/v1/tenants", json=payload)
    assert resp.status_code == 201

    payload["tenant_name"] = "Second"
    payload["admin_email"] = "b@second.com"
    resp = await client.post("/v1/tenants", json=payload)
    assert resp.status_code == 409


@pytest.mark.asyncio
async def test_slug_derived_from_admin_email(client: AsyncClient):
    """Without a slug the email's local part is used, suffixed on collision."""
    first = await client.post("/v1/tenants", json={
        "tenant_name": "Jane's Supply",
        "admin_email": "Jane.Doe@janes-supply.com",
        "admin_password": "password123",
    })
    assert first.status_code == 201
    assert first.json()["tenant"]["slug"] == "jane-doe"

    second = await client.post("/v1/tenants", json={
        "tenant_name": "Other Jane",
        "admin_email": "jane.doe@other-supply.com",
        "admin_password": "password123",
    })
    assert second.status_code == 201
    assert second.json()["tenant"]["slug"] == "jane-doe-2"


@pytest.mark.asyncio
async def test_login_needs_slug_when_email_is_shared(client: AsyncClient):
    for slug in ("shared-a", "shared-b"):
        resp = await client.post("/v1/tenants", json={
            "tenant_name": slug,
            "tenant_slug": slug,
            "admin_email": "ops@shared.com",
            "admin_password": "password123",
        })
        assert resp.status_code == 201

    resp = await client.post("/v1/auth/login", json={
        "email": "ops@shared.com",
        "password": "password123",
    })
    assert resp.status_code == 400

    resp = await client.post("/v1/auth/login", json={
        "email": "ops@shared.com",
        "password": "password123",
        "tenant_slug": "shared-b",
    })
    assert resp.status_code == 200
    assert resp.json()["tenant"]["slug"] == "shared-b"


@pytest.mark.asyncio
async def test_wrong_password_rejected(client: AsyncClient):
    await client.post("/v1/tenants", json={
        "tenant_name": "Login Co",
        "tenant_slug": "login-co",
        "admin_email": "admin@login-co.com",
        "admin_password": "rightpass123",
    })
    resp = await client.post("/v1/auth/login", json={
        "email": "admin@login-co.com",
        "password": "wrongpass123",
    })
    assert resp.status_code == 401


@pytest.mark.asyncio
async def test_invalid_token_rejected(client: AsyncClient):
    resp = await client.get("/v1/tenants/me", headers={"Authorization": "Bearer not-a-real-token"})
    assert resp.status_code == 401

    resp = await client.get("/v1/tenants/me", headers={"Authorization": "Bearer a.b.c"})
    assert resp.status_code == 401


@pytest.mark.asyncio
async def test_missing_token_rejected(client: AsyncClient):
    resp = await client.get("/v1/accounts")
    assert resp.status_code in (401, 403)


@pytest.mark.asyncio
async def test_health(client: AsyncClient):
    resp = await client.get("/health")
    assert resp.status_code == 200
    assert resp.json() == {"status": "ok"}
