"""Shared test fixtures — async SQLite in-memory DB + test client."""

import os
from collections.abc import AsyncGenerator

os.environ.setdefault("JWT_SECRET_KEY", "test-secret-key")

import pytest
from httpx import ASGITransport, AsyncClient
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

from vpdash.core import cache
from vpdash.core.database import build_engine, get_session, init_db
from vpdash.main import app
from vpdash.models.tenant import Tenant
from vpdash.services.plan_registry import sync_plans
from vpdash.services.tenant_storage import TenantStorage


@pytest.fixture
async def engine():
    """A fresh in-memory database per test; one shared connection."""
    eng = build_engine(
        "sqlite+aiosqlite://",
        poolclass=StaticPool,
        connect_args={"check_same_thread": False},
    )
    await init_db(eng)
    yield eng
    await eng.dispose()


@pytest.fixture
def test_session_factory(engine):
    """Session factory bound to the test SQLite engine."""
    return sessionmaker(engine, class_=AsyncSession, expire_on_commit=False)


@pytest.fixture
async def session(test_session_factory) -> AsyncGenerator[AsyncSession, None]:
    cache.clear()
    async with test_session_factory() as sess:
        await sync_plans(sess)
        yield sess
        await sess.rollback()
    cache.clear()


@pytest.fixture
async def client(session) -> AsyncGenerator[AsyncClient, None]:
    """HTTPX async test client with DB session override."""

    async def _override_session():
        yield session

    app.dependency_overrides[get_session] = _override_session

    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as ac:
        yield ac

    app.dependency_overrides.clear()


@pytest.fixture
def make_tenant(session):
    """Factory: insert a tenant row on the given plan."""

    async def _make(
        slug: str,
        plan_type: str = "free",
        subscription_status: str = "none",
    ) -> Tenant:
        tenant = Tenant(
            name=f"{slug} Supply",
            slug=slug,
            plan_type=plan_type,
            subscription_status=subscription_status,
        )
        session.add(tenant)
        await session.commit()
        await session.refresh(tenant)
        return tenant

    return _make


@pytest.fixture
async def tenant(make_tenant) -> Tenant:
    return await make_tenant("acme")


@pytest.fixture
async def other_tenant(make_tenant) -> Tenant:
    return await make_tenant("globex")


@pytest.fixture
def store(session, tenant) -> TenantStorage:
    return TenantStorage(session, tenant.id)


@pytest.fixture
def other_store(session, other_tenant) -> TenantStorage:
    return TenantStorage(session, other_tenant.id)
