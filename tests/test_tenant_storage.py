"""Tenant isolation and the generic repository behind TenantStorage."""

from datetime import datetime, timedelta

import pytest

from vpdash.core.errors import TenantConfigurationError
from vpdash.models.account import AccountCreate
from vpdash.services.tenant_storage import TenantStorage


async def _account(store: TenantStorage, name: str, **extra):
    return await store.create_account({"name": name, **extra})


async def _task(store: TenantStorage, account_id: int, title: str):
    return await store.create_task({
        "account_id": account_id,
        "task_type": "call",
        "title": title,
    })


# ── Construction ─────────────────────────────────────────────

@pytest.mark.asyncio
@pytest.mark.parametrize("bad_id", [0, -3, None, "7", 1.0, True])
async def test_rejects_invalid_tenant_id(session, bad_id):
    with pytest.raises(TenantConfigurationError):
        TenantStorage(session, bad_id)


@pytest.mark.asyncio
async def test_unknown_tenant_fails_on_first_use(session):
    store = TenantStorage(session, 424242)
    with pytest.raises(TenantConfigurationError):
        await store.get_accounts()


@pytest.mark.asyncio
async def test_tenant_id_is_read_only(store):
    with pytest.raises(AttributeError):
        store.tenant_id = 99


# ── Create / read ────────────────────────────────────────────

@pytest.mark.asyncio
async def test_create_stamps_bound_tenant(store, tenant, other_tenant):
    account = await store.create_account(
        {"name": "Sneaky", "tenant_id": other_tenant.id, "id": 777}
    )
    assert account.tenant_id == tenant.id
    assert account.id != 777


@pytest.mark.asyncio
async def test_create_accepts_schema_objects(store, tenant):
    account = await store.create_account(AccountCreate(name="Northside HVAC", segment="HVAC"))
    assert account.tenant_id == tenant.id
    assert account.segment == "HVAC"
    assert account.status == "active"


@pytest.mark.asyncio
async def test_collections_only_contain_own_rows(store, other_store):
    await _account(store, "Acme One")
    await _account(store, "Acme Two")
    await _account(other_store, "Globex One")

    names = [a.name for a in await store.get_accounts()]
    assert names == ["Acme One", "Acme Two"]
    assert [a.name for a in await other_store.get_accounts()] == ["Globex One"]
    assert await store.count_accounts() == 2


@pytest.mark.asyncio
async def test_foreign_row_looks_missing(store, other_store):
    foreign = await _account(other_store, "Globex One")

    assert await store.get_account(foreign.id) is None
    assert await store.get_account(999999) is None


# ── Update / delete ──────────────────────────────────────────

@pytest.mark.asyncio
async def test_update_own_row(store):
    account = await _account(store, "Acme One")
    updated = await store.update_account(account.id, {"region": "Midwest"})
    assert updated is not None
    assert updated.id == account.id
    assert updated.region == "Midwest"
    assert updated.name == "Acme One"


@pytest.mark.asyncio
async def test_update_foreign_row_is_noop(store, other_store):
    foreign = await _account(other_store, "Globex One", region="East")

    assert await store.update_account(foreign.id, {"region": "West"}) is None
    reloaded = await other_store.get_account(foreign.id)
    assert reloaded.region == "East"


@pytest.mark.asyncio
async def test_update_cannot_move_row_to_another_tenant(store, tenant, other_tenant):
    account = await _account(store, "Acme One")
    updated = await store.update_account(
        account.id, {"tenant_id": other_tenant.id, "name": "Still Acme"}
    )
    assert updated.tenant_id == tenant.id
    assert updated.name == "Still Acme"


@pytest.mark.asyncio
async def test_delete_foreign_row_returns_false(store, other_store):
    foreign = await other_store.create_custom_category({"name": "Refrigerants"})

    assert await store.delete_custom_category(foreign.id) is False
    assert len(await other_store.get_custom_categories()) == 1


@pytest.mark.asyncio
async def test_delete_own_row(store):
    category = await store.create_custom_category({"name": "Ductwork"})
    assert await store.delete_custom_category(category.id) is True
    assert await store.get_custom_categories() == []
    assert await store.delete_custom_category(category.id) is False


@pytest.mark.asyncio
async def test_delete_where_is_scoped(store, other_store):
    profile = await store.create_segment_profile({"segment": "HVAC", "name": "HVAC core"})
    await store.create_profile_category({"profile_id": profile.id, "category_id": 1})
    await store.create_profile_category({"profile_id": profile.id, "category_id": 2})
    # Same profile id referenced from another tenant's rows
    await other_store.create_profile_category({"profile_id": profile.id, "category_id": 3})

    assert await store.delete_profile_categories(profile.id) == 2
    remaining = await other_store.get_profile_categories(profile.id)
    assert [c.category_id for c in remaining] == [3]


# ── Pagination ───────────────────────────────────────────────

@pytest.mark.asyncio
async def test_tasks_paginate_with_scoped_total(store, other_store):
    account = await _account(store, "Acme One")
    for i in range(5):
        await _task(store, account.id, f"Call {i}")
    foreign = await _account(other_store, "Globex One")
    for i in range(3):
        await _task(other_store, foreign.id, f"Globex call {i}")

    first = await store.get_tasks(page=1, limit=2)
    assert first.total == 5
    assert first.page == 1
    assert first.limit == 2
    assert [t.title for t in first.items] == ["Call 4", "Call 3"]

    last = await store.get_tasks(page=3, limit=2)
    assert [t.title for t in last.items] == ["Call 0"]

    beyond = await store.get_tasks(page=4, limit=2)
    assert beyond.items == []
    assert beyond.total == 5


@pytest.mark.asyncio
@pytest.mark.parametrize("page,limit", [(0, 10), (1, 0), (-1, 5)])
async def test_invalid_page_arguments(store, page, limit):
    with pytest.raises(ValueError):
        await store.get_tasks(page=page, limit=limit)


# ── Batch lookups ────────────────────────────────────────────

@pytest.mark.asyncio
async def test_metrics_batch_keeps_latest_and_drops_foreign(store, other_store):
    a = await _account(store, "Acme One")
    b = await _account(store, "Acme Two")
    foreign = await _account(other_store, "Globex One")
    now = datetime(2025, 3, 1, 12, 0)

    await store.create_account_metrics(
        {"account_id": a.id, "computed_at": now - timedelta(days=7), "opportunity_score": 10.0}
    )
    await store.create_account_metrics(
        {"account_id": a.id, "computed_at": now, "opportunity_score": 55.0}
    )
    await store.create_account_metrics(
        {"account_id": b.id, "computed_at": now, "opportunity_score": 20.0}
    )
    await other_store.create_account_metrics(
        {"account_id": foreign.id, "computed_at": now, "opportunity_score": 99.0}
    )

    batch = await store.get_account_metrics_batch([a.id, b.id, foreign.id, 31337])
    assert set(batch) == {a.id, b.id}
    assert batch[a.id].opportunity_score == 55.0
    assert batch[b.id].opportunity_score == 20.0


@pytest.mark.asyncio
async def test_gaps_batch_grouped_and_ordered(store, other_store):
    a = await _account(store, "Acme One")
    b = await _account(store, "Acme Two")
    foreign = await _account(other_store, "Globex One")

    for category_id, gap in [(1, 5.0), (2, 22.5), (3, 12.0)]:
        await store.create_account_category_gap(
            {"account_id": a.id, "category_id": category_id, "gap_pct": gap}
        )
    await store.create_account_category_gap({"account_id": b.id, "category_id": 1, "gap_pct": 3.0})
    await other_store.create_account_category_gap(
        {"account_id": foreign.id, "category_id": 1, "gap_pct": 80.0}
    )

    gaps = await store.get_account_category_gaps_batch([a.id, b.id, foreign.id])
    assert set(gaps) == {a.id, b.id}
    assert [g.gap_pct for g in gaps[a.id]] == [22.5, 12.0, 5.0]
    assert len(gaps[b.id]) == 1


@pytest.mark.asyncio
async def test_empty_batch(store):
    assert await store.get_account_metrics_batch([]) == {}
    assert await store.get_account_category_gaps_batch([]) == {}


@pytest.mark.asyncio
async def test_empty_batch_for_unknown_tenant_raises(session):
    store = TenantStorage(session, 424242)
    with pytest.raises(TenantConfigurationError):
        await store.get_account_metrics_batch([])
    with pytest.raises(TenantConfigurationError):
        await store.get_account_category_gaps_batch([])


# ── Upsert ───────────────────────────────────────────────────

@pytest.mark.asyncio
async def test_upsert_setting_updates_in_place(store, other_store):
    first = await store.upsert_setting("fiscal_year_start", "01")
    second = await store.upsert_setting("fiscal_year_start", "07")
    await other_store.upsert_setting("fiscal_year_start", "04")

    assert second.id == first.id
    assert second.value == "07"
    settings = await store.get_settings()
    assert [(s.key, s.value) for s in settings] == [("fiscal_year_start", "07")]
    assert (await other_store.get_setting("fiscal_year_start")).value == "04"


@pytest.mark.asyncio
async def test_upsert_scoring_weights(store):
    created = await store.upsert_scoring_weights(
        {"gap_size_weight": 50.0, "revenue_potential_weight": 25.0, "category_count_weight": 25.0}
    )
    updated = await store.upsert_scoring_weights({"gap_size_weight": 60.0, "category_count_weight": 15.0})

    assert updated.id == created.id
    assert updated.gap_size_weight == 60.0
    assert updated.revenue_potential_weight == 25.0
    assert (await store.get_scoring_weights()).id == created.id


# ── Entity helpers ───────────────────────────────────────────

@pytest.mark.asyncio
async def test_approve_segment_profile(store, other_store):
    profile = await store.create_segment_profile({"segment": "Plumbing", "name": "Plumbing core"})

    assert await other_store.approve_segment_profile(profile.id, "mallory") is None

    approved = await store.approve_segment_profile(profile.id, "reviewer-1")
    assert approved.status == "approved"
    assert approved.approved_by == "reviewer-1"
    assert approved.approved_at is not None
    assert await store.count_segment_profiles() == 1


@pytest.mark.asyncio
async def test_orders_by_account(store):
    a = await _account(store, "Acme One")
    b = await _account(store, "Acme Two")
    await store.create_order({"account_id": a.id, "order_date": datetime(2025, 1, 5), "total_amount": 100.0})
    await store.create_order({"account_id": a.id, "order_date": datetime(2025, 2, 5), "total_amount": 250.0})
    await store.create_order({"account_id": b.id, "order_date": datetime(2025, 2, 9), "total_amount": 75.0})

    orders = await store.get_orders_by_account(a.id)
    assert [o.total_amount for o in orders] == [250.0, 100.0]


@pytest.mark.asyncio
async def test_program_account_lookup_by_account(store, other_store):
    account = await _account(store, "Acme One")
    enrollment = await store.create_program_account({
        "account_id": account.id,
        "baseline_start": datetime(2024, 1, 1),
        "baseline_end": datetime(2024, 12, 31),
        "baseline_revenue": 120000.0,
        "share_rate": 15.0,
    })

    found = await store.get_program_account_by_account_id(account.id)
    assert found.id == enrollment.id
    assert await other_store.get_program_account_by_account_id(account.id) is None
    assert await store.count_program_accounts() == 1
    assert await other_store.count_program_accounts() == 0
