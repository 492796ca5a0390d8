"""Tenant-scoped data access.

``TenantStorage`` is bound to exactly one tenant. Every statement it issues
carries ``tenant_id = <bound id>``: collection reads, lookups by id, counts,
batch lookups, and also the UPDATE and DELETE statements themselves, so
ownership is checked in the same statement that mutates the row. A row that
belongs to another tenant is indistinguishable from a row that does not
exist: lookups return ``None``, updates return ``None`` and deletes return
``False``.

The per-entity methods are thin wrappers over ``TenantRepository``, a
generic repository that owns the predicate injection.
"""

from __future__ import annotations

import logging
from collections.abc import Iterable, Mapping, Sequence
from dataclasses import dataclass
from typing import Any, Generic, TypeVar

from sqlalchemy import delete, func, update
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession
from sqlmodel import SQLModel, select

from vpdash.core.errors import TenantConfigurationError
from vpdash.models.account import Account, AccountCategoryGap, AccountMetrics
from vpdash.models.base import utcnow
from vpdash.models.catalog import CustomCategory, Product, ProductCategory
from vpdash.models.data_upload import DataUpload
from vpdash.models.order import Order, OrderItem
from vpdash.models.playbook import Playbook, PlaybookTask
from vpdash.models.program import ProgramAccount, RevShareTier
from vpdash.models.segment_profile import ProfileCategory, ProfileReviewLog, SegmentProfile
from vpdash.models.setting import ScoringWeights, Setting
from vpdash.models.task import Task
from vpdash.models.tenant import Tenant
from vpdash.models.territory import TerritoryManager
from vpdash.models.user import User

logger = logging.getLogger(__name__)

ModelT = TypeVar("ModelT", bound=SQLModel)

Payload = SQLModel | Mapping[str, Any]

# Never writable through a payload: identity comes from the database and
# ownership comes from the bound tenant.
_PROTECTED_FIELDS = frozenset({"id", "tenant_id"})


def _payload(data: Payload, *, partial: bool) -> dict[str, Any]:
    if isinstance(data, SQLModel):
        values = data.model_dump(exclude_unset=partial)
    else:
        values = dict(data)
    for name in _PROTECTED_FIELDS:
        values.pop(name, None)
    return values


@dataclass
class Page(Generic[ModelT]):
    items: list[ModelT]
    total: int
    page: int
    limit: int


class TenantRepository(Generic[ModelT]):
    """CRUD for one tenant-owned table with the tenant predicate injected."""

    def __init__(
        self,
        storage: "TenantStorage",
        model: type[ModelT],
        order_by: Sequence[Any] = (),
    ) -> None:
        self._storage = storage
        self.model = model
        self._order_by = tuple(order_by)

    @property
    def _session(self) -> AsyncSession:
        return self._storage.session

    def _scoped(self, *criteria: Any) -> tuple[Any, ...]:
        return (self.model.tenant_id == self._storage.tenant_id, *criteria)

    def _ordered(self, stmt, order_by: Sequence[Any] | None):
        clauses = self._order_by if order_by is None else tuple(order_by)
        return stmt.order_by(*clauses) if clauses else stmt

    async def list(
        self,
        *criteria: Any,
        order_by: Sequence[Any] | None = None,
        limit: int | None = None,
        offset: int | None = None,
    ) -> list[ModelT]:
        await self._storage.ensure_tenant()
        stmt = self._ordered(select(self.model).where(*self._scoped(*criteria)), order_by)
        if limit is not None:
            stmt = stmt.limit(limit)
        if offset:
            stmt = stmt.offset(offset)
        result = await self._session.execute(stmt)
        return list(result.scalars().all())

    async def first(self, *criteria: Any, order_by: Sequence[Any] | None = None) -> ModelT | None:
        rows = await self.list(*criteria, order_by=order_by, limit=1)
        return rows[0] if rows else None

    async def get(self, row_id: int) -> ModelT | None:
        return await self.first(self.model.id == row_id)

    async def count(self, *criteria: Any) -> int:
        await self._storage.ensure_tenant()
        stmt = select(func.count()).select_from(self.model).where(*self._scoped(*criteria))
        return (await self._session.execute(stmt)).scalar_one()

    async def page(
        self,
        page: int,
        limit: int,
        *criteria: Any,
        order_by: Sequence[Any] | None = None,
    ) -> Page[ModelT]:
        if page < 1:
            raise ValueError(f"page must be >= 1, got {page}")
        if limit < 1:
            raise ValueError(f"limit must be >= 1, got {limit}")
        items = await self.list(
            *criteria, order_by=order_by, limit=limit, offset=(page - 1) * limit
        )
        total = await self.count(*criteria)
        return Page(items=items, total=total, page=page, limit=limit)

    async def batch(
        self,
        column: Any,
        ids: Iterable[int],
        order_by: Sequence[Any] | None = None,
    ) -> list[ModelT]:
        """All rows whose ``column`` is in ``ids``, in one query."""
        await self._storage.ensure_tenant()
        wanted = list(dict.fromkeys(ids))
        if not wanted:
            return []
        return await self.list(column.in_(wanted), order_by=order_by)

    async def create(self, data: Payload) -> ModelT:
        await self._storage.ensure_tenant()
        row = self.model(**_payload(data, partial=False), tenant_id=self._storage.tenant_id)
        self._session.add(row)
        try:
            await self._session.commit()
        except IntegrityError:
            await self._session.rollback()
            raise
        await self._session.refresh(row)
        return row

    async def update(self, row_id: int, data: Payload) -> ModelT | None:
        return await self.update_where(data, self.model.id == row_id)

    async def update_where(self, data: Payload, *criteria: Any) -> ModelT | None:
        """Single ``UPDATE ... WHERE tenant_id = ? AND <criteria> RETURNING``."""
        await self._storage.ensure_tenant()
        values = _payload(data, partial=True)
        values["updated_at"] = utcnow()
        stmt = (
            update(self.model)
            .where(*self._scoped(*criteria))
            .values(**values)
            .returning(self.model)
        )
        result = await self._session.execute(stmt)
        row = result.scalars().first()
        await self._session.commit()
        if row is not None:
            await self._session.refresh(row)
        return row

    async def delete(self, row_id: int) -> bool:
        return await self.delete_where(self.model.id == row_id) > 0

    async def delete_where(self, *criteria: Any) -> int:
        await self._storage.ensure_tenant()
        result = await self._session.execute(
            delete(self.model).where(*self._scoped(*criteria))
        )
        await self._session.commit()
        return result.rowcount or 0

    async def upsert(self, key: Mapping[str, Any], data: Payload) -> ModelT:
        """Update the row identified by ``key`` in place, or insert it.

        Relies on a unique constraint over ``(tenant_id, *key)``: when a
        concurrent caller inserts first, the insert fails, the session is
        rolled back and the update path is taken instead.
        """
        values = _payload(data, partial=True)
        criteria = [getattr(self.model, name) == value for name, value in key.items()]
        for attempt in (1, 2):
            existing = await self.first(*criteria)
            if existing is not None:
                updated = await self.update_where(values, self.model.id == existing.id)
                if updated is not None:
                    return updated
                continue
            try:
                return await self.create({**values, **key})
            except IntegrityError:
                if attempt == 2:
                    raise
                logger.info(
                    "Concurrent insert on %s for tenant %s, retrying as update",
                    self.model.__tablename__, self._storage.tenant_id,
                )
        return await self.create({**values, **key})


class TenantStorage:
    """Every read and write the application performs, scoped to one tenant."""

    def __init__(self, session: AsyncSession, tenant_id: int) -> None:
        if isinstance(tenant_id, bool) or not isinstance(tenant_id, int) or tenant_id <= 0:
            raise TenantConfigurationError(tenant_id, "must be a positive integer")
        self._session = session
        self._tenant_id = tenant_id
        self._verified = False

        self.accounts = TenantRepository(self, Account, (Account.id.asc(),))
        self.products = TenantRepository(self, Product, (Product.id.asc(),))
        self.product_categories = TenantRepository(self, ProductCategory, (ProductCategory.id.asc(),))
        self.orders = TenantRepository(self, Order, (Order.order_date.desc(),))
        self.order_items = TenantRepository(self, OrderItem, (OrderItem.id.asc(),))
        self.segment_profiles = TenantRepository(
            self, SegmentProfile, (SegmentProfile.created_at.desc(), SegmentProfile.id.desc())
        )
        self.profile_categories = TenantRepository(self, ProfileCategory, (ProfileCategory.id.asc(),))
        self.profile_review_log = TenantRepository(
            self, ProfileReviewLog, (ProfileReviewLog.created_at.desc(), ProfileReviewLog.id.desc())
        )
        self.account_metrics = TenantRepository(
            self, AccountMetrics, (AccountMetrics.computed_at.desc(), AccountMetrics.id.desc())
        )
        self.category_gaps = TenantRepository(
            self, AccountCategoryGap, (AccountCategoryGap.gap_pct.desc(), AccountCategoryGap.id.asc())
        )
        self.tasks = TenantRepository(self, Task, (Task.created_at.desc(), Task.id.desc()))
        self.playbooks = TenantRepository(
            self, Playbook, (Playbook.generated_at.desc(), Playbook.id.desc())
        )
        self.playbook_tasks = TenantRepository(self, PlaybookTask, (PlaybookTask.id.asc(),))
        self.program_accounts = TenantRepository(
            self, ProgramAccount, (ProgramAccount.enrolled_at.desc(), ProgramAccount.id.desc())
        )
        self.data_uploads = TenantRepository(
            self, DataUpload, (DataUpload.created_at.desc(), DataUpload.id.desc())
        )
        self.settings = TenantRepository(self, Setting, (Setting.key.asc(),))
        self.scoring_weights = TenantRepository(self, ScoringWeights, (ScoringWeights.id.asc(),))
        self.territory_managers = TenantRepository(self, TerritoryManager, (TerritoryManager.id.asc(),))
        self.custom_categories = TenantRepository(
            self, CustomCategory, (CustomCategory.display_order.asc(), CustomCategory.id.asc())
        )
        self.rev_share_tiers = TenantRepository(
            self, RevShareTier, (RevShareTier.display_order.asc(), RevShareTier.min_revenue.asc())
        )
        self.users = TenantRepository(self, User, (User.email.asc(),))

    @property
    def tenant_id(self) -> int:
        return self._tenant_id

    @property
    def session(self) -> AsyncSession:
        return self._session

    async def ensure_tenant(self) -> None:
        """Fail loudly when the bound tenant does not exist.

        Without this check a wrong id would look exactly like a tenant with
        no data.
        """
        if self._verified:
            return
        tenant = await self._session.get(Tenant, self._tenant_id)
        if tenant is None:
            raise TenantConfigurationError(self._tenant_id, "tenant does not exist")
        self._verified = True

    # ── Accounts ─────────────────────────────────────────────

    async def get_accounts(self) -> list[Account]:
        return await self.accounts.list()

    async def get_account(self, account_id: int) -> Account | None:
        return await self.accounts.get(account_id)

    async def create_account(self, data: Payload) -> Account:
        return await self.accounts.create(data)

    async def update_account(self, account_id: int, data: Payload) -> Account | None:
        return await self.accounts.update(account_id, data)

    async def count_accounts(self) -> int:
        return await self.accounts.count()

    # ── Catalog ──────────────────────────────────────────────

    async def get_products(self) -> list[Product]:
        return await self.products.list()

    async def create_product(self, data: Payload) -> Product:
        return await self.products.create(data)

    async def get_product_categories(self) -> list[ProductCategory]:
        return await self.product_categories.list()

    async def create_product_category(self, data: Payload) -> ProductCategory:
        return await self.product_categories.create(data)

    # ── Orders ───────────────────────────────────────────────

    async def get_orders(self) -> list[Order]:
        return await self.orders.list()

    async def get_orders_by_account(self, account_id: int) -> list[Order]:
        return await self.orders.list(Order.account_id == account_id)

    async def create_order(self, data: Payload) -> Order:
        return await self.orders.create(data)

    async def get_order_items(self, order_id: int) -> list[OrderItem]:
        return await self.order_items.list(OrderItem.order_id == order_id)

    async def create_order_item(self, data: Payload) -> OrderItem:
        return await self.order_items.create(data)

    # ── Segment profiles (ICPs) ──────────────────────────────

    async def get_segment_profiles(self) -> list[SegmentProfile]:
        return await self.segment_profiles.list()

    async def get_segment_profile(self, profile_id: int) -> SegmentProfile | None:
        return await self.segment_profiles.get(profile_id)

    async def create_segment_profile(self, data: Payload) -> SegmentProfile:
        return await self.segment_profiles.create(data)

    async def update_segment_profile(self, profile_id: int, data: Payload) -> SegmentProfile | None:
        return await self.segment_profiles.update(profile_id, data)

    async def approve_segment_profile(self, profile_id: int, approved_by: str) -> SegmentProfile | None:
        return await self.segment_profiles.update(
            profile_id,
            {"status": "approved", "approved_by": approved_by, "approved_at": utcnow()},
        )

    async def delete_segment_profile(self, profile_id: int) -> bool:
        return await self.segment_profiles.delete(profile_id)

    async def count_segment_profiles(self) -> int:
        return await self.segment_profiles.count()

    async def get_profile_categories(self, profile_id: int) -> list[ProfileCategory]:
        return await self.profile_categories.list(ProfileCategory.profile_id == profile_id)

    async def create_profile_category(self, data: Payload) -> ProfileCategory:
        return await self.profile_categories.create(data)

    async def delete_profile_categories(self, profile_id: int) -> int:
        return await self.profile_categories.delete_where(ProfileCategory.profile_id == profile_id)

    async def get_profile_review_log(self, profile_id: int) -> list[ProfileReviewLog]:
        return await self.profile_review_log.list(ProfileReviewLog.profile_id == profile_id)

    async def create_profile_review_log(self, data: Payload) -> ProfileReviewLog:
        return await self.profile_review_log.create(data)

    async def delete_profile_review_log(self, profile_id: int) -> int:
        return await self.profile_review_log.delete_where(ProfileReviewLog.profile_id == profile_id)

    # ── Account metrics and category gaps ────────────────────

    async def get_account_metrics(self, account_id: int) -> AccountMetrics | None:
        return await self.account_metrics.first(AccountMetrics.account_id == account_id)

    async def get_latest_account_metrics(self) -> list[AccountMetrics]:
        return await self.account_metrics.list(
            order_by=(AccountMetrics.opportunity_score.desc(), AccountMetrics.id.asc())
        )

    async def create_account_metrics(self, data: Payload) -> AccountMetrics:
        return await self.account_metrics.create(data)

    async def get_account_metrics_batch(self, account_ids: Iterable[int]) -> dict[int, AccountMetrics]:
        """Most recent metrics per account, for the ids this tenant owns."""
        rows = await self.account_metrics.batch(AccountMetrics.account_id, account_ids)
        latest: dict[int, AccountMetrics] = {}
        for row in rows:
            latest.setdefault(row.account_id, row)
        return latest

    async def get_account_category_gaps(self, account_id: int) -> list[AccountCategoryGap]:
        return await self.category_gaps.list(AccountCategoryGap.account_id == account_id)

    async def create_account_category_gap(self, data: Payload) -> AccountCategoryGap:
        return await self.category_gaps.create(data)

    async def get_account_category_gaps_batch(
        self, account_ids: Iterable[int]
    ) -> dict[int, list[AccountCategoryGap]]:
        rows = await self.category_gaps.batch(AccountCategoryGap.account_id, account_ids)
        gaps: dict[int, list[AccountCategoryGap]] = {}
        for row in rows:
            gaps.setdefault(row.account_id, []).append(row)
        return gaps

    # ── Tasks ────────────────────────────────────────────────

    async def get_tasks(self, page: int = 1, limit: int = 50) -> Page[Task]:
        return await self.tasks.page(page, limit)

    async def get_all_tasks(self) -> list[Task]:
        return await self.tasks.list()

    async def get_tasks_by_account(self, account_id: int) -> list[Task]:
        return await self.tasks.list(Task.account_id == account_id)

    async def get_task(self, task_id: int) -> Task | None:
        return await self.tasks.get(task_id)

    async def create_task(self, data: Payload) -> Task:
        return await self.tasks.create(data)

    async def update_task(self, task_id: int, data: Payload) -> Task | None:
        return await self.tasks.update(task_id, data)

    # ── Playbooks ────────────────────────────────────────────

    async def get_playbooks(self) -> list[Playbook]:
        return await self.playbooks.list()

    async def get_playbook(self, playbook_id: int) -> Playbook | None:
        return await self.playbooks.get(playbook_id)

    async def create_playbook(self, data: Payload) -> Playbook:
        return await self.playbooks.create(data)

    async def count_playbooks(self) -> int:
        return await self.playbooks.count()

    async def get_playbook_tasks(self, playbook_id: int) -> list[PlaybookTask]:
        return await self.playbook_tasks.list(PlaybookTask.playbook_id == playbook_id)

    async def create_playbook_task(self, data: Payload) -> PlaybookTask:
        return await self.playbook_tasks.create(data)

    # ── Program accounts ─────────────────────────────────────

    async def get_program_accounts(self) -> list[ProgramAccount]:
        return await self.program_accounts.list()

    async def get_program_account(self, program_account_id: int) -> ProgramAccount | None:
        return await self.program_accounts.get(program_account_id)

    async def get_program_account_by_account_id(self, account_id: int) -> ProgramAccount | None:
        return await self.program_accounts.first(ProgramAccount.account_id == account_id)

    async def create_program_account(self, data: Payload) -> ProgramAccount:
        return await self.program_accounts.create(data)

    async def update_program_account(
        self, program_account_id: int, data: Payload
    ) -> ProgramAccount | None:
        return await self.program_accounts.update(program_account_id, data)

    async def count_program_accounts(self) -> int:
        return await self.program_accounts.count()

    # ── Data uploads ─────────────────────────────────────────

    async def get_data_uploads(self) -> list[DataUpload]:
        return await self.data_uploads.list()

    async def create_data_upload(self, data: Payload) -> DataUpload:
        return await self.data_uploads.create(data)

    # ── Settings and scoring weights ─────────────────────────

    async def get_settings(self) -> list[Setting]:
        return await self.settings.list()

    async def get_setting(self, key: str) -> Setting | None:
        return await self.settings.first(Setting.key == key)

    async def upsert_setting(self, key: str, value: str | None) -> Setting:
        return await self.settings.upsert({"key": key}, {"value": value})

    async def get_scoring_weights(self) -> ScoringWeights | None:
        return await self.scoring_weights.first(ScoringWeights.is_active.is_(True))

    async def upsert_scoring_weights(self, data: Payload, name: str = "default") -> ScoringWeights:
        return await self.scoring_weights.upsert({"name": name}, data)

    # ── Territory managers ───────────────────────────────────

    async def get_territory_managers(self) -> list[TerritoryManager]:
        return await self.territory_managers.list()

    async def create_territory_manager(self, data: Payload) -> TerritoryManager:
        return await self.territory_managers.create(data)

    async def update_territory_manager(self, manager_id: int, data: Payload) -> TerritoryManager | None:
        return await self.territory_managers.update(manager_id, data)

    async def delete_territory_manager(self, manager_id: int) -> bool:
        return await self.territory_managers.delete(manager_id)

    # ── Custom categories ────────────────────────────────────

    async def get_custom_categories(self) -> list[CustomCategory]:
        return await self.custom_categories.list()

    async def create_custom_category(self, data: Payload) -> CustomCategory:
        return await self.custom_categories.create(data)

    async def update_custom_category(self, category_id: int, data: Payload) -> CustomCategory | None:
        return await self.custom_categories.update(category_id, data)

    async def delete_custom_category(self, category_id: int) -> bool:
        return await self.custom_categories.delete(category_id)

    # ── Rev-share tiers ──────────────────────────────────────

    async def get_rev_share_tiers(self) -> list[RevShareTier]:
        return await self.rev_share_tiers.list()

    async def create_rev_share_tier(self, data: Payload) -> RevShareTier:
        return await self.rev_share_tiers.create(data)

    async def update_rev_share_tier(self, tier_id: int, data: Payload) -> RevShareTier | None:
        return await self.rev_share_tiers.update(tier_id, data)

    async def delete_rev_share_tier(self, tier_id: int) -> bool:
        return await self.rev_share_tiers.delete(tier_id)

    # ── Users ────────────────────────────────────────────────

    async def get_users(self) -> list[User]:
        return await self.users.list()

    async def get_user(self, user_id: int) -> User | None:
        return await self.users.get(user_id)

    async def count_users(self) -> int:
        return await self.users.count(User.is_active.is_(True))


def get_tenant_storage(session: AsyncSession, tenant_id: int) -> TenantStorage:
    return TenantStorage(session, tenant_id)
