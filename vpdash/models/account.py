"""Account models — distributor customers and their computed gap metrics."""

from datetime import datetime

from sqlmodel import Field, SQLModel

from vpdash.models.base import TimestampMixin, utcnow


class Account(TimestampMixin, SQLModel, table=True):
    __tablename__ = "accounts"

    id: int | None = Field(default=None, primary_key=True)
    tenant_id: int = Field(foreign_key="tenants.id", nullable=False, index=True)

    external_id: str | None = Field(default=None, max_length=255)
    name: str = Field(max_length=255, nullable=False)
    segment: str | None = Field(default=None, max_length=100, index=True)  # HVAC, plumbing, ...
    region: str | None = Field(default=None, max_length=100)
    assigned_tm: str | None = Field(default=None, max_length=255)
    status: str = Field(default="active", max_length=20)  # active, inactive, prospect
    enrollment_status: str | None = Field(default=None, max_length=20)


class AccountMetrics(TimestampMixin, SQLModel, table=True):
    __tablename__ = "account_metrics"

    id: int | None = Field(default=None, primary_key=True)
    tenant_id: int = Field(foreign_key="tenants.id", nullable=False, index=True)
    account_id: int = Field(foreign_key="accounts.id", nullable=False, index=True)
    computed_at: datetime = Field(default_factory=utcnow, nullable=False)

    last_12m_revenue: float | None = None
    last_3m_revenue: float | None = None
    yoy_growth_rate: float | None = None
    category_count: int | None = None
    category_penetration: float | None = None
    category_gap_score: float | None = None
    opportunity_score: float | None = None
    matched_profile_id: int | None = None
    wallet_share_percentage: float | None = None
    days_since_last_order: int | None = None


class AccountCategoryGap(TimestampMixin, SQLModel, table=True):
    __tablename__ = "account_category_gaps"

    id: int | None = Field(default=None, primary_key=True)
    tenant_id: int = Field(foreign_key="tenants.id", nullable=False, index=True)
    account_id: int = Field(foreign_key="accounts.id", nullable=False, index=True)
    category_id: int = Field(nullable=False)

    expected_pct: float | None = None
    actual_pct: float | None = None
    gap_pct: float | None = None
    estimated_opportunity: float | None = None


# ── Pydantic schemas ─────────────────────────────────────────

class AccountCreate(SQLModel):
    external_id: str | None = Field(default=None, max_length=255)
    name: str = Field(max_length=255)
    segment: str | None = Field(default=None, max_length=100)
    region: str | None = Field(default=None, max_length=100)
    assigned_tm: str | None = Field(default=None, max_length=255)
    status: str = Field(default="active", max_length=20)


class AccountUpdate(SQLModel):
    name: str | None = Field(default=None, max_length=255)
    segment: str | None = Field(default=None, max_length=100)
    region: str | None = Field(default=None, max_length=100)
    assigned_tm: str | None = Field(default=None, max_length=255)
    status: str | None = Field(default=None, max_length=20)
    enrollment_status: str | None = Field(default=None, max_length=20)


class AccountRead(SQLModel):
    id: int
    tenant_id: int
    external_id: str | None
    name: str
    segment: str | None
    region: str | None
    assigned_tm: str | None
    status: str
    enrollment_status: str | None
    created_at: datetime


class AccountCategoryGapRead(SQLModel):
    id: int
    account_id: int
    category_id: int
    expected_pct: float | None
    actual_pct: float | None
    gap_pct: float | None
    estimated_opportunity: float | None
