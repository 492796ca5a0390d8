"""Revenue-share program models — enrolled accounts and fee tiers."""

from datetime import datetime
from typing import Literal

from sqlmodel import Field, SQLModel

from vpdash.models.base import TimestampMixin, utcnow


class ProgramAccount(TimestampMixin, SQLModel, table=True):
    __tablename__ = "program_accounts"

    id: int | None = Field(default=None, primary_key=True)
    tenant_id: int = Field(foreign_key="tenants.id", nullable=False, index=True)
    account_id: int = Field(foreign_key="accounts.id", nullable=False, index=True)

    enrolled_at: datetime = Field(default_factory=utcnow, nullable=False)
    enrolled_by: str | None = Field(default=None, max_length=255)
    baseline_start: datetime = Field(nullable=False)
    baseline_end: datetime = Field(nullable=False)
    baseline_revenue: float = Field(nullable=False)
    share_rate: float = Field(nullable=False)
    status: str = Field(default="active", max_length=20)  # active, paused, graduated
    notes: str | None = None

    # Graduation objectives
    target_penetration: float | None = None
    target_incremental_revenue: float | None = None
    target_duration_months: int | None = None
    graduation_criteria: str = Field(default="any", max_length=10)  # any, all
    graduated_at: datetime | None = Field(default=None)
    graduation_notes: str | None = None


class RevShareTier(TimestampMixin, SQLModel, table=True):
    __tablename__ = "rev_share_tiers"

    id: int | None = Field(default=None, primary_key=True)
    tenant_id: int = Field(foreign_key="tenants.id", nullable=False, index=True)
    min_revenue: float = Field(default=0.0)
    max_revenue: float | None = None  # NULL = open-ended top tier
    share_rate: float = Field(default=15.0)
    display_order: int = Field(default=0)
    is_active: bool = Field(default=True)


# ── Pydantic schemas ─────────────────────────────────────────

class ProgramAccountCreate(SQLModel):
    account_id: int
    baseline_start: datetime
    baseline_end: datetime
    baseline_revenue: float = Field(ge=0)
    share_rate: float = Field(ge=0, le=100)
    notes: str | None = None
    target_penetration: float | None = None
    target_incremental_revenue: float | None = None
    target_duration_months: int | None = None
    graduation_criteria: Literal["any", "all"] = "any"


class ProgramAccountUpdate(SQLModel):
    share_rate: float | None = Field(default=None, ge=0, le=100)
    status: Literal["active", "paused", "graduated"] | None = None
    notes: str | None = None
    graduated_at: datetime | None = None
    graduation_notes: str | None = None


class ProgramAccountRead(SQLModel):
    id: int
    tenant_id: int
    account_id: int
    enrolled_at: datetime
    enrolled_by: str | None
    baseline_start: datetime
    baseline_end: datetime
    baseline_revenue: float
    share_rate: float
    status: str
    notes: str | None
    graduation_criteria: str
    graduated_at: datetime | None
