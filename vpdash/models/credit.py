"""AI credit models — per-period ledger and the append-only transaction log."""

from datetime import datetime

from sqlalchemy import JSON, Index, UniqueConstraint
from sqlmodel import Column, Field, SQLModel

from vpdash.models.base import TimestampMixin, utcnow


class CreditLedger(TimestampMixin, SQLModel, table=True):
    __tablename__ = "tenant_credit_ledger"
    __table_args__ = (
        UniqueConstraint("tenant_id", "billing_period", name="uq_credit_ledger_tenant_period"),
    )

    id: int | None = Field(default=None, primary_key=True)
    tenant_id: int = Field(foreign_key="tenants.id", nullable=False, index=True)
    billing_period: str = Field(max_length=7, nullable=False)  # "YYYY-MM"

    total_allowance: int = Field(nullable=False)  # -1 = unlimited
    credits_used: int = Field(default=0, nullable=False)
    credits_remaining: int = Field(nullable=False)


class CreditTransaction(SQLModel, table=True):
    """Never updated or deleted once written."""

    __tablename__ = "credit_transactions"
    __table_args__ = (
        Index("ix_credit_transactions_tenant_period", "tenant_id", "billing_period"),
    )

    id: int | None = Field(default=None, primary_key=True)
    tenant_id: int = Field(foreign_key="tenants.id", nullable=False)
    action_type: str = Field(max_length=50, nullable=False)
    credits_used: int = Field(nullable=False)
    billing_period: str = Field(max_length=7, nullable=False)
    # Column is named "metadata"; the attribute name is reserved by SQLAlchemy
    details: dict | None = Field(default=None, sa_column=Column("metadata", JSON))
    created_at: datetime = Field(default_factory=utcnow, nullable=False)


# ── Pydantic schemas ─────────────────────────────────────────

class CreditMetadata(SQLModel):
    account_id: int | None = None
    account_name: str | None = None
    description: str | None = None


class CreditTransactionRead(SQLModel):
    id: int
    action_type: str
    credits_used: int
    billing_period: str
    details: dict | None
    created_at: datetime


class ActionBreakdown(SQLModel):
    count: int
    credits_used: int
    label: str


class CreditUsageRead(SQLModel):
    billing_period: str
    total_allowance: int
    credits_used: int
    credits_remaining: int
    unlimited: bool
    percent_used: int
    action_breakdown: dict[str, ActionBreakdown]
    recent_transactions: list[CreditTransactionRead]
    action_costs: dict[str, int]
