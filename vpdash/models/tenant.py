"""Tenant model — top-level isolation boundary."""

from datetime import datetime

from sqlmodel import Field, SQLModel

from vpdash.core.plans import PlanType, SubscriptionStatus
from vpdash.models.base import TimestampMixin


class Tenant(TimestampMixin, SQLModel, table=True):
    __tablename__ = "tenants"

    id: int | None = Field(default=None, primary_key=True)
    name: str = Field(max_length=255, nullable=False)
    slug: str = Field(max_length=100, unique=True, nullable=False, index=True)

    # Billing state, written by subscription webhooks
    plan_type: str = Field(default=PlanType.FREE, max_length=50)
    subscription_status: str = Field(default=SubscriptionStatus.NONE, max_length=20)
    billing_period_end: datetime | None = Field(default=None)
    trial_ends_at: datetime | None = Field(default=None)
    canceled_at: datetime | None = Field(default=None)
    stripe_customer_id: str | None = Field(default=None, max_length=255)
    stripe_subscription_id: str | None = Field(default=None, max_length=255)


# ── Pydantic schemas ─────────────────────────────────────────

class TenantRead(SQLModel):
    id: int
    name: str
    slug: str
    plan_type: str
    subscription_status: str
    billing_period_end: datetime | None


class SubscriptionStatusRead(SQLModel):
    is_active: bool
    status: str
    plan_type: str
    billing_period_end: datetime | None
