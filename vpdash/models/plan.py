"""SubscriptionPlan model — the plan registry keyed by slug."""

from sqlalchemy import JSON
from sqlmodel import Column, Field, SQLModel

from vpdash.models.base import TimestampMixin


class SubscriptionPlan(TimestampMixin, SQLModel, table=True):
    __tablename__ = "subscription_plans"

    id: int | None = Field(default=None, primary_key=True)
    name: str = Field(max_length=100, nullable=False)
    slug: str = Field(max_length=50, unique=True, nullable=False, index=True)
    monthly_price: float = Field(default=0.0)
    yearly_price: float = Field(default=0.0)
    features: list | None = Field(default=None, sa_column=Column(JSON))
    # feature key -> cap (-1 unlimited), plus "ai_credits"
    limits: dict | None = Field(default=None, sa_column=Column(JSON))
    is_active: bool = Field(default=True)
    display_order: int = Field(default=0)


# ── Pydantic schemas ─────────────────────────────────────────

class SubscriptionPlanRead(SQLModel):
    slug: str
    name: str
    monthly_price: float
    yearly_price: float
    features: list | None
    limits: dict | None
    display_order: int
