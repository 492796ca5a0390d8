"""Segment profiles (ICPs) — the expected category mix for a customer segment."""

from datetime import datetime

from sqlmodel import Field, SQLModel

from vpdash.models.base import TimestampMixin


class SegmentProfile(TimestampMixin, SQLModel, table=True):
    __tablename__ = "segment_profiles"

    id: int | None = Field(default=None, primary_key=True)
    tenant_id: int = Field(foreign_key="tenants.id", nullable=False, index=True)

    segment: str = Field(max_length=100, nullable=False)
    name: str = Field(max_length=255, nullable=False)
    description: str | None = Field(default=None, max_length=2000)
    min_annual_revenue: float | None = None

    status: str = Field(default="draft", max_length=20)  # draft, approved
    approved_by: str | None = Field(default=None, max_length=255)
    approved_at: datetime | None = Field(default=None)


class ProfileCategory(TimestampMixin, SQLModel, table=True):
    __tablename__ = "profile_categories"

    id: int | None = Field(default=None, primary_key=True)
    tenant_id: int = Field(foreign_key="tenants.id", nullable=False, index=True)
    profile_id: int = Field(foreign_key="segment_profiles.id", nullable=False, index=True)
    category_id: int = Field(nullable=False)
    expected_pct: float | None = None
    importance: float = Field(default=1.0)
    is_required: bool = Field(default=False)
    notes: str | None = None


class ProfileReviewLog(TimestampMixin, SQLModel, table=True):
    __tablename__ = "profile_review_log"

    id: int | None = Field(default=None, primary_key=True)
    tenant_id: int = Field(foreign_key="tenants.id", nullable=False, index=True)
    profile_id: int = Field(foreign_key="segment_profiles.id", nullable=False, index=True)
    reviewer: str = Field(max_length=255, nullable=False)
    action: str | None = Field(default=None, max_length=20)  # created, adjusted, approved
    notes: str | None = None


# ── Pydantic schemas ─────────────────────────────────────────

class SegmentProfileCreate(SQLModel):
    segment: str = Field(max_length=100)
    name: str = Field(max_length=255)
    description: str | None = Field(default=None, max_length=2000)
    min_annual_revenue: float | None = None


class SegmentProfileUpdate(SQLModel):
    segment: str | None = Field(default=None, max_length=100)
    name: str | None = Field(default=None, max_length=255)
    description: str | None = Field(default=None, max_length=2000)
    min_annual_revenue: float | None = None


class SegmentProfileRead(SQLModel):
    id: int
    tenant_id: int
    segment: str
    name: str
    description: str | None
    min_annual_revenue: float | None
    status: str
    approved_by: str | None
    approved_at: datetime | None
    created_at: datetime
    updated_at: datetime
