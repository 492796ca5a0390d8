"""Per-tenant key/value settings and opportunity scoring weights."""

from sqlalchemy import UniqueConstraint
from sqlmodel import Field, SQLModel

from vpdash.models.base import TimestampMixin


class Setting(TimestampMixin, SQLModel, table=True):
    __tablename__ = "settings"
    __table_args__ = (UniqueConstraint("tenant_id", "key", name="uq_settings_tenant_key"),)

    id: int | None = Field(default=None, primary_key=True)
    tenant_id: int = Field(foreign_key="tenants.id", nullable=False, index=True)
    key: str = Field(max_length=255, nullable=False)
    value: str | None = None


class ScoringWeights(TimestampMixin, SQLModel, table=True):
    __tablename__ = "scoring_weights"
    __table_args__ = (
        UniqueConstraint("tenant_id", "name", name="uq_scoring_weights_tenant_name"),
    )

    id: int | None = Field(default=None, primary_key=True)
    tenant_id: int = Field(foreign_key="tenants.id", nullable=False, index=True)
    name: str = Field(default="default", max_length=100, nullable=False)
    gap_size_weight: float = Field(default=40.0)
    revenue_potential_weight: float = Field(default=30.0)
    category_count_weight: float = Field(default=30.0)
    description: str | None = None
    is_active: bool = Field(default=True)
    updated_by: str | None = Field(default=None, max_length=255)


# ── Pydantic schemas ─────────────────────────────────────────

class SettingWrite(SQLModel):
    value: str | None = None


class SettingRead(SQLModel):
    id: int
    key: str
    value: str | None


class ScoringWeightsWrite(SQLModel):
    gap_size_weight: float = Field(default=40.0, ge=0, le=100)
    revenue_potential_weight: float = Field(default=30.0, ge=0, le=100)
    category_count_weight: float = Field(default=30.0, ge=0, le=100)
    description: str | None = None


class ScoringWeightsRead(SQLModel):
    id: int
    name: str
    gap_size_weight: float
    revenue_potential_weight: float
    category_count_weight: float
    description: str | None
    is_active: bool
    updated_by: str | None
