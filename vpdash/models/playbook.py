"""Playbook models — a generated batch of sales tasks."""

from datetime import datetime

from sqlalchemy import JSON
from sqlmodel import Column, Field, SQLModel

from vpdash.models.base import TimestampMixin, utcnow


class Playbook(TimestampMixin, SQLModel, table=True):
    __tablename__ = "playbooks"

    id: int | None = Field(default=None, primary_key=True)
    tenant_id: int = Field(foreign_key="tenants.id", nullable=False, index=True)
    name: str = Field(max_length=255, nullable=False)
    generated_by: str | None = Field(default=None, max_length=255)
    generated_at: datetime = Field(default_factory=utcnow, nullable=False)
    filters_used: dict | None = Field(default=None, sa_column=Column(JSON))
    task_count: int | None = None


class PlaybookTask(TimestampMixin, SQLModel, table=True):
    __tablename__ = "playbook_tasks"

    id: int | None = Field(default=None, primary_key=True)
    tenant_id: int = Field(foreign_key="tenants.id", nullable=False, index=True)
    playbook_id: int = Field(foreign_key="playbooks.id", nullable=False, index=True)
    task_id: int = Field(foreign_key="tasks.id", nullable=False)


# ── Pydantic schemas ─────────────────────────────────────────

class PlaybookCreate(SQLModel):
    name: str = Field(max_length=255)
    filters_used: dict | None = None


class PlaybookGenerate(SQLModel):
    name: str = Field(default="Gap playbook", max_length=255)
    segment: str | None = None
    max_accounts: int = Field(default=10, ge=1, le=100)
    min_gap_pct: float = Field(default=0.0, ge=0.0)


class PlaybookRead(SQLModel):
    id: int
    tenant_id: int
    name: str
    generated_by: str | None
    generated_at: datetime
    filters_used: dict | None
    task_count: int | None


class PlaybookGenerated(PlaybookRead):
    """Returned by the generate endpoint — includes the credit balance after the charge."""
    credits_remaining: int
