"""Task model — a call/email/visit assigned to a territory manager."""

from datetime import datetime

from sqlalchemy import JSON
from sqlmodel import Column, Field, SQLModel

from vpdash.models.base import TimestampMixin


class Task(TimestampMixin, SQLModel, table=True):
    __tablename__ = "tasks"

    id: int | None = Field(default=None, primary_key=True)
    tenant_id: int = Field(foreign_key="tenants.id", nullable=False, index=True)
    account_id: int = Field(foreign_key="accounts.id", nullable=False, index=True)
    playbook_id: int | None = Field(default=None, foreign_key="playbooks.id")

    assigned_tm: str | None = Field(default=None, max_length=255)
    assigned_tm_id: int | None = Field(default=None)
    task_type: str = Field(max_length=20, nullable=False)  # call, email, visit
    title: str = Field(max_length=500, nullable=False)
    description: str | None = None
    script: str | None = None
    gap_categories: list | None = Field(default=None, sa_column=Column(JSON))

    status: str = Field(default="pending", max_length=20, index=True)
    due_date: datetime | None = Field(default=None)
    completed_at: datetime | None = Field(default=None)
    outcome: str | None = None


# ── Pydantic schemas ─────────────────────────────────────────

class TaskCreate(SQLModel):
    account_id: int
    playbook_id: int | None = None
    assigned_tm: str | None = Field(default=None, max_length=255)
    task_type: str = Field(max_length=20)
    title: str = Field(max_length=500)
    description: str | None = None
    script: str | None = None
    due_date: datetime | None = None


class TaskUpdate(SQLModel):
    assigned_tm: str | None = Field(default=None, max_length=255)
    title: str | None = Field(default=None, max_length=500)
    description: str | None = None
    status: str | None = Field(default=None, max_length=20)
    due_date: datetime | None = None
    completed_at: datetime | None = None
    outcome: str | None = None


class TaskRead(SQLModel):
    id: int
    tenant_id: int
    account_id: int
    playbook_id: int | None
    assigned_tm: str | None
    task_type: str
    title: str
    description: str | None
    script: str | None
    gap_categories: list | None
    status: str
    due_date: datetime | None
    completed_at: datetime | None
    outcome: str | None
    created_at: datetime


class TaskPage(SQLModel):
    tasks: list[TaskRead]
    total: int
    page: int
    limit: int
