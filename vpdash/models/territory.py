"""Territory manager model."""

from sqlalchemy import JSON
from sqlmodel import Column, Field, SQLModel

from vpdash.models.base import TimestampMixin


class TerritoryManager(TimestampMixin, SQLModel, table=True):
    __tablename__ = "territory_managers"

    id: int | None = Field(default=None, primary_key=True)
    tenant_id: int = Field(foreign_key="tenants.id", nullable=False, index=True)
    name: str = Field(max_length=255, nullable=False)
    email: str = Field(max_length=320, nullable=False)
    territories: list | None = Field(default=None, sa_column=Column(JSON))
    is_active: bool = Field(default=True)
