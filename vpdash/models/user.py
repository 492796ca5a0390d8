"""User model — belongs to a tenant."""

from enum import StrEnum
from types import MappingProxyType

from sqlmodel import Field, SQLModel

from vpdash.models.base import TimestampMixin


class UserRole(StrEnum):
    SUPER_ADMIN = "super_admin"
    REVIEWER = "reviewer"
    VIEWER = "viewer"


ROLE_PERMISSIONS = MappingProxyType({
    UserRole.SUPER_ADMIN: frozenset(
        {"read", "write", "delete", "approve", "manage_users", "manage_settings"}
    ),
    UserRole.REVIEWER: frozenset({"read", "approve"}),
    UserRole.VIEWER: frozenset({"read"}),
})


def has_permission(role: str, permission: str) -> bool:
    return permission in ROLE_PERMISSIONS.get(role, frozenset())


class User(TimestampMixin, SQLModel, table=True):
    __tablename__ = "users"

    id: int | None = Field(default=None, primary_key=True)
    tenant_id: int = Field(foreign_key="tenants.id", nullable=False, index=True)
    email: str = Field(max_length=320, nullable=False, index=True)
    password_hash: str = Field(nullable=False)
    display_name: str = Field(default="", max_length=255)
    role: UserRole = Field(default=UserRole.VIEWER)
    is_active: bool = Field(default=True)


# ── Pydantic schemas ─────────────────────────────────────────

class UserCreate(SQLModel):
    email: str = Field(max_length=320)
    password: str = Field(min_length=8, max_length=128)
    display_name: str = Field(default="", max_length=255)
    role: UserRole = UserRole.VIEWER


class UserRead(SQLModel):
    id: int
    tenant_id: int
    email: str
    display_name: str
    role: UserRole
    is_active: bool
