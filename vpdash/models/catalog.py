"""Product catalog models — products, their categories and tenant-defined categories."""

from sqlmodel import Field, SQLModel

from vpdash.models.base import TimestampMixin


class ProductCategory(TimestampMixin, SQLModel, table=True):
    __tablename__ = "product_categories"

    id: int | None = Field(default=None, primary_key=True)
    tenant_id: int = Field(foreign_key="tenants.id", nullable=False, index=True)
    name: str = Field(max_length=255, nullable=False)
    parent_id: int | None = Field(default=None)


class Product(TimestampMixin, SQLModel, table=True):
    __tablename__ = "products"

    id: int | None = Field(default=None, primary_key=True)
    tenant_id: int = Field(foreign_key="tenants.id", nullable=False, index=True)
    sku: str = Field(max_length=100, nullable=False)
    name: str | None = Field(default=None, max_length=255)
    category_id: int | None = Field(default=None)
    unit_cost: float | None = None
    unit_price: float | None = None


class CustomCategory(TimestampMixin, SQLModel, table=True):
    __tablename__ = "custom_categories"

    id: int | None = Field(default=None, primary_key=True)
    tenant_id: int = Field(foreign_key="tenants.id", nullable=False, index=True)
    name: str = Field(max_length=255, nullable=False)
    display_order: int = Field(default=0)
    is_active: bool = Field(default=True)
