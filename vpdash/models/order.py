"""Order history models."""

from datetime import datetime

from sqlmodel import Field, SQLModel

from vpdash.models.base import TimestampMixin


class Order(TimestampMixin, SQLModel, table=True):
    __tablename__ = "orders"

    id: int | None = Field(default=None, primary_key=True)
    tenant_id: int = Field(foreign_key="tenants.id", nullable=False, index=True)
    account_id: int = Field(foreign_key="accounts.id", nullable=False, index=True)
    order_date: datetime = Field(nullable=False)
    total_amount: float = Field(nullable=False)
    margin_amount: float | None = None


class OrderItem(TimestampMixin, SQLModel, table=True):
    __tablename__ = "order_items"

    id: int | None = Field(default=None, primary_key=True)
    tenant_id: int = Field(foreign_key="tenants.id", nullable=False, index=True)
    order_id: int = Field(foreign_key="orders.id", nullable=False, index=True)
    product_id: int = Field(foreign_key="products.id", nullable=False)
    quantity: float = Field(nullable=False)
    unit_price: float = Field(nullable=False)
    line_total: float = Field(nullable=False)
