"""DataUpload model — one row per imported CSV file."""

from sqlmodel import Field, SQLModel

from vpdash.models.base import TimestampMixin


class DataUpload(TimestampMixin, SQLModel, table=True):
    __tablename__ = "data_uploads"

    id: int | None = Field(default=None, primary_key=True)
    tenant_id: int = Field(foreign_key="tenants.id", nullable=False, index=True)
    upload_type: str = Field(max_length=20, nullable=False)  # accounts, orders, products, categories
    file_name: str = Field(max_length=500, nullable=False)
    row_count: int | None = None
    status: str = Field(default="processing", max_length=20)  # processing, completed, failed
    error_message: str | None = None
    uploaded_by: str | None = Field(default=None, max_length=255)
