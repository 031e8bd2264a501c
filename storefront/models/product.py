"""Product model: catalog entries with stock levels."""

from datetime import datetime, timezone
from sqlmodel import SQLModel, Field


class Product(SQLModel, table=True):
    __tablename__ = "products"

    id: int | None = Field(default=None, primary_key=True)
    category_id: int | None = Field(default=None, index=True)
    name: str
    description: str | None = None
    price: float
    discount_price: float | None = None
    stock_quantity: int = 0
    image_url: str | None = None
    is_featured: bool = Field(default=False, index=True)
    created_at: datetime = Field(default_factory=lambda: datetime.now(timezone.utc))
    updated_at: datetime = Field(default_factory=lambda: datetime.now(timezone.utc))
