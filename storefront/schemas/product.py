"""Pydantic schemas for Product API."""

from datetime import datetime

from pydantic import BaseModel, Field


class ProductCreate(BaseModel):
    category_id: int | None = None
    name: str = Field(min_length=1, max_length=200)
    description: str | None = None
    price: float = Field(ge=0)
    discount_price: float | None = Field(default=None, ge=0)
    stock_quantity: int = Field(default=0, ge=0)
    image_url: str | None = None
    is_featured: bool = False


class ProductRead(BaseModel):
    id: int
    category_id: int | None
    name: str
    description: str | None
    price: float
    discount_price: float | None
    stock_quantity: int
    image_url: str | None
    is_featured: bool
    created_at: datetime
    updated_at: datetime

    model_config = {"from_attributes": True}
