"""Pydantic schemas for Cart API."""

from datetime import datetime

from pydantic import BaseModel, Field


class CartAdd(BaseModel):
    product_id: int = Field(gt=0)
    quantity: int = Field(default=1, ge=1)


class CartUpdate(BaseModel):
    quantity: int  # <= 0 removes the line


class CartItemRead(BaseModel):
    id: int
    user_id: int
    product_id: int
    quantity: int
    created_at: datetime
    updated_at: datetime
    product_name: str
    product_price: float
    product_image: str | None


class CartRead(BaseModel):
    items: list[CartItemRead]
    total: float


class CartMessage(BaseModel):
    success: bool = True
    message: str
