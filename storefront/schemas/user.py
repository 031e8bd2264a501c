"""Pydantic schemas for the public user profile."""

from datetime import datetime

from pydantic import BaseModel


class UserRead(BaseModel):
    id: int
    username: str
    email: str
    full_name: str | None = None
    address: str | None = None
    phone: str | None = None
    is_admin: bool
    created_at: datetime
    updated_at: datetime
    # password_hash is NEVER exposed

    model_config = {"from_attributes": True}
