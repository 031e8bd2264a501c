"""Second-factor (TOTP) record, at most one per user."""

from datetime import datetime, timezone
from sqlmodel import SQLModel, Field


class TwoFactorAuth(SQLModel, table=True):
    __tablename__ = "user_2fa"

    id: int | None = Field(default=None, primary_key=True)
    user_id: int = Field(foreign_key="users.id", unique=True, index=True)
    secret_key: str  # base32 shared secret
    is_enabled: bool = Field(default=False)  # flipped only by a confirmed code
    created_at: datetime = Field(default_factory=lambda: datetime.now(timezone.utc))
