"""Pydantic schemas for the authentication API.

Field names on the wire are camelCase (``userId``, ``requireTwoFactor``) to match
the storefront frontend; snake_case is accepted on input as well.
"""

import re

from pydantic import BaseModel, Field, field_validator

from storefront.schemas.user import UserRead

_EMAIL_RE = re.compile(r"^[^@\s]+@[^@\s]+\.[^@\s]+$")
MAX_ID = 2**63 - 1  # largest SQL BIGINT


class RegisterRequest(BaseModel):
    username: str = Field(min_length=1, max_length=50)
    email: str = Field(min_length=3, max_length=255)
    password: str = Field(min_length=1)
    full_name: str | None = Field(default=None, max_length=120)

    @field_validator("username")
    @classmethod
    def _trim_username(cls, value: str) -> str:
        text = value.strip()
        if not text:
            raise ValueError("must not be empty")
        return text

    @field_validator("email")
    @classmethod
    def _validate_email(cls, value: str) -> str:
        email = value.strip().lower()
        if not _EMAIL_RE.fullmatch(email):
            raise ValueError("must be a valid email address")
        return email


class LoginRequest(BaseModel):
    username: str = Field(min_length=1)
    password: str = Field(min_length=1)


class TwoFactorCodeRequest(BaseModel):
    user_id: int = Field(alias="userId", gt=0, le=MAX_ID)
    code: str = Field(min_length=1, max_length=16)

    model_config = {"populate_by_name": True}

    @field_validator("code", mode="before")
    @classmethod
    def _code_as_text(cls, value):
        # Authenticator codes typed into numeric inputs arrive as JSON numbers
        if isinstance(value, int) and not isinstance(value, bool):
            return f"{value:06d}"
        return value


class AuthResponse(BaseModel):
    success: bool
    message: str
    user_id: int | None = Field(default=None, alias="userId")
    require_two_factor: bool | None = Field(default=None, alias="requireTwoFactor")

    model_config = {"populate_by_name": True}


class EnrollmentResponse(BaseModel):
    success: bool
    message: str
    qr_code_url: str = Field(alias="qrCodeUrl")
    secret_key: str = Field(alias="secretKey")

    model_config = {"populate_by_name": True}


class CurrentUserResponse(BaseModel):
    user: UserRead | None = None
