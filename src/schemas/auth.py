"""Pydantic schemas for login endpoints."""
from pydantic import BaseModel, Field, field_validator

from schemas.validators import MAX_PASSWORD_BYTES, check_password_bytes


class LoginRequest(BaseModel):
    """Credentials for ``POST /auth/login``."""

    username: str = Field(..., min_length=1, max_length=30)
    password: str = Field(..., min_length=1, max_length=MAX_PASSWORD_BYTES)

    @field_validator("password")
    @classmethod
    def check_password(cls, v: str) -> str:
        """Same byte ceiling the profile updater enforces."""
        return check_password_bytes(v)
