"""Pydantic schemas for profile endpoints."""
from datetime import datetime
from typing import Literal

from pydantic import BaseModel, ConfigDict, EmailStr, Field, ValidationInfo, field_validator

from schemas.validators import blank_to_none, normalize_email, validate_password, validate_username


class FileReference(BaseModel):
    """An uploaded file as listed in the profile view."""

    model_config = ConfigDict(from_attributes=True, populate_by_name=True)

    id: int
    filename: str
    content_type: str = Field(serialization_alias="contentType")
    size_bytes: int = Field(serialization_alias="sizeBytes")
    created_at: datetime = Field(serialization_alias="uploadedAt")


class ProfileView(BaseModel):
    """
    Public projection of a user record returned to its owner.

    Exactly username, email and uploaded files; never the password hash,
    verification state or token.
    """

    model_config = ConfigDict(from_attributes=True, populate_by_name=True)

    username: str
    email: str
    files: list[FileReference] = Field(
        default_factory=list,
        serialization_alias="filesUploaded",
    )


class ProfileResponse(BaseModel):
    """Envelope for a successful profile read."""

    success: Literal[True] = True
    data: ProfileView


class MessageResponse(BaseModel):
    """Envelope for a successful write."""

    success: Literal[True] = True
    message: str


class ProfileUpdateQuery(BaseModel):
    """
    Query parameters accepted by ``PUT /profile``.

    Every field is optional; blank values count as absent. At least one field
    must be present, which the endpoint checks against the raw query.
    """

    model_config = ConfigDict(extra="ignore")

    username: str | None = Field(default=None, description="New username")
    password: str | None = Field(default=None, description="New plaintext password")
    email: EmailStr | None = Field(
        default=None,
        description="New email address; requires re-verification and ends the session",
    )

    @field_validator("username", "password", "email", mode="before")
    @classmethod
    def blank_is_absent(cls, v: object, info: ValidationInfo) -> object:
        """Treat empty query values as not provided; trim the email."""
        v = blank_to_none(v)
        if info.field_name == "email" and isinstance(v, str):
            return v.strip()
        return v

    @field_validator("username")
    @classmethod
    def check_username(cls, v: str | None) -> str | None:
        """Validate username format."""
        return None if v is None else validate_username(v)

    @field_validator("password")
    @classmethod
    def check_password(cls, v: str | None) -> str | None:
        """Validate password length."""
        return None if v is None else validate_password(v)

    @field_validator("email")
    @classmethod
    def check_email(cls, v: str | None) -> str | None:
        """Lower-case the address and enforce the column length."""
        return None if v is None else normalize_email(v)

    def is_empty(self) -> bool:
        """True when no field survived validation."""
        return self.username is None and self.password is None and self.email is None
