"""User model for registered accounts."""
from typing import TYPE_CHECKING

from sqlalchemy import Boolean, String, false
from sqlalchemy.orm import Mapped, mapped_column, relationship

from models.base import Base, TimestampMixin

if TYPE_CHECKING:
    from models.uploaded_file import UploadedFile


class User(Base, TimestampMixin):
    """User model - credentials, email verification state and uploaded files."""

    __tablename__ = "users"

    id: Mapped[int] = mapped_column(primary_key=True)
    username: Mapped[str] = mapped_column(String(30), unique=True, index=True)
    email: Mapped[str] = mapped_column(String(255), unique=True, index=True)
    password: Mapped[str] = mapped_column(String(255), comment="bcrypt hash")
    verified: Mapped[bool] = mapped_column(
        Boolean,
        default=False,
        server_default=false(),
    )
    token: Mapped[str | None] = mapped_column(
        String(64),
        nullable=True,
        index=True,
        comment="Pending email verification token, cleared once verified",
    )

    files: Mapped[list["UploadedFile"]] = relationship(
        back_populates="user",
        cascade="all, delete-orphan",
        order_by="UploadedFile.id",
    )
