"""SQLAlchemy models."""
from models.base import Base, TimestampMixin
from models.uploaded_file import UploadedFile
from models.user import User

__all__ = [
    "Base",
    "TimestampMixin",
    "UploadedFile",
    "User",
]
