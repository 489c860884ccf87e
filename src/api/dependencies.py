"""FastAPI dependencies for injection."""
from fastapi import HTTPException, status

from core.auth import get_current_user
from core.config import get_settings
from core.mail import MailSender, get_mail_sender
from core.sessions import SessionStore, get_session_store
from db.session import get_async_session

__all__ = [
    "get_async_session",
    "get_current_user",
    "get_settings",
    "require_mail_sender",
    "require_session_store",
]


def require_session_store() -> SessionStore:
    """Return the session store, or 503 if startup did not configure one."""
    store = get_session_store()
    if store is None:
        raise HTTPException(
            status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
            detail="Session store unavailable",
        )
    return store


def require_mail_sender() -> MailSender:
    """Return the mail sender, or 503 if startup did not configure one."""
    sender = get_mail_sender()
    if sender is None:
        raise HTTPException(
            status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
            detail="Mail sender unavailable",
        )
    return sender
