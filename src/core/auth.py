"""Session cookie authentication."""
import logging

from fastapi import Depends, HTTPException, Request, status
from sqlalchemy.ext.asyncio import AsyncSession

from core.auth_cache import get_auth_cache
from core.config import Settings, get_settings
from core.sessions import get_session_store
from db.session import get_async_session
from schemas.current_user import CurrentUser
from services import user_service

logger = logging.getLogger(__name__)


def _unauthorized() -> HTTPException:
    return HTTPException(
        status_code=status.HTTP_401_UNAUTHORIZED,
        detail="Not authenticated",
    )


async def get_current_user(
    request: Request,
    db: AsyncSession = Depends(get_async_session),
    settings: Settings = Depends(get_settings),
) -> CurrentUser:
    """
    Resolve the session cookie to the authenticated user's identity.

    Checks the identity cache before the database and fills it on a miss.

    Raises:
        HTTPException: 401 if there is no cookie, the session is unknown or
            expired, or the user it points to no longer exists.
    """
    session_id = request.cookies.get(settings.session_cookie_name)
    store = get_session_store()
    if not session_id or store is None:
        raise _unauthorized()

    session = await store.get(session_id)
    if session is None:
        logger.debug("session_miss session=%s...", session_id[:8])
        raise _unauthorized()

    auth_cache = get_auth_cache()
    if auth_cache is not None:
        cached = await auth_cache.get_by_user_id(session.user_id)
        if cached is not None:
            return cached

    user = await user_service.get_current_user_by_id(db, session.user_id)
    if user is None:
        logger.warning("session_user_missing user_id=%s", session.user_id)
        raise _unauthorized()

    if auth_cache is not None:
        await auth_cache.set(user)
    return user
