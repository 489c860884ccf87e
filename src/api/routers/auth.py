"""Login and logout endpoints backed by server-side sessions."""
import logging

from fastapi import APIRouter, Depends, Request, status
from fastapi.responses import JSONResponse
from sqlalchemy.ext.asyncio import AsyncSession

from api.dependencies import get_async_session, get_settings, require_session_store
from core.auth_cache import get_auth_cache
from core.config import Settings
from core.sessions import SessionStore
from schemas.auth import LoginRequest
from schemas.errors import ErrorResponse
from schemas.profile import MessageResponse
from services import user_service
from services.exceptions import SessionCreateError, SessionTeardownError

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/auth", tags=["auth"])


@router.post(
    "/login",
    response_model=MessageResponse,
    responses={401: {"model": ErrorResponse}, 503: {"model": ErrorResponse}},
)
async def login(
    credentials: LoginRequest,
    db: AsyncSession = Depends(get_async_session),
    settings: Settings = Depends(get_settings),
    session_store: SessionStore = Depends(require_session_store),
) -> JSONResponse:
    """Check username and password and start a session (``sid`` cookie)."""
    user = await user_service.authenticate(db, credentials.username, credentials.password)
    if user is None:
        return JSONResponse(
            status_code=status.HTTP_401_UNAUTHORIZED,
            content=ErrorResponse(error="Invalid username or password").model_dump(),
        )

    try:
        session_id = await session_store.create(user.id)
    except SessionCreateError:
        logger.exception("login_session_create_failed user_id=%s", user.id)
        return JSONResponse(
            status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
            content=ErrorResponse(error="Could not start session").model_dump(),
        )

    auth_cache = get_auth_cache()
    if auth_cache is not None:
        await auth_cache.set(user_service.to_current_user(user))

    response = JSONResponse(content=MessageResponse(message="Logged in successfully").model_dump())
    response.set_cookie(
        settings.session_cookie_name,
        session_id,
        max_age=settings.session_ttl_seconds,
        httponly=True,
        samesite="lax",
        secure=settings.session_cookie_secure,
    )
    return response


@router.post("/logout", response_model=MessageResponse)
async def logout(
    request: Request,
    settings: Settings = Depends(get_settings),
    session_store: SessionStore = Depends(require_session_store),
) -> JSONResponse:
    """End the current session. Succeeds even if there was none."""
    session_id = request.cookies.get(settings.session_cookie_name)
    if session_id:
        try:
            await session_store.destroy(session_id)
        except SessionTeardownError as e:
            logger.warning("logout_failed error=%s", e)

    response = JSONResponse(content=MessageResponse(message="Logged out successfully").model_dump())
    response.delete_cookie(settings.session_cookie_name)
    return response
