"""Profile endpoints: read, update, and email verification."""
import logging
from typing import Annotated

from fastapi import APIRouter, Depends, Query, Request, status
from fastapi.responses import JSONResponse
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from api.dependencies import (
    get_async_session,
    get_current_user,
    get_settings,
    require_mail_sender,
    require_session_store,
)
from core.auth_cache import get_auth_cache
from core.config import Settings
from core.mail import MailSender
from core.profile_cache import get_profile_cache
from core.sessions import SessionStore, session_scope
from schemas.current_user import CurrentUser
from schemas.errors import ErrorResponse, ValidationErrorResponse
from schemas.profile import MessageResponse, ProfileResponse, ProfileUpdateQuery
from services import profile_service
from services.exceptions import InvalidVerificationTokenError, SessionTeardownError

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/profile", tags=["profile"])


def _error(status_code: int, message: str) -> JSONResponse:
    return JSONResponse(status_code=status_code, content=ErrorResponse(error=message).model_dump())


@router.get(
    "",
    response_model=ProfileResponse,
    responses={500: {"model": ErrorResponse}},
)
async def get_profile(
    request: Request,
    current_user: CurrentUser = Depends(get_current_user),
    db: AsyncSession = Depends(get_async_session),
) -> JSONResponse:
    """
    Get the current user's username, email and uploaded files.

    The response is mirrored into Redis for 15 minutes under
    ``{user_id}:GET:/profile``.
    """
    try:
        view = await profile_service.get_profile_view(db, current_user.id)
        payload = ProfileResponse(data=view).model_dump(mode="json", by_alias=True)
        profile_cache = get_profile_cache()
        if profile_cache is not None:
            await profile_cache.set(current_user.id, request.method, router.prefix, payload)
    except Exception:
        await db.rollback()
        logger.exception("get_profile_failed user_id=%s", current_user.id)
        return _error(status.HTTP_500_INTERNAL_SERVER_ERROR, "Couldn't get profile")
    return JSONResponse(content=payload)


@router.put(
    "",
    response_model=MessageResponse,
    responses={
        400: {"model": ValidationErrorResponse},
        500: {"model": ErrorResponse},
    },
)
async def update_profile(
    request: Request,
    changes: Annotated[ProfileUpdateQuery, Query()],
    current_user: CurrentUser = Depends(get_current_user),
    db: AsyncSession = Depends(get_async_session),
    settings: Settings = Depends(get_settings),
    session_store: SessionStore = Depends(require_session_store),
    mail_sender: MailSender = Depends(require_mail_sender),
) -> JSONResponse:
    """
    Update any of username, password and email, passed as query parameters.

    Fields are applied in that order, each committed on its own. Changing the
    email resets verification, mails a new verification link and logs the
    user out. A failure part-way through keeps the fields already written.
    """
    if changes.is_empty():
        return _error(status.HTTP_400_BAD_REQUEST, "Nothing was provided in the request query")

    # get_current_user has already resolved this cookie to a live session
    session_id = request.cookies[settings.session_cookie_name]
    result = None
    try:
        async with session_scope(session_store, session_id) as scope:
            result = await profile_service.update_profile(
                db,
                current_user,
                changes,
                mail_sender=mail_sender,
                verification_url=str(request.url_for("verify_email")),
                auth_cache=get_auth_cache(),
            )
            if result.email_changed:
                scope.invalidate()
    except SessionTeardownError as e:
        logger.warning("logout_after_email_change_failed user_id=%s error=%s", current_user.id, e)
    except Exception:
        await db.rollback()
        logger.exception("update_profile_failed user_id=%s", current_user.id)
        return _error(status.HTTP_500_INTERNAL_SERVER_ERROR, "Updating profile failed")

    profile_cache = get_profile_cache()
    if profile_cache is not None:
        await profile_cache.invalidate(current_user.id, router.prefix)

    response = JSONResponse(
        content=MessageResponse(message="Profile updated successfully").model_dump(),
    )
    if result is not None and result.email_changed:
        response.delete_cookie(settings.session_cookie_name)
    return response


@router.get(
    "/email-verification",
    name="verify_email",
    response_model=MessageResponse,
    responses={400: {"model": ErrorResponse}, 500: {"model": ErrorResponse}},
)
async def verify_email(
    token: str | None = None,
    db: AsyncSession = Depends(get_async_session),
) -> JSONResponse:
    """Consume an email verification token from the link sent on email change."""
    if not token:
        return _error(status.HTTP_400_BAD_REQUEST, "Invalid verification token")
    try:
        user = await profile_service.verify_email(db, token)
    except InvalidVerificationTokenError:
        return _error(status.HTTP_400_BAD_REQUEST, "Invalid verification token")
    except SQLAlchemyError:
        await db.rollback()
        logger.exception("verify_email_failed")
        return _error(status.HTTP_500_INTERNAL_SERVER_ERROR, "Verifying email failed")

    auth_cache = get_auth_cache()
    if auth_cache is not None:
        await auth_cache.set(user)
    return JSONResponse(content=MessageResponse(message="Email verified successfully").model_dump())
