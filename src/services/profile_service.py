"""
Service layer for reading and updating the authenticated user's profile.

Updates are applied one field at a time, in the order username, password,
email. Each field is its own UPDATE and its own commit: there is no transaction
spanning the fields, so a failure on a later field leaves earlier ones
committed. After every confirmed write the caller's identity is rebuilt from
the row the database returned.
"""
import logging
from dataclasses import dataclass
from typing import TYPE_CHECKING, Any

from sqlalchemy import select, update
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import selectinload

from core.security import generate_verification_token, hash_password
from models.user import User
from schemas.current_user import CurrentUser
from schemas.profile import ProfileUpdateQuery, ProfileView
from services.exceptions import InvalidVerificationTokenError, UserNotFoundError
from services.user_service import to_current_user

if TYPE_CHECKING:
    from core.auth_cache import AuthCache
    from core.mail import MailSender

logger = logging.getLogger(__name__)

VERIFICATION_SUBJECT = "Verify Account"
VERIFICATION_BODY = "Click this link to verify your account: {link}"


@dataclass(frozen=True)
class ProfileUpdateResult:
    """Outcome of a profile update: the confirmed identity and what changed."""

    user: CurrentUser
    updated_fields: tuple[str, ...]
    verification_token: str | None = None

    @property
    def email_changed(self) -> bool:
        """True when the email step ran, which ends the caller's session."""
        return self.verification_token is not None


async def get_profile_view(db: AsyncSession, user_id: int) -> ProfileView:
    """
    Load the profile view for a user.

    Raises:
        UserNotFoundError: If the user does not exist.
    """
    result = await db.execute(
        select(User).options(selectinload(User.files)).where(User.id == user_id),
    )
    user = result.scalar_one_or_none()
    if user is None:
        raise UserNotFoundError(user_id)
    return ProfileView.model_validate(user)


async def _update_user_columns(db: AsyncSession, user_id: int, **values: Any) -> CurrentUser:
    """Apply a single-row UPDATE, commit it, and return the confirmed identity."""
    result = await db.execute(
        update(User)
        .where(User.id == user_id)
        .values(**values)
        .returning(User.id, User.username, User.email, User.verified),
    )
    row = result.one_or_none()
    if row is None:
        raise UserNotFoundError(user_id)
    await db.commit()
    return CurrentUser(id=row.id, username=row.username, email=row.email, verified=row.verified)


async def _change_email(db: AsyncSession, user_id: int, email: str) -> tuple[CurrentUser, str]:
    """Set a new unverified email with a fresh token; returns (identity, token)."""
    user = await db.get(User, user_id, populate_existing=True)
    if user is None:
        raise UserNotFoundError(user_id)
    token = generate_verification_token()
    user.email = email
    user.verified = False
    user.token = token
    await db.commit()
    return to_current_user(user), token


async def _refresh_identity_cache(auth_cache: "AuthCache | None", user: CurrentUser) -> None:
    if auth_cache is not None:
        await auth_cache.set(user)


async def update_profile(
    db: AsyncSession,
    user: CurrentUser,
    changes: ProfileUpdateQuery,
    *,
    mail_sender: "MailSender",
    verification_url: str,
    auth_cache: "AuthCache | None" = None,
) -> ProfileUpdateResult:
    """
    Apply the requested profile changes.

    Args:
        db: Database session. Committed after each field.
        user: Identity of the caller at the start of the request.
        changes: Validated fields; None means "leave unchanged".
        mail_sender: Used to send the verification email on an email change.
        verification_url: Absolute URL of the verification endpoint; the token
            is appended as the ``token`` query parameter.
        auth_cache: Identity cache refreshed after each confirmed write.

    Returns:
        ProfileUpdateResult with the identity as last confirmed by the database.

    Raises:
        UserNotFoundError: If the user disappeared mid-request.
        Exception: Any persistence, hashing or mail error propagates unchanged;
            fields committed before it stay committed.
    """
    current = user
    applied: list[str] = []
    token = None

    if changes.username is not None:
        current = await _update_user_columns(db, current.id, username=changes.username)
        applied.append("username")
        await _refresh_identity_cache(auth_cache, current)

    if changes.password is not None:
        hashed = hash_password(changes.password)
        current = await _update_user_columns(db, current.id, password=hashed)
        applied.append("password")
        await _refresh_identity_cache(auth_cache, current)

    if changes.email is not None:
        current, token = await _change_email(db, current.id, changes.email)
        applied.append("email")
        await _refresh_identity_cache(auth_cache, current)
        await mail_sender.send_email(
            to=changes.email,
            body=VERIFICATION_BODY.format(link=f"{verification_url}?token={token}"),
            subject=VERIFICATION_SUBJECT,
        )

    logger.info("profile_updated user_id=%s fields=%s", current.id, ",".join(applied))
    return ProfileUpdateResult(
        user=current,
        updated_fields=tuple(applied),
        verification_token=token,
    )


async def verify_email(db: AsyncSession, token: str) -> CurrentUser:
    """
    Mark the email that owns this token as verified and consume the token.

    Note: Uses flush(), not commit. Session generator handles commit at request end.

    Raises:
        InvalidVerificationTokenError: If no user holds the token.
    """
    result = await db.execute(select(User).where(User.token == token))
    user = result.scalar_one_or_none()
    if user is None:
        raise InvalidVerificationTokenError()
    user.verified = True
    user.token = None
    await db.flush()
    logger.info("email_verified user_id=%s", user.id)
    return to_current_user(user)
