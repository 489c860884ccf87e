"""Service layer for user lookups and credential checks."""
import logging

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from core.security import dummy_verify, verify_password
from models.user import User
from schemas.current_user import CurrentUser

logger = logging.getLogger(__name__)


def to_current_user(user: User) -> CurrentUser:
    """Build the immutable request identity from a loaded User row."""
    return CurrentUser(
        id=user.id,
        username=user.username,
        email=user.email,
        verified=user.verified,
    )


async def get_current_user_by_id(db: AsyncSession, user_id: int) -> CurrentUser | None:
    """Load the identity for a user ID, or None if the user no longer exists."""
    result = await db.execute(
        select(User.id, User.username, User.email, User.verified).where(User.id == user_id),
    )
    row = result.one_or_none()
    if row is None:
        return None
    return CurrentUser(id=row.id, username=row.username, email=row.email, verified=row.verified)


async def authenticate(db: AsyncSession, username: str, password: str) -> User | None:
    """
    Check a username/password pair.

    Returns:
        The matching User, or None if the user is unknown or the password is wrong.
    """
    result = await db.execute(select(User).where(User.username == username))
    user = result.scalar_one_or_none()
    if user is None:
        dummy_verify()
        logger.info("login_failed reason=unknown_user")
        return None
    if not verify_password(password, user.password):
        logger.info("login_failed reason=bad_password user_id=%s", user.id)
        return None
    return user
