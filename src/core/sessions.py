"""Server-side login sessions stored in Redis."""
import json
import logging
import secrets
from collections.abc import AsyncGenerator
from contextlib import asynccontextmanager
from dataclasses import dataclass
from datetime import UTC, datetime
from typing import TYPE_CHECKING

from services.exceptions import SessionCreateError, SessionTeardownError

if TYPE_CHECKING:
    from core.redis import RedisClient

logger = logging.getLogger(__name__)

SESSION_SCHEMA_VERSION = 1


@dataclass(frozen=True)
class SessionData:
    """What a session record holds: who logged in, and when."""

    user_id: int
    created_at: str


class SessionStore:
    """
    Session records keyed by an opaque random ID carried in a cookie.

    The cookie only holds the ID; the record itself lives in Redis and expires
    after ``ttl_seconds``.
    """

    def __init__(self, redis_client: "RedisClient", ttl_seconds: int) -> None:
        self._redis = redis_client
        self._ttl = ttl_seconds

    def _key(self, session_id: str) -> str:
        return f"session:v{SESSION_SCHEMA_VERSION}:{session_id}"

    async def create(self, user_id: int) -> str:
        """
        Create a session for the user and return its ID.

        Raises:
            SessionCreateError: If the record could not be stored.
        """
        session_id = secrets.token_urlsafe(32)
        data = SessionData(user_id=user_id, created_at=datetime.now(UTC).isoformat())
        stored = await self._redis.setex(
            self._key(session_id),
            self._ttl,
            json.dumps({"user_id": data.user_id, "created_at": data.created_at}),
        )
        if not stored:
            raise SessionCreateError()
        logger.info("session_created user_id=%s", user_id)
        return session_id

    async def get(self, session_id: str) -> SessionData | None:
        """Resolve a session ID, returns None for unknown or expired sessions."""
        raw = await self._redis.get(self._key(session_id))
        if not raw:
            return None
        payload = json.loads(raw)
        return SessionData(user_id=int(payload["user_id"]), created_at=payload["created_at"])

    async def destroy(self, session_id: str) -> None:
        """
        Delete the session record.

        Raises:
            SessionTeardownError: If Redis did not accept the delete.
        """
        if not await self._redis.delete(self._key(session_id)):
            raise SessionTeardownError(session_id)
        logger.info("session_destroyed session=%s...", session_id[:8])


class SessionScope:
    """Handle yielded by ``session_scope``; marks the session for teardown."""

    def __init__(self, session_id: str) -> None:
        self.session_id = session_id
        self.invalidated = False

    def invalidate(self) -> None:
        """Destroy the session when the scope exits."""
        self.invalidated = True


@asynccontextmanager
async def session_scope(
    store: SessionStore,
    session_id: str,
) -> AsyncGenerator[SessionScope]:
    """
    Scope a unit of work to the caller's session.

    If the body calls ``invalidate()``, the session is destroyed on exit,
    whether the body completed or raised. A teardown failure after a
    successful body raises ``SessionTeardownError``; after a failed body it is
    logged and the body's exception propagates.
    """
    scope = SessionScope(session_id)
    try:
        yield scope
    except BaseException:
        if scope.invalidated:
            try:
                await store.destroy(session_id)
            except SessionTeardownError as e:
                logger.warning("session_teardown_failed error=%s", e)
        raise
    if scope.invalidated:
        await store.destroy(session_id)


# Global session store instance (set during app startup)
_session_store: SessionStore | None = None


def get_session_store() -> SessionStore | None:
    """Get the global session store instance."""
    return _session_store


def set_session_store(store: SessionStore | None) -> None:
    """Set the global session store instance."""
    global _session_store  # noqa: PLW0603
    _session_store = store
