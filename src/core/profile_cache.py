"""Short-lived Redis mirror of profile read responses."""
import json
import logging
from typing import TYPE_CHECKING, Any

from services.exceptions import CacheWriteError

if TYPE_CHECKING:
    from core.redis import RedisClient

logger = logging.getLogger(__name__)


class ProfileCache:
    """
    Stores the serialized response of a profile read.

    Keys follow ``{user_id}:{METHOD}:{route}``, e.g. ``42:GET:/profile``.
    """

    CACHE_TTL = 60 * 15  # 15 minutes

    def __init__(self, redis_client: "RedisClient") -> None:
        self._redis = redis_client

    @staticmethod
    def key(user_id: int, method: str, route: str) -> str:
        """Build the cache key for a user's request."""
        return f"{user_id}:{method.upper()}:{route}"

    async def set(self, user_id: int, method: str, route: str, payload: dict[str, Any]) -> None:
        """
        Write the response payload with a fixed TTL.

        Skipped when Redis is not connected (disabled or down at startup).

        Raises:
            CacheWriteError: If a connected Redis rejected the write.
        """
        if not self._redis.is_connected:
            logger.debug("profile_cache_skip user_id=%s reason=redis_unavailable", user_id)
            return
        key = self.key(user_id, method, route)
        if not await self._redis.setex(key, self.CACHE_TTL, json.dumps(payload)):
            raise CacheWriteError(key)
        logger.debug("profile_cache_set key=%s", key)

    async def invalidate(self, user_id: int, route: str) -> None:
        """Drop the cached read for a user after their profile changed."""
        if not self._redis.is_connected:
            return
        key = self.key(user_id, "GET", route)
        if not await self._redis.delete(key):
            logger.warning("profile_cache_invalidate_failed key=%s", key)
            return
        logger.debug("profile_cache_invalidate key=%s", key)


# Global profile cache instance (set during app startup)
_profile_cache: ProfileCache | None = None


def get_profile_cache() -> ProfileCache | None:
    """Get the global profile cache instance."""
    return _profile_cache


def set_profile_cache(cache: ProfileCache | None) -> None:
    """Set the global profile cache instance."""
    global _profile_cache  # noqa: PLW0603
    _profile_cache = cache
