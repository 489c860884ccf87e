"""Identity caching for reduced database load on authenticated requests."""
import json
import logging
from dataclasses import asdict
from typing import TYPE_CHECKING

from schemas.current_user import CurrentUser

if TYPE_CHECKING:
    from core.redis import RedisClient

logger = logging.getLogger(__name__)

# Cache schema version - included in all cache keys (e.g., "auth:v1:user:...")
#
# Bump this version when CurrentUser fields are added, removed, or renamed.
# Old "auth:v1:..." keys are then never found (cache miss) and expire via TTL.
CACHE_SCHEMA_VERSION = 1


class AuthCache:
    """
    Cache for authenticated user lookups, keyed by user ID.

    Refreshed by the profile updater after every confirmed write so that the
    next request sees the new username/email without a database round trip.
    """

    CACHE_TTL = 300  # 5 minutes

    def __init__(self, redis_client: "RedisClient") -> None:
        """Initialize auth cache with Redis client."""
        self._redis = redis_client

    def _cache_key_user_id(self, user_id: int) -> str:
        """Generate cache key for user ID lookup."""
        return f"auth:v{CACHE_SCHEMA_VERSION}:user:id:{user_id}"

    async def get_by_user_id(self, user_id: int) -> CurrentUser | None:
        """
        Get cached user by user ID.

        Args:
            user_id: The database user ID.

        Returns:
            CurrentUser if found in cache, None on cache miss.
        """
        data = await self._redis.get(self._cache_key_user_id(user_id))
        if data:
            logger.debug("auth_cache_hit user_id=%s", user_id)
            return self._deserialize(data)
        logger.debug("auth_cache_miss user_id=%s", user_id)
        return None

    async def set(self, user: CurrentUser) -> None:
        """Cache the given identity under its user ID."""
        await self._redis.setex(
            self._cache_key_user_id(user.id),
            self.CACHE_TTL,
            json.dumps(asdict(user)),
        )
        logger.debug("auth_cache_set user_id=%s", user.id)

    def _deserialize(self, data: bytes | str) -> CurrentUser:
        """Deserialize cached data to CurrentUser."""
        return CurrentUser(**json.loads(data))


# Global auth cache instance (set during app startup)
_auth_cache: AuthCache | None = None


def get_auth_cache() -> AuthCache | None:
    """Get the global auth cache instance."""
    return _auth_cache


def set_auth_cache(cache: AuthCache | None) -> None:
    """Set the global auth cache instance."""
    global _auth_cache  # noqa: PLW0603
    _auth_cache = cache
