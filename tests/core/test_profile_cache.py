"""Tests for the profile read cache."""
import json

import pytest

from core.profile_cache import ProfileCache
from services.exceptions import CacheWriteError
from tests.helpers import InMemoryRedis

PAYLOAD = {"success": True, "data": {"username": "alice", "email": "a@x.com", "filesUploaded": []}}


def test__key__combines_user_method_and_route() -> None:
    assert ProfileCache.key(42, "get", "/profile") == "42:GET:/profile"


async def test__set__writes_payload_with_15_minute_ttl() -> None:
    redis = InMemoryRedis()
    cache = ProfileCache(redis)

    await cache.set(42, "GET", "/profile", PAYLOAD)

    assert redis.ttls["42:GET:/profile"] == 900
    assert json.loads(redis.values["42:GET:/profile"]) == PAYLOAD


async def test__set__skipped_when_redis_not_connected() -> None:
    redis = InMemoryRedis()
    redis.is_connected = False

    await ProfileCache(redis).set(42, "GET", "/profile", PAYLOAD)

    assert redis.values == {}


async def test__set__refused_write_raises() -> None:
    redis = InMemoryRedis()
    redis.fail_writes = True

    with pytest.raises(CacheWriteError) as exc_info:
        await ProfileCache(redis).set(42, "GET", "/profile", PAYLOAD)

    assert exc_info.value.key == "42:GET:/profile"


async def test__invalidate__removes_cached_read() -> None:
    redis = InMemoryRedis()
    cache = ProfileCache(redis)
    await cache.set(42, "GET", "/profile", PAYLOAD)

    await cache.invalidate(42, "/profile")

    assert "42:GET:/profile" not in redis.values


async def test__invalidate__delete_failure_is_not_raised() -> None:
    redis = InMemoryRedis()
    cache = ProfileCache(redis)
    await cache.set(42, "GET", "/profile", PAYLOAD)
    redis.fail_deletes = True

    await cache.invalidate(42, "/profile")

    assert "42:GET:/profile" in redis.values
