"""Shared test doubles and constants."""
from dataclasses import dataclass
from unittest.mock import AsyncMock

from core.auth_cache import AuthCache
from core.profile_cache import ProfileCache
from core.sessions import SessionStore

TEST_PASSWORD = "correct-horse-battery"


class InMemoryRedis:
    """
    Dict-backed stand-in for RedisClient.

    Implements the subset of the RedisClient interface the app uses and keeps
    the TTL of every write so tests can assert on it. ``fail_writes`` and
    ``fail_deletes`` mimic RedisClient's False return on a Redis error.
    """

    def __init__(self) -> None:
        self.values: dict[str, bytes] = {}
        self.ttls: dict[str, int] = {}
        self.is_connected = True
        self.fail_writes = False
        self.fail_deletes = False

    async def ping(self) -> bool:
        return self.is_connected

    async def get(self, key: str) -> bytes | None:
        return self.values.get(key)

    async def setex(self, key: str, seconds: int, value: str | bytes) -> bool:
        if self.fail_writes or not self.is_connected:
            return False
        self.values[key] = value.encode() if isinstance(value, str) else value
        self.ttls[key] = seconds
        return True

    async def delete(self, *keys: str) -> bool:
        if self.fail_deletes or not self.is_connected:
            return False
        for key in keys:
            self.values.pop(key, None)
            self.ttls.pop(key, None)
        return True


@dataclass
class AppState:
    """Redis-backed services wired into the app for one test."""

    redis: InMemoryRedis
    auth_cache: AuthCache
    profile_cache: ProfileCache
    session_store: SessionStore
    mail_sender: AsyncMock
