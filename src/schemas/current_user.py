"""Per-request identity derived from the persisted user record."""
from dataclasses import dataclass


@dataclass(frozen=True)
class CurrentUser:
    """
    Immutable view of the authenticated user for the duration of a request.

    Built only from rows the database has returned (a SELECT, or the RETURNING
    clause of a confirmed UPDATE). Handlers never mutate it; a profile write
    produces a new instance instead.

    IMPORTANT: When adding, removing, or renaming fields in this class, you MUST bump
    CACHE_SCHEMA_VERSION in core/auth_cache.py so that old cached entries are ignored
    and expire naturally via TTL.

    The password hash is deliberately absent so it never lands in Redis.
    """

    id: int
    username: str
    email: str
    verified: bool
