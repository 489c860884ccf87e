"""Shared exceptions for service layer operations."""


class UserNotFoundError(Exception):
    """Raised when the user record for an authenticated identity no longer exists."""

    def __init__(self, user_id: int) -> None:
        self.user_id = user_id
        super().__init__(f"User not found: {user_id}")


class InvalidVerificationTokenError(Exception):
    """Raised when an email verification token matches no user."""

    def __init__(self) -> None:
        super().__init__("Invalid verification token")


class CacheWriteError(Exception):
    """Raised when a connected Redis refuses a cache write."""

    def __init__(self, key: str) -> None:
        self.key = key
        super().__init__(f"Failed to write cache entry: {key}")


class SessionCreateError(Exception):
    """Raised when a login session cannot be persisted."""

    def __init__(self) -> None:
        super().__init__("Session store unavailable")


class SessionTeardownError(Exception):
    """
    Raised when a session cannot be destroyed.

    Non-fatal for the request that triggered the teardown: callers log it and
    still answer with their success response.
    """

    def __init__(self, session_id: str) -> None:
        # Only a prefix, the full id is a bearer credential
        self.session_prefix = session_id[:8]
        super().__init__(f"Failed to destroy session {self.session_prefix}...")
