"""
Shared validation functions for Pydantic schemas.

Used by the profile update query and the login body.
"""
import re

# Username: 3-30 chars of letters, digits, underscores, hyphens and dots
USERNAME_PATTERN = re.compile(r"^[A-Za-z0-9_.-]{3,30}$")

MAX_EMAIL_LENGTH = 255
MIN_PASSWORD_LENGTH = 8
# bcrypt only looks at the first 72 bytes
MAX_PASSWORD_BYTES = 72


def blank_to_none(value: object) -> object:
    """Treat empty or whitespace-only strings as an absent field."""
    if isinstance(value, str) and not value.strip():
        return None
    return value


def validate_username(username: str) -> str:
    """
    Validate and normalize a username.

    Raises:
        ValueError: If the username has an invalid format.
    """
    normalized = username.strip()
    if not USERNAME_PATTERN.match(normalized):
        raise ValueError(
            "Username must be 3-30 characters of letters, digits, '_', '-' or '.'",
        )
    return normalized


def normalize_email(email: str) -> str:
    """
    Lower-case an address that EmailStr has already accepted.

    Raises:
        ValueError: If the address does not fit the users.email column.
    """
    normalized = email.lower()
    if len(normalized) > MAX_EMAIL_LENGTH:
        raise ValueError(f"Email must be at most {MAX_EMAIL_LENGTH} characters")
    return normalized


def validate_password(password: str) -> str:
    """
    Validate password length. The value is not otherwise altered.

    Raises:
        ValueError: If the password is too short or too long for bcrypt.
    """
    if len(password) < MIN_PASSWORD_LENGTH:
        raise ValueError(f"Password must be at least {MIN_PASSWORD_LENGTH} characters")
    return check_password_bytes(password)


def check_password_bytes(password: str) -> str:
    """
    Reject passwords longer than bcrypt can hash.

    Raises:
        ValueError: If the UTF-8 encoding exceeds 72 bytes.
    """
    if len(password.encode()) > MAX_PASSWORD_BYTES:
        raise ValueError(f"Password must be at most {MAX_PASSWORD_BYTES} bytes")
    return password
