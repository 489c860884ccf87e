"""Password hashing and verification tokens."""
import uuid

from passlib.context import CryptContext

pwd_context = CryptContext(schemes=["bcrypt"], deprecated="auto")


def hash_password(password: str) -> str:
    """Hash a plaintext password with bcrypt."""
    return pwd_context.hash(password)


def verify_password(password: str, hashed: str) -> bool:
    """Check a plaintext password against a stored hash."""
    return pwd_context.verify(password, hashed)


def dummy_verify() -> None:
    """Spend the same time as a real verify when the user does not exist."""
    pwd_context.dummy_verify()


def generate_verification_token() -> str:
    """Random single-use token for email verification links."""
    return uuid.uuid4().hex
