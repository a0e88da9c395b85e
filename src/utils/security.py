"""Password hashing primitives.

Synchronous and CPU-bound; async callers run them in a worker thread
(see ``TokenService``).
"""

from passlib.context import CryptContext

from src.core.config.settings import settings

pwd_context = CryptContext(
    schemes=["bcrypt"],
    deprecated="auto",
    bcrypt__rounds=settings.BCRYPT_ROUNDS,
)


def hash_password(password: str) -> str:
    """Hash a password using bcrypt with the configured cost factor."""
    return pwd_context.hash(password)


def verify_password(password: str, hashed_password: str) -> bool:
    """Verify a password against its bcrypt hash.

    Raises:
        ValueError: If ``hashed_password`` is not a recognised hash.
    """
    return pwd_context.verify(password, hashed_password)
