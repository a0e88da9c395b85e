from slowapi import Limiter
from slowapi.util import get_remote_address

from src.core.config.settings import settings


def get_limiter() -> Limiter:
    """Factory function for the rate limiter.

    Keys on the client IP. ``RATE_LIMIT_DEFAULT`` applies to every route
    through ``SlowAPIMiddleware``; the login route is further limited by
    ``RATE_LIMIT_LOGIN``.

    Returns:
        Limiter: A configured slowapi.Limiter instance.
    """
    return Limiter(
        key_func=get_remote_address,
        default_limits=[settings.RATE_LIMIT_DEFAULT],
        enabled=settings.RATE_LIMIT_ENABLED,
        storage_uri=settings.RATE_LIMIT_STORAGE_URL,
        strategy=settings.RATE_LIMIT_STRATEGY,
    )


limiter = get_limiter()
