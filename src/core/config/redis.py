"""
Redis settings for the ephemeral secret store and the rate limiter.
"""
import logging
import re
from typing import Any, Dict, Literal

from pydantic import Field, SecretStr, ValidationInfo, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

logger = logging.getLogger(__name__)

_RATE_LIMIT_PATTERN = re.compile(r"^[1-9]\d*/(second|minute|hour|day)$")


def _redis_url_from(values: Dict[str, Any]) -> str:
    scheme = "rediss" if values.get("REDIS_SSL") else "redis"
    secret = values.get("REDIS_PASSWORD")
    raw = secret.get_secret_value() if isinstance(secret, SecretStr) else (secret or "")
    auth = f":{raw}@" if raw else ""
    return f"{scheme}://{auth}{values.get('REDIS_HOST')}:{values.get('REDIS_PORT')}/0"


class RedisSettings(BaseSettings):
    """
    Connection to the Redis instance holding activation codes and OTPs, and
    the slowapi limits whose counters live in the same instance.

    Security Note:
        - REDIS_PASSWORD must be set in production; the store holds live
          activation codes and one-time passwords.
    Performance Note:
        - REDIS_CONNECT_TIMEOUT bounds the single reconnect attempt made before
          an operation; REDIS_SOCKET_TIMEOUT bounds each command.
    """
    REDIS_HOST: str
    REDIS_PORT: int = Field(default=6379, ge=1, le=65535)
    REDIS_PASSWORD: SecretStr = Field(default=SecretStr(""))
    REDIS_SSL: bool = False
    REDIS_URL: str = Field(default="", validate_default=True)
    REDIS_CONNECT_TIMEOUT: float = Field(default=2.0, ge=0.1)
    REDIS_SOCKET_TIMEOUT: float = Field(default=2.0, ge=0.1)

    RATE_LIMIT_ENABLED: bool = True
    RATE_LIMIT_DEFAULT: str = "100/minute"
    RATE_LIMIT_LOGIN: str = "5/minute"
    RATE_LIMIT_STORAGE_URL: str = Field(default="", validate_default=True)
    RATE_LIMIT_STRATEGY: Literal["fixed-window", "moving-window"] = "fixed-window"

    model_config = SettingsConfigDict(env_file=".env", env_file_encoding="utf-8", extra="ignore")

    @field_validator("REDIS_URL", mode="before")
    @classmethod
    def build_redis_url(cls, value: str, info: ValidationInfo) -> str:
        """Falls back to a URL built from REDIS_HOST/PORT/PASSWORD/SSL."""
        if value:
            return value
        logger.debug("REDIS_URL not set, building it from REDIS_HOST")
        return _redis_url_from(info.data)

    @field_validator("RATE_LIMIT_STORAGE_URL", mode="before")
    @classmethod
    def default_storage_to_redis(cls, value: str, info: ValidationInfo) -> str:
        """Rate limit counters share the secret store's Redis unless told otherwise."""
        return value or info.data.get("REDIS_URL") or _redis_url_from(info.data)

    @field_validator("RATE_LIMIT_DEFAULT", "RATE_LIMIT_LOGIN")
    @classmethod
    def check_limit_syntax(cls, value: str) -> str:
        """
        Accepts slowapi's ``<count>/<period>`` form, e.g. ``5/minute``.

        Raises:
            ValueError: For a non-positive count or an unknown period.
        """
        if not _RATE_LIMIT_PATTERN.match(value):
            logger.error("Rejected rate limit %r", value)
            raise ValueError(f"Invalid rate limit {value!r}; expected '<count>/<second|minute|hour|day>'")
        return value
