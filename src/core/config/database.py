"""
PostgreSQL settings for the credential store.
"""
import logging

from pydantic import Field, SecretStr, ValidationInfo, field_validator
from pydantic_settings import BaseSettings

logger = logging.getLogger(__name__)


class DatabaseSettings(BaseSettings):
    """
    Connection and pool settings for the asyncpg engine.

    Security Note:
        - POSTGRES_PASSWORD is a SecretStr and is never logged.
    Performance Note:
        - POSTGRES_POOL_SIZE + POSTGRES_MAX_OVERFLOW caps concurrent requests
          holding a connection.
        - POSTGRES_POOL_TIMEOUT and POSTGRES_COMMAND_TIMEOUT cap how long a
          request waits before failing with a store error.
    """
    POSTGRES_USER: str
    POSTGRES_PASSWORD: SecretStr
    POSTGRES_DB: str
    POSTGRES_HOST: str
    POSTGRES_PORT: int = Field(default=5432, ge=1, le=65535)

    POSTGRES_POOL_SIZE: int = Field(default=10, ge=1)
    POSTGRES_MAX_OVERFLOW: int = Field(default=20, ge=0)
    POSTGRES_POOL_TIMEOUT: float = Field(default=5.0, ge=1.0)
    POSTGRES_COMMAND_TIMEOUT: float = Field(default=10.0, ge=1.0)

    DATABASE_URL: str = Field(default="", validate_default=True)

    @field_validator("DATABASE_URL", mode="before")
    @classmethod
    def build_database_url(cls, value: str, info: ValidationInfo) -> str:
        """Falls back to a ``postgresql+asyncpg://`` URL built from the POSTGRES_* fields."""
        if value:
            return value

        fields = info.data
        secret = fields.get("POSTGRES_PASSWORD")
        if secret is None:
            logger.warning("Building DATABASE_URL without POSTGRES_PASSWORD")
        password = secret.get_secret_value() if isinstance(secret, SecretStr) else (secret or "")
        return (
            f"postgresql+asyncpg://{fields.get('POSTGRES_USER')}:{password}"
            f"@{fields.get('POSTGRES_HOST')}:{fields.get('POSTGRES_PORT')}/{fields.get('POSTGRES_DB')}"
        )
