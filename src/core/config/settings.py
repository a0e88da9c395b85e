"""Composed application settings.

``Settings`` merges the per-concern classes (app, database, redis, auth,
email) and is instantiated once as ``settings``. The env file is chosen from
``APP_ENV``:

    development -> .env          (email test mode, debug)
    test        -> .env.test     (email test mode)
    staging     -> .env.staging  (real SMTP required)
    production  -> .env.production (real SMTP required)
"""

import logging
import os
from pathlib import Path

from pydantic import model_validator
from pydantic_settings import SettingsConfigDict

from .app import AppSettings
from .auth import AuthSettings
from .database import DatabaseSettings
from .email import EmailSettings
from .redis import RedisSettings

logger = logging.getLogger(__name__)
logging.getLogger("passlib").setLevel(logging.ERROR)

ENV_FILES = {
    "development": ".env",
    "test": ".env.test",
    "staging": ".env.staging",
    "production": ".env.production",
}

REQUIRED_FIELDS = (
    "PROJECT_NAME",
    "SECRET_KEY",
    "POSTGRES_HOST",
    "POSTGRES_PORT",
    "POSTGRES_DB",
    "POSTGRES_USER",
    "POSTGRES_PASSWORD",
    "REDIS_HOST",
    "REDIS_PORT",
)


class Settings(AppSettings, DatabaseSettings, RedisSettings, AuthSettings, EmailSettings):
    """All configuration of the identity service, read from the environment."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=True,
        extra="allow",
    )

    @model_validator(mode="after")
    def apply_environment_defaults(self) -> "Settings":
        # Local environments never talk to a real SMTP relay
        if self.APP_ENV in ("development", "test"):
            self.EMAIL_TEST_MODE = True
        if self.APP_ENV == "development":
            self.DEBUG = True
        logger.info(
            "Settings loaded for %s (email test mode: %s, debug: %s)",
            self.APP_ENV,
            self.EMAIL_TEST_MODE,
            self.DEBUG,
        )
        return self

    def validate_required_fields(self) -> None:
        """Fails fast when a connection setting or the signing key is empty.

        SMTP problems are only logged: email is a side channel and a broken
        relay must not keep the service from starting.

        Raises:
            ValueError: Listing every empty required field.
        """
        missing = [name for name in REQUIRED_FIELDS if not getattr(self, name, None)]
        if missing:
            message = "Missing required environment variables: " + ", ".join(missing)
            logger.error(message)
            raise ValueError(message)

        try:
            self.validate_smtp_config()
        except ValueError as e:
            logger.error("Email configuration error: %s", e)


def create_settings() -> Settings:
    """Builds ``Settings`` from the env file matching ``APP_ENV``, if present."""
    env = os.getenv("APP_ENV", "development")
    env_file = Path(ENV_FILES.get(env, ".env"))

    if env_file.exists():
        logger.info("Loading %s configuration from %s", env, env_file)
        return Settings(_env_file=str(env_file))

    logger.info("No %s file, reading %s configuration from the environment", env_file, env)
    return Settings(_env_file=None)


settings = create_settings()
settings.validate_required_fields()
