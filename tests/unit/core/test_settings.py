from pathlib import Path

import pytest
from pydantic import ValidationError

from src.core.config.auth import AuthSettings
from src.core.config.database import DatabaseSettings
from src.core.config.redis import RedisSettings
from src.core.config.settings import settings
from src.core.logging import mask_email


def test_test_environment_defaults():
    assert settings.APP_ENV == "test"
    assert settings.EMAIL_TEST_MODE is True
    assert settings.JWT_ALGORITHM == "HS256"
    assert settings.OTP_TTL_SECONDS == 180
    assert settings.ACTIVATION_CODE_TTL_SECONDS == 900


def test_database_url_is_assembled_for_asyncpg():
    config = DatabaseSettings(
        POSTGRES_USER="u",
        POSTGRES_PASSWORD="p",
        POSTGRES_DB="db",
        POSTGRES_HOST="h",
        POSTGRES_PORT=5433,
        DATABASE_URL="",
    )

    assert config.DATABASE_URL == "postgresql+asyncpg://u:p@h:5433/db"


def test_redis_url_is_assembled():
    config = RedisSettings(REDIS_HOST="cache", REDIS_PORT=6380, REDIS_URL="", RATE_LIMIT_STORAGE_URL="")

    assert config.REDIS_URL == "redis://cache:6380/0"


def test_only_hs256_is_accepted():
    with pytest.raises(ValidationError):
        AuthSettings(JWT_ALGORITHM="none")


def test_rate_limit_format_is_validated():
    with pytest.raises(ValidationError):
        RedisSettings(REDIS_HOST="cache", RATE_LIMIT_LOGIN="five per minute")


@pytest.mark.parametrize(
    "email,masked",
    [
        ("alice@example.com", "ali***@example.com"),
        ("al@example.com", "al***@example.com"),
        ("", ""),
    ],
)
def test_mask_email(email, masked):
    assert mask_email(email) == masked


def test_email_templates_dir_is_absolute():
    templates_dir = Path(settings.EMAIL_TEMPLATES_DIR)

    assert templates_dir.is_absolute()
    assert (templates_dir / "otp.html").is_file()
