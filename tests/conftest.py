import os

os.environ.setdefault("APP_ENV", "test")
os.environ.setdefault("SECRET_KEY", "test-secret-key-that-is-at-least-32-characters")
os.environ.setdefault("POSTGRES_USER", "identity")
os.environ.setdefault("POSTGRES_PASSWORD", "identity")
os.environ.setdefault("POSTGRES_DB", "identity_test")
os.environ.setdefault("POSTGRES_HOST", "localhost")
os.environ.setdefault("REDIS_HOST", "localhost")
os.environ.setdefault("RATE_LIMIT_ENABLED", "false")
os.environ.setdefault("RATE_LIMIT_STORAGE_URL", "memory://")
os.environ.setdefault("BCRYPT_ROUNDS", "4")
os.environ.setdefault("LOG_JSON", "false")
os.environ.setdefault("LOG_LEVEL", "WARNING")

import pytest
import pytest_asyncio
from httpx import ASGITransport, AsyncClient

from src.domain.services.auth.token import TokenService
from src.domain.services.authentication.authentication_service import (
    AuthenticationService,
    wait_for_pending_notifications,
)
from src.infrastructure.dependency_injection.auth_dependencies import (
    get_credential_store,
    get_notification_sink,
    get_secret_store,
)
from src.main import app as fastapi_app
from tests.utils.fakes import InMemoryCredentialStore, InMemorySecretStore, RecordingNotificationSink


@pytest.fixture
def credential_store():
    return InMemoryCredentialStore()


@pytest.fixture
def secret_store():
    return InMemorySecretStore()


@pytest.fixture
def notification_sink():
    return RecordingNotificationSink()


@pytest.fixture
def token_service(credential_store, secret_store):
    return TokenService(credential_store, secret_store)


@pytest.fixture
def auth_service(credential_store, secret_store, token_service, notification_sink):
    return AuthenticationService(
        credential_store=credential_store,
        secret_store=secret_store,
        token_service=token_service,
        notification_sink=notification_sink,
    )


@pytest.fixture
def app(credential_store, secret_store, notification_sink):
    """The application wired to the in-memory stores."""
    fastapi_app.dependency_overrides[get_credential_store] = lambda: credential_store
    fastapi_app.dependency_overrides[get_secret_store] = lambda: secret_store
    fastapi_app.dependency_overrides[get_notification_sink] = lambda: notification_sink
    yield fastapi_app
    fastapi_app.dependency_overrides.clear()


@pytest_asyncio.fixture
async def async_client(app):
    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as client:
        yield client
    await wait_for_pending_notifications(timeout=5)
