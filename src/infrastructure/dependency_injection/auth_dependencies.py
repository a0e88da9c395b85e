"""Dependencies for the authentication flows.

Each factory builds one port implementation; FastAPI resolves them per
request and caches them within the request, so the orchestrator and the
admission dependency share a single TokenService and store pair. Tests swap
any of them through ``app.dependency_overrides``.
"""

from functools import lru_cache
from typing import Annotated

from fastapi import Depends, Request

from src.core.config.settings import settings
from src.domain.interfaces import ICredentialStore, INotificationSink, ISecretStore, ITokenService
from src.domain.services.auth.token import TokenService
from src.domain.services.authentication.authentication_service import AuthenticationService
from src.domain.services.user.user_service import UserService
from src.infrastructure.database.async_db import AsyncSessionFactory
from src.infrastructure.redis import RedisConnection
from src.infrastructure.repositories.account_repository import AccountRepository
from src.infrastructure.repositories.secret_store import RedisSecretStore
from src.infrastructure.services.email.email_service import EmailService

# ---------------------------------------------------------------------------
# Infrastructure Layer Dependencies
# ---------------------------------------------------------------------------


def get_credential_store() -> ICredentialStore:
    """Factory that returns the SQL credential store.

    The repository opens one session per operation from the shared factory,
    so no request-scoped session is injected here.
    """
    return AccountRepository(AsyncSessionFactory)


def get_redis_connection(request: Request) -> RedisConnection:
    """Returns the application's Redis handle, created by the lifespan.

    Created on first use when the lifespan has not run (e.g. an app mounted
    without startup events).
    """
    connection = getattr(request.app.state, "redis_connection", None)
    if connection is None:
        connection = RedisConnection()
        request.app.state.redis_connection = connection
    return connection


def get_secret_store(
    connection: Annotated[RedisConnection, Depends(get_redis_connection)],
) -> ISecretStore:
    return RedisSecretStore(connection)


@lru_cache(maxsize=1)
def get_notification_sink() -> INotificationSink:
    """Factory that returns the email notification sink.

    Built once per process; the FastMail client holds no per-request state.
    """
    return EmailService(settings)


# ---------------------------------------------------------------------------
# Domain Service Dependencies
# ---------------------------------------------------------------------------


def get_token_service(
    credential_store: Annotated[ICredentialStore, Depends(get_credential_store)],
    secret_store: Annotated[ISecretStore, Depends(get_secret_store)],
) -> ITokenService:
    return TokenService(credential_store, secret_store)


def get_authentication_service(
    credential_store: Annotated[ICredentialStore, Depends(get_credential_store)],
    secret_store: Annotated[ISecretStore, Depends(get_secret_store)],
    token_service: Annotated[ITokenService, Depends(get_token_service)],
    notification_sink: Annotated[INotificationSink, Depends(get_notification_sink)],
) -> AuthenticationService:
    """Factory that wires the authentication orchestrator."""
    return AuthenticationService(
        credential_store=credential_store,
        secret_store=secret_store,
        token_service=token_service,
        notification_sink=notification_sink,
    )


def get_user_service(
    credential_store: Annotated[ICredentialStore, Depends(get_credential_store)],
) -> UserService:
    return UserService(credential_store)


# ---------------------------------------------------------------------------
# Type aliases for route signatures
# ---------------------------------------------------------------------------

AuthenticationServiceDep = Annotated[AuthenticationService, Depends(get_authentication_service)]
UserServiceDep = Annotated[UserService, Depends(get_user_service)]
TokenServiceDep = Annotated[ITokenService, Depends(get_token_service)]
