"""
Global exception handlers for the FastAPI application.

Each handler translates one family of `IdentityServiceError` into its HTTP
status. Starlette resolves handlers along the exception's MRO, so the most
specific registered class wins and `IdentityServiceError` is the fallback.
"""

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from slowapi.errors import RateLimitExceeded
from starlette import status
from structlog import get_logger

from src.core.exceptions import (
    AccountNotEnabledError,
    AccountNotFoundError,
    AuthenticationError,
    CodeExpiredError,
    DatabaseError,
    EmailAlreadyRegisteredError,
    IdentityServiceError,
    MissingAccountIdError,
    PermissionError,
    ServiceUnavailableError,
    ValidationError,
)

__all__ = [
    "authentication_error_handler",
    "permission_error_handler",
    "validation_error_handler",
    "request_validation_error_handler",
    "account_not_found_error_handler",
    "email_already_registered_error_handler",
    "account_not_enabled_error_handler",
    "code_expired_error_handler",
    "service_unavailable_error_handler",
    "database_error_handler",
    "missing_account_id_error_handler",
    "rate_limit_exception_handler",
    "identity_service_error_handler",
    "register_exception_handlers",
]

logger = get_logger(__name__)


def _client_ip(request: Request) -> str:
    return request.client.host if request.client else "unknown"


async def authentication_error_handler(request: Request, exc: AuthenticationError) -> JSONResponse:
    """Handles `AuthenticationError`, returning a `401 Unauthorized`.

    Covers wrong passwords and every session token decoding failure.
    """
    logger.warning(
        "authentication_failure",
        error=exc.code,
        client_ip=_client_ip(request),
        path=request.url.path,
    )
    return JSONResponse(
        status_code=status.HTTP_401_UNAUTHORIZED,
        content={"detail": exc.message},
        headers={"WWW-Authenticate": "Bearer"},
    )


async def permission_error_handler(request: Request, exc: PermissionError) -> JSONResponse:
    """Handles `PermissionError`, returning a `403 Forbidden`.

    Raised for revoked or superseded session tokens and insufficient roles.
    """
    logger.warning(
        "permission_denied",
        error=exc.code,
        client_ip=_client_ip(request),
        path=request.url.path,
    )
    return JSONResponse(
        status_code=status.HTTP_403_FORBIDDEN,
        content={"detail": exc.message},
    )


async def validation_error_handler(request: Request, exc: ValidationError) -> JSONResponse:
    """Handles domain `ValidationError`, returning a `400 Bad Request`."""
    return JSONResponse(
        status_code=status.HTTP_400_BAD_REQUEST,
        content={"detail": exc.message},
    )


async def request_validation_error_handler(
    request: Request, exc: RequestValidationError
) -> JSONResponse:
    """Handles FastAPI request validation, returning a `400 Bad Request`.

    Missing query parameters and malformed bodies are client errors of the
    same kind as domain validation failures, so they share the status.
    """
    logger.info(
        "request_validation_failed",
        client_ip=_client_ip(request),
        path=request.url.path,
        error_count=len(exc.errors()),
    )
    return JSONResponse(
        status_code=status.HTTP_400_BAD_REQUEST,
        content={
            "detail": "Invalid request",
            "errors": [
                {"loc": list(error.get("loc", ())), "msg": error.get("msg", "")}
                for error in exc.errors()
            ],
        },
    )


async def account_not_found_error_handler(request: Request, exc: AccountNotFoundError) -> JSONResponse:
    """Handles `AccountNotFoundError`, returning a `404 Not Found`."""
    return JSONResponse(
        status_code=status.HTTP_404_NOT_FOUND,
        content={"detail": exc.message},
    )


async def email_already_registered_error_handler(
    request: Request, exc: EmailAlreadyRegisteredError
) -> JSONResponse:
    """Handles `EmailAlreadyRegisteredError`, returning a `409 Conflict`."""
    logger.info("registration_conflict", client_ip=_client_ip(request), path=request.url.path)
    return JSONResponse(
        status_code=status.HTTP_409_CONFLICT,
        content={"detail": exc.message},
    )


async def account_not_enabled_error_handler(
    request: Request, exc: AccountNotEnabledError
) -> JSONResponse:
    """Handles `AccountNotEnabledError`, returning a `423 Locked`."""
    return JSONResponse(
        status_code=status.HTTP_423_LOCKED,
        content={"detail": exc.message},
    )


async def code_expired_error_handler(request: Request, exc: CodeExpiredError) -> JSONResponse:
    """Handles `CodeExpiredError`, returning a `410 Gone`."""
    logger.info("code_check_failed", client_ip=_client_ip(request), path=request.url.path)
    return JSONResponse(
        status_code=status.HTTP_410_GONE,
        content={"detail": exc.message},
    )


async def service_unavailable_error_handler(
    request: Request, exc: ServiceUnavailableError
) -> JSONResponse:
    """Handles `ServiceUnavailableError`, returning a `503 Service Unavailable`."""
    logger.error("dependency_unavailable", error_message=exc.message, path=request.url.path)
    return JSONResponse(
        status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
        content={"detail": exc.message},
    )


async def database_error_handler(request: Request, exc: DatabaseError) -> JSONResponse:
    """Handles `DatabaseError`, returning a `500 Internal Server Error`.

    The underlying driver error is logged but never returned to the client.
    """
    logger.critical(
        "A critical database error occurred",
        error_message=str(exc),
        path=request.url.path,
    )
    return JSONResponse(
        status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
        content={"detail": "A database error occurred."},
    )


async def missing_account_id_error_handler(
    request: Request, exc: MissingAccountIdError
) -> JSONResponse:
    """Handles `MissingAccountIdError`, returning a `418`."""
    logger.error("missing_account_id", path=request.url.path)
    return JSONResponse(
        status_code=status.HTTP_418_IM_A_TEAPOT,
        content={"detail": exc.message},
    )


async def rate_limit_exception_handler(request: Request, exc: RateLimitExceeded) -> JSONResponse:
    """Handles exceptions raised by slowapi when a rate limit is exceeded."""
    logger.warning(
        "rate_limit_exceeded",
        client_ip=_client_ip(request),
        path=request.url.path,
        limit=exc.detail,
    )
    return JSONResponse(
        status_code=status.HTTP_429_TOO_MANY_REQUESTS,
        content={"detail": "Too many requests, please try again later."},
    )


async def identity_service_error_handler(request: Request, exc: IdentityServiceError) -> JSONResponse:
    """Handles the base `IdentityServiceError`, returning a `500 Internal Server Error`.

    Fallback for application errors without a more specific handler.
    """
    logger.error(
        "An unhandled application error occurred",
        error_code=exc.code,
        error_message=exc.message,
        path=request.url.path,
    )
    return JSONResponse(
        status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
        content={"detail": "Something went wrong!"},
    )


def register_exception_handlers(app: FastAPI) -> None:
    """Registers all custom exception handlers with the FastAPI application.

    Args:
        app: The `FastAPI` application instance.
    """
    app.add_exception_handler(RateLimitExceeded, rate_limit_exception_handler)
    app.add_exception_handler(RequestValidationError, request_validation_error_handler)
    app.add_exception_handler(AuthenticationError, authentication_error_handler)
    app.add_exception_handler(PermissionError, permission_error_handler)
    app.add_exception_handler(ValidationError, validation_error_handler)
    app.add_exception_handler(AccountNotFoundError, account_not_found_error_handler)
    app.add_exception_handler(EmailAlreadyRegisteredError, email_already_registered_error_handler)
    app.add_exception_handler(AccountNotEnabledError, account_not_enabled_error_handler)
    app.add_exception_handler(CodeExpiredError, code_expired_error_handler)
    app.add_exception_handler(ServiceUnavailableError, service_unavailable_error_handler)
    app.add_exception_handler(DatabaseError, database_error_handler)
    app.add_exception_handler(MissingAccountIdError, missing_account_id_error_handler)
    app.add_exception_handler(IdentityServiceError, identity_service_error_handler)
