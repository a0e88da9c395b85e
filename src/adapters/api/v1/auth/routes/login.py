"""/login route module.

Returns the account's current session token, or asks for an OTP with the
non-standard ``489`` status when the account has no usable token.
"""

import uuid
from typing import Union

import structlog
from fastapi import APIRouter, Request, status
from fastapi.responses import JSONResponse

from src.adapters.api.v1.auth.schemas import LoginRequest, LoginResponse, OtpRequiredResponse
from src.core.config.settings import settings
from src.core.ratelimiter import limiter
from src.domain.value_objects.session import OtpChallenge
from src.infrastructure.dependency_injection.auth_dependencies import AuthenticationServiceDep

logger = structlog.get_logger(__name__)
router = APIRouter()

HTTP_489_OTP_REQUIRED = 489


@router.post(
    "",
    response_model=LoginResponse,
    status_code=status.HTTP_200_OK,
    summary="Log in with username or email",
    responses={
        HTTP_489_OTP_REQUIRED: {"model": OtpRequiredResponse, "description": "OTP emailed; validate it to log in"},
        400: {"description": "Invalid payload"},
        401: {"description": "Invalid credentials"},
        404: {"description": "Account not found"},
        423: {"description": "Account not enabled; activation email resent"},
        429: {"description": "Too many login attempts"},
    },
)
@limiter.limit(settings.RATE_LIMIT_LOGIN)
async def login_account(
    request: Request,
    payload: LoginRequest,
    auth_service: AuthenticationServiceDep,
) -> Union[LoginResponse, JSONResponse]:
    """Authenticate with a username or email and a password."""
    request_logger = logger.bind(correlation_id=str(uuid.uuid4()), endpoint="login")
    request_logger.info("Login attempt")

    result = await auth_service.login(payload.username, payload.password)

    if isinstance(result, OtpChallenge):
        request_logger.info("Login answered with OTP challenge", account_id=result.account_id)
        return JSONResponse(
            status_code=HTTP_489_OTP_REQUIRED,
            content=OtpRequiredResponse.from_challenge(result).model_dump(),
        )
    return LoginResponse.from_grant(result)
