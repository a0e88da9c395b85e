"""/validate_otp route module."""

from typing import Annotated

from fastapi import APIRouter, Query

from src.adapters.api.v1.auth.schemas import SessionTokenResponse
from src.infrastructure.dependency_injection.auth_dependencies import AuthenticationServiceDep

router = APIRouter()


@router.get(
    "",
    response_model=SessionTokenResponse,
    summary="Complete an OTP login",
    responses={
        400: {"description": "Missing query parameters"},
        410: {"description": "OTP expired or invalid"},
    },
)
async def validate_otp(
    auth_service: AuthenticationServiceDep,
    otp: Annotated[str, Query(min_length=1)],
    username: Annotated[str, Query(min_length=1, description="Email address the OTP was sent to")],
    account_id: Annotated[str, Query(alias="id", min_length=1)],
) -> SessionTokenResponse:
    """Exchange an emailed OTP for a new session token.

    The ``username`` parameter carries the email address the OTP was sent
    to, as returned in the ``username`` field of a ``489`` login response.
    """
    token = await auth_service.validate_otp(otp, username, account_id)
    return SessionTokenResponse(jwt_token=token)
