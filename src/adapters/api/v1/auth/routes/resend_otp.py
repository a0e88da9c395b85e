"""/resend_otp route module."""

from typing import Annotated

from fastapi import APIRouter, Query

from src.adapters.api.v1.auth.schemas import MessageResponse
from src.infrastructure.dependency_injection.auth_dependencies import AuthenticationServiceDep

router = APIRouter()


@router.get(
    "",
    response_model=MessageResponse,
    summary="Send a new OTP",
    responses={
        400: {"description": "Missing email"},
        503: {"description": "Secret store unavailable"},
    },
)
async def resend_otp(
    auth_service: AuthenticationServiceDep,
    email: Annotated[str, Query(min_length=1)],
) -> MessageResponse:
    """Replace any outstanding OTP for ``email`` and email a new one."""
    await auth_service.resend_otp(email)
    return MessageResponse(message="OTP sent")
