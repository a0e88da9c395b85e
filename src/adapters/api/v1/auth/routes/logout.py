"""/logout route module."""

import structlog
from fastapi import APIRouter

from src.adapters.api.v1.auth.schemas import MessageResponse
from src.core.dependencies.auth import CurrentSession
from src.infrastructure.dependency_injection.auth_dependencies import AuthenticationServiceDep

logger = structlog.get_logger(__name__)
router = APIRouter()


@router.post(
    "",
    response_model=MessageResponse,
    summary="Log out the current session",
    responses={
        401: {"description": "Missing, malformed or expired token"},
        403: {"description": "Token already revoked or superseded"},
    },
)
async def logout(
    session: CurrentSession,
    auth_service: AuthenticationServiceDep,
) -> MessageResponse:
    """Revoke the caller's session token.

    The next login for the account will require an OTP.
    """
    await auth_service.logout(session.account_id)
    return MessageResponse(message="Logged out successfully")
