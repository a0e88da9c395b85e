"""/activate_email route module (target of the emailed activation link)."""

from typing import Annotated

from fastapi import APIRouter, Query

from src.adapters.api.v1.auth.schemas import SessionTokenResponse
from src.infrastructure.dependency_injection.auth_dependencies import AuthenticationServiceDep

router = APIRouter()


@router.get(
    "",
    response_model=SessionTokenResponse,
    summary="Activate an account from its emailed link",
    responses={
        400: {"description": "Missing query parameters"},
        410: {"description": "Activation code expired or invalid"},
    },
)
async def activate_email(
    auth_service: AuthenticationServiceDep,
    activation_token: Annotated[str, Query(min_length=1)],
    email: Annotated[str, Query(min_length=1)],
    account_id: Annotated[str, Query(alias="id", min_length=1)],
) -> SessionTokenResponse:
    """Enable the account and start its first session."""
    token = await auth_service.validate_email(activation_token, email, account_id)
    return SessionTokenResponse(jwt_token=token)
