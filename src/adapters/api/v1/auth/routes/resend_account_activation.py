"""/resend_account_activation route module."""

from typing import Annotated

from fastapi import APIRouter, Query

from src.infrastructure.dependency_injection.auth_dependencies import AuthenticationServiceDep

router = APIRouter()


@router.get(
    "",
    summary="Send a new activation link",
    responses={
        400: {"description": "Missing query parameters"},
        423: {"description": "Activation link sent; account still not enabled"},
        503: {"description": "Secret store unavailable"},
    },
)
async def resend_account_activation(
    auth_service: AuthenticationServiceDep,
    email: Annotated[str, Query(min_length=1)],
    account_id: Annotated[str, Query(alias="id", min_length=1)],
) -> None:
    """Email a fresh activation link.

    Always answers ``423``: the account is by definition not enabled yet,
    and clients treat that status as "check your inbox".
    """
    await auth_service.resend_account_activation(account_id, email)
