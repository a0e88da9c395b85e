"""/register route module.

Creates a disabled account and emails its activation link.
"""

import uuid

import structlog
from fastapi import APIRouter, Request, status

from src.adapters.api.v1.auth.schemas import MessageResponse, RegisterRequest
from src.core.logging import mask_email
from src.infrastructure.dependency_injection.auth_dependencies import AuthenticationServiceDep

logger = structlog.get_logger(__name__)
router = APIRouter()


@router.post(
    "",
    response_model=MessageResponse,
    status_code=status.HTTP_200_OK,
    summary="Register a new account",
    description="Creates a disabled account and emails an activation link.",
    responses={
        400: {"description": "Invalid payload"},
        409: {"description": "Email already registered"},
    },
)
async def register_account(
    request: Request,
    payload: RegisterRequest,
    auth_service: AuthenticationServiceDep,
) -> MessageResponse:
    """Register an account.

    The account cannot log in until the activation link sent by email has
    been followed.
    """
    request_logger = logger.bind(correlation_id=str(uuid.uuid4()), endpoint="register")
    request_logger.info("Registration attempt", email=mask_email(payload.email), role=payload.role.value)

    await auth_service.register(
        username=payload.username,
        email=payload.email,
        password=payload.password,
        role=payload.role,
    )

    return MessageResponse(message="Account created successfully")
