"""/users route module: public account lookup."""

from fastapi import APIRouter

from src.adapters.api.v1.auth.schemas import UserOut
from src.infrastructure.dependency_injection.auth_dependencies import UserServiceDep

router = APIRouter()


@router.get(
    "/{account_id}",
    response_model=UserOut,
    summary="Get a user's public profile",
    responses={404: {"description": "User not found"}},
)
async def get_user(account_id: str, user_service: UserServiceDep) -> UserOut:
    profile = await user_service.get_user_by_id(account_id)
    return UserOut.from_profile(profile)
