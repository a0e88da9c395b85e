"""Response Pydantic model for the public user profile."""

from datetime import date
from typing import Optional

from pydantic import BaseModel

from src.domain.entities.account import Gender, Role
from src.domain.value_objects.account import AccountProfile


class UserOut(BaseModel):
    """Serialised :class:`~src.domain.value_objects.account.AccountProfile`.

    Never carries the password hash or the session token.
    """

    username: str
    email: str
    role: Role
    is_enabled: bool
    gender: Optional[Gender] = None
    date_of_birth: Optional[date] = None
    grade_level: Optional[int] = None
    avatar_url: Optional[str] = None

    @classmethod
    def from_profile(cls, profile: AccountProfile) -> "UserOut":
        return cls(
            username=profile.username,
            email=profile.email,
            role=profile.role,
            is_enabled=profile.is_enabled,
            gender=profile.gender,
            date_of_birth=profile.date_of_birth,
            grade_level=profile.grade_level,
            avatar_url=profile.avatar_url,
        )
