"""Value objects describing accounts as they cross the credential store boundary."""

from dataclasses import dataclass
from datetime import date
from typing import Optional

from src.domain.entities.account import Gender, Role


@dataclass(frozen=True)
class Registration:
    """Data needed to create an account; ``password_hash`` is already hashed."""

    username: str
    email: str
    password_hash: str
    role: Role = Role.USER


@dataclass(frozen=True)
class AccountCredentials:
    """Projection used by login.

    Joins an account with its current session token, which is ``None`` when
    the account has never validated an OTP/activation or has logged out.
    """

    id: str
    username: str
    password_hash: str
    email: str
    is_enabled: bool
    token: Optional[str] = None

    def __repr__(self) -> str:
        # Never leak the hash or the live token into logs or tracebacks
        return (
            f"AccountCredentials(id={self.id!r}, username={self.username!r}, "
            f"is_enabled={self.is_enabled!r})"
        )


@dataclass(frozen=True)
class AccountProfile:
    """Public view of an account returned by user lookup."""

    username: str
    email: str
    role: Role
    is_enabled: bool
    gender: Optional[Gender] = None
    date_of_birth: Optional[date] = None
    grade_level: Optional[int] = None
    avatar_url: Optional[str] = None
