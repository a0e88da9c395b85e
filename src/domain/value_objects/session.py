"""Value objects produced by the session state machine."""

from dataclasses import dataclass
from datetime import datetime

from src.domain.entities.account import Role


@dataclass(frozen=True)
class SessionClaims:
    """Decoded, signature-checked contents of a session token."""

    account_id: str
    role: Role
    issued_at: datetime
    expires_at: datetime


@dataclass(frozen=True)
class SessionGrant:
    """Successful login: the account's current session token."""

    account_id: str
    token: str


@dataclass(frozen=True)
class OtpChallenge:
    """Login that needs a second factor; an OTP has been emailed."""

    account_id: str
    email: str
