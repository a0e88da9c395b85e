"""Authentication API schemas package.

Re-exports every public model so routes and tests import from
``src.adapters.api.v1.auth.schemas``.
"""

# flake8: noqa: F401

from .misc import MessageResponse
from .requests import LoginRequest, RegisterRequest, UsernameStr
from .responses.auth import LoginResponse, OtpRequiredResponse, SessionTokenResponse
from .responses.user import UserOut

__all__ = [
    "RegisterRequest",
    "LoginRequest",
    "UsernameStr",
    "LoginResponse",
    "OtpRequiredResponse",
    "SessionTokenResponse",
    "UserOut",
    "MessageResponse",
]
