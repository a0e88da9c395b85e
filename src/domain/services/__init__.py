"""Domain services of the identity service.

- AuthenticationService: registration, login, activation, OTP and logout flows
- TokenService: password hashing, session tokens and one-time codes
- UserService: read-only account lookup
"""

from .auth.token import TokenService
from .authentication.authentication_service import AuthenticationService
from .user.user_service import UserService

__all__ = [
    "AuthenticationService",
    "TokenService",
    "UserService",
]
