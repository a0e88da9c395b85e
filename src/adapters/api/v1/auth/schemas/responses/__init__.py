from .auth import LoginResponse, OtpRequiredResponse, SessionTokenResponse
from .user import UserOut

__all__ = ["LoginResponse", "OtpRequiredResponse", "SessionTokenResponse", "UserOut"]
