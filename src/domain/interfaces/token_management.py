"""Port for credential and session token primitives."""

from abc import ABC, abstractmethod

from src.domain.entities.account import Role
from src.domain.value_objects.session import SessionClaims


class ITokenService(ABC):
    """Password hashing, session token minting/decoding and one-time codes."""

    @abstractmethod
    async def hash_password(self, plaintext: str) -> str:
        raise NotImplementedError

    @abstractmethod
    async def verify_password(self, plaintext: str, hashed: str) -> bool:
        """Compares a password with a stored hash. Never raises."""
        raise NotImplementedError

    @abstractmethod
    def generate_session_token(self, account_id: str, role: Role) -> str:
        raise NotImplementedError

    @abstractmethod
    def decode_session_token(self, token: str) -> SessionClaims:
        """Verifies and decodes a session token.

        Raises:
            SessionTokenExpiredError, SessionTokenNotYetValidError,
            MalformedSessionTokenError
        """
        raise NotImplementedError

    @abstractmethod
    def is_session_token_still_valid(self, token: str) -> bool:
        raise NotImplementedError

    @abstractmethod
    def generate_activation_code(self) -> str:
        raise NotImplementedError

    @abstractmethod
    def generate_otp(self) -> str:
        raise NotImplementedError

    @abstractmethod
    async def check_activation_code(self, email: str, candidate: str) -> bool:
        """True only when ``candidate`` equals the stored code. Never raises."""
        raise NotImplementedError

    @abstractmethod
    async def check_otp(self, email: str, candidate: str) -> bool:
        """True only when ``candidate`` equals the stored OTP. Never raises."""
        raise NotImplementedError

    @abstractmethod
    async def authenticate_session(self, token: str) -> SessionClaims:
        """Decodes ``token`` and confirms it is the account's stored token.

        Raises:
            SessionTokenError: Token cannot be decoded.
            SessionRevokedError: Token is not the stored session token.
        """
        raise NotImplementedError
