"""Authentication settings: session tokens, password hashing and one-time codes.
"""

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings


class AuthSettings(BaseSettings):
    """Defines settings for session tokens, password hashing and the
    short-lived secrets used by email activation and OTP login.

    Session tokens are HS256 JWTs signed with ``SECRET_KEY`` (see
    ``AppSettings``). Only one session token per account is honoured at a
    time; the expiry window below is the upper bound on its lifetime.

    Security Note:
        - BCRYPT_ROUNDS below 10 makes offline cracking of leaked hashes cheap.
        - OTP_TTL_SECONDS should stay short; OTPs have only 900000 possible values.
    """

    JWT_ALGORITHM: str = "HS256"
    SESSION_TOKEN_EXPIRE_DAYS: int = Field(default=30, ge=1, le=365)

    BCRYPT_ROUNDS: int = Field(default=10, ge=4, le=31)

    ACTIVATION_CODE_TTL_SECONDS: int = Field(default=900, ge=60)
    OTP_TTL_SECONDS: int = Field(default=180, ge=30)

    @field_validator("JWT_ALGORITHM")
    @classmethod
    def validate_jwt_algorithm(cls, value: str) -> str:
        """Pins the signing algorithm; asymmetric or 'none' algorithms are refused.

        Raises:
            ValueError: If anything other than HS256 is configured.
        """
        if value != "HS256":
            raise ValueError("JWT_ALGORITHM must be HS256")
        return value
