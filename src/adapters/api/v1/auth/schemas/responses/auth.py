"""Response models for login and code validation."""

from pydantic import BaseModel

from src.domain.value_objects.session import OtpChallenge, SessionGrant


class LoginResponse(BaseModel):
    """Body of a ``200`` login: the account's current session token."""

    user_id: str
    token: str

    @classmethod
    def from_grant(cls, grant: SessionGrant) -> "LoginResponse":
        return cls(user_id=grant.account_id, token=grant.token)


class OtpRequiredResponse(BaseModel):
    """Body of a ``489`` login: an OTP was emailed and must be validated.

    ``username`` carries the address the OTP was sent to, so it can be passed
    straight to ``/validate_otp``.
    """

    user_id: str
    username: str

    @classmethod
    def from_challenge(cls, challenge: OtpChallenge) -> "OtpRequiredResponse":
        return cls(user_id=challenge.account_id, username=challenge.email)


class SessionTokenResponse(BaseModel):
    """Body returned by email activation and OTP validation."""

    jwt_token: str
