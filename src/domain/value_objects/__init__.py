"""Immutable value objects exchanged between the domain services and the stores."""

from .account import AccountCredentials, AccountProfile, Registration
from .secret import SecretKind
from .session import OtpChallenge, SessionClaims, SessionGrant

__all__ = [
    "AccountCredentials",
    "AccountProfile",
    "Registration",
    "SecretKind",
    "OtpChallenge",
    "SessionClaims",
    "SessionGrant",
]
