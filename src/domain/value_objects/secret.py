"""Kinds of short-lived secrets held in the ephemeral store."""

from enum import Enum


class SecretKind(str, Enum):
    """Namespace of an ephemeral secret; the value is the Redis key prefix."""

    EMAIL_ACTIVATION = "activation"
    OTP = "otp"

    def key(self, email: str) -> str:
        return f"{self.value}:{email}"
