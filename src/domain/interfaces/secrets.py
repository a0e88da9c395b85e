"""Port for the short-lived secret store (activation codes and OTPs)."""

from abc import ABC, abstractmethod


class ISecretStore(ABC):
    """TTL-bound key/value store keyed by email.

    Saving overwrites any previous value of the same kind. Reads raise
    ``SecretNotFoundError`` for a missing or expired key and
    ``ServiceUnavailableError`` when the store cannot be reached.
    """

    @abstractmethod
    async def save_activation_code(self, email: str, code: str) -> None:
        raise NotImplementedError

    @abstractmethod
    async def get_activation_code(self, email: str) -> str:
        raise NotImplementedError

    @abstractmethod
    async def delete_activation_code(self, email: str) -> None:
        raise NotImplementedError

    @abstractmethod
    async def save_otp(self, email: str, code: str) -> None:
        raise NotImplementedError

    @abstractmethod
    async def get_otp(self, email: str) -> str:
        raise NotImplementedError

    @abstractmethod
    async def delete_otp(self, email: str) -> None:
        raise NotImplementedError
