"""Port for outbound account notifications."""

from abc import ABC, abstractmethod


class INotificationSink(ABC):
    """Delivers activation and OTP messages to an account's email address.

    Implementations raise ``EmailServiceError`` on delivery failure; callers
    treat delivery as best effort.
    """

    @abstractmethod
    async def send_activation_email(self, email: str, code: str, account_id: str) -> None:
        raise NotImplementedError

    @abstractmethod
    async def send_otp_email(self, email: str, code: str) -> None:
        raise NotImplementedError
