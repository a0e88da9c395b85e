"""Infrastructure services implementing domain ports."""

from .email.email_service import EmailService

__all__ = ["EmailService"]
