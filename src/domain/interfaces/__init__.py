"""Domain interfaces (ports) implemented by the infrastructure layer."""

from .email import INotificationSink
from .repositories import ICredentialStore
from .secrets import ISecretStore
from .token_management import ITokenService

__all__ = [
    "ICredentialStore",
    "INotificationSink",
    "ISecretStore",
    "ITokenService",
]
