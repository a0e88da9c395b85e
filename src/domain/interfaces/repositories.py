"""Repository interfaces for abstracting data persistence in the domain layer.

The authentication orchestrator talks to persistence only through these
ports. Concrete adapters live in ``src.infrastructure.repositories``.
"""

from abc import ABC, abstractmethod
from typing import Optional

from src.domain.entities.account import Role
from src.domain.value_objects.account import AccountCredentials, AccountProfile, Registration


class ICredentialStore(ABC):
    """Durable store of accounts and their single current session token.

    Unless stated otherwise, every method raises ``DatabaseError`` when the
    store is unreachable or a statement fails.
    """

    @abstractmethod
    async def find_credentials_by_identifier(self, identifier: str) -> Optional[AccountCredentials]:
        """Looks up an account by username OR email.

        Returns:
            The credential projection including the current session token
            (or ``None`` in that field), or ``None`` when nothing matches.
        """
        raise NotImplementedError

    @abstractmethod
    async def email_exists(self, email: str) -> bool:
        raise NotImplementedError

    @abstractmethod
    async def create_account(self, registration: Registration) -> str:
        """Inserts a disabled account.

        Returns:
            The new account id.

        Raises:
            EmailAlreadyRegisteredError: If the username or email is taken.
        """
        raise NotImplementedError

    @abstractmethod
    async def set_enabled_and_token(self, account_id: str, token: str) -> None:
        """Enables the account and replaces its session token atomically."""
        raise NotImplementedError

    @abstractmethod
    async def get_role(self, account_id: str) -> Optional[Role]:
        raise NotImplementedError

    @abstractmethod
    async def get_email(self, account_id: str) -> Optional[str]:
        raise NotImplementedError

    @abstractmethod
    async def get_token_for_account(self, account_id: str) -> Optional[str]:
        raise NotImplementedError

    @abstractmethod
    async def replace_token(self, account_id: str, token: str) -> bool:
        """Deletes any existing token and stores ``token`` in one transaction.

        Returns:
            ``True`` when the new token is stored. Failures are logged,
            rolled back and reported as ``False``; this method never raises.
        """
        raise NotImplementedError

    @abstractmethod
    async def delete_tokens_for_account(self, account_id: str) -> int:
        """Removes the account's session token. Idempotent.

        Returns:
            Number of rows removed (0 or 1).
        """
        raise NotImplementedError

    @abstractmethod
    async def get_account_profile(self, account_id: str) -> Optional[AccountProfile]:
        raise NotImplementedError
