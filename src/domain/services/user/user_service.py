"""Public account lookup."""

import structlog

from src.core.exceptions import AccountNotFoundError
from src.domain.interfaces.repositories import ICredentialStore
from src.domain.value_objects.account import AccountProfile

logger = structlog.get_logger(__name__)


class UserService:
    def __init__(self, credential_store: ICredentialStore):
        self._credential_store = credential_store

    async def get_user_by_id(self, account_id: str) -> AccountProfile:
        """Return the public profile of an account.

        Raises:
            AccountNotFoundError: No account has ``account_id``.
        """
        profile = await self._credential_store.get_account_profile(account_id)
        if profile is None:
            logger.info("User lookup missed", account_id=account_id)
            raise AccountNotFoundError()
        return profile
