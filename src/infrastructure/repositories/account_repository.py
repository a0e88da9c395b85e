"""Credential store implementation using SQLAlchemy asyncio.

Every operation borrows its own ``AsyncSession`` from the injected session
factory and returns the pooled connection on every exit path. Writes that
touch more than one row run inside ``session.begin()`` so a failure rolls the
whole unit back before the error leaves this module.
"""

from typing import Optional

from sqlalchemy import delete, func, or_, select, update
from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker
from structlog import get_logger

from src.core.exceptions import AccountNotFoundError, DatabaseError, EmailAlreadyRegisteredError
from src.core.logging import mask_email
from src.domain.entities.account import Account, Role
from src.domain.entities.session_token import SessionToken
from src.domain.interfaces.repositories import ICredentialStore
from src.domain.value_objects.account import AccountCredentials, AccountProfile, Registration

logger = get_logger(__name__)


class AccountRepository(ICredentialStore):
    """SQLAlchemy implementation of the credential store.

    Accounts live in ``accounts``; the single live session token of each
    account lives in ``session_tokens`` (unique ``account_id``).
    """

    def __init__(self, session_factory: async_sessionmaker[AsyncSession]):
        """Initialize repository with a session factory.

        Args:
            session_factory: Factory producing one session per operation.
        """
        self._session_factory = session_factory

    def _store_error(self, operation: str, error: Exception, **context) -> DatabaseError:
        logger.error(
            "Credential store operation failed",
            operation=operation,
            error=str(error),
            error_type=type(error).__name__,
            **context,
        )
        return DatabaseError(f"Credential store failure during {operation}")

    async def find_credentials_by_identifier(self, identifier: str) -> Optional[AccountCredentials]:
        """Looks up login credentials by username or email.

        The email comparison is case-insensitive; usernames match exactly.
        """
        statement = (
            select(
                Account.id,
                Account.username,
                Account.password,
                Account.email,
                Account.is_enabled,
                SessionToken.token,
            )
            .outerjoin(SessionToken, SessionToken.account_id == Account.id)
            .where(or_(Account.username == identifier, Account.email == identifier.lower()))
        )
        try:
            async with self._session_factory() as session:
                row = (await session.execute(statement)).first()
        except (SQLAlchemyError, OSError) as e:
            raise self._store_error("find_credentials_by_identifier", e) from e

        logger.debug(
            "Credential lookup completed",
            found=row is not None,
            operation="find_credentials_by_identifier",
        )
        if row is None:
            return None
        return AccountCredentials(
            id=row.id,
            username=row.username,
            password_hash=row.password,
            email=row.email,
            is_enabled=row.is_enabled,
            token=row.token,
        )

    async def email_exists(self, email: str) -> bool:
        statement = select(func.count()).select_from(Account).where(Account.email == email.lower())
        try:
            async with self._session_factory() as session:
                count = (await session.execute(statement)).scalar_one()
        except (SQLAlchemyError, OSError) as e:
            raise self._store_error("email_exists", e, email=mask_email(email)) from e
        return count > 0

    async def create_account(self, registration: Registration) -> str:
        """Inserts a disabled account and returns its id.

        Raises:
            EmailAlreadyRegisteredError: On a unique violation (email or username).
            DatabaseError: On any other store failure.
        """
        account = Account(
            username=registration.username,
            email=registration.email.lower(),
            password=registration.password_hash,
            role=registration.role,
            is_enabled=False,
        )
        try:
            async with self._session_factory() as session:
                async with session.begin():
                    session.add(account)
        except IntegrityError as e:
            logger.warning(
                "Account creation rejected by unique constraint",
                email=mask_email(registration.email),
                operation="create_account",
            )
            raise EmailAlreadyRegisteredError() from e
        except (SQLAlchemyError, OSError) as e:
            raise self._store_error("create_account", e, email=mask_email(registration.email)) from e

        logger.info(
            "Account created",
            account_id=account.id,
            role=registration.role.value,
            operation="create_account",
        )
        return account.id

    async def set_enabled_and_token(self, account_id: str, token: str) -> None:
        """Enables the account and replaces its session token in one transaction.

        Raises:
            AccountNotFoundError: If no account has ``account_id``.
            DatabaseError: On store failure; nothing is committed.
        """
        try:
            async with self._session_factory() as session:
                async with session.begin():
                    result = await session.execute(
                        update(Account).where(Account.id == account_id).values(is_enabled=True)
                    )
                    if result.rowcount == 0:
                        raise AccountNotFoundError()
                    await session.execute(delete(SessionToken).where(SessionToken.account_id == account_id))
                    session.add(SessionToken(account_id=account_id, token=token))
        except (SQLAlchemyError, OSError) as e:
            raise self._store_error("set_enabled_and_token", e, account_id=account_id) from e

        logger.info("Account enabled", account_id=account_id, operation="set_enabled_and_token")

    async def get_role(self, account_id: str) -> Optional[Role]:
        try:
            async with self._session_factory() as session:
                role = (
                    await session.execute(select(Account.role).where(Account.id == account_id))
                ).scalar_one_or_none()
        except (SQLAlchemyError, OSError) as e:
            raise self._store_error("get_role", e, account_id=account_id) from e
        return Role(role) if role is not None else None

    async def get_email(self, account_id: str) -> Optional[str]:
        try:
            async with self._session_factory() as session:
                return (
                    await session.execute(select(Account.email).where(Account.id == account_id))
                ).scalar_one_or_none()
        except (SQLAlchemyError, OSError) as e:
            raise self._store_error("get_email", e, account_id=account_id) from e

    async def get_token_for_account(self, account_id: str) -> Optional[str]:
        try:
            async with self._session_factory() as session:
                return (
                    await session.execute(
                        select(SessionToken.token).where(SessionToken.account_id == account_id)
                    )
                ).scalar_one_or_none()
        except (SQLAlchemyError, OSError) as e:
            raise self._store_error("get_token_for_account", e, account_id=account_id) from e

    async def replace_token(self, account_id: str, token: str) -> bool:
        """Deletes the account's token and inserts ``token`` atomically.

        Returns:
            ``True`` on commit, ``False`` when the transaction was rolled back.
        """
        try:
            async with self._session_factory() as session:
                async with session.begin():
                    await session.execute(delete(SessionToken).where(SessionToken.account_id == account_id))
                    session.add(SessionToken(account_id=account_id, token=token))
        except (SQLAlchemyError, OSError) as e:
            logger.error(
                "Session token replacement rolled back",
                account_id=account_id,
                error=str(e),
                error_type=type(e).__name__,
                operation="replace_token",
            )
            return False

        logger.debug("Session token replaced", account_id=account_id, operation="replace_token")
        return True

    async def delete_tokens_for_account(self, account_id: str) -> int:
        try:
            async with self._session_factory() as session:
                async with session.begin():
                    result = await session.execute(
                        delete(SessionToken).where(SessionToken.account_id == account_id)
                    )
        except (SQLAlchemyError, OSError) as e:
            raise self._store_error("delete_tokens_for_account", e, account_id=account_id) from e

        logger.debug(
            "Session tokens deleted",
            account_id=account_id,
            deleted=result.rowcount,
            operation="delete_tokens_for_account",
        )
        return result.rowcount

    async def get_account_profile(self, account_id: str) -> Optional[AccountProfile]:
        try:
            async with self._session_factory() as session:
                account = (
                    await session.execute(select(Account).where(Account.id == account_id))
                ).scalars().first()
        except (SQLAlchemyError, OSError) as e:
            raise self._store_error("get_account_profile", e, account_id=account_id) from e

        if account is None:
            return None
        return AccountProfile(
            username=account.username,
            email=account.email,
            role=Role(account.role),
            is_enabled=account.is_enabled,
            gender=account.gender,
            date_of_birth=account.date_of_birth,
            grade_level=account.grade_level,
            avatar_url=account.avatar_url,
        )
