"""Authentication Domain Service.

The session state machine of the identity service: registration, login,
email activation, OTP validation, code resends and logout.

States are implicit in the stores. An account is *disabled* until its email
is activated. An enabled account is *authenticated* while the credential
store holds a session token for it that still decodes, and *needs OTP*
otherwise. Transitions:

    register            -> disabled, activation code emailed
    login (disabled)    -> fresh activation code emailed, AccountNotEnabled
    validate_email      -> enabled + authenticated
    login (no token)    -> OTP emailed, OtpChallenge
    validate_otp        -> authenticated (token replaced)
    logout              -> needs OTP (token deleted)

Emails are dispatched in the background; a failed delivery is logged and
never fails the request that triggered it.
"""

import asyncio
from functools import partial
from typing import Coroutine, NoReturn, Optional, Set, Union

import structlog

from src.core.exceptions import (
    AccountNotEnabledError,
    AccountNotFoundError,
    CodeExpiredError,
    DatabaseError,
    EmailAlreadyRegisteredError,
    InvalidCredentialsError,
    MissingAccountIdError,
    ServiceUnavailableError,
)
from src.core.logging import mask_email
from src.domain.entities.account import Role
from src.domain.interfaces import (
    ICredentialStore,
    INotificationSink,
    ISecretStore,
    ITokenService,
)
from src.domain.value_objects.account import Registration
from src.domain.value_objects.session import OtpChallenge, SessionGrant

logger = structlog.get_logger(__name__)

# Strong references to in-flight notification tasks; the event loop only
# keeps weak ones.
_pending_notifications: Set[asyncio.Task] = set()


def _on_notification_done(task: asyncio.Task, kind: str, email: str) -> None:
    _pending_notifications.discard(task)
    if task.cancelled():
        logger.warning("Notification cancelled", kind=kind, email=email)
        return
    error = task.exception()
    if error is not None:
        logger.error(
            "Notification delivery failed",
            kind=kind,
            email=email,
            error=str(error),
            error_type=type(error).__name__,
        )


async def wait_for_pending_notifications(timeout: Optional[float] = None) -> None:
    """Waits for this loop's in-flight notification tasks, e.g. during shutdown."""
    loop = asyncio.get_running_loop()
    pending = {task for task in _pending_notifications if task.get_loop() is loop}
    if not pending:
        return
    await asyncio.wait(pending, timeout=timeout)


def _normalize_email(email: str) -> str:
    return email.strip().lower()


class AuthenticationService:
    """Orchestrates the authentication flows over the injected ports.

    The service keeps no state between calls; every operation reads and
    writes the stores in a fixed order.
    """

    def __init__(
        self,
        credential_store: ICredentialStore,
        secret_store: ISecretStore,
        token_service: ITokenService,
        notification_sink: INotificationSink,
    ):
        self._credential_store = credential_store
        self._secret_store = secret_store
        self._token_service = token_service
        self._notification_sink = notification_sink

        logger.debug("AuthenticationService initialized")

    def _dispatch(self, notification: Coroutine, kind: str, email: str) -> None:
        task = asyncio.create_task(notification)
        _pending_notifications.add(task)
        task.add_done_callback(partial(_on_notification_done, kind=kind, email=mask_email(email)))

    async def _issue_activation_code(self, email: str, account_id: str) -> None:
        code = self._token_service.generate_activation_code()
        await self._secret_store.save_activation_code(email, code)
        self._dispatch(
            self._notification_sink.send_activation_email(email, code, account_id),
            kind="activation",
            email=email,
        )

    async def _issue_otp(self, email: str) -> None:
        otp = self._token_service.generate_otp()
        await self._secret_store.save_otp(email, otp)
        self._dispatch(self._notification_sink.send_otp_email(email, otp), kind="otp", email=email)

    async def login(self, identifier: str, password: str) -> Union[SessionGrant, OtpChallenge]:
        """Authenticate with a username or email and a password.

        Returns:
            SessionGrant: The account already holds a valid session token,
                which is returned unchanged.
            OtpChallenge: The account has no usable session token; an OTP
                was stored and emailed.

        Raises:
            AccountNotFoundError: No account matches ``identifier``.
            InvalidCredentialsError: The password does not match.
            AccountNotEnabledError: Email not activated yet; a fresh
                activation code was stored and emailed.
        """
        credentials = await self._credential_store.find_credentials_by_identifier(identifier)
        if credentials is None:
            logger.info("Login failed - account not found")
            raise AccountNotFoundError()

        if not await self._token_service.verify_password(password, credentials.password_hash):
            logger.warning("Login failed - invalid credentials", account_id=credentials.id)
            raise InvalidCredentialsError()

        if not credentials.is_enabled:
            await self._issue_activation_code(credentials.email, credentials.id)
            logger.info("Login blocked - account not enabled", account_id=credentials.id)
            raise AccountNotEnabledError()

        if credentials.token is None or not self._token_service.is_session_token_still_valid(
            credentials.token
        ):
            await self._issue_otp(credentials.email)
            logger.info("Login requires OTP", account_id=credentials.id)
            return OtpChallenge(account_id=credentials.id, email=credentials.email)

        logger.info("Login succeeded with existing session", account_id=credentials.id)
        return SessionGrant(account_id=credentials.id, token=credentials.token)

    async def register(
        self,
        username: str,
        email: str,
        password: str,
        role: Role = Role.USER,
    ) -> None:
        """Create a disabled account and email its activation code.

        Raises:
            EmailAlreadyRegisteredError: The email (or username) is taken.
        """
        email = _normalize_email(email)
        if await self._credential_store.email_exists(email):
            logger.info("Registration rejected - email exists", email=mask_email(email))
            raise EmailAlreadyRegisteredError()

        password_hash = await self._token_service.hash_password(password)
        account_id = await self._credential_store.create_account(
            Registration(username=username, email=email, password_hash=password_hash, role=role)
        )
        await self._issue_activation_code(email, account_id)
        logger.info("Account registered", account_id=account_id, email=mask_email(email))

    async def _delete_used_code(self, delete: Coroutine, account_id: str) -> None:
        # The session token is already committed; an undeleted code expires by TTL
        try:
            await delete
        except ServiceUnavailableError:
            logger.warning("Used code not deleted, left to expire", account_id=account_id)

    async def _ensure_owned_by(self, account_id: str, email: str) -> None:
        # A code proves ownership of its address only; it must be the account's own
        if await self._credential_store.get_email(account_id) != email:
            logger.warning("Code presented for another account", account_id=account_id)
            raise CodeExpiredError()

    async def validate_email(self, activation_token: str, email: str, account_id: str) -> str:
        """Activate an account and start its first session.

        Returns:
            The new session token.

        Raises:
            CodeExpiredError: The code is wrong, expired or missing, or
                ``email`` is not the address of ``account_id``.
        """
        email = _normalize_email(email)
        if not await self._token_service.check_activation_code(email, activation_token):
            logger.info("Activation rejected", account_id=account_id)
            raise CodeExpiredError()
        await self._ensure_owned_by(account_id, email)

        role = await self._credential_store.get_role(account_id) or Role.USER
        token = self._token_service.generate_session_token(account_id, role)
        await self._credential_store.set_enabled_and_token(account_id, token)
        await self._delete_used_code(self._secret_store.delete_activation_code(email), account_id)

        logger.info("Account activated", account_id=account_id)
        return token

    async def validate_otp(self, otp: str, email: str, account_id: str) -> str:
        """Complete an OTP login and replace the account's session token.

        Returns:
            The new session token.

        Raises:
            CodeExpiredError: The OTP is wrong, expired or missing, or
                ``email`` is not the address of ``account_id``.
            DatabaseError: The new token could not be stored.
        """
        email = _normalize_email(email)
        if not await self._token_service.check_otp(email, otp):
            logger.info("OTP rejected", account_id=account_id)
            raise CodeExpiredError()
        await self._ensure_owned_by(account_id, email)

        role = await self._credential_store.get_role(account_id) or Role.USER
        token = self._token_service.generate_session_token(account_id, role)
        if not await self._credential_store.replace_token(account_id, token):
            raise DatabaseError("Session token could not be stored")
        await self._delete_used_code(self._secret_store.delete_otp(email), account_id)

        logger.info("OTP validated, session started", account_id=account_id)
        return token

    async def resend_otp(self, email: str) -> None:
        """Invalidate any outstanding OTP for ``email`` and send a new one."""
        email = _normalize_email(email)
        await self._secret_store.delete_otp(email)
        await self._issue_otp(email)
        logger.info("OTP resent", email=mask_email(email))

    async def resend_account_activation(self, account_id: str, email: str) -> NoReturn:
        """Send a fresh activation code, then report the account as not enabled.

        Raises:
            AccountNotEnabledError: Always, after the code has been dispatched.
        """
        email = _normalize_email(email)
        await self._secret_store.delete_activation_code(email)
        await self._issue_activation_code(email, account_id)
        logger.info("Activation code resent", account_id=account_id)
        raise AccountNotEnabledError()

    async def logout(self, account_id: Optional[str]) -> None:
        """Revoke the account's session token. Idempotent.

        Raises:
            MissingAccountIdError: ``account_id`` is empty.
        """
        if not account_id:
            raise MissingAccountIdError()
        deleted = await self._credential_store.delete_tokens_for_account(account_id)
        logger.info("Logged out", account_id=account_id, revoked=deleted)
