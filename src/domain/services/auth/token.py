import asyncio
import secrets
from datetime import datetime, timedelta, timezone
from typing import Callable, Optional

from jwt import ExpiredSignatureError, ImmatureSignatureError, PyJWTError
from jwt import decode as jwt_decode, encode as jwt_encode
from structlog import get_logger

from src.core.config.settings import settings
from src.core.exceptions import (
    IdentityServiceError,
    MalformedSessionTokenError,
    SessionRevokedError,
    SessionTokenError,
    SessionTokenExpiredError,
    SessionTokenNotYetValidError,
)
from src.core.logging import mask_email
from src.domain.entities.account import Role
from src.domain.interfaces.repositories import ICredentialStore
from src.domain.interfaces.secrets import ISecretStore
from src.domain.interfaces.token_management import ITokenService
from src.domain.value_objects.session import SessionClaims
from src.utils import security

logger = get_logger(__name__)

_REQUIRED_CLAIMS = ["sub", "account_id", "role", "iat", "nbf", "exp"]


class TokenService(ITokenService):
    """Credential and session token primitives.

    Session tokens are HS256 JWTs carrying ``sub`` (= account id),
    ``account_id``, ``role``, ``iat``, ``nbf``, ``exp`` and a random ``jti``.
    A decodable token is only half of admission: ``authenticate_session``
    also requires it to be the token currently stored for the account, which
    is how logout and re-login revoke older tokens.

    Activation codes and OTPs are generated with ``secrets`` and checked in
    constant time. The checks fail closed: a missing, expired or unreachable
    secret is simply a failed check.

    Attributes:
        credential_store: Source of the stored session token per account.
        secret_store: Source of activation codes and OTPs.
    """

    def __init__(
        self,
        credential_store: ICredentialStore,
        secret_store: ISecretStore,
        secret_key: Optional[str] = None,
        expire_days: Optional[int] = None,
        clock: Callable[[], datetime] = lambda: datetime.now(timezone.utc),
    ):
        self.credential_store = credential_store
        self.secret_store = secret_store
        self._secret_key = secret_key or settings.SECRET_KEY
        self._expire_days = expire_days or settings.SESSION_TOKEN_EXPIRE_DAYS
        self._algorithm = settings.JWT_ALGORITHM
        self._clock = clock

    async def hash_password(self, plaintext: str) -> str:
        return await asyncio.to_thread(security.hash_password, plaintext)

    async def verify_password(self, plaintext: str, hashed: str) -> bool:
        """Compare ``plaintext`` with a bcrypt hash off the event loop.

        Any failure (malformed hash, backend error) is logged and reported as
        a mismatch.
        """
        try:
            return await asyncio.to_thread(security.verify_password, plaintext, hashed)
        except Exception as e:
            logger.warning("Password verification failed closed", error_type=type(e).__name__)
            return False

    def generate_session_token(self, account_id: str, role: Role) -> str:
        now = self._clock()
        payload = {
            "sub": account_id,
            "account_id": account_id,
            "role": Role(role).value,
            "iat": now,
            "nbf": now,
            "exp": now + timedelta(days=self._expire_days),
            "jti": secrets.token_hex(8),  # Distinct tokens for the same account and second
        }
        token = jwt_encode(payload, self._secret_key, algorithm=self._algorithm)
        logger.debug("Session token created", account_id=account_id, role=payload["role"])
        return token

    def decode_session_token(self, token: str) -> SessionClaims:
        """Verify the signature and time claims of a session token.

        Raises:
            SessionTokenExpiredError: ``exp`` has passed.
            SessionTokenNotYetValidError: ``nbf`` is in the future.
            MalformedSessionTokenError: Anything else, including a bad
                signature, missing claims or an unknown role.
        """
        try:
            payload = jwt_decode(
                token,
                self._secret_key,
                algorithms=[self._algorithm],
                options={"require": _REQUIRED_CLAIMS},
            )
        except ExpiredSignatureError as e:
            raise SessionTokenExpiredError() from e
        except ImmatureSignatureError as e:
            raise SessionTokenNotYetValidError() from e
        except PyJWTError as e:
            logger.debug("Session token rejected", error=str(e))
            raise MalformedSessionTokenError() from e

        if payload["sub"] != payload["account_id"]:
            raise MalformedSessionTokenError("Session token subject mismatch")
        try:
            role = Role(payload["role"])
        except ValueError as e:
            raise MalformedSessionTokenError("Session token carries an unknown role") from e

        return SessionClaims(
            account_id=payload["account_id"],
            role=role,
            issued_at=datetime.fromtimestamp(payload["iat"], tz=timezone.utc),
            expires_at=datetime.fromtimestamp(payload["exp"], tz=timezone.utc),
        )

    def is_session_token_still_valid(self, token: str) -> bool:
        try:
            self.decode_session_token(token)
        except SessionTokenError:
            return False
        return True

    def generate_activation_code(self) -> str:
        return secrets.token_hex(16)

    def generate_otp(self) -> str:
        return str(100000 + secrets.randbelow(900000))

    async def check_activation_code(self, email: str, candidate: str) -> bool:
        try:
            stored = await self.secret_store.get_activation_code(email)
        except IdentityServiceError as e:
            logger.info("Activation code check failed closed", email=mask_email(email), reason=e.code)
            return False
        return _constant_time_equals(stored, candidate)

    async def check_otp(self, email: str, candidate: str) -> bool:
        try:
            stored = await self.secret_store.get_otp(email)
        except IdentityServiceError as e:
            logger.info("OTP check failed closed", email=mask_email(email), reason=e.code)
            return False
        return _constant_time_equals(stored, candidate)

    async def authenticate_session(self, token: str) -> SessionClaims:
        """Admit a bearer token only if it is the account's stored session token.

        Raises:
            SessionTokenError: The token cannot be decoded (401).
            SessionRevokedError: The token was superseded or logged out (403).
            DatabaseError: The credential store failed.
        """
        claims = self.decode_session_token(token)
        stored = await self.credential_store.get_token_for_account(claims.account_id)
        if stored is None or not _constant_time_equals(stored, token):
            logger.warning("Revoked session token presented", account_id=claims.account_id)
            raise SessionRevokedError()
        return claims


def _constant_time_equals(expected: str, candidate: str) -> bool:
    if not isinstance(candidate, str):
        return False
    return secrets.compare_digest(expected.encode("utf-8"), candidate.encode("utf-8"))
