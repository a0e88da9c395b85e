"""Redis-backed store for activation codes and OTPs.

Keys are ``{kind}:{email}`` (``activation:alice@example.com``,
``otp:alice@example.com``) and carry the TTL of their kind.
"""

from typing import Optional

import structlog

from src.core.config.settings import settings
from src.core.exceptions import SecretNotFoundError
from src.core.logging import mask_email
from src.domain.interfaces.secrets import ISecretStore
from src.domain.value_objects.secret import SecretKind
from src.infrastructure.redis import RedisConnection

logger = structlog.get_logger(__name__)


class RedisSecretStore(ISecretStore):
    def __init__(
        self,
        connection: RedisConnection,
        activation_ttl_seconds: Optional[int] = None,
        otp_ttl_seconds: Optional[int] = None,
    ):
        self._connection = connection
        self._ttl = {
            SecretKind.EMAIL_ACTIVATION: activation_ttl_seconds or settings.ACTIVATION_CODE_TTL_SECONDS,
            SecretKind.OTP: otp_ttl_seconds or settings.OTP_TTL_SECONDS,
        }

    async def _save(self, kind: SecretKind, email: str, code: str) -> None:
        key = kind.key(email)
        ttl = self._ttl[kind]
        await self._connection.execute(lambda client: client.set(key, code, ex=ttl))
        logger.debug("secret_saved", kind=kind.value, email=mask_email(email), ttl=ttl)

    async def _get(self, kind: SecretKind, email: str) -> str:
        key = kind.key(email)
        value = await self._connection.execute(lambda client: client.get(key))
        if value is None:
            raise SecretNotFoundError(f"No {kind.value} code stored for this email")
        return value

    async def _delete(self, kind: SecretKind, email: str) -> None:
        key = kind.key(email)
        await self._connection.execute(lambda client: client.delete(key))

    async def save_activation_code(self, email: str, code: str) -> None:
        await self._save(SecretKind.EMAIL_ACTIVATION, email, code)

    async def get_activation_code(self, email: str) -> str:
        return await self._get(SecretKind.EMAIL_ACTIVATION, email)

    async def delete_activation_code(self, email: str) -> None:
        await self._delete(SecretKind.EMAIL_ACTIVATION, email)

    async def save_otp(self, email: str, code: str) -> None:
        await self._save(SecretKind.OTP, email, code)

    async def get_otp(self, email: str) -> str:
        return await self._get(SecretKind.OTP, email)

    async def delete_otp(self, email: str) -> None:
        await self._delete(SecretKind.OTP, email)
