"""
Redis connection handle for the ephemeral secret store.

``RedisConnection`` is created once by the application lifespan, stored on
``app.state`` and injected into request handlers; nothing in this module is a
process-wide singleton.

Reconnect policy: before each operation the handle checks whether it is open.
If not, it makes exactly one connect attempt (a ``PING`` bounded by
``REDIS_CONNECT_TIMEOUT``). A failed attempt, or a connection error during the
operation itself, raises ``ServiceUnavailableError`` and leaves the handle
closed so the next call tries again. There is no backoff loop.
"""

from typing import Awaitable, Callable, Optional, TypeVar

import structlog
from redis.asyncio import Redis
from redis.exceptions import ConnectionError as RedisConnectionError
from redis.exceptions import RedisError
from redis.exceptions import TimeoutError as RedisTimeoutError

from src.core.config.settings import settings
from src.core.exceptions import ServiceUnavailableError

logger = structlog.get_logger(__name__)

T = TypeVar("T")


class RedisConnection:
    """Lazily connected Redis client with explicit open/closed state."""

    def __init__(
        self,
        url: Optional[str] = None,
        connect_timeout: Optional[float] = None,
        socket_timeout: Optional[float] = None,
        client_factory: Optional[Callable[[], Redis]] = None,
    ):
        self._url = url or settings.REDIS_URL
        self._connect_timeout = connect_timeout or settings.REDIS_CONNECT_TIMEOUT
        self._socket_timeout = socket_timeout or settings.REDIS_SOCKET_TIMEOUT
        self._client_factory = client_factory or self._default_client
        self._client: Optional[Redis] = None
        self._is_open = False

    @property
    def is_open(self) -> bool:
        return self._is_open

    def _default_client(self) -> Redis:
        return Redis.from_url(
            self._url,
            encoding="utf-8",
            decode_responses=True,
            socket_connect_timeout=self._connect_timeout,
            socket_timeout=self._socket_timeout,
        )

    async def connect(self) -> None:
        """Makes one bounded connection attempt.

        Raises:
            ServiceUnavailableError: If Redis does not answer the ping.
        """
        if self._client is None:
            self._client = self._client_factory()
        try:
            await self._client.ping()
        except (RedisConnectionError, RedisTimeoutError, OSError) as e:
            self._is_open = False
            logger.error("redis_connect_failed", error=str(e))
            raise ServiceUnavailableError() from e
        self._is_open = True
        logger.info("redis_connected")

    async def execute(self, operation: Callable[[Redis], Awaitable[T]]) -> T:
        """Runs ``operation`` against the client, connecting first if needed.

        Raises:
            ServiceUnavailableError: On connection failure before or during
                the operation.
        """
        if not self._is_open:
            await self.connect()
        try:
            return await operation(self._client)
        except (RedisConnectionError, RedisTimeoutError, OSError) as e:
            self._is_open = False
            logger.error("redis_operation_failed", error=str(e))
            raise ServiceUnavailableError() from e
        except RedisError as e:
            logger.error("redis_command_error", error=str(e))
            raise ServiceUnavailableError() from e

    async def ping(self) -> bool:
        """Health probe; never raises."""
        try:
            return bool(await self.execute(lambda client: client.ping()))
        except ServiceUnavailableError:
            return False

    async def close(self) -> None:
        if self._client is not None:
            await self._client.aclose()
            logger.info("redis_connection_closed")
        self._client = None
        self._is_open = False
