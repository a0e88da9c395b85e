"""Application lifecycle management.

Startup waits for the database, creates missing tables and opens the shared
Redis handle; shutdown flushes in-flight notification emails and closes the
handle.
"""

from contextlib import asynccontextmanager

import structlog
from fastapi import FastAPI

from src.core.config.settings import settings
from src.core.exceptions import ServiceUnavailableError
from src.domain import entities  # noqa: F401  registers tables on SQLModel.metadata
from src.domain.services.authentication.authentication_service import wait_for_pending_notifications
from src.infrastructure.database.async_db import create_async_db_and_tables, wait_for_database
from src.infrastructure.redis import RedisConnection

logger = structlog.get_logger(__name__)


def create_lifespan_manager():
    """Create the application lifespan manager.

    Returns:
        AsyncContextManager: The lifespan manager for the FastAPI application
    """

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        """Handles startup and shutdown of shared resources.

        Raises:
            OperationalError: If the database is unavailable after retries.
        """
        await wait_for_database()
        await create_async_db_and_tables()

        app.state.redis_connection = RedisConnection()
        try:
            await app.state.redis_connection.connect()
        except ServiceUnavailableError:
            # Secret store operations reconnect on demand
            logger.warning("redis_unavailable_on_startup")

        logger.info("application_startup", env=settings.APP_ENV, version=settings.VERSION)

        yield

        await wait_for_pending_notifications(timeout=10)
        await app.state.redis_connection.close()
        logger.info("application_shutdown", env=settings.APP_ENV)

    return lifespan
