"""
Asynchronous database utilities.

Exposes the asyncpg-backed engine, the ``AsyncSessionFactory`` used by the
credential store, and the startup helpers run by the application lifespan.

Key Components:
    - engine: The asynchronous SQLAlchemy engine for PostgreSQL connections.
    - AsyncSessionFactory: A factory for creating asynchronous database sessions.
    - ping_database / wait_for_database: Health checks (the latter with retry).
    - create_async_db_and_tables: Creates tables from the SQLModel metadata.
"""

import structlog
from sqlalchemy import text
from sqlalchemy.exc import OperationalError, SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine
from sqlmodel import SQLModel
from tenacity import retry, retry_if_exception_type, stop_after_attempt, wait_exponential

from src.core.config.settings import settings

logger = structlog.get_logger(__name__)

engine = create_async_engine(
    settings.DATABASE_URL,
    echo=False,
    pool_size=settings.POSTGRES_POOL_SIZE,
    max_overflow=settings.POSTGRES_MAX_OVERFLOW,
    pool_timeout=settings.POSTGRES_POOL_TIMEOUT,
    pool_pre_ping=True,  # Check connection health before use
    connect_args={"command_timeout": settings.POSTGRES_COMMAND_TIMEOUT},
)

AsyncSessionFactory: async_sessionmaker[AsyncSession] = async_sessionmaker(
    bind=engine, class_=AsyncSession, expire_on_commit=False
)


async def ping_database() -> bool:
    """Runs ``SELECT 1``; returns False instead of raising on failure."""
    try:
        async with engine.connect() as conn:
            await conn.execute(text("SELECT 1"))
        return True
    except (SQLAlchemyError, OSError) as e:
        logger.error("database_health_check_failed", error=str(e))
        return False


@retry(
    stop=stop_after_attempt(5),
    wait=wait_exponential(multiplier=1, min=1, max=10),
    retry=retry_if_exception_type((OperationalError, OSError)),
    reraise=True,
)
async def wait_for_database() -> None:
    """
    Blocks application startup until the database answers ``SELECT 1``.

    Raises:
        OperationalError: If the database is still unreachable after all attempts.
    """
    async with engine.connect() as conn:
        await conn.execute(text("SELECT 1"))
    logger.info("database_health_check_passed")


async def create_async_db_and_tables() -> None:
    """
    Creates tables from the SQLModel metadata. Alembic owns the schema in
    deployed environments; this is used for development and tests.
    """
    async with engine.begin() as conn:
        await conn.run_sync(SQLModel.metadata.create_all)
    logger.info("database_tables_created")
