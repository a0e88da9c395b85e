"""/health route module: reports database and Redis reachability."""

import asyncio
from datetime import datetime, timezone
from typing import Annotated, Any, Dict

from fastapi import APIRouter, Depends
from pydantic import BaseModel

from src.core.config.settings import settings
from src.infrastructure.database.async_db import ping_database
from src.infrastructure.dependency_injection.auth_dependencies import get_redis_connection
from src.infrastructure.redis import RedisConnection

router = APIRouter()


class HealthResponse(BaseModel):
    status: str
    env: str
    services: Dict[str, Any]
    timestamp: datetime


def _status(healthy: bool) -> Dict[str, str]:
    return {"status": "healthy" if healthy else "unhealthy"}


@router.get("", response_model=HealthResponse)
async def health_check(
    redis_connection: Annotated[RedisConnection, Depends(get_redis_connection)],
) -> HealthResponse:
    """
    Checks the credential store and the secret store concurrently.

    Always answers 200; ``status`` is ``degraded`` when either store is down.
    """
    db_healthy, redis_healthy = await asyncio.gather(ping_database(), redis_connection.ping())

    return HealthResponse(
        status="ok" if db_healthy and redis_healthy else "degraded",
        env=settings.APP_ENV,
        services={"database": _status(db_healthy), "redis": _status(redis_healthy)},
        timestamp=datetime.now(timezone.utc),
    )
