"""Middleware configuration for the FastAPI application.

Registers CORS, slowapi rate limiting and the request logger.
"""

import time

import structlog
from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from slowapi.middleware import SlowAPIMiddleware

from src.core.config.settings import settings

logger = structlog.get_logger("src.request")


def configure_middleware(app: FastAPI) -> None:
    """Configure all middleware for the FastAPI application.

    Args:
        app (FastAPI): The FastAPI application instance
    """
    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.ALLOWED_ORIGINS,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    app.add_middleware(SlowAPIMiddleware)

    app.middleware("http")(log_request_middleware)


async def log_request_middleware(request: Request, call_next):
    """Logs method, path, client IP, status and duration of every request."""
    started = time.perf_counter()
    client_ip = request.client.host if request.client else "unknown"
    response = await call_next(request)
    logger.info(
        "http_request",
        method=request.method,
        path=request.url.path,
        client_ip=client_ip,
        status_code=response.status_code,
        duration_ms=round((time.perf_counter() - started) * 1000, 2),
    )
    return response
