"""
FastAPI application factory and configuration.

This module creates the FastAPI application instance,
configures middleware, exception handlers, and lifespan events.
"""

import asyncio
import logging
from collections.abc import AsyncGenerator
from contextlib import asynccontextmanager, suppress

from fastapi import FastAPI, Request, status
from fastapi.responses import JSONResponse
from psycopg_pool import ConnectionPool
from starlette.concurrency import run_in_threadpool

from src.adapters.repository import (
    InMemoryAccountStore,
    InMemoryPendingRegistrationStore,
    PostgresAccountStore,
    PostgresPendingRegistrationStore,
    run_migrations,
)
from src.api.dependencies import build_hasher, build_notification_sender, build_registration_service
from src.api.v1 import router as v1_router
from src.config.settings import get_settings
from src.domain.exceptions import StorageError
from src.domain.registration import RegistrationService

logger = logging.getLogger(__name__)

# OpenAPI tags for documentation grouping
tags_metadata = [
    {
        "name": "v1",
        "description": "OTP Registration API v1 - Register, verify and log in",
    },
]


async def purge_expired_periodically(service: RegistrationService, interval: float) -> None:
    """Sweep expired pending registrations every `interval` seconds until cancelled."""
    while True:
        await asyncio.sleep(interval)
        try:
            await run_in_threadpool(service.purge_expired)
        except StorageError as e:
            logger.error("Expired registration sweep failed: %s", e)


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
    """
    FastAPI lifespan context manager.

    Manages application startup and shutdown:
    - Configures logging
    - Creates stores (database connection pool + migrations, or in-memory)
    - Purges pending registrations that expired while the service was down,
      then keeps sweeping every PURGE_INTERVAL_SECONDS
    - Stops the sweeper and closes connection pool on shutdown
    """
    settings = get_settings()
    logging.basicConfig(level=settings.log_level.upper())

    logger.info("Starting application...")

    pool: ConnectionPool | None = None
    if settings.storage_backend == "postgres":
        logger.info("Connecting to database...")

        # Create connection pool with explicit sizing
        pool = ConnectionPool(
            conninfo=settings.database_url,
            min_size=settings.pool_min_size,
            max_size=settings.pool_max_size,
        )

        logger.info("Running database migrations...")
        run_migrations(pool)

        app.state.pending_store = PostgresPendingRegistrationStore(pool)
        app.state.account_store = PostgresAccountStore(pool)
    else:
        logger.warning("Using in-memory stores: data is lost on restart, run a single worker")
        app.state.pending_store = InMemoryPendingRegistrationStore()
        app.state.account_store = InMemoryAccountStore()

    app.state.pool = pool
    app.state.hasher = build_hasher(settings)
    app.state.notifier = build_notification_sender(settings)

    service = build_registration_service(app.state, settings)
    service.purge_expired()
    sweeper = asyncio.create_task(purge_expired_periodically(service, settings.purge_interval_seconds))

    logger.info("Application startup complete")

    yield

    # Shutdown
    logger.info("Shutting down application...")
    sweeper.cancel()
    with suppress(asyncio.CancelledError):
        await sweeper
    if pool is not None:
        pool.close()
        logger.info("Database connection pool closed")


app = FastAPI(
    title="otpreg",
    description="OTP Registration API - Pending registrations confirmed by a one-time code",
    version="0.1.0",
    openapi_tags=tags_metadata,
    lifespan=lifespan,
)

# Include v1 API routes
app.include_router(v1_router, prefix="/v1")


@app.exception_handler(StorageError)
async def storage_error_handler(request: Request, exc: StorageError) -> JSONResponse:
    """Store outages are a server problem, never "not found"."""
    logger.error("Storage failure on %s %s: %s", request.method, request.url.path, exc)
    return JSONResponse(
        status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
        content={"detail": "Storage unavailable"},
    )


@app.get("/health")
async def health_check(request: Request) -> dict[str, str]:
    """
    Health check endpoint with database validation.

    Returns 200 OK if application and database are healthy.
    Raises exception if database connection fails.
    """
    pool = getattr(request.app.state, "pool", None)
    if pool is not None:
        with pool.connection() as conn:
            conn.execute("SELECT 1")

    return {"status": "healthy"}
