"""
Shared fixtures for integration tests.

Provides the real FastAPI application wired to in-memory stores, and a
PostgreSQL pool that skips dependent tests when no database is reachable.
"""

import logging
import re
from collections.abc import Generator

import pytest
from fastapi.testclient import TestClient
from psycopg_pool import ConnectionPool, PoolTimeout

from src.adapters.hashing import BcryptPasswordHasher
from src.adapters.notification import ConsoleNotificationSender
from src.adapters.repository import InMemoryAccountStore, InMemoryPendingRegistrationStore, run_migrations
from src.api.main import app
from src.config.settings import get_settings

CODE_PATTERN = re.compile(r"Your OTP code is (\d+)\.")


@pytest.fixture
def client() -> TestClient:
    """Test client for the real app, backed by fresh in-memory stores."""
    app.state.pool = None
    app.state.pending_store = InMemoryPendingRegistrationStore()
    app.state.account_store = InMemoryAccountStore()
    app.state.hasher = BcryptPasswordHasher(rounds=4)
    app.state.notifier = ConsoleNotificationSender()
    return TestClient(app)


@pytest.fixture
def read_code(caplog: pytest.LogCaptureFixture):
    """Return a function that pulls the latest verification code out of the logs."""
    caplog.set_level(logging.INFO)

    def _read() -> str:
        codes = CODE_PATTERN.findall(caplog.text)
        assert codes, "no verification code was logged"
        return codes[-1]

    return _read


@pytest.fixture(scope="module")
def pool() -> Generator[ConnectionPool, None, None]:
    """Connection pool for PostgreSQL tests; skips when the database is down."""
    settings = get_settings()
    pool = ConnectionPool(
        conninfo=settings.database_url,
        min_size=1,
        max_size=10,
        open=False,
    )
    try:
        pool.open(wait=True, timeout=3)
    except PoolTimeout:
        pool.close()
        pytest.skip(f"PostgreSQL not reachable at {settings.database_url}")
    run_migrations(pool)
    yield pool
    pool.close()


@pytest.fixture
def clean_database(pool: ConnectionPool) -> Generator[ConnectionPool, None, None]:
    """Empty both tables before each PostgreSQL test."""
    with pool.connection() as conn:
        conn.execute("DELETE FROM pending_registrations")
        conn.execute("DELETE FROM accounts")
        conn.commit()
    yield pool
