"""
PostgreSQL repository adapters - Implement the domain's store protocols.

This module provides the PostgreSQL implementation of the domain's
PendingRegistrationStore and AccountStore ports using psycopg3 with raw SQL.

Atomicity Design:
-----------------
1. **replace()**: A single INSERT ... ON CONFLICT (identity) DO UPDATE.
   The UNIQUE index on pending_registrations.identity serializes concurrent
   registrations for one identity at the row level, across any number of
   application processes. The row keeps its identity but gets a new token,
   so the previous token stops resolving immediately.

2. **delete()**: DELETE ... WHERE token = %s. Only one transaction can remove
   a given row; rowcount tells the caller whether it was the one.

3. **add()**: The UNIQUE index on accounts.identity rejects a second account
   for an identity at write time (UniqueViolation -> ConflictError).

Any other psycopg failure is surfaced as StorageError.
"""

import logging
from datetime import datetime
from pathlib import Path

import psycopg
from psycopg import errors
from psycopg_pool import ConnectionPool

from src.domain.exceptions import ConflictError, StorageError
from src.domain.models import Account, PendingRegistration

logger = logging.getLogger(__name__)

_PENDING_COLUMNS = "token, identity, display_name, credential_verifier, otp, created_at, expires_at"
_ACCOUNT_COLUMNS = "id, identity, display_name, credential_verifier, created_at"


class PostgresPendingRegistrationStore:
    """
    Implements PendingRegistrationStore protocol via psycopg3.

    Uses structural subtyping - no explicit inheritance from Protocol.
    All SQL uses parameterized queries for security.
    """

    def __init__(self, pool: ConnectionPool) -> None:
        """
        Initialize store with connection pool.

        Args:
            pool: psycopg3 ConnectionPool for database connections
        """
        self._pool = pool

    def replace(self, record: PendingRegistration) -> None:
        """
        Atomically replace the pending registration for record.identity.

        Uses INSERT ... ON CONFLICT DO UPDATE so that delete-then-insert
        is one statement; there is no window where two records coexist.
        """
        sql = f"""
            INSERT INTO pending_registrations ({_PENDING_COLUMNS})
            VALUES (%s, %s, %s, %s, %s, %s, %s)
            ON CONFLICT (identity) DO UPDATE
            SET token = EXCLUDED.token,
                display_name = EXCLUDED.display_name,
                credential_verifier = EXCLUDED.credential_verifier,
                otp = EXCLUDED.otp,
                created_at = EXCLUDED.created_at,
                expires_at = EXCLUDED.expires_at
        """
        params = (
            record.token,
            record.identity,
            record.display_name,
            record.credential_verifier,
            record.otp,
            record.created_at,
            record.expires_at,
        )
        try:
            with self._pool.connection() as conn, conn.cursor() as cursor:
                cursor.execute(sql, params)
                conn.commit()
        except psycopg.Error as e:
            logger.error("Failed to store pending registration: %s", e)
            raise StorageError("Could not store pending registration") from e

    def get(self, token: str) -> PendingRegistration | None:
        """Fetch the pending registration for token."""
        sql = f"SELECT {_PENDING_COLUMNS} FROM pending_registrations WHERE token = %s"
        try:
            with self._pool.connection() as conn, conn.cursor() as cursor:
                cursor.execute(sql, (token,))
                row = cursor.fetchone()
        except psycopg.Error as e:
            logger.error("Failed to read pending registration: %s", e)
            raise StorageError("Could not read pending registration") from e

        if row is None:
            return None
        return PendingRegistration(*row)

    def delete(self, token: str) -> bool:
        """
        Delete the pending registration for token.

        Returns:
            True if this call removed the row, False if it was already gone
        """
        sql = "DELETE FROM pending_registrations WHERE token = %s"
        try:
            with self._pool.connection() as conn, conn.cursor() as cursor:
                cursor.execute(sql, (token,))
                conn.commit()
                return cursor.rowcount == 1
        except psycopg.Error as e:
            logger.error("Failed to delete pending registration: %s", e)
            raise StorageError("Could not delete pending registration") from e

    def delete_by_identity(self, identity: str) -> int:
        """Delete any pending registration for identity."""
        sql = "DELETE FROM pending_registrations WHERE identity = %s"
        try:
            with self._pool.connection() as conn, conn.cursor() as cursor:
                cursor.execute(sql, (identity,))
                conn.commit()
                return cursor.rowcount
        except psycopg.Error as e:
            logger.error("Failed to delete pending registration: %s", e)
            raise StorageError("Could not delete pending registration") from e

    def purge_expired(self, now: datetime) -> int:
        """Delete every pending registration whose window ended before now."""
        sql = "DELETE FROM pending_registrations WHERE expires_at < %s"
        try:
            with self._pool.connection() as conn, conn.cursor() as cursor:
                cursor.execute(sql, (now,))
                conn.commit()
                return cursor.rowcount
        except psycopg.Error as e:
            logger.error("Failed to purge pending registrations: %s", e)
            raise StorageError("Could not purge pending registrations") from e


class PostgresAccountStore:
    """
    Implements AccountStore protocol via psycopg3.

    Uses structural subtyping - no explicit inheritance from Protocol.
    """

    def __init__(self, pool: ConnectionPool) -> None:
        self._pool = pool

    def add(self, account: Account) -> None:
        """
        Insert a confirmed account.

        Raises:
            ConflictError: If the identity already has an account
        """
        sql = f"INSERT INTO accounts ({_ACCOUNT_COLUMNS}) VALUES (%s, %s, %s, %s, %s)"
        params = (
            account.id,
            account.identity,
            account.display_name,
            account.credential_verifier,
            account.created_at,
        )
        try:
            with self._pool.connection() as conn, conn.cursor() as cursor:
                cursor.execute(sql, params)
                conn.commit()
        except errors.UniqueViolation as e:
            raise ConflictError(account.identity) from e
        except psycopg.Error as e:
            logger.error("Failed to store account: %s", e)
            raise StorageError("Could not store account") from e

    def get_by_identity(self, identity: str) -> Account | None:
        """Fetch the account for a normalized identity."""
        sql = f"SELECT {_ACCOUNT_COLUMNS} FROM accounts WHERE identity = %s"
        try:
            with self._pool.connection() as conn, conn.cursor() as cursor:
                cursor.execute(sql, (identity,))
                row = cursor.fetchone()
        except psycopg.Error as e:
            logger.error("Failed to read account: %s", e)
            raise StorageError("Could not read account") from e

        if row is None:
            return None
        account_id, *rest = row
        return Account(str(account_id), *rest)

    def exists(self, identity: str) -> bool:
        sql = "SELECT 1 FROM accounts WHERE identity = %s"
        try:
            with self._pool.connection() as conn, conn.cursor() as cursor:
                cursor.execute(sql, (identity,))
                return cursor.fetchone() is not None
        except psycopg.Error as e:
            logger.error("Failed to read account: %s", e)
            raise StorageError("Could not read account") from e


def run_migrations(pool: ConnectionPool) -> None:
    """
    Execute all SQL migration files from the migrations directory.

    Migrations are executed in sorted order (alphabetically by filename).
    Each migration should be idempotent (use IF NOT EXISTS, etc.).

    Args:
        pool: psycopg3 ConnectionPool instance
    """
    # Structure: src/adapters/repository/postgres.py -> migrations/
    migrations_dir = Path(__file__).parent.parent.parent.parent / "migrations"

    if not migrations_dir.exists():
        logger.warning(f"Migrations directory not found: {migrations_dir}")
        return

    sql_files = sorted(migrations_dir.glob("*.sql"))

    if not sql_files:
        logger.info("No migration files found")
        return

    logger.info(f"Running {len(sql_files)} migration(s)")

    for sql_file in sql_files:
        logger.info(f"Executing migration: {sql_file.name}")
        try:
            sql_content = sql_file.read_text()

            with pool.connection() as conn:
                conn.execute(sql_content)

            logger.info(f"Migration complete: {sql_file.name}")
        except Exception as e:
            logger.error(f"Migration failed: {sql_file.name} - {e}")
            raise RuntimeError(f"Database migration failed: {sql_file.name}") from e
