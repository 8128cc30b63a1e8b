"""Repository adapters - Database and in-process store implementations."""

from .memory import InMemoryAccountStore, InMemoryPendingRegistrationStore
from .postgres import PostgresAccountStore, PostgresPendingRegistrationStore, run_migrations

__all__ = [
    "InMemoryAccountStore",
    "InMemoryPendingRegistrationStore",
    "PostgresAccountStore",
    "PostgresPendingRegistrationStore",
    "run_migrations",
]
