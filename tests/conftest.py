"""
Shared test fixtures and configuration.

This module provides pytest fixtures for:
- A controllable clock for expiry scenarios
- In-memory stores and a fast bcrypt hasher
- A notification sender that records what it was asked to deliver
- A fully wired RegistrationService
"""

import threading
from datetime import datetime, timedelta, timezone

import pytest

from src.adapters.hashing import BcryptPasswordHasher
from src.adapters.repository import InMemoryAccountStore, InMemoryPendingRegistrationStore
from src.domain.registration import RegistrationService

START = datetime(2026, 1, 1, 12, 0, tzinfo=timezone.utc)


class FakeClock:
    """Clock that only moves when told to."""

    def __init__(self, now: datetime = START) -> None:
        self.now = now

    def __call__(self) -> datetime:
        return self.now

    def advance(self, **kwargs: float) -> None:
        self.now += timedelta(**kwargs)


class RecordingSender:
    """NotificationSender double that records messages and can be told to fail."""

    def __init__(self) -> None:
        self.messages: list[tuple[str, str, str]] = []
        self.succeed = True
        self._lock = threading.Lock()

    def send(self, destination: str, subject: str, body: str) -> bool:
        with self._lock:
            self.messages.append((destination, subject, body))
        return self.succeed

    def last_code(self) -> str:
        """Extract the numeric code from the most recent message body."""
        body = self.messages[-1][2]
        return next(word for word in body.replace(".", " ").split() if word.isdigit())


@pytest.fixture
def clock() -> FakeClock:
    return FakeClock()


@pytest.fixture
def sender() -> RecordingSender:
    return RecordingSender()


@pytest.fixture
def hasher() -> BcryptPasswordHasher:
    """bcrypt at its minimum cost so tests stay fast."""
    return BcryptPasswordHasher(rounds=4)


@pytest.fixture
def pending_store() -> InMemoryPendingRegistrationStore:
    return InMemoryPendingRegistrationStore()


@pytest.fixture
def account_store() -> InMemoryAccountStore:
    return InMemoryAccountStore()


@pytest.fixture
def service(
    pending_store: InMemoryPendingRegistrationStore,
    account_store: InMemoryAccountStore,
    hasher: BcryptPasswordHasher,
    sender: RecordingSender,
    clock: FakeClock,
) -> RegistrationService:
    return RegistrationService(
        pending_store=pending_store,
        account_store=account_store,
        hasher=hasher,
        notifier=sender,
        clock=clock,
    )
