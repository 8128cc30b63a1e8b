"""
Shared fixtures for adversarial tests.

Provides a registration service whose hasher yields the GIL, so that
concurrent callers genuinely interleave inside the workflow.
"""

import time

import pytest

from src.adapters.hashing import BcryptPasswordHasher
from src.domain.registration import RegistrationService

# Module-level marker for all adversarial tests
pytestmark = pytest.mark.adversarial


class SlowHasher(BcryptPasswordHasher):
    """bcrypt plus a short sleep, widening race windows between threads."""

    def hash(self, plaintext: str) -> str:
        time.sleep(0.01)
        return super().hash(plaintext)


@pytest.fixture
def racy_service(pending_store, account_store, sender, clock) -> RegistrationService:
    return RegistrationService(
        pending_store=pending_store,
        account_store=account_store,
        hasher=SlowHasher(rounds=4),
        notifier=sender,
        clock=clock,
    )
