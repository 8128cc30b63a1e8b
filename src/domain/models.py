"""
Domain records for the pending-registration lifecycle.

A PendingRegistration never changes in place: it is replaced wholesale by
a newer registration for the same identity, or removed by finalization or
expiry. An Account is only ever produced by a successful finalization.
"""

from dataclasses import dataclass
from datetime import datetime


@dataclass(frozen=True)
class PendingRegistration:
    """Unverified registration awaiting its one-time code."""

    token: str
    identity: str
    display_name: str
    credential_verifier: str
    otp: str
    created_at: datetime
    expires_at: datetime

    def is_expired(self, now: datetime) -> bool:
        """Live up to and including expires_at."""
        return now > self.expires_at


@dataclass(frozen=True)
class Account:
    """Confirmed account."""

    id: str
    identity: str
    display_name: str
    credential_verifier: str
    created_at: datetime


@dataclass(frozen=True)
class RegistrationTicket:
    """What the client receives after initiating registration (never the code)."""

    token: str
    identity: str
    expires_at: datetime
