"""
Port interfaces - Protocol definitions for infrastructure abstraction.

This module defines the interfaces (ports) that the domain requires
from infrastructure. Adapters implement these protocols.

Every store method raises StorageError when the backend itself fails.
"""

from datetime import datetime
from typing import Protocol

from .models import Account, PendingRegistration


class PasswordHasher(Protocol):
    """Port interface for one-way salted credential hashing."""

    def hash(self, plaintext: str) -> str:
        """Return an opaque verifier for plaintext."""
        ...

    def verify(self, plaintext: str, verifier: str) -> bool:
        """Return True if plaintext matches verifier."""
        ...


class NotificationSender(Protocol):
    """Port interface for out-of-band message delivery."""

    def send(self, destination: str, subject: str, body: str) -> bool:
        """
        Attempt delivery of a message.

        Args:
            destination: Recipient address (normalized identity)
            subject: Message subject line
            body: Plain-text message body

        Returns:
            True if the message was accepted for delivery, False otherwise
        """
        ...


class PendingRegistrationStore(Protocol):
    """
    Port interface for pending registration persistence.

    Keyed by token, with at most one record per identity.
    """

    def replace(self, record: PendingRegistration) -> None:
        """
        Atomically drop any record for record.identity and insert record.

        Concurrent replaces for the same identity are serialized: exactly
        one record survives, and it is the last one written.
        """
        ...

    def get(self, token: str) -> PendingRegistration | None:
        """Return the record for token, or None."""
        ...

    def delete(self, token: str) -> bool:
        """
        Atomically remove the record for token.

        Returns:
            True if this call removed it, False if it was already gone
        """
        ...

    def delete_by_identity(self, identity: str) -> int:
        """Remove any record for identity, returning how many were removed."""
        ...

    def purge_expired(self, now: datetime) -> int:
        """Remove every record whose expires_at is before now."""
        ...


class AccountStore(Protocol):
    """Port interface for confirmed account persistence."""

    def add(self, account: Account) -> None:
        """
        Insert a new account.

        Raises:
            ConflictError: If account.identity is already taken
        """
        ...

    def get_by_identity(self, identity: str) -> Account | None:
        """Return the account for a normalized identity, or None."""
        ...

    def exists(self, identity: str) -> bool:
        """Return True if a normalized identity already has an account."""
        ...
