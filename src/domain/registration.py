"""
Registration domain service - pending registration workflow.

This module contains the core business logic for user registration:
a client claims an identity, receives a one-time code out-of-band,
and trades token + code for a permanent account.

Pending Registration Lifecycle
==============================

    (none) --initiate--> PENDING
    PENDING --initiate (same identity)--> PENDING'   (old token is gone)
    PENDING --finalize (right code, in time)--> ACCOUNT   (record deleted)
    PENDING --finalize (after expires_at)--> (none)       (record deleted)
    PENDING --finalize (wrong code)--> PENDING            (unchanged)

Records are never updated in place. Atomicity lives in the stores:
replace() serializes per identity, delete() is the single claim point
per token, so two finalizations of the same token cannot both win.
"""

import logging
import secrets
import uuid
from collections.abc import Callable
from dataclasses import dataclass, field
from datetime import datetime, timedelta, timezone

from .exceptions import (
    ConflictError,
    DeliveryError,
    ExpiredError,
    InvalidCodeError,
    InvalidCredentialError,
    NotFoundError,
    ValidationError,
)
from .models import Account, PendingRegistration, RegistrationTicket
from .ports import AccountStore, NotificationSender, PasswordHasher, PendingRegistrationStore

logger = logging.getLogger(__name__)

VERIFICATION_SUBJECT = "Your verification code"


def utc_now() -> datetime:
    return datetime.now(timezone.utc)


@dataclass
class RegistrationService:
    """
    Domain service for user registration.

    Orchestrates the registration flow: input validation, identity
    normalization, credential hashing, code generation, pending record
    persistence, code delivery and account promotion.
    """

    pending_store: PendingRegistrationStore
    account_store: AccountStore
    hasher: PasswordHasher
    notifier: NotificationSender
    otp_ttl: timedelta = timedelta(minutes=10)
    otp_length: int = 6
    clock: Callable[[], datetime] = field(default=utc_now)

    def initiate_registration(
        self, identity: str, display_name: str, secret: str
    ) -> RegistrationTicket:
        """
        Start (or restart) registration for an identity.

        Any earlier pending registration for the same identity is dropped,
        so only the most recently delivered code can ever be used.

        Args:
            identity: Email address (will be normalized)
            display_name: Name shown for the account
            secret: Plaintext password (will be hashed, never stored)

        Returns:
            RegistrationTicket with the token the client must present

        Raises:
            ValidationError: If a field is blank
            ConflictError: If the identity already has an account
            DeliveryError: If the code could not be sent (record is kept)
        """
        self._require("identity", identity)
        self._require("display_name", display_name)
        self._require("secret", secret)

        normalized_identity = self._normalize_identity(identity)
        if self.account_store.exists(normalized_identity):
            raise ConflictError(normalized_identity)

        now = self.clock()
        record = PendingRegistration(
            token=self._generate_token(),
            identity=normalized_identity,
            display_name=display_name.strip(),
            credential_verifier=self.hasher.hash(secret),
            otp=self._generate_otp(),
            created_at=now,
            expires_at=now + self.otp_ttl,
        )
        self.pending_store.replace(record)
        logger.info("Pending registration issued for %s", normalized_identity)

        ticket = RegistrationTicket(
            token=record.token,
            identity=normalized_identity,
            expires_at=record.expires_at,
        )

        # Dispatch happens after the record is durable and outside any store lock.
        delivered = self.notifier.send(
            normalized_identity, VERIFICATION_SUBJECT, self._message_body(record.otp)
        )
        if not delivered:
            logger.warning("Verification code delivery failed for %s", normalized_identity)
            raise DeliveryError(normalized_identity, record.token, record.expires_at)

        return ticket

    def finalize_registration(self, token: str, otp: str) -> Account:
        """
        Promote a pending registration to an account.

        Args:
            token: Token from initiate_registration
            otp: One-time code the client received

        Returns:
            The newly created Account

        Raises:
            ValidationError: If token or otp is blank
            NotFoundError: Unknown token, or already consumed
            ExpiredError: Verification window passed (record is removed)
            InvalidCodeError: Wrong code (record is kept for retry)
            ConflictError: Identity was confirmed through another registration
        """
        self._require("token", token)
        self._require("otp", otp)

        now = self.clock()
        record = self.pending_store.get(token)
        if record is None:
            raise NotFoundError(token)

        if record.is_expired(now):
            if not self.pending_store.delete(token):
                raise NotFoundError(token)
            logger.info("Pending registration for %s expired", record.identity)
            raise ExpiredError(token)

        # No attempt counter: wrong codes are retryable until expiry.
        if not secrets.compare_digest(record.otp.encode(), otp.strip().encode()):
            raise InvalidCodeError(token)

        # Claim point: only the caller that removes the record may create the account.
        if not self.pending_store.delete(token):
            raise NotFoundError(token)

        account = Account(
            id=str(uuid.uuid4()),
            identity=record.identity,
            display_name=record.display_name,
            credential_verifier=record.credential_verifier,
            created_at=now,
        )
        self.account_store.add(account)
        logger.info("Account %s created for %s", account.id, account.identity)
        return account

    def authenticate(self, identity: str, secret: str) -> Account:
        """
        Check a secret against a confirmed account.

        Raises:
            ValidationError: If identity or secret is blank
            NotFoundError: No account for identity
            InvalidCredentialError: Secret does not match
        """
        self._require("identity", identity)
        self._require("secret", secret)

        normalized_identity = self._normalize_identity(identity)
        account = self.account_store.get_by_identity(normalized_identity)
        if account is None:
            raise NotFoundError(normalized_identity)

        if not self.hasher.verify(secret, account.credential_verifier):
            raise InvalidCredentialError(normalized_identity)

        return account

    def purge_expired(self) -> int:
        """Remove pending registrations whose window has passed."""
        removed = self.pending_store.purge_expired(self.clock())
        if removed:
            logger.info("Purged %d expired pending registration(s)", removed)
        return removed

    def _require(self, name: str, value: str | None) -> None:
        if value is None or not value.strip():
            raise ValidationError(name)

    def _normalize_identity(self, identity: str) -> str:
        """
        Normalize identity for consistent storage and lookup.

        Applies: strip whitespace + lowercase
        """
        return identity.strip().lower()

    def _generate_otp(self) -> str:
        """
        Generate cryptographically secure numeric code.

        Returns string to preserve leading zeros.
        """
        return f"{secrets.randbelow(10**self.otp_length):0{self.otp_length}d}"

    def _generate_token(self) -> str:
        """128-bit random URL-safe token."""
        return secrets.token_urlsafe(16)

    def _message_body(self, otp: str) -> str:
        return f"Your OTP code is {otp}. It is valid for {self._validity_window()}."

    def _validity_window(self) -> str:
        """Human-readable TTL; falls back to seconds when not whole minutes."""
        seconds = int(self.otp_ttl.total_seconds())
        if seconds % 60:
            count, unit = seconds, "second"
        else:
            count, unit = seconds // 60, "minute"
        return f"{count} {unit}" if count == 1 else f"{count} {unit}s"
