"""
Domain exceptions - Semantic error types for registration.

This module defines domain-specific exceptions that communicate
business rule violations without leaking infrastructure details.
"""

from datetime import datetime


class RegistrationError(Exception):
    """Base class for registration domain errors."""

    pass


class ValidationError(RegistrationError):
    """A required field is missing or blank."""

    def __init__(self, field: str) -> None:
        super().__init__(f"{field} must not be empty")
        self.field = field


class ConflictError(RegistrationError):
    """Identity already belongs to a confirmed account."""

    pass


class DeliveryError(RegistrationError):
    """
    Verification code could not be dispatched.

    The pending registration is kept, so the token stays finalizable
    until it expires.
    """

    def __init__(self, identity: str, token: str, expires_at: datetime) -> None:
        super().__init__(f"Could not deliver verification code to {identity}")
        self.identity = identity
        self.token = token
        self.expires_at = expires_at


class NotFoundError(RegistrationError):
    """Unknown identity, or a token that never existed or was already consumed."""

    pass


class ExpiredError(RegistrationError):
    """Pending registration outlived its verification window."""

    pass


class InvalidCodeError(RegistrationError):
    """Submitted one-time code does not match."""

    pass


class InvalidCredentialError(RegistrationError):
    """Secret does not match the stored verifier."""

    pass


class StorageError(RegistrationError):
    """Backing store failed; never means "record does not exist"."""

    pass
