"""
Domain layer - Pure business logic with zero framework imports.

This package contains the core business logic for the pending registration
workflow. It defines its own port interfaces for infrastructure
abstraction, ensuring true hexagonal architecture decoupling.
"""

from .exceptions import (
    ConflictError,
    DeliveryError,
    ExpiredError,
    InvalidCodeError,
    InvalidCredentialError,
    NotFoundError,
    RegistrationError,
    StorageError,
    ValidationError,
)
from .models import Account, PendingRegistration, RegistrationTicket
from .ports import AccountStore, NotificationSender, PasswordHasher, PendingRegistrationStore
from .registration import RegistrationService

__all__ = [
    "Account",
    "AccountStore",
    "ConflictError",
    "DeliveryError",
    "ExpiredError",
    "InvalidCodeError",
    "InvalidCredentialError",
    "NotFoundError",
    "NotificationSender",
    "PasswordHasher",
    "PendingRegistration",
    "PendingRegistrationStore",
    "RegistrationError",
    "RegistrationService",
    "RegistrationTicket",
    "StorageError",
    "ValidationError",
]
