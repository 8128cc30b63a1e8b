"""
FastAPI dependencies - Dependency injection factories.

This module provides Depends() factories for injecting
domain services and infrastructure adapters into routes.
"""

from datetime import timedelta

from fastapi import Depends, Request
from fastapi.security import HTTPBasic, HTTPBasicCredentials
from starlette.datastructures import State

from src.adapters.hashing import BcryptPasswordHasher
from src.adapters.notification import ConsoleNotificationSender, MailgunNotificationSender
from src.config.settings import Settings, get_settings
from src.domain.ports import NotificationSender, PasswordHasher
from src.domain.registration import RegistrationService


def build_hasher(settings: Settings) -> PasswordHasher:
    """Create the credential hasher with the configured bcrypt cost."""
    return BcryptPasswordHasher(rounds=settings.bcrypt_cost)


def build_notification_sender(settings: Settings) -> NotificationSender:
    """Pick the notification adapter configured by NOTIFICATION_BACKEND."""
    if settings.notification_backend == "mailgun":
        return MailgunNotificationSender(
            api_key=settings.mailgun_api_key,
            domain=settings.mailgun_domain,
            from_email=settings.mailgun_from_email,
            from_name=settings.mailgun_from_name,
            base_url=settings.mailgun_base_url,
        )
    return ConsoleNotificationSender()


def build_registration_service(state: State, settings: Settings) -> RegistrationService:
    """
    Create registration service from app state.

    The stores, hasher and notification sender are created during app
    lifespan startup and stored in app.state.
    """
    return RegistrationService(
        pending_store=state.pending_store,
        account_store=state.account_store,
        hasher=state.hasher,
        notifier=state.notifier,
        otp_ttl=timedelta(seconds=settings.otp_ttl_seconds),
        otp_length=settings.otp_length,
    )


def get_registration_service(request: Request) -> RegistrationService:
    """Create registration service with injected dependencies."""
    return build_registration_service(request.app.state, get_settings())


# HTTP BASIC AUTH security scheme for OpenAPI documentation
http_basic = HTTPBasic()


def get_basic_auth_credentials(
    credentials: HTTPBasicCredentials = Depends(http_basic),
) -> tuple[str, str]:
    """
    Extract and normalize credentials from HTTP BASIC AUTH header.

    FastAPI's HTTPBasic automatically:
    - Returns 401 for missing Authorization header
    - Returns 401 for malformed base64 encoding
    - Parses base64(identity:secret) format

    Args:
        credentials: HTTPBasicCredentials from FastAPI's HTTPBasic

    Returns:
        Tuple of (normalized_identity, secret)
        Identity is stripped and lowercased for consistency.
    """
    identity = credentials.username.strip().lower()
    secret = credentials.password
    return identity, secret
