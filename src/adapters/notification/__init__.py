"""Notification adapters - Out-of-band delivery of verification codes."""

from .console import ConsoleNotificationSender
from .mailgun import MailgunNotificationSender

__all__ = ["ConsoleNotificationSender", "MailgunNotificationSender"]
