"""
Console notification sender adapter - Implements NotificationSender protocol.

This module provides a console-based implementation of the domain's
notification port, logging messages (including verification codes)
for development and demo purposes.
"""

import logging

logger = logging.getLogger(__name__)


class ConsoleNotificationSender:
    """
    Implements NotificationSender protocol via console logging.

    Uses structural subtyping - no explicit inheritance from Protocol.
    For demo/development purposes - never fails.
    """

    def send(self, destination: str, subject: str, body: str) -> bool:
        """
        Log the message to console (simulates email delivery).

        In production, this would be replaced with a real delivery adapter.
        The message is logged at INFO level to be visible in container logs.

        Args:
            destination: Recipient address (normalized by domain layer)
            subject: Message subject line
            body: Message body containing the verification code

        Returns:
            Always True
        """
        logger.info("[VERIFICATION] To: %s Subject: %s Body: %s", destination, subject, body)
        return True
