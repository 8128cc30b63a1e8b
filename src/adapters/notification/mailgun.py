"""
Mailgun notification sender adapter - Implements NotificationSender protocol.

Sends text and HTML email through the Mailgun HTTP API using httpx.
Delivery problems are reported through the return value, never raised:
the domain decides what a failed delivery means.
"""

import html
import logging
import re

import httpx

logger = logging.getLogger(__name__)

MAILGUN_US_BASE = "https://api.mailgun.net"

# The code is the first 4-12 digit run in the message
CODE_PATTERN = re.compile(r"\b(\d{4,12})\b")
CODE_MARKUP = r"<strong>\1</strong>"


class MailgunNotificationSender:
    """Implements NotificationSender protocol via the Mailgun messages API."""

    def __init__(
        self,
        api_key: str,
        domain: str,
        from_email: str,
        from_name: str,
        base_url: str = MAILGUN_US_BASE,
        timeout: float = 10.0,
        transport: httpx.BaseTransport | None = None,
    ) -> None:
        self._api_key = api_key
        self._domain = domain.strip().lower()
        self._from = f"{from_name} <{from_email.strip()}>"
        self._url = f"{(base_url or MAILGUN_US_BASE).strip().rstrip('/')}/v3/{self._domain}/messages"
        self._timeout = timeout
        self._transport = transport

    def send(self, destination: str, subject: str, body: str) -> bool:
        if not self._api_key or not self._domain:
            logger.warning("[Mailgun] NOT SENT: to=%s (api key or domain missing)", destination)
            return False

        data = {
            "from": self._from,
            "to": destination,
            "subject": subject,
            "text": body,
            "html": render_html(body),
        }
        try:
            with httpx.Client(timeout=self._timeout, transport=self._transport) as client:
                response = client.post(self._url, auth=("api", self._api_key), data=data)
        except httpx.HTTPError as e:
            logger.warning("[Mailgun] Request failed: to=%s error=%s", destination, e)
            return False

        if not response.is_success:
            logger.warning(
                "[Mailgun] Rejected: to=%s status=%s body=%s",
                destination,
                response.status_code,
                response.text,
            )
            return False

        logger.info("[Mailgun] Accepted: to=%s status=%s", destination, response.status_code)
        return True


def render_html(body: str) -> str:
    """Wrap the message in a paragraph with the verification code in bold."""
    return f"<p>{CODE_PATTERN.sub(CODE_MARKUP, html.escape(body), count=1)}</p>"
