"""Email transports used by the notification dispatcher.

Every backend returns ``True`` when the message was handed off and ``False``
when delivery failed. Transport errors are logged, never raised.
"""

import logging
from abc import ABC, abstractmethod
from email.mime.multipart import MIMEMultipart
from email.mime.text import MIMEText

import aiosmtplib
import httpx

from estatehub.config import Settings, settings

logger = logging.getLogger(__name__)

RESEND_API_URL = "https://api.resend.com/emails"


class EmailBackend(ABC):
    @abstractmethod
    async def send(self, to: str, subject: str, html: str, text: str | None = None) -> bool:
        """Deliver one message. ``text`` is the plain-text alternative."""


class ConsoleEmailBackend(EmailBackend):
    """Logs messages instead of sending them. Used in development and tests."""

    async def send(self, to: str, subject: str, html: str, text: str | None = None) -> bool:
        body = text or html
        logger.info(f"[console email] to={to} subject={subject!r}\n{body}")
        return True


def build_mime_message(from_address: str, to: str, subject: str, html: str, text: str | None):
    message = MIMEMultipart("alternative")
    message["From"] = from_address
    message["To"] = to
    message["Subject"] = subject
    if text:
        message.attach(MIMEText(text, "plain"))
    message.attach(MIMEText(html, "html"))
    return message


class SMTPEmailBackend(EmailBackend):
    """SMTP relay, e.g. a Gmail app password on port 465."""

    def __init__(
        self,
        host: str,
        port: int,
        username: str,
        password: str,
        use_tls: bool = True,
        from_address: str = "",
    ):
        self.host = host
        self.port = port
        self.username = username
        self.password = password
        self.use_tls = use_tls
        self.from_address = from_address

    async def send(self, to: str, subject: str, html: str, text: str | None = None) -> bool:
        message = build_mime_message(self.from_address, to, subject, html, text)
        try:
            await aiosmtplib.send(
                message,
                hostname=self.host,
                port=self.port,
                username=self.username or None,
                password=self.password or None,
                use_tls=self.use_tls,
            )
        except (aiosmtplib.SMTPException, OSError) as e:
            logger.error(f"SMTP delivery to {to} failed: {e!r}")
            return False

        logger.info(f"Sent '{subject}' to {to} via SMTP")
        return True


class ResendEmailBackend(EmailBackend):
    """Resend HTTP API."""

    def __init__(self, api_key: str, from_address: str):
        self.api_key = api_key
        self.from_address = from_address

    def _payload(self, to: str, subject: str, html: str, text: str | None) -> dict:
        payload = {"from": self.from_address, "to": [to], "subject": subject, "html": html}
        if text:
            payload["text"] = text
        return payload

    async def send(self, to: str, subject: str, html: str, text: str | None = None) -> bool:
        async with httpx.AsyncClient(timeout=30.0) as client:
            try:
                response = await client.post(
                    RESEND_API_URL,
                    headers={"Authorization": f"Bearer {self.api_key}"},
                    json=self._payload(to, subject, html, text),
                )
                response.raise_for_status()
            except httpx.HTTPStatusError as e:
                logger.error(
                    f"Resend rejected message to {to}: {e.response.status_code} {e.response.text}"
                )
                return False
            except httpx.HTTPError as e:
                logger.error(f"Resend delivery to {to} failed: {e!r}")
                return False

        logger.info(f"Sent '{subject}' to {to} via Resend")
        return True


def get_email_backend(config: Settings = settings) -> EmailBackend:
    """Build the backend named by ``EMAIL_BACKEND``."""
    name = config.email_backend
    if name == "console":
        return ConsoleEmailBackend()
    if name == "smtp":
        return SMTPEmailBackend(
            host=config.smtp_host,
            port=config.smtp_port,
            username=config.smtp_username,
            password=config.smtp_password,
            use_tls=config.smtp_use_tls,
            from_address=config.email_from,
        )
    if name == "resend":
        return ResendEmailBackend(api_key=config.resend_api_key, from_address=config.email_from)
    raise ValueError(f"Unknown email backend: {name}")
