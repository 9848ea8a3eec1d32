"""Transactional notifications: verification links, OTPs and moderation outcomes.

Every method returns whether the backend accepted the message. Delivery
failures are not fatal to the request that triggered them; callers log and
continue.
"""

import logging
from html import escape

from estatehub.config import Settings, settings
from estatehub.constants import APP_NAME
from estatehub.services.email import EmailBackend, get_email_backend

logger = logging.getLogger(__name__)


def _layout(heading: str, body: str) -> str:
    return f"""
<!DOCTYPE html>
<html lang="en">
<head>
    <meta charset="utf-8">
    <meta name="viewport" content="width=device-width, initial-scale=1.0">
</head>
<body style="font-family: Arial, sans-serif; line-height: 1.6; color: #333; max-width: 600px; margin: 0 auto; padding: 20px;">
    <div style="text-align: center; margin-bottom: 30px;">
        <h1 style="color: #1a1a1a; margin: 0;">{APP_NAME}</h1>
        <p style="color: #666; margin: 0;">Your Trusted Real Estate Partner</p>
    </div>
    <div style="background: #f9fafb; border-radius: 8px; padding: 30px; margin-bottom: 30px;">
        <h2 style="margin-top: 0; color: #1a1a1a;">{heading}</h2>
        {body}
    </div>
</body>
</html>
"""


class NotificationDispatcher:
    """High-level notification service for sending application emails."""

    def __init__(self, backend: EmailBackend | None = None, config: Settings = settings):
        self._backend = backend
        self.config = config

    @property
    def backend(self) -> EmailBackend:
        """Lazy-load the backend."""
        if self._backend is None:
            self._backend = get_email_backend(self.config)
        return self._backend

    def verification_link(self, token: str) -> str:
        return f"{self.config.app_url}/verify/{token}"

    async def _send(self, to: str, subject: str, html: str, text: str) -> bool:
        sent = await self.backend.send(to=to, subject=subject, html=html, text=text)
        if not sent:
            logger.warning(f"Email '{subject}' to {to} was not delivered")
        return sent

    async def send_verification(self, to: str, name: str, token: str) -> bool:
        link = self.verification_link(token)
        minutes = self.config.verification_ttl_seconds // 60
        html = _layout(
            f"Hello, {escape(name)}",
            f"""
        <p>Thank you for signing up with <strong>{APP_NAME}</strong>.</p>
        <p>To complete your registration and verify your email address (<b>{escape(to)}</b>), open the link below:</p>
        <p><a href="{link}">{link}</a></p>
        <p>This link will expire in <strong>{minutes} minutes</strong>.</p>
""",
        )
        text = (
            f"Hello {name},\n\nVerify your {APP_NAME} account:\n{link}\n\n"
            f"This link will expire in {minutes} minutes.\n"
        )
        return await self._send(
            to, f"Verification link for your {APP_NAME} account", html, text
        )

    async def send_otp(self, to: str, name: str, otp: str, *, resend: bool = False) -> bool:
        minutes = self.config.otp_ttl_seconds // 60
        html = _layout(
            f"Hi {escape(name)},",
            f"""
        <p>Your one-time passcode for logging in is:</p>
        <p style="font-size: 28px; font-weight: bold; letter-spacing: 6px; text-align: center;">{otp}</p>
        <p>This code is valid for {minutes} minutes. Do not share it with anyone.</p>
""",
        )
        text = f"Hi {name},\n\nYour login OTP is {otp}. It is valid for {minutes} minutes.\n"
        prefix = "Resend OTP" if resend else "OTP"
        return await self._send(to, f"{prefix} for {APP_NAME} Login Verification", html, text)

    async def send_agent_approved(self, to: str, name: str) -> bool:
        html = _layout(
            f"Congratulations, {escape(name)}!",
            "<p>Your agent account has been approved. You can now log in and start listing properties.</p>",
        )
        text = f"Congratulations {name}! Your agent account has been approved.\n"
        return await self._send(to, "Your Agent Account Has Been Approved!", html, text)

    async def send_agent_rejected(self, to: str, name: str, reason: str) -> bool:
        html = _layout(
            f"Dear {escape(name)},",
            f"""
        <p>After reviewing your agent application we are unable to approve it at this time.</p>
        <p><strong>Reason:</strong> {escape(reason)}</p>
""",
        )
        text = f"Dear {name},\n\nYour agent application was not approved.\nReason: {reason}\n"
        return await self._send(to, "Update on Your Agent Application", html, text)

    async def send_property_approved(self, to: str, agent_name: str, property_title: str) -> bool:
        html = _layout(
            f"Great News, {escape(agent_name)}!",
            f"<p>Your property listing <strong>{escape(property_title)}</strong> has been approved and is now live.</p>",
        )
        text = f"Great news {agent_name}! Your listing '{property_title}' has been approved.\n"
        return await self._send(to, "Your Property Listing Has Been Approved!", html, text)

    async def send_property_rejected(
        self, to: str, agent_name: str, property_title: str, reason: str
    ) -> bool:
        html = _layout(
            f"Dear {escape(agent_name)},",
            f"""
        <p>Your property listing <strong>{escape(property_title)}</strong> was not approved.</p>
        <p><strong>Reason:</strong> {escape(reason)}</p>
""",
        )
        text = (
            f"Dear {agent_name},\n\nYour listing '{property_title}' was not approved.\n"
            f"Reason: {reason}\n"
        )
        return await self._send(to, "Update on Your Property Listing", html, text)
