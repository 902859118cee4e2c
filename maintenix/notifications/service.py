# maintenix/notifications/service.py
import asyncio
import html
import logging
from dataclasses import dataclass
from datetime import UTC, datetime
from typing import Protocol

from azure.communication.email import EmailClient

from maintenix.config import EmailSettings

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class DeliveryResult:
    success: bool
    message_id: str | None = None


class NotificationSender(Protocol):
    async def send_otp(
        self, email: str, code: str, display_name: str
    ) -> DeliveryResult: ...


def render_otp_email(
    code: str, display_name: str, expire_minutes: int, brand: str
) -> tuple[str, str]:
    """Builds the (html, plain text) bodies of the reset email."""
    name = html.escape(display_name or "there")
    year = datetime.now(UTC).year
    html_content = f"""
    <div style="font-family: Arial, sans-serif; max-width: 600px; margin: 0 auto;">
        <h2 style="color: #333;">Password Reset Request</h2>
        <p>Hello <strong>{name}</strong>,</p>
        <p>We received a request to reset your password. Use the OTP below to
         complete the password reset process:</p>
        <div style="background-color: #f5f5f5;
         padding: 20px; text-align: center; margin: 20px 0;">
            <div style="font-size: 32px; font-weight: bold;
             letter-spacing: 8px; color: #2c3e50;">
                <strong>{code}</strong>
            </div>
        </div>
        <p><strong>This OTP is valid for {expire_minutes} minutes.</strong></p>
        <p style="color: #666; font-size: 14px;">
            If you didn't request this password reset, please ignore this email
             or contact support if you have concerns.
        </p>
        <hr style="border: none; border-top: 1px solid #eee; margin: 20px 0;">
        <p style="color: #999; font-size: 12px;">
            &copy; {year} {brand} - Maintenance &amp; Asset Intelligence
        </p>
    </div>
    """
    plain_text = (
        f"Hello {display_name or 'there'},\n\n"
        f"Your {brand} password reset code is: {code}\n"
        f"This code is valid for {expire_minutes} minutes.\n\n"
        "If you didn't request this password reset, please ignore this email."
    )
    return html_content, plain_text


class EmailNotificationSender:
    """Delivers OTP codes through Azure Communication Services email."""

    def __init__(self, settings: EmailSettings, expire_minutes: int):
        if not settings.COMMUNICATION_SERVICES_CONNECTION_STRING:
            raise ValueError("COMMUNICATION_SERVICES_CONNECTION_STRING is not set")
        self.settings = settings
        self.expire_minutes = expire_minutes
        self.client = EmailClient.from_connection_string(
            settings.COMMUNICATION_SERVICES_CONNECTION_STRING
        )

    def _send(self, message: dict) -> dict:
        poller = self.client.begin_send(message)
        return poller.result()

    async def send_otp(self, email: str, code: str, display_name: str) -> DeliveryResult:
        brand = self.settings.SENDER_DISPLAY_NAME
        html_content, plain_text = render_otp_email(
            code, display_name, self.expire_minutes, brand
        )
        message = {
            "content": {
                "subject": f"Password Reset OTP - {brand}",
                "html": html_content,
                "plainText": plain_text,
            },
            "recipients": {"to": [{"address": email, "displayName": display_name}]},
            "senderAddress": self.settings.SENDER_ADDRESS,
        }

        try:
            result = await asyncio.to_thread(self._send, message)
        except Exception:
            logger.exception("OTP email delivery raised")
            return DeliveryResult(success=False)

        if result.get("status") != "Succeeded":
            logger.error("OTP email send status: %s", result.get("status"))
            return DeliveryResult(success=False, message_id=result.get("id"))

        logger.info("OTP email sent with ID: %s", result.get("id"))
        return DeliveryResult(success=True, message_id=result.get("id"))


class LoggingNotificationSender:
    """Stand-in used when no email service is configured."""

    async def send_otp(self, email: str, code: str, display_name: str) -> DeliveryResult:
        logger.warning(
            "Email service not configured; OTP for %s was not delivered", email
        )
        return DeliveryResult(success=True)


def build_notification_sender(
    settings: EmailSettings, expire_minutes: int
) -> NotificationSender:
    if settings.COMMUNICATION_SERVICES_CONNECTION_STRING:
        return EmailNotificationSender(settings, expire_minutes)
    return LoggingNotificationSender()
