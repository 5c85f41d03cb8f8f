"""Email service for sending transactional mail via SMTP."""
import asyncio
import logging
import smtplib
from datetime import timedelta
from html import escape
from email.mime.text import MIMEText
from email.mime.multipart import MIMEMultipart
from app.config import get_settings
from app.exceptions import EmailDeliveryError

logger = logging.getLogger(__name__)


class EmailService:
    """Service for sending HTML emails through an authenticated SMTP relay."""

    def __init__(self):
        settings = get_settings()
        self.sender = settings.email_user
        self.password = settings.email_pass
        self.smtp_server = settings.smtp_host
        self.smtp_port = settings.smtp_port

    def _deliver(self, to_email: str, subject: str, html_body: str) -> None:
        message = MIMEMultipart()
        message["From"] = self.sender
        message["To"] = to_email
        message["Subject"] = subject
        message.attach(MIMEText(html_body, "html"))

        with smtplib.SMTP(self.smtp_server, self.smtp_port, timeout=30) as server:
            server.starttls()
            server.login(self.sender, self.password)
            server.send_message(message)

    async def send(self, to_email: str, subject: str, html_body: str) -> None:
        """Send one message. Raises EmailDeliveryError if the relay refuses or is unreachable."""
        try:
            await asyncio.to_thread(self._deliver, to_email, subject, html_body)
        except (smtplib.SMTPException, OSError) as e:
            logger.error("Email delivery to %s failed: %s", to_email, e)
            raise EmailDeliveryError() from e
        logger.info("Email '%s' sent to %s", subject, to_email)


def _describe(ttl: timedelta) -> str:
    minutes = int(ttl.total_seconds() // 60)
    if minutes % 60 == 0:
        hours = minutes // 60
        return "1 hour" if hours == 1 else f"{hours} hours"
    return f"{minutes} minutes"


def password_reset_email(username: str, reset_url: str, ttl: timedelta) -> str:
    return f"""
<h3>Hello {escape(username)},</h3>
<p>You requested to reset your password.</p>
<p>Click the link below to set a new password:</p>
<a href="{escape(reset_url)}">{escape(reset_url)}</a>
<p>This link expires in {_describe(ttl)}.</p>
""".strip()


email_service = EmailService()
