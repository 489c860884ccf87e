"""Outgoing email over SMTP."""
import asyncio
import logging
import smtplib
from email.message import EmailMessage

from core.config import Settings

logger = logging.getLogger(__name__)


class MailSender:
    """
    Sends plain-text email using the SMTP credentials from settings.

    smtplib is blocking, so each send runs in a worker thread. When mail is
    disabled the message is logged instead, which is what local development
    and tests rely on.
    """

    def __init__(self, settings: Settings) -> None:
        self._enabled = settings.mail_enabled
        self._sender = settings.mail_from
        self._host = settings.smtp_host
        self._port = settings.smtp_port
        self._username = settings.smtp_username
        self._password = settings.smtp_password
        self._starttls = settings.smtp_starttls
        self._timeout = settings.smtp_timeout_seconds

    def build_message(self, to: str, body: str, subject: str) -> EmailMessage:
        """Build the message without sending it."""
        message = EmailMessage()
        message["From"] = self._sender
        message["To"] = to
        message["Subject"] = subject
        message.set_content(body)
        return message

    async def send_email(self, to: str, body: str, subject: str) -> None:
        """
        Send an email.

        Raises:
            smtplib.SMTPException, OSError: If the SMTP exchange fails.
        """
        message = self.build_message(to, body, subject)
        if not self._enabled:
            logger.info("mail_disabled to=%s subject=%r", to, subject)
            logger.debug("mail_disabled_body to=%s body=%r", to, body)
            return
        await asyncio.to_thread(self._send, message)
        logger.info("mail_sent to=%s subject=%r", to, subject)

    def _send(self, message: EmailMessage) -> None:
        with smtplib.SMTP(self._host, self._port, timeout=self._timeout) as smtp:
            if self._starttls:
                smtp.starttls()
            if self._username:
                smtp.login(self._username, self._password)
            smtp.send_message(message)


# Global mail sender instance (set during app startup)
_mail_sender: MailSender | None = None


def get_mail_sender() -> MailSender | None:
    """Get the global mail sender instance."""
    return _mail_sender


def set_mail_sender(sender: MailSender | None) -> None:
    """Set the global mail sender instance."""
    global _mail_sender  # noqa: PLW0603
    _mail_sender = sender
