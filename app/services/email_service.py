"""
Email sending over SMTP with fastapi-mail.

EmailSender.send() either returns a message id or raises NotificationError;
callers decide whether a failure matters (for bookings it never does).
"""

import logging
import uuid
from functools import lru_cache

from fastapi_mail import ConnectionConfig, FastMail, MessageSchema, MessageType
from fastapi_mail.errors import ConnectionErrors
from pydantic import ValidationError

from app.core.config import Settings, get_settings
from app.core.errors import NotificationError

logger = logging.getLogger(__name__)


class EmailSender:
    """Thin wrapper around FastMail; disabled when SMTP is not configured."""

    def __init__(self, settings: Settings):
        self.enabled = bool(settings.mail_enabled and settings.mail_username and settings.mail_password)
        self._mailer = None
        if self.enabled:
            self._mailer = FastMail(ConnectionConfig(
                MAIL_USERNAME=settings.mail_username,
                MAIL_PASSWORD=settings.mail_password,
                MAIL_FROM=settings.mail_from,
                MAIL_FROM_NAME=settings.mail_from_name,
                MAIL_PORT=settings.mail_port,
                MAIL_SERVER=settings.mail_server,
                MAIL_STARTTLS=settings.mail_starttls,
                MAIL_SSL_TLS=not settings.mail_starttls,
                USE_CREDENTIALS=True,
            ))
        else:
            logger.warning("Email delivery disabled: MAIL_ENABLED/MAIL_USERNAME/MAIL_PASSWORD not set")

    async def send(self, to: str, subject: str, html_body: str) -> str:
        if not self.enabled:
            raise NotificationError("Email delivery is not configured")
        if not to:
            raise NotificationError("No recipient address")

        try:
            message = MessageSchema(
                subject=subject,
                recipients=[to],
                body=html_body,
                subtype=MessageType.html
            )
        except ValidationError as e:
            raise NotificationError(f"Invalid recipient address {to!r}") from e

        try:
            await self._mailer.send_message(message)
        except ConnectionErrors as e:
            raise NotificationError(f"Failed to send '{subject}' to {to}: {e}") from e
        except Exception as e:
            raise NotificationError(f"Unexpected error sending '{subject}' to {to}: {e}") from e

        message_id = uuid.uuid4().hex
        logger.info("Email '%s' sent to %s (id=%s)", subject, to, message_id)
        return message_id


@lru_cache()
def get_email_sender() -> EmailSender:
    return EmailSender(get_settings())
