"""
Notification fan-out for bookings and registrations.

Run as FastAPI background tasks: the HTTP response is already on its way
when these execute. Every failure is logged here and never re-raised.
"""

import asyncio
import logging
from functools import lru_cache

from app.core.config import Settings, get_settings
from app.core.errors import NotificationError
from app.services import email_templates
from app.services.email_service import EmailSender, get_email_sender

logger = logging.getLogger(__name__)


class Notifier:

    def __init__(self, sender: EmailSender, settings: Settings):
        self.sender = sender
        self.admin_email = settings.admin_email
        self.meeting_link = settings.meeting_link

    async def send_booking_confirmation(self, booking: dict) -> str:
        subject, html = email_templates.consultation_confirmation(booking, self.meeting_link)
        return await self.sender.send(booking["email"], subject, html)

    async def send_booking_admin_notice(self, booking: dict) -> str:
        if not self.admin_email:
            raise NotificationError("ADMIN_EMAIL not configured")
        subject, html = email_templates.consultation_admin_notice(booking)
        return await self.sender.send(self.admin_email, subject, html)

    async def notify_booking_created(self, booking: dict) -> None:
        """Send the requester confirmation and the admin notice concurrently."""
        results = await asyncio.gather(
            self.send_booking_confirmation(booking),
            self.send_booking_admin_notice(booking),
            return_exceptions=True
        )
        for label, result in zip(("confirmation", "admin notification"), results):
            if isinstance(result, Exception):
                logger.error("Consultation %s: %s email failed: %s", booking.get("id"), label, result)

    async def send_registration_welcome(self, registration: dict) -> None:
        subject, html = email_templates.registration_welcome(registration)
        try:
            await self.sender.send(registration["email"], subject, html)
        except NotificationError as e:
            logger.error("Registration %s: welcome email failed: %s", registration.get("id"), e)


@lru_cache()
def get_notifier() -> Notifier:
    return Notifier(get_email_sender(), get_settings())
