"""
E-mail notifications for bookings and the contact form.

Messages are rendered from the Jinja2 templates under ``bhojan/templates/email``
(HTML and plain text) and sent through the Resend HTTP API. Without an API key
the message is written to the log instead, which is what local development
and tests rely on.
"""

import logging
from dataclasses import dataclass
from typing import Optional, Dict, Any

import httpx
from jinja2 import Environment, PackageLoader, select_autoescape

from bhojan.core.config import RESTAURANT_NAME, Settings
from bhojan.core.errors import NotificationError

logger = logging.getLogger(__name__)

RESEND_API_URL = 'https://api.resend.com/emails'


def long_date(value) -> str:
    return value.strftime('%A, %d %B %Y')


def short_date(value) -> str:
    return value.strftime('%d/%m/%Y')


def build_environment() -> Environment:
    env = Environment(
        loader=PackageLoader('bhojan', 'templates'),
        autoescape=select_autoescape(['html']),
        trim_blocks=True,
        lstrip_blocks=True,
    )
    env.filters['long_date'] = long_date
    env.filters['short_date'] = short_date
    return env


@dataclass
class EmailMessage:
    to: str
    subject: str
    html: str
    text: str
    reply_to: Optional[str] = None


class EmailNotifier:
    def __init__(self, settings: Settings, http_client: Optional[httpx.Client] = None):
        self.settings = settings
        self.http_client = http_client
        self.env = build_environment()

    def _render(self, name: str, **context: Any) -> Dict[str, str]:
        context.setdefault('restaurant_name', RESTAURANT_NAME)
        context.setdefault('settings', self.settings)
        return {
            'html': self.env.get_template(f'email/{name}.html').render(**context).strip(),
            'text': self.env.get_template(f'email/{name}.txt').render(**context).strip(),
        }

    def booking_email(self, booking) -> EmailMessage:
        """New booking notice for the restaurant"""
        body = self._render('booking_new', booking=booking)
        return EmailMessage(
            to=self.settings.restaurant_email,
            subject=f"New Booking: {booking.name} - {booking.party_size} people",
            **body,
        )

    def booking_status_email(self, booking) -> EmailMessage:
        """Status update for the customer who made the booking"""
        status = booking.status.value
        body = self._render('booking_status', booking=booking, status=status)
        return EmailMessage(
            to=booking.email,
            subject=f"Booking {status.upper()}: {RESTAURANT_NAME} - {short_date(booking.date)}",
            **body,
        )

    def contact_email(self, contact) -> EmailMessage:
        body = self._render('contact', contact=contact)
        return EmailMessage(
            to=self.settings.restaurant_email,
            subject=f"Contact Form: {contact.name}",
            reply_to=contact.email,
            **body,
        )

    def send(self, message: EmailMessage):
        if not self.settings.resend_api_key:
            logger.info(
                f"Email would be sent (no API key configured):\n"
                f"To: {message.to}\nFrom: {self.settings.from_email}\n"
                f"Subject: {message.subject}\nBody:\n{message.text}"
            )
            return

        payload = {
            'from': self.settings.from_email,
            'to': [message.to],
            'subject': message.subject,
            'html': message.html,
            'text': message.text,
        }
        if message.reply_to:
            payload['reply_to'] = message.reply_to

        client = self.http_client or httpx.Client(timeout=self.settings.email_timeout)
        try:
            response = client.post(
                RESEND_API_URL,
                json=payload,
                headers={'Authorization': f'Bearer {self.settings.resend_api_key}'},
                timeout=self.settings.email_timeout,
            )
            response.raise_for_status()
        except httpx.HTTPError as e:
            raise NotificationError(f"Failed to send email '{message.subject}': {e}") from e
        finally:
            if self.http_client is None:
                client.close()
        logger.info(f"Email sent successfully: {message.subject}")

    def send_booking_email(self, booking):
        self.send(self.booking_email(booking))

    def send_booking_status_email(self, booking):
        self.send(self.booking_status_email(booking))

    def send_contact_email(self, contact):
        self.send(self.contact_email(contact))
