import json
import logging
from datetime import date

import httpx
import pytest

from bhojan.core.config import Settings
from bhojan.core.enums import BookingStatus
from bhojan.core.errors import NotificationError
from bhojan.core.store import Booking
from bhojan.core.validation import ContactForm
from bhojan.utils.email import RESEND_API_URL, EmailNotifier


@pytest.fixture
def booking():
    return Booking(
        name='Asha Kumari',
        email='asha@example.com',
        phone='9876543210',
        date=date(2026, 10, 24),
        time='19:30',
        party_size=4,
        special_requests='<b>Window</b> seat',
    )


@pytest.fixture
def contact():
    return ContactForm(name='Ravi', email='ravi@example.com', phone='9123456780',
                       message='Do you cater for weddings in Gaya?')


def test_booking_email_for_restaurant(booking):
    notifier = EmailNotifier(Settings(restaurant_email='owner@biharbhojan.com'))

    message = notifier.booking_email(booking)

    assert message.to == 'owner@biharbhojan.com'
    assert message.subject == 'New Booking: Asha Kumari - 4 people'
    assert booking.id in message.html
    assert '&lt;b&gt;Window&lt;/b&gt; seat' in message.html
    assert '<b>Window</b>' not in message.html
    assert '- Date: 24/10/2026' in message.text
    assert '- Special Requests: <b>Window</b> seat' in message.text


def test_booking_email_without_special_requests(booking):
    booking.special_requests = None

    message = EmailNotifier(Settings()).booking_email(booking)

    assert '- Special Requests: None' in message.text
    assert 'Special Requests' not in message.html


def test_status_email_for_customer(booking):
    booking.update_status(BookingStatus.CONFIRMED)

    message = EmailNotifier(Settings()).booking_status_email(booking)

    assert message.to == 'asha@example.com'
    assert message.subject == 'Booking CONFIRMED: Bihar Bhojan - 24/10/2026'
    assert 'has been confirmed' in message.text
    assert 'authentic Bihari cuisine' in message.text


def test_cancelled_status_email(booking):
    booking.update_status(BookingStatus.CANCELLED)

    message = EmailNotifier(Settings()).booking_status_email(booking)

    assert message.subject.startswith('Booking CANCELLED:')
    assert 'please contact us' in message.text


def test_contact_email_replies_to_sender(contact):
    message = EmailNotifier(Settings()).contact_email(contact)

    assert message.subject == 'Contact Form: Ravi'
    assert message.reply_to == 'ravi@example.com'
    assert 'weddings in Gaya' in message.text


def test_send_without_api_key_only_logs(booking, caplog):
    def handler(request):
        raise AssertionError('no request expected')

    client = httpx.Client(transport=httpx.MockTransport(handler))
    notifier = EmailNotifier(Settings(resend_api_key=None), http_client=client)

    with caplog.at_level(logging.INFO, logger='bhojan.utils.email'):
        notifier.send_booking_email(booking)

    assert 'Email would be sent (no API key configured)' in caplog.text
    assert 'New Booking: Asha Kumari - 4 people' in caplog.text


def test_send_posts_to_resend(contact):
    requests = []

    def handler(request):
        requests.append(request)
        return httpx.Response(200, json={'id': 'email-1'})

    client = httpx.Client(transport=httpx.MockTransport(handler))
    settings = Settings(resend_api_key='re_test', from_email='noreply@biharbhojan.com',
                        restaurant_email='owner@biharbhojan.com')

    EmailNotifier(settings, http_client=client).send_contact_email(contact)

    assert len(requests) == 1
    request = requests[0]
    assert str(request.url) == RESEND_API_URL
    assert request.headers['Authorization'] == 'Bearer re_test'
    body = json.loads(request.content)
    assert body['from'] == 'noreply@biharbhojan.com'
    assert body['to'] == ['owner@biharbhojan.com']
    assert body['subject'] == 'Contact Form: Ravi'
    assert body['reply_to'] == 'ravi@example.com'


def test_send_failure_raises_notification_error(booking):
    client = httpx.Client(transport=httpx.MockTransport(lambda request: httpx.Response(500)))
    notifier = EmailNotifier(Settings(resend_api_key='re_test'), http_client=client)

    with pytest.raises(NotificationError):
        notifier.send_booking_email(booking)


def test_transport_error_raises_notification_error(booking):
    def handler(request):
        raise httpx.ConnectError('connection refused', request=request)

    client = httpx.Client(transport=httpx.MockTransport(handler))
    notifier = EmailNotifier(Settings(resend_api_key='re_test'), http_client=client)

    with pytest.raises(NotificationError):
        notifier.send_booking_status_email(booking)
