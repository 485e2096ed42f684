"""Table booking actions: create, list and update status"""
import logging
from datetime import date
from typing import Any, Optional

from bhojan.core.enums import BookingStatus, ErrorKind
from bhojan.core.errors import BookingNotFoundError, Result
from bhojan.core.session import AdminSessionManager
from bhojan.core.store import InMemoryBookingStore
from bhojan.core.validation import validate_booking
from bhojan.utils.dispatch import NotificationDispatcher

logger = logging.getLogger(__name__)


class BookingService:
    def __init__(self, store: InMemoryBookingStore, notifier, dispatcher: NotificationDispatcher,
                 sessions: AdminSessionManager):
        self.store = store
        self.notifier = notifier
        self.dispatcher = dispatcher
        self.sessions = sessions

    def create_booking(self, data: Any, today: Optional[date] = None) -> Result:
        """Validate, store as pending and notify the restaurant.

        The notification is best effort; the booking succeeds regardless.
        """
        validation = validate_booking(data, today=today)
        if not validation.success:
            return validation

        try:
            booking = self.store.create(validation.data)
        except Exception as e:
            logger.error(f"Error creating booking: {e}", exc_info=True)
            return Result.fail('Failed to create booking. Please try again.', ErrorKind.DEPENDENCY)

        self.dispatcher.dispatch(self.notifier.send_booking_email, booking.snapshot())
        return Result.ok(booking)

    def get_bookings(self, admin_token: Optional[str]) -> Result:
        if not self.sessions.verify(admin_token):
            return Result.fail('Authentication required', ErrorKind.AUTHENTICATION)

        try:
            return Result.ok(self.store.find_all())
        except Exception as e:
            logger.error(f"Error fetching bookings: {e}", exc_info=True)
            return Result.fail('Failed to fetch bookings. Please try again.', ErrorKind.DEPENDENCY)

    def update_booking_status(self, booking_id: str, status: Any, admin_token: Optional[str]) -> Result:
        """Move a booking to pending, confirmed or cancelled and e-mail the customer.

        Any status may follow any other, including cancelled back to confirmed.
        """
        if not self.sessions.verify(admin_token):
            return Result.fail('Authentication required', ErrorKind.AUTHENTICATION)

        try:
            new_status = BookingStatus(status)
        except ValueError:
            return Result.fail('Invalid status. Must be pending, confirmed, or cancelled.', ErrorKind.VALIDATION)

        try:
            booking = self.store.update_status(booking_id, new_status)
        except BookingNotFoundError:
            logger.info(f"Status update for unknown booking {booking_id}")
            return Result.fail('Booking not found.', ErrorKind.NOT_FOUND)
        except Exception as e:
            logger.error(f"Error updating booking status: {e}", exc_info=True)
            return Result.fail('Failed to update booking status. Please try again.', ErrorKind.DEPENDENCY)

        self.dispatcher.dispatch(self.notifier.send_booking_status_email, booking.snapshot())
        return Result.ok(booking)
