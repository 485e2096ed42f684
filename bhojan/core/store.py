from dataclasses import dataclass, field, replace
from datetime import date, datetime
from typing import Dict, List, Optional, Any
import logging
import threading
import uuid

from bhojan.core.enums import BookingStatus
from bhojan.core.errors import BookingNotFoundError
from bhojan.core.validation import BookingForm

logger = logging.getLogger(__name__)

@dataclass
class Booking:
    name: str
    email: str
    phone: str
    date: date
    time: str
    party_size: int
    special_requests: Optional[str] = None
    status: BookingStatus = BookingStatus.PENDING
    id: str = field(default_factory=lambda: str(uuid.uuid4()))
    created_at: datetime = field(default_factory=datetime.now)
    updated_at: datetime = field(default_factory=datetime.now)

    def update_status(self, status: BookingStatus):
        """Update booking status"""
        self.status = status
        self.updated_at = datetime.now()

    def snapshot(self) -> 'Booking':
        """Copy of the booking as it is now, unaffected by later status changes"""
        return replace(self)

    def to_dict(self) -> Dict[str, Any]:
        return {
            'id': self.id,
            'name': self.name,
            'email': self.email,
            'phone': self.phone,
            'date': self.date.isoformat(),
            'time': self.time,
            'party_size': self.party_size,
            'special_requests': self.special_requests,
            'status': self.status.value,
            'created_at': self.created_at.isoformat(),
            'updated_at': self.updated_at.isoformat(),
        }

class InMemoryBookingStore:
    """Booking records kept in process memory"""

    def __init__(self):
        self.bookings: Dict[str, Booking] = {}
        self._lock = threading.Lock()

    def create(self, form: BookingForm) -> Booking:
        booking = Booking(
            name=form.name,
            email=form.email,
            phone=form.phone,
            date=form.date,
            time=form.time,
            party_size=form.party_size,
            special_requests=form.special_requests,
        )
        with self._lock:
            self.bookings[booking.id] = booking
        logger.info(f"Stored booking {booking.id} for {booking.name} on {booking.date} at {booking.time}")
        return booking

    def find_all(self) -> List[Booking]:
        """All bookings, latest date first, then latest time first"""
        with self._lock:
            bookings = list(self.bookings.values())
        return sorted(bookings, key=lambda b: (b.date, b.time), reverse=True)

    def update_status(self, booking_id: str, status: BookingStatus) -> Booking:
        with self._lock:
            booking = self.bookings.get(booking_id)
            if booking is None:
                raise BookingNotFoundError(booking_id)
            booking.update_status(status)
        logger.info(f"Booking {booking_id} is now {status.value}")
        return booking
