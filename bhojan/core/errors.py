from dataclasses import dataclass
from typing import Any, Dict, Optional

from bhojan.core.enums import ErrorKind


class BhojanError(Exception):
    """Base class for errors raised by collaborators"""
    kind = ErrorKind.DEPENDENCY


class BookingNotFoundError(BhojanError):
    kind = ErrorKind.NOT_FOUND

    def __init__(self, booking_id: str):
        super().__init__(f"Booking {booking_id} not found")
        self.booking_id = booking_id


class NotificationError(BhojanError):
    kind = ErrorKind.DEPENDENCY


@dataclass
class Result:
    """Tagged success/failure returned across the action boundary"""
    success: bool
    data: Any = None
    error: Optional[str] = None
    kind: Optional[ErrorKind] = None

    @classmethod
    def ok(cls, data: Any = None) -> 'Result':
        return cls(success=True, data=data)

    @classmethod
    def fail(cls, error: str, kind: ErrorKind = ErrorKind.VALIDATION) -> 'Result':
        return cls(success=False, error=error, kind=kind)

    def to_dict(self) -> Dict[str, Any]:
        if self.success:
            return {'success': True, 'data': self.data}
        return {'success': False, 'error': self.error}
