from enum import Enum

class BookingStatus(Enum):
    PENDING = "pending"
    CONFIRMED = "confirmed"
    CANCELLED = "cancelled"

class ErrorKind(Enum):
    VALIDATION = "validation"
    NOT_FOUND = "not_found"
    AUTHENTICATION = "authentication"
    CONFIGURATION = "configuration"
    DEPENDENCY = "dependency"

class DietaryPreference(Enum):
    ALL = "all"
    VEG = "veg"
    NON_VEG = "non-veg"
