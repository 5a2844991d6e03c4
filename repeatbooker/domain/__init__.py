"""
Domain layer - Pure business logic without external dependencies.
"""

from .exceptions import (
    BookingValidationError,
    BulkInsertError,
    ConflictQueryError,
    RepeatBookerError,
    StorageError,
)
from .exclusion_calendar import is_excluded
from .models import Booking, RepeatRule, RepeatType, Room, TimeRange
from .recurrence import MAX_OCCURRENCES, RecurrenceExpander

__all__ = [
    "Booking",
    "BookingValidationError",
    "BulkInsertError",
    "ConflictQueryError",
    "MAX_OCCURRENCES",
    "RecurrenceExpander",
    "RepeatBookerError",
    "RepeatRule",
    "RepeatType",
    "Room",
    "StorageError",
    "TimeRange",
    "is_excluded",
]
