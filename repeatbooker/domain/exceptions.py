"""
Domain-specific exception hierarchy for the repeated booking generator.
"""


class RepeatBookerError(Exception):
    """Base class for all application-level errors."""


class BookingValidationError(RepeatBookerError):
    """Raised when a template booking or repeat request is unusable."""


class StorageError(RepeatBookerError):
    """Raised when the booking store cannot be read or written."""


class ConflictQueryError(StorageError):
    """Raised when existing bookings for a room and date cannot be fetched."""


class BulkInsertError(StorageError):
    """Raised when the batch of generated occurrences cannot be persisted."""
