"""
Service layer helpers that orchestrate adapters and domain logic.
"""

from .repeated_bookings import BookingStoreProtocol, ExpansionResult, RepeatedBookingService

__all__ = ["BookingStoreProtocol", "ExpansionResult", "RepeatedBookingService"]
