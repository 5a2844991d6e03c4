"""
In-memory booking store for running without the hosted database.
"""

import json
import uuid
from pathlib import Path
from typing import Dict, Iterable, List, Optional, Sequence

import pendulum

from ..domain.exceptions import BulkInsertError
from ..domain.models import Booking, Room

DEFAULT_SEED_FILE = Path(__file__).parent / "mock_bookings.json"


class InMemoryBookingStore:
    """
    Booking store that keeps rooms and bookings in process memory.

    Seed data can be loaded from a JSON file (see ``mock_bookings.json``)
    so the CLI and tests can work without a database connection.
    """

    def __init__(
        self,
        rooms: Optional[Iterable[Room]] = None,
        bookings: Optional[Iterable[Booking]] = None,
        timezone: str = "UTC",
    ):
        self.rooms: Dict[str, Room] = {room.id: room for room in rooms or []}
        self.bookings: List[Booking] = list(bookings or [])
        self.timezone = timezone

    @classmethod
    def from_json(cls, data_file: Path = DEFAULT_SEED_FILE, timezone: str = "UTC") -> "InMemoryBookingStore":
        """
        Load rooms and bookings from a JSON seed file.

        Args:
            data_file: Path to a file with ``rooms`` and ``bookings`` lists
            timezone: Timezone used for ``created_at`` of inserted rows

        Raises:
            FileNotFoundError: If the seed file doesn't exist
            ValueError: If the seed file holds invalid rows
        """
        if not data_file.exists():
            raise FileNotFoundError(f"Seed file not found: {data_file}")

        with open(data_file, "r", encoding="utf-8") as f:
            data = json.load(f)

        if not isinstance(data, dict):
            raise ValueError("Seed file must contain a mapping at the root level.")

        try:
            rooms = [Room.from_row(row) for row in data.get("rooms", [])]
            bookings = [Booking.from_row(row) for row in data.get("bookings", [])]
        except KeyError as exc:
            raise ValueError(f"Seed file {data_file} has a row without {exc}") from exc

        return cls(rooms=rooms, bookings=bookings, timezone=timezone)

    async def get_room(self, room_id: str) -> Optional[Room]:
        return self.rooms.get(room_id)

    async def find_overlapping(self, booking: Booking) -> List[Booking]:
        return [existing for existing in self.bookings if booking.overlaps(existing)]

    async def insert_many(self, bookings: Sequence[Booking]) -> int:
        """Store every booking or none of them."""
        stored: List[Booking] = []
        now = pendulum.now(self.timezone)

        for booking in bookings:
            if booking.room_id not in self.rooms:
                raise BulkInsertError(
                    f"insert or update on table \"bookings\" violates foreign key "
                    f"constraint: room '{booking.room_id}' does not exist"
                )
            stored.append(
                Booking(
                    room_id=booking.room_id,
                    user_id=booking.user_id,
                    title=booking.title,
                    date=booking.date,
                    start_time=booking.start_time,
                    end_time=booking.end_time,
                    remarks=booking.remarks,
                    id=str(uuid.uuid4()),
                    created_at=now,
                )
            )

        self.bookings.extend(stored)
        return len(stored)

    def bookings_for_room(self, room_id: str) -> List[Booking]:
        """Return a room's bookings ordered by date and start time."""
        return sorted(
            (b for b in self.bookings if b.room_id == room_id),
            key=lambda b: (b.date, b.start_time),
        )
