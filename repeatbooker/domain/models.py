"""
Domain models for bookings, rooms and repeat rules.
"""

from __future__ import annotations

from dataclasses import dataclass, replace
from datetime import date as std_date, datetime, time
from enum import Enum
from typing import Any, Dict, Optional

import pendulum
from pendulum import Date, DateTime


def parse_date(value: Any) -> Date:
    """
    Coerce a ``YYYY-MM-DD`` string or a date object into a pendulum Date.

    Raises:
        ValueError: If the value is not a valid calendar date
    """
    if isinstance(value, datetime):
        value = value.date()
    if isinstance(value, std_date):
        return pendulum.date(value.year, value.month, value.day)
    if not isinstance(value, str):
        raise ValueError(f"Expected a date, got {value!r}")

    try:
        return pendulum.from_format(value.strip(), "YYYY-MM-DD").date()
    except ValueError as exc:
        raise ValueError(f"Invalid date '{value}', expected YYYY-MM-DD") from exc


def parse_time(value: Any) -> time:
    """
    Coerce ``HH:MM`` / ``HH:MM:SS`` strings into a wall-clock time.

    Seconds are dropped, bookings are kept at minute granularity.
    """
    if isinstance(value, time):
        return value.replace(second=0, microsecond=0, tzinfo=None)
    if not isinstance(value, str):
        raise ValueError(f"Expected a time, got {value!r}")

    try:
        parsed = time.fromisoformat(value.strip())
    except ValueError as exc:
        raise ValueError(f"Invalid time '{value}', expected HH:MM") from exc

    return parsed.replace(second=0, microsecond=0, tzinfo=None)


def format_time(value: time) -> str:
    return value.strftime("%H:%M")


@dataclass(frozen=True)
class TimeRange:
    """
    Represents an immutable time range with start and end datetime.

    Invariant: start must be before end.
    """
    start: DateTime
    end: DateTime

    def __post_init__(self):
        if self.start >= self.end:
            raise ValueError(f"Start time {self.start} must be before end time {self.end}")

    def duration_minutes(self) -> int:
        """Return the duration in minutes."""
        return int((self.end - self.start).total_seconds() / 60)

    def overlaps(self, other: "TimeRange") -> bool:
        """Check if this range overlaps with another (half-open intervals)."""
        return self.start < other.end and self.end > other.start

    def __str__(self) -> str:
        return f"{self.start.format('DD.MM.YYYY HH:mm')} - {self.end.format('HH:mm')}"


class RepeatType(str, Enum):
    """How a booking repeats."""
    NONE = "none"
    DAILY = "daily"
    WEEKLY = "weekly"
    MONTHLY = "monthly"
    CUSTOM = "custom"

    @classmethod
    def parse(cls, value: "str | RepeatType") -> "RepeatType":
        """
        Parse a repeat type as sent by the booking form.

        ``no_repeat`` is accepted as an alias of ``none``.

        Raises:
            ValueError: If the value names no known repeat type
        """
        if isinstance(value, RepeatType):
            return value

        key = str(value).strip().lower()
        if key == "no_repeat":
            return cls.NONE

        try:
            return cls(key)
        except ValueError:
            allowed = ", ".join(member.value for member in cls)
            raise ValueError(
                f"Unknown repeat type '{value}'. Expected one of: {allowed}"
            ) from None

    @property
    def uses_exclusion_calendar(self) -> bool:
        """Only day-by-day repeats skip the institutional days off."""
        return self in (RepeatType.DAILY, RepeatType.CUSTOM)


@dataclass(frozen=True)
class RepeatRule:
    """
    A repeat type with an optional inclusive end date.

    Without an end date the rule is unbounded; the expander caps it.
    """
    repeat_type: RepeatType
    end_date: Optional[Date] = None

    def allows(self, candidate: Date) -> bool:
        """Check whether a candidate date lies within the rule's boundary."""
        return self.end_date is None or candidate <= self.end_date


@dataclass(frozen=True)
class Booking:
    """
    A room booking, either the caller's template or a generated occurrence.

    Invariant: start_time must be before end_time.
    """
    room_id: str
    user_id: str
    title: str
    date: Date
    start_time: time
    end_time: time
    remarks: Optional[str] = None
    id: Optional[str] = None
    created_at: Optional[DateTime] = None

    def __post_init__(self):
        if self.start_time >= self.end_time:
            raise ValueError(
                f"Start time {format_time(self.start_time)} must be before "
                f"end time {format_time(self.end_time)}"
            )

    def time_range(self) -> TimeRange:
        """Return the booked [start, end) interval on the booking's date."""
        return TimeRange(
            start=pendulum.naive(
                self.date.year, self.date.month, self.date.day,
                self.start_time.hour, self.start_time.minute,
            ),
            end=pendulum.naive(
                self.date.year, self.date.month, self.date.day,
                self.end_time.hour, self.end_time.minute,
            ),
        )

    def overlaps(self, other: "Booking") -> bool:
        """Check if another booking holds the same room at an overlapping time."""
        if self.room_id != other.room_id or self.date != other.date:
            return False
        return self.time_range().overlaps(other.time_range())

    def on_date(self, new_date: Date, user_id: Optional[str] = None) -> "Booking":
        """Derive an unsaved occurrence of this booking on another date."""
        return replace(
            self,
            date=new_date,
            user_id=user_id if user_id is not None else self.user_id,
            id=None,
            created_at=None,
        )

    def to_row(self) -> Dict[str, Any]:
        """Serialize to a bookings-table row (without server-side columns)."""
        return {
            "user_id": self.user_id,
            "room_id": self.room_id,
            "title": self.title,
            "date": self.date.format("YYYY-MM-DD"),
            "start_time": format_time(self.start_time),
            "end_time": format_time(self.end_time),
            "remarks": self.remarks,
        }

    @classmethod
    def from_row(cls, row: Dict[str, Any]) -> "Booking":
        """
        Build a booking from a bookings-table row.

        Raises:
            KeyError: If a required column is missing
            ValueError: If a column holds an invalid value
        """
        created_at = row.get("created_at")
        return cls(
            room_id=str(row["room_id"]),
            user_id=str(row.get("user_id") or ""),
            title=row.get("title") or "",
            date=parse_date(row["date"]),
            start_time=parse_time(row["start_time"]),
            end_time=parse_time(row["end_time"]),
            remarks=row.get("remarks"),
            id=str(row["id"]) if row.get("id") is not None else None,
            created_at=pendulum.parse(created_at) if created_at else None,
        )


@dataclass(frozen=True)
class Room:
    """
    A bookable room.

    ``available_start``/``available_end`` restrict bookable hours when set.
    """
    id: str
    name: str = ""
    status: str = "enabled"
    available_start: Optional[time] = None
    available_end: Optional[time] = None

    @property
    def is_enabled(self) -> bool:
        return self.status == "enabled"

    def accommodates(self, booking: Booking) -> bool:
        """Check that a booking falls inside the room's available hours."""
        if self.available_start is not None and booking.start_time < self.available_start:
            return False
        if self.available_end is not None and booking.end_time > self.available_end:
            return False
        return True

    @classmethod
    def from_row(cls, row: Dict[str, Any]) -> "Room":
        """Build a room from a rooms-table row (``available_time`` is a JSON object)."""
        window = row.get("available_time") or {}
        return cls(
            id=str(row["id"]),
            name=row.get("name") or "",
            status=row.get("status") or "enabled",
            available_start=parse_time(window["start"]) if window.get("start") else None,
            available_end=parse_time(window["end"]) if window.get("end") else None,
        )
