"""
Application service for generating the repeats of a booking.

The service coordinates the domain-level ``RecurrenceExpander`` with a
booking store adapter: it checks each candidate occurrence against the
bookings already stored for that room and date, then persists the
survivors in one batch. The store is reached through a small protocol so
the hosted store and the in-memory store are interchangeable.

The caller has already stored the template booking itself; only the
occurrences after it are produced here.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import List, Optional, Protocol, Sequence

from pendulum import Date

from ..domain.exceptions import BookingValidationError, ConflictQueryError, StorageError
from ..domain.models import Booking, RepeatRule, RepeatType, Room
from ..domain.recurrence import RecurrenceExpander

logger = logging.getLogger(__name__)


class BookingStoreProtocol(Protocol):
    """Protocol describing the storage behaviour needed by the service."""

    async def get_room(self, room_id: str) -> Optional[Room]:
        """Return the room, or None if it does not exist."""

    async def find_overlapping(self, booking: Booking) -> List[Booking]:
        """Return stored bookings in the same room and date overlapping the booking."""

    async def insert_many(self, bookings: Sequence[Booking]) -> int:
        """Persist all bookings at once and return the number of rows stored."""


@dataclass
class ExpansionResult:
    """Outcome of one expansion call."""
    generated_count: int = 0
    candidates_considered: int = 0
    conflicts_skipped: int = 0
    uncertain_skipped: int = 0
    error: Optional[str] = None

    @property
    def ok(self) -> bool:
        return self.error is None


class RepeatedBookingService:
    """
    Orchestrates recurrence expansion, conflict filtering and the batch insert.

    Pipeline: generate -> filter(exclusion) -> filter(conflict) -> batch insert.
    """

    def __init__(
        self,
        store: BookingStoreProtocol,
        expander: RecurrenceExpander | None = None,
    ) -> None:
        self._store = store
        self._expander = expander or RecurrenceExpander()

    async def expand(
        self,
        *,
        template: Booking,
        repeat_type: RepeatType | str,
        end_date: Optional[Date],
        requester_id: str,
    ) -> ExpansionResult:
        """
        Generate and store the repeats of ``template``.

        Raises:
            BookingValidationError: If the request cannot be expanded at all

        Storage failures while inserting are not raised; they are returned in
        ``ExpansionResult.error`` with a count of zero.
        """
        try:
            repeat_type = RepeatType.parse(repeat_type)
        except ValueError as exc:
            raise BookingValidationError(str(exc)) from exc

        if repeat_type == RepeatType.NONE:
            return ExpansionResult()

        if not requester_id:
            raise BookingValidationError("A requester id is required.")

        try:
            await self._validate_room(template)
        except StorageError as exc:
            logger.error("Could not look up room %s: %s", template.room_id, exc)
            return ExpansionResult(error=str(exc))

        rule = RepeatRule(repeat_type=repeat_type, end_date=end_date)
        result = ExpansionResult()
        batch = await self.collect_occurrences(
            template=template,
            rule=rule,
            requester_id=requester_id,
            result=result,
        )

        if not batch:
            logger.info(
                "No repeats to store for room %s (%d candidates)",
                template.room_id,
                result.candidates_considered,
            )
            return result

        try:
            inserted = await self._store.insert_many(batch)
        except StorageError as exc:
            logger.error("Error inserting repeated bookings: %s", exc)
            result.error = str(exc)
            return result

        if inserted != len(batch):
            result.error = (
                f"Only {inserted} of {len(batch)} repeated bookings were stored; "
                "the batch cannot be assumed to be persisted."
            )
            logger.error(result.error)
            return result

        result.generated_count = inserted
        logger.info(
            "Stored %d repeats for room %s (%d conflicts, %d unchecked)",
            inserted,
            template.room_id,
            result.conflicts_skipped,
            result.uncertain_skipped,
        )
        return result

    async def collect_occurrences(
        self,
        *,
        template: Booking,
        rule: RepeatRule,
        requester_id: str,
        result: ExpansionResult | None = None,
    ) -> List[Booking]:
        """
        Return the candidate occurrences that do not collide with stored bookings.

        Conflict checks run one after the other. A candidate whose check fails
        is skipped rather than risking a double booking.
        """
        result = result if result is not None else ExpansionResult()
        batch: List[Booking] = []

        for candidate in self._expander.occurrences(template, rule, requester_id):
            result.candidates_considered += 1

            try:
                clashes = await self._store.find_overlapping(candidate)
            except ConflictQueryError as exc:
                logger.warning(
                    "Skipping %s: conflict check failed: %s",
                    candidate.date.format("YYYY-MM-DD"),
                    exc,
                )
                result.uncertain_skipped += 1
                continue

            if any(candidate.overlaps(existing) for existing in clashes):
                logger.debug(
                    "Skipping %s: room %s already booked",
                    candidate.date.format("YYYY-MM-DD"),
                    candidate.room_id,
                )
                result.conflicts_skipped += 1
                continue

            batch.append(candidate)

        return batch

    async def _validate_room(self, template: Booking) -> Room:
        room = await self._store.get_room(template.room_id)

        if room is None:
            raise BookingValidationError(f"Room '{template.room_id}' does not exist.")
        if not room.is_enabled:
            raise BookingValidationError(f"Room '{template.room_id}' is not enabled.")
        if not room.accommodates(template):
            raise BookingValidationError(
                f"Booking {template.time_range()} is outside the available hours "
                f"of room '{template.room_id}'."
            )

        return room
