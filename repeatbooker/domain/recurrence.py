"""
Core business logic for expanding a booking into its repeated occurrences.

Pure domain logic without any external dependencies (no API calls, no
database, no I/O). Conflict checking against stored bookings happens in
the service layer.
"""

import logging
from typing import Iterator

from pendulum import Date

from .exclusion_calendar import is_excluded
from .models import Booking, RepeatRule, RepeatType

logger = logging.getLogger(__name__)

# Hard stop for rules without an end date (two years of daily repeats)
MAX_OCCURRENCES = 730


class RecurrenceExpander:
    """
    Expands a template booking into candidate occurrences.

    Algorithm:
    1. Step from the template date by the repeat interval (index 1, 2, ...)
    2. Stop once a date passes the rule's end date
    3. Drop institutional days off for daily/custom repeats
    4. Stop after MAX_OCCURRENCES candidates
    """

    def __init__(self, max_occurrences: int = MAX_OCCURRENCES):
        if max_occurrences <= 0:
            raise ValueError("max_occurrences must be greater than zero")
        self.max_occurrences = max_occurrences

    @staticmethod
    def step(seed: Date, repeat_type: RepeatType, index: int) -> Date:
        """
        Return the ``index``-th repeat date after ``seed``.

        Monthly steps are always taken from the seed, so a day-of-month that
        is clamped in a short month comes back in the following months
        (Jan 31 -> Feb 29 -> Mar 31).
        """
        if repeat_type in (RepeatType.DAILY, RepeatType.CUSTOM):
            return seed.add(days=index)
        if repeat_type == RepeatType.WEEKLY:
            return seed.add(weeks=index)
        if repeat_type == RepeatType.MONTHLY:
            return seed.add(months=index)
        raise ValueError(f"Repeat type '{repeat_type.value}' has no step")

    def iter_repeat_dates(self, seed: Date, rule: RepeatRule) -> Iterator[Date]:
        """
        Lazily yield repeat dates after the seed while the rule allows them.

        The seed itself is never yielded. Without an end date this sequence
        is infinite; use ``candidate_dates`` for the capped version.
        """
        if rule.repeat_type == RepeatType.NONE:
            return

        index = 1
        while True:
            current = self.step(seed, rule.repeat_type, index)
            if not rule.allows(current):
                return
            yield current
            index += 1

    def candidate_dates(self, seed: Date, rule: RepeatRule) -> Iterator[Date]:
        """
        Yield the dates on which an occurrence should be attempted.

        Excluded days are skipped without counting toward the cap.
        """
        filter_days_off = rule.repeat_type.uses_exclusion_calendar
        generated = 0

        for current in self.iter_repeat_dates(seed, rule):
            if filter_days_off and is_excluded(current):
                continue

            if generated >= self.max_occurrences:
                logger.warning(
                    "Stopped repeating booking from %s after %d occurrences (next would be %s)",
                    seed.format("YYYY-MM-DD"),
                    self.max_occurrences,
                    current.format("YYYY-MM-DD"),
                )
                return

            generated += 1
            yield current

    def occurrences(
        self,
        template: Booking,
        rule: RepeatRule,
        owner_id: str,
    ) -> Iterator[Booking]:
        """Yield unsaved occurrence bookings for every candidate date."""
        for current in self.candidate_dates(template.date, rule):
            yield template.on_date(current, user_id=owner_id)
