"""
Tests for recurrence expansion.
"""

import logging
from datetime import time

import pendulum
import pytest

from repeatbooker.domain.exclusion_calendar import is_excluded
from repeatbooker.domain.models import Booking, RepeatRule, RepeatType
from repeatbooker.domain.recurrence import MAX_OCCURRENCES, RecurrenceExpander


def _dates(expander, seed, repeat_type, end_date=None):
    rule = RepeatRule(repeat_type=repeat_type, end_date=end_date)
    return [d.format("YYYY-MM-DD") for d in expander.candidate_dates(seed, rule)]


class TestStepping:
    """Tests for the stepping function."""

    def test_weekly_until_end_date(self):
        """Weekly from Monday 2024-01-01 through 2024-01-22."""
        dates = _dates(
            RecurrenceExpander(),
            pendulum.date(2024, 1, 1),
            RepeatType.WEEKLY,
            pendulum.date(2024, 1, 22),
        )

        assert dates == ["2024-01-08", "2024-01-15", "2024-01-22"]

    def test_weekly_is_not_filtered_by_days_off(self):
        """A Friday seed keeps repeating on Fridays when weekly."""
        dates = _dates(
            RecurrenceExpander(),
            pendulum.date(2024, 3, 1),
            RepeatType.WEEKLY,
            pendulum.date(2024, 3, 29),
        )

        assert dates == ["2024-03-08", "2024-03-15", "2024-03-22", "2024-03-29"]

    def test_daily_skips_days_off(self):
        """Daily from Friday 2024-03-01 through Friday 2024-03-08."""
        dates = _dates(
            RecurrenceExpander(),
            pendulum.date(2024, 3, 1),
            RepeatType.DAILY,
            pendulum.date(2024, 3, 8),
        )

        assert dates == [
            "2024-03-03",
            "2024-03-04",
            "2024-03-05",
            "2024-03-06",
            "2024-03-07",
        ]

    def test_custom_behaves_like_daily(self):
        seed = pendulum.date(2024, 3, 1)
        end = pendulum.date(2024, 4, 30)
        expander = RecurrenceExpander()

        assert _dates(expander, seed, RepeatType.CUSTOM, end) == _dates(expander, seed, RepeatType.DAILY, end)

    def test_second_saturday_is_a_candidate(self):
        dates = _dates(
            RecurrenceExpander(),
            pendulum.date(2024, 3, 7),
            RepeatType.DAILY,
            pendulum.date(2024, 3, 10),
        )

        assert dates == ["2024-03-09", "2024-03-10"]

    def test_monthly_clamps_leap_year(self):
        """Jan 31 -> Feb 29 -> Mar 31 -> Apr 30, without drifting to the 29th."""
        dates = _dates(
            RecurrenceExpander(),
            pendulum.date(2024, 1, 31),
            RepeatType.MONTHLY,
            pendulum.date(2024, 5, 31),
        )

        assert dates == ["2024-02-29", "2024-03-31", "2024-04-30", "2024-05-31"]

    def test_monthly_clamps_non_leap_year(self):
        dates = _dates(
            RecurrenceExpander(),
            pendulum.date(2023, 1, 31),
            RepeatType.MONTHLY,
            pendulum.date(2023, 3, 31),
        )

        assert dates == ["2023-02-28", "2023-03-31"]

    def test_none_yields_nothing(self):
        assert _dates(RecurrenceExpander(), pendulum.date(2024, 1, 1), RepeatType.NONE) == []

    def test_seed_is_never_a_candidate(self):
        """An end date equal to the first booking leaves nothing to repeat."""
        seed = pendulum.date(2024, 1, 1)

        assert _dates(RecurrenceExpander(), seed, RepeatType.DAILY, seed) == []

    def test_step_rejects_none(self):
        with pytest.raises(ValueError):
            RecurrenceExpander.step(pendulum.date(2024, 1, 1), RepeatType.NONE, 1)


class TestSafetyCap:
    """Tests for the occurrence cap on unbounded rules."""

    def test_daily_without_end_date_stops_at_cap(self):
        dates = list(RecurrenceExpander().candidate_dates(
            pendulum.date(2024, 1, 1),
            RepeatRule(RepeatType.DAILY),
        ))

        assert len(dates) == MAX_OCCURRENCES == 730
        assert not any(is_excluded(d) for d in dates)

    def test_excluded_days_do_not_count_toward_cap(self):
        """Five capped daily candidates need more than five calendar days."""
        dates = _dates(
            RecurrenceExpander(max_occurrences=5),
            pendulum.date(2024, 3, 1),
            RepeatType.DAILY,
        )

        assert dates == [
            "2024-03-03",
            "2024-03-04",
            "2024-03-05",
            "2024-03-06",
            "2024-03-07",
        ]

    def test_cap_logs_warning(self, caplog):
        with caplog.at_level(logging.WARNING, logger="repeatbooker.domain.recurrence"):
            dates = _dates(
                RecurrenceExpander(max_occurrences=3),
                pendulum.date(2024, 1, 1),
                RepeatType.WEEKLY,
            )

        assert dates == ["2024-01-08", "2024-01-15", "2024-01-22"]
        assert "after 3 occurrences" in caplog.text

    def test_end_date_within_cap_does_not_warn(self, caplog):
        with caplog.at_level(logging.WARNING, logger="repeatbooker.domain.recurrence"):
            _dates(
                RecurrenceExpander(max_occurrences=3),
                pendulum.date(2024, 1, 1),
                RepeatType.WEEKLY,
                pendulum.date(2024, 1, 22),
            )

        assert caplog.text == ""

    def test_invalid_cap(self):
        with pytest.raises(ValueError):
            RecurrenceExpander(max_occurrences=0)


class TestOccurrences:
    """Tests for building occurrence bookings."""

    def test_occurrences_copy_template_for_owner(self):
        template = Booking(
            room_id="R1",
            user_id="someone-else",
            title="Lab",
            date=pendulum.date(2024, 1, 1),
            start_time=time(10, 0),
            end_time=time(11, 0),
            remarks="weekly lab",
        )

        occurrences = list(RecurrenceExpander().occurrences(
            template,
            RepeatRule(RepeatType.WEEKLY, end_date=pendulum.date(2024, 1, 15)),
            owner_id="u1",
        ))

        assert [o.date for o in occurrences] == [pendulum.date(2024, 1, 8), pendulum.date(2024, 1, 15)]
        assert all(o.user_id == "u1" for o in occurrences)
        assert all(o.room_id == "R1" and o.title == "Lab" and o.remarks == "weekly lab" for o in occurrences)
        assert all(o.start_time == time(10, 0) and o.end_time == time(11, 0) for o in occurrences)
