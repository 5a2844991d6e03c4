"""
Institutional days off that day-by-day repeats must skip.

Every Friday is off, and so are the 1st, 3rd and 4th Saturday of each
month. The 2nd and 5th Saturdays are regular days.
"""

from datetime import date
from typing import Dict, FrozenSet

# ISO weekday numbers (Monday=1 ... Sunday=7)
FRIDAY = 5
SATURDAY = 6

ALL_OCCURRENCES: FrozenSet[int] = frozenset(range(1, 6))

# weekday -> which occurrences of that weekday within a month are excluded
EXCLUDED_DAYS: Dict[int, FrozenSet[int]] = {
    FRIDAY: ALL_OCCURRENCES,
    SATURDAY: frozenset({1, 3, 4}),
}


def nth_weekday_of_month(day: date) -> int:
    """
    Return which occurrence of its weekday a date is within its month.

    The first seven days of a month hold occurrence 1, days 8-14 occurrence 2,
    and so on.
    """
    return (day.day - 1) // 7 + 1


def is_excluded(day: date) -> bool:
    """Check whether a date is an institutional day off."""
    excluded = EXCLUDED_DAYS.get(day.isoweekday())
    if not excluded:
        return False
    return nth_weekday_of_month(day) in excluded
