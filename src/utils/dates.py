"""
Calendar math on YYYY-MM month keys and YYYY-MM-DD date strings.

All functions are pure except `current_month` / `current_date`, which read
the wall clock when no date is passed in.
"""

import calendar
import re
from datetime import date
from typing import Optional


DATE_RE = re.compile(r"[0-9]{4}-[0-9]{2}-[0-9]{2}")
MONTH_RE = re.compile(r"[0-9]{4}-[0-9]{2}")


def parse_month_key(month: str) -> tuple[int, int]:
    """
    Split a YYYY-MM key into (year, month).

    Raises ValueError for anything that is not a real month.
    """
    if not MONTH_RE.fullmatch(month):
        raise ValueError(f"Invalid month key: {month!r} (expected YYYY-MM)")
    year, month_num = int(month[:4]), int(month[5:])

    if not 1 <= month_num <= 12:
        raise ValueError(f"Invalid month key: {month!r} (month out of range)")
    return year, month_num


def parse_date(value: str) -> date:
    """Parse a YYYY-MM-DD string; raises ValueError when malformed."""
    if not DATE_RE.fullmatch(value):
        raise ValueError(f"Invalid date: {value!r} (expected YYYY-MM-DD)")
    return date.fromisoformat(value)


def month_key(year: int, month: int) -> str:
    return f"{year:04d}-{month:02d}"


def month_key_of(value: str) -> str:
    """Month key owning a YYYY-MM-DD date string."""
    return value[:7]


def days_in_month(month: str) -> int:
    """Number of days in the month, leap-year aware."""
    year, month_num = parse_month_key(month)
    return calendar.monthrange(year, month_num)[1]


def first_weekday_of_month(month: str) -> int:
    """
    Weekday of the 1st, with Sunday = 0 ... Saturday = 6.

    This is the number of empty cells before day 1 in a Sunday-first grid.
    """
    year, month_num = parse_month_key(month)
    return (date(year, month_num, 1).weekday() + 1) % 7


def previous_month(month: str) -> str:
    year, month_num = parse_month_key(month)
    if month_num == 1:
        return month_key(year - 1, 12)
    return month_key(year, month_num - 1)


def next_month(month: str) -> str:
    year, month_num = parse_month_key(month)
    if month_num == 12:
        return month_key(year + 1, 1)
    return month_key(year, month_num + 1)


def month_dates(month: str) -> list[str]:
    """Every date of the month in order, as YYYY-MM-DD strings."""
    return [f"{month}-{day:02d}" for day in range(1, days_in_month(month) + 1)]


def current_month(today: Optional[date] = None) -> str:
    today = today or date.today()
    return month_key(today.year, today.month)


def current_date(today: Optional[date] = None) -> str:
    today = today or date.today()
    return today.isoformat()


def days_remaining_in_month(today: Optional[date] = None) -> int:
    """Days left after `today` until the end of its month (0 on the last day)."""
    today = today or date.today()
    return calendar.monthrange(today.year, today.month)[1] - today.day


def days_until_due(due_date: date, today: Optional[date] = None) -> int:
    """Whole days from today to the due date; negative once it has passed."""
    today = today or date.today()
    return (due_date - today).days
