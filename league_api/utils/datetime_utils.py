"""
Datetime utility functions.
"""

from datetime import date, datetime
from typing import Union
import pytz


def utcnow() -> datetime:
    """
    Get current UTC datetime using pytz.UTC.

    Returns:
        Current UTC datetime with pytz timezone information
    """
    return datetime.now(pytz.UTC)


def today() -> date:
    """Current UTC calendar date."""
    return utcnow().date()


def parse_iso_date(value: Union[str, date]) -> date:
    """
    Parse an ISO 8601 calendar date (YYYY-MM-DD).

    Raises:
        ValueError: If the value is not a valid ISO date
    """
    if isinstance(value, date):
        return value
    try:
        return date.fromisoformat(value.strip())
    except (AttributeError, ValueError):
        raise ValueError(f"invalid date: {value}")


def calculate_age(date_of_birth: Union[str, date], comparison: Union[str, date]) -> int:
    """
    Whole years between date_of_birth and comparison.

    A birthday later in the year than the comparison date has not happened
    yet, so the year difference is reduced by one.

    Examples:
        >>> calculate_age("1990-08-31", "2011-08-31")
        21
        >>> calculate_age("2020-01-01", "2020-02-01")
        0
    """
    born = parse_iso_date(date_of_birth)
    current = parse_iso_date(comparison)
    years = current.year - born.year
    if (current.month, current.day) < (born.month, born.day):
        years -= 1
    return years


def is_valid_date_range(start: Union[str, date], end: Union[str, date]) -> bool:
    """True when start falls on or before end. Raises ValueError on unparseable input."""
    return parse_iso_date(start) <= parse_iso_date(end)
