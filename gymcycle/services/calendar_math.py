"""
Calendar helpers for billing-cycle date arithmetic.

All helpers work on calendar dates: datetimes are truncated to their date
before any comparison, so time of day never moves a boundary.
"""

from calendar import monthrange
from datetime import date, datetime
from typing import Optional, Union

from dateutil.relativedelta import relativedelta

DateLike = Union[date, datetime]


def as_date(value: DateLike) -> date:
    """Truncate a datetime to its calendar date; dates pass through."""
    if isinstance(value, datetime):
        return value.date()
    return value


def days_in_month(year: int, month: int) -> int:
    """Number of days in the given month."""
    return monthrange(year, month)[1]


def clamp_day(year: int, month: int, day: int) -> date:
    """Date in the given month with ``day`` clamped to the month's last day."""
    if day < 1:
        raise ValueError(f"Day must be >= 1, got {day}")
    return date(year, month, min(day, days_in_month(year, month)))


def add_months(
    start: DateLike,
    months: int,
    anchor_day: Optional[int] = None,
) -> date:
    """
    Add whole months to a date, then pin the day-of-month.

    The month is advanced first and the day is clamped afterwards, so
    Jan 31 + 1 month lands on the last day of February rather than rolling
    into March. ``anchor_day`` (defaults to the start day) is the day the
    result is pinned to, which lets a cycle clamped to Feb 28 return to the
    31st in the following long month.

    Args:
        start: Date to project from
        months: Whole months to add (may be negative)
        anchor_day: Preferred day-of-month for the result

    Returns:
        Projected calendar date
    """
    start = as_date(start)
    shifted = start + relativedelta(months=months)
    day = anchor_day if anchor_day is not None else start.day
    return clamp_day(shifted.year, shifted.month, day)


def whole_days_between(start: DateLike, end: DateLike) -> int:
    """Calendar days from ``start`` to ``end`` (negative when end is earlier)."""
    return (as_date(end) - as_date(start)).days
