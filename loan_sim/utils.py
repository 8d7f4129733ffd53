"""Utility functions for the loan simulator.

This module provides helpers for parsing dates given on the command line,
for advancing dates by whole months and for splitting installment counts into
years and months.
"""

from __future__ import annotations

import calendar
from datetime import date
from typing import Tuple


def parse_date(value: str) -> date:
    """Parse a ``YYYY-MM-DD`` or ``YYYY-MM`` string into a ``date``.

    Parameters
    ----------
    value: str
        The date string. When the day is omitted the first day of the month
        is used.

    Returns
    -------
    date
        The parsed date.

    Raises
    ------
    ValueError
        If the string is not a valid date.
    """
    try:
        parts = value.strip().split("-")
        if len(parts) not in (2, 3):
            raise ValueError
        year = int(parts[0])
        month = int(parts[1])
        day = int(parts[2]) if len(parts) == 3 else 1
        return date(year, month, day)
    except ValueError as exc:
        raise ValueError(f"Invalid date string: {value}") from exc


def add_months(dt: date, months: int) -> date:
    """Return a new date a number of months after ``dt``.

    The day of the month is clamped to the last valid day if needed (e.g.,
    adding one month to Jan 31 yields Feb 28 or 29).
    """
    year = dt.year + (dt.month - 1 + months) // 12
    month = (dt.month - 1 + months) % 12 + 1
    day = min(dt.day, calendar.monthrange(year, month)[1])
    return date(year, month, day)


def split_months(months: int) -> Tuple[int, int]:
    """Split a number of months into whole years and remaining months."""
    return months // 12, months % 12
