"""Date manipulation utilities"""

import calendar
from datetime import date


def add_months(from_date: date, months: int) -> date:
    """
    Shift a date by whole calendar months, keeping the day of month.

    Days past the end of the target month clamp to its last day:
    2024-01-31 + 1 month -> 2024-02-29.
    """
    month_index = from_date.month - 1 + months
    year = from_date.year + month_index // 12
    month = month_index % 12 + 1
    day = min(from_date.day, calendar.monthrange(year, month)[1])
    return date(year, month, day)
