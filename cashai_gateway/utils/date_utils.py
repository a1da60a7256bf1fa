"""Date manipulation utilities"""

import calendar
from datetime import date, datetime, timezone


def utc_today() -> date:
    """Current calendar date in UTC"""
    return datetime.now(timezone.utc).date()


def subtract_months(from_date: date, months: int) -> date:
    """Step back whole calendar months, clamping to the last day of the target month"""
    month_index = from_date.year * 12 + (from_date.month - 1) - months
    year, month = divmod(month_index, 12)
    month += 1
    last_day = calendar.monthrange(year, month)[1]
    return date(year, month, min(from_date.day, last_day))


def days_between(start: date, end: date) -> int:
    """Signed number of days from start to end"""
    return (end - start).days
