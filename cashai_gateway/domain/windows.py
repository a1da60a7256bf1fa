"""Date window and pagination resolution for transaction requests"""

from datetime import date
from typing import Optional

from cashai_gateway.domain.exceptions import InvalidArgumentError
from cashai_gateway.domain.models import DateWindow, Pagination
from cashai_gateway.utils.date_utils import subtract_months


def default_window(today: date, months: int = 6) -> DateWindow:
    """Window covering the last ``months`` calendar months through today"""
    return DateWindow(start=subtract_months(today, months), end=today)


def resolve_window(
    start: Optional[date],
    end: Optional[date],
    today: date,
    default_months: int = 6,
) -> DateWindow:
    """
    Resolve the effective window for a request.

    Both bounds are required for an explicit window; if either one is
    missing the whole window falls back to the default.

    Raises:
        InvalidArgumentError: If an explicit window has start after end
    """
    if start is None or end is None:
        return default_window(today, default_months)

    if start > end:
        raise InvalidArgumentError(f"start_date {start.isoformat()} is after end_date {end.isoformat()}")

    return DateWindow(start=start, end=end)


def resolve_pagination(
    limit: Optional[int],
    offset: Optional[int],
    default_limit: int = 500,
    max_limit: int = 500,
) -> Pagination:
    """
    Apply defaults and the provider's page-size ceiling.

    Raises:
        InvalidArgumentError: If limit is outside 1..max_limit or offset is negative
    """
    limit = default_limit if limit is None else limit
    offset = 0 if offset is None else offset

    if not 1 <= limit <= max_limit:
        raise InvalidArgumentError(f"limit must be between 1 and {max_limit}, got {limit}")
    if offset < 0:
        raise InvalidArgumentError(f"offset must be non-negative, got {offset}")

    return Pagination(limit=limit, offset=offset)
