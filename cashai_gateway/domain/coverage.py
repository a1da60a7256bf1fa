"""Coverage engine - how much of a requested window the provider has backfilled"""

from typing import Sequence

from cashai_gateway.domain.models import CoverageReport, DateWindow, TransactionRecord
from cashai_gateway.utils.date_utils import days_between


def observed_window(records: Sequence[TransactionRecord]) -> DateWindow | None:
    """Oldest and newest transaction dates, or None for an empty page"""
    if not records:
        return None
    dates = [r.date for r in records]
    return DateWindow(start=min(dates), end=max(dates))


def compute_coverage(
    requested: DateWindow,
    records: Sequence[TransactionRecord],
    total_available: int,
    tolerance_days: int = 30,
) -> CoverageReport:
    """
    Compare the returned records against the requested window.

    Rules:
    - Gap is how many days of older history are missing: the distance from
      the requested start to the oldest returned transaction, floored at 0
    - A gap within ``tolerance_days`` still counts as complete
    - An empty page is complete only when the provider reports zero
      transactions in total; otherwise backfill is still pending and the
      whole window is counted as the gap
    """
    actual = observed_window(records)

    if actual is None:
        if total_available == 0:
            return CoverageReport(requested, None, coverage_gap_days=0, is_complete=True)
        return CoverageReport(requested, None, coverage_gap_days=requested.days, is_complete=False)

    gap = max(0, days_between(requested.start, actual.start))

    return CoverageReport(
        requested_window=requested,
        actual_window=actual,
        coverage_gap_days=gap,
        is_complete=gap <= tolerance_days,
    )
