"""
Consecutive-night matching

A run is a maximal stretch of calendar-consecutive available dates. A stay
qualifies when some run holds `min_nights` dates in a row, optionally
beginning on one of the requested start dates.
"""
from datetime import date, timedelta
from typing import Iterable, List, Optional, Sequence

from dateutil import parser as date_parser


def _to_date(value: str) -> date:
    return date_parser.isoparse(value).date()


def split_runs(dates: Sequence[str]) -> List[List[str]]:
    """Group ascending ISO dates into runs of consecutive calendar days"""
    runs: List[List[str]] = []
    previous: Optional[date] = None

    for value in dates:
        current = _to_date(value)
        if previous is not None and current - previous == timedelta(days=1):
            runs[-1].append(value)
        else:
            runs.append([value])
        previous = current

    return runs


def find_qualifying_run(
    dates: Sequence[str],
    min_nights: int,
    start_dates: Iterable[str] = (),
) -> Optional[List[str]]:
    """
    Find the first run of exactly `min_nights` consecutive dates.

    Args:
        dates: Ascending, de-duplicated ISO dates ("YYYY-MM-DD")
        min_nights: Required number of consecutive nights (>= 1)
        start_dates: Allowed first nights; empty means any date may start the run

    Returns:
        The matching dates, or None if no run qualifies
    """
    if min_nights < 1:
        raise ValueError(f"min_nights must be at least 1, got {min_nights}")

    if len(dates) < min_nights:
        return None

    allowed = set(start_dates)

    for run in split_runs(dates):
        for start in range(len(run) - min_nights + 1):
            window = run[start:start + min_nights]
            if not allowed or window[0] in allowed:
                return window

    return None
