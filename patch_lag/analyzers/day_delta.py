"""Turn a resolved installed/latest pair into the days-behind figure."""

from __future__ import annotations

import datetime

from ..models.schema import LagResult, Resolution


def delta(start: datetime.date, end: datetime.date) -> int:
    """Whole days from *start* to *end*; negative when *end* is earlier."""
    return (end - start).days


def compute_lag(resolution: Resolution) -> LagResult:
    """Return how many days the installed update trails the latest one.

    A missing latest update means there is nothing to compare against, which
    is reported as zero drift. A negative value (installed preview newer than
    the latest regular update) is returned unchanged.
    """
    if resolution.latest is None:
        return LagResult(number_of_days_behind_lcu=0)
    days = delta(resolution.installed.release_date, resolution.latest.release_date)
    return LagResult(number_of_days_behind_lcu=days)
