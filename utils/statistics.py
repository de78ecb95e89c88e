"""Dashboard counters computed on demand from the case table."""
from __future__ import annotations

from datetime import datetime
from typing import Dict, Optional

from dateutil.relativedelta import relativedelta
from flask import current_app

from models import utcnow
from storage import CaseStorage, StorageError

STATISTIC_KEYS: tuple[str, ...] = (
    "totalMissingPersons",
    "foundPersons",
    "monthlyCount",
    "yearlyCount",
)


def empty_statistics() -> Dict[str, int]:
    return {key: 0 for key in STATISTIC_KEYS}


def statistics_windows(now: datetime) -> tuple[datetime, datetime]:
    """Start of the rolling one-month and one-year windows ending at ``now``.

    Calendar arithmetic: March 31 minus a month is the last day of February,
    February 29 minus a year is February 28.
    """
    return now - relativedelta(months=1), now - relativedelta(years=1)


def compute_statistics(storage: CaseStorage, now: Optional[datetime] = None) -> Dict[str, int]:
    """Return the four registry counters.

    ``totalMissingPersons`` counts every case, found or not. When the store is
    unavailable the failure is logged and a zeroed record is returned so that
    dashboards keep rendering.
    """
    now = now or utcnow()
    month_start, year_start = statistics_windows(now)
    try:
        return {
            "totalMissingPersons": storage.count_cases(),
            "foundPersons": storage.count_cases(status="found"),
            "monthlyCount": storage.count_cases(created_since=month_start),
            "yearlyCount": storage.count_cases(created_since=year_start),
        }
    except StorageError:
        current_app.logger.exception("Statistics computation failed; returning zeroed counters")
        return empty_statistics()
