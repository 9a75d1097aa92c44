from __future__ import annotations

from datetime import datetime
from enum import Enum
from typing import Iterable

from dateutil.relativedelta import relativedelta

from .clock import day_key
from .models import LogEntry, Stats


class TimeRange(Enum):
    DAY = "Day"
    MONTH = "Month"
    THREE_MONTHS = "3 Months"
    SIX_MONTHS = "6 Months"
    YEAR = "Year"
    ALL_TIME = "All Time"


_LOOKBACK = {
    TimeRange.MONTH: relativedelta(months=1),
    TimeRange.THREE_MONTHS: relativedelta(months=3),
    TimeRange.SIX_MONTHS: relativedelta(months=6),
    TimeRange.YEAR: relativedelta(years=1),
}

CLI_RANGE_NAMES = {
    "day": TimeRange.DAY,
    "month": TimeRange.MONTH,
    "3-months": TimeRange.THREE_MONTHS,
    "6-months": TimeRange.SIX_MONTHS,
    "year": TimeRange.YEAR,
    "all": TimeRange.ALL_TIME,
}


def window_start(time_range: TimeRange, now: datetime) -> datetime | None:
    if time_range is TimeRange.ALL_TIME:
        return None
    if time_range is TimeRange.DAY:
        # Local midnight carries its own UTC offset, which differs from now's on DST change days.
        day = now.astimezone().date()
        return datetime(day.year, day.month, day.day).astimezone()
    return now - _LOOKBACK[time_range]


def percentage(completed: int, total: int) -> int:
    """Whole-number completion rate, rounding halves up."""
    if total == 0:
        return 0
    return (200 * completed + total) // (2 * total)


def stats(logs: Iterable[LogEntry], window_start: datetime | None = None) -> Stats:
    if window_start is not None and window_start.tzinfo is None:
        window_start = window_start.astimezone()
    completed = 0
    total = 0
    for entry in logs:
        if not entry.counts_toward_stats:
            continue
        if window_start is not None and not entry.timestamp > window_start:
            continue
        total += 1
        if entry.completed:
            completed += 1
    return Stats(completed=completed, total=total, percentage=percentage(completed, total))


def entries_for_day(logs: Iterable[LogEntry], day: str) -> list[LogEntry]:
    return [entry for entry in logs if entry.counts_toward_stats and day_key(entry.timestamp) == day]


def daily_stats(logs: Iterable[LogEntry], day: str) -> Stats:
    """End-of-day summary for the local calendar day ``day``."""
    return stats(entries_for_day(logs, day))
