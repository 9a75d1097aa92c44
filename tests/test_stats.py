from __future__ import annotations

import os
import time
import unittest
from datetime import datetime, timedelta, timezone
from unittest import mock

from bigrocks.models import SUMMARY_ACTIVITY_ID, LogEntry
from bigrocks.stats import TimeRange, daily_stats, percentage, stats, window_start


def _entry(idx: int, when: datetime, completed: bool, activity_id: str = "a", is_summary: bool = False) -> LogEntry:
    return LogEntry(
        id=f"log-{idx}",
        activity_id=activity_id,
        activity_text="Practice Spanish",
        timestamp=when,
        completed=completed,
        is_summary=is_summary,
    )


BASE = datetime(2024, 3, 31, 15, 30).astimezone()


class StatsTests(unittest.TestCase):
    def test_all_time_counts_every_entry(self) -> None:
        logs = [_entry(i, BASE - timedelta(days=i), completed=i < 7) for i in range(10)]
        result = stats(logs, None)
        self.assertEqual((result.completed, result.total, result.percentage), (7, 10, 70))

    def test_summary_entries_are_excluded(self) -> None:
        logs = [
            _entry(1, BASE, True),
            _entry(2, BASE, True, activity_id=SUMMARY_ACTIVITY_ID),
            _entry(3, BASE, False, is_summary=True),
            _entry(4, BASE, False),
        ]
        result = stats(logs)
        self.assertEqual((result.completed, result.total, result.percentage), (1, 2, 50))

    def test_naive_window_start_is_read_as_local_time(self) -> None:
        logs = [
            _entry(1, BASE, True),
            _entry(2, BASE - timedelta(days=2), False),
        ]
        result = stats(logs, datetime(2024, 3, 30, 12, 0))
        self.assertEqual((result.completed, result.total), (1, 1))

    @unittest.skipUnless(hasattr(time, "tzset"), "time.tzset is not available")
    def test_day_window_starts_at_local_midnight_across_dst_change(self) -> None:
        patcher = mock.patch.dict(os.environ, {"TZ": "Europe/Berlin"})
        patcher.start()
        self.addCleanup(time.tzset)
        self.addCleanup(patcher.stop)
        time.tzset()
        if time.tzname[0] != "CET":
            self.skipTest("Europe/Berlin zone data is not installed")

        # Clocks in Berlin went forward at 02:00 on 2024-03-31.
        now = datetime(2024, 3, 31, 15, 30).astimezone()
        start = window_start(TimeRange.DAY, now)
        self.assertEqual((start.hour, start.minute), (0, 0))
        self.assertEqual(start.utcoffset(), timedelta(hours=1))
        self.assertEqual(start.astimezone(timezone.utc), datetime(2024, 3, 30, 23, 0, tzinfo=timezone.utc))

    def test_window_start_is_exclusive(self) -> None:
        logs = [
            _entry(1, BASE, True),
            _entry(2, BASE + timedelta(seconds=1), False),
        ]
        result = stats(logs, BASE)
        self.assertEqual((result.completed, result.total), (0, 1))

    def test_empty_logs_give_zero_percent(self) -> None:
        result = stats([], BASE)
        self.assertEqual((result.completed, result.total, result.percentage), (0, 0, 0))

    def test_percentage_rounds_half_up(self) -> None:
        self.assertEqual(percentage(1, 8), 13)
        self.assertEqual(percentage(5, 8), 63)
        self.assertEqual(percentage(1, 3), 33)
        self.assertEqual(percentage(2, 3), 67)
        self.assertEqual(percentage(3, 3), 100)

    def test_window_start_per_range(self) -> None:
        self.assertIsNone(window_start(TimeRange.ALL_TIME, BASE))
        self.assertEqual(window_start(TimeRange.DAY, BASE), datetime(2024, 3, 31).astimezone())
        self.assertEqual(window_start(TimeRange.MONTH, BASE).date().isoformat(), "2024-02-29")
        self.assertEqual(window_start(TimeRange.THREE_MONTHS, BASE).date().isoformat(), "2023-12-31")
        self.assertEqual(window_start(TimeRange.SIX_MONTHS, BASE).date().isoformat(), "2023-09-30")
        self.assertEqual(window_start(TimeRange.YEAR, BASE).date().isoformat(), "2023-03-31")

    def test_daily_stats_only_counts_that_day(self) -> None:
        logs = [
            _entry(1, BASE, True),
            _entry(2, BASE.replace(hour=9), False),
            _entry(3, BASE - timedelta(days=1), True),
        ]
        result = daily_stats(logs, "2024-03-31")
        self.assertEqual((result.completed, result.total, result.percentage), (1, 2, 50))


if __name__ == "__main__":
    unittest.main()
