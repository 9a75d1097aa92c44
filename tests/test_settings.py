from __future__ import annotations

import unittest

from bigrocks.models import Settings
from bigrocks.settings import normalize, parse_count, with_max, with_min, with_range


def _settings(low: int = 3, high: int = 8) -> Settings:
    return Settings(min_notifications=low, max_notifications=high, notifications_today=5, last_generated_date="2024-01-01")


class SettingsTests(unittest.TestCase):
    def test_min_is_clamped_to_max(self) -> None:
        self.assertEqual(with_min(_settings(), 12).min_notifications, 8)

    def test_min_has_floor_of_one(self) -> None:
        self.assertEqual(with_min(_settings(), 0).min_notifications, 1)
        self.assertEqual(with_min(_settings(), -4).min_notifications, 1)

    def test_max_is_clamped_to_min(self) -> None:
        self.assertEqual(with_max(_settings(), 2).max_notifications, 3)

    def test_max_has_ceiling(self) -> None:
        self.assertEqual(with_max(_settings(), 500).max_notifications, 99)

    def test_edits_leave_daily_fields_alone(self) -> None:
        updated = with_max(with_min(_settings(), 4), 6)
        self.assertEqual((updated.min_notifications, updated.max_notifications), (4, 6))
        self.assertEqual(updated.notifications_today, 5)
        self.assertEqual(updated.last_generated_date, "2024-01-01")

    def test_range_edit_is_checked_against_its_own_bounds(self) -> None:
        updated = with_range(_settings(), 10, 12)
        self.assertEqual((updated.min_notifications, updated.max_notifications), (10, 12))
        updated = with_range(_settings(50, 60), 5, 10)
        self.assertEqual((updated.min_notifications, updated.max_notifications), (5, 10))
        updated = with_range(_settings(), 0, 500)
        self.assertEqual((updated.min_notifications, updated.max_notifications), (1, 99))
        updated = with_range(_settings(), 9, 4)
        self.assertEqual((updated.min_notifications, updated.max_notifications), (4, 4))
        self.assertEqual(updated.notifications_today, 5)

    def test_normalize_repairs_inverted_record(self) -> None:
        repaired = normalize(Settings(min_notifications=0, max_notifications=-2, notifications_today=-1, last_generated_date="x"))
        self.assertEqual(repaired.min_notifications, 1)
        self.assertEqual(repaired.max_notifications, 1)
        self.assertEqual(repaired.notifications_today, 0)

    def test_parse_count_falls_back(self) -> None:
        self.assertEqual(parse_count(" 7 ", 1), 7)
        self.assertEqual(parse_count("", 2), 2)
        self.assertEqual(parse_count("lots", 1), 1)


if __name__ == "__main__":
    unittest.main()
