from __future__ import annotations

import unittest

from bigrocks.chart import COMPLETED_COLOR, MISSED_COLOR, render_app_icon, render_completion_ring
from bigrocks.models import Stats


class ChartTests(unittest.TestCase):
    def test_ring_has_transparent_centre(self) -> None:
        image = render_completion_ring(Stats(completed=3, total=4, percentage=75), size=100, thickness=20)
        self.assertEqual(image.size, (100, 100))
        self.assertEqual(image.getpixel((50, 50))[3], 0)

    def test_empty_stats_draw_missed_ring(self) -> None:
        image = render_completion_ring(Stats(completed=0, total=0, percentage=0), size=100, thickness=20)
        self.assertEqual(image.getpixel((50, 10))[:3], MISSED_COLOR)

    def test_full_completion_draws_completed_ring(self) -> None:
        image = render_completion_ring(Stats(completed=5, total=5, percentage=100), size=100, thickness=20)
        self.assertEqual(image.getpixel((50, 10))[:3], COMPLETED_COLOR)
        self.assertEqual(image.getpixel((10, 50))[:3], COMPLETED_COLOR)

    def test_half_completion_splits_ring(self) -> None:
        image = render_completion_ring(Stats(completed=1, total=2, percentage=50), size=100, thickness=20)
        self.assertEqual(image.getpixel((90, 50))[:3], COMPLETED_COLOR)
        self.assertEqual(image.getpixel((10, 50))[:3], MISSED_COLOR)

    def test_app_icon_size(self) -> None:
        self.assertEqual(render_app_icon(32).size, (32, 32))


if __name__ == "__main__":
    unittest.main()
