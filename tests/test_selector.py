from __future__ import annotations

import random
import unittest
from datetime import datetime

from bigrocks.models import Activity
from bigrocks.selector import select_next


def _activity(activity_id: str) -> Activity:
    return Activity(id=activity_id, text=f"Activity {activity_id}", created_at=datetime(2024, 1, 1, 8, 0).astimezone())


class SelectorTests(unittest.TestCase):
    def test_empty_pool_returns_none(self) -> None:
        self.assertIsNone(select_next([], "a", random.Random(0)))

    def test_single_activity_is_returned_even_if_last(self) -> None:
        only = _activity("a")
        self.assertEqual(select_next([only], "a", random.Random(0)), only)

    def test_never_repeats_last_when_alternative_exists(self) -> None:
        pool = [_activity("a"), _activity("b"), _activity("c")]
        rng = random.Random(11)
        picks = {select_next(pool, "b", rng).id for _ in range(300)}
        self.assertEqual(picks, {"a", "c"})

    def test_two_item_pool_is_deterministic(self) -> None:
        pool = [_activity("a"), _activity("b")]
        for seed in range(20):
            self.assertEqual(select_next(pool, "a", random.Random(seed)).id, "b")

    def test_unknown_or_missing_last_id_keeps_whole_pool(self) -> None:
        pool = [_activity("a"), _activity("b")]
        rng = random.Random(3)
        self.assertEqual({select_next(pool, None, rng).id for _ in range(200)}, {"a", "b"})
        self.assertEqual({select_next(pool, "deleted", rng).id for _ in range(200)}, {"a", "b"})


if __name__ == "__main__":
    unittest.main()
