from __future__ import annotations

import random
import unittest
from collections import Counter

from bigrocks.quota import next_quota


class QuotaTests(unittest.TestCase):
    def test_stays_within_bounds(self) -> None:
        rng = random.Random(7)
        for low, high in [(1, 1), (1, 2), (3, 8), (10, 99)]:
            for _ in range(200):
                value = next_quota(low, high, rng)
                self.assertGreaterEqual(value, low)
                self.assertLessEqual(value, high)

    def test_equal_bounds_return_that_value(self) -> None:
        rng = random.Random(1)
        self.assertEqual({next_quota(4, 4, rng) for _ in range(50)}, {4})

    def test_rejects_inverted_bounds(self) -> None:
        with self.assertRaises(ValueError):
            next_quota(5, 3, random.Random(0))

    def test_roughly_uniform_over_interval(self) -> None:
        rng = random.Random(2024)
        samples = 6000
        counts = Counter(next_quota(3, 8, rng) for _ in range(samples))
        self.assertEqual(set(counts), {3, 4, 5, 6, 7, 8})

        expected = samples / 6
        chi_square = sum((counts[value] - expected) ** 2 / expected for value in range(3, 9))
        # five degrees of freedom; 30 is far beyond the 0.1% critical value
        self.assertLess(chi_square, 30.0)


if __name__ == "__main__":
    unittest.main()
