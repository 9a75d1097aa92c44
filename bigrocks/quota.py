from __future__ import annotations

import random


def next_quota(min_notifications: int, max_notifications: int, rng: random.Random) -> int:
    """Pick today's prompt count uniformly from ``[min, max]`` inclusive."""
    if min_notifications > max_notifications:
        raise ValueError(
            f"min_notifications ({min_notifications}) exceeds max_notifications ({max_notifications})"
        )
    if min_notifications == max_notifications:
        return min_notifications
    return rng.randint(min_notifications, max_notifications)
