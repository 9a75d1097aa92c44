from __future__ import annotations

import random
from typing import Sequence

from .models import Activity


def select_next(
    pool: Sequence[Activity],
    last_id: str | None,
    rng: random.Random,
) -> Activity | None:
    if not pool:
        return None
    if len(pool) == 1:
        return pool[0]

    candidates = [activity for activity in pool if activity.id != last_id]
    if not candidates:
        # every entry shares the last id; nothing else to offer
        candidates = list(pool)
    return rng.choice(candidates)
